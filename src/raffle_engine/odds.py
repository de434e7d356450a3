"""Winning odds for display, computed exactly as the selectors weigh entrants.

Odds are always taken over the same eligible pool the draw would use. Rounds
are addressed by their *position* in the configured list; a round ``id`` is
first resolved with :func:`round_position`, since ids are not guaranteed to be
a contiguous ``1..N`` sequence.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .eligibility import eligible
from .exceptions import UnknownRoundError
from .models import Participant, Round
from .raffle_models import RaffleModel


def odds(
    participant: Participant,
    eligible_set: Sequence[Participant],
    weighted: bool = True,
) -> float:
    """Return the chance (0-100) that ``participant`` wins a draw over ``eligible_set``.

    Parameters
    ----------
    participant : Participant
        Participant whose odds are requested.
    eligible_set : Sequence[Participant]
        Pool the selector would draw from.
    weighted : bool, default: True
        ``True`` mirrors :class:`~raffle_engine.draw.WeightedSelector`,
        ``False`` mirrors :class:`~raffle_engine.draw.UniformSelector`.

    Returns
    -------
    float
        Percentage; ``0.0`` when the participant is not in the pool, holds no
        tickets, or the pool holds no tickets at all.
    """
    if participant.tickets <= 0:
        return 0.0
    if not any(p.id == participant.id for p in eligible_set):
        return 0.0
    entrants = [p for p in eligible_set if p.tickets > 0]
    if weighted:
        total = sum(p.tickets for p in entrants)
        if total <= 0:
            return 0.0
        return participant.tickets / total * 100
    return 100 / len(entrants)


def odds_table(
    eligible_set: Sequence[Participant], weighted: bool = True
) -> Dict[str, float]:
    """Return ``{participant id: odds}`` for every member of ``eligible_set``."""
    return {p.id: odds(p, eligible_set, weighted=weighted) for p in eligible_set}


def round_position(rounds: Sequence[Round], round_id: int) -> int:
    """Resolve a round ``id`` to its index in ``rounds``.

    Raises
    ------
    UnknownRoundError
        If no configured round carries ``round_id``.
    """
    for index, round_ in enumerate(rounds):
        if round_.id == round_id:
            return index
    raise UnknownRoundError(f"No round with id {round_id}")


def _resolve_weighted(model: Optional[RaffleModel], weighted: bool) -> bool:
    return model.properties.weighted_system if model is not None else weighted


def odds_for_round(
    participants: Sequence[Participant],
    rounds: Sequence[Round],
    round_id: int,
    weighted: bool = True,
    model: Optional[RaffleModel] = None,
) -> Dict[str, float]:
    """Odds for every participant in the round identified by ``round_id``.

    Participants outside that round's pool are listed with ``0.0``. When
    ``model`` is given it decides both the pool (winners stay in when the
    model keeps them) and the weighting, and ``weighted`` is ignored.
    """
    round_ = rounds[round_position(rounds, round_id)]
    pool = eligible(participants, round_, model)
    table = odds_table(pool, weighted=_resolve_weighted(model, weighted))
    return {p.id: table.get(p.id, 0.0) for p in participants}


def odds_by_round(
    participants: Sequence[Participant],
    rounds: Sequence[Round],
    weighted: bool = True,
    model: Optional[RaffleModel] = None,
) -> Dict[str, List[float]]:
    """Odds matrix ``{participant id: [odds per round position]}``.

    Every round is evaluated against the participants' current statuses.
    ``model`` works as in :func:`odds_for_round`.
    """
    weighted = _resolve_weighted(model, weighted)
    matrix: Dict[str, List[float]] = {p.id: [0.0] * len(rounds) for p in participants}
    for index, round_ in enumerate(rounds):
        table = odds_table(eligible(participants, round_, model), weighted=weighted)
        for participant_id, value in table.items():
            matrix[participant_id][index] = value
    return matrix


def format_odds(value: float) -> str:
    return f"{value:.2f}%"
