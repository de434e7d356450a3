from __future__ import annotations

from typing import FrozenSet, Iterable, List, Optional

from .models import Participant, ParticipantStatus, Round
from .raffle_models import RaffleModel

_IN_POOL: FrozenSet[ParticipantStatus] = frozenset({ParticipantStatus.ELIGIBLE})
_IN_POOL_KEEPING_WINNERS: FrozenSet[ParticipantStatus] = frozenset(
    {ParticipantStatus.ELIGIBLE, ParticipantStatus.WINNER}
)


def pool_statuses(model: Optional[RaffleModel] = None) -> FrozenSet[ParticipantStatus]:
    """Statuses that still count as "in the pool" under ``model``."""
    if model is not None and not model.properties.remove_winners:
        return _IN_POOL_KEEPING_WINNERS
    return _IN_POOL


def eligible(
    participants: Iterable[Participant],
    round_: Round,
    model: Optional[RaffleModel] = None,
) -> List[Participant]:
    """Return participants that may be drawn in ``round_``, in input order.

    A participant qualifies when its status is in the model's pool, it meets
    the round's point threshold, and it holds at least one ticket.
    """
    statuses = pool_statuses(model)
    return [
        p
        for p in participants
        if p.status in statuses
        and p.points >= round_.point_threshold
        and p.tickets > 0
    ]
