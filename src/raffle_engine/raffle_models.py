"""Named raffle formats and the policies each one applies."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Union

from .exceptions import UnknownRaffleModelError


class RaffleModelType(str, Enum):
    UNIFORM_ELIMINATION = "uniform_elimination"
    WEIGHTED_CONTINUOUS = "weighted_continuous"


class EliminationCalculation(str, Enum):
    PLAYERS_PER_ROUND = "players_per_round"
    NONE = "none"


@dataclass(frozen=True)
class RaffleModelProperties:
    """Policies that parameterize eligibility, selection and elimination.

    Attributes
    ----------
    remove_winners : bool
        When ``True`` a confirmed winner leaves the pool for later rounds.
    weighted_system : bool
        ``True`` draws proportionally to tickets, ``False`` gives every
        eligible participant the same chance.
    drop_off_after_round : bool
        When ``True`` a batch round ends by eliminating participants at random.
    elimination_calculation : EliminationCalculation
        How many participants a drop-off removes.
    """

    remove_winners: bool
    weighted_system: bool
    drop_off_after_round: bool
    elimination_calculation: EliminationCalculation = EliminationCalculation.NONE


@dataclass(frozen=True)
class RaffleModel:
    type: RaffleModelType
    name: str
    description: str
    properties: RaffleModelProperties


RAFFLE_MODELS: Dict[RaffleModelType, RaffleModel] = {
    RaffleModelType.UNIFORM_ELIMINATION: RaffleModel(
        type=RaffleModelType.UNIFORM_ELIMINATION,
        name="Uniform Elimination Round",
        description="Equal chances for all participants with progressive elimination",
        properties=RaffleModelProperties(
            remove_winners=True,
            weighted_system=False,
            drop_off_after_round=True,
            elimination_calculation=EliminationCalculation.PLAYERS_PER_ROUND,
        ),
    ),
    RaffleModelType.WEIGHTED_CONTINUOUS: RaffleModel(
        type=RaffleModelType.WEIGHTED_CONTINUOUS,
        name="Weighted Continuous Round",
        description="Ticket-weighted system with continuous participation",
        properties=RaffleModelProperties(
            remove_winners=True,
            weighted_system=True,
            drop_off_after_round=False,
        ),
    ),
}


def get_raffle_model(key: Union[RaffleModelType, str]) -> RaffleModel:
    """Return the model registered under ``key`` (enum member or its value)."""
    try:
        return RAFFLE_MODELS[RaffleModelType(key)]
    except (ValueError, KeyError) as exc:
        raise UnknownRaffleModelError(
            f"Unknown raffle model {key!r}; expected one of "
            f"{', '.join(m.value for m in RaffleModelType)}"
        ) from exc
