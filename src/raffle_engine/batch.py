"""Model-driven raffle that draws and commits whole rounds without a human gate."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

from .draw import selector_for
from .eligibility import eligible, pool_statuses
from .exceptions import InvalidRoundConfigurationError, RoundsExhaustedError
from .models import Participant, ParticipantStatus, Round
from .project_constants import DEFAULT_SHUFFLE_PASSES
from .raffle_models import (
    EliminationCalculation,
    RaffleModel,
    RaffleModelType,
    get_raffle_model,
)
from .rounds import validate_rounds

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoundRecord:
    round_number: int
    model_type: RaffleModelType
    participants_before: int
    participants_after: int
    winners: List[str]
    eliminated: List[str]
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "round_number": self.round_number,
            "model_type": self.model_type.value,
            "participants_before": self.participants_before,
            "participants_after": self.participants_after,
            "winners": list(self.winners),
            "eliminated": list(self.eliminated),
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class RaffleResult:
    rounds: List[RoundRecord]
    final_winners: List[Participant]
    total_participants: int
    model_used: RaffleModel


class BatchRaffleEngine:
    """Runs rounds back to back under a :class:`RaffleModel`.

    Shares ticketing, eligibility and selection with the interactive state
    machine; differs only in committing each round's winners immediately and
    optionally eliminating participants after every round.
    """

    def __init__(
        self,
        participants: Iterable[Participant],
        rounds: Iterable[Round],
        model_type: Union[RaffleModelType, str] = RaffleModelType.WEIGHTED_CONTINUOUS,
        rng: Optional[random.Random] = None,
        shuffle_passes: int = DEFAULT_SHUFFLE_PASSES,
    ) -> None:
        self.participants: List[Participant] = list(participants)
        self.rounds: List[Round] = validate_rounds(rounds)
        if not self.rounds:
            raise InvalidRoundConfigurationError("A batch raffle needs at least one round")
        self.model = get_raffle_model(model_type)
        self.rng = rng if rng is not None else random.Random()
        self.shuffle_passes = shuffle_passes
        self.records: List[RoundRecord] = []
        self.current_round = 0
        for p in self.participants:
            p.recalculate_tickets()

    def active_participants(self, model: Optional[RaffleModel] = None) -> List[Participant]:
        statuses = pool_statuses(model or self.model)
        return [p for p in self.participants if p.status in statuses]

    def _select_winners(self, model: RaffleModel, round_: Round, count: int) -> List[Participant]:
        selector = selector_for(model, self.rng, self.shuffle_passes)
        available = eligible(self.participants, round_, model)
        winners: List[Participant] = []
        while len(winners) < count and available:
            winner_id = selector.select(available)
            winner = next(p for p in available if p.id == winner_id)
            winners.append(winner)
            available = [p for p in available if p.id != winner_id]
        return winners

    def _eliminate(self, model: RaffleModel, round_number: int) -> List[Participant]:
        props = model.properties
        if not props.drop_off_after_round:
            return []
        if props.elimination_calculation != EliminationCalculation.PLAYERS_PER_ROUND:
            return []

        active = self.active_participants(model)
        count = min(len(self.participants) // len(self.rounds), len(active))
        if count <= 0:
            return []

        eliminated = self.rng.sample(active, count)
        for p in eliminated:
            p.status = ParticipantStatus.REMOVED
            p.eliminated_in_round = round_number
        return eliminated

    def run_round(
        self,
        model_type: Union[RaffleModelType, str, None] = None,
        winner_count: int = 1,
    ) -> RoundRecord:
        if self.current_round >= len(self.rounds):
            raise RoundsExhaustedError(
                f"All {len(self.rounds)} rounds have already been run"
            )
        if winner_count < 0:
            raise ValueError("winner_count must not be negative")

        model = get_raffle_model(model_type) if model_type is not None else self.model
        round_ = self.rounds[self.current_round]
        self.current_round += 1
        round_number = self.current_round
        participants_before = len(self.active_participants(model))

        winners = self._select_winners(model, round_, winner_count)
        for w in winners:
            w.status = ParticipantStatus.WINNER
            w.won_in_round = round_number

        eliminated = self._eliminate(model, round_number)
        participants_after = len(self.active_participants(model))

        record = RoundRecord(
            round_number=round_number,
            model_type=model.type,
            participants_before=participants_before,
            participants_after=participants_after,
            winners=[w.id for w in winners],
            eliminated=[e.id for e in eliminated],
            timestamp=datetime.now(timezone.utc),
        )
        self.records.append(record)
        logger.info(
            "Round %d (%s): %d -> %d active, winners=%s, eliminated=%d",
            round_number,
            model.type.value,
            participants_before,
            participants_after,
            record.winners,
            len(record.eliminated),
        )
        return record

    def run_all(self, winner_count: int = 1) -> RaffleResult:
        while self.current_round < len(self.rounds):
            self.run_round(winner_count=winner_count)
        return self.get_result()

    def get_result(self) -> RaffleResult:
        model_used = (
            get_raffle_model(self.records[-1].model_type) if self.records else self.model
        )
        return RaffleResult(
            rounds=list(self.records),
            final_winners=[p for p in self.participants if p.won_in_round is not None],
            total_participants=len(self.participants),
            model_used=model_used,
        )

    def reset(self) -> None:
        for p in self.participants:
            p.status = ParticipantStatus.ELIGIBLE
            p.eliminated_in_round = None
            p.won_in_round = None
            p.recalculate_tickets()
        self.records = []
        self.current_round = 0
