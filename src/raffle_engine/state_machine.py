"""Interactive round-by-round raffle with a confirm/reject gate.

All session data lives in one :class:`~raffle_engine.models.RaffleState`
owned by :class:`RoundStateMachine`. Every action either completes or raises
before touching that state, so a rejected call never leaves a half-applied
change behind.
"""

from __future__ import annotations

import logging
import random
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Union

from .draw import selector_for
from .eligibility import eligible
from .exceptions import IneligibleParticipantError, InvalidTransitionError
from .models import (
    Participant,
    ParticipantInput,
    ParticipantStatus,
    RaffleState,
    Round,
    WinnerRecord,
    build_participants,
)
from .odds import odds_table
from .project_constants import DEFAULT_SHUFFLE_PASSES
from .raffle_models import RaffleModelType, get_raffle_model
from .rounds import default_rounds, generate_optimal_rounds, validate_rounds

logger = logging.getLogger(__name__)

RoundInput = Union[Round, Dict[str, Any]]


class RaffleStage(str, Enum):
    NOT_LOADED = "not_loaded"
    LOADED = "loaded"
    ROUND_OPEN = "round_open"
    WINNER_PENDING = "winner_pending"
    COMPLETE = "complete"


def _as_rounds(rounds: Iterable[RoundInput]) -> List[Round]:
    return [r if isinstance(r, Round) else Round.from_record(r) for r in rounds]


class RoundStateMachine:
    def __init__(
        self,
        rounds: Optional[Iterable[RoundInput]] = None,
        model_type: Union[RaffleModelType, str] = RaffleModelType.WEIGHTED_CONTINUOUS,
        rng: Optional[random.Random] = None,
        shuffle_passes: int = DEFAULT_SHUFFLE_PASSES,
        state: Optional[RaffleState] = None,
    ) -> None:
        self.model = get_raffle_model(model_type)
        self.rng = rng if rng is not None else random.Random()
        self.shuffle_passes = shuffle_passes
        self.selector = selector_for(self.model, self.rng, shuffle_passes)
        if state is None:
            state = RaffleState(
                rounds=validate_rounds(
                    _as_rounds(rounds) if rounds is not None else default_rounds()
                )
            )
        elif rounds is not None:
            state.rounds = validate_rounds(_as_rounds(rounds))
        self.state = state

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def current_round(self) -> Optional[Round]:
        s = self.state
        if s.current_round_index < len(s.rounds):
            return s.rounds[s.current_round_index]
        return None

    @property
    def eligible_teams_for_current_round(self) -> List[Participant]:
        round_ = self.current_round
        if round_ is None:
            return []
        return eligible(self.state.remaining_teams, round_)

    @property
    def is_raffle_complete(self) -> bool:
        s = self.state
        if s.current_round_index >= len(s.rounds):
            return True
        # A drawn-but-undecided winner keeps the round open.
        if s.pending_winner is not None:
            return False
        return not self.eligible_teams_for_current_round

    @property
    def can_start_round(self) -> bool:
        s = self.state
        return (
            s.raffle_started
            and not s.is_drawing
            and s.pending_winner is None
            and s.current_round_index < len(s.rounds)
        )

    @property
    def stage(self) -> RaffleStage:
        s = self.state
        if not s.teams:
            return RaffleStage.NOT_LOADED
        if not s.raffle_started:
            return RaffleStage.LOADED
        if s.pending_winner is not None:
            return RaffleStage.WINNER_PENDING
        if self.is_raffle_complete:
            return RaffleStage.COMPLETE
        return RaffleStage.ROUND_OPEN

    def current_odds(self) -> Dict[str, float]:
        """Odds for the current round's pool, as the configured selector sees it."""
        return odds_table(
            self.eligible_teams_for_current_round,
            weighted=self.model.properties.weighted_system,
        )

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def load_team_data(self, records: Iterable[ParticipantInput]) -> List[Participant]:
        if self.state.raffle_started:
            raise InvalidTransitionError(
                "Cannot load participants while a raffle is running; reset it first."
            )
        participants = build_participants(records)
        self.state.teams = participants
        self.state.remaining_teams = list(participants)
        self.state.current_round_index = 0
        self.state.winners = []
        self.state.pending_winner = None
        self.state.withdrawn_players = []
        self.state.is_drawing = False
        logger.info("Loaded %d participants", len(participants))
        return participants

    def start_raffle(self) -> None:
        s = self.state
        if not s.teams:
            raise InvalidTransitionError("Load participants before starting the raffle.")
        if s.raffle_started:
            raise InvalidTransitionError("Raffle already started.")
        s.raffle_started = True
        s.current_round_index = 0
        s.remaining_teams = [t for t in s.teams if t.status == ParticipantStatus.ELIGIBLE]
        logger.info(
            "Raffle started: %d rounds, %d participants",
            len(s.rounds),
            len(s.remaining_teams),
        )

    def _require_open_round(self) -> Round:
        s = self.state
        if not s.raffle_started:
            raise InvalidTransitionError("Raffle has not been started.")
        if s.pending_winner is not None:
            raise InvalidTransitionError(
                f"Winner {s.pending_winner!r} is still awaiting confirmation."
            )
        round_ = self.current_round
        if round_ is None:
            raise InvalidTransitionError("All rounds have been drawn.")
        return round_

    def select_winner(self, participant_id: str) -> Participant:
        round_ = self._require_open_round()
        for p in self.eligible_teams_for_current_round:
            if p.id == participant_id:
                p.status = ParticipantStatus.PENDING_WINNER
                self.state.pending_winner = p.id
                logger.info("Pending winner for %s: %s", round_.name, p.id)
                return p
        raise IneligibleParticipantError(
            f"{participant_id!r} is not eligible for {round_.name}"
        )

    def draw_winner(self) -> Optional[str]:
        """Draw from the current pool and hold the result as the pending winner.

        Returns ``None`` when nobody is eligible for the current round.
        """
        round_ = self._require_open_round()
        pool = self.eligible_teams_for_current_round
        if not pool:
            logger.info("No eligible participants left for %s", round_.name)
            return None
        winner_id = self.selector.select(pool)
        self.select_winner(winner_id)
        return winner_id

    def _pending_participant(self) -> Participant:
        s = self.state
        if s.pending_winner is None:
            raise InvalidTransitionError("No winner is awaiting confirmation.")
        participant = s.find_team(s.pending_winner)
        if participant is None:
            raise InvalidTransitionError(
                f"Pending winner {s.pending_winner!r} is not in the roster."
            )
        return participant

    def confirm_winner(self) -> WinnerRecord:
        s = self.state
        participant = self._pending_participant()
        round_ = self.current_round
        if round_ is None:
            raise InvalidTransitionError(
                "The pending winner's round is no longer configured; reject or reset."
            )
        record = WinnerRecord(
            participant_id=participant.id,
            round_index=s.current_round_index,
            round_id=round_.id,
            round_name=round_.name,
            prize=f"Prize {len(s.winners) + 1}",
        )
        participant.status = ParticipantStatus.WINNER
        participant.won_in_round = s.current_round_index + 1
        s.winners.append(record)
        s.pending_winner = None
        s.current_round_index += 1
        logger.info("Confirmed winner of %s: %s", round_.name, participant.id)
        return record

    def reject_winner(self) -> str:
        s = self.state
        participant = self._pending_participant()
        participant.status = ParticipantStatus.WITHDRAWN
        if participant.id not in s.withdrawn_players:
            s.withdrawn_players.append(participant.id)
        s.remaining_teams = [t for t in s.remaining_teams if t.id != participant.id]
        s.pending_winner = None
        logger.info("Rejected winner %s; round stays open", participant.id)
        return participant.id

    def reset_raffle(self) -> None:
        s = self.state
        for team in s.teams:
            team.status = ParticipantStatus.ELIGIBLE
            team.won_in_round = None
            team.eliminated_in_round = None
        s.remaining_teams = list(s.teams)
        s.current_round_index = 0
        s.winners = []
        s.pending_winner = None
        s.withdrawn_players = []
        s.raffle_started = False
        s.is_drawing = False
        logger.info("Raffle reset")

    def update_rounds(self, rounds: Iterable[RoundInput]) -> List[Round]:
        new_rounds = validate_rounds(_as_rounds(rounds))
        s = self.state
        s.rounds = new_rounds
        if s.current_round_index > len(new_rounds):
            logger.warning(
                "Round index %d is past the new %d rounds; clamping",
                s.current_round_index,
                len(new_rounds),
            )
            s.current_round_index = len(new_rounds)
        return new_rounds

    def update_raffle_model(
        self,
        model_type: Union[RaffleModelType, str],
        number_of_rounds: Optional[int] = None,
    ) -> List[Round]:
        s = self.state
        if s.raffle_started and s.current_round_index > 0:
            raise InvalidTransitionError(
                "Cannot change raffle model after rounds have started."
            )
        model = get_raffle_model(model_type)
        new_rounds = generate_optimal_rounds(
            [t.points for t in s.teams],
            number_of_rounds or len(s.rounds),
            model.type,
        )
        if s.pending_winner is not None:
            pending = s.find_team(s.pending_winner)
            if pending is not None:
                pending.status = ParticipantStatus.ELIGIBLE
        self.model = model
        self.selector = selector_for(model, self.rng, self.shuffle_passes)
        s.rounds = new_rounds
        s.current_round_index = 0
        s.winners = []
        s.pending_winner = None
        s.remaining_teams = [t for t in s.teams if t.status == ParticipantStatus.ELIGIBLE]
        logger.info("Raffle model set to %s with %d rounds", model.name, len(new_rounds))
        return new_rounds
