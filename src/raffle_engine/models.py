"""Data model shared by the interactive and batch raffle engines."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Union

from .exceptions import InvalidRoundConfigurationError, ParticipantDataError
from .tickets import tickets as tickets_for_points


class ParticipantStatus(str, Enum):
    ELIGIBLE = "eligible"
    PENDING_WINNER = "pendingWinner"
    WINNER = "winner"
    WITHDRAWN = "withdrawn"
    REMOVED = "removed"


def _as_non_negative_int(value: Any, field_name: str, owner: str) -> int:
    # CSV/JSON ingestion can hand over 6900.0 for 6900.
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ParticipantDataError(
            f"{owner}: {field_name} must be an integer, got {value!r}"
        )
    if value < 0:
        raise ParticipantDataError(
            f"{owner}: {field_name} must not be negative, got {value}"
        )
    return value


@dataclass
class Participant:
    """One team or user taking part in the raffle.

    ``points`` are fixed for the session; ``tickets`` is derived from them and
    is refreshed by :meth:`recalculate_tickets`.
    """

    id: str
    points: int
    submissions: int = 0
    last_submission: str = ""
    status: ParticipantStatus = ParticipantStatus.ELIGIBLE
    tickets: int = field(init=False, default=0)
    player_number: Optional[int] = None
    # 1-based round positions, not round ids
    eliminated_in_round: Optional[int] = None
    won_in_round: Optional[int] = None

    def __post_init__(self) -> None:
        self.recalculate_tickets()

    def recalculate_tickets(self) -> None:
        self.tickets = tickets_for_points(self.points)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Participant":
        team = record.get("Team")
        if not isinstance(team, str) or not team.strip():
            raise ParticipantDataError(f"Team must be a non-empty string: {record!r}")
        team = team.strip()
        if "Points" not in record:
            raise ParticipantDataError(f"{team}: missing Points")
        points = _as_non_negative_int(record["Points"], "Points", team)
        submissions = _as_non_negative_int(
            record.get("Submissions", 0) or 0, "Submissions", team
        )
        status = ParticipantStatus.ELIGIBLE
        if record.get("status"):
            try:
                status = ParticipantStatus(record["status"])
            except ValueError:
                raise ParticipantDataError(
                    f"{team}: unknown status {record['status']!r}"
                )
        participant = cls(
            id=team,
            points=points,
            submissions=submissions,
            last_submission=str(record.get("Last Submission", "") or ""),
            status=status,
        )
        if record.get("playerNumber") is not None:
            participant.player_number = int(record["playerNumber"])
        return participant

    def to_record(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "Team": self.id,
            "Points": self.points,
            "Submissions": self.submissions,
            "Last Submission": self.last_submission,
            "status": self.status.value,
        }
        if self.player_number is not None:
            out["playerNumber"] = self.player_number
        return out


ParticipantInput = Union[Participant, Dict[str, Any]]


def build_participants(records: Iterable[ParticipantInput]) -> List[Participant]:
    """Turn input records into fresh, eligible participants ranked by points."""
    participants: List[Participant] = []
    seen = set()
    for record in records:
        if isinstance(record, Participant):
            p = Participant(
                id=record.id,
                points=record.points,
                submissions=record.submissions,
                last_submission=record.last_submission,
            )
        else:
            p = Participant.from_record(record)
            p.status = ParticipantStatus.ELIGIBLE
        if p.id in seen:
            raise ParticipantDataError(f"Duplicate participant {p.id!r}")
        seen.add(p.id)
        participants.append(p)

    # Rank 1 = most points; ties keep input order.
    ranked = sorted(participants, key=lambda p: -p.points)
    for rank, p in enumerate(ranked, start=1):
        p.player_number = rank
    return participants


@dataclass(frozen=True)
class Round:
    id: int
    name: str
    point_threshold: int
    description: str = ""

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Round":
        try:
            round_id = record["id"]
            threshold = record["pointThreshold"]
        except KeyError as exc:
            raise InvalidRoundConfigurationError(
                f"Round record is missing {exc.args[0]!r}: {record!r}"
            ) from exc
        if isinstance(round_id, bool) or not isinstance(round_id, int):
            raise InvalidRoundConfigurationError(
                f"Round id must be an integer, got {round_id!r}"
            )
        if isinstance(threshold, bool) or not isinstance(threshold, int):
            raise InvalidRoundConfigurationError(
                f"Round {round_id}: pointThreshold must be an integer, got {threshold!r}"
            )
        return cls(
            id=round_id,
            name=str(record.get("name") or f"Round {round_id}"),
            point_threshold=threshold,
            description=str(record.get("description", "")),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "pointThreshold": self.point_threshold,
            "description": self.description,
        }


@dataclass(frozen=True)
class WinnerRecord:
    """A confirmed winner.

    ``round_index`` is the position of the round in the configured list and is
    the canonical key; ``round_id`` is kept for display only.
    """

    participant_id: str
    round_index: int
    round_id: int
    round_name: str
    prize: Optional[str] = None


@dataclass
class RaffleState:
    teams: List[Participant] = field(default_factory=list)
    remaining_teams: List[Participant] = field(default_factory=list)
    current_round_index: int = 0
    rounds: List[Round] = field(default_factory=list)
    winners: List[WinnerRecord] = field(default_factory=list)
    pending_winner: Optional[str] = None
    withdrawn_players: List[str] = field(default_factory=list)
    raffle_started: bool = False
    is_drawing: bool = False

    def find_team(self, participant_id: str) -> Optional[Participant]:
        for team in self.teams:
            if team.id == participant_id:
                return team
        return None
