"""Session snapshot in the shape the storage collaborator persists.

::

    {teams, currentRound, rounds, winners: [{team, round, roundName, prize}],
     remainingTeams, isDrawing, raffleStarted, pendingWinner?, withdrawnPlayers}

``winners[].round`` is the 1-based *position* of the round in ``rounds``.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

from .exceptions import ParticipantDataError
from .models import Participant, ParticipantStatus, RaffleState, Round, WinnerRecord
from .rounds import default_rounds, validate_rounds


def to_snapshot(state: RaffleState) -> Dict[str, Any]:
    snapshot: Dict[str, Any] = {
        "teams": [t.to_record() for t in state.teams],
        "currentRound": state.current_round_index,
        "rounds": [r.to_record() for r in state.rounds],
        "winners": [
            {
                "team": w.participant_id,
                "round": w.round_index + 1,
                "roundName": w.round_name,
                "prize": w.prize,
            }
            for w in state.winners
        ],
        "remainingTeams": [t.to_record() for t in state.remaining_teams],
        "isDrawing": state.is_drawing,
        "raffleStarted": state.raffle_started,
        "withdrawnPlayers": list(state.withdrawn_players),
    }
    if state.pending_winner is not None:
        snapshot["pendingWinner"] = state.pending_winner
    return snapshot


def from_snapshot(data: Dict[str, Any]) -> RaffleState:
    """Rebuild a :class:`RaffleState`; missing keys fall back to defaults."""
    teams: List[Participant] = []
    by_id: Dict[str, Participant] = {}
    for record in data.get("teams") or []:
        p = Participant.from_record(record)
        if p.id in by_id:
            raise ParticipantDataError(f"Duplicate participant {p.id!r} in snapshot")
        by_id[p.id] = p
        teams.append(p)

    rounds_data = data.get("rounds")
    rounds = (
        validate_rounds(Round.from_record(r) for r in rounds_data)
        if rounds_data
        else default_rounds()
    )

    # remainingTeams refer to the same participants as teams.
    remaining: List[Participant] = []
    for record in data.get("remainingTeams") or []:
        team_id = record.get("Team")
        if team_id not in by_id:
            raise ParticipantDataError(
                f"remainingTeams entry {team_id!r} is not in teams"
            )
        remaining.append(by_id[team_id])

    winners: List[WinnerRecord] = []
    for w in data.get("winners") or []:
        round_index = int(w["round"]) - 1
        round_id = rounds[round_index].id if 0 <= round_index < len(rounds) else round_index + 1
        winners.append(
            WinnerRecord(
                participant_id=w["team"],
                round_index=round_index,
                round_id=round_id,
                round_name=w.get("roundName", ""),
                prize=w.get("prize"),
            )
        )
        if w["team"] in by_id:
            by_id[w["team"]].won_in_round = round_index + 1

    pending = data.get("pendingWinner") or None
    if pending is not None and pending in by_id:
        by_id[pending].status = ParticipantStatus.PENDING_WINNER

    # Older snapshots list withdrawals without updating status or remainingTeams.
    withdrawn = list(data.get("withdrawnPlayers") or [])
    for participant_id in withdrawn:
        if participant_id in by_id and participant_id != pending:
            by_id[participant_id].status = ParticipantStatus.WITHDRAWN
    remaining = [p for p in remaining if p.status != ParticipantStatus.WITHDRAWN]

    current_round = int(data.get("currentRound", 0) or 0)
    return RaffleState(
        teams=teams,
        remaining_teams=remaining,
        current_round_index=max(0, min(current_round, len(rounds))),
        rounds=rounds,
        winners=winners,
        pending_winner=pending,
        withdrawn_players=withdrawn,
        raffle_started=bool(data.get("raffleStarted", False)),
        is_drawing=bool(data.get("isDrawing", False)),
    )


def dump_snapshot(state: RaffleState, path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(to_snapshot(state), f, indent=2)


def load_snapshot(path: str) -> RaffleState:
    with open(path, "r", encoding="utf-8") as f:
        return from_snapshot(json.load(f))
