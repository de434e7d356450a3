from __future__ import annotations

from typing import Iterable

from .exceptions import ParticipantDataError
from .project_constants import POINTS_PER_TICKET


def tickets(points: int) -> int:
    """Return the ticket count earned by ``points`` (one per full hundred)."""
    if isinstance(points, bool) or not isinstance(points, int):
        raise ParticipantDataError(f"points must be an integer, got {points!r}")
    if points < 0:
        raise ParticipantDataError(f"points must not be negative, got {points}")
    return points // POINTS_PER_TICKET


def total_tickets(participants: Iterable) -> int:
    return sum(p.tickets for p in participants)
