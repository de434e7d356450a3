from __future__ import annotations

import math
from typing import Iterable, List, Optional, Sequence

from .exceptions import InvalidRoundConfigurationError
from .models import Round
from .project_constants import DEFAULT_ROUND_THRESHOLDS, DEFAULT_THRESHOLD_SPAN
from .raffle_models import RaffleModelType


def _round_name(index: int, number_of_rounds: int) -> str:
    return "Final Round" if index == number_of_rounds - 1 else f"Round {index + 1}"


def default_rounds() -> List[Round]:
    rounds: List[Round] = []
    count = len(DEFAULT_ROUND_THRESHOLDS)
    for i, threshold in enumerate(DEFAULT_ROUND_THRESHOLDS):
        if i == 0:
            description = "All players eligible - First elimination round"
        elif i == count - 1:
            description = f"Players with {threshold}+ points - Weighted ticket drawing"
        else:
            description = f"Players with {threshold}+ points advance"
        rounds.append(Round(i + 1, _round_name(i, count), threshold, description))
    return rounds


def validate_rounds(rounds: Iterable[Round]) -> List[Round]:
    """Return ``rounds`` as a list, rejecting negative thresholds and bad ids."""
    checked = list(rounds)
    seen = set()
    for r in checked:
        if r.id <= 0:
            raise InvalidRoundConfigurationError(f"Round id must be positive, got {r.id}")
        if r.id in seen:
            raise InvalidRoundConfigurationError(f"Duplicate round id {r.id}")
        if r.point_threshold < 0:
            raise InvalidRoundConfigurationError(
                f"Round {r.id}: pointThreshold must not be negative, got {r.point_threshold}"
            )
        seen.add(r.id)
    return checked


def generate_optimal_rounds(
    points: Sequence[int],
    number_of_rounds: int,
    model_type: Optional[RaffleModelType] = None,
) -> List[Round]:
    """Build a round list suited to a roster and raffle model.

    Weighted-continuous raffles keep everyone eligible (threshold 0 every
    round). Uniform-elimination raffles step thresholds up through the sorted
    points so that roughly ``ceil(n / rounds)`` players fall away per round.
    """
    if number_of_rounds <= 0:
        raise InvalidRoundConfigurationError("number_of_rounds must be positive")
    model_type = model_type or RaffleModelType.UNIFORM_ELIMINATION

    if model_type == RaffleModelType.WEIGHTED_CONTINUOUS:
        return [
            Round(
                i + 1,
                _round_name(i, number_of_rounds),
                0,
                "All players remain eligible (weighted by tickets)",
            )
            for i in range(number_of_rounds)
        ]

    if not points:
        step = DEFAULT_THRESHOLD_SPAN / number_of_rounds
        rounds = []
        for i in range(number_of_rounds):
            threshold = int(i * step + 0.5)
            description = (
                "All players eligible" if i == 0 else f"Players with {threshold}+ points"
            )
            rounds.append(
                Round(i + 1, _round_name(i, number_of_rounds), threshold, description)
            )
        return rounds

    sorted_points = sorted(points)
    players_per_round = math.ceil(len(sorted_points) / number_of_rounds)
    rounds = []
    for i in range(number_of_rounds):
        player_index = i * players_per_round
        threshold = (
            sorted_points[player_index]
            if player_index < len(sorted_points)
            else sorted_points[-1]
        )
        if i == 0:
            rounds.append(
                Round(1, _round_name(0, number_of_rounds), 0, "All players eligible")
            )
            continue
        expected = sum(1 for p in sorted_points if p >= threshold)
        rounds.append(
            Round(
                i + 1,
                _round_name(i, number_of_rounds),
                max(0, threshold),
                f"Players with {threshold}+ points ({expected} eligible)",
            )
        )
    return rounds
