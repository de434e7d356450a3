from __future__ import annotations

import hashlib
import random
from bisect import bisect_right
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from .exceptions import NoWinnerPossibleError
from .models import Participant
from .project_constants import DEFAULT_SHUFFLE_PASSES
from .raffle_models import RaffleModel


@dataclass(frozen=True)
class TicketRange:
    participant_id: str
    tickets: int
    start_ticket: int
    end_ticket: int  # exclusive


def build_ranges(entrants: Sequence[Participant]) -> Tuple[List[TicketRange], int]:
    ranges: List[TicketRange] = []
    cursor = 0
    for p in entrants:
        if p.tickets <= 0:
            continue
        start = cursor
        end = cursor + p.tickets
        ranges.append(TicketRange(p.id, p.tickets, start, end))
        cursor = end
    return ranges, cursor


def find_winner(ranges: List[TicketRange], ticket: int) -> TicketRange:
    ends = [r.end_ticket for r in ranges]
    idx = bisect_right(ends, ticket)
    if idx < 0 or idx >= len(ranges):
        raise RuntimeError("Ticket out of range (unexpected).")
    return ranges[idx]


def seed_to_int(seed: str) -> Tuple[int, str]:
    seed_hash_hex = hashlib.sha256(seed.encode("utf-8")).hexdigest()
    return int(seed_hash_hex, 16), seed_hash_hex


def make_rng(seed: Union[int, str, None] = None) -> random.Random:
    """Build the session's random source.

    Text seeds go through SHA-256 so that an announced phrase maps to the same
    generator on every machine; ``None`` gives an OS-seeded generator.
    """
    if isinstance(seed, str):
        seed_int, _ = seed_to_int(seed)
        return random.Random(seed_int)
    return random.Random(seed)


class WeightedSelector:
    """Draw one participant with probability ``tickets / total tickets``.

    Before each draw the entrant order is permuted ``shuffle_passes`` times.
    Every pass is a uniform permutation and the final pick is still a single
    uniform ticket index, so the distribution is unchanged; the passes only
    guard against a weak or patterned generator lining up with roster order.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        shuffle_passes: int = DEFAULT_SHUFFLE_PASSES,
    ) -> None:
        if shuffle_passes < 0:
            raise ValueError("shuffle_passes must not be negative")
        self.rng = rng if rng is not None else random.Random()
        self.shuffle_passes = shuffle_passes

    def select(self, eligible: Sequence[Participant]) -> str:
        if not eligible:
            raise NoWinnerPossibleError("No eligible participants to draw from.")

        entrants = list(eligible)
        for _ in range(self.shuffle_passes):
            self.rng.shuffle(entrants)

        ranges, total = build_ranges(entrants)
        if total <= 0:
            raise NoWinnerPossibleError("Eligible participants hold no tickets.")

        ticket = self.rng.randrange(total)
        return find_winner(ranges, ticket).participant_id


class UniformSelector:
    """Draw one participant with equal probability, ignoring ticket counts."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng if rng is not None else random.Random()

    def select(self, eligible: Sequence[Participant]) -> str:
        if not eligible:
            raise NoWinnerPossibleError("No eligible participants to draw from.")
        # Zero-ticket participants never win, whatever the model.
        entrants = [p for p in eligible if p.tickets > 0]
        if not entrants:
            raise NoWinnerPossibleError("Eligible participants hold no tickets.")
        return entrants[self.rng.randrange(len(entrants))].id


def selector_for(
    model: RaffleModel,
    rng: Optional[random.Random] = None,
    shuffle_passes: int = DEFAULT_SHUFFLE_PASSES,
) -> Union[WeightedSelector, UniformSelector]:
    if model.properties.weighted_system:
        return WeightedSelector(rng, shuffle_passes=shuffle_passes)
    return UniformSelector(rng)
