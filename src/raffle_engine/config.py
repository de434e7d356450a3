from __future__ import annotations

import os
from dataclasses import dataclass
from dotenv import load_dotenv

from .project_constants import DEFAULT_SHUFFLE_PASSES
from .raffle_models import RaffleModelType, get_raffle_model


@dataclass(frozen=True)
class Settings:
    seed: str | None
    model_type: RaffleModelType
    shuffle_passes: int

    @staticmethod
    def from_env(
        seed_override: str | None = None,
        model_override: str | None = None,
    ) -> "Settings":
        load_dotenv()

        # Explicit --seed / --model beat the environment.
        seed = seed_override or os.getenv("RAFFLE_SEED", "").strip() or None

        model_key = model_override or os.getenv("RAFFLE_MODEL", "").strip()
        model_type = (
            get_raffle_model(model_key).type
            if model_key
            else RaffleModelType.WEIGHTED_CONTINUOUS
        )

        raw_passes = os.getenv("RAFFLE_SHUFFLE_PASSES", "").strip()
        if raw_passes:
            try:
                shuffle_passes = int(raw_passes)
            except ValueError:
                raise RuntimeError(
                    f"RAFFLE_SHUFFLE_PASSES must be an integer, got {raw_passes!r}"
                )
            if shuffle_passes < 0:
                raise RuntimeError("RAFFLE_SHUFFLE_PASSES must not be negative")
        else:
            shuffle_passes = DEFAULT_SHUFFLE_PASSES

        return Settings(
            seed=seed, model_type=model_type, shuffle_passes=shuffle_passes
        )
