"""User-tunable engine settings and shared constants."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from roulette import HighlightConfig


MAX_SEATS = 100
DEFAULT_SEAT_ROWS = 6
DEFAULT_SEAT_COLS = 7

# Upper bound on seats tried by the draw fallback search.
MAX_FALLBACK_ATTEMPTS = 100

SEED_ENV_VAR = "SEAT_ROULETTE_SEED"


@dataclass(frozen=True)
class SeatingSettings:
    """Settings for a seating session.

    Notes:
    - `max_fallback_attempts` bounds the shuffled scan used when the
      highlighted seat cannot be taken. It is not an exhaustive search.
    - `precheck_capacity` rejects a batch run up front when there are more
      unassigned students than free seats. Off by default so a batch seats
      as many students as it can and reports the rest.
    - `run_highlight_thread` False means highlights only advance through
      explicit `tick_highlight()` calls.
    """

    max_fallback_attempts: int = MAX_FALLBACK_ATTEMPTS
    precheck_capacity: bool = False
    highlight: HighlightConfig = field(default_factory=HighlightConfig)
    run_highlight_thread: bool = True

    def __post_init__(self) -> None:
        if int(self.max_fallback_attempts) < 1:
            raise ValueError("max_fallback_attempts must be >= 1")


def default_seed() -> Optional[int]:
    """Resolve the RNG seed from `SEAT_ROULETTE_SEED`, if set."""

    raw = os.getenv(SEED_ENV_VAR)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip())
    except ValueError:
        raise ValueError(f"{SEED_ENV_VAR} must be an integer, got {raw!r}") from None
