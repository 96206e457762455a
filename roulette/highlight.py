"""Random seat highlight ticker.

While a draw is running the UI shows a seat lighting up at random, over and
over, until the user presses stop. This module provides that feed as a
reusable, cancellable scheduled task:

- every `interval_ms` pick a uniformly random seat id from a fixed list
- hand it to a `publish` callback
- `stop()` cancels synchronously: once it returns, `publish` is never called
  again for that run

The ticker has no say in the final assignment. The draw resolver only samples
the last published seat as its first suggestion.

Threading
---------
`start()` runs ticks on a daemon thread. Each tick (random choice + publish)
happens while holding the ticker lock, and `stop()` takes the same lock, so a
tick is either fully published before `stop()` returns or never published.
`tick()` performs one tick on the caller's thread, which is how tests and
headless callers drive the feed deterministically.

"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Protocol, Tuple

import logging
import random
import threading


logger = logging.getLogger(__name__)

ROULETTE_INTERVAL_MS = 50


class PublishFn(Protocol):
    def __call__(self, seat_id: Optional[str]) -> None:  # pragma: no cover
        """Receive the currently highlighted seat id (None if no seat is free)."""


@dataclass(frozen=True)
class HighlightConfig:
    """Configuration for the highlight ticker.

    Attributes:
        interval_ms: Tick cadence in milliseconds.
        seed: RNG seed for reproducible highlight sequences (None = system entropy).
    """

    interval_ms: int = ROULETTE_INTERVAL_MS
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if int(self.interval_ms) < 1:
            raise ValueError("interval_ms must be >= 1")


class HighlightTicker:
    """Owns at most one active highlight run at a time."""

    def __init__(self, config: HighlightConfig = HighlightConfig(), rng: Optional[random.Random] = None):
        self._config = config
        self._rng = rng if rng is not None else random.Random(config.seed)
        self._lock = threading.RLock()

        self._seat_ids: Tuple[str, ...] = ()
        self._publish: Optional[PublishFn] = None
        self._active = False
        # Bumped on every start/stop so a stale thread can never publish.
        self._generation = 0

        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

        self.ticks = 0

    @property
    def config(self) -> HighlightConfig:
        return self._config

    @property
    def is_active(self) -> bool:
        with self._lock:
            return self._active

    def start(self, seat_ids: Iterable[str], publish: PublishFn, *, background: bool = True) -> None:
        """Begin a new run, cancelling any previous one first."""

        self.stop()

        with self._lock:
            self._seat_ids = tuple(seat_ids)
            self._publish = publish
            self._active = True
            self._generation += 1
            generation = self._generation

        logger.debug("highlight run %d started over %d seat(s)", generation, len(self._seat_ids))

        if not background:
            return

        stop_event = threading.Event()
        thread = threading.Thread(
            target=self._run,
            args=(generation, stop_event),
            name=f"highlight-ticker-{generation}",
            daemon=True,
        )
        with self._lock:
            self._stop_event = stop_event
            self._thread = thread
        thread.start()

    def stop(self) -> None:
        """Cancel the active run. No publish happens after this returns."""

        with self._lock:
            was_active = self._active
            self._active = False
            self._generation += 1
            self._publish = None
            stop_event, thread = self._stop_event, self._thread
            self._stop_event = None
            self._thread = None

        if stop_event is not None:
            stop_event.set()
        if thread is not None and thread is not threading.current_thread():
            thread.join()

        if was_active:
            logger.debug("highlight run stopped after %d tick(s)", self.ticks)

    def tick(self) -> Optional[str]:
        """Publish one highlight on the caller's thread and return it."""

        with self._lock:
            if not self._active:
                raise RuntimeError("highlight ticker is not running")
            return self._tick_locked()

    def _tick_locked(self) -> Optional[str]:
        seat_id = self._rng.choice(self._seat_ids) if self._seat_ids else None
        self.ticks += 1
        assert self._publish is not None
        self._publish(seat_id)
        return seat_id

    def _run(self, generation: int, stop_event: threading.Event) -> None:
        interval = self._config.interval_ms / 1000.0

        # First highlight shows up immediately, then on every interval.
        while not stop_event.is_set():
            with self._lock:
                if not self._active or generation != self._generation:
                    return
                self._tick_locked()
            if stop_event.wait(interval):
                return
