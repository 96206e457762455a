import random
import sys
import threading
import time
from pathlib import Path

import pytest

# Ensure project root is on PYTHONPATH
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from roulette import ROULETTE_INTERVAL_MS, HighlightConfig, HighlightTicker


SEATS = ["R1C1", "R1C2", "R2C1", "R2C2"]


class _Recorder:
    def __init__(self):
        self.lock = threading.Lock()
        self.values = []

    def __call__(self, seat_id):
        with self.lock:
            self.values.append(seat_id)

    def count(self):
        with self.lock:
            return len(self.values)


def _wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def test_default_interval_and_validation():
    assert HighlightConfig().interval_ms == ROULETTE_INTERVAL_MS == 50
    with pytest.raises(ValueError):
        HighlightConfig(interval_ms=0)


def test_manual_ticks_publish_seats_from_the_list():
    rec = _Recorder()
    ticker = HighlightTicker(HighlightConfig(seed=3))
    ticker.start(SEATS, rec, background=False)

    out = [ticker.tick() for _ in range(20)]
    assert out == rec.values
    assert set(out) <= set(SEATS)
    assert ticker.ticks == 20

    ticker.stop()
    assert not ticker.is_active
    with pytest.raises(RuntimeError):
        ticker.tick()


def test_same_seed_gives_same_sequence():
    def run():
        rec = _Recorder()
        t = HighlightTicker(rng=random.Random(11))
        t.start(SEATS, rec, background=False)
        for _ in range(10):
            t.tick()
        t.stop()
        return rec.values

    assert run() == run()


def test_empty_seat_list_publishes_none():
    rec = _Recorder()
    ticker = HighlightTicker()
    ticker.start([], rec, background=False)
    assert ticker.tick() is None
    assert rec.values == [None]


def test_background_run_stops_synchronously():
    rec = _Recorder()
    ticker = HighlightTicker(HighlightConfig(interval_ms=1, seed=1))
    ticker.start(SEATS, rec)

    assert _wait_for(lambda: rec.count() >= 3)
    ticker.stop()
    after_stop = rec.count()

    time.sleep(0.05)
    assert rec.count() == after_stop
    assert not ticker.is_active


def test_restart_cancels_previous_run():
    first = _Recorder()
    second = _Recorder()
    ticker = HighlightTicker(HighlightConfig(interval_ms=1, seed=2))

    ticker.start(SEATS, first)
    assert _wait_for(lambda: first.count() >= 1)

    ticker.start(["R9C9"], second)
    frozen = first.count()
    assert _wait_for(lambda: second.count() >= 2)
    ticker.stop()

    assert first.count() == frozen
    assert set(second.values) == {"R9C9"}


def test_stop_from_inside_publish_does_not_deadlock():
    ticker = HighlightTicker(HighlightConfig(interval_ms=1))
    seen = []

    def publish(seat_id):
        seen.append(seat_id)
        ticker.stop()

    ticker.start(SEATS, publish)
    assert _wait_for(lambda: not ticker.is_active)
    time.sleep(0.02)
    assert len(seen) == 1


def test_stop_when_idle_is_a_no_op():
    ticker = HighlightTicker()
    ticker.stop()
    ticker.stop()
    assert not ticker.is_active
