"""Seating session: the roulette state machine plus the external operations.

The orchestrating layer owns one `SeatingSession` per class. It holds the
current snapshot and the roulette state, and exposes:

- start_draw(student_id=None)      idle/stopped -> running
- stop_draw(manual_seat_id=None)   running -> stopped, commits one seat
- assign_all_remaining()           batch assignment for everyone left
- reset_assignments()              clear seats and history, back to idle
- check_constraint(seat_id, student_id)  read-only admissibility check

Failures raise a `SeatingError`. The snapshot is only replaced after a
successful resolution, so a failed call never leaves a half-applied state.

"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

import logging
import random

from roulette import HighlightTicker

from .batch import BatchResult, assign_all
from .constraints import is_admissible
from .draw import resolve_draw
from .errors import (
    DrawComplete,
    DrawStateError,
    NoAvailableSeats,
    NoTargetStudent,
    SeatingError,
    StudentAlreadyAssigned,
    UnknownStudent,
)
from .models import HistoryEntry, SeatingSnapshot
from .settings import SeatingSettings, default_seed


logger = logging.getLogger(__name__)


class DrawPhase(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass(frozen=True)
class AssignmentState:
    phase: DrawPhase = DrawPhase.IDLE
    current_highlighted_seat_id: Optional[str] = None
    current_target_student_id: Optional[str] = None
    last_error: Optional[str] = None

    @property
    def is_running(self) -> bool:
        return self.phase is DrawPhase.RUNNING

    @property
    def is_stopped(self) -> bool:
        return self.phase is DrawPhase.STOPPED


class SeatingSession:
    """Owns the current snapshot, the roulette state and the highlight ticker."""

    def __init__(
        self,
        snapshot: SeatingSnapshot,
        settings: SeatingSettings = SeatingSettings(),
        *,
        ticker: Optional[HighlightTicker] = None,
        seed: Optional[int] = None,
    ):
        self._settings = settings
        self._snapshot = snapshot
        self._rng = random.Random(seed if seed is not None else default_seed())
        self._ticker = ticker if ticker is not None else HighlightTicker(settings.highlight)
        self._state = AssignmentState(current_target_student_id=self._next_student_id())
        # Written by the ticker thread while running; read once the ticker is stopped.
        self._highlighted: Optional[str] = None

    # -----------------
    # Read-only views
    # -----------------

    @property
    def snapshot(self) -> SeatingSnapshot:
        return self._snapshot

    @property
    def settings(self) -> SeatingSettings:
        return self._settings

    @property
    def state(self) -> AssignmentState:
        return replace(self._state, current_highlighted_seat_id=self._highlighted)

    @property
    def history(self) -> Tuple[HistoryEntry, ...]:
        return self._snapshot.history

    @property
    def is_complete(self) -> bool:
        return not self._snapshot.unassigned_students()

    @property
    def progress(self) -> Tuple[int, int]:
        students = self._snapshot.students.values()
        return sum(1 for s in students if s.is_assigned), len(self._snapshot.students)

    # -----------------
    # Helpers
    # -----------------

    def _next_student_id(self) -> Optional[str]:
        unassigned = self._snapshot.unassigned_students()
        return unassigned[0].student_id if unassigned else None

    def _fail(self, error: SeatingError) -> SeatingError:
        self._state = replace(self._state, last_error=error.message)
        logger.warning("%s: %s", error.code, error.message)
        return error

    def _publish_highlight(self, seat_id: Optional[str]) -> None:
        self._highlighted = seat_id

    # -----------------
    # Operations
    # -----------------

    def select_student(self, student_id: str) -> None:
        """Choose the next student to draw for."""

        if self._state.is_running:
            raise self._fail(DrawStateError("Cannot change student while the roulette is running"))
        student = self._snapshot.students.get(student_id)
        if student is None:
            raise self._fail(UnknownStudent(f"Unknown student: {student_id}"))
        if student.is_assigned:
            raise self._fail(StudentAlreadyAssigned(f"Student {student_id} already has a seat"))

        self._state = replace(self._state, current_target_student_id=student_id, last_error=None)

    def start_draw(self, student_id: Optional[str] = None) -> str:
        """Start the roulette for `student_id` (or the next student). Returns the target id."""

        if self._state.is_running:
            raise self._fail(DrawStateError("The roulette is already running"))
        if self.is_complete:
            raise self._fail(DrawComplete("Every student already has a seat"))

        if student_id is not None:
            self.select_student(student_id)

        target = self._state.current_target_student_id
        current = self._snapshot.students.get(target) if target is not None else None
        if current is None or current.is_assigned:
            target = self._next_student_id()
        if target is None:
            raise self._fail(NoTargetStudent("No student is selected"))

        available = [s.seat_id for s in self._snapshot.available_seats()]
        if not available:
            raise self._fail(NoAvailableSeats("No free seats are left"))

        self._highlighted = None
        self._state = replace(
            self._state,
            phase=DrawPhase.RUNNING,
            current_target_student_id=target,
            last_error=None,
        )
        self._ticker.start(available, self._publish_highlight, background=self._settings.run_highlight_thread)
        logger.info("roulette started for %s over %d free seat(s)", target, len(available))
        return target

    def tick_highlight(self) -> Optional[str]:
        """Advance the highlight by one step on the caller's thread."""

        if not self._state.is_running:
            raise self._fail(DrawStateError("The roulette is not running"))
        return self._ticker.tick()

    def stop_draw(self, manual_seat_id: Optional[str] = None) -> HistoryEntry:
        """Stop the roulette and commit a seat for the target student."""

        if not self._state.is_running:
            raise self._fail(DrawStateError("The roulette is not running"))

        self._ticker.stop()
        highlighted = self._highlighted
        target = self._state.current_target_student_id

        self._state = replace(self._state, phase=DrawPhase.STOPPED)
        if target is None:
            self._highlighted = None
            raise self._fail(NoTargetStudent("No student is selected"))

        try:
            snapshot, entry = resolve_draw(
                self._snapshot,
                target,
                manual_seat_id=manual_seat_id,
                highlighted_seat_id=highlighted,
                settings=self._settings,
                rng=self._rng,
            )
        except SeatingError as e:
            self._highlighted = None
            raise self._fail(e)

        self._snapshot = snapshot
        self._highlighted = entry.seat_id
        self._state = replace(self._state, last_error=None)
        return entry

    def assign_all_remaining(self) -> BatchResult:
        """Seat every remaining student at once (best-effort)."""

        if self._state.is_running:
            raise self._fail(DrawStateError("Stop the roulette before assigning everyone"))

        try:
            result = assign_all(self._snapshot, settings=self._settings, rng=self._rng)
        except SeatingError as e:
            raise self._fail(e)

        self._snapshot = result.snapshot
        self._highlighted = None
        self._state = replace(
            self._state,
            phase=DrawPhase.STOPPED,
            current_target_student_id=self._next_student_id(),
            last_error="\n".join(result.errors) if result.errors else None,
        )
        return result

    def reset_assignments(self) -> None:
        """Clear every seat assignment and the history. Relations and fixed seats stay."""

        self._ticker.stop()
        self._snapshot = self._snapshot.cleared()
        self._highlighted = None
        self._state = AssignmentState(current_target_student_id=self._next_student_id())
        logger.info("assignments reset")

    def check_constraint(self, seat_id: str, student_id: str) -> bool:
        """Would `student_id` be allowed at `seat_id` right now?"""

        student = self._snapshot.students.get(student_id)
        return is_admissible(seat_id, student, self._snapshot.seats, self._snapshot.students, self._snapshot.relations)

    # -----------------
    # Lifecycle
    # -----------------

    def close(self) -> None:
        self._ticker.stop()
        if self._state.is_running:
            self._state = replace(self._state, phase=DrawPhase.STOPPED)

    def __enter__(self) -> "SeatingSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
