"""Single-draw resolution (the roulette "stop").

When the user stops the roulette for one student the seat is picked in this
order, first match wins:

1. the student's fixed seat, if one is configured (nothing else is considered)
2. a seat the user clicked while the roulette was running
3. the seat that was highlighted when the roulette stopped
4. a shuffled scan over the free seats, bounded by `max_fallback_attempts`

Steps 1 and 2 fail outright when their seat cannot be taken; they never fall
back to a random seat. Step 3 silently falls through to step 4.

`resolve_draw` is pure: it returns a new snapshot plus the history entry and
raises a `SeatingError` (with the input snapshot untouched) on failure.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

import logging
import random

from .constraints import is_admissible
from .errors import (
    FixedSeatConflict,
    FixedSeatUnusable,
    ManualSeatInadmissible,
    ManualSeatUnavailable,
    NoAdmissibleSeatFound,
    NoAvailableSeats,
    StudentAlreadyAssigned,
    UnknownStudent,
)
from .models import HistoryEntry, SeatingSnapshot, Student
from .settings import SeatingSettings


logger = logging.getLogger(__name__)


def _admissible(snapshot: SeatingSnapshot, seat_id: str, student: Student) -> bool:
    return is_admissible(seat_id, student, snapshot.seats, snapshot.students, snapshot.relations)


def _resolve_fixed(snapshot: SeatingSnapshot, student: Student, seat_id: str) -> str:
    seat = snapshot.seats.get(seat_id)
    if seat is None or not seat.is_usable:
        raise FixedSeatUnusable(f"Fixed seat {seat_id} for student {student.student_id} is not usable")
    if seat.assigned_student_id is not None and seat.assigned_student_id != student.student_id:
        raise FixedSeatConflict(
            f"Fixed seat {seat_id} for student {student.student_id} is occupied by {seat.assigned_student_id}"
        )
    return seat_id


def _resolve_manual(snapshot: SeatingSnapshot, student: Student, seat_id: str) -> str:
    seat = snapshot.seats.get(seat_id)
    if seat is None or not seat.is_available:
        raise ManualSeatUnavailable(f"Seat {seat_id} is not available")
    if not _admissible(snapshot, seat_id, student):
        raise ManualSeatInadmissible(f"Seat {seat_id} breaks a relation for student {student.student_id}")
    return seat_id


def fallback_search(
    snapshot: SeatingSnapshot,
    student: Student,
    *,
    max_attempts: int,
    rng: random.Random,
    exclude: Optional[str] = None,
) -> Optional[str]:
    """Scan shuffled free seats for the first admissible one (bounded).

    `exclude` drops one seat from the candidates before shuffling. The draw
    passes the highlighted seat, which was already checked and rejected, so
    the scan only tries the other free seats.
    """

    candidates: List[str] = [s.seat_id for s in snapshot.available_seats() if s.seat_id != exclude]
    rng.shuffle(candidates)

    for seat_id in candidates[: min(int(max_attempts), len(candidates))]:
        if _admissible(snapshot, seat_id, student):
            return seat_id
    return None


def choose_seat(
    snapshot: SeatingSnapshot,
    student: Student,
    *,
    manual_seat_id: Optional[str] = None,
    highlighted_seat_id: Optional[str] = None,
    settings: SeatingSettings = SeatingSettings(),
    rng: Optional[random.Random] = None,
) -> str:
    """Pick the seat for `student` without committing it."""

    rng = rng or random.Random()

    fixed_seat_id = snapshot.fixed_seat_for(student.student_id)
    if fixed_seat_id is not None:
        return _resolve_fixed(snapshot, student, fixed_seat_id)

    if manual_seat_id is not None:
        return _resolve_manual(snapshot, student, manual_seat_id)

    if not snapshot.available_seats():
        raise NoAvailableSeats("No free seats are left")

    if highlighted_seat_id is not None:
        seat = snapshot.seats.get(highlighted_seat_id)
        if seat is not None and seat.is_available and _admissible(snapshot, highlighted_seat_id, student):
            return highlighted_seat_id
        logger.debug("highlighted seat %s not usable for %s, falling back", highlighted_seat_id, student.student_id)

    seat_id = fallback_search(
        snapshot,
        student,
        max_attempts=settings.max_fallback_attempts,
        rng=rng,
        exclude=highlighted_seat_id,
    )
    if seat_id is None:
        raise NoAdmissibleSeatFound(f"No seat satisfies the relations of student {student.student_id}")
    return seat_id


def resolve_draw(
    snapshot: SeatingSnapshot,
    student_id: str,
    *,
    manual_seat_id: Optional[str] = None,
    highlighted_seat_id: Optional[str] = None,
    settings: SeatingSettings = SeatingSettings(),
    rng: Optional[random.Random] = None,
) -> Tuple[SeatingSnapshot, HistoryEntry]:
    """Resolve and commit one student's seat.

    Returns:
        (new_snapshot, history_entry)
    """

    student = snapshot.students.get(student_id)
    if student is None:
        raise UnknownStudent(f"Unknown student: {student_id}")
    if student.is_assigned:
        raise StudentAlreadyAssigned(f"Student {student_id} already sits at {student.assigned_seat_id}")

    seat_id = choose_seat(
        snapshot,
        student,
        manual_seat_id=manual_seat_id,
        highlighted_seat_id=highlighted_seat_id,
        settings=settings,
        rng=rng,
    )

    new_snapshot = snapshot.with_assignment(student_id, seat_id)
    logger.info("seated %s at %s", student_id, seat_id)
    return new_snapshot, new_snapshot.history[-1]
