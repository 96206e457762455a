"""Batch assignment: seat every remaining student in one call.

Phase 1 commits fixed seats. A student whose fixed seat cannot be taken stays
unseated; a fixed seat is never swapped for a random one. Phase 2 shuffles the
remaining students and the remaining free seats independently, then gives each
student the first admissible seat in the shuffled seat list. Earlier commits
in the same run are visible to later admissibility checks.

Failures of single entries are collected, never raised: a batch is
best-effort and the caller decides whether to adjust relations and run again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

import logging
import random

from .constraints import is_admissible, violated_relations
from .errors import NoAvailableSeats, NoTargetStudent, PartialBatchFailure
from .models import HistoryEntry, SeatingSnapshot
from .settings import SeatingSettings


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchResult:
    """Outcome of one batch run.

    snapshot: the new snapshot (includes every commit of this run)
    committed: history entries added by this run, in commit order
    errors: human-readable messages, one per skipped fixed entry or unseated student
    unseated_reasons: student_id -> reason, for students left without a seat
    """

    snapshot: SeatingSnapshot
    committed: Tuple[HistoryEntry, ...] = ()
    errors: Tuple[str, ...] = ()
    unseated_reasons: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def unseated_student_ids(self) -> Tuple[str, ...]:
        return tuple(self.unseated_reasons.keys())

    @property
    def partial_failure(self) -> Optional[PartialBatchFailure]:
        if not self.unseated_reasons:
            return None
        return PartialBatchFailure(self.unseated_reasons)


def _check_preconditions(snapshot: SeatingSnapshot, settings: SeatingSettings) -> None:
    unassigned = snapshot.unassigned_students()
    available = snapshot.available_seats()

    if not unassigned:
        raise NoTargetStudent("There are no unassigned students to seat")
    if not available:
        raise NoAvailableSeats("No free seats are left")
    if settings.precheck_capacity and len(unassigned) > len(available):
        raise NoAvailableSeats(
            f"{len(unassigned)} unassigned students but only {len(available)} free seats"
        )


def _apply_fixed(
    snapshot: SeatingSnapshot,
    committed: List[HistoryEntry],
    errors: List[str],
    blocked: Dict[str, str],
) -> SeatingSnapshot:
    """Commit fixed seats. Students whose fixed seat cannot be taken go to `blocked`."""

    used_students: Set[str] = set()
    used_seats: Set[str] = set()

    def skip(student_id: str, message: str) -> None:
        errors.append(message)
        blocked.setdefault(student_id, message)

    for fa in snapshot.fixed_assignments:
        student = snapshot.students.get(fa.student_id)
        seat = snapshot.seats.get(fa.seat_id)

        if student is None:
            errors.append(f"Fixed seat {fa.seat_id}: unknown student {fa.student_id}")
            continue
        if fa.student_id in used_students:
            errors.append(f"Student {fa.student_id} has more than one fixed seat; skipped {fa.seat_id}")
            continue
        if student.is_assigned and student.assigned_seat_id != fa.seat_id:
            errors.append(
                f"Student {fa.student_id} already sits at {student.assigned_seat_id}, not fixed seat {fa.seat_id}"
            )
            continue
        if seat is None:
            skip(fa.student_id, f"Fixed seat for {fa.student_id}: unknown seat {fa.seat_id}")
            continue
        if not seat.is_usable:
            skip(fa.student_id, f"Fixed seat {fa.seat_id} for {fa.student_id} is not usable")
            continue
        if fa.seat_id in used_seats:
            skip(fa.student_id, f"Fixed seat {fa.seat_id} is already taken in this run; skipped {fa.student_id}")
            continue

        if student.assigned_seat_id == fa.seat_id:
            # Seated there by an earlier draw.
            used_students.add(fa.student_id)
            used_seats.add(fa.seat_id)
            continue
        if seat.assigned_student_id is not None:
            skip(fa.student_id, f"Fixed seat {fa.seat_id} for {fa.student_id} is occupied by {seat.assigned_student_id}")
            continue

        snapshot = snapshot.with_assignment(fa.student_id, fa.seat_id)
        committed.append(snapshot.history[-1])
        used_students.add(fa.student_id)
        used_seats.add(fa.seat_id)
        blocked.pop(fa.student_id, None)

    return snapshot


def _unseated_reason(snapshot: SeatingSnapshot, student_id: str, tried: List[str]) -> str:
    if not tried:
        return "no free seat left"
    student = snapshot.students[student_id]
    partners: Set[str] = set()
    for seat_id in tried:
        for rel in violated_relations(seat_id, student, snapshot.seats, snapshot.students, snapshot.relations):
            partners.add(f"{rel.relation_type.value}:{rel.partner_of(student_id)}")
    detail = ", ".join(sorted(partners)) if partners else "relations"
    return f"no free seat satisfies {detail}"


def assign_all(
    snapshot: SeatingSnapshot,
    *,
    settings: SeatingSettings = SeatingSettings(),
    rng: Optional[random.Random] = None,
) -> BatchResult:
    """Seat all remaining students.

    Raises `NoTargetStudent` / `NoAvailableSeats` before touching anything when
    there is nothing to do. Otherwise returns a `BatchResult`, possibly with
    errors for entries that could not be honoured.
    """

    rng = rng or random.Random()
    _check_preconditions(snapshot, settings)

    committed: List[HistoryEntry] = []
    errors: List[str] = []
    unseated: Dict[str, str] = {}
    blocked: Dict[str, str] = {}

    # Phase 1: fixed seats
    snapshot = _apply_fixed(snapshot, committed, errors, blocked)
    for student_id, reason in blocked.items():
        unseated[student_id] = reason
        logger.warning("batch left %s unseated: %s", student_id, reason)

    # Phase 2: everyone else, both lists shuffled independently
    students = [s.student_id for s in snapshot.unassigned_students() if s.student_id not in blocked]
    seats = [s.seat_id for s in snapshot.available_seats()]
    rng.shuffle(students)
    rng.shuffle(seats)

    for student_id in students:
        chosen_idx: Optional[int] = None
        for idx, seat_id in enumerate(seats):
            if is_admissible(seat_id, snapshot.students[student_id], snapshot.seats, snapshot.students, snapshot.relations):
                chosen_idx = idx
                break

        if chosen_idx is None:
            reason = _unseated_reason(snapshot, student_id, seats)
            unseated[student_id] = reason
            errors.append(f"Student {student_id}: {reason}")
            logger.warning("batch could not seat %s: %s", student_id, reason)
            continue

        seat_id = seats.pop(chosen_idx)
        snapshot = snapshot.with_assignment(student_id, seat_id)
        committed.append(snapshot.history[-1])

    logger.info("batch seated %d student(s), %d error(s)", len(committed), len(errors))

    return BatchResult(
        snapshot=snapshot,
        committed=tuple(committed),
        errors=tuple(errors),
        unseated_reasons=unseated,
    )
