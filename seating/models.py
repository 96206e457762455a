"""Seating data model.

Everything here is plain data. Student rosters, seat maps, relations and fixed
seats are produced by import/layout screens elsewhere and handed to the engine
as a `SeatingSnapshot`. The resolvers never mutate a snapshot: they return a
new one, and the caller keeps whichever snapshot is current.

"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

import json
import re

from .settings import MAX_SEATS
from .topology import format_seat_id, parse_seat_id


_NUMBER_RE = re.compile(r"^\s*-?\d+(\.\d+)?\s*$")


# ----------------------------
# Records
# ----------------------------


class RelationType(str, Enum):
    MUST_CO_SEAT = "co_seat"
    MUST_NOT_CO_SEAT = "no_co_seat"

    @classmethod
    def parse(cls, value: "str | RelationType") -> "RelationType":
        if isinstance(value, RelationType):
            return value
        key = str(value).strip().lower()
        aliases = {
            "co_seat": cls.MUST_CO_SEAT,
            "must_co_seat": cls.MUST_CO_SEAT,
            "no_co_seat": cls.MUST_NOT_CO_SEAT,
            "must_not_co_seat": cls.MUST_NOT_CO_SEAT,
        }
        if key not in aliases:
            raise ValueError(f"Unknown relation type: {value!r}")
        return aliases[key]


@dataclass(frozen=True)
class Student:
    student_id: str
    number: str
    name: str = ""
    is_assigned: bool = False
    assigned_seat_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.is_assigned != (self.assigned_seat_id is not None):
            raise ValueError(f"Student {self.student_id}: is_assigned must match assigned_seat_id")

    def seated_at(self, seat_id: str) -> "Student":
        return replace(self, is_assigned=True, assigned_seat_id=seat_id)

    def unseated(self) -> "Student":
        return replace(self, is_assigned=False, assigned_seat_id=None)


@dataclass(frozen=True)
class Seat:
    seat_id: str
    row: int
    col: int
    is_usable: bool = True
    assigned_student_id: Optional[str] = None

    @property
    def is_available(self) -> bool:
        return self.is_usable and self.assigned_student_id is None


@dataclass(frozen=True)
class Relation:
    """Unordered pair of students plus a relation type."""

    student_id_1: str
    student_id_2: str
    relation_type: RelationType

    def involves(self, student_id: str) -> bool:
        return student_id in (self.student_id_1, self.student_id_2)

    def partner_of(self, student_id: str) -> str:
        return self.student_id_2 if self.student_id_1 == student_id else self.student_id_1


@dataclass(frozen=True)
class FixedSeatAssignment:
    student_id: str
    seat_id: str


@dataclass(frozen=True)
class HistoryEntry:
    student_id: str
    seat_id: str


def student_sort_key(student: Student) -> Tuple[int, float, str, str]:
    """Order students by attendance number, numerically where possible.

    Only plain decimals ("7", "12.5") count as numeric; anything else,
    including "nan" and "inf", sorts after them as text.
    """

    number = str(student.number)
    if _NUMBER_RE.match(number):
        return (0, float(number), "", student.student_id)
    return (1, 0.0, number, student.student_id)


# ----------------------------
# Snapshot
# ----------------------------


@dataclass(frozen=True)
class SeatingSnapshot:
    """One consistent view of students, seats, relations and history.

    students: student_id -> Student
    seats: seat_id -> Seat (row-major insertion order)
    """

    students: Dict[str, Student]
    seats: Dict[str, Seat]
    relations: Tuple[Relation, ...] = ()
    fixed_assignments: Tuple[FixedSeatAssignment, ...] = ()
    history: Tuple[HistoryEntry, ...] = ()

    def available_seats(self) -> List[Seat]:
        return [s for s in self.seats.values() if s.is_available]

    def unassigned_students(self) -> List[Student]:
        return sorted((s for s in self.students.values() if not s.is_assigned), key=student_sort_key)

    def fixed_seat_for(self, student_id: str) -> Optional[str]:
        for fa in self.fixed_assignments:
            if fa.student_id == student_id:
                return fa.seat_id
        return None

    def seat_of(self, student_id: str) -> Optional[Seat]:
        student = self.students.get(student_id)
        if student is None or student.assigned_seat_id is None:
            return None
        return self.seats.get(student.assigned_seat_id)

    def with_assignment(self, student_id: str, seat_id: str) -> "SeatingSnapshot":
        """Return a new snapshot with `student_id` seated at `seat_id`.

        Caller is responsible for checking the seat is free and usable.
        """

        students = dict(self.students)
        seats = dict(self.seats)
        students[student_id] = students[student_id].seated_at(seat_id)
        seats[seat_id] = replace(seats[seat_id], assigned_student_id=student_id)
        return replace(
            self,
            students=students,
            seats=seats,
            history=self.history + (HistoryEntry(student_id=student_id, seat_id=seat_id),),
        )

    def cleared(self) -> "SeatingSnapshot":
        """Drop every assignment and the history; keep relations and fixed seats."""

        students = {sid: s.unseated() for sid, s in self.students.items()}
        seats = {sid: replace(s, assigned_student_id=None) for sid, s in self.seats.items()}
        return replace(self, students=students, seats=seats, history=())


def check_snapshot_invariants(snapshot: SeatingSnapshot) -> List[str]:
    """Return a list of invariant violations (empty when consistent)."""

    problems: List[str] = []
    owner: Dict[str, str] = {}

    for sid, st in snapshot.students.items():
        if st.is_assigned != (st.assigned_seat_id is not None):
            problems.append(f"student {sid}: is_assigned/assigned_seat_id mismatch")
        if st.assigned_seat_id is None:
            continue
        if st.assigned_seat_id in owner:
            problems.append(f"seat {st.assigned_seat_id} held by {owner[st.assigned_seat_id]} and {sid}")
        owner[st.assigned_seat_id] = sid
        seat = snapshot.seats.get(st.assigned_seat_id)
        if seat is None:
            problems.append(f"student {sid}: unknown seat {st.assigned_seat_id}")
        elif seat.assigned_student_id != sid:
            problems.append(f"seat {seat.seat_id} does not point back to {sid}")

    for seat_id, seat in snapshot.seats.items():
        if seat.assigned_student_id is None:
            continue
        if not seat.is_usable:
            problems.append(f"seat {seat_id} is occupied but not usable")
        st = snapshot.students.get(seat.assigned_student_id)
        if st is None or st.assigned_seat_id != seat_id:
            problems.append(f"seat {seat_id} points to {seat.assigned_student_id} which is not seated there")

    return problems


# -------------------------------------------------
# Construction helpers
# -------------------------------------------------


def build_seat_grid(
    rows: int,
    cols: int,
    *,
    unusable: Iterable[str] = (),
    max_seats: int = MAX_SEATS,
) -> Dict[str, Seat]:
    """Generate a row-major grid of seats R1C1..R{rows}C{cols}."""

    rows = int(rows)
    cols = int(cols)
    if rows < 1 or cols < 1:
        raise ValueError("rows and cols must be >= 1")
    if rows * cols > max_seats:
        raise ValueError(f"Total seats ({rows * cols}) must not exceed {max_seats}")

    seats: Dict[str, Seat] = {}
    for r in range(1, rows + 1):
        for c in range(1, cols + 1):
            seat_id = format_seat_id(r, c)
            seats[seat_id] = Seat(seat_id=seat_id, row=r, col=c)

    for seat_id in unusable:
        if seat_id not in seats:
            raise ValueError(f"Unknown seat in unusable list: {seat_id}")
        seats[seat_id] = replace(seats[seat_id], is_usable=False)

    return seats


def _seats_from_raw(raw) -> Dict[str, Seat]:
    if isinstance(raw, dict):
        return build_seat_grid(
            int(raw["rows"]),
            int(raw["cols"]),
            unusable=raw.get("unusable", []),
            max_seats=int(raw.get("max_seats", MAX_SEATS)),
        )

    seats: Dict[str, Seat] = {}
    for s in raw:
        seat_id = str(s["seat_id"])
        rc = parse_seat_id(seat_id)
        if rc is None:
            raise ValueError(f"Invalid seat id: {seat_id!r}")
        seats[seat_id] = Seat(
            seat_id=seat_id,
            row=int(s.get("row", rc[0])),
            col=int(s.get("col", rc[1])),
            is_usable=bool(s.get("is_usable", True)),
        )
    return seats


def load_seating_problem_from_json(path: str) -> SeatingSnapshot:
    """Load a `SeatingSnapshot` (no assignments) from a JSON file.

    `seats` is either {"rows": 5, "cols": 6, "unusable": ["R1C1"]} or a list of
    {"seat_id": "R1C1", "is_usable": true} records.
    """

    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)

    students: Dict[str, Student] = {}
    for s in raw["students"]:
        sid = str(s["student_id"])
        if sid in students:
            raise ValueError(f"Duplicate student id: {sid}")
        students[sid] = Student(student_id=sid, number=str(s.get("number", "")), name=str(s.get("name", "")))

    seats = _seats_from_raw(raw["seats"])

    relations = tuple(
        Relation(
            student_id_1=str(r["student_id_1"]),
            student_id_2=str(r["student_id_2"]),
            relation_type=RelationType.parse(r["type"]),
        )
        for r in raw.get("relations", [])
    )

    fixed = tuple(
        FixedSeatAssignment(student_id=str(f["student_id"]), seat_id=str(f["seat_id"]))
        for f in raw.get("fixed_assignments", [])
    )

    return SeatingSnapshot(students=students, seats=seats, relations=relations, fixed_assignments=fixed)


def make_snapshot(
    students: Iterable[Student],
    seats: Dict[str, Seat],
    relations: Iterable[Relation] = (),
    fixed_assignments: Iterable[FixedSeatAssignment] = (),
) -> SeatingSnapshot:
    """Convenience constructor from a student list."""

    return SeatingSnapshot(
        students={s.student_id: s for s in students},
        seats=dict(seats),
        relations=tuple(relations),
        fixed_assignments=tuple(fixed_assignments),
    )
