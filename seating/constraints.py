"""Relation constraints between students.

A relation only binds once the partner has a seat. Until then it is skipped,
so "must sit together" is checked against whoever was seated first and is not
re-validated later. Both resolvers and the session check go through
`is_admissible`, which is the single source of truth for seat validity.
"""

from __future__ import annotations

from typing import Iterable, List, Mapping, Optional

import logging

from .models import Relation, RelationType, Seat, Student
from .topology import adjacent_seats


logger = logging.getLogger(__name__)


def relations_for(student_id: str, relations: Iterable[Relation]) -> List[Relation]:
    return [r for r in relations if r.involves(student_id)]


def violated_relations(
    target_seat_id: str,
    student: Optional[Student],
    seats: Mapping[str, Seat],
    students: Mapping[str, Student],
    relations: Iterable[Relation],
) -> List[Relation]:
    """Relations that rule out `target_seat_id` for `student`."""

    if student is None:
        return []

    adjacent = None
    violated: List[Relation] = []

    for rel in relations:
        if not rel.involves(student.student_id):
            continue

        partner = students.get(rel.partner_of(student.student_id))
        if partner is None or not partner.is_assigned or partner.assigned_seat_id is None:
            continue

        if adjacent is None:
            adjacent = adjacent_seats(target_seat_id, seats)

        next_to_partner = partner.assigned_seat_id in adjacent
        if rel.relation_type is RelationType.MUST_CO_SEAT and not next_to_partner:
            violated.append(rel)
        elif rel.relation_type is RelationType.MUST_NOT_CO_SEAT and next_to_partner:
            violated.append(rel)

    return violated


def is_admissible(
    target_seat_id: str,
    student: Optional[Student],
    seats: Mapping[str, Seat],
    students: Mapping[str, Student],
    relations: Iterable[Relation],
) -> bool:
    """True if seating `student` at `target_seat_id` breaks no relation.

    A missing student fails closed.
    """

    if student is None:
        return False

    violated = violated_relations(target_seat_id, student, seats, students, relations)
    if violated:
        logger.debug(
            "seat %s rejected for %s: %s",
            target_seat_id,
            student.student_id,
            ", ".join(f"{r.relation_type.value}({r.partner_of(student.student_id)})" for r in violated),
        )
        return False
    return True
