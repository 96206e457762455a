import json
import sys
from pathlib import Path

import pytest

# Ensure project root is on PYTHONPATH
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from seating.models import (
    RelationType,
    Student,
    build_seat_grid,
    check_snapshot_invariants,
    load_seating_problem_from_json,
    make_snapshot,
)
from seating.settings import MAX_SEATS, SEED_ENV_VAR, SeatingSettings, default_seed


def test_build_seat_grid_row_major_with_unusable():
    seats = build_seat_grid(2, 3, unusable=["R2C2"])
    assert list(seats) == ["R1C1", "R1C2", "R1C3", "R2C1", "R2C2", "R2C3"]
    assert seats["R2C3"].row == 2 and seats["R2C3"].col == 3
    assert not seats["R2C2"].is_usable
    assert not seats["R2C2"].is_available


def test_build_seat_grid_limits():
    assert len(build_seat_grid(10, 10)) == MAX_SEATS
    with pytest.raises(ValueError):
        build_seat_grid(11, 10)
    with pytest.raises(ValueError):
        build_seat_grid(0, 3)
    with pytest.raises(ValueError):
        build_seat_grid(2, 2, unusable=["R3C3"])


def test_student_assignment_fields_must_agree():
    with pytest.raises(ValueError):
        Student("S1", "1", is_assigned=True)
    with pytest.raises(ValueError):
        Student("S1", "1", assigned_seat_id="R1C1")

    s = Student("S1", "1").seated_at("R1C1")
    assert s.is_assigned and s.assigned_seat_id == "R1C1"
    assert s.unseated() == Student("S1", "1")


def test_unassigned_students_sorted_by_number():
    snap = make_snapshot(
        [Student("a", "10"), Student("b", "9"), Student("c", "x"), Student("d", "1")],
        build_seat_grid(2, 2),
    )
    assert [s.student_id for s in snap.unassigned_students()] == ["d", "b", "a", "c"]


def test_non_finite_numbers_sort_as_text():
    snap = make_snapshot(
        [Student("A", "3"), Student("B", "nan"), Student("C", "1"), Student("D", "inf"), Student("E", "1e3")],
        build_seat_grid(2, 3),
    )
    assert [s.student_id for s in snap.unassigned_students()] == ["C", "A", "E", "D", "B"]


def test_with_assignment_and_cleared():
    snap = make_snapshot([Student("S1", "1"), Student("S2", "2")], build_seat_grid(1, 2))
    seated = snap.with_assignment("S1", "R1C2")

    assert seated.seat_of("S1").seat_id == "R1C2"
    assert seated.seats["R1C2"].assigned_student_id == "S1"
    assert [s.seat_id for s in seated.available_seats()] == ["R1C1"]
    assert len(seated.history) == 1
    assert check_snapshot_invariants(seated) == []

    # input snapshot untouched
    assert snap.seat_of("S1") is None
    assert snap.history == ()

    cleared = seated.cleared()
    assert cleared.history == ()
    assert all(not s.is_assigned for s in cleared.students.values())
    assert check_snapshot_invariants(cleared) == []


def test_invariant_checker_reports_dangling_seat():
    snap = make_snapshot([Student("S1", "1")], build_seat_grid(1, 2))
    seats = dict(snap.seats)
    from dataclasses import replace

    seats["R1C1"] = replace(seats["R1C1"], assigned_student_id="S1")
    broken = replace(snap, seats=seats)
    assert check_snapshot_invariants(broken)


def test_relation_type_parse_aliases():
    assert RelationType.parse("co_seat") is RelationType.MUST_CO_SEAT
    assert RelationType.parse("MUST_NOT_CO_SEAT") is RelationType.MUST_NOT_CO_SEAT
    with pytest.raises(ValueError):
        RelationType.parse("friends")


def test_load_problem_grid_form(tmp_path):
    p = tmp_path / "problem.json"
    p.write_text(
        json.dumps(
            {
                "students": [
                    {"student_id": "S1", "number": 1, "name": "Ana"},
                    {"student_id": "S2", "number": 2},
                ],
                "seats": {"rows": 2, "cols": 2, "unusable": ["R1C1"]},
                "relations": [{"student_id_1": "S1", "student_id_2": "S2", "type": "must_not_co_seat"}],
                "fixed_assignments": [{"student_id": "S2", "seat_id": "R2C2"}],
            }
        ),
        encoding="utf-8",
    )

    snap = load_seating_problem_from_json(str(p))
    assert snap.students["S1"].number == "1"
    assert snap.students["S1"].name == "Ana"
    assert not snap.seats["R1C1"].is_usable
    assert snap.relations[0].relation_type is RelationType.MUST_NOT_CO_SEAT
    assert snap.fixed_seat_for("S2") == "R2C2"
    assert snap.fixed_seat_for("S1") is None


def test_load_problem_list_form_and_errors(tmp_path):
    p = tmp_path / "problem.json"
    p.write_text(
        json.dumps(
            {
                "students": [{"student_id": "S1", "number": "1"}],
                "seats": [{"seat_id": "R1C1"}, {"seat_id": "R1C3", "is_usable": False}],
            }
        ),
        encoding="utf-8",
    )
    snap = load_seating_problem_from_json(str(p))
    assert set(snap.seats) == {"R1C1", "R1C3"}
    assert snap.seats["R1C3"].col == 3
    assert not snap.seats["R1C3"].is_usable

    dup = tmp_path / "dup.json"
    dup.write_text(
        json.dumps({"students": [{"student_id": "S1"}, {"student_id": "S1"}], "seats": {"rows": 1, "cols": 1}}),
        encoding="utf-8",
    )
    with pytest.raises(ValueError):
        load_seating_problem_from_json(str(dup))

    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"students": [], "seats": [{"seat_id": "A1"}]}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_seating_problem_from_json(str(bad))


def test_sample_problem_loads():
    snap = load_seating_problem_from_json(str(ROOT / "data" / "sample_seating_problem.json"))
    assert len(snap.students) == 16
    assert check_snapshot_invariants(snap) == []


def test_settings_validation():
    assert SeatingSettings().max_fallback_attempts == 100
    assert SeatingSettings().precheck_capacity is False
    with pytest.raises(ValueError):
        SeatingSettings(max_fallback_attempts=0)


def test_default_seed_from_env(monkeypatch):
    monkeypatch.delenv(SEED_ENV_VAR, raising=False)
    assert default_seed() is None

    monkeypatch.setenv(SEED_ENV_VAR, " 42 ")
    assert default_seed() == 42

    monkeypatch.setenv(SEED_ENV_VAR, "abc")
    with pytest.raises(ValueError):
        default_seed()
