import sys
from pathlib import Path

# Ensure project root is on PYTHONPATH
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from seating.models import build_seat_grid
from seating.topology import adjacent_seats, format_seat_id, grid_bounds, parse_seat_id


def test_parse_and_format_seat_id():
    assert parse_seat_id("R3C12") == (3, 12)
    assert format_seat_id(3, 12) == "R3C12"

    for bad in ["", "R1", "C1R1", "r1c1", "R1C1x", "xR1C1", "R-1C2", None, 11]:
        assert parse_seat_id(bad) is None


def test_centre_seat_has_four_orthogonal_neighbours():
    seats = build_seat_grid(3, 3)
    assert adjacent_seats("R2C2", seats) == {"R1C2", "R3C2", "R2C1", "R2C3"}


def test_corner_and_edge_have_no_wraparound():
    seats = build_seat_grid(3, 3)
    assert adjacent_seats("R1C1", seats) == {"R1C2", "R2C1"}
    assert adjacent_seats("R3C2", seats) == {"R3C1", "R3C3", "R2C2"}


def test_unusable_seats_still_count_as_neighbours():
    seats = build_seat_grid(2, 2, unusable=["R1C2"])
    assert "R1C2" in adjacent_seats("R1C1", seats)


def test_missing_seats_are_not_neighbours():
    seats = build_seat_grid(3, 3)
    del seats["R1C2"]
    assert adjacent_seats("R2C2", seats) == {"R3C2", "R2C1", "R2C3"}


def test_unparseable_seat_id_returns_empty_set():
    seats = build_seat_grid(3, 3)
    assert adjacent_seats("nonsense", seats) == frozenset()
    assert adjacent_seats("R9C9", seats) == frozenset()


def test_adjacency_is_symmetric():
    seats = build_seat_grid(4, 5)
    for a in seats:
        for b in adjacent_seats(a, seats):
            assert a in adjacent_seats(b, seats)
        assert a not in adjacent_seats(a, seats)


def test_grid_bounds():
    assert grid_bounds({}) == (0, 0)
    assert grid_bounds(build_seat_grid(6, 7)) == (6, 7)
