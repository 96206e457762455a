"""Grid topology: seat ids and orthogonal adjacency."""

from __future__ import annotations

from typing import TYPE_CHECKING, FrozenSet, Mapping, Optional, Tuple

import re

if TYPE_CHECKING:
    from .models import Seat


_SEAT_ID_RE = re.compile(r"^R(\d+)C(\d+)$")


def format_seat_id(row: int, col: int) -> str:
    return f"R{int(row)}C{int(col)}"


def parse_seat_id(seat_id: str) -> Optional[Tuple[int, int]]:
    """Return (row, col) for an id like "R3C4", or None if it does not parse."""

    if not isinstance(seat_id, str):
        return None
    m = _SEAT_ID_RE.match(seat_id)
    if not m:
        return None
    return int(m.group(1)), int(m.group(2))


def adjacent_seats(seat_id: str, seats: Mapping[str, "Seat"]) -> FrozenSet[str]:
    """Seats directly above, below, left and right of `seat_id`.

    A neighbour counts only if its id is present in `seats` (usable or not).
    No diagonals, no wraparound. Unparseable ids yield an empty set.
    """

    rc = parse_seat_id(seat_id)
    if rc is None:
        return frozenset()
    row, col = rc

    candidates = (
        format_seat_id(row - 1, col),
        format_seat_id(row + 1, col),
        format_seat_id(row, col - 1),
        format_seat_id(row, col + 1),
    )
    return frozenset(c for c in candidates if c != seat_id and c in seats)


def grid_bounds(seats: Mapping[str, "Seat"]) -> Tuple[int, int]:
    """(max_row, max_col) over the seat map, (0, 0) when empty."""

    if not seats:
        return 0, 0
    return max(s.row for s in seats.values()), max(s.col for s in seats.values())
