from __future__ import annotations

from typing import Dict, List

import pandas as pd

from seating.models import SeatingSnapshot
from seating.topology import format_seat_id, grid_bounds


UNUSABLE_LABEL = "(unusable)"


def format_history_as_rows(snapshot: SeatingSnapshot) -> List[Dict[str, str]]:
    """Committed assignments in commit order, as table rows."""

    rows: List[Dict[str, str]] = []
    for i, entry in enumerate(snapshot.history, start=1):
        student = snapshot.students.get(entry.student_id)
        rows.append(
            {
                "order": str(i),
                "student_id": entry.student_id,
                "number": student.number if student else "",
                "name": student.name if student else "",
                "seat_id": entry.seat_id,
            }
        )
    return rows


def history_df(snapshot: SeatingSnapshot) -> pd.DataFrame:
    return pd.DataFrame(
        format_history_as_rows(snapshot),
        columns=["order", "student_id", "number", "name", "seat_id"],
    )


def seating_table_df(snapshot: SeatingSnapshot) -> pd.DataFrame:
    """One row per grid cell (row-major), with the seated student if any.

    Cells missing from the seat map are skipped.
    """

    max_row, max_col = grid_bounds(snapshot.seats)

    rows = []
    for r in range(1, max_row + 1):
        for c in range(1, max_col + 1):
            seat = snapshot.seats.get(format_seat_id(r, c))
            if seat is None:
                continue

            student = snapshot.students.get(seat.assigned_student_id) if seat.assigned_student_id else None
            if not seat.is_usable:
                status = "unusable"
            elif student is not None:
                status = "assigned"
            else:
                status = "empty"

            rows.append(
                {
                    "row": r,
                    "col": c,
                    "seat_id": seat.seat_id,
                    "student_id": student.student_id if student else "",
                    "number": student.number if student else "",
                    "name": student.name if student else "",
                    "status": status,
                }
            )

    return pd.DataFrame(rows, columns=["row", "col", "seat_id", "student_id", "number", "name", "status"])


def seating_grid_df(snapshot: SeatingSnapshot, *, label: str = "name") -> pd.DataFrame:
    """Rows x cols grid of seat labels, row 1 at the top.

    label: which student field to show ("name", "number" or "student_id").
    """

    if label not in {"name", "number", "student_id"}:
        raise ValueError("label must be one of: name, number, student_id")

    max_row, max_col = grid_bounds(snapshot.seats)

    table: List[List[str]] = []
    for r in range(1, max_row + 1):
        out_row: List[str] = []
        for c in range(1, max_col + 1):
            seat = snapshot.seats.get(format_seat_id(r, c))
            if seat is None:
                out_row.append("")
            elif not seat.is_usable:
                out_row.append(UNUSABLE_LABEL)
            elif seat.assigned_student_id is None:
                out_row.append("")
            else:
                student = snapshot.students.get(seat.assigned_student_id)
                value = getattr(student, label, "") if student else ""
                out_row.append(str(value) or seat.assigned_student_id)
        table.append(out_row)

    df = pd.DataFrame(table, columns=[f"C{c}" for c in range(1, max_col + 1)])
    df.insert(0, "ROW", [f"R{r}" for r in range(1, max_row + 1)])
    return df


def df_to_markdown(df: pd.DataFrame) -> str:
    """Convert DataFrame to a GitHub-flavored Markdown table."""

    # pandas to_markdown requires tabulate; avoid the extra dependency.
    cols = list(df.columns)
    rows = df.astype(str).values.tolist()

    def esc(s: str) -> str:
        return str(s).replace("\n", " ").replace("|", "\\|")

    header = "| " + " | ".join(esc(c) for c in cols) + " |"
    sep = "| " + " | ".join(["---"] * len(cols)) + " |"
    body = ["| " + " | ".join(esc(v) for v in r) + " |" for r in rows]
    return "\n".join([header, sep] + body) + "\n"
