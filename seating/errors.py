"""Error types raised by the seating engine.

Every error is recoverable by the caller: the engine leaves the snapshot
consistent and reports the specific kind instead of aborting.
"""

from __future__ import annotations

from typing import Dict, Optional


class SeatingError(Exception):
    """Base class for seating engine errors."""

    code = "seating_error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code


class NoAvailableSeats(SeatingError):
    code = "no_available_seats"


class NoTargetStudent(SeatingError):
    code = "no_target_student"


class FixedSeatUnusable(SeatingError):
    code = "fixed_seat_unusable"


class FixedSeatConflict(SeatingError):
    code = "fixed_seat_conflict"


class ManualSeatInadmissible(SeatingError):
    code = "manual_seat_inadmissible"


class ManualSeatUnavailable(SeatingError):
    code = "manual_seat_unavailable"


class NoAdmissibleSeatFound(SeatingError):
    code = "no_admissible_seat_found"


class PartialBatchFailure(SeatingError):
    """Some students could not be seated by a batch run.

    Assignments committed by the same run stay valid.
    """

    code = "partial_batch_failure"

    def __init__(self, per_student_reasons: Dict[str, str], message: Optional[str] = None):
        self.per_student_reasons = dict(per_student_reasons)
        super().__init__(message or f"{len(self.per_student_reasons)} student(s) could not be seated")


class DrawStateError(SeatingError):
    code = "draw_state_error"


class DrawComplete(SeatingError):
    code = "draw_complete"


class UnknownStudent(SeatingError):
    code = "unknown_student"


class StudentAlreadyAssigned(SeatingError):
    code = "student_already_assigned"
