"""Constraint-aware random seat assignment engine (roulette + batch)."""

from .batch import BatchResult, assign_all

from .constraints import is_admissible, relations_for, violated_relations

from .draw import choose_seat, resolve_draw

from .errors import (
	DrawComplete,
	DrawStateError,
	FixedSeatConflict,
	FixedSeatUnusable,
	ManualSeatInadmissible,
	ManualSeatUnavailable,
	NoAdmissibleSeatFound,
	NoAvailableSeats,
	NoTargetStudent,
	PartialBatchFailure,
	SeatingError,
	StudentAlreadyAssigned,
	UnknownStudent,
)

from .models import (
	FixedSeatAssignment,
	HistoryEntry,
	Relation,
	RelationType,
	Seat,
	SeatingSnapshot,
	Student,
	build_seat_grid,
	check_snapshot_invariants,
	load_seating_problem_from_json,
	make_snapshot,
)

from .session import AssignmentState, DrawPhase, SeatingSession

from .settings import MAX_FALLBACK_ATTEMPTS, MAX_SEATS, SeatingSettings

from .topology import adjacent_seats, format_seat_id, parse_seat_id

__all__ = [
	"BatchResult",
	"assign_all",
	"is_admissible",
	"relations_for",
	"violated_relations",
	"choose_seat",
	"resolve_draw",
	"DrawComplete",
	"DrawStateError",
	"FixedSeatConflict",
	"FixedSeatUnusable",
	"ManualSeatInadmissible",
	"ManualSeatUnavailable",
	"NoAdmissibleSeatFound",
	"NoAvailableSeats",
	"NoTargetStudent",
	"PartialBatchFailure",
	"SeatingError",
	"StudentAlreadyAssigned",
	"UnknownStudent",
	"FixedSeatAssignment",
	"HistoryEntry",
	"Relation",
	"RelationType",
	"Seat",
	"SeatingSnapshot",
	"Student",
	"build_seat_grid",
	"check_snapshot_invariants",
	"load_seating_problem_from_json",
	"make_snapshot",
	"AssignmentState",
	"DrawPhase",
	"SeatingSession",
	"MAX_FALLBACK_ATTEMPTS",
	"MAX_SEATS",
	"SeatingSettings",
	"adjacent_seats",
	"format_seat_id",
	"parse_seat_id",
]
