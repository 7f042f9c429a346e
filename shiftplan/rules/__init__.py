"""Pure scheduling rules: contract window, overlap, hours, conflicts, mutations."""

from .conflicts import ConflictFlag, ConflictKind, detect_conflicts, flags_by_shift
from .contract_window import ContractWindow, active_roster, contract_window, window_for
from .hours import aggregate_week
from .mutations import Accepted, MutationKind, MutationRequest, MutationResult, Rejected, validate_mutation
from .overlap import MAX_SHIFTS_PER_DAY, ResolvedDay, ResolvedSegment, resolve_day, resolve_week

__all__ = [
    "Accepted",
    "ConflictFlag",
    "ConflictKind",
    "ContractWindow",
    "MAX_SHIFTS_PER_DAY",
    "MutationKind",
    "MutationRequest",
    "MutationResult",
    "Rejected",
    "ResolvedDay",
    "ResolvedSegment",
    "active_roster",
    "aggregate_week",
    "contract_window",
    "detect_conflicts",
    "flags_by_shift",
    "resolve_day",
    "resolve_week",
    "validate_mutation",
    "window_for",
]
