"""Shift planning engine exposing primary components."""

from .domain.models import Employee, StatusShift, WorkedShift
from .domain.week import WeekSchedule
from .rules.mutations import validate_mutation
from .rules.conflicts import detect_conflicts
from .services.autosave import AutoSaveQueue
from .services.shift_store import ShiftStore
from .services.summary_service import compute_weekly_summary

__all__ = [
    "AutoSaveQueue",
    "Employee",
    "ShiftStore",
    "StatusShift",
    "WeekSchedule",
    "WorkedShift",
    "compute_weekly_summary",
    "detect_conflicts",
    "validate_mutation",
]
