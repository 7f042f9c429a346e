"""Domain objects for shift planning."""

from .errors import (
    ConcurrentModificationError,
    InvalidShiftError,
    MaxShiftsExceededError,
    OutOfContractPeriodError,
    OverlapError,
    PersistError,
    ShiftRuleError,
    UnknownEmployeeError,
    UnknownShiftError,
)
from .models import (
    AvailabilityPeriod,
    AvailabilityType,
    Employee,
    PreferenceSet,
    Recurrence,
    Shift,
    StatusShift,
    WeeklySummary,
    WorkedShift,
    shift_from_record,
    shift_to_record,
)
from .status_codes import DailyStatusCode, HoursPolicy
from .week import WeekSchedule, parse_week, week_start_for

__all__ = [
    "AvailabilityPeriod",
    "AvailabilityType",
    "ConcurrentModificationError",
    "DailyStatusCode",
    "Employee",
    "HoursPolicy",
    "InvalidShiftError",
    "MaxShiftsExceededError",
    "OutOfContractPeriodError",
    "OverlapError",
    "PersistError",
    "PreferenceSet",
    "Recurrence",
    "Shift",
    "ShiftRuleError",
    "StatusShift",
    "UnknownEmployeeError",
    "UnknownShiftError",
    "WeekSchedule",
    "WeeklySummary",
    "WorkedShift",
    "parse_week",
    "shift_from_record",
    "shift_to_record",
    "week_start_for",
]
