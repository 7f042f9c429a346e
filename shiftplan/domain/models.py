"""Domain dataclasses for shift planning."""
from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional, Union

from .clock import is_hhmm, span_minutes
from .errors import InvalidShiftError
from .status_codes import DailyStatusCode, parse_status

DAYS_IN_WEEK = 7
DEFAULT_WEEKLY_HOURS = 35.0


def new_id() -> str:
    return uuid.uuid4().hex


def _coerce_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def _coerce_day(value: Any) -> Any:
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    return value


_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off", ""}


def _coerce_flag(value: Any, name: str) -> bool:
    if value is None or isinstance(value, bool):
        return bool(value)
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in _TRUE | _FALSE:
        return value.strip().lower() in _TRUE
    raise InvalidShiftError(f"{name} must be a boolean, got {value!r}")


def _check_day(day: int) -> None:
    if not isinstance(day, int) or isinstance(day, bool) or not 0 <= day < DAYS_IN_WEEK:
        raise InvalidShiftError(f"Day must be an integer 0-6 (Monday=0), got {day!r}")


@dataclass(frozen=True)
class Employee:
    id: str
    contract_start: date
    contract_end: Optional[date] = None
    weekly_hours_target: float = DEFAULT_WEEKLY_HOURS
    position: str = ""
    category: str = ""
    name: str = ""

    def __post_init__(self) -> None:
        if self.contract_end is not None and self.contract_end < self.contract_start:
            raise ValueError("contract_end must be >= contract_start")
        if self.weekly_hours_target < 0:
            raise ValueError("weekly_hours_target must be >= 0")

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Employee":
        start = _coerce_date(record.get("contract_start"))
        if start is None:
            raise ValueError("contract_start is required")
        hours = record.get("weekly_hours_target")
        return cls(
            id=str(record["id"]),
            contract_start=start,
            contract_end=_coerce_date(record.get("contract_end")),
            weekly_hours_target=float(hours) if hours not in (None, "") else DEFAULT_WEEKLY_HOURS,
            position=record.get("position") or "",
            category=record.get("category") or "",
            name=record.get("name") or "",
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "position": self.position,
            "category": self.category,
            "weekly_hours_target": self.weekly_hours_target,
            "contract_start": self.contract_start.isoformat(),
            "contract_end": self.contract_end.isoformat() if self.contract_end else None,
        }


@dataclass(frozen=True)
class WorkedShift:
    """A shift with a real time range.

    A public holiday the employee actually worked is a worked shift with
    ``is_holiday_worked`` set; its ``status`` then reads ``PUBLIC_HOLIDAY``.
    """

    id: str
    employee_id: str
    day: int
    start: str
    end: str
    position_label: str = ""
    has_coupure: bool = False
    shift_group: Optional[str] = None
    is_holiday_worked: bool = False
    notes: str = ""

    def __post_init__(self) -> None:
        _check_day(self.day)
        for value in (self.start, self.end):
            if not is_hhmm(value):
                raise InvalidShiftError(f"Invalid clock time {value!r}, expected HH:MM")
        if self.start == self.end:
            raise InvalidShiftError(f"Shift {self.id} starts and ends at {self.start}")

    @property
    def status(self) -> Optional[DailyStatusCode]:
        return DailyStatusCode.PUBLIC_HOLIDAY if self.is_holiday_worked else None

    @property
    def duration_minutes(self) -> int:
        return span_minutes(self.start, self.end)

    @property
    def is_overnight(self) -> bool:
        return self.end < self.start

    def date_in(self, week_start: date) -> date:
        return week_start + timedelta(days=self.day)


@dataclass(frozen=True)
class StatusShift:
    """A non-worked day marker (leave, rest, absence, holiday off)."""

    id: str
    employee_id: str
    day: int
    status: DailyStatusCode
    position_label: str = ""
    notes: str = ""

    def __post_init__(self) -> None:
        _check_day(self.day)
        if not isinstance(self.status, DailyStatusCode):
            raise InvalidShiftError(f"Invalid status {self.status!r}")

    def date_in(self, week_start: date) -> date:
        return week_start + timedelta(days=self.day)


Shift = Union[WorkedShift, StatusShift]


def shift_from_record(record: Mapping[str, Any]) -> Shift:
    """Build the right shift variant from a loose record (JSON body, DB row)."""

    try:
        status = parse_status(record.get("status"))
    except ValueError as exc:
        raise InvalidShiftError(str(exc)) from exc
    start = record.get("start") or None
    end = record.get("end") or None
    holiday_worked = _coerce_flag(record.get("is_holiday_worked"), "is_holiday_worked")
    common = {
        "id": str(record.get("id") or new_id()),
        "employee_id": str(record.get("employee_id") or ""),
        "day": _coerce_day(record.get("day")),
        "position_label": record.get("position_label") or record.get("position") or "",
        "notes": record.get("notes") or "",
    }
    if not common["employee_id"]:
        raise InvalidShiftError("employee_id is required")

    has_times = start is not None and end is not None
    if (start is None) != (end is None):
        raise InvalidShiftError("start and end must be given together")

    if holiday_worked:
        if status not in (None, DailyStatusCode.PUBLIC_HOLIDAY):
            raise InvalidShiftError("is_holiday_worked only applies to PUBLIC_HOLIDAY")
        if not has_times:
            raise InvalidShiftError("A worked public holiday needs start and end")
    elif status is not None and has_times:
        raise InvalidShiftError(f"A {status.value} day cannot carry working hours")

    if status is not None and not holiday_worked:
        return StatusShift(status=status, **common)
    if not has_times:
        raise InvalidShiftError("A shift needs either a status or start and end")
    return WorkedShift(
        start=start,
        end=end,
        has_coupure=_coerce_flag(record.get("has_coupure"), "has_coupure"),
        shift_group=record.get("shift_group") or None,
        is_holiday_worked=holiday_worked,
        **common,
    )


def shift_to_record(shift: Shift) -> Dict[str, Any]:
    record: Dict[str, Any] = {
        "id": shift.id,
        "employee_id": shift.employee_id,
        "day": shift.day,
        "position_label": shift.position_label,
        "notes": shift.notes,
        "status": shift.status.value if shift.status else None,
        "start": None,
        "end": None,
        "has_coupure": False,
        "shift_group": None,
        "is_holiday_worked": False,
    }
    if isinstance(shift, WorkedShift):
        record.update(
            start=shift.start,
            end=shift.end,
            has_coupure=shift.has_coupure,
            shift_group=shift.shift_group,
            is_holiday_worked=shift.is_holiday_worked,
        )
    return record


class AvailabilityType(str, Enum):
    UNAVAILABLE = "UNAVAILABLE"
    LIMITED = "LIMITED"


class Recurrence(str, Enum):
    ONCE = "ONCE"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


@dataclass(frozen=True)
class AvailabilityPeriod:
    employee_id: str
    type: AvailabilityType
    start: str
    end: str
    recurrence: Recurrence = Recurrence.WEEKLY
    day_of_week: Optional[int] = None
    on_date: Optional[date] = None
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        for value in (self.start, self.end):
            if not is_hhmm(value):
                raise ValueError(f"Invalid clock time {value!r}, expected HH:MM")
        if self.recurrence is Recurrence.ONCE and self.on_date is None:
            raise ValueError("A one-off availability period needs a date")
        if self.recurrence is Recurrence.WEEKLY and self.day_of_week is None:
            raise ValueError("A weekly availability period needs day_of_week")
        if self.recurrence is Recurrence.MONTHLY and self.day_of_week is None and self.on_date is None:
            raise ValueError("A monthly availability period needs day_of_week or date")
        if self.day_of_week is not None and not 0 <= self.day_of_week < DAYS_IN_WEEK:
            raise ValueError("day_of_week must be 0-6 (Monday=0)")

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "AvailabilityPeriod":
        day_of_week = record.get("day_of_week")
        return cls(
            id=str(record.get("id") or new_id()),
            employee_id=str(record["employee_id"]),
            type=AvailabilityType(str(record.get("type", "UNAVAILABLE")).upper()),
            start=record["start"],
            end=record["end"],
            recurrence=Recurrence(str(record.get("recurrence", "WEEKLY")).upper()),
            day_of_week=int(day_of_week) if day_of_week not in (None, "") else None,
            on_date=_coerce_date(record.get("date")),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "type": self.type.value,
            "start": self.start,
            "end": self.end,
            "recurrence": self.recurrence.value,
            "day_of_week": self.day_of_week,
            "date": self.on_date.isoformat() if self.on_date else None,
        }


@dataclass(frozen=True)
class PreferenceSet:
    employee_id: str
    preferred_days: FrozenSet[int] = frozenset()
    preferred_positions: FrozenSet[str] = frozenset()

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "PreferenceSet":
        return cls(
            employee_id=str(record["employee_id"]),
            preferred_days=frozenset(int(d) for d in record.get("preferred_days") or ()),
            preferred_positions=frozenset(record.get("preferred_positions") or ()),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "employee_id": self.employee_id,
            "preferred_days": sorted(self.preferred_days),
            "preferred_positions": sorted(self.preferred_positions),
        }


@dataclass(frozen=True)
class WeeklySummary:
    employee_id: str
    total_worked_hours: float
    total_assimilated_hours: float
    total_public_holiday_hours: float
    pro_rated_contract_hours: float
    hours_diff: float
    shift_count: int
    total_break_hours: float = 0.0
    active_days: int = DAYS_IN_WEEK

    @property
    def is_overtime(self) -> bool:
        return self.hours_diff > 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = [
    "AvailabilityPeriod",
    "AvailabilityType",
    "DAYS_IN_WEEK",
    "DEFAULT_WEEKLY_HOURS",
    "Employee",
    "PreferenceSet",
    "Recurrence",
    "Shift",
    "StatusShift",
    "WeeklySummary",
    "WorkedShift",
    "new_id",
    "shift_from_record",
    "shift_to_record",
]
