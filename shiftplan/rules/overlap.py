"""Same-day segment ordering, overlap detection and coupure breaks."""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from shiftplan.domain.clock import to_minutes
from shiftplan.domain.errors import MaxShiftsExceededError, OverlapError
from shiftplan.domain.models import DAYS_IN_WEEK, Shift, StatusShift, WorkedShift
from shiftplan.domain.status_codes import DailyStatusCode

MAX_SHIFTS_PER_DAY = 2


@dataclass(frozen=True)
class ResolvedSegment:
    shift: WorkedShift
    start_minute: int
    end_minute: int  # may exceed 1440 for overnight shifts

    @property
    def duration_minutes(self) -> int:
        return self.end_minute - self.start_minute

    @property
    def shift_id(self) -> str:
        return self.shift.id

    @property
    def is_holiday_worked(self) -> bool:
        return self.shift.is_holiday_worked


@dataclass(frozen=True)
class ResolvedDay:
    day: int
    segments: Tuple[ResolvedSegment, ...] = ()
    statuses: Tuple[StatusShift, ...] = ()
    break_minutes: int = 0

    @property
    def has_coupure(self) -> bool:
        # Derived from the segment count; the stored has_coupure flag is UI metadata.
        return len(self.segments) >= 2

    @property
    def worked_minutes(self) -> int:
        return sum(s.duration_minutes for s in self.segments)

    @property
    def holiday_worked_minutes(self) -> int:
        return sum(s.duration_minutes for s in self.segments if s.is_holiday_worked)

    @property
    def status_codes(self) -> Tuple[DailyStatusCode, ...]:
        return tuple(s.status for s in self.statuses)

    def has_status(self, code: DailyStatusCode) -> bool:
        return code in self.status_codes

    @property
    def is_empty(self) -> bool:
        return not self.segments and not self.statuses


def _partition(shifts: Iterable[Shift]) -> Tuple[List[WorkedShift], List[StatusShift]]:
    worked: List[WorkedShift] = []
    statuses: List[StatusShift] = []
    for shift in shifts:
        if isinstance(shift, WorkedShift):
            worked.append(shift)
        else:
            statuses.append(shift)
    return worked, statuses


def resolve_day(
    shifts: Sequence[Shift],
    *,
    day: Optional[int] = None,
    max_shifts: int = MAX_SHIFTS_PER_DAY,
) -> ResolvedDay:
    """Resolve one employee's records for one day.

    Raises :class:`MaxShiftsExceededError` when more than *max_shifts* worked
    segments are present (checked first) and :class:`OverlapError` when two
    consecutive segments overlap.
    """

    keys = {(s.employee_id, s.day) for s in shifts}
    if len(keys) > 1:
        raise ValueError(f"resolve_day expects one employee and one day, got {sorted(keys)}")
    if keys:
        day = next(iter(keys))[1]
    elif day is None:
        raise ValueError("day is required when no shifts are given")

    worked, statuses = _partition(shifts)
    if len(worked) > max_shifts:
        raise MaxShiftsExceededError(worked[0].employee_id, day, len(worked), max_shifts)

    # HH:MM strings sort chronologically within a day.
    worked.sort(key=lambda s: (s.start, s.id))
    segments: List[ResolvedSegment] = []
    for shift in worked:
        start = to_minutes(shift.start)
        segments.append(ResolvedSegment(shift, start, start + shift.duration_minutes))

    break_minutes = 0
    for current, following in zip(segments, segments[1:]):
        if current.end_minute > following.start_minute:
            raise OverlapError(current.shift_id, following.shift_id)
        break_minutes += following.start_minute - current.end_minute

    return ResolvedDay(
        day=day,
        segments=tuple(segments),
        statuses=tuple(sorted(statuses, key=lambda s: s.id)),
        break_minutes=break_minutes,
    )


def resolve_week(
    shifts: Iterable[Shift],
    *,
    max_shifts: int = MAX_SHIFTS_PER_DAY,
) -> List[ResolvedDay]:
    """Resolve one employee's week into seven days, Monday first."""

    by_day: Dict[int, List[Shift]] = defaultdict(list)
    employees = set()
    for shift in shifts:
        by_day[shift.day].append(shift)
        employees.add(shift.employee_id)
    if len(employees) > 1:
        raise ValueError(f"resolve_week expects a single employee, got {sorted(employees)}")
    return [resolve_day(by_day.get(day, []), day=day, max_shifts=max_shifts) for day in range(DAYS_IN_WEEK)]


__all__ = [
    "MAX_SHIFTS_PER_DAY",
    "ResolvedDay",
    "ResolvedSegment",
    "resolve_day",
    "resolve_week",
]
