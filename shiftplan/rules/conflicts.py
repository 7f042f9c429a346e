"""Advisory conflicts between worked segments and availability/preferences."""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union

from shiftplan.domain.clock import span_minutes, to_minutes
from shiftplan.domain.models import (
    AvailabilityPeriod,
    AvailabilityType,
    Employee,
    PreferenceSet,
    Recurrence,
    Shift,
    WorkedShift,
)

from .overlap import ResolvedSegment


class ConflictKind(str, Enum):
    UNAVAILABLE = "UNAVAILABLE"
    LIMITED = "LIMITED"
    DAY_PREFERENCE = "DAY_PREFERENCE"
    POSITION_PREFERENCE = "POSITION_PREFERENCE"


SEVERITY: Dict[ConflictKind, str] = {
    ConflictKind.UNAVAILABLE: "high",
    ConflictKind.LIMITED: "low",
    ConflictKind.DAY_PREFERENCE: "info",
    ConflictKind.POSITION_PREFERENCE: "info",
}

_AVAILABILITY_KINDS = {
    AvailabilityType.UNAVAILABLE: ConflictKind.UNAVAILABLE,
    AvailabilityType.LIMITED: ConflictKind.LIMITED,
}


@dataclass(frozen=True)
class ConflictFlag:
    shift_id: str
    employee_id: str
    day: int
    kind: ConflictKind
    period_id: Optional[str] = None

    @property
    def severity(self) -> str:
        return SEVERITY[self.kind]

    def to_dict(self) -> dict:
        return {
            "shift_id": self.shift_id,
            "employee_id": self.employee_id,
            "day": self.day,
            "kind": self.kind.value,
            "severity": self.severity,
            "period_id": self.period_id,
        }


SegmentLike = Union[ResolvedSegment, WorkedShift]


def _as_shift(segment: SegmentLike) -> WorkedShift:
    return segment.shift if isinstance(segment, ResolvedSegment) else segment


def _interval(start: str, end: str) -> Tuple[int, int]:
    begin = to_minutes(start)
    return begin, begin + span_minutes(start, end)


def intervals_intersect(first: Tuple[int, int], second: Tuple[int, int]) -> bool:
    """Half-open ``[start, end)`` intersection; touching edges do not count."""

    return first[0] < second[1] and second[0] < first[1]


def period_applies(period: AvailabilityPeriod, day: int, week_start: Optional[date]) -> bool:
    """Whether *period* covers weekday *day* of the week starting *week_start*.

    One-off periods match their exact date, so they never match without a
    week start. Monthly periods anchored on a date repeat on that day of the
    month; otherwise they repeat on ``day_of_week`` like weekly ones.
    """

    on = week_start + timedelta(days=day) if week_start is not None else None
    if period.recurrence is Recurrence.ONCE:
        return on is not None and period.on_date == on
    if period.recurrence is Recurrence.MONTHLY and period.on_date is not None:
        return on is not None and on.day == period.on_date.day
    return period.day_of_week == day


def detect_conflicts(
    employee: Employee,
    segments: Iterable[SegmentLike],
    availability: Iterable[AvailabilityPeriod],
    preferences: Optional[PreferenceSet],
    *,
    week_start: Optional[date] = None,
) -> List[ConflictFlag]:
    """Advisory flags for *segments* of one employee.

    Date-anchored periods (one-off, and monthly ones with a ``date``) are
    resolved against ``week_start``. Without it only weekday-based periods
    can match, so callers checking a concrete week must pass it.
    """

    periods = [p for p in availability if p.employee_id == employee.id]
    flags: List[ConflictFlag] = []
    for segment in segments:
        shift = _as_shift(segment)
        if shift.employee_id != employee.id:
            continue
        window = _interval(shift.start, shift.end)
        for period in periods:
            if not period_applies(period, shift.day, week_start):
                continue
            if intervals_intersect(window, _interval(period.start, period.end)):
                flags.append(
                    ConflictFlag(shift.id, employee.id, shift.day, _AVAILABILITY_KINDS[period.type], period.id)
                )

        if preferences is None or preferences.employee_id != employee.id:
            continue
        if shift.day not in preferences.preferred_days:
            flags.append(ConflictFlag(shift.id, employee.id, shift.day, ConflictKind.DAY_PREFERENCE))
        position = shift.position_label or employee.position
        if preferences.preferred_positions and position not in preferences.preferred_positions:
            flags.append(ConflictFlag(shift.id, employee.id, shift.day, ConflictKind.POSITION_PREFERENCE))
    return flags


def worked_segments(shifts: Iterable[Shift]) -> List[WorkedShift]:
    return [s for s in shifts if isinstance(s, WorkedShift)]


def flags_by_shift(flags: Iterable[ConflictFlag]) -> Dict[str, Set[ConflictKind]]:
    grouped: Dict[str, Set[ConflictKind]] = defaultdict(set)
    for flag in flags:
        grouped[flag.shift_id].add(flag.kind)
    return dict(grouped)


__all__ = [
    "ConflictFlag",
    "ConflictKind",
    "SEVERITY",
    "detect_conflicts",
    "flags_by_shift",
    "intervals_intersect",
    "period_applies",
    "worked_segments",
]
