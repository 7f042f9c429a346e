"""Weekly summaries and conflict reports built from week snapshots."""
from __future__ import annotations

import threading
from collections import OrderedDict
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from shiftplan.config import DEFAULT_SETTINGS, settings_fingerprint
from shiftplan.domain.models import AvailabilityPeriod, Employee, PreferenceSet, Shift, WeeklySummary
from shiftplan.domain.week import WeekSchedule
from shiftplan.rules.conflicts import ConflictFlag, detect_conflicts, worked_segments
from shiftplan.rules.contract_window import active_roster, contract_window
from shiftplan.rules.hours import STANDARD_WORKING_DAYS, aggregate_week
from shiftplan.rules.overlap import MAX_SHIFTS_PER_DAY, resolve_week

AvailabilityLookup = Callable[[str], Sequence[AvailabilityPeriod]]
PreferenceLookup = Callable[[str], Optional[PreferenceSet]]


def compute_weekly_summary(
    employee_id: str,
    shifts: Iterable[Shift],
    weekly_hours_target: float,
    contract_start: date,
    contract_end: Optional[date],
    week_start: date,
    pay_break_times: bool = True,
    *,
    max_shifts: int = MAX_SHIFTS_PER_DAY,
    working_days_per_week: int = STANDARD_WORKING_DAYS,
) -> WeeklySummary:
    """Pure weekly summary for one employee.

    Shifts of other employees are ignored, as are days outside the contract.
    """

    window = contract_window(week_start, contract_start, contract_end)
    days = resolve_week([s for s in shifts if s.employee_id == employee_id], max_shifts=max_shifts)
    return aggregate_week(
        days,
        weekly_hours_target=weekly_hours_target,
        pro_rated_contract_hours=window.pro_rated_hours(weekly_hours_target),
        pay_break_times=pay_break_times,
        employee_id=employee_id,
        active_days=window.active_days,
        is_counted=window.covers_day,
        working_days_per_week=working_days_per_week,
    )


def summary_for(employee: Employee, week: WeekSchedule, settings: Mapping[str, Any] = DEFAULT_SETTINGS) -> WeeklySummary:
    return compute_weekly_summary(
        employee.id,
        week.shifts_for_employee(employee.id),
        employee.weekly_hours_target,
        employee.contract_start,
        employee.contract_end,
        week.week_start,
        bool(settings.get("pay_break_times", True)),
        max_shifts=int(settings.get("max_shifts_per_day", MAX_SHIFTS_PER_DAY)),
        working_days_per_week=int(settings.get("assimilated_days_per_week", STANDARD_WORKING_DAYS)),
    )


CacheKey = Tuple[str, date, str, str]


class SummaryCache:
    """LRU memo of summaries keyed by employee, week, shift set and settings."""

    def __init__(self, max_entries: int = 1024) -> None:
        self.max_entries = max_entries
        self._entries: "OrderedDict[CacheKey, WeeklySummary]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def key_for(self, employee: Employee, week: WeekSchedule, settings: Mapping[str, Any]) -> CacheKey:
        # The employee record takes part in the hash: contract dates move the target.
        employee_blob = settings_fingerprint(employee.to_record())
        return (
            employee.id,
            week.week_start,
            week.fingerprint(employee.id) + employee_blob,
            settings_fingerprint(settings),
        )

    def get_or_compute(
        self,
        employee: Employee,
        week: WeekSchedule,
        settings: Mapping[str, Any] = DEFAULT_SETTINGS,
    ) -> WeeklySummary:
        key = self.key_for(employee, week, settings)
        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                self._entries.move_to_end(key)
                self.hits += 1
                return cached
        summary = summary_for(employee, week, settings)
        with self._lock:
            self.misses += 1
            self._entries[key] = summary
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
        return summary

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def week_summaries(
    employees: Iterable[Employee],
    week: WeekSchedule,
    settings: Mapping[str, Any] = DEFAULT_SETTINGS,
    *,
    cache: Optional[SummaryCache] = None,
) -> Dict[str, WeeklySummary]:
    """Summaries for the employees on the week's roster (inactive ones dropped)."""

    result: Dict[str, WeeklySummary] = {}
    for employee in active_roster(employees, week.week_start):
        if cache is not None:
            result[employee.id] = cache.get_or_compute(employee, week, settings)
        else:
            result[employee.id] = summary_for(employee, week, settings)
    return result


def week_conflicts(
    employees: Iterable[Employee],
    week: WeekSchedule,
    get_availability: AvailabilityLookup,
    get_preferences: PreferenceLookup,
) -> List[ConflictFlag]:
    flags: List[ConflictFlag] = []
    for employee in active_roster(employees, week.week_start):
        segments = worked_segments(week.shifts_for_employee(employee.id))
        if not segments:
            continue
        flags.extend(
            detect_conflicts(
                employee,
                segments,
                get_availability(employee.id),
                get_preferences(employee.id),
                week_start=week.week_start,
            )
        )
    return flags


def format_hours(hours: float) -> str:
    return f"{hours:.1f}h"


def format_hours_diff(hours: float) -> str:
    if hours > 0:
        return f"+{hours:.1f}h"
    if hours < 0:
        return f"-{abs(hours):.1f}h"
    return "0.0h"


__all__ = [
    "SummaryCache",
    "compute_weekly_summary",
    "format_hours",
    "format_hours_diff",
    "summary_for",
    "week_conflicts",
    "week_summaries",
]
