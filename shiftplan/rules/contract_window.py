"""Overlap between a calendar week and an employment contract."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, List, Optional

from shiftplan.domain.clock import round_hours
from shiftplan.domain.models import DAYS_IN_WEEK, Employee


@dataclass(frozen=True)
class ContractWindow:
    week_start: date
    contract_start: date
    contract_end: Optional[date]
    active_days: int

    @property
    def pro_ration_factor(self) -> float:
        return self.active_days / DAYS_IN_WEEK

    @property
    def is_active_for_week(self) -> bool:
        return self.active_days > 0

    def is_active_on(self, day: date) -> bool:
        return is_within_contract(day, self.contract_start, self.contract_end)

    def covers_day(self, day: int) -> bool:
        return self.is_active_on(self.week_start + timedelta(days=day))

    def pro_rated_hours(self, weekly_hours_target: float) -> float:
        return pro_rated_contract_hours(weekly_hours_target, self.active_days)


def is_within_contract(day: date, contract_start: date, contract_end: Optional[date]) -> bool:
    """Both contract boundaries are inclusive; no end date means open-ended."""

    return contract_start <= day and (contract_end is None or day <= contract_end)


def count_active_days(week_start: date, contract_start: date, contract_end: Optional[date]) -> int:
    week_end = week_start + timedelta(days=DAYS_IN_WEEK - 1)
    first = max(week_start, contract_start)
    last = week_end if contract_end is None else min(week_end, contract_end)
    if last < first:
        return 0
    return (last - first).days + 1


def pro_rated_contract_hours(weekly_hours_target: float, active_days: int) -> float:
    scaled = Decimal(str(weekly_hours_target)) * Decimal(active_days) / Decimal(DAYS_IN_WEEK)
    return round_hours(scaled)


def contract_window(
    week_start: date,
    contract_start: date,
    contract_end: Optional[date] = None,
) -> ContractWindow:
    return ContractWindow(
        week_start=week_start,
        contract_start=contract_start,
        contract_end=contract_end,
        active_days=count_active_days(week_start, contract_start, contract_end),
    )


def window_for(employee: Employee, week_start: date) -> ContractWindow:
    return contract_window(week_start, employee.contract_start, employee.contract_end)


def active_roster(employees: Iterable[Employee], week_start: date) -> List[Employee]:
    """Employees with at least one contract day in the week, in input order."""

    return [e for e in employees if window_for(e, week_start).is_active_for_week]


__all__ = [
    "ContractWindow",
    "active_roster",
    "contract_window",
    "count_active_days",
    "is_within_contract",
    "pro_rated_contract_hours",
    "window_for",
]
