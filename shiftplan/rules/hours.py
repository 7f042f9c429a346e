"""Weekly hours aggregation."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Optional, Sequence

from shiftplan.domain.clock import minutes_to_hours, round_hours
from shiftplan.domain.models import DAYS_IN_WEEK, WeeklySummary
from shiftplan.domain.status_codes import HoursPolicy, policy_for

from .overlap import ResolvedDay

STANDARD_WORKING_DAYS = 5


@dataclass
class _Totals:
    worked_minutes: int = 0
    break_minutes: int = 0
    paid_break_minutes: int = 0
    holiday_minutes: int = 0
    assimilated_days: int = 0
    shift_groups: int = 0


def assimilated_hours_per_day(weekly_hours_target: float, working_days: int = STANDARD_WORKING_DAYS) -> Decimal:
    return Decimal(str(weekly_hours_target)) / Decimal(working_days)


def _accumulate(totals: _Totals, day: ResolvedDay, pay_break_times: bool) -> None:
    totals.worked_minutes += day.worked_minutes
    totals.holiday_minutes += day.holiday_worked_minutes
    if day.segments:
        # A coupure pair is one service, whatever its shift_group ids say.
        totals.shift_groups += 1
    if day.has_coupure:
        totals.break_minutes += day.break_minutes
        if pay_break_times:
            totals.paid_break_minutes += day.break_minutes

    # One credit per day even if the status was recorded twice.
    for code in set(day.status_codes):
        if policy_for(code) is HoursPolicy.ASSIMILATED:
            totals.assimilated_days += 1


def aggregate_week(
    days: Sequence[ResolvedDay],
    *,
    weekly_hours_target: float,
    pro_rated_contract_hours: float,
    pay_break_times: bool = True,
    employee_id: str = "",
    active_days: int = DAYS_IN_WEEK,
    is_counted: Optional[Callable[[int], bool]] = None,
    working_days_per_week: int = STANDARD_WORKING_DAYS,
) -> WeeklySummary:
    """Fold resolved days into a :class:`WeeklySummary`.

    Worked hours are segment durations, plus coupure breaks only when
    ``pay_break_times`` is set. Paid-leave days are credited separately as
    assimilated hours (target / 5 per day). Worked public holidays are
    counted once in worked hours and repeated in the public-holiday overlay.
    Days rejected by ``is_counted`` (outside the contract) are skipped.
    """

    totals = _Totals()
    for day in days:
        if is_counted is not None and not is_counted(day.day):
            continue
        _accumulate(totals, day, pay_break_times)

    worked = minutes_to_hours(totals.worked_minutes + totals.paid_break_minutes)
    assimilated = round_hours(
        assimilated_hours_per_day(weekly_hours_target, working_days_per_week) * totals.assimilated_days
    )
    pro_rated = round_hours(pro_rated_contract_hours)
    return WeeklySummary(
        employee_id=employee_id,
        total_worked_hours=worked,
        total_assimilated_hours=assimilated,
        total_public_holiday_hours=minutes_to_hours(totals.holiday_minutes),
        pro_rated_contract_hours=pro_rated,
        hours_diff=round_hours(Decimal(str(worked)) - Decimal(str(pro_rated))),
        shift_count=totals.shift_groups,
        total_break_hours=minutes_to_hours(totals.break_minutes),
        active_days=active_days,
    )


__all__ = [
    "STANDARD_WORKING_DAYS",
    "aggregate_week",
    "assimilated_hours_per_day",
]
