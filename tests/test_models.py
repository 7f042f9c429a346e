from datetime import date

import pytest

from shiftplan.domain.errors import InvalidShiftError
from shiftplan.domain.models import (
    AvailabilityPeriod,
    AvailabilityType,
    Employee,
    Recurrence,
    StatusShift,
    WorkedShift,
    shift_from_record,
    shift_to_record,
)
from shiftplan.domain.status_codes import DailyStatusCode
from shiftplan.domain.week import WeekSchedule, parse_week, week_start_for

MONDAY = date(2024, 1, 1)


def test_employee_contract_end_before_start_rejected():
    with pytest.raises(ValueError):
        Employee("E1", contract_start=date(2024, 2, 1), contract_end=date(2024, 1, 1))


def test_employee_record_defaults_hours():
    employee = Employee.from_record({"id": "E1", "contract_start": "2024-01-01"})
    assert employee.weekly_hours_target == 35.0
    assert employee.contract_end is None
    assert employee.to_record()["contract_start"] == "2024-01-01"


def test_shift_from_record_builds_variants():
    worked = shift_from_record({"employee_id": "E1", "day": "2", "start": "22:00", "end": "02:00"})
    assert isinstance(worked, WorkedShift)
    assert worked.day == 2
    assert worked.is_overnight
    assert worked.duration_minutes == 240
    assert worked.status is None

    status = shift_from_record({"employee_id": "E1", "day": 3, "status": "PAID_LEAVE"})
    assert isinstance(status, StatusShift)
    assert status.status is DailyStatusCode.PAID_LEAVE


def test_holiday_worked_record():
    shift = shift_from_record(
        {
            "employee_id": "E1",
            "day": 0,
            "status": "PUBLIC_HOLIDAY",
            "is_holiday_worked": True,
            "start": "09:00",
            "end": "17:00",
        }
    )
    assert isinstance(shift, WorkedShift)
    assert shift.status is DailyStatusCode.PUBLIC_HOLIDAY
    assert shift_to_record(shift)["status"] == "PUBLIC_HOLIDAY"


@pytest.mark.parametrize(
    "record",
    [
        {"employee_id": "E1", "day": 0, "status": "PAID_LEAVE", "start": "09:00", "end": "17:00"},
        {"employee_id": "E1", "day": 0, "status": "SICK_LEAVE", "is_holiday_worked": True, "start": "09:00", "end": "17:00"},
        {"employee_id": "E1", "day": 0, "is_holiday_worked": True},
        {"employee_id": "E1", "day": 0},
        {"employee_id": "E1", "day": 0, "start": "09:00"},
        {"employee_id": "E1", "day": 7, "start": "09:00", "end": "17:00"},
        {"employee_id": "E1", "day": 0, "start": "9:00", "end": "17:00"},
        {"employee_id": "E1", "day": 0, "start": "09:00", "end": "09:00"},
        {"day": 0, "start": "09:00", "end": "17:00"},
    ],
)
def test_shift_from_record_rejects_invalid_combinations(record):
    with pytest.raises(InvalidShiftError):
        shift_from_record(record)


def test_availability_period_requires_anchor():
    with pytest.raises(ValueError):
        AvailabilityPeriod("E1", AvailabilityType.UNAVAILABLE, "09:00", "12:00", recurrence=Recurrence.ONCE)
    period = AvailabilityPeriod.from_record(
        {"employee_id": "E1", "type": "limited", "start": "09:00", "end": "12:00", "recurrence": "once", "date": "2024-01-03"}
    )
    assert period.on_date == date(2024, 1, 3)
    assert period.to_record()["date"] == "2024-01-03"


def test_week_schedule_index_and_changes():
    a = WorkedShift("a", "E1", 0, "09:00", "14:00")
    b = WorkedShift("b", "E1", 0, "17:00", "23:00")
    c = StatusShift("c", "E2", 1, DailyStatusCode.WEEKLY_REST)
    week = WeekSchedule(MONDAY, [b, a, c])

    assert [s.id for s in week.shifts_for("E1", 0)] == ["b", "a"]
    assert [s.id for s in week.shifts()] == ["a", "b", "c"]
    assert week.employee_ids() == ["E1", "E2"]
    assert week.week_end == date(2024, 1, 7)

    changed = week.with_changes(upserts=[WorkedShift("a", "E1", 2, "09:00", "14:00")], deletes=["c"])
    assert changed.version == 1
    assert week.get_shift("c") is not None
    assert changed.get_shift("c") is None
    assert changed.get_shift("a").day == 2
    assert changed.fingerprint("E1") != week.fingerprint("E1")
    assert changed.fingerprint("E2") != week.fingerprint("E2")


def test_week_schedule_rejects_duplicates_and_non_monday():
    a = WorkedShift("a", "E1", 0, "09:00", "14:00")
    with pytest.raises(ValueError):
        WeekSchedule(MONDAY, [a, a])
    with pytest.raises(ValueError):
        WeekSchedule(date(2024, 1, 2))


def test_week_helpers():
    assert week_start_for(date(2024, 1, 4)) == MONDAY
    assert parse_week("2024-01-01") == MONDAY
    with pytest.raises(ValueError):
        parse_week("2024-01-03")


def test_string_flags_are_parsed_not_truthy():
    shift = shift_from_record(
        {"employee_id": "E1", "day": 0, "start": "09:00", "end": "17:00", "is_holiday_worked": "false", "has_coupure": "true"}
    )
    assert not shift.is_holiday_worked
    assert shift.status is None
    assert shift.has_coupure
    with pytest.raises(InvalidShiftError):
        shift_from_record({"employee_id": "E1", "day": 0, "start": "09:00", "end": "17:00", "is_holiday_worked": "maybe"})
