import pytest

from shiftplan.domain.errors import MaxShiftsExceededError, OverlapError
from shiftplan.domain.models import StatusShift, WorkedShift
from shiftplan.domain.status_codes import DailyStatusCode
from shiftplan.rules.overlap import resolve_day, resolve_week


def worked(shift_id: str, start: str, end: str, day: int = 0, emp: str = "E1") -> WorkedShift:
    return WorkedShift(shift_id, emp, day, start, end)


def test_overnight_segment_duration():
    day = resolve_day([worked("n", "22:00", "02:00")])
    assert day.worked_minutes == 240
    assert day.segments[0].end_minute == 26 * 60


def test_coupure_break_and_order():
    day = resolve_day([worked("evening", "17:00", "23:00"), worked("lunch", "09:00", "14:00")])
    assert [s.shift_id for s in day.segments] == ["lunch", "evening"]
    assert day.has_coupure
    assert day.break_minutes == 180
    assert day.worked_minutes == 660


def test_overlap_names_both_shifts():
    with pytest.raises(OverlapError) as excinfo:
        resolve_day([worked("a", "09:00", "14:00"), worked("b", "13:00", "18:00")])
    assert {excinfo.value.first_id, excinfo.value.second_id} == {"a", "b"}
    assert excinfo.value.to_dict()["code"] == "overlap"


def test_touching_segments_do_not_overlap():
    day = resolve_day([worked("a", "09:00", "14:00"), worked("b", "14:00", "18:00")])
    assert day.break_minutes == 0


def test_max_shifts_checked_before_overlap():
    shifts = [worked("a", "09:00", "14:00"), worked("b", "10:00", "11:00"), worked("c", "18:00", "20:00")]
    with pytest.raises(MaxShiftsExceededError):
        resolve_day(shifts)


def test_statuses_are_kept_apart():
    day = resolve_day([StatusShift("s", "E1", 4, DailyStatusCode.PAID_LEAVE)])
    assert day.day == 4
    assert not day.segments
    assert day.has_status(DailyStatusCode.PAID_LEAVE)


def test_resolve_day_rejects_mixed_employees():
    with pytest.raises(ValueError):
        resolve_day([worked("a", "09:00", "10:00"), worked("b", "11:00", "12:00", emp="E2")])


def test_resolve_week_returns_seven_days():
    days = resolve_week([worked("a", "09:00", "17:00", day=2)])
    assert len(days) == 7
    assert [d.day for d in days] == list(range(7))
    assert days[2].worked_minutes == 480
    assert days[0].is_empty
