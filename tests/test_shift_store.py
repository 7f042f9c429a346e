from datetime import date

from shiftplan.domain.errors import (
    ConcurrentModificationError,
    MaxShiftsExceededError,
    OutOfContractPeriodError,
    UnknownShiftError,
)
from shiftplan.domain.models import Employee, StatusShift, WorkedShift
from shiftplan.domain.status_codes import DailyStatusCode
from shiftplan.services.autosave import DELETE, UPSERT, AutoSaveQueue
from shiftplan.services.shift_store import ShiftStore

MONDAY = date(2024, 1, 1)
NEXT_MONDAY = date(2024, 1, 8)


def make_store(saved=None):
    queue = AutoSaveQueue((saved if saved is not None else []).append, inactivity_timeout=None)
    employees = [
        Employee("E1", contract_start=date(2023, 1, 1)),
        Employee("E2", contract_start=date(2024, 1, 4)),
        Employee("E3", contract_start=date(2023, 1, 1), contract_end=date(2024, 1, 9)),
    ]
    return ShiftStore(employees, queue=queue)


def test_third_segment_leaves_store_unchanged():
    store = make_store()
    assert store.create(MONDAY, WorkedShift("a", "E1", 0, "09:00", "14:00")).ok
    assert store.create(MONDAY, WorkedShift("b", "E1", 0, "17:00", "23:00")).ok
    before = store.week(MONDAY)

    result = store.create(MONDAY, WorkedShift("c", "E1", 0, "07:00", "08:00"))
    assert isinstance(result.error, MaxShiftsExceededError)
    assert store.week(MONDAY) is before
    assert before.version == 2
    assert store.queue.pending_count == 2


def test_expected_version_mismatch_is_rejected():
    store = make_store()
    store.create(MONDAY, WorkedShift("a", "E1", 0, "09:00", "14:00"), expected_version=0)
    result = store.create(MONDAY, WorkedShift("b", "E1", 1, "09:00", "14:00"), expected_version=0)
    assert isinstance(result.error, ConcurrentModificationError)
    assert result.error.to_dict()["code"] == "version_conflict"
    assert store.week(MONDAY).get_shift("b") is None


def test_status_replaces_the_day_atomically():
    saved = []
    store = make_store(saved)
    store.create(MONDAY, WorkedShift("a", "E1", 0, "09:00", "14:00"))
    store.create(MONDAY, WorkedShift("b", "E1", 0, "17:00", "23:00"))
    result = store.create(MONDAY, StatusShift("s", "E1", 0, DailyStatusCode.PAID_LEAVE))
    assert result.ok

    week = store.week(MONDAY)
    assert [s.id for s in week.shifts_for("E1", 0)] == ["s"]
    assert week.version == 3

    store.queue.flush()
    assert {(c.id, c.operation) for c in saved} == {("a", DELETE), ("b", DELETE), ("s", UPSERT)}


def test_update_moves_shift_to_another_day():
    store = make_store()
    store.create(MONDAY, WorkedShift("a", "E1", 0, "09:00", "14:00"))
    assert store.update(MONDAY, WorkedShift("a", "E1", 3, "10:00", "15:00")).ok
    week = store.week(MONDAY)
    assert week.shifts_for("E1", 0) == ()
    assert week.get_shift("a").day == 3


def test_update_and_delete_unknown_shift():
    store = make_store()
    assert isinstance(store.update(MONDAY, WorkedShift("zz", "E1", 0, "09:00", "14:00")).error, UnknownShiftError)
    assert isinstance(store.delete(MONDAY, "E1", "zz").error, UnknownShiftError)


def test_delete_enqueues_removal():
    saved = []
    store = make_store(saved)
    store.create(MONDAY, WorkedShift("a", "E1", 0, "09:00", "14:00"))
    assert store.delete(MONDAY, "E1", "a").ok
    assert store.week(MONDAY).get_shift("a") is None
    store.queue.flush()
    assert [(c.id, c.operation) for c in saved] == [("a", DELETE)]


def test_out_of_contract_day_rejected():
    store = make_store()
    result = store.create(MONDAY, WorkedShift("a", "E2", 1, "09:00", "14:00"))
    assert isinstance(result.error, OutOfContractPeriodError)
    assert store.create(MONDAY, WorkedShift("b", "E2", 3, "09:00", "14:00")).ok


def test_duplicate_id_on_create_gets_fresh_id():
    store = make_store()
    store.create(MONDAY, WorkedShift("a", "E1", 0, "09:00", "14:00"))
    result = store.create(MONDAY, WorkedShift("a", "E1", 1, "09:00", "14:00"))
    assert result.ok
    assert result.request.shift.id != "a"
    assert len(store.week(MONDAY).shifts()) == 2


def test_duplicate_week_skips_out_of_contract_and_regroups():
    store = make_store()
    store.create(MONDAY, WorkedShift("a", "E1", 0, "09:00", "14:00", shift_group="g1"))
    store.create(MONDAY, WorkedShift("b", "E1", 0, "17:00", "23:00", shift_group="g1"))
    store.create(MONDAY, StatusShift("r", "E1", 6, DailyStatusCode.WEEKLY_REST))
    store.create(MONDAY, WorkedShift("c", "E3", 1, "09:00", "14:00"))
    store.create(MONDAY, WorkedShift("d", "E3", 4, "09:00", "14:00"))

    report = store.duplicate_week(MONDAY)
    assert report.target_week == NEXT_MONDAY
    assert len(report.copied) == 4
    assert report.skipped == ["d"]
    assert report.rejected == []

    target = store.week(NEXT_MONDAY)
    lunch, evening = target.shifts_for("E1", 0)
    assert lunch.shift_group == evening.shift_group
    assert lunch.shift_group not in (None, "g1")
    assert {lunch.id, evening.id}.isdisjoint({"a", "b"})
    assert target.shifts_for("E1", 6)[0].status is DailyStatusCode.WEEKLY_REST


def test_loader_seeds_weeks_lazily():
    calls = []

    def loader(week_start):
        calls.append(week_start)
        return [WorkedShift("a", "E1", 0, "09:00", "14:00")]

    store = ShiftStore([Employee("E1", contract_start=date(2023, 1, 1))], loader=loader)
    assert store.week(MONDAY).get_shift("a") is not None
    store.week(MONDAY)
    assert calls == [MONDAY]
