"""In-process shift store: validated, serialized writes over week snapshots."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from shiftplan.config import DEFAULT_SETTINGS
from shiftplan.domain.errors import ConcurrentModificationError, UnknownShiftError
from shiftplan.domain.models import DAYS_IN_WEEK, Employee, Shift, WorkedShift, new_id, shift_to_record
from shiftplan.domain.week import WeekSchedule
from shiftplan.rules.contract_window import window_for
from shiftplan.rules.mutations import (
    Accepted,
    MutationKind,
    MutationRequest,
    MutationResult,
    Rejected,
    validate_mutation,
)
from shiftplan.rules.overlap import MAX_SHIFTS_PER_DAY

from .autosave import DELETE, UPSERT, AutoSaveQueue, PendingChange

log = logging.getLogger(__name__)

WeekLoader = Callable[[date], Iterable[Shift]]


@dataclass
class DuplicationReport:
    source_week: date
    target_week: date
    copied: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    rejected: List[MutationResult] = field(default_factory=list)


class ShiftStore:
    """Holds one :class:`WeekSchedule` per week and applies mutations to it.

    Writers are serialized per week, so two requests for the same
    employee/day are always validated against each other's result. Each
    accepted write bumps the week version; callers that read a version and
    pass it back as ``expected_version`` get a ``ConcurrentModificationError``
    rejection if someone else wrote in between. Only accepted mutations are
    forwarded to the auto-save queue.
    """

    def __init__(
        self,
        employees: Iterable[Employee] = (),
        *,
        settings: Optional[Mapping[str, Any]] = None,
        queue: Optional[AutoSaveQueue] = None,
        loader: Optional[WeekLoader] = None,
    ) -> None:
        self.settings = dict(settings or DEFAULT_SETTINGS)
        self.queue = queue
        self._loader = loader
        self._employees: Dict[str, Employee] = {e.id: e for e in employees}
        self._weeks: Dict[date, WeekSchedule] = {}
        self._locks: Dict[date, threading.RLock] = {}
        self._registry_lock = threading.Lock()

    # -- Employees ----------------------------------------------------------------
    def add_employee(self, employee: Employee) -> None:
        with self._registry_lock:
            self._employees[employee.id] = employee

    def get_employee(self, employee_id: str) -> Optional[Employee]:
        return self._employees.get(employee_id)

    def employees(self) -> List[Employee]:
        return sorted(self._employees.values(), key=lambda e: e.id)

    # -- Weeks --------------------------------------------------------------------
    def _lock_for(self, week_start: date) -> threading.RLock:
        with self._registry_lock:
            lock = self._locks.get(week_start)
            if lock is None:
                lock = self._locks[week_start] = threading.RLock()
            return lock

    def week(self, week_start: date) -> WeekSchedule:
        with self._lock_for(week_start):
            snapshot = self._weeks.get(week_start)
            if snapshot is None:
                shifts = self._loader(week_start) if self._loader else ()
                snapshot = self._weeks[week_start] = WeekSchedule(week_start, shifts)
            return snapshot

    @property
    def max_shifts(self) -> int:
        return int(self.settings.get("max_shifts_per_day", MAX_SHIFTS_PER_DAY))

    # -- Mutations ----------------------------------------------------------------
    def apply(
        self,
        week_start: date,
        request: MutationRequest,
        *,
        expected_version: Optional[int] = None,
    ) -> MutationResult:
        with self._lock_for(week_start):
            week = self.week(week_start)
            if expected_version is not None and expected_version != week.version:
                return Rejected(request, ConcurrentModificationError(expected_version, week.version))

            if request.kind is MutationKind.CREATE:
                target_day = request.shift.day
                if week.get_shift(request.shift.id) is not None:
                    request = MutationRequest.create(replace(request.shift, id=new_id()))
            elif request.kind is MutationKind.UPDATE:
                current = week.get_shift(request.shift.id)
                if current is None or current.employee_id != request.employee_id:
                    return Rejected(request, UnknownShiftError(request.shift.id))
                target_day = request.shift.day
            else:
                current = week.get_shift(request.shift_id)
                if current is None or current.employee_id != request.employee_id:
                    return Rejected(request, UnknownShiftError(request.shift_id))
                target_day = current.day

            result = validate_mutation(
                self.get_employee(request.employee_id),
                week.shifts_for(request.employee_id, target_day),
                request,
                week_start=week_start,
                max_shifts=self.max_shifts,
            )
            if isinstance(result, Rejected):
                log.info("rejected %s for %s: %s", request.kind.value, request.employee_id, result.error)
                return result

            self._commit(week, result)
            return result

    def _commit(self, week: WeekSchedule, accepted: Accepted) -> None:
        request = accepted.request
        deletes = list(accepted.superseded_ids)
        upserts: List[Shift] = []
        if request.kind is MutationKind.DELETE:
            deletes.append(request.shift_id)
        else:
            upserts.append(request.shift)

        self._weeks[week.week_start] = week.with_changes(upserts=upserts, deletes=deletes)
        log.debug(
            "week %s v%d: +%d -%d",
            week.week_start.isoformat(),
            week.version + 1,
            len(upserts),
            len(deletes),
        )
        if self.queue is None:
            return
        # Deletes go first so a status replace never leaves stale worked rows behind.
        for shift_id in deletes:
            self.queue.enqueue(PendingChange("shift", DELETE, shift_id, week_start=week.week_start))
        for shift in upserts:
            self.queue.enqueue(
                PendingChange("shift", UPSERT, shift.id, payload=shift_to_record(shift), week_start=week.week_start)
            )

    def create(self, week_start: date, shift: Shift, **kwargs: Any) -> MutationResult:
        return self.apply(week_start, MutationRequest.create(shift), **kwargs)

    def update(self, week_start: date, shift: Shift, **kwargs: Any) -> MutationResult:
        return self.apply(week_start, MutationRequest.update(shift), **kwargs)

    def delete(self, week_start: date, employee_id: str, shift_id: str, **kwargs: Any) -> MutationResult:
        return self.apply(week_start, MutationRequest.delete(employee_id, shift_id), **kwargs)

    def duplicate_week(self, source_week: date) -> DuplicationReport:
        """Copy a week onto the following one.

        Shifts whose new date falls outside the employee's contract are
        skipped; every copy is validated like a normal create, and split
        shifts keep a shared (new) group id.
        """

        target_week = source_week + timedelta(days=DAYS_IN_WEEK)
        report = DuplicationReport(source_week=source_week, target_week=target_week)
        new_groups: Dict[str, str] = {}
        for shift in self.week(source_week).shifts():
            employee = self.get_employee(shift.employee_id)
            if employee is None or not window_for(employee, target_week).covers_day(shift.day):
                report.skipped.append(shift.id)
                continue
            copy = replace(shift, id=new_id())
            if isinstance(copy, WorkedShift) and copy.shift_group:
                copy = replace(copy, shift_group=new_groups.setdefault(copy.shift_group, new_id()))
            result = self.create(target_week, copy)
            if result.ok:
                report.copied.append(copy.id)
            else:
                report.rejected.append(result)
        log.info(
            "duplicated week %s -> %s: %d copied, %d skipped, %d rejected",
            source_week.isoformat(),
            target_week.isoformat(),
            len(report.copied),
            len(report.skipped),
            len(report.rejected),
        )
        return report


__all__ = ["DuplicationReport", "ShiftStore"]
