"""Immutable snapshot of one week's shifts."""
from __future__ import annotations

import hashlib
import json
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from .models import DAYS_IN_WEEK, Shift, shift_to_record

DayKey = Tuple[str, int]


def week_start_for(day: date) -> date:
    """Return the Monday of the week containing *day*."""

    return day - timedelta(days=day.weekday())


def parse_week(value: str) -> date:
    """Parse an ISO date and insist it is a Monday."""

    parsed = date.fromisoformat(value)
    if parsed.weekday() != 0:
        raise ValueError(f"Week start {value} is not a Monday")
    return parsed


class WeekSchedule(Mapping[DayKey, Tuple[Shift, ...]]):
    """An arena of shifts indexed by ``(employee_id, day)``.

    Snapshots never change; every mutation helper returns a new snapshot with
    the version bumped, so derived summaries can be cached against
    :meth:`fingerprint`.
    """

    def __init__(
        self,
        week_start: date,
        shifts: Iterable[Shift] = (),
        *,
        version: int = 0,
    ) -> None:
        if week_start.weekday() != 0:
            raise ValueError(f"Week start {week_start.isoformat()} is not a Monday")
        self.week_start = week_start
        self.version = version
        self._arena: Dict[str, Shift] = {}
        index: Dict[DayKey, List[Shift]] = defaultdict(list)
        for shift in shifts:
            if shift.id in self._arena:
                raise ValueError(f"Duplicate shift id {shift.id}")
            self._arena[shift.id] = shift
            index[(shift.employee_id, shift.day)].append(shift)
        self._index: Dict[DayKey, Tuple[Shift, ...]] = {key: tuple(rows) for key, rows in index.items()}

    # -- Mapping protocol ---------------------------------------------------------
    def __getitem__(self, key: DayKey) -> Tuple[Shift, ...]:
        return self._index[key]

    def __iter__(self) -> Iterator[DayKey]:
        return iter(sorted(self._index))

    def __len__(self) -> int:
        return len(self._index)

    # -- Queries ------------------------------------------------------------------
    @property
    def week_end(self) -> date:
        return self.week_start + timedelta(days=DAYS_IN_WEEK - 1)

    def get_shift(self, shift_id: str) -> Optional[Shift]:
        return self._arena.get(shift_id)

    def shifts(self) -> List[Shift]:
        return sorted(self._arena.values(), key=lambda s: (s.employee_id, s.day, getattr(s, "start", ""), s.id))

    def shifts_for(self, employee_id: str, day: int) -> Tuple[Shift, ...]:
        return self._index.get((employee_id, day), ())

    def shifts_for_employee(self, employee_id: str) -> List[Shift]:
        return [s for s in self.shifts() if s.employee_id == employee_id]

    def employee_ids(self) -> List[str]:
        return sorted({employee_id for employee_id, _ in self._index})

    def fingerprint(self, employee_id: Optional[str] = None) -> str:
        """Content hash of the week (or of one employee's shifts)."""

        rows = self.shifts_for_employee(employee_id) if employee_id else self.shifts()
        blob = json.dumps([shift_to_record(s) for s in rows], sort_keys=True)
        return hashlib.sha1(blob.encode("utf-8")).hexdigest()

    # -- Derived snapshots --------------------------------------------------------
    def with_changes(
        self,
        *,
        upserts: Iterable[Shift] = (),
        deletes: Iterable[str] = (),
    ) -> "WeekSchedule":
        arena = dict(self._arena)
        for shift_id in deletes:
            arena.pop(shift_id, None)
        for shift in upserts:
            arena[shift.id] = shift
        return WeekSchedule(self.week_start, arena.values(), version=self.version + 1)


__all__ = ["DayKey", "WeekSchedule", "parse_week", "week_start_for"]
