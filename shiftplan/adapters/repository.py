"""SQLite repository for employees, shifts, availability and preferences."""
from __future__ import annotations

import json
import logging
import sqlite3
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

from shiftplan.domain.errors import PersistError
from shiftplan.domain.models import AvailabilityPeriod, Employee, PreferenceSet, Shift, shift_from_record
from shiftplan.services.autosave import DELETE, PendingChange

log = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS employees (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL DEFAULT '',
    position TEXT NOT NULL DEFAULT '',
    category TEXT NOT NULL DEFAULT '',
    weekly_hours_target REAL NOT NULL,
    contract_start TEXT NOT NULL,
    contract_end TEXT
);
CREATE TABLE IF NOT EXISTS shifts (
    id TEXT PRIMARY KEY,
    week_start TEXT NOT NULL,
    employee_id TEXT NOT NULL,
    day INTEGER NOT NULL,
    record_json TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_shifts_week ON shifts(week_start, employee_id, day);
CREATE TABLE IF NOT EXISTS availability (
    id TEXT PRIMARY KEY,
    employee_id TEXT NOT NULL,
    record_json TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS preferences (
    employee_id TEXT PRIMARY KEY,
    record_json TEXT NOT NULL
);
"""


class ScheduleRepository:
    """One short-lived connection per call, so the auto-save timer thread can use it too."""

    def __init__(self, path: str | Path = "shiftplan.sqlite") -> None:
        self.path = Path(path)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.executescript(SCHEMA)
            conn.commit()

    def _write(self, sql: str, params: tuple) -> int:
        try:
            with self._connect() as conn:
                cursor = conn.execute(sql, params)
                conn.commit()
                return cursor.rowcount
        except sqlite3.Error as exc:
            raise PersistError(str(exc)) from exc

    # -- Auto-save callback -------------------------------------------------------
    def apply_change(self, change: PendingChange) -> None:
        """Persist one queued change. Upserts and deletes are idempotent by id."""

        if change.entity == "shift":
            if change.operation == DELETE:
                self._write("DELETE FROM shifts WHERE id = ?", (change.id,))
            else:
                if change.week_start is None:
                    raise PersistError(f"Shift {change.id} has no week")
                self._write(
                    "INSERT OR REPLACE INTO shifts(id, week_start, employee_id, day, record_json) VALUES (?, ?, ?, ?, ?)",
                    (
                        change.id,
                        change.week_start.isoformat(),
                        change.payload["employee_id"],
                        int(change.payload["day"]),
                        json.dumps(change.payload, ensure_ascii=False, sort_keys=True),
                    ),
                )
        elif change.entity == "employee":
            if change.operation == DELETE:
                self._write("DELETE FROM employees WHERE id = ?", (change.id,))
            else:
                self.save_employee(Employee.from_record(change.payload))
        else:
            raise PersistError(f"Unsupported entity {change.entity!r}")
        log.debug("persisted %s %s %s", change.operation, change.entity, change.id)

    # -- Shifts -------------------------------------------------------------------
    def load_week(self, week_start: date) -> List[Shift]:
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT record_json FROM shifts WHERE week_start = ? ORDER BY employee_id, day, id",
                (week_start.isoformat(),),
            )
            return [shift_from_record(json.loads(row["record_json"])) for row in cursor]

    def list_weeks(self) -> List[date]:
        with self._connect() as conn:
            cursor = conn.execute("SELECT DISTINCT week_start FROM shifts ORDER BY week_start")
            return [date.fromisoformat(row[0]) for row in cursor]

    # -- Employees ----------------------------------------------------------------
    def save_employee(self, employee: Employee) -> None:
        record = employee.to_record()
        self._write(
            "INSERT OR REPLACE INTO employees(id, name, position, category, weekly_hours_target, contract_start, contract_end)"
            " VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                record["id"],
                record["name"],
                record["position"],
                record["category"],
                record["weekly_hours_target"],
                record["contract_start"],
                record["contract_end"],
            ),
        )

    def list_employees(self) -> List[Employee]:
        with self._connect() as conn:
            cursor = conn.execute("SELECT * FROM employees ORDER BY id")
            return [Employee.from_record(dict(row)) for row in cursor]

    def get_employee(self, employee_id: str) -> Optional[Employee]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM employees WHERE id = ?", (employee_id,)).fetchone()
        return Employee.from_record(dict(row)) if row else None

    # -- Availability and preferences ---------------------------------------------
    def add_availability(self, period: AvailabilityPeriod) -> None:
        self._write(
            "INSERT OR REPLACE INTO availability(id, employee_id, record_json) VALUES (?, ?, ?)",
            (period.id, period.employee_id, json.dumps(period.to_record(), sort_keys=True)),
        )

    def delete_availability(self, period_id: str) -> bool:
        return self._write("DELETE FROM availability WHERE id = ?", (period_id,)) > 0

    def get_availability(self, employee_id: str) -> List[AvailabilityPeriod]:
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT record_json FROM availability WHERE employee_id = ? ORDER BY id",
                (employee_id,),
            )
            return [AvailabilityPeriod.from_record(json.loads(row[0])) for row in cursor]

    def save_preferences(self, preferences: PreferenceSet) -> None:
        self._write(
            "INSERT OR REPLACE INTO preferences(employee_id, record_json) VALUES (?, ?)",
            (preferences.employee_id, json.dumps(preferences.to_record(), ensure_ascii=False)),
        )

    def get_preferences(self, employee_id: str) -> Optional[PreferenceSet]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT record_json FROM preferences WHERE employee_id = ?",
                (employee_id,),
            ).fetchone()
        if row is None:
            return None
        record: Dict[str, Any] = json.loads(row[0])
        return PreferenceSet.from_record(record)


__all__ = ["SCHEMA", "ScheduleRepository"]
