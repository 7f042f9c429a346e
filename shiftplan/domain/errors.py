"""Errors raised or returned by the scheduling rules."""
from __future__ import annotations

from datetime import date
from typing import Optional


class InvalidShiftError(ValueError):
    """Raised when a shift record cannot be turned into a valid shift."""


class ShiftRuleError(Exception):
    """Base class for structural rejections.

    Validators hand these back inside a ``Rejected`` result instead of raising
    them; ``code`` is the stable identifier surfaced to API clients.
    """

    code = "rule_violation"

    def to_dict(self) -> dict:
        return {"code": self.code, "message": str(self)}


class OverlapError(ShiftRuleError):
    code = "overlap"

    def __init__(self, first_id: str, second_id: str) -> None:
        self.first_id = first_id
        self.second_id = second_id
        super().__init__(f"Shift {first_id} overlaps shift {second_id}")

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["shift_ids"] = [self.first_id, self.second_id]
        return payload


class MaxShiftsExceededError(ShiftRuleError):
    code = "max_shifts_exceeded"

    def __init__(self, employee_id: str, day: int, count: int, limit: int) -> None:
        self.employee_id = employee_id
        self.day = day
        self.count = count
        self.limit = limit
        super().__init__(
            f"Employee {employee_id} would have {count} worked shifts on day {day} (limit {limit})"
        )


class OutOfContractPeriodError(ShiftRuleError):
    code = "out_of_contract"

    def __init__(self, employee_id: str, shift_date: date) -> None:
        self.employee_id = employee_id
        self.shift_date = shift_date
        super().__init__(
            f"{shift_date.isoformat()} is outside the contract period of employee {employee_id}"
        )


class UnknownEmployeeError(ShiftRuleError):
    code = "unknown_employee"

    def __init__(self, employee_id: Optional[str]) -> None:
        self.employee_id = employee_id
        super().__init__(f"Unknown employee {employee_id!r}")


class UnknownShiftError(ShiftRuleError):
    code = "unknown_shift"

    def __init__(self, shift_id: Optional[str]) -> None:
        self.shift_id = shift_id
        super().__init__(f"Unknown shift {shift_id!r}")


class ConcurrentModificationError(ShiftRuleError):
    code = "version_conflict"

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Week was modified (expected version {expected}, found {actual})")


class PersistError(RuntimeError):
    """Raised by persistence callbacks when a change could not be stored."""


__all__ = [
    "ConcurrentModificationError",
    "InvalidShiftError",
    "MaxShiftsExceededError",
    "OutOfContractPeriodError",
    "OverlapError",
    "PersistError",
    "ShiftRuleError",
    "UnknownEmployeeError",
    "UnknownShiftError",
]
