"""Gatekeeping of shift create/update/delete requests."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional, Sequence, Tuple, Union

from shiftplan.domain.errors import (
    MaxShiftsExceededError,
    OutOfContractPeriodError,
    OverlapError,
    ShiftRuleError,
    UnknownEmployeeError,
    UnknownShiftError,
)
from shiftplan.domain.models import Employee, Shift, WorkedShift

from .contract_window import is_within_contract
from .overlap import MAX_SHIFTS_PER_DAY, resolve_day


class MutationKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class MutationRequest:
    kind: MutationKind
    employee_id: str
    shift: Optional[Shift] = None
    shift_id: Optional[str] = None

    @classmethod
    def create(cls, shift: Shift) -> "MutationRequest":
        return cls(MutationKind.CREATE, shift.employee_id, shift=shift, shift_id=shift.id)

    @classmethod
    def update(cls, shift: Shift) -> "MutationRequest":
        return cls(MutationKind.UPDATE, shift.employee_id, shift=shift, shift_id=shift.id)

    @classmethod
    def delete(cls, employee_id: str, shift_id: str) -> "MutationRequest":
        return cls(MutationKind.DELETE, employee_id, shift_id=shift_id)


@dataclass(frozen=True)
class Accepted:
    """The mutation may be applied.

    ``superseded_ids`` lists records on the same day the caller must delete in
    the same transaction as the write.
    """

    request: MutationRequest
    superseded_ids: Tuple[str, ...] = ()

    ok = True


@dataclass(frozen=True)
class Rejected:
    request: MutationRequest
    error: ShiftRuleError

    ok = False


MutationResult = Union[Accepted, Rejected]


def validate_mutation(
    employee: Optional[Employee],
    existing_shifts_for_day: Sequence[Shift],
    request: MutationRequest,
    *,
    week_start: date,
    max_shifts: int = MAX_SHIFTS_PER_DAY,
) -> MutationResult:
    """Decide whether *request* may be applied on top of the day's records.

    ``existing_shifts_for_day`` are the employee's current records for the day
    the request targets. Expected rejections come back as :class:`Rejected`;
    nothing is raised for them.
    """

    if employee is None or employee.id != request.employee_id:
        return Rejected(request, UnknownEmployeeError(request.employee_id))

    if request.kind is MutationKind.DELETE:
        if not any(s.id == request.shift_id for s in existing_shifts_for_day):
            return Rejected(request, UnknownShiftError(request.shift_id))
        return Accepted(request)

    shift = request.shift
    if shift is None:
        raise ValueError(f"{request.kind.value} request carries no shift")

    shift_date = shift.date_in(week_start)
    if not is_within_contract(shift_date, employee.contract_start, employee.contract_end):
        return Rejected(request, OutOfContractPeriodError(employee.id, shift_date))

    others = [s for s in existing_shifts_for_day if s.id != shift.id]
    if not isinstance(shift, WorkedShift):
        # A status replaces the whole day.
        return Accepted(request, superseded_ids=tuple(s.id for s in others))

    prospective = [s for s in others if isinstance(s, WorkedShift)] + [shift]
    try:
        resolve_day(prospective, max_shifts=max_shifts)
    except (OverlapError, MaxShiftsExceededError) as exc:
        return Rejected(request, exc)
    stale_statuses = tuple(s.id for s in others if not isinstance(s, WorkedShift))
    return Accepted(request, superseded_ids=stale_statuses)


__all__ = [
    "Accepted",
    "MutationKind",
    "MutationRequest",
    "MutationResult",
    "Rejected",
    "validate_mutation",
]
