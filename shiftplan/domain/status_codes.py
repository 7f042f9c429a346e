"""Daily status codes and how each one counts towards the weekly totals."""
from __future__ import annotations

from enum import Enum
from typing import Dict, Optional


class DailyStatusCode(str, Enum):
    WEEKLY_REST = "WEEKLY_REST"
    PAID_LEAVE = "PAID_LEAVE"
    PUBLIC_HOLIDAY = "PUBLIC_HOLIDAY"
    SICK_LEAVE = "SICK_LEAVE"
    ACCIDENT = "ACCIDENT"
    ABSENCE = "ABSENCE"


class HoursPolicy(str, Enum):
    NONE = "none"
    ASSIMILATED = "assimilated"
    WORKED_AND_PREMIUM = "worked_and_premium"


_POLICIES: Dict[DailyStatusCode, HoursPolicy] = {
    DailyStatusCode.WEEKLY_REST: HoursPolicy.NONE,
    DailyStatusCode.PAID_LEAVE: HoursPolicy.ASSIMILATED,
    DailyStatusCode.PUBLIC_HOLIDAY: HoursPolicy.NONE,
    DailyStatusCode.SICK_LEAVE: HoursPolicy.NONE,
    DailyStatusCode.ACCIDENT: HoursPolicy.NONE,
    DailyStatusCode.ABSENCE: HoursPolicy.NONE,
}

LABELS: Dict[DailyStatusCode, str] = {
    DailyStatusCode.WEEKLY_REST: "Repos hebdomadaire",
    DailyStatusCode.PAID_LEAVE: "Congés payés",
    DailyStatusCode.PUBLIC_HOLIDAY: "Jour férié",
    DailyStatusCode.SICK_LEAVE: "Maladie",
    DailyStatusCode.ACCIDENT: "Accident de travail",
    DailyStatusCode.ABSENCE: "Absence",
}


def parse_status(value: Optional[str]) -> Optional[DailyStatusCode]:
    if value is None or value == "":
        return None
    if isinstance(value, DailyStatusCode):
        return value
    try:
        return DailyStatusCode(str(value).strip().upper())
    except ValueError as exc:
        raise ValueError(f"Unknown daily status {value!r}") from exc


def policy_for(status: DailyStatusCode, *, worked: bool = False) -> HoursPolicy:
    """Return the hours policy of *status*.

    Only a public holiday on which the employee actually worked switches to
    ``WORKED_AND_PREMIUM``; ``worked`` is ignored for every other code.
    """

    if status is DailyStatusCode.PUBLIC_HOLIDAY and worked:
        return HoursPolicy.WORKED_AND_PREMIUM
    return _POLICIES[status]


def label_for(status: DailyStatusCode) -> str:
    return LABELS[status]


__all__ = [
    "DailyStatusCode",
    "HoursPolicy",
    "LABELS",
    "label_for",
    "parse_status",
    "policy_for",
]
