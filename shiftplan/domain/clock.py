"""Clock-time helpers shared by the rules."""
from __future__ import annotations

import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

MINUTES_PER_DAY = 24 * 60

_HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

Number = Union[int, float, Decimal]


def is_hhmm(value: object) -> bool:
    return isinstance(value, str) and bool(_HHMM.match(value))


def to_minutes(value: str) -> int:
    """Convert ``HH:MM`` to minutes after midnight."""

    match = _HHMM.match(value or "")
    if not match:
        raise ValueError(f"Invalid clock time {value!r}, expected HH:MM")
    return int(match.group(1)) * 60 + int(match.group(2))


def span_minutes(start: str, end: str) -> int:
    """Length of ``start``-``end``; an end before the start wraps past midnight."""

    minutes = to_minutes(end) - to_minutes(start)
    if minutes < 0:
        minutes += MINUTES_PER_DAY
    return minutes


def round_hours(value: Number, places: int = 1) -> float:
    """Round half-up (0.05 -> 0.1), unlike the builtin banker's rounding."""

    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def minutes_to_hours(minutes: int) -> float:
    return round_hours(Decimal(minutes) / Decimal(60))


__all__ = [
    "MINUTES_PER_DAY",
    "is_hhmm",
    "minutes_to_hours",
    "round_hours",
    "span_minutes",
    "to_minutes",
]
