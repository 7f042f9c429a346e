"""Services built on the pure rules: summaries, the shift store, auto-save."""

from .autosave import AutoSaveQueue, FlushResult, PendingChange
from .shift_store import DuplicationReport, ShiftStore
from .summary_service import (
    SummaryCache,
    compute_weekly_summary,
    format_hours,
    format_hours_diff,
    week_conflicts,
    week_summaries,
)

__all__ = [
    "AutoSaveQueue",
    "DuplicationReport",
    "FlushResult",
    "PendingChange",
    "ShiftStore",
    "SummaryCache",
    "compute_weekly_summary",
    "format_hours",
    "format_hours_diff",
    "week_conflicts",
    "week_summaries",
]
