"""Debounced, coalescing queue that forwards accepted changes to storage."""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Tuple

from shiftplan.domain.errors import PersistError

log = logging.getLogger(__name__)

UPSERT = "upsert"
DELETE = "delete"


@dataclass(frozen=True)
class PendingChange:
    entity: str
    operation: str
    id: str
    payload: Dict[str, Any] = field(default_factory=dict)
    week_start: Optional[date] = None
    sequence: int = 0

    def __post_init__(self) -> None:
        if self.operation not in (UPSERT, DELETE):
            raise ValueError(f"Unknown operation {self.operation!r}")

    @property
    def key(self) -> Tuple[str, str]:
        return (self.entity, self.id)


@dataclass
class FlushResult:
    saved: List[PendingChange] = field(default_factory=list)
    failed: List[PendingChange] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


Persist = Callable[[PendingChange], None]


class AutoSaveQueue:
    """Queue owned by the caller; nothing here is global.

    Changes are coalesced per ``(entity, id)`` so only the latest state of a
    record is written. A flush happens after ``inactivity_timeout`` seconds
    without new changes, at the latest ``max_delay`` seconds after the first
    pending change, or whenever :meth:`flush` is called. Failed changes are
    re-queued with exponential backoff unless a newer change for the same
    record arrived meanwhile. ``persist`` must be idempotent by record id.
    Pass ``inactivity_timeout=None`` to disable timers entirely.
    """

    def __init__(
        self,
        persist: Persist,
        *,
        inactivity_timeout: Optional[float] = 3.0,
        max_delay: Optional[float] = 30.0,
        max_backoff: float = 300.0,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ) -> None:
        self._persist = persist
        self.inactivity_timeout = inactivity_timeout
        self.max_delay = max_delay
        self.max_backoff = max_backoff
        self._timer_factory = timer_factory
        self._pending: Dict[Tuple[str, str], PendingChange] = {}
        self._lock = threading.Lock()
        self._flush_lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._sequence = 0
        self._first_pending_at: Optional[float] = None
        self._backoff = 0.0
        self.enabled = True

    # -- Public API ---------------------------------------------------------------
    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def pending(self) -> List[PendingChange]:
        with self._lock:
            return sorted(self._pending.values(), key=lambda c: c.sequence)

    def enqueue(self, change: PendingChange) -> None:
        with self._lock:
            self._sequence += 1
            self._pending[change.key] = replace(change, sequence=self._sequence)
            if self._first_pending_at is None:
                self._first_pending_at = time.monotonic()
            log.debug("queued %s %s %s", change.operation, change.entity, change.id)
            if self.enabled:
                self._schedule_locked(self._debounce_delay_locked())

    def flush(self) -> FlushResult:
        """Write every pending change now (the explicit force-save)."""

        with self._flush_lock:
            with self._lock:
                self._cancel_timer_locked()
                batch = sorted(self._pending.values(), key=lambda c: c.sequence)
                self._pending.clear()
                self._first_pending_at = None

            result = FlushResult()
            for index, change in enumerate(batch):
                try:
                    self._persist(change)
                except PersistError as exc:
                    log.warning("auto-save of %s %s failed: %s", change.entity, change.id, exc)
                    result.failed.append(change)
                except Exception:
                    self._requeue(result.failed + batch[index:])
                    raise
                else:
                    result.saved.append(change)

            if result.failed:
                self._requeue(result.failed)
                with self._lock:
                    base = self._backoff or self.inactivity_timeout or 1.0
                    self._backoff = min(self.max_backoff, base * 2)
                    if self.enabled and self.inactivity_timeout is not None:
                        self._schedule_locked(self._backoff)
            else:
                with self._lock:
                    self._backoff = 0.0
            if batch:
                log.info("auto-saved %d change(s), %d failed", len(result.saved), len(result.failed))
            return result

    def cancel(self) -> None:
        """Drop the scheduled flush; pending changes stay queued."""

        with self._lock:
            self._cancel_timer_locked()

    def clear(self) -> None:
        with self._lock:
            self._cancel_timer_locked()
            self._pending.clear()
            self._first_pending_at = None

    def set_enabled(self, enabled: bool) -> None:
        with self._lock:
            self.enabled = enabled
            if not enabled:
                self._cancel_timer_locked()
            elif self._pending:
                self._schedule_locked(self._debounce_delay_locked())

    def close(self, *, flush: bool = True) -> Optional[FlushResult]:
        self.cancel()
        if flush and self.pending_count:
            return self.flush()
        return None

    # -- Internals ----------------------------------------------------------------
    def _requeue(self, changes: List[PendingChange]) -> None:
        with self._lock:
            for change in changes:
                newer = self._pending.get(change.key)
                if newer is not None and newer.sequence > change.sequence:
                    continue
                self._pending[change.key] = change
                if self._first_pending_at is None:
                    self._first_pending_at = time.monotonic()

    def _debounce_delay_locked(self) -> Optional[float]:
        if self.inactivity_timeout is None:
            return None
        delay = max(self.inactivity_timeout, self._backoff)
        if self.max_delay is not None and self._first_pending_at is not None:
            waited = time.monotonic() - self._first_pending_at
            delay = min(delay, max(0.0, self.max_delay - waited))
        return delay

    def _schedule_locked(self, delay: Optional[float]) -> None:
        if delay is None:
            return
        # A newer schedule always supersedes the pending one.
        self._cancel_timer_locked()
        timer = self._timer_factory(delay, self._on_timer)
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _cancel_timer_locked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self) -> None:
        with self._lock:
            self._timer = None
            if not self.enabled or not self._pending:
                return
        self.flush()


__all__ = ["AutoSaveQueue", "DELETE", "FlushResult", "PendingChange", "UPSERT"]
