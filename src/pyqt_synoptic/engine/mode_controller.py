"""
Live / history mode state machine.

``Live`` is the initial state. Entering ``History(t)`` freezes the update
coalescer and replays a snapshot for ``t``; returning to ``Live`` replays a
snapshot for "now" and only then unfreezes. Snapshot requests run through a
``TaskRunner`` and are tagged with a sequence number: a response older than the
last applied one is discarded.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Iterable, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from pyqt_synoptic.core.background_task import BackgroundTaskManager, TaskRunner
from pyqt_synoptic.engine.update_coalescer import UpdateCoalescer
from pyqt_synoptic.protocols import SnapshotQuery, get_snapshot_query

logger = logging.getLogger(__name__)


def now_ms() -> float:
    return time.time() * 1000.0


def iso_timestamp(timestamp_ms: Optional[float] = None) -> str:
    """ISO-8601 UTC timestamp for epoch milliseconds (``None`` means now)."""
    if timestamp_ms is None:
        return datetime.now(timezone.utc).isoformat()
    return datetime.fromtimestamp(timestamp_ms / 1000.0, tz=timezone.utc).isoformat()


class TimelineModeKind(Enum):
    LIVE = "live"
    HISTORY = "history"


@dataclass(frozen=True)
class TimelineMode:
    """Current timeline position. ``timestamp`` is epoch ms, only set in history."""
    kind: TimelineModeKind
    timestamp: Optional[float] = None

    @classmethod
    def live(cls) -> "TimelineMode":
        return cls(TimelineModeKind.LIVE)

    @classmethod
    def history(cls, timestamp: float) -> "TimelineMode":
        return cls(TimelineModeKind.HISTORY, timestamp)

    @property
    def is_live(self) -> bool:
        return self.kind is TimelineModeKind.LIVE


class ModeController(QObject):
    """
    Owns the timeline mode and every transition between modes.

    Signals:
        mode_changed(TimelineMode): After every transition
        cursor_changed(float): Timeline cursor moved (epoch ms)
        loading_changed(bool): A snapshot request started / the last one finished
    """

    mode_changed = pyqtSignal(object)
    cursor_changed = pyqtSignal(float)
    loading_changed = pyqtSignal(bool)

    def __init__(
        self,
        coalescer: UpdateCoalescer,
        apply_snapshot: Callable[[Iterable[Any]], Any],
        snapshot_query: Optional[SnapshotQuery] = None,
        task_runner: Optional[TaskRunner] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._coalescer = coalescer
        self._apply_snapshot = apply_snapshot
        self._snapshot_query = snapshot_query
        self._task_runner = task_runner or BackgroundTaskManager()

        self._mode = TimelineMode.live()
        self._min_ms: Optional[float] = None
        self._max_ms: Optional[float] = None
        self._cursor_ms: Optional[float] = None

        self._sequence = 0
        self._last_applied = 0
        self._unfreeze_after: Optional[int] = None
        self._in_flight = 0

    # --- State ---

    @property
    def mode(self) -> TimelineMode:
        return self._mode

    @property
    def cursor_ms(self) -> Optional[float]:
        return self._cursor_ms

    @property
    def bounds(self):
        return self._min_ms, self._max_ms

    @property
    def is_loading(self) -> bool:
        return self._in_flight > 0

    @property
    def task_runner(self) -> TaskRunner:
        return self._task_runner

    @property
    def snapshot_query(self) -> Optional[SnapshotQuery]:
        return self._snapshot_query if self._snapshot_query is not None else get_snapshot_query()

    @snapshot_query.setter
    def snapshot_query(self, query: Optional[SnapshotQuery]) -> None:
        self._snapshot_query = query

    # --- Timeline ---

    def set_timeline_bounds(self, min_ms: float, max_ms: float) -> None:
        """Store the selectable range. In live mode the cursor follows ``max_ms``."""
        if min_ms > max_ms:
            raise ValueError(f"Timeline min {min_ms} is after max {max_ms}")
        self._min_ms = float(min_ms)
        self._max_ms = float(max_ms)
        if self._mode.is_live:
            self._move_cursor(self._max_ms)
        elif self._cursor_ms is not None:
            self._move_cursor(self._clamp(self._cursor_ms))

    def _clamp(self, timestamp_ms: float) -> float:
        if self._min_ms is not None and timestamp_ms < self._min_ms:
            return self._min_ms
        if self._max_ms is not None and timestamp_ms > self._max_ms:
            return self._max_ms
        return timestamp_ms

    def _move_cursor(self, timestamp_ms: float) -> None:
        if timestamp_ms != self._cursor_ms:
            self._cursor_ms = timestamp_ms
            self.cursor_changed.emit(timestamp_ms)

    # --- Transitions ---

    def set_history_mode(self, enabled: bool) -> None:
        """Enter history at the current cursor, or return to live."""
        if enabled == (not self._mode.is_live):
            return

        if enabled:
            self._coalescer.freeze()
            start = self._cursor_ms
            if start is None:
                start = self._max_ms if self._max_ms is not None else now_ms()
            target = self._clamp(start)
            self._move_cursor(target)
            self._set_mode(TimelineMode.history(target))
            self._request(target)
            return

        self._set_mode(TimelineMode.live())
        if self._max_ms is not None:
            self._move_cursor(self._max_ms)
        self._request(None, unfreeze=True)

    def preview_history(self, timestamp_ms: float) -> None:
        """Move the cursor while dragging. No fetch."""
        if self._mode.is_live:
            return
        self._move_cursor(self._clamp(timestamp_ms))

    def seek_history(self, timestamp_ms: float) -> None:
        """Fetch and replay the snapshot at ``timestamp_ms`` (history mode only)."""
        if self._mode.is_live:
            logger.warning("[ModeController] seek_history ignored in live mode")
            return
        target = self._clamp(timestamp_ms)
        self._move_cursor(target)
        self._set_mode(TimelineMode.history(target))
        self._request(target)

    def refresh(self) -> None:
        """Re-request the snapshot for the current mode (after a diagram load)."""
        if self._mode.is_live:
            self._request(None, unfreeze=self._coalescer.frozen)
        else:
            self._request(self._mode.timestamp)

    def advance_sequence(self) -> None:
        """Make every in-flight response stale."""
        self._sequence += 1
        self._last_applied = self._sequence

    def _set_mode(self, mode: TimelineMode) -> None:
        self._mode = mode
        logger.info(f"[ModeController] Mode -> {mode.kind.value}"
                    + (f" @ {iso_timestamp(mode.timestamp)}" if mode.timestamp is not None else ""))
        self.mode_changed.emit(mode)

    # --- Snapshot requests ---

    def _request(self, timestamp_ms: Optional[float], unfreeze: bool = False) -> None:
        self._sequence += 1
        seq = self._sequence
        if unfreeze:
            self._unfreeze_after = seq

        query = self.snapshot_query
        if query is None:
            logger.warning("[ModeController] No snapshot query registered; keeping current state")
            self._finish(seq)
            return

        iso = iso_timestamp(timestamp_ms)
        logger.debug(f"[ModeController] Snapshot request #{seq} for {iso}")
        self._set_in_flight(self._in_flight + 1)
        self._task_runner.run(
            target=query.fetch_snapshot,
            args=(iso,),
            on_success=lambda entries: self._on_snapshot(seq, entries),
            on_error=lambda error: self._on_snapshot_error(seq, error),
            on_finished=lambda: self._on_request_finished(seq),
        )

    def _on_snapshot(self, seq: int, entries: Iterable[Any]) -> None:
        if seq <= self._last_applied:
            logger.debug(f"[ModeController] Discarding stale snapshot #{seq} (applied #{self._last_applied})")
            return
        self._last_applied = seq
        try:
            self._apply_snapshot(entries)
        except Exception:
            logger.exception(f"[ModeController] Failed to apply snapshot #{seq}")

    def _on_snapshot_error(self, seq: int, error: Exception) -> None:
        logger.error(f"[ModeController] Snapshot request #{seq} failed: {error}")

    def _on_request_finished(self, seq: int) -> None:
        self._set_in_flight(self._in_flight - 1)
        self._finish(seq)

    def _finish(self, seq: int) -> None:
        if self._unfreeze_after is None or seq < self._unfreeze_after:
            return
        if self._mode.is_live:
            self._coalescer.unfreeze()
            logger.debug("[ModeController] Live updates resumed")
        self._unfreeze_after = None

    def _set_in_flight(self, count: int) -> None:
        was_loading = self._in_flight > 0
        self._in_flight = max(0, count)
        if was_loading != (self._in_flight > 0):
            self.loading_changed.emit(self._in_flight > 0)
