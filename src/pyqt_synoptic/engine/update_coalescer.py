"""Frame-paced update coalescing."""

import logging
from typing import Callable, Dict, Optional

from pyqt_synoptic.core.frame_scheduler import FrameScheduler
from pyqt_synoptic.core.performance_monitor import timer
from pyqt_synoptic.engine.update_record import UpdateRecord, record_key

logger = logging.getLogger(__name__)

FLUSH_LOG_THRESHOLD_MS = 8.0


class UpdateCoalescer:
    """
    Batches incoming updates and flushes at most once per frame.

    - ``enqueue`` never blocks; the latest payload per ``source|topic`` key wins.
    - Only one flush is ever pending; the flag is released in a ``finally``
      block so a failing dispatch cannot wedge the scheduler.
    - While frozen (history mode) updates are dropped, not buffered.

    Usage:
        coalescer = UpdateCoalescer(dispatch=strategy.dispatch, scheduler=QtFrameScheduler())
        coalescer.enqueue("plant-a", "line1/pump", '{"status": "running"}')
    """

    def __init__(
        self,
        dispatch: Callable[[UpdateRecord], None],
        scheduler: FrameScheduler,
        on_flushed: Optional[Callable[[int], None]] = None,
    ):
        self._dispatch = dispatch
        self._scheduler = scheduler
        self._on_flushed = on_flushed
        self._queue: Dict[str, UpdateRecord] = {}
        self._flush_pending = False
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def flush_pending(self) -> bool:
        return self._flush_pending

    @property
    def pending_count(self) -> int:
        return len(self._queue)

    def enqueue(self, source_id: str, topic_id: str, raw_payload) -> bool:
        """Store (or overwrite) the pending update for this key.

        Returns:
            False when the update was dropped because the coalescer is frozen
        """
        if self._frozen:
            return False
        key = record_key(source_id, topic_id)
        # Re-insert so the flush order follows the latest arrival
        self._queue.pop(key, None)
        self._queue[key] = UpdateRecord(source_id, topic_id, raw_payload)
        if not self._flush_pending:
            self._arm()
        return True

    def flush(self) -> int:
        """Dispatch every queued record once.

        Returns:
            Number of records taken from the queue
        """
        records = list(self._queue.values())
        self._queue = {}
        if self._frozen:
            records = []
        try:
            with timer("Flush", threshold_ms=FLUSH_LOG_THRESHOLD_MS, log_args=True, records=len(records)):
                for record in records:
                    self._dispatch(record)
            return len(records)
        finally:
            self._flush_pending = False
            # Partial batches still changed the diagram
            if records and self._on_flushed is not None:
                self._on_flushed(len(records))
            # Updates enqueued by a dispatch callback get their own frame
            if self._queue and not self._frozen:
                self._arm()

    def freeze(self) -> None:
        """Stop accepting updates and drop anything pending."""
        self._frozen = True
        dropped = len(self._queue)
        self._queue.clear()
        if dropped:
            logger.debug(f"Dropped {dropped} pending update(s) on freeze")

    def unfreeze(self) -> None:
        self._frozen = False

    def clear(self) -> None:
        """Drop pending updates (diagram switch)."""
        self._queue.clear()

    def _arm(self) -> None:
        self._flush_pending = True
        self._scheduler.schedule(self._on_frame)

    def _on_frame(self) -> None:
        # Frame callbacks run inside the Qt event loop; exceptions stop here
        try:
            self.flush()
        except Exception:
            logger.exception("Update flush failed")
