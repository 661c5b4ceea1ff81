"""In-memory snapshot query over recorded history entries."""

import logging
import threading
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from pyqt_synoptic.engine.update_record import SnapshotEntry
from pyqt_synoptic.io.exceptions import SnapshotQueryError

logger = logging.getLogger(__name__)


def parse_iso_ms(iso_timestamp: str) -> float:
    """Epoch milliseconds of an ISO-8601 timestamp (``Z`` suffix accepted)."""
    text = iso_timestamp.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text).timestamp() * 1000.0


class HistoryLog:
    """
    SnapshotQuery backed by entries the application already holds.

    A snapshot at ``t`` is the latest entry per ``source|topic`` with
    ``timestamp_ms <= t``. Entries without a timestamp are ignored.

    ``fetch_snapshot`` runs on a worker thread, so the entry list is guarded
    by a lock.

    Usage:
        log = HistoryLog()
        log.append(SnapshotEntry("plant-a", "line1/pump", '{"status": "ok"}', timestamp_ms=...))
        register_snapshot_query(log)
    """

    def __init__(self, entries: Optional[Iterable[Any]] = None, max_entries: Optional[int] = None):
        self._lock = threading.Lock()
        self._entries: List[SnapshotEntry] = []
        self.max_entries = max_entries
        if entries is not None:
            self.set_entries(entries)

    def set_entries(self, entries: Iterable[Any]) -> None:
        coerced = [SnapshotEntry.coerce(e) for e in entries]
        with self._lock:
            self._entries = coerced
            self._trim()

    def append(self, entry: Any) -> None:
        entry = SnapshotEntry.coerce(entry)
        with self._lock:
            self._entries.append(entry)
            self._trim()

    def record(self, source_id: str, topic_id: str, payload: Any, timestamp_ms: float) -> None:
        """Record one received update."""
        self.append(SnapshotEntry(source_id, topic_id, payload, timestamp_ms))

    def clear(self) -> None:
        with self._lock:
            self._entries = []

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def time_range(self):
        """``(min_ms, max_ms)`` over timestamped entries, or None when empty."""
        with self._lock:
            stamps = [e.timestamp_ms for e in self._entries if e.timestamp_ms is not None]
        if not stamps:
            return None
        return min(stamps), max(stamps)

    def fetch_snapshot(self, iso_timestamp: str) -> List[SnapshotEntry]:
        try:
            cutoff = parse_iso_ms(iso_timestamp)
        except (AttributeError, ValueError) as e:
            raise SnapshotQueryError(f"Invalid snapshot timestamp {iso_timestamp!r}") from e
        latest: Dict[str, SnapshotEntry] = {}
        with self._lock:
            entries = list(self._entries)
        for entry in entries:
            if entry.timestamp_ms is None or entry.timestamp_ms > cutoff:
                continue
            current = latest.get(entry.key)
            if current is None or entry.timestamp_ms >= current.timestamp_ms:
                latest[entry.key] = entry
        logger.debug(f"[HistoryLog] Snapshot at {iso_timestamp}: {len(latest)} topic(s)")
        return list(latest.values())

    def _trim(self) -> None:
        if self.max_entries is not None and len(self._entries) > self.max_entries:
            del self._entries[: len(self._entries) - self.max_entries]
