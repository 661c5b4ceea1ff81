"""Point-in-time snapshot replay."""

import logging
from typing import Any, Dict, Iterable, List

from pyqt_synoptic.core.performance_monitor import timer
from pyqt_synoptic.engine.session import DiagramSession
from pyqt_synoptic.engine.update_record import SnapshotEntry

logger = logging.getLogger(__name__)

REPLAY_LOG_THRESHOLD_MS = 16.0


def dedupe_entries(entries: Iterable[Any]) -> List[SnapshotEntry]:
    """Coerce entries and keep the last occurrence per ``source|topic`` key.

    Order follows the first appearance of each key. Entries that cannot be
    coerced are logged and skipped.
    """
    latest: Dict[str, SnapshotEntry] = {}
    for item in entries or ():
        try:
            entry = SnapshotEntry.coerce(item)
        except (TypeError, ValueError) as e:
            logger.warning(f"[SnapshotReplayer] Skipping snapshot entry: {e}")
            continue
        latest[entry.key] = entry
    return list(latest.values())


class SnapshotReplayer:
    """
    Rebuilds a session's visual state from one snapshot.

    The diagram is first returned to its pristine look (timers cancelled,
    touched elements restored, alarm lines hidden, plugin reset), then each
    entry goes through the same strategy dispatch used for live updates.
    """

    def __init__(self, session: DiagramSession):
        self.session = session

    def apply(self, entries: Iterable[Any]) -> int:
        """Replay ``entries``. Returns the number of records dispatched."""
        strategy = self.session.strategy
        if strategy is None:
            raise RuntimeError(f"Session '{self.session.name}' has no binding strategy")

        unique = dedupe_entries(entries)
        with timer("Snapshot replay", threshold_ms=REPLAY_LOG_THRESHOLD_MS, log_args=True, entries=len(unique)):
            self.session.highlights.cancel_all()
            strategy.reset()
            for entry in unique:
                strategy.dispatch(entry.to_record())

        logger.info(f"[SnapshotReplayer] Replayed {len(unique)} topic(s) on '{self.session.name}'")
        return len(unique)
