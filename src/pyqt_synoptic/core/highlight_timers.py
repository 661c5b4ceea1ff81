"""Per-element highlight timers with cancel-then-schedule semantics."""

from typing import Callable, Dict, Hashable
from PyQt6.QtCore import QTimer


class HighlightTimers:
    """
    One single-shot fade-out timer per key.

    Scheduling a key that is already pulsing stops its timer before the new one
    starts, so at most one timer per element is ever alive.

    Usage:
        self._timers = HighlightTimers()

        def pulse(self, element):
            add_class(element, "highlight")
            self._timers.schedule(element, 500, lambda: remove_class(element, "highlight"))
    """

    def __init__(self):
        self._timers: Dict[Hashable, QTimer] = {}

    def schedule(self, key: Hashable, delay_ms: int, on_expire: Callable[[], None]) -> None:
        """Start (or restart) the timer for ``key``."""
        self.cancel(key)

        timer = QTimer()
        timer.setSingleShot(True)

        def expire():
            # A replaced timer must not drop its successor
            if self._timers.get(key) is timer:
                del self._timers[key]
            on_expire()

        timer.timeout.connect(expire)
        self._timers[key] = timer
        timer.start(delay_ms)

    def cancel(self, key: Hashable) -> None:
        """Cancel the pending timer for ``key``, if any."""
        timer = self._timers.pop(key, None)
        if timer is not None:
            timer.stop()

    def cancel_all(self) -> None:
        """Cancel every pending timer without firing handlers."""
        for timer in self._timers.values():
            timer.stop()
        self._timers.clear()

    def is_pending(self, key: Hashable) -> bool:
        return key in self._timers

    def __len__(self) -> int:
        return len(self._timers)
