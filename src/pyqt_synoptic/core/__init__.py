"""
Core PyQt6 utilities.

Frame pacing, per-element timers, background tasks and timing helpers
with no diagram-specific logic.
"""

from .frame_scheduler import FrameScheduler, QtFrameScheduler, detect_screen_refresh_rate, resolve_frame_ms
from .highlight_timers import HighlightTimers
from .background_task import BackgroundTask, BackgroundTaskManager, TaskRunner
from .performance_monitor import timer, timed, configure_performance_logging

__all__ = [
    "FrameScheduler",
    "QtFrameScheduler",
    "detect_screen_refresh_rate",
    "resolve_frame_ms",
    "HighlightTimers",
    "BackgroundTask",
    "BackgroundTaskManager",
    "TaskRunner",
    "timer",
    "timed",
    "configure_performance_logging",
]
