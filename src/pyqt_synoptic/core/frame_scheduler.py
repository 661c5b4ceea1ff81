"""Host "run on next frame" primitive with screen refresh rate detection."""

import logging
from typing import Callable, Optional, Protocol

from PyQt6.QtCore import QTimer

from pyqt_synoptic.protocols import SynopticConfig, get_synoptic_config

logger = logging.getLogger(__name__)


def detect_screen_refresh_rate() -> int:
    """Detect primary screen refresh rate.

    Returns:
        Detected refresh rate (Hz), or 60 if detection fails.
    """
    try:
        from PyQt6.QtGui import QGuiApplication

        app = QGuiApplication.instance()
        if app is None:
            logger.warning("[FrameScheduler] No QApplication instance, defaulting to 60Hz")
            return 60

        screen = app.primaryScreen()
        if screen is None:
            logger.warning("[FrameScheduler] No primary screen found, defaulting to 60Hz")
            return 60

        refresh_rate = screen.refreshRate()

        # Sanity check: typical refresh rates are 60, 75, 120, 144, 165, 240
        if refresh_rate < 30 or refresh_rate > 500:
            logger.warning(f"[FrameScheduler] Unusual refresh rate detected: {refresh_rate}Hz, defaulting to 60Hz")
            return 60

        logger.info(f"[FrameScheduler] Detected screen refresh rate: {refresh_rate}Hz")
        return int(refresh_rate)
    except Exception as e:
        logger.warning(f"[FrameScheduler] Failed to detect refresh rate: {e}, defaulting to 60Hz")
        return 60


def resolve_frame_ms(config: SynopticConfig) -> int:
    """Frame interval from explicit ``frame_ms``, ``target_fps`` or the screen, capped by ``max_fps``."""
    if config.frame_ms is not None:
        return max(0, config.frame_ms)

    fps = config.target_fps
    if fps is None:
        fps = detect_screen_refresh_rate()

    if config.max_fps is not None and fps > config.max_fps:
        logger.info(f"[FrameScheduler] Capping FPS from {fps} to {config.max_fps} (max_fps limit)")
        fps = config.max_fps

    return int(1000 / fps)


class FrameScheduler(Protocol):
    """Runs a callback once on the next display refresh cycle."""

    def schedule(self, callback: Callable[[], None]) -> None:
        ...


class QtFrameScheduler:
    """
    Frame scheduler backed by ``QTimer.singleShot``.

    Usage:
        scheduler = QtFrameScheduler()
        scheduler.schedule(self._flush)  # runs on the next frame tick
    """

    def __init__(self, frame_ms: Optional[int] = None, config: Optional[SynopticConfig] = None):
        if frame_ms is None:
            frame_ms = resolve_frame_ms(config or get_synoptic_config())
        self.frame_ms = frame_ms
        logger.debug(f"[FrameScheduler] Using {self.frame_ms}ms frame interval")

    def schedule(self, callback: Callable[[], None]) -> None:
        QTimer.singleShot(self.frame_ms, callback)
