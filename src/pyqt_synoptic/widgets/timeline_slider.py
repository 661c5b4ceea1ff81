"""Single-handle timeline slider over epoch milliseconds."""

from datetime import datetime
from typing import Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import QWidget, QHBoxLayout, QLabel, QSlider

# --- Module-level constants ---
STEP_MS = 1000                      # Slider resolution
LABEL_FORMAT = "%H:%M:%S %d/%m/%y"


def format_timestamp(timestamp_ms: Optional[float]) -> str:
    """Local time label for ``timestamp_ms``; empty for None."""
    if timestamp_ms is None:
        return ""
    return datetime.fromtimestamp(timestamp_ms / 1000.0).strftime(LABEL_FORMAT)


class TimelineSlider(QWidget):
    """
    Time cursor between a min and max timestamp.

    QSlider values are 32-bit, so positions are stored as ``STEP_MS`` steps
    from the minimum.

    Signals:
        cursor_moved(float): While dragging (preview only)
        cursor_released(float): Drag ended or the value changed from the keyboard
    """

    cursor_moved = pyqtSignal(float)
    cursor_released = pyqtSignal(float)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._min_ms = 0.0
        self._max_ms = 0.0
        self._setup_ui()

    def _setup_ui(self):
        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(6)

        self._slider = QSlider(Qt.Orientation.Horizontal)
        self._slider.setRange(0, 0)
        self._slider.sliderMoved.connect(self._on_slider_moved)
        self._slider.sliderReleased.connect(self._on_slider_released)
        self._slider.valueChanged.connect(self._on_value_changed)
        layout.addWidget(self._slider, 1)

        self._label = QLabel("")
        self._label.setMinimumWidth(120)
        layout.addWidget(self._label)

    # --- Conversion ---

    def _to_position(self, timestamp_ms: float) -> int:
        return int(round((timestamp_ms - self._min_ms) / STEP_MS))

    def _to_timestamp(self, position: int) -> float:
        return min(self._max_ms, self._min_ms + position * STEP_MS)

    # --- Public API ---

    def update_ui(self, min_ms: float, max_ms: float, current_ms: Optional[float] = None) -> None:
        """Set range and cursor without emitting signals."""
        self._min_ms = float(min_ms)
        self._max_ms = float(max(min_ms, max_ms))
        if current_ms is None:
            current_ms = self._max_ms
        current_ms = max(self._min_ms, min(self._max_ms, current_ms))

        self._slider.blockSignals(True)
        try:
            self._slider.setRange(0, self._to_position(self._max_ms))
            self._slider.setValue(self._to_position(current_ms))
        finally:
            self._slider.blockSignals(False)
        self._label.setText(format_timestamp(current_ms))

    def set_cursor(self, timestamp_ms: float) -> None:
        """Move the handle without emitting signals (e.g. following the engine)."""
        if self._slider.isSliderDown():
            return
        self.update_ui(self._min_ms, self._max_ms, timestamp_ms)

    def value(self) -> float:
        return self._to_timestamp(self._slider.value())

    def label_text(self) -> str:
        return self._label.text()

    # --- Slots ---

    def _on_slider_moved(self, position: int):
        timestamp = self._to_timestamp(position)
        self._label.setText(format_timestamp(timestamp))
        self.cursor_moved.emit(timestamp)

    def _on_slider_released(self):
        self.cursor_released.emit(self.value())

    def _on_value_changed(self, position: int):
        # Dragging reports through sliderMoved / sliderReleased
        if self._slider.isSliderDown():
            return
        timestamp = self._to_timestamp(position)
        self._label.setText(format_timestamp(timestamp))
        self.cursor_released.emit(timestamp)
