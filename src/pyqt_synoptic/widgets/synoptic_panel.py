"""Diagram selector, history toggle, timeline and view wired to one engine."""

import logging
from typing import Optional

from PyQt6.QtWidgets import QWidget, QVBoxLayout, QHBoxLayout, QComboBox, QCheckBox, QLabel

from pyqt_synoptic.engine import SynopticEngine, TimelineMode
from pyqt_synoptic.theming import StatusPalette
from pyqt_synoptic.widgets.synoptic_view import SynopticView
from pyqt_synoptic.widgets.timeline_slider import TimelineSlider

logger = logging.getLogger(__name__)


class SynopticPanel(QWidget):
    """
    Complete synoptic page.

    Usage:
        engine = SynopticEngine()
        panel = SynopticPanel(engine, parent=self)
        panel.refresh_diagrams()
        panel.set_timeline_bounds(first_ms, last_ms)
    """

    def __init__(self, engine: SynopticEngine, palette: Optional[StatusPalette] = None, parent=None):
        super().__init__(parent)
        self.engine = engine
        self._palette = palette or StatusPalette()
        self._setup_ui()
        self._connect_signals()
        self._on_mode_changed(engine.mode)

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)
        layout.setSpacing(4)

        toolbar = QHBoxLayout()
        toolbar.addWidget(QLabel("Diagram:"))
        self.diagram_combo = QComboBox()
        self.diagram_combo.setMinimumWidth(200)
        toolbar.addWidget(self.diagram_combo, 1)

        self.history_checkbox = QCheckBox("History")
        self.history_checkbox.setToolTip("Replay the diagram at a past time")
        toolbar.addWidget(self.history_checkbox)
        layout.addLayout(toolbar)

        self.timeline = TimelineSlider()
        layout.addWidget(self.timeline)

        self.view = SynopticView(palette=self._palette)
        layout.addWidget(self.view, 1)
        self.view.attach(self.engine)

    def _connect_signals(self):
        self.diagram_combo.currentTextChanged.connect(self._on_diagram_selected)
        self.history_checkbox.toggled.connect(self.engine.set_history_mode)
        self.timeline.cursor_moved.connect(self.engine.preview_history)
        self.timeline.cursor_released.connect(self.engine.seek_history)
        self.engine.mode_changed.connect(self._on_mode_changed)
        self.engine.cursor_changed.connect(self.timeline.set_cursor)

    # --- Public API ---

    def refresh_diagrams(self) -> None:
        """Repopulate the selector from the engine's diagram source."""
        current = self.engine.diagram_name
        names = self.engine.list_diagrams()

        self.diagram_combo.blockSignals(True)
        try:
            self.diagram_combo.clear()
            self.diagram_combo.addItems(names)
            if current in names:
                self.diagram_combo.setCurrentText(current)
            else:
                self.diagram_combo.setCurrentIndex(-1)
        finally:
            self.diagram_combo.blockSignals(False)
        logger.debug(f"SynopticPanel: {len(names)} diagram(s) available")

    def set_timeline_bounds(self, min_ms: float, max_ms: float) -> None:
        self.engine.set_timeline_bounds(min_ms, max_ms)
        self.timeline.update_ui(min_ms, max_ms, self.engine.mode_controller.cursor_ms)

    # --- Slots ---

    def _on_diagram_selected(self, name: str):
        if name:
            self.engine.load_diagram(name)

    def _on_mode_changed(self, mode: TimelineMode):
        self.history_checkbox.blockSignals(True)
        self.history_checkbox.setChecked(not mode.is_live)
        self.history_checkbox.blockSignals(False)
        self.timeline.setEnabled(not mode.is_live)

    def closeEvent(self, event):
        self.engine.shutdown()
        super().closeEvent(event)
