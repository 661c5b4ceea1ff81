"""SVG view for a live synoptic document."""

import logging
from typing import Optional

from PyQt6.QtCore import Qt, QByteArray, QRectF, QSize
from PyQt6.QtGui import QPainter
from PyQt6.QtSvg import QSvgRenderer
from PyQt6.QtWidgets import QWidget, QLabel, QVBoxLayout, QGraphicsOpacityEffect

from pyqt_synoptic.theming import StatusPalette

logger = logging.getLogger(__name__)

# --- Module-level constants ---
LOADING_OPACITY = 0.4


class SynopticView(QWidget):
    """
    Renders the engine's document with ``QSvgRenderer``.

    The SVG is re-serialized on every ``document_changed``; coalescing keeps
    that to at most once per frame. Load failures replace the drawing with an
    inline error message.

    Usage:
        view = SynopticView(parent=self)
        view.attach(engine)
    """

    def __init__(self, palette: Optional[StatusPalette] = None, parent=None):
        super().__init__(parent)
        self._palette = palette or StatusPalette()
        self._renderer = QSvgRenderer(self)
        self._renderer.repaintNeeded.connect(self.update)
        self._engine = None
        self._has_document = False
        self._setup_ui()

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self._error_label = QLabel("")
        self._error_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._error_label.setWordWrap(True)
        self._error_label.setStyleSheet(f"color: {self._palette.error_hex};")
        self._error_label.hide()
        layout.addWidget(self._error_label)

    # --- Engine wiring ---

    def attach(self, engine) -> None:
        """Follow ``engine``'s document, load errors and loading state."""
        self._engine = engine
        engine.document_changed.connect(self.refresh)
        engine.diagram_loaded.connect(lambda _name: self.clear_error())
        engine.diagram_failed.connect(lambda _name, message: self.show_error(message))
        engine.loading_changed.connect(self.set_loading)
        self.refresh()

    def refresh(self) -> None:
        document = self._engine.document if self._engine is not None else None
        if document is None:
            self.set_svg(None)
            return
        self.set_svg(document.to_bytes())

    # --- Display ---

    def set_svg(self, data: Optional[bytes]) -> bool:
        """Show ``data`` (SVG bytes), or clear the view when None."""
        if data is None:
            self._has_document = False
            self.update()
            return False
        ok = self._renderer.load(QByteArray(data))
        if not ok:
            logger.warning("SynopticView: renderer rejected the document")
        self._has_document = ok
        self.update()
        return ok

    def has_document(self) -> bool:
        return self._has_document

    def show_error(self, message: str) -> None:
        self.set_svg(None)
        self._error_label.setText(message)
        self._error_label.show()

    def clear_error(self) -> None:
        self._error_label.hide()
        self._error_label.setText("")

    @property
    def error_text(self) -> str:
        return self._error_label.text() if self._error_label.isVisible() else ""

    def set_loading(self, loading: bool) -> None:
        """Dim the drawing while a snapshot is being fetched."""
        if loading:
            effect = QGraphicsOpacityEffect()
            effect.setOpacity(LOADING_OPACITY)
            self.setGraphicsEffect(effect)
        else:
            self.setGraphicsEffect(None)

    @property
    def is_dimmed(self) -> bool:
        return self.graphicsEffect() is not None

    def sizeHint(self) -> QSize:
        if self._has_document:
            return self._renderer.defaultSize()
        return QSize(640, 480)

    def paintEvent(self, event):
        if not self._has_document:
            return
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        # Keep aspect ratio, centered
        view_box = self._renderer.viewBoxF()
        if view_box.isEmpty():
            target = QRectF(self.rect())
        else:
            scale = min(self.width() / view_box.width(), self.height() / view_box.height())
            w, h = view_box.width() * scale, view_box.height() * scale
            target = QRectF((self.width() - w) / 2, (self.height() - h) / 2, w, h)
        self._renderer.render(painter, target)
        painter.end()
