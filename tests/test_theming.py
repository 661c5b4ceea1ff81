"""Tests for status colors."""

import pytest


def test_status_palette_hex():
    """Default palette colors."""
    from pyqt_synoptic.theming import StatusPalette

    palette = StatusPalette()
    assert palette.all_hex() == ("#f85149", "#d29922", "#3fb950", "#58a6ff")


def test_status_palette_qcolor(qapp):
    """RGB tuples convert to QColor."""
    from pyqt_synoptic.theming import StatusPalette

    palette = StatusPalette()
    color = palette.to_qcolor(palette.success)
    assert color.name() == "#3fb950"


def test_custom_palette_drives_rules(qapp, document):
    """A custom palette changes the fills written by the rules."""
    from pyqt_synoptic import SynopticConfig
    from pyqt_synoptic.engine import DiagramSession
    from pyqt_synoptic.theming import StatusPalette

    palette = StatusPalette(success=(0, 255, 0))
    session = DiagramSession.create(document, SynopticConfig(), palette)
    status = document.element_by_id("boiler-status")
    session.renderer.apply(session.bound[status], "ok")

    assert status.get("fill") == "#00ff00"
