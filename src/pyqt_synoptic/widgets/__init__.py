"""
Synoptic widgets.

SVG view, timeline slider and the panel combining them with an engine.
"""

from .synoptic_view import SynopticView
from .timeline_slider import TimelineSlider, format_timestamp
from .synoptic_panel import SynopticPanel

__all__ = [
    "SynopticView",
    "TimelineSlider",
    "format_timestamp",
    "SynopticPanel",
]
