"""
Theming.

Status colors shared by the effect rules and the diagram widgets.
"""

from .status_palette import StatusPalette

__all__ = [
    "StatusPalette",
]
