"""
Status colors for synoptic diagrams.

Fill colors written by the status/alert rules. Dark-background friendly
values; the red entry doubles as the alarm marker trigger.
"""

from dataclasses import dataclass
from typing import Tuple

from PyQt6.QtGui import QColor


@dataclass(frozen=True)
class StatusPalette:
    """Semantic status colors as RGB tuples."""

    error: Tuple[int, int, int] = (248, 81, 73)      # #f85149 - Errors, interruptions
    warning: Tuple[int, int, int] = (210, 153, 34)   # #d29922 - Alerts, transitional states
    success: Tuple[int, int, int] = (63, 185, 80)    # #3fb950 - Healthy states
    info: Tuple[int, int, int] = (88, 166, 255)      # #58a6ff - Nominal alert level

    def to_hex(self, color_tuple: Tuple[int, int, int]) -> str:
        """
        Convert RGB tuple to hex color string.

        Args:
            color_tuple: RGB color tuple (r, g, b)

        Returns:
            str: Hex color string (e.g., "#f85149")
        """
        r, g, b = color_tuple
        return f"#{r:02x}{g:02x}{b:02x}"

    def to_qcolor(self, color_tuple: Tuple[int, int, int]) -> QColor:
        return QColor(*color_tuple)

    @property
    def error_hex(self) -> str:
        return self.to_hex(self.error)

    @property
    def warning_hex(self) -> str:
        return self.to_hex(self.warning)

    @property
    def success_hex(self) -> str:
        return self.to_hex(self.success)

    @property
    def info_hex(self) -> str:
        return self.to_hex(self.info)

    def all_hex(self) -> Tuple[str, ...]:
        return (self.error_hex, self.warning_hex, self.success_hex, self.info_hex)
