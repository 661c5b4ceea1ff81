"""
Default visual effect rules.

Applies, in fixed precedence, to one bound element and its new value:

1. Special per-element visual mappings (``VISUAL_MAPPINGS``), exclusive.
2. Status/alert fill coloring of text elements, with the alarm marker class.
3. Text update (non-integer floats with exactly two decimals).
4. Alarm-line visibility from the element's alarm rule.

The enclosing container then receives a transient highlight class.
"""

import json
import logging
import math
import xml.etree.ElementTree as ET
from typing import Any, Callable, Dict, Optional, Tuple

from pyqt_synoptic.core.highlight_timers import HighlightTimers
from pyqt_synoptic.diagram import (
    DiagramDocument,
    DiagramBaseline,
    BoundElement,
    AlarmRule,
    Comparator,
    is_text_element,
    add_class,
    remove_class,
    has_class,
    set_style_property,
)
from pyqt_synoptic.protocols import SynopticConfig, get_synoptic_config
from pyqt_synoptic.theming import StatusPalette

logger = logging.getLogger(__name__)

# Key paths colored on the alert-level axis (red / amber / blue)
ALERT_LEVEL_KEY_PATHS = frozenset({"alert_level", "global_status"})
ALERT_LEVEL_RED = frozenset({"red", "INTERRUPTED"})
ALERT_LEVEL_AMBER = frozenset({"yellow", "PERTURBED"})

# Status keywords, compared lower-cased
STATUS_ERROR_KEYWORDS = frozenset({
    "damaged", "offline", "breached", "error", "stopped_emergency", "cancelled",
})
STATUS_ERROR_FRAGMENTS = ("interrupted",)
STATUS_HEALTHY_KEYWORDS = frozenset({
    "online", "empty", "green", "clear", "patrol", "ok", "running",
})

VisualMapping = Callable[[float], Dict[str, float]]


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# (element id, key path) -> attribute values derived from a 0-100 reading
VISUAL_MAPPINGS: Dict[Tuple[str, str], VisualMapping] = {
    ("shield-visual-effect", "power"): lambda v: {
        "stroke-opacity": _clamp((v / 100.0) * 0.7 + 0.1, 0.0, 1.0),
        "stroke-width": 2 + (v / 100.0) * 8,
    },
    ("laser-charge-visual", "value"): lambda v: {
        "width": max(0.0, (v / 100.0) * 140),
    },
}


def to_number(value: Any) -> Optional[float]:
    """Numeric reading of ``value``; None for booleans, NaN and non-numeric text."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            return None
    if math.isnan(number):
        return None
    return number


def format_value(value: Any) -> str:
    """Text shown for a value: two decimals for non-integer floats."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        if math.isfinite(value):
            return f"{value:.2f}"
        return str(value)
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def _as_string(value: Any) -> str:
    """Plain string form used for equality comparisons (no rounding)."""
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    if isinstance(value, (bool, dict, list)):
        return format_value(value)
    return str(value)


def evaluate_alarm(value: Any, rule: AlarmRule) -> bool:
    """True when ``value`` is in alarm under ``rule``."""
    if rule.comparator is Comparator.EQ:
        return _as_string(value) == rule.threshold
    if rule.comparator is Comparator.NEQ:
        return _as_string(value) != rule.threshold

    number = to_number(value)
    threshold = to_number(rule.threshold)
    if number is None or threshold is None:
        return False
    if rule.comparator is Comparator.H:
        return number > threshold
    return number < threshold


class EffectRenderer:
    """Applies the default rule set to bound elements of one diagram session."""

    def __init__(
        self,
        document: DiagramDocument,
        baseline: DiagramBaseline,
        highlights: HighlightTimers,
        config: Optional[SynopticConfig] = None,
        palette: Optional[StatusPalette] = None,
        visual_mappings: Optional[Dict[Tuple[str, str], VisualMapping]] = None,
        on_changed: Optional[Callable[[], None]] = None,
    ):
        self._document = document
        self._baseline = baseline
        self._highlights = highlights
        self._config = config or get_synoptic_config()
        self._palette = palette or StatusPalette()
        self._visual_mappings = VISUAL_MAPPINGS if visual_mappings is None else visual_mappings
        self.on_changed = on_changed

    def apply(self, bound: BoundElement, value: Any) -> None:
        """Run the rule set for one element."""
        if self._apply_visual_mapping(bound, value):
            return

        element = bound.element
        if is_text_element(element):
            self._apply_status_color(bound, value)
            self._apply_text(element, value)

        if bound.alarm is not None:
            self._apply_alarm(element, bound.alarm, value)

    def pulse(self, container: ET.Element) -> None:
        """Add the highlight class to ``container`` and schedule its removal."""
        highlight_class = self._config.highlight_class
        self._baseline.touch(container)
        add_class(container, highlight_class)
        def expire():
            remove_class(container, highlight_class)
            if self.on_changed is not None:
                self.on_changed()

        self._highlights.schedule(container, self._config.highlight_ms, expire)

    def hide_alarm_lines(self) -> int:
        """Hide every alarm-line container. Returns how many were hidden."""
        count = 0
        for element in self._document.iter_class(self._config.alarm_line_class):
            self._baseline.touch(element)
            set_style_property(element, "visibility", "hidden")
            count += 1
        return count

    # --- Rules ---

    def _apply_visual_mapping(self, bound: BoundElement, value: Any) -> bool:
        mapping = self._visual_mappings.get((bound.element_id, bound.key_path))
        if mapping is None:
            return False
        number = to_number(value)
        if number is None:
            return False
        self._baseline.touch(bound.element)
        for attr, attr_value in mapping(number).items():
            bound.element.set(attr, f"{attr_value:.2f}")
        return True

    def _apply_status_color(self, bound: BoundElement, value: Any) -> None:
        element = bound.element
        key_path = bound.key_path
        fill: Optional[str] = None

        if key_path in ALERT_LEVEL_KEY_PATHS:
            text = format_value(value)
            if text in ALERT_LEVEL_RED:
                fill = self._palette.error_hex
            elif text in ALERT_LEVEL_AMBER:
                fill = self._palette.warning_hex
            else:
                fill = self._palette.info_hex
        elif "status" in key_path.lower():
            text = format_value(value).lower()
            if text in STATUS_ERROR_KEYWORDS or any(f in text for f in STATUS_ERROR_FRAGMENTS):
                fill = self._palette.error_hex
            elif text in STATUS_HEALTHY_KEYWORDS:
                fill = self._palette.success_hex
            else:
                fill = self._palette.warning_hex

        self._baseline.touch(element)
        if fill is not None:
            element.set("fill", fill)

        alarm_text_class = self._config.alarm_text_class
        if element.get("fill") == self._palette.error_hex and not has_class(element, self._config.text_data_class):
            add_class(element, alarm_text_class)
        else:
            remove_class(element, alarm_text_class)

    def _apply_text(self, element: ET.Element, value: Any) -> None:
        """Replace the element's whole text content.

        A lone ``<tspan>`` child (the usual Inkscape layout) receives the value
        so its positioning survives; any other children are dropped.
        """
        self._baseline.touch(element)
        children = list(element)
        target = element
        if len(children) == 1 and is_text_element(children[0]):
            target = children[0]
            element.text = None
            self._baseline.touch(target)
        for child in list(target):
            target.remove(child)
        target.text = format_value(value)

    def _apply_alarm(self, element: ET.Element, rule: AlarmRule, value: Any) -> None:
        target = self._document.closest(element, self._config.alarm_line_class) or element
        visible = evaluate_alarm(value, rule)
        self._baseline.touch(target)
        set_style_property(target, "visibility", "visible" if visible else "hidden")
