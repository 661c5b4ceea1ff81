"""Bound element scanning.

Any element carrying ``data-key`` reflects the value at that key path.
``data-alarm-type`` / ``data-alarm-value`` attach an alarm rule to it.
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from pyqt_synoptic.diagram.document import DiagramDocument, is_text_element

KEY_ATTR = "data-key"
ALARM_TYPE_ATTR = "data-alarm-type"
ALARM_VALUE_ATTR = "data-alarm-value"


class ElementKind(Enum):
    TEXT = "text"
    SHAPE_ATTRIBUTE = "shape-attribute"
    ALARM_LINE = "alarm-line"


class Comparator(Enum):
    EQ = "EQ"
    NEQ = "NEQ"
    H = "H"
    L = "L"


@dataclass(frozen=True)
class AlarmRule:
    """Alarm condition evaluated against each new value of the element."""
    comparator: Comparator
    threshold: str

    @classmethod
    def from_element(cls, element: ET.Element) -> Optional["AlarmRule"]:
        """Read the rule from data attributes; None if absent or unknown comparator."""
        alarm_type = element.get(ALARM_TYPE_ATTR)
        threshold = element.get(ALARM_VALUE_ATTR)
        if not alarm_type or not threshold:
            return None
        try:
            return cls(Comparator(alarm_type.strip().upper()), threshold)
        except ValueError:
            return None


@dataclass(frozen=True, eq=False)
class BoundElement:
    """A diagram node bound to a key path. Identity semantics: one per node."""
    element: ET.Element
    key_path: str
    kind: ElementKind
    alarm: Optional[AlarmRule] = None

    @property
    def element_id(self) -> Optional[str]:
        return self.element.get("id")


def scan_bound_elements(document: DiagramDocument) -> Dict[ET.Element, BoundElement]:
    """Map every ``data-key`` node of ``document`` to its BoundElement, in document order."""
    bound: Dict[ET.Element, BoundElement] = {}
    for element in document.iter():
        key_path = element.get(KEY_ATTR)
        if not key_path:
            continue
        alarm = AlarmRule.from_element(element)
        if is_text_element(element):
            kind = ElementKind.TEXT
        elif alarm is not None:
            kind = ElementKind.ALARM_LINE
        else:
            kind = ElementKind.SHAPE_ATTRIBUTE
        bound[element] = BoundElement(element, key_path, kind, alarm)
    return bound
