"""
Diagram model.

SVG document wrapper, bound element scanning and load-time baselines.
"""

from .document import (
    DiagramDocument,
    local_name,
    is_text_element,
    get_classes,
    has_class,
    add_class,
    remove_class,
    get_style_property,
    set_style_property,
)
from .bound_elements import BoundElement, ElementKind, AlarmRule, Comparator, scan_bound_elements
from .baseline import DiagramBaseline

__all__ = [
    "DiagramDocument",
    "local_name",
    "is_text_element",
    "get_classes",
    "has_class",
    "add_class",
    "remove_class",
    "get_style_property",
    "set_style_property",
    "BoundElement",
    "ElementKind",
    "AlarmRule",
    "Comparator",
    "scan_bound_elements",
    "DiagramBaseline",
]
