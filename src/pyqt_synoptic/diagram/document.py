"""
SVG diagram document.

Thin wrapper around an ``xml.etree.ElementTree`` tree with the lookups the
engine needs: elements by id (duplicates allowed), parents, nearest ancestor
with a class, and inline style / class manipulation.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Dict, Iterator, List, Optional

from pyqt_synoptic.io.exceptions import DiagramLoadError

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

# Serialize without ns0: prefixes so renderers see plain SVG
ET.register_namespace("", SVG_NS)
ET.register_namespace("xlink", XLINK_NS)

TEXT_TAGS = frozenset({"text", "tspan"})


def local_name(element: ET.Element) -> str:
    """Tag name without namespace (``{ns}text`` -> ``text``)."""
    tag = element.tag
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def is_text_element(element: ET.Element) -> bool:
    return local_name(element) in TEXT_TAGS


def get_classes(element: ET.Element) -> List[str]:
    return element.get("class", "").split()


def has_class(element: ET.Element, class_name: str) -> bool:
    return class_name in get_classes(element)


def add_class(element: ET.Element, class_name: str) -> None:
    classes = get_classes(element)
    if class_name not in classes:
        classes.append(class_name)
        element.set("class", " ".join(classes))


def remove_class(element: ET.Element, class_name: str) -> None:
    classes = get_classes(element)
    if class_name not in classes:
        return
    classes = [c for c in classes if c != class_name]
    if classes:
        element.set("class", " ".join(classes))
    else:
        element.attrib.pop("class", None)


def _parse_style(style: str) -> Dict[str, str]:
    props: Dict[str, str] = {}
    for declaration in style.split(";"):
        name, sep, value = declaration.partition(":")
        if sep and name.strip():
            props[name.strip()] = value.strip()
    return props


def get_style_property(element: ET.Element, name: str) -> Optional[str]:
    return _parse_style(element.get("style", "")).get(name)


def set_style_property(element: ET.Element, name: str, value: Optional[str]) -> None:
    """Set (or with ``None`` remove) one inline style property."""
    props = _parse_style(element.get("style", ""))
    if value is None:
        props.pop(name, None)
    else:
        props[name] = value
    if props:
        element.set("style", "; ".join(f"{k}: {v}" for k, v in props.items()))
    else:
        element.attrib.pop("style", None)


class DiagramDocument:
    """A loaded SVG diagram.

    Plugins receive this object as ``root``; ``document.root`` is the raw
    ``<svg>`` element for code that prefers plain ElementTree.
    """

    def __init__(self, name: str, root: ET.Element):
        if local_name(root) != "svg":
            raise DiagramLoadError(f"Diagram '{name}' has no <svg> root element")
        self.name = name
        self.root = root
        self._ids: Dict[str, List[ET.Element]] = {}
        self._parents: Dict[ET.Element, ET.Element] = {}
        self.reindex()

    @classmethod
    def from_string(cls, name: str, text: str) -> "DiagramDocument":
        """
        Parse SVG text.

        Raises:
            DiagramLoadError: If the text is not well-formed SVG
        """
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            raise DiagramLoadError(f"The diagram '{name}' could not be parsed: {e}") from e
        return cls(name, root)

    def reindex(self) -> None:
        """Rebuild id and parent indexes. Call after adding or removing elements."""
        self._ids.clear()
        self._parents.clear()
        for parent in self.root.iter():
            element_id = parent.get("id")
            if element_id:
                self._ids.setdefault(element_id, []).append(parent)
            for child in parent:
                self._parents[child] = parent
        logger.debug(f"Indexed diagram '{self.name}': {len(self._ids)} ids, {len(self._parents) + 1} elements")

    def elements_by_id(self, element_id: str) -> List[ET.Element]:
        """All elements carrying ``element_id``, in document order."""
        return list(self._ids.get(element_id, ()))

    def element_by_id(self, element_id: str) -> Optional[ET.Element]:
        found = self._ids.get(element_id)
        return found[0] if found else None

    def parent_of(self, element: ET.Element) -> Optional[ET.Element]:
        return self._parents.get(element)

    def closest(self, element: ET.Element, class_name: str) -> Optional[ET.Element]:
        """Nearest element with ``class_name``, starting at ``element`` itself."""
        current: Optional[ET.Element] = element
        while current is not None:
            if has_class(current, class_name):
                return current
            current = self._parents.get(current)
        return None

    def iter_class(self, class_name: str) -> Iterator[ET.Element]:
        return (el for el in self.root.iter() if has_class(el, class_name))

    def iter(self) -> Iterator[ET.Element]:
        return self.root.iter()

    def to_bytes(self) -> bytes:
        return ET.tostring(self.root, encoding="utf-8")

    def to_string(self) -> str:
        return ET.tostring(self.root, encoding="unicode")
