"""Pristine element state captured at diagram load."""

import logging
import xml.etree.ElementTree as ET
from typing import Dict, List, Optional, Tuple

from pyqt_synoptic.diagram.document import DiagramDocument

logger = logging.getLogger(__name__)


class DiagramBaseline:
    """
    Load-time text, attributes and children of every element, plus the set of
    elements the default rules have mutated since.

    Elements created after capture (e.g. by a plugin) have no baseline and are
    left alone by ``restore_touched``.
    """

    def __init__(self, document: DiagramDocument):
        self._pristine: Dict[ET.Element, Tuple[Optional[str], Dict[str, str], List[ET.Element]]] = {
            el: (el.text, dict(el.attrib), list(el)) for el in document.iter()
        }
        self._touched: Dict[ET.Element, None] = {}

    def touch(self, element: ET.Element) -> None:
        """Record that ``element`` is about to be mutated."""
        if element in self._pristine:
            self._touched[element] = None

    @property
    def touched_count(self) -> int:
        return len(self._touched)

    def restore_touched(self) -> int:
        """Put every touched element back to its captured state.

        Returns:
            Number of elements restored
        """
        restored = 0
        for element in self._touched:
            text, attrib, children = self._pristine[element]
            element.text = text
            element.attrib.clear()
            element.attrib.update(attrib)
            element[:] = children
            restored += 1
        self._touched.clear()
        logger.debug(f"Restored {restored} element(s) to baseline")
        return restored
