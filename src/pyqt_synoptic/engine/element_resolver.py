"""Topic to diagram element resolution with a per-identifier lookup cache."""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from pyqt_synoptic.diagram import DiagramDocument, BoundElement
from pyqt_synoptic.protocols import SynopticConfig, get_synoptic_config

logger = logging.getLogger(__name__)


@dataclass
class ResolvedTarget:
    """A container element and the bound elements nested inside it."""
    container: ET.Element
    bound_elements: List[BoundElement] = field(default_factory=list)


class ElementResolver:
    """
    Resolves ``(source_id, topic_id)`` to the containers that react to it.

    Lookup order: the scoped identifier ``<source_id>-<normalized topic>``,
    then the generic identifier ``<normalized topic>``. Every identifier's
    result is cached, empty results included, until ``reset()``.
    """

    def __init__(
        self,
        document: DiagramDocument,
        bound: Dict[ET.Element, BoundElement],
        config: Optional[SynopticConfig] = None,
    ):
        self._document = document
        self._bound = bound
        self._config = config or get_synoptic_config()
        self._cache: Dict[str, List[ResolvedTarget]] = {}

    def normalize_topic(self, topic_id: str) -> str:
        return topic_id.replace(self._config.topic_separator, self._config.id_delimiter)

    def scoped_identifier(self, source_id: str, topic_id: str) -> str:
        return f"{source_id}{self._config.scope_delimiter}{self.normalize_topic(topic_id)}"

    def resolve(self, source_id: str, topic_id: str) -> List[ResolvedTarget]:
        if source_id:
            targets = self.lookup(self.scoped_identifier(source_id, topic_id))
            if targets:
                return targets
        return self.lookup(self.normalize_topic(topic_id))

    def lookup(self, identifier: str) -> List[ResolvedTarget]:
        """Containers with id ``identifier`` (cached)."""
        cached = self._cache.get(identifier)
        if cached is not None:
            return cached

        targets = []
        for container in self._document.elements_by_id(identifier):
            # Descendants only: the container itself is the highlight target
            bound = [self._bound[el] for el in container.iter() if el is not container and el in self._bound]
            targets.append(ResolvedTarget(container, bound))
        self._cache[identifier] = targets
        return targets

    def reset(self) -> None:
        """Drop every cached lookup."""
        logger.debug(f"Clearing element cache ({len(self._cache)} identifiers)")
        self._cache.clear()

    @property
    def cache_size(self) -> int:
        return len(self._cache)
