"""Per-diagram session state."""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Callable, Dict, Optional, TYPE_CHECKING

from pyqt_synoptic.core.highlight_timers import HighlightTimers
from pyqt_synoptic.diagram import DiagramDocument, DiagramBaseline, BoundElement, scan_bound_elements
from pyqt_synoptic.engine.effect_renderer import EffectRenderer
from pyqt_synoptic.engine.element_resolver import ElementResolver
from pyqt_synoptic.protocols import SynopticConfig, get_synoptic_config
from pyqt_synoptic.theming import StatusPalette

if TYPE_CHECKING:
    from pyqt_synoptic.engine.binding_strategy import BindingStrategy

logger = logging.getLogger(__name__)


@dataclass
class DiagramSession:
    """Everything owned by one diagram selection.

    Built on load, disposed on switch; nothing here outlives the diagram.
    """
    document: DiagramDocument
    bound: Dict[ET.Element, BoundElement]
    baseline: DiagramBaseline
    highlights: HighlightTimers
    resolver: ElementResolver
    renderer: EffectRenderer
    strategy: Optional["BindingStrategy"] = None

    @classmethod
    def create(
        cls,
        document: DiagramDocument,
        config: Optional[SynopticConfig] = None,
        palette: Optional[StatusPalette] = None,
        on_changed: Optional[Callable[[], None]] = None,
    ) -> "DiagramSession":
        """Build a session. ``on_changed`` runs when a highlight fades out."""
        config = config or get_synoptic_config()
        bound = scan_bound_elements(document)
        baseline = DiagramBaseline(document)
        highlights = HighlightTimers()
        resolver = ElementResolver(document, bound, config)
        renderer = EffectRenderer(document, baseline, highlights, config, palette, on_changed=on_changed)
        logger.info(f"Session for '{document.name}': {len(bound)} bound element(s)")
        return cls(document, bound, baseline, highlights, resolver, renderer)

    @property
    def name(self) -> str:
        return self.document.name

    def dispose(self) -> None:
        """Cancel timers and drop caches."""
        self.highlights.cancel_all()
        self.resolver.reset()
