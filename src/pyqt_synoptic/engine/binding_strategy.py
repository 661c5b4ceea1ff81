"""
Binding strategies.

Exactly one strategy is active per loaded diagram:

- ``DefaultBindingStrategy`` resolves elements and runs the effect rules.
- ``PluginBindingStrategy`` hands every update to the diagram's companion
  script, which is then solely responsible for all visual effects.

Both share the baseline reset used before a snapshot replay.
"""

import logging
import re
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Mapping, Optional

from pyqt_synoptic.engine.session import DiagramSession
from pyqt_synoptic.engine.update_record import UpdateRecord
from pyqt_synoptic.protocols import BindingPlugin

logger = logging.getLogger(__name__)

# "a.b[Name].c" -> ("a", None), (None, "Name"), ...
_SEGMENT_RE = re.compile(r"([^.\[\]]+)|\[([^\]]*)\]")

# Scalar payloads are addressed through this key path
SCALAR_KEY = "value"


class StrategyKind(Enum):
    DEFAULT = "default"
    PLUGIN = "plugin"


def _lookup_named(items: list, name: str) -> Any:
    """Entry ``value`` of the ``{name, value}`` item called ``name``; falls back to a list index."""
    for item in items:
        if isinstance(item, Mapping) and str(item.get("name")) == name:
            return item.get("value")
    if name.lstrip("-").isdigit():
        index = int(name)
        if -len(items) <= index < len(items):
            return items[index]
    return None


def get_nested_value(data: Any, key_path: str) -> Any:
    """Value at ``key_path`` inside ``data``, or None when any step is missing.

    Supports dotted traversal (``metrics.temperature``) and the indexed
    "array of named metrics" shape (``metrics[Status]`` picks the entry whose
    ``name`` is ``Status`` and yields its ``value``).
    """
    if not isinstance(key_path, str) or data is None:
        return None

    current = data
    for match in _SEGMENT_RE.finditer(key_path):
        key, bracket = match.group(1), match.group(2)
        if current is None:
            return None
        if key is not None:
            current = current.get(key) if isinstance(current, Mapping) else None
        elif isinstance(current, list):
            current = _lookup_named(current, bracket)
        elif isinstance(current, Mapping):
            current = current.get(bracket)
        else:
            return None
    return current


class BindingStrategy(ABC):
    """Contract between the dispatch path and a loaded diagram."""

    kind: StrategyKind

    def __init__(self, session: DiagramSession):
        self.session = session

    @abstractmethod
    def initialize(self) -> None:
        """Called once after the diagram is loaded."""

    @abstractmethod
    def dispatch(self, record: UpdateRecord) -> None:
        """Apply one update to the diagram."""

    def reset(self) -> None:
        """Return the diagram to its pristine look before a replay."""
        restored = self.session.baseline.restore_touched()
        hidden = self.session.renderer.hide_alarm_lines()
        logger.debug(f"Reset '{self.session.name}': {restored} restored, {hidden} alarm line(s) hidden")


class DefaultBindingStrategy(BindingStrategy):
    """Element resolution plus the default effect rules."""

    kind = StrategyKind.DEFAULT

    def initialize(self) -> None:
        pass

    def dispatch(self, record: UpdateRecord) -> None:
        record.ensure_parsed()
        if not record.is_structured:
            return

        data = record.parsed_value
        if not isinstance(data, (Mapping, list)):
            data = {SCALAR_KEY: data}

        renderer = self.session.renderer
        for target in self.session.resolver.resolve(record.source_id, record.topic_id):
            for bound in target.bound_elements:
                value = get_nested_value(data, bound.key_path)
                if value is not None:
                    renderer.apply(bound, value)
            renderer.pulse(target.container)


class PluginBindingStrategy(BindingStrategy):
    """Delegates every update to a companion script. Each callback is isolated."""

    kind = StrategyKind.PLUGIN

    def __init__(self, session: DiagramSession, plugin: BindingPlugin):
        super().__init__(session)
        self.plugin = plugin

    def initialize(self) -> None:
        try:
            self.plugin.initialize(self.session.document)
        except Exception:
            logger.exception(f"Error in binding 'initialize' for diagram '{self.session.name}'")

    def dispatch(self, record: UpdateRecord) -> None:
        record.ensure_parsed()
        try:
            self.plugin.update(record.source_id, record.topic_id, record.parsed_value, self.session.document)
        except Exception:
            logger.exception(f"Error in binding 'update' for topic {record.source_id}|{record.topic_id}")

    def reset(self) -> None:
        super().reset()
        try:
            self.plugin.reset(self.session.document)
        except Exception:
            logger.exception(f"Error in binding 'reset' for diagram '{self.session.name}'")


def create_strategy(session: DiagramSession, plugin: Optional[BindingPlugin]) -> BindingStrategy:
    """Pick the strategy for a freshly loaded diagram and attach it to the session."""
    strategy: BindingStrategy
    if plugin is not None:
        strategy = PluginBindingStrategy(session, plugin)
    else:
        strategy = DefaultBindingStrategy(session)
    session.strategy = strategy
    logger.info(f"Diagram '{session.name}' uses {strategy.kind.value} bindings")
    return strategy
