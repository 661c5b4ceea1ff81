"""Binding plugin protocol for per-diagram custom visual logic.

A diagram may ship a companion script that takes over all visual effects
for that diagram. The engine talks to it exclusively through this contract.
"""

from typing import Protocol, Any, runtime_checkable


@runtime_checkable
class BindingPlugin(Protocol):
    """Protocol for diagram-supplied binding logic.

    Example companion script (``plant.svg.py``)::

        def update(source_id, topic_id, value, root):
            pump = root.element_by_id("pump-1")
            if pump is not None and isinstance(value, dict):
                pump.set("fill", "#3fb950" if value.get("running") else "#f85149")

        register_bindings(update=update)
    """

    def initialize(self, root: Any) -> None:
        """Called once after the diagram has been loaded."""
        ...

    def update(self, source_id: str, topic_id: str, value: Any, root: Any) -> None:
        """Apply one update. Solely responsible for every visual effect."""
        ...

    def reset(self, root: Any) -> None:
        """Return plugin-managed elements to their initial look before a replay."""
        ...
