"""Protocols for the collaborators feeding the synoptic engine.

Applications register their implementations once; the engine picks them up
unless it is constructed with explicit providers.
"""

from typing import Protocol, Optional, List, Iterable, Any


class DiagramSourceProvider(Protocol):
    """Protocol for fetching diagram documents by name."""

    def list_diagrams(self) -> List[str]:
        """Return available diagram names."""
        ...

    def fetch_diagram(self, name: str) -> str:
        """Return the SVG text of a diagram. Raises on failure."""
        ...


class BindingScriptProvider(Protocol):
    """Protocol for fetching optional companion binding scripts."""

    def fetch_script(self, name: str) -> Optional[str]:
        """Return script source, or None when the diagram has no companion script."""
        ...


class SnapshotQuery(Protocol):
    """Protocol for point-in-time state queries."""

    def fetch_snapshot(self, iso_timestamp: str) -> Iterable[Any]:
        """Return the last known value of each topic at/before ``iso_timestamp``.

        Items are ``SnapshotEntry`` instances or mappings with
        ``source_id``/``sourceId``, ``topic_id``/``topicId`` and ``payload``.
        """
        ...


_diagram_source: Optional[DiagramSourceProvider] = None
_binding_script_provider: Optional[BindingScriptProvider] = None
_snapshot_query: Optional[SnapshotQuery] = None


def register_diagram_source(provider: DiagramSourceProvider) -> None:
    """Register a global diagram source."""
    global _diagram_source
    _diagram_source = provider


def get_diagram_source() -> Optional[DiagramSourceProvider]:
    """Get the registered diagram source."""
    return _diagram_source


def register_binding_script_provider(provider: BindingScriptProvider) -> None:
    """Register a global companion script provider."""
    global _binding_script_provider
    _binding_script_provider = provider


def get_binding_script_provider() -> Optional[BindingScriptProvider]:
    """Get the registered companion script provider."""
    return _binding_script_provider


def register_snapshot_query(query: SnapshotQuery) -> None:
    """Register a global snapshot query."""
    global _snapshot_query
    _snapshot_query = query


def get_snapshot_query() -> Optional[SnapshotQuery]:
    """Get the registered snapshot query."""
    return _snapshot_query
