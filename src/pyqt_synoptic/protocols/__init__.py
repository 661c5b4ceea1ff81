"""
Collaborator protocols and configuration.

Protocol-based contracts for the diagram source, companion scripts and
snapshot queries, plus the global engine configuration.
"""

from .synoptic_config import SynopticConfig, set_synoptic_config, get_synoptic_config
from .binding_plugin import BindingPlugin
from .providers import (
    DiagramSourceProvider,
    BindingScriptProvider,
    SnapshotQuery,
    register_diagram_source,
    get_diagram_source,
    register_binding_script_provider,
    get_binding_script_provider,
    register_snapshot_query,
    get_snapshot_query,
)

__all__ = [
    "SynopticConfig",
    "set_synoptic_config",
    "get_synoptic_config",
    "BindingPlugin",
    "DiagramSourceProvider",
    "BindingScriptProvider",
    "SnapshotQuery",
    "register_diagram_source",
    "get_diagram_source",
    "register_binding_script_provider",
    "get_binding_script_provider",
    "register_snapshot_query",
    "get_snapshot_query",
]
