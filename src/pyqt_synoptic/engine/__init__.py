"""
Synchronization engine.

Update coalescing, element resolution, binding strategies, the default
effect rules, live/history mode control and snapshot replay.
"""

from .update_record import UpdateRecord, SnapshotEntry, parse_payload, record_key
from .element_resolver import ElementResolver, ResolvedTarget
from .effect_renderer import EffectRenderer, VISUAL_MAPPINGS, evaluate_alarm, format_value
from .session import DiagramSession
from .binding_strategy import (
    BindingStrategy,
    DefaultBindingStrategy,
    PluginBindingStrategy,
    StrategyKind,
    create_strategy,
    get_nested_value,
)
from .plugin_loader import ScriptBindings, load_binding_plugin
from .update_coalescer import UpdateCoalescer
from .snapshot_replayer import SnapshotReplayer
from .mode_controller import ModeController, TimelineMode, TimelineModeKind, iso_timestamp
from .history_log import HistoryLog
from .synoptic_engine import SynopticEngine

__all__ = [
    "UpdateRecord",
    "SnapshotEntry",
    "parse_payload",
    "record_key",
    "ElementResolver",
    "ResolvedTarget",
    "EffectRenderer",
    "VISUAL_MAPPINGS",
    "evaluate_alarm",
    "format_value",
    "DiagramSession",
    "BindingStrategy",
    "DefaultBindingStrategy",
    "PluginBindingStrategy",
    "StrategyKind",
    "create_strategy",
    "get_nested_value",
    "ScriptBindings",
    "load_binding_plugin",
    "UpdateCoalescer",
    "SnapshotReplayer",
    "ModeController",
    "TimelineMode",
    "TimelineModeKind",
    "iso_timestamp",
    "HistoryLog",
    "SynopticEngine",
]
