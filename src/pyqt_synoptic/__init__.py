"""
pyqt-synoptic: keeps SVG synoptic diagrams in sync with live data for PyQt6.

A floor-plan style SVG diagram is bound to a stream of per-topic updates and
to point-in-time snapshots for historical replay.

Architecture:
- Tier 1 (Core): Pure PyQt6 utilities (frame pacing, timers, background tasks)
- Tier 2 (Protocols): Collaborator protocols and configuration
- Tier 3 (Diagram): SVG document model, bound elements, baselines
- Tier 4 (Engine): Coalescing, binding strategies, effects, live/history modes
- Tier 5 (Widgets): View, timeline slider and panel

Key Features:
- Frame-paced coalescing of bursty updates (latest value per topic wins)
- Scoped / generic element lookup with per-diagram caching
- Optional per-diagram companion scripts replacing the default effects
- Identical results from live updates and from snapshot replay
"""

__version__ = "0.1.0"

from .protocols import SynopticConfig, set_synoptic_config, get_synoptic_config
from .engine import SynopticEngine, HistoryLog, SnapshotEntry, TimelineMode
from .io import DirectoryDiagramStore

__all__ = [
    "__version__",
    "SynopticConfig",
    "set_synoptic_config",
    "get_synoptic_config",
    "SynopticEngine",
    "HistoryLog",
    "SnapshotEntry",
    "TimelineMode",
    "DirectoryDiagramStore",
]
