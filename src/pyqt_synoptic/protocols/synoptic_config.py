"""Base configuration class for the synoptic engine.

Provides hooks for applications to customize diagram synchronization behavior.
"""

from typing import Optional
from dataclasses import dataclass


@dataclass
class SynopticConfig:
    """Configuration for diagram loading, update dispatch and visual effects.

    Applications can subclass this to provide custom configuration.

    Attributes:
        diagram_dir: Directory holding ``*.svg`` diagrams and companion scripts
        default_diagram: Diagram loaded by ``SynopticEngine.initialize``
        bindings_suffix: Suffix appended to a diagram name to find its companion script
        topic_separator: Path separator used in topic identifiers
        id_delimiter: Replacement for ``topic_separator`` in element identifiers
        scope_delimiter: Joins source id and normalized topic in scoped identifiers
        highlight_ms: Lifetime of the transient highlight class
    """

    diagram_dir: Optional[str] = None
    default_diagram: Optional[str] = None
    bindings_suffix: str = ".py"

    topic_separator: str = "/"
    id_delimiter: str = "-"
    scope_delimiter: str = "-"

    highlight_ms: int = 500
    highlight_class: str = "highlight-svg-default"
    alarm_text_class: str = "alarm-text"
    text_data_class: str = "text-data"
    alarm_line_class: str = "alarm-line"

    # Frame pacing for the update coalescer (None = derive from screen refresh rate)
    frame_ms: Optional[int] = None
    target_fps: Optional[int] = None
    max_fps: Optional[int] = 60

    performance_log_dir: Optional[str] = None
    performance_logger_name: str = "pyqt_synoptic.performance"
    performance_log_filename: str = "performance.log"


# Global config instance (set by application)
_synoptic_config: Optional[SynopticConfig] = None


def set_synoptic_config(config: SynopticConfig) -> None:
    """Set the global synoptic configuration.

    Args:
        config: SynopticConfig instance
    """
    global _synoptic_config
    _synoptic_config = config


def get_synoptic_config() -> SynopticConfig:
    """Get the current synoptic configuration.

    Returns:
        Current SynopticConfig or default if not set
    """
    if _synoptic_config is None:
        return SynopticConfig()
    return _synoptic_config
