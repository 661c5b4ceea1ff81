"""Diagram storage adapters and engine exceptions."""

from .exceptions import SynopticError, DiagramLoadError, BindingScriptError, SnapshotQueryError
from .file_store import DirectoryDiagramStore

__all__ = [
    "SynopticError",
    "DiagramLoadError",
    "BindingScriptError",
    "SnapshotQueryError",
    "DirectoryDiagramStore",
]
