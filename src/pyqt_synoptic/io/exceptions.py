"""Engine exceptions."""


class SynopticError(Exception):
    """Base class for diagram synchronization errors."""


class DiagramLoadError(SynopticError):
    """Raised when a diagram cannot be fetched or parsed."""


class BindingScriptError(SynopticError):
    """Raised when a companion binding script cannot be executed."""


class SnapshotQueryError(SynopticError):
    """Raised when a point-in-time snapshot cannot be produced."""
