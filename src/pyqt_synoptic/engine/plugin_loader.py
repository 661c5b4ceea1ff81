"""Companion binding script loading.

A companion script is Python source executed in a fresh module namespace.
It activates custom bindings either by calling the injected
``register_bindings(...)`` or by defining a module-level ``update`` function
(plus optional ``initialize`` / ``reset``).
"""

import logging
import re
import types
from typing import Any, Callable, Mapping, Optional

from pyqt_synoptic.io.exceptions import BindingScriptError

logger = logging.getLogger(__name__)

_MODULE_NAME_RE = re.compile(r"[^0-9a-zA-Z_]")


class ScriptBindings:
    """BindingPlugin assembled from script callbacks. Missing callbacks are no-ops."""

    def __init__(
        self,
        name: str,
        initialize: Optional[Callable[[Any], None]] = None,
        update: Optional[Callable[[str, str, Any, Any], None]] = None,
        reset: Optional[Callable[[Any], None]] = None,
    ):
        self.name = name
        self._initialize = initialize
        self._update = update
        self._reset = reset

    @classmethod
    def from_object(cls, name: str, bindings: Any) -> "ScriptBindings":
        """Build from a mapping or any object exposing the callbacks as attributes."""
        if isinstance(bindings, Mapping):
            get = bindings.get
        else:
            def get(attr):
                return getattr(bindings, attr, None)
        return cls(name, get("initialize"), get("update"), get("reset"))

    def initialize(self, root: Any) -> None:
        if self._initialize is not None:
            self._initialize(root)

    def update(self, source_id: str, topic_id: str, value: Any, root: Any) -> None:
        if self._update is not None:
            self._update(source_id, topic_id, value, root)

    def reset(self, root: Any) -> None:
        if self._reset is not None:
            self._reset(root)

    def __repr__(self) -> str:
        return f"ScriptBindings({self.name!r})"


def _module_name(diagram_name: str) -> str:
    return f"pyqt_synoptic_bindings_{_MODULE_NAME_RE.sub('_', diagram_name)}"


def load_binding_plugin(diagram_name: str, source: str) -> Optional[ScriptBindings]:
    """
    Execute a companion script and collect its bindings.

    Args:
        diagram_name: Diagram the script belongs to (used for the module name and logs)
        source: Python source of the script

    Returns:
        The registered bindings, or None if the script registered nothing

    Raises:
        BindingScriptError: If the script fails to compile or raises while executing
    """
    module = types.ModuleType(_module_name(diagram_name))
    module.__file__ = f"<bindings:{diagram_name}>"
    registered = []

    def register_bindings(bindings: Any = None, *, initialize=None, update=None, reset=None) -> None:
        if bindings is not None:
            registered.append(ScriptBindings.from_object(diagram_name, bindings))
        else:
            registered.append(ScriptBindings(diagram_name, initialize, update, reset))

    module.register_bindings = register_bindings

    try:
        code = compile(source, module.__file__, "exec")
        exec(code, module.__dict__)
    except Exception as e:
        raise BindingScriptError(f"Companion script for '{diagram_name}' failed: {e}") from e

    if registered:
        logger.info(f"Custom bindings registered for '{diagram_name}'")
        return registered[-1]

    if callable(getattr(module, "update", None)):
        logger.info(f"Custom bindings found as module functions for '{diagram_name}'")
        return ScriptBindings.from_object(diagram_name, module)

    logger.warning(f"Companion script for '{diagram_name}' registered no bindings")
    return None
