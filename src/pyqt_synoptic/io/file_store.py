"""
Directory-backed diagram store.

Serves ``*.svg`` diagrams and their companion binding scripts
(``<diagram><bindings_suffix>``, e.g. ``plant.svg.py``) from one directory.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from pyqt_synoptic.core.sort_utils import natural_sort
from pyqt_synoptic.io.exceptions import DiagramLoadError, BindingScriptError
from pyqt_synoptic.protocols import get_synoptic_config

logger = logging.getLogger(__name__)

DIAGRAM_EXTENSION = ".svg"


class DirectoryDiagramStore:

    def __init__(self, directory: Union[str, Path, None] = None, bindings_suffix: Optional[str] = None):
        """
        Initialize the store.

        Args:
            directory: Folder holding the diagrams. Defaults to ``SynopticConfig.diagram_dir``.
            bindings_suffix: Companion script suffix. Defaults to ``SynopticConfig.bindings_suffix``.

        Raises:
            ValueError: If no directory is given or configured.
        """
        config = get_synoptic_config()
        if directory is None:
            directory = config.diagram_dir
        if directory is None:
            raise ValueError("A diagram directory must be provided to DirectoryDiagramStore.")

        self.directory = Path(directory)
        self.bindings_suffix = bindings_suffix if bindings_suffix is not None else config.bindings_suffix
        logger.debug(f"DirectoryDiagramStore initialized on {self.directory}")

    def _resolve(self, name: str) -> Path:
        """Map a file name to a path inside the store, refusing anything that escapes it."""
        if not name or Path(name).name != name:
            raise ValueError(f"Invalid file name: {name!r}")
        return self.directory / name

    def list_diagrams(self) -> List[str]:
        """
        List diagram file names, naturally sorted.

        Returns:
            Names of ``*.svg`` files; empty if the directory does not exist
        """
        if not self.directory.is_dir():
            logger.warning(f"Diagram directory does not exist: {self.directory}")
            return []
        names = [p.name for p in self.directory.iterdir() if p.is_file() and p.suffix.lower() == DIAGRAM_EXTENSION]
        return natural_sort(names)

    def fetch_diagram(self, name: str) -> str:
        """
        Read a diagram's SVG text.

        Raises:
            DiagramLoadError: If the name is invalid or the file cannot be read
        """
        try:
            path = self._resolve(name)
            return path.read_text(encoding="utf-8")
        except (OSError, ValueError, UnicodeDecodeError) as e:
            raise DiagramLoadError(f"The diagram '{name}' could not be loaded: {e}") from e

    def fetch_script(self, name: str) -> Optional[str]:
        """
        Read the companion binding script for diagram ``name``.

        Returns:
            Script source, or None when no companion script exists

        Raises:
            BindingScriptError: If the script exists but cannot be read
        """
        try:
            path = self._resolve(f"{name}{self.bindings_suffix}")
        except ValueError as e:
            raise BindingScriptError(str(e)) from e
        if not path.is_file():
            logger.debug(f"No companion script at {path}, using default bindings")
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise BindingScriptError(f"Failed to read companion script {path}: {e}") from e
