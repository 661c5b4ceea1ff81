"""
Synoptic engine facade.

Wires the update coalescer, binding strategy, snapshot replayer and mode
controller around one ``DiagramSession`` at a time and exposes the operations
used by the host application and the widgets.
"""

import logging
from typing import Any, List, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from pyqt_synoptic.core.frame_scheduler import FrameScheduler, QtFrameScheduler, resolve_frame_ms
from pyqt_synoptic.core.background_task import TaskRunner
from pyqt_synoptic.core.performance_monitor import configure_performance_logging, timer
from pyqt_synoptic.diagram import DiagramDocument
from pyqt_synoptic.engine.binding_strategy import StrategyKind, create_strategy
from pyqt_synoptic.engine.mode_controller import ModeController, TimelineMode
from pyqt_synoptic.engine.plugin_loader import ScriptBindings, load_binding_plugin
from pyqt_synoptic.engine.session import DiagramSession
from pyqt_synoptic.engine.snapshot_replayer import SnapshotReplayer
from pyqt_synoptic.engine.update_coalescer import UpdateCoalescer
from pyqt_synoptic.engine.update_record import UpdateRecord
from pyqt_synoptic.io.exceptions import BindingScriptError, DiagramLoadError
from pyqt_synoptic.io.file_store import DirectoryDiagramStore
from pyqt_synoptic.protocols import (
    SynopticConfig,
    DiagramSourceProvider,
    BindingScriptProvider,
    SnapshotQuery,
    set_synoptic_config,
    get_synoptic_config,
    get_diagram_source,
    get_binding_script_provider,
)
from pyqt_synoptic.theming import StatusPalette

logger = logging.getLogger(__name__)


class SynopticEngine(QObject):
    """
    Keeps one SVG diagram in sync with live updates and historical snapshots.

    Collaborators default to the globally registered providers
    (``register_diagram_source`` etc.) unless passed explicitly.

    Signals:
        document_changed(): The diagram was mutated (after a flush, a replay or a
            highlight fade-out)
        diagram_loaded(str): A diagram was loaded and its session is active
        diagram_failed(str, str): Loading a diagram failed (name, message)
        loading_changed(bool): A snapshot request is in flight
        mode_changed(TimelineMode): Live / history transition
        cursor_changed(float): Timeline cursor moved (epoch ms)

    Usage:
        engine = SynopticEngine()
        engine.initialize(SynopticConfig(diagram_dir="diagrams"))
        engine.load_diagram("plant.svg")
        feed.message_received.connect(engine.update)
    """

    document_changed = pyqtSignal()
    diagram_loaded = pyqtSignal(str)
    diagram_failed = pyqtSignal(str, str)
    loading_changed = pyqtSignal(bool)
    mode_changed = pyqtSignal(object)
    cursor_changed = pyqtSignal(float)

    def __init__(
        self,
        config: Optional[SynopticConfig] = None,
        diagram_source: Optional[DiagramSourceProvider] = None,
        script_provider: Optional[BindingScriptProvider] = None,
        snapshot_query: Optional[SnapshotQuery] = None,
        scheduler: Optional[FrameScheduler] = None,
        task_runner: Optional[TaskRunner] = None,
        palette: Optional[StatusPalette] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._config = config or get_synoptic_config()
        self._diagram_source = diagram_source
        self._script_provider = script_provider
        self._palette = palette or StatusPalette()
        self._owns_scheduler = scheduler is None
        self._scheduler = scheduler or QtFrameScheduler(config=self._config)

        self._session: Optional[DiagramSession] = None
        self._replayer: Optional[SnapshotReplayer] = None
        self._fade_notice_pending = False

        self._coalescer = UpdateCoalescer(self._dispatch, self._scheduler, on_flushed=self._on_flushed)
        self._mode = ModeController(
            self._coalescer,
            self._apply_snapshot,
            snapshot_query=snapshot_query,
            task_runner=task_runner,
            parent=self,
        )
        self._mode.mode_changed.connect(self.mode_changed)
        self._mode.loading_changed.connect(self.loading_changed)
        self._mode.cursor_changed.connect(self.cursor_changed)

    # --- Properties ---

    @property
    def config(self) -> SynopticConfig:
        return self._config

    @property
    def session(self) -> Optional[DiagramSession]:
        return self._session

    @property
    def document(self) -> Optional[DiagramDocument]:
        return self._session.document if self._session else None

    @property
    def diagram_name(self) -> Optional[str]:
        return self._session.name if self._session else None

    @property
    def strategy_kind(self) -> Optional[StrategyKind]:
        if self._session is None or self._session.strategy is None:
            return None
        return self._session.strategy.kind

    @property
    def coalescer(self) -> UpdateCoalescer:
        return self._coalescer

    @property
    def mode_controller(self) -> ModeController:
        return self._mode

    @property
    def mode(self) -> TimelineMode:
        return self._mode.mode

    @property
    def diagram_source(self) -> Optional[DiagramSourceProvider]:
        return self._diagram_source if self._diagram_source is not None else get_diagram_source()

    @property
    def script_provider(self) -> Optional[BindingScriptProvider]:
        return self._script_provider if self._script_provider is not None else get_binding_script_provider()

    # --- Operations ---

    def initialize(self, config: Optional[SynopticConfig] = None) -> None:
        """
        Apply ``config`` (also as the global config) and load its default diagram.

        With ``config.diagram_dir`` set, a ``DirectoryDiagramStore`` stands in for
        whichever of diagram source and script provider was neither passed nor
        registered.
        """
        if config is not None:
            self._config = config
            set_synoptic_config(config)
            if self._owns_scheduler:
                self._scheduler.frame_ms = resolve_frame_ms(config)

        log_file = configure_performance_logging(self._config)
        if log_file:
            logger.info(f"[SynopticEngine] Performance log: {log_file}")

        self._attach_directory_store()

        if self._config.default_diagram:
            self.load_diagram(self._config.default_diagram)

    def list_diagrams(self) -> List[str]:
        source = self.diagram_source
        if source is None:
            logger.warning("[SynopticEngine] No diagram source registered")
            return []
        return list(source.list_diagrams())

    def load_diagram(self, name: str) -> bool:
        """
        Replace the current diagram with ``name``.

        The previous session (cache, timers, plugin) is discarded first. On
        failure ``diagram_failed`` is emitted and the engine stays idle.

        Returns:
            True if the diagram is now active
        """
        self._close_session()

        source = self.diagram_source
        if source is None:
            self._fail(name, "No diagram source registered")
            return False

        try:
            with timer("Diagram load", log_args=True, diagram=name):
                document = DiagramDocument.from_string(name, source.fetch_diagram(name))
        except DiagramLoadError as e:
            self._fail(name, str(e))
            return False
        except Exception as e:
            logger.exception(f"[SynopticEngine] Diagram source failed for '{name}'")
            self._fail(name, f"Failed to fetch diagram '{name}': {e}")
            return False

        session = DiagramSession.create(document, self._config, self._palette, on_changed=self._on_highlight_faded)
        strategy = create_strategy(session, self._load_bindings(name))
        session.renderer.hide_alarm_lines()
        strategy.initialize()

        self._session = session
        self._replayer = SnapshotReplayer(session)
        logger.info(f"[SynopticEngine] Loaded '{name}'")
        self.diagram_loaded.emit(name)
        self.document_changed.emit()

        self._mode.refresh()
        return True

    def update(self, source_id: str, topic_id: str, payload: Any) -> bool:
        """Queue one live update. Returns False when it was dropped."""
        if self._session is None:
            return False
        return self._coalescer.enqueue(source_id, topic_id, payload)

    def set_timeline_bounds(self, min_ms: float, max_ms: float) -> None:
        self._mode.set_timeline_bounds(min_ms, max_ms)

    def set_history_mode(self, enabled: bool) -> None:
        self._mode.set_history_mode(enabled)

    def preview_history(self, timestamp_ms: float) -> None:
        self._mode.preview_history(timestamp_ms)

    def seek_history(self, timestamp_ms: float) -> None:
        self._mode.seek_history(timestamp_ms)

    def refresh_live_state(self) -> None:
        """Re-fetch the snapshot for the current mode."""
        if self._session is None:
            return
        self._mode.refresh()

    def shutdown(self) -> None:
        """Drop the session and wait for background tasks. Call from closeEvent."""
        self._close_session()
        self._coalescer.freeze()
        cleanup = getattr(self._mode.task_runner, "cleanup", None)
        if callable(cleanup):
            cleanup()

    # --- Internals ---

    def _attach_directory_store(self) -> None:
        """Serve ``config.diagram_dir`` when no source or script provider is available."""
        if self._config.diagram_dir is None:
            return
        need_source = self.diagram_source is None
        need_scripts = self.script_provider is None
        if not (need_source or need_scripts):
            return
        store = DirectoryDiagramStore(self._config.diagram_dir, self._config.bindings_suffix)
        if need_source:
            self._diagram_source = store
        if need_scripts:
            self._script_provider = store
        logger.info(f"[SynopticEngine] Using diagram directory {store.directory}")

    def _load_bindings(self, name: str) -> Optional[ScriptBindings]:
        provider = self.script_provider
        if provider is None:
            return None
        try:
            source = provider.fetch_script(name)
            if source is None:
                return None
            return load_binding_plugin(name, source)
        except BindingScriptError as e:
            logger.warning(f"[SynopticEngine] {e}; using default bindings")
        except Exception as e:
            logger.warning(f"[SynopticEngine] Companion script unavailable for '{name}': {e}; using default bindings")
        return None

    def _close_session(self) -> None:
        self._mode.advance_sequence()
        self._coalescer.clear()
        if self._session is not None:
            logger.debug(f"[SynopticEngine] Disposing session '{self._session.name}'")
            self._session.dispose()
        self._session = None
        self._replayer = None

    def _fail(self, name: str, message: str) -> None:
        logger.error(f"[SynopticEngine] {message}")
        self.diagram_failed.emit(name, message)

    def _dispatch(self, record: UpdateRecord) -> None:
        if self._session is None or self._session.strategy is None:
            return
        self._session.strategy.dispatch(record)

    def _on_flushed(self, count: int) -> None:
        self.document_changed.emit()

    def _on_highlight_faded(self) -> None:
        # One notification per frame however many highlights expire
        if self._fade_notice_pending:
            return
        self._fade_notice_pending = True
        self._scheduler.schedule(self._emit_fade_notice)

    def _emit_fade_notice(self) -> None:
        self._fade_notice_pending = False
        if self._session is not None:
            self.document_changed.emit()

    def _apply_snapshot(self, entries: Any) -> None:
        if self._replayer is None:
            logger.debug("[SynopticEngine] Snapshot arrived without a loaded diagram")
            return
        self._replayer.apply(entries)
        self.document_changed.emit()
