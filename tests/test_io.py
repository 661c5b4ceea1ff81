"""Tests for storage adapters."""

import pytest


@pytest.fixture
def store_dir(tmp_path, plant_svg):
    (tmp_path / "plan10.svg").write_text(plant_svg, encoding="utf-8")
    (tmp_path / "plan2.svg").write_text(plant_svg, encoding="utf-8")
    (tmp_path / "plan2.svg.py").write_text("def update(s, t, v, r):\n    pass\n", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")
    return tmp_path


def test_list_diagrams_natural_order(store_dir):
    """Only *.svg files, naturally sorted."""
    from pyqt_synoptic.io import DirectoryDiagramStore

    store = DirectoryDiagramStore(store_dir)
    assert store.list_diagrams() == ["plan2.svg", "plan10.svg"]


def test_missing_directory_lists_nothing(tmp_path):
    """A missing directory is not an error for listing."""
    from pyqt_synoptic.io import DirectoryDiagramStore

    assert DirectoryDiagramStore(tmp_path / "nope").list_diagrams() == []


def test_directory_required():
    """Without a configured directory the store cannot be built."""
    from pyqt_synoptic.io import DirectoryDiagramStore

    with pytest.raises(ValueError):
        DirectoryDiagramStore()


def test_directory_from_config(store_dir):
    """diagram_dir and bindings_suffix come from the global config."""
    from pyqt_synoptic import SynopticConfig, set_synoptic_config
    from pyqt_synoptic.io import DirectoryDiagramStore

    set_synoptic_config(SynopticConfig(diagram_dir=str(store_dir), bindings_suffix=".bindings"))
    try:
        store = DirectoryDiagramStore()
        assert store.directory == store_dir
        assert store.bindings_suffix == ".bindings"
    finally:
        set_synoptic_config(None)


def test_fetch_diagram(store_dir, plant_svg):
    """Diagrams are read as text; missing or escaping names fail."""
    from pyqt_synoptic.io import DirectoryDiagramStore, DiagramLoadError

    store = DirectoryDiagramStore(store_dir)
    assert store.fetch_diagram("plan2.svg") == plant_svg
    with pytest.raises(DiagramLoadError):
        store.fetch_diagram("missing.svg")
    with pytest.raises(DiagramLoadError):
        store.fetch_diagram("../plan2.svg")


def test_fetch_script(store_dir):
    """Companion scripts are optional."""
    from pyqt_synoptic.io import DirectoryDiagramStore

    store = DirectoryDiagramStore(store_dir)
    assert "def update" in store.fetch_script("plan2.svg")
    assert store.fetch_script("plan10.svg") is None


def test_exception_hierarchy():
    """All engine errors share one base class."""
    from pyqt_synoptic.io import SynopticError, DiagramLoadError, BindingScriptError, SnapshotQueryError

    for error in (DiagramLoadError, BindingScriptError, SnapshotQueryError):
        assert issubclass(error, SynopticError)


def test_engine_with_directory_store(qapp, store_dir, frame_scheduler, task_runner):
    """The directory store plugs into the engine as source and script provider."""
    from pyqt_synoptic import SynopticConfig, SynopticEngine
    from pyqt_synoptic.engine import StrategyKind
    from pyqt_synoptic.io import DirectoryDiagramStore

    store = DirectoryDiagramStore(store_dir)
    engine = SynopticEngine(
        config=SynopticConfig(frame_ms=0),
        diagram_source=store,
        script_provider=store,
        scheduler=frame_scheduler,
        task_runner=task_runner,
    )

    assert engine.load_diagram("plan2.svg")
    assert engine.strategy_kind is StrategyKind.PLUGIN
    assert engine.load_diagram("plan10.svg")
    assert engine.strategy_kind is StrategyKind.DEFAULT


def test_initialize_serves_configured_directory(qapp, store_dir, frame_scheduler, task_runner, monkeypatch):
    """With nothing registered, initialize() serves config.diagram_dir."""
    from pyqt_synoptic import SynopticConfig, SynopticEngine
    from pyqt_synoptic.engine import StrategyKind
    from pyqt_synoptic.io import DirectoryDiagramStore
    from pyqt_synoptic.protocols import providers, synoptic_config

    monkeypatch.setattr(providers, "_diagram_source", None)
    monkeypatch.setattr(providers, "_binding_script_provider", None)
    monkeypatch.setattr(providers, "_snapshot_query", None)
    monkeypatch.setattr(synoptic_config, "_synoptic_config", None)

    engine = SynopticEngine(scheduler=frame_scheduler, task_runner=task_runner)
    engine.initialize(SynopticConfig(frame_ms=0, diagram_dir=str(store_dir), default_diagram="plan2.svg"))

    assert isinstance(engine.diagram_source, DirectoryDiagramStore)
    assert engine.script_provider is engine.diagram_source
    assert engine.diagram_name == "plan2.svg"
    assert engine.strategy_kind is StrategyKind.PLUGIN
    assert engine.list_diagrams() == ["plan2.svg", "plan10.svg"]


def test_history_log_snapshot():
    """Latest entry per topic at or before the requested time."""
    from pyqt_synoptic.engine import HistoryLog, SnapshotEntry, iso_timestamp

    log = HistoryLog([
        {"sourceId": "dev1", "topicId": "temp", "payload": "20", "timestampMs": 1000},
        {"sourceId": "dev1", "topicId": "temp", "payload": "25", "timestampMs": 5000},
        {"sourceId": "dev2", "topicId": "temp", "payload": "7", "timestampMs": 3000},
        SnapshotEntry("dev3", "temp", "1"),
    ])

    at_4s = {e.key: e.payload for e in log.fetch_snapshot(iso_timestamp(4000))}
    assert at_4s == {"dev1|temp": "20", "dev2|temp": "7"}

    at_end = {e.key: e.payload for e in log.fetch_snapshot(iso_timestamp(10_000))}
    assert at_end["dev1|temp"] == "25"
    assert log.time_range() == (1000, 5000)


def test_history_log_accepts_z_suffix():
    """ISO timestamps ending in Z are UTC."""
    from pyqt_synoptic.engine.history_log import parse_iso_ms

    assert parse_iso_ms("1970-01-01T00:00:01Z") == 1000.0


def test_history_log_max_entries():
    """Old entries are trimmed beyond max_entries."""
    from pyqt_synoptic.engine import HistoryLog

    log = HistoryLog(max_entries=2)
    for i in range(5):
        log.record("s", "t", str(i), timestamp_ms=i)

    assert len(log) == 2
    assert log.time_range() == (3, 4)


def test_history_log_rejects_bad_timestamp():
    """Unparseable timestamps raise SnapshotQueryError."""
    from pyqt_synoptic.engine import HistoryLog
    from pyqt_synoptic.io import SnapshotQueryError

    with pytest.raises(SnapshotQueryError):
        HistoryLog().fetch_snapshot("yesterday")
