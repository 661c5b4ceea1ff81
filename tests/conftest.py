"""pytest configuration and fixtures for pyqt-synoptic tests."""

import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication  # noqa: E402


PLANT_SVG = """<svg xmlns="http://www.w3.org/2000/svg" width="400" height="200" viewBox="0 0 400 200">
  <g id="dev1-temp">
    <text id="dev1-temp-label" data-key="value">--</text>
  </g>
  <g id="temp">
    <text id="generic-temp-label" data-key="value">--</text>
  </g>
  <g id="boiler">
    <text id="boiler-temp" data-key="metrics.temperature">0</text>
    <text id="boiler-status" data-key="metrics[Status]">unknown</text>
    <text id="boiler-alert" data-key="alert_level" class="text-data">none</text>
    <g class="alarm-line" id="boiler-alarm" style="stroke: red">
      <text id="boiler-pressure" data-key="pressure" data-alarm-type="H" data-alarm-value="30">0</text>
    </g>
  </g>
  <g id="plant-a-line1-pump">
    <text id="pump-state" data-key="state" data-alarm-type="EQ" data-alarm-value="ok">-</text>
    <rect id="pump-body" class="alarm-line" data-key="state" data-alarm-type="EQ" data-alarm-value="ok" width="10" height="10"/>
  </g>
  <g id="line1-pump">
    <text id="generic-pump-state" data-key="state">-</text>
  </g>
  <g id="shield">
    <rect id="shield-visual-effect" data-key="power" stroke-width="1"/>
  </g>
</svg>
"""


@pytest.fixture(scope="session")
def qapp():
    """Create QApplication instance for tests."""
    app = QApplication.instance() or QApplication([])
    yield app
    # Don't quit - may cause issues with other tests


class ManualFrameScheduler:
    """Collects frame callbacks; tests run them with ``tick()``."""

    def __init__(self):
        self.callbacks = []

    def schedule(self, callback):
        self.callbacks.append(callback)

    def tick(self):
        pending, self.callbacks = self.callbacks, []
        for callback in pending:
            callback()
        return len(pending)


class SyncTaskRunner:
    """Runs targets inline, or holds them until ``complete()`` when ``deferred``."""

    def __init__(self, deferred=False):
        self.deferred = deferred
        self.pending = []
        self.calls = []

    def run(self, target, args=(), on_success=None, on_error=None, on_finished=None):
        self.calls.append(args)
        job = (target, args, on_success, on_error, on_finished)
        if self.deferred:
            self.pending.append(job)
        else:
            self._execute(job)

    def complete(self, index=0):
        """Finish the pending job at ``index`` (arrival order is up to the test)."""
        self._execute(self.pending.pop(index))

    @staticmethod
    def _execute(job):
        target, args, on_success, on_error, on_finished = job
        try:
            try:
                result = target(*args)
            except Exception as e:
                if on_error:
                    on_error(e)
            else:
                if on_success:
                    on_success(result)
        finally:
            if on_finished:
                on_finished()


class DictDiagramSource:
    """Diagram source and companion script provider backed by dicts."""

    def __init__(self, diagrams=None, scripts=None):
        self.diagrams = dict(diagrams or {})
        self.scripts = dict(scripts or {})

    def list_diagrams(self):
        return sorted(self.diagrams)

    def fetch_diagram(self, name):
        if name not in self.diagrams:
            raise KeyError(name)
        return self.diagrams[name]

    def fetch_script(self, name):
        return self.scripts.get(name)


class RecordingSnapshotQuery:
    """Snapshot query returning canned entries and remembering the requests."""

    def __init__(self, entries=None, error=None):
        self.entries = list(entries or [])
        self.error = error
        self.requests = []

    def fetch_snapshot(self, iso_timestamp):
        self.requests.append(iso_timestamp)
        if self.error is not None:
            raise self.error
        return list(self.entries)


@pytest.fixture
def plant_svg():
    return PLANT_SVG


@pytest.fixture
def frame_scheduler():
    return ManualFrameScheduler()


@pytest.fixture
def task_runner():
    return SyncTaskRunner()


@pytest.fixture
def deferred_runner():
    return SyncTaskRunner(deferred=True)


@pytest.fixture
def diagram_source(plant_svg):
    return DictDiagramSource({"plant.svg": plant_svg})


@pytest.fixture
def snapshot_query():
    return RecordingSnapshotQuery()


@pytest.fixture
def make_engine(qapp, frame_scheduler, task_runner, diagram_source, snapshot_query):
    """Factory for engines wired to the in-memory collaborators."""
    from pyqt_synoptic import SynopticConfig, SynopticEngine

    def factory(config=None, **overrides):
        kwargs = dict(
            config=config or SynopticConfig(frame_ms=0),
            diagram_source=diagram_source,
            script_provider=diagram_source,
            snapshot_query=snapshot_query,
            scheduler=frame_scheduler,
            task_runner=task_runner,
        )
        kwargs.update(overrides)
        return SynopticEngine(**kwargs)

    return factory


@pytest.fixture
def document(plant_svg):
    from pyqt_synoptic.diagram import DiagramDocument
    return DiagramDocument.from_string("plant.svg", plant_svg)


@pytest.fixture
def session(qapp, document):
    from pyqt_synoptic import SynopticConfig
    from pyqt_synoptic.engine import DiagramSession
    return DiagramSession.create(document, SynopticConfig(frame_ms=0))


@pytest.fixture
def visual_state():
    """Comparable view of a document: (tag, id, text, sorted attributes) per element."""
    def snapshot(document):
        return [
            (el.tag, el.get("id"), el.text, tuple(sorted(el.attrib.items())))
            for el in document.iter()
        ]
    return snapshot
