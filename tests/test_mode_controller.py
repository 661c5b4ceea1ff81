"""Tests for the live / history state machine."""

import pytest


@pytest.fixture
def applied():
    return []


@pytest.fixture
def coalescer(frame_scheduler):
    from pyqt_synoptic.engine import UpdateCoalescer
    return UpdateCoalescer(lambda record: None, frame_scheduler)


@pytest.fixture
def make_controller(qapp, coalescer, applied, snapshot_query, task_runner):
    from pyqt_synoptic.engine import ModeController

    def factory(**overrides):
        kwargs = dict(snapshot_query=snapshot_query, task_runner=task_runner)
        kwargs.update(overrides)
        return ModeController(coalescer, applied.append, **kwargs)

    return factory


def test_initial_state_is_live(make_controller):
    """A new controller is live and not loading."""
    controller = make_controller()
    assert controller.mode.is_live
    assert not controller.is_loading


def test_bounds_cursor_tracks_max_in_live(make_controller):
    """In live mode the cursor follows the timeline max."""
    controller = make_controller()
    controller.set_timeline_bounds(1000, 5000)
    assert controller.cursor_ms == 5000
    controller.set_timeline_bounds(1000, 9000)
    assert controller.cursor_ms == 9000


def test_bounds_must_be_ordered(make_controller):
    """min after max is rejected."""
    controller = make_controller()
    with pytest.raises(ValueError):
        controller.set_timeline_bounds(10, 5)


def test_enter_history_freezes_and_fetches(make_controller, coalescer, snapshot_query, applied):
    """Live -> History(t) freezes updates and replays the snapshot at t."""
    from pyqt_synoptic.engine import TimelineModeKind, iso_timestamp

    snapshot_query.entries = [("dev1", "temp", "20")]
    controller = make_controller()
    controller.set_timeline_bounds(0, 60_000)
    modes = []
    controller.mode_changed.connect(modes.append)

    controller.set_history_mode(True)

    assert coalescer.frozen
    assert controller.mode.kind is TimelineModeKind.HISTORY
    assert controller.mode.timestamp == 60_000
    assert snapshot_query.requests == [iso_timestamp(60_000)]
    assert applied == [[("dev1", "temp", "20")]]
    assert [m.kind for m in modes] == [TimelineModeKind.HISTORY]


def test_enter_history_twice_is_noop(make_controller, snapshot_query):
    """Requesting the current mode does nothing."""
    controller = make_controller()
    controller.set_history_mode(False)
    controller.set_history_mode(True)
    controller.set_history_mode(True)
    assert len(snapshot_query.requests) == 1


def test_preview_does_not_fetch(make_controller, snapshot_query):
    """Dragging moves the cursor only."""
    controller = make_controller()
    controller.set_timeline_bounds(0, 60_000)
    controller.set_history_mode(True)
    cursors = []
    controller.cursor_changed.connect(cursors.append)

    controller.preview_history(10_000)
    controller.preview_history(-5)

    assert cursors == [10_000, 0]
    assert len(snapshot_query.requests) == 1


def test_seek_fetches_clamped_timestamp(make_controller, snapshot_query):
    """Drag end fetches at the clamped cursor."""
    from pyqt_synoptic.engine import iso_timestamp

    controller = make_controller()
    controller.set_timeline_bounds(1000, 60_000)
    controller.set_history_mode(True)
    controller.seek_history(120_000)
    controller.seek_history(5000)

    assert snapshot_query.requests[1:] == [iso_timestamp(60_000), iso_timestamp(5000)]
    assert controller.mode.timestamp == 5000


def test_seek_ignored_in_live(make_controller, snapshot_query):
    """No Live -> History transition through seek."""
    controller = make_controller()
    controller.seek_history(1000)
    assert controller.mode.is_live
    assert snapshot_query.requests == []


def test_return_to_live_unfreezes_after_snapshot(make_controller, coalescer, snapshot_query, deferred_runner, applied):
    """History -> Live replays "now" and only then accepts updates again."""
    controller = make_controller(task_runner=deferred_runner)
    controller.set_history_mode(True)
    deferred_runner.complete()

    controller.set_history_mode(False)
    assert controller.mode.is_live
    assert coalescer.frozen
    assert coalescer.enqueue("a", "x", "1") is False

    deferred_runner.complete()
    assert not coalescer.frozen
    assert len(applied) == 2


def test_return_to_live_unfreezes_on_error(make_controller, coalescer, snapshot_query):
    """A failing live snapshot still resumes live updates."""
    controller = make_controller()
    controller.set_history_mode(True)
    snapshot_query.error = RuntimeError("query down")

    controller.set_history_mode(False)

    assert not coalescer.frozen
    assert not controller.is_loading


def test_return_to_live_without_query(make_controller, coalescer, monkeypatch):
    """Without any snapshot query live updates resume immediately."""
    from pyqt_synoptic.protocols import providers

    monkeypatch.setattr(providers, "_snapshot_query", None)
    controller = make_controller(snapshot_query=None)
    controller.set_history_mode(True)
    assert coalescer.frozen

    controller.set_history_mode(False)
    assert not coalescer.frozen


def test_stale_response_discarded(make_controller, deferred_runner, snapshot_query, applied):
    """A response older than the last applied one is dropped."""
    controller = make_controller(task_runner=deferred_runner)
    controller.set_timeline_bounds(0, 60_000)
    controller.set_history_mode(True)
    controller.seek_history(10_000)

    # Newer request answers first
    snapshot_query.entries = ["newer"]
    deferred_runner.complete(1)
    snapshot_query.entries = ["older"]
    deferred_runner.complete(0)

    assert applied == [["newer"]]


def test_advance_sequence_invalidates_in_flight(make_controller, deferred_runner, applied):
    """Responses requested before advance_sequence are never applied."""
    controller = make_controller(task_runner=deferred_runner)
    controller.set_history_mode(True)
    controller.advance_sequence()
    deferred_runner.complete()

    assert applied == []


def test_loading_indicator_follows_in_flight_requests(make_controller, deferred_runner):
    """loading_changed fires on the first request and after the last one."""
    controller = make_controller(task_runner=deferred_runner)
    states = []
    controller.loading_changed.connect(states.append)

    controller.set_history_mode(True)
    controller.seek_history(5)
    assert controller.is_loading
    deferred_runner.complete()
    assert controller.is_loading
    deferred_runner.complete()

    assert states == [True, False]
    assert not controller.is_loading


def test_toggle_while_fetch_in_flight(make_controller, coalescer, deferred_runner, applied):
    """History -> Live -> History with requests still pending keeps updates frozen."""
    controller = make_controller(task_runner=deferred_runner)
    controller.set_history_mode(True)
    controller.set_history_mode(False)
    controller.set_history_mode(True)

    while deferred_runner.pending:
        deferred_runner.complete()

    assert not controller.mode.is_live
    assert coalescer.frozen
    assert len(applied) == 3


def test_iso_timestamp():
    """Epoch milliseconds become UTC ISO strings."""
    from pyqt_synoptic.engine import iso_timestamp

    assert iso_timestamp(0) == "1970-01-01T00:00:00+00:00"
