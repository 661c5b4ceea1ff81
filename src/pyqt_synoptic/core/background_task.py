"""Background task for non-blocking snapshot queries."""

from typing import Callable, Any, Tuple, Protocol, Set
from PyQt6.QtCore import QThread, pyqtSignal

# --- Module-level constants ---
CLEANUP_WAIT_MS = 200     # Wait time per task during shutdown


class BackgroundTask(QThread):
    """
    Runs a callable on a worker thread and reports back through signals.

    Usage:
        task = BackgroundTask(target=query.fetch_snapshot, args=(iso,))
        task.result_ready.connect(on_success)
        task.error_occurred.connect(on_error)  # Receives Exception, not str
        task.start()
    """

    result_ready = pyqtSignal(object)
    error_occurred = pyqtSignal(Exception)  # Full exception, caller decides

    def __init__(
        self,
        target: Callable[..., Any],
        args: Tuple = (),
        kwargs: dict = None,
        parent=None
    ):
        super().__init__(parent)
        self._target = target
        self._args = args
        self._kwargs = kwargs or {}

    def run(self):
        """Execute target in background."""
        try:
            result = self._target(*self._args, **self._kwargs)
            self.result_ready.emit(result)
        except Exception as e:
            self.error_occurred.emit(e)


class TaskRunner(Protocol):
    """Runs ``target`` asynchronously and reports back on the caller's thread."""

    def run(
        self,
        target: Callable[..., Any],
        args: Tuple = (),
        on_success: Callable[[Any], None] = None,
        on_error: Callable[[Exception], None] = None,
        on_finished: Callable[[], None] = None,
    ) -> Any:
        ...


class BackgroundTaskManager:
    """
    Keeps overlapping background tasks alive until they finish.

    Tasks are never cancelled: every started task reports its result, in
    arrival order. Callers that care about staleness tag their requests
    (see ``ModeController``).

    ``on_finished`` always runs after ``on_success``/``on_error``, even when
    those callbacks raise.

    Usage:
        self._task_manager = BackgroundTaskManager()

        def fetch(self, iso):
            self._task_manager.run(
                target=self.query.fetch_snapshot,
                args=(iso,),
                on_success=self._on_snapshot,
                on_error=self._on_error,
                on_finished=self._clear_loading,
            )

        def closeEvent(self, event):
            self._task_manager.cleanup()
            super().closeEvent(event)
    """

    def __init__(self):
        self._tasks: Set[BackgroundTask] = set()

    def run(
        self,
        target: Callable[..., Any],
        args: Tuple = (),
        on_success: Callable[[Any], None] = None,
        on_error: Callable[[Exception], None] = None,
        on_finished: Callable[[], None] = None,
    ) -> BackgroundTask:
        """
        Run a background task alongside any still in flight.

        Args:
            target: Function to execute in background
            args: Positional arguments for target
            on_success: Callback for successful result
            on_error: Callback for error (receives Exception, not str)
            on_finished: Always-run cleanup after success or error

        Returns:
            The started BackgroundTask
        """
        task = BackgroundTask(target=target, args=args)

        def finish():
            if on_finished:
                on_finished()

        def wrapped_success(result):
            try:
                if on_success:
                    on_success(result)
            finally:
                finish()

        def wrapped_error(error):
            try:
                if on_error:
                    on_error(error)
            finally:
                finish()

        task.result_ready.connect(wrapped_success)
        task.error_occurred.connect(wrapped_error)
        task.finished.connect(lambda: self._tasks.discard(task))

        self._tasks.add(task)
        task.start()
        return task

    @property
    def pending_count(self) -> int:
        return len(self._tasks)

    def cleanup(self):
        """Wait briefly for running tasks. Call from closeEvent."""
        for task in list(self._tasks):
            if task.isRunning():
                task.wait(CLEANUP_WAIT_MS)
        self._tasks.clear()
