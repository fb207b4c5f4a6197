"""
Background execution of git diff requests.

The diff engine is single-threaded and runs on the Qt event loop; only the
blocking git/HTTP call leaves it. Each request gets its own GitDiffWorker
thread, and results come back to the GUI thread through queued signals on
ThreadedDiffTransport, which settles the matching CancellableRequest.

Features:
- Base worker thread with task bookkeeping and common signals
- Git diff worker wrapping any GitDiffHandler (local GitPython or HTTP)
- DiffTransport implementation that hands out cancellable requests
"""

# Standard library imports
import itertools
import logging
from typing import Any, Dict, Optional, Tuple

# Qt imports
from PySide6.QtCore import QObject, QThread, Signal, Slot

# Local imports
from core.cancellable import CancellableRequest
from core.exceptions import GitDiffError
from core.git_diff_fetcher import DiffTransport
from core.git_diff_handler import GitDiffHandler

# Initialize logging
logger: logging.Logger = logging.getLogger(__name__)


class BaseWorker(QThread):
    """
    Base class for worker threads.

    Signals:
        errorOccurred (str): Emitted when an unexpected error escapes the task

    Attributes:
        _task (Optional[str]): Current task name
        _args (list): Task arguments
        _kwargs (dict): Task keyword arguments
        _isRunning (bool): Thread running state
    """

    errorOccurred = Signal(str)

    def __init__(self: 'BaseWorker', parent: Optional[Any] = None) -> None:
        super().__init__(parent)
        self._task: Optional[str] = None
        self._args: list = []
        self._kwargs: dict = {}
        self._isRunning = False

    def setTask(self: 'BaseWorker', taskName: str, args: list, kwargs: dict) -> None:
        self._task = taskName
        self._args = args
        self._kwargs = kwargs

    def start(self, priority=QThread.Priority.InheritPriority) -> None:
        if self._isRunning:
            logger.warning(f"{self.__class__.__name__} already running. Ignoring start request.")
            return
        self._isRunning = True
        super().start(priority)

    def run(self: 'BaseWorker') -> None:
        if not self._task:
            logger.warning(f"{self.__class__.__name__} started without a task.")
            self.errorOccurred.emit(f"{self.__class__.__name__} started without task.")
            self._isRunning = False
            return
        try:
            self._executeTask()
        except Exception as e:
            logger.critical(f"Unhandled exception in {self.__class__.__name__} task '{self._task}': {e}", exc_info=True)
            self.errorOccurred.emit(f"Critical internal error in {self.__class__.__name__}: {e}")
        finally:
            self._task = None
            self._isRunning = False

    def _executeTask(self: 'BaseWorker') -> None:
        raise NotImplementedError("Subclasses must implement _executeTask.")


class GitDiffWorker(BaseWorker):
    """
    Runs one GitDiffHandler.fetchDiff call off the GUI thread.

    Signals:
        diffFinished (int, object): Request id and the DiffResponse
        diffFailed (int, object): Request id and the exception raised by the handler
    """

    diffFinished = Signal(int, object)
    diffFailed = Signal(int, object)

    def __init__(self: 'GitDiffWorker', handler: GitDiffHandler, requestId: int, parent: Optional[Any] = None) -> None:
        super().__init__(parent)
        self._handler: GitDiffHandler = handler
        self.requestId: int = requestId

    def startDiff(self: 'GitDiffWorker', repoRoot: str, relativeFilePath: str) -> None:
        if self._isRunning:
            return
        self.setTask('diff', [repoRoot, relativeFilePath], {})
        self.start()

    def _executeTask(self: 'GitDiffWorker') -> None:
        if self._task != 'diff':
            errMsg: str = f"Unknown GitDiffWorker task: {self._task}"
            logger.error(errMsg)
            self.diffFailed.emit(self.requestId, GitDiffError(errMsg))
            return
        try:
            response = self._handler.fetchDiff(*self._args)
        except GitDiffError as e:
            logger.debug(f"Git diff request {self.requestId} failed: {e}")
            self.diffFailed.emit(self.requestId, e)
            return
        except Exception as e:
            logger.critical(f"Unexpected error during git diff request {self.requestId}: {e}", exc_info=True)
            self.diffFailed.emit(self.requestId, GitDiffError(f"Unexpected internal error during diff: {e}"))
            return
        if self.isInterruptionRequested():
            logger.debug(f"Git diff request {self.requestId} finished after cancellation; result dropped.")
            return
        self.diffFinished.emit(self.requestId, response)


class ThreadedDiffTransport(QObject):
    """
    DiffTransport that runs each request on its own GitDiffWorker.

    Worker signals are connected to slots on this object, which lives on the
    GUI thread, so requests are settled on the GUI thread only. Workers are
    children of the transport; a pending entry is dropped and its worker
    scheduled for deletion only once the worker's thread has finished.
    """

    def __init__(self: 'ThreadedDiffTransport', handler: GitDiffHandler, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._handler: GitDiffHandler = handler
        self._ids = itertools.count(1)
        self._pending: Dict[int, Tuple[GitDiffWorker, CancellableRequest]] = {}

    @property
    def pendingCount(self: 'ThreadedDiffTransport') -> int:
        return len(self._pending)

    def requestDiff(self: 'ThreadedDiffTransport', repoRoot: str, relativeFilePath: str) -> CancellableRequest:
        requestId: int = next(self._ids)
        worker = GitDiffWorker(self._handler, requestId, self)
        request = CancellableRequest(description=f"diff #{requestId} {relativeFilePath}", onCancel=worker.requestInterruption)
        self._pending[requestId] = (worker, request)

        worker.diffFinished.connect(self._onDiffFinished)
        worker.diffFailed.connect(self._onDiffFailed)
        worker.errorOccurred.connect(self._onWorkerError)
        worker.finished.connect(self._onWorkerFinished)
        worker.startDiff(repoRoot, relativeFilePath)
        return request

    @Slot(int, object)
    def _onDiffFinished(self: 'ThreadedDiffTransport', requestId: int, response: Any) -> None:
        entry = self._pending.get(requestId)
        if entry is not None:
            entry[1].resolve(response)

    @Slot(int, object)
    def _onDiffFailed(self: 'ThreadedDiffTransport', requestId: int, error: Any) -> None:
        entry = self._pending.get(requestId)
        if entry is not None:
            entry[1].reject(error)

    @Slot(str)
    def _onWorkerError(self: 'ThreadedDiffTransport', message: str) -> None:
        worker = self.sender()
        entry = self._pending.get(getattr(worker, 'requestId', -1))
        if entry is not None:
            entry[1].reject(GitDiffError(message))

    @Slot()
    def _onWorkerFinished(self: 'ThreadedDiffTransport') -> None:
        worker = self.sender()
        if not isinstance(worker, GitDiffWorker):
            return
        # finished is emitted just before the thread exits.
        worker.wait()
        self._pending.pop(worker.requestId, None)
        worker.deleteLater()

    def shutdown(self: 'ThreadedDiffTransport', waitMs: int = 2000) -> None:
        """Cancels every pending request, waits for the worker threads to exit and closes the handler."""
        for requestId, (worker, request) in list(self._pending.items()):
            request.cancel()
            if not worker.wait(waitMs):
                logger.warning(f"Git diff worker for request {requestId} did not stop within {waitMs} ms.")
        self._pending.clear()
        self._handler.close()


# ThreadedDiffTransport satisfies the DiffTransport contract without inheriting
# from the ABC, whose metaclass cannot be combined with QObject's.
DiffTransport.register(ThreadedDiffTransport)
