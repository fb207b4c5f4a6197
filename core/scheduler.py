# --- START: core/scheduler.py ---
# core/scheduler.py
"""
Timer seam used by the debounce and fade logic.

The engine never touches QTimer directly: it asks a Scheduler to run a callback
after a delay and keeps the returned CancelHandle. The GUI supplies a QTimer
backed implementation (gui.gui_utils.QtScheduler); tests drive a manual clock.
"""
import abc
import logging
from typing import Callable, Optional

logger: logging.Logger = logging.getLogger(__name__)


class CancelHandle:
	"""
	Handle for one scheduled callback.

	Cancelling before the callback fires guarantees it never runs. Cancelling
	after it fired, or twice, is a no-op.
	"""

	def __init__(self: 'CancelHandle', onCancel: Optional[Callable[[], None]] = None) -> None:
		self._onCancel: Optional[Callable[[], None]] = onCancel
		self._cancelled: bool = False
		self._fired: bool = False

	def cancel(self: 'CancelHandle') -> None:
		if self._cancelled or self._fired:
			return
		self._cancelled = True
		if self._onCancel is not None:
			self._onCancel()
			self._onCancel = None

	def markFired(self: 'CancelHandle') -> bool:
		"""Called by the scheduler right before running the callback. Returns False if it must not run."""
		if self._cancelled or self._fired:
			return False
		self._fired = True
		self._onCancel = None
		return True

	@property
	def isActive(self: 'CancelHandle') -> bool:
		return not (self._cancelled or self._fired)


class Scheduler(abc.ABC):
	"""Runs callbacks after a delay on the owning event loop."""

	@abc.abstractmethod
	def after(self: 'Scheduler', delayMs: int, callback: Callable[[], None]) -> CancelHandle:
		"""Schedules callback to run once after delayMs milliseconds."""

	@abc.abstractmethod
	def now(self: 'Scheduler') -> float:
		"""Monotonic time in seconds, from the same clock the delays are measured on."""


class DebouncedAction:
	"""
	One re-armable timer: every trigger() cancels the pending run and schedules a new one.

	Used for the git-diff refetch and the scroll decision, each of which must
	have at most one pending timer per document.
	"""

	def __init__(self: 'DebouncedAction', scheduler: Scheduler, delayMs: int, action: Callable[[], None]) -> None:
		self._scheduler: Scheduler = scheduler
		self._delayMs: int = delayMs
		self._action: Callable[[], None] = action
		self._handle: Optional[CancelHandle] = None

	@property
	def delayMs(self: 'DebouncedAction') -> int:
		return self._delayMs

	@property
	def isPending(self: 'DebouncedAction') -> bool:
		return self._handle is not None and self._handle.isActive

	def trigger(self: 'DebouncedAction') -> None:
		self.cancel()
		self._handle = self._scheduler.after(self._delayMs, self._run)

	def cancel(self: 'DebouncedAction') -> None:
		if self._handle is not None:
			self._handle.cancel()
			self._handle = None

	def _run(self: 'DebouncedAction') -> None:
		self._handle = None
		self._action()

# --- END: core/scheduler.py ---
