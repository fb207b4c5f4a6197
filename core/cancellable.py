# --- START: core/cancellable.py ---
# core/cancellable.py
"""
A single-shot, cancellable result holder for the git-diff round trip.

The transport returns one CancellableRequest per fetch. It settles exactly once:
with a response, with an error, or with RequestCancelledError when cancelled.
Results that arrive after cancellation are dropped.
"""
import logging
from typing import Any, Callable, List, Optional

from .exceptions import RequestCancelledError

logger: logging.Logger = logging.getLogger(__name__)

SettledCallback = Callable[[Optional[Any], Optional[BaseException]], None]


class CancellableRequest:
	"""
	Result of one in-flight request.

	Callbacks registered with onSettled() receive (response, error); exactly one of
	them is not None. Callbacks added after settlement run immediately.
	"""

	def __init__(self: 'CancellableRequest', description: str = '', onCancel: Optional[Callable[[], None]] = None) -> None:
		"""
		Args:
			description (str): Human-readable label used in log messages.
			onCancel (Optional[Callable[[], None]]): Hook that aborts the underlying work (e.g. interrupts a worker thread).
		"""
		self._description: str = description
		self._onCancel: Optional[Callable[[], None]] = onCancel
		self._callbacks: List[SettledCallback] = []
		self._settled: bool = False
		self._cancelled: bool = False
		self._response: Optional[Any] = None
		self._error: Optional[BaseException] = None

	@property
	def isSettled(self: 'CancellableRequest') -> bool:
		return self._settled

	@property
	def isCancelled(self: 'CancellableRequest') -> bool:
		return self._cancelled

	def onSettled(self: 'CancellableRequest', callback: SettledCallback) -> 'CancellableRequest':
		if self._settled:
			callback(self._response, self._error)
		else:
			self._callbacks.append(callback)
		return self

	def resolve(self: 'CancellableRequest', response: Any) -> None:
		self._settle(response, None)

	def reject(self: 'CancellableRequest', error: BaseException) -> None:
		self._settle(None, error)

	def cancel(self: 'CancellableRequest') -> None:
		if self._settled:
			return
		self._cancelled = True
		logger.debug(f"Cancelling request {self._description!r}.")
		if self._onCancel is not None:
			try:
				self._onCancel()
			except Exception as e:
				logger.warning(f"Abort hook for request {self._description!r} failed: {e}")
			self._onCancel = None
		self._settle(None, RequestCancelledError(f"Request {self._description!r} was cancelled."))

	def _settle(self: 'CancellableRequest', response: Optional[Any], error: Optional[BaseException]) -> None:
		if self._settled:
			if not self._cancelled:
				logger.debug(f"Ignoring second settlement of request {self._description!r}.")
			return
		self._settled = True
		self._response = response
		self._error = error
		callbacks, self._callbacks = self._callbacks, []
		for callback in callbacks:
			callback(response, error)

# --- END: core/cancellable.py ---
