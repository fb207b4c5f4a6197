# --- START: tests/fakes.py ---
# tests/fakes.py
"""
Deterministic stand-ins for the engine's seams: a manually advanced scheduler,
an in-memory locator and a transport whose requests are settled by the test.
"""
from typing import Any, Callable, Dict, List, Optional, Tuple

from core.auto_scroll import Locator, Rect
from core.cancellable import CancellableRequest
from core.git_diff_fetcher import DiffTransport
from core.scheduler import CancelHandle, Scheduler


class ManualScheduler(Scheduler):
	"""Fake clock: callbacks run only when advance() moves time past their due point."""

	def __init__(self: 'ManualScheduler') -> None:
		self._nowMs: float = 0.0
		self._sequence: int = 0
		self._pending: List[Tuple[float, int, CancelHandle, Callable[[], None]]] = []

	def after(self: 'ManualScheduler', delayMs: int, callback: Callable[[], None]) -> CancelHandle:
		self._sequence += 1
		handle = CancelHandle()
		self._pending.append((self._nowMs + delayMs, self._sequence, handle, callback))
		return handle

	def now(self: 'ManualScheduler') -> float:
		return self._nowMs / 1000.0

	def advance(self: 'ManualScheduler', ms: float) -> None:
		"""Moves the clock forward, running due callbacks in due-time order."""
		target: float = self._nowMs + ms
		while True:
			due = sorted((e for e in self._pending if e[0] <= target and e[2].isActive), key=lambda e: (e[0], e[1]))
			if not due:
				break
			dueAt, _, handle, callback = due[0]
			self._pending.remove(due[0])
			self._nowMs = max(self._nowMs, dueAt)
			if handle.markFired():
				callback()
		self._nowMs = target
		self._pending = [e for e in self._pending if e[2].isActive]

	@property
	def pendingCount(self: 'ManualScheduler') -> int:
		return sum(1 for e in self._pending if e[2].isActive)


class FakeLocator(Locator):
	"""
	Locator backed by an index -> Rect table.

	Records every scroll as ('scrollTo', position) or ('scrollIntoView', index, alignment).
	"""

	def __init__(self: 'FakeLocator', elements: Optional[Dict[int, Rect]] = None, container: Rect = Rect(0, 500), scrollHeight: float = 2000.0) -> None:
		self.elements: Dict[int, Rect] = dict(elements or {})
		self.container: Rect = container
		self.scrollHeight: float = scrollHeight
		self.calls: List[Tuple[Any, ...]] = []

	def findElement(self: 'FakeLocator', index: int) -> Optional[int]:
		return index if index in self.elements else None

	def getContainerRect(self: 'FakeLocator') -> Rect:
		return self.container

	def getElementRect(self: 'FakeLocator', element: int) -> Rect:
		return self.elements[element]

	def scrollTo(self: 'FakeLocator', position: float, smooth: bool) -> None:
		self.calls.append(('scrollTo', position))

	def scrollIntoView(self: 'FakeLocator', element: int, alignment: str) -> None:
		self.calls.append(('scrollIntoView', element, alignment))

	def getScrollHeight(self: 'FakeLocator') -> float:
		return self.scrollHeight


class ManualDiffTransport(DiffTransport):
	"""Hands out requests and leaves settling them to the test."""

	def __init__(self: 'ManualDiffTransport') -> None:
		self.requests: List[Tuple[str, str, CancellableRequest]] = []

	def requestDiff(self: 'ManualDiffTransport', repoRoot: str, relativeFilePath: str) -> CancellableRequest:
		request = CancellableRequest(description=relativeFilePath)
		self.requests.append((repoRoot, relativeFilePath, request))
		return request

	@property
	def latest(self: 'ManualDiffTransport') -> CancellableRequest:
		return self.requests[-1][2]

# --- END: tests/fakes.py ---
