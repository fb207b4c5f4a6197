# --- START: core/auto_scroll.py ---
# core/auto_scroll.py
"""
Keeps the viewport on the edit point while a file is being rewritten.

AutoScrollController is a small state machine:

	IDLE         no previous snapshot yet
	TRACKING     diffing each streamed frame and scrolling when needed
	INTERRUPTED  the user scrolled; auto-scroll stays off until streaming
	             stops, or until resetUserScroll() is called

It never touches a widget directly. Everything it needs from the view goes
through a Locator, and every timer goes through a Scheduler.
"""
import abc
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .content_differ import diffForGranularity
from .models import DiffGranularity, DiffResult
from .scheduler import DebouncedAction, Scheduler

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS: int = 150
MIN_DEBOUNCE_MS: int = 50
MAX_DEBOUNCE_MS: int = 150
DEFAULT_ECHO_WINDOW_MS: int = 200
DEFAULT_TAIL_FRACTION: float = 0.9
DEFAULT_BOTTOM_BUFFER_PX: int = 40
# Lower bound for the percentage fallback when the element cannot be found.
MIN_FALLBACK_FRACTION: float = 0.5

ALIGN_CENTER: str = 'center'


@dataclass(frozen=True)
class Rect:
	"""Vertical extent of a widget or element, in viewport coordinates."""
	top: float
	bottom: float

	@property
	def height(self: 'Rect') -> float:
		return self.bottom - self.top

	def intersects(self: 'Rect', other: 'Rect') -> bool:
		return self.top < other.bottom and self.bottom > other.top


class Locator(abc.ABC):
	"""
	What the controller needs from the rendering surface.

	Indices follow the differ: 1-based line numbers for line granularity,
	0-based block indices for block granularity.
	"""

	@abc.abstractmethod
	def findElement(self: 'Locator', index: int) -> Optional[Any]:
		"""Returns an opaque element handle for the line/block, or None if it is not rendered."""

	@abc.abstractmethod
	def getContainerRect(self: 'Locator') -> Rect:
		"""The visible area of the scroll container."""

	@abc.abstractmethod
	def getElementRect(self: 'Locator', element: Any) -> Rect:
		"""The element's current box, in the same coordinates as getContainerRect()."""

	@abc.abstractmethod
	def scrollTo(self: 'Locator', position: float, smooth: bool) -> None:
		"""Scrolls the container so that `position` (content pixels) is at the top."""

	@abc.abstractmethod
	def scrollIntoView(self: 'Locator', element: Any, alignment: str) -> None:
		"""Scrolls so the element sits at `alignment` ('center') of the container."""

	@abc.abstractmethod
	def getScrollHeight(self: 'Locator') -> float:
		"""Total scrollable content height in pixels."""


class ScrollState(str, Enum):
	IDLE = 'idle'
	TRACKING = 'tracking'
	INTERRUPTED = 'interrupted'


class AutoScrollController:
	"""
	Decides, per content update, whether and where to scroll.

	Bursts of updates are coalesced by one debounce timer. The diff that runs
	when it fires compares the snapshot from before the burst with the newest
	one, so intermediate frames never hide the real edit point.
	"""

	def __init__(
		self: 'AutoScrollController',
		locator: Locator,
		scheduler: Scheduler,
		granularity: DiffGranularity = DiffGranularity.LINE,
		debounceMs: int = DEFAULT_DEBOUNCE_MS,
		scrollToBottomOnFirstFrame: bool = False,
		echoWindowMs: int = DEFAULT_ECHO_WINDOW_MS,
		tailFraction: float = DEFAULT_TAIL_FRACTION,
		bottomBufferPx: int = DEFAULT_BOTTOM_BUFFER_PX
	) -> None:
		"""
		Args:
			locator (Locator): View adapter used to find and scroll to elements.
			scheduler (Scheduler): Timer source and clock.
			granularity (DiffGranularity): LINE for code, BLOCK for markdown.
			debounceMs (int): Scroll decision debounce; clamped to 50-150 ms.
			scrollToBottomOnFirstFrame (bool): Jump to the end when the first snapshot arrives.
			echoWindowMs (int): Scroll events this soon after our own scroll are ignored.
			tailFraction (float): Additions at or past this fraction of the document jump to the end.
			bottomBufferPx (int): Extra pixels added when jumping to the end.
		"""
		self._locator: Locator = locator
		self._scheduler: Scheduler = scheduler
		self._granularity: DiffGranularity = granularity
		self._scrollToBottomOnFirstFrame: bool = scrollToBottomOnFirstFrame
		self._echoWindowMs: int = echoWindowMs
		self._tailFraction: float = tailFraction
		self._bottomBufferPx: int = bottomBufferPx

		clampedDebounce: int = max(MIN_DEBOUNCE_MS, min(MAX_DEBOUNCE_MS, int(debounceMs)))
		if clampedDebounce != debounceMs:
			logger.warning(f"Scroll debounce of {debounceMs} ms is outside {MIN_DEBOUNCE_MS}-{MAX_DEBOUNCE_MS} ms; using {clampedDebounce} ms.")
		self._debounce: DebouncedAction = DebouncedAction(scheduler, clampedDebounce, self._onDebounceElapsed)

		self._previous: Optional[str] = None
		self._burstBase: Optional[str] = None
		self._burstLatest: Optional[str] = None
		self._streaming: bool = False
		self._userScrolled: bool = False
		self._lastProgrammaticScroll: Optional[float] = None
		self._lastDiff: Optional[DiffResult] = None
		self._disposed: bool = False

	# --- Properties ---

	@property
	def state(self: 'AutoScrollController') -> ScrollState:
		if self._previous is None:
			return ScrollState.IDLE
		if self._userScrolled:
			return ScrollState.INTERRUPTED
		return ScrollState.TRACKING

	@property
	def userScrolled(self: 'AutoScrollController') -> bool:
		return self._userScrolled

	@property
	def lastDiff(self: 'AutoScrollController') -> Optional[DiffResult]:
		"""The latest diff that found a change, used by scrollToChange()."""
		return self._lastDiff

	@property
	def isScrollPending(self: 'AutoScrollController') -> bool:
		return self._debounce.isPending

	# --- Inputs ---

	def onContentUpdate(self: 'AutoScrollController', content: Optional[str], isStreaming: bool) -> None:
		"""Feeds one full-text snapshot from the content source."""
		if self._disposed:
			return
		content = content or ''
		self._updateStreaming(isStreaming)

		if self._previous is None:
			if not content:
				return
			self._previous = content
			logger.debug(f"First snapshot received ({len(content)} characters).")
			if self._scrollToBottomOnFirstFrame:
				self._scrollToBottom()
			return

		if not content and self._previous:
			# Transient truncate while the file is being written; keep the last good snapshot.
			logger.debug("Ignoring empty snapshot after non-empty content.")
			return

		if content == self._previous:
			return

		if not isStreaming or self._userScrolled:
			self._previous = content
			self._cancelBurst()
			return

		if self._burstBase is None:
			self._burstBase = self._previous
		self._burstLatest = content
		self._previous = content
		self._debounce.trigger()

	def onUserScroll(self: 'AutoScrollController') -> bool:
		"""
		Reports a scroll event from the view.

		Returns:
			bool: True if the event interrupted auto-scroll.
		"""
		if self._disposed or not self._streaming or self._previous is None or self._userScrolled:
			return False
		if self._lastProgrammaticScroll is not None:
			elapsedMs: float = (self._scheduler.now() - self._lastProgrammaticScroll) * 1000.0
			if elapsedMs < self._echoWindowMs:
				logger.debug(f"Scroll event {elapsedMs:.0f} ms after our own scroll; treating it as an echo.")
				return False
		logger.info("User scrolled during streaming; auto-scroll paused.")
		self._userScrolled = True
		self._cancelBurst()
		return True

	# --- Escape hatches ---

	def scrollToChange(self: 'AutoScrollController') -> bool:
		"""Jumps to the latest known change immediately, whatever the current state."""
		if self._disposed:
			return False
		if self._burstBase is not None and self._burstLatest is not None:
			pendingDiff = diffForGranularity(self._burstBase, self._burstLatest, self._granularity)
			if pendingDiff.hasChange:
				self._lastDiff = pendingDiff
		if self._lastDiff is None:
			logger.debug("No change recorded yet; nothing to scroll to.")
			return False
		return self._scrollToDiff(self._lastDiff, force=True)

	def resetUserScroll(self: 'AutoScrollController') -> None:
		if self._userScrolled:
			logger.info("Auto-scroll resumed.")
		self._userScrolled = False

	def reset(self: 'AutoScrollController') -> None:
		"""Forgets every snapshot, flag and timer (document switch)."""
		self._cancelBurst()
		self._previous = None
		self._streaming = False
		self._userScrolled = False
		self._lastProgrammaticScroll = None
		self._lastDiff = None

	def dispose(self: 'AutoScrollController') -> None:
		self.reset()
		self._disposed = True

	# --- Internals ---

	def _updateStreaming(self: 'AutoScrollController', isStreaming: bool) -> None:
		if self._streaming and not isStreaming:
			if self._userScrolled:
				logger.debug("Streaming stopped; clearing user-scroll interruption.")
			self._userScrolled = False
			self._cancelBurst()
		self._streaming = isStreaming

	def _cancelBurst(self: 'AutoScrollController') -> None:
		self._debounce.cancel()
		self._burstBase = None
		self._burstLatest = None

	def _onDebounceElapsed(self: 'AutoScrollController') -> None:
		base, latest = self._burstBase, self._burstLatest
		self._burstBase = None
		self._burstLatest = None
		if base is None or latest is None or self._userScrolled:
			return
		diff: DiffResult = diffForGranularity(base, latest, self._granularity)
		if not diff.hasChange:
			return
		self._lastDiff = diff
		self._scrollToDiff(diff, force=False)

	def _positionFraction(self: 'AutoScrollController', diff: DiffResult) -> float:
		if diff.total <= 0:
			return 1.0
		# Lines are already 1-based; 0-based block indices become an ordinal so a
		# change in the last block reaches the tail fraction.
		ordinal: int = diff.firstChangedIndex if self._granularity == DiffGranularity.LINE else diff.firstChangedIndex + 1
		return min(ordinal / diff.total, 1.0)

	def _scrollToDiff(self: 'AutoScrollController', diff: DiffResult, force: bool) -> bool:
		fraction: float = self._positionFraction(diff)

		if diff.isAddition and fraction >= self._tailFraction:
			logger.debug(f"Addition at {fraction:.0%} of the document; following the tail.")
			self._scrollToBottom()
			return True

		element = self._locator.findElement(diff.firstChangedIndex)
		if element is None:
			target: float = self._locator.getScrollHeight() * max(fraction, MIN_FALLBACK_FRACTION)
			logger.debug(f"No element for index {diff.firstChangedIndex}; scrolling to {target:.0f}px.")
			self._markProgrammaticScroll()
			self._locator.scrollTo(target, True)
			return True

		if not force and self._isVisible(element):
			return False

		logger.debug(f"Scrolling index {diff.firstChangedIndex} into view.")
		self._markProgrammaticScroll()
		self._locator.scrollIntoView(element, ALIGN_CENTER)
		return True

	def _isVisible(self: 'AutoScrollController', element: Any) -> bool:
		return self._locator.getElementRect(element).intersects(self._locator.getContainerRect())

	def _scrollToBottom(self: 'AutoScrollController') -> None:
		self._markProgrammaticScroll()
		self._locator.scrollTo(self._locator.getScrollHeight() + self._bottomBufferPx, True)

	def _markProgrammaticScroll(self: 'AutoScrollController') -> None:
		self._lastProgrammaticScroll = self._scheduler.now()

# --- END: core/auto_scroll.py ---
