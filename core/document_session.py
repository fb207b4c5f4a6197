# --- START: core/document_session.py ---
# core/document_session.py
"""
All per-document diff state, owned by one object.

A DocumentSession is created when a file is opened and disposed when another
file replaces it. It owns the GitDiffFetcher, RecentEditTracker and
AutoScrollController for that file, plus the previous snapshot and the
streaming flag, so nothing can leak from one document into the next.
"""
import logging
from typing import Callable, Dict, FrozenSet, List, Optional

from .auto_scroll import AutoScrollController, Locator
from .config_manager import EngineSettings
from .content_differ import granularityForPath, splitIntoBlocksWithLines
from .git_diff_fetcher import DiffTransport, GitDiffFetcher
from .highlight_compositor import RecentEditTracker, buildDisplaySequence, composeAnnotations, composeBlockAnnotations
from .models import DiffGranularity, DisplayEntry, GitDiffState, HighlightAnnotation
from .scheduler import Scheduler

logger: logging.Logger = logging.getLogger(__name__)


class DocumentSession:
	"""
	Fans each content update out to the three engine components and answers the
	renderer's questions (annotations, display sequence).
	"""

	def __init__(
		self: 'DocumentSession',
		filePath: str,
		repoRoot: Optional[str],
		transport: DiffTransport,
		locator: Locator,
		scheduler: Scheduler,
		settings: Optional[EngineSettings] = None,
		onChanged: Optional[Callable[[], None]] = None
	) -> None:
		"""
		Args:
			filePath (str): Absolute path of the open file; its extension picks line or block diffing.
			repoRoot (Optional[str]): Repository root used for the git diff; None disables git highlights.
			transport (DiffTransport): Source of git diff requests.
			locator (Locator): View adapter for auto-scroll.
			scheduler (Scheduler): Timers and clock shared by all components.
			settings (Optional[EngineSettings]): Debounce/fade configuration; defaults when None.
			onChanged (Optional[Callable[[], None]]): Called whenever what should be painted changes.
		"""
		self._settings: EngineSettings = settings or EngineSettings()
		self._filePath: str = filePath
		self._repoRoot: Optional[str] = repoRoot
		self._granularity: DiffGranularity = granularityForPath(filePath)
		self._onChanged: Optional[Callable[[], None]] = onChanged
		self._previousText: Optional[str] = None
		self._currentText: Optional[str] = None
		self._isStreaming: bool = False
		self._disposed: bool = False

		self._fetcher: GitDiffFetcher = GitDiffFetcher(
			transport, scheduler, debounceMs=self._settings.gitDiffDebounceMs, onStateChanged=self._onGitStateChanged
		)
		self._tracker: RecentEditTracker = RecentEditTracker(
			scheduler, fadeMs=self._settings.recentEditFadeMs, granularity=self._granularity, onChanged=self._notifyChanged
		)
		self._scroller: AutoScrollController = AutoScrollController(
			locator, scheduler, granularity=self._granularity,
			debounceMs=self._settings.scrollDebounceMs,
			scrollToBottomOnFirstFrame=self._settings.scrollToBottomOnOpen
		)
		logger.info(f"Opened diff session for '{filePath}' ({self._granularity.value} granularity).")

	# --- Properties ---

	@property
	def filePath(self: 'DocumentSession') -> str:
		return self._filePath

	@property
	def repoRoot(self: 'DocumentSession') -> Optional[str]:
		return self._repoRoot

	@property
	def granularity(self: 'DocumentSession') -> DiffGranularity:
		return self._granularity

	@property
	def content(self: 'DocumentSession') -> str:
		return self._currentText or ''

	@property
	def previousContent(self: 'DocumentSession') -> Optional[str]:
		return self._previousText

	@property
	def isStreaming(self: 'DocumentSession') -> bool:
		return self._isStreaming

	@property
	def isDisposed(self: 'DocumentSession') -> bool:
		return self._disposed

	@property
	def gitState(self: 'DocumentSession') -> GitDiffState:
		return self._fetcher.state

	@property
	def recentEdits(self: 'DocumentSession') -> FrozenSet[int]:
		return self._tracker.recentEdits

	@property
	def scroller(self: 'DocumentSession') -> AutoScrollController:
		return self._scroller

	# --- Inputs ---

	def onContentUpdate(self: 'DocumentSession', currentText: Optional[str], isStreaming: bool) -> None:
		"""Feeds one full-text snapshot from the content source."""
		if self._disposed:
			return
		text: str = currentText or ''
		streamingChanged: bool = isStreaming != self._isStreaming
		self._isStreaming = isStreaming

		if self._settings.suspendGitDiffWhileStreaming:
			self._fetcher.setEnabled(not isStreaming)
		self._fetcher.setTarget(self._repoRoot, self._filePath)

		if not text and self._currentText:
			# Transient empty read while the writer truncates the file.
			logger.debug(f"Ignoring empty snapshot for '{self._filePath}'.")
			self._scroller.onContentUpdate(text, isStreaming)
			return

		contentChanged: bool = text != self._currentText
		if contentChanged:
			self._previousText = self._currentText
			self._currentText = text
			self._tracker.observe(self._previousText, text, isStreaming)
			self._fetcher.setContent(text)

		self._scroller.onContentUpdate(text, isStreaming)
		if contentChanged or streamingChanged:
			self._notifyChanged()

	def onUserScroll(self: 'DocumentSession') -> bool:
		return self._scroller.onUserScroll()

	def scrollToChange(self: 'DocumentSession') -> bool:
		return self._scroller.scrollToChange()

	def resetUserScroll(self: 'DocumentSession') -> None:
		self._scroller.resetUserScroll()

	def refreshGitDiff(self: 'DocumentSession') -> None:
		"""Refetches the git diff now, skipping the debounce."""
		self._fetcher.setTarget(self._repoRoot, self._filePath)
		self._fetcher.refetch()

	# --- Renderer queries ---

	def annotations(self: 'DocumentSession') -> Dict[int, HighlightAnnotation]:
		"""
		Per-line annotations keyed by 1-based line number.

		For block-diffed files the recent-edit flag is spread over every line of
		each recently edited block.
		"""
		state: GitDiffState = self._fetcher.state
		if self._granularity == DiffGranularity.LINE:
			return composeAnnotations(state.changedLines, self._tracker.recentEdits)

		recentBlocks = self._tracker.recentEdits
		recentLines: List[int] = []
		if recentBlocks:
			_, ranges = splitIntoBlocksWithLines(self._currentText)
			for index, (startLine, endLine) in enumerate(ranges):
				if index in recentBlocks:
					recentLines.extend(range(startLine, endLine + 1))
		return composeAnnotations(state.changedLines, recentLines)

	def blockAnnotations(self: 'DocumentSession') -> Dict[int, HighlightAnnotation]:
		"""Per-block annotations keyed by 0-based block index (empty for line-diffed files)."""
		if self._granularity != DiffGranularity.BLOCK:
			return {}
		return composeBlockAnnotations(self._currentText, self._fetcher.state.changedLines, self._tracker.recentEdits)

	def displaySequence(self: 'DocumentSession') -> List[DisplayEntry]:
		return buildDisplaySequence(self._currentText, self.annotations(), self._fetcher.state.deletedLines)

	# --- Lifecycle ---

	def reset(self: 'DocumentSession') -> None:
		"""Clears every snapshot, highlight, flag and timer; the session stays usable."""
		logger.debug(f"Resetting diff session for '{self._filePath}'.")
		self._previousText = None
		self._currentText = None
		self._isStreaming = False
		self._scroller.reset()
		self._tracker.reset()
		self._fetcher.reset()
		self._fetcher.setEnabled(True)

	def dispose(self: 'DocumentSession') -> None:
		if self._disposed:
			return
		logger.info(f"Closing diff session for '{self._filePath}'.")
		self._onChanged = None
		self._scroller.dispose()
		self._tracker.dispose()
		self._fetcher.dispose()
		self._previousText = None
		self._currentText = None
		self._disposed = True

	def _onGitStateChanged(self: 'DocumentSession', state: GitDiffState) -> None:
		if state.error:
			logger.debug(f"Git diff unavailable for '{self._filePath}': {state.error}")
		self._notifyChanged()

	def _notifyChanged(self: 'DocumentSession') -> None:
		if self._onChanged is not None and not self._disposed:
			self._onChanged()

# --- END: core/document_session.py ---
