# --- START: core/highlight_compositor.py ---
# core/highlight_compositor.py
"""
Merges the two highlight sources into what the renderer paints.

- The committed-diff classification (GitDiffFetcher) gives each line a
  background colour (added / modified) and a list of deleted-line placeholders.
- The recent-edit set (RecentEditTracker) marks what the last streamed frame
  changed; it fades out after a fixed time-to-live.

A line can carry both at once and the renderer draws both.
"""
import logging
from collections import defaultdict
from typing import Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence

from .content_differ import diffAllForGranularity, mapLinesToBlocks
from .models import (
	DISPLAY_KIND_DELETED, DISPLAY_KIND_LINE, ChangedLineMap, DeletedLine, DiffGranularity,
	DisplayEntry, HighlightAnnotation, LineChangeType,
)
from .scheduler import DebouncedAction, Scheduler

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_FADE_MS: int = 2500

EMPTY_ANNOTATION: HighlightAnnotation = HighlightAnnotation()


def composeAnnotations(
	gitChangedLines: Optional[Mapping[int, LineChangeType]],
	recentEditIndices: Optional[Iterable[int]]
) -> Dict[int, HighlightAnnotation]:
	"""
	Builds the per-line annotation map.

	Args:
		gitChangedLines (Optional[Mapping[int, LineChangeType]]): 1-based line -> ADDED/MODIFIED from the committed diff.
		recentEditIndices (Optional[Iterable[int]]): 1-based lines touched by the latest streamed frame.

	Returns:
		Dict[int, HighlightAnnotation]: One entry per line that has at least one flag set.
	"""
	gitChangedLines = gitChangedLines or {}
	recent = frozenset(recentEditIndices or ())
	annotations: Dict[int, HighlightAnnotation] = {}
	for index in set(gitChangedLines) | recent:
		annotations[index] = HighlightAnnotation(gitDiff=gitChangedLines.get(index), recentEdit=index in recent)
	return annotations


def composeBlockAnnotations(
	content: Optional[str],
	gitChangedLines: Optional[Mapping[int, LineChangeType]],
	recentEditBlocks: Optional[Iterable[int]]
) -> Dict[int, HighlightAnnotation]:
	"""Block variant of composeAnnotations: keys are 0-based block indices."""
	recent = frozenset(recentEditBlocks or ())
	annotations: Dict[int, HighlightAnnotation] = {}
	for block in mapLinesToBlocks(content, gitChangedLines or {}):
		isRecent: bool = block.index in recent
		if block.changeType is not None or isRecent:
			annotations[block.index] = HighlightAnnotation(gitDiff=block.changeType, recentEdit=isRecent)
	return annotations


def buildDisplaySequence(
	content: Optional[str],
	annotations: Optional[Mapping[int, HighlightAnnotation]],
	deletedLines: Optional[Sequence[DeletedLine]]
) -> List[DisplayEntry]:
	"""
	Interleaves the file's real lines with virtual deleted-line rows.

	Deleted rows follow the line they are anchored after. Anchor 0 (or below)
	places them before line 1, anchors at or past the last line append them at
	the end. Rows sharing an anchor keep their original order.
	"""
	annotations = annotations or {}
	text: str = (content or '').replace('\r\n', '\n')
	lines: List[str] = text.split('\n') if text else []

	deletionsByAnchor: Dict[int, List[DeletedLine]] = defaultdict(list)
	for deleted in deletedLines or ():
		anchor: int = min(max(deleted.afterLine, 0), len(lines))
		deletionsByAnchor[anchor].append(deleted)

	def deletedEntries(anchor: int) -> List[DisplayEntry]:
		return [
			DisplayEntry(
				kind=DISPLAY_KIND_DELETED, content=deleted.content, afterLine=deleted.afterLine,
				annotation=HighlightAnnotation(gitDiff=LineChangeType.DELETED)
			)
			for deleted in deletionsByAnchor.get(anchor, ())
		]

	sequence: List[DisplayEntry] = deletedEntries(0)
	for lineNumber, line in enumerate(lines, start=1):
		sequence.append(DisplayEntry(
			kind=DISPLAY_KIND_LINE, content=line, lineNumber=lineNumber,
			annotation=annotations.get(lineNumber, EMPTY_ANNOTATION)
		))
		sequence.extend(deletedEntries(lineNumber))
	return sequence


class RecentEditTracker:
	"""
	Keeps the set of lines (or blocks) changed by the latest streamed frame.

	Each non-empty change set replaces the previous one and re-arms a single fade
	timer; when it fires the set is cleared. Timers never stack.
	"""

	def __init__(
		self: 'RecentEditTracker',
		scheduler: Scheduler,
		fadeMs: int = DEFAULT_FADE_MS,
		granularity: DiffGranularity = DiffGranularity.LINE,
		onChanged: Optional[Callable[[], None]] = None
	) -> None:
		self._granularity: DiffGranularity = granularity
		self._onChanged: Optional[Callable[[], None]] = onChanged
		self._fade: DebouncedAction = DebouncedAction(scheduler, fadeMs, self._clearFaded)
		self._changes: ChangedLineMap = {}
		self._disposed: bool = False

	@property
	def recentEdits(self: 'RecentEditTracker') -> FrozenSet[int]:
		return frozenset(self._changes)

	@property
	def recentChanges(self: 'RecentEditTracker') -> ChangedLineMap:
		return dict(self._changes)

	@property
	def isFading(self: 'RecentEditTracker') -> bool:
		return self._fade.isPending

	def observe(self: 'RecentEditTracker', previousText: Optional[str], currentText: Optional[str], isStreaming: bool) -> bool:
		"""
		Records the change set between two successive frames.

		Returns:
			bool: True if the recent-edit set was replaced.
		"""
		if self._disposed or not isStreaming or previousText is None:
			return False
		result = diffAllForGranularity(previousText, currentText, self._granularity)
		if not result.changedIndices:
			return False
		self._changes = dict(result.changedIndices)
		self._fade.trigger()
		logger.debug(f"Recent edits replaced: {len(self._changes)} {self._granularity.value}(s) changed.")
		self._notify()
		return True

	def reset(self: 'RecentEditTracker') -> None:
		self._fade.cancel()
		hadChanges: bool = bool(self._changes)
		self._changes = {}
		if hadChanges:
			self._notify()

	def dispose(self: 'RecentEditTracker') -> None:
		self._onChanged = None
		self.reset()
		self._disposed = True

	def _clearFaded(self: 'RecentEditTracker') -> None:
		logger.debug("Recent-edit highlights faded out.")
		self._changes = {}
		self._notify()

	def _notify(self: 'RecentEditTracker') -> None:
		if self._onChanged is not None:
			self._onChanged()

# --- END: core/highlight_compositor.py ---
