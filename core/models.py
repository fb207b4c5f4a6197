# --- START: core/models.py ---
# core/models.py
"""
Value types shared by the diff engine.

Every value here is rebuilt from scratch on each relevant input change (new diff
text, new content snapshot) and never mutated in place, so the dataclasses are
frozen wherever the contained collections allow it.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class LineChangeType(str, Enum):
	"""Classification of a line relative to a comparison version."""
	ADDED = 'added'  # pure insertion
	MODIFIED = 'modified'  # addition that replaced a same-position deletion
	DELETED = 'deleted'  # never stored per-line; carried by DeletedLine


class DiffLineKind(str, Enum):
	CONTEXT = 'context'
	ADDITION = 'addition'
	DELETION = 'deletion'


class DiffGranularity(str, Enum):
	"""Unit used when diffing two content snapshots."""
	LINE = 'line'  # source code
	BLOCK = 'block'  # prose / markdown


# Mapping of 1-based new-file line number -> ADDED / MODIFIED.
ChangedLineMap = Dict[int, LineChangeType]


@dataclass(frozen=True)
class DeletedLine:
	"""A line removed relative to the committed revision, anchored after a new-file line (0 = before line 1)."""
	afterLine: int
	content: str


@dataclass(frozen=True)
class DiffLine:
	kind: DiffLineKind
	content: str
	oldLineNumber: Optional[int] = None
	newLineNumber: Optional[int] = None


@dataclass
class Hunk:
	"""One `@@ -oldStart,oldLines +newStart,newLines @@` region of a unified diff."""
	oldStart: int
	oldLines: int
	newStart: int
	newLines: int
	lines: List[DiffLine] = field(default_factory=list)


@dataclass(frozen=True)
class ParsedDiff:
	"""Per-line classification extracted from one file's unified diff."""
	changedLines: ChangedLineMap = field(default_factory=dict)
	deletedLines: Tuple[DeletedLine, ...] = ()


@dataclass(frozen=True)
class DiffResult:
	"""
	Location of the first difference between two snapshots.

	firstChangedIndex is 1-based for line granularity and 0-based for block
	granularity; -1 means the snapshots are identical. charOffset is only
	meaningful for blocks.
	"""
	firstChangedIndex: int
	total: int
	isAddition: bool
	charOffset: int = 0

	@property
	def hasChange(self: 'DiffResult') -> bool:
		return self.firstChangedIndex >= 0


@dataclass(frozen=True)
class AllChangedResult:
	"""Every differing position between two snapshots (used for the recent-edit overlay)."""
	changedIndices: Dict[int, LineChangeType]
	total: int


@dataclass(frozen=True)
class HighlightAnnotation:
	"""Both fields may be set at once; the renderer paints both, neither replaces the other."""
	gitDiff: Optional[LineChangeType] = None
	recentEdit: bool = False

	@property
	def isEmpty(self: 'HighlightAnnotation') -> bool:
		return self.gitDiff is None and not self.recentEdit


@dataclass(frozen=True)
class BlockWithChange:
	"""A markdown block with its 1-based inclusive line range and the git change it contains, if any."""
	content: str
	index: int
	startLine: int
	endLine: int
	changeType: Optional[LineChangeType] = None


DISPLAY_KIND_LINE: str = 'line'
DISPLAY_KIND_DELETED: str = 'deleted'


@dataclass(frozen=True)
class DisplayEntry:
	"""
	One row of the materialised display sequence.

	Real lines carry their 1-based lineNumber; virtual deleted rows carry the
	afterLine anchor they were recorded at and no line number.
	"""
	kind: str
	content: str
	lineNumber: Optional[int] = None
	afterLine: Optional[int] = None
	annotation: HighlightAnnotation = HighlightAnnotation()

	@property
	def isDeleted(self: 'DisplayEntry') -> bool:
		return self.kind == DISPLAY_KIND_DELETED


@dataclass(frozen=True)
class DiffResponse:
	"""
	Transport-neutral git diff response.

	success=False (including HTTP 404) means "no diff available" and is not an error.
	"""
	success: bool
	diff: str = ''
	error: Optional[str] = None
	statusCode: int = 200


@dataclass(frozen=True)
class GitDiffState:
	"""Snapshot exposed by GitDiffFetcher; replaced wholesale on every transition."""
	changedLines: ChangedLineMap
	deletedLines: Tuple[DeletedLine, ...]
	loading: bool = False
	error: Optional[str] = None

# --- END: core/models.py ---
