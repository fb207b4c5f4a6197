# --- START: core/hunk_parser.py ---
# core/hunk_parser.py
"""
Parses the unified-diff text of a single file into per-line classifications.

The reader is forgiving: anything it cannot make sense of (file
headers, malformed hunk headers, stray lines) is skipped, so a bad diff degrades
to "no highlights" instead of breaking the viewer.

Deletion/addition pairing: within a hunk, deleted lines are queued until the next
context line. Each addition consumes the oldest queued deletion and is reported
as MODIFIED; additions with nothing queued are ADDED; deletions still queued at a
context line or at the end of the hunk become DeletedLine placeholders anchored
after the new-file line that preceded them.
"""
import logging
import re
from collections import deque
from typing import Deque, List, Optional

from .models import ChangedLineMap, DeletedLine, DiffLine, DiffLineKind, Hunk, LineChangeType, ParsedDiff

logger: logging.Logger = logging.getLogger(__name__)

# @@ -oldStart[,oldLines] +newStart[,newLines] @@ optional section heading
HUNK_HEADER_PATTERN = re.compile(r'^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@')

# Lines that can only appear in file headers, never in a hunk body.
_FILE_HEADER_PREFIXES = (
	'index ', 'new file mode', 'deleted file mode', 'old mode', 'new mode',
	'similarity index', 'rename from', 'rename to', 'Binary files',
)
_NO_NEWLINE_MARKER: str = '\\ No newline at end of file'


def _parseHunkHeader(line: str) -> Optional[Hunk]:
	match = HUNK_HEADER_PATTERN.match(line)
	if not match:
		return None
	oldStart, oldLines, newStart, newLines = match.groups()
	return Hunk(
		oldStart=int(oldStart),
		oldLines=int(oldLines) if oldLines is not None else 1,
		newStart=int(newStart),
		newLines=int(newLines) if newLines is not None else 1,
	)


def parseHunks(diffText: Optional[str]) -> List[Hunk]:
	"""
	Reads the hunks of the first file section in a unified diff.

	Args:
		diffText (Optional[str]): Raw `git diff` output for one file. None or empty yields [].

	Returns:
		List[Hunk]: Hunks in file order, each with old/new line numbers resolved per line.
	"""
	if not diffText:
		return []

	hunks: List[Hunk] = []
	current: Optional[Hunk] = None
	oldLineNo: int = 0
	newLineNo: int = 0
	oldSeen: int = 0
	newSeen: int = 0
	seenFileHeader: bool = False

	for rawLine in diffText.replace('\r\n', '\n').split('\n'):
		if rawLine.startswith('diff --git '):
			if seenFileHeader and hunks:
				logger.debug("Multi-file diff supplied; ignoring sections after the first file.")
				break
			seenFileHeader = True
			current = None
			continue

		if rawLine.startswith('@@'):
			current = _parseHunkHeader(rawLine)
			if current is None:
				logger.debug(f"Skipping malformed hunk header: {rawLine!r}")
				continue
			hunks.append(current)
			oldLineNo, newLineNo = current.oldStart, current.newStart
			oldSeen, newSeen = 0, 0
			continue

		if current is None or rawLine.startswith(_NO_NEWLINE_MARKER):
			continue

		hunkComplete: bool = oldSeen >= current.oldLines and newSeen >= current.newLines
		if rawLine.startswith(_FILE_HEADER_PREFIXES):
			current = None
			continue
		# A deleted line whose text starts with "-- " looks like a file header; the counts disambiguate.
		if hunkComplete and rawLine.startswith(('--- ', '+++ ')):
			current = None
			continue

		if rawLine.startswith('+'):
			current.lines.append(DiffLine(DiffLineKind.ADDITION, rawLine[1:], None, newLineNo))
			newLineNo += 1
			newSeen += 1
		elif rawLine.startswith('-'):
			current.lines.append(DiffLine(DiffLineKind.DELETION, rawLine[1:], oldLineNo, None))
			oldLineNo += 1
			oldSeen += 1
		elif rawLine.startswith(' ') or (rawLine == '' and not hunkComplete):
			# An empty line inside an unfinished hunk is a blank context line whose space was stripped.
			current.lines.append(DiffLine(DiffLineKind.CONTEXT, rawLine[1:], oldLineNo, newLineNo))
			oldLineNo += 1
			newLineNo += 1
			oldSeen += 1
			newSeen += 1
		elif rawLine:
			logger.debug(f"Skipping unrecognised diff line: {rawLine!r}")

	return hunks


class DiffHunkParser:
	"""Turns a single-file unified diff into a ChangedLineMap plus DeletedLine placeholders."""

	def parse(self: 'DiffHunkParser', diffText: Optional[str]) -> ParsedDiff:
		"""
		Classifies the new-file lines touched by the diff.

		Args:
			diffText (Optional[str]): Unified diff for one file.

		Returns:
			ParsedDiff: changedLines (1-based line -> ADDED/MODIFIED) and deletedLines in
						anchor order, oldest deletion first for a shared anchor.
		"""
		changedLines: ChangedLineMap = {}
		deletedLines: List[DeletedLine] = []

		try:
			hunks = parseHunks(diffText)
		except Exception as e:
			logger.error(f"Unexpected failure reading diff hunks: {e}", exc_info=True)
			return ParsedDiff()

		for hunk in hunks:
			self._classifyHunk(hunk, changedLines, deletedLines)

		logger.debug(f"Parsed diff: {len(hunks)} hunk(s), {len(changedLines)} changed line(s), {len(deletedLines)} deleted line(s).")
		return ParsedDiff(changedLines=changedLines, deletedLines=tuple(deletedLines))

	@staticmethod
	def _classifyHunk(hunk: Hunk, changedLines: ChangedLineMap, deletedLines: List[DeletedLine]) -> None:
		# git reports a zero-length new range by the line *before* it (e.g. "+4,0"), so no -1 there.
		newLinePos: int = hunk.newStart if hunk.newLines == 0 else hunk.newStart - 1
		pendingDeletions: Deque[DeletedLine] = deque()

		for line in hunk.lines:
			if line.kind == DiffLineKind.CONTEXT:
				deletedLines.extend(pendingDeletions)
				pendingDeletions.clear()
				newLinePos += 1
			elif line.kind == DiffLineKind.DELETION:
				# Deleted lines do not exist in the new file: the position does not advance.
				pendingDeletions.append(DeletedLine(afterLine=newLinePos, content=line.content))
			elif line.kind == DiffLineKind.ADDITION and line.newLineNumber is not None:
				if pendingDeletions:
					pendingDeletions.popleft()
					changedLines[line.newLineNumber] = LineChangeType.MODIFIED
				else:
					changedLines[line.newLineNumber] = LineChangeType.ADDED
				newLinePos += 1

		deletedLines.extend(pendingDeletions)


def extractLineChanges(diffText: Optional[str]) -> ParsedDiff:
	"""Module-level convenience wrapper around DiffHunkParser().parse()."""
	return DiffHunkParser().parse(diffText)

# --- END: core/hunk_parser.py ---
