# --- START: core/content_differ.py ---
# core/content_differ.py
"""
Compares two full-text snapshots of the same document.

Line granularity is used for source code, block granularity (paragraphs,
headings, lists, fenced code samples) for prose so a single typed character does
not move the change point around. Every function is pure and cheap enough to run
on every streamed frame: comparison is positional, O(lines) or O(blocks).

Index conventions: line results are 1-based, block results are 0-based, and -1
always means "no change".
"""
import os
from typing import Dict, List, Optional, Tuple

from .models import (
	AllChangedResult, BlockWithChange, ChangedLineMap, DiffGranularity, DiffResult, LineChangeType,
)

MARKDOWN_EXTENSIONS = frozenset({'md', 'markdown', 'mdx'})
CODE_FENCES: Tuple[str, ...] = ('```', '~~~')

# Separator assumed between blocks when estimating character offsets.
BLOCK_SEPARATOR_LENGTH: int = 2


def _normalise(text: Optional[str]) -> str:
	return (text or '').replace('\r\n', '\n')


def _splitLines(text: Optional[str]) -> List[str]:
	return _normalise(text).split('\n')


def granularityForPath(filePath: Optional[str]) -> DiffGranularity:
	"""Markdown and other prose files are diffed by block, everything else by line."""
	extension = os.path.splitext(filePath or '')[1].lstrip('.').lower()
	return DiffGranularity.BLOCK if extension in MARKDOWN_EXTENSIONS else DiffGranularity.LINE


# --- Line granularity ---

def diffLines(oldText: Optional[str], newText: Optional[str]) -> DiffResult:
	"""
	Finds the first line that differs between two snapshots.

	Args:
		oldText (Optional[str]): Previous snapshot.
		newText (Optional[str]): Current snapshot.

	Returns:
		DiffResult: 1-based firstChangedIndex (-1 when identical), total new line count,
					and whether the change grew the content.
	"""
	oldLines = _splitLines(oldText)
	newLines = _splitLines(newText)

	for i in range(min(len(oldLines), len(newLines))):
		if oldLines[i] != newLines[i]:
			return DiffResult(i + 1, len(newLines), len(newLines[i]) > len(oldLines[i]))

	if len(oldLines) > len(newLines):
		# Truncated at the end: point at the last surviving line.
		return DiffResult(max(len(newLines), 1), len(newLines), False)
	if len(newLines) > len(oldLines):
		return DiffResult(len(oldLines) + 1, len(newLines), True)
	return DiffResult(-1, len(newLines), False)


def diffAllLines(oldText: Optional[str], newText: Optional[str]) -> AllChangedResult:
	"""
	Collects every differing line (1-based) instead of stopping at the first.

	When the old snapshot is the empty string every change is ADDED: there is no
	prior content to modify. Lines beyond the old length are always ADDED.
	"""
	oldLines = _splitLines(oldText)
	newLines = _splitLines(newText)
	oldIsEmpty: bool = not oldText
	changed: Dict[int, LineChangeType] = {}

	for i in range(min(len(oldLines), len(newLines))):
		if oldLines[i] != newLines[i]:
			changed[i + 1] = LineChangeType.ADDED if oldIsEmpty else LineChangeType.MODIFIED
	for i in range(len(oldLines), len(newLines)):
		changed[i + 1] = LineChangeType.ADDED

	return AllChangedResult(changedIndices=changed, total=len(newLines))


# --- Block granularity ---

def _isFence(line: str) -> bool:
	return line.startswith(CODE_FENCES)


def splitIntoBlocksWithLines(text: Optional[str]) -> Tuple[List[str], List[Tuple[int, int]]]:
	"""
	Splits markdown into blocks separated by blank lines, keeping fenced code samples whole.

	Returns:
		Tuple[List[str], List[Tuple[int, int]]]: Stripped block texts and, for each block,
			its 1-based inclusive (startLine, endLine) range in the source.
	"""
	if not text:
		return [], []

	blocks: List[str] = []
	ranges: List[Tuple[int, int]] = []
	currentLines: List[str] = []
	blockStart: int = 1
	inFence: bool = False

	def flush(endLine: int) -> None:
		block = '\n'.join(currentLines).strip()
		if block:
			blocks.append(block)
			ranges.append((blockStart, endLine))
		currentLines.clear()

	for lineNo, line in enumerate(_splitLines(text), start=1):
		if _isFence(line):
			if inFence:
				currentLines.append(line)
				flush(lineNo)
				blockStart = lineNo + 1
				inFence = False
			else:
				# Text directly above an opening fence is its own block.
				flush(lineNo - 1)
				currentLines.append(line)
				blockStart = lineNo
				inFence = True
		elif inFence:
			currentLines.append(line)
		elif line == '':
			flush(lineNo - 1)
			blockStart = lineNo + 1
		else:
			currentLines.append(line)

	# Unterminated fences run to the end of the text.
	flush(lineNo)
	return blocks, ranges


def splitIntoBlocks(text: Optional[str]) -> List[str]:
	return splitIntoBlocksWithLines(text)[0]


def diffBlocks(oldText: Optional[str], newText: Optional[str]) -> DiffResult:
	"""
	Finds the first block that differs between two markdown snapshots.

	Returns:
		DiffResult: 0-based firstChangedIndex (-1 when identical), total new block count,
					isAddition by block length, and the approximate character offset of the
					change for percentage-based scroll fallbacks.
	"""
	oldBlocks = splitIntoBlocks(oldText)
	newBlocks = splitIntoBlocks(newText)
	charOffset: int = 0

	for i in range(min(len(oldBlocks), len(newBlocks))):
		if oldBlocks[i] != newBlocks[i]:
			return DiffResult(i, len(newBlocks), len(newBlocks[i]) > len(oldBlocks[i]), charOffset)
		charOffset += len(newBlocks[i]) + BLOCK_SEPARATOR_LENGTH

	if len(oldBlocks) > len(newBlocks):
		lastBlockSpan = len(newBlocks[-1]) + BLOCK_SEPARATOR_LENGTH if newBlocks else 0
		return DiffResult(len(newBlocks) - 1, len(newBlocks), False, charOffset - lastBlockSpan)
	if len(newBlocks) > len(oldBlocks):
		return DiffResult(len(oldBlocks), len(newBlocks), True, charOffset)
	return DiffResult(-1, len(newBlocks), False, 0)


def diffAllBlocks(oldText: Optional[str], newText: Optional[str]) -> AllChangedResult:
	"""Every differing block index (0-based); same ADDED/MODIFIED rules as diffAllLines."""
	oldBlocks = splitIntoBlocks(oldText)
	newBlocks = splitIntoBlocks(newText)
	oldIsEmpty: bool = not oldText
	changed: Dict[int, LineChangeType] = {}

	for i in range(min(len(oldBlocks), len(newBlocks))):
		if oldBlocks[i] != newBlocks[i]:
			changed[i] = LineChangeType.ADDED if oldIsEmpty else LineChangeType.MODIFIED
	for i in range(len(oldBlocks), len(newBlocks)):
		changed[i] = LineChangeType.ADDED

	return AllChangedResult(changedIndices=changed, total=len(newBlocks))


def mapLinesToBlocks(text: Optional[str], changedLines: ChangedLineMap) -> List[BlockWithChange]:
	"""
	Projects a per-line git classification onto markdown blocks.

	A block is ADDED if any of its lines is ADDED, otherwise MODIFIED if any line
	is MODIFIED, otherwise unchanged.
	"""
	blocks, ranges = splitIntoBlocksWithLines(text)
	result: List[BlockWithChange] = []
	for index, (block, (startLine, endLine)) in enumerate(zip(blocks, ranges)):
		changeType: Optional[LineChangeType] = None
		for lineNo in range(startLine, endLine + 1):
			lineChange = changedLines.get(lineNo)
			if lineChange == LineChangeType.ADDED:
				changeType = LineChangeType.ADDED
				break
			if lineChange is not None and changeType is None:
				changeType = lineChange
		result.append(BlockWithChange(block, index, startLine, endLine, changeType))
	return result


def diffForGranularity(oldText: Optional[str], newText: Optional[str], granularity: DiffGranularity) -> DiffResult:
	if granularity == DiffGranularity.BLOCK:
		return diffBlocks(oldText, newText)
	return diffLines(oldText, newText)


def diffAllForGranularity(oldText: Optional[str], newText: Optional[str], granularity: DiffGranularity) -> AllChangedResult:
	if granularity == DiffGranularity.BLOCK:
		return diffAllBlocks(oldText, newText)
	return diffAllLines(oldText, newText)


def getScrollPercentage(result: DiffResult) -> float:
	"""Fraction of the document where the change sits, or -1 when there is nothing to scroll to."""
	if not result.hasChange or result.total == 0:
		return -1.0
	return result.firstChangedIndex / result.total

# --- END: core/content_differ.py ---
