# --- START: tests/test_content_differ.py ---
import unittest

import sys
if '.' not in sys.path:
	sys.path.append('.')

from core.content_differ import (
	diffAllBlocks, diffAllLines, diffBlocks, diffForGranularity, diffLines, getScrollPercentage,
	granularityForPath, mapLinesToBlocks, splitIntoBlocks, splitIntoBlocksWithLines,
)
from core.models import DiffGranularity, DiffResult, LineChangeType

FENCED_MARKDOWN: str = "# H\n\n```js\nconst x = 1;\n\nconst y = 2;\n```\n\nP"


class TestDiffLines(unittest.TestCase):

	def test_identicalContent(self: 'TestDiffLines') -> None:
		result = diffLines("a\nb", "a\nb")
		self.assertEqual(result.firstChangedIndex, -1)
		self.assertFalse(result.hasChange)
		self.assertEqual(result.total, 2)

	def test_firstDifferenceIsOneBased(self: 'TestDiffLines') -> None:
		result = diffLines("a\nb\nc", "a\nB!\nc")
		self.assertEqual(result.firstChangedIndex, 2)
		self.assertTrue(result.isAddition)

	def test_shorterLineIsNotAddition(self: 'TestDiffLines') -> None:
		self.assertFalse(diffLines("a\nlong line", "a\nshort").isAddition)

	def test_truncationPointsAtLastSurvivingLine(self: 'TestDiffLines') -> None:
		result = diffLines("a\nb\nc", "a\nb")
		self.assertEqual(result.firstChangedIndex, 2)
		self.assertFalse(result.isAddition)

	def test_appendedLines(self: 'TestDiffLines') -> None:
		result = diffLines("a\nb", "a\nb\nc\nd")
		self.assertEqual(result, DiffResult(3, 4, True))

	def test_crlfIsNormalised(self: 'TestDiffLines') -> None:
		self.assertFalse(diffLines("a\r\nb", "a\nb").hasChange)

	def test_noneTreatedAsEmpty(self: 'TestDiffLines') -> None:
		result = diffLines(None, "x")
		self.assertEqual(result.firstChangedIndex, 1)


class TestDiffAllLines(unittest.TestCase):

	def test_emptyOldContentIsAllAdded(self: 'TestDiffAllLines') -> None:
		result = diffAllLines("", "a\nb")
		self.assertEqual(result.changedIndices, {1: LineChangeType.ADDED, 2: LineChangeType.ADDED})
		self.assertEqual(result.total, 2)

	def test_modifiedAndAppended(self: 'TestDiffAllLines') -> None:
		result = diffAllLines("a\nb\nc", "a\nX\nc\nd")
		self.assertEqual(result.changedIndices, {2: LineChangeType.MODIFIED, 4: LineChangeType.ADDED})

	def test_identical(self: 'TestDiffAllLines') -> None:
		self.assertEqual(diffAllLines("a", "a").changedIndices, {})


class TestBlocks(unittest.TestCase):

	def test_fencedBlockWithBlankLineIsOneBlock(self: 'TestBlocks') -> None:
		blocks, ranges = splitIntoBlocksWithLines(FENCED_MARKDOWN)
		self.assertEqual(len(blocks), 3)
		self.assertTrue(blocks[1].startswith("```js"))
		self.assertEqual(ranges, [(1, 1), (3, 7), (9, 9)])

	def test_textAboveFenceIsSeparateBlock(self: 'TestBlocks') -> None:
		self.assertEqual(splitIntoBlocks("intro\n```\ncode\n```"), ["intro", "```\ncode\n```"])

	def test_unterminatedFenceRunsToEnd(self: 'TestBlocks') -> None:
		self.assertEqual(splitIntoBlocks("```\na\n\nb"), ["```\na\n\nb"])

	def test_emptyTextHasNoBlocks(self: 'TestBlocks') -> None:
		self.assertEqual(splitIntoBlocksWithLines(""), ([], []))

	def test_diffBlocksFindsChangedBlock(self: 'TestBlocks') -> None:
		result = diffBlocks("# T\n\nalpha\n\nbeta", "# T\n\nalpha!\n\nbeta")
		self.assertEqual(result.firstChangedIndex, 1)
		self.assertEqual(result.total, 3)
		self.assertTrue(result.isAddition)
		self.assertEqual(result.charOffset, len("# T") + 2)

	def test_diffBlocksAppendedBlock(self: 'TestBlocks') -> None:
		result = diffBlocks("a", "a\n\nb")
		self.assertEqual((result.firstChangedIndex, result.total, result.isAddition), (1, 2, True))

	def test_diffBlocksRemovedBlock(self: 'TestBlocks') -> None:
		result = diffBlocks("a\n\nb\n\nc", "a\n\nb")
		self.assertEqual(result.firstChangedIndex, 1)
		self.assertFalse(result.isAddition)

	def test_diffAllBlocksBootstrap(self: 'TestBlocks') -> None:
		result = diffAllBlocks("", "a\n\nb")
		self.assertEqual(result.changedIndices, {0: LineChangeType.ADDED, 1: LineChangeType.ADDED})

	def test_mapLinesToBlocksAddedWins(self: 'TestBlocks') -> None:
		blocks = mapLinesToBlocks(FENCED_MARKDOWN, {4: LineChangeType.MODIFIED, 6: LineChangeType.ADDED, 9: LineChangeType.MODIFIED})
		self.assertIsNone(blocks[0].changeType)
		self.assertEqual(blocks[1].changeType, LineChangeType.ADDED)
		self.assertEqual(blocks[2].changeType, LineChangeType.MODIFIED)
		self.assertEqual((blocks[1].startLine, blocks[1].endLine), (3, 7))


class TestHelpers(unittest.TestCase):

	def test_granularityForPath(self: 'TestHelpers') -> None:
		self.assertEqual(granularityForPath("/x/README.md"), DiffGranularity.BLOCK)
		self.assertEqual(granularityForPath("notes.MDX"), DiffGranularity.BLOCK)
		self.assertEqual(granularityForPath("main.py"), DiffGranularity.LINE)
		self.assertEqual(granularityForPath(None), DiffGranularity.LINE)

	def test_diffForGranularityDispatches(self: 'TestHelpers') -> None:
		self.assertEqual(diffForGranularity("a\n\nb", "a\n\nc", DiffGranularity.BLOCK).firstChangedIndex, 1)
		self.assertEqual(diffForGranularity("a\n\nb", "a\n\nc", DiffGranularity.LINE).firstChangedIndex, 3)

	def test_scrollPercentage(self: 'TestHelpers') -> None:
		self.assertEqual(getScrollPercentage(DiffResult(5, 10, True)), 0.5)
		self.assertEqual(getScrollPercentage(DiffResult(-1, 10, False)), -1.0)
		self.assertEqual(getScrollPercentage(DiffResult(0, 0, False)), -1.0)


if __name__ == '__main__':
	unittest.main()
# --- END: tests/test_content_differ.py ---
