# --- START: tests/test_hunk_parser.py ---
import unittest
from unittest.mock import patch, MagicMock

import sys
if '.' not in sys.path:
	sys.path.append('.')

from core.hunk_parser import DiffHunkParser, extractLineChanges, parseHunks
from core.models import DeletedLine, DiffLineKind, LineChangeType

FILE_HEADER: str = (
	"diff --git a/src/app.py b/src/app.py\n"
	"index 83db48f..bf269f4 100644\n"
	"--- a/src/app.py\n"
	"+++ b/src/app.py\n"
)


class TestParseHunks(unittest.TestCase):

	def setUp(self: 'TestParseHunks') -> None:
		self.patcher = patch('core.hunk_parser.logger', MagicMock())
		self.patcher.start()

	def tearDown(self: 'TestParseHunks') -> None:
		self.patcher.stop()

	def test_emptyInput_yieldsNoHunks(self: 'TestParseHunks') -> None:
		self.assertEqual(parseHunks(None), [])
		self.assertEqual(parseHunks(''), [])

	def test_headerCountsDefaultToOne(self: 'TestParseHunks') -> None:
		hunks = parseHunks(FILE_HEADER + "@@ -3 +3 @@\n-old\n+new\n")
		self.assertEqual(len(hunks), 1)
		self.assertEqual((hunks[0].oldStart, hunks[0].oldLines, hunks[0].newStart, hunks[0].newLines), (3, 1, 3, 1))

	def test_lineNumbersAreTracked(self: 'TestParseHunks') -> None:
		hunks = parseHunks(FILE_HEADER + "@@ -10,3 +10,3 @@ def main():\n ctx\n-gone\n+added\n tail\n")
		kinds = [line.kind for line in hunks[0].lines]
		self.assertEqual(kinds, [DiffLineKind.CONTEXT, DiffLineKind.DELETION, DiffLineKind.ADDITION, DiffLineKind.CONTEXT])
		self.assertEqual(hunks[0].lines[1].oldLineNumber, 11)
		self.assertEqual(hunks[0].lines[2].newLineNumber, 11)
		self.assertEqual(hunks[0].lines[3].newLineNumber, 12)

	def test_malformedHeaderIsSkipped(self: 'TestParseHunks') -> None:
		hunks = parseHunks(FILE_HEADER + "@@ garbage @@\n+x\n@@ -1,1 +1,1 @@\n-a\n+b\n")
		self.assertEqual(len(hunks), 1)
		self.assertEqual(hunks[0].lines[-1].content, 'b')

	def test_deletedLineLookingLikeHeaderStaysInHunk(self: 'TestParseHunks') -> None:
		hunks = parseHunks(FILE_HEADER + "@@ -1,2 +1,1 @@\n--- a comment\n keep\n")
		self.assertEqual(hunks[0].lines[0].kind, DiffLineKind.DELETION)
		self.assertEqual(hunks[0].lines[0].content, '-- a comment')

	def test_onlyFirstFileSectionIsRead(self: 'TestParseHunks') -> None:
		second = "diff --git a/other b/other\n--- a/other\n+++ b/other\n@@ -1 +1 @@\n-x\n+y\n"
		hunks = parseHunks(FILE_HEADER + "@@ -1 +1 @@\n-a\n+b\n" + second)
		self.assertEqual(len(hunks), 1)


class TestDiffHunkParser(unittest.TestCase):

	def setUp(self: 'TestDiffHunkParser') -> None:
		self.patcher = patch('core.hunk_parser.logger', MagicMock())
		self.patcher.start()
		self.parser = DiffHunkParser()

	def tearDown(self: 'TestDiffHunkParser') -> None:
		self.patcher.stop()

	def test_threeDeletionsThreeAdditions_allModified(self: 'TestDiffHunkParser') -> None:
		diff = FILE_HEADER + "@@ -1,3 +1,3 @@\n-a\n-b\n-c\n+x\n+y\n+z\n"
		result = self.parser.parse(diff)
		self.assertEqual(result.changedLines, {1: LineChangeType.MODIFIED, 2: LineChangeType.MODIFIED, 3: LineChangeType.MODIFIED})
		self.assertEqual(result.deletedLines, ())

	def test_threeDeletionsOneAddition_twoDeletedSameAnchor(self: 'TestDiffHunkParser') -> None:
		diff = FILE_HEADER + "@@ -4,3 +4,1 @@\n-a\n-b\n-c\n+x\n"
		result = self.parser.parse(diff)
		self.assertEqual(result.changedLines, {4: LineChangeType.MODIFIED})
		self.assertEqual(len(result.deletedLines), 2)
		self.assertEqual({d.afterLine for d in result.deletedLines}, {3})
		# oldest deletion first among the leftovers
		self.assertEqual([d.content for d in result.deletedLines], ['b', 'c'])

	def test_oneDeletionThreeAdditions_oneModifiedTwoAdded(self: 'TestDiffHunkParser') -> None:
		diff = FILE_HEADER + "@@ -2,1 +2,3 @@\n-a\n+x\n+y\n+z\n"
		result = self.parser.parse(diff)
		self.assertEqual(result.changedLines, {2: LineChangeType.MODIFIED, 3: LineChangeType.ADDED, 4: LineChangeType.ADDED})
		self.assertEqual(result.deletedLines, ())

	def test_deletionFlushedAtContextLine(self: 'TestDiffHunkParser') -> None:
		diff = FILE_HEADER + "@@ -1,3 +1,2 @@\n one\n-two\n three\n"
		result = self.parser.parse(diff)
		self.assertEqual(result.changedLines, {})
		self.assertEqual(result.deletedLines, (DeletedLine(afterLine=1, content='two'),))

	def test_pureDeletionAtTopAnchorsAtZero(self: 'TestDiffHunkParser') -> None:
		diff = FILE_HEADER + "@@ -1,1 +0,0 @@\n-first\n"
		result = self.parser.parse(diff)
		self.assertEqual(result.deletedLines, (DeletedLine(afterLine=0, content='first'),))

	def test_pureDeletionUsesGitZeroLengthConvention(self: 'TestDiffHunkParser') -> None:
		diff = FILE_HEADER + "@@ -5,1 +4,0 @@\n-gone\n"
		result = self.parser.parse(diff)
		self.assertEqual(result.deletedLines, (DeletedLine(afterLine=4, content='gone'),))

	def test_multipleHunks(self: 'TestDiffHunkParser') -> None:
		diff = FILE_HEADER + "@@ -1,1 +1,2 @@\n a\n+b\n@@ -10,2 +11,2 @@\n x\n-y\n+Y\n"
		result = self.parser.parse(diff)
		self.assertEqual(result.changedLines, {2: LineChangeType.ADDED, 12: LineChangeType.MODIFIED})

	def test_garbageNeverRaises(self: 'TestDiffHunkParser') -> None:
		for junk in ('', 'not a diff', '@@ -x +y @@\n+a', '\\ No newline at end of file', None):
			result = self.parser.parse(junk)
			self.assertEqual(result.changedLines, {})
			self.assertEqual(result.deletedLines, ())

	def test_noNewlineMarkerIgnored(self: 'TestDiffHunkParser') -> None:
		diff = FILE_HEADER + "@@ -1 +1 @@\n-a\n\\ No newline at end of file\n+b\n\\ No newline at end of file\n"
		self.assertEqual(extractLineChanges(diff).changedLines, {1: LineChangeType.MODIFIED})

	def test_crlfInput(self: 'TestDiffHunkParser') -> None:
		diff = (FILE_HEADER + "@@ -1,1 +1,2 @@\n a\n+b\n").replace('\n', '\r\n')
		self.assertEqual(self.parser.parse(diff).changedLines, {2: LineChangeType.ADDED})


if __name__ == '__main__':
	unittest.main()
# --- END: tests/test_hunk_parser.py ---
