# --- START: tests/test_document_session.py ---
import unittest
from unittest.mock import patch, MagicMock

import sys
if '.' not in sys.path:
	sys.path.append('.')

from core.auto_scroll import ScrollState
from core.config_manager import EngineSettings
from core.document_session import DocumentSession
from core.git_diff_fetcher import DISABLED_STATE
from core.models import DiffGranularity, DiffResponse, LineChangeType
from tests.fakes import FakeLocator, ManualDiffTransport, ManualScheduler

REPO: str = "/work/repo"
CODE_FILE: str = "/work/repo/src/app.py"
HEADER: str = "diff --git a/src/app.py b/src/app.py\n--- a/src/app.py\n+++ b/src/app.py\n"
# Committed "a\nb" -> working copy "a\nB\nc"
MODIFY_DIFF: str = HEADER + "@@ -1,2 +1,3 @@\n a\n-b\n+B\n+c\n"
# Committed "a\ngone\nb" -> working copy "a\nb"
DELETE_DIFF: str = HEADER + "@@ -1,3 +1,2 @@\n a\n-gone\n b\n"


class TestDocumentSession(unittest.TestCase):

	def setUp(self: 'TestDocumentSession') -> None:
		self.patchers = [
			patch('core.document_session.logger', MagicMock()),
			patch('core.git_diff_fetcher.logger', MagicMock()),
			patch('core.auto_scroll.logger', MagicMock()),
			patch('core.highlight_compositor.logger', MagicMock()),
		]
		for patcher in self.patchers:
			patcher.start()
		self.scheduler = ManualScheduler()
		self.transport = ManualDiffTransport()
		self.locator = FakeLocator()
		self.onChanged = MagicMock()

	def tearDown(self: 'TestDocumentSession') -> None:
		for patcher in self.patchers:
			patcher.stop()

	def _session(self: 'TestDocumentSession', filePath: str = CODE_FILE, repoRoot: str = REPO, settings: EngineSettings = None) -> DocumentSession:
		return DocumentSession(filePath, repoRoot, self.transport, self.locator, self.scheduler, settings=settings, onChanged=self.onChanged)

	def test_openFetchesGitDiffAfterDebounce(self: 'TestDocumentSession') -> None:
		session = self._session()
		session.onContentUpdate("a\nB\nc", False)
		self.assertEqual(self.transport.requests, [])
		self.scheduler.advance(500)
		self.assertEqual(self.transport.requests[0][:2], (REPO, "src/app.py"))
		self.assertTrue(session.gitState.loading)
		self.transport.latest.resolve(DiffResponse(success=True, diff=MODIFY_DIFF))
		annotations = session.annotations()
		self.assertEqual(annotations[2].gitDiff, LineChangeType.MODIFIED)
		self.assertEqual(annotations[3].gitDiff, LineChangeType.ADDED)
		self.assertNotIn(1, annotations)
		self.onChanged.assert_called()

	def test_gitDiffSuspendedWhileStreaming(self: 'TestDocumentSession') -> None:
		session = self._session()
		session.onContentUpdate("a", False)
		session.onContentUpdate("a\nb", True)
		self.assertIs(session.gitState, DISABLED_STATE)
		session.onContentUpdate("a\nb\nc", True)
		self.scheduler.advance(2000)
		self.assertEqual(self.transport.requests, [])
		session.onContentUpdate("a\nb\nc", False)
		self.scheduler.advance(500)
		self.assertEqual(len(self.transport.requests), 1)

	def test_recentEditsFadeAfterStreamedChange(self: 'TestDocumentSession') -> None:
		session = self._session()
		session.onContentUpdate("a\nb", True)
		session.onContentUpdate("a\nB", True)
		self.assertEqual(session.recentEdits, frozenset({2}))
		self.assertTrue(session.annotations()[2].recentEdit)
		self.scheduler.advance(2500)
		self.assertEqual(session.recentEdits, frozenset())

	def test_gitAndRecentEditFlagsCoexist(self: 'TestDocumentSession') -> None:
		session = self._session(settings=EngineSettings(suspendGitDiffWhileStreaming=False))
		session.onContentUpdate("a\nB\nc", False)
		self.scheduler.advance(500)
		self.transport.latest.resolve(DiffResponse(success=True, diff=MODIFY_DIFF))
		session.onContentUpdate("a\nB!\nc", True)
		annotation = session.annotations()[2]
		self.assertEqual(annotation.gitDiff, LineChangeType.MODIFIED)
		self.assertTrue(annotation.recentEdit)

	def test_displaySequenceIncludesDeletedLines(self: 'TestDocumentSession') -> None:
		session = self._session()
		session.onContentUpdate("a\nb", False)
		self.scheduler.advance(500)
		self.transport.latest.resolve(DiffResponse(success=True, diff=DELETE_DIFF))
		sequence = session.displaySequence()
		self.assertEqual([e.content for e in sequence], ['a', 'gone', 'b'])
		self.assertTrue(sequence[1].isDeleted)

	def test_markdownRecentEditsSpreadOverBlockLines(self: 'TestDocumentSession') -> None:
		session = self._session(filePath="/work/repo/README.md")
		self.assertEqual(session.granularity, DiffGranularity.BLOCK)
		session.onContentUpdate("# T\n\npara", True)
		session.onContentUpdate("# T\n\npara\nmore", True)
		self.assertEqual(session.recentEdits, frozenset({1}))
		annotations = session.annotations()
		self.assertTrue(annotations[3].recentEdit)
		self.assertTrue(annotations[4].recentEdit)
		self.assertNotIn(1, annotations)
		self.assertTrue(session.blockAnnotations()[1].recentEdit)

	def test_noRepositoryMeansNoRequests(self: 'TestDocumentSession') -> None:
		session = self._session(repoRoot=None)
		session.onContentUpdate("a", False)
		session.refreshGitDiff()
		self.scheduler.advance(1000)
		self.assertEqual(self.transport.requests, [])
		self.assertEqual(dict(session.gitState.changedLines), {})

	def test_refreshSkipsDebounce(self: 'TestDocumentSession') -> None:
		session = self._session()
		session.onContentUpdate("a", False)
		session.refreshGitDiff()
		self.assertEqual(len(self.transport.requests), 1)

	def test_emptySnapshotKeepsLastContent(self: 'TestDocumentSession') -> None:
		session = self._session()
		session.onContentUpdate("a\nb", True)
		session.onContentUpdate("", True)
		self.assertEqual(session.content, "a\nb")

	def test_disposeCancelsEverything(self: 'TestDocumentSession') -> None:
		session = self._session()
		session.onContentUpdate("a\nb", True)
		session.onContentUpdate("a\nB", True)
		session.onContentUpdate("a\nB", False)
		self.scheduler.advance(500)
		request = self.transport.latest
		self.onChanged.reset_mock()
		session.dispose()
		self.assertTrue(request.isCancelled)
		self.assertEqual(self.scheduler.pendingCount, 0)
		session.onContentUpdate("later", True)
		self.scheduler.advance(5000)
		self.onChanged.assert_not_called()
		self.assertTrue(session.isDisposed)

	def test_documentSwitchStartsClean(self: 'TestDocumentSession') -> None:
		first = self._session()
		first.onContentUpdate("a", True)
		first.onContentUpdate("a\nb", True)
		first.onUserScroll()
		first.dispose()
		second = self._session(filePath="/work/repo/src/other.py")
		self.assertIsNone(second.previousContent)
		self.assertEqual(second.recentEdits, frozenset())
		self.assertEqual(second.scroller.state, ScrollState.IDLE)
		self.assertFalse(second.scroller.userScrolled)

	def test_resetClearsState(self: 'TestDocumentSession') -> None:
		session = self._session()
		session.onContentUpdate("a", True)
		session.onContentUpdate("b", True)
		session.reset()
		self.assertEqual(session.content, "")
		self.assertIsNone(session.previousContent)
		self.assertEqual(session.recentEdits, frozenset())
		self.assertFalse(session.isStreaming)
		self.assertEqual(self.scheduler.pendingCount, 0)


if __name__ == '__main__':
	unittest.main()
# --- END: tests/test_document_session.py ---
