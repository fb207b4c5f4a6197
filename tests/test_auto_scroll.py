# --- START: tests/test_auto_scroll.py ---
import unittest
from unittest.mock import patch, MagicMock
from typing import List

import sys
if '.' not in sys.path:
	sys.path.append('.')

from core.auto_scroll import AutoScrollController, Rect, ScrollState
from core.models import DiffGranularity
from tests.fakes import FakeLocator, ManualScheduler


def makeLines(count: int, edits: dict = None) -> str:
	"""`count` numbered lines, with 1-based line -> replacement text overrides."""
	edits = edits or {}
	lines: List[str] = [edits.get(i, f"line {i}") for i in range(1, count + 1)]
	return "\n".join(lines)


class TestAutoScrollController(unittest.TestCase):

	def setUp(self: 'TestAutoScrollController') -> None:
		self.patcher = patch('core.auto_scroll.logger', MagicMock())
		self.patcher.start()
		self.scheduler = ManualScheduler()
		self.locator = FakeLocator(container=Rect(0, 500), scrollHeight=2000)
		self.controller = AutoScrollController(self.locator, self.scheduler)

	def tearDown(self: 'TestAutoScrollController') -> None:
		self.patcher.stop()

	def _stream(self: 'TestAutoScrollController', *frames: str) -> None:
		for frame in frames:
			self.controller.onContentUpdate(frame, True)

	def test_startsIdleUntilFirstContent(self: 'TestAutoScrollController') -> None:
		self.assertEqual(self.controller.state, ScrollState.IDLE)
		self.controller.onContentUpdate("", True)
		self.assertEqual(self.controller.state, ScrollState.IDLE)
		self.controller.onContentUpdate("a", True)
		self.assertEqual(self.controller.state, ScrollState.TRACKING)
		self.assertEqual(self.locator.calls, [])

	def test_echoWindow_100msIgnored_300msInterrupts(self: 'TestAutoScrollController') -> None:
		self._stream("a", "a\nb")
		self.scheduler.advance(150)
		self.assertEqual(self.locator.calls, [('scrollTo', 2040)])
		self.scheduler.advance(100)
		self.assertFalse(self.controller.onUserScroll())
		self.assertEqual(self.controller.state, ScrollState.TRACKING)
		self.scheduler.advance(200)
		self.assertTrue(self.controller.onUserScroll())
		self.assertEqual(self.controller.state, ScrollState.INTERRUPTED)

	def test_burstIsCoalescedAgainstPreBurstSnapshot(self: 'TestAutoScrollController') -> None:
		self.locator.elements = {3: Rect(900, 920), 10: Rect(1200, 1220)}
		base = makeLines(20)
		self._stream(base)
		self._stream(makeLines(20, {3: "edited three"}))
		self.scheduler.advance(50)
		self._stream(makeLines(20, {3: "edited three", 10: "edited ten"}))
		self.scheduler.advance(100)
		self.assertEqual(self.locator.calls, [])
		self.scheduler.advance(50)
		self.assertEqual(self.locator.calls, [('scrollIntoView', 3, 'center')])
		self.assertEqual(self.controller.lastDiff.firstChangedIndex, 3)

	def test_visibleElementIsNotScrolled(self: 'TestAutoScrollController') -> None:
		self.locator.elements = {5: Rect(100, 120)}
		self._stream(makeLines(20), makeLines(20, {5: "changed"}))
		self.scheduler.advance(150)
		self.assertEqual(self.locator.calls, [])

	def test_missingElementFallsBackToPercentage(self: 'TestAutoScrollController') -> None:
		self._stream(makeLines(20), makeLines(20, {5: "changed"}))
		self.scheduler.advance(150)
		# 5/20 = 25%, raised to the 50% floor
		self.assertEqual(self.locator.calls, [('scrollTo', 1000.0)])

	def test_missingElementDeepInDocument(self: 'TestAutoScrollController') -> None:
		self._stream(makeLines(20), makeLines(20, {16: "x"}))
		self.scheduler.advance(150)
		self.assertEqual(self.locator.calls, [('scrollTo', 2000 * 16 / 20)])

	def test_tailAdditionScrollsToBottom(self: 'TestAutoScrollController') -> None:
		self.locator.elements = {20: Rect(100, 120)}
		self._stream(makeLines(19), makeLines(20))
		self.scheduler.advance(150)
		self.assertEqual(self.locator.calls, [('scrollTo', 2040)])

	def test_notStreamingNeverScrolls(self: 'TestAutoScrollController') -> None:
		self.controller.onContentUpdate(makeLines(20), False)
		self.controller.onContentUpdate(makeLines(21), False)
		self.scheduler.advance(1000)
		self.assertEqual(self.locator.calls, [])
		self.assertFalse(self.controller.onUserScroll())

	def test_interruptedSuppressesScrollsUntilStreamingStops(self: 'TestAutoScrollController') -> None:
		self._stream(makeLines(20))
		self.assertTrue(self.controller.onUserScroll())
		self._stream(makeLines(20, {5: "x"}))
		self.scheduler.advance(500)
		self.assertEqual(self.locator.calls, [])
		self.controller.onContentUpdate(makeLines(20, {5: "x"}), False)
		self.assertFalse(self.controller.userScrolled)
		self.assertEqual(self.controller.state, ScrollState.TRACKING)

	def test_userScrollCancelsPendingBurst(self: 'TestAutoScrollController') -> None:
		self._stream(makeLines(20), makeLines(20, {5: "x"}))
		self.assertTrue(self.controller.isScrollPending)
		self.controller.onUserScroll()
		self.assertFalse(self.controller.isScrollPending)
		self.scheduler.advance(500)
		self.assertEqual(self.locator.calls, [])

	def test_resetUserScrollResumesTracking(self: 'TestAutoScrollController') -> None:
		self._stream(makeLines(20))
		self.controller.onUserScroll()
		self.controller.resetUserScroll()
		self.assertEqual(self.controller.state, ScrollState.TRACKING)
		self._stream(makeLines(20, {5: "x"}))
		self.scheduler.advance(150)
		self.assertEqual(len(self.locator.calls), 1)

	def test_scrollToChangeForcesJump(self: 'TestAutoScrollController') -> None:
		self.locator.elements = {5: Rect(100, 120)}
		self.assertFalse(self.controller.scrollToChange())
		self._stream(makeLines(20), makeLines(20, {5: "x"}))
		# Pending burst is resolved immediately.
		self.assertTrue(self.controller.scrollToChange())
		self.assertEqual(self.locator.calls, [('scrollIntoView', 5, 'center')])

	def test_emptySnapshotAfterContentIsSkipped(self: 'TestAutoScrollController') -> None:
		self._stream(makeLines(5))
		self._stream("")
		self.scheduler.advance(500)
		self.assertEqual(self.locator.calls, [])
		self.assertEqual(self.controller.state, ScrollState.TRACKING)

	def test_scrollToBottomOnFirstFrame(self: 'TestAutoScrollController') -> None:
		controller = AutoScrollController(self.locator, self.scheduler, scrollToBottomOnFirstFrame=True)
		controller.onContentUpdate("first", False)
		self.assertEqual(self.locator.calls, [('scrollTo', 2040)])

	def test_blockGranularityUsesBlockIndices(self: 'TestAutoScrollController') -> None:
		self.locator.elements = {1: Rect(900, 950)}
		controller = AutoScrollController(self.locator, self.scheduler, granularity=DiffGranularity.BLOCK)
		controller.onContentUpdate("# T\n\nalpha\n\nbeta\n\ngamma", True)
		controller.onContentUpdate("# T\n\nalpha!\n\nbeta\n\ngamma", True)
		self.scheduler.advance(150)
		self.assertEqual(self.locator.calls, [('scrollIntoView', 1, 'center')])

	def test_newLastBlockFollowsTail(self: 'TestAutoScrollController') -> None:
		controller = AutoScrollController(self.locator, self.scheduler, granularity=DiffGranularity.BLOCK)
		controller.onContentUpdate("a\n\nb\n\nc\n\nd\n\ne", True)
		controller.onContentUpdate("a\n\nb\n\nc\n\nd\n\ne\n\nf", True)
		self.scheduler.advance(150)
		# Block 5 of 6 is the last block, not 5/6 = 83% of the document.
		self.assertEqual(controller.lastDiff.firstChangedIndex, 5)
		self.assertEqual(self.locator.calls, [('scrollTo', 2040)])

	def test_debounceIsClamped(self: 'TestAutoScrollController') -> None:
		controller = AutoScrollController(self.locator, self.scheduler, debounceMs=10)
		controller.onContentUpdate("a", True)
		controller.onContentUpdate("a\nb", True)
		self.scheduler.advance(49)
		self.assertEqual(self.locator.calls, [])
		self.scheduler.advance(1)
		self.assertEqual(len(self.locator.calls), 1)

	def test_resetForgetsEverything(self: 'TestAutoScrollController') -> None:
		self._stream(makeLines(20), makeLines(20, {5: "x"}))
		self.controller.reset()
		self.assertEqual(self.controller.state, ScrollState.IDLE)
		self.assertIsNone(self.controller.lastDiff)
		self.assertEqual(self.scheduler.pendingCount, 0)


if __name__ == '__main__':
	unittest.main()
# --- END: tests/test_auto_scroll.py ---
