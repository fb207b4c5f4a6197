# --- START: gui/code_view.py ---
# gui/code_view.py
"""
Renders a document session's display sequence into the main window's
QTextBrowser and adapts that widget to the auto-scroll Locator interface.

Every display entry (real line or deleted placeholder) becomes exactly one
<p>, so QTextDocument block N is display entry N. QtLocator relies on that to
map line numbers and markdown block indices to QTextBlocks.
"""
import html
import logging
from typing import Dict, List, Optional, Sequence, TYPE_CHECKING

from PySide6.QtCore import QEasingCurve, QPropertyAnimation
from PySide6.QtGui import QTextBlock
from PySide6.QtWidgets import QTextBrowser

from core.auto_scroll import Locator, Rect
from core.content_differ import splitIntoBlocksWithLines
from core.models import DiffGranularity, DisplayEntry, LineChangeType

if TYPE_CHECKING:
	from core.document_session import DocumentSession
	from .main_window import MainWindow

logger: logging.Logger = logging.getLogger(__name__)

# --- Constants ---

HTML_COLOR_ADDED_BG: str = "#e6ffed"
HTML_COLOR_MODIFIED_BG: str = "#fff8c5"
HTML_COLOR_DELETED_BG: str = "#ffeef0"
HTML_COLOR_DELETED_TEXT: str = "#b31d28"
HTML_COLOR_RECENT_EDIT: str = "#f0ad4e" # Left accent for recent edits
HTML_COLOR_LINE_NUM: str = "#6c757d"
HTML_COLOR_TEXT: str = "#212529"
HTML_FONT_FAMILY: str = "'Courier New', Courier, monospace"
HTML_FONT_SIZE: str = "9pt"
HTML_ACCENT_SYMBOL: str = "&#x258E;" # Left one-quarter block
HTML_STYLE: str = (
	"<style>"
	f"body{{font-family:{HTML_FONT_FAMILY};font-size:{HTML_FONT_SIZE};color:{HTML_COLOR_TEXT};}}"
	f"p{{margin:0;white-space:pre;}}"
	f".num{{color:{HTML_COLOR_LINE_NUM};}}"
	f".accent{{color:{HTML_COLOR_RECENT_EDIT};}}"
	f".deleted{{color:{HTML_COLOR_DELETED_TEXT};text-decoration:line-through;}}"
	"</style>"
)

GIT_BACKGROUNDS: Dict[LineChangeType, str] = {
	LineChangeType.ADDED: HTML_COLOR_ADDED_BG,
	LineChangeType.MODIFIED: HTML_COLOR_MODIFIED_BG,
	LineChangeType.DELETED: HTML_COLOR_DELETED_BG,
}

SCROLL_ANIMATION_MS: int = 120


def renderEntry(entry: DisplayEntry, numberWidth: int) -> str:
	"""One display entry as a single <p>, with git background and recent-edit accent."""
	background: Optional[str] = GIT_BACKGROUNDS.get(entry.annotation.gitDiff) if entry.annotation.gitDiff else None
	style: str = f' style="background-color:{background};"' if background else ''
	accent: str = f'<span class="accent">{HTML_ACCENT_SYMBOL}</span>' if entry.annotation.recentEdit else '&nbsp;'
	number: str = str(entry.lineNumber) if entry.lineNumber is not None else '-'
	numberHtml: str = f'<span class="num">{number.rjust(numberWidth).replace(" ", "&nbsp;")}&nbsp;</span>'
	escaped: str = html.escape(entry.content).replace("\t", "&nbsp;" * 4) or "&nbsp;"
	if entry.isDeleted:
		escaped = f'<span class="deleted">{escaped}</span>'
	return f'<p{style}>{accent}{numberHtml}{escaped}</p>'


def renderDisplaySequence(entries: Sequence[DisplayEntry]) -> str:
	lastNumber: int = max((e.lineNumber for e in entries if e.lineNumber is not None), default=0)
	numberWidth: int = max(len(str(lastNumber)), 3)
	body: str = "\n".join(renderEntry(entry, numberWidth) for entry in entries)
	return f"<!DOCTYPE html><html><head><meta charset='UTF-8'>{HTML_STYLE}</head><body>\n{body}\n</body></html>"


class QtLocator(Locator):
	"""Locator over a QTextBrowser whose blocks are display entries."""

	def __init__(self: 'QtLocator', view: QTextBrowser, granularity: DiffGranularity = DiffGranularity.LINE) -> None:
		self._view: QTextBrowser = view
		self._granularity: DiffGranularity = granularity
		self._lineToEntry: Dict[int, int] = {}
		self._blockStartLines: List[int] = []
		self._animation: Optional[QPropertyAnimation] = None

	def setGranularity(self: 'QtLocator', granularity: DiffGranularity) -> None:
		self._granularity = granularity

	def setDisplaySequence(self: 'QtLocator', entries: Sequence[DisplayEntry], content: Optional[str]) -> None:
		"""Rebuilds the index maps after the view was re-rendered."""
		self._lineToEntry = {e.lineNumber: i for i, e in enumerate(entries) if e.lineNumber is not None}
		self._blockStartLines = [start for start, _ in splitIntoBlocksWithLines(content)[1]] if self._granularity == DiffGranularity.BLOCK else []

	@property
	def isAnimating(self: 'QtLocator') -> bool:
		return self._animation is not None and self._animation.state() == QPropertyAnimation.State.Running

	def findElement(self: 'QtLocator', index: int) -> Optional[QTextBlock]:
		lineNumber: int = index
		if self._granularity == DiffGranularity.BLOCK:
			if not 0 <= index < len(self._blockStartLines):
				return None
			lineNumber = self._blockStartLines[index]
		entryIndex: Optional[int] = self._lineToEntry.get(lineNumber)
		if entryIndex is None:
			return None
		block: QTextBlock = self._view.document().findBlockByNumber(entryIndex)
		return block if block.isValid() else None

	def getContainerRect(self: 'QtLocator') -> Rect:
		return Rect(0.0, float(self._view.viewport().height()))

	def getElementRect(self: 'QtLocator', element: QTextBlock) -> Rect:
		box = self._view.document().documentLayout().blockBoundingRect(element)
		top: float = box.top() - self._view.verticalScrollBar().value()
		return Rect(top, top + box.height())

	def scrollTo(self: 'QtLocator', position: float, smooth: bool) -> None:
		scrollBar = self._view.verticalScrollBar()
		target: int = max(scrollBar.minimum(), min(scrollBar.maximum(), int(position)))
		if self._animation is not None:
			self._animation.stop()
		if not smooth:
			scrollBar.setValue(target)
			return
		self._animation = QPropertyAnimation(scrollBar, b"value", self._view)
		self._animation.setDuration(SCROLL_ANIMATION_MS)
		self._animation.setEasingCurve(QEasingCurve.Type.OutCubic)
		self._animation.setStartValue(scrollBar.value())
		self._animation.setEndValue(target)
		self._animation.start()

	def scrollIntoView(self: 'QtLocator', element: QTextBlock, alignment: str) -> None:
		box = self._view.document().documentLayout().blockBoundingRect(element)
		viewportHeight: float = self._view.viewport().height()
		if alignment == 'center':
			target: float = box.top() - (viewportHeight - box.height()) / 2
		else:
			target = box.top()
		self.scrollTo(target, True)

	def getScrollHeight(self: 'QtLocator') -> float:
		return float(self._view.document().size().height())


def displaySession(window: 'MainWindow', session: Optional['DocumentSession']) -> None:
	"""
	Re-renders the code view from the session, keeping the scroll position.

	Scrollbar signals are blocked while the HTML is replaced so the reset to
	the top is not mistaken for a user scroll.
	"""
	view: QTextBrowser = window._codeView
	scrollBar = view.verticalScrollBar()
	scrollValue: int = scrollBar.value()
	wasBlocked: bool = scrollBar.blockSignals(True)
	try:
		if session is None:
			view.clear()
			window._locator.setDisplaySequence([], None)
			return
		entries: List[DisplayEntry] = session.displaySequence()
		view.setHtml(renderDisplaySequence(entries))
		window._locator.setGranularity(session.granularity)
		window._locator.setDisplaySequence(entries, session.content)
		scrollBar.setValue(min(scrollValue, scrollBar.maximum()))
	except Exception as e:
		logger.critical(f"Failed to render '{session.filePath if session else ''}': {e}", exc_info=True)
		view.setHtml(f"<body><p style='color:red;font-weight:bold;'>Failed to render file:<br>{html.escape(str(e))}</p></body>")
	finally:
		scrollBar.blockSignals(wasBlocked)

# --- END: gui/code_view.py ---
