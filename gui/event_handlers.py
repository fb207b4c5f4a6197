# --- START: gui/event_handlers.py ---
# gui/event_handlers.py
"""
Module containing the event handling slots for user interactions and file
updates in the MainWindow. These functions are connected to widget and
FileContentSource signals in signal_connections.py.
"""

import logging
import os
from typing import Optional, TYPE_CHECKING

from PySide6.QtWidgets import QFileDialog

if TYPE_CHECKING:
	from .main_window import MainWindow

logger: logging.Logger = logging.getLogger(__name__)


# --- Toolbar Handlers ---

def handle_open_file(window: 'MainWindow') -> None:
	"""
	Handles the 'Open File...' button. Asks for a file and opens it in a new
	diff session, replacing the current one.

	Args:
		window (MainWindow): The main application window instance.
	"""
	startDir: str = os.path.dirname(window._session.filePath) if window._session else (window._repoRootOverride or os.getcwd())
	filePath, _ = QFileDialog.getOpenFileName(window, "Open File to Watch", startDir)
	if not filePath:
		return
	window.openDocument(filePath)


def handle_jump_to_change(window: 'MainWindow') -> None:
	if window._session is None:
		return
	if not window._session.scrollToChange():
		window._updateStatusBar("No change to jump to yet.", 3000)
	window._updateWidgetStates()


def handle_resume_auto_scroll(window: 'MainWindow') -> None:
	if window._session is None:
		return
	window._session.resetUserScroll()
	window._updateStatusBar("Auto-scroll resumed.", 3000)
	window._updateWidgetStates()


def handle_refresh_git_diff(window: 'MainWindow') -> None:
	if window._session is None:
		return
	logger.info(f"Manual git diff refresh for '{window._session.filePath}'.")
	window._session.refreshGitDiff()


# --- File Source Handlers ---

def handle_content_changed(window: 'MainWindow', text: str, isStreaming: bool) -> None:
	"""
	Feeds a new snapshot from the file watcher into the active session.

	Args:
		window (MainWindow): The main application window instance.
		text (str): Full file content.
		isStreaming (bool): True while rapid successive writes are arriving.
	"""
	if window._session is None:
		logger.debug("Content update received with no open session; ignored.")
		return
	window._session.onContentUpdate(text, isStreaming)
	window._updateWidgetStates()


def handle_file_source_error(window: 'MainWindow', message: str) -> None:
	window._updateStatusBar(message, 10000)


# --- Code View Handlers ---

def handle_code_view_scrolled(window: 'MainWindow', value: int) -> None:
	"""
	Reports scrollbar movement to the session as a potential user scroll.

	Movement produced by the viewer's own smooth-scroll animation is skipped;
	anything else is judged by the session against its echo window.
	"""
	session = window._session
	if session is None or window._locator.isAnimating:
		return
	if session.onUserScroll():
		window._updateStatusBar("Auto-scroll paused. Use 'Resume Auto-Scroll' to follow edits again.", 5000)
		window._updateWidgetStates()


def describe_scroll_state(window: 'MainWindow') -> Optional[str]:
	"""Short status-bar text for the auto-scroll state, or None with no session."""
	if window._session is None:
		return None
	state = window._session.scroller.state.value
	streaming: str = "streaming" if window._session.isStreaming else "idle"
	return f"Auto-scroll: {state} ({streaming})"

# --- END: gui/event_handlers.py ---
