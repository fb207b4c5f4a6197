# gui/signal_connections.py
"""
Module responsible for connecting signals to slots in the MainWindow.
"""

import logging
from typing import TYPE_CHECKING

from . import event_handlers

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
	from .main_window import MainWindow


def connect_signals(window: 'MainWindow') -> None:
	"""
	Connects widget, file-source and logging signals to their handlers.

	Args:
		window: The MainWindow instance whose signals/slots need connecting.
	"""
	logger.debug("Connecting signals to slots.")

	# --- Internal Window Signals ---
	window.signalLogMessage.connect(window._appendLogMessage)

	# --- Toolbar Buttons ---
	window._openFileButton.clicked.connect(lambda: event_handlers.handle_open_file(window))
	window._jumpToChangeButton.clicked.connect(lambda: event_handlers.handle_jump_to_change(window))
	window._resumeAutoScrollButton.clicked.connect(lambda: event_handlers.handle_resume_auto_scroll(window))
	window._refreshDiffButton.clicked.connect(lambda: event_handlers.handle_refresh_git_diff(window))

	# --- File Source ---
	window._fileSource.contentChanged.connect(lambda text, streaming: event_handlers.handle_content_changed(window, text, streaming))
	window._fileSource.errorOccurred.connect(lambda msg: event_handlers.handle_file_source_error(window, msg))

	# --- Code View Scrolling ---
	# Programmatic scrolls arrive here too; the session filters its own echoes.
	window._codeView.verticalScrollBar().valueChanged.connect(lambda value: event_handlers.handle_code_view_scrolled(window, value))

	logger.debug("Signal connections established.")
