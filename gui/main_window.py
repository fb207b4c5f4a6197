# --- START: gui/main_window.py ---
# gui/main_window.py
"""
Main application window module.

Owns the Qt-side collaborators of the diff engine (scheduler, diff transport,
file watcher, locator) and exactly one DocumentSession for the open file.
Opening another file disposes the previous session before the new one is
created, so no snapshot, timer or request survives a document switch.
"""

# Standard library imports
import os
import logging
from typing import Optional

# Qt imports
from PySide6.QtWidgets import QMainWindow, QWidget, QMessageBox
from PySide6.QtCore import Slot, Signal, QTimer
from PySide6.QtGui import QCloseEvent

# Local Core/Util imports
from core.config_manager import ConfigManager, EngineSettings
from core.document_session import DocumentSession
from core.exceptions import ConfigurationError
from core.git_diff_handler import GitDiffHandler, findRepositoryRoot
from gui.gui_utils import QtLogHandler, QtScheduler

# Local GUI module imports
from . import ui_setup
from . import signal_connections
from . import event_handlers
from . import code_view
from .code_view import QtLocator
from .file_source import DEFAULT_STREAMING_TIMEOUT_MS, FileContentSource
from .threads import ThreadedDiffTransport

# Initialise logging for this module
logger: logging.Logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
	"""
	Main application window class.

	Wires the file watcher into the active DocumentSession and repaints the
	code view whenever the session reports a change.
	"""

	# Signal emitted to send log messages to the GUI's log area
	signalLogMessage: Signal = Signal(str)

	def __init__(
		self: 'MainWindow',
		configManager: ConfigManager,
		settings: EngineSettings,
		diffHandler: GitDiffHandler,
		repoRootOverride: Optional[str] = None,
		parent: Optional[QWidget] = None
	) -> None:
		"""
		Args:
			configManager (ConfigManager): Loaded configuration.
			settings (EngineSettings): Validated diff-engine settings.
			diffHandler (GitDiffHandler): Local or HTTP diff source, run on worker threads.
			repoRootOverride (Optional[str]): Repository root to use instead of discovering it per file.
			parent (Optional[QWidget]): Optional parent widget. Defaults to None.
		"""
		super().__init__(parent)
		logger.info("Initialising MainWindow...")
		self._configManager: ConfigManager = configManager
		self._settings: EngineSettings = settings
		self._repoRootOverride: Optional[str] = os.path.abspath(repoRootOverride) if repoRootOverride else None

		# --- State Variables ---
		self._session: Optional[DocumentSession] = None
		self._repaintPending: bool = False

		# --- Initialise UI Elements ---
		ui_setup.setup_ui(self)

		# --- Engine Collaborators ---
		self._scheduler: QtScheduler = QtScheduler(self)
		self._transport: ThreadedDiffTransport = ThreadedDiffTransport(diffHandler, self)
		streamingTimeoutMs: int = self._configManager.getConfigValueInt('Watcher', 'StreamingTimeoutMs', fallback=DEFAULT_STREAMING_TIMEOUT_MS)
		self._fileSource: FileContentSource = FileContentSource(streamingTimeoutMs, parent=self)
		self._locator: QtLocator = QtLocator(self._codeView)

		# --- Connect Signals and Slots ---
		signal_connections.connect_signals(self)

		# --- Setup GUI Logging Handler ---
		self._setupGuiLogging()

		self._updateWidgetStates()
		logger.info("MainWindow initialisation complete.")

	# --- GUI Logging Setup ---
	def _setupGuiLogging(self: 'MainWindow') -> None:
		""" Adds a QtLogHandler feeding the log pane to the root logger. """
		try:
			guiHandler: QtLogHandler = QtLogHandler(signalEmitter=self.signalLogMessage.emit, parent=self)
			guiLogLevelName: str = self._configManager.getConfigValue('Logging', 'GuiLogLevel', fallback='INFO')
			guiLogLevel: int = getattr(logging, str(guiLogLevelName).upper(), logging.INFO)
			logFormat: str = self._configManager.getConfigValue('Logging', 'GuiLogFormat', fallback='%(asctime)s - %(levelname)s - %(message)s')
			dateFormat: str = self._configManager.getConfigValue('Logging', 'GuiLogDateFormat', fallback='%H:%M:%S')
			guiHandler.setLevel(guiLogLevel)
			guiHandler.setFormatter(logging.Formatter(logFormat, datefmt=dateFormat))
			logging.getLogger().addHandler(guiHandler)
			self._guiLogHandler: Optional[QtLogHandler] = guiHandler
			logger.info(f"GUI logging handler added with level {logging.getLevelName(guiLogLevel)}.")
		except ConfigurationError as e:
			self._guiLogHandler = None
			logger.error(f"Configuration error setting up GUI logging: {e}", exc_info=True)

	# --- Document Lifecycle ---

	def openDocument(self: 'MainWindow', filePath: str) -> bool:
		"""
		Replaces the current session with one for filePath and starts watching it.

		Returns:
			bool: False if the file could not be read.
		"""
		absPath: str = os.path.abspath(filePath)
		self._closeDocument()

		repoRoot: Optional[str] = self._repoRootOverride or findRepositoryRoot(absPath)
		if repoRoot is None:
			logger.info(f"'{absPath}' is not in a git repository; git highlights disabled.")

		self._locator = QtLocator(self._codeView)
		self._session = DocumentSession(
			absPath, repoRoot, self._transport, self._locator, self._scheduler,
			settings=self._settings, onChanged=self._scheduleRepaint
		)
		self._filePathLabel.setText(absPath)
		self.setWindowTitle(f"Live Diff Viewer - {os.path.basename(absPath)}")

		if not self._fileSource.watch(absPath):
			self._showError("Cannot Open File", f"Could not read '{absPath}'. See the log for details.")
			self._closeDocument()
			return False
		self._updateWidgetStates()
		return True

	def _closeDocument(self: 'MainWindow') -> None:
		self._fileSource.unwatch()
		if self._session is not None:
			self._session.dispose()
			self._session = None
		code_view.displaySession(self, None)
		self._filePathLabel.setText("No file open.")
		self._updateWidgetStates()

	# --- Rendering ---

	def _scheduleRepaint(self: 'MainWindow') -> None:
		"""Coalesces the session's change notifications into one repaint per event-loop pass."""
		if self._repaintPending:
			return
		self._repaintPending = True
		QTimer.singleShot(0, self._repaint)

	@Slot()
	def _repaint(self: 'MainWindow') -> None:
		self._repaintPending = False
		code_view.displaySession(self, self._session)
		self._updateWidgetStates()

	# --- Core State and UI Update Methods ---

	def _updateWidgetStates(self: 'MainWindow') -> None:
		""" Enables buttons and refreshes the permanent status labels from the session state. """
		session: Optional[DocumentSession] = self._session
		hasSession: bool = session is not None
		self._jumpToChangeButton.setEnabled(hasSession and session.scroller.lastDiff is not None)
		self._resumeAutoScrollButton.setEnabled(hasSession and session.scroller.userScrolled)
		self._refreshDiffButton.setEnabled(hasSession and session.repoRoot is not None)

		if not hasSession:
			self._gitStatusLabel.setText("")
			self._scrollStatusLabel.setText("")
			return
		gitState = session.gitState
		if session.repoRoot is None:
			gitText = "Git: not a repository"
		elif gitState.loading:
			gitText = "Git: loading..."
		elif gitState.error:
			gitText = f"Git: {gitState.error}"
		else:
			gitText = f"Git: {len(gitState.changedLines)} changed, {len(gitState.deletedLines)} deleted"
		self._gitStatusLabel.setText(gitText)
		self._scrollStatusLabel.setText(event_handlers.describe_scroll_state(self) or "")

	@Slot(str, int)
	def _updateStatusBar(self: 'MainWindow', message: str, timeout: int = 0) -> None:
		if hasattr(self, '_statusBar') and self._statusBar:
			self._statusBar.showMessage(message, timeout)

	@Slot(str)
	def _appendLogMessage(self: 'MainWindow', message: str) -> None:
		if hasattr(self, '_appLogArea') and self._appLogArea:
			self._appLogArea.append(message)

	# --- Message Box Convenience Methods ---
	def _showError(self: 'MainWindow', title: str, message: str) -> None:
		logger.error(f"Displaying Error Dialog - Title: '{title}', Message: '{message}'")
		QMessageBox.critical(self, title, str(message))

	# --- Shutdown ---
	def closeEvent(self: 'MainWindow', event: QCloseEvent) -> None:
		logger.info("Main window closing; shutting down diff session and workers.")
		self._closeDocument()
		self._transport.shutdown()
		if self._guiLogHandler is not None:
			logging.getLogger().removeHandler(self._guiLogHandler)
		super().closeEvent(event)

# --- END: gui/main_window.py ---
