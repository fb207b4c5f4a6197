# --- START: gui/ui_setup.py ---
# gui/ui_setup.py
"""
Module responsible for creating and laying out the UI widgets
for the MainWindow.
"""

import os
from PySide6.QtWidgets import (
	QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
	QLabel, QPushButton, QTextEdit, QStatusBar,
	QSplitter, QTextBrowser
)
from PySide6.QtCore import Qt
from PySide6.QtGui import QFont, QIcon
import logging

from .code_view import HTML_FONT_FAMILY, HTML_FONT_SIZE

logger = logging.getLogger(__name__)


def setup_ui(window: QMainWindow) -> None:
	"""
	Builds the toolbar row, the code view, the log pane and the status bar.

	Args:
		window: The QMainWindow instance to set up.
	"""
	logger.debug("Setting up UI elements.")
	window.setWindowTitle("Live Diff Viewer")
	iconPath = os.path.join('resources', 'app_icon.png')
	if os.path.exists(iconPath):
		window.setWindowIcon(QIcon(iconPath))
	else:
		logger.debug(f"Application icon not found at: {iconPath}")

	window._centralWidget = QWidget()
	window.setCentralWidget(window._centralWidget)
	window._mainLayout = QVBoxLayout(window._centralWidget)

	# --- Top: File and Controls ---
	controlsLayout = QHBoxLayout()
	window._filePathLabel = QLabel("No file open.")
	window._filePathLabel.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
	window._openFileButton = QPushButton("Open File...")
	window._openFileButton.setToolTip("Choose a file to watch. Changes on disk are shown live.")
	window._jumpToChangeButton = QPushButton("Jump to Change")
	window._jumpToChangeButton.setToolTip("Scroll to the most recent edit point.")
	window._resumeAutoScrollButton = QPushButton("Resume Auto-Scroll")
	window._resumeAutoScrollButton.setToolTip("Follow the edit point again after you scrolled away during streaming.")
	window._refreshDiffButton = QPushButton("Refresh Git Diff")
	window._refreshDiffButton.setToolTip("Re-read the diff against the last commit now.")
	controlsLayout.addWidget(window._filePathLabel, 1)
	controlsLayout.addWidget(window._openFileButton)
	controlsLayout.addWidget(window._jumpToChangeButton)
	controlsLayout.addWidget(window._resumeAutoScrollButton)
	controlsLayout.addWidget(window._refreshDiffButton)
	window._mainLayout.addLayout(controlsLayout)

	# --- Middle: Code View over Application Log ---
	splitter = QSplitter(Qt.Orientation.Vertical)

	codeFont = QFont(HTML_FONT_FAMILY.split(',')[0].strip("'"))
	codeFont.setStyleHint(QFont.StyleHint.Monospace)
	try:
		codeFont.setPointSize(int(HTML_FONT_SIZE.replace('pt', '')))
	except ValueError:
		logger.warning(f"Could not parse font size '{HTML_FONT_SIZE}'. Using default.")
		codeFont.setPointSize(10)

	window._codeView = QTextBrowser()
	window._codeView.setReadOnly(True)
	window._codeView.setOpenLinks(False)
	window._codeView.setLineWrapMode(QTextEdit.LineWrapMode.NoWrap)
	window._codeView.setFont(codeFont)
	window._codeView.setObjectName("codeView")
	window._codeView.setToolTip("Green: added since last commit. Yellow: modified. Red: deleted. Orange marker: just edited.")
	splitter.addWidget(window._codeView)

	window._appLogArea = QTextEdit()
	window._appLogArea.setReadOnly(True)
	window._appLogArea.setLineWrapMode(QTextEdit.LineWrapMode.NoWrap)
	logFont = QFont("monospace")
	logFont.setPointSize(9)
	window._appLogArea.setFont(logFont)
	window._appLogArea.setToolTip("Application log.")
	splitter.addWidget(window._appLogArea)

	splitter.setSizes([650, 150])
	window._mainLayout.addWidget(splitter, stretch=1)

	# --- Status Bar ---
	window._statusBar = QStatusBar()
	window.setStatusBar(window._statusBar)
	window._gitStatusLabel = QLabel("")
	window._gitStatusLabel.setToolTip("State of the diff against the last commit.")
	window._scrollStatusLabel = QLabel("")
	window._scrollStatusLabel.setToolTip("Auto-scroll state.")
	window._statusBar.addPermanentWidget(window._gitStatusLabel)
	window._statusBar.addPermanentWidget(window._scrollStatusLabel)

	window.setGeometry(100, 100, 1000, 800)
	logger.debug("UI setup complete.")

# --- END: gui/ui_setup.py ---
