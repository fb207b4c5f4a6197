# --- START: gui/file_source.py ---
# gui/file_source.py
"""
Watches the open file on disk and emits full-text snapshots.

A change that arrives less than `streamingTimeoutMs` after the previous one is
reported with isStreaming=True (an agent is rewriting the file). When no
further change arrives within that window a final snapshot is emitted with
isStreaming=False.
"""
import logging
import os
import time
from typing import Optional

from PySide6.QtCore import QFileSystemWatcher, QObject, QTimer, Signal, Slot

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_STREAMING_TIMEOUT_MS: int = 1500
MAX_FILE_SIZE: int = 5 * 1024 * 1024


class FileContentSource(QObject):
	"""
	Signals:
		contentChanged (str, bool): Full text and the streaming flag
		errorOccurred (str): The file could not be read
	"""
	contentChanged = Signal(str, bool)
	errorOccurred = Signal(str)

	def __init__(self: 'FileContentSource', streamingTimeoutMs: int = DEFAULT_STREAMING_TIMEOUT_MS, parent: Optional[QObject] = None) -> None:
		super().__init__(parent)
		self._streamingTimeoutMs: int = streamingTimeoutMs
		self._watcher: QFileSystemWatcher = QFileSystemWatcher(self)
		self._watcher.fileChanged.connect(self._onFileChanged)
		self._stopTimer: QTimer = QTimer(self)
		self._stopTimer.setSingleShot(True)
		self._stopTimer.timeout.connect(self._onStreamingTimeout)
		self._path: Optional[str] = None
		self._content: str = ''
		self._lastChange: Optional[float] = None
		self._isStreaming: bool = False

	@property
	def path(self: 'FileContentSource') -> Optional[str]:
		return self._path

	@property
	def isStreaming(self: 'FileContentSource') -> bool:
		return self._isStreaming

	def watch(self: 'FileContentSource', path: str) -> bool:
		"""Starts watching `path` and emits its current content. Returns False if it cannot be read."""
		self.unwatch()
		self._path = os.path.abspath(path)
		text: Optional[str] = self._readFile()
		if text is None:
			return False
		if not self._watcher.addPath(self._path):
			logger.warning(f"File watcher could not watch '{self._path}'; live updates disabled.")
		logger.info(f"Watching '{self._path}' for changes.")
		self._content = text
		self.contentChanged.emit(text, False)
		return True

	def unwatch(self: 'FileContentSource') -> None:
		self._stopTimer.stop()
		files = self._watcher.files()
		if files:
			self._watcher.removePaths(files)
		self._path = None
		self._content = ''
		self._lastChange = None
		self._isStreaming = False

	@Slot(str)
	def _onFileChanged(self: 'FileContentSource', path: str) -> None:
		if path != self._path:
			return
		# Editors and agents often replace the file atomically, which drops the watch.
		if path not in self._watcher.files() and os.path.exists(path):
			self._watcher.addPath(path)

		now: float = time.monotonic()
		if self._lastChange is not None and (now - self._lastChange) * 1000.0 < self._streamingTimeoutMs:
			if not self._isStreaming:
				logger.debug(f"Rapid changes detected on '{path}'; streaming started.")
			self._isStreaming = True
		self._lastChange = now
		self._stopTimer.start(self._streamingTimeoutMs)

		text: Optional[str] = self._readFile()
		if text is None:
			return
		self._content = text
		self.contentChanged.emit(text, self._isStreaming)

	@Slot()
	def _onStreamingTimeout(self: 'FileContentSource') -> None:
		if not self._isStreaming:
			return
		logger.debug(f"No changes on '{self._path}' for {self._streamingTimeoutMs} ms; streaming stopped.")
		self._isStreaming = False
		self.contentChanged.emit(self._content, False)

	def _readFile(self: 'FileContentSource') -> Optional[str]:
		if not self._path:
			return None
		try:
			if os.path.getsize(self._path) > MAX_FILE_SIZE:
				errMsg = f"File '{self._path}' is larger than {MAX_FILE_SIZE // (1024 * 1024)} MB and cannot be displayed."
				logger.warning(errMsg)
				self.errorOccurred.emit(errMsg)
				return None
			with open(self._path, 'r', encoding='utf-8', errors='replace') as f:
				return f.read()
		except FileNotFoundError:
			# Mid-rewrite the file can briefly disappear; report it as empty.
			logger.debug(f"'{self._path}' is missing; treating it as empty.")
			return ''
		except OSError as e:
			errMsg = f"Error reading '{self._path}': {e}"
			logger.error(errMsg)
			self.errorOccurred.emit(errMsg)
			return None

# --- END: gui/file_source.py ---
