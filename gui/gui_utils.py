# --- START: gui/gui_utils.py ---
# gui/gui_utils.py
"""
Qt adapters for the engine's seams and for logging.

- QtLogHandler forwards formatted log records to the window's log pane.
- QtScheduler implements core.scheduler.Scheduler on top of single-shot QTimers.
"""

import logging
import sys
import time
from typing import Callable, Optional, Set

from PySide6.QtCore import QObject, QTimer

from core.scheduler import CancelHandle, Scheduler


class QtLogHandler(logging.Handler, QObject):
	"""
	A logging handler that passes each formatted record to a Qt signal's emit().
	Inherits from logging.Handler and QObject.
	"""
	_signalEmitter: Optional[Callable[[str], None]] = None

	def __init__(self: 'QtLogHandler', signalEmitter: Optional[Callable[[str], None]] = None, parent: Optional[QObject] = None) -> None:
		"""
		Args:
			signalEmitter (Optional[Callable[[str], None]]): Usually `someSignal.emit`; receives the formatted message.
			parent (QObject, optional): Parent QObject. Defaults to None.
		"""
		logging.Handler.__init__(self)
		QObject.__init__(self, parent)
		self._signalEmitter = signalEmitter

	def emit(self: 'QtLogHandler', record: logging.LogRecord) -> None:
		if not self._signalEmitter:
			print(f"QtLogHandler Error: No signal emitter configured. Log Record: {record}", file=sys.stderr)
			return
		try:
			self._signalEmitter(self.format(record))
		except Exception:
			self.handleError(record)


class QtScheduler(QObject):
	"""
	Scheduler backed by single-shot QTimers owned by this object.

	Callbacks run on the thread this object lives on (the GUI thread).
	Deleting the scheduler stops every timer it still owns.
	"""

	def __init__(self: 'QtScheduler', parent: Optional[QObject] = None) -> None:
		super().__init__(parent)
		self._timers: Set[QTimer] = set()

	def after(self: 'QtScheduler', delayMs: int, callback: Callable[[], None]) -> CancelHandle:
		timer = QTimer(self)
		timer.setSingleShot(True)
		self._timers.add(timer)

		def release() -> None:
			timer.stop()
			self._timers.discard(timer)
			timer.deleteLater()

		handle = CancelHandle(onCancel=release)

		def fire() -> None:
			if not handle.markFired():
				return
			release()
			callback()

		timer.timeout.connect(fire)
		timer.start(max(0, int(delayMs)))
		return handle

	def now(self: 'QtScheduler') -> float:
		return time.monotonic()


Scheduler.register(QtScheduler)

# --- END: gui/gui_utils.py ---
