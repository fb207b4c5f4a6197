# --- START: utils/logger_setup.py ---
# utils/logger_setup.py
"""
Configures the root logger for the viewer: a console handler and a size-rotated
log file. The diff engine logs every fetch, debounce and scroll decision at
DEBUG, so the file handler is usually the one worth keeping verbose while the
console stays at INFO.
"""

import logging
import sys
import os
from logging.handlers import RotatingFileHandler
from typing import List, Optional

DEFAULT_LOG_FORMAT: str = '%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s'
DEFAULT_DATE_FORMAT: str = '%Y-%m-%d %H:%M:%S'
DEFAULT_LOG_FILE_NAME: str = 'live_diff_viewer.log'
# Third-party loggers that are noisy at DEBUG
QUIET_LOGGERS = ('git.cmd', 'git.util', 'urllib3.connectionpool')


def _createFileHandler(logDir: str, logFileName: str, maxBytes: int, backupCount: int) -> Optional[RotatingFileHandler]:
	absLogDir: str = os.path.abspath(logDir)
	try:
		os.makedirs(absLogDir, exist_ok=True)
		return RotatingFileHandler(
			os.path.join(absLogDir, logFileName),
			maxBytes=maxBytes,
			backupCount=backupCount,
			encoding='utf-8'
		)
	except OSError as e:
		print(f"ERROR: Failed to configure file logging to '{os.path.join(absLogDir, logFileName)}': {e}", file=sys.stderr)
		return None


def setupLogging(
	consoleLevel: int = logging.INFO,
	logToConsole: bool = True,
	logToFile: bool = True,
	logFileName: str = DEFAULT_LOG_FILE_NAME,
	logFileLevel: int = logging.DEBUG,
	logDir: str = 'logs',
	maxBytes: int = 5*1024*1024,
	backupCount: int = 3,
	logFormat: str = DEFAULT_LOG_FORMAT,
	dateFormat: str = DEFAULT_DATE_FORMAT
) -> logging.Logger:
	"""
	Replaces the root logger's handlers with console and/or rotating file output.

	Safe to call more than once: main() calls it first with defaults and again
	after config.ini has been read.

	Args:
		consoleLevel (int): Minimum level written to stderr.
		logToConsole (bool): Add the stderr handler.
		logToFile (bool): Add the rotating file handler.
		logFileName (str): Name of the log file inside logDir.
		logFileLevel (int): Minimum level written to the file.
		logDir (str): Directory for the log file; created if missing.
		maxBytes (int): Size at which the file rotates.
		backupCount (int): Rotated files kept.
		logFormat (str): Format string for both handlers.
		dateFormat (str): Date format for both handlers.

	Returns:
		logging.Logger: The root logger.
	"""
	formatter: logging.Formatter = logging.Formatter(logFormat, datefmt=dateFormat)
	logHandlers: List[logging.Handler] = []

	if logToConsole:
		consoleHandler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
		consoleHandler.setLevel(consoleLevel)
		consoleHandler.setFormatter(formatter)
		logHandlers.append(consoleHandler)

	fileHandler: Optional[RotatingFileHandler] = _createFileHandler(logDir, logFileName, maxBytes, backupCount) if logToFile else None
	if fileHandler is not None:
		fileHandler.setLevel(logFileLevel)
		fileHandler.setFormatter(formatter)
		logHandlers.append(fileHandler)

	rootLogger: logging.Logger = logging.getLogger()
	# Root must pass everything either handler wants
	rootLogger.setLevel(min([h.level for h in logHandlers] or [logging.WARNING]))
	for handler in rootLogger.handlers[:]:
		rootLogger.removeHandler(handler)
		handler.close()
	for handler in logHandlers:
		rootLogger.addHandler(handler)

	for name in QUIET_LOGGERS:
		logging.getLogger(name).setLevel(logging.INFO)

	if logHandlers:
		fileInfo: str = f"'{os.path.join(logDir, logFileName)}' at {logging.getLevelName(logFileLevel)}" if fileHandler else 'disabled'
		rootLogger.info(f"Logging initialised. Console: {logging.getLevelName(consoleLevel) if logToConsole else 'disabled'}, File: {fileInfo}.")
	else:
		print("WARNING: Logging initialisation completed but no handlers were configured.", file=sys.stderr)
	return rootLogger

# --- END: utils/logger_setup.py ---
