# --- START: main.py ---
# main.py
"""
Main application entry point.

Usage: python main.py [FILE] [--repo REPO_ROOT] [--config CONFIG_INI] [--env ENV_FILE]

Initialises logging and configuration, builds the git diff handler for the
configured transport, opens FILE (if given) and starts the Qt event loop.
"""
import sys
import argparse
import logging
from typing import List, Optional

from PySide6.QtWidgets import QApplication, QMessageBox

from core.config_manager import ConfigManager, EngineSettings, loadEngineSettings
from core.exceptions import ConfigurationError, GitDiffError
from core.git_diff_handler import GitDiffHandler, createDiffHandler
from gui.main_window import MainWindow
from utils.logger_setup import setupLogging

# --- Constants ---
CONFIG_FILE_PATH: str = 'config.ini'
ENV_FILE_PATH: str = '.env'


def parseArguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
	parser = argparse.ArgumentParser(description="Live view of a file being rewritten, with git and recent-edit highlights.")
	parser.add_argument('file', nargs='?', help="File to open and watch.")
	parser.add_argument('--repo', dest='repoRoot', default=None, help="Repository root (discovered from the file when omitted).")
	parser.add_argument('--config', dest='configPath', default=CONFIG_FILE_PATH, help="Path to config.ini.")
	parser.add_argument('--env', dest='envPath', default=ENV_FILE_PATH, help="Path to the .env file.")
	return parser.parse_args(argv)


def configure_logging(configManager: ConfigManager) -> logging.Logger:
	"""Configure logging based on loaded configuration settings."""
	fileLogLevelName: str = configManager.getConfigValue('Logging', 'FileLogLevel', fallback='DEBUG')
	consoleLogLevelName: str = configManager.getConfigValue('Logging', 'ConsoleLogLevel', fallback='INFO')
	logDir: str = configManager.getConfigValue('Logging', 'LogDirectory', fallback='logs')
	logFileName: str = configManager.getConfigValue('Logging', 'LogFileName', fallback='live_diff_viewer.log')
	return setupLogging(
		consoleLevel=getattr(logging, str(consoleLogLevelName).upper(), logging.INFO),
		logToConsole=True,
		logToFile=True,
		logFileLevel=getattr(logging, str(fileLogLevelName).upper(), logging.DEBUG),
		logDir=logDir,
		logFileName=logFileName
	)


def _fatal(title: str, errorMessage: str) -> None:
	app = QApplication.instance()
	if not app:
		app = QApplication(sys.argv)
	QMessageBox.critical(None, title, errorMessage)
	sys.exit(1)


def main() -> None:
	"""Main application entry point."""
	args: argparse.Namespace = parseArguments(sys.argv[1:])
	logger: logging.Logger = setupLogging(logToConsole=True, logToFile=False)
	logger.info("================ Live Diff Viewer Starting ================")

	configManager: ConfigManager = ConfigManager(args.configPath, args.envPath)
	try:
		configManager.loadEnv()
		configManager.loadConfig()
		logger = configure_logging(configManager)
		settings: EngineSettings = loadEngineSettings(configManager)
		diffHandler: GitDiffHandler = createDiffHandler(
			settings.transport, settings.apiBaseUrl, settings.requestTimeoutSeconds, settings.apiToken
		)
		logger.info(f"Configuration loaded. Git diff transport: {settings.transport}.")
	except (ConfigurationError, GitDiffError) as e:
		errorMessage = f"Fatal Configuration Error: {e}\nPlease check '{args.configPath}' and '{args.envPath}'.\nApplication cannot continue."
		logger.critical(errorMessage, exc_info=True)
		_fatal("Configuration Error", errorMessage)
		return

	app: QApplication = QApplication.instance() or QApplication(sys.argv)

	try:
		mainWindow: MainWindow = MainWindow(configManager, settings, diffHandler, repoRootOverride=args.repoRoot)
		width: int = configManager.getConfigValueInt('GUI', 'WindowWidth', fallback=1000)
		height: int = configManager.getConfigValueInt('GUI', 'WindowHeight', fallback=800)
		mainWindow.resize(width, height)
		mainWindow.show()
		if args.file:
			mainWindow.openDocument(args.file)
	except Exception as e:
		errorMessage = f"Failed to initialise the main application window: {e}"
		logger.critical(errorMessage, exc_info=True)
		_fatal("GUI Initialisation Error", errorMessage)
		return

	logger.info("Main window displayed. Starting Qt event loop.")
	exitCode: int = app.exec()
	logger.info(f"Application finished with exit code: {exitCode}")
	sys.exit(exitCode)


if __name__ == "__main__":
	main()
# --- END: main.py ---
