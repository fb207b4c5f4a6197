# --- START: core/config_manager.py ---
# core/config_manager.py
"""
Loads viewer settings from config.ini and secrets from the environment.

The .env file (python-dotenv) only ever supplies DIFF_API_TOKEN, the token sent
to the diff backend. Everything else lives in config.ini and is read through
the typed getters below; loadEngineSettings() turns the [Diff] and [GitDiff]
sections into one validated EngineSettings value for the diff engine.
"""

import os
import configparser
import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError

logger: logging.Logger = logging.getLogger(__name__)

TRANSPORT_LOCAL: str = 'local'
TRANSPORT_HTTP: str = 'http'
VALID_TRANSPORTS = (TRANSPORT_LOCAL, TRANSPORT_HTTP)
API_TOKEN_ENV_VAR: str = 'DIFF_API_TOKEN'

# (fallback, minimum, maximum) in milliseconds
GIT_DIFF_DEBOUNCE_RANGE = (500, 500, 1000)
SCROLL_DEBOUNCE_RANGE = (150, 50, 150)


class ConfigManager:
	"""
	Read-only access to config.ini and the .env file.

	Values in config.ini may carry trailing '#' or ';' comments; they are stripped.
	"""
	_config: configparser.ConfigParser
	_envLoaded: bool
	_configLoaded: bool
	_configLoadAttempted: bool
	_configLoadError: Optional[Exception] = None
	_envFilePath: Optional[str]
	_configFilePath: Optional[str]

	def __init__(self: 'ConfigManager', configFilePath: Optional[str] = 'config.ini', envFilePath: Optional[str] = '.env') -> None:
		"""
		Args:
			configFilePath (Optional[str]): Path to config.ini; None to run on defaults only.
			envFilePath (Optional[str]): Path to the .env file; None to use the process environment only.
		"""
		self._config = configparser.ConfigParser(interpolation=None)
		self._envLoaded = False
		self._configLoaded = False
		self._configLoadAttempted = False
		self._configLoadError = None
		self._envFilePath = envFilePath
		self._configFilePath = configFilePath
		logger.debug(f"ConfigManager created for config '{configFilePath}' and env '{envFilePath}'")

	def loadEnv(self: 'ConfigManager', override: bool = False) -> bool:
		"""
		Loads the .env file into the process environment.

		Args:
			override (bool): Overwrite variables that are already set. Defaults to False.

		Returns:
			bool: True if the file existed and load_dotenv reported success.

		Raises:
			ConfigurationError: If the file exists but cannot be processed.
		"""
		if not self._envFilePath:
			logger.debug("No .env path configured; using the process environment only.")
			return False
		if not os.path.exists(self._envFilePath):
			logger.debug(f".env file '{self._envFilePath}' not present; skipping.")
			return False
		try:
			self._envLoaded = load_dotenv(dotenv_path=self._envFilePath, override=override)
		except Exception as e:
			logger.error(f"Failed to load .env file '{self._envFilePath}': {e}", exc_info=True)
			raise ConfigurationError(f"Error processing .env file '{self._envFilePath}': {e}") from e
		if self._envLoaded:
			logger.info(f"Loaded environment variables from {self._envFilePath}")
		else:
			logger.warning(f".env file '{self._envFilePath}' was found but nothing was loaded from it.")
		return self._envLoaded

	def loadConfig(self: 'ConfigManager') -> None:
		"""
		Parses config.ini. A missing file is not an error; the defaults apply.

		Raises:
			ConfigurationError: If the file exists but cannot be read or parsed.
		"""
		self._configLoadAttempted = True
		self._configLoaded = False
		self._configLoadError = None

		if not self._configFilePath:
			logger.info("No configuration file specified; using built-in defaults.")
			return
		if not os.path.exists(self._configFilePath):
			logger.warning(f"Configuration file not found: {self._configFilePath}. Using built-in defaults.")
			return

		try:
			self._config = configparser.ConfigParser(interpolation=None)
			readFiles: List[str] = self._config.read(self._configFilePath, encoding='utf-8')
		except configparser.Error as e:
			logger.error(f"Failed to parse configuration file '{self._configFilePath}': {e}", exc_info=True)
			self._configLoadError = e
			raise ConfigurationError(f"Error parsing config file '{self._configFilePath}': {e}") from e
		except Exception as e:
			logger.error(f"Failed to read configuration file '{self._configFilePath}': {e}", exc_info=True)
			self._configLoadError = e
			raise ConfigurationError(f"Error reading config file '{self._configFilePath}': {e}") from e

		if not readFiles:
			errMsg = f"Config file '{self._configFilePath}' exists but could not be read."
			logger.error(errMsg)
			self._configLoadError = ConfigurationError(errMsg)
			raise self._configLoadError
		self._configLoaded = True
		logger.info(f"Loaded configuration from {self._configFilePath}")

	def getEnvVar(self: 'ConfigManager', varName: str, defaultValue: Optional[str] = None, required: bool = False) -> Optional[str]:
		"""
		Returns an environment variable, or defaultValue.

		Raises:
			ConfigurationError: If required and the variable is unset.
		"""
		value = os.getenv(varName)
		if value is None:
			if required:
				errMsg = f"Required environment variable '{varName}' is not set."
				logger.error(errMsg)
				raise ConfigurationError(errMsg)
			return defaultValue
		return value

	def getConfigValue(self: 'ConfigManager', section: str, key: str, fallback: Optional[Any] = None, required: bool = False) -> Optional[Any]:
		"""
		Returns the raw string value of section/key with trailing comments removed.

		Args:
			section (str): Section name, e.g. 'Diff'.
			key (str): Option name, e.g. 'GitDiffDebounceMs'.
			fallback (Optional[Any]): Returned when the option is absent.
			required (bool): Raise instead of falling back.

		Raises:
			ConfigurationError: If the file failed to load earlier, or if required and absent.
		"""
		if self._configLoadAttempted and not self._configLoaded and self._configLoadError:
			logger.error(f"Config value '{section}/{key}' requested but '{self._configFilePath}' failed to load.")
			raise ConfigurationError(f"Cannot retrieve config value; configuration file '{self._configFilePath}' failed to load. Error: {self._configLoadError}") from self._configLoadError

		valueExists = self._configLoaded and self._config.has_option(section, key)
		if not valueExists:
			if required:
				errMsg = f"Required configuration value '{key}' not found in section '{section}'."
				if self._configFilePath:
					errMsg += f" Checked in '{self._configFilePath}'." if self._configLoaded else f" Config file '{self._configFilePath}' was not loaded."
				logger.error(errMsg)
				raise ConfigurationError(errMsg)
			logger.debug(f"Config value '{section}/{key}' not set, using fallback: {fallback}")
			return fallback

		value = self._config.get(section, key, raw=True)
		if isinstance(value, str):
			if '#' in value: value = value.split('#', 1)[0].strip()
			if ';' in value: value = value.split(';', 1)[0].strip()
		logger.debug(f"Config value '{section}/{key}' = '{value}'")
		return value

	def getConfigValueInt(self: 'ConfigManager', section: str, key: str, fallback: Optional[int] = None, required: bool = False) -> Optional[int]:
		valueStr = self.getConfigValue(section, key, fallback=None, required=required)
		if valueStr is None: return fallback
		try:
			return int(valueStr)
		except (ValueError, TypeError) as e:
			errMsg = f"Configuration value '{section}/{key}' ('{valueStr}') is not a valid integer."
			logger.error(errMsg)
			raise ConfigurationError(errMsg) from e

	def getConfigValueBool(self: 'ConfigManager', section: str, key: str, fallback: Optional[bool] = None, required: bool = False) -> Optional[bool]:
		valueStr = self.getConfigValue(section, key, fallback=None, required=required)
		if valueStr is None: return fallback
		valueLower = valueStr.strip().lower()
		if valueLower in ['true', 'yes', 'on', '1']: return True
		if valueLower in ['false', 'no', 'off', '0']: return False
		errMsg = f"Configuration value '{section}/{key}' ('{valueStr}') is not a valid boolean (use 1/yes/true/on or 0/no/false/off)."
		logger.error(errMsg)
		raise ConfigurationError(errMsg)

	def getConfigValueFloat(self: 'ConfigManager', section: str, key: str, fallback: Optional[float] = None, required: bool = False) -> Optional[float]:
		valueStr = self.getConfigValue(section, key, fallback=None, required=required)
		if valueStr is None: return fallback
		try:
			return float(valueStr)
		except (ValueError, TypeError) as e:
			errMsg = f"Configuration value '{section}/{key}' ('{valueStr}') is not a valid float."
			logger.error(errMsg)
			raise ConfigurationError(errMsg) from e

	@property
	def isEnvLoaded(self: 'ConfigManager') -> bool:
		return self._envLoaded

	@property
	def isConfigLoaded(self: 'ConfigManager') -> bool:
		return self._configLoaded


@dataclass(frozen=True)
class EngineSettings:
	"""Validated diff-engine settings for one run of the viewer."""
	gitDiffDebounceMs: int = GIT_DIFF_DEBOUNCE_RANGE[0]
	scrollDebounceMs: int = SCROLL_DEBOUNCE_RANGE[0]
	recentEditFadeMs: int = 2500
	scrollToBottomOnOpen: bool = False
	suspendGitDiffWhileStreaming: bool = True
	transport: str = TRANSPORT_LOCAL
	apiBaseUrl: str = 'http://localhost:8129'
	requestTimeoutSeconds: float = 10.0
	apiToken: Optional[str] = None


def _clampMs(configManager: ConfigManager, section: str, key: str, bounds: tuple) -> int:
	fallback, minimum, maximum = bounds
	value: int = configManager.getConfigValueInt(section, key, fallback=fallback)
	clamped: int = max(minimum, min(maximum, value))
	if clamped != value:
		logger.warning(f"Config value '{section}/{key}' = {value} is outside {minimum}-{maximum}; using {clamped}.")
	return clamped


def loadEngineSettings(configManager: ConfigManager) -> EngineSettings:
	"""
	Reads the [Diff] and [GitDiff] sections plus DIFF_API_TOKEN.

	Args:
		configManager (ConfigManager): A manager whose loadConfig() has already run.

	Returns:
		EngineSettings: Settings with debounce values clamped to their allowed ranges.

	Raises:
		ConfigurationError: On malformed values or an unknown transport.
	"""
	defaults = EngineSettings()
	fadeMs: int = configManager.getConfigValueInt('Diff', 'RecentEditFadeMs', fallback=defaults.recentEditFadeMs)
	if fadeMs <= 0:
		raise ConfigurationError(f"Configuration value 'Diff/RecentEditFadeMs' must be positive, got {fadeMs}.")

	transport: str = str(configManager.getConfigValue('GitDiff', 'Transport', fallback=defaults.transport)).strip().lower()
	if transport not in VALID_TRANSPORTS:
		errMsg = f"Unknown git diff transport '{transport}'. Expected one of: {', '.join(VALID_TRANSPORTS)}."
		logger.error(errMsg)
		raise ConfigurationError(errMsg)

	timeoutSeconds: float = configManager.getConfigValueFloat('GitDiff', 'RequestTimeout', fallback=defaults.requestTimeoutSeconds)
	if timeoutSeconds <= 0:
		raise ConfigurationError(f"Configuration value 'GitDiff/RequestTimeout' must be positive, got {timeoutSeconds}.")

	settings = EngineSettings(
		gitDiffDebounceMs=_clampMs(configManager, 'Diff', 'GitDiffDebounceMs', GIT_DIFF_DEBOUNCE_RANGE),
		scrollDebounceMs=_clampMs(configManager, 'Diff', 'ScrollDebounceMs', SCROLL_DEBOUNCE_RANGE),
		recentEditFadeMs=fadeMs,
		scrollToBottomOnOpen=configManager.getConfigValueBool('Diff', 'ScrollToBottomOnOpen', fallback=defaults.scrollToBottomOnOpen),
		suspendGitDiffWhileStreaming=configManager.getConfigValueBool('Diff', 'SuspendGitDiffWhileStreaming', fallback=defaults.suspendGitDiffWhileStreaming),
		transport=transport,
		apiBaseUrl=str(configManager.getConfigValue('GitDiff', 'ApiBaseUrl', fallback=defaults.apiBaseUrl)).rstrip('/'),
		requestTimeoutSeconds=timeoutSeconds,
		apiToken=configManager.getEnvVar(API_TOKEN_ENV_VAR) or None,
	)
	logger.debug(f"Engine settings: {settings.__class__.__name__}(transport={settings.transport}, gitDiffDebounceMs={settings.gitDiffDebounceMs}, scrollDebounceMs={settings.scrollDebounceMs})")
	return settings

# --- END: core/config_manager.py ---
