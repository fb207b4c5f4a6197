# --- START: core/exceptions.py ---
# core/exceptions.py
"""
Defines custom exception classes for specific error conditions within the viewer.
The pure diff engine never raises these; they are used at the configuration and
git-diff transport boundaries so callers can handle each failure class separately.
"""


class BaseApplicationError(Exception):
	"""
	Base class for all custom application-specific exceptions.
	Provides a common ancestor for catching application-related errors.
	"""
	def __init__(self: 'BaseApplicationError', message: str = "An application error occurred.") -> None:
		"""
		Initialises the BaseApplicationError.

		Args:
			message (str): A descriptive message for the error.
		"""
		super().__init__(message)


class ConfigurationError(BaseApplicationError):
	"""
	Raised for errors encountered during loading, parsing, or accessing
	configuration settings (e.g., missing keys, invalid formats, unknown transport).
	"""
	def __init__(self: 'ConfigurationError', message: str = "Configuration error.") -> None:
		super().__init__(message)


class GitDiffError(BaseApplicationError):
	"""
	Raised when the git-diff transport fails: network problems, non-404 HTTP errors,
	malformed responses, or git command failures in the local repository.
	A missing diff (untracked file, no changes) is NOT an error and never raises this.
	"""
	def __init__(self: 'GitDiffError', message: str = "Git diff retrieval error.", statusCode: int = 0) -> None:
		"""
		Initialises the GitDiffError.

		Args:
			message (str): A descriptive message specific to the transport failure.
			statusCode (int): HTTP status code when the failure came from the HTTP transport, else 0.
		"""
		super().__init__(message)
		self.statusCode: int = statusCode


class RequestCancelledError(BaseApplicationError):
	"""
	Raised (delivered) when a pending diff request was superseded or disposed.
	Consumers swallow it; it must never surface as a user-visible error.
	"""
	def __init__(self: 'RequestCancelledError', message: str = "Request cancelled.") -> None:
		super().__init__(message)

# --- END: core/exceptions.py ---
