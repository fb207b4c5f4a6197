# --- START: core/git_diff_handler.py ---
# core/git_diff_handler.py
"""
Retrieves the unified diff of one file against its last committed revision.

Two interchangeable handlers implement the same blocking contract
`fetchDiff(repoRoot, relativeFilePath) -> DiffResponse`:

- LocalGitDiffHandler runs `git diff HEAD -- <file>` in-process via GitPython.
- HttpGitDiffHandler asks the companion backend (`GET /api/git/diff`) via requests.

A missing diff (file not tracked, repository without commits, HTTP 404,
`success: false`) is reported as DiffResponse(success=False) and never raises.
Real failures raise GitDiffError. Handlers are called from a worker thread
(gui.threads.GitDiffWorker), never from the GUI thread.
"""
import abc
import logging
import os
from typing import Any, Dict, Optional

import git
import requests

from .exceptions import GitDiffError
from .models import DiffResponse

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL: str = 'http://localhost:8129'
DEFAULT_REQUEST_TIMEOUT_SECONDS: float = 10.0
AUTH_TOKEN_HEADER: str = 'X-Auth-Token'
DIFF_ENDPOINT: str = '/api/git/diff'


class GitDiffHandler(abc.ABC):
	"""Blocking source of single-file unified diffs."""

	@abc.abstractmethod
	def fetchDiff(self: 'GitDiffHandler', repoRoot: str, relativeFilePath: str) -> DiffResponse:
		"""
		Args:
			repoRoot (str): Absolute path of the repository (or workspace) root.
			relativeFilePath (str): File path relative to repoRoot, '/' separated.

		Returns:
			DiffResponse: success=True with the diff text (possibly empty), or success=False when no diff exists.

		Raises:
			GitDiffError: On transport or git command failures.
		"""

	def close(self: 'GitDiffHandler') -> None:
		"""Releases held resources. Called once on shutdown, after the last request."""


class LocalGitDiffHandler(GitDiffHandler):
	"""
	Computes the diff in-process with GitPython.

	If repoRoot is a workspace containing several repositories, the repository is
	discovered from the file's own directory and the relative path recomputed.
	"""

	def fetchDiff(self: 'LocalGitDiffHandler', repoRoot: str, relativeFilePath: str) -> DiffResponse:
		fullFilePath: str = os.path.join(repoRoot, relativeFilePath)
		repo: Optional[git.Repo] = self._openRepository(repoRoot, fullFilePath)
		if repo is None:
			logger.debug(f"No git repository found for '{fullFilePath}'. Reporting no diff.")
			return DiffResponse(success=False, error='not a git repository', statusCode=404)

		try:
			workingDir: str = repo.working_tree_dir or repoRoot
			gitRelativePath: str = os.path.relpath(fullFilePath, workingDir).replace(os.sep, '/')
			if gitRelativePath.startswith('../'):
				logger.debug(f"'{fullFilePath}' lies outside repository '{workingDir}'.")
				return DiffResponse(success=False, error='file outside repository', statusCode=404)

			if not repo.head.is_valid():
				# No commits yet: there is no committed revision to compare against.
				logger.debug(f"Repository '{workingDir}' has no commits; no diff for '{gitRelativePath}'.")
				return DiffResponse(success=False, statusCode=404)

			diffText: str = repo.git.diff('HEAD', '--', gitRelativePath)
			logger.debug(f"git diff HEAD -- {gitRelativePath}: {len(diffText)} characters.")
			return DiffResponse(success=True, diff=diffText)
		except git.GitCommandError as e:
			stderrOutput: str = str(getattr(e, 'stderr', '') or 'No stderr output.').strip()
			errMsg: str = f"Git command 'diff' failed for '{relativeFilePath}': {stderrOutput}"
			logger.error(errMsg, exc_info=False)
			raise GitDiffError(errMsg) from e
		except Exception as e:
			errMsg = f"An unexpected error occurred while diffing '{relativeFilePath}': {e}"
			logger.error(errMsg, exc_info=True)
			raise GitDiffError(errMsg) from e
		finally:
			repo.close()

	@staticmethod
	def _openRepository(repoRoot: str, fullFilePath: str) -> Optional[git.Repo]:
		for candidate in (repoRoot, os.path.dirname(fullFilePath)):
			try:
				return git.Repo(candidate, search_parent_directories=True)
			except (git.InvalidGitRepositoryError, git.NoSuchPathError):
				continue
		return None


class HttpGitDiffHandler(GitDiffHandler):
	"""Fetches the diff from the backend's `/api/git/diff?path=<root>&file=<relative>` endpoint."""

	def __init__(
		self: 'HttpGitDiffHandler',
		baseUrl: str = DEFAULT_API_BASE_URL,
		timeoutSeconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
		authToken: Optional[str] = None,
		session: Optional[requests.Session] = None
	) -> None:
		"""
		Args:
			baseUrl (str): Backend origin, without trailing slash.
			timeoutSeconds (float): Connect/read timeout per request.
			authToken (Optional[str]): Sent as X-Auth-Token when set.
			session (Optional[requests.Session]): Injected session (tests); a private one is created otherwise.
		"""
		self._baseUrl: str = baseUrl.rstrip('/')
		self._timeoutSeconds: float = timeoutSeconds
		self._authToken: Optional[str] = authToken
		self._session: requests.Session = session or requests.Session()

	@property
	def endpointUrl(self: 'HttpGitDiffHandler') -> str:
		return f"{self._baseUrl}{DIFF_ENDPOINT}"

	def fetchDiff(self: 'HttpGitDiffHandler', repoRoot: str, relativeFilePath: str) -> DiffResponse:
		params: Dict[str, str] = {'path': repoRoot, 'file': relativeFilePath}
		headers: Dict[str, str] = {AUTH_TOKEN_HEADER: self._authToken} if self._authToken else {}

		try:
			response = self._session.get(self.endpointUrl, params=params, headers=headers, timeout=self._timeoutSeconds)
		except requests.RequestException as e:
			errMsg: str = f"Failed to fetch diff: {e}"
			logger.error(errMsg, exc_info=False)
			raise GitDiffError(errMsg) from e

		if response.status_code == 404:
			logger.debug(f"No diff available for '{relativeFilePath}' (HTTP 404).")
			return DiffResponse(success=False, statusCode=404)
		if not response.ok:
			errMsg = f"Failed to fetch diff: {response.status_code}"
			logger.error(f"{errMsg} for '{relativeFilePath}'.")
			raise GitDiffError(errMsg, statusCode=response.status_code)

		try:
			body: Any = response.json()
		except ValueError as e:
			errMsg = f"Failed to fetch diff: response for '{relativeFilePath}' is not valid JSON."
			logger.error(errMsg)
			raise GitDiffError(errMsg, statusCode=response.status_code) from e
		if not isinstance(body, dict):
			raise GitDiffError(f"Failed to fetch diff: unexpected response shape for '{relativeFilePath}'.", statusCode=response.status_code)

		if not body.get('success'):
			return DiffResponse(success=False, error=body.get('error'), statusCode=response.status_code)

		# Both {"diff": ...} and {"data": {"diff": ...}} are accepted.
		data: Any = body.get('data')
		diffText = body.get('diff')
		if diffText is None and isinstance(data, dict):
			diffText = data.get('diff')
		return DiffResponse(success=True, diff=diffText or '', statusCode=response.status_code)

	def close(self: 'HttpGitDiffHandler') -> None:
		logger.debug("Closing diff backend HTTP session.")
		self._session.close()


def findRepositoryRoot(filePath: str) -> Optional[str]:
	"""Working tree root of the repository containing filePath, or None."""
	startDir: str = filePath if os.path.isdir(filePath) else os.path.dirname(os.path.abspath(filePath))
	try:
		repo = git.Repo(startDir, search_parent_directories=True)
	except (git.InvalidGitRepositoryError, git.NoSuchPathError):
		logger.debug(f"'{filePath}' is not inside a git repository.")
		return None
	try:
		return repo.working_tree_dir
	finally:
		repo.close()


def createDiffHandler(transport: str, apiBaseUrl: str = DEFAULT_API_BASE_URL, timeoutSeconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS, authToken: Optional[str] = None) -> GitDiffHandler:
	"""
	Builds the handler for the configured transport ('local' or 'http').

	Raises:
		GitDiffError: For an unknown transport name.
	"""
	if transport == 'local':
		return LocalGitDiffHandler()
	if transport == 'http':
		logger.info(f"Using diff backend at {apiBaseUrl}")
		return HttpGitDiffHandler(apiBaseUrl, timeoutSeconds, authToken)
	raise GitDiffError(f"Unknown git diff transport: '{transport}'")

# --- END: core/git_diff_handler.py ---
