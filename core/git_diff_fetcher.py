# --- START: core/git_diff_fetcher.py ---
# core/git_diff_fetcher.py
"""
Owns the debounced, cancellable git-diff round trip for one open document.

Content changes re-arm a single debounce timer; when it fires, the fetcher asks
its DiffTransport for the file's diff, cancelling any request still in flight,
and turns the response into a GitDiffState (changed lines, deleted lines,
loading flag, error string). Only one request is ever in flight per instance.

While disabled (the caller is mid-stream) the fetcher does no work at all and
`state` returns the same DISABLED_STATE object every time, so downstream
consumers comparing by identity do not repaint.
"""
import abc
import logging
from types import MappingProxyType
from typing import Callable, Optional

from .cancellable import CancellableRequest
from .exceptions import RequestCancelledError
from .git_diff_handler import GitDiffHandler
from .hunk_parser import DiffHunkParser
from .models import DiffResponse, GitDiffState
from .scheduler import DebouncedAction, Scheduler

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS: int = 500
MIN_DEBOUNCE_MS: int = 500
MAX_DEBOUNCE_MS: int = 1000

EMPTY_CHANGED_LINES = MappingProxyType({})
EMPTY_STATE: GitDiffState = GitDiffState(changedLines=EMPTY_CHANGED_LINES, deletedLines=())  # type: ignore[arg-type]
# Returned by `state` for as long as fetching is disabled.
DISABLED_STATE: GitDiffState = GitDiffState(changedLines=EMPTY_CHANGED_LINES, deletedLines=())  # type: ignore[arg-type]

StateListener = Callable[[GitDiffState], None]


class DiffTransport(abc.ABC):
	"""Starts one git-diff request and hands back its CancellableRequest."""

	@abc.abstractmethod
	def requestDiff(self: 'DiffTransport', repoRoot: str, relativeFilePath: str) -> CancellableRequest:
		"""The returned request settles with a DiffResponse, an exception, or RequestCancelledError."""


class InlineDiffTransport(DiffTransport):
	"""Runs a GitDiffHandler synchronously on the calling thread; the request is settled on return."""

	def __init__(self: 'InlineDiffTransport', handler: GitDiffHandler) -> None:
		self._handler: GitDiffHandler = handler

	def requestDiff(self: 'InlineDiffTransport', repoRoot: str, relativeFilePath: str) -> CancellableRequest:
		request = CancellableRequest(description=relativeFilePath)
		try:
			request.resolve(self._handler.fetchDiff(repoRoot, relativeFilePath))
		except Exception as e:
			request.reject(e)
		return request


def relativePath(repoRoot: Optional[str], filePath: Optional[str]) -> Optional[str]:
	"""
	Strips repoRoot from filePath on a path-component boundary.

	Returns:
		Optional[str]: The '/'-separated relative path, or None when the file is not under the root.
	"""
	if not repoRoot or not filePath:
		return None
	root: str = repoRoot.rstrip('/\\')
	if not filePath.startswith(root):
		return None
	rest: str = filePath[len(root):]
	if rest and rest[0] not in '/\\':
		# "/repo-other/x" must not match root "/repo".
		return None
	rest = rest.lstrip('/\\').replace('\\', '/')
	return rest or None


class GitDiffFetcher:
	"""
	Debounced, cancellable supplier of the committed-diff classification for one file.

	Attributes exposed through `state`: changedLines, deletedLines, loading, error.
	"""

	def __init__(
		self: 'GitDiffFetcher',
		transport: DiffTransport,
		scheduler: Scheduler,
		debounceMs: int = DEFAULT_DEBOUNCE_MS,
		onStateChanged: Optional[StateListener] = None,
		parser: Optional[DiffHunkParser] = None
	) -> None:
		"""
		Args:
			transport (DiffTransport): Starts the actual requests.
			scheduler (Scheduler): Timer source for the debounce.
			debounceMs (int): Quiet period before refetching; clamped to 500-1000 ms.
			onStateChanged (Optional[StateListener]): Called with the new state after every transition.
			parser (Optional[DiffHunkParser]): Diff parser, injectable for tests.
		"""
		self._transport: DiffTransport = transport
		self._parser: DiffHunkParser = parser or DiffHunkParser()
		self._onStateChanged: Optional[StateListener] = onStateChanged
		clampedDebounce: int = max(MIN_DEBOUNCE_MS, min(MAX_DEBOUNCE_MS, int(debounceMs)))
		if clampedDebounce != debounceMs:
			logger.warning(f"Git diff debounce of {debounceMs} ms is outside {MIN_DEBOUNCE_MS}-{MAX_DEBOUNCE_MS} ms; using {clampedDebounce} ms.")
		self._debounce: DebouncedAction = DebouncedAction(scheduler, clampedDebounce, self._fetch)

		self._repoRoot: Optional[str] = None
		self._filePath: Optional[str] = None
		self._contentSignal: Optional[str] = None
		self._enabled: bool = True
		self._disposed: bool = False
		self._inFlight: Optional[CancellableRequest] = None
		self._state: GitDiffState = EMPTY_STATE

	# --- Public API ---

	@property
	def state(self: 'GitDiffFetcher') -> GitDiffState:
		if not self._enabled:
			return DISABLED_STATE
		return self._state

	@property
	def enabled(self: 'GitDiffFetcher') -> bool:
		return self._enabled

	@property
	def hasRequestInFlight(self: 'GitDiffFetcher') -> bool:
		return self._inFlight is not None

	@property
	def debounceMs(self: 'GitDiffFetcher') -> int:
		return self._debounce.delayMs

	def setTarget(self: 'GitDiffFetcher', repoRoot: Optional[str], filePath: Optional[str]) -> None:
		"""Points the fetcher at a (repository root, absolute file path) pair and schedules a fetch."""
		if self._disposed or (repoRoot == self._repoRoot and filePath == self._filePath):
			return
		logger.debug(f"Git diff target changed to file '{filePath}' in root '{repoRoot}'.")
		self._cancelPending()
		self._repoRoot = repoRoot
		self._filePath = filePath
		self._setState(EMPTY_STATE)
		self._schedule()

	def setContent(self: 'GitDiffFetcher', contentSignal: Optional[str]) -> None:
		"""Invalidates the cached diff; the refetch happens once edits quiet down."""
		if self._disposed or contentSignal == self._contentSignal:
			return
		self._contentSignal = contentSignal
		self._schedule()

	def setEnabled(self: 'GitDiffFetcher', enabled: bool) -> None:
		"""Suspends (False) or resumes (True) all diff activity."""
		if self._disposed or enabled == self._enabled:
			return
		self._enabled = enabled
		if not enabled:
			logger.debug("Git diff fetching suspended.")
			self._cancelPending()
			self._state = EMPTY_STATE
			self._notify()
		else:
			logger.debug("Git diff fetching resumed.")
			self._schedule()

	def refetch(self: 'GitDiffFetcher') -> None:
		"""Fetches immediately, bypassing the debounce."""
		if self._disposed or not self._enabled:
			return
		self._debounce.cancel()
		self._fetch()

	def reset(self: 'GitDiffFetcher') -> None:
		"""Drops the target, the cached result and every pending timer or request."""
		self._cancelPending()
		self._repoRoot = None
		self._filePath = None
		self._contentSignal = None
		self._setState(EMPTY_STATE)

	def dispose(self: 'GitDiffFetcher') -> None:
		self.reset()
		self._disposed = True
		self._onStateChanged = None

	# --- Internals ---

	def _schedule(self: 'GitDiffFetcher') -> None:
		if not self._enabled or self._disposed:
			return
		if relativePath(self._repoRoot, self._filePath) is None:
			self._debounce.cancel()
			self._setState(EMPTY_STATE)
			return
		self._debounce.trigger()

	def _cancelPending(self: 'GitDiffFetcher') -> None:
		self._debounce.cancel()
		request, self._inFlight = self._inFlight, None
		if request is not None:
			request.cancel()

	def _fetch(self: 'GitDiffFetcher') -> None:
		relPath: Optional[str] = relativePath(self._repoRoot, self._filePath)
		if relPath is None or self._repoRoot is None:
			self._setState(EMPTY_STATE)
			return

		# One request per instance: a new fetch supersedes the previous one.
		previous, self._inFlight = self._inFlight, None
		if previous is not None:
			previous.cancel()

		self._setState(GitDiffState(self._state.changedLines, self._state.deletedLines, loading=True, error=None))
		logger.debug(f"Requesting git diff for '{relPath}'.")
		request: CancellableRequest = self._transport.requestDiff(self._repoRoot, relPath)
		self._inFlight = request
		request.onSettled(lambda response, error: self._onSettled(request, response, error))

	def _onSettled(self: 'GitDiffFetcher', request: CancellableRequest, response: Optional[DiffResponse], error: Optional[BaseException]) -> None:
		if request is not self._inFlight:
			return
		self._inFlight = None

		if isinstance(error, RequestCancelledError):
			return
		if error is not None:
			logger.warning(f"Failed to fetch git diff for '{self._filePath}': {error}")
			self._setState(GitDiffState(EMPTY_CHANGED_LINES, (), loading=False, error=str(error) or 'Failed to fetch diff'))  # type: ignore[arg-type]
			return
		if response is None or not response.success:
			# Untracked file, no changes, or 404: a valid "nothing to highlight" result.
			if response is not None and response.error:
				logger.debug(f"No diff for '{self._filePath}': {response.error}")
			self._setState(GitDiffState(EMPTY_CHANGED_LINES, (), loading=False, error=None))  # type: ignore[arg-type]
			return

		parsed = self._parser.parse(response.diff)
		self._setState(GitDiffState(parsed.changedLines, parsed.deletedLines, loading=False, error=None))

	def _setState(self: 'GitDiffFetcher', newState: GitDiffState) -> None:
		if newState is self._state:
			return
		self._state = newState
		if self._enabled:
			self._notify()

	def _notify(self: 'GitDiffFetcher') -> None:
		if self._onStateChanged is not None:
			self._onStateChanged(self.state)

# --- END: core/git_diff_fetcher.py ---
