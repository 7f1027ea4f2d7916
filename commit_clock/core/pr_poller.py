"""
PR Poller - background pull request fetches for the overlay
The worker thread only ever talks to the event loop through a queue
"""
import queue
import time
from dataclasses import dataclass, field
from enum import Enum
from threading import Thread
from typing import Callable, List, Optional

from .github_service import GithubFetchError, GithubService, PullRequest, PullRequestSummary
from .logging_service import get_logger


class ConnectionStatus(Enum):
    UNKNOWN = 'unknown'
    CONNECTED = 'connected'
    DISCONNECTED = 'disconnected'


@dataclass
class PrOverlayState:
    """
    Last known pull request data. Written only on the event-loop thread.
    """
    enabled: bool = False
    count: Optional[int] = None
    fetched_at: Optional[float] = None
    status: ConnectionStatus = ConnectionStatus.UNKNOWN
    pull_requests: List[PullRequest] = field(default_factory=list)
    last_error: Optional[str] = None
    in_flight: bool = False

    @property
    def label(self) -> str:
        """Overlay text; empty when the feature is off"""
        if not self.enabled:
            return ''
        if self.count is None:
            return 'PR ?'
        return f"PR {self.count}"


@dataclass(frozen=True)
class FetchResult:
    summary: Optional[PullRequestSummary]
    error: Optional[str]
    finished_at: float

    @property
    def ok(self) -> bool:
        return self.summary is not None


class PrPoller:
    """
    Schedules slow-interval fetches on a worker thread and applies their
    results to a PrOverlayState when drained.

    At most one fetch is in flight; a due tick while one is running is skipped.
    """

    def __init__(
        self,
        token_loader: Callable[[], Optional[str]],
        service_factory: Callable[[str], GithubService],
        interval: float = 300,
        state: Optional[PrOverlayState] = None,
        monotonic: Callable[[], float] = time.monotonic
    ):
        """
        Initialize the poller.

        Args:
            token_loader: Returns the current token or None
            service_factory: Builds a GithubService for a token
            interval: Seconds between fetches
            state: Overlay state to update, a fresh one by default
            monotonic: Clock used for scheduling
        """
        self._token_loader = token_loader
        self._service_factory = service_factory
        self._interval = interval
        self._monotonic = monotonic
        self._logger = get_logger()

        self.state = state if state is not None else PrOverlayState()
        self._results: 'queue.Queue[FetchResult]' = queue.Queue()
        self._service: Optional[GithubService] = None
        self._retired: List[GithubService] = []
        self._token: Optional[str] = None
        self._last_request: Optional[float] = None
        self._thread: Optional[Thread] = None

    def start(self) -> bool:
        """
        Load the token and enable the overlay if one is found.

        Returns:
            True if the overlay is enabled
        """
        self._set_token(self._token_loader())
        if not self.state.enabled:
            self._logger.info("No GitHub token found, pull request overlay disabled")
        return self.state.enabled

    def _set_token(self, token: Optional[str]) -> None:
        if not token:
            self._retire(self._service)
            self._token = None
            self._service = None
            self.state.enabled = False
            self.state.count = None
            self.state.pull_requests = []
            self.state.status = ConnectionStatus.DISCONNECTED
            return

        if token != self._token:
            self._retire(self._service)
            self._token = token
            self._service = self._service_factory(token)
        self.state.enabled = True

    def _retire(self, service: Optional[GithubService]) -> None:
        """Close a replaced service once no fetch is using it"""
        if service is None:
            return
        if self.state.in_flight:
            self._retired.append(service)
        else:
            service.close()

    def _close_retired(self) -> None:
        while self._retired:
            self._retired.pop().close()

    def poll_due(self, now: Optional[float] = None) -> bool:
        """
        Start a fetch if the interval elapsed and none is running.

        Returns:
            True if a fetch was started
        """
        if not self.state.enabled or self.state.in_flight:
            return False

        now = self._monotonic() if now is None else now
        if self._last_request is not None and now - self._last_request < self._interval:
            return False

        self._start_fetch(now)
        return True

    def request_refresh(self, now: Optional[float] = None) -> bool:
        """
        Re-read the token and fetch immediately unless a fetch is running.

        Returns:
            True if a fetch was started
        """
        self._set_token(self._token_loader())
        if not self.state.enabled:
            self._logger.info("Refresh requested but no GitHub token is configured")
            return False
        if self.state.in_flight:
            self._logger.debug("Refresh skipped, fetch already in flight")
            return False

        self._start_fetch(self._monotonic() if now is None else now)
        return True

    def _start_fetch(self, now: float) -> None:
        self._last_request = now
        self.state.in_flight = True
        self.state.status = ConnectionStatus.UNKNOWN

        self._thread = Thread(target=self._worker, args=(self._service,), daemon=True)
        self._thread.start()

    def _worker(self, service: GithubService) -> None:
        """Runs on the worker thread, posts exactly one result"""
        try:
            summary = service.fetch()
            result = FetchResult(summary=summary, error=None, finished_at=time.time())
        except GithubFetchError as e:
            result = FetchResult(summary=None, error=str(e), finished_at=time.time())
        except Exception as e:
            self._logger.error(f"Unexpected pull request fetch error: {e}", exc_info=True)
            result = FetchResult(summary=None, error=str(e), finished_at=time.time())

        self._results.put(result)

    def drain(self) -> bool:
        """
        Apply every queued result. Call from the event-loop thread.

        Returns:
            True if the state changed
        """
        changed = False
        while True:
            try:
                result = self._results.get_nowait()
            except queue.Empty:
                return changed
            self._apply(result)
            changed = True

    def _apply(self, result: FetchResult) -> None:
        state = self.state
        state.in_flight = False
        self._close_retired()

        if not state.enabled:
            return

        if result.ok:
            state.count = result.summary.count
            state.pull_requests = list(result.summary.pull_requests)
            state.fetched_at = result.finished_at
            state.status = ConnectionStatus.CONNECTED
            state.last_error = None
        else:
            self._logger.warning(f"Pull request fetch failed: {result.error}")
            state.count = None
            state.pull_requests = []
            state.status = ConnectionStatus.DISCONNECTED
            state.last_error = result.error

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the running fetch, if any, to finish"""
        if self._thread is not None:
            self._thread.join(timeout)

    def stop(self) -> None:
        self.join(timeout=1)
        self._close_retired()
        if self._service is not None:
            self._service.close()
            self._service = None
