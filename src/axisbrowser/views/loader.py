# axisbrowser/views/loader.py

from typing import Any, List, Optional
from urllib.parse import urlencode

from ..core.scheduler import Scheduler
from ..core.events import EventKind, SessionEvents
from ..settings.config import InternalPages, SessionLimits
from ..utils.logger import get_logger
from .contract import LOAD_ERROR_ABORTED, ViewEvent, ViewHandle


def build_error_page_url(code: int, url: Optional[str]) -> str:
    return f"{InternalPages.ERROR}?{urlencode({'code': code, 'url': url or ''})}"


class LoadSupervisor:
    """
    Watches the loads of a single view.

    A load that does not finish within ``timeout`` seconds is stopped and
    reported as stalled. A failed load is retried up to ``max_retries`` times
    after ``retry_delay`` seconds; once the retries are spent the internal
    error page is shown. Neither path touches the owner's url or history.
    """

    def __init__(
        self,
        view: ViewHandle,
        owner_id: Any,
        scheduler: Scheduler,
        events: SessionEvents,
        timeout: float = SessionLimits.LOAD_TIMEOUT_SECONDS,
        max_retries: int = SessionLimits.MAX_LOAD_RETRIES,
        retry_delay: float = SessionLimits.LOAD_RETRY_DELAY_SECONDS,
    ):
        self.logger = get_logger("axisbrowser.views.loader")
        self.view = view
        self.owner_id = owner_id
        self.scheduler = scheduler
        self.events = events
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay

        self.target_url: Optional[str] = None
        self.attempts = 0
        self._timeout_handle: Any = None
        self._retry_handle: Any = None
        self._handler_ids: List[int] = []
        self._attached = False

    @property
    def is_loading(self) -> bool:
        return self._timeout_handle is not None

    @property
    def retry_pending(self) -> bool:
        return self._retry_handle is not None

    def attach(self) -> "LoadSupervisor":
        if self._attached:
            return self
        self._handler_ids = [
            self.view.connect(ViewEvent.LOAD_START, self._on_load_start),
            self.view.connect(ViewEvent.LOAD_FINISH, self._on_load_finish),
            self.view.connect(ViewEvent.LOAD_FAIL, self._on_load_fail),
        ]
        self._attached = True
        return self

    def detach(self) -> None:
        """Stop supervising; pending timers are cancelled."""
        self._cancel_timeout()
        self._cancel_retry()
        for handler_id in self._handler_ids:
            self.view.disconnect(handler_id)
        self._handler_ids = []
        self._attached = False

    def load(self, url: str) -> None:
        """Start a fresh navigation with a full retry budget."""
        self._cancel_retry()
        self.target_url = url
        self.attempts = 0
        self.view.load(url)

    def _on_load_start(self, *args) -> None:
        if self.target_url is None:
            self.target_url = self.view.get_url()
        self._cancel_timeout()
        self._timeout_handle = self.scheduler.call_later(self.timeout, self._on_timeout)

    def _on_load_finish(self, *args) -> None:
        self._cancel_timeout()
        self.attempts = 0
        self.target_url = None

    def _on_load_fail(self, code: int = 0, *args) -> None:
        self._cancel_timeout()
        url = self.target_url or self.view.get_url()

        if code == LOAD_ERROR_ABORTED:
            self.logger.debug(f"Load of {url} on {self.owner_id} was aborted")
            return
        if url and url.startswith(InternalPages.ERROR):
            self.logger.error(f"Error page failed to load on {self.owner_id}")
            return

        if self.attempts < self.max_retries:
            self.attempts += 1
            self.logger.info(
                f"Load of {url} failed with code {code}, retry {self.attempts}/{self.max_retries}"
            )
            self._retry_handle = self.scheduler.call_later(self.retry_delay, lambda: self._retry(url))
            return

        self.logger.warning(f"Giving up on {url} after {self.attempts} retries (code {code})")
        attempts = self.attempts
        self.attempts = 0
        error_url = build_error_page_url(code, url)
        self.target_url = error_url
        self.view.load(error_url)
        self.events.emit(
            EventKind.LOAD_FAILED,
            owner=self.owner_id,
            url=url,
            code=code,
            attempts=attempts,
        )

    def _retry(self, url: Optional[str]) -> None:
        self._retry_handle = None
        if not url:
            return
        self.target_url = url
        self.view.load(url)

    def _on_timeout(self) -> None:
        self._timeout_handle = None
        url = self.target_url or self.view.get_url()
        self.logger.warning(f"Load of {url} on {self.owner_id} stalled after {self.timeout}s")
        self.view.stop()
        self.target_url = None
        self.attempts = 0
        self.events.emit(EventKind.LOAD_STALLED, owner=self.owner_id, url=url, timeout=self.timeout)

    def _cancel_timeout(self) -> None:
        if self._timeout_handle is not None:
            self.scheduler.cancel(self._timeout_handle)
            self._timeout_handle = None

    def _cancel_retry(self) -> None:
        if self._retry_handle is not None:
            self.scheduler.cancel(self._retry_handle)
            self._retry_handle = None
