# axisbrowser/split/router.py
"""
Two-pane split browsing.

While split view is on, the window shows two independent browsing surfaces
instead of the active tab. Panes are not tabs: they have no history in the
session, are never pinned or persisted, and are discarded when split view is
turned off.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..core.scheduler import Scheduler
from ..session.results import OperationResult
from ..session.state import EventKind, Session
from ..settings.config import SessionLimits
from ..utils.exceptions import ViewCreationError, handle_exception
from ..utils.logger import get_logger
from ..utils.security import SecurityConfig, UrlSanitizer
from ..utils.translation_utils import _
from ..views.contract import ViewEvent, ViewFactory, ViewHandle
from ..views.loader import LoadSupervisor

DEFAULT_HOME_URL = "https://www.google.com"


class PaneSide(Enum):
    LEFT = "left"
    RIGHT = "right"


@dataclass
class Pane:
    side: PaneSide
    url: Optional[str] = None
    title: Optional[str] = None
    view: Optional[ViewHandle] = field(default=None, repr=False, compare=False)
    pending_url: Optional[str] = None

    @property
    def owner_id(self) -> str:
        return f"pane:{self.side.value}"


@dataclass
class PaneState:
    enabled: bool = False
    panes: Dict[PaneSide, Pane] = field(default_factory=dict)
    active_pane: PaneSide = PaneSide.LEFT
    split_ratio: float = SessionLimits.SPLIT_RATIO_DEFAULT


def clamp_split_ratio(ratio: float) -> float:
    return min(max(float(ratio), SessionLimits.SPLIT_RATIO_MIN), SessionLimits.SPLIT_RATIO_MAX)


class SplitViewRouter:
    """Owns the pane views and routes navigation commands to the active pane."""

    def __init__(
        self,
        session: Session,
        view_factory: Optional[ViewFactory] = None,
        scheduler: Optional[Scheduler] = None,
        settings: Any = None,
    ):
        self.logger = get_logger("axisbrowser.split.router")
        self.session = session
        self.view_factory = view_factory
        self.scheduler = scheduler
        self.settings = settings
        self.state = PaneState()
        self.sanitizer = UrlSanitizer(
            self._setting("search_engine", SecurityConfig.DEFAULT_SEARCH_TEMPLATE)
        )
        self._supervisors: Dict[PaneSide, LoadSupervisor] = {}
        self._view_handlers: Dict[PaneSide, List[int]] = {}

    def _setting(self, key: str, default: Any) -> Any:
        if self.settings is None:
            return default
        return self.settings.get(key, default)

    @property
    def is_enabled(self) -> bool:
        return self.state.enabled

    def pane(self, side: Any) -> Optional[Pane]:
        resolved = self._resolve_side(side)
        if resolved is None:
            return None
        return self.state.panes.get(resolved)

    @property
    def active_pane(self) -> Optional[Pane]:
        return self.state.panes.get(self.state.active_pane)

    @staticmethod
    def _resolve_side(side: Any) -> Optional[PaneSide]:
        if isinstance(side, PaneSide):
            return side
        try:
            return PaneSide(str(side).lower())
        except ValueError:
            return None

    # Lifecycle

    def enable(self) -> bool:
        """
        Turn split view on.

        The left pane opens the active tab's url (or the home page), the right
        pane the configured default url.

        Returns:
            False when split view was already on
        """
        if self.state.enabled:
            return False

        self.sanitizer.search_template = self._setting("search_engine", SecurityConfig.DEFAULT_SEARCH_TEMPLATE)
        active = self.session.active_tab
        left_url = active.url if active is not None and active.url else self._setting("home_url", DEFAULT_HOME_URL)
        right_url = self._setting("split_default_url", DEFAULT_HOME_URL)

        ratio = self.state.split_ratio
        self.state = PaneState(enabled=True, active_pane=PaneSide.LEFT, split_ratio=ratio)
        for side, url in ((PaneSide.LEFT, left_url), (PaneSide.RIGHT, right_url)):
            pane = Pane(side)
            self.state.panes[side] = pane
            self._create_view(pane)
            self._load(pane, url)

        self.session.split_view_enabled = True
        if active is not None and active.view is not None:
            active.view.hide()
        self.logger.info(f"Split view enabled ({left_url} | {right_url})")
        self._emit_changed()
        return True

    def disable(self) -> bool:
        """Turn split view off and destroy both pane views."""
        if not self.state.enabled:
            return False
        for pane in self.state.panes.values():
            self._release_view(pane)
        self.state = PaneState(split_ratio=self.state.split_ratio)
        self.session.split_view_enabled = False

        active = self.session.active_tab
        if active is not None and active.view is not None:
            active.view.show()
        self.logger.info("Split view disabled")
        self._emit_changed()
        return True

    def toggle(self) -> bool:
        """Returns the new enabled state."""
        if self.state.enabled:
            self.disable()
        else:
            self.enable()
        return self.state.enabled

    def set_active_pane(self, side: Any) -> bool:
        resolved = self._resolve_side(side)
        if resolved is None or not self.state.enabled:
            return False
        if resolved is not self.state.active_pane:
            self.state.active_pane = resolved
            self._emit_changed()
        return True

    def set_split_ratio(self, ratio: float) -> float:
        clamped = clamp_split_ratio(ratio)
        if clamped != self.state.split_ratio:
            self.state.split_ratio = clamped
            self._emit_changed()
        return clamped

    # Routed commands

    def navigate(self, text: Optional[str]) -> OperationResult[str]:
        pane = self.active_pane
        if pane is None:
            return OperationResult.failure(_("Split view is off"))
        url = self.sanitizer.to_navigable_url(text)
        if url is None:
            return OperationResult.failure(_("Nothing to navigate to"))
        self._load(pane, url)
        return OperationResult(True, "", url)

    def go_back(self) -> OperationResult[str]:
        pane = self.active_pane
        if pane is None or pane.view is None:
            return OperationResult.failure(_("Split view is off"))
        if not pane.view.can_go_back():
            return OperationResult.nothing_to_do(_("Nothing to do"))
        pane.view.go_back()
        return OperationResult(True, "", pane.url)

    def go_forward(self) -> OperationResult[str]:
        pane = self.active_pane
        if pane is None or pane.view is None:
            return OperationResult.failure(_("Split view is off"))
        if not pane.view.can_go_forward():
            return OperationResult.nothing_to_do(_("Nothing to do"))
        pane.view.go_forward()
        return OperationResult(True, "", pane.url)

    def reload(self) -> bool:
        pane = self.active_pane
        if pane is None or pane.view is None:
            return False
        if pane.pending_url:
            self._load(pane, pane.pending_url)
        else:
            pane.view.reload()
        return True

    # Views

    def _create_view(self, pane: Pane) -> None:
        if self.view_factory is None:
            return
        try:
            view = self.view_factory.create(pane.owner_id)
        except ViewCreationError as e:
            handle_exception(e, f"creating view for {pane.owner_id}", "axisbrowser.split.router")
            return

        pane.view = view
        side = pane.side
        self._view_handlers[side] = [
            view.connect(ViewEvent.READY, lambda *a: self._on_ready(side)),
            view.connect(ViewEvent.TITLE_UPDATED, lambda title=None, *a: self._on_title(side, title)),
            view.connect(ViewEvent.NAVIGATED, lambda url=None, *a: self._on_navigated(side, url)),
            view.connect(ViewEvent.NAVIGATED_IN_PAGE, lambda url=None, *a: self._on_navigated(side, url)),
        ]
        if self.scheduler is not None:
            self._supervisors[side] = LoadSupervisor(
                view,
                pane.owner_id,
                self.scheduler,
                self.session.events,
                timeout=self._setting("load_timeout_seconds", SessionLimits.LOAD_TIMEOUT_SECONDS),
                max_retries=self._setting("max_load_retries", SessionLimits.MAX_LOAD_RETRIES),
                retry_delay=self._setting("load_retry_delay_seconds", SessionLimits.LOAD_RETRY_DELAY_SECONDS),
            ).attach()
        view.show()

    def _release_view(self, pane: Pane) -> None:
        supervisor = self._supervisors.pop(pane.side, None)
        if supervisor is not None:
            supervisor.detach()
        view = pane.view
        if view is None:
            return
        for handler_id in self._view_handlers.pop(pane.side, []):
            view.disconnect(handler_id)
        pane.view = None
        view.destroy()

    def supervisor_for(self, side: Any) -> Optional[LoadSupervisor]:
        resolved = self._resolve_side(side)
        return self._supervisors.get(resolved) if resolved else None

    def _load(self, pane: Pane, url: str) -> None:
        pane.url = url
        if pane.view is None or not pane.view.is_ready:
            pane.pending_url = url
            return
        pane.pending_url = None
        supervisor = self._supervisors.get(pane.side)
        if supervisor is not None:
            supervisor.load(url)
        else:
            pane.view.load(url)

    def _on_ready(self, side: PaneSide):
        pane = self.state.panes.get(side)
        if pane is not None and pane.pending_url:
            self._load(pane, pane.pending_url)

    def _on_title(self, side: PaneSide, title: Optional[str]):
        pane = self.state.panes.get(side)
        if pane is not None and title:
            pane.title = title

    def _on_navigated(self, side: PaneSide, url: Optional[str]):
        pane = self.state.panes.get(side)
        if pane is None or not url or url == pane.url:
            return
        pane.url = url
        self._emit_changed()

    def _emit_changed(self) -> None:
        self.session.events.emit(
            EventKind.SPLIT_CHANGED,
            enabled=self.state.enabled,
            active_pane=self.state.active_pane.value,
            split_ratio=self.state.split_ratio,
            urls={side.value: pane.url for side, pane in self.state.panes.items()},
        )
