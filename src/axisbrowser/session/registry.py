# axisbrowser/session/registry.py

from typing import Any, Callable, Dict, List, Optional

from ..core.scheduler import Scheduler
from ..settings.config import InternalPages, SessionLimits
from ..utils.exceptions import ViewCreationError, handle_exception
from ..utils.logger import get_logger, log_tab_event
from ..utils.security import (
    InputSanitizer,
    SecurityConfig,
    UrlSanitizer,
    get_origin,
    is_internal_url,
    is_recordable_url,
)
from ..utils.translation_utils import _
from ..views.contract import ViewEvent, ViewFactory, ViewHandle
from ..views.loader import LoadSupervisor
from .models import DEFAULT_TAB_TITLE, ClosedTabRecord, NavigationHistory, Tab
from .results import OperationResult, OrderChange
from .state import EventKind, Session


class TabRegistry:
    """
    Owns tab lifecycle, per-tab navigation and the recently-closed stack.

    Views are created lazily through the ``ViewFactory`` the first time a tab
    becomes active. Urls requested before a view is ready are kept as the
    tab's ``pending_url`` and loaded when the view reports ``ready``.
    """

    def __init__(
        self,
        session: Session,
        view_factory: Optional[ViewFactory] = None,
        scheduler: Optional[Scheduler] = None,
        settings: Any = None,
        browsing_history: Any = None,
    ):
        self.logger = get_logger("axisbrowser.session.registry")
        self.session = session
        self.view_factory = view_factory
        self.scheduler = scheduler
        self.settings = settings
        self.browsing_history = browsing_history
        self.sanitizer = UrlSanitizer(
            self._setting("search_engine", SecurityConfig.DEFAULT_SEARCH_TEMPLATE)
        )
        self._supervisors: Dict[int, LoadSupervisor] = {}
        self._view_handlers: Dict[int, List[int]] = {}
        self._favicon_cache: Dict[str, str] = {}

        if settings is not None and hasattr(settings, "add_change_listener"):
            settings.add_change_listener(self._on_setting_changed)

    def _setting(self, key: str, default: Any) -> Any:
        if self.settings is None:
            return default
        return self.settings.get(key, default)

    def _on_setting_changed(self, key: str, old_value: Any, new_value: Any):
        if key == "search_engine" and isinstance(new_value, str):
            self.sanitizer.search_template = new_value

    # Creation and closing

    def _add_tab(
        self,
        url: Optional[str],
        title: Optional[str],
        history: Optional[NavigationHistory] = None,
    ) -> Tab:
        before = self.session.snapshot_order()
        tab = Tab(
            id=self.session.allocate_id(),
            url=url,
            title=InputSanitizer.sanitize_title(title) or DEFAULT_TAB_TITLE,
            created_at=self.session.clock(),
        )
        if history is not None:
            tab.history = history
        elif url:
            tab.history.push(url)
        tab.pending_url = url
        tab.favicon_url = self._cached_favicon(url)
        self.session.tabs[tab.id] = tab
        self.session.insert_into_region(tab.item, pinned=False)

        log_tab_event("created", tab.id, url or "")
        self.session.events.emit(EventKind.TAB_CREATED, tab_id=tab.id)
        self._emit_order(before)
        return tab

    def create_tab(
        self,
        url: Optional[str] = None,
        title: Optional[str] = None,
        activate: bool = True,
    ) -> int:
        """
        Create an unpinned tab at the end of the sidebar.

        Args:
            url: Optional url-bar input; sanitized before use
            title: Optional initial title
            activate: Make the new tab the active one

        Returns:
            The new tab id
        """
        target = self.sanitizer.to_navigable_url(url) if url else None
        tab = self._add_tab(target, title)
        if activate:
            self.switch_active(tab.id)
        return tab.id

    def duplicate_tab(self, tab_id: int) -> Optional[int]:
        source = self.session.get_tab(tab_id)
        if source is None:
            return None
        tab = self._add_tab(source.url, source.title, source.history.copy())
        tab.zoom = source.zoom
        self.switch_active(tab.id)
        return tab.id

    def close_tab(self, tab_id: int) -> OperationResult[ClosedTabRecord]:
        tab = self.session.get_tab(tab_id)
        if tab is None:
            return OperationResult.failure(_("Tab not found"))

        record = None
        if is_recordable_url(tab.url):
            record = ClosedTabRecord(tab.id, tab.title, tab.url, self.session.clock())
            self.session.push_closed(record)

        was_active = self.session.active_tab_id == tab_id
        self._release_view(tab)
        before = self.session.snapshot_order()
        was_pinned = tab.pinned
        folder = self.session.detach_tab(tab)[1]
        del self.session.tabs[tab_id]
        self.session.reindex_folders()
        log_tab_event("closed", tab_id, tab.url or "")

        # The successor is active before any listener runs.
        successor_id = None
        if was_active:
            self.session.active_tab_id = None
            if self.session.tabs:
                successor_id = max(self.session.tabs)
                self._activate(self.session.tabs[successor_id])

        self.session.events.emit(EventKind.TAB_CLOSED, tab_id=tab_id, record=record)
        if folder is not None:
            self.session.events.emit(EventKind.FOLDER_UPDATED, structural=True, folder_id=folder.id)
        self._emit_order(before, structural=was_pinned)
        if record is not None:
            self.session.events.emit(EventKind.CLOSED_STACK_CHANGED, size=len(self.session.closed_tabs))
        if was_active:
            self.session.events.emit(EventKind.ACTIVE_CHANGED, tab_id=successor_id, previous_id=tab_id)
        return OperationResult(True, _("Tab closed"), record)

    def recover_closed_tab(self) -> OperationResult[int]:
        record = self.session.pop_closed()
        if record is None:
            return OperationResult.nothing_to_do(_("Nothing to recover"))
        tab = self._add_tab(record.url, record.title)
        self.switch_active(tab.id)
        self.session.events.emit(EventKind.CLOSED_STACK_CHANGED, size=len(self.session.closed_tabs))
        log_tab_event("recovered", tab.id, record.url)
        return OperationResult(True, _("Tab recovered"), tab.id)

    # Activation

    def switch_active(self, tab_id: int) -> bool:
        tab = self.session.get_tab(tab_id)
        if tab is None:
            return False

        previous = self.session.active_tab
        if self._activate(tab):
            self.session.events.emit(
                EventKind.ACTIVE_CHANGED,
                tab_id=tab_id,
                previous_id=previous.id if previous else None,
            )
        return True

    def _activate(self, tab: Tab) -> bool:
        previous = self.session.active_tab
        if previous is not None and previous.id != tab.id and previous.view is not None:
            previous.view.hide()

        view = self._ensure_view(tab)
        # Split panes own the window while split view is on.
        if view is not None and not self.session.split_view_enabled:
            view.show()

        changed = self.session.active_tab_id != tab.id
        self.session.active_tab_id = tab.id
        if tab.pending_url and view is not None and view.is_ready:
            self._apply_url(tab, tab.pending_url)
        return changed

    def switch_to_index(self, position: int) -> bool:
        """Activate the Nth tab (1-based) in sidebar order."""
        tab_ids = self.session.ordered_tab_ids()
        if not 1 <= position <= len(tab_ids):
            return False
        return self.switch_active(tab_ids[position - 1])

    def open_internal_page(self, page_url: str) -> int:
        for tab in self.session.tabs.values():
            if tab.url == page_url:
                self.switch_active(tab.id)
                return tab.id
        title = InternalPages.TITLES.get(page_url, page_url)
        tab = self._add_tab(page_url, title)
        self.switch_active(tab.id)
        return tab.id

    # Navigation

    def navigate(self, tab_id: int, text: Optional[str]) -> OperationResult[str]:
        tab = self.session.get_tab(tab_id)
        if tab is None:
            return OperationResult.failure(_("Tab not found"))
        url = self.sanitizer.to_navigable_url(text)
        if url is None:
            return OperationResult.failure(_("Nothing to navigate to"))

        tab.history.push(url)
        tab.favicon_url = self._cached_favicon(url, tab)
        tab.url = url
        self._apply_url(tab, url)
        self.session.events.emit(EventKind.HISTORY_CHANGED, tab_id=tab_id)
        self._emit_tab_updated(tab, "url")
        return OperationResult(True, "", url)

    def go_back(self, tab_id: int) -> OperationResult[str]:
        return self._step_history(tab_id, forward=False)

    def go_forward(self, tab_id: int) -> OperationResult[str]:
        return self._step_history(tab_id, forward=True)

    def _step_history(self, tab_id: int, forward: bool) -> OperationResult[str]:
        tab = self.session.get_tab(tab_id)
        if tab is None:
            return OperationResult.failure(_("Tab not found"))
        url = tab.history.forward() if forward else tab.history.back()
        if url is None:
            return OperationResult.nothing_to_do(_("Nothing to do"))
        tab.favicon_url = self._cached_favicon(url, tab)
        tab.url = url
        self._apply_url(tab, url)
        self.session.events.emit(EventKind.HISTORY_CHANGED, tab_id=tab_id)
        self._emit_tab_updated(tab, "url")
        return OperationResult(True, "", url)

    def reload(self, tab_id: int) -> bool:
        tab = self.session.get_tab(tab_id)
        if tab is None or tab.view is None:
            return False
        if tab.pending_url:
            self._apply_url(tab, tab.pending_url)
        else:
            tab.awaiting_commit = True
            tab.view.reload()
        return True

    def stop(self, tab_id: int) -> bool:
        tab = self.session.get_tab(tab_id)
        if tab is None or tab.view is None:
            return False
        tab.view.stop()
        return True

    # Presentation attributes

    def rename_tab(self, tab_id: int, title: Optional[str]) -> bool:
        tab = self.session.get_tab(tab_id)
        cleaned = InputSanitizer.sanitize_title(title)
        if tab is None or not cleaned:
            return False
        if cleaned != tab.title:
            tab.title = cleaned
            self._emit_tab_updated(tab, "title")
        return True

    def set_zoom(self, tab_id: int, factor: float) -> Optional[float]:
        tab = self.session.get_tab(tab_id)
        if tab is None:
            return None
        clamped = round(min(max(factor, SessionLimits.ZOOM_MIN), SessionLimits.ZOOM_MAX), 2)
        tab.zoom = clamped
        if tab.view is not None:
            tab.view.set_zoom(clamped)
        self._emit_tab_updated(tab, "zoom")
        return clamped

    def zoom_in(self, tab_id: int) -> Optional[float]:
        tab = self.session.get_tab(tab_id)
        return self.set_zoom(tab_id, tab.zoom + SessionLimits.ZOOM_STEP) if tab else None

    def zoom_out(self, tab_id: int) -> Optional[float]:
        tab = self.session.get_tab(tab_id)
        return self.set_zoom(tab_id, tab.zoom - SessionLimits.ZOOM_STEP) if tab else None

    def reset_zoom(self, tab_id: int) -> Optional[float]:
        return self.set_zoom(tab_id, SessionLimits.ZOOM_DEFAULT)

    # Views

    def _ensure_view(self, tab: Tab) -> Optional[ViewHandle]:
        if tab.view is not None or self.view_factory is None:
            return tab.view
        try:
            view = self.view_factory.create(tab.id)
        except ViewCreationError as e:
            handle_exception(e, f"creating view for tab {tab.id}", "axisbrowser.session.registry")
            return None

        tab.view = view
        tab_id = tab.id
        handlers: Dict[str, Callable[..., Any]] = {
            ViewEvent.READY: lambda *a: self._on_view_ready(tab_id),
            ViewEvent.LOAD_START: lambda *a: self._on_load_start(tab_id),
            ViewEvent.LOAD_FINISH: lambda *a: self._on_load_finish(tab_id),
            ViewEvent.LOAD_FAIL: lambda code=0, *a: self._on_load_fail(tab_id, code),
            ViewEvent.TITLE_UPDATED: lambda title=None, *a: self._on_title_updated(tab_id, title),
            ViewEvent.FAVICON_UPDATED: lambda url=None, *a: self._on_favicon_updated(tab_id, url),
            ViewEvent.NAVIGATED: lambda url=None, *a: self._on_navigated(tab_id, url),
            ViewEvent.NAVIGATED_IN_PAGE: lambda url=None, *a: self._on_navigated_in_page(tab_id, url),
        }
        self._view_handlers[tab_id] = [view.connect(event, handler) for event, handler in handlers.items()]

        if self.scheduler is not None:
            self._supervisors[tab_id] = LoadSupervisor(
                view,
                tab_id,
                self.scheduler,
                self.session.events,
                timeout=self._setting("load_timeout_seconds", SessionLimits.LOAD_TIMEOUT_SECONDS),
                max_retries=self._setting("max_load_retries", SessionLimits.MAX_LOAD_RETRIES),
                retry_delay=self._setting("load_retry_delay_seconds", SessionLimits.LOAD_RETRY_DELAY_SECONDS),
            ).attach()

        if tab.zoom != SessionLimits.ZOOM_DEFAULT:
            view.set_zoom(tab.zoom)
        self.logger.debug(f"Created view for tab {tab_id}")
        return view

    def _release_view(self, tab: Tab) -> None:
        supervisor = self._supervisors.pop(tab.id, None)
        if supervisor is not None:
            supervisor.detach()
        view = tab.view
        if view is None:
            return
        for handler_id in self._view_handlers.pop(tab.id, []):
            view.disconnect(handler_id)
        tab.view = None
        view.destroy()

    def supervisor_for(self, tab_id: int) -> Optional[LoadSupervisor]:
        return self._supervisors.get(tab_id)

    def _apply_url(self, tab: Tab, url: str) -> None:
        if tab.view is None or not tab.view.is_ready:
            tab.pending_url = url
            return
        tab.pending_url = None
        tab.awaiting_commit = True
        supervisor = self._supervisors.get(tab.id)
        if supervisor is not None:
            supervisor.load(url)
        else:
            tab.view.load(url)

    # View events

    def _on_view_ready(self, tab_id: int):
        tab = self.session.get_tab(tab_id)
        if tab is not None and tab.pending_url:
            self._apply_url(tab, tab.pending_url)

    def _on_load_start(self, tab_id: int):
        tab = self.session.get_tab(tab_id)
        if tab is None:
            return
        tab.loading = True
        self._emit_tab_updated(tab, "loading")

    def _on_load_finish(self, tab_id: int):
        tab = self.session.get_tab(tab_id)
        if tab is None:
            return
        tab.loading = False
        if tab.view is not None:
            title = InputSanitizer.sanitize_title(tab.view.get_title())
            if title and not is_internal_url(tab.url):
                tab.title = title
        self._emit_tab_updated(tab, "loading")
        self._record_visit(tab)

    def _on_load_fail(self, tab_id: int, code: int):
        tab = self.session.get_tab(tab_id)
        if tab is None:
            return
        tab.loading = False
        self.logger.debug(f"Load failed on tab {tab_id} with code {code}")
        self._emit_tab_updated(tab, "loading")

    def _on_title_updated(self, tab_id: int, title: Optional[str]):
        tab = self.session.get_tab(tab_id)
        cleaned = InputSanitizer.sanitize_title(title)
        if tab is None or not cleaned or cleaned == tab.title:
            return
        tab.title = cleaned
        self._emit_tab_updated(tab, "title")

    def _on_favicon_updated(self, tab_id: int, favicon_url: Optional[str]):
        tab = self.session.get_tab(tab_id)
        if tab is None or not favicon_url:
            return
        origin = get_origin(tab.url)
        if origin:
            self._favicon_cache[origin] = favicon_url
        if favicon_url != tab.favicon_url:
            tab.favicon_url = favicon_url
            self._emit_tab_updated(tab, "favicon")

    def _on_navigated(self, tab_id: int, url: Optional[str]):
        tab = self.session.get_tab(tab_id)
        if tab is None or not url:
            return
        # The first commit after a load we requested is the final address of
        # the current entry (redirects, trailing slash). Later commits come
        # from the page itself and are new entries.
        requested = tab.awaiting_commit
        tab.awaiting_commit = False
        if url.startswith(InternalPages.ERROR):
            return
        if url != tab.history.current:
            if requested:
                tab.history.replace_current(url)
            else:
                tab.history.push(url)
            self.session.events.emit(EventKind.HISTORY_CHANGED, tab_id=tab_id)
        if url != tab.url:
            tab.favicon_url = self._cached_favicon(url, tab)
            tab.url = url
            self._emit_tab_updated(tab, "url")

    def _on_navigated_in_page(self, tab_id: int, url: Optional[str]):
        tab = self.session.get_tab(tab_id)
        if tab is None or not url:
            return
        tab.history.replace_current(url)
        tab.url = url
        self.session.events.emit(EventKind.HISTORY_CHANGED, tab_id=tab_id)
        self._emit_tab_updated(tab, "url")

    # Helpers

    def _cached_favicon(self, url: Optional[str], tab: Optional[Tab] = None) -> Optional[str]:
        origin = get_origin(url)
        if origin and origin in self._favicon_cache:
            return self._favicon_cache[origin]
        if tab is not None and origin and origin == get_origin(tab.url):
            return tab.favicon_url
        return None

    def _record_visit(self, tab: Tab):
        if self.browsing_history is None or not self._setting("record_history", True):
            return
        if tab.view is not None:
            url = tab.view.get_url() or tab.url
        else:
            url = tab.url
        if is_recordable_url(url):
            self.browsing_history.add(url, tab.title, tab.favicon_url)

    def _emit_tab_updated(self, tab: Tab, field_name: str):
        # Pinned tabs are persisted, so their visible attributes are structural.
        structural = tab.pinned and field_name in ("url", "title", "favicon")
        self.session.events.emit(
            EventKind.TAB_UPDATED,
            structural=structural,
            tab_id=tab.id,
            field=field_name,
        )

    def _emit_order(self, before, structural: bool = True) -> OrderChange:
        change = OrderChange.compute(before, self.session.top_level_order)
        self.session.events.emit(EventKind.ORDER_CHANGED, structural=structural, change=change)
        return change
