# axisbrowser/shell.py
"""
Command surface of the browser window.

``BrowserShell`` is what menus, keyboard accelerators and the url bar call
into. It resolves "the active tab" and, while split view is on, sends
navigation to the active pane instead.
"""

from typing import Any, Callable, Dict, List, Optional

from .bookmarks.store import BookmarkStore
from .core.scheduler import Scheduler
from .dragdrop.engine import DragDropEngine
from .notes.store import NotesStore
from .session.organizer import PinFolderOrganizer
from .session.persistence import SessionPersistence
from .session.registry import TabRegistry
from .session.results import OperationResult, OrderChange
from .session.state import Session
from .settings.config import DefaultSettings, InternalPages, SessionLimits
from .split.router import PaneSide, SplitViewRouter
from .utils.logger import get_logger
from .utils.translation_utils import _
from .views.contract import ViewFactory


class BrowserShell:
    def __init__(
        self,
        session: Session,
        registry: TabRegistry,
        organizer: PinFolderOrganizer,
        drag_engine: DragDropEngine,
        router: SplitViewRouter,
        settings: Any = None,
        browsing_history: Any = None,
        persistence: Optional[SessionPersistence] = None,
        clipboard: Optional[Callable[[str], None]] = None,
        bookmarks: Optional[BookmarkStore] = None,
        notes: Optional[NotesStore] = None,
    ):
        self.logger = get_logger("axisbrowser.shell")
        self.session = session
        self.registry = registry
        self.organizer = organizer
        self.drag_engine = drag_engine
        self.router = router
        self.settings = settings
        self.browsing_history = browsing_history
        self.persistence = persistence
        self.clipboard = clipboard
        self.bookmarks = bookmarks
        self.notes = notes
        # Set by the window to move keyboard focus into the url bar.
        self.focus_url_handler: Optional[Callable[[], None]] = None
        self._actions = self._build_actions()

    @property
    def active_tab_id(self) -> Optional[int]:
        return self.session.active_tab_id

    def _target(self, tab_id: Optional[int]) -> Optional[int]:
        return tab_id if tab_id is not None else self.session.active_tab_id

    # Tabs

    def new_tab(self, url: Optional[str] = None) -> int:
        return self.registry.create_tab(url)

    def close_tab(self, tab_id: Optional[int] = None) -> OperationResult:
        target = self._target(tab_id)
        if target is None:
            return OperationResult.failure(_("No tab to close"))
        return self.registry.close_tab(target)

    def recover_closed_tab(self) -> OperationResult:
        return self.registry.recover_closed_tab()

    def toggle_pin(self, tab_id: Optional[int] = None) -> Optional[OrderChange]:
        target = self._target(tab_id)
        if target is None:
            return None
        return self.organizer.toggle_pin(target)

    def create_folder(self, name: Optional[str] = None) -> int:
        return self.organizer.create_folder(name)

    def switch_to_index(self, position: int) -> bool:
        return self.registry.switch_to_index(position)

    def open_settings(self) -> int:
        return self.registry.open_internal_page(InternalPages.SETTINGS)

    def open_notes(self) -> int:
        return self.registry.open_internal_page(InternalPages.NOTES)

    # Navigation, routed to the active pane while split view is on

    def navigate(self, text: Optional[str]) -> OperationResult:
        if self.router.is_enabled:
            return self.router.navigate(text)
        if self.session.active_tab_id is None:
            self.registry.create_tab(text)
            active = self.session.active_tab
            return OperationResult(True, "", active.url if active else None)
        return self.registry.navigate(self.session.active_tab_id, text)

    def go_back(self) -> OperationResult:
        if self.router.is_enabled:
            return self.router.go_back()
        if self.session.active_tab_id is None:
            return OperationResult.failure(_("No active tab"))
        return self.registry.go_back(self.session.active_tab_id)

    def go_forward(self) -> OperationResult:
        if self.router.is_enabled:
            return self.router.go_forward()
        if self.session.active_tab_id is None:
            return OperationResult.failure(_("No active tab"))
        return self.registry.go_forward(self.session.active_tab_id)

    def reload(self) -> bool:
        if self.router.is_enabled:
            return self.router.reload()
        if self.session.active_tab_id is None:
            return False
        return self.registry.reload(self.session.active_tab_id)

    def zoom_in(self) -> Optional[float]:
        if self.session.active_tab_id is None:
            return None
        return self.registry.zoom_in(self.session.active_tab_id)

    def zoom_out(self) -> Optional[float]:
        if self.session.active_tab_id is None:
            return None
        return self.registry.zoom_out(self.session.active_tab_id)

    def reset_zoom(self) -> Optional[float]:
        if self.session.active_tab_id is None:
            return None
        return self.registry.reset_zoom(self.session.active_tab_id)

    # Split view

    def toggle_split_view(self) -> bool:
        return self.router.toggle()

    def set_active_pane(self, side: Any) -> bool:
        return self.router.set_active_pane(side)

    # Misc

    def current_url(self) -> Optional[str]:
        if self.router.is_enabled and self.router.active_pane is not None:
            return self.router.active_pane.url
        active = self.session.active_tab
        return active.url if active else None

    def copy_url(self) -> Optional[str]:
        url = self.current_url()
        if not url:
            return None
        if self.clipboard is not None:
            self.clipboard(url)
        return url

    def toggle_bookmark(self) -> Optional[bool]:
        """
        Bookmark the page in view, or remove its bookmark.

        Returns:
            True when added, False when removed, None when nothing was done
        """
        if self.bookmarks is None:
            return None
        url = self.current_url()
        title = None
        active = self.session.active_tab
        if not self.router.is_enabled and active is not None:
            title = active.title
        return self.bookmarks.toggle(url, title)

    def open_bookmark(self, index: int) -> OperationResult:
        items = self.bookmarks.items() if self.bookmarks is not None else []
        if not 0 <= index < len(items):
            return OperationResult.failure(_("Bookmark not found"))
        return self.navigate(items[index]["url"])

    def clear_history(self) -> int:
        if self.browsing_history is None:
            return 0
        return self.browsing_history.clear()

    def focus_url(self) -> bool:
        if self.focus_url_handler is None:
            return False
        self.focus_url_handler()
        return True

    # Keyboard shortcuts

    def _build_actions(self) -> Dict[str, Callable[[], Any]]:
        actions: Dict[str, Callable[[], Any]] = {
            "close-tab": self.close_tab,
            "new-tab": self.new_tab,
            "pin-tab": self.toggle_pin,
            "recover-tab": self.recover_closed_tab,
            "refresh": self.reload,
            "focus-url": self.focus_url,
            "settings": self.open_settings,
            "notes": self.open_notes,
            "copy-url": self.copy_url,
            "bookmark-page": self.toggle_bookmark,
            "clear-history": self.clear_history,
            "zoom-in": self.zoom_in,
            "zoom-out": self.zoom_out,
            "reset-zoom": self.reset_zoom,
            "go-back": self.go_back,
            "go-forward": self.go_forward,
            "new-folder": self.create_folder,
            "toggle-split-view": self.toggle_split_view,
            "focus-left-pane": lambda: self.set_active_pane(PaneSide.LEFT),
            "focus-right-pane": lambda: self.set_active_pane(PaneSide.RIGHT),
        }
        for index in range(1, SessionLimits.MAX_SHORTCUT_TAB_INDEX + 1):
            actions[f"switch-tab-{index}"] = lambda position=index: self.switch_to_index(position)
        return actions

    @property
    def action_names(self) -> List[str]:
        return list(self._actions)

    def handle_shortcut(self, action: str) -> bool:
        """
        Run the command bound to a keyboard action.

        Returns:
            False for unknown actions
        """
        command = self._actions.get(action)
        if command is None:
            self.logger.warning(f"Unknown shortcut action: {action}")
            return False
        self.logger.debug(f"Shortcut action: {action}")
        command()
        return True

    def accelerators(self) -> Dict[str, List[str]]:
        """Accelerators per action; an empty shortcut disables the action's key."""
        if self.settings is not None and hasattr(self.settings, "get_shortcuts"):
            shortcuts = self.settings.get_shortcuts()
        else:
            shortcuts = DefaultSettings.get_default_shortcuts()
        return {action: [shortcuts[action]] if shortcuts.get(action) else [] for action in self._actions}


def build_shell(
    settings: Any = None,
    view_factory: Optional[ViewFactory] = None,
    scheduler: Optional[Scheduler] = None,
    browsing_history: Any = None,
    clipboard: Optional[Callable[[str], None]] = None,
    session: Optional[Session] = None,
    bookmarks: Optional[BookmarkStore] = None,
    notes: Optional[NotesStore] = None,
) -> BrowserShell:
    """
    Wire the session components together.

    Pinned tabs and folders are restored from ``settings`` before the
    persistence bridge starts listening; the first restored tab becomes
    active.
    """
    session = session or Session()
    registry = TabRegistry(session, view_factory, scheduler, settings, browsing_history)
    organizer = PinFolderOrganizer(session)
    drag_engine = DragDropEngine(session, organizer)
    router = SplitViewRouter(session, view_factory, scheduler, settings)

    persistence = None
    if settings is not None:
        persistence = SessionPersistence(session, settings)
        persistence.load()
        persistence.attach()
        if bookmarks is None:
            bookmarks = BookmarkStore(settings)

    ordered = session.ordered_tab_ids()
    if ordered:
        registry.switch_active(ordered[0])

    return BrowserShell(
        session,
        registry,
        organizer,
        drag_engine,
        router,
        settings=settings,
        browsing_history=browsing_history,
        persistence=persistence,
        clipboard=clipboard,
        bookmarks=bookmarks,
        notes=notes,
    )
