# axisbrowser/session/state.py
"""
Session root and change notification.

The ``Session`` owns every tab and folder, the top-level sidebar order and the
recently-closed stack. It is constructed once and handed to each component;
components mutate it synchronously and announce the mutation on
``Session.events``.
"""

import time
from collections import deque
from typing import Any, Callable, Deque, Dict, Iterator, List, Optional, Tuple

from ..core.events import EventKind, SessionEvent, SessionEvents
from ..settings.config import SessionLimits
from ..utils.exceptions import InvariantViolationError
from ..utils.logger import get_logger
from .models import ClosedTabRecord, Folder, ItemKind, Tab, TopLevelItem


class Session:
    """Registry root: tabs, folders, top-level order and closed-tab stack."""

    def __init__(
        self,
        closed_tabs_capacity: int = SessionLimits.CLOSED_TABS_CAPACITY,
        clock: Callable[[], float] = time.time,
    ):
        self.logger = get_logger("axisbrowser.session.state")
        self.tabs: Dict[int, Tab] = {}
        self.folders: Dict[int, Folder] = {}
        self.active_tab_id: Optional[int] = None
        # While split view is on, the panes replace the active tab's view.
        self.split_view_enabled = False
        self.top_level_order: List[TopLevelItem] = []
        # Newest record on the left.
        self.closed_tabs: Deque[ClosedTabRecord] = deque(maxlen=closed_tabs_capacity)
        self.events = SessionEvents()
        self.clock = clock
        self._last_id = 0

    # Identity

    def allocate_id(self) -> int:
        """Millisecond timestamp, bumped so ids are unique and increasing."""
        candidate = int(self.clock() * 1000)
        if candidate <= self._last_id:
            candidate = self._last_id + 1
        self._last_id = candidate
        return candidate

    def reserve_id(self, existing_id: int) -> None:
        """Keep future ids above an id restored from storage."""
        self._last_id = max(self._last_id, existing_id)

    # Lookups

    def get_tab(self, tab_id: Optional[int]) -> Optional[Tab]:
        if tab_id is None:
            return None
        return self.tabs.get(tab_id)

    def get_folder(self, folder_id: Optional[int]) -> Optional[Folder]:
        if folder_id is None:
            return None
        return self.folders.get(folder_id)

    @property
    def active_tab(self) -> Optional[Tab]:
        return self.get_tab(self.active_tab_id)

    def resolve(self, ref: Any) -> Optional[TopLevelItem]:
        """Accept a ``TopLevelItem`` or a bare id and return an existing item."""
        if isinstance(ref, TopLevelItem):
            return ref if self.exists(ref) else None
        if ref in self.tabs:
            return TopLevelItem.tab(ref)
        if ref in self.folders:
            return TopLevelItem.folder(ref)
        return None

    def exists(self, item: TopLevelItem) -> bool:
        if item.kind is ItemKind.TAB:
            return item.id in self.tabs
        return item.id in self.folders

    def is_pinned_item(self, item: TopLevelItem) -> bool:
        if item.is_folder:
            return True
        tab = self.tabs.get(item.id)
        return bool(tab and tab.pinned)

    # Order

    @property
    def separator_index(self) -> int:
        """Number of top-level items in the pinned region."""
        for index, item in enumerate(self.top_level_order):
            if not self.is_pinned_item(item):
                return index
        return len(self.top_level_order)

    def snapshot_order(self) -> List[TopLevelItem]:
        return list(self.top_level_order)

    def index_of(self, item: TopLevelItem) -> int:
        try:
            return self.top_level_order.index(item)
        except ValueError:
            return -1

    def pinned_items(self) -> List[TopLevelItem]:
        return self.top_level_order[: self.separator_index]

    def unpinned_items(self) -> List[TopLevelItem]:
        return self.top_level_order[self.separator_index :]

    def iter_ordered_tabs(self) -> Iterator[Tab]:
        for item in self.top_level_order:
            if item.is_folder:
                folder = self.folders[item.id]
                for child_id in folder.child_tab_ids:
                    yield self.tabs[child_id]
            else:
                yield self.tabs[item.id]

    def ordered_tab_ids(self) -> List[int]:
        """Sidebar order with folder children flattened in place."""
        return [tab.id for tab in self.iter_ordered_tabs()]

    def insert_into_region(self, item: TopLevelItem, pinned: bool, at_head: bool = False) -> int:
        separator = self.separator_index
        if pinned:
            index = 0 if at_head else separator
        else:
            index = separator if at_head else len(self.top_level_order)
        self.top_level_order.insert(index, item)
        return index

    def remove_from_order(self, item: TopLevelItem) -> int:
        index = self.index_of(item)
        if index >= 0:
            del self.top_level_order[index]
        return index

    def detach_tab(self, tab: Tab) -> Tuple[int, Optional[Folder]]:
        """
        Take a tab out of wherever it lives (top level or folder).

        Returns the former top-level index (-1 when it was a folder child) and
        the folder it was removed from. An open folder that becomes empty is
        collapsed.
        """
        folder = self.get_folder(tab.folder_id)
        if folder is not None:
            if tab.id in folder.child_tab_ids:
                folder.child_tab_ids.remove(tab.id)
            tab.folder_id = None
            if not folder.child_tab_ids and folder.open:
                folder.open = False
            return -1, folder
        tab.folder_id = None
        return self.remove_from_order(tab.item), None

    def reindex_folders(self) -> None:
        """Recompute ``Folder.order`` as the position among pinned items."""
        for position, item in enumerate(self.pinned_items()):
            if item.is_folder:
                self.folders[item.id].order = position

    def pinned_position(self, tab: Tab) -> int:
        if tab.folder_id is not None:
            folder = self.folders.get(tab.folder_id)
            return folder.order if folder else -1
        return self.index_of(tab.item)

    # Recovery stack

    def push_closed(self, record: ClosedTabRecord) -> None:
        self.closed_tabs.appendleft(record)

    def pop_closed(self) -> Optional[ClosedTabRecord]:
        if not self.closed_tabs:
            return None
        return self.closed_tabs.popleft()

    # Consistency

    def collect_violations(self) -> List[str]:
        violations: List[str] = []
        seen = set()
        unpinned_seen = False

        for item in self.top_level_order:
            if item in seen:
                violations.append(f"{item} appears twice in the top-level order")
            seen.add(item)
            if not self.exists(item):
                violations.append(f"{item} in the top-level order does not exist")
                continue
            pinned = self.is_pinned_item(item)
            if pinned and unpinned_seen:
                violations.append(f"{item} is pinned but sits below the separator")
            if not pinned:
                unpinned_seen = True
            if item.is_tab and self.tabs[item.id].folder_id is not None:
                violations.append(f"{item} is a folder child but also top-level")

        claimed: Dict[int, int] = {}
        for folder in self.folders.values():
            if folder.item not in seen:
                violations.append(f"folder:{folder.id} is missing from the top-level order")
            for child_id in folder.child_tab_ids:
                tab = self.tabs.get(child_id)
                if tab is None:
                    violations.append(f"folder:{folder.id} references missing tab:{child_id}")
                    continue
                if child_id in claimed:
                    violations.append(f"tab:{child_id} belongs to folders {claimed[child_id]} and {folder.id}")
                claimed[child_id] = folder.id
                if not tab.pinned:
                    violations.append(f"tab:{child_id} in folder:{folder.id} is not pinned")
                if tab.folder_id != folder.id:
                    violations.append(f"tab:{child_id} folder_id does not match folder:{folder.id}")

        for tab in self.tabs.values():
            if tab.folder_id is None and tab.item not in seen:
                violations.append(f"tab:{tab.id} is neither top-level nor in a folder")
            if tab.folder_id is not None and tab.id not in claimed:
                violations.append(f"tab:{tab.id} points at folder:{tab.folder_id} which does not list it")
            history = tab.history
            if history.entries and not 0 <= history.index < len(history.entries):
                violations.append(f"tab:{tab.id} history index {history.index} out of range")
            if not history.entries and history.index != -1:
                violations.append(f"tab:{tab.id} has an index into an empty history")

        if self.active_tab_id is not None and self.active_tab_id not in self.tabs:
            violations.append(f"active tab {self.active_tab_id} does not exist")
        if len(self.closed_tabs) > (self.closed_tabs.maxlen or 0):
            violations.append("closed-tab stack exceeds its capacity")
        return violations

    def check_invariants(self) -> None:
        violations = self.collect_violations()
        if violations:
            self.logger.critical(f"Session invariants violated: {violations}")
            raise InvariantViolationError(violations)

    def __repr__(self) -> str:
        return (
            f"Session(tabs={len(self.tabs)}, folders={len(self.folders)}, "
            f"active={self.active_tab_id}, closed={len(self.closed_tabs)})"
        )
