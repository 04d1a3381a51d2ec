# axisbrowser/session/organizer.py

from typing import Any, List, Optional

from ..utils.logger import get_logger, log_folder_event
from .models import Folder, Side, Tab, TopLevelItem
from .results import OrderChange
from .state import EventKind, Session


class PinFolderOrganizer:
    """
    Pinned/unpinned partition and folder membership.

    Every structural operation returns an ``OrderChange`` describing the
    top-level order before and after, and emits ``order-changed`` on the
    session channel. Unknown ids are no-ops that return ``None``.
    """

    def __init__(self, session: Session):
        self.logger = get_logger("axisbrowser.session.organizer")
        self.session = session

    def _commit(self, before: List[TopLevelItem], **payload: Any) -> OrderChange:
        self.session.reindex_folders()
        change = OrderChange.compute(before, self.session.top_level_order)
        self.session.events.emit(EventKind.ORDER_CHANGED, structural=True, change=change, **payload)
        return change

    def _emit_pin_change(self, tab: Tab):
        self.session.events.emit(EventKind.TAB_UPDATED, structural=True, tab_id=tab.id, field="pinned")

    # Pinning

    def toggle_pin(self, tab_id: int) -> Optional[OrderChange]:
        tab = self.session.get_tab(tab_id)
        if tab is None:
            return None
        return self.set_pinned(tab_id, not tab.pinned)

    def set_pinned(self, tab_id: int, pinned: bool, at_head: bool = False) -> Optional[OrderChange]:
        """
        Move a tab into the pinned or unpinned region.

        Args:
            tab_id: Tab to move
            pinned: Target region
            at_head: Place the tab first in the region instead of last

        Returns:
            OrderChange, or None for an unknown tab
        """
        tab = self.session.get_tab(tab_id)
        if tab is None:
            return None
        before = self.session.snapshot_order()
        folder = self.session.detach_tab(tab)[1]
        was_pinned = tab.pinned
        tab.pinned = pinned
        self.session.insert_into_region(tab.item, pinned, at_head=at_head)

        if folder is not None:
            self.session.events.emit(EventKind.FOLDER_UPDATED, structural=True, folder_id=folder.id)
        if was_pinned != pinned:
            self._emit_pin_change(tab)
        self.logger.debug(f"Tab {tab_id} {'pinned' if pinned else 'unpinned'} (head={at_head})")
        return self._commit(before, tab_id=tab_id)

    # Folders

    def create_folder(self, name: Optional[str] = None) -> int:
        before = self.session.snapshot_order()
        folder_id = self.session.allocate_id()
        folder = Folder(id=folder_id, name=Folder.normalize_name(name, folder_id), open=True)
        self.session.folders[folder_id] = folder
        self.session.insert_into_region(folder.item, pinned=True)

        log_folder_event("created", folder.name)
        self.session.events.emit(EventKind.FOLDER_CREATED, structural=True, folder_id=folder_id)
        self._commit(before, folder_id=folder_id)
        return folder_id

    def rename_folder(self, folder_id: int, name: Optional[str]) -> Optional[OrderChange]:
        folder = self.session.get_folder(folder_id)
        if folder is None:
            return None
        before = self.session.snapshot_order()
        old_name = folder.name
        folder.name = Folder.normalize_name(name, folder_id)
        log_folder_event("renamed", folder.name, f"from '{old_name}'")
        self.session.events.emit(EventKind.FOLDER_UPDATED, structural=True, folder_id=folder_id)
        return self._commit(before, folder_id=folder_id)

    def delete_folder(self, folder_id: int) -> Optional[OrderChange]:
        """Remove a folder; its children stay pinned and take its place."""
        folder = self.session.get_folder(folder_id)
        if folder is None:
            return None
        before = self.session.snapshot_order()
        position = self.session.remove_from_order(folder.item)
        if position < 0:
            position = self.session.separator_index

        children = [self.session.tabs[child_id] for child_id in folder.child_tab_ids if child_id in self.session.tabs]
        for offset, tab in enumerate(children):
            tab.folder_id = None
            tab.pinned = True
            self.session.top_level_order.insert(position + offset, tab.item)
        folder.child_tab_ids = []
        del self.session.folders[folder_id]

        log_folder_event("deleted", folder.name, f"{len(children)} tabs released")
        self.session.events.emit(EventKind.FOLDER_DELETED, structural=True, folder_id=folder_id)
        return self._commit(before, folder_id=folder_id)

    def add_tab_to_folder(self, tab_id: int, folder_id: int) -> Optional[OrderChange]:
        tab = self.session.get_tab(tab_id)
        folder = self.session.get_folder(folder_id)
        if tab is None or folder is None:
            return None
        before = self.session.snapshot_order()
        if tab.folder_id == folder_id:
            return OrderChange.compute(before, before)

        previous_folder = self.session.detach_tab(tab)[1]
        was_pinned = tab.pinned
        tab.pinned = True
        tab.folder_id = folder_id
        folder.child_tab_ids.append(tab_id)
        if not folder.open and len(folder.child_tab_ids) == 1:
            folder.open = True

        if previous_folder is not None:
            self.session.events.emit(EventKind.FOLDER_UPDATED, structural=True, folder_id=previous_folder.id)
        self.session.events.emit(EventKind.FOLDER_UPDATED, structural=True, folder_id=folder_id)
        if not was_pinned:
            self._emit_pin_change(tab)
        log_folder_event("tab added", folder.name, f"tab {tab_id}")
        return self._commit(before, tab_id=tab_id, folder_id=folder_id)

    def remove_tab_from_folder(self, tab_id: int, folder_id: int) -> Optional[OrderChange]:
        """Take a child out of its folder and place it right after the folder."""
        tab = self.session.get_tab(tab_id)
        folder = self.session.get_folder(folder_id)
        if tab is None or folder is None or tab.folder_id != folder_id:
            return None
        before = self.session.snapshot_order()
        self.session.detach_tab(tab)
        position = self.session.index_of(folder.item)
        self.session.top_level_order.insert(position + 1, tab.item)

        self.session.events.emit(EventKind.FOLDER_UPDATED, structural=True, folder_id=folder_id)
        log_folder_event("tab removed", folder.name, f"tab {tab_id}")
        return self._commit(before, tab_id=tab_id, folder_id=folder_id)

    def set_folder_open(self, folder_id: int, open_: bool) -> Optional[bool]:
        """Set the expanded flag; an empty folder always stays closed."""
        folder = self.session.get_folder(folder_id)
        if folder is None:
            return None
        value = bool(open_) and bool(folder.child_tab_ids)
        if value != folder.open:
            folder.open = value
            self.session.events.emit(EventKind.FOLDER_UPDATED, structural=True, folder_id=folder_id)
        return folder.open

    def toggle_folder(self, folder_id: int) -> Optional[bool]:
        folder = self.session.get_folder(folder_id)
        if folder is None:
            return None
        return self.set_folder_open(folder_id, not folder.open)

    # Reordering

    def reorder(self, item_ref: Any, target_ref: Any, side: Side) -> Optional[OrderChange]:
        """
        Move an item immediately before or after a top-level target.

        The moved item takes the region of its target, so crossing the
        separator pins or unpins a tab. Folder children are detached first.
        Folders only move among pinned items.

        Returns:
            OrderChange, or None when the move is not allowed
        """
        item = self.session.resolve(item_ref)
        target = self.session.resolve(target_ref)
        if item is None or target is None or item == target:
            return None
        if self.session.index_of(target) < 0:
            return None

        target_pinned = self.session.is_pinned_item(target)
        if item.is_folder and not target_pinned:
            self.logger.debug(f"Rejected moving folder {item.id} below the separator")
            return None

        before = self.session.snapshot_order()
        folder = None
        pin_changed = False
        if item.is_tab:
            tab = self.session.tabs[item.id]
            folder = self.session.detach_tab(tab)[1]
            pin_changed = tab.pinned != target_pinned
            tab.pinned = target_pinned
        else:
            self.session.remove_from_order(item)

        index = self.session.index_of(target)
        if side is Side.AFTER:
            index += 1
        self.session.top_level_order.insert(index, item)

        if folder is not None:
            self.session.events.emit(EventKind.FOLDER_UPDATED, structural=True, folder_id=folder.id)
        if pin_changed:
            self._emit_pin_change(self.session.tabs[item.id])
        return self._commit(before, item=item, target=target, side=side.value)
