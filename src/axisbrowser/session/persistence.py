# axisbrowser/session/persistence.py
"""
Bridge between the session and the key/value settings store.

Pinned tabs and folders survive restarts through two keys:

* ``pinnedTabs``: ``[{id, url, title, favicon, order}]`` for every pinned tab,
  folder children included.
* ``folders``: ``[{id, name, tabIds, open, order}]``.

``order`` is the position among top-level pinned items. Both keys are
rewritten after every structural change announced on the session channel.
"""

from typing import Any, Dict, List, Optional, Tuple

from ..utils.exceptions import StorageError, handle_exception
from ..utils.logger import get_logger
from .models import DEFAULT_TAB_TITLE, Folder, Tab, TopLevelItem
from .results import OrderChange
from .state import EventKind, Session, SessionEvent

PINNED_TABS_KEY = "pinnedTabs"
FOLDERS_KEY = "folders"


def _as_id(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _as_order(value: Any, fallback: int) -> int:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return int(value)
    return fallback


class SessionPersistence:
    """Loads pinned state at startup and writes it back on structural events."""

    def __init__(self, session: Session, settings: Any):
        self.logger = get_logger("axisbrowser.session.persistence")
        self.session = session
        self.settings = settings
        self._handler_id: Optional[int] = None
        self._loading = False

    def attach(self) -> "SessionPersistence":
        if self._handler_id is None:
            self._handler_id = self.session.events.connect(self._on_session_event)
        return self

    def detach(self) -> None:
        if self._handler_id is not None:
            self.session.events.disconnect(self._handler_id)
            self._handler_id = None

    def _on_session_event(self, event: SessionEvent) -> None:
        if self._loading or not event.structural:
            return
        self.save()

    # Writing

    def serialize(self) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
        self.session.reindex_folders()
        pinned_tabs: List[Dict[str, Any]] = []
        for position, item in enumerate(self.session.pinned_items()):
            if item.is_folder:
                folder = self.session.folders[item.id]
                for child_id in folder.child_tab_ids:
                    pinned_tabs.append(self._tab_record(self.session.tabs[child_id], position))
            else:
                pinned_tabs.append(self._tab_record(self.session.tabs[item.id], position))
        folders = [folder.to_dict() for folder in sorted(self.session.folders.values(), key=lambda f: f.order)]
        return pinned_tabs, folders

    @staticmethod
    def _tab_record(tab: Tab, order: int) -> Dict[str, Any]:
        return {
            "id": tab.id,
            "url": tab.url,
            "title": tab.title,
            "favicon": tab.favicon_url,
            "order": order,
        }

    def save(self) -> bool:
        pinned_tabs, folders = self.serialize()
        try:
            self.settings.set(PINNED_TABS_KEY, pinned_tabs)
            self.settings.set(FOLDERS_KEY, folders)
        except StorageError as e:
            handle_exception(e, "saving pinned tabs", "axisbrowser.session.persistence")
            return False
        self.logger.debug(f"Saved {len(pinned_tabs)} pinned tabs and {len(folders)} folders")
        return True

    # Reading

    def _parse_tab(self, record: Any, index: int) -> Optional[Tuple[Tab, int]]:
        if not isinstance(record, dict):
            return None
        tab_id = _as_id(record.get("id"))
        if tab_id is None:
            return None
        url = record.get("url")
        if url is not None and not isinstance(url, str):
            return None
        title = record.get("title")
        favicon = record.get("favicon")
        tab = Tab(
            id=tab_id,
            url=url or None,
            title=title.strip() if isinstance(title, str) and title.strip() else DEFAULT_TAB_TITLE,
            favicon_url=favicon if isinstance(favicon, str) and favicon else None,
            pinned=True,
            created_at=self.session.clock(),
        )
        if tab.url:
            tab.history.push(tab.url)
            tab.pending_url = tab.url
        return tab, _as_order(record.get("order"), index)

    def _parse_folder(self, record: Any, index: int) -> Optional[Tuple[Folder, List[Any], bool, int]]:
        if not isinstance(record, dict):
            return None
        folder_id = _as_id(record.get("id"))
        tab_ids = record.get("tabIds", [])
        if folder_id is None or not isinstance(tab_ids, list):
            return None
        name = record.get("name")
        folder = Folder(id=folder_id, name=Folder.normalize_name(name if isinstance(name, str) else None, folder_id))
        return folder, tab_ids, bool(record.get("open", True)), _as_order(record.get("order"), index)

    def load(self) -> int:
        """
        Restore pinned tabs and folders into the session.

        Malformed records are skipped with a warning. A tab listed by more
        than one folder stays in the first one.

        Returns:
            Number of tabs restored
        """
        raw_tabs = self.settings.get(PINNED_TABS_KEY, []) or []
        raw_folders = self.settings.get(FOLDERS_KEY, []) or []
        if not isinstance(raw_tabs, list):
            self.logger.warning(f"Ignoring malformed '{PINNED_TABS_KEY}' value")
            raw_tabs = []
        if not isinstance(raw_folders, list):
            self.logger.warning(f"Ignoring malformed '{FOLDERS_KEY}' value")
            raw_folders = []

        restored: Dict[int, Tab] = {}
        tab_orders: Dict[int, int] = {}
        for index, record in enumerate(raw_tabs):
            parsed = self._parse_tab(record, index)
            if parsed is None:
                self.logger.warning(f"Skipping malformed pinned tab record at position {index}")
                continue
            tab, order = parsed
            if tab.id in restored or tab.id in self.session.tabs:
                self.logger.warning(f"Skipping duplicate pinned tab {tab.id}")
                continue
            restored[tab.id] = tab
            tab_orders[tab.id] = order

        folders: List[Tuple[Folder, int]] = []
        claimed = set()
        for index, record in enumerate(raw_folders):
            parsed = self._parse_folder(record, index)
            if parsed is None:
                self.logger.warning(f"Skipping malformed folder record at position {index}")
                continue
            folder, tab_ids, open_, order = parsed
            if folder.id in restored or folder.id in self.session.folders or any(f.id == folder.id for f, _order in folders):
                self.logger.warning(f"Skipping folder {folder.id} with a conflicting id")
                continue
            for raw_id in tab_ids:
                child_id = _as_id(raw_id)
                if child_id is None or child_id not in restored:
                    self.logger.warning(f"Folder {folder.id} references unknown tab {raw_id}")
                    continue
                if child_id in claimed:
                    self.logger.warning(f"Tab {child_id} already belongs to another folder")
                    continue
                claimed.add(child_id)
                folder.child_tab_ids.append(child_id)
                restored[child_id].folder_id = folder.id
            folder.open = open_ and bool(folder.child_tab_ids)
            folders.append((folder, order))

        entries: List[Tuple[int, int, TopLevelItem]] = []
        sequence = 0
        for tab_id, tab in restored.items():
            if tab_id not in claimed:
                entries.append((tab_orders[tab_id], sequence, tab.item))
                sequence += 1
        for folder, order in folders:
            entries.append((order, sequence, folder.item))
            sequence += 1

        self._loading = True
        try:
            before = self.session.snapshot_order()
            self.session.tabs.update(restored)
            for folder, _order in folders:
                self.session.folders[folder.id] = folder
            for _order, _seq, item in sorted(entries, key=lambda entry: (entry[0], entry[1])):
                self.session.insert_into_region(item, pinned=True)
            for identifier in list(restored) + [folder.id for folder, _order in folders]:
                self.session.reserve_id(identifier)
            self.session.reindex_folders()

            self.session.events.emit(
                EventKind.ORDER_CHANGED,
                structural=True,
                change=OrderChange.compute(before, self.session.top_level_order),
                restored=True,
            )
        finally:
            self._loading = False

        self.logger.info(f"Restored {len(restored)} pinned tabs and {len(folders)} folders")
        return len(restored)
