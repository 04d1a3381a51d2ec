# axisbrowser/history/store.py
"""Browsing history kept in its own JSON file next to the settings."""

import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ..settings.config import SessionLimits, get_config_paths
from ..settings.manager import SettingsManager
from ..utils.exceptions import StorageError, handle_exception
from ..utils.logger import get_logger
from ..utils.security import InputSanitizer, is_recordable_url

ITEMS_KEY = "items"


class BrowsingHistory:
    """
    Most-recent-first list of visited pages.

    Each entry is ``{id, url, title, favicon, timestamp}``. Visiting a url
    again moves it to the top instead of adding a second entry.
    """

    def __init__(
        self,
        history_file: Optional[Path] = None,
        capacity: int = SessionLimits.BROWSING_HISTORY_CAPACITY,
        clock: Callable[[], float] = time.time,
    ):
        self.logger = get_logger("axisbrowser.history.store")
        self.capacity = capacity
        self.clock = clock
        self.store = SettingsManager(
            settings_file=history_file or get_config_paths().HISTORY_FILE,
            defaults={ITEMS_KEY: []},
        )
        self._last_id = 0

    def items(self) -> List[Dict[str, Any]]:
        raw = self.store.get(ITEMS_KEY, [])
        if not isinstance(raw, list):
            return []
        return [entry for entry in raw if isinstance(entry, dict) and entry.get("url")]

    def _next_id(self) -> int:
        candidate = int(self.clock() * 1000)
        newest = max((e.get("id", 0) for e in self.items() if isinstance(e.get("id"), int)), default=0)
        candidate = max(candidate, newest + 1, self._last_id + 1)
        self._last_id = candidate
        return candidate

    def _write(self, items: List[Dict[str, Any]]) -> bool:
        try:
            self.store.set(ITEMS_KEY, items)
        except StorageError as e:
            handle_exception(e, "saving browsing history", "axisbrowser.history.store")
            return False
        return True

    def add(self, url: Optional[str], title: Optional[str] = None, favicon: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Record a visit.

        Returns:
            The new entry, or None when the url is not worth recording
        """
        if not is_recordable_url(url):
            return None
        entry = {
            "id": self._next_id(),
            "url": url,
            "title": InputSanitizer.sanitize_title(title) or url,
            "favicon": favicon,
            "timestamp": self.clock(),
        }
        items = [e for e in self.items() if e.get("url") != url]
        items.insert(0, entry)
        del items[self.capacity :]
        self._write(items)
        return entry

    def delete(self, item_id: int) -> bool:
        items = self.items()
        remaining = [e for e in items if e.get("id") != item_id]
        if len(remaining) == len(items):
            return False
        return self._write(remaining)

    def clear(self) -> int:
        count = len(self.items())
        self._write([])
        self.logger.info(f"Cleared {count} history entries")
        return count

    def search(self, term: Optional[str]) -> List[Dict[str, Any]]:
        """Case-insensitive match on title or url; an empty term returns everything."""
        needle = (term or "").strip().lower()
        if not needle:
            return self.items()
        return [
            e
            for e in self.items()
            if needle in str(e.get("url", "")).lower() or needle in str(e.get("title", "")).lower()
        ]

    def __len__(self) -> int:
        return len(self.items())
