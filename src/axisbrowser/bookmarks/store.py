# axisbrowser/bookmarks/store.py
"""Bookmarks kept under the ``bookmarks`` key of the main settings."""

import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from ..settings.manager import SettingsManager
from ..utils.exceptions import StorageError, handle_exception
from ..utils.logger import get_logger
from ..utils.security import InputSanitizer, is_recordable_url

BOOKMARKS_KEY = "bookmarks"
UNTITLED = "Untitled"


class BookmarkStore:
    """
    Insertion-ordered list of ``{url, title, date}`` entries.

    A url is bookmarked at most once; toggling it again removes it.
    """

    def __init__(self, settings: SettingsManager, clock: Callable[[], float] = time.time):
        self.logger = get_logger("axisbrowser.bookmarks.store")
        self.settings = settings
        self.clock = clock

    def items(self) -> List[Dict[str, Any]]:
        raw = self.settings.get(BOOKMARKS_KEY, [])
        if not isinstance(raw, list):
            return []
        return [entry for entry in raw if isinstance(entry, dict) and entry.get("url")]

    def is_bookmarked(self, url: Optional[str]) -> bool:
        return bool(url) and any(entry["url"] == url for entry in self.items())

    def _write(self, items: List[Dict[str, Any]]) -> bool:
        try:
            self.settings.set(BOOKMARKS_KEY, items)
        except StorageError as e:
            handle_exception(e, "saving bookmarks", "axisbrowser.bookmarks.store")
            return False
        return True

    def toggle(self, url: Optional[str], title: Optional[str] = None) -> Optional[bool]:
        """
        Add the page, or remove it when it is already bookmarked.

        Returns:
            True when added, False when removed, None for pages that cannot
            be bookmarked (blank, about: and internal pages)
        """
        if not is_recordable_url(url):
            return None
        items = self.items()
        remaining = [entry for entry in items if entry["url"] != url]
        if len(remaining) != len(items):
            self._write(remaining)
            self.logger.info(f"Bookmark removed: {url}")
            return False

        items.append(
            {
                "url": url,
                "title": InputSanitizer.sanitize_title(title) or UNTITLED,
                "date": datetime.fromtimestamp(self.clock(), tz=timezone.utc).isoformat(),
            }
        )
        self._write(items)
        self.logger.info(f"Bookmark added: {url}")
        return True

    def delete(self, index: int) -> bool:
        """Remove the entry at a position of ``items()``."""
        items = self.items()
        if not 0 <= index < len(items):
            return False
        del items[index]
        return self._write(items)

    def __len__(self) -> int:
        return len(self.items())
