# axisbrowser/notes/store.py
"""Notes kept in their own JSON file next to the settings."""

import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ..settings.config import get_config_paths
from ..settings.manager import SettingsManager
from ..utils.exceptions import StorageError, handle_exception
from ..utils.logger import get_logger
from ..utils.security import InputSanitizer

ITEMS_KEY = "items"
UNTITLED_NOTE = "Untitled Note"


class NotesStore:
    """
    Newest-first list of notes.

    Each note is ``{id, title, content, createdAt, updatedAt}`` with ISO-8601
    timestamps.
    """

    def __init__(self, notes_file: Optional[Path] = None, clock: Callable[[], float] = time.time):
        self.logger = get_logger("axisbrowser.notes.store")
        self.clock = clock
        self.store = SettingsManager(
            settings_file=notes_file or get_config_paths().NOTES_FILE,
            defaults={ITEMS_KEY: []},
        )
        self._last_id = 0

    def items(self) -> List[Dict[str, Any]]:
        raw = self.store.get(ITEMS_KEY, [])
        if not isinstance(raw, list):
            return []
        return [note for note in raw if isinstance(note, dict) and "id" in note]

    def get(self, note_id: Any) -> Optional[Dict[str, Any]]:
        for note in self.items():
            if note["id"] == note_id:
                return note
        return None

    def _now(self) -> str:
        return datetime.fromtimestamp(self.clock(), tz=timezone.utc).isoformat()

    def _next_id(self) -> int:
        candidate = int(self.clock() * 1000)
        newest = max((n["id"] for n in self.items() if isinstance(n["id"], int)), default=0)
        candidate = max(candidate, newest + 1, self._last_id + 1)
        self._last_id = candidate
        return candidate

    def _write(self, items: List[Dict[str, Any]]) -> bool:
        try:
            self.store.set(ITEMS_KEY, items)
        except StorageError as e:
            handle_exception(e, "saving notes", "axisbrowser.notes.store")
            return False
        return True

    def save(self, note: Dict[str, Any]) -> Dict[str, Any]:
        """
        Update the note with the same id, or create a new one at the top.

        Args:
            note: ``title``/``content`` and optionally the ``id`` to update

        Returns:
            The stored note
        """
        title = InputSanitizer.sanitize_title(note.get("title")) or UNTITLED_NOTE
        content = note.get("content")
        content = content if isinstance(content, str) else ""
        now = self._now()

        items = self.items()
        note_id = note.get("id")
        for existing in items:
            if note_id is not None and existing["id"] == note_id:
                existing.update(title=title, content=content, updatedAt=now)
                self._write(items)
                return existing

        saved = {
            "id": note_id if note_id is not None else self._next_id(),
            "title": title,
            "content": content,
            "createdAt": now,
            "updatedAt": now,
        }
        items.insert(0, saved)
        self._write(items)
        self.logger.debug(f"Created note {saved['id']}")
        return saved

    def delete(self, note_id: Any) -> bool:
        items = self.items()
        remaining = [note for note in items if note["id"] != note_id]
        if len(remaining) == len(items):
            return False
        return self._write(remaining)

    def __len__(self) -> int:
        return len(self.items())
