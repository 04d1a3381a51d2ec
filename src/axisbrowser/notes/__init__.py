# axisbrowser/notes/__init__.py

from .store import NotesStore

__all__ = ["NotesStore"]
