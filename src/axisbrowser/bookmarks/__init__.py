# axisbrowser/bookmarks/__init__.py

from .store import BookmarkStore

__all__ = ["BookmarkStore"]
