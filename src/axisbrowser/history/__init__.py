# axisbrowser/history/__init__.py

from .store import BrowsingHistory

__all__ = ["BrowsingHistory"]
