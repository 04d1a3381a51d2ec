# axisbrowser/__init__.py
"""Axis Browser session core: tabs, pinned folders, drag-and-drop and split view."""

from .settings.config import APP_VERSION

__version__ = APP_VERSION
