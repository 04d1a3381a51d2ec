"""
Utility modules for Axis Browser.

This package provides logging, input sanitization, translation support and
the exception hierarchy shared by every component.
"""

from .exceptions import AxisBrowserError, ConfigError, StorageError, handle_exception
from .logger import get_logger
from .security import InputSanitizer, UrlSanitizer
from .translation_utils import _

__all__ = [
    "get_logger",
    "UrlSanitizer",
    "InputSanitizer",
    "AxisBrowserError",
    "ConfigError",
    "StorageError",
    "handle_exception",
    "_",
]
