"""
Configuration constants and settings for Axis Browser.

This module provides application constants, platform-aware paths, session
limits and the default settings merged into every settings file on load.
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from ..utils.logger import get_logger


class AppConstants:
    """Application metadata and identification constants."""

    APP_ID = "org.axis.browser"
    APP_TITLE = "Axis Browser"
    APP_VERSION = "1.0.0"
    APP_VERSION_TUPLE = (1, 0, 0)

    LICENSE = "MIT"
    MIN_PYTHON_VERSION = (3, 9)


class SessionLimits:
    """Bounds shared by the session model, the router and the drag engine."""

    CLOSED_TABS_CAPACITY = 10
    BROWSING_HISTORY_CAPACITY = 1000

    ZOOM_MIN = 0.25
    ZOOM_MAX = 3.0
    ZOOM_STEP = 0.1
    ZOOM_DEFAULT = 1.0

    SPLIT_RATIO_MIN = 0.2
    SPLIT_RATIO_MAX = 0.8
    SPLIT_RATIO_DEFAULT = 0.5

    # Drag and drop, in pixels
    SEPARATOR_DEADBAND = 6.0
    ITEM_EDGE_BAND = 8.0

    LOAD_TIMEOUT_SECONDS = 30.0
    MAX_LOAD_RETRIES = 3
    LOAD_RETRY_DELAY_SECONDS = 1.0

    MAX_SHORTCUT_TAB_INDEX = 9


class InternalPages:
    """Virtual pages served by the browser itself."""

    SETTINGS = "axis://settings"
    NOTES = "axis://notes"
    ERROR = "axis://error"
    BLANK = "about:blank"

    TITLES = {
        SETTINGS: "Settings",
        NOTES: "Notes",
    }


class ConfigPaths:
    """Platform-aware configuration paths."""

    def __init__(self, config_dir: Optional[Path] = None):
        self.logger = get_logger("axisbrowser.config.paths")
        self.CONFIG_DIR = Path(config_dir) if config_dir else self._get_config_dir()
        self.SETTINGS_FILE = self.CONFIG_DIR / "settings.json"
        self.HISTORY_FILE = self.CONFIG_DIR / "history.json"
        self.NOTES_FILE = self.CONFIG_DIR / "notes.json"
        self.LOG_DIR = self.CONFIG_DIR / "logs"
        self.CACHE_DIR = self._get_cache_directory()

    def _get_config_dir(self) -> Path:
        override = os.environ.get("AXIS_CONFIG_DIR")
        if override:
            return Path(override)

        xdg_config = os.environ.get("XDG_CONFIG_HOME")
        if xdg_config:
            return Path(xdg_config) / "axisbrowser"

        home = Path.home()
        if sys.platform == "win32":
            appdata = os.environ.get("APPDATA")
            if appdata:
                return Path(appdata) / "axisbrowser"
            return home / "AppData" / "Roaming" / "axisbrowser"
        elif sys.platform == "darwin":
            return home / "Library" / "Application Support" / "axisbrowser"
        return home / ".config" / "axisbrowser"

    def _get_cache_directory(self) -> Path:
        if sys.platform == "darwin":
            return Path.home() / "Library" / "Caches" / "axisbrowser"
        xdg_cache = os.environ.get("XDG_CACHE_HOME")
        if xdg_cache:
            return Path(xdg_cache) / "axisbrowser"
        return Path.home() / ".cache" / "axisbrowser"

    def ensure_directories(self):
        """Create the config and log directories; failures are logged, not raised."""
        for directory in (self.CONFIG_DIR, self.LOG_DIR):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                self.logger.warning(f"Failed to create directory {directory}: {e}")


class DefaultSettings:
    """Default application settings."""

    @staticmethod
    def get_default_shortcuts() -> Dict[str, str]:
        """Keyboard actions and their GTK accelerators."""
        shortcuts = {
            "close-tab": "<Control>w",
            "new-tab": "<Control>n",
            "pin-tab": "<Control>p",
            "recover-tab": "<Control>z",
            "refresh": "<Control>r",
            "focus-url": "<Control>l",
            "settings": "<Control>comma",
            "notes": "<Control><Shift>n",
            "copy-url": "<Control><Shift>c",
            "bookmark-page": "<Control>d",
            "clear-history": "<Control><Shift>h",
            "zoom-in": "<Control>equal",
            "zoom-out": "<Control>minus",
            "reset-zoom": "<Control>0",
            "go-back": "<Alt>Left",
            "go-forward": "<Alt>Right",
            "new-folder": "<Control><Shift>f",
            "toggle-split-view": "<Control><Shift>s",
            "focus-left-pane": "<Control><Alt>Left",
            "focus-right-pane": "<Control><Alt>Right",
        }
        for index in range(1, SessionLimits.MAX_SHORTCUT_TAB_INDEX + 1):
            shortcuts[f"switch-tab-{index}"] = f"<Control>{index}"
        return shortcuts

    @staticmethod
    def get_defaults() -> Dict[str, Any]:
        """
        Get default application settings.

        Returns:
            Dictionary with default settings
        """
        return {
            # Navigation
            "home_url": "https://www.google.com",
            "split_default_url": "https://www.google.com",
            "search_engine": "https://www.google.com/search?q={query}",
            "record_history": True,
            # Page loading
            "load_timeout_seconds": SessionLimits.LOAD_TIMEOUT_SECONDS,
            "max_load_retries": SessionLimits.MAX_LOAD_RETRIES,
            "load_retry_delay_seconds": SessionLimits.LOAD_RETRY_DELAY_SECONDS,
            # Logging
            "log_to_file": False,
            "console_log_level": "WARNING",
            # Session state written by the persistence bridge
            "pinnedTabs": [],
            "folders": [],
            # Library
            "bookmarks": [],
            # Keyboard shortcuts - keys must match shell actions
            "shortcuts": DefaultSettings.get_default_shortcuts(),
        }


_config_paths: Optional[ConfigPaths] = None


def get_config_paths() -> ConfigPaths:
    """
    Get global configuration paths instance.

    Returns:
        ConfigPaths instance
    """
    global _config_paths
    if _config_paths is None:
        _config_paths = ConfigPaths()
    return _config_paths


APP_ID = AppConstants.APP_ID
APP_TITLE = AppConstants.APP_TITLE
APP_VERSION = AppConstants.APP_VERSION
DEFAULT_SETTINGS = DefaultSettings.get_defaults()
