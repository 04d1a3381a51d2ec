# axisbrowser/settings/__init__.py
"""Settings storage and application configuration."""

from .config import AppConstants, ConfigPaths, DefaultSettings, InternalPages, SessionLimits, get_config_paths
from .manager import SettingsManager, SettingsValidator

__all__ = [
    "AppConstants",
    "ConfigPaths",
    "DefaultSettings",
    "InternalPages",
    "SessionLimits",
    "SettingsManager",
    "SettingsValidator",
    "get_config_paths",
]
