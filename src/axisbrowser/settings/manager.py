# axisbrowser/settings/manager.py
import hashlib
import json
import threading
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..utils.exceptions import (
    ConfigValidationError,
    StorageCorruptedError,
    StorageError,
    StorageReadError,
    StorageWriteError,
    handle_exception,
)
from ..utils.logger import LogLevel, get_logger, log_error_with_context
from .config import AppConstants, DefaultSettings, get_config_paths


@dataclass
class SettingsMetadata:
    """Metadata for settings file."""

    version: str
    created_at: float
    modified_at: float
    checksum: Optional[str] = None


def _checksum(settings: Dict[str, Any]) -> str:
    settings_json = json.dumps(settings, sort_keys=True, separators=(",", ":"))
    return hashlib.md5(settings_json.encode("utf-8"), usedforsecurity=False).hexdigest()


class SettingsValidator:
    """Validates settings values and structure."""

    BOOLEAN_SETTINGS = ("record_history", "log_to_file")
    LIST_SETTINGS = ("pinnedTabs", "folders", "bookmarks")
    URL_SETTINGS = ("home_url", "split_default_url")

    def __init__(self):
        self.logger = get_logger("axisbrowser.settings.validator")

    def validate_positive_number(self, value: Any) -> bool:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        return value > 0

    def validate_retry_count(self, value: Any) -> bool:
        if isinstance(value, bool) or not isinstance(value, int):
            return False
        return 0 <= value <= 10

    def validate_search_engine(self, value: Any) -> bool:
        return isinstance(value, str) and "{query}" in value and value.startswith("http")

    def validate_log_level(self, value: Any) -> bool:
        return isinstance(value, str) and value.upper() in LogLevel.__members__

    def validate_shortcut(self, value: Any) -> bool:
        if not isinstance(value, str):
            return False
        # Empty string disables the shortcut.
        return value == "" or not value.isspace()

    def validate_shortcuts(self, shortcuts: Dict[str, str]) -> List[str]:
        errors = []
        if not isinstance(shortcuts, dict):
            errors.append("Shortcuts must be a dictionary")
            return errors
        shortcut_values = [v for v in shortcuts.values() if v]
        if len(shortcut_values) != len(set(shortcut_values)):
            errors.append("Duplicate keyboard shortcuts detected")
        for action, shortcut in shortcuts.items():
            if not isinstance(action, str):
                errors.append(f"Invalid action name: {action}")
                continue
            if not self.validate_shortcut(shortcut):
                errors.append(f"Invalid shortcut for action '{action}': {shortcut}")
        return errors

    def validators(self) -> Dict[str, Callable[[Any], bool]]:
        checks: Dict[str, Callable[[Any], bool]] = {
            "load_timeout_seconds": self.validate_positive_number,
            "load_retry_delay_seconds": self.validate_positive_number,
            "max_load_retries": self.validate_retry_count,
            "search_engine": self.validate_search_engine,
            "console_log_level": self.validate_log_level,
        }
        for key in self.BOOLEAN_SETTINGS:
            checks[key] = lambda v: isinstance(v, bool)
        for key in self.LIST_SETTINGS:
            checks[key] = lambda v: isinstance(v, list)
        for key in self.URL_SETTINGS:
            checks[key] = lambda v: isinstance(v, str) and bool(v.strip())
        return checks

    def validate_settings_structure(
        self, settings: Dict[str, Any], required: Tuple[str, ...] = ("shortcuts",)
    ) -> List[str]:
        errors = []
        for key in required:
            if key not in settings:
                errors.append(f"Missing required setting: {key}")

        for key, validator in self.validators().items():
            if key in settings and not validator(settings[key]):
                errors.append(f"Invalid value for setting '{key}': {settings[key]}")

        if "shortcuts" in settings:
            errors.extend(self.validate_shortcuts(settings["shortcuts"]))
        return errors


class SettingsManager:
    """
    JSON backed key/value settings store.

    Implements the ``get(key, default)`` / ``set(key, value)`` contract the
    session persistence bridge relies on.
    """

    def __init__(
        self,
        settings_file: Optional[Path] = None,
        defaults: Optional[Dict[str, Any]] = None,
    ):
        self.logger = get_logger("axisbrowser.settings.manager")
        self.validator = SettingsValidator()
        self.settings_file = Path(settings_file) if settings_file else get_config_paths().SETTINGS_FILE
        self._defaults = defaults if defaults is not None else DefaultSettings.get_defaults()
        self._settings: Dict[str, Any] = {}
        self._metadata: Optional[SettingsMetadata] = None
        self._dirty = False
        self._lock = threading.RLock()
        self._change_listeners: List[Callable[[str, Any, Any], None]] = []
        # Set when an existing file could not be used and defaults were loaded.
        self.load_error: Optional[StorageError] = None
        self._initialize()
        self.logger.info(f"Settings manager initialized ({self.settings_file})")

    def _initialize(self):
        with self._lock:
            self._settings = self._load_settings_safe()
            self._validate_and_repair()
            self._merge_with_defaults()
            # Legacy files, repairs and default merges are written back in the
            # canonical wrapper format.
            if self._dirty and self.settings_file.exists():
                self.save_settings()

    def _parse_settings_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Parse and extract settings from loaded data."""
        if "settings" in data and "metadata" in data:
            settings = data.get("settings", {})
            metadata = data.get("metadata", {})
            if isinstance(metadata, dict):
                try:
                    self._metadata = SettingsMetadata(**metadata)
                except TypeError:
                    self.logger.warning("Settings metadata is malformed, ignoring it")
                    self._metadata = None
                if self._metadata and self._metadata.checksum and isinstance(settings, dict):
                    if _checksum(settings) != self._metadata.checksum:
                        self.logger.warning("Settings checksum mismatch - file may be corrupted")
            return settings

        self._metadata = None
        self.logger.info("Loaded legacy settings format")
        self._dirty = True
        return data

    def _read_settings_file(self) -> Dict[str, Any]:
        path = str(self.settings_file)
        try:
            with open(self.settings_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StorageCorruptedError(path, str(e)) from e
        except (OSError, UnicodeDecodeError) as e:
            raise StorageReadError(path, str(e)) from e
        if not isinstance(data, dict):
            raise StorageCorruptedError(path, "root is not a JSON object")
        settings = self._parse_settings_data(data)
        if not isinstance(settings, dict):
            raise StorageCorruptedError(path, "settings section is not a JSON object")
        return settings

    def _load_settings_safe(self) -> Dict[str, Any]:
        if not self.settings_file.exists():
            self.logger.info("Settings file not found, using defaults")
            return json.loads(json.dumps(self._defaults))
        try:
            return self._read_settings_file()
        except StorageCorruptedError as e:
            self.logger.error(f"{e.message}, using defaults")
            self.load_error = e
        except StorageReadError as e:
            handle_exception(e, "settings loading", "axisbrowser.settings")
            self.load_error = e
        return json.loads(json.dumps(self._defaults))

    def _validate_and_repair(self):
        required = tuple(key for key in ("shortcuts",) if key in self._defaults)
        errors = self.validator.validate_settings_structure(self._settings, required)
        if not errors:
            return
        self.logger.warning(f"Settings validation failed: {errors}")
        if self._repair_settings(errors):
            self.logger.info("Settings automatically repaired")
            self._dirty = True
        else:
            self.logger.warning("Could not repair all settings issues")

    def _repair_settings(self, errors: List[str]) -> bool:
        repairs_made = 0
        for error in errors:
            if "Missing required setting:" in error:
                key = error.split(": ")[1]
            elif "Invalid value for setting" in error:
                key = error.split("'")[1]
            elif "shortcut" in error.lower():
                key = "shortcuts"
            else:
                continue
            if key in self._defaults:
                self._settings[key] = json.loads(json.dumps(self._defaults[key]))
                repairs_made += 1
        return repairs_made > 0

    def _merge_with_defaults(self):
        updated = False
        for key, default_value in self._defaults.items():
            if key not in self._settings:
                self._settings[key] = json.loads(json.dumps(default_value))
                updated = True
            elif isinstance(default_value, dict) and isinstance(self._settings[key], dict):
                for sub_key, sub_default in default_value.items():
                    if sub_key not in self._settings[key]:
                        self._settings[key][sub_key] = sub_default
                        updated = True
        if updated:
            self._dirty = True

    def save_settings(self, force: bool = False) -> None:
        """Write settings atomically through a temporary file."""
        with self._lock:
            if not self._dirty and not force:
                return
            settings_to_save = json.loads(json.dumps(self._settings))
            current_time = time.time()
            if self._metadata:
                self._metadata.modified_at = current_time
            else:
                self._metadata = SettingsMetadata(
                    version=AppConstants.APP_VERSION,
                    created_at=current_time,
                    modified_at=current_time,
                )
            self._metadata.checksum = _checksum(settings_to_save)
            save_data = {"metadata": asdict(self._metadata), "settings": settings_to_save}
            try:
                self.settings_file.parent.mkdir(parents=True, exist_ok=True)
                temp_file = self.settings_file.with_suffix(".tmp")
                with open(temp_file, "w", encoding="utf-8") as f:
                    json.dump(save_data, f, indent=2, ensure_ascii=False)
                temp_file.replace(self.settings_file)
                self._dirty = False
            except (OSError, TypeError, ValueError) as e:
                self._dirty = True
                log_error_with_context(e, "settings saving", "axisbrowser.settings")
                raise StorageWriteError(str(self.settings_file), str(e)) from e

    def set(self, key: str, value: Any, save_immediately: bool = True) -> None:
        with self._lock:
            old_value = self.get(key)
            self._validate_setting_value(key, value)
            if "." in key:
                keys = key.split(".")
                current = self._settings
                for k in keys[:-1]:
                    current = current.setdefault(k, {})
                current[keys[-1]] = value
            else:
                self._settings[key] = value
            self._dirty = True

            if key == "console_log_level":
                from ..utils import logger

                logger.set_console_log_level(value)
            elif key == "log_to_file":
                from ..utils import logger

                logger.set_log_to_file_enabled(value)

            self._notify_change_listeners(key, old_value, value)

            if save_immediately:
                self.save_settings()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            try:
                if "." in key:
                    value = self._settings
                    for k in key.split("."):
                        value = value[k]
                    return value
                return self._settings.get(key, default)
            except (KeyError, TypeError):
                return default

    def _validate_setting_value(self, key: str, value: Any):
        base_key = key.split(".")[0]
        validator = self.validator.validators().get(base_key)
        if validator is not None and "." not in key and not validator(value):
            raise ConfigValidationError(key, value, f"Invalid value for {base_key}")
        if key == "shortcuts":
            errors = self.validator.validate_shortcuts(value)
            if errors:
                raise ConfigValidationError(key, value, errors[0])
        if key.startswith("shortcuts.") and not self.validator.validate_shortcut(value):
            raise ConfigValidationError(key, value, "Invalid keyboard shortcut")

    def _notify_change_listeners(self, key: str, old_value: Any, new_value: Any):
        for listener in list(self._change_listeners):
            try:
                listener(key, old_value, new_value)
            except Exception as e:
                self.logger.error(f"Change listener failed for key '{key}': {e}")

    def add_change_listener(self, listener: Callable[[str, Any, Any], None]):
        if listener not in self._change_listeners:
            self._change_listeners.append(listener)

    def remove_change_listener(self, listener: Callable[[str, Any, Any], None]):
        if listener in self._change_listeners:
            self._change_listeners.remove(listener)

    def get_shortcuts(self) -> Dict[str, str]:
        """Custom shortcuts merged over the defaults so every action has one."""
        shortcuts = DefaultSettings.get_default_shortcuts()
        custom = self.get("shortcuts", {})
        if isinstance(custom, dict):
            shortcuts.update({k: v for k, v in custom.items() if isinstance(v, str)})
        return shortcuts

    def reset_shortcuts(self) -> Dict[str, str]:
        defaults = DefaultSettings.get_default_shortcuts()
        self.set("shortcuts", defaults)
        return defaults

    def apply_log_settings(self):
        """Applies log settings to the logger system."""
        from ..utils import logger

        logger.set_log_to_file_enabled(self.get("log_to_file", False))
        logger.set_console_log_level(self.get("console_log_level", "WARNING"))
