"""
Structured logging system for Axis Browser.

This module provides a centralized logging system with different levels,
formatters, and handlers for debugging, monitoring, and error tracking.
"""

import logging
import logging.handlers
import os
import sys
import threading
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Union


class LogLevel(Enum):
    """Log levels for the application."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


def _default_log_dir() -> Path:
    override = os.environ.get("AXIS_CONFIG_DIR")
    if override:
        return Path(override) / "logs"
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / "axisbrowser" / "logs"
    return Path.home() / ".config" / "axisbrowser" / "logs"


class LoggerConfig:
    """Configuration for the logging system."""

    def __init__(self):
        self.log_dir = _default_log_dir()

        self.main_log_file = self.log_dir / "axisbrowser.log"
        self.error_log_file = self.log_dir / "axisbrowser_errors.log"

        self.max_file_size = 10 * 1024 * 1024  # 10MB
        self.backup_count = 5
        self.console_level = LogLevel.WARNING
        self.file_level = LogLevel.DEBUG
        self.error_file_level = LogLevel.ERROR
        self.log_to_file = False


class ColoredFormatter(logging.Formatter):
    """Colored formatter for console output."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def format(self, record):
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"
        formatted = super().format(record)
        # Reset levelname for other handlers
        record.levelname = levelname
        return formatted


_FILE_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s"


class ThreadSafeLogger:
    """Thread-safe logger implementation."""

    def __init__(self, name: str, config: LoggerConfig):
        self.name = name
        self.config = config
        self._logger = logging.getLogger(name)
        self._lock = threading.Lock()
        self._console_handler: Optional[logging.Handler] = None
        self._file_handlers: list = []
        self._setup_logger()

    def _setup_logger(self):
        """Set up the logger with a console handler and, if enabled, file handlers."""
        with self._lock:
            if getattr(self._logger, "_axis_configured", False):
                return

            # Messages would be handled twice if the root logger has handlers.
            self._logger.propagate = False
            self._logger.setLevel(logging.DEBUG)

            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(self.config.console_level.value)
            console_handler.setFormatter(
                ColoredFormatter(
                    fmt="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
                    datefmt="%H:%M:%S",
                )
            )
            self._logger.addHandler(console_handler)
            self._console_handler = console_handler

            if self.config.log_to_file:
                self._attach_file_handlers()

            self._logger._axis_configured = True

    def _attach_file_handlers(self):
        if self._file_handlers:
            return
        try:
            self.config.log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self._logger.warning(f"Cannot create log directory {self.config.log_dir}: {e}")
            return

        file_formatter = logging.Formatter(fmt=_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

        main_file_handler = logging.handlers.RotatingFileHandler(
            self.config.main_log_file,
            maxBytes=self.config.max_file_size,
            backupCount=self.config.backup_count,
            encoding="utf-8",
        )
        main_file_handler.setLevel(self.config.file_level.value)
        main_file_handler.setFormatter(file_formatter)

        error_file_handler = logging.handlers.RotatingFileHandler(
            self.config.error_log_file,
            maxBytes=self.config.max_file_size,
            backupCount=self.config.backup_count,
            encoding="utf-8",
        )
        error_file_handler.setLevel(self.config.error_file_level.value)
        error_file_handler.setFormatter(file_formatter)

        for handler in (main_file_handler, error_file_handler):
            self._logger.addHandler(handler)
            self._file_handlers.append(handler)

    def _detach_file_handlers(self):
        for handler in self._file_handlers:
            self._logger.removeHandler(handler)
            handler.close()
        self._file_handlers = []

    def set_file_logging(self, enabled: bool):
        with self._lock:
            if enabled:
                self._attach_file_handlers()
            else:
                self._detach_file_handlers()

    def set_console_level(self, level: LogLevel):
        if self._console_handler is not None:
            self._console_handler.setLevel(level.value)

    def debug(self, message: str, **kwargs):
        """Log debug message."""
        self._logger.debug(message, **kwargs)

    def info(self, message: str, **kwargs):
        """Log info message."""
        self._logger.info(message, **kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message."""
        self._logger.warning(message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs):
        """Log error message."""
        self._logger.error(message, exc_info=exc_info, **kwargs)

    def critical(self, message: str, exc_info: bool = True, **kwargs):
        """Log critical message."""
        self._logger.critical(message, exc_info=exc_info, **kwargs)

    def exception(self, message: str, **kwargs):
        """Log exception with traceback."""
        self._logger.exception(message, **kwargs)


class LoggerManager:
    """Centralized logger manager."""

    _instance: Optional["LoggerManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "LoggerManager":
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if hasattr(self, "_initialized"):
            return

        self._initialized = True
        self.config = LoggerConfig()
        self._loggers: Dict[str, ThreadSafeLogger] = {}
        self._setup_root_logger()

    def _setup_root_logger(self):
        """Keep third-party loggers quiet."""
        logging.getLogger("gi").setLevel(logging.WARNING)
        logging.getLogger("WebKit").setLevel(logging.WARNING)

    def get_logger(self, name: str) -> ThreadSafeLogger:
        """
        Get or create a logger with the given name.

        Args:
            name: Logger name (usually module name)

        Returns:
            ThreadSafeLogger instance
        """
        if name not in self._loggers:
            with self._lock:
                if name not in self._loggers:
                    self._loggers[name] = ThreadSafeLogger(name, self.config)
        return self._loggers[name]

    def set_console_level(self, level: LogLevel):
        """Set console logging level for all loggers."""
        with self._lock:
            self.config.console_level = level
            for logger in self._loggers.values():
                logger.set_console_level(level)

    def set_log_to_file(self, enabled: bool):
        with self._lock:
            self.config.log_to_file = bool(enabled)
            for logger in self._loggers.values():
                logger.set_file_logging(self.config.log_to_file)

    def enable_debug_mode(self):
        """Enable debug mode with verbose logging."""
        self.set_console_level(LogLevel.DEBUG)
        os.environ["AXIS_DEBUG"] = "1"

    def cleanup_old_logs(self, days_to_keep: int = 30):
        """
        Clean up old log files.

        Args:
            days_to_keep: Number of days to keep logs
        """
        if not self.config.log_dir.exists():
            return
        cutoff_time = datetime.now().timestamp() - (days_to_keep * 24 * 60 * 60)
        for log_file in self.config.log_dir.glob("*.log*"):
            try:
                if log_file.stat().st_mtime < cutoff_time:
                    log_file.unlink()
            except OSError as e:
                self.get_logger("axisbrowser.logger").warning(
                    f"Could not remove old log file {log_file}: {e}"
                )


_logger_manager = LoggerManager()
if os.environ.get("AXIS_DEBUG", "").lower() in ("1", "true", "yes"):
    _logger_manager.enable_debug_mode()


def get_logger(name: Optional[str] = None) -> ThreadSafeLogger:
    """
    Get a logger instance.

    Args:
        name: Logger name (defaults to calling module)

    Returns:
        ThreadSafeLogger instance
    """
    if name is None:
        import inspect

        frame = inspect.currentframe()
        try:
            name = frame.f_back.f_globals.get("__name__", "unknown")
        finally:
            del frame
    return _logger_manager.get_logger(name)


def set_console_log_level(level: Union[LogLevel, str]):
    """
    Set console logging level globally.

    Args:
        level: LogLevel enum or string ('DEBUG', 'INFO', etc.)
    """
    if isinstance(level, str):
        level = LogLevel[level.upper()]
    _logger_manager.set_console_level(level)


def set_log_to_file_enabled(enabled: bool):
    """Turn the rotating log files on or off for every logger."""
    _logger_manager.set_log_to_file(enabled)


def enable_debug_mode():
    _logger_manager.enable_debug_mode()


def cleanup_old_logs(days_to_keep: int = 30):
    _logger_manager.cleanup_old_logs(days_to_keep)


def log_app_start():
    logger = get_logger("axisbrowser.startup")
    logger.info("Axis Browser starting up")
    cleanup_old_logs()


def log_app_shutdown():
    logger = get_logger("axisbrowser.shutdown")
    logger.info("Axis Browser shutting down")


def log_tab_event(event_type: str, tab_id: int, details: str = ""):
    """
    Log tab-related events.

    Args:
        event_type: Type of event (created, closed, pinned, etc.)
        tab_id: Identifier of the tab
        details: Additional details about the event
    """
    logger = get_logger("axisbrowser.tabs")
    message = f"Tab {tab_id} {event_type}"
    if details:
        message += f": {details}"
    logger.info(message)


def log_folder_event(event_type: str, folder_name: str, details: str = ""):
    """
    Log folder-related events.

    Args:
        event_type: Type of event (created, deleted, renamed, etc.)
        folder_name: Name of the folder
        details: Additional details about the event
    """
    logger = get_logger("axisbrowser.folders")
    message = f"Folder '{folder_name}' {event_type}"
    if details:
        message += f": {details}"
    logger.info(message)


def log_error_with_context(error: Exception, context: str, logger_name: Optional[str] = None):
    """
    Log an error with context information.

    Args:
        error: Exception that occurred
        context: Context where the error occurred
        logger_name: Name of logger to use (auto-detected if None)
    """
    logger = get_logger(logger_name)
    logger.error(f"Error in {context}: {str(error)}", exc_info=True)
