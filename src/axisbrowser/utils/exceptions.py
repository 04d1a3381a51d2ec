"""
Custom exceptions for Axis Browser.

This module defines custom exception classes that provide more specific
error handling and better debugging information throughout the application.

Most session operations never raise: unknown ids are no-ops and benign
"nothing to do" cases are reported through ``OperationResult``. The classes
below cover storage, configuration, view creation and programming errors.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification."""

    SESSION = "session"
    DRAG = "drag"
    VIEW = "view"
    STORAGE = "storage"
    CONFIG = "config"
    VALIDATION = "validation"
    SYSTEM = "system"


class AxisBrowserError(Exception):
    """Base exception class for all Axis Browser errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        details: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
    ):
        """
        Initialize base exception.

        Args:
            message: Technical error message for logging
            category: Error category for classification
            severity: Error severity level
            details: Additional details for debugging
            user_message: User-friendly message for display
        """
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.details = details or {}
        self.user_message = user_message or self._generate_user_message()

    def _generate_user_message(self) -> str:
        category_messages = {
            ErrorCategory.SESSION: "A tab or folder error occurred",
            ErrorCategory.DRAG: "A drag and drop error occurred",
            ErrorCategory.VIEW: "A page view error occurred",
            ErrorCategory.STORAGE: "A data storage error occurred",
            ErrorCategory.CONFIG: "A configuration error occurred",
            ErrorCategory.VALIDATION: "A validation error occurred",
            ErrorCategory.SYSTEM: "A system error occurred",
        }
        return category_messages.get(self.category, "An unexpected error occurred")

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "details": self.details,
            "user_message": self.user_message,
        }

    def __str__(self) -> str:
        return f"[{self.category.value.upper()}:{self.severity.value.upper()}] {self.message}"


# Session-related exceptions
class SessionError(AxisBrowserError):
    """Base class for tab/folder model errors."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("category", ErrorCategory.SESSION)
        super().__init__(message, **kwargs)


class InvariantViolationError(SessionError):
    """Raised when the session model is found in an inconsistent state."""

    def __init__(self, violations: list, **kwargs):
        message = f"Session invariants violated: {'; '.join(violations)}"
        kwargs.setdefault("severity", ErrorSeverity.CRITICAL)
        kwargs.setdefault("details", {"violations": violations})
        kwargs.setdefault("user_message", "The tab list is in an inconsistent state")
        super().__init__(message, **kwargs)
        self.violations = violations


class DragStateError(AxisBrowserError):
    """Raised when a drag gesture is driven out of order."""

    def __init__(self, state: str, operation: str, **kwargs):
        message = f"Cannot {operation} while drag engine is {state}"
        kwargs.setdefault("category", ErrorCategory.DRAG)
        kwargs.setdefault("severity", ErrorSeverity.LOW)
        kwargs.setdefault("details", {"state": state, "operation": operation})
        super().__init__(message, **kwargs)


# View-related exceptions
class ViewError(AxisBrowserError):
    """Base class for rendering surface errors."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("category", ErrorCategory.VIEW)
        super().__init__(message, **kwargs)


class ViewCreationError(ViewError):
    """Raised when the rendering engine cannot provide a view."""

    def __init__(self, owner_id: Any, reason: str, **kwargs):
        message = f"Failed to create view for '{owner_id}': {reason}"
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        kwargs.setdefault("details", {"owner_id": owner_id, "reason": reason})
        kwargs.setdefault("user_message", "Could not open a page view")
        super().__init__(message, **kwargs)


# Storage-related exceptions
class StorageError(AxisBrowserError):
    """Base class for storage-related errors."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("category", ErrorCategory.STORAGE)
        super().__init__(message, **kwargs)


class StorageReadError(StorageError):
    """Raised when reading from storage fails."""

    def __init__(self, file_path: str, reason: str, **kwargs):
        message = f"Failed to read from '{file_path}': {reason}"
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        kwargs.setdefault("details", {"file_path": file_path, "reason": reason})
        kwargs.setdefault("user_message", "Could not load saved data")
        super().__init__(message, **kwargs)


class StorageWriteError(StorageError):
    """Raised when writing to storage fails."""

    def __init__(self, file_path: str, reason: str, **kwargs):
        message = f"Failed to write to '{file_path}': {reason}"
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        kwargs.setdefault("details", {"file_path": file_path, "reason": reason})
        kwargs.setdefault("user_message", "Could not save data")
        super().__init__(message, **kwargs)


class StorageCorruptedError(StorageError):
    """Raised when storage data is corrupted."""

    def __init__(self, file_path: str, details: str = "", **kwargs):
        message = f"Storage file '{file_path}' is corrupted"
        if details:
            message += f": {details}"
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        kwargs.setdefault("details", {"file_path": file_path, "corruption_details": details})
        kwargs.setdefault("user_message", "Saved data appears to be corrupted")
        super().__init__(message, **kwargs)


# Configuration-related exceptions
class ConfigError(AxisBrowserError):
    """Base class for configuration-related errors."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("category", ErrorCategory.CONFIG)
        super().__init__(message, **kwargs)


class ConfigValidationError(ConfigError):
    """Raised when configuration validation fails."""

    def __init__(self, config_key: str, value: Any, reason: str, **kwargs):
        message = f"Invalid configuration for '{config_key}' (value: {value}): {reason}"
        kwargs.setdefault("severity", ErrorSeverity.MEDIUM)
        kwargs.setdefault("details", {"config_key": config_key, "value": value, "reason": reason})
        kwargs.setdefault("user_message", f"Configuration error: {reason}")
        super().__init__(message, **kwargs)


def handle_exception(
    exception: Exception,
    context: str = "",
    logger_name: Optional[str] = None,
    reraise: bool = False,
) -> Optional[AxisBrowserError]:
    """
    Handle an exception by logging it and optionally converting to AxisBrowserError.

    Args:
        exception: Exception to handle
        context: Context where the exception occurred
        logger_name: Logger name to use
        reraise: Whether to re-raise the exception

    Returns:
        AxisBrowserError if conversion was done, None otherwise
    """
    from .logger import log_error_with_context

    log_error_with_context(exception, context, logger_name)

    if isinstance(exception, AxisBrowserError):
        converted_exception = exception
    else:
        converted_exception = AxisBrowserError(
            message=str(exception),
            details={"original_type": type(exception).__name__, "context": context},
        )

    if reraise:
        raise converted_exception from exception

    return converted_exception
