# axisbrowser/core/__init__.py
"""Core infrastructure modules for Axis Browser."""

from .events import EventKind, SessionEvent, SessionEvents
from .scheduler import GLibScheduler, Scheduler

__all__ = ["EventKind", "SessionEvent", "SessionEvents", "Scheduler", "GLibScheduler"]
