# axisbrowser/session/__init__.py
"""Tab and folder session model."""

from .models import ClosedTabRecord, Folder, ItemKind, NavigationHistory, Side, Tab, TopLevelItem
from .organizer import PinFolderOrganizer
from .persistence import SessionPersistence
from .registry import TabRegistry
from .results import OperationResult, OrderChange
from .state import EventKind, Session, SessionEvent, SessionEvents

__all__ = [
    "ClosedTabRecord",
    "EventKind",
    "Folder",
    "ItemKind",
    "NavigationHistory",
    "OperationResult",
    "OrderChange",
    "PinFolderOrganizer",
    "Session",
    "SessionEvent",
    "SessionEvents",
    "SessionPersistence",
    "Side",
    "Tab",
    "TabRegistry",
    "TopLevelItem",
]
