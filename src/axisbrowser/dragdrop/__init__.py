# axisbrowser/dragdrop/__init__.py

from .engine import DragDropEngine, DragState
from .geometry import (
    DropIntent,
    DropIntentKind,
    Hover,
    HoverKind,
    Row,
    SidebarLayout,
    classify,
)

__all__ = [
    "DragDropEngine",
    "DragState",
    "DropIntent",
    "DropIntentKind",
    "Hover",
    "HoverKind",
    "Row",
    "SidebarLayout",
    "classify",
]
