# axisbrowser/core/events.py
"""
Ordered change notification for the session.

Listeners run synchronously, in connection order, on the thread that emits.
A failing listener is logged and the remaining listeners still run.
"""

import itertools
from dataclasses import dataclass, field
from typing import Any, Callable, Dict

from ..utils.logger import get_logger


class EventKind:
    """Names of the notifications emitted on ``Session.events``."""

    TAB_CREATED = "tab-created"
    TAB_CLOSED = "tab-closed"
    TAB_UPDATED = "tab-updated"
    ACTIVE_CHANGED = "active-changed"
    HISTORY_CHANGED = "history-changed"
    ORDER_CHANGED = "order-changed"
    FOLDER_CREATED = "folder-created"
    FOLDER_DELETED = "folder-deleted"
    FOLDER_UPDATED = "folder-updated"
    DRAG_HOVER = "drag-hover"
    DRAG_ENDED = "drag-ended"
    LOAD_STALLED = "load-stalled"
    LOAD_FAILED = "load-failed"
    SPLIT_CHANGED = "split-changed"
    CLOSED_STACK_CHANGED = "closed-stack-changed"


@dataclass(frozen=True)
class SessionEvent:
    kind: str
    payload: Dict[str, Any] = field(default_factory=dict)
    # Structural events change what the persistence bridge stores.
    structural: bool = False


SessionListener = Callable[[SessionEvent], None]


class SessionEvents:
    """Observer channel with ``connect``/``disconnect``/``emit``."""

    def __init__(self):
        self.logger = get_logger("axisbrowser.core.events")
        self._listeners: Dict[int, SessionListener] = {}
        self._handler_ids = itertools.count(1)

    def connect(self, listener: SessionListener) -> int:
        handler_id = next(self._handler_ids)
        self._listeners[handler_id] = listener
        return handler_id

    def disconnect(self, handler_id: int) -> bool:
        return self._listeners.pop(handler_id, None) is not None

    def emit(self, kind: str, structural: bool = False, **payload: Any) -> SessionEvent:
        event = SessionEvent(kind, payload, structural)
        for handler_id, listener in list(self._listeners.items()):
            try:
                listener(event)
            except Exception as e:
                self.logger.error(f"Listener {handler_id} failed for '{kind}': {e}")
        return event

    def __len__(self) -> int:
        return len(self._listeners)
