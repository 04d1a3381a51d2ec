# axisbrowser/views/contract.py
"""
Interface between the session core and the page-rendering engine.

A view is an opaque browsing surface owned by exactly one tab or split pane.
Creation returns immediately; the view reports ``ready`` once it can accept
loads, and reports page lifecycle through the events listed in ``ViewEvent``.
"""

import itertools
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from ..utils.logger import get_logger

# Load failure code reported when a navigation was cancelled by a newer one.
LOAD_ERROR_ABORTED = -3


class ViewEvent:
    READY = "ready"
    LOAD_START = "load-start"
    LOAD_FINISH = "load-finish"
    LOAD_FAIL = "load-fail"
    TITLE_UPDATED = "title-updated"
    FAVICON_UPDATED = "favicon-updated"
    NAVIGATED = "navigated"
    NAVIGATED_IN_PAGE = "navigated-in-page"

    ALL = (
        READY,
        LOAD_START,
        LOAD_FINISH,
        LOAD_FAIL,
        TITLE_UPDATED,
        FAVICON_UPDATED,
        NAVIGATED,
        NAVIGATED_IN_PAGE,
    )


class ViewHandle(Protocol):
    is_ready: bool

    def load(self, url: str) -> None: ...

    def stop(self) -> None: ...

    def reload(self) -> None: ...

    def get_url(self) -> Optional[str]: ...

    def get_title(self) -> Optional[str]: ...

    def go_back(self) -> None: ...

    def go_forward(self) -> None: ...

    def can_go_back(self) -> bool: ...

    def can_go_forward(self) -> bool: ...

    def set_zoom(self, factor: float) -> None: ...

    def show(self) -> None: ...

    def hide(self) -> None: ...

    def destroy(self) -> None: ...

    def connect(self, event: str, handler: Callable[..., Any]) -> int: ...

    def disconnect(self, handler_id: int) -> None: ...


class ViewFactory(Protocol):
    def create(self, owner_id: Any) -> ViewHandle: ...


class ViewSignals:
    """
    Handler bookkeeping shared by view implementations.

    Handlers run synchronously in connection order; a failing handler is
    logged and the remaining handlers still run.
    """

    def __init__(self, owner_id: Any = None):
        self.logger = get_logger("axisbrowser.views.signals")
        self.owner_id = owner_id
        self._handlers: Dict[int, Tuple[str, Callable[..., Any]]] = {}
        self._handler_ids = itertools.count(1)

    def connect(self, event: str, handler: Callable[..., Any]) -> int:
        if event not in ViewEvent.ALL:
            raise ValueError(f"Unknown view event: {event}")
        handler_id = next(self._handler_ids)
        self._handlers[handler_id] = (event, handler)
        return handler_id

    def disconnect(self, handler_id: int) -> None:
        self._handlers.pop(handler_id, None)

    def disconnect_all(self) -> None:
        self._handlers.clear()

    def handlers_for(self, event: str) -> List[Callable[..., Any]]:
        return [handler for name, handler in self._handlers.values() if name == event]

    def emit(self, event: str, *args: Any) -> None:
        for handler in self.handlers_for(event):
            try:
                handler(*args)
            except Exception as e:
                self.logger.error(f"View handler for '{event}' on {self.owner_id} failed: {e}")
