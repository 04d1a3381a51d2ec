# axisbrowser/core/scheduler.py
"""
Timer scheduling on the main loop.

Everything in the session core runs on one thread. Deferred work (load
timeouts, retry delays) is registered through a ``Scheduler`` so the GLib main
loop can drive it in the application and a manual clock can drive it in tests.
"""

from typing import Any, Callable, Dict, Protocol

from ..utils.logger import get_logger


class Scheduler(Protocol):
    """One-shot timers: ``call_later`` returns a handle accepted by ``cancel``."""

    def call_later(self, seconds: float, callback: Callable[[], Any]) -> Any: ...

    def cancel(self, handle: Any) -> None: ...


class GLibScheduler:
    """Scheduler backed by ``GLib.timeout_add``."""

    def __init__(self):
        self.logger = get_logger("axisbrowser.core.scheduler")
        self._sources: Dict[int, Callable[[], Any]] = {}

    def call_later(self, seconds: float, callback: Callable[[], Any]) -> int:
        from gi.repository import GLib

        source_id = None

        def _fire():
            self._sources.pop(source_id, None)
            try:
                callback()
            except Exception as e:
                self.logger.error(f"Scheduled callback failed: {e}")
            # Returning False removes the source (one-shot).
            return False

        source_id = GLib.timeout_add(max(0, int(seconds * 1000)), _fire)
        self._sources[source_id] = callback
        return source_id

    def cancel(self, handle: Any) -> None:
        if handle is None or handle not in self._sources:
            return
        from gi.repository import GLib

        self._sources.pop(handle, None)
        GLib.source_remove(handle)

    def cancel_all(self) -> None:
        for handle in list(self._sources):
            self.cancel(handle)

    @property
    def pending_count(self) -> int:
        return len(self._sources)
