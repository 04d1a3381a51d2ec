# axisbrowser/views/webkit.py
"""WebKitGTK implementation of the view contract."""

from typing import Any, Callable, Optional

import gi

gi.require_version("Gtk", "4.0")
gi.require_version("WebKit", "6.0")

from gi.repository import GLib, WebKit

from ..utils.exceptions import ViewCreationError
from ..utils.logger import get_logger
from ..utils.security import get_origin
from .contract import LOAD_ERROR_ABORTED, ViewEvent, ViewSignals

# WebKit.NetworkError.CANCELLED and WebKit.PolicyError.FRAME_LOAD_INTERRUPTED_BY_POLICY_CHANGE
_ABORT_CODES = (302, 102)


class WebKitViewHandle:
    """Wraps a ``WebKit.WebView`` and translates its signals into view events."""

    def __init__(self, owner_id: Any, web_view: "WebKit.WebView"):
        self.logger = get_logger("axisbrowser.views.webkit")
        self.owner_id = owner_id
        self.widget = web_view
        self.signals = ViewSignals(owner_id)
        self.is_ready = False
        self._destroyed = False
        self._gtk_handlers = [
            web_view.connect("load-changed", self._on_load_changed),
            web_view.connect("load-failed", self._on_load_failed),
            web_view.connect("notify::title", self._on_title_changed),
            web_view.connect("notify::uri", self._on_uri_changed),
            web_view.connect("notify::favicon", self._on_favicon_changed),
        ]
        # Handlers are connected after create() returns, so readiness is
        # announced from the main loop.
        self._ready_source = GLib.idle_add(self._announce_ready)

    def _announce_ready(self) -> bool:
        self._ready_source = None
        if not self._destroyed:
            self.is_ready = True
            self.signals.emit(ViewEvent.READY)
        return False

    # Contract

    def load(self, url: str) -> None:
        self.widget.load_uri(url)

    def stop(self) -> None:
        self.widget.stop_loading()

    def reload(self) -> None:
        self.widget.reload()

    def get_url(self) -> Optional[str]:
        return self.widget.get_uri()

    def get_title(self) -> Optional[str]:
        return self.widget.get_title()

    def go_back(self) -> None:
        self.widget.go_back()

    def go_forward(self) -> None:
        self.widget.go_forward()

    def can_go_back(self) -> bool:
        return bool(self.widget.can_go_back())

    def can_go_forward(self) -> bool:
        return bool(self.widget.can_go_forward())

    def set_zoom(self, factor: float) -> None:
        self.widget.set_zoom_level(factor)

    def show(self) -> None:
        self.widget.set_visible(True)

    def hide(self) -> None:
        self.widget.set_visible(False)

    def destroy(self) -> None:
        if self._destroyed:
            return
        self._destroyed = True
        if self._ready_source is not None:
            GLib.source_remove(self._ready_source)
            self._ready_source = None
        for handler_id in self._gtk_handlers:
            self.widget.disconnect(handler_id)
        self._gtk_handlers = []
        self.signals.disconnect_all()
        self.widget.try_close()
        parent = self.widget.get_parent()
        if parent is not None and hasattr(parent, "remove"):
            parent.remove(self.widget)
        self.logger.debug(f"Destroyed view for {self.owner_id}")

    def connect(self, event: str, handler: Callable[..., Any]) -> int:
        return self.signals.connect(event, handler)

    def disconnect(self, handler_id: int) -> None:
        self.signals.disconnect(handler_id)

    # WebKit signals

    def _on_load_changed(self, web_view, load_event):
        if load_event == WebKit.LoadEvent.STARTED:
            self.signals.emit(ViewEvent.LOAD_START)
        elif load_event == WebKit.LoadEvent.COMMITTED:
            self.signals.emit(ViewEvent.NAVIGATED, web_view.get_uri())
        elif load_event == WebKit.LoadEvent.FINISHED:
            self.signals.emit(ViewEvent.LOAD_FINISH)

    def _on_load_failed(self, web_view, load_event, failing_uri, error) -> bool:
        code = getattr(error, "code", 0)
        if code in _ABORT_CODES:
            code = LOAD_ERROR_ABORTED
        self.logger.debug(f"WebKit load of {failing_uri} failed on {self.owner_id}: {error}")
        self.signals.emit(ViewEvent.LOAD_FAIL, code)
        # The load supervisor decides what to show instead.
        return True

    def _on_title_changed(self, web_view, _pspec):
        title = web_view.get_title()
        if title:
            self.signals.emit(ViewEvent.TITLE_UPDATED, title)

    def _on_uri_changed(self, web_view, _pspec):
        # A uri change outside a load is a same-document navigation.
        if not web_view.is_loading():
            self.signals.emit(ViewEvent.NAVIGATED_IN_PAGE, web_view.get_uri())

    def _on_favicon_changed(self, web_view, _pspec):
        if web_view.get_favicon() is None:
            return
        origin = get_origin(web_view.get_uri())
        if origin:
            self.signals.emit(ViewEvent.FAVICON_UPDATED, f"{origin}/favicon.ico")


class WebKitViewFactory:
    """
    Creates one ``WebKit.WebView`` per owner, sharing a network session.

    When a ``container`` (any GTK widget with ``append``) is given, new views
    are added to it hidden; the registry shows the active one.
    """

    def __init__(self, network_session: Optional["WebKit.NetworkSession"] = None, container: Any = None):
        self.logger = get_logger("axisbrowser.views.webkit")
        self.network_session = network_session
        self.container = container

    def create(self, owner_id: Any) -> WebKitViewHandle:
        try:
            if self.network_session is not None:
                web_view = WebKit.WebView(network_session=self.network_session)
            else:
                web_view = WebKit.WebView()
        except GLib.Error as e:
            raise ViewCreationError(owner_id, str(e)) from e
        web_view.set_hexpand(True)
        web_view.set_vexpand(True)
        if self.container is not None:
            web_view.set_visible(False)
            self.container.append(web_view)
        self.logger.debug(f"Created WebKit view for {owner_id}")
        return WebKitViewHandle(owner_id, web_view)
