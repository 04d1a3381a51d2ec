# tests/test_webkit.py
"""
Tests for the WebKit view handle against the mocked gi module.
"""

import os
import sys
from unittest.mock import MagicMock

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from conftest import GI_MOCKED  # noqa: E402

pytestmark = pytest.mark.skipif(not GI_MOCKED, reason="Requires the mocked gi module")


@pytest.fixture
def web_view():
    widget = MagicMock()
    widget.get_uri.return_value = "https://a.example/page"
    widget.get_title.return_value = "Page"
    widget.is_loading.return_value = False
    return widget


@pytest.fixture
def handle(web_view):
    from axisbrowser.views.webkit import WebKitViewHandle

    return WebKitViewHandle(1, web_view)


@pytest.fixture
def fired(handle):
    from axisbrowser.views.contract import ViewEvent

    collected = []
    for event in ViewEvent.ALL:
        handle.connect(event, lambda *args, event=event: collected.append((event, args)))
    return collected


class TestSignalMapping:
    """Tests for WebKit signals turned into view events."""

    def test_ready_announced_from_idle(self, handle, fired):
        """Test readiness is reported once the idle callback runs."""
        from axisbrowser.views.contract import ViewEvent

        assert handle.is_ready is False
        assert handle._announce_ready() is False
        assert handle.is_ready is True
        assert fired == [(ViewEvent.READY, ())]

    def test_load_changed(self, handle, web_view, fired):
        """Test started, committed and finished map to lifecycle events."""
        from gi.repository import WebKit

        from axisbrowser.views.contract import ViewEvent

        handle._on_load_changed(web_view, WebKit.LoadEvent.STARTED)
        handle._on_load_changed(web_view, WebKit.LoadEvent.COMMITTED)
        handle._on_load_changed(web_view, WebKit.LoadEvent.FINISHED)

        assert fired == [
            (ViewEvent.LOAD_START, ()),
            (ViewEvent.NAVIGATED, ("https://a.example/page",)),
            (ViewEvent.LOAD_FINISH, ()),
        ]

    @pytest.mark.parametrize("code, expected", [(302, -3), (102, -3), (2, 2)])
    def test_load_failed_codes(self, handle, web_view, fired, code, expected):
        """Test cancellation codes are reported as aborted loads."""
        from axisbrowser.views.contract import ViewEvent

        error = MagicMock()
        error.code = code

        assert handle._on_load_failed(web_view, None, "https://a.example", error) is True
        assert fired == [(ViewEvent.LOAD_FAIL, (expected,))]

    def test_uri_change_outside_load_is_in_page(self, handle, web_view, fired):
        """Test a uri change without a load is a same-document navigation."""
        from axisbrowser.views.contract import ViewEvent

        handle._on_uri_changed(web_view, None)
        web_view.is_loading.return_value = True
        handle._on_uri_changed(web_view, None)

        assert fired == [(ViewEvent.NAVIGATED_IN_PAGE, ("https://a.example/page",))]

    def test_title_and_favicon(self, handle, web_view, fired):
        """Test title and favicon changes are forwarded."""
        from axisbrowser.views.contract import ViewEvent

        handle._on_title_changed(web_view, None)
        handle._on_favicon_changed(web_view, None)
        web_view.get_favicon.return_value = None
        handle._on_favicon_changed(web_view, None)

        assert fired == [
            (ViewEvent.TITLE_UPDATED, ("Page",)),
            (ViewEvent.FAVICON_UPDATED, ("https://a.example/favicon.ico",)),
        ]


class TestHandleContract:
    """Tests for the commands sent to the widget."""

    def test_commands_forwarded(self, handle, web_view):
        """Test contract calls reach the WebKit widget."""
        handle.load("https://b.example")
        handle.set_zoom(1.5)
        handle.hide()

        web_view.load_uri.assert_called_once_with("https://b.example")
        web_view.set_zoom_level.assert_called_once_with(1.5)
        web_view.set_visible.assert_called_with(False)

    def test_destroy_detaches(self, handle, web_view, fired):
        """Test destroy closes the widget and silences further events."""
        from axisbrowser.views.contract import ViewEvent

        parent = MagicMock()
        web_view.get_parent.return_value = parent

        handle.destroy()
        handle.destroy()
        handle.signals.emit(ViewEvent.LOAD_START)

        web_view.try_close.assert_called_once()
        parent.remove.assert_called_once_with(web_view)
        assert handle._announce_ready() is False
        assert handle.is_ready is False
        assert fired == []

    def test_factory_appends_hidden_view(self):
        """Test the factory adds new views to the container hidden."""
        from axisbrowser.views.webkit import WebKitViewFactory, WebKitViewHandle

        container = MagicMock()
        handle = WebKitViewFactory(container=container).create("pane:left")

        assert isinstance(handle, WebKitViewHandle)
        assert handle.owner_id == "pane:left"
        handle.widget.set_visible.assert_called_with(False)
        container.append.assert_called_once_with(handle.widget)
