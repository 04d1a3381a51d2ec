# tests/test_loader.py
"""
Tests for load supervision: stalled loads, retries and the error page.
"""

import os
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

URL = "https://a.example"


@pytest.fixture
def view():
    from conftest import FakeView

    return FakeView("tab:1")


@pytest.fixture
def events():
    from axisbrowser.core.events import SessionEvents

    return SessionEvents()


@pytest.fixture
def received(events):
    collected = []
    events.connect(collected.append)
    return collected


@pytest.fixture
def supervisor(view, scheduler, events):
    from axisbrowser.views.loader import LoadSupervisor

    return LoadSupervisor(view, 1, scheduler, events, timeout=30.0, max_retries=3, retry_delay=1.0).attach()


class TestStalledLoads:
    """Tests for the load timeout."""

    def test_stall_stops_view_and_warns(self, view, scheduler, supervisor, received):
        """Test a load that never finishes is stopped after the timeout."""
        from axisbrowser.views.contract import ViewEvent

        supervisor.load(URL)
        view.fire(ViewEvent.LOAD_START)

        scheduler.advance(29.0)
        assert view.stopped == 0

        scheduler.advance(1.5)
        assert view.stopped == 1
        stalled = [e for e in received if e.kind == "load-stalled"]
        assert len(stalled) == 1
        assert stalled[0].payload["url"] == URL
        assert stalled[0].payload["owner"] == 1
        assert supervisor.is_loading is False

    def test_finish_cancels_timeout(self, view, scheduler, supervisor, received):
        """Test a finished load leaves no timer behind."""
        from axisbrowser.views.contract import ViewEvent

        supervisor.load(URL)
        view.fire(ViewEvent.LOAD_START)
        view.fire(ViewEvent.LOAD_FINISH)
        scheduler.advance(60.0)

        assert view.stopped == 0
        assert scheduler.pending == 0
        assert received == []

    def test_stall_leaves_tab_untouched(self, session, registry, view_factory, scheduler):
        """Test a stalled load does not change the tab's url or history."""
        from axisbrowser.views.contract import ViewEvent

        tab_id = registry.create_tab(URL)
        view_factory.created[tab_id].fire(ViewEvent.LOAD_START)
        scheduler.advance(31.0)

        tab = session.tabs[tab_id]
        assert view_factory.created[tab_id].stopped == 1
        assert tab.url == URL
        assert tab.history.entries == [URL]


class TestRetries:
    """Tests for retrying failed loads."""

    def test_retry_then_error_page(self, view, scheduler, supervisor, received):
        """Test failures are retried up to the limit, then the error page loads."""
        from axisbrowser.views.contract import ViewEvent

        supervisor.load(URL)
        for _ in range(3):
            view.fire(ViewEvent.LOAD_FAIL, 1)
            assert supervisor.retry_pending is True
            scheduler.advance(1.0)

        assert view.loaded == [URL] * 4

        view.fire(ViewEvent.LOAD_FAIL, 1)

        assert view.loaded[-1] == "axis://error?code=1&url=https%3A%2F%2Fa.example"
        failed = [e for e in received if e.kind == "load-failed"]
        assert len(failed) == 1
        assert failed[0].payload["attempts"] == 3
        assert failed[0].payload["code"] == 1

    def test_aborted_load_not_retried(self, view, scheduler, supervisor, received):
        """Test a load cancelled by a newer navigation is ignored."""
        from axisbrowser.views.contract import LOAD_ERROR_ABORTED, ViewEvent

        supervisor.load(URL)
        view.fire(ViewEvent.LOAD_FAIL, LOAD_ERROR_ABORTED)

        assert supervisor.retry_pending is False
        assert scheduler.pending == 0
        assert received == []

    def test_error_page_failure_not_retried(self, view, scheduler, events, received):
        """Test a failing error page does not loop."""
        from axisbrowser.views.contract import ViewEvent
        from axisbrowser.views.loader import LoadSupervisor

        supervisor = LoadSupervisor(view, 1, scheduler, events, max_retries=0).attach()
        supervisor.load(URL)
        view.fire(ViewEvent.LOAD_FAIL, 7)
        loads = len(view.loaded)

        view.fire(ViewEvent.LOAD_FAIL, 7)

        assert len(view.loaded) == loads
        assert len([e for e in received if e.kind == "load-failed"]) == 1

    def test_new_load_resets_budget(self, view, scheduler, supervisor):
        """Test a fresh navigation starts with a full retry budget."""
        from axisbrowser.views.contract import ViewEvent

        supervisor.load(URL)
        view.fire(ViewEvent.LOAD_FAIL, 1)
        assert supervisor.attempts == 1

        supervisor.load("https://b.example")
        assert supervisor.attempts == 0
        assert supervisor.retry_pending is False

    def test_detach_cancels_timers(self, view, scheduler, supervisor):
        """Test detaching drops pending timers and handlers."""
        from axisbrowser.views.contract import ViewEvent

        supervisor.load(URL)
        view.fire(ViewEvent.LOAD_START)
        supervisor.detach()

        assert scheduler.pending == 0
        assert view.signals.handlers_for(ViewEvent.LOAD_START) == []


class TestErrorPageUrl:
    """Tests for the internal error page address."""

    def test_build_error_page_url(self):
        """Test code and url are query-encoded."""
        from axisbrowser.views.loader import build_error_page_url

        assert build_error_page_url(-2, "https://x.example/?a=1") == (
            "axis://error?code=-2&url=https%3A%2F%2Fx.example%2F%3Fa%3D1"
        )
        assert build_error_page_url(5, None) == "axis://error?code=5&url="


class TestGLibScheduler:
    """Tests for the main-loop scheduler against the mocked GLib."""

    def test_call_later_uses_timeout_add(self):
        """Test delays are converted to milliseconds and fire once."""
        from conftest import GI_MOCKED

        if not GI_MOCKED:
            pytest.skip("Requires the mocked gi module")

        from gi.repository import GLib

        from axisbrowser.core.scheduler import GLibScheduler

        GLib.timeout_add.return_value = 77
        calls = []
        scheduler = GLibScheduler()
        handle = scheduler.call_later(1.5, lambda: calls.append(1))

        assert handle == 77
        delay, fire = GLib.timeout_add.call_args[0]
        assert delay == 1500
        assert scheduler.pending_count == 1

        assert fire() is False
        assert calls == [1]
        assert scheduler.pending_count == 0

    def test_cancel_removes_source(self):
        """Test cancelling a pending timer removes its GLib source."""
        from conftest import GI_MOCKED

        if not GI_MOCKED:
            pytest.skip("Requires the mocked gi module")

        from gi.repository import GLib

        from axisbrowser.core.scheduler import GLibScheduler

        GLib.timeout_add.return_value = 78
        scheduler = GLibScheduler()
        handle = scheduler.call_later(1.0, lambda: None)
        scheduler.cancel(handle)

        GLib.source_remove.assert_called_with(78)
        assert scheduler.pending_count == 0
