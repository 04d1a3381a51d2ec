# tests/conftest.py
"""
Pytest configuration for Axis Browser tests.

This module configures the test environment, including path setup, mock
configurations for GTK-dependent modules and the fakes that stand in for the
rendering engine and the main loop.
"""

import os
import sys
from unittest.mock import MagicMock

import pytest

# Add src directory to Python path
src_path = os.path.join(os.path.dirname(__file__), "..", "src")
sys.path.insert(0, src_path)

# Mock GTK/GObject imports before any axisbrowser imports
# This allows testing non-GTK code without requiring a display


def mock_gi_module():
    """Create a mock gi module to prevent GTK import errors."""
    mock_gi = MagicMock()
    mock_gi.require_version = MagicMock()

    # Mock repository classes
    mock_repository = MagicMock()
    mock_repository.Gtk = MagicMock()
    mock_repository.Gdk = MagicMock()
    mock_repository.Adw = MagicMock()
    mock_repository.Gio = MagicMock()
    mock_repository.GLib = MagicMock()
    mock_repository.GObject = MagicMock()
    mock_repository.WebKit = MagicMock()

    mock_gi.repository = mock_repository

    return mock_gi


GI_MOCKED = "DISPLAY" not in os.environ and "WAYLAND_DISPLAY" not in os.environ

# Only mock gi if not in a GTK environment
if GI_MOCKED:
    sys.modules["gi"] = mock_gi_module()
    sys.modules["gi.repository"] = sys.modules["gi"].repository


from axisbrowser.views.contract import ViewEvent, ViewSignals  # noqa: E402


class FakeView:
    """In-memory view that records calls and lets tests fire view events."""

    def __init__(self, owner_id, ready=True):
        self.owner_id = owner_id
        self.signals = ViewSignals(owner_id)
        self.is_ready = ready
        self.loaded = []
        self.url = None
        self.title = None
        self.zoom = 1.0
        self.visible = False
        self.destroyed = False
        self.stopped = 0
        self.reloaded = 0
        self.back_list = []
        self.forward_list = []

    def load(self, url):
        self.loaded.append(url)
        if self.url:
            self.back_list.append(self.url)
        self.forward_list = []
        self.url = url

    def stop(self):
        self.stopped += 1

    def reload(self):
        self.reloaded += 1

    def get_url(self):
        return self.url

    def get_title(self):
        return self.title

    def go_back(self):
        if self.back_list:
            self.forward_list.append(self.url)
            self.url = self.back_list.pop()
            self.fire(ViewEvent.NAVIGATED, self.url)

    def go_forward(self):
        if self.forward_list:
            self.back_list.append(self.url)
            self.url = self.forward_list.pop()
            self.fire(ViewEvent.NAVIGATED, self.url)

    def can_go_back(self):
        return bool(self.back_list)

    def can_go_forward(self):
        return bool(self.forward_list)

    def set_zoom(self, factor):
        self.zoom = factor

    def show(self):
        self.visible = True

    def hide(self):
        self.visible = False

    def destroy(self):
        self.destroyed = True

    def connect(self, event, handler):
        return self.signals.connect(event, handler)

    def disconnect(self, handler_id):
        self.signals.disconnect(handler_id)

    def fire(self, event, *args):
        self.signals.emit(event, *args)

    def become_ready(self):
        self.is_ready = True
        self.fire(ViewEvent.READY)


class FakeViewFactory:
    def __init__(self, ready=True):
        self.ready = ready
        self.created = {}

    def create(self, owner_id):
        view = FakeView(owner_id, ready=self.ready)
        self.created[owner_id] = view
        return view


class ManualScheduler:
    """Scheduler driven by ``advance`` instead of a main loop."""

    def __init__(self):
        self.now = 0.0
        self._timers = {}
        self._next_handle = 1

    def call_later(self, seconds, callback):
        handle = self._next_handle
        self._next_handle += 1
        self._timers[handle] = (self.now + seconds, callback)
        return handle

    def cancel(self, handle):
        self._timers.pop(handle, None)

    @property
    def pending(self):
        return len(self._timers)

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = [(when, handle) for handle, (when, _cb) in self._timers.items() if when <= target]
            if not due:
                break
            when, handle = min(due)
            _when, callback = self._timers.pop(handle)
            self.now = when
            callback()
        self.now = target


class Recorder:
    """Collects every event emitted on a session channel."""

    def __init__(self, session):
        self.events = []
        session.events.connect(self.events.append)

    def kinds(self):
        return [event.kind for event in self.events]

    def of(self, kind):
        return [event for event in self.events if event.kind == kind]

    def clear(self):
        self.events.clear()


class FakeClock:
    def __init__(self, start=1_700_000_000.0):
        self.value = start

    def __call__(self):
        return self.value


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session(clock):
    from axisbrowser.session.state import Session

    return Session(clock=clock)


@pytest.fixture
def view_factory():
    return FakeViewFactory()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def settings(tmp_path):
    from axisbrowser.settings.manager import SettingsManager

    return SettingsManager(settings_file=tmp_path / "settings.json")


@pytest.fixture
def registry(session, view_factory, scheduler, settings):
    from axisbrowser.session.registry import TabRegistry

    return TabRegistry(session, view_factory, scheduler, settings)


@pytest.fixture
def organizer(session):
    from axisbrowser.session.organizer import PinFolderOrganizer

    return PinFolderOrganizer(session)


@pytest.fixture
def recorder(session):
    return Recorder(session)
