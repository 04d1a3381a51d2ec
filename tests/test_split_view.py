# tests/test_split_view.py
"""
Tests for the split-view pane router.
"""

import os
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))


@pytest.fixture
def router(session, view_factory, scheduler, settings):
    from axisbrowser.split.router import SplitViewRouter

    return SplitViewRouter(session, view_factory, scheduler, settings)


class TestEnableDisable:
    """Tests for turning split view on and off."""

    def test_enable_uses_active_tab_and_default(self, session, registry, router, view_factory, settings):
        """Test the left pane mirrors the active tab and the right one the default url."""
        settings.set("split_default_url", "https://right.example")
        registry.create_tab("https://left.example")

        assert router.enable() is True

        assert router.pane("left").url == "https://left.example"
        assert router.pane("right").url == "https://right.example"
        assert router.state.active_pane.value == "left"
        assert view_factory.created["pane:left"].loaded == ["https://left.example"]
        assert view_factory.created["pane:right"].loaded == ["https://right.example"]

    def test_enable_without_tab_uses_home(self, router, settings):
        """Test the home url fills the left pane when no tab is active."""
        settings.set("home_url", "https://home.example")
        router.enable()
        assert router.pane("left").url == "https://home.example"

    def test_enable_twice_refused(self, router):
        """Test enabling an enabled router does nothing."""
        assert router.enable() is True
        assert router.enable() is False

    def test_enable_hides_active_tab_view(self, session, registry, router, view_factory):
        """Test the active tab's view is hidden while split and shown afterwards."""
        tab_id = registry.create_tab("https://a.example")
        router.enable()
        assert view_factory.created[tab_id].visible is False
        router.disable()
        assert view_factory.created[tab_id].visible is True

    def test_switching_tabs_while_split_keeps_views_hidden(self, session, registry, router, view_factory):
        """Test tab views stay hidden under the panes until split view ends."""
        first = registry.create_tab("https://a.example")
        router.enable()
        second = registry.create_tab("https://b.example")
        registry.switch_active(first)

        assert session.split_view_enabled is True
        assert view_factory.created[first].visible is False
        assert view_factory.created[second].visible is False
        assert view_factory.created[second].loaded == ["https://b.example"]

        router.disable()

        assert session.split_view_enabled is False
        assert view_factory.created[first].visible is True
        assert view_factory.created[second].visible is False

    def test_disable_destroys_pane_views(self, session, registry, router, view_factory):
        """Test disabling destroys both pane views and leaves the tab alone."""
        tab_id = registry.create_tab("https://a.example")
        router.enable()
        router.navigate("https://elsewhere.example")

        assert router.disable() is True

        assert view_factory.created["pane:left"].destroyed is True
        assert view_factory.created["pane:right"].destroyed is True
        assert router.state.panes == {}
        assert session.tabs[tab_id].url == "https://a.example"
        assert session.tabs[tab_id].history.entries == ["https://a.example"]

    def test_toggle(self, router, recorder):
        """Test toggle flips the state and announces it."""
        assert router.toggle() is True
        assert router.toggle() is False
        changes = recorder.of("split-changed")
        assert [e.payload["enabled"] for e in changes] == [True, False]


class TestRouting:
    """Tests for commands routed to the active pane."""

    def test_navigate_goes_to_active_pane(self, router, view_factory):
        """Test navigation only affects the active pane."""
        router.enable()
        router.set_active_pane("right")

        result = router.navigate("example.org")

        assert result.item == "https://example.org"
        assert router.pane("right").url == "https://example.org"
        assert view_factory.created["pane:right"].loaded[-1] == "https://example.org"
        assert view_factory.created["pane:left"].loaded[-1] != "https://example.org"

    def test_back_and_forward(self, router, view_factory):
        """Test back/forward use the pane view's own history."""
        router.enable()
        router.navigate("https://second.example")

        assert router.go_back().success is True
        assert router.pane("left").url != "https://second.example"
        assert router.go_forward().success is True
        assert router.pane("left").url == "https://second.example"

    def test_back_at_start_is_benign(self, router):
        """Test going back with no history reports nothing to do."""
        router.enable()
        result = router.go_back()
        assert result.success is True
        assert result.changed is False

    def test_commands_when_disabled(self, router):
        """Test routed commands fail cleanly while split view is off."""
        assert router.navigate("https://a.example").success is False
        assert router.go_back().success is False
        assert router.reload() is False
        assert router.set_active_pane("left") is False

    def test_set_active_pane_rejects_unknown_side(self, router):
        """Test only left and right are valid panes."""
        router.enable()
        assert router.set_active_pane("middle") is False
        assert router.state.active_pane.value == "left"

    def test_reload_active_pane(self, router, view_factory):
        """Test reload goes to the active pane's view."""
        router.enable()
        router.set_active_pane("right")
        router.reload()
        assert view_factory.created["pane:right"].reloaded == 1
        assert view_factory.created["pane:left"].reloaded == 0

    def test_pane_follows_navigated_event(self, router, view_factory):
        """Test link navigation inside a pane updates its url."""
        from axisbrowser.views.contract import ViewEvent

        router.enable()
        view_factory.created["pane:right"].fire(ViewEvent.NAVIGATED, "https://link.example")
        assert router.pane("right").url == "https://link.example"


class TestSplitRatio:
    """Tests for the divider position."""

    @pytest.mark.parametrize(
        "ratio, expected",
        [(0.0, 0.2), (0.1, 0.2), (0.5, 0.5), (0.75, 0.75), (0.95, 0.8), (3, 0.8)],
    )
    def test_ratio_clamped(self, router, ratio, expected):
        """Test the ratio stays within [0.2, 0.8]."""
        assert router.set_split_ratio(ratio) == expected
        assert router.state.split_ratio == expected

    def test_ratio_not_persisted(self, router, settings):
        """Test the ratio is not written to settings."""
        router.set_split_ratio(0.3)
        assert settings.get("split_ratio") is None
