# tests/test_bookmarks.py
"""
Tests for the bookmark store kept in the main settings.
"""

import json
import os
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))


@pytest.fixture
def bookmarks(settings, clock):
    from axisbrowser.bookmarks.store import BookmarkStore

    return BookmarkStore(settings, clock=clock)


class TestToggle:
    """Tests for adding and removing bookmarks."""

    def test_add_then_remove(self, bookmarks):
        """Test toggling the same url adds it once and then removes it."""
        assert bookmarks.toggle("https://a.example", "A") is True
        assert bookmarks.is_bookmarked("https://a.example") is True
        assert bookmarks.items() == [
            {"url": "https://a.example", "title": "A", "date": "2023-11-14T22:13:20+00:00"}
        ]

        assert bookmarks.toggle("https://a.example", "A") is False
        assert bookmarks.items() == []
        assert bookmarks.is_bookmarked("https://a.example") is False

    def test_appended_in_order(self, bookmarks, clock):
        """Test new bookmarks go to the end of the list."""
        bookmarks.toggle("https://a.example", "A")
        clock.value += 60
        bookmarks.toggle("https://b.example", "B")

        assert [b["url"] for b in bookmarks.items()] == ["https://a.example", "https://b.example"]

    def test_title_defaults_to_untitled(self, bookmarks):
        """Test a missing or blank title is stored as Untitled."""
        bookmarks.toggle("https://a.example", None)
        bookmarks.toggle("https://b.example", " \x07 ")

        assert [b["title"] for b in bookmarks.items()] == ["Untitled", "Untitled"]

    @pytest.mark.parametrize("url", [None, "", "about:blank", "axis://settings"])
    def test_blank_and_internal_pages_skipped(self, bookmarks, url):
        """Test pages without real content cannot be bookmarked."""
        assert bookmarks.toggle(url, "Nothing") is None
        assert len(bookmarks) == 0

    def test_stored_in_settings_file(self, bookmarks, settings):
        """Test bookmarks are written under the bookmarks key."""
        bookmarks.toggle("https://a.example", "A")

        data = json.loads(settings.settings_file.read_text(encoding="utf-8"))
        assert data["settings"]["bookmarks"][0]["url"] == "https://a.example"


class TestDelete:
    """Tests for removing bookmarks by position."""

    def test_delete_by_index(self, bookmarks):
        """Test the entry at the given position is removed."""
        bookmarks.toggle("https://a.example", "A")
        bookmarks.toggle("https://b.example", "B")

        assert bookmarks.delete(0) is True
        assert [b["url"] for b in bookmarks.items()] == ["https://b.example"]

    @pytest.mark.parametrize("index", [-1, 1, 5])
    def test_delete_out_of_range(self, bookmarks, index):
        """Test an unknown position is refused."""
        bookmarks.toggle("https://a.example", "A")
        assert bookmarks.delete(index) is False
        assert len(bookmarks) == 1

    def test_malformed_entries_ignored(self, bookmarks, settings):
        """Test entries without a url are not listed."""
        settings.set("bookmarks", [{"title": "no url"}, "junk", {"url": "https://a.example", "title": "A"}])

        assert [b["url"] for b in bookmarks.items()] == ["https://a.example"]
