# tests/test_dragdrop.py
"""
Tests for drop classification and the drag-and-drop engine.

The sidebar used throughout is built with 32px rows and an 8px separator gap:

    a       0..32    pinned tab
    F      32..96    pinned folder, open, child c
    ---   separator at 100
    b     104..136   unpinned tab
    d     136..168   unpinned tab
"""

import os
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))


@pytest.fixture
def sidebar(session, registry, organizer):
    a, b, c, d = (registry.create_tab(f"https://{name}.example") for name in "abcd")
    organizer.toggle_pin(a)
    folder_id = organizer.create_folder("F")
    organizer.add_tab_to_folder(c, folder_id)
    return {"a": a, "b": b, "c": c, "d": d, "F": folder_id}


@pytest.fixture
def engine(session, organizer):
    from axisbrowser.dragdrop.engine import DragDropEngine

    return DragDropEngine(session, organizer)


def _layout(session):
    from axisbrowser.dragdrop.geometry import SidebarLayout

    return SidebarLayout.stack(session, row_height=32.0, separator_height=8.0)


class TestLayout:
    """Tests for the row snapshot builder."""

    def test_stack_rows(self, session, sidebar):
        """Test rows follow the order and the folder spans its child."""
        layout = _layout(session)

        assert [(row.top, row.bottom, row.pinned) for row in layout.rows] == [
            (0.0, 32.0, True),
            (32.0, 96.0, True),
            (104.0, 136.0, False),
            (136.0, 168.0, False),
        ]
        assert layout.separator_y == 100.0
        assert layout.row_at(50.0).item.id == sidebar["F"]
        assert layout.row_at(100.0) is None


class TestClassify:
    """Tests for the pure drop classifier."""

    def _classify(self, session, subject, y):
        from axisbrowser.dragdrop.geometry import classify

        tab = session.tabs.get(subject.id) if subject.is_tab else None
        return classify(
            _layout(session),
            subject,
            y,
            subject_pinned=tab.pinned if tab else True,
            subject_folder_id=tab.folder_id if tab else None,
        )

    @pytest.mark.parametrize("y", [94.0, 100.0, 106.0])
    def test_unpinned_tab_near_separator_pins(self, session, sidebar, y):
        """Test the separator deadband offers a pin to unpinned tabs."""
        from axisbrowser.dragdrop.geometry import DropIntentKind
        from axisbrowser.session.models import TopLevelItem

        intent = self._classify(session, TopLevelItem.tab(sidebar["b"]), y)
        assert intent.kind is DropIntentKind.PIN

    def test_pinned_tab_near_separator_unpins(self, session, sidebar):
        """Test the separator deadband offers an unpin to pinned tabs."""
        from axisbrowser.dragdrop.geometry import DropIntentKind, HoverKind
        from axisbrowser.session.models import TopLevelItem

        intent = self._classify(session, TopLevelItem.tab(sidebar["a"]), 101.0)
        assert intent.kind is DropIntentKind.UNPIN
        assert intent.hover.kind is HoverKind.SEPARATOR

    def test_tab_over_folder_body_inserts(self, session, sidebar):
        """Test the folder interior offers insertion."""
        from axisbrowser.dragdrop.geometry import DropIntentKind, HoverKind
        from axisbrowser.session.models import TopLevelItem

        intent = self._classify(session, TopLevelItem.tab(sidebar["d"]), 60.0)
        assert intent.kind is DropIntentKind.INSERT_INTO_FOLDER
        assert intent.target == TopLevelItem.folder(sidebar["F"])
        assert intent.hover.kind is HoverKind.FOLDER_BODY

    def test_folder_edges_reorder(self, session, sidebar):
        """Test the folder row's edge bands reorder instead of inserting."""
        from axisbrowser.dragdrop.geometry import DropIntentKind
        from axisbrowser.session.models import Side, TopLevelItem

        subject = TopLevelItem.tab(sidebar["d"])
        top = self._classify(session, subject, 34.0)
        bottom = self._classify(session, subject, 92.0)

        assert top.kind is DropIntentKind.REORDER_BEFORE
        assert bottom.kind is DropIntentKind.REORDER_AFTER
        assert bottom.side is Side.AFTER

    def test_no_insert_into_own_folder(self, session, sidebar):
        """Test a child hovering over its own folder gets no intent."""
        from axisbrowser.session.models import TopLevelItem

        assert self._classify(session, TopLevelItem.tab(sidebar["c"]), 70.0) is None

    def test_tab_rows_split_at_middle(self, session, sidebar):
        """Test tab rows reorder before above the middle and after below it."""
        from axisbrowser.dragdrop.geometry import DropIntentKind
        from axisbrowser.session.models import TopLevelItem

        subject = TopLevelItem.tab(sidebar["b"])
        assert self._classify(session, subject, 10.0).kind is DropIntentKind.REORDER_BEFORE
        assert self._classify(session, subject, 20.0).kind is DropIntentKind.REORDER_AFTER

    def test_folder_subject_only_pinned_reorders(self, session, sidebar):
        """Test folders never pin, unpin, insert or target unpinned rows."""
        from axisbrowser.dragdrop.geometry import DropIntentKind
        from axisbrowser.session.models import TopLevelItem

        subject = TopLevelItem.folder(sidebar["F"])
        assert self._classify(session, subject, 100.0) is None
        assert self._classify(session, subject, 150.0) is None
        assert self._classify(session, subject, 60.0) is None
        assert self._classify(session, subject, 5.0).kind is DropIntentKind.REORDER_BEFORE

    def test_outside_rows_and_self(self, session, sidebar):
        """Test the subject's own row and empty space give no intent."""
        from axisbrowser.session.models import TopLevelItem

        subject = TopLevelItem.tab(sidebar["d"])
        assert self._classify(session, subject, 150.0) is None
        assert self._classify(session, subject, 500.0) is None


class TestDragDropEngine:
    """Tests for the gesture state machine."""

    def test_drop_on_separator_pins_at_head(self, session, sidebar, engine):
        """Test a drop-driven pin puts the tab first in the pinned region."""
        from axisbrowser.session.models import TopLevelItem

        engine.begin_drag(sidebar["b"], _layout(session))
        engine.pointer_move(100.0)
        change = engine.drop()

        assert change is not None
        assert session.top_level_order[0] == TopLevelItem.tab(sidebar["b"])
        assert session.tabs[sidebar["b"]].pinned is True
        assert engine.is_dragging is False
        session.check_invariants()

    def test_drop_on_separator_unpins_at_head(self, session, sidebar, engine):
        """Test a drop-driven unpin puts the tab first in the unpinned region."""
        from axisbrowser.session.models import TopLevelItem

        engine.begin_drag(sidebar["a"], _layout(session))
        engine.pointer_move(99.0)
        engine.drop()

        assert session.tabs[sidebar["a"]].pinned is False
        assert session.unpinned_items()[0] == TopLevelItem.tab(sidebar["a"])
        session.check_invariants()

    def test_drop_into_folder(self, session, sidebar, engine):
        """Test dropping on the folder body adds the tab to the folder."""
        engine.begin_drag(sidebar["d"], _layout(session))
        engine.pointer_move(60.0)
        engine.drop()

        assert session.folders[sidebar["F"]].child_tab_ids == [sidebar["c"], sidebar["d"]]
        assert session.tabs[sidebar["d"]].pinned is True
        session.check_invariants()

    def test_drop_reorders(self, session, sidebar, engine):
        """Test dropping on a tab's upper half moves the subject before it."""
        from axisbrowser.session.models import TopLevelItem

        engine.begin_drag(sidebar["d"], _layout(session))
        engine.pointer_move(110.0)
        engine.drop()

        assert session.unpinned_items() == [TopLevelItem.tab(sidebar["d"]), TopLevelItem.tab(sidebar["b"])]

    def test_begin_drag_refused_while_active(self, session, sidebar, engine):
        """Test a second gesture cannot start while one is in progress."""
        assert engine.begin_drag(sidebar["b"], _layout(session)) is True
        assert engine.begin_drag(sidebar["d"], _layout(session)) is False
        assert engine.state.subject.id == sidebar["b"]

    def test_begin_drag_unknown_subject(self, session, engine):
        """Test dragging an unknown item is refused."""
        assert engine.begin_drag(98765, _layout(session)) is False
        assert engine.is_dragging is False

    def test_idle_operations(self, engine):
        """Test moving or dropping while idle raises; cancelling does not."""
        from axisbrowser.utils.exceptions import DragStateError

        with pytest.raises(DragStateError):
            engine.pointer_move(10.0)
        with pytest.raises(DragStateError):
            engine.drop()
        assert engine.cancel() is False

    def test_cancel_leaves_model_unchanged(self, session, sidebar, engine, recorder):
        """Test cancelling clears the gesture and does not mutate the session."""
        before = session.snapshot_order()
        engine.begin_drag(sidebar["b"], _layout(session))
        engine.pointer_move(100.0)
        recorder.clear()

        assert engine.cancel() is True

        assert session.snapshot_order() == before
        assert engine.state is None
        assert recorder.kinds() == ["drag-ended"]
        assert recorder.events[0].payload["outcome"] == "cancelled"

    def test_drop_without_intent_is_cancel(self, session, sidebar, engine, recorder):
        """Test dropping over empty space changes nothing."""
        before = session.snapshot_order()
        engine.begin_drag(sidebar["b"], _layout(session))
        engine.pointer_move(500.0)

        assert engine.drop() is None
        assert session.snapshot_order() == before
        assert recorder.of("drag-ended")[-1].payload["outcome"] == "cancelled"

    def test_hover_emitted_on_change_only(self, session, sidebar, engine, recorder):
        """Test drag-hover fires when the intent changes, not on every move."""
        engine.begin_drag(sidebar["b"], _layout(session))
        engine.pointer_move(99.0)
        engine.pointer_move(100.0)
        engine.pointer_move(10.0)

        assert len(recorder.of("drag-hover")) == 2

    def test_vanished_subject_cancels(self, session, sidebar, registry, engine, recorder):
        """Test closing the dragged tab mid-gesture ends the drag."""
        engine.begin_drag(sidebar["b"], _layout(session))
        registry.close_tab(sidebar["b"])

        assert engine.pointer_move(100.0) is None
        assert engine.is_dragging is False
        assert recorder.of("drag-ended")[-1].payload["outcome"] == "cancelled"

    def test_vanished_target_cancels(self, session, sidebar, registry, engine):
        """Test a drop onto a target closed mid-gesture is a cancel."""
        engine.begin_drag(sidebar["d"], _layout(session))
        engine.pointer_move(10.0)
        registry.close_tab(sidebar["a"])
        before = session.snapshot_order()

        assert engine.drop() is None
        assert session.snapshot_order() == before
        assert engine.is_dragging is False

    def test_update_layout_reclassifies(self, session, sidebar, engine):
        """Test a refreshed layout re-evaluates the last pointer position."""
        from axisbrowser.dragdrop.geometry import DropIntentKind, SidebarLayout

        engine.begin_drag(sidebar["d"], _layout(session))
        engine.pointer_move(60.0)
        assert engine.intent.kind is DropIntentKind.INSERT_INTO_FOLDER

        shifted = SidebarLayout.stack(session, row_height=32.0, separator_height=8.0, origin=200.0)
        assert engine.update_layout(shifted) is None
