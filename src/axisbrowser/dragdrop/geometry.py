# axisbrowser/dragdrop/geometry.py
"""
Sidebar geometry and drop classification.

Everything here is pure: the presentation layer hands over a snapshot of the
row rectangles and the pointer position, and ``classify`` answers which
single drop intent applies. Nothing in this module touches the session.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from ..session.models import Side, TopLevelItem
from ..session.state import Session
from ..settings.config import SessionLimits


@dataclass(frozen=True)
class Row:
    """Vertical extent of one top-level item, in pixels."""

    item: TopLevelItem
    top: float
    height: float
    pinned: bool

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def middle(self) -> float:
        return self.top + self.height / 2

    def contains(self, y: float) -> bool:
        return self.top <= y < self.bottom


@dataclass
class SidebarLayout:
    rows: List[Row]
    separator_y: float

    def row_at(self, y: float) -> Optional[Row]:
        for row in self.rows:
            if row.contains(y):
                return row
        return None

    def row_for(self, item: TopLevelItem) -> Optional[Row]:
        for row in self.rows:
            if row.item == item:
                return row
        return None

    @classmethod
    def stack(
        cls,
        session: Session,
        row_height: float = 32.0,
        separator_height: float = 8.0,
        origin: float = 0.0,
    ) -> "SidebarLayout":
        """
        Lay the current top-level order out as fixed-height rows.

        An expanded folder row grows by one row per child. The separator sits
        in a gap of ``separator_height`` between the two regions.
        """
        rows: List[Row] = []
        y = origin
        pinned_items = session.pinned_items()
        for item in pinned_items:
            height = row_height
            if item.is_folder:
                folder = session.folders[item.id]
                if folder.is_visibly_expanded:
                    height += row_height * len(folder.child_tab_ids)
            rows.append(Row(item, y, height, True))
            y += height

        separator_y = y + separator_height / 2
        y += separator_height
        for item in session.unpinned_items():
            rows.append(Row(item, y, row_height, False))
            y += row_height
        return cls(rows, separator_y)


class DropIntentKind(Enum):
    PIN = "pin"
    UNPIN = "unpin"
    INSERT_INTO_FOLDER = "insert-into-folder"
    REORDER_BEFORE = "reorder-before"
    REORDER_AFTER = "reorder-after"


class HoverKind(Enum):
    SEPARATOR = "separator"
    ITEM = "item"
    FOLDER_BODY = "folder-body"


@dataclass(frozen=True)
class Hover:
    """What the sidebar should highlight while the pointer is held."""

    kind: HoverKind
    target: Optional[TopLevelItem] = None
    side: Optional[Side] = None


@dataclass(frozen=True)
class DropIntent:
    kind: DropIntentKind
    target: Optional[TopLevelItem] = None

    @property
    def side(self) -> Optional[Side]:
        if self.kind is DropIntentKind.REORDER_BEFORE:
            return Side.BEFORE
        if self.kind is DropIntentKind.REORDER_AFTER:
            return Side.AFTER
        return None

    @property
    def hover(self) -> Hover:
        if self.kind in (DropIntentKind.PIN, DropIntentKind.UNPIN):
            return Hover(HoverKind.SEPARATOR)
        if self.kind is DropIntentKind.INSERT_INTO_FOLDER:
            return Hover(HoverKind.FOLDER_BODY, self.target)
        return Hover(HoverKind.ITEM, self.target, self.side)


def _split_at_middle(row: Row, y: float) -> DropIntent:
    kind = DropIntentKind.REORDER_BEFORE if y < row.middle else DropIntentKind.REORDER_AFTER
    return DropIntent(kind, row.item)


def classify(
    layout: SidebarLayout,
    subject: TopLevelItem,
    y: float,
    subject_pinned: bool,
    subject_folder_id: Optional[int] = None,
    separator_deadband: float = SessionLimits.SEPARATOR_DEADBAND,
    edge_band: float = SessionLimits.ITEM_EDGE_BAND,
) -> Optional[DropIntent]:
    """
    Decide the drop intent for a pointer at ``y``.

    Args:
        layout: Row snapshot of the sidebar
        subject: The dragged item
        y: Pointer position in layout coordinates
        subject_pinned: Whether the dragged tab is currently pinned
        subject_folder_id: Folder the dragged tab belongs to, if any
        separator_deadband: Distance from the separator that means pin/unpin
        edge_band: Depth of the reorder bands at a folder row's edges

    Returns:
        The intent, or None when dropping here would do nothing
    """
    if subject.is_tab and abs(y - layout.separator_y) <= separator_deadband:
        return DropIntent(DropIntentKind.UNPIN if subject_pinned else DropIntentKind.PIN)

    row = layout.row_at(y)
    if row is None or row.item == subject:
        return None

    if subject.is_folder:
        if not row.pinned:
            return None
        return _split_at_middle(row, y)

    if row.item.is_folder:
        if y < row.top + edge_band:
            return DropIntent(DropIntentKind.REORDER_BEFORE, row.item)
        if y >= row.bottom - edge_band:
            return DropIntent(DropIntentKind.REORDER_AFTER, row.item)
        if subject_folder_id == row.item.id:
            return None
        return DropIntent(DropIntentKind.INSERT_INTO_FOLDER, row.item)

    return _split_at_middle(row, y)
