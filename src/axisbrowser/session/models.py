# axisbrowser/session/models.py

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from ..utils.security import InputSanitizer

if TYPE_CHECKING:
    from ..views.contract import ViewHandle

DEFAULT_TAB_TITLE = "New Tab"


class ItemKind(Enum):
    """Kinds of entries in the top-level sidebar order."""

    TAB = "tab"
    FOLDER = "folder"


class Side(Enum):
    """Placement relative to a reorder target."""

    BEFORE = "before"
    AFTER = "after"


@dataclass(frozen=True)
class TopLevelItem:
    """A reference to a tab or folder in the top-level order."""

    kind: ItemKind
    id: int

    @classmethod
    def tab(cls, tab_id: int) -> "TopLevelItem":
        return cls(ItemKind.TAB, tab_id)

    @classmethod
    def folder(cls, folder_id: int) -> "TopLevelItem":
        return cls(ItemKind.FOLDER, folder_id)

    @property
    def is_tab(self) -> bool:
        return self.kind is ItemKind.TAB

    @property
    def is_folder(self) -> bool:
        return self.kind is ItemKind.FOLDER

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.id}"


@dataclass
class NavigationHistory:
    """
    Per-tab back/forward list.

    ``index`` points at the current entry and is -1 only while ``entries`` is
    empty. Pushing a url while the index is behind the tip discards the
    forward entries first.
    """

    entries: List[str] = field(default_factory=list)
    index: int = -1

    def __post_init__(self):
        if not self.entries:
            self.index = -1
        elif not 0 <= self.index < len(self.entries):
            self.index = len(self.entries) - 1

    @property
    def current(self) -> Optional[str]:
        if self.index < 0:
            return None
        return self.entries[self.index]

    @property
    def can_go_back(self) -> bool:
        return self.index > 0

    @property
    def can_go_forward(self) -> bool:
        return 0 <= self.index < len(self.entries) - 1

    def push(self, url: str) -> None:
        if self.index < len(self.entries) - 1:
            del self.entries[self.index + 1 :]
        self.entries.append(url)
        self.index = len(self.entries) - 1

    def back(self) -> Optional[str]:
        if not self.can_go_back:
            return None
        self.index -= 1
        return self.entries[self.index]

    def forward(self) -> Optional[str]:
        if not self.can_go_forward:
            return None
        self.index += 1
        return self.entries[self.index]

    def replace_current(self, url: str) -> None:
        if self.index < 0:
            self.push(url)
        else:
            self.entries[self.index] = url

    def copy(self) -> "NavigationHistory":
        return NavigationHistory(list(self.entries), self.index)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass
class Tab:
    """A browsing context with its own history and lazily created view."""

    id: int
    url: Optional[str] = None
    title: str = DEFAULT_TAB_TITLE
    favicon_url: Optional[str] = None
    pinned: bool = False
    folder_id: Optional[int] = None
    history: NavigationHistory = field(default_factory=NavigationHistory)
    view: Optional["ViewHandle"] = field(default=None, repr=False, compare=False)
    pending_url: Optional[str] = None
    zoom: float = 1.0
    loading: bool = False
    # Set while a load started by the registry has not committed yet.
    awaiting_commit: bool = field(default=False, repr=False, compare=False)
    created_at: float = field(default_factory=time.time)

    @property
    def in_folder(self) -> bool:
        return self.folder_id is not None

    @property
    def item(self) -> TopLevelItem:
        return TopLevelItem.tab(self.id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "url": self.url,
            "title": self.title,
            "favicon": self.favicon_url,
            "pinned": self.pinned,
            "folder_id": self.folder_id,
        }


@dataclass
class Folder:
    """A named, ordered group of pinned tabs."""

    id: int
    name: str
    child_tab_ids: List[int] = field(default_factory=list)
    open: bool = True
    order: int = 0

    @staticmethod
    def normalize_name(name: Optional[str], folder_id: int) -> str:
        cleaned = InputSanitizer.sanitize_folder_name(name)
        return cleaned or f"Folder {folder_id}"

    @property
    def is_visibly_expanded(self) -> bool:
        return self.open and bool(self.child_tab_ids)

    @property
    def item(self) -> TopLevelItem:
        return TopLevelItem.folder(self.id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "tabIds": list(self.child_tab_ids),
            "open": self.open,
            "order": self.order,
        }


@dataclass(frozen=True)
class ClosedTabRecord:
    """Entry in the recently-closed stack."""

    id: int
    title: str
    url: str
    timestamp: float

    def to_dict(self) -> dict:
        return {"id": self.id, "title": self.title, "url": self.url, "timestamp": self.timestamp}
