# axisbrowser/session/results.py
"""Result containers returned by session operations."""

from dataclasses import dataclass, field
from typing import Generic, List, Optional, Sequence, Tuple, TypeVar

from .models import TopLevelItem

T = TypeVar("T")


@dataclass
class OperationResult(Generic[T]):
    """
    Outcome of a command that may legitimately do nothing.

    ``success`` is False for invalid requests (unknown ids, empty input).
    ``changed`` is False for benign "nothing to do" outcomes such as going
    back at the start of the history or recovering from an empty stack.
    """

    success: bool
    message: str = ""
    item: Optional[T] = None
    changed: bool = True

    @classmethod
    def nothing_to_do(cls, message: str) -> "OperationResult[T]":
        return cls(True, message, None, changed=False)

    @classmethod
    def failure(cls, message: str) -> "OperationResult[T]":
        return cls(False, message, None, changed=False)

    def __bool__(self) -> bool:
        return self.success and self.changed


Move = Tuple[TopLevelItem, int, int]


@dataclass
class OrderChange:
    """Canonical top-level order before and after a structural mutation."""

    before: List[TopLevelItem]
    after: List[TopLevelItem]
    moved: List[Move] = field(default_factory=list)

    @classmethod
    def compute(cls, before: Sequence[TopLevelItem], after: Sequence[TopLevelItem]) -> "OrderChange":
        before_index = {item: i for i, item in enumerate(before)}
        after_index = {item: i for i, item in enumerate(after)}
        moved: List[Move] = []
        for item, new_index in after_index.items():
            old_index = before_index.get(item, -1)
            if old_index != new_index:
                moved.append((item, old_index, new_index))
        for item, old_index in before_index.items():
            if item not in after_index:
                moved.append((item, old_index, -1))
        return cls(list(before), list(after), moved)

    @property
    def changed(self) -> bool:
        return self.before != self.after

    def to_dict(self) -> dict:
        return {
            "before": [str(item) for item in self.before],
            "after": [str(item) for item in self.after],
            "moved": [(str(item), old, new) for item, old, new in self.moved],
        }
