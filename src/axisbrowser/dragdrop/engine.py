# axisbrowser/dragdrop/engine.py

from dataclasses import dataclass
from typing import Any, Optional

from ..session.models import TopLevelItem
from ..session.organizer import PinFolderOrganizer
from ..session.results import OrderChange
from ..session.state import EventKind, Session
from ..settings.config import SessionLimits
from ..utils.exceptions import DragStateError
from ..utils.logger import get_logger
from .geometry import DropIntent, DropIntentKind, SidebarLayout, classify


@dataclass
class DragState:
    """An active gesture. Discarded on every return to idle."""

    subject: TopLevelItem
    layout: SidebarLayout
    pointer_y: Optional[float] = None
    intent: Optional[DropIntent] = None


class DragDropEngine:
    """
    Turns a pointer gesture on the sidebar into at most one organizer call.

    ``begin_drag`` starts a gesture, ``pointer_move`` reclassifies the drop
    target without touching the session, and ``drop`` or ``cancel`` end it.
    Whatever the outcome, the engine is idle again afterwards and
    ``drag-ended`` has been emitted.
    """

    def __init__(
        self,
        session: Session,
        organizer: PinFolderOrganizer,
        separator_deadband: float = SessionLimits.SEPARATOR_DEADBAND,
        edge_band: float = SessionLimits.ITEM_EDGE_BAND,
    ):
        self.logger = get_logger("axisbrowser.dragdrop.engine")
        self.session = session
        self.organizer = organizer
        self.separator_deadband = separator_deadband
        self.edge_band = edge_band
        self._state: Optional[DragState] = None

    @property
    def state(self) -> Optional[DragState]:
        return self._state

    @property
    def is_dragging(self) -> bool:
        return self._state is not None

    @property
    def intent(self) -> Optional[DropIntent]:
        return self._state.intent if self._state else None

    def _require_drag(self, operation: str) -> DragState:
        if self._state is None:
            raise DragStateError("idle", operation)
        return self._state

    def begin_drag(self, subject_ref: Any, layout: SidebarLayout) -> bool:
        """Start a gesture; refused while another one is active."""
        if self._state is not None:
            self.logger.debug(f"Refusing to drag {subject_ref}: {self._state.subject} is being dragged")
            return False
        subject = self.session.resolve(subject_ref)
        if subject is None:
            self.logger.debug(f"Refusing to drag unknown item {subject_ref}")
            return False
        self._state = DragState(subject, layout)
        self.logger.debug(f"Drag started for {subject}")
        return True

    def update_layout(self, layout: SidebarLayout) -> Optional[DropIntent]:
        state = self._require_drag("update the layout")
        state.layout = layout
        if state.pointer_y is None:
            return None
        return self.pointer_move(state.pointer_y)

    def pointer_move(self, y: float) -> Optional[DropIntent]:
        state = self._require_drag("move the pointer")
        if not self.session.exists(state.subject):
            self.logger.info(f"Drag subject {state.subject} vanished, cancelling")
            self._finish("cancelled")
            return None

        state.pointer_y = y
        intent = self._classify(state, y)
        if intent != state.intent:
            state.intent = intent
            self.session.events.emit(
                EventKind.DRAG_HOVER,
                subject=state.subject,
                intent=intent,
                hover=intent.hover if intent else None,
            )
        return intent

    def _classify(self, state: DragState, y: float) -> Optional[DropIntent]:
        pinned = True
        folder_id = None
        if state.subject.is_tab:
            tab = self.session.tabs[state.subject.id]
            pinned = tab.pinned
            folder_id = tab.folder_id
        return classify(
            state.layout,
            state.subject,
            y,
            subject_pinned=pinned,
            subject_folder_id=folder_id,
            separator_deadband=self.separator_deadband,
            edge_band=self.edge_band,
        )

    def drop(self) -> Optional[OrderChange]:
        """
        Commit the current intent.

        Returns:
            The organizer's OrderChange, or None when the drop amounted to a cancel
        """
        state = self._require_drag("drop")
        change = None
        try:
            change = self._commit(state)
        finally:
            self._finish("dropped" if change is not None else "cancelled", change)
        return change

    def _commit(self, state: DragState) -> Optional[OrderChange]:
        intent = state.intent
        if intent is None:
            return None
        if not self.session.exists(state.subject):
            self.logger.info(f"Drag subject {state.subject} vanished before the drop")
            return None
        if intent.target is not None and not self.session.exists(intent.target):
            self.logger.info(f"Drop target {intent.target} vanished before the drop")
            return None

        subject_id = state.subject.id
        if intent.kind is DropIntentKind.PIN:
            return self.organizer.set_pinned(subject_id, True, at_head=True)
        if intent.kind is DropIntentKind.UNPIN:
            return self.organizer.set_pinned(subject_id, False, at_head=True)
        if intent.kind is DropIntentKind.INSERT_INTO_FOLDER:
            return self.organizer.add_tab_to_folder(subject_id, intent.target.id)
        return self.organizer.reorder(state.subject, intent.target, intent.side)

    def cancel(self) -> bool:
        if self._state is None:
            return False
        self._finish("cancelled")
        return True

    def _finish(self, outcome: str, change: Optional[OrderChange] = None) -> None:
        state = self._state
        self._state = None
        subject = state.subject if state else None
        self.logger.debug(f"Drag of {subject} {outcome}")
        self.session.events.emit(EventKind.DRAG_ENDED, subject=subject, outcome=outcome, change=change)
