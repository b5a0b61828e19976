"""Drag-and-drop contract for the board projection.

A drag moves through ``Idle -> Dragging`` and ends with one of
``DroppedOnTarget``, ``DroppedOnSameSection`` or ``Cancelled``; the board
then returns to ``Idle``. Only ``DroppedOnTarget`` reaches the server.
Hover highlight and card dimming are read off the current state and vanish
with it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from src.taskviews.dispatcher import MutationDispatcher
from src.taskviews.grouping import UNSECTIONED

DRAGGED_CARD_OPACITY = 0.5


@dataclass(frozen=True)
class DragPayload:
    task_id: str
    origin_section_id: str


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Dragging:
    payload: DragPayload
    hover_section_id: Optional[str] = None


@dataclass(frozen=True)
class DroppedOnTarget:
    payload: DragPayload
    target_section_id: str
    moved: bool


@dataclass(frozen=True)
class DroppedOnSameSection:
    payload: DragPayload


@dataclass(frozen=True)
class Cancelled:
    payload: DragPayload


DragState = Union[Idle, Dragging]
DragOutcome = Union[DroppedOnTarget, DroppedOnSameSection, Cancelled]


def section_ref(section_key: str) -> Optional[str]:
    """Grouping key to the value sent as ``section_id`` (None for unsectioned)."""
    return None if section_key == UNSECTIONED else section_key


class BoardDragController:
    def __init__(self, dispatcher: MutationDispatcher) -> None:
        self.dispatcher = dispatcher
        self.state: DragState = Idle()
        self.last_outcome: Optional[DragOutcome] = None

    @property
    def is_dragging(self) -> bool:
        return isinstance(self.state, Dragging)

    def start_drag(self, task_id: str, origin_section_id: str) -> Dragging:
        self.state = Dragging(DragPayload(task_id=task_id, origin_section_id=origin_section_id))
        return self.state

    def hover(self, section_id: Optional[str]) -> None:
        if isinstance(self.state, Dragging):
            self.state = Dragging(self.state.payload, hover_section_id=section_id)

    def drop(self, target_section_id: str) -> Optional[DragOutcome]:
        """Finish the drag on a column. Same-section drops make no remote call."""
        if not isinstance(self.state, Dragging):
            return None
        payload = self.state.payload
        self.state = Idle()
        if target_section_id == payload.origin_section_id:
            outcome: DragOutcome = DroppedOnSameSection(payload)
        else:
            moved = self.dispatcher.move_task_to_section(payload.task_id, section_ref(target_section_id))
            outcome = DroppedOnTarget(payload, target_section_id, moved is not None)
        self.last_outcome = outcome
        return outcome

    def cancel(self) -> Optional[Cancelled]:
        if not isinstance(self.state, Dragging):
            return None
        outcome = Cancelled(self.state.payload)
        self.state = Idle()
        self.last_outcome = outcome
        return outcome

    # ---- presentational state ----

    def card_opacity(self, task_id: str) -> float:
        if isinstance(self.state, Dragging) and self.state.payload.task_id == task_id:
            return DRAGGED_CARD_OPACITY
        return 1.0

    def is_drop_target(self, section_id: str) -> bool:
        """Columns other than the origin accept the dragged card."""
        return isinstance(self.state, Dragging) and self.state.payload.origin_section_id != section_id

    def is_highlighted(self, section_id: str) -> bool:
        return self.is_drop_target(section_id) and self.state.hover_section_id == section_id  # type: ignore[union-attr]
