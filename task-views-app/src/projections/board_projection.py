"""Kanban board: one column per section plus the trailing unsectioned column.

Streamlit has no native drag events, so a drag is driven by buttons: "Move"
picks a card up, "Target" highlights another column, "Drop here" on the
highlighted column finishes the move and "Cancel move" aborts.
"""
from __future__ import annotations

import html
from datetime import datetime
from functools import partial
from typing import List, Optional

import streamlit as st

from src.projections.common import (
    SECTION_DELETE_PROMPT,
    TASK_DELETE_PROMPT,
    confirm_gate,
    make_card_html,
    request_confirm,
    section_form,
    task_form,
    view_state,
)
from src.taskviews.board import BoardDragController, section_ref
from src.taskviews.dispatcher import MutationDispatcher
from src.taskviews.grouping import UNSECTIONED, section_counts, section_label
from src.taskviews.models import Task


def column_header_html(label: str, count: int, *, drop_target: bool = False, highlighted: bool = False) -> str:
    classes = ["tv-col-header"]
    if highlighted:
        classes.append("tv-col-hover")
    elif drop_target:
        classes.append("tv-col-target")
    return (
        f'<div class="{" ".join(classes)}">'
        f'<span>{html.escape(label)}<span class="tv-count">{count}</span></span>'
        f"</div>"
    )


def board_columns(dispatcher: MutationDispatcher) -> List[str]:
    """Column keys in display order; unsectioned is always last."""
    return [s.id for s in dispatcher.sections] + [UNSECTIONED]


def _drag_controller(dispatcher: MutationDispatcher) -> BoardDragController:
    controller: BoardDragController = view_state(
        dispatcher.project_id, "board", lambda: BoardDragController(dispatcher)
    )
    # dispatcher instance can be replaced when the session is reset
    controller.dispatcher = dispatcher
    return controller


def _creating_key(dispatcher: MutationDispatcher) -> str:
    return f"tv-board-creating-{dispatcher.project_id}"


def _set_creating(dispatcher: MutationDispatcher, column: Optional[str]) -> None:
    st.session_state[_creating_key(dispatcher)] = column


def _drag_controls(controller: BoardDragController, key: str) -> None:
    if controller.is_highlighted(key):
        st.button(
            "Drop here",
            key=f"tv-board-drop-{key}",
            type="primary",
            use_container_width=True,
            on_click=controller.drop,
            args=(key,),
        )
    elif controller.is_drop_target(key):
        st.button(
            "Target",
            key=f"tv-board-target-{key}",
            use_container_width=True,
            on_click=controller.hover,
            args=(key,),
        )
    elif controller.is_dragging:
        # origin column: dropping back is a no-op
        st.button(
            "Keep here",
            key=f"tv-board-keep-{key}",
            use_container_width=True,
            on_click=controller.drop,
            args=(key,),
        )


def _card(dispatcher: MutationDispatcher, controller: BoardDragController, key: str, task: Task, now: datetime) -> None:
    st.markdown(make_card_html(task, opacity=controller.card_opacity(task.id), now=now), unsafe_allow_html=True)
    if controller.is_dragging:
        return
    b1, b2, b3 = st.columns(3)
    b1.button(
        "Move",
        key=f"tv-board-move-{task.id}",
        use_container_width=True,
        on_click=controller.start_drag,
        args=(task.id, key),
    )
    b2.button(
        "↺" if task.is_completed else "✓",
        key=f"tv-board-done-{task.id}",
        help="Reopen task" if task.is_completed else "Mark complete",
        use_container_width=True,
        on_click=dispatcher.toggle_complete,
        args=(task, now),
    )
    b3.button(
        "🗑️",
        key=f"tv-board-del-{task.id}",
        help="Delete task",
        use_container_width=True,
        on_click=request_confirm,
        args=(f"task-{task.id}",),
    )
    confirm_gate(f"task-{task.id}", TASK_DELETE_PROMPT, partial(dispatcher.delete_task, task.id, confirmed=True))


def _column(dispatcher: MutationDispatcher, controller: BoardDragController, key: str, tasks, count: int, now: datetime) -> None:
    st.markdown(
        column_header_html(
            section_label(key, dispatcher.sections),
            count,
            drop_target=controller.is_drop_target(key),
            highlighted=controller.is_highlighted(key),
        ),
        unsafe_allow_html=True,
    )
    _drag_controls(controller, key)

    if not controller.is_dragging:
        st.button("＋ Task", key=f"tv-board-add-{key}", use_container_width=True, on_click=_set_creating, args=(dispatcher, key))
        if key != UNSECTIONED:
            st.button(
                "Delete section",
                key=f"tv-board-delsec-{key}",
                use_container_width=True,
                on_click=request_confirm,
                args=(f"section-{key}",),
            )
    if key != UNSECTIONED:
        confirm_gate(f"section-{key}", SECTION_DELETE_PROMPT, partial(dispatcher.delete_section, key, confirmed=True))

    if st.session_state.get(_creating_key(dispatcher)) == key:
        payload = task_form(f"tv-board-form-{key}")
        if payload is not None:
            # a failed create keeps the form open with its inputs
            if dispatcher.create_task(section_ref(key), payload) is not None:
                _set_creating(dispatcher, None)
            st.rerun()
        st.button("Close", key=f"tv-board-close-{key}", on_click=_set_creating, args=(dispatcher, None))

    if not tasks:
        st.markdown('<div class="tv-empty">No tasks</div>', unsafe_allow_html=True)
    for task in tasks:
        _card(dispatcher, controller, key, task, now)


def render_board(dispatcher: MutationDispatcher, now: Optional[datetime] = None) -> None:
    now = now or datetime.utcnow()
    controller = _drag_controller(dispatcher)
    groups = dispatcher.grouping()
    counts = section_counts(groups)
    keys = board_columns(dispatcher)

    if controller.is_dragging:
        task = dispatcher.find_task(controller.state.payload.task_id)  # type: ignore[union-attr]
        c1, c2 = st.columns([0.8, 0.2])
        c1.info(f"Moving **{task.title if task else 'task'}**. Target a column, then drop it there.")
        c2.button("Cancel move", key="tv-board-cancel", on_click=controller.cancel)

    columns = st.columns(len(keys))
    for col, key in zip(columns, keys):
        with col:
            _column(dispatcher, controller, key, groups.get(key, []), counts.get(key, 0), now)

    st.markdown("---")
    section_form(dispatcher, f"tv-board-new-section-{dispatcher.project_id}")
