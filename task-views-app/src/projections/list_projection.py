"""Collapsible per-section list of tasks."""
from __future__ import annotations

from datetime import datetime
from functools import partial
from typing import Optional

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
from src.taskviews.board import section_ref
from src.taskviews.dispatcher import MutationDispatcher
from src.taskviews.grouping import UNSECTIONED, section_counts, section_label
from src.taskviews.list_view import ListViewState
from src.taskviews.models import Task


def _title_key(task_id: str) -> str:
    return f"tv-list-title-{task_id}"


def _open_editor(state: ListViewState, task: Task) -> None:
    state.editing_task_id = task.id
    st.session_state[_title_key(task.id)] = task.title


def _close_editor(state: ListViewState, task_id: str) -> None:
    state.editing_task_id = None
    st.session_state.pop(_title_key(task_id), None)


def _save_title(dispatcher: MutationDispatcher, state: ListViewState, task: Task) -> None:
    new_title = st.session_state.get(_title_key(task.id), "")
    _close_editor(state, task.id)
    dispatcher.edit_title(task, new_title)


def _task_row(dispatcher: MutationDispatcher, state: ListViewState, task: Task, now: datetime) -> None:
    done_key = f"tv-list-done-{task.id}"
    # the checkbox mirrors the loaded task; a failed toggle snaps back on the next run
    st.session_state[done_key] = task.is_completed
    c_done, c_body, c_actions = st.columns([0.07, 0.75, 0.18])
    with c_done:
        st.checkbox(
            "Done",
            key=done_key,
            label_visibility="collapsed",
            on_change=dispatcher.toggle_complete,
            args=(task, now),
        )
    with c_body:
        if state.editing_task_id == task.id:
            st.text_input("Title", key=_title_key(task.id), label_visibility="collapsed")
            s1, s2 = st.columns(2)
            s1.button(
                "Save",
                key=f"tv-list-save-{task.id}",
                on_click=_save_title,
                args=(dispatcher, state, task),
            )
            s2.button(
                "Cancel",
                key=f"tv-list-cancel-{task.id}",
                on_click=_close_editor,
                args=(state, task.id),
            )
        else:
            st.markdown(make_card_html(task, now=now), unsafe_allow_html=True)
    with c_actions:
        a1, a2 = st.columns(2)
        a1.button("✏️", key=f"tv-list-edit-{task.id}", help="Edit title", on_click=_open_editor, args=(state, task))
        a2.button(
            "🗑️",
            key=f"tv-list-del-{task.id}",
            help="Delete task",
            on_click=request_confirm,
            args=(f"task-{task.id}",),
        )
    confirm_gate(f"task-{task.id}", TASK_DELETE_PROMPT, partial(dispatcher.delete_task, task.id, confirmed=True))


def _section_block(
    dispatcher: MutationDispatcher,
    state: ListViewState,
    key: str,
    tasks,
    count: int,
    now: datetime,
) -> None:
    label = section_label(key, dispatcher.sections)
    arrow = "▾" if state.is_expanded(key) else "▸"
    h1, h2, h3 = st.columns([0.7, 0.15, 0.15])
    h1.button(f"{arrow} {label}  ({count})", key=f"tv-list-toggle-{key}", on_click=state.toggle_section, args=(key,))
    h2.button("＋ Task", key=f"tv-list-add-{key}", on_click=state.open_create, args=(key,))
    if key != UNSECTIONED:
        h3.button("Delete", key=f"tv-list-delsec-{key}", on_click=request_confirm, args=(f"section-{key}",))
        confirm_gate(
            f"section-{key}",
            SECTION_DELETE_PROMPT,
            partial(dispatcher.delete_section, key, confirmed=True),
        )

    if state.creating_in == key:
        payload = task_form(f"tv-list-form-{key}")
        if payload is not None:
            # a failed create keeps the form open with its inputs
            if dispatcher.create_task(section_ref(key), payload) is not None:
                state.close_create()
            st.rerun()
        st.button("Close", key=f"tv-list-close-{key}", on_click=state.close_create)

    if not state.is_expanded(key):
        return
    if not tasks:
        st.markdown('<div class="tv-empty">No tasks in this section</div>', unsafe_allow_html=True)
        return
    for task in tasks:
        _task_row(dispatcher, state, task, now)


def render_list(dispatcher: MutationDispatcher, now: Optional[datetime] = None) -> None:
    now = now or datetime.utcnow()
    state: ListViewState = view_state(dispatcher.project_id, "list", ListViewState)
    state.sync(dispatcher.sections)

    groups = dispatcher.grouping()
    counts = section_counts(groups)

    for section in dispatcher.sections:
        _section_block(dispatcher, state, section.id, groups.get(section.id, []), counts.get(section.id, 0), now)
        st.divider()
    # unsectioned always renders, even when empty
    _section_block(dispatcher, state, UNSECTIONED, groups.get(UNSECTIONED, []), counts.get(UNSECTIONED, 0), now)

    st.markdown("---")
    section_form(dispatcher, f"tv-new-section-{dispatcher.project_id}")
    st.caption(f"{len(dispatcher.tasks)} tasks")
