"""Streamlit renderers for the list, board and timeline projections."""

from datetime import datetime
from typing import Optional

import streamlit as st

from src.taskviews.dispatcher import MutationDispatcher
from src.taskviews.models import VIEW_BOARD, VIEW_TIMELINE, effective_view

from .board_projection import render_board
from .list_projection import render_list
from .timeline_projection import render_timeline

VIEW_LABELS = {"list": "📋 List", "board": "🗂️ Board", "timeline": "📅 Timeline"}

MOUNTED_KEY = "tv-mounted"


def mount_projection(view: str, dispatcher: MutationDispatcher) -> str:
    """Fetch the project's tasks when a projection is (re)mounted.

    A projection counts as remounted whenever the (project, view) pair differs
    from the previous run's. Returns the view that is mounted.
    """
    mounted = effective_view(view)
    marker = (dispatcher.project_id, mounted)
    if st.session_state.get(MOUNTED_KEY) != marker:
        st.session_state[MOUNTED_KEY] = marker
        dispatcher.reload_tasks()
    return mounted


def render_projection(view: str, dispatcher: MutationDispatcher, now: Optional[datetime] = None) -> str:
    """Mount exactly one projection; returns the view that was mounted."""
    mounted = mount_projection(view, dispatcher)
    if mounted == VIEW_BOARD:
        render_board(dispatcher, now)
    elif mounted == VIEW_TIMELINE:
        render_timeline(dispatcher, now)
    else:
        render_list(dispatcher, now)
    return mounted


__all__ = [
    "MOUNTED_KEY",
    "VIEW_LABELS",
    "mount_projection",
    "render_projection",
    "render_board",
    "render_list",
    "render_timeline",
]
