from __future__ import annotations

import html
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

import streamlit as st

from src.taskviews.client import TaskApiClient
from src.taskviews.config import get_config
from src.taskviews.dispatcher import MutationDispatcher
from src.taskviews.models import PRIORITIES, Task

NOTICES_KEY = "tv-notices"

PRIORITY_LABELS = {"low": "Low", "medium": "Medium", "high": "High", "urgent": "Urgent"}


def add_projection_styles() -> None:
    """Card, row and column styles shared by the three projections."""
    st.markdown(
        """
        <style>
        .tv-col { background:linear-gradient(145deg,#ffffff,#f1f6fb); border-radius:16px; box-shadow:0 4px 20px -4px rgba(11,99,214,0.10); padding:.9rem .7rem .6rem; min-height:160px; border:2px solid transparent; transition:border .2s, background .2s; }
        .tv-col-target { border:2px dashed #93c5fd; }
        .tv-col-hover { background:#eff6ff; border:2px solid #3b82f6; }
        .tv-col-header { display:flex; align-items:center; justify-content:space-between; font-weight:700; color:#0b2140; margin-bottom:.5rem; }
        .tv-count { font-size:.7rem; font-weight:600; background:#e5e7eb; color:#374151; border-radius:999px; padding:1px 8px; margin-left:6px; }
        .tv-card { background:#fff; border-radius:12px; border:1px solid #dce6f1; box-shadow:0 3px 10px -4px rgba(11,99,214,0.18); padding:.6rem .7rem; margin-bottom:.45rem; position:relative; }
        .tv-card-title { font-weight:600; color:#0b2140; font-size:.95rem; line-height:1.2; }
        .tv-card-done .tv-card-title { text-decoration:line-through; color:#6b7280; }
        .tv-meta { color:#6b7b8f; font-size:.72rem; margin-top:.25rem; }
        .tv-overdue { color:#b91c1c; font-weight:600; }
        .tv-priority { display:inline-block; font-size:.62rem; font-weight:700; border-radius:999px; padding:1px 8px; margin-left:6px; text-transform:uppercase; letter-spacing:.5px; }
        .tv-priority-low { background:#f3f4f6; color:#1f2937; }
        .tv-priority-medium { background:#dbeafe; color:#1e40af; }
        .tv-priority-high { background:#ffedd5; color:#9a3412; }
        .tv-priority-urgent { background:#fee2e2; color:#991b1b; }
        .tv-section-head { font-weight:700; color:#0b2140; font-size:1.02rem; }
        .tv-empty { text-align:center; color:#6b7280; font-size:.85rem; padding:1.2rem 0; }
        </style>
        """,
        unsafe_allow_html=True,
    )


# ---------------- notifications ----------------

def queue_notice(message: str, level: str) -> None:
    """Notifier for the dispatcher; notices survive the rerun that follows a mutation."""
    st.session_state.setdefault(NOTICES_KEY, []).append((message, level))


def show_pending_notices() -> None:
    pending: List[Any] = st.session_state.pop(NOTICES_KEY, [])
    for message, level in pending:
        st.toast(message, icon="✅" if level == "success" else "⚠️")


# ---------------- dispatcher per project ----------------

def get_api_client(source: str) -> TaskApiClient:
    key = f"tv-client-{source}"
    if key not in st.session_state:
        st.session_state[key] = TaskApiClient.from_config(get_config(), source=source)
    return st.session_state[key]


def get_dispatcher(project_id: str) -> MutationDispatcher:
    """One dispatcher per project per browser session.

    Only the project is loaded here; tasks are fetched when a projection mounts.
    """
    key = f"tv-dispatcher-{project_id}"
    dispatcher: Optional[MutationDispatcher] = st.session_state.get(key)
    if dispatcher is None:
        dispatcher = MutationDispatcher(
            get_api_client("projects_page"),
            project_id,
            workspace_id=get_config().workspace_id,
            notify=queue_notice,
        )
        dispatcher.reload_project(with_tasks=False)
        st.session_state[key] = dispatcher
    return dispatcher


def view_state(project_id: str, name: str, factory) -> Any:
    """Transient per-view state, never sent to the server."""
    key = f"tv-{name}-{project_id}"
    if key not in st.session_state:
        st.session_state[key] = factory()
    return st.session_state[key]


# ---------------- confirmation gate ----------------

SECTION_DELETE_PROMPT = 'Delete this section? Tasks will be moved to "Unsectioned".'
TASK_DELETE_PROMPT = "Delete this task?"


def request_confirm(key: str) -> None:
    st.session_state[f"tv-confirm-{key}"] = True


def _answer_confirm(key: str, action: Optional[Callable[[], Any]] = None) -> None:
    st.session_state.pop(f"tv-confirm-{key}", None)
    if action is not None:
        action()


def confirm_gate(key: str, prompt: str, on_confirm: Callable[[], Any]) -> bool:
    """Render a pending confirmation for ``key``; returns whether one is shown.

    ``on_confirm`` runs from the Confirm button's callback, so it fires once
    per click and before the next script run.
    """
    if not st.session_state.get(f"tv-confirm-{key}"):
        return False
    st.warning(prompt)
    c1, c2 = st.columns(2)
    c1.button(
        "Confirm",
        key=f"tv-confirm-{key}-yes",
        type="primary",
        on_click=_answer_confirm,
        args=(key, on_confirm),
    )
    c2.button("Cancel", key=f"tv-confirm-{key}-no", on_click=_answer_confirm, args=(key,))
    return True


# ---------------- formatting ----------------

def format_due(value: Optional[datetime], today: Optional[date] = None) -> str:
    if value is None:
        return ""
    today = today or date.today()
    if value.date() == today:
        return "Today"
    if value.date() == today + timedelta(days=1):
        return "Tomorrow"
    return f"{value.strftime('%b')} {value.day}"


def priority_badge(priority: str) -> str:
    label = PRIORITY_LABELS.get(priority, priority.title())
    return f'<span class="tv-priority tv-priority-{html.escape(priority)}">{html.escape(label)}</span>'


def task_meta_html(task: Task, now: Optional[datetime] = None) -> str:
    parts: List[str] = []
    if task.assigned_user_name:
        parts.append(f"👤 {html.escape(task.assigned_user_name)}")
    due_text = format_due(task.due, (now or datetime.utcnow()).date())
    if due_text:
        cls = ' class="tv-overdue"' if task.is_overdue(now) else ""
        parts.append(f"📅 <span{cls}>{html.escape(due_text)}</span>")
    if task.estimated_hours:
        parts.append(f"⏱️ {task.estimated_hours:g}h")
    return " • ".join(parts)


def make_card_html(task: Task, *, opacity: float = 1.0, now: Optional[datetime] = None) -> str:
    done_cls = " tv-card-done" if task.is_completed else ""
    style = f' style="opacity:{opacity};"' if opacity != 1.0 else ""
    card = (
        f'<div class="tv-card{done_cls}"{style}>'
        f'<div class="tv-card-title">{html.escape(task.title)} {priority_badge(task.priority)}</div>'
    )
    if task.description:
        snippet = task.description if len(task.description) <= 120 else task.description[:117] + "..."
        card += f'<div class="tv-meta">{html.escape(snippet)}</div>'
    meta = task_meta_html(task, now)
    if meta:
        card += f'<div class="tv-meta">{meta}</div>'
    card += "</div>"
    return card


# ---------------- creation forms ----------------

def task_form(form_key: str) -> Optional[Dict[str, Any]]:
    """Task creation form. Returns the payload on submit with a non-blank title.

    Inputs are kept after submit so a failed create can be retried; callers
    stop rendering the form once the task exists.
    """
    with st.form(form_key, clear_on_submit=False):
        title = st.text_input("Title", key=f"{form_key}-title")
        description = st.text_area("Description", height=80, key=f"{form_key}-description")
        c1, c2, c3 = st.columns(3)
        with c1:
            priority = st.selectbox(
                "Priority",
                PRIORITIES,
                index=1,
                format_func=lambda p: PRIORITY_LABELS[p],
                key=f"{form_key}-priority",
            )
        with c2:
            start_date = st.date_input("Start date", value=None, key=f"{form_key}-start")
        with c3:
            due_date = st.date_input("Due date", value=None, key=f"{form_key}-due")
        estimated = st.number_input(
            "Estimated hours", min_value=0.0, step=0.5, value=0.0, key=f"{form_key}-hours"
        )
        submitted = st.form_submit_button("Create task")
    if not submitted:
        return None
    if not title.strip():
        st.warning("Title is required")
        return None
    return {
        "title": title.strip(),
        "description": description.strip() or None,
        "priority": priority,
        "start_date": start_date.isoformat() if start_date else None,
        "due_date": due_date.isoformat() if due_date else None,
        "estimated_hours": estimated or None,
    }


def section_form(dispatcher: MutationDispatcher, form_key: str) -> None:
    with st.form(form_key, clear_on_submit=True):
        name = st.text_input("New section", placeholder="Section name", key=f"{form_key}-name")
        if st.form_submit_button("Add section") and name.strip():
            dispatcher.create_section(name)
            st.rerun()
