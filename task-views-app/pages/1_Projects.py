"""Projects - list, board and timeline views over a project's tasks."""

import html

import streamlit as st

from src.projections import VIEW_LABELS, mount_projection, render_projection
from src.projections.common import (
    add_projection_styles,
    get_api_client,
    get_dispatcher,
    show_pending_notices,
)
from src.taskviews.client import TaskApiError
from src.taskviews.config import get_config
from src.taskviews.models import MOUNTABLE_VIEWS, effective_view
from src.theme import set_theme

set_theme(page_title="Projects", page_icon="📋")
add_projection_styles()

st.markdown(
    """
    <style>
    .project-hero { border-radius:18px; padding:1.4rem 1.8rem; margin-bottom:1.2rem; color:#fff; box-shadow:0 10px 32px rgba(11,99,214,0.25); }
    .project-hero h1 { font-size:2rem; font-weight:800; margin:0 0 .3rem 0; }
    .project-hero p { margin:0; opacity:.92; }
    .project-stats { margin-top:.6rem; font-size:.85rem; opacity:.9; }
    </style>
    """,
    unsafe_allow_html=True,
)

cfg = get_config()

# ---------------- project picker ----------------
with st.sidebar:
    st.markdown("### Workspace")
    workspace_id = st.text_input("Workspace ID", value=cfg.workspace_id or "", key="tv-workspace")
    if st.button("Refresh projects", use_container_width=True):
        st.session_state.pop("tv-projects", None)

if not workspace_id:
    st.info("Set TASK_WORKSPACE_ID or enter a workspace ID in the sidebar to list its projects.")
    st.stop()

if "tv-projects" not in st.session_state:
    try:
        projects = get_api_client("project_picker").list_projects(workspace_id)
    except TaskApiError as e:
        st.error(f"Failed to load projects: {e}")
        st.stop()
    st.session_state["tv-projects"] = [p for p in projects if not p.is_archived]

projects = st.session_state["tv-projects"]
if not projects:
    st.info("No projects in this workspace yet.")
    st.stop()

with st.sidebar:
    by_id = {p.id: p for p in projects}
    project_id = st.selectbox(
        "Project",
        options=list(by_id),
        format_func=lambda pid: f"{by_id[pid].icon or '📁'} {by_id[pid].name}",
        key="tv-project",
    )
    project = by_id[project_id]

dispatcher = get_dispatcher(project.id)
with st.sidebar:
    if st.button("Reload tasks", use_container_width=True):
        dispatcher.reload_project()

show_pending_notices()

loaded = dispatcher.project
if loaded is None:
    st.error("Project could not be loaded.")
    st.stop()

# ---------------- header ----------------
# filled after the view switcher has mounted a projection and fetched its tasks
header = st.container()

# ---------------- view switcher ----------------
current = effective_view(loaded.default_view)
view = st.radio(
    "View",
    options=MOUNTABLE_VIEWS,
    index=MOUNTABLE_VIEWS.index(current),
    format_func=lambda v: VIEW_LABELS[v],
    horizontal=True,
    key=f"tv-view-{project.id}",
    label_visibility="collapsed",
)
if view != current:
    dispatcher.set_default_view(view)
mount_projection(view, dispatcher)

color = loaded.color or "#0b63d6"
done = loaded.completed_tasks if loaded.completed_tasks is not None else sum(1 for t in dispatcher.tasks if t.is_completed)
active = loaded.active_tasks if loaded.active_tasks is not None else len(dispatcher.tasks) - done
header.markdown(
    f"""
    <div class="project-hero" style="background:linear-gradient(135deg, {html.escape(color)} 0%, #0f172a 140%);">
        <h1>{html.escape(loaded.icon or '📁')} {html.escape(loaded.name)}</h1>
        <p>{html.escape(loaded.description or '')}</p>
        <div class="project-stats">{active} active • {done} completed • {len(dispatcher.sections)} sections</div>
    </div>
    """,
    unsafe_allow_html=True,
)

render_projection(view, dispatcher)
