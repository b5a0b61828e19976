import streamlit as st

from src.api_log.config import get_config as get_log_config
from src.taskviews.config import get_config
from src.theme import set_theme

set_theme()

st.markdown(
    """
    <style>
    .tv-landing {
        background: radial-gradient(circle at top left, #dbeafe 0%, #eef2ff 45%, #f8fafc 100%);
        border: 1px solid #dce6f1;
        border-radius: 20px;
        padding: 2.2rem 2.4rem;
        max-width: 960px;
        margin: 2rem auto 1.5rem auto;
    }
    .tv-landing h1 { font-size: 2.4rem; font-weight: 800; color: #0b2140; margin: 0 0 .4rem 0; }
    .tv-landing h2 { font-size: 1.15rem; font-weight: 500; color: #0b63d6; margin: 0 0 1rem 0; }
    .tv-landing p { color: #3a4a6b; font-size: 1rem; margin: 0; }
    </style>
    """,
    unsafe_allow_html=True,
)

st.markdown(
    """
    <div class="tv-landing">
        <h1>Task Views</h1>
        <h2>List, board and timeline views over your projects</h2>
        <p>Pick a project on the <b>Projects</b> page and switch between views.
        Every change is saved to the task service and the project is reloaded,
        so all three views always show the same data.</p>
    </div>
    """,
    unsafe_allow_html=True,
)

cfg = get_config()
log_cfg = get_log_config()

c1, c2 = st.columns(2)
with c1:
    st.markdown("#### Task service")
    st.json(cfg.to_dict())
with c2:
    st.markdown("#### API call log")
    st.json(log_cfg.to_dict())

if not cfg.workspace_id:
    st.info("TASK_WORKSPACE_ID is not set; enter a workspace ID on the Projects page.")
