import os

import streamlit as st
from streamlit.errors import StreamlitAPIException

THEME_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "assets", "custom_theme.css")


def load_theme_css(theme_file: str = THEME_FILE) -> str:
    """Read the shared stylesheet; empty string when it is missing."""
    try:
        with open(theme_file, "r", encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError:
        return ""


def set_theme(
    page_title: str = "Task Views",
    page_icon: str = "📋",
    layout: str = "wide",
    initial_sidebar_state: str = "expanded",
):
    """Configure the Streamlit page and inject the global CSS.

    Safe to call once at the top of each page. Streamlit rejects a second
    set_page_config in the same run; the CSS is injected regardless.
    """
    try:
        st.set_page_config(
            page_title=page_title,
            page_icon=page_icon,
            layout=layout,
            initial_sidebar_state=initial_sidebar_state,
        )
    except StreamlitAPIException:
        pass

    css = load_theme_css()
    if css:
        st.markdown(f"<style>{css}</style>", unsafe_allow_html=True)
    else:
        st.error(f"Theme file not found at {THEME_FILE}. Please check the file path.")
