"""API Log - insights into the REST calls made by the task views."""

import html
import json
from datetime import datetime, timedelta

import pandas as pd
import plotly.express as px
import streamlit as st
from sqlalchemy.exc import SQLAlchemyError

from src.api_log import (
    cleanup_old_logs,
    get_api_call_stats,
    get_api_calls,
    get_endpoint_stats,
    get_recent_errors,
    init_db,
)
from src.api_log.config import get_config as get_log_config
from src.api_log.db import get_backend_name
from src.theme import set_theme

set_theme(page_title="API Log", page_icon="📊")

st.markdown(
    """
    <style>
    .api-log-hero {
        background: linear-gradient(135deg, #0ea5e9 0%, #06b6d4 50%, #14b8a6 100%);
        border-radius: 20px;
        padding: 2rem 2.5rem;
        margin-bottom: 2rem;
        color: white;
        box-shadow: 0 10px 40px rgba(14, 165, 233, 0.3);
    }
    .api-log-hero h1 { font-size: 2.2rem; font-weight: 800; margin: 0 0 0.5rem 0; }
    .api-log-hero p { margin: 0; font-size: 1.05rem; opacity: 0.95; }
    .api-stat { background: #ffffff; border-radius: 14px; padding: 1.2rem; border: 1px solid #e2e8f0; text-align: center; }
    .api-stat-value { font-size: 2.3rem; font-weight: 800; color: #0f172a; line-height: 1; }
    .api-stat-label { font-size: 0.9rem; color: #64748b; margin-top: 0.5rem; }
    .api-error { background: #fef2f2; border-radius: 8px; padding: .7rem 1rem; margin: .5rem 0; border-left: 3px solid #ef4444; }
    </style>
    """,
    unsafe_allow_html=True,
)

st.markdown(
    """
    <div class="api-log-hero">
        <h1>API Log & Analytics</h1>
        <p>Every call the project views make to the task service, with timings and failures</p>
    </div>
    """,
    unsafe_allow_html=True,
)

log_cfg = get_log_config()
if not log_cfg.enabled:
    st.info("API call logging is disabled (API_LOG_ENABLED=false).")

try:
    init_db()
except SQLAlchemyError as e:
    st.error(f"Failed to connect to the API log database: {e}")
    st.info("Check API_LOG_DATABASE_URL.")
    st.stop()


def _stat_card(value: str, label: str, color: str = "#0f172a") -> None:
    st.markdown(
        f"""
        <div class="api-stat">
            <div class="api-stat-value" style="color: {color};">{value}</div>
            <div class="api-stat-label">{label}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )


# Sidebar controls
with st.sidebar:
    st.markdown("### Time Range")
    time_options = {
        "Last Hour": timedelta(hours=1),
        "Last 24 Hours": timedelta(hours=24),
        "Last 7 Days": timedelta(days=7),
        "Last 30 Days": timedelta(days=30),
    }
    selected_range = st.selectbox("Select time range", options=list(time_options.keys()), index=1)
    until = datetime.utcnow()
    since = until - time_options[selected_range]

    st.divider()
    if st.button("Refresh Data", use_container_width=True):
        st.rerun()

    st.markdown("### Maintenance")
    st.caption(f"Backend: {get_backend_name()} · retention: {log_cfg.retention_days} days")
    if st.button("Cleanup Old Logs", use_container_width=True):
        with st.spinner("Cleaning up..."):
            deleted = cleanup_old_logs()
        st.success(f"Deleted {deleted} old log entries")

stats = get_api_call_stats(since=since, until=until)

st.markdown("### Overview")
cols = st.columns(5)
with cols[0]:
    _stat_card(f"{stats['total_calls']:,}", "Total Calls")
with cols[1]:
    rate = stats["success_rate"]
    _stat_card(f"{rate}%", "Success Rate", "#22c55e" if rate >= 90 else "#f59e0b" if rate >= 70 else "#ef4444")
with cols[2]:
    _stat_card(f"{(stats['avg_duration_ms'] or 0):.0f}<span style='font-size:1rem;'>ms</span>", "Avg Duration")
with cols[3]:
    _stat_card(str(stats["unique_endpoints"]), "Endpoints")
with cols[4]:
    _stat_card(f"{stats['failed_calls']:,}", "Failed Calls", "#ef4444")

st.divider()

tabs = st.tabs(["Endpoints", "Errors", "Log Browser"])

with tabs[0]:
    endpoint_stats = get_endpoint_stats(since=since, until=until)
    if endpoint_stats:
        df = pd.DataFrame(endpoint_stats)
        df["route"] = df["method"] + " " + df["endpoint"]
        st.dataframe(
            df[["route", "total_calls", "successful_calls", "failed_calls", "success_rate", "avg_duration_ms"]],
            use_container_width=True,
            hide_index=True,
            column_config={
                "route": st.column_config.TextColumn("Endpoint", width="large"),
                "total_calls": st.column_config.NumberColumn("Calls", format="%d"),
                "successful_calls": st.column_config.NumberColumn("Success", format="%d"),
                "failed_calls": st.column_config.NumberColumn("Failed", format="%d"),
                "success_rate": st.column_config.ProgressColumn(
                    "Success Rate", min_value=0, max_value=100, format="%.1f%%"
                ),
                "avg_duration_ms": st.column_config.NumberColumn("Avg Duration (ms)", format="%.1f"),
            },
        )
        fig = px.bar(
            df,
            x="total_calls",
            y="route",
            orientation="h",
            labels={"total_calls": "Calls", "route": "Endpoint"},
            title="Calls by endpoint",
            template="plotly_white",
        )
        fig.update_layout(height=max(260, 32 * len(df)), margin=dict(l=10, r=10, t=40, b=10))
        st.plotly_chart(fig, use_container_width=True)
    else:
        st.info("No calls recorded for the selected time range.")

with tabs[1]:
    errors = get_recent_errors(limit=30, since=since)
    if errors:
        for error in errors:
            started = (error.get("started_at") or "")[:19] or "Unknown time"
            message = (error.get("error_message") or "Unknown error")[:200]
            st.markdown(
                f"""
                <div class="api-error">
                    <strong>{html.escape(error['method'])}</strong> <code>{html.escape(error['endpoint'])}</code>
                    <span style="color:#64748b;"> · {error.get('status_code') or 'no response'}</span>
                    <br><span style="color: #64748b; font-size: 0.85rem;">{started}</span>
                    <br><span style="color: #ef4444;">{html.escape(error.get('error_type') or 'Error')}: {html.escape(message)}</span>
                </div>
                """,
                unsafe_allow_html=True,
            )
    else:
        st.success("No errors in the selected time range!")

with tabs[2]:
    f1, f2 = st.columns(2)
    with f1:
        status = st.selectbox("Filter by status", options=["All", "Success", "Failed"], key="api_log_status")
    with f2:
        limit = st.selectbox("Results", options=[25, 50, 100, 200], index=1, key="api_log_limit")

    query = {"since": since, "until": until, "limit": limit}
    if status != "All":
        query["success"] = status == "Success"

    logs = get_api_calls(**query)
    if logs:
        st.markdown(f"**Showing {len(logs)} log entries**")
        for log in logs:
            icon = "✅" if log.get("success") else "❌"
            duration = f"{log['duration_ms']:.0f}ms" if log.get("duration_ms") is not None else "N/A"
            with st.expander(f"{icon} {log['method']} {log['endpoint']} - {duration}"):
                c1, c2 = st.columns(2)
                with c1:
                    st.markdown(f"**URL:** `{log.get('url') or 'N/A'}`")
                    st.markdown(f"**Status code:** {log.get('status_code') or 'N/A'}")
                    st.markdown(f"**Source:** {log.get('source') or 'N/A'}")
                with c2:
                    st.markdown(f"**Started:** {log.get('started_at', 'N/A')}")
                    st.markdown(f"**Duration:** {duration}")
                if log.get("body_json"):
                    st.markdown("**Body:**")
                    try:
                        st.json(json.loads(log["body_json"]))
                    except ValueError:
                        st.code(log["body_json"])
                if log.get("error_message"):
                    st.error(f"{log.get('error_type') or 'Error'}: {log['error_message']}")
    else:
        st.info("No logs found for the selected filters.")

st.divider()
st.caption(
    "Calls are logged by the task API client. Old entries are removed after the retention period "
    "(API_LOG_RETENTION_DAYS). Tokens and passwords in request bodies are redacted."
)
