"""Gantt-style timeline rendered as an absolutely positioned HTML grid."""
from __future__ import annotations

import html
from datetime import datetime
from typing import List, Optional

import streamlit as st

from src.taskviews.config import get_config
from src.taskviews.dispatcher import MutationDispatcher
from src.taskviews.timeline import TimelineLayout, build_layout

LABEL_COLUMN_WIDTH = 264
ROW_HEIGHT = 40
HEADER_HEIGHT = 52
EMPTY_MESSAGE = "No tasks with dates"


def _header_html(layout: TimelineLayout) -> str:
    dw = layout.day_width
    months = "".join(
        f'<div style="position:absolute;left:{m.offset * dw}px;width:{m.days * dw}px;top:0;height:24px;'
        f'border-right:1px solid #e5e7eb;font-size:.75rem;font-weight:700;color:#0b2140;padding:4px 6px;'
        f'white-space:nowrap;overflow:hidden;">{html.escape(m.label)}</div>'
        for m in layout.months
    )
    days: List[str] = []
    for idx, cell in enumerate(layout.days):
        bg = "#dbeafe" if cell.is_today else ("#f3f4f6" if cell.is_weekend else "transparent")
        days.append(
            f'<div style="position:absolute;left:{idx * dw}px;width:{dw}px;top:24px;height:28px;'
            f'background:{bg};border-right:1px solid #f1f5f9;font-size:.7rem;color:#6b7280;'
            f'text-align:center;line-height:28px;">{cell.label}</div>'
        )
    return months + "".join(days)


def _bar_row_html(layout: TimelineLayout, index: int) -> str:
    bar = layout.bars[index]
    top = HEADER_HEIGHT + index * ROW_HEIGHT
    title = html.escape(bar.task.title)
    label = f'<span style="padding:0 8px;">{title}</span>' if bar.show_label else ""
    opacity = "0.6" if bar.task.is_completed else "1"
    return (
        f'<div style="position:absolute;left:0;top:{top}px;width:{LABEL_COLUMN_WIDTH}px;height:{ROW_HEIGHT}px;'
        f'line-height:{ROW_HEIGHT}px;padding-left:10px;font-size:.85rem;color:#0b2140;white-space:nowrap;'
        f'overflow:hidden;text-overflow:ellipsis;border-bottom:1px solid #f1f5f9;">{title}</div>'
        f'<div title="{html.escape(bar.tooltip)}" style="position:absolute;'
        f'left:{LABEL_COLUMN_WIDTH + bar.offset}px;top:{top + 8}px;width:{bar.width}px;'
        f'height:{ROW_HEIGHT - 16}px;background:{bar.color};opacity:{opacity};border-radius:6px;color:#fff;'
        f'font-size:.72rem;line-height:{ROW_HEIGHT - 16}px;overflow:hidden;white-space:nowrap;">{label}</div>'
    )


def timeline_html(layout: TimelineLayout) -> str:
    """Full grid markup: label column, month and day header, bars and today marker."""
    if layout.is_empty:
        return f'<div class="tv-empty">{EMPTY_MESSAGE}</div>'
    height = HEADER_HEIGHT + len(layout.bars) * ROW_HEIGHT
    width = LABEL_COLUMN_WIDTH + layout.grid_width
    parts = [
        f'<div style="overflow-x:auto;border:1px solid #dce6f1;border-radius:12px;background:#fff;">',
        f'<div style="position:relative;width:{width}px;height:{height}px;">',
        f'<div style="position:absolute;left:{LABEL_COLUMN_WIDTH}px;top:0;width:{layout.grid_width}px;height:{HEADER_HEIGHT}px;">',
        _header_html(layout),
        "</div>",
    ]
    parts.extend(_bar_row_html(layout, i) for i in range(len(layout.bars)))
    if 0 <= layout.today_offset <= layout.grid_width:
        parts.append(
            f'<div style="position:absolute;left:{LABEL_COLUMN_WIDTH + layout.today_offset}px;top:0;'
            f'width:2px;height:{height}px;background:#ef4444;"></div>'
        )
    parts.append("</div></div>")
    return "".join(parts)


def render_timeline(dispatcher: MutationDispatcher, now: Optional[datetime] = None) -> None:
    layout = build_layout(dispatcher.tasks, day_width=get_config().day_width, now=now)
    if not layout.is_empty:
        st.caption(
            f"{layout.window_start:%b %d, %Y} → {layout.window_end:%b %d, %Y} · {len(layout.bars)} scheduled tasks"
        )
    st.markdown(timeline_html(layout), unsafe_allow_html=True)
