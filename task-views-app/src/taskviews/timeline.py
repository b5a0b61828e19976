"""Date-range layout for the timeline (Gantt) projection.

All day differences use ``days_between``, which rounds *up*:
``ceil((end - start) / 1 day)``. A window end earlier in the day than the
window start on a later calendar day still counts as a whole day.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from src.taskviews.models import Task

DEFAULT_DAY_WIDTH = 40
WINDOW_PADDING_DAYS = 7
EMPTY_WINDOW_DAYS = 30
LABEL_MIN_WIDTH = 100

PRIORITY_BAR_COLORS = {
    "urgent": "#ef4444",
    "high": "#f97316",
    "medium": "#3b82f6",
    "low": "#6b7280",
}
COMPLETED_BAR_COLOR = "#9ca3af"

_DAY_SECONDS = 24 * 60 * 60


def days_between(start: datetime, end: datetime) -> int:
    return math.ceil((end - start).total_seconds() / _DAY_SECONDS)


@dataclass(frozen=True)
class TaskBar:
    task: Task
    start: datetime
    end: datetime
    duration_days: int
    offset: int
    width: int

    @property
    def color(self) -> str:
        if self.task.is_completed:
            return COMPLETED_BAR_COLOR
        return PRIORITY_BAR_COLORS.get(self.task.priority, PRIORITY_BAR_COLORS["low"])

    @property
    def show_label(self) -> bool:
        return self.width > LABEL_MIN_WIDTH

    @property
    def tooltip(self) -> str:
        start = _short_date(self.task.start)
        due = _short_date(self.task.due)
        return f"{start} - {due}"


@dataclass(frozen=True)
class DayCell:
    date: datetime
    is_weekend: bool
    is_today: bool

    @property
    def label(self) -> str:
        return str(self.date.day)


@dataclass(frozen=True)
class MonthBand:
    label: str
    days: int
    offset: int


@dataclass
class TimelineLayout:
    window_start: datetime
    window_end: datetime
    day_width: int
    bars: List[TaskBar] = field(default_factory=list)
    days: List[DayCell] = field(default_factory=list)
    months: List[MonthBand] = field(default_factory=list)
    today_offset: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.bars

    @property
    def total_days(self) -> int:
        return days_between(self.window_start, self.window_end)

    @property
    def grid_width(self) -> int:
        return max(0, self.total_days) * self.day_width

    def bar_for(self, task_id: str) -> Optional[TaskBar]:
        for bar in self.bars:
            if bar.task.id == task_id:
                return bar
        return None

    def to_dict(self) -> Dict[str, object]:
        return {
            "window_start": self.window_start.isoformat(),
            "window_end": self.window_end.isoformat(),
            "day_width": self.day_width,
            "total_days": self.total_days,
            "today_offset": self.today_offset,
            "bars": [{"task_id": b.task.id, "offset": b.offset, "width": b.width} for b in self.bars],
        }


def _short_date(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return f"{value.strftime('%b')} {value.day}"


def dated_tasks(tasks: Iterable[Task]) -> List[Task]:
    """Tasks with a start date, a due date, or both."""
    return [t for t in tasks if t.start is not None or t.due is not None]


def compute_window(tasks: Iterable[Task], now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Padded min/max of all task dates, or ``[now, now + 30 days]`` when none exist."""
    now = now or datetime.utcnow()
    dates: List[datetime] = []
    for t in tasks:
        for d in (t.start, t.due):
            if d is not None:
                dates.append(d)
    if not dates:
        return now, now + timedelta(days=EMPTY_WINDOW_DAYS)
    return (
        min(dates) - timedelta(days=WINDOW_PADDING_DAYS),
        max(dates) + timedelta(days=WINDOW_PADDING_DAYS),
    )


def layout_bar(task: Task, window_start: datetime, window_end: datetime, day_width: int) -> TaskBar:
    start = task.start or task.due or window_start
    end = task.due or task.start or window_end
    duration = max(1, days_between(start, end))
    offset = max(0, days_between(window_start, start)) * day_width
    return TaskBar(
        task=task,
        start=start,
        end=end,
        duration_days=duration,
        offset=offset,
        width=duration * day_width,
    )


def day_cells(window_start: datetime, window_end: datetime, now: datetime) -> List[DayCell]:
    cells = []
    for idx in range(max(0, days_between(window_start, window_end))):
        day = window_start + timedelta(days=idx)
        cells.append(
            DayCell(
                date=day,
                is_weekend=day.weekday() >= 5,
                is_today=day.date() == now.date(),
            )
        )
    return cells


def month_bands(cells: List[DayCell]) -> List[MonthBand]:
    """Group contiguous day cells by calendar month."""
    bands: List[MonthBand] = []
    offset = 0
    current: Optional[Tuple[int, int]] = None
    count = 0
    label = ""
    for cell in cells:
        key = (cell.date.year, cell.date.month)
        if key != current:
            if current is not None:
                bands.append(MonthBand(label=label, days=count, offset=offset))
                offset += count
            current = key
            count = 0
            label = cell.date.strftime("%B %Y")
        count += 1
    if current is not None:
        bands.append(MonthBand(label=label, days=count, offset=offset))
    return bands


def build_layout(
    tasks: Iterable[Task],
    *,
    day_width: int = DEFAULT_DAY_WIDTH,
    now: Optional[datetime] = None,
    window: Optional[Tuple[datetime, datetime]] = None,
) -> TimelineLayout:
    """Lay out every dated task on a shared pixel-per-day grid.

    ``window`` overrides the auto-fitted range; ``now`` drives the today
    marker and the empty-state default window.
    """
    now = now or datetime.utcnow()
    visible = dated_tasks(tasks)
    window_start, window_end = window or compute_window(visible, now)
    cells = day_cells(window_start, window_end, now)
    return TimelineLayout(
        window_start=window_start,
        window_end=window_end,
        day_width=day_width,
        bars=[layout_bar(t, window_start, window_end, day_width) for t in visible],
        days=cells,
        months=month_bands(cells),
        today_offset=days_between(window_start, now) * day_width,
    )
