from datetime import datetime

from src.taskviews.models import Task
from src.taskviews.timeline import (
    COMPLETED_BAR_COLOR,
    DEFAULT_DAY_WIDTH,
    PRIORITY_BAR_COLORS,
    build_layout,
    compute_window,
    days_between,
    layout_bar,
    month_bands,
    day_cells,
)

NOW = datetime(2024, 1, 12, 9, 0)


def test_days_between_rounds_up():
    assert days_between(datetime(2024, 1, 1), datetime(2024, 1, 1)) == 0
    assert days_between(datetime(2024, 1, 1, 18), datetime(2024, 1, 2, 6)) == 1
    assert days_between(datetime(2024, 1, 1), datetime(2024, 1, 3, 0, 1)) == 3


def test_bar_offset_and_width():
    task = Task(id="1", title="Plan", start_date="2024-01-10", due_date="2024-01-15")
    bar = layout_bar(task, datetime(2024, 1, 1), datetime(2024, 2, 1), 40)
    assert bar.offset == 360
    assert bar.width == 200
    assert bar.duration_days == 5


def test_same_day_task_is_one_day_wide():
    task = Task(id="1", title="Ship", start_date="2024-01-10", due_date="2024-01-10")
    layout = build_layout([task], now=NOW)
    assert layout.bar_for("1").width == DEFAULT_DAY_WIDTH


def test_single_date_uses_it_for_both_ends():
    due_only = Task(id="1", title="Due", due_date="2024-01-20")
    bar = layout_bar(due_only, datetime(2024, 1, 1), datetime(2024, 2, 1), 40)
    assert bar.start == bar.end == datetime(2024, 1, 20)
    assert bar.width == 40


def test_window_is_padded_by_a_week():
    tasks = [
        Task(id="1", title="a", start_date="2024-01-10", due_date="2024-01-15"),
        Task(id="2", title="b", due_date="2024-02-01"),
    ]
    start, end = compute_window(tasks, NOW)
    assert start == datetime(2024, 1, 3)
    assert end == datetime(2024, 2, 8)


def test_no_dated_tasks_gives_empty_layout_and_default_window():
    layout = build_layout([Task(id="1", title="undated")], now=NOW)
    assert layout.is_empty
    assert layout.window_start == NOW
    assert days_between(layout.window_start, layout.window_end) == 30


def test_undated_tasks_are_excluded():
    tasks = [Task(id="1", title="undated"), Task(id="2", title="dated", start_date="2024-01-10")]
    layout = build_layout(tasks, now=NOW)
    assert [b.task.id for b in layout.bars] == ["2"]


def test_bar_colors_and_labels():
    window = (datetime(2024, 1, 1), datetime(2024, 2, 1))
    urgent = Task(id="1", title="u", priority="urgent", start_date="2024-01-02", due_date="2024-01-10")
    done = Task(id="2", title="d", priority="urgent", start_date="2024-01-02", due_date="2024-01-03",
                completed_at="2024-01-03T10:00:00Z")
    layout = build_layout([urgent, done], now=NOW, window=window)
    assert layout.bar_for("1").color == PRIORITY_BAR_COLORS["urgent"]
    assert layout.bar_for("1").show_label
    assert layout.bar_for("2").color == COMPLETED_BAR_COLOR
    assert not layout.bar_for("2").show_label
    assert layout.bar_for("1").tooltip == "Jan 2 - Jan 10"


def test_day_cells_and_month_bands():
    cells = day_cells(datetime(2024, 1, 29), datetime(2024, 2, 3), NOW)
    assert [c.label for c in cells] == ["29", "30", "31", "1", "2"]
    assert not cells[0].is_weekend
    bands = month_bands(cells)
    assert [(b.label, b.days, b.offset) for b in bands] == [("January 2024", 3, 0), ("February 2024", 2, 3)]


def test_today_marker_offset():
    window = (datetime(2024, 1, 1), datetime(2024, 2, 1))
    layout = build_layout([Task(id="1", title="a", start_date="2024-01-05")], now=NOW, window=window, day_width=10)
    # 11 days and 9 hours rounds up to 12
    assert layout.today_offset == 120
    assert any(c.is_today for c in layout.days)
    assert layout.grid_width == 31 * 10
