from src.taskviews.board import (
    DRAGGED_CARD_OPACITY,
    BoardDragController,
    Cancelled,
    Dragging,
    DroppedOnSameSection,
    DroppedOnTarget,
    Idle,
    section_ref,
)
from src.taskviews.grouping import UNSECTIONED


def test_drop_on_origin_section_makes_no_calls(api, dispatcher):
    board = BoardDragController(dispatcher)
    board.start_drag("1", "A")
    outcome = board.drop("A")
    assert isinstance(outcome, DroppedOnSameSection)
    assert isinstance(board.state, Idle)
    assert api.calls == []


def test_drop_on_other_section_moves_once(api, dispatcher):
    board = BoardDragController(dispatcher)
    board.start_drag("1", "A")
    board.hover("B")
    outcome = board.drop("B")
    assert outcome == DroppedOnTarget(outcome.payload, "B", True)
    assert api.call_names() == ["move_task", "get_project_tasks"]
    assert "1" in [t.id for t in dispatcher.grouping()["B"]]
    assert board.last_outcome is outcome


def test_drop_on_unsectioned_sends_null_section(api, dispatcher):
    board = BoardDragController(dispatcher)
    board.start_drag("3", "B")
    board.drop(UNSECTIONED)
    assert api.calls[0] == ("move_task", ("3", None))
    assert section_ref(UNSECTIONED) is None
    assert section_ref("B") == "B"


def test_failed_move_reports_and_returns_to_idle(api, dispatcher, notices):
    api.fail_on.add("move_task")
    board = BoardDragController(dispatcher)
    board.start_drag("1", "A")
    outcome = board.drop("B")
    assert isinstance(outcome, DroppedOnTarget)
    assert outcome.moved is False
    assert isinstance(board.state, Idle)
    assert notices.errors == ["Failed to move task"]
    assert "1" in [t.id for t in dispatcher.grouping()["A"]]


def test_cancel_makes_no_calls(api, dispatcher):
    board = BoardDragController(dispatcher)
    board.start_drag("2", "A")
    assert isinstance(board.cancel(), Cancelled)
    assert isinstance(board.state, Idle)
    assert board.cancel() is None
    assert board.drop("B") is None
    assert api.calls == []


def test_presentational_state_follows_drag(dispatcher):
    board = BoardDragController(dispatcher)
    assert board.card_opacity("1") == 1.0
    assert not board.is_drop_target("B")

    state = board.start_drag("1", "A")
    assert isinstance(state, Dragging)
    assert board.card_opacity("1") == DRAGGED_CARD_OPACITY
    assert board.card_opacity("2") == 1.0
    assert not board.is_drop_target("A")
    assert board.is_drop_target("B")
    assert not board.is_highlighted("B")

    board.hover("B")
    assert board.is_highlighted("B")
    board.hover("A")
    assert not board.is_highlighted("A")

    board.cancel()
    assert board.card_opacity("1") == 1.0
    assert not board.is_highlighted("B")
