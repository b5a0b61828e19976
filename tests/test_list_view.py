from src.taskviews.grouping import UNSECTIONED
from src.taskviews.list_view import ListViewState
from src.taskviews.models import Section

SECTIONS = [Section(id="A", name="Todo"), Section(id="B", name="Doing", position=1)]


def test_sync_expands_everything_on_first_render():
    state = ListViewState()
    state.sync(SECTIONS)
    assert state.expanded == {"A", "B", UNSECTIONED}


def test_toggle_section():
    state = ListViewState()
    state.sync(SECTIONS)
    assert state.toggle_section("A") is False
    assert not state.is_expanded("A")
    assert state.toggle_section("A") is True
    assert state.is_expanded("A")


def test_collapsed_state_survives_unchanged_sections():
    state = ListViewState()
    state.sync(SECTIONS)
    state.toggle_section("B")
    state.sync(list(SECTIONS))
    assert not state.is_expanded("B")


def test_section_change_resets_state():
    state = ListViewState()
    state.sync(SECTIONS)
    state.toggle_section("A")
    state.open_create("B")
    state.editing_task_id = "1"

    state.sync(SECTIONS + [Section(id="C", name="Done", position=2)])
    assert state.expanded == {"A", "B", "C", UNSECTIONED}
    assert state.creating_in is None
    assert state.editing_task_id is None


def test_open_and_close_create():
    state = ListViewState()
    state.open_create(UNSECTIONED)
    assert state.creating_in == UNSECTIONED
    state.close_create()
    assert state.creating_in is None
