import json
from unittest import mock

import pytest
import requests

from src.api_log import get_api_calls
from src.taskviews.client import TaskApiClient, TaskApiError, TaskNotFoundError
from src.taskviews.config import get_config


def _response(status_code=200, payload=None, text=None):
    resp = mock.Mock()
    resp.status_code = status_code
    resp.text = text if text is not None else (json.dumps(payload) if payload is not None else "")
    return resp


def _client(**kwargs):
    kwargs.setdefault("log_calls", False)
    return TaskApiClient(base_url="http://tasks.local/api/", token="secret", **kwargs)


def test_get_project_tasks_parses_records():
    payload = [{"id": 7, "title": "Plan", "section_id": 3, "position": "2", "priority": "HIGH"}]
    with mock.patch.object(requests.Session, "request", return_value=_response(200, payload)) as req:
        tasks = _client().get_project_tasks("p1")

    args, kwargs = req.call_args
    assert args == ("GET", "http://tasks.local/api/projects/p1/tasks")
    assert kwargs["headers"]["Authorization"] == "Bearer secret"
    assert kwargs["json"] is None
    assert tasks[0].id == "7"
    assert tasks[0].section_id == "3"
    assert tasks[0].position == 2
    assert tasks[0].priority == "high"


def test_create_task_posts_to_workspace():
    body = {"title": "Plan", "project_id": "p1", "section_id": None}
    with mock.patch.object(requests.Session, "request", return_value=_response(201, {"id": "t1", **body})) as req:
        task = _client().create_task("ws-1", body)

    args, kwargs = req.call_args
    assert args == ("POST", "http://tasks.local/api/workspaces/ws-1/tasks")
    assert kwargs["json"] == body
    assert task.id == "t1"


def test_move_task_omits_position_when_not_given():
    with mock.patch.object(requests.Session, "request", return_value=_response(200, {"id": "t1", "title": "x"})) as req:
        _client().move_task("t1", "s2")
        assert req.call_args[1]["json"] == {"section_id": "s2"}
        _client().move_task("t1", None, position=3)
        assert req.call_args[1]["json"] == {"section_id": None, "position": 3}
    assert req.call_args[0] == ("POST", "http://tasks.local/api/tasks/t1/move")


def test_section_endpoints():
    with mock.patch.object(requests.Session, "request", return_value=_response(200, {"id": "s1", "name": "Todo"})) as req:
        client = _client()
        client.create_section("p1", "Todo")
        assert req.call_args[0] == ("POST", "http://tasks.local/api/projects/p1/sections")
        assert req.call_args[1]["json"] == {"name": "Todo"}
        client.update_section("s1", name="Doing")
        assert req.call_args[0] == ("PUT", "http://tasks.local/api/sections/s1")
        client.delete_section("s1")
        assert req.call_args[0] == ("DELETE", "http://tasks.local/api/sections/s1")


def test_server_error_raises_with_detail():
    resp = _response(500, {"error": "database unavailable"})
    with mock.patch.object(requests.Session, "request", return_value=resp):
        with pytest.raises(TaskApiError) as exc:
            _client().update_task("t1", {"title": "x"})
    assert exc.value.status_code == 500
    assert "database unavailable" in str(exc.value)
    assert not isinstance(exc.value, TaskNotFoundError)


def test_missing_record_raises_not_found():
    with mock.patch.object(requests.Session, "request", return_value=_response(404, {"message": "Task not found"})):
        with pytest.raises(TaskNotFoundError):
            _client().delete_task("nope")


def test_network_error_becomes_failed_response():
    with mock.patch.object(requests.Session, "request", side_effect=requests.ConnectionError("refused")):
        result = _client().request("GET", "/projects/{project_id}", path_params={"project_id": "p1"})
    assert result.ok is False
    assert result.status_code == 0
    assert "refused" in result.error


def test_calls_are_written_to_the_log():
    client = TaskApiClient.from_config(get_config(), source="board")
    with mock.patch.object(requests.Session, "request", return_value=_response(200, [])):
        client.get_project_tasks("p1")
    with mock.patch.object(requests.Session, "request", return_value=_response(500, text="boom")):
        with pytest.raises(TaskApiError):
            client.update_task("t1", {"title": "x", "token": "abc"})

    logs = get_api_calls()
    assert len(logs) == 2
    by_method = {log["method"]: log for log in logs}
    assert by_method["GET"]["endpoint"] == "/projects/{project_id}/tasks"
    assert by_method["GET"]["success"] is True
    assert by_method["GET"]["source"] == "board"
    failed = by_method["PUT"]
    assert failed["success"] is False
    assert failed["status_code"] == 500
    assert failed["error_type"] == "HTTP 500"
    assert json.loads(failed["body_json"]) == {"title": "x", "token": "***REDACTED***"}
