from datetime import datetime, timedelta

from src.api_log import (
    cleanup_old_logs,
    get_api_call_stats,
    get_api_calls,
    get_endpoint_stats,
    get_recent_errors,
    init_db,
    log_api_call,
)
from src.api_log.db import get_engine, session_scope
from src.api_log.repo import redact_sensitive


def _seed():
    init_db()
    log_api_call("GET", "/projects/{project_id}/tasks", success=True, status_code=200, duration_ms=20, source="list")
    log_api_call("GET", "/projects/{project_id}/tasks", success=True, status_code=200, duration_ms=40, source="board")
    log_api_call(
        "put",
        "/tasks/{task_id}",
        body={"title": "x"},
        success=False,
        status_code=500,
        error_message="boom",
        error_type="HTTP 500",
        duration_ms=90,
        source="list",
    )


def test_log_and_query():
    _seed()
    assert len(get_api_calls()) == 3
    assert len(get_api_calls(success=False)) == 1
    assert len(get_api_calls(source="board")) == 1
    assert get_api_calls(method="PUT")[0]["endpoint"] == "/tasks/{task_id}"


def test_stats():
    _seed()
    stats = get_api_call_stats()
    assert stats["total_calls"] == 3
    assert stats["failed_calls"] == 1
    assert stats["success_rate"] == 66.67
    assert stats["avg_duration_ms"] == 50
    assert stats["unique_endpoints"] == 2

    endpoints = get_endpoint_stats()
    assert endpoints[0]["endpoint"] == "/projects/{project_id}/tasks"
    assert endpoints[0]["total_calls"] == 2
    assert endpoints[1]["failed_calls"] == 1


def test_recent_errors():
    _seed()
    errors = get_recent_errors()
    assert [e["error_message"] for e in errors] == ["boom"]


def test_disabled_logging_writes_nothing(monkeypatch):
    from src.api_log import config

    init_db()
    monkeypatch.setenv("API_LOG_ENABLED", "false")
    config.reset_config()
    assert log_api_call("GET", "/projects/{project_id}") is None
    assert get_api_calls() == []


def test_cleanup_keeps_recent_entries():
    _seed()
    assert cleanup_old_logs(retention_days=1) == 0
    assert len(get_api_calls()) == 3


def test_redact_nested_values():
    body = {"name": "Todo", "auth": {"password": "x"}, "meta": {"api_key": "k", "color": "red"}}
    assert redact_sensitive(body) == {
        "name": "Todo",
        "auth": "***REDACTED***",
        "meta": {"api_key": "***REDACTED***", "color": "red"},
    }


def test_sessions_follow_the_requested_database(tmp_path):
    first = f"sqlite:///{tmp_path / 'first.db'}"
    second = f"sqlite:///{tmp_path / 'second.db'}"
    with session_scope(first) as session:
        assert str(session.get_bind().url) == first
    with session_scope(second) as session:
        assert str(session.get_bind().url) == second
    assert get_engine(second) is get_engine(second)
