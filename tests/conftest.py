import itertools
from typing import Any, Dict, List, Optional, Tuple

import pytest

from src.api_log import config as api_log_config
from src.taskviews import config as taskviews_config
from src.taskviews.client import TaskApiError, TaskNotFoundError
from src.taskviews.dispatcher import MutationDispatcher
from src.taskviews.models import Project, Section, Task


class FakeTaskApi:
    """In-memory stand-in for TaskApiClient with the same typed methods.

    Mirrors the server rules the views rely on: deleting a section moves its
    tasks to unsectioned. Names in ``fail_on`` raise TaskApiError.
    """

    def __init__(self) -> None:
        self.projects: Dict[str, Dict[str, Any]] = {}
        self.sections: Dict[str, Dict[str, Any]] = {}
        self.tasks: Dict[str, Dict[str, Any]] = {}
        self.calls: List[Tuple[str, tuple]] = []
        self.fail_on: set = set()
        self._ids = itertools.count(1)

    # ---- seeding helpers ----

    def add_project(self, name: str = "Launch", workspace_id: str = "ws-1", **fields) -> str:
        pid = f"p{next(self._ids)}"
        self.projects[pid] = {"id": pid, "name": name, "workspace_id": workspace_id, "default_view": "list", **fields}
        return pid

    def add_section(self, project_id: str, name: str, position: int = 0, section_id: Optional[str] = None) -> str:
        sid = section_id or f"s{next(self._ids)}"
        self.sections[sid] = {"id": sid, "name": name, "position": position, "project_id": project_id}
        return sid

    def add_task(self, project_id: str, title: str, section_id: Optional[str] = None, task_id: Optional[str] = None, **fields) -> str:
        tid = task_id or f"t{next(self._ids)}"
        self.tasks[tid] = {
            "id": tid,
            "title": title,
            "project_id": project_id,
            "section_id": section_id,
            "position": fields.pop("position", 0),
            **fields,
        }
        return tid

    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]

    # ---- internals ----

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, args))
        if name in self.fail_on:
            raise TaskApiError(f"{name} failed", status_code=500)

    def _task(self, task_id: str) -> Dict[str, Any]:
        if task_id not in self.tasks:
            raise TaskNotFoundError(f"task {task_id} not found", status_code=404)
        return self.tasks[task_id]

    def _project_payload(self, project_id: str) -> Dict[str, Any]:
        if project_id not in self.projects:
            raise TaskNotFoundError(f"project {project_id} not found", status_code=404)
        sections = [dict(s) for s in self.sections.values() if s["project_id"] == project_id]
        return {**self.projects[project_id], "sections": sections}

    # ---- client interface ----

    def list_projects(self, workspace_id: str) -> List[Project]:
        self._record("list_projects", workspace_id)
        return [
            Project.from_api(self._project_payload(pid))
            for pid, p in self.projects.items()
            if p.get("workspace_id") == workspace_id
        ]

    def get_project(self, project_id: str) -> Project:
        self._record("get_project", project_id)
        return Project.from_api(self._project_payload(project_id))

    def update_project(self, project_id: str, fields: Dict[str, Any]) -> Project:
        self._record("update_project", project_id, dict(fields))
        self.projects[project_id].update(fields)
        # the real endpoint answers without the nested sections
        return Project.from_api(self.projects[project_id])

    def get_project_tasks(self, project_id: str) -> List[Task]:
        self._record("get_project_tasks", project_id)
        return [Task.from_api(t) for t in self.tasks.values() if t["project_id"] == project_id]

    def create_task(self, workspace_id: str, data: Dict[str, Any]) -> Task:
        self._record("create_task", workspace_id, dict(data))
        tid = self.add_task(data["project_id"], data["title"], data.get("section_id"), **{
            k: v for k, v in data.items() if k not in ("project_id", "title", "section_id")
        })
        return Task.from_api(self.tasks[tid])

    def update_task(self, task_id: str, fields: Dict[str, Any]) -> Task:
        self._record("update_task", task_id, dict(fields))
        task = self._task(task_id)
        task.update(fields)
        return Task.from_api(task)

    def delete_task(self, task_id: str) -> None:
        self._record("delete_task", task_id)
        self._task(task_id)
        del self.tasks[task_id]

    def move_task(self, task_id: str, section_id: Optional[str], position: Optional[int] = None) -> Task:
        self._record("move_task", task_id, section_id)
        task = self._task(task_id)
        task["section_id"] = section_id
        if position is not None:
            task["position"] = position
        return Task.from_api(task)

    def create_section(self, project_id: str, name: str, position: Optional[int] = None) -> Section:
        self._record("create_section", project_id, name)
        if position is None:
            position = len([s for s in self.sections.values() if s["project_id"] == project_id])
        sid = self.add_section(project_id, name, position)
        return Section.from_api(self.sections[sid])

    def update_section(self, section_id: str, *, name: Optional[str] = None, position: Optional[int] = None) -> Section:
        self._record("update_section", section_id, name)
        section = self.sections[section_id]
        if name is not None:
            section["name"] = name
        if position is not None:
            section["position"] = position
        return Section.from_api(section)

    def delete_section(self, section_id: str) -> None:
        self._record("delete_section", section_id)
        if section_id not in self.sections:
            raise TaskNotFoundError(f"section {section_id} not found", status_code=404)
        del self.sections[section_id]
        for task in self.tasks.values():
            if task.get("section_id") == section_id:
                task["section_id"] = None


class NoticeRecorder:
    def __init__(self) -> None:
        self.notices: List[Tuple[str, str]] = []

    def __call__(self, message: str, level: str) -> None:
        self.notices.append((message, level))

    @property
    def messages(self) -> List[str]:
        return [m for m, _ in self.notices]

    @property
    def errors(self) -> List[str]:
        return [m for m, level in self.notices if level == "error"]


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep config caches and the call log database local to each test."""
    for name in (
        "TASK_API_BASE_URL",
        "TASK_API_TOKEN",
        "TASK_API_VERIFY_SSL",
        "TASK_API_TIMEOUT_SECONDS",
        "TASK_WORKSPACE_ID",
        "TIMELINE_DAY_WIDTH",
        "API_LOG_RETENTION_DAYS",
        "API_LOG_ENABLED",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("API_LOG_DATABASE_URL", f"sqlite:///{tmp_path / 'api_log.db'}")
    taskviews_config.reset_config()
    api_log_config.reset_config()
    yield
    taskviews_config.reset_config()
    api_log_config.reset_config()


@pytest.fixture
def api():
    return FakeTaskApi()


@pytest.fixture
def notices():
    return NoticeRecorder()


@pytest.fixture
def project(api):
    """Project with sections A and B; tasks 1 and 2 in A, task 3 in B."""
    pid = api.add_project("Launch")
    api.add_section(pid, "Todo", 0, section_id="A")
    api.add_section(pid, "Doing", 1, section_id="B")
    api.add_task(pid, "Write brief", "A", task_id="1", position=1)
    api.add_task(pid, "Book venue", "A", task_id="2", position=0)
    api.add_task(pid, "Send invites", "B", task_id="3", position=0)
    return pid


@pytest.fixture
def dispatcher(api, project, notices):
    d = MutationDispatcher(api, project, notify=notices)
    assert d.reload_project()
    api.calls.clear()
    return d
