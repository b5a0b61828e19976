"""Shared mutation service used by the list, board and timeline projections.

Every operation makes exactly one remote call. On success the project's task
collection (and, for section changes, the project itself) is fetched again;
nothing is merged locally. On failure a notification is emitted and the
previously loaded state is left untouched.
"""
from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from src.taskviews.client import TaskApiClient, TaskApiError
from src.taskviews.grouping import group_tasks, ordered_sections
from src.taskviews.models import (
    MUTABLE_TASK_FIELDS,
    STATUS_COMPLETED,
    STATUS_PENDING,
    VIEW_MODES,
    Project,
    Section,
    Task,
)

# (message, level) where level is "success" or "error"
Notifier = Callable[[str, str], None]


def _silent(_message: str, _level: str) -> None:
    return None


def completion_fields(task: Task, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Partial update that flips a task's completion marker."""
    if task.is_completed:
        return {"status": STATUS_PENDING, "completed_at": None}
    stamp = now or datetime.now(timezone.utc)
    return {"status": STATUS_COMPLETED, "completed_at": stamp.isoformat()}


class MutationDispatcher:
    """Loads one project's sections and tasks and applies mutations to it.

    Reloads are sequenced: each reload takes a generation number and a result
    older than the newest applied one is dropped, so a slow response cannot
    overwrite a newer view of the project.
    """

    def __init__(
        self,
        api: TaskApiClient,
        project_id: str,
        *,
        workspace_id: Optional[str] = None,
        notify: Optional[Notifier] = None,
    ) -> None:
        self.api = api
        self.project_id = project_id
        self.workspace_id = workspace_id
        self.notify: Notifier = notify or _silent

        self.project: Optional[Project] = None
        self.tasks: List[Task] = []
        self._generation = 0
        self._applied_generation = 0

    # ---------------- derived views ----------------

    @property
    def sections(self) -> List[Section]:
        return ordered_sections(self.project.sections) if self.project else []

    def grouping(self) -> Dict[str, List[Task]]:
        return group_tasks(self.tasks, self.sections)

    def find_task(self, task_id: str) -> Optional[Task]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    # ---------------- reload sequencing ----------------

    def begin_reload(self) -> int:
        self._generation += 1
        return self._generation

    def apply_tasks(self, generation: int, tasks: List[Task]) -> bool:
        """Install a task list fetched under ``generation``; False if it is stale."""
        if generation < self._applied_generation:
            return False
        self._applied_generation = generation
        self.tasks = list(tasks)
        return True

    def reload_tasks(self) -> bool:
        generation = self.begin_reload()
        try:
            tasks = self.api.get_project_tasks(self.project_id)
        except TaskApiError:
            self.notify("Failed to load tasks", "error")
            return False
        return self.apply_tasks(generation, tasks)

    def reload_project(self, *, with_tasks: bool = True) -> bool:
        try:
            project = self.api.get_project(self.project_id)
        except TaskApiError:
            self.notify("Failed to load project", "error")
            return False
        self.project = project
        if not self.workspace_id:
            self.workspace_id = project.workspace_id
        return self.reload_tasks() if with_tasks else True

    # ---------------- tasks ----------------

    def create_task(self, section_id: Optional[str], data: Dict[str, Any]) -> Optional[Task]:
        title = str(data.get("title") or "").strip()
        if not title:
            return None
        workspace_id = self.workspace_id or (self.project.workspace_id if self.project else None)
        if not workspace_id:
            self.notify("Failed to create task: no workspace selected", "error")
            return None
        payload = {k: v for k, v in data.items() if v not in (None, "")}
        payload.update({"title": title, "project_id": self.project_id, "section_id": section_id})
        try:
            created = self.api.create_task(workspace_id, payload)
        except TaskApiError:
            self.notify("Failed to create task", "error")
            return None
        self.notify("Task created", "success")
        self.reload_tasks()
        return created

    def update_task(self, task_id: str, fields: Dict[str, Any]) -> Optional[Task]:
        changes = {k: v for k, v in fields.items() if k in MUTABLE_TASK_FIELDS}
        if not changes:
            return None
        if "title" in changes and not str(changes["title"] or "").strip():
            return None
        try:
            updated = self.api.update_task(task_id, changes)
        except TaskApiError:
            self.notify("Failed to update task", "error")
            return None
        self.reload_tasks()
        return updated

    def delete_task(self, task_id: str, *, confirmed: bool = False) -> bool:
        if not confirmed:
            return False
        try:
            self.api.delete_task(task_id)
        except TaskApiError:
            self.notify("Failed to delete task", "error")
            return False
        self.notify("Task deleted", "success")
        self.reload_tasks()
        return True

    def move_task_to_section(self, task_id: str, section_id: Optional[str]) -> Optional[Task]:
        try:
            moved = self.api.move_task(task_id, section_id)
        except TaskApiError:
            self.notify("Failed to move task", "error")
            return None
        self.notify("Task moved", "success")
        self.reload_tasks()
        return moved

    def toggle_complete(self, task: Task, now: Optional[datetime] = None) -> Optional[Task]:
        return self.update_task(task.id, completion_fields(task, now))

    def edit_title(self, task: Task, new_title: str) -> Optional[Task]:
        title = (new_title or "").strip()
        if not title or title == task.title:
            return None
        return self.update_task(task.id, {"title": title})

    # ---------------- sections ----------------

    def create_section(self, name: str) -> Optional[Section]:
        name = (name or "").strip()
        if not name:
            return None
        try:
            created = self.api.create_section(self.project_id, name)
        except TaskApiError:
            self.notify("Failed to create section", "error")
            return None
        self.notify("Section created", "success")
        self.reload_project()
        return created

    def rename_section(self, section_id: str, name: str) -> Optional[Section]:
        name = (name or "").strip()
        if not name:
            return None
        try:
            updated = self.api.update_section(section_id, name=name)
        except TaskApiError:
            self.notify("Failed to rename section", "error")
            return None
        self.reload_project()
        return updated

    def delete_section(self, section_id: str, *, confirmed: bool = False) -> bool:
        """Delete a section; the server moves its tasks to unsectioned."""
        if not confirmed:
            return False
        try:
            self.api.delete_section(section_id)
        except TaskApiError:
            self.notify("Failed to delete section", "error")
            return False
        self.notify("Section deleted", "success")
        self.reload_project()
        return True

    # ---------------- project ----------------

    def set_default_view(self, view: str) -> bool:
        if view not in VIEW_MODES:
            return False
        if self.project is not None and self.project.default_view == view:
            return True
        try:
            updated = self.api.update_project(self.project_id, {"default_view": view})
        except TaskApiError:
            self.notify("Failed to save default view", "error")
            return False
        self.project = replace(self.project, default_view=view) if self.project else updated
        return True
