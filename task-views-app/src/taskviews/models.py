"""Domain records returned by the task REST service.

Records are built from the JSON payloads with ``from_api`` and are never
mutated locally: every change goes through the server and the collection is
fetched again.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pandas as pd

PRIORITIES = ["low", "medium", "high", "urgent"]
DEFAULT_PRIORITY = "medium"

VIEW_LIST = "list"
VIEW_BOARD = "board"
VIEW_TIMELINE = "timeline"
VIEW_CALENDAR = "calendar"
VIEW_MODES = [VIEW_LIST, VIEW_BOARD, VIEW_TIMELINE, VIEW_CALENDAR]

# Views with a projection; anything else (calendar included) falls back to the list.
MOUNTABLE_VIEWS = [VIEW_LIST, VIEW_BOARD, VIEW_TIMELINE]

STATUS_COMPLETED = "completed"
STATUS_PENDING = "pending"

# Fields the views are allowed to send in a partial task update.
MUTABLE_TASK_FIELDS = {
    "title",
    "description",
    "priority",
    "status",
    "completed_at",
    "section_id",
    "position",
    "assigned_to_user_id",
    "start_date",
    "due_date",
    "estimated_hours",
    "actual_hours",
}


def parse_iso(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 value into a naive UTC datetime (None when blank/invalid)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            try:
                ts = pd.to_datetime(value, errors="coerce", utc=True)
            except Exception:
                return None
            if ts is None or pd.isna(ts):
                return None
            dt = ts.to_pydatetime()
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def effective_view(view: Optional[str]) -> str:
    """The projection actually mounted for a requested view mode."""
    view = (view or "").lower()
    return view if view in MOUNTABLE_VIEWS else VIEW_LIST


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value)
    return value or None


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    description: Optional[str] = None
    priority: str = DEFAULT_PRIORITY
    status: Optional[str] = None
    completed_at: Optional[str] = None
    section_id: Optional[str] = None
    start_date: Optional[str] = None
    due_date: Optional[str] = None
    position: int = 0
    estimated_hours: Optional[float] = None
    assigned_user_name: Optional[str] = None
    project_id: Optional[str] = None
    workspace_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Task":
        priority = str(data.get("priority") or DEFAULT_PRIORITY).lower()
        return cls(
            id=str(data.get("id")),
            title=str(data.get("title") or ""),
            description=data.get("description"),
            priority=priority if priority in PRIORITIES else DEFAULT_PRIORITY,
            status=data.get("status"),
            completed_at=_as_str(data.get("completed_at")),
            section_id=_as_str(data.get("section_id")),
            start_date=_as_str(data.get("start_date")),
            due_date=_as_str(data.get("due_date")),
            position=_as_int(data.get("position")),
            estimated_hours=_as_float(data.get("estimated_hours")),
            assigned_user_name=data.get("assigned_user_name"),
            project_id=_as_str(data.get("project_id")),
            workspace_id=_as_str(data.get("workspace_id")),
            created_at=_as_str(data.get("created_at")),
            updated_at=_as_str(data.get("updated_at")),
        )

    @property
    def is_completed(self) -> bool:
        return bool(self.completed_at)

    @property
    def start(self) -> Optional[datetime]:
        return parse_iso(self.start_date)

    @property
    def due(self) -> Optional[datetime]:
        return parse_iso(self.due_date)

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        due = self.due
        if due is None or self.is_completed:
            return False
        return due < (now or datetime.utcnow())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "status": self.status,
            "completed_at": self.completed_at,
            "section_id": self.section_id,
            "start_date": self.start_date,
            "due_date": self.due_date,
            "position": self.position,
            "estimated_hours": self.estimated_hours,
            "assigned_user_name": self.assigned_user_name,
            "project_id": self.project_id,
            "workspace_id": self.workspace_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass(frozen=True)
class Section:
    id: str
    name: str
    position: int = 0
    project_id: Optional[str] = None
    task_count: Optional[int] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Section":
        task_count = data.get("task_count")
        return cls(
            id=str(data.get("id")),
            name=str(data.get("name") or ""),
            position=_as_int(data.get("position")),
            project_id=_as_str(data.get("project_id")),
            task_count=_as_int(task_count) if task_count is not None else None,
        )


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    workspace_id: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    default_view: str = VIEW_LIST
    is_archived: bool = False
    active_tasks: Optional[int] = None
    completed_tasks: Optional[int] = None
    sections: List[Section] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Project":
        view = str(data.get("default_view") or VIEW_LIST).lower()
        active = data.get("active_tasks")
        completed = data.get("completed_tasks")
        return cls(
            id=str(data.get("id")),
            name=str(data.get("name") or ""),
            workspace_id=_as_str(data.get("workspace_id")),
            description=data.get("description"),
            color=data.get("color"),
            icon=data.get("icon"),
            default_view=view if view in VIEW_MODES else VIEW_LIST,
            is_archived=bool(data.get("is_archived", False)),
            active_tasks=_as_int(active) if active is not None else None,
            completed_tasks=_as_int(completed) if completed is not None else None,
            sections=[Section.from_api(s) for s in (data.get("sections") or [])],
        )
