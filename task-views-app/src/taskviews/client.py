from __future__ import annotations

import json
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests
from sqlalchemy.exc import SQLAlchemyError

from src.taskviews.config import TaskViewsConfig
from src.taskviews.models import Project, Section, Task


class TaskApiError(Exception):
    """A REST call to the task service failed (network error or non-2xx)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 0,
        method: str = "",
        url: str = "",
        detail: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.method = method
        self.url = url
        self.detail = detail


class TaskNotFoundError(TaskApiError):
    pass


@dataclass(frozen=True)
class ApiResponse:
    ok: bool
    status_code: int
    url: str
    method: str
    data: Any = None
    text: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "status_code": self.status_code,
            "url": self.url,
            "method": self.method,
            "data": self.data,
            "text": self.text,
            "error": self.error,
        }


class TaskApiClient:
    """Thin client for the task/project REST resources.

    Typed methods raise ``TaskApiError`` on failure; ``request`` never raises
    and returns an ``ApiResponse`` instead. Every call is written to the API
    call log unless ``log_calls`` is False.
    """

    def __init__(
        self,
        *,
        base_url: str,
        token: Optional[str] = None,
        verify_ssl: bool = True,
        timeout_seconds: int = 30,
        source: Optional[str] = None,
        log_calls: bool = True,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        self.token = token
        self.verify_ssl = bool(verify_ssl)
        self.timeout_seconds = int(timeout_seconds)
        self.source = source
        self.log_calls = log_calls

        self._session = requests.Session()
        self._logging_initialized = False

    @classmethod
    def from_config(cls, config: TaskViewsConfig, *, source: Optional[str] = None) -> "TaskApiClient":
        return cls(
            base_url=config.base_url,
            token=config.token,
            verify_ssl=config.verify_ssl,
            timeout_seconds=config.timeout_seconds,
            source=source,
        )

    def _build_headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def request(
        self,
        method: str,
        endpoint: str,
        *,
        path_params: Optional[Dict[str, str]] = None,
        json_body: Any = None,
    ) -> ApiResponse:
        """Perform one call. ``endpoint`` is a path template such as ``/tasks/{task_id}``."""
        method_u = (method or "GET").upper().strip()
        path = endpoint.format(**(path_params or {}))
        if not path.startswith("/"):
            path = "/" + path
        url = f"{self.base_url}{path}"

        started_at = datetime.utcnow()
        start = time.perf_counter()
        try:
            resp = self._session.request(
                method_u,
                url,
                json=json_body,
                headers=self._build_headers(),
                verify=self.verify_ssl,
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as exc:
            result = ApiResponse(
                ok=False,
                status_code=0,
                url=url,
                method=method_u,
                error=str(exc),
            )
            self._log(result, endpoint, json_body, started_at, start, error_type=type(exc).__name__)
            return result

        text = resp.text or None
        parsed: Any = None
        if text:
            try:
                parsed = json.loads(text)
            except ValueError:
                parsed = None

        ok = 200 <= int(resp.status_code) < 300
        if ok:
            result = ApiResponse(
                ok=True,
                status_code=int(resp.status_code),
                url=url,
                method=method_u,
                data=parsed if parsed is not None else text,
            )
        else:
            error_detail: Any = None
            if isinstance(parsed, dict):
                error_detail = parsed.get("error") or parsed.get("message") or parsed
            elif text:
                error_detail = text[:2000]
            result = ApiResponse(
                ok=False,
                status_code=int(resp.status_code),
                url=url,
                method=method_u,
                data=parsed,
                text=text[:2000] if text else None,
                error=str(error_detail) if error_detail is not None else f"HTTP {resp.status_code}",
            )

        self._log(result, endpoint, json_body, started_at, start)
        return result

    def _log(
        self,
        result: ApiResponse,
        endpoint: str,
        json_body: Any,
        started_at: datetime,
        start: float,
        error_type: Optional[str] = None,
    ) -> None:
        if not self.log_calls or not self._ensure_logging():
            return
        from src.api_log.repo import log_api_call

        if error_type is None and not result.ok:
            error_type = f"HTTP {result.status_code}"
        log_api_call(
            method=result.method,
            endpoint=endpoint,
            url=result.url,
            body=json_body if isinstance(json_body, dict) else None,
            success=result.ok,
            status_code=result.status_code or None,
            error_message=result.error,
            error_type=None if result.ok else error_type,
            started_at=started_at,
            finished_at=datetime.utcnow(),
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
            source=self.source,
        )

    def _ensure_logging(self) -> bool:
        from src.api_log.config import get_config
        from src.api_log.repo import init_db

        if not get_config().enabled:
            return False
        if not self._logging_initialized:
            try:
                init_db()
            except SQLAlchemyError:
                return False
            self._logging_initialized = True
        return True

    def _call(
        self,
        method: str,
        endpoint: str,
        *,
        path_params: Optional[Dict[str, str]] = None,
        json_body: Any = None,
    ) -> Any:
        result = self.request(method, endpoint, path_params=path_params, json_body=json_body)
        if result.ok:
            return result.data
        error_cls = TaskNotFoundError if result.status_code == 404 else TaskApiError
        raise error_cls(
            f"{result.method} {endpoint} failed: {result.error}",
            status_code=result.status_code,
            method=result.method,
            url=result.url,
            detail=result.data,
        )

    # ---------------- projects ----------------

    def list_projects(self, workspace_id: str) -> List[Project]:
        data = self._call("GET", "/workspaces/{workspace_id}/projects", path_params={"workspace_id": workspace_id})
        return [Project.from_api(p) for p in (data or [])]

    def get_project(self, project_id: str) -> Project:
        data = self._call("GET", "/projects/{project_id}", path_params={"project_id": project_id})
        return Project.from_api(data or {})

    def update_project(self, project_id: str, fields: Dict[str, Any]) -> Project:
        data = self._call(
            "PUT", "/projects/{project_id}", path_params={"project_id": project_id}, json_body=dict(fields)
        )
        return Project.from_api(data or {})

    # ---------------- tasks ----------------

    def get_project_tasks(self, project_id: str) -> List[Task]:
        data = self._call("GET", "/projects/{project_id}/tasks", path_params={"project_id": project_id})
        return [Task.from_api(t) for t in (data or [])]

    def create_task(self, workspace_id: str, data: Dict[str, Any]) -> Task:
        created = self._call(
            "POST", "/workspaces/{workspace_id}/tasks", path_params={"workspace_id": workspace_id}, json_body=dict(data)
        )
        return Task.from_api(created or {})

    def update_task(self, task_id: str, fields: Dict[str, Any]) -> Task:
        updated = self._call("PUT", "/tasks/{task_id}", path_params={"task_id": task_id}, json_body=dict(fields))
        return Task.from_api(updated or {})

    def delete_task(self, task_id: str) -> None:
        self._call("DELETE", "/tasks/{task_id}", path_params={"task_id": task_id})

    def move_task(self, task_id: str, section_id: Optional[str], position: Optional[int] = None) -> Task:
        body: Dict[str, Any] = {"section_id": section_id}
        if position is not None:
            body["position"] = position
        moved = self._call("POST", "/tasks/{task_id}/move", path_params={"task_id": task_id}, json_body=body)
        return Task.from_api(moved or {})

    # ---------------- sections ----------------

    def create_section(self, project_id: str, name: str, position: Optional[int] = None) -> Section:
        body: Dict[str, Any] = {"name": name}
        if position is not None:
            body["position"] = position
        created = self._call(
            "POST", "/projects/{project_id}/sections", path_params={"project_id": project_id}, json_body=body
        )
        return Section.from_api(created or {})

    def update_section(self, section_id: str, *, name: Optional[str] = None, position: Optional[int] = None) -> Section:
        body: Dict[str, Any] = {}
        if name is not None:
            body["name"] = name
        if position is not None:
            body["position"] = position
        updated = self._call("PUT", "/sections/{section_id}", path_params={"section_id": section_id}, json_body=body)
        return Section.from_api(updated or {})

    def delete_section(self, section_id: str) -> None:
        self._call("DELETE", "/sections/{section_id}", path_params={"section_id": section_id})
