from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from src.config_utils import env_bool, env_optional_str, env_positive_int, env_str


@dataclass(frozen=True)
class TaskViewsConfig:
    """Runtime configuration for the project task views.

    Env vars:
    - TASK_API_BASE_URL (default http://localhost:5000/api)
    - TASK_API_TOKEN (optional bearer token)
    - TASK_API_VERIFY_SSL (default true)
    - TASK_API_TIMEOUT_SECONDS (default 30)
    - TASK_WORKSPACE_ID (workspace used for project listing and task creation)
    - TIMELINE_DAY_WIDTH (pixels per day on the timeline, default 40)
    """

    base_url: str
    token: Optional[str]
    verify_ssl: bool
    timeout_seconds: int
    workspace_id: Optional[str]
    day_width: int

    DEFAULT_BASE_URL: str = "http://localhost:5000/api"
    DEFAULT_VERIFY_SSL: bool = True
    DEFAULT_TIMEOUT_SECONDS: int = 30
    DEFAULT_DAY_WIDTH: int = 40

    @classmethod
    def from_env(cls) -> "TaskViewsConfig":
        return cls(
            base_url=env_str("TASK_API_BASE_URL", cls.DEFAULT_BASE_URL).rstrip("/"),
            token=env_optional_str("TASK_API_TOKEN"),
            verify_ssl=env_bool("TASK_API_VERIFY_SSL", cls.DEFAULT_VERIFY_SSL),
            timeout_seconds=env_positive_int("TASK_API_TIMEOUT_SECONDS", cls.DEFAULT_TIMEOUT_SECONDS),
            workspace_id=env_optional_str("TASK_WORKSPACE_ID"),
            day_width=env_positive_int("TIMELINE_DAY_WIDTH", cls.DEFAULT_DAY_WIDTH),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_url": self.base_url,
            "has_token": bool(self.token),
            "verify_ssl": self.verify_ssl,
            "timeout_seconds": self.timeout_seconds,
            "workspace_id": self.workspace_id,
            "day_width": self.day_width,
        }


_config: Optional[TaskViewsConfig] = None


def get_config() -> TaskViewsConfig:
    """Get the task views configuration (cached)."""
    global _config
    if _config is None:
        _config = TaskViewsConfig.from_env()
    return _config


def reset_config() -> None:
    global _config
    _config = None
