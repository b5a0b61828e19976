"""API call log configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from sqlalchemy.engine import make_url

from src.config_utils import env_bool, env_optional_str, env_positive_int


def _app_root() -> str:
    """Get the app directory (the folder holding app.py)."""
    return os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def default_database_url() -> str:
    data_dir = os.path.join(_app_root(), "data")
    os.makedirs(data_dir, exist_ok=True)
    return f"sqlite:///{os.path.join(data_dir, 'api_log.db')}"


@dataclass(frozen=True)
class ApiLogConfig:
    """Configuration for REST call logging.

    Environment variables:
    - API_LOG_DATABASE_URL: Database URL (default: SQLite file under data/)
    - API_LOG_RETENTION_DAYS: Number of days to keep logs (default: 30)
    - API_LOG_ENABLED: Enable/disable logging (default: true)
    """

    database_url: str
    retention_days: int
    enabled: bool

    @classmethod
    def from_env(cls) -> "ApiLogConfig":
        database_url = env_optional_str("API_LOG_DATABASE_URL")
        if not database_url:
            database_url = default_database_url()

        return cls(
            database_url=database_url,
            retention_days=env_positive_int("API_LOG_RETENTION_DAYS", 30),
            enabled=env_bool("API_LOG_ENABLED", True),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "database_url": make_url(self.database_url).render_as_string(hide_password=True),
            "retention_days": self.retention_days,
            "enabled": self.enabled,
        }


# Global config instance
_config: Optional[ApiLogConfig] = None


def get_config() -> ApiLogConfig:
    """Get the API log configuration (cached)."""
    global _config
    if _config is None:
        _config = ApiLogConfig.from_env()
    return _config


def reset_config() -> None:
    global _config
    _config = None
