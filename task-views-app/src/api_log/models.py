"""API log database models."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Column, String, Text, Boolean, Integer, Float, DateTime, Index
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _generate_id() -> str:
    return str(uuid.uuid4())


class ApiCall(Base):
    """One REST call made by the task views.

    The endpoint column holds the path template (``/tasks/{task_id}``) so
    calls against different records aggregate together.
    """

    __tablename__ = "api_calls"

    id = Column(String(36), primary_key=True, default=_generate_id)

    method = Column(String(8), nullable=False, index=True)
    endpoint = Column(String(256), nullable=False, index=True)
    url = Column(String(1024), nullable=True)

    # JSON-serialized request body (sensitive data redacted)
    body_json = Column(Text, nullable=True)

    success = Column(Boolean, nullable=False, default=False, index=True)
    status_code = Column(Integer, nullable=True)
    error_message = Column(Text, nullable=True)
    error_type = Column(String(128), nullable=True)

    started_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    finished_at = Column(DateTime, nullable=True)
    duration_ms = Column(Float, nullable=True, index=True)

    # e.g. "board", "list", "timeline", "projects_page"
    source = Column(String(64), nullable=True, index=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_api_calls_method_endpoint", "method", "endpoint"),
        Index("ix_api_calls_started_success", "started_at", "success"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "method": self.method,
            "endpoint": self.endpoint,
            "url": self.url,
            "body_json": self.body_json,
            "success": self.success,
            "status_code": self.status_code,
            "error_message": self.error_message,
            "error_type": self.error_type,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "duration_ms": self.duration_ms,
            "source": self.source,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
