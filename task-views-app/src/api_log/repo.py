"""Write and query helpers for the API call log.

Every function swallows ``SQLAlchemyError`` and returns an empty result:
the log is diagnostic and must never break a view.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import Integer, and_, cast, desc, func
from sqlalchemy.exc import SQLAlchemyError

from .config import get_config
from .db import get_engine, session_scope
from .models import ApiCall, Base

SENSITIVE_KEYS = {
    "password", "token", "secret", "credential", "auth", "authorization",
    "api_key", "apikey",
}
REDACTED = "***REDACTED***"

MAX_BODY_CHARS = 10000
MAX_ERROR_CHARS = 2000


def init_db(database_url: Optional[str] = None) -> None:
    """Create the log tables if missing."""
    Base.metadata.create_all(get_engine(database_url))


def redact_sensitive(body: Dict[str, Any]) -> Dict[str, Any]:
    redacted: Dict[str, Any] = {}
    for key, value in body.items():
        lowered = str(key).lower()
        if any(marker in lowered for marker in SENSITIVE_KEYS):
            redacted[key] = REDACTED
        elif isinstance(value, dict):
            redacted[key] = redact_sensitive(value)
        else:
            redacted[key] = value
    return redacted


def _window(
    since: Optional[datetime],
    until: Optional[datetime],
    default: timedelta,
) -> Tuple[datetime, datetime]:
    until = until or datetime.utcnow()
    return since or until - default, until


def _rate(part: int, total: int) -> float:
    return round(part / total * 100, 2) if total else 0


def log_api_call(
    method: str,
    endpoint: str,
    url: Optional[str] = None,
    body: Optional[Dict[str, Any]] = None,
    success: bool = False,
    status_code: Optional[int] = None,
    error_message: Optional[str] = None,
    error_type: Optional[str] = None,
    started_at: Optional[datetime] = None,
    finished_at: Optional[datetime] = None,
    duration_ms: Optional[float] = None,
    source: Optional[str] = None,
    database_url: Optional[str] = None,
) -> Optional[str]:
    """Record one REST call; returns the entry id, or None when disabled or failed."""
    if not get_config().enabled:
        return None

    entry = ApiCall(
        method=(method or "GET").upper(),
        endpoint=endpoint,
        url=url[:1024] if url else None,
        body_json=json.dumps(redact_sensitive(body), default=str)[:MAX_BODY_CHARS] if body else None,
        success=success,
        status_code=status_code,
        error_message=error_message[:MAX_ERROR_CHARS] if error_message else None,
        error_type=error_type,
        started_at=started_at or datetime.utcnow(),
        finished_at=finished_at,
        duration_ms=duration_ms,
        source=source,
    )
    try:
        with session_scope(database_url) as session:
            session.add(entry)
            session.flush()
            return entry.id
    except SQLAlchemyError:
        return None


def get_api_calls(
    method: Optional[str] = None,
    endpoint: Optional[str] = None,
    success: Optional[bool] = None,
    source: Optional[str] = None,
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
    limit: int = 100,
    offset: int = 0,
    database_url: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Logged calls matching the filters, newest first."""
    filters = []
    if method:
        filters.append(ApiCall.method == method.upper())
    if endpoint:
        filters.append(ApiCall.endpoint == endpoint)
    if success is not None:
        filters.append(ApiCall.success == success)
    if source:
        filters.append(ApiCall.source == source)
    if since:
        filters.append(ApiCall.started_at >= since)
    if until:
        filters.append(ApiCall.started_at < until)

    try:
        with session_scope(database_url) as session:
            rows = (
                session.query(ApiCall)
                .filter(*filters)
                .order_by(desc(ApiCall.started_at))
                .limit(limit)
                .offset(offset)
                .all()
            )
            return [row.to_dict() for row in rows]
    except SQLAlchemyError:
        return []


def get_api_call_stats(
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
    database_url: Optional[str] = None,
) -> Dict[str, Any]:
    """Totals for the window (default: last 7 days)."""
    since, until = _window(since, until, timedelta(days=7))
    stats: Dict[str, Any] = {
        "total_calls": 0,
        "successful_calls": 0,
        "failed_calls": 0,
        "success_rate": 0,
        "avg_duration_ms": None,
        "max_duration_ms": None,
        "unique_endpoints": 0,
        "since": since.isoformat(),
        "until": until.isoformat(),
    }

    in_window = and_(ApiCall.started_at >= since, ApiCall.started_at < until)
    try:
        with session_scope(database_url) as session:
            total, successful, avg_ms, max_ms, endpoints = session.query(
                func.count(ApiCall.id),
                func.sum(cast(ApiCall.success, Integer)),
                func.avg(ApiCall.duration_ms),
                func.max(ApiCall.duration_ms),
                func.count(func.distinct(ApiCall.endpoint)),
            ).filter(in_window).one()
    except SQLAlchemyError:
        return stats

    total = total or 0
    successful = int(successful or 0)
    stats.update(
        total_calls=total,
        successful_calls=successful,
        failed_calls=total - successful,
        success_rate=_rate(successful, total),
        avg_duration_ms=round(avg_ms, 2) if avg_ms else None,
        max_duration_ms=round(max_ms, 2) if max_ms else None,
        unique_endpoints=endpoints or 0,
    )
    return stats


def get_endpoint_stats(
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
    limit: int = 20,
    database_url: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Per method and endpoint template, busiest first."""
    since, until = _window(since, until, timedelta(days=7))
    try:
        with session_scope(database_url) as session:
            rows = (
                session.query(
                    ApiCall.method,
                    ApiCall.endpoint,
                    func.count(ApiCall.id).label("total_calls"),
                    func.sum(cast(ApiCall.success, Integer)).label("successful_calls"),
                    func.avg(ApiCall.duration_ms).label("avg_duration_ms"),
                )
                .filter(ApiCall.started_at >= since, ApiCall.started_at < until)
                .group_by(ApiCall.method, ApiCall.endpoint)
                .order_by(desc("total_calls"))
                .limit(limit)
                .all()
            )
    except SQLAlchemyError:
        return []

    stats = []
    for row in rows:
        total = row.total_calls or 0
        successful = int(row.successful_calls or 0)
        stats.append({
            "method": row.method,
            "endpoint": row.endpoint,
            "total_calls": total,
            "successful_calls": successful,
            "failed_calls": total - successful,
            "success_rate": _rate(successful, total),
            "avg_duration_ms": round(row.avg_duration_ms, 2) if row.avg_duration_ms else None,
        })
    return stats


def get_recent_errors(
    limit: int = 20,
    since: Optional[datetime] = None,
    database_url: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Failed calls, newest first (default: last 24 hours)."""
    since, _ = _window(since, None, timedelta(days=1))
    return get_api_calls(success=False, since=since, limit=limit, database_url=database_url)


def cleanup_old_logs(
    retention_days: Optional[int] = None,
    database_url: Optional[str] = None,
) -> int:
    """Delete entries older than the retention period; returns how many."""
    days = retention_days if retention_days is not None else get_config().retention_days
    cutoff = datetime.utcnow() - timedelta(days=days)
    try:
        with session_scope(database_url) as session:
            return session.query(ApiCall).filter(ApiCall.created_at < cutoff).delete(synchronize_session=False)
    except SQLAlchemyError:
        return 0
