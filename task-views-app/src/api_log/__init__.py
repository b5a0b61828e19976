"""API Log - records every REST call made by the task views.

This module provides:
- Database models for storing call logs
- Repository functions for writing and querying them
- SQLite by default, any SQLAlchemy URL via API_LOG_DATABASE_URL
"""

from .repo import (
    init_db,
    log_api_call,
    get_api_calls,
    get_api_call_stats,
    get_endpoint_stats,
    get_recent_errors,
    cleanup_old_logs,
)

__all__ = [
    "init_db",
    "log_api_call",
    "get_api_calls",
    "get_api_call_stats",
    "get_endpoint_stats",
    "get_recent_errors",
    "cleanup_old_logs",
]
