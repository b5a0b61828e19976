"""Task Views - list, board and timeline projections over the task REST service.

This module provides:
- Typed records for projects, sections and tasks
- A REST client for the task service
- The shared mutation dispatcher used by every projection
- Pure layout logic for grouping, board drag and drop and the timeline
"""

from .client import TaskApiClient, TaskApiError, TaskNotFoundError
from .dispatcher import MutationDispatcher
from .models import Project, Section, Task

__all__ = [
    "TaskApiClient",
    "TaskApiError",
    "TaskNotFoundError",
    "MutationDispatcher",
    "Project",
    "Section",
    "Task",
]
