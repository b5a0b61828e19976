"""Group a project's flat task collection by section.

The grouping is rebuilt from scratch after every load; nothing here is
persisted or mutated in place.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Sequence

from src.taskviews.models import Section, Task

UNSECTIONED = "unsectioned"
UNSECTIONED_LABEL = "Unsectioned"


def _position_key(task: Task) -> int:
    try:
        return int(task.position)
    except (TypeError, ValueError):
        return 0


def ordered_sections(sections: Iterable[Section]) -> List[Section]:
    """Sections in column/list order (stable for equal positions)."""
    return sorted(sections, key=lambda s: s.position if isinstance(s.position, int) else 0)


def group_tasks(tasks: Iterable[Task], sections: Sequence[Section]) -> Dict[str, List[Task]]:
    """Map every section id, plus ``UNSECTIONED``, to its tasks sorted by position.

    Tasks whose section is missing or unknown land under ``UNSECTIONED``.
    ``sorted`` is stable, so equal positions keep their input order.
    """
    grouped: Dict[str, List[Task]] = {s.id: [] for s in ordered_sections(sections)}
    grouped[UNSECTIONED] = []
    for task in tasks:
        key = task.section_id if task.section_id in grouped and task.section_id != UNSECTIONED else UNSECTIONED
        grouped[key].append(task)
    return {key: sorted(members, key=_position_key) for key, members in grouped.items()}


def section_counts(grouping: Dict[str, List[Any]]) -> Dict[str, int]:
    return {key: len(members) for key, members in grouping.items()}


def section_label(section_id: str, sections: Sequence[Section]) -> str:
    if section_id == UNSECTIONED:
        return UNSECTIONED_LABEL
    for s in sections:
        if s.id == section_id:
            return s.name
    return UNSECTIONED_LABEL
