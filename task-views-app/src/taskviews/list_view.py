"""Client-local state of the list projection.

Nothing here is sent to the server. The state resets whenever the project's
section list is reloaded.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Set

from src.taskviews.grouping import UNSECTIONED
from src.taskviews.models import Section


@dataclass
class ListViewState:
    expanded: Set[str] = field(default_factory=set)
    creating_in: Optional[str] = None
    editing_task_id: Optional[str] = None
    known_sections: Set[str] = field(default_factory=set)

    def reset(self, sections: Iterable[Section]) -> None:
        """Expand every section; drop any open form."""
        keys = {s.id for s in sections} | {UNSECTIONED}
        self.expanded = set(keys)
        self.known_sections = set(keys)
        self.creating_in = None
        self.editing_task_id = None

    def sync(self, sections: Iterable[Section]) -> None:
        """Reset when the section list changed since the last render."""
        keys = {s.id for s in sections} | {UNSECTIONED}
        if keys != self.known_sections:
            self.reset(sections)

    def toggle_section(self, section_id: str) -> bool:
        """Flip the expanded flag; returns the new value."""
        if section_id in self.expanded:
            self.expanded.discard(section_id)
            return False
        self.expanded.add(section_id)
        return True

    def is_expanded(self, section_id: str) -> bool:
        return section_id in self.expanded

    def open_create(self, section_id: str) -> None:
        self.creating_in = section_id

    def close_create(self) -> None:
        self.creating_in = None
