from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .models import ALL, Task


@dataclass(frozen=True)
class Projection:
    """
    tasks: what to display, in display order.
    total: size of the unfiltered collection, so "no tasks yet" and
    "nothing matches" can be told apart.
    """

    tasks: tuple[Task, ...]
    total: int

    @property
    def is_empty(self) -> bool:
        return not self.tasks


def sort_key(task: Task) -> tuple[str, str]:
    return (task.due_date, task.created_at)


def project(tasks: Iterable[Task], search: str = "", priority: str = ALL) -> list[Task]:
    """
    Sort a copy by (due date, created at), then keep tasks whose title
    contains `search` (case-insensitive) and whose priority matches, unless
    priority is "All". Never touches the input.
    """
    needle = (search or "").strip().lower()
    wanted = priority or ALL
    ordered = sorted(tasks, key=sort_key)
    return [
        t
        for t in ordered
        if needle in t.title.lower() and (wanted == ALL or t.priority == wanted)
    ]


def build_projection(tasks: Iterable[Task], search: str = "", priority: str = ALL) -> Projection:
    snapshot = tuple(tasks)
    return Projection(tasks=tuple(project(snapshot, search, priority)), total=len(snapshot))
