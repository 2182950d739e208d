from __future__ import annotations

import secrets
import string
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

TODO = "To Do"
IN_PROGRESS = "In Progress"
COMPLETED = "Completed"
STATUS_CYCLE = (TODO, IN_PROGRESS, COMPLETED)

LOW = "Low"
MEDIUM = "Medium"
HIGH = "High"
PRIORITIES = (LOW, MEDIUM, HIGH)

ALL = "All"  # priority filter sentinel

_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(n: int) -> str:
    if n == 0:
        return "0"
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(_BASE36[r])
    return "".join(reversed(out))


def new_task_id() -> str:
    """
    Millisecond clock in base 36 followed by 6 random base-36 chars,
    e.g. "lx3k9q2a" + "f03kzp".
    """
    stamp = _to_base36(int(time.time() * 1000))
    suffix = "".join(secrets.choice(_BASE36) for _ in range(6))
    return stamp + suffix


def iso_now() -> str:
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def next_status(status: str) -> str:
    """Step forward through STATUS_CYCLE, wrapping Completed back to To Do."""
    try:
        idx = STATUS_CYCLE.index(status)
    except ValueError:
        idx = -1
    return STATUS_CYCLE[(idx + 1) % len(STATUS_CYCLE)]


def _required_text(raw: dict, key: str) -> str:
    value = raw[key]
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    description: str
    due_date: str  # ISO date: YYYY-MM-DD
    priority: str  # "Low" | "Medium" | "High"
    status: str  # "To Do" | "In Progress" | "Completed"
    created_at: str  # ISO timestamp, UTC

    @property
    def is_completed(self) -> bool:
        return self.status == COMPLETED

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "dueDate": self.due_date,
            "priority": self.priority,
            "status": self.status,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, raw: dict) -> Task:
        """
        Build a Task from its stored form. Missing required keys raise KeyError,
        non-string required values raise TypeError; unknown priority/status
        values fall back to Medium / To Do.
        """
        priority = str(raw.get("priority") or MEDIUM)
        status = str(raw.get("status") or TODO)
        return cls(
            id=_required_text(raw, "id"),
            title=_required_text(raw, "title"),
            description=str(raw.get("description") or ""),
            due_date=_required_text(raw, "dueDate"),
            priority=priority if priority in PRIORITIES else MEDIUM,
            status=status if status in STATUS_CYCLE else TODO,
            created_at=_required_text(raw, "createdAt"),
        )


@dataclass(frozen=True)
class TaskInput:
    """What the task form submits. Status, id and created_at are not editable."""

    title: str
    description: str = ""
    due_date: str = ""
    priority: Optional[str] = MEDIUM
