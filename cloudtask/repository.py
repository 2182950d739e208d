from __future__ import annotations

import logging
import re
from dataclasses import replace
from datetime import date
from typing import Callable, Optional

from .errors import PositionOutOfRange, StorageWriteFailure, ValidationError
from .models import MEDIUM, PRIORITIES, TODO, Task, TaskInput, iso_now, new_task_id, next_status
from .storage import TaskStorage

logger = logging.getLogger(__name__)

DUE_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def validate_input(data: TaskInput) -> TaskInput:
    """
    Check a form submission and return it normalized (text stripped,
    priority defaulted). Raises ValidationError on the first bad field.
    """
    title = (data.title or "").strip()
    due_date = (data.due_date or "").strip()
    if not title:
        raise ValidationError("title", "Please enter at least a Title and Due Date.")
    if not due_date:
        raise ValidationError("due_date", "Please enter at least a Title and Due Date.")
    bad_date = ValidationError("due_date", f"Invalid due date '{due_date}'. Use YYYY-MM-DD.")
    if not DUE_DATE_RE.fullmatch(due_date):
        raise bad_date
    try:
        date.fromisoformat(due_date)
    except ValueError as e:
        raise bad_date from e
    priority = (data.priority or "").strip() or MEDIUM
    if priority not in PRIORITIES:
        raise ValidationError("priority", f"Unknown priority '{priority}'. Use Low, Medium or High.")
    return TaskInput(
        title=title,
        description=(data.description or "").strip(),
        due_date=due_date,
        priority=priority,
    )


class TaskRepository:
    """
    Owns the task list (insertion order) and is the only writer to storage.

    Every mutation ends with a full save. A failed save is not rolled back:
    the in-memory list stays authoritative and the failure is kept in
    last_write_error until the next successful save.
    """

    def __init__(
        self,
        storage: TaskStorage,
        *,
        clock: Callable[[], str] = iso_now,
        id_factory: Callable[[], str] = new_task_id,
    ) -> None:
        self._storage = storage
        self._clock = clock
        self._id_factory = id_factory
        self._tasks: list[Task] = []
        self._index: dict[str, int] = {}
        self.last_write_error: Optional[str] = None

        seen = set()
        for t in storage.load():
            if t.id in seen:
                logger.warning("Dropping stored task with duplicate id %s", t.id)
                continue
            seen.add(t.id)
            self._tasks.append(t)
        self._reindex()

    # ---- read side ----

    def __len__(self) -> int:
        return len(self._tasks)

    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    def get(self, position: int) -> Task:
        return self._tasks[self._check(position)]

    def position_of(self, task_id: str) -> int:
        try:
            return self._index[task_id]
        except KeyError:
            raise PositionOutOfRange(task_id) from None

    # ---- mutations ----

    def create_task(self, data: TaskInput) -> Task:
        clean = validate_input(data)
        task = Task(
            id=self._fresh_id(),
            title=clean.title,
            description=clean.description,
            due_date=clean.due_date,
            priority=clean.priority or MEDIUM,
            status=TODO,
            created_at=self._clock(),
        )
        self._tasks.append(task)
        self._index[task.id] = len(self._tasks) - 1
        logger.debug("Created task id=%s title=%r", task.id, task.title)
        self._flush()
        return task

    def update_task(self, position: int, data: TaskInput) -> Task:
        pos = self._check(position)
        clean = validate_input(data)
        original = self._tasks[pos]
        task = replace(
            original,
            title=clean.title,
            description=clean.description,
            due_date=clean.due_date,
            priority=clean.priority or MEDIUM,
        )
        self._tasks[pos] = task
        logger.debug("Updated task id=%s at position %d", task.id, pos)
        self._flush()
        return task

    def delete_task(self, position: int) -> None:
        pos = self._check(position)
        removed = self._tasks.pop(pos)
        self._reindex()
        logger.debug("Deleted task id=%s at position %d", removed.id, pos)
        self._flush()

    def advance_status(self, position: int) -> Task:
        pos = self._check(position)
        original = self._tasks[pos]
        task = replace(original, status=next_status(original.status))
        self._tasks[pos] = task
        logger.debug("Task id=%s status %s -> %s", task.id, original.status, task.status)
        self._flush()
        return task

    def clear_all(self) -> None:
        count = len(self._tasks)
        self._tasks = []
        self._index = {}
        logger.debug("Cleared %d task(s)", count)
        self._flush()

    # ---- helpers ----

    def _check(self, position: int) -> int:
        if isinstance(position, bool) or not isinstance(position, int):
            raise PositionOutOfRange(position)
        if not 0 <= position < len(self._tasks):
            raise PositionOutOfRange(position)
        return position

    def _fresh_id(self) -> str:
        task_id = self._id_factory()
        while task_id in self._index:
            task_id = self._id_factory()
        return task_id

    def _reindex(self) -> None:
        self._index = {t.id: i for i, t in enumerate(self._tasks)}

    def _flush(self) -> None:
        try:
            self._storage.save(self._tasks)
        except StorageWriteFailure as e:
            self.last_write_error = str(e)
            logger.warning("%s Changes are kept for this session only.", e)
            return
        self.last_write_error = None
