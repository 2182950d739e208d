from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .errors import PositionOutOfRange
from .models import MEDIUM, Task, TaskInput
from .repository import TaskRepository

logger = logging.getLogger(__name__)


@dataclass
class FormState:
    title: str = ""
    description: str = ""
    due_date: str = ""
    priority: str = MEDIUM

    def to_input(self) -> TaskInput:
        return TaskInput(
            title=self.title,
            description=self.description,
            due_date=self.due_date,
            priority=self.priority,
        )


class EditSession:
    """
    Idle: the next submit creates a task.
    Editing(position): the next submit updates the task that was at
    `position` when the edit began. The target is re-resolved by id on
    submit, so deletions in the meantime cannot redirect the edit.
    """

    def __init__(self, repo: TaskRepository) -> None:
        self._repo = repo
        self.form = FormState()
        self._target_id: Optional[str] = None

    @property
    def is_editing(self) -> bool:
        return self._target_id is not None

    @property
    def position(self) -> Optional[int]:
        if self._target_id is None:
            return None
        try:
            return self._repo.position_of(self._target_id)
        except PositionOutOfRange:
            return None

    def begin_edit(self, position: int) -> FormState:
        task = self._repo.get(position)
        self._target_id = task.id
        self.form = FormState(
            title=task.title,
            description=task.description,
            due_date=task.due_date,
            priority=task.priority,
        )
        logger.debug("Editing task id=%s at position %d", task.id, position)
        return self.form

    def cancel_edit(self) -> None:
        self._reset()

    def submit(self, form: Optional[FormState] = None) -> Task:
        """
        Route the form to create or update. ValidationError leaves the
        session and form as they were; a vanished edit target resets to Idle
        and re-raises PositionOutOfRange.
        """
        if form is not None:
            self.form = form
        data = self.form.to_input()

        if self._target_id is None:
            task = self._repo.create_task(data)
        else:
            try:
                position = self._repo.position_of(self._target_id)
            except PositionOutOfRange:
                logger.info("Edit target %s no longer exists", self._target_id)
                self._reset()
                raise
            task = self._repo.update_task(position, data)

        self._reset()
        return task

    def _reset(self) -> None:
        self._target_id = None
        self.form = FormState()
