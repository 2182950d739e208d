from __future__ import annotations

import logging
from typing import Callable, Optional

from .errors import StorageWriteFailure
from .models import ALL, Task, TaskInput, iso_now, new_task_id
from .projection import Projection, build_projection
from .repository import TaskRepository
from .session import EditSession, FormState
from .storage import DARK, LIGHT, TaskStorage

logger = logging.getLogger(__name__)


class TaskManager:
    """
    One per application instance. Everything a presentation layer needs:
    targets from a rendered list are task ids, resolved to positions here.
    """

    def __init__(
        self,
        storage: TaskStorage,
        *,
        clock: Callable[[], str] = iso_now,
        id_factory: Callable[[], str] = new_task_id,
    ) -> None:
        self.storage = storage
        self.repo = TaskRepository(storage, clock=clock, id_factory=id_factory)
        self.session = EditSession(self.repo)

    @property
    def last_write_error(self) -> Optional[str]:
        return self.repo.last_write_error

    def create_task(self, data: TaskInput) -> Task:
        return self.repo.create_task(data)

    def update_task(self, task_id: str, data: TaskInput) -> Task:
        return self.repo.update_task(self.repo.position_of(task_id), data)

    def delete_task(self, task_id: str) -> None:
        self.repo.delete_task(self.repo.position_of(task_id))

    def advance_status(self, task_id: str) -> Task:
        return self.repo.advance_status(self.repo.position_of(task_id))

    def clear_all(self) -> None:
        self.session.cancel_edit()
        self.repo.clear_all()

    def begin_edit(self, task_id: str) -> FormState:
        return self.session.begin_edit(self.repo.position_of(task_id))

    def cancel_edit(self) -> None:
        self.session.cancel_edit()

    def submit(self, form: Optional[FormState] = None) -> Task:
        return self.session.submit(form)

    def project(self, search: str = "", priority: str = ALL) -> Projection:
        return build_projection(self.repo.tasks(), search, priority)

    def get_theme(self) -> str:
        return self.storage.load_theme()

    def set_theme(self, value: str) -> str:
        try:
            self.storage.save_theme(value)
        except StorageWriteFailure as e:
            logger.warning("%s", e)
        return value

    def toggle_theme(self) -> str:
        return self.set_theme(LIGHT if self.get_theme() == DARK else DARK)
