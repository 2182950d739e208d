import itertools
import logging

import pytest

from cloudtask.app import TaskManager
from cloudtask.repository import TaskRepository
from cloudtask.storage import MemoryKeyValueStore, TaskStorage


class StepClock:
    """Returns strictly increasing ISO timestamps, one second apart."""

    def __init__(self) -> None:
        self._seconds = itertools.count()

    def __call__(self) -> str:
        n = next(self._seconds)
        return f"2024-01-01T00:{n // 60:02d}:{n % 60:02d}.000Z"


class FailingKeyValueStore(MemoryKeyValueStore):
    def __init__(self) -> None:
        super().__init__()
        self.fail_writes = False

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        super().set(key, value)


@pytest.fixture()
def backend() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def storage(backend: MemoryKeyValueStore) -> TaskStorage:
    return TaskStorage(backend)


@pytest.fixture()
def repo(storage: TaskStorage) -> TaskRepository:
    return TaskRepository(storage, clock=StepClock())


@pytest.fixture()
def manager(storage: TaskStorage) -> TaskManager:
    return TaskManager(storage, clock=StepClock())


@pytest.fixture()
def clock() -> StepClock:
    return StepClock()


@pytest.fixture()
def failing_backend() -> FailingKeyValueStore:
    return FailingKeyValueStore()


@pytest.fixture(autouse=True)
def _reset_cloudtask_logging():
    yield
    pkg = logging.getLogger("cloudtask")
    for h in list(pkg.handlers):
        pkg.removeHandler(h)
    pkg.setLevel(logging.NOTSET)
