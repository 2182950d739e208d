from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, Optional, Protocol

from .errors import StorageReadFailure, StorageWriteFailure
from .models import Task

logger = logging.getLogger(__name__)

TASKS_KEY = "cloud_tasks_v1"
THEME_KEY = "cloud_theme"

DARK = "dark"
LIGHT = "light"
THEMES = (DARK, LIGHT)
DEFAULT_THEME = DARK


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def clear(self) -> None: ...


class MemoryKeyValueStore:
    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def clear(self) -> None:
        self._data.clear()


class JsonFileKeyValueStore:
    """
    Durable key-value store kept as one JSON object on disk:
      {"cloud_tasks_v1": "[...]", "cloud_theme": "dark"}

    Every write rewrites the whole file through a temp file + os.replace.
    A missing or unreadable file reads as an empty store.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError, RecursionError) as e:
            logger.warning("Ignoring unreadable store file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring store file %s: top level is not an object", self.path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".store-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def clear(self) -> None:
        self._write_all({})


def encode_tasks(tasks: Iterable[Task]) -> str:
    return json.dumps([t.to_dict() for t in tasks])


def decode_tasks(text: str) -> list[Task]:
    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as e:
        raise StorageReadFailure(f"Stored tasks are not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise StorageReadFailure("Stored tasks are not a JSON array.")
    tasks: list[Task] = []
    for i, raw in enumerate(data):
        if not isinstance(raw, dict):
            raise StorageReadFailure(f"Stored task #{i} is not an object.")
        try:
            tasks.append(Task.from_dict(raw))
        except KeyError as e:
            raise StorageReadFailure(f"Stored task #{i} is missing {e}.") from e
        except TypeError as e:
            raise StorageReadFailure(f"Stored task #{i}: {e}") from e
    return tasks


class TaskStorage:
    """
    Persistent store adapter: the task list and theme preference on top of
    a KeyValueStore. load() never raises; save() raises StorageWriteFailure.
    """

    def __init__(self, backend: KeyValueStore) -> None:
        self.backend = backend

    def load(self) -> list[Task]:
        try:
            text = self.backend.get(TASKS_KEY)
            if text is None:
                return []
            tasks = decode_tasks(text)
        except StorageReadFailure as e:
            logger.warning("Starting with an empty task list: %s", e)
            return []
        except OSError as e:
            logger.warning("Starting with an empty task list: cannot read store: %s", e)
            return []
        logger.debug("Loaded %d task(s)", len(tasks))
        return tasks

    def save(self, tasks: Iterable[Task]) -> None:
        text = encode_tasks(tasks)
        try:
            self.backend.set(TASKS_KEY, text)
        except OSError as e:
            raise StorageWriteFailure(f"Could not save tasks: {e}") from e

    def load_theme(self) -> str:
        try:
            value = self.backend.get(THEME_KEY)
        except OSError as e:
            logger.warning("Cannot read theme, using %s: %s", DEFAULT_THEME, e)
            return DEFAULT_THEME
        return value if value in THEMES else DEFAULT_THEME

    def save_theme(self, value: str) -> None:
        if value not in THEMES:
            raise ValueError(f"Unknown theme '{value}'. Use 'dark' or 'light'.")
        try:
            self.backend.set(THEME_KEY, value)
        except OSError as e:
            raise StorageWriteFailure(f"Could not save theme: {e}") from e
