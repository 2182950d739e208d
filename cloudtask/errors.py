from __future__ import annotations


class CloudTaskError(Exception):
    """Base class for every error the task manager raises."""


class ValidationError(CloudTaskError):
    """A submitted form is missing a required field or carries a bad value."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


class PositionOutOfRange(CloudTaskError):
    """A position or task id no longer refers to a task in the collection."""

    def __init__(self, position: object) -> None:
        super().__init__(f"No task at {position!r}.")
        self.position = position


class StorageReadFailure(CloudTaskError):
    pass


class StorageWriteFailure(CloudTaskError):
    pass
