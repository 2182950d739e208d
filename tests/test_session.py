import pytest

from cloudtask.errors import PositionOutOfRange, ValidationError
from cloudtask.models import TaskInput
from cloudtask.repository import TaskRepository
from cloudtask.session import EditSession, FormState


def test_idle_submit_creates(repo: TaskRepository):
    session = EditSession(repo)
    assert not session.is_editing
    task = session.submit(FormState(title="A", due_date="2024-01-01"))
    assert repo.tasks() == (task,)
    assert session.form == FormState()


def test_begin_edit_prefills_form(repo: TaskRepository):
    repo.create_task(TaskInput(title="A", description="d", due_date="2024-01-01", priority="High"))
    session = EditSession(repo)
    form = session.begin_edit(0)
    assert form == FormState(title="A", description="d", due_date="2024-01-01", priority="High")
    assert session.is_editing
    assert session.position == 0


def test_edit_submit_updates_and_returns_to_idle(repo: TaskRepository):
    original = repo.create_task(TaskInput(title="A", due_date="2024-01-01"))
    session = EditSession(repo)
    session.begin_edit(0)
    session.form.title = "A2"
    updated = session.submit()

    assert updated.id == original.id
    assert updated.title == "A2"
    assert len(repo) == 1
    assert not session.is_editing
    assert session.form == FormState()


def test_validation_failure_keeps_edit_session(repo: TaskRepository):
    repo.create_task(TaskInput(title="A", due_date="2024-01-01"))
    session = EditSession(repo)
    session.begin_edit(0)
    session.form.title = ""
    with pytest.raises(ValidationError):
        session.submit()
    assert session.is_editing
    assert session.form.due_date == "2024-01-01"

    session.form.title = "Fixed"
    assert session.submit().title == "Fixed"
    assert not session.is_editing


def test_cancel_edit_discards_form(repo: TaskRepository):
    repo.create_task(TaskInput(title="A", due_date="2024-01-01"))
    session = EditSession(repo)
    session.begin_edit(0)
    session.form.title = "Changed"
    session.cancel_edit()
    assert not session.is_editing
    assert session.form == FormState()
    assert repo.get(0).title == "A"


def test_last_begin_edit_wins(repo: TaskRepository):
    repo.create_task(TaskInput(title="A", due_date="2024-01-01"))
    b = repo.create_task(TaskInput(title="B", due_date="2024-01-01"))
    session = EditSession(repo)
    session.begin_edit(0)
    session.begin_edit(1)
    session.form.title = "B2"
    assert session.submit().id == b.id
    assert repo.get(0).title == "A"


def test_edit_follows_task_after_earlier_delete(repo: TaskRepository):
    repo.create_task(TaskInput(title="A", due_date="2024-01-01"))
    b = repo.create_task(TaskInput(title="B", due_date="2024-01-01"))
    session = EditSession(repo)
    session.begin_edit(1)
    repo.delete_task(0)
    assert session.position == 0

    session.form.title = "B2"
    updated = session.submit()
    assert updated.id == b.id
    assert repo.tasks() == (updated,)


def test_edit_target_deleted(repo: TaskRepository):
    repo.create_task(TaskInput(title="A", due_date="2024-01-01"))
    session = EditSession(repo)
    session.begin_edit(0)
    repo.delete_task(0)
    assert session.position is None
    with pytest.raises(PositionOutOfRange):
        session.submit()
    assert not session.is_editing
    assert len(repo) == 0


def test_begin_edit_bad_position(repo: TaskRepository):
    session = EditSession(repo)
    with pytest.raises(PositionOutOfRange):
        session.begin_edit(0)
    assert not session.is_editing
