import pytest

from cloudtask.app import TaskManager
from cloudtask.errors import PositionOutOfRange, ValidationError
from cloudtask.models import TaskInput
from cloudtask.session import FormState
from cloudtask.storage import TaskStorage


def test_scenario_projection_order(manager: TaskManager):
    a = manager.create_task(TaskInput(title="A", due_date="2024-06-01", priority="High"))
    b = manager.create_task(TaskInput(title="B", due_date="2024-05-01", priority="Low"))
    c = manager.create_task(TaskInput(title="C", due_date="2024-05-01", priority="Medium"))
    assert manager.project("", "All").tasks == (b, c, a)


def test_actions_target_ids_from_projection(manager: TaskManager):
    manager.create_task(TaskInput(title="Late", due_date="2024-06-01"))
    manager.create_task(TaskInput(title="Early", due_date="2024-05-01"))

    shown = manager.project().tasks
    assert [t.title for t in shown] == ["Early", "Late"]

    toggled = manager.advance_status(shown[0].id)
    assert toggled.title == "Early"
    assert toggled.status == "In Progress"

    manager.delete_task(shown[1].id)
    assert [t.title for t in manager.project().tasks] == ["Early"]


def test_stale_id_is_position_out_of_range(manager: TaskManager):
    task = manager.create_task(TaskInput(title="A", due_date="2024-06-01"))
    manager.delete_task(task.id)
    with pytest.raises(PositionOutOfRange):
        manager.advance_status(task.id)
    with pytest.raises(PositionOutOfRange):
        manager.update_task(task.id, TaskInput(title="B", due_date="2024-06-01"))


def test_edit_flow_through_manager(manager: TaskManager):
    task = manager.create_task(TaskInput(title="A", due_date="2024-06-01"))
    form = manager.begin_edit(task.id)
    form.priority = "High"
    updated = manager.submit()
    assert updated.id == task.id
    assert updated.priority == "High"


def test_update_task_by_id(manager: TaskManager):
    task = manager.create_task(TaskInput(title="A", due_date="2024-06-01"))
    updated = manager.update_task(task.id, TaskInput(title="B", due_date="2024-07-01", priority="Low"))
    assert (updated.id, updated.title, updated.priority) == (task.id, "B", "Low")


def test_invalid_create_leaves_collection(manager: TaskManager):
    with pytest.raises(ValidationError):
        manager.submit(FormState(title="", due_date="2024-01-01"))
    assert manager.project().total == 0


def test_clear_all_empties_projection_and_storage(manager: TaskManager, storage: TaskStorage):
    task = manager.create_task(TaskInput(title="A", due_date="2024-06-01"))
    manager.begin_edit(task.id)
    manager.clear_all()
    assert manager.project("", "All").tasks == ()
    assert storage.load() == []
    assert not manager.session.is_editing


def test_theme(manager: TaskManager):
    assert manager.get_theme() == "dark"
    assert manager.toggle_theme() == "light"
    assert manager.get_theme() == "light"
    manager.set_theme("dark")
    assert manager.get_theme() == "dark"


def test_theme_write_failure_is_not_raised(failing_backend):
    manager = TaskManager(TaskStorage(failing_backend))
    failing_backend.fail_writes = True
    assert manager.set_theme("light") == "light"
    assert manager.get_theme() == "dark"


def test_write_warning_is_exposed(failing_backend, clock):
    manager = TaskManager(TaskStorage(failing_backend), clock=clock)
    failing_backend.fail_writes = True
    manager.create_task(TaskInput(title="A", due_date="2024-06-01"))
    assert manager.last_write_error
    assert manager.project().total == 1
