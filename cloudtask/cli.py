from __future__ import annotations

import argparse
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from .app import TaskManager
from .config import default_store_path, log_level
from .errors import PositionOutOfRange, ValidationError
from .logging_setup import setup_logging
from .models import ALL, PRIORITIES, Task
from .projection import Projection
from .repository import DUE_DATE_RE
from .session import FormState
from .storage import DARK, LIGHT, JsonFileKeyValueStore, TaskStorage

MIN_PREFIX = 4


def _parse_date(d: str) -> str:
    if not DUE_DATE_RE.fullmatch(d):
        raise argparse.ArgumentTypeError(f"Invalid date '{d}'. Use YYYY-MM-DD.")
    try:
        return date.fromisoformat(d).isoformat()
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid date '{d}'. Use YYYY-MM-DD.") from e


def _store_path_from_args(ns: argparse.Namespace) -> Path:
    if getattr(ns, "store", None):
        return Path(ns.store).expanduser().resolve()
    return default_store_path()


def _manager_from_args(ns: argparse.Namespace) -> TaskManager:
    path = _store_path_from_args(ns)
    return TaskManager(TaskStorage(JsonFileKeyValueStore(path)))


def _confirm(question: str, assume_yes: bool) -> bool:
    if assume_yes:
        return True
    try:
        answer = input(f"{question} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def _resolve_id(manager: TaskManager, ref: str) -> str:
    """Accept a full task id or an unambiguous prefix of at least MIN_PREFIX chars."""
    ref = ref.strip()
    if not ref:
        raise PositionOutOfRange(ref)
    ids = [t.id for t in manager.repo.tasks()]
    if ref in ids:
        return ref
    if len(ref) < MIN_PREFIX:
        raise PositionOutOfRange(ref)
    matches = [i for i in ids if i.startswith(ref)]
    if len(matches) == 1:
        return matches[0]
    raise PositionOutOfRange(ref)


def _format_date(iso: str) -> str:
    try:
        return date.fromisoformat(iso).strftime("%d %b %Y")
    except ValueError:
        return iso


def _print_projection(view: Projection) -> None:
    if view.total == 0:
        print("No tasks yet. Add a task with: cloudtask add TITLE --due YYYY-MM-DD")
        return
    if view.is_empty:
        print("No matching tasks.")
        return
    print(f"{'ID':<14}  {'STATUS':<11}  {'PRI':<6}  {'DUE':<11}  TITLE")
    print("-" * 72)
    for t in view.tasks:
        _print_task_row(t)


def _print_task_row(t: Task) -> None:
    title = f"~{t.title}~" if t.is_completed else t.title
    print(f"{t.id:<14}  {t.status:<11}  {t.priority:<6}  {_format_date(t.due_date):<11}  {title}")
    if t.description:
        print(f"{'':<14}  {t.description}")


def _report_write_warning(manager: TaskManager) -> None:
    if manager.last_write_error:
        print(f"Warning: {manager.last_write_error} Changes may not persist.", file=sys.stderr)


def cmd_add(ns: argparse.Namespace) -> int:
    manager = _manager_from_args(ns)
    task = manager.submit(
        FormState(
            title=ns.title,
            description=ns.description or "",
            due_date=ns.due,
            priority=ns.priority,
        )
    )
    print(f"Added task {task.id}: {task.title}")
    _report_write_warning(manager)
    return 0


def cmd_list(ns: argparse.Namespace) -> int:
    manager = _manager_from_args(ns)
    _print_projection(manager.project(ns.search or "", ns.priority))
    return 0


def cmd_edit(ns: argparse.Namespace) -> int:
    manager = _manager_from_args(ns)
    form = manager.begin_edit(_resolve_id(manager, ns.task_id))
    if ns.title is not None:
        form.title = ns.title
    if ns.description is not None:
        form.description = ns.description
    if ns.due is not None:
        form.due_date = ns.due
    if ns.priority is not None:
        form.priority = ns.priority
    task = manager.submit()
    print(f"Updated task {task.id}: {task.title}")
    _report_write_warning(manager)
    return 0


def cmd_toggle(ns: argparse.Namespace) -> int:
    manager = _manager_from_args(ns)
    task = manager.advance_status(_resolve_id(manager, ns.task_id))
    print(f"Task {task.id} is now: {task.status}")
    _report_write_warning(manager)
    return 0


def cmd_delete(ns: argparse.Namespace) -> int:
    manager = _manager_from_args(ns)
    task_id = _resolve_id(manager, ns.task_id)
    if not _confirm("Delete this task permanently?", ns.yes):
        print("Cancelled.")
        return 0
    manager.delete_task(task_id)
    print(f"Deleted task {task_id}.")
    _report_write_warning(manager)
    return 0


def cmd_clear(ns: argparse.Namespace) -> int:
    manager = _manager_from_args(ns)
    if not _confirm("Clear ALL tasks? This cannot be undone.", ns.yes):
        print("Cancelled.")
        return 0
    manager.clear_all()
    print("Cleared all tasks.")
    _report_write_warning(manager)
    return 0


def cmd_theme(ns: argparse.Namespace) -> int:
    manager = _manager_from_args(ns)
    if ns.value == "toggle":
        theme = manager.toggle_theme()
    elif ns.value:
        theme = manager.set_theme(ns.value)
    else:
        theme = manager.get_theme()
    print(f"Theme: {theme}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="cloudtask",
        description="CloudTask: a personal task manager with a local JSON store.",
    )
    p.add_argument(
        "--store",
        help="Path to the JSON store (default: ~/.cloudtask/store.json or CLOUDTASK_STORE env var)",
    )
    p.add_argument("-v", "--verbose", action="count", default=0, help="More log output (-vv for debug).")
    sub = p.add_subparsers(dest="cmd", required=True)

    s = sub.add_parser("add", help="Add a new task.")
    s.add_argument("title", help="Short task title.")
    s.add_argument("-d", "--description", help="Longer description.")
    s.add_argument("--due", required=True, type=_parse_date, help="Due date in YYYY-MM-DD.")
    s.add_argument("-p", "--priority", choices=PRIORITIES, default="Medium", help="Priority (default: Medium).")
    s.set_defaults(func=cmd_add)

    s = sub.add_parser("list", help="List tasks by due date.")
    s.add_argument("-s", "--search", help="Only tasks whose title contains this text.")
    s.add_argument("-p", "--priority", choices=(ALL,) + PRIORITIES, default=ALL, help="Only this priority.")
    s.set_defaults(func=cmd_list)

    s = sub.add_parser("edit", help="Edit a task's title, description, due date or priority.")
    s.add_argument("task_id", help="Task ID (or unique prefix).")
    s.add_argument("-t", "--title", help="New title.")
    s.add_argument("-d", "--description", help="New description.")
    s.add_argument("--due", type=_parse_date, help="New due date in YYYY-MM-DD.")
    s.add_argument("-p", "--priority", choices=PRIORITIES, help="New priority.")
    s.set_defaults(func=cmd_edit)

    s = sub.add_parser("toggle", help="Advance status: To Do -> In Progress -> Completed -> To Do.")
    s.add_argument("task_id", help="Task ID (or unique prefix).")
    s.set_defaults(func=cmd_toggle)

    s = sub.add_parser("delete", help="Delete a task.")
    s.add_argument("task_id", help="Task ID (or unique prefix).")
    s.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation.")
    s.set_defaults(func=cmd_delete)

    s = sub.add_parser("clear", help="Delete ALL tasks.")
    s.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation.")
    s.set_defaults(func=cmd_clear)

    s = sub.add_parser("theme", help="Show or change the theme.")
    s.add_argument("value", nargs="?", choices=(DARK, LIGHT, "toggle"), help="dark, light or toggle.")
    s.set_defaults(func=cmd_theme)

    return p


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    setup_logging(log_level(ns.verbose))
    try:
        return int(ns.func(ns))
    except ValidationError as e:
        print(e.message, file=sys.stderr)
        return 1
    except PositionOutOfRange as e:
        print(f"Task {e.position} not found.", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
