"""Task status model and its checkbox encoding."""

from __future__ import annotations

from enum import Enum


class TaskStatus(str, Enum):
    NEW = "new"
    COMPLETED = "completed"
    CLOSED = "closed"


_STATUS_CHARS = {
    TaskStatus.NEW: " ",
    TaskStatus.COMPLETED: "x",
    TaskStatus.CLOSED: "-",
}
_CHAR_STATUSES = {char: status for status, char in _STATUS_CHARS.items()}

FINISHED_STATUSES = frozenset({TaskStatus.COMPLETED, TaskStatus.CLOSED})


def status_char(status: TaskStatus) -> str:
    """Return the checkbox character for a status."""
    return _STATUS_CHARS[TaskStatus(status)]


def parse_status_char(char: str) -> TaskStatus:
    """Return the status for a checkbox character.

    Unrecognized characters are treated as a new task.
    """
    return _CHAR_STATUSES.get(char, TaskStatus.NEW)


def task_checkbox(status: TaskStatus) -> str:
    return f"- [{status_char(status)}]"


def is_finished(status: TaskStatus) -> bool:
    return TaskStatus(status) in FINISHED_STATUSES


def status_display(status: TaskStatus) -> str:
    return f"{TaskStatus(status).value} [{status_char(status)}]"
