from weekly_tasks.task_status import (
    TaskStatus,
    is_finished,
    parse_status_char,
    status_char,
    status_display,
    task_checkbox,
)


def test_status_char_round_trip():
    for status in TaskStatus:
        assert parse_status_char(status_char(status)) is status


def test_status_chars_are_canonical():
    assert status_char(TaskStatus.NEW) == " "
    assert status_char(TaskStatus.COMPLETED) == "x"
    assert status_char(TaskStatus.CLOSED) == "-"


def test_unknown_status_char_is_new():
    assert parse_status_char("X") is TaskStatus.NEW
    assert parse_status_char("?") is TaskStatus.NEW
    assert parse_status_char("") is TaskStatus.NEW


def test_task_checkbox():
    assert task_checkbox(TaskStatus.NEW) == "- [ ]"
    assert task_checkbox(TaskStatus.COMPLETED) == "- [x]"
    assert task_checkbox(TaskStatus.CLOSED) == "- [-]"


def test_is_finished():
    assert is_finished(TaskStatus.COMPLETED)
    assert is_finished(TaskStatus.CLOSED)
    assert not is_finished(TaskStatus.NEW)


def test_status_display():
    assert status_display(TaskStatus.COMPLETED) == "completed [x]"
    assert status_display(TaskStatus.CLOSED) == "closed [-]"
    assert status_display(TaskStatus.NEW) == "new [ ]"
