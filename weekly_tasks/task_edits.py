"""Line-level edits on markdown task documents.

Every function takes the full document text and returns the full rewritten
text. Tasks are addressed by their 1-based line number in the document.
"""

from __future__ import annotations

from weekly_tasks.errors import LineNotFoundError, NotATaskError, SectionNotFoundError
from weekly_tasks.task_markdown import (
    ParsedTaskLine,
    find_section,
    format_task_line,
    indent_description,
    parse_sections,
    parse_task_line,
    task_description_lines,
)
from weekly_tasks.task_status import TaskStatus, status_char


def add_task_to_section(
    content: str,
    section_title: str,
    task_text: str,
    description: str | None = None,
    status: TaskStatus = TaskStatus.NEW,
) -> str:
    """Append a task to the end of a section.

    Trailing blank lines of the section are dropped and exactly one blank
    line is left after the new task.
    """
    section = find_section(parse_sections(content), section_title)
    if section is None:
        raise SectionNotFoundError(section_title)

    task_lines = [format_task_line(status, task_text)]
    if description is not None and description.strip():
        task_lines.extend(indent_description(description))

    section_content = list(section.content)
    while section_content and not section_content[-1].strip():
        section_content.pop()
    section_content.extend([*task_lines, ""])

    lines = content.split("\n")
    rebuilt = [
        *lines[: section.start_line + 1],
        *section_content,
        *lines[section.end_line + 1 :],
    ]
    return "\n".join(rebuilt)


def update_task_status(content: str, line_number: int, status: TaskStatus) -> str:
    lines = content.split("\n")
    _task_at(lines, line_number)
    line = lines[line_number - 1]
    # "- [c] ...": the status character sits at index 3.
    lines[line_number - 1] = line[:3] + status_char(status) + line[4:]
    return "\n".join(lines)


def update_task_text(content: str, line_number: int, new_text: str) -> str:
    lines = content.split("\n")
    parsed = _task_at(lines, line_number)
    lines[line_number - 1] = f"- [{parsed.status_char}] {new_text}"
    return "\n".join(lines)


def update_task_description(
    content: str, line_number: int, new_description: str | None
) -> str:
    """Replace the description block of a task.

    ``None`` or a whitespace-only description clears it.
    """
    lines = content.split("\n")
    _task_at(lines, line_number)
    existing = task_description_lines(lines, line_number)

    replacement: list[str] = []
    if new_description is not None and new_description.strip():
        replacement = indent_description(new_description)

    rebuilt = [
        *lines[:line_number],
        *replacement,
        *lines[line_number + len(existing) :],
    ]
    return "\n".join(rebuilt)


def remove_task(content: str, line_number: int) -> str:
    """Remove a task line together with its description block."""
    lines = content.split("\n")
    _task_at(lines, line_number)
    description = task_description_lines(lines, line_number)
    rebuilt = [
        *lines[: line_number - 1],
        *lines[line_number + len(description) :],
    ]
    return "\n".join(rebuilt)


def task_description_at(content: str, line_number: int) -> list[str]:
    lines = content.split("\n")
    _task_at(lines, line_number)
    return task_description_lines(lines, line_number)


def _task_at(lines: list[str], line_number: int) -> ParsedTaskLine:
    if line_number < 1 or line_number > len(lines):
        raise LineNotFoundError(line_number)
    parsed = parse_task_line(lines[line_number - 1])
    if parsed is None:
        raise NotATaskError(line_number)
    return parsed
