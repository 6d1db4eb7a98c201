"""Parsing and formatting of markdown task documents.

A document is split into sections at lines starting with ``"# "``. Inside a
section, a task is a single line of the form ``- [c] text`` where ``c`` is the
status character, optionally followed by description lines indented by two
spaces.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date

from weekly_tasks.task_status import TaskStatus, parse_status_char, task_checkbox

SECTION_HEADER_PREFIX = "# "
DESCRIPTION_INDENT = "  "

TASK_LINE_PATTERN = re.compile(r"^- \[(?P<status>[ x-])\] (?P<text>.+)$")
BACKLOG_DATE_PATTERN = re.compile(
    r"^(?P<text>.+) added on (?P<date>\d{4}-\d{2}-\d{2})$"
)


@dataclass
class Section:
    title: str
    content: list[str] = field(default_factory=list)
    start_line: int = 0
    end_line: int = -1

    def matches(self, title: str) -> bool:
        return self.title.lower() == title.lower()


@dataclass(frozen=True)
class ParsedTaskLine:
    status_char: str
    text: str

    @property
    def status(self) -> TaskStatus:
        return parse_status_char(self.status_char)


@dataclass(frozen=True)
class Task:
    """A task line with its description and optional backlog date."""

    text: str
    status: TaskStatus = TaskStatus.NEW
    description: tuple[str, ...] = ()
    date_added: date | str | None = None

    @property
    def stored_text(self) -> str:
        if self.date_added is None:
            return self.text
        return with_backlog_date(self.text, self.date_added)


def parse_sections(content: str) -> list[Section]:
    """Split document text into sections in document order."""
    lines = content.split("\n")
    sections: list[Section] = []
    current: Section | None = None

    for index, line in enumerate(lines):
        if line.startswith(SECTION_HEADER_PREFIX):
            if current is not None:
                current.end_line = index - 1
                sections.append(current)
            current = Section(
                title=line[len(SECTION_HEADER_PREFIX) :].strip(),
                start_line=index,
            )
        elif current is not None:
            current.content.append(line)

    if current is not None:
        current.end_line = len(lines) - 1
        sections.append(current)

    return sections


def find_section(sections: list[Section], title: str) -> Section | None:
    """Return the first section whose title matches, ignoring case."""
    for section in sections:
        if section.matches(title):
            return section
    return None


def parse_task_line(line: str) -> ParsedTaskLine | None:
    match = TASK_LINE_PATTERN.match(line)
    if not match:
        return None
    return ParsedTaskLine(
        status_char=match.group("status"), text=match.group("text").strip()
    )


def format_task_line(status: TaskStatus, text: str) -> str:
    return f"{task_checkbox(status)} {text}"


def task_description_lines(lines: list[str], start_index: int) -> list[str]:
    """Return the description block beginning at ``start_index``.

    The block is the run of lines indented by two spaces that are not
    whitespace-only. It ends at the first line that does not qualify.
    """
    description: list[str] = []
    for line in lines[start_index:]:
        if line.startswith(DESCRIPTION_INDENT) and line.strip():
            description.append(line)
        else:
            break
    return description


def indent_description(description: str) -> list[str]:
    return [f"{DESCRIPTION_INDENT}{line}" for line in description.split("\n")]


def strip_description(lines: list[str]) -> str:
    """Inverse of ``indent_description``."""
    return "\n".join(line[len(DESCRIPTION_INDENT) :] for line in lines)


def split_backlog_date(text: str) -> tuple[str, date | str | None]:
    """Split ``"<text> added on YYYY-MM-DD"`` into text and date.

    A suffix that is not a real calendar date is still split off and kept
    as the raw string, so the stored text is rebuilt unchanged.
    """
    match = BACKLOG_DATE_PATTERN.match(text)
    if not match:
        return text, None
    raw_date = match.group("date")
    try:
        return match.group("text"), date.fromisoformat(raw_date)
    except ValueError:
        return match.group("text"), raw_date


def with_backlog_date(text: str, added: date | str) -> str:
    if isinstance(added, date):
        added = added.isoformat()
    return f"{text} added on {added}"


def collect_task_blocks(lines: list[str]) -> list[tuple[ParsedTaskLine, list[str]]]:
    """Group task lines with their descriptions.

    Returns one ``(task, block_lines)`` pair per task; ``block_lines`` holds
    the task line followed by its description lines. Lines that belong to no
    task are skipped.
    """
    blocks: list[tuple[ParsedTaskLine, list[str]]] = []
    index = 0
    while index < len(lines):
        parsed = parse_task_line(lines[index])
        if parsed is None:
            index += 1
            continue
        description = task_description_lines(lines, index + 1)
        blocks.append((parsed, [lines[index], *description]))
        index += 1 + len(description)
    return blocks
