"""Locate tasks across the live documents by free-text identifier."""

from __future__ import annotations

from dataclasses import dataclass

from weekly_tasks.errors import (
    AmbiguousMatchError,
    EmptyIdentifierError,
    NoMatchError,
    TaskChangedError,
)
from weekly_tasks.task_markdown import (
    DESCRIPTION_INDENT,
    Task,
    parse_sections,
    parse_task_line,
    split_backlog_date,
    task_description_lines,
)
from weekly_tasks.task_status import TaskStatus
from weekly_tasks.workspace import Document, Workspace

SEARCHED_DOCUMENTS = (Document.CURRENT, Document.BACKLOG)
MAX_SUGGESTIONS = 3


@dataclass(frozen=True)
class TaskMatch:
    """A task plus the place it was found.

    ``line_number`` is the 1-based line in the whole document. It is only
    valid until the document is next written.
    """

    file: Document
    section: str
    line_number: int
    line: str
    task: Task

    @property
    def text(self) -> str:
        return self.task.stored_text

    @property
    def status(self) -> TaskStatus:
        return self.task.status


def find_tasks_in_document(file: Document | str, content: str) -> list[TaskMatch]:
    file = Document(file)
    lines = content.split("\n")
    matches: list[TaskMatch] = []
    for section in parse_sections(content):
        for offset, line in enumerate(section.content):
            parsed = parse_task_line(line)
            if parsed is None:
                continue
            index = section.start_line + 1 + offset
            text, date_added = parsed.text, None
            if file is Document.BACKLOG:
                text, date_added = split_backlog_date(parsed.text)
            description = task_description_lines(lines, index + 1)
            task = Task(
                text=text,
                status=parsed.status,
                description=tuple(
                    line[len(DESCRIPTION_INDENT) :] for line in description
                ),
                date_added=date_added,
            )
            matches.append(
                TaskMatch(
                    file=file,
                    section=section.title,
                    line_number=index + 1,
                    line=line,
                    task=task,
                )
            )
    return matches


def match_tasks(tasks: list[TaskMatch], identifier: str) -> list[TaskMatch]:
    """Filter tasks whose text contains the identifier, ignoring case."""
    if not identifier.strip():
        raise EmptyIdentifierError()
    needle = identifier.lower()
    return [match for match in tasks if needle in match.text.lower()]


def resolve_task_match(tasks: list[TaskMatch], identifier: str) -> TaskMatch:
    matches = match_tasks(tasks, identifier)
    if not matches:
        suggestions = [match.text for match in tasks[:MAX_SUGGESTIONS]]
        raise NoMatchError(identifier, suggestions)
    if len(matches) > 1:
        raise AmbiguousMatchError(
            identifier, [(match.text, match.section) for match in matches]
        )
    return matches[0]


class TaskLocator:
    """Search the current and backlog documents of a workspace."""

    def __init__(self, workspace: Workspace) -> None:
        self.workspace = workspace

    def find_all(self) -> list[TaskMatch]:
        tasks: list[TaskMatch] = []
        for document in SEARCHED_DOCUMENTS:
            tasks.extend(
                find_tasks_in_document(document, self.workspace.read(document))
            )
        return tasks

    def find_matching(self, identifier: str) -> list[TaskMatch]:
        if not identifier.strip():
            raise EmptyIdentifierError()
        return match_tasks(self.find_all(), identifier)

    def resolve(self, identifier: str) -> TaskMatch:
        if not identifier.strip():
            raise EmptyIdentifierError()
        return resolve_task_match(self.find_all(), identifier)


def ensure_unchanged(content: str, match: TaskMatch) -> None:
    """Check that the located line is still at its recorded position."""
    lines = content.split("\n")
    index = match.line_number - 1
    if index >= len(lines) or lines[index] != match.line:
        raise TaskChangedError(match.file.value, match.line_number)
