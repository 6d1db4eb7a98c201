"""Weekly transition of the current task document.

``run_weekly_transition`` archives the ``This Week`` section under
``# Week of <monday>``, keeps the unfinished tasks, promotes everything
queued under ``Next Week`` and leaves ``Next Week`` empty. The archive is
checked first, so running the transition twice in the same week writes
nothing the second time.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from weekly_tasks.errors import MissingSectionsError
from weekly_tasks.task_markdown import (
    SECTION_HEADER_PREFIX,
    Section,
    collect_task_blocks,
    parse_sections,
)
from weekly_tasks.task_status import is_finished
from weekly_tasks.workspace import NEXT_WEEK, THIS_WEEK, Document, Workspace

ARCHIVE_TITLE_PREFIX = "Week of "
PRE_TRANSITION_MESSAGE = "Pre-start-week backup"


@dataclass
class TaskPartition:
    finished: list[str] = field(default_factory=list)
    unfinished: list[str] = field(default_factory=list)


@dataclass
class WeekTransition:
    archive_key: str
    already_archived: bool
    this_week: list[str]
    commits: list[str] = field(default_factory=list)

    @property
    def week_start(self) -> str:
        return self.archive_key[len(ARCHIVE_TITLE_PREFIX) :]

    @property
    def this_week_text(self) -> str:
        return "\n".join([f"{SECTION_HEADER_PREFIX}{THIS_WEEK}", *self.this_week])

    @property
    def message(self) -> str:
        if self.already_archived:
            return (
                f"{self.archive_key} has already been archived; nothing to do.\n\n"
                f"{self.this_week_text}"
            )
        return (
            "Successfully completed week transition. "
            f"Archived week of {self.week_start}.\n\n"
            f"{self.this_week_text}"
        )


def archive_key_for(monday: str) -> str:
    return f"{ARCHIVE_TITLE_PREFIX}{monday}"


def is_week_archived(archive_content: str, archive_key: str) -> bool:
    return any(
        section.title == archive_key for section in parse_sections(archive_content)
    )


def partition_tasks(section_content: list[str]) -> TaskPartition:
    """Split task blocks into finished and unfinished.

    Description lines stay with their task. Blank lines and stray text
    between tasks are not carried into either bucket.
    """
    partition = TaskPartition()
    for parsed, block in collect_task_blocks(section_content):
        if is_finished(parsed.status):
            partition.finished.extend(block)
        else:
            partition.unfinished.extend(block)
    return partition


def build_current_document(unfinished: list[str], queued: list[str]) -> str:
    queued = _trim_blank_edges(queued)
    lines = [
        f"{SECTION_HEADER_PREFIX}{THIS_WEEK}",
        *unfinished,
        *queued,
        "",
        f"{SECTION_HEADER_PREFIX}{NEXT_WEEK}",
        "",
    ]
    return "\n".join(lines)


def build_archive_section(archive_key: str, content: list[str]) -> str:
    return "\n".join([f"{SECTION_HEADER_PREFIX}{archive_key}", *content])


def run_weekly_transition(workspace: Workspace) -> WeekTransition:
    archive_key = archive_key_for(workspace.dates.monday_of_current_week())

    if is_week_archived(workspace.read(Document.ARCHIVE), archive_key):
        current_sections = parse_sections(workspace.read(Document.CURRENT))
        this_week = _find_section(current_sections, THIS_WEEK)
        return WeekTransition(
            archive_key=archive_key,
            already_archived=True,
            this_week=_trim_blank_edges(this_week.content) if this_week else [],
        )

    commits: list[str] = []
    if workspace.checkpoints.has_pending_changes():
        sha = workspace.checkpoints.commit(PRE_TRANSITION_MESSAGE)
        if sha:
            commits.append(sha)

    sections = parse_sections(workspace.read(Document.CURRENT))
    this_week = _find_section(sections, THIS_WEEK)
    next_week = _find_section(sections, NEXT_WEEK)
    missing = [
        title
        for title, section in ((THIS_WEEK, this_week), (NEXT_WEEK, next_week))
        if section is None
    ]
    if missing:
        raise MissingSectionsError(missing)

    workspace.append(
        Document.ARCHIVE, build_archive_section(archive_key, this_week.content)
    )

    partition = partition_tasks(this_week.content)
    rebuilt = build_current_document(partition.unfinished, next_week.content)
    workspace.write(Document.CURRENT, rebuilt)

    sha = workspace.checkpoints.commit(
        f"Completed week transition to {workspace.dates.today()}"
    )
    if sha:
        commits.append(sha)

    rebuilt_this_week = _find_section(parse_sections(rebuilt), THIS_WEEK)
    return WeekTransition(
        archive_key=archive_key,
        already_archived=False,
        this_week=_trim_blank_edges(rebuilt_this_week.content),
        commits=commits,
    )


def _find_section(sections: list[Section], title: str) -> Section | None:
    # Rollover sections are matched on their exact title.
    for section in sections:
        if section.title == title:
            return section
    return None


def _trim_blank_edges(lines: list[str]) -> list[str]:
    start = 0
    end = len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]
