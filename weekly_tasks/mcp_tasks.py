"""Task-related MCP endpoints."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Request

from weekly_tasks.errors import CheckpointError, McpError, success_response
from weekly_tasks.mcp_activity import _append_activity_log, _build_activity_entry
from weekly_tasks.mcp_payload import (
    _ensure_payload_dict,
    _optional_string,
    _reject_unknown_fields,
    _require_choice,
    _require_string,
)
from weekly_tasks.mcp_router import mcp_router
from weekly_tasks.task_edits import (
    add_task_to_section,
    remove_task,
    task_description_at,
    update_task_description,
    update_task_status,
    update_task_text,
)
from weekly_tasks.task_locator import TaskLocator, TaskMatch, ensure_unchanged
from weekly_tasks.task_markdown import strip_description, with_backlog_date
from weekly_tasks.task_status import TaskStatus, status_display
from weekly_tasks.week_rollover import run_weekly_transition
from weekly_tasks.workspace import (
    BACKLOG,
    NEXT_WEEK,
    THIS_WEEK,
    Document,
    Workspace,
    get_request_workspace,
)

logger = logging.getLogger(__name__)

TASK_LOCATIONS: dict[str, tuple[Document, str]] = {
    "backlog": (Document.BACKLOG, BACKLOG),
    "current_week": (Document.CURRENT, THIS_WEEK),
    "next_week": (Document.CURRENT, NEXT_WEEK),
}
FINISH_STATUSES = (TaskStatus.COMPLETED.value, TaskStatus.CLOSED.value)


@mcp_router.post("/tool:get_current_tasks")
def get_current_tasks(payload: dict[str, Any], request: Request) -> dict[str, Any]:
    """Return the current week document."""
    payload = _ensure_payload_dict(payload)
    _reject_unknown_fields(payload, set())

    workspace = get_request_workspace(request)
    try:
        content = workspace.read(Document.CURRENT)
    except OSError as exc:
        raise _operation_failed("reading current task list", exc) from exc
    return success_response({"content": content})


@mcp_router.post("/tool:get_task_backlog")
def get_task_backlog(payload: dict[str, Any], request: Request) -> dict[str, Any]:
    """Return the backlog document."""
    payload = _ensure_payload_dict(payload)
    _reject_unknown_fields(payload, set())

    workspace = get_request_workspace(request)
    try:
        content = workspace.read(Document.BACKLOG)
    except OSError as exc:
        raise _operation_failed("reading task backlog", exc) from exc
    return success_response({"content": content})


@mcp_router.post("/tool:add_task")
def add_task(payload: dict[str, Any], request: Request) -> dict[str, Any]:
    """Add a task to the backlog, this week, or next week."""
    payload = _ensure_payload_dict(payload)
    _reject_unknown_fields(payload, {"task_text", "target", "description"})

    task_text = _require_string(payload, "task_text").strip()
    if not task_text:
        raise McpError(
            "INVALID_VALUE",
            "task_text cannot be empty.",
            {"task_text": payload["task_text"]},
        )
    target = _require_choice(payload, "target", TASK_LOCATIONS)
    description = _optional_string(payload, "description")

    workspace = get_request_workspace(request)
    document, section_title = TASK_LOCATIONS[target]
    stored_text = task_text
    if document is Document.BACKLOG:
        stored_text = with_backlog_date(task_text, workspace.dates.today())

    try:
        original = workspace.read(document)
        workspace.write(
            document,
            add_task_to_section(original, section_title, stored_text, description),
        )
    except OSError as exc:
        raise _operation_failed("adding task", exc) from exc

    commit_sha = _commit_task_change(
        workspace,
        "add_task",
        {document: original},
        f"Added task: {task_text}",
        "adding task",
    )
    return success_response(
        {
            "message": f'Successfully added task "{task_text}" to {section_title}',
            "task": {"text": stored_text, "section": section_title},
            "commitSha": commit_sha,
        }
    )


@mcp_router.post("/tool:finish_task")
def finish_task(payload: dict[str, Any], request: Request) -> dict[str, Any]:
    """Mark a task as completed or closed."""
    payload = _ensure_payload_dict(payload)
    _reject_unknown_fields(payload, {"task_identifier", "status"})

    identifier = _require_string(payload, "task_identifier")
    status = TaskStatus(_require_choice(payload, "status", FINISH_STATUSES))

    workspace = get_request_workspace(request)
    try:
        match = TaskLocator(workspace).resolve(identifier)
        if match.status is status:
            return success_response(
                {
                    "message": (
                        f'Task "{match.text}" is already marked as {status.value}'
                    ),
                    "task": _task_payload(match),
                    "commitSha": None,
                }
            )

        original = workspace.read(match.file)
        ensure_unchanged(original, match)
        workspace.write(
            match.file, update_task_status(original, match.line_number, status)
        )
    except OSError as exc:
        raise _operation_failed("finishing task", exc) from exc

    verb = "Completed" if status is TaskStatus.COMPLETED else "Closed"
    commit_sha = _commit_task_change(
        workspace,
        "finish_task",
        {match.file: original},
        f"{verb} task: {match.text}",
        "finishing task",
    )
    return success_response(
        {
            "message": (
                f'Successfully marked task "{match.text}" as {status_display(status)}'
            ),
            "task": _task_payload(match, status=status),
            "commitSha": commit_sha,
        }
    )


@mcp_router.post("/tool:edit_task")
def edit_task(payload: dict[str, Any], request: Request) -> dict[str, Any]:
    """Change a task's text, description, or both."""
    payload = _ensure_payload_dict(payload)
    _reject_unknown_fields(payload, {"task_identifier", "new_text", "new_description"})

    identifier = _require_string(payload, "task_identifier")
    new_text = (_optional_string(payload, "new_text") or "").strip() or None
    new_description = _optional_string(payload, "new_description")
    if not new_text and new_description is None:
        raise McpError(
            "MISSING_FIELDS",
            "At least one of new_text or new_description must be provided",
            {"fields": ["new_text", "new_description"]},
        )

    workspace = get_request_workspace(request)
    try:
        match = TaskLocator(workspace).resolve(identifier)
        original = workspace.read(match.file)
        ensure_unchanged(original, match)

        updated = original
        if new_text:
            final_text = new_text
            if match.file is Document.BACKLOG:
                final_text = with_backlog_date(
                    new_text, match.task.date_added or workspace.dates.today()
                )
            updated = update_task_text(updated, match.line_number, final_text)
        if new_description is not None:
            updated = update_task_description(
                updated, match.line_number, new_description or None
            )
        workspace.write(match.file, updated)
    except OSError as exc:
        raise _operation_failed("editing task", exc) from exc

    updates: list[str] = []
    if new_text:
        updates.append("text")
    if new_description is not None:
        updates.append("description" if new_description else "description (cleared)")
    summary = f"Updated {' and '.join(updates)}"

    commit_sha = _commit_task_change(
        workspace,
        "edit_task",
        {match.file: original},
        f"Edited task: {match.text} - {summary}",
        "editing task",
    )
    return success_response(
        {
            "message": f'Successfully updated task "{match.text}" - {summary}',
            "task": _task_payload(match),
            "commitSha": commit_sha,
        }
    )


@mcp_router.post("/tool:move_task")
def move_task(payload: dict[str, Any], request: Request) -> dict[str, Any]:
    """Move a task between the backlog, this week, and next week."""
    payload = _ensure_payload_dict(payload)
    _reject_unknown_fields(payload, {"task_identifier", "destination"})

    identifier = _require_string(payload, "task_identifier")
    destination = _require_choice(payload, "destination", TASK_LOCATIONS)

    workspace = get_request_workspace(request)
    try:
        match = TaskLocator(workspace).resolve(identifier)
        source = _task_location(match)
        source_label = source.replace("_", " ")
        destination_label = destination.replace("_", " ")
        if source == destination:
            return success_response(
                {
                    "message": f'Task "{match.text}" is already in {destination_label}',
                    "task": _task_payload(match),
                    "commitSha": None,
                }
            )

        originals = _move_task(workspace, match, destination)
    except OSError as exc:
        raise _operation_failed("moving task", exc) from exc

    commit_sha = _commit_task_change(
        workspace,
        "move_task",
        originals,
        f"Moved task: {match.text} from {source_label} to {destination_label}",
        "moving task",
    )
    return success_response(
        {
            "message": (
                f'Successfully moved task "{match.text}" from {source_label} '
                f"to {destination_label}"
            ),
            "task": _task_payload(match),
            "commitSha": commit_sha,
        }
    )


@mcp_router.post("/tool:start_week")
def start_week(payload: dict[str, Any], request: Request) -> dict[str, Any]:
    """Archive this week and promote next week's tasks."""
    payload = _ensure_payload_dict(payload)
    _reject_unknown_fields(payload, set())

    workspace = get_request_workspace(request)
    try:
        transition = run_weekly_transition(workspace)
    except (CheckpointError, OSError) as exc:
        raise _operation_failed("during week transition", exc) from exc

    commit_sha = transition.commits[-1] if transition.commits else None
    if not transition.already_archived:
        logger.info("Archived %s", transition.archive_key)
        entry = _build_activity_entry(
            "start_week",
            [Document.ARCHIVE, Document.CURRENT],
            f"archive {transition.archive_key}",
            commit_sha,
        )
        _append_activity_log(workspace, entry)

    return success_response(
        {
            "message": transition.message,
            "archiveKey": transition.archive_key,
            "alreadyArchived": transition.already_archived,
            "thisWeek": transition.this_week_text,
            "commitSha": commit_sha,
        }
    )


def _move_task(
    workspace: Workspace, match: TaskMatch, destination: str
) -> dict[Document, str]:
    """Remove the task from its source and add it at the destination.

    Both documents are computed before either is written. Returns the
    original content of every document touched.
    """
    target_document, target_section = TASK_LOCATIONS[destination]
    source_content = workspace.read(match.file)
    ensure_unchanged(source_content, match)

    description = strip_description(
        task_description_at(source_content, match.line_number)
    )

    moved_text = match.task.text
    if target_document is Document.BACKLOG:
        moved_text = with_backlog_date(moved_text, workspace.dates.today())

    originals = {match.file: source_content}
    updated_source = remove_task(source_content, match.line_number)
    if target_document is match.file:
        updated = add_task_to_section(
            updated_source, target_section, moved_text, description or None
        )
        workspace.write(match.file, updated)
        return originals

    target_content = workspace.read(target_document)
    originals[target_document] = target_content
    updated_target = add_task_to_section(
        target_content, target_section, moved_text, description or None
    )
    workspace.write(match.file, updated_source)
    workspace.write(target_document, updated_target)
    return originals


def _task_location(match: TaskMatch) -> str:
    if match.file is Document.BACKLOG:
        return "backlog"
    if match.section == THIS_WEEK:
        return "current_week"
    if match.section == NEXT_WEEK:
        return "next_week"
    raise McpError(
        "UNKNOWN_SECTION",
        f"Unknown source section: {match.section}",
        {"section": match.section},
    )


def _commit_task_change(
    workspace: Workspace,
    operation: str,
    originals: dict[Document, str],
    commit_message: str,
    action: str,
) -> str | None:
    try:
        commit_sha = workspace.checkpoints.commit(commit_message)
    except CheckpointError as exc:
        for document, content in originals.items():
            workspace.write(document, content)
        logger.warning("Rolled back %s after failed commit: %s", operation, exc)
        raise CheckpointError(
            f"Error {action}: {exc}. Changes were rolled back.",
            {"operation": operation},
        ) from exc

    logger.info("%s: %s", operation, commit_message)
    entry = _build_activity_entry(
        operation, list(originals), commit_message, commit_sha
    )
    _append_activity_log(workspace, entry)
    return commit_sha


def _operation_failed(action: str, exc: Exception) -> McpError:
    code = exc.code if isinstance(exc, McpError) else "OPERATION_FAILED"
    return McpError(code, f"Error {action}: {exc}", {"operation": action})


def _task_payload(
    match: TaskMatch, status: TaskStatus | None = None
) -> dict[str, Any]:
    task = match.task
    return {
        "text": task.text,
        "status": (status or task.status).value,
        "file": match.file.value,
        "section": match.section,
        "lineNumber": match.line_number,
        "description": "\n".join(task.description) or None,
        "dateAdded": str(task.date_added) if task.date_added else None,
    }
