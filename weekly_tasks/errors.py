"""Structured error types for MCP responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class ErrorResponse:
    """Serializable error payload returned by MCP handlers."""

    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class McpError(RuntimeError):
    """Exception carrying a structured error response."""

    def __init__(
        self, code: str, message: str, details: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(message)
        self.error = ErrorResponse(
            code=code, message=message, details=dict(details or {})
        )

    @property
    def code(self) -> str:
        return self.error.code


class SectionNotFoundError(McpError):
    """Raised when a task is inserted into a section that does not exist."""

    def __init__(self, section_title: str) -> None:
        super().__init__(
            "SECTION_NOT_FOUND",
            f'Section "{section_title}" not found',
            {"section": section_title},
        )


class LineNotFoundError(McpError):
    def __init__(self, line_number: int) -> None:
        super().__init__(
            "LINE_NOT_FOUND",
            f"Line {line_number} not found in content",
            {"line": line_number},
        )


class NotATaskError(McpError):
    def __init__(self, line_number: int) -> None:
        super().__init__(
            "NOT_A_TASK",
            f"No task found at line {line_number}",
            {"line": line_number},
        )


class EmptyIdentifierError(McpError):
    def __init__(self) -> None:
        super().__init__("EMPTY_IDENTIFIER", "Task identifier cannot be empty")


class NoMatchError(McpError):
    """Raised when no task text contains the identifier.

    The message carries up to three existing task texts as suggestions.
    """

    def __init__(self, identifier: str, suggestions: list[str]) -> None:
        if suggestions:
            quoted = ", ".join(f'"{text}"' for text in suggestions)
            hint = f"Did you mean: {quoted}?"
        else:
            hint = "No tasks available."
        super().__init__(
            "NO_MATCH",
            f'No matching tasks found for "{identifier}". {hint}',
            {"identifier": identifier, "suggestions": list(suggestions)},
        )


class AmbiguousMatchError(McpError):
    """Raised when more than one task text contains the identifier."""

    def __init__(self, identifier: str, matches: list[tuple[str, str]]) -> None:
        listing = ", ".join(f'"{text}" (in {section})' for text, section in matches)
        super().__init__(
            "AMBIGUOUS_MATCH",
            f'Multiple matches found for "{identifier}": {listing}. '
            "Please be more specific.",
            {
                "identifier": identifier,
                "matches": [
                    {"text": text, "section": section} for text, section in matches
                ],
            },
        )


class MissingSectionsError(McpError):
    def __init__(self, missing: list[str]) -> None:
        super().__init__(
            "MISSING_SECTIONS",
            "Required sections not found in current.md: " + ", ".join(missing),
            {"sections": list(missing)},
        )


class TaskChangedError(McpError):
    """Raised when a located task line no longer matches the document."""

    def __init__(self, file: str, line_number: int) -> None:
        super().__init__(
            "TASK_CHANGED",
            f"Task at line {line_number} of {file} changed before it could be "
            "updated; retry the operation.",
            {"file": file, "line": line_number},
        )


class DocumentNotFoundError(McpError):
    def __init__(self, filename: str) -> None:
        super().__init__(
            "FILE_NOT_FOUND",
            f"{filename} does not exist in the workspace.",
            {"path": filename},
        )


class CheckpointError(McpError):
    def __init__(self, message: str, details: Mapping[str, Any] | None = None) -> None:
        super().__init__("GIT_ERROR", message, details)


def success_response(payload: dict[str, Any]) -> dict[str, Any]:
    """Wrap a successful MCP response in the standard envelope."""
    return {"ok": True, "data": payload}


def error_response(error: ErrorResponse) -> dict[str, Any]:
    """Wrap an error response in the standard envelope."""
    return {"ok": False, "error": error.to_dict()}
