"""Payload validation helpers for MCP endpoints."""

from __future__ import annotations

from typing import Any, Iterable

from weekly_tasks.errors import McpError


def _ensure_payload_dict(payload: Any) -> dict[str, Any]:
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise McpError(
            "INVALID_TYPE",
            "Payload must be an object.",
            {"type": type(payload).__name__},
        )
    return payload


def _reject_unknown_fields(payload: dict[str, Any], allowed_fields: set[str]) -> None:
    unknown_fields = sorted(set(payload) - allowed_fields)
    if unknown_fields:
        raise McpError(
            "UNKNOWN_FIELD",
            "Unknown fields are not allowed.",
            {"fields": unknown_fields},
        )


def _require_fields(payload: dict[str, Any], fields: list[str]) -> None:
    missing = [name for name in fields if name not in payload]
    if missing:
        raise McpError(
            "MISSING_FIELDS",
            f"{' and '.join(fields)} {'is' if len(fields) == 1 else 'are'} required.",
            {"fields": missing},
        )


def _optional_string(payload: dict[str, Any], name: str) -> str | None:
    value = payload.get(name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise McpError(
            "INVALID_TYPE",
            f"{name} must be a string.",
            {name: str(value), "type": type(value).__name__},
        )
    return value


def _require_string(payload: dict[str, Any], name: str) -> str:
    _require_fields(payload, [name])
    value = _optional_string(payload, name)
    if value is None:
        raise McpError(
            "INVALID_TYPE",
            f"{name} must be a string.",
            {name: None},
        )
    return value


def _require_choice(payload: dict[str, Any], name: str, choices: Iterable[str]) -> str:
    value = _require_string(payload, name)
    allowed = list(choices)
    if value not in allowed:
        raise McpError(
            "INVALID_VALUE",
            f"{name} must be one of: {', '.join(allowed)}.",
            {name: value, "allowed": allowed},
        )
    return value
