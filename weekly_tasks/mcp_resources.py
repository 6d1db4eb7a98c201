"""Read-only markdown resources for the live task documents."""

from __future__ import annotations

from typing import Any

from fastapi import Request

from weekly_tasks.errors import McpError, success_response
from weekly_tasks.mcp_router import mcp_router
from weekly_tasks.workspace import Document, get_request_workspace

RESOURCES: dict[str, dict[str, Any]] = {
    "current-tasks": {
        "document": Document.CURRENT,
        "title": "Current Tasks",
        "description": "Weekly task file with This Week and Next Week sections",
    },
    "task-backlog": {
        "document": Document.BACKLOG,
        "title": "Task Backlog",
        "description": "Backlog of future tasks with creation dates",
    },
}


def _resource_uri(document: Document) -> str:
    return f"file:///{document.filename}"


@mcp_router.get("/resources")
def list_resources() -> dict[str, Any]:
    """List the markdown resources exposed by the service."""
    resources = [
        {
            "name": name,
            "uri": _resource_uri(resource["document"]),
            "title": resource["title"],
            "description": resource["description"],
            "mimeType": "text/markdown",
        }
        for name, resource in RESOURCES.items()
    ]
    return success_response({"resources": resources})


@mcp_router.get("/resource:{name}")
def read_resource(name: str, request: Request) -> dict[str, Any]:
    resource = RESOURCES.get(name)
    if resource is None:
        raise McpError(
            "RESOURCE_NOT_FOUND",
            f"Unknown resource: {name}",
            {"name": name, "available": sorted(RESOURCES)},
        )
    document = resource["document"]
    workspace = get_request_workspace(request)
    try:
        text = workspace.read(document)
    except OSError as exc:
        raise McpError(
            "OPERATION_FAILED",
            f"Failed to read {document.filename}: {exc}",
            {"name": name},
        ) from exc
    return success_response(
        {
            "contents": [
                {
                    "uri": _resource_uri(document),
                    "mimeType": "text/markdown",
                    "text": text,
                }
            ]
        }
    )
