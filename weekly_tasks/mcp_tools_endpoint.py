"""Tool definition endpoint."""

from __future__ import annotations

from typing import Any

from fastapi.routing import APIRoute

from weekly_tasks.errors import McpError, success_response
from weekly_tasks.mcp_router import mcp_router
from weekly_tasks.tool_schemas import (
    ToolSchemaError,
    check_registered_tools,
    load_tool_definitions,
)

TOOL_ROUTE_PREFIX = "/tool:"


def registered_tool_names() -> list[str]:
    """Return the tool names registered on the shared router."""
    return [
        route.path[len(TOOL_ROUTE_PREFIX) :]
        for route in mcp_router.routes
        if isinstance(route, APIRoute) and route.path.startswith(TOOL_ROUTE_PREFIX)
    ]


@mcp_router.get("/tools")
def list_tool_schemas() -> dict[str, Any]:
    """Return the tool definitions, checked against the registered routes."""
    try:
        tools = load_tool_definitions()
        check_registered_tools(tools, registered_tool_names())
    except ToolSchemaError as exc:
        raise McpError(
            "TOOL_SCHEMA_ERROR",
            "Tool definitions could not be loaded.",
            {"error": str(exc)},
        ) from exc
    return success_response({"tools": tools})
