"""MCP handler registration."""

# ruff: noqa: F401

from __future__ import annotations

from fastapi import FastAPI

from weekly_tasks.mcp_router import mcp_router

# Import modules to register routes with the shared router.
from weekly_tasks import (
    mcp_activity,
    mcp_resources,
    mcp_tasks,
    mcp_tools_endpoint,
)

# Re-export endpoints for tests and direct imports.
from weekly_tasks.mcp_activity import read_activity_log
from weekly_tasks.mcp_resources import list_resources, read_resource
from weekly_tasks.mcp_tasks import (
    add_task,
    edit_task,
    finish_task,
    get_current_tasks,
    get_task_backlog,
    move_task,
    start_week,
)
from weekly_tasks.mcp_tools_endpoint import list_tool_schemas
from weekly_tasks.workspace import ACTIVITY_LOG_FILENAME


def register_mcp_handlers(app: FastAPI) -> None:
    """Attach MCP routes to the FastAPI application."""
    app.include_router(mcp_router)
