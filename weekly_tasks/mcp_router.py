"""Shared router that every MCP endpoint module registers on."""

from __future__ import annotations

from fastapi import APIRouter

mcp_router = APIRouter()
