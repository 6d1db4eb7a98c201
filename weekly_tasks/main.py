"""FastAPI entrypoint for the weekly task MCP server."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from weekly_tasks.config import load_config
from weekly_tasks.errors import ErrorResponse, McpError, error_response
from weekly_tasks.mcp import register_mcp_handlers
from weekly_tasks.mcp_git import resolve_git_head
from weekly_tasks.workspace import build_workspace

logger = logging.getLogger(__name__)

SERVICE_TOKEN_HEADER = "X-Weekly-Tasks-Token"
AUTH_EXEMPT_PATHS = {"/health"}


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        config = load_config()
        workspace = build_workspace(config)
        startup_sha = workspace.initialize()
        if startup_sha:
            logger.info("Committed pending workspace changes as %s", startup_sha)
        logger.info(
            "Serving tasks from %s (HEAD %s)",
            workspace.root,
            resolve_git_head(workspace.root) or "none",
        )
        app.state.config = config
        app.state.workspace = workspace
        yield

    app = FastAPI(lifespan=lifespan)

    @app.middleware("http")
    async def enforce_service_token(request: Request, call_next):
        if request.url.path in AUTH_EXEMPT_PATHS:
            return await call_next(request)

        config = getattr(request.app.state, "config", None)
        service_token = getattr(config, "service_token", None)
        if service_token:
            supplied_token = request.headers.get(SERVICE_TOKEN_HEADER)
            if supplied_token != service_token:
                error = ErrorResponse(
                    code="AUTH_FORBIDDEN",
                    message="Invalid service token.",
                    details={"header": SERVICE_TOKEN_HEADER},
                )
                return JSONResponse(
                    status_code=403, content=error_response(error)
                )

        return await call_next(request)

    @app.exception_handler(McpError)
    def handle_mcp_error(request: Request, exc: McpError) -> JSONResponse:
        return JSONResponse(status_code=400, content=error_response(exc.error))

    @app.get("/health", status_code=200)
    def health() -> dict[str, str]:
        return {"status": "ok"}

    register_mcp_handlers(app)
    return app


app = create_app()


def run() -> None:
    """Run the service with uvicorn using the loaded configuration."""
    config = load_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        create_app(),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    run()
