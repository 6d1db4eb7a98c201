"""Workspace handle: document storage, dates, and checkpoints."""

from __future__ import annotations

import logging
import os
import tempfile
from enum import Enum
from pathlib import Path

from weekly_tasks.dates import DateProvider
from weekly_tasks.errors import DocumentNotFoundError, McpError
from weekly_tasks.mcp_git import CheckpointService, DisabledCheckpoints, GitCheckpoints

logger = logging.getLogger(__name__)

ACTIVITY_LOG_FILENAME = "activity.log"
GITIGNORE_FILENAME = ".gitignore"

THIS_WEEK = "This Week"
NEXT_WEEK = "Next Week"
BACKLOG = "Backlog"


class Document(str, Enum):
    CURRENT = "current"
    BACKLOG = "backlog"
    ARCHIVE = "archive"

    @property
    def filename(self) -> str:
        return f"{self.value}.md"


DOCUMENT_TEMPLATES = {
    Document.CURRENT: f"# {THIS_WEEK}\n\n# {NEXT_WEEK}\n",
    Document.BACKLOG: f"# {BACKLOG}\n",
    Document.ARCHIVE: "# Archive\n",
}


class Workspace:
    """Explicit context for one task workspace directory."""

    def __init__(
        self,
        root: Path,
        dates: DateProvider | None = None,
        checkpoints: CheckpointService | None = None,
    ) -> None:
        self.root = Path(root)
        self.dates = dates or DateProvider()
        if checkpoints is None:
            checkpoints = GitCheckpoints(
                self.root, [document.filename for document in Document]
            )
        self.checkpoints = checkpoints

    def path(self, document: Document | str) -> Path:
        return self.root / Document(document).filename

    def read(self, document: Document | str) -> str:
        path = self.path(document)
        if not path.is_file():
            raise DocumentNotFoundError(path.name)
        return path.read_text(encoding="utf-8")

    def write(self, document: Document | str, content: str) -> None:
        path = self.path(document)
        if not path.is_file():
            raise DocumentNotFoundError(path.name)
        _atomic_write(path, content)

    def append(self, document: Document | str, content: str) -> None:
        """Append a block after the existing text, separated by a blank line."""
        existing = self.read(document).strip()
        updated = f"{existing}\n\n{content}" if existing else content
        self.write(document, updated)

    def initialize(self) -> str | None:
        """Create missing documents and commit anything left uncommitted.

        Returns the commit sha when a startup commit was made.
        """
        self.root.mkdir(parents=True, exist_ok=True)
        if isinstance(self.checkpoints, GitCheckpoints):
            self.checkpoints.ensure_repo()

        gitignore = self.root / GITIGNORE_FILENAME
        if not gitignore.exists():
            _atomic_write(gitignore, f"{ACTIVITY_LOG_FILENAME}\n")

        for document, template in DOCUMENT_TEMPLATES.items():
            path = self.path(document)
            if not path.exists():
                logger.info("Creating %s", path)
                _atomic_write(path, template)

        if self.checkpoints.has_pending_changes():
            return self.checkpoints.commit("Changes since last startup")
        return None


def get_request_workspace(request) -> Workspace:
    """Return the workspace attached to the application serving a request."""
    state = request.app.state
    workspace = getattr(state, "workspace", None)
    if workspace is not None:
        return workspace
    config = getattr(state, "config", None)
    if config is None:
        raise McpError(
            "WORKSPACE_UNAVAILABLE",
            "No task workspace is configured for this application.",
        )
    workspace = build_workspace(config)
    state.workspace = workspace
    return workspace


def build_workspace(config) -> Workspace:
    checkpoints = None
    if not getattr(config, "git_checkpoints", True):
        checkpoints = DisabledCheckpoints()
    return Workspace(Path(config.workspace_path), checkpoints=checkpoints)


def _atomic_write(target_path: Path, content: str) -> None:
    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=target_path.parent, delete=False
        ) as temp_file:
            temp_path = Path(temp_file.name)
            temp_file.write(content)
            temp_file.flush()
            os.fsync(temp_file.fileno())
        os.replace(temp_path, target_path)
    finally:
        if temp_path is not None and temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                pass
