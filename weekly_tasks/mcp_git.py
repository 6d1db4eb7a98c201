"""Git checkpoints for the task workspace."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Protocol

from dulwich import porcelain
from dulwich.repo import Repo

from weekly_tasks.errors import CheckpointError

logger = logging.getLogger(__name__)


class CheckpointService(Protocol):
    def has_pending_changes(self) -> bool: ...

    def commit(self, message: str) -> str | None: ...


class GitCheckpoints:
    """Commit the workspace documents to a git repository with dulwich."""

    def __init__(self, root: Path, tracked_files: Iterable[str]) -> None:
        self.root = root
        self.tracked_files = tuple(tracked_files)
        self._repo: Repo | None = None

    def ensure_repo(self) -> Repo:
        if self._repo is not None:
            return self._repo
        git_dir = self.root / ".git"
        try:
            if git_dir.exists():
                self._repo = Repo(str(self.root))
            else:
                logger.info("Initializing git repository in %s", self.root)
                self._repo = porcelain.init(str(self.root))
        except Exception as exc:
            raise CheckpointError(
                f"Git repository could not be initialized: {exc}",
                {"path": str(self.root)},
            ) from exc
        return self._repo

    def has_pending_changes(self) -> bool:
        repo = self.ensure_repo()
        try:
            status = porcelain.status(repo)
        except Exception as exc:
            raise CheckpointError(f"Git status failed: {exc}") from exc

        changed: set[str] = set()
        for paths in status.staged.values():
            changed.update(os.fsdecode(path) for path in paths)
        changed.update(os.fsdecode(path) for path in status.unstaged)
        changed.update(os.fsdecode(path) for path in status.untracked)
        return any(name in changed for name in self.tracked_files)

    def commit(self, message: str) -> str:
        repo = self.ensure_repo()
        present = [name for name in self.tracked_files if (self.root / name).exists()]
        try:
            repo.get_worktree().stage(present)
            commit_sha = porcelain.commit(repo, message=message)
        except Exception as exc:
            raise CheckpointError(
                f"Git commit failed: {exc}", {"message": message}
            ) from exc
        if isinstance(commit_sha, bytes):
            commit_sha = commit_sha.decode("ascii")
        logger.debug("Committed %s: %s", commit_sha, message)
        return str(commit_sha)


class DisabledCheckpoints:
    """Checkpoint service used when git checkpoints are turned off."""

    def has_pending_changes(self) -> bool:
        return False

    def commit(self, message: str) -> None:
        logger.debug("Git checkpoints disabled; skipping commit: %s", message)
        return None


def resolve_git_head(root: Path) -> str | None:
    git_dir = root / ".git"
    head_path = git_dir / "HEAD"
    if not head_path.exists():
        return None

    try:
        head_contents = head_path.read_text(encoding="utf-8").strip()
    except OSError:
        return None

    if head_contents.startswith("ref:"):
        ref_name = head_contents.partition("ref:")[2].strip()
        if not ref_name:
            return None
        ref_path = git_dir / ref_name
        if ref_path.exists():
            try:
                return ref_path.read_text(encoding="utf-8").strip() or None
            except OSError:
                return None
        return _lookup_packed_ref(git_dir / "packed-refs", ref_name)

    return head_contents or None


def _lookup_packed_ref(packed_refs: Path, ref_name: str) -> str | None:
    if not packed_refs.exists():
        return None
    try:
        contents = packed_refs.read_text(encoding="utf-8")
    except OSError:
        return None

    for line in contents.splitlines():
        if not line or line.startswith("#") or line.startswith("^"):
            continue
        sha, _, name = line.partition(" ")
        if name.strip() == ref_name:
            return sha
    return None
