import pytest

from weekly_tasks.errors import CheckpointError
from weekly_tasks.mcp_git import DisabledCheckpoints, GitCheckpoints, resolve_git_head
from weekly_tasks.workspace import Workspace


def test_initialize_creates_documents_and_commits(tmp_path):
    workspace = Workspace(tmp_path)

    startup_sha = workspace.initialize()

    assert (tmp_path / "current.md").read_text(encoding="utf-8") == (
        "# This Week\n\n# Next Week\n"
    )
    assert (tmp_path / "backlog.md").read_text(encoding="utf-8") == "# Backlog\n"
    assert (tmp_path / "archive.md").read_text(encoding="utf-8") == "# Archive\n"
    assert (tmp_path / ".gitignore").read_text(encoding="utf-8") == "activity.log\n"
    assert startup_sha is not None
    assert resolve_git_head(tmp_path) == startup_sha


def test_initialize_is_idempotent(tmp_path):
    workspace = Workspace(tmp_path)
    first_sha = workspace.initialize()

    assert Workspace(tmp_path).initialize() is None
    assert resolve_git_head(tmp_path) == first_sha


def test_initialize_commits_edits_made_while_stopped(tmp_path):
    Workspace(tmp_path).initialize()
    (tmp_path / "backlog.md").write_text(
        "# Backlog\n- [ ] Edited by hand\n", encoding="utf-8"
    )

    sha = Workspace(tmp_path).initialize()

    assert sha is not None
    assert resolve_git_head(tmp_path) == sha


def test_checkpoints_ignore_untracked_files(tmp_path):
    workspace = Workspace(tmp_path)
    workspace.initialize()
    (tmp_path / "activity.log").write_text("{}\n", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("scratch\n", encoding="utf-8")

    assert workspace.checkpoints.has_pending_changes() is False


def test_commit_after_write_updates_head(tmp_path):
    workspace = Workspace(tmp_path)
    workspace.initialize()
    workspace.write("current", "# This Week\n- [ ] A\n\n# Next Week\n")

    assert workspace.checkpoints.has_pending_changes() is True
    sha = workspace.checkpoints.commit("Added task: A")

    assert resolve_git_head(tmp_path) == sha
    assert workspace.checkpoints.has_pending_changes() is False


def test_ensure_repo_reports_failure(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file", encoding="utf-8")
    checkpoints = GitCheckpoints(blocker, ["current.md"])

    with pytest.raises(CheckpointError) as excinfo:
        checkpoints.ensure_repo()

    assert excinfo.value.code == "GIT_ERROR"


def test_disabled_checkpoints_never_commit(tmp_path):
    workspace = Workspace(tmp_path, checkpoints=DisabledCheckpoints())

    assert workspace.initialize() is None
    assert not (tmp_path / ".git").exists()
    assert (tmp_path / "current.md").exists()


def test_resolve_git_head_without_repo(tmp_path):
    assert resolve_git_head(tmp_path) is None


def test_resolve_git_head_reads_packed_refs(tmp_path):
    git_dir = tmp_path / ".git"
    git_dir.mkdir()
    (git_dir / "HEAD").write_text("ref: refs/heads/main\n", encoding="utf-8")
    (git_dir / "packed-refs").write_text(
        "# pack-refs with: peeled\nabc123 refs/heads/main\n", encoding="utf-8"
    )

    assert resolve_git_head(tmp_path) == "abc123"


def test_resolve_git_head_detached(tmp_path):
    git_dir = tmp_path / ".git"
    git_dir.mkdir()
    (git_dir / "HEAD").write_text("def456\n", encoding="utf-8")

    assert resolve_git_head(tmp_path) == "def456"
