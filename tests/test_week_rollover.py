import pytest

from weekly_tasks.dates import DateProvider, fixed_clock
from weekly_tasks.errors import MissingSectionsError
from weekly_tasks.week_rollover import (
    PRE_TRANSITION_MESSAGE,
    archive_key_for,
    build_current_document,
    is_week_archived,
    partition_tasks,
    run_weekly_transition,
)
from weekly_tasks.workspace import Workspace


class RecordingCheckpoints:
    def __init__(self, pending: bool = False) -> None:
        self.pending = pending
        self.messages: list[str] = []

    def has_pending_changes(self) -> bool:
        return self.pending

    def commit(self, message: str) -> str:
        self.messages.append(message)
        self.pending = False
        return f"sha{len(self.messages)}"


def _workspace(tmp_path, current, archive="# Archive\n", pending=False, today="2024-01-17"):
    (tmp_path / "current.md").write_text(current, encoding="utf-8")
    (tmp_path / "backlog.md").write_text("# Backlog\n", encoding="utf-8")
    (tmp_path / "archive.md").write_text(archive, encoding="utf-8")
    return Workspace(
        tmp_path,
        dates=DateProvider(fixed_clock(today)),
        checkpoints=RecordingCheckpoints(pending=pending),
    )


def _read(tmp_path, name):
    return (tmp_path / name).read_text(encoding="utf-8")


def test_partition_keeps_descriptions_with_tasks():
    partition = partition_tasks(
        [
            "- [x] Ship release",
            "  release notes",
            "- [ ] Fix bug",
            "  repro steps",
            "",
            "- [-] Dropped idea",
            "stray",
        ]
    )

    assert partition.finished == [
        "- [x] Ship release",
        "  release notes",
        "- [-] Dropped idea",
    ]
    assert partition.unfinished == ["- [ ] Fix bug", "  repro steps"]


def test_build_current_document_trims_queued_blanks():
    rebuilt = build_current_document(["- [ ] Todo"], ["", "- [ ] Next", "", ""])

    assert rebuilt == "# This Week\n- [ ] Todo\n- [ ] Next\n\n# Next Week\n"


def test_is_week_archived_uses_exact_title():
    archive = "# Archive\n\n# Week of 2024-01-15\n- [x] Done\n"

    assert is_week_archived(archive, archive_key_for("2024-01-15"))
    assert not is_week_archived(archive, archive_key_for("2024-01-08"))
    assert not is_week_archived("# week of 2024-01-15\n", "Week of 2024-01-15")


def test_transition_promotes_next_week(tmp_path):
    workspace = _workspace(
        tmp_path,
        "# This Week\n- [x] Done\n- [ ] Todo\n\n# Next Week\n- [ ] Next\n",
    )

    result = run_weekly_transition(workspace)

    assert _read(tmp_path, "current.md") == (
        "# This Week\n- [ ] Todo\n- [ ] Next\n\n# Next Week\n"
    )
    assert _read(tmp_path, "archive.md") == (
        "# Archive\n\n# Week of 2024-01-15\n- [x] Done\n- [ ] Todo\n"
    )
    assert result.already_archived is False
    assert result.archive_key == "Week of 2024-01-15"
    assert result.commits == ["sha1"]
    assert workspace.checkpoints.messages == [
        "Completed week transition to 2024-01-17"
    ]


def test_transition_archives_verbatim_and_keeps_descriptions(tmp_path):
    current = "\n".join(
        [
            "# This Week",
            "- [x] Ship release",
            "  release notes",
            "- [ ] Fix bug",
            "  repro steps",
            "",
            "- [-] Dropped idea",
            "",
            "# Next Week",
            "- [ ] Plan sprint",
            "",
        ]
    )
    workspace = _workspace(tmp_path, current)

    result = run_weekly_transition(workspace)

    assert _read(tmp_path, "archive.md") == "\n".join(
        [
            "# Archive",
            "",
            "# Week of 2024-01-15",
            "- [x] Ship release",
            "  release notes",
            "- [ ] Fix bug",
            "  repro steps",
            "",
            "- [-] Dropped idea",
            "",
        ]
    )
    assert _read(tmp_path, "current.md") == "\n".join(
        [
            "# This Week",
            "- [ ] Fix bug",
            "  repro steps",
            "- [ ] Plan sprint",
            "",
            "# Next Week",
            "",
        ]
    )
    assert result.message == (
        "Successfully completed week transition. Archived week of 2024-01-15.\n\n"
        "# This Week\n- [ ] Fix bug\n  repro steps\n- [ ] Plan sprint"
    )


def test_transition_uses_monday_on_sunday(tmp_path):
    workspace = _workspace(
        tmp_path, "# This Week\n\n# Next Week\n", today="2024-01-21"
    )

    result = run_weekly_transition(workspace)

    assert result.archive_key == "Week of 2024-01-15"


def test_transition_is_idempotent_within_a_week(tmp_path):
    workspace = _workspace(
        tmp_path,
        "# This Week\n- [x] Done\n- [ ] Todo\n\n# Next Week\n- [ ] Next\n",
    )
    run_weekly_transition(workspace)
    current_after = _read(tmp_path, "current.md")
    archive_after = _read(tmp_path, "archive.md")
    workspace.dates = DateProvider(fixed_clock("2024-01-19"))

    result = run_weekly_transition(workspace)

    assert result.already_archived is True
    assert result.commits == []
    assert _read(tmp_path, "current.md") == current_after
    assert _read(tmp_path, "archive.md") == archive_after
    assert workspace.checkpoints.messages == [
        "Completed week transition to 2024-01-17"
    ]
    assert result.message.startswith(
        "Week of 2024-01-15 has already been archived; nothing to do."
    )
    assert result.message.endswith("# This Week\n- [ ] Todo\n- [ ] Next")


def test_transition_commits_pending_changes_first(tmp_path):
    workspace = _workspace(tmp_path, "# This Week\n\n# Next Week\n", pending=True)

    result = run_weekly_transition(workspace)

    assert workspace.checkpoints.messages == [
        PRE_TRANSITION_MESSAGE,
        "Completed week transition to 2024-01-17",
    ]
    assert result.commits == ["sha1", "sha2"]


def test_transition_requires_both_sections(tmp_path):
    workspace = _workspace(tmp_path, "# This Week\n- [ ] Todo\n")

    with pytest.raises(MissingSectionsError) as excinfo:
        run_weekly_transition(workspace)

    assert excinfo.value.error.details == {"sections": ["Next Week"]}
    assert _read(tmp_path, "archive.md") == "# Archive\n"
    assert _read(tmp_path, "current.md") == "# This Week\n- [ ] Todo\n"


def test_transition_section_titles_are_case_sensitive(tmp_path):
    workspace = _workspace(tmp_path, "# this week\n\n# next week\n")

    with pytest.raises(MissingSectionsError) as excinfo:
        run_weekly_transition(workspace)

    assert "This Week, Next Week" in excinfo.value.error.message
