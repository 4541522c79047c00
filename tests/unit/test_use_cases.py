"""Tests for the application use cases wired through build_app()."""

from __future__ import annotations

import pytest

from teamflow.core.errors import (
    ConflictError,
    DuplicateMemberError,
    InvalidTransitionError,
    MemberNotFoundError,
    NotFoundError,
    OwnershipError,
    TeamSizeExceededError,
    ValidationError,
)
from teamflow.main import build_app


@pytest.fixture
def app():
    return build_app()


def _team_with(app, name: str, size: int):
    view = app.create_team.execute(name)
    for i in range(size):
        view = app.add_team_member.execute(name, f"{name}{i}", f"{name.lower()}{i}@example.com")
    return view


# ---------------------------------------------------------------------------
# Teams
# ---------------------------------------------------------------------------

class TestTeamUseCases:
    def test_create_team(self, app):
        view = app.create_team.execute("Alpha")
        assert view.name == "Alpha"
        assert view.members == []
        assert app.get_team.by_id(view.id) == view

    def test_create_team_rejects_duplicate_name(self, app):
        app.create_team.execute("Alpha")
        with pytest.raises(ConflictError):
            app.create_team.execute("Alpha")

    def test_create_team_rejects_invalid_name(self, app):
        with pytest.raises(ValidationError):
            app.create_team.execute("Team 1")

    def test_add_member(self, app):
        app.create_team.execute("Alpha")
        view = app.add_team_member.execute("Alpha", "Alice", "alice@example.com")
        assert [(m.name, m.email, m.status) for m in view.members] == [
            ("Alice", "alice@example.com", "active"),
        ]

    def test_add_member_to_unknown_team(self, app):
        with pytest.raises(NotFoundError):
            app.add_team_member.execute("Ghost", "Alice", "alice@example.com")

    def test_add_member_invalid_email(self, app):
        app.create_team.execute("Alpha")
        with pytest.raises(ValidationError):
            app.add_team_member.execute("Alpha", "Alice", "nope")

    def test_email_is_unique_across_teams(self, app):
        _team_with(app, "Alpha", 2)
        app.create_team.execute("Beta")
        with pytest.raises(ConflictError):
            app.add_team_member.execute("Beta", "Copy", "alpha0@example.com")

    def test_fifth_member_rejected_and_team_split(self, app):
        _team_with(app, "Alpha", 4)
        with pytest.raises(TeamSizeExceededError):
            app.add_team_member.execute("Alpha", "Extra", "extra@example.com")
        teams = app.list_teams.execute()
        assert [(t.name, t.size) for t in teams] == [("Alpha", 2), ("Alpha-2", 2)]

    def test_remove_member(self, app):
        view = _team_with(app, "Alpha", 3)
        gone = view.members[0]
        after = app.remove_team_member.execute("Alpha", gone.id)
        assert gone.id not in {m.id for m in after.members}

    def test_remove_unknown_member(self, app):
        _team_with(app, "Alpha", 2)
        with pytest.raises(MemberNotFoundError):
            app.remove_team_member.execute("Alpha", "nobody")

    def test_remove_triggers_merge(self, app):
        alpha = _team_with(app, "Alpha", 2)
        _team_with(app, "Beta", 2)
        app.remove_team_member.execute("Alpha", alpha.members[0].id)
        assert app.get_team.by_name("Alpha").size == 0
        beta = app.get_team.by_name("Beta")
        assert alpha.members[1].id in {m.id for m in beta.members}

    def test_change_status_evicts(self, app):
        view = _team_with(app, "Alpha", 3)
        member = view.members[0]
        after = app.change_member_status.execute(member.id, "inactive")
        assert member.id not in {m.id for m in after.members}
        with pytest.raises(NotFoundError):
            app.change_member_status.execute(member.id, "active")

    def test_change_status_rejects_unknown_status(self, app):
        view = _team_with(app, "Alpha", 2)
        with pytest.raises(ValidationError):
            app.change_member_status.execute(view.members[0].id, "retired")

    def test_list_teams_in_creation_order(self, app):
        for name in ("Gamma", "Alpha", "Beta"):
            app.create_team.execute(name)
        assert [t.name for t in app.list_teams.execute()] == ["Gamma", "Alpha", "Beta"]

    def test_get_unknown_team(self, app):
        with pytest.raises(NotFoundError):
            app.get_team.by_id("missing")
        with pytest.raises(NotFoundError):
            app.get_team.by_name("Ghost")


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------

class TestTaskUseCases:
    def test_task_lifecycle(self, app):
        task = app.create_task.execute("Write report", "M1")
        assert task.progress_status == "not_started"

        for status in ("in_progress", "waiting_for_review", "completed"):
            task = app.update_task_progress.execute(task.id, status, "M1")
        assert task.progress_status == "completed"

        with pytest.raises(InvalidTransitionError):
            app.update_task_progress.execute(task.id, "in_progress", "M1")

    def test_progress_requires_owner(self, app):
        task = app.create_task.execute("Write report", "M1")
        with pytest.raises(OwnershipError):
            app.update_task_progress.execute(task.id, "in_progress", "M2")

    def test_edit_title_requires_owner(self, app):
        task = app.create_task.execute("Write report", "M1")
        with pytest.raises(OwnershipError):
            app.edit_task_title.execute(task.id, "Hijacked", "M2")
        edited = app.edit_task_title.execute(task.id, "Write final report", "M1")
        assert edited.title == "Write final report"

    def test_unknown_task(self, app):
        with pytest.raises(NotFoundError):
            app.update_task_progress.execute("missing", "in_progress", "M1")

    def test_create_task_rejects_long_title(self, app):
        with pytest.raises(ValidationError):
            app.create_task.execute("x" * 101, "M1")

    def test_list_tasks_by_owner(self, app):
        app.create_task.execute("A", "M1")
        app.create_task.execute("B", "M1")
        app.create_task.execute("C", "M2")
        assert [t.title for t in app.list_tasks_by_owner.execute("M1")] == ["A", "B"]


class TestDuplicateAdd:
    def test_same_member_twice_is_duplicate(self, app):
        from teamflow.domain.values import TeamName

        _team_with(app, "Alpha", 2)
        team = app.team_repository.find_by_name(TeamName.create("Alpha").unwrap()).unwrap()
        with pytest.raises(DuplicateMemberError):
            team.add_member(team.members[0]).unwrap()
