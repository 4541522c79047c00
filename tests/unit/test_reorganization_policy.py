"""Tests for TeamReorganizationPolicy reacting to size events."""

from __future__ import annotations

import logging

from conftest import make_member, make_team

from teamflow.core.errors import ErrorKind, NotificationError, PersistenceError
from teamflow.core.result import Err
from teamflow.domain.events import TeamOversizedEvent, TeamUndersizedEvent
from teamflow.domain.reorganization import TeamReorganizationService
from teamflow.infrastructure.memory import InMemoryTeamRepository
from teamflow.infrastructure.notifier import LoggingNotifier
from teamflow.policy.team_reorganization import TeamReorganizationPolicy


def _subjects(notifier: LoggingNotifier) -> list[str]:
    return [n.subject for n in notifier.sent]


class FailingNotifier:
    def __init__(self) -> None:
        self.calls = 0

    def notify(self, subject, message, **context):
        self.calls += 1
        return Err(NotificationError("smtp down"))


# ---------------------------------------------------------------------------
# Subscription
# ---------------------------------------------------------------------------

class TestSubscription:
    def test_subscribes_on_construction(self, bus, policy):
        assert bus.handler_count(TeamUndersizedEvent) == 1
        assert bus.handler_count(TeamOversizedEvent) == 1


# ---------------------------------------------------------------------------
# Undersized
# ---------------------------------------------------------------------------

class TestUndersized:
    def test_single_member_merges_into_smallest_team(self, bus, team_repo, policy, notifier):
        alpha = make_team(bus, "Alpha", 2, repo=team_repo)
        beta = make_team(bus, "Beta", 3, repo=team_repo)
        gamma = make_team(bus, "Gamma", 2, repo=team_repo)
        survivor = alpha.members[1]

        alpha.remove_member(alpha.members[0].id).unwrap()

        assert alpha.size == 0
        assert gamma.size == 3
        assert gamma.has_member(survivor.id)
        assert beta.size == 3
        assert _subjects(notifier) == ["Teams merged"]

    def test_ties_go_to_first_created_team(self, bus, team_repo, policy):
        alpha = make_team(bus, "Alpha", 2, repo=team_repo)
        beta = make_team(bus, "Beta", 2, repo=team_repo)
        gamma = make_team(bus, "Gamma", 2, repo=team_repo)

        alpha.remove_member(alpha.members[0].id).unwrap()

        assert (beta.size, gamma.size) == (3, 2)

    def test_no_other_team_notifies(self, bus, team_repo, policy, notifier):
        alpha = make_team(bus, "Alpha", 2, repo=team_repo)

        alpha.remove_member(alpha.members[0].id).unwrap()

        assert alpha.size == 1
        assert _subjects(notifier) == ["No merge target"]

    def test_full_target_is_split_first(self, bus, team_repo, policy, notifier):
        alpha = make_team(bus, "Alpha", 2, repo=team_repo)
        beta = make_team(bus, "Beta", 4, repo=team_repo)
        survivor = alpha.members[1]

        alpha.remove_member(alpha.members[0].id).unwrap()

        teams = {str(t.name): t for t in team_repo.find_all().unwrap()}
        assert set(teams) == {"Alpha", "Beta", "Beta-2"}
        assert teams["Alpha"].size == 0
        assert beta.size == 3
        assert beta.has_member(survivor.id)
        assert teams["Beta-2"].size == 2
        assert _subjects(notifier) == ["Teams merged"]

    def test_empty_team_is_left_alone(self, bus, team_repo, policy, notifier):
        alpha = make_team(bus, "Alpha", 1, repo=team_repo)
        beta = make_team(bus, "Beta", 2, repo=team_repo)

        alpha.remove_member(alpha.members[0].id).unwrap()

        assert beta.size == 2
        assert notifier.sent == []

    def test_deactivation_triggers_merge(self, bus, team_repo, policy):
        from teamflow.domain.status import EnrollmentStatus

        alpha = make_team(bus, "Alpha", 2, repo=team_repo)
        beta = make_team(bus, "Beta", 2, repo=team_repo)

        alpha.change_member_status(alpha.members[0].id, EnrollmentStatus.INACTIVE).unwrap()

        assert alpha.size == 0
        assert beta.size == 3

    def test_merge_failure_is_reported_and_rolled_back(self, bus, notifier):
        class BrokenSaves(InMemoryTeamRepository):
            broken = False

            def save(self, team):
                if self.broken:
                    return Err(PersistenceError("read-only database"))
                return super().save(team)

        repo = BrokenSaves()
        service = TeamReorganizationService(repo, bus)
        TeamReorganizationPolicy(bus, repo, service, notifier)
        alpha = make_team(bus, "Alpha", 2, repo=repo)
        beta = make_team(bus, "Beta", 2, repo=repo)
        repo.broken = True

        alpha.remove_member(alpha.members[0].id).unwrap()

        assert (alpha.size, beta.size) == (1, 2)
        assert _subjects(notifier) == ["Team merge failed"]
        assert bus.dead_letters == []


# ---------------------------------------------------------------------------
# Oversized
# ---------------------------------------------------------------------------

class TestOversized:
    def test_rejected_add_splits_full_team(self, bus, team_repo, policy, notifier):
        alpha = make_team(bus, "Alpha", 4, repo=team_repo)

        result = alpha.add_member(make_member("Extra"))

        assert result.error.kind is ErrorKind.TEAM_SIZE_EXCEEDED
        teams = team_repo.find_all().unwrap()
        assert [str(t.name) for t in teams] == ["Alpha", "Alpha-2"]
        assert [t.size for t in teams] == [2, 2]
        assert _subjects(notifier) == ["Team split"]

    def test_member_can_join_after_split(self, bus, team_repo, policy):
        alpha = make_team(bus, "Alpha", 4, repo=team_repo)
        extra = make_member("Extra")
        alpha.add_member(extra)

        assert alpha.add_member(extra).ok
        assert alpha.size == 3


# ---------------------------------------------------------------------------
# Robustness
# ---------------------------------------------------------------------------

class TestRobustness:
    def test_handler_errors_are_contained(self, bus, notifier):
        class ExplodingRepository(InMemoryTeamRepository):
            def find_all(self):
                raise RuntimeError("connection reset")

        repo = ExplodingRepository()
        TeamReorganizationPolicy(bus, repo, TeamReorganizationService(repo, bus), notifier)
        alpha = make_team(bus, "Alpha", 2, repo=repo)

        assert alpha.remove_member(alpha.members[0].id).ok

        assert _subjects(notifier) == ["Team reorganization error"]
        assert bus.dead_letters == []

    def test_notification_failure_is_logged_only(self, bus, team_repo, caplog):
        notifier = FailingNotifier()
        TeamReorganizationPolicy(
            bus, team_repo, TeamReorganizationService(team_repo, bus), notifier,
        )
        alpha = make_team(bus, "Alpha", 2, repo=team_repo)

        with caplog.at_level(logging.WARNING):
            alpha.remove_member(alpha.members[0].id).unwrap()

        assert notifier.calls == 1
        assert "notification failed" in caplog.text
        assert bus.dead_letters == []

    def test_unknown_team_event_is_reported(self, bus, policy, notifier):
        from teamflow.domain.values import TeamName

        bus.publish(TeamUndersizedEvent(
            team_id="missing", team_name=TeamName.create("Ghost").unwrap(), current_size=1,
        ))

        assert _subjects(notifier) == ["Undersized team lookup failed"]

    def test_mismatched_event_is_ignored(self, policy, notifier, caplog):
        from teamflow.domain.events import TeamCreatedEvent
        from teamflow.domain.values import TeamName

        event = TeamCreatedEvent(team_id="T1", team_name=TeamName.create("Alpha").unwrap())
        with caplog.at_level(logging.WARNING):
            policy.handle_team_undersized(event)
            policy.handle_team_oversized(event)

        assert notifier.sent == []
        assert caplog.text.count("Ignoring unexpected TeamCreatedEvent") == 2
