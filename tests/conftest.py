"""Shared fixtures for the teamflow test suite."""

from __future__ import annotations

import logging

import pytest

from teamflow.domain.reorganization import TeamReorganizationService
from teamflow.domain.team import Team, TeamMember
from teamflow.domain.values import TeamName
from teamflow.infrastructure.event_bus import InMemoryEventBus
from teamflow.infrastructure.memory import InMemoryTaskRepository, InMemoryTeamRepository
from teamflow.infrastructure.notifier import LoggingNotifier
from teamflow.policy.team_reorganization import TeamReorganizationPolicy


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def make_member(name: str = "Alice", email: str | None = None) -> TeamMember:
    """Return a new active member; the email defaults to ``<name>@example.com``."""
    return TeamMember.create(
        name=name, email=email or f"{name.lower()}@example.com",
    ).unwrap()


def make_team(
    bus: InMemoryEventBus,
    name: str = "Alpha",
    size: int = 0,
    *,
    repo: InMemoryTeamRepository | None = None,
) -> Team:
    """Create a team with *size* members named ``<name>0``, ``<name>1``...

    Members are added while no policy is listening, then the bus history is
    cleared so tests only see the events they trigger themselves.
    """
    team = Team.create(name=TeamName.create(name).unwrap(), event_bus=bus).unwrap()
    for i in range(size):
        team.add_member(make_member(f"{name}{i}", f"{name.lower()}{i}@example.com")).unwrap()
    if repo is not None:
        repo.save(team).unwrap()
    bus.clear_history()
    return team


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _restore_root_logger():
    """setup_logging() replaces root handlers; undo it after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def team_repo() -> InMemoryTeamRepository:
    return InMemoryTeamRepository()


@pytest.fixture
def task_repo() -> InMemoryTaskRepository:
    return InMemoryTaskRepository()


@pytest.fixture
def notifier() -> LoggingNotifier:
    return LoggingNotifier()


@pytest.fixture
def service(team_repo, bus) -> TeamReorganizationService:
    return TeamReorganizationService(team_repo, bus)


@pytest.fixture
def policy(bus, team_repo, service, notifier) -> TeamReorganizationPolicy:
    return TeamReorganizationPolicy(bus, team_repo, service, notifier)
