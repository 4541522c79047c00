"""Dict-backed repositories for tests and database-less deployments.

Both repositories store the live aggregates themselves, which gives the
identity-map behaviour the ports require: every lookup of a team id returns
the same ``Team`` instance the caller may be mutating.

``InMemoryTeamRepository.transaction()`` stages saves and applies them when
the outermost scope exits cleanly.  Nested scopes behave like savepoints:
an exception discards only the saves staged inside that scope.
"""

from __future__ import annotations

import logging
from contextlib import AbstractContextManager

from teamflow.core.errors import PersistenceError, TeamflowError
from teamflow.core.result import Ok, Result
from teamflow.domain.task import Task
from teamflow.domain.team import Team
from teamflow.domain.values import TeamName
from teamflow.infrastructure.unit_of_work import StagedWrites

logger = logging.getLogger(__name__)


class InMemoryTeamRepository:
    def __init__(self) -> None:
        # Insertion order doubles as creation order for find_all().
        self._teams: dict[str, Team] = {}
        self._staged: StagedWrites[Team] = StagedWrites(self._apply)

    # -- Unit of work ------------------------------------------------------

    def transaction(self) -> AbstractContextManager[None]:
        return self._staged.scope()

    def _apply(self, teams: list[Team]) -> None:
        for team in teams:
            self._teams[team.id] = team

    # -- Port --------------------------------------------------------------

    def save(self, team: Team) -> Result[None, PersistenceError]:
        if self._staged.active:
            self._staged.stage(team.id, team)
        else:
            self._teams[team.id] = team
        return Ok(None)

    def find_by_id(self, team_id: str) -> Result[Team | None, TeamflowError]:
        return Ok(self._visible().get(team_id))

    def find_by_name(self, name: TeamName) -> Result[Team | None, TeamflowError]:
        for team in self._visible().values():
            if team.name == name:
                return Ok(team)
        return Ok(None)

    def find_all(self) -> Result[list[Team], TeamflowError]:
        return Ok(list(self._visible().values()))

    def find_by_member_id(self, member_id: str) -> Result[Team | None, TeamflowError]:
        for team in self._visible().values():
            if team.has_member(member_id):
                return Ok(team)
        return Ok(None)

    def exists(self, name: TeamName) -> Result[bool, PersistenceError]:
        return Ok(any(t.name == name for t in self._visible().values()))

    def find_smallest_team(self) -> Result[Team | None, TeamflowError]:
        teams = list(self._visible().values())
        if not teams:
            return Ok(None)
        return Ok(min(teams, key=lambda t: t.size))

    # -- Helpers -----------------------------------------------------------

    def _visible(self) -> dict[str, Team]:
        """Committed teams overlaid with this transaction's staged saves."""
        view = dict(self._teams)
        view.update(self._staged.pending())
        return view

    def clear(self) -> None:
        """Drop everything (testing helper)."""
        self._teams.clear()
        self._staged.clear()


class InMemoryTaskRepository:
    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}

    def save(self, task: Task) -> Result[Task, PersistenceError]:
        self._tasks[task.id] = task
        return Ok(task)

    def find_by_id(self, task_id: str) -> Result[Task | None, TeamflowError]:
        return Ok(self._tasks.get(task_id))

    def find_by_owner_id(self, owner_id: str) -> Result[list[Task], TeamflowError]:
        return Ok([t for t in self._tasks.values() if t.owner_id == owner_id])

    def clear(self) -> None:
        """Drop everything (testing helper)."""
        self._tasks.clear()
