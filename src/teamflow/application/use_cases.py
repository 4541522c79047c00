"""Application use cases.

Each use case loads aggregates through the persistence ports, applies one
domain operation, persists the result and returns a read model.  Failures
are raised as :class:`~teamflow.core.errors.TeamflowError` subclasses; the
``kind`` attribute tells the presentation layer which one it got.

Domain events published by the aggregates are dispatched synchronously, so
a reorganization triggered by e.g. a removal has already completed when the
use case returns.
"""

from __future__ import annotations

import logging

from teamflow.core.errors import ConflictError, NotFoundError, OwnershipError
from teamflow.core.interfaces import IEventBus, ITaskRepository, ITeamRepository
from teamflow.domain.status import EnrollmentStatus, ProgressStatus
from teamflow.domain.task import Task
from teamflow.domain.team import Team, TeamMember
from teamflow.domain.values import TeamName

from .views import TaskView, TeamView

logger = logging.getLogger(__name__)


def _team_by_name(teams: ITeamRepository, name: str) -> Team:
    team_name = TeamName.restore(name).unwrap()
    team = teams.find_by_name(team_name).unwrap()
    if team is None:
        raise NotFoundError(f"team {name} not found")
    return team


def _task_by_id(tasks: ITaskRepository, task_id: str) -> Task:
    task = tasks.find_by_id(task_id).unwrap()
    if task is None:
        raise NotFoundError(f"task {task_id} not found")
    return task


# ---------------------------------------------------------------------------
# Teams
# ---------------------------------------------------------------------------

class CreateTeamUseCase:
    def __init__(self, team_repository: ITeamRepository, event_bus: IEventBus) -> None:
        self._teams = team_repository
        self._events = event_bus

    def execute(self, name: str) -> TeamView:
        team_name = TeamName.create(name).unwrap()
        if self._teams.exists(team_name).unwrap():
            raise ConflictError(f"team name {team_name} is already taken")
        team = Team.create(name=team_name, event_bus=self._events).unwrap()
        self._teams.save(team).unwrap()
        logger.info("Created team %s (%s)", team.id, team.name)
        return TeamView.of(team)


class AddTeamMemberUseCase:
    """Enrol a new member into an existing team.

    Emails are unique across all teams.  When the team is already full the
    add is refused with ``TeamSizeExceededError``; the reorganization policy
    reacts to the oversize event by splitting the team.
    """

    def __init__(self, team_repository: ITeamRepository) -> None:
        self._teams = team_repository

    def execute(self, team_name: str, member_name: str, email: str) -> TeamView:
        team = _team_by_name(self._teams, team_name)
        member = TeamMember.create(name=member_name, email=email).unwrap()

        for other in self._teams.find_all().unwrap():
            if any(m.email == member.email for m in other.members):
                raise ConflictError(
                    f"email {member.email} is already used by a member of team {other.name}"
                )

        team.add_member(member).unwrap()
        self._teams.save(team).unwrap()
        return TeamView.of(team)


class RemoveTeamMemberUseCase:
    def __init__(self, team_repository: ITeamRepository) -> None:
        self._teams = team_repository

    def execute(self, team_name: str, member_id: str) -> TeamView:
        team = _team_by_name(self._teams, team_name)
        team.remove_member(member_id).unwrap()
        self._teams.save(team).unwrap()
        return TeamView.of(team)


class ChangeTeamMemberStatusUseCase:
    """Change a member's enrollment status, wherever they are enrolled.

    Leaving ``active`` also removes the member from the team, which may
    trigger a merge.  The returned view is the member's former team.
    """

    def __init__(self, team_repository: ITeamRepository) -> None:
        self._teams = team_repository

    def execute(self, member_id: str, status: str) -> TeamView:
        new_status = EnrollmentStatus.create(status).unwrap()
        team = self._teams.find_by_member_id(member_id).unwrap()
        if team is None:
            raise NotFoundError(f"member {member_id} is not enrolled in any team")
        team.change_member_status(member_id, new_status).unwrap()
        self._teams.save(team).unwrap()
        return TeamView.of(team)


class GetTeamUseCase:
    def __init__(self, team_repository: ITeamRepository) -> None:
        self._teams = team_repository

    def by_id(self, team_id: str) -> TeamView:
        team = self._teams.find_by_id(team_id).unwrap()
        if team is None:
            raise NotFoundError(f"team {team_id} not found")
        return TeamView.of(team)

    def by_name(self, name: str) -> TeamView:
        return TeamView.of(_team_by_name(self._teams, name))


class ListTeamsUseCase:
    def __init__(self, team_repository: ITeamRepository) -> None:
        self._teams = team_repository

    def execute(self) -> list[TeamView]:
        return [TeamView.of(t) for t in self._teams.find_all().unwrap()]


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------

class CreateTaskUseCase:
    def __init__(self, task_repository: ITaskRepository, event_bus: IEventBus) -> None:
        self._tasks = task_repository
        self._events = event_bus

    def execute(self, title: str, owner_id: str) -> TaskView:
        task = Task.create(title=title, owner_id=owner_id, event_bus=self._events).unwrap()
        saved = self._tasks.save(task).unwrap()
        return TaskView.of(saved)


class EditTaskTitleUseCase:
    def __init__(self, task_repository: ITaskRepository) -> None:
        self._tasks = task_repository

    def execute(self, task_id: str, title: str, requester_id: str) -> TaskView:
        task = _task_by_id(self._tasks, task_id)
        if task.owner_id != requester_id:
            raise OwnershipError("only the task owner can edit its title")
        task.edit(title).unwrap()
        saved = self._tasks.save(task).unwrap()
        return TaskView.of(saved)


class UpdateTaskProgressUseCase:
    def __init__(self, task_repository: ITaskRepository) -> None:
        self._tasks = task_repository

    def execute(self, task_id: str, status: str, requester_id: str) -> TaskView:
        task = _task_by_id(self._tasks, task_id)
        new_status = ProgressStatus.create(status).unwrap()
        task.change_progress_status(new_status, requester_id).unwrap()
        saved = self._tasks.save(task).unwrap()
        return TaskView.of(saved)


class ListTasksByOwnerUseCase:
    def __init__(self, task_repository: ITaskRepository) -> None:
        self._tasks = task_repository

    def execute(self, owner_id: str) -> list[TaskView]:
        return [TaskView.of(t) for t in self._tasks.find_by_owner_id(owner_id).unwrap()]
