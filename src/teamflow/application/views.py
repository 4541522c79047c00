"""Read models returned by the use cases.

Plain pydantic snapshots of aggregate state; mutating a view never touches
the aggregate it was built from.
"""

from __future__ import annotations

from pydantic import BaseModel

from teamflow.domain.task import Task
from teamflow.domain.team import Team, TeamMember


class MemberView(BaseModel):
    model_config = {"frozen": True}

    id: str
    name: str
    email: str
    status: str

    @classmethod
    def of(cls, member: TeamMember) -> MemberView:
        return cls(
            id=member.id,
            name=member.name,
            email=str(member.email),
            status=member.status.value,
        )


class TeamView(BaseModel):
    model_config = {"frozen": True}

    id: str
    name: str
    members: list[MemberView]

    @property
    def size(self) -> int:
        return len(self.members)

    @classmethod
    def of(cls, team: Team) -> TeamView:
        return cls(
            id=team.id,
            name=str(team.name),
            members=[MemberView.of(m) for m in team.members],
        )


class TaskView(BaseModel):
    model_config = {"frozen": True}

    id: str
    title: str
    owner_id: str
    progress_status: str

    @classmethod
    def of(cls, task: Task) -> TaskView:
        return cls(
            id=task.id,
            title=task.title,
            owner_id=task.owner_id,
            progress_status=task.progress_status.value,
        )
