from teamflow.application.use_cases import (
    AddTeamMemberUseCase,
    ChangeTeamMemberStatusUseCase,
    CreateTaskUseCase,
    CreateTeamUseCase,
    EditTaskTitleUseCase,
    GetTeamUseCase,
    ListTasksByOwnerUseCase,
    ListTeamsUseCase,
    RemoveTeamMemberUseCase,
    UpdateTaskProgressUseCase,
)
from teamflow.application.views import MemberView, TaskView, TeamView

__all__ = [
    "AddTeamMemberUseCase",
    "ChangeTeamMemberStatusUseCase",
    "CreateTaskUseCase",
    "CreateTeamUseCase",
    "EditTaskTitleUseCase",
    "GetTeamUseCase",
    "ListTasksByOwnerUseCase",
    "ListTeamsUseCase",
    "MemberView",
    "RemoveTeamMemberUseCase",
    "TaskView",
    "TeamView",
    "UpdateTaskProgressUseCase",
]
