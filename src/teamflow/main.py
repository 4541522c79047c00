"""Application bootstrap.

Wires the event bus, repositories, reorganization service and policy, the
notifier and the use cases into one :class:`App`.  There is no global bus:
every aggregate built through the returned use cases publishes on
``app.event_bus``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .application.use_cases import (
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
from .core.config import Settings, load_settings
from .core.interfaces import INotifier, ITaskRepository, ITeamRepository
from .domain.reorganization import TeamReorganizationService
from .infrastructure.event_bus import InMemoryEventBus
from .infrastructure.memory import InMemoryTaskRepository, InMemoryTeamRepository
from .infrastructure.notifier import LoggingNotifier, WebhookNotifier
from .policy.team_reorganization import TeamReorganizationPolicy

logger = logging.getLogger(__name__)


@dataclass
class App:
    settings: Settings
    event_bus: InMemoryEventBus
    team_repository: ITeamRepository
    task_repository: ITaskRepository
    notifier: INotifier
    reorganization_service: TeamReorganizationService
    reorganization_policy: TeamReorganizationPolicy

    create_team: CreateTeamUseCase
    add_team_member: AddTeamMemberUseCase
    remove_team_member: RemoveTeamMemberUseCase
    change_member_status: ChangeTeamMemberStatusUseCase
    get_team: GetTeamUseCase
    list_teams: ListTeamsUseCase
    create_task: CreateTaskUseCase
    edit_task_title: EditTaskTitleUseCase
    update_task_progress: UpdateTaskProgressUseCase
    list_tasks_by_owner: ListTasksByOwnerUseCase

    def close(self) -> None:
        if isinstance(self.notifier, WebhookNotifier):
            self.notifier.close()


def _build_repositories(
    settings: Settings, event_bus: InMemoryEventBus,
) -> tuple[ITeamRepository, ITaskRepository]:
    if not settings.database_url:
        logger.info("No database_url configured; using in-memory repositories")
        return InMemoryTeamRepository(), InMemoryTaskRepository()

    from .storage.sql import (
        SqlTaskRepository,
        SqlTeamRepository,
        create_all,
        create_engine,
        session_factory,
    )

    engine = create_engine(settings.database_url, echo=settings.sql_echo)
    create_all(engine)
    sessions = session_factory(engine)
    return SqlTeamRepository(sessions, event_bus), SqlTaskRepository(sessions, event_bus)


def _build_notifier(settings: Settings) -> INotifier:
    cfg = settings.notifications
    if cfg.webhook_url:
        return WebhookNotifier(cfg.webhook_url, timeout=cfg.timeout_seconds)
    return LoggingNotifier()


def build_app(settings: Settings | None = None) -> App:
    """Construct a fully wired :class:`App` from *settings* (defaults if None)."""
    settings = settings or Settings()

    event_bus = InMemoryEventBus(
        max_cascade_depth=settings.event_bus.max_cascade_depth,
        max_history=settings.event_bus.max_history,
    )
    teams, tasks = _build_repositories(settings, event_bus)
    notifier = _build_notifier(settings)
    service = TeamReorganizationService(teams, event_bus)
    policy = TeamReorganizationPolicy(event_bus, teams, service, notifier)

    return App(
        settings=settings,
        event_bus=event_bus,
        team_repository=teams,
        task_repository=tasks,
        notifier=notifier,
        reorganization_service=service,
        reorganization_policy=policy,
        create_team=CreateTeamUseCase(teams, event_bus),
        add_team_member=AddTeamMemberUseCase(teams),
        remove_team_member=RemoveTeamMemberUseCase(teams),
        change_member_status=ChangeTeamMemberStatusUseCase(teams),
        get_team=GetTeamUseCase(teams),
        list_teams=ListTeamsUseCase(teams),
        create_task=CreateTaskUseCase(tasks, event_bus),
        edit_task_title=EditTaskTitleUseCase(tasks),
        update_task_progress=UpdateTaskProgressUseCase(tasks),
        list_tasks_by_owner=ListTasksByOwnerUseCase(tasks),
    )


def bootstrap(
    config_path: str | None = None,
    overrides: dict[str, Any] | None = None,
) -> App:
    """Load config, set up logging and build the app."""
    settings = load_settings(config_path=config_path, overrides=overrides)
    _setup_logging(settings)
    app = build_app(settings)
    logger.info(
        "teamflow ready (storage=%s, notifier=%s)",
        "sql" if settings.database_url else "memory",
        type(app.notifier).__name__,
    )
    return app


def _setup_logging(settings: Settings) -> None:
    from .observability.logger import setup_logging

    setup_logging(
        level=settings.observability.log_level,
        format=settings.observability.log_format,
    )
