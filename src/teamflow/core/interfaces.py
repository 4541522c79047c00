"""Protocol interfaces for the team platform.

All module boundaries are defined here as Protocol classes.
Implementations (in-memory, SQL, webhook) can be swapped without changing
callers.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Any, Callable, Protocol, runtime_checkable

from .errors import NotificationError, PersistenceError, TeamflowError
from .result import Result

if TYPE_CHECKING:
    from teamflow.domain.events import DomainEvent
    from teamflow.domain.task import Task
    from teamflow.domain.team import Team
    from teamflow.domain.values import TeamName

EventHandler = Callable[["DomainEvent"], None]


# ---------------------------------------------------------------------------
# Event Bus
# ---------------------------------------------------------------------------

@runtime_checkable
class IEventBus(Protocol):
    """Synchronous publish/subscribe bus keyed by event type name."""

    def publish(self, event: DomainEvent) -> None: ...

    def subscribe(
        self,
        event_type: str | type[DomainEvent],
        handler: EventHandler,
    ) -> None: ...

    def clear_handlers(self) -> None: ...


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

@runtime_checkable
class ITeamRepository(Protocol):
    """Team persistence port.

    Implementations keep an identity map, so loading the same team id twice
    yields the same live aggregate.  ``find_all`` lists teams in creation
    order.
    """

    def save(self, team: Team) -> Result[None, PersistenceError]: ...

    def find_by_id(self, team_id: str) -> Result[Team | None, TeamflowError]: ...

    def find_by_name(self, name: TeamName) -> Result[Team | None, TeamflowError]: ...

    def find_all(self) -> Result[list[Team], TeamflowError]: ...

    def find_by_member_id(
        self, member_id: str,
    ) -> Result[Team | None, TeamflowError]: ...

    def exists(self, name: TeamName) -> Result[bool, PersistenceError]: ...

    def find_smallest_team(self) -> Result[Team | None, TeamflowError]: ...

    def transaction(self) -> AbstractContextManager[None]:
        """Unit-of-work scope.

        Saves made inside the block are committed together when the block
        exits normally and discarded when it raises.  A failed commit is
        raised as :class:`~teamflow.core.errors.PersistenceError`.
        """
        ...


@runtime_checkable
class ITaskRepository(Protocol):
    """Task persistence port."""

    def save(self, task: Task) -> Result[Task, PersistenceError]: ...

    def find_by_id(self, task_id: str) -> Result[Task | None, TeamflowError]: ...

    def find_by_owner_id(
        self, owner_id: str,
    ) -> Result[list[Task], TeamflowError]: ...


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

@runtime_checkable
class INotifier(Protocol):
    """Outbound administrator notifications."""

    def notify(
        self,
        subject: str,
        message: str,
        **context: Any,
    ) -> Result[None, NotificationError]: ...
