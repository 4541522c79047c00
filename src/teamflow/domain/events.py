"""Domain events for teams and tasks.

Design invariants
-----------------
1.  Every event is **immutable** (``frozen=True``).
2.  ``event_id`` is a sortable id generated at creation time; equality and
    hashing use it alone, so two events with identical payloads are still
    distinct occurrences.
3.  ``occurred_on`` is captured when the event object is built, i.e. at the
    moment of the state transition that causes it.
4.  The bus routes on :attr:`DomainEvent.event_type`, the concrete class
    name.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from teamflow.core.ids import new_sortable_id as _new_id
from teamflow.core.ids import utc_now as _now
from teamflow.domain.status import EnrollmentStatus, ProgressStatus
from teamflow.domain.values import EmailAddress, TeamName

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class DomainEvent:
    """Immutable base for every domain event.

    Shared fields
    ~~~~~~~~~~~~~
    event_id        Unique identity.  Equality key.
    occurred_on     UTC time the transition happened.
    """

    event_id: str = field(default_factory=_new_id, kw_only=True)
    occurred_on: datetime = field(default_factory=_now, kw_only=True)

    @property
    def event_type(self) -> str:
        """Routing key used by the event bus."""
        return type(self).__name__

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DomainEvent):
            return NotImplemented
        return self.event_id == other.event_id

    def __hash__(self) -> int:
        return hash(self.event_id)


# =========================================================================
# Team aggregate
# =========================================================================

@dataclass(frozen=True, eq=False)
class TeamCreatedEvent(DomainEvent):
    """A new, empty team exists."""

    team_id: str
    team_name: TeamName


@dataclass(frozen=True, eq=False)
class MemberAddedEvent(DomainEvent):
    team_id: str
    member_id: str
    member_name: str
    member_email: EmailAddress
    member_status: EnrollmentStatus


@dataclass(frozen=True, eq=False)
class MemberRemovedEvent(DomainEvent):
    team_id: str
    member_id: str
    member_name: str


@dataclass(frozen=True, eq=False)
class MemberStatusChangedEvent(DomainEvent):
    team_id: str
    member_id: str
    member_name: str
    previous_status: EnrollmentStatus
    new_status: EnrollmentStatus


@dataclass(frozen=True, eq=False)
class TeamUndersizedEvent(DomainEvent):
    """Team dropped to 0 or 1 members.  Triggers a merge at size 1."""

    team_id: str
    team_name: TeamName
    current_size: int


@dataclass(frozen=True, eq=False)
class TeamOversizedEvent(DomainEvent):
    """An add was rejected because it would exceed the size limit.

    ``current_size`` is the transient size including the rejected member.
    """

    team_id: str
    team_name: TeamName
    current_size: int


# =========================================================================
# Task entity
# =========================================================================

@dataclass(frozen=True, eq=False)
class TaskCreatedEvent(DomainEvent):
    task_id: str
    title: str
    owner_id: str
    progress_status: ProgressStatus


@dataclass(frozen=True, eq=False)
class TaskProgressChangedEvent(DomainEvent):
    task_id: str
    owner_id: str
    previous_status: ProgressStatus
    new_status: ProgressStatus


@dataclass(frozen=True, eq=False)
class TaskTitleEditedEvent(DomainEvent):
    task_id: str
    owner_id: str
    previous_title: str
    new_title: str


#: All concrete event types in a deterministic order.
ALL_DOMAIN_EVENTS: tuple[type[DomainEvent], ...] = (
    TeamCreatedEvent,
    MemberAddedEvent,
    MemberRemovedEvent,
    MemberStatusChangedEvent,
    TeamUndersizedEvent,
    TeamOversizedEvent,
    TaskCreatedEvent,
    TaskProgressChangedEvent,
    TaskTitleEditedEvent,
)
