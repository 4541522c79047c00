"""Team aggregate and its TeamMember child entity.

``Team`` is the consistency boundary: members join, leave and change
enrollment status only through ``Team`` methods, which enforce the size
invariant (at most :data:`MAX_TEAM_SIZE` members) and publish domain events
synchronously on the injected bus.

Size states
-----------
- 2..4  stable
- 0, 1  valid but undersized; entering them publishes ``TeamUndersizedEvent``
- > 4   never stored; the offending add is rolled back and a
        ``TeamOversizedEvent`` reports the transient size
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from teamflow.core.errors import (
    DuplicateMemberError,
    InvalidTransitionError,
    MemberNotFoundError,
    TeamflowError,
    TeamSizeExceededError,
    ValidationError,
)
from teamflow.core.ids import new_sortable_id
from teamflow.core.interfaces import IEventBus
from teamflow.core.result import Err, Ok, Result
from teamflow.domain.events import (
    MemberAddedEvent,
    MemberRemovedEvent,
    MemberStatusChangedEvent,
    TeamCreatedEvent,
    TeamOversizedEvent,
    TeamUndersizedEvent,
)
from teamflow.domain.status import EnrollmentStatus
from teamflow.domain.values import EmailAddress, TeamName

logger = logging.getLogger(__name__)

MAX_TEAM_SIZE = 4
#: Teams smaller than this are undersized.
UNDERSIZED_THRESHOLD = 2


class TeamMember:
    """A participant.  Identity is ``id``; status is the only mutable field."""

    def __init__(
        self,
        member_id: str,
        name: str,
        email: EmailAddress,
        status: EnrollmentStatus,
    ) -> None:
        self._id = member_id
        self._name = name
        self._email = email
        self._status = status

    @classmethod
    def create(cls, *, name: str, email: str) -> Result[TeamMember, ValidationError]:
        """Create a new ACTIVE member from user input."""
        if not name or not name.strip():
            return Err(ValidationError("member name is required"))
        email_result = EmailAddress.create(email)
        if not email_result.ok:
            return email_result
        return Ok(cls(new_sortable_id(), name, email_result.value, EnrollmentStatus.ACTIVE))

    @classmethod
    def reconstruct(
        cls,
        *,
        id: str,
        name: str,
        email: str,
        status: str,
    ) -> Result[TeamMember, ValidationError]:
        """Rehydrate a stored member.  The name is trusted; email and status are not."""
        email_result = EmailAddress.create(email)
        if not email_result.ok:
            return email_result
        status_result = EnrollmentStatus.create(status)
        if not status_result.ok:
            return status_result
        return Ok(cls(id, name, email_result.value, status_result.value))

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def email(self) -> EmailAddress:
        return self._email

    @property
    def status(self) -> EnrollmentStatus:
        return self._status

    def change_status(
        self, new_status: EnrollmentStatus,
    ) -> Result[None, InvalidTransitionError]:
        if not self._status.can_transition_to(new_status):
            return Err(InvalidTransitionError(
                f"cannot change enrollment status from {self._status.value} "
                f"to {new_status.value}"
            ))
        self._status = new_status
        return Ok(None)

    def can_join_team(self) -> bool:
        return self._status.can_join_team()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TeamMember):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return f"TeamMember(id={self._id!r}, name={self._name!r}, status={self._status.value})"


@dataclass(frozen=True)
class TeamSnapshot:
    """Memento of a team's roster, used to compensate failed reorganizations."""

    team_id: str
    members: tuple[TeamMember, ...]
    statuses: tuple[EnrollmentStatus, ...]


class Team:
    """Aggregate root owning an ordered roster of members."""

    def __init__(
        self,
        team_id: str,
        name: TeamName,
        members: list[TeamMember],
        event_bus: IEventBus,
    ) -> None:
        self._id = team_id
        self._name = name
        self._members = members
        self._events = event_bus

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def create(cls, *, name: TeamName, event_bus: IEventBus) -> Result[Team, TeamflowError]:
        """Create an empty team and announce it."""
        team = cls(new_sortable_id(), name, [], event_bus)
        event_bus.publish(TeamCreatedEvent(team_id=team.id, team_name=name))
        return Ok(team)

    @classmethod
    def reconstruct(
        cls,
        *,
        id: str,
        name: TeamName,
        members: list[TeamMember],
        event_bus: IEventBus,
    ) -> Result[Team, TeamflowError]:
        """Rehydrate a stored team.

        A size violation here means the stored state is corrupt.  No events
        are published.
        """
        team = cls(id, name, list(members), event_bus)
        check = team.validate_team_size()
        if not check.ok:
            return check
        return Ok(team)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> TeamName:
        return self._name

    @property
    def members(self) -> tuple[TeamMember, ...]:
        return tuple(self._members)

    @property
    def size(self) -> int:
        return len(self._members)

    def has_member(self, member_id: str) -> bool:
        return self._index_of(member_id) is not None

    def get_member(self, member_id: str) -> TeamMember | None:
        index = self._index_of(member_id)
        return None if index is None else self._members[index]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_member(self, member: TeamMember) -> Result[None, TeamflowError]:
        if not member.can_join_team():
            return Err(ValidationError(
                f"member with enrollment status {member.status.value} "
                f"cannot join a team"
            ))
        if member in self._members:
            return Err(DuplicateMemberError(
                f"{member.name} is already a member of team {self._name}"
            ))

        self._members.append(member)
        check = self.validate_team_size()
        if not check.ok:
            transient_size = len(self._members)
            self._members.pop()
            logger.info(
                "Rejected member %s for team %s: size would be %d",
                member.id, self._id, transient_size,
            )
            self._events.publish(TeamOversizedEvent(
                team_id=self._id,
                team_name=self._name,
                current_size=transient_size,
            ))
            return check

        self._events.publish(MemberAddedEvent(
            team_id=self._id,
            member_id=member.id,
            member_name=member.name,
            member_email=member.email,
            member_status=member.status,
        ))
        return Ok(None)

    def remove_member(self, member_id: str) -> Result[None, TeamflowError]:
        index = self._index_of(member_id)
        if index is None:
            return Err(MemberNotFoundError(
                f"member {member_id} is not a member of team {self._name}"
            ))

        removed = self._members.pop(index)
        check = self.validate_team_size()
        if not check.ok:
            self._members.insert(index, removed)
            return check

        self._events.publish(MemberRemovedEvent(
            team_id=self._id,
            member_id=removed.id,
            member_name=removed.name,
        ))
        size = len(self._members)
        if size < UNDERSIZED_THRESHOLD:
            self._events.publish(TeamUndersizedEvent(
                team_id=self._id,
                team_name=self._name,
                current_size=size,
            ))
        return Ok(None)

    def change_member_status(
        self,
        member_id: str,
        new_status: EnrollmentStatus,
    ) -> Result[None, TeamflowError]:
        """Change a member's enrollment status.

        A member who can no longer join a team is evicted as part of the
        same call, so the roster never holds an inactive member.
        """
        member = self.get_member(member_id)
        if member is None:
            return Err(MemberNotFoundError(
                f"member {member_id} is not a member of team {self._name}"
            ))

        previous = member.status
        changed = member.change_status(new_status)
        if not changed.ok:
            return changed

        self._events.publish(MemberStatusChangedEvent(
            team_id=self._id,
            member_id=member.id,
            member_name=member.name,
            previous_status=previous,
            new_status=new_status,
        ))

        if not member.can_join_team():
            return self.remove_member(member_id)
        return Ok(None)

    def validate_team_size(self) -> Result[None, TeamSizeExceededError]:
        size = len(self._members)
        if size > MAX_TEAM_SIZE:
            return Err(TeamSizeExceededError(size, MAX_TEAM_SIZE))
        return Ok(None)

    # ------------------------------------------------------------------
    # Compensation
    # ------------------------------------------------------------------

    def snapshot(self) -> TeamSnapshot:
        return TeamSnapshot(
            team_id=self._id,
            members=tuple(self._members),
            statuses=tuple(m.status for m in self._members),
        )

    def restore(self, snapshot: TeamSnapshot) -> None:
        """Put the roster back exactly as captured.  Publishes nothing."""
        if snapshot.team_id != self._id:
            raise ValueError(
                f"snapshot of team {snapshot.team_id} applied to team {self._id}"
            )
        for member, status in zip(snapshot.members, snapshot.statuses):
            member._status = status
        self._members = list(snapshot.members)

    # ------------------------------------------------------------------

    def _index_of(self, member_id: str) -> int | None:
        for i, m in enumerate(self._members):
            if m.id == member_id:
                return i
        return None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Team):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return f"Team(id={self._id!r}, name={self._name.value!r}, size={len(self._members)})"
