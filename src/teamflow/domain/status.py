"""Lifecycle state machines for members and tasks.

Each status is a ``str``-valued ``Enum``: one singleton per state, compared
by value, and serialised as its raw value.  Transition legality lives in an
adjacency table per machine; a self-transition is always legal.

Enrollment (team member)::

    ACTIVE <-> INACTIVE
    ACTIVE <-> WITHDRAWN
    INACTIVE -> WITHDRAWN

Progress (task)::

    NOT_STARTED -> IN_PROGRESS -> WAITING_FOR_REVIEW -> COMPLETED
                        ^                 |
                        +-----------------+
"""

from __future__ import annotations

from enum import Enum

from teamflow.core.errors import ValidationError
from teamflow.core.result import Err, Ok, Result


class EnrollmentStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    WITHDRAWN = "withdrawn"

    @classmethod
    def create(cls, value: str) -> Result[EnrollmentStatus, ValidationError]:
        """Parse a raw status string from outside the domain."""
        try:
            return Ok(cls(value))
        except ValueError:
            allowed = ", ".join(s.value for s in cls)
            return Err(ValidationError(
                f"invalid enrollment status {value!r}; expected one of: {allowed}"
            ))

    def can_transition_to(self, target: EnrollmentStatus) -> bool:
        if self is target:
            return True
        return target in _ENROLLMENT_TRANSITIONS[self]

    def can_join_team(self) -> bool:
        return self is EnrollmentStatus.ACTIVE


class ProgressStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    WAITING_FOR_REVIEW = "waiting_for_review"
    COMPLETED = "completed"

    @classmethod
    def create(cls, value: str) -> Result[ProgressStatus, ValidationError]:
        """Parse a raw status string from outside the domain."""
        try:
            return Ok(cls(value))
        except ValueError:
            allowed = ", ".join(s.value for s in cls)
            return Err(ValidationError(
                f"invalid progress status {value!r}; expected one of: {allowed}"
            ))

    def can_transition_to(self, target: ProgressStatus) -> bool:
        if self is target:
            return True
        return target in _PROGRESS_TRANSITIONS[self]

    @property
    def is_terminal(self) -> bool:
        return not _PROGRESS_TRANSITIONS[self]


_ENROLLMENT_TRANSITIONS: dict[EnrollmentStatus, frozenset[EnrollmentStatus]] = {
    EnrollmentStatus.ACTIVE: frozenset(
        {EnrollmentStatus.INACTIVE, EnrollmentStatus.WITHDRAWN}
    ),
    EnrollmentStatus.INACTIVE: frozenset(
        {EnrollmentStatus.ACTIVE, EnrollmentStatus.WITHDRAWN}
    ),
    # A withdrawn member can only re-enroll, never pause.
    EnrollmentStatus.WITHDRAWN: frozenset({EnrollmentStatus.ACTIVE}),
}

_PROGRESS_TRANSITIONS: dict[ProgressStatus, frozenset[ProgressStatus]] = {
    ProgressStatus.NOT_STARTED: frozenset({ProgressStatus.IN_PROGRESS}),
    ProgressStatus.IN_PROGRESS: frozenset({ProgressStatus.WAITING_FOR_REVIEW}),
    ProgressStatus.WAITING_FOR_REVIEW: frozenset(
        {ProgressStatus.IN_PROGRESS, ProgressStatus.COMPLETED}
    ),
    # Terminal.
    ProgressStatus.COMPLETED: frozenset(),
}
