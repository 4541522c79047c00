"""Task entity: a titled unit of work owned by one member.

Only the owner may move a task along the progress state machine.  Creation,
title edits and progress changes publish events on the injected bus before
the call returns.
"""

from __future__ import annotations

from teamflow.core.errors import (
    InvalidTransitionError,
    OwnershipError,
    TeamflowError,
    ValidationError,
)
from teamflow.core.ids import new_sortable_id
from teamflow.core.interfaces import IEventBus
from teamflow.core.result import Err, Ok, Result
from teamflow.domain.events import (
    TaskCreatedEvent,
    TaskProgressChangedEvent,
    TaskTitleEditedEvent,
)
from teamflow.domain.status import ProgressStatus

TITLE_MIN_LENGTH = 1
TITLE_MAX_LENGTH = 100


def validate_title(title: str) -> Result[str, ValidationError]:
    if not isinstance(title, str) or len(title) < TITLE_MIN_LENGTH:
        return Err(ValidationError("task title must not be empty"))
    if len(title) > TITLE_MAX_LENGTH:
        return Err(ValidationError(
            f"task title must be at most {TITLE_MAX_LENGTH} characters "
            f"(got {len(title)})"
        ))
    return Ok(title)


class Task:
    def __init__(
        self,
        task_id: str,
        title: str,
        owner_id: str,
        progress_status: ProgressStatus,
        event_bus: IEventBus,
    ) -> None:
        self._id = task_id
        self._title = title
        self._owner_id = owner_id
        self._progress_status = progress_status
        self._events = event_bus

    @classmethod
    def create(
        cls,
        *,
        title: str,
        owner_id: str,
        event_bus: IEventBus,
    ) -> Result[Task, ValidationError]:
        checked = validate_title(title)
        if not checked.ok:
            return checked
        task = cls(new_sortable_id(), title, owner_id, ProgressStatus.NOT_STARTED, event_bus)
        event_bus.publish(TaskCreatedEvent(
            task_id=task.id,
            title=task.title,
            owner_id=owner_id,
            progress_status=task.progress_status,
        ))
        return Ok(task)

    @classmethod
    def reconstruct(
        cls,
        *,
        id: str,
        title: str,
        owner_id: str,
        progress_status: ProgressStatus,
        event_bus: IEventBus,
    ) -> Task:
        """Rehydrate a stored task.  Trusted: no validation, no events."""
        return cls(id, title, owner_id, progress_status, event_bus)

    @property
    def id(self) -> str:
        return self._id

    @property
    def title(self) -> str:
        return self._title

    @property
    def owner_id(self) -> str:
        return self._owner_id

    @property
    def progress_status(self) -> ProgressStatus:
        return self._progress_status

    def edit(self, title: str) -> Result[None, ValidationError]:
        checked = validate_title(title)
        if not checked.ok:
            return checked
        previous = self._title
        self._title = title
        if previous != title:
            self._events.publish(TaskTitleEditedEvent(
                task_id=self._id,
                owner_id=self._owner_id,
                previous_title=previous,
                new_title=title,
            ))
        return Ok(None)

    def change_progress_status(
        self,
        new_status: ProgressStatus,
        requester_id: str,
    ) -> Result[None, TeamflowError]:
        if requester_id != self._owner_id:
            return Err(OwnershipError(
                "only the task owner can change its progress status"
            ))
        if not self._progress_status.can_transition_to(new_status):
            return Err(InvalidTransitionError(
                f"cannot change progress status from {self._progress_status.value} "
                f"to {new_status.value}"
            ))

        previous = self._progress_status
        self._progress_status = new_status
        self._events.publish(TaskProgressChangedEvent(
            task_id=self._id,
            owner_id=self._owner_id,
            previous_status=previous,
            new_status=new_status,
        ))
        return Ok(None)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Task):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return (
            f"Task(id={self._id!r}, title={self._title!r}, "
            f"status={self._progress_status.value})"
        )
