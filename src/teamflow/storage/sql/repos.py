"""Synchronous SQLAlchemy repositories for teams and tasks.

Each repository opens a short-lived :class:`~sqlalchemy.orm.Session` per
call from the session factory it is given.  Conversion helpers translate
between ORM records and domain aggregates.

``SqlTeamRepository`` keeps an identity map of every team it has loaded or
saved, so callers that look the same team up twice mutate one aggregate.
Saves made inside ``transaction()`` are staged and written in a single
database transaction when the outermost scope exits.
"""

from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from typing import Callable

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from teamflow.core.errors import PersistenceError, TeamflowError
from teamflow.core.interfaces import IEventBus
from teamflow.core.result import Err, Ok, Result
from teamflow.domain.status import ProgressStatus
from teamflow.domain.task import Task
from teamflow.domain.team import Team, TeamMember
from teamflow.domain.values import TeamName
from teamflow.infrastructure.unit_of_work import StagedWrites

from .models import TaskRecord, TeamMemberRecord, TeamRecord

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]


def _failed(action: str, exc: Exception) -> Err[PersistenceError]:
    logger.error("Database error while %s: %s", action, exc)
    return Err(PersistenceError(f"database error while {action}: {exc}"))


# ---------------------------------------------------------------------------
# Conversion helpers
# ---------------------------------------------------------------------------

def _record_to_team(
    record: TeamRecord,
    member_records: list[TeamMemberRecord],
    event_bus: IEventBus,
) -> Result[Team, TeamflowError]:
    """Convert ORM rows back to a :class:`Team`.  Invalid rows are corruption."""
    name = TeamName.restore(record.name)
    if not name.ok:
        return Err(PersistenceError(f"stored team {record.id} is invalid: {name.error}"))

    members: list[TeamMember] = []
    for row in member_records:
        member = TeamMember.reconstruct(
            id=row.id, name=row.name, email=row.email, status=row.status,
        )
        if not member.ok:
            return Err(PersistenceError(f"stored member {row.id} is invalid: {member.error}"))
        members.append(member.value)

    team = Team.reconstruct(
        id=record.id, name=name.value, members=members, event_bus=event_bus,
    )
    if not team.ok:
        return Err(PersistenceError(f"stored team {record.id} is invalid: {team.error}"))
    return team


def _record_to_task(record: TaskRecord, event_bus: IEventBus) -> Result[Task, TeamflowError]:
    status = ProgressStatus.create(record.progress_status)
    if not status.ok:
        return Err(PersistenceError(f"stored task {record.id} is invalid: {status.error}"))
    return Ok(Task.reconstruct(
        id=record.id,
        title=record.title,
        owner_id=record.owner_id,
        progress_status=status.value,
        event_bus=event_bus,
    ))


# ---------------------------------------------------------------------------
# SqlTeamRepository
# ---------------------------------------------------------------------------

class SqlTeamRepository:
    """Team persistence over the ``teams`` and ``team_members`` tables."""

    def __init__(self, session_factory: SessionFactory, event_bus: IEventBus) -> None:
        self._sessions = session_factory
        self._events = event_bus
        self._identity: dict[str, Team] = {}
        self._staged: StagedWrites[Team] = StagedWrites(self._commit_staged)

    # -- Unit of work ------------------------------------------------------

    def transaction(self) -> AbstractContextManager[None]:
        return self._staged.scope()

    def _commit_staged(self, teams: list[Team]) -> None:
        try:
            with self._sessions() as session, session.begin():
                for team in teams:
                    self._write(session, team)
        except SQLAlchemyError as exc:
            logger.error("Commit of %d staged teams failed: %s", len(teams), exc)
            raise PersistenceError(f"failed to commit team changes: {exc}") from exc
        for team in teams:
            self._identity[team.id] = team
        logger.debug("Committed %d staged teams", len(teams))

    # -- Writes ------------------------------------------------------------

    def save(self, team: Team) -> Result[None, PersistenceError]:
        if self._staged.active:
            self._staged.stage(team.id, team)
            return Ok(None)
        try:
            with self._sessions() as session, session.begin():
                self._write(session, team)
        except SQLAlchemyError as exc:
            return _failed(f"saving team {team.id}", exc)
        self._identity[team.id] = team
        return Ok(None)

    def _write(self, session: Session, team: Team) -> None:
        """Upsert the team row and reconcile its roster rows.

        Members no longer on the roster lose their row.
        """
        record = session.get(TeamRecord, team.id)
        if record is None:
            seq = session.scalar(select(func.coalesce(func.max(TeamRecord.seq), 0))) + 1
            session.add(TeamRecord(id=team.id, name=str(team.name), seq=seq))
        else:
            record.name = str(team.name)
        session.flush()

        roster = [m.id for m in team.members]
        session.execute(
            delete(TeamMemberRecord)
            .where(TeamMemberRecord.team_id == team.id)
            .where(TeamMemberRecord.id.not_in(roster))
        )
        session.flush()

        for position, member in enumerate(team.members):
            row = session.get(TeamMemberRecord, member.id)
            if row is None:
                session.add(TeamMemberRecord(
                    id=member.id,
                    team_id=team.id,
                    position=position,
                    name=member.name,
                    email=str(member.email),
                    status=member.status.value,
                ))
            else:
                row.team_id = team.id
                row.position = position
                row.name = member.name
                row.email = str(member.email)
                row.status = member.status.value
        session.flush()
        logger.debug("Wrote team %s with %d members", team.id, team.size)

    # -- Reads -------------------------------------------------------------

    def find_by_id(self, team_id: str) -> Result[Team | None, TeamflowError]:
        live = self._live()
        if team_id in live:
            return Ok(live[team_id])
        try:
            with self._sessions() as session:
                record = session.get(TeamRecord, team_id)
                if record is None:
                    return Ok(None)
                return self._load(session, record)
        except SQLAlchemyError as exc:
            return _failed(f"loading team {team_id}", exc)

    def find_by_name(self, name: TeamName) -> Result[Team | None, TeamflowError]:
        for team in self._live().values():
            if team.name == name:
                return Ok(team)
        try:
            with self._sessions() as session:
                record = session.scalar(select(TeamRecord).where(TeamRecord.name == str(name)))
                if record is None:
                    return Ok(None)
                return self._load(session, record)
        except SQLAlchemyError as exc:
            return _failed(f"loading team {name}", exc)

    def find_all(self) -> Result[list[Team], TeamflowError]:
        teams: list[Team] = []
        seen: set[str] = set()
        pending = self._staged.pending()
        try:
            with self._sessions() as session:
                records = session.scalars(select(TeamRecord).order_by(TeamRecord.seq)).all()
                for record in records:
                    if record.id in pending:
                        teams.append(pending[record.id])
                    else:
                        loaded = self._load(session, record)
                        if not loaded.ok:
                            return loaded
                        teams.append(loaded.value)
                    seen.add(record.id)
        except SQLAlchemyError as exc:
            return _failed("listing teams", exc)
        # Teams created inside the open transaction come last.
        teams.extend(t for tid, t in pending.items() if tid not in seen)
        return Ok(teams)

    def find_by_member_id(self, member_id: str) -> Result[Team | None, TeamflowError]:
        live = self._live()
        for team in live.values():
            if team.has_member(member_id):
                return Ok(team)
        try:
            with self._sessions() as session:
                row = session.get(TeamMemberRecord, member_id)
                # A live team that no longer lists the member overrides the stored row.
                if row is None or row.team_id in live:
                    return Ok(None)
                record = session.get(TeamRecord, row.team_id)
                if record is None:
                    return Ok(None)
                return self._load(session, record)
        except SQLAlchemyError as exc:
            return _failed(f"looking up member {member_id}", exc)

    def exists(self, name: TeamName) -> Result[bool, PersistenceError]:
        found = self.find_by_name(name)
        if not found.ok:
            return found
        return Ok(found.value is not None)

    def find_smallest_team(self) -> Result[Team | None, TeamflowError]:
        teams = self.find_all()
        if not teams.ok:
            return teams
        if not teams.value:
            return Ok(None)
        return Ok(min(teams.value, key=lambda t: t.size))

    # -- Helpers -----------------------------------------------------------

    def _live(self) -> dict[str, Team]:
        """Identity map overlaid with this transaction's staged saves."""
        live = dict(self._identity)
        live.update(self._staged.pending())
        return live

    def _load(self, session: Session, record: TeamRecord) -> Result[Team, TeamflowError]:
        cached = self._identity.get(record.id)
        if cached is not None:
            return Ok(cached)
        rows = session.scalars(
            select(TeamMemberRecord)
            .where(TeamMemberRecord.team_id == record.id)
            .order_by(TeamMemberRecord.position)
        ).all()
        team = _record_to_team(record, list(rows), self._events)
        if team.ok:
            self._identity[record.id] = team.value
        else:
            logger.error("%s", team.error)
        return team

    def clear_identity_map(self) -> None:
        """Forget loaded aggregates so the next read hits the database."""
        self._identity.clear()


# ---------------------------------------------------------------------------
# SqlTaskRepository
# ---------------------------------------------------------------------------

class SqlTaskRepository:
    """Task persistence over the ``tasks`` table."""

    def __init__(self, session_factory: SessionFactory, event_bus: IEventBus) -> None:
        self._sessions = session_factory
        self._events = event_bus

    def save(self, task: Task) -> Result[Task, PersistenceError]:
        try:
            with self._sessions() as session, session.begin():
                record = session.get(TaskRecord, task.id)
                if record is None:
                    seq = session.scalar(select(func.coalesce(func.max(TaskRecord.seq), 0))) + 1
                    session.add(TaskRecord(
                        id=task.id,
                        title=task.title,
                        owner_id=task.owner_id,
                        progress_status=task.progress_status.value,
                        seq=seq,
                    ))
                else:
                    record.title = task.title
                    record.owner_id = task.owner_id
                    record.progress_status = task.progress_status.value
        except SQLAlchemyError as exc:
            return _failed(f"saving task {task.id}", exc)
        logger.debug("Saved task %s -> status=%s", task.id, task.progress_status.value)
        return Ok(task)

    def find_by_id(self, task_id: str) -> Result[Task | None, TeamflowError]:
        try:
            with self._sessions() as session:
                record = session.get(TaskRecord, task_id)
                if record is None:
                    return Ok(None)
                return _record_to_task(record, self._events)
        except SQLAlchemyError as exc:
            return _failed(f"loading task {task_id}", exc)

    def find_by_owner_id(self, owner_id: str) -> Result[list[Task], TeamflowError]:
        try:
            with self._sessions() as session:
                records = session.scalars(
                    select(TaskRecord)
                    .where(TaskRecord.owner_id == owner_id)
                    .order_by(TaskRecord.seq)
                ).all()
        except SQLAlchemyError as exc:
            return _failed(f"listing tasks of {owner_id}", exc)
        tasks: list[Task] = []
        for record in records:
            task = _record_to_task(record, self._events)
            if not task.ok:
                return task
            tasks.append(task.value)
        return Ok(tasks)
