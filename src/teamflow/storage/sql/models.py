"""SQLAlchemy ORM models for the team/task database.

Ids are the 26-character sortable ids minted by the domain, so rows can be
mapped back to aggregates without a translation table.

Relationships:
    TeamRecord 1--* TeamMemberRecord  (team_id foreign key)
    TaskRecord.owner_id references a member id without a constraint, so a
    task outlives the roster changes of its owner.
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# ---------------------------------------------------------------------------
# Declarative base
# ---------------------------------------------------------------------------

class Base(DeclarativeBase):
    """Shared declarative base for all ORM models."""

    pass


# ---------------------------------------------------------------------------
# TeamRecord
# ---------------------------------------------------------------------------

class TeamRecord(Base):
    """Persisted team header.

    ``seq`` records creation order; ``find_all`` and the smallest-team
    tie-break depend on it.
    """

    __tablename__ = "teams"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    name: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    seq: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        Index("ix_teams_seq", "seq"),
    )

    def __repr__(self) -> str:
        return f"<TeamRecord(id={self.id!r}, name={self.name!r})>"


# ---------------------------------------------------------------------------
# TeamMemberRecord
# ---------------------------------------------------------------------------

class TeamMemberRecord(Base):
    """One roster entry.  A member belongs to at most one team."""

    __tablename__ = "team_members"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    team_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("teams.id", ondelete="CASCADE"), nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)

    __table_args__ = (
        Index("ix_team_members_team_id", "team_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<TeamMemberRecord(id={self.id!r}, team_id={self.team_id!r}, "
            f"status={self.status!r})>"
        )


# ---------------------------------------------------------------------------
# TaskRecord
# ---------------------------------------------------------------------------

class TaskRecord(Base):
    """Persisted task.  Every save overwrites the row in place.

    ``seq`` records creation order, which ``find_by_owner_id`` lists by.
    """

    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    owner_id: Mapped[str] = mapped_column(String(26), nullable=False)
    progress_status: Mapped[str] = mapped_column(String(32), nullable=False)
    seq: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        Index("ix_tasks_owner_id", "owner_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<TaskRecord(id={self.id!r}, owner_id={self.owner_id!r}, "
            f"progress_status={self.progress_status!r})>"
        )
