"""Error taxonomy for the team platform.

Domain code returns these as values inside ``Err(...)`` rather than raising
them.  Every error carries an :class:`ErrorKind` so callers switch on the
kind instead of inspecting message text.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    DUPLICATE_MEMBER = "duplicate_member"
    TEAM_SIZE_EXCEEDED = "team_size_exceeded"
    MEMBER_NOT_FOUND = "member_not_found"
    INVALID_TRANSITION = "invalid_transition"
    OWNERSHIP = "ownership"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    PRECONDITION = "precondition"
    PERSISTENCE = "persistence"
    NOTIFICATION = "notification"
    CONFIG = "config"


class TeamflowError(Exception):
    """Base exception for all platform errors."""

    kind: ErrorKind = ErrorKind.VALIDATION

    @property
    def message(self) -> str:
        return str(self)


# --- Input ---
class ValidationError(TeamflowError):
    """Malformed value-object input (email, name, status string, title)."""

    kind = ErrorKind.VALIDATION


# --- Aggregate invariants ---
class DuplicateMemberError(TeamflowError):
    """Member is already on the team."""

    kind = ErrorKind.DUPLICATE_MEMBER


class TeamSizeExceededError(TeamflowError):
    """Team would hold more members than allowed."""

    kind = ErrorKind.TEAM_SIZE_EXCEEDED

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(
            f"team size must be at most {limit} members (got {size})"
        )


class MemberNotFoundError(TeamflowError):
    """Referenced member is not a member of the team."""

    kind = ErrorKind.MEMBER_NOT_FOUND


class InvalidTransitionError(TeamflowError):
    """Status change not allowed by the transition table."""

    kind = ErrorKind.INVALID_TRANSITION


class OwnershipError(TeamflowError):
    """Requester does not own the resource."""

    kind = ErrorKind.OWNERSHIP


# --- Application ---
class NotFoundError(TeamflowError):
    """Team, member or task does not exist."""

    kind = ErrorKind.NOT_FOUND


class ConflictError(TeamflowError):
    """Unique value (e.g. team name) already taken."""

    kind = ErrorKind.CONFLICT


class PreconditionError(TeamflowError):
    """Reorganization precondition not met."""

    kind = ErrorKind.PRECONDITION


# --- Infrastructure ---
class PersistenceError(TeamflowError):
    """Storage failure behind a repository port."""

    kind = ErrorKind.PERSISTENCE


class NotificationError(TeamflowError):
    """Administrator notification could not be delivered."""

    kind = ErrorKind.NOTIFICATION


# --- Configuration ---
class ConfigError(TeamflowError):
    """Invalid or missing configuration."""

    kind = ErrorKind.CONFIG
