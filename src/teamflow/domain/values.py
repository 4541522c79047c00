"""Immutable, self-validating value objects.

Construction goes through ``create`` (untrusted input, returns a Result);
instances compare and hash by value.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from teamflow.core.errors import ValidationError
from teamflow.core.result import Err, Ok, Result

_EMAIL_ADAPTER: TypeAdapter[str] = TypeAdapter(EmailStr)

_TEAM_NAME_RE = re.compile(r"[A-Za-z]+")
# Names produced by team splits carry numeric suffixes ("Alpha-2", "Alpha-2-3").
_STORED_TEAM_NAME_RE = re.compile(r"[A-Za-z]+(?:-[0-9]+)*")


@dataclass(frozen=True)
class EmailAddress:
    value: str

    @classmethod
    def create(cls, value: str) -> Result[EmailAddress, ValidationError]:
        try:
            normalized = _EMAIL_ADAPTER.validate_python(value)
        except PydanticValidationError:
            return Err(ValidationError(f"invalid email address: {value!r}"))
        return Ok(cls(normalized))

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TeamName:
    value: str

    @classmethod
    def create(cls, value: str) -> Result[TeamName, ValidationError]:
        """Validate a user-supplied team name: non-empty ASCII letters."""
        if not value or not value.strip():
            return Err(ValidationError("team name must not be empty"))
        if not _TEAM_NAME_RE.fullmatch(value):
            return Err(ValidationError(
                f"team name must contain ASCII letters only: {value!r}"
            ))
        return Ok(cls(value))

    @classmethod
    def restore(cls, value: str) -> Result[TeamName, ValidationError]:
        """Validate a persisted team name, which may carry split suffixes."""
        if not value or not _STORED_TEAM_NAME_RE.fullmatch(value):
            return Err(ValidationError(f"invalid stored team name: {value!r}"))
        return Ok(cls(value))

    def with_suffix(self, n: int) -> TeamName:
        """Derive the name of a team split off from this one."""
        return TeamName(f"{self.value}-{n}")

    def __str__(self) -> str:
        return self.value
