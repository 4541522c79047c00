"""Two-variant result wrapper for expected failure paths.

Domain operations never raise for failures a caller is expected to handle
(bad input, broken invariants, missing rows).  They return ``Ok(value)`` or
``Err(error)`` instead, and callers branch on ``result.ok``::

    result = team.add_member(member)
    if not result.ok:
        log.warning("rejected: %s", result.error)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Literal, NoReturn, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E", bound=BaseException)


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying ``value``."""

    value: T

    @property
    def ok(self) -> Literal[True]:
        return True

    def unwrap(self) -> T:
        return self.value

    def unwrap_err(self) -> NoReturn:
        raise ValueError(f"called unwrap_err() on {self!r}")


@dataclass(frozen=True)
class Err(Generic[E]):
    """Failed outcome carrying ``error``."""

    error: E

    @property
    def ok(self) -> Literal[False]:
        return False

    def unwrap(self) -> NoReturn:
        """Raise the carried error (use-case boundary and tests)."""
        raise self.error

    def unwrap_err(self) -> E:
        return self.error


Result = Union[Ok[T], Err[E]]
