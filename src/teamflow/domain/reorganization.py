"""Team reorganization: merging undersized teams and splitting full ones.

Both operations run inside one ``ITeamRepository.transaction()`` scope.  If
any step fails, the staged saves are discarded and every touched aggregate
is restored from the snapshot taken before the operation, so callers never
observe a half-moved roster.  Events already published by the aborted steps
are not retracted.
"""

from __future__ import annotations

import logging

from teamflow.core.errors import PersistenceError, PreconditionError, TeamflowError
from teamflow.core.interfaces import IEventBus, ITeamRepository
from teamflow.core.result import Err, Ok, Result
from teamflow.domain.team import MAX_TEAM_SIZE, Team
from teamflow.domain.values import TeamName

logger = logging.getLogger(__name__)

#: Only a full team is split; larger teams cannot be persisted.
SPLIT_SIZE = MAX_TEAM_SIZE
FIRST_SPLIT_SUFFIX = 2
MAX_SPLIT_SUFFIX = 99


class _Abort(Exception):
    """Unwinds a reorganization transaction while carrying the domain error."""

    def __init__(self, error: TeamflowError) -> None:
        super().__init__(str(error))
        self.error = error


def _check(result: Result, context: str) -> None:
    if not result.ok:
        error = result.error
        logger.warning("%s: %s", context, error)
        raise _Abort(error)


class TeamReorganizationService:
    """Merge/split algorithms over the team persistence port.

    The only state kept is the set of team ids with an operation in flight,
    which lets reactive callers ignore the intermediate sizes a team passes
    through while its members are being moved.
    """

    def __init__(self, team_repository: ITeamRepository, event_bus: IEventBus) -> None:
        self._teams = team_repository
        self._events = event_bus
        self._busy: set[str] = set()

    def is_reorganizing(self, team_id: str) -> bool:
        """True while *team_id* is being merged or split by this service."""
        return team_id in self._busy

    def merge_teams(self, source: Team, target: Team) -> Result[None, TeamflowError]:
        """Move every member of *source* into *target*.

        *source* is kept as an empty team.  Saves target first, then source.
        """
        if source == target:
            return Err(PreconditionError("cannot merge a team into itself"))
        if source.size == 0:
            return Err(PreconditionError(
                f"source team {source.name} has no members to merge"
            ))
        combined = source.size + target.size
        if combined > MAX_TEAM_SIZE:
            return Err(PreconditionError(
                f"merged team would have {combined} members "
                f"(limit {MAX_TEAM_SIZE})"
            ))

        snapshots = [source.snapshot(), target.snapshot()]
        moving = source.members
        self._busy.update((source.id, target.id))
        try:
            with self._teams.transaction():
                for member in moving:
                    _check(target.add_member(member), f"moving {member.id} into {target.id}")
                _check(self._teams.save(target), f"saving target team {target.id}")
                for member in moving:
                    _check(source.remove_member(member.id), f"removing {member.id} from {source.id}")
                _check(self._teams.save(source), f"saving source team {source.id}")
        except _Abort as abort:
            source.restore(snapshots[0])
            target.restore(snapshots[1])
            return Err(abort.error)
        except PersistenceError as exc:
            logger.error("Merge of %s into %s failed to commit: %s", source.id, target.id, exc)
            source.restore(snapshots[0])
            target.restore(snapshots[1])
            return Err(exc)
        finally:
            self._busy.difference_update((source.id, target.id))

        logger.info(
            "Merged team %s (%s) into %s (%s); target now has %d members",
            source.id, source.name, target.id, target.name, target.size,
        )
        return Ok(None)

    def split_team(self, team: Team) -> Result[list[Team], TeamflowError]:
        """Split a full team in two, returning ``[original, new_team]``.

        The first half of the roster moves to a new team named
        ``{original}-2`` (or the next free suffix).
        """
        if team.size != SPLIT_SIZE:
            return Err(PreconditionError(
                f"only a team of exactly {SPLIT_SIZE} members can be split "
                f"(team {team.name} has {team.size})"
            ))

        name_result = self._split_name(team.name)
        if not name_result.ok:
            return name_result

        snapshot = team.snapshot()
        moving = team.members[: team.size // 2]
        self._busy.add(team.id)
        try:
            with self._teams.transaction():
                created = Team.create(name=name_result.value, event_bus=self._events)
                _check(created, "creating split team")
                new_team = created.value
                for member in moving:
                    _check(new_team.add_member(member), f"moving {member.id} into {new_team.id}")
                for member in moving:
                    _check(team.remove_member(member.id), f"removing {member.id} from {team.id}")
                _check(self._teams.save(team), f"saving team {team.id}")
                _check(self._teams.save(new_team), f"saving team {new_team.id}")
        except _Abort as abort:
            team.restore(snapshot)
            return Err(abort.error)
        except PersistenceError as exc:
            logger.error("Split of %s failed to commit: %s", team.id, exc)
            team.restore(snapshot)
            return Err(exc)
        finally:
            self._busy.discard(team.id)

        logger.info(
            "Split team %s (%s) into %s and %s (%s)",
            team.id, team.name, team.id, new_team.id, new_team.name,
        )
        return Ok([team, new_team])

    def _split_name(self, base: TeamName) -> Result[TeamName, TeamflowError]:
        for n in range(FIRST_SPLIT_SUFFIX, MAX_SPLIT_SUFFIX + 1):
            candidate = base.with_suffix(n)
            taken = self._teams.exists(candidate)
            if not taken.ok:
                return taken
            if not taken.value:
                return Ok(candidate)
        return Err(PreconditionError(f"no free split name left for team {base}"))
