"""Reactive team reorganization.

:class:`TeamReorganizationPolicy` subscribes to the size-violation events
published by :class:`~teamflow.domain.team.Team` and keeps teams inside the
stable 2..4 band:

- ``TeamUndersizedEvent`` with one member left: merge the team into the
  smallest other team.  A full target is split first and the undersized
  team joins the smaller half.
- ``TeamUndersizedEvent`` with no members left: nothing to do.
- ``TeamOversizedEvent``: split the full team the rejected add was aimed at.

Handlers run inside the publishing call stack.  They never raise: every
failure is logged, reported through the notifier port, and ends processing
of that event.
"""

from __future__ import annotations

import logging
from typing import Any

from teamflow.core.interfaces import IEventBus, INotifier, ITeamRepository
from teamflow.domain.events import DomainEvent, TeamOversizedEvent, TeamUndersizedEvent
from teamflow.domain.reorganization import TeamReorganizationService
from teamflow.domain.team import MAX_TEAM_SIZE, Team

logger = logging.getLogger(__name__)


class TeamReorganizationPolicy:
    """Subscribes on construction; one instance per bus."""

    def __init__(
        self,
        event_bus: IEventBus,
        team_repository: ITeamRepository,
        reorganization_service: TeamReorganizationService,
        notifier: INotifier,
    ) -> None:
        self._teams = team_repository
        self._service = reorganization_service
        self._notifier = notifier
        event_bus.subscribe(TeamUndersizedEvent, self.handle_team_undersized)
        event_bus.subscribe(TeamOversizedEvent, self.handle_team_oversized)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def handle_team_undersized(self, event: DomainEvent) -> None:
        if not isinstance(event, TeamUndersizedEvent):
            logger.warning("Ignoring unexpected %s in undersized handler", event.event_type)
            return
        logger.info(
            "Team %s is undersized with %d members", event.team_id, event.current_size,
        )
        if event.current_size != 1:
            logger.info("Team %s has %d members, no action needed",
                        event.team_id, event.current_size)
            return
        if self._service.is_reorganizing(event.team_id):
            logger.debug("Team %s is mid-reorganization, ignoring", event.team_id)
            return
        try:
            self._merge_undersized(event)
        except Exception as exc:
            logger.exception("Error handling undersized team %s", event.team_id)
            self._notify("Team reorganization error", str(exc), team_id=event.team_id)

    def handle_team_oversized(self, event: DomainEvent) -> None:
        if not isinstance(event, TeamOversizedEvent):
            logger.warning("Ignoring unexpected %s in oversized handler", event.event_type)
            return
        logger.info(
            "Team %s is oversized with %d members", event.team_id, event.current_size,
        )
        if self._service.is_reorganizing(event.team_id):
            logger.debug("Team %s is mid-reorganization, ignoring", event.team_id)
            return
        try:
            self._split_oversized(event)
        except Exception as exc:
            logger.exception("Error handling oversized team %s", event.team_id)
            self._notify("Team reorganization error", str(exc), team_id=event.team_id)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _merge_undersized(self, event: TeamUndersizedEvent) -> None:
        found = self._teams.find_by_id(event.team_id)
        if not found.ok or found.value is None:
            reason = found.error if not found.ok else "not found"
            logger.error("Failed to find undersized team %s: %s", event.team_id, reason)
            self._notify("Undersized team lookup failed", str(reason), team_id=event.team_id)
            return
        undersized = found.value

        listed = self._teams.find_all()
        if not listed.ok:
            logger.error("Failed to list teams: %s", listed.error)
            self._notify("Team listing failed", str(listed.error), team_id=event.team_id)
            return

        target = _smallest([t for t in listed.value if t.id != undersized.id])
        if target is None:
            logger.warning("No target team found for merging team %s", undersized.id)
            self._notify(
                "No merge target",
                f"team {undersized.name} has a single member and no other team exists",
                team_id=undersized.id,
            )
            return

        if target.size == MAX_TEAM_SIZE:
            split = self._service.split_team(target)
            if not split.ok:
                logger.error("Failed to split full merge target %s: %s", target.id, split.error)
                self._notify("Team split failed", str(split.error), team_id=target.id)
                return
            target = _smallest(split.value)
            if target is None:
                logger.error("Split of merge target %s produced no teams", event.team_id)
                return

        merged = self._service.merge_teams(undersized, target)
        if not merged.ok:
            logger.error("Failed to merge teams %s -> %s: %s",
                         undersized.id, target.id, merged.error)
            self._notify("Team merge failed", str(merged.error),
                        team_id=undersized.id, target_team_id=target.id)
            return

        logger.info("Successfully merged team %s into team %s", undersized.id, target.id)
        self._notify(
            "Teams merged",
            f"team {undersized.name} was merged into team {target.name}",
            team_id=undersized.id, target_team_id=target.id,
        )

    def _split_oversized(self, event: TeamOversizedEvent) -> None:
        found = self._teams.find_by_id(event.team_id)
        if not found.ok or found.value is None:
            reason = found.error if not found.ok else "not found"
            logger.error("Failed to find oversized team %s: %s", event.team_id, reason)
            self._notify("Oversized team lookup failed", str(reason), team_id=event.team_id)
            return

        split = self._service.split_team(found.value)
        if not split.ok:
            logger.error("Failed to split team %s: %s", event.team_id, split.error)
            self._notify("Team split failed", str(split.error), team_id=event.team_id)
            return

        logger.info("Successfully split team %s into %d teams", event.team_id, len(split.value))
        self._notify(
            "Team split",
            " and ".join(str(t.name) for t in split.value),
            team_id=event.team_id,
        )

    # ------------------------------------------------------------------

    def _notify(self, subject: str, message: str, **context: Any) -> None:
        sent = self._notifier.notify(subject, message, **context)
        if not sent.ok:
            logger.warning("Administrator notification failed: %s", sent.error)


def _smallest(teams: list[Team]) -> Team | None:
    """Team with the fewest members; ties go to the first listed."""
    best: Team | None = None
    for team in teams:
        if best is None or team.size < best.size:
            best = team
    return best
