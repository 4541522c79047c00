"""Tests for domain event identity and immutability."""

from __future__ import annotations

import dataclasses
from datetime import timezone

import pytest

from teamflow.core.ids import is_sortable_id
from teamflow.domain.events import (
    ALL_DOMAIN_EVENTS,
    MemberRemovedEvent,
    TeamCreatedEvent,
)
from teamflow.domain.values import TeamName


def _created() -> TeamCreatedEvent:
    return TeamCreatedEvent(team_id="T1", team_name=TeamName.create("Alpha").unwrap())


class TestDomainEvent:
    def test_generated_metadata(self):
        event = _created()
        assert is_sortable_id(event.event_id)
        assert event.occurred_on.tzinfo == timezone.utc

    def test_event_type_is_class_name(self):
        assert _created().event_type == "TeamCreatedEvent"
        assert MemberRemovedEvent(team_id="T", member_id="M", member_name="A").event_type == (
            "MemberRemovedEvent"
        )

    def test_identical_payloads_are_distinct_events(self):
        a, b = _created(), _created()
        assert a != b
        assert len({a, b}) == 2

    def test_equality_by_event_id(self):
        event = _created()
        copy = dataclasses.replace(event, team_id="other")
        assert copy.event_id == event.event_id
        assert copy == event

    def test_frozen(self):
        event = _created()
        with pytest.raises(dataclasses.FrozenInstanceError):
            event.team_id = "changed"  # type: ignore[misc]

    def test_registry_lists_unique_types(self):
        names = [cls.__name__ for cls in ALL_DOMAIN_EVENTS]
        assert len(names) == len(set(names))
        assert "TeamUndersizedEvent" in names
        assert "TaskProgressChangedEvent" in names
