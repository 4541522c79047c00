"""Tests for InMemoryEventBus: routing, cascades, isolation, history."""

from __future__ import annotations

import pytest

from teamflow.core.config import Settings
from teamflow.domain.events import MemberRemovedEvent, TeamCreatedEvent
from teamflow.domain.values import TeamName
from teamflow.infrastructure.event_bus import InMemoryEventBus
from teamflow.main import build_app


def _created(team_id: str = "T1") -> TeamCreatedEvent:
    return TeamCreatedEvent(team_id=team_id, team_name=TeamName.create("Alpha").unwrap())


def _removed(team_id: str = "T1") -> MemberRemovedEvent:
    return MemberRemovedEvent(team_id=team_id, member_id="M1", member_name="Alice")


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------

class TestRouting:
    def test_handler_receives_matching_events_only(self):
        bus = InMemoryEventBus()
        received = []
        bus.subscribe(TeamCreatedEvent, received.append)

        bus.publish(_created())
        bus.publish(_removed())

        assert [e.event_type for e in received] == ["TeamCreatedEvent"]

    def test_subscribe_by_name_or_class_is_equivalent(self):
        bus = InMemoryEventBus()
        calls = []
        bus.subscribe("TeamCreatedEvent", lambda e: calls.append("name"))
        bus.subscribe(TeamCreatedEvent, lambda e: calls.append("class"))

        bus.publish(_created())

        assert calls == ["name", "class"]
        assert bus.handler_count(TeamCreatedEvent) == 2

    def test_handlers_run_in_registration_order(self):
        bus = InMemoryEventBus()
        order = []
        for i in range(3):
            bus.subscribe(TeamCreatedEvent, lambda e, i=i: order.append(i))
        bus.publish(_created())
        assert order == [0, 1, 2]

    def test_no_handlers_is_fine(self):
        bus = InMemoryEventBus()
        bus.publish(_created())
        assert bus.messages_processed == 0
        assert len(bus.get_history()) == 1

    def test_clear_handlers(self):
        bus = InMemoryEventBus()
        received = []
        bus.subscribe(TeamCreatedEvent, received.append)
        bus.clear_handlers()
        bus.publish(_created())
        assert received == []


# ---------------------------------------------------------------------------
# Cascades
# ---------------------------------------------------------------------------

class TestCascades:
    def test_nested_publish_dispatches_depth_first(self):
        bus = InMemoryEventBus()
        trace = []

        def on_created(event):
            trace.append("created:start")
            bus.publish(_removed(event.team_id))
            trace.append("created:end")

        bus.subscribe(TeamCreatedEvent, on_created)
        bus.subscribe(MemberRemovedEvent, lambda e: trace.append("removed"))

        bus.publish(_created())

        assert trace == ["created:start", "removed", "created:end"]
        assert bus.depth == 0

    def test_cascade_depth_is_bounded(self):
        bus = InMemoryEventBus(max_cascade_depth=3)
        calls = []

        def loop(event):
            calls.append(bus.depth)
            bus.publish(_created())

        bus.subscribe(TeamCreatedEvent, loop)
        bus.publish(_created())

        assert calls == [1, 2, 3]
        dropped = bus.dead_letters
        assert len(dropped) == 1
        assert "cascade depth limit 3" in dropped[0][1]
        assert bus.depth == 0

    def test_subscription_during_dispatch_applies_to_next_publish(self):
        bus = InMemoryEventBus()
        late = []

        def subscribe_late(event):
            bus.subscribe(TeamCreatedEvent, late.append)

        bus.subscribe(TeamCreatedEvent, subscribe_late)
        bus.publish(_created())
        assert late == []
        bus.publish(_created())
        assert len(late) == 1

    def test_invalid_depth(self):
        with pytest.raises(ValueError):
            InMemoryEventBus(max_cascade_depth=0)

    def test_invalid_history_cap(self):
        with pytest.raises(ValueError):
            InMemoryEventBus(max_history=0)


# ---------------------------------------------------------------------------
# Isolation & observability
# ---------------------------------------------------------------------------

class TestIsolation:
    def test_failing_handler_does_not_stop_others(self):
        bus = InMemoryEventBus()
        received = []

        def boom(event):
            raise RuntimeError("handler failed")

        bus.subscribe(TeamCreatedEvent, boom)
        bus.subscribe(TeamCreatedEvent, received.append)

        bus.publish(_created())

        assert len(received) == 1
        assert bus.get_error_counts() == {"TeamCreatedEvent": 1}
        assert bus.dead_letters[0][1] == "handler failed"
        assert bus.messages_processed == 1

    def test_clear_dead_letters_drains(self):
        bus = InMemoryEventBus()
        bus.subscribe(TeamCreatedEvent, lambda e: 1 / 0)
        bus.publish(_created())
        assert len(bus.clear_dead_letters()) == 1
        assert bus.dead_letters == []

    def test_history_filter(self):
        bus = InMemoryEventBus()
        bus.publish(_created())
        bus.publish(_removed())
        bus.publish(_created("T2"))

        assert len(bus.get_history()) == 3
        assert [e.team_id for e in bus.get_history(TeamCreatedEvent)] == ["T1", "T2"]
        assert len(bus.get_history("MemberRemovedEvent")) == 1

        bus.clear_history()
        assert bus.get_history() == []

    def test_history_stops_at_cap(self):
        bus = InMemoryEventBus(max_history=3)
        for i in range(10):
            bus.publish(_created(f"T{i}"))

        assert [e.team_id for e in bus.get_history()] == ["T7", "T8", "T9"]

    def test_dead_letters_stop_at_cap(self):
        bus = InMemoryEventBus(max_history=2)
        bus.subscribe(TeamCreatedEvent, lambda e: 1 / 0)
        for i in range(5):
            bus.publish(_created(f"T{i}"))

        assert [e.team_id for e, _ in bus.dead_letters] == ["T3", "T4"]
        assert bus.get_error_counts() == {"TeamCreatedEvent": 5}

    def test_app_bus_uses_configured_cap(self):
        app = build_app(Settings(event_bus={"max_history": 5}))
        for i in range(20):
            app.create_task.execute(f"Task {i}", "owner-1")

        assert len(app.event_bus.get_history()) == 5
