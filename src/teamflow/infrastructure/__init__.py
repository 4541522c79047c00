"""Infrastructure adapters: event bus, in-memory repositories, notifiers."""

from teamflow.infrastructure.event_bus import InMemoryEventBus
from teamflow.infrastructure.memory import InMemoryTaskRepository, InMemoryTeamRepository
from teamflow.infrastructure.notifier import LoggingNotifier, WebhookNotifier

__all__ = [
    "InMemoryEventBus",
    "InMemoryTaskRepository",
    "InMemoryTeamRepository",
    "LoggingNotifier",
    "WebhookNotifier",
]
