"""In-memory, synchronous domain event bus.

Design goals
------------
1.  **Name-routed dispatching**: subscribers register under an event type
    name (or the class, normalised to its name).  ``publish()`` invokes
    every handler registered for ``event.event_type``, in registration
    order, before returning.
2.  **Depth-first cascades**: a handler may mutate aggregates that publish
    further events.  Those nested publishes are dispatched completely before
    control returns to the outer handler loop.
3.  **Bounded re-entrancy**: nested publishes deeper than
    ``max_cascade_depth`` are not dispatched.  They are logged and kept as
    dead letters instead of recursing without limit.
4.  **Handler isolation**: an exception escaping a handler is logged and
    dead-lettered; the remaining handlers still run and the publisher never
    sees it.

The bus is an explicit instance owned by the composition root and passed
to aggregates and policies by reference.  Tests build their own.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque

from teamflow.core.interfaces import EventHandler
from teamflow.domain.events import DomainEvent

logger = logging.getLogger(__name__)

DEFAULT_MAX_CASCADE_DEPTH = 16
DEFAULT_MAX_HISTORY = 10_000


def _key(event_type: str | type[DomainEvent]) -> str:
    if isinstance(event_type, str):
        return event_type
    return event_type.__name__


class InMemoryEventBus:
    """Deterministic, in-process event bus.

    Parameters
    ----------
    max_cascade_depth
        Maximum number of nested ``publish()`` calls.  The outermost publish
        is depth 1.
    max_history
        Number of published events (and, separately, dead letters) retained.
        Older entries are discarded first.
    """

    def __init__(
        self,
        *,
        max_cascade_depth: int = DEFAULT_MAX_CASCADE_DEPTH,
        max_history: int = DEFAULT_MAX_HISTORY,
    ) -> None:
        if max_cascade_depth < 1:
            raise ValueError("max_cascade_depth must be at least 1")
        if max_history < 1:
            raise ValueError("max_history must be at least 1")
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)
        self._history: deque[DomainEvent] = deque(maxlen=max_history)
        self._error_counts: dict[str, int] = defaultdict(int)
        self._dead_letters: deque[tuple[DomainEvent, str]] = deque(maxlen=max_history)
        self._messages_processed: int = 0
        self._depth = 0
        self._max_cascade_depth = max_cascade_depth

    # -- Core API ----------------------------------------------------------

    def publish(self, event: DomainEvent) -> None:
        """Dispatch *event* to every handler subscribed to its type."""
        key = event.event_type
        self._history.append(event)

        if self._depth >= self._max_cascade_depth:
            reason = f"cascade depth limit {self._max_cascade_depth} reached"
            self._error_counts[key] += 1
            self._dead_letters.append((event, reason))
            logger.error(
                "Dropping %s %s: %s", key, event.event_id, reason,
            )
            return

        # Copy so a handler subscribing during dispatch doesn't see this event.
        handlers = list(self._handlers.get(key, ()))
        self._depth += 1
        try:
            for handler in handlers:
                try:
                    handler(event)
                    self._messages_processed += 1
                except Exception as exc:
                    self._error_counts[key] += 1
                    self._dead_letters.append((event, str(exc)))
                    logger.exception("Handler error on %s: %s", key, exc)
        finally:
            self._depth -= 1

    def subscribe(
        self,
        event_type: str | type[DomainEvent],
        handler: EventHandler,
    ) -> None:
        """Register *handler* for *event_type*."""
        self._handlers[_key(event_type)].append(handler)

    def clear_handlers(self) -> None:
        """Remove every registration (test isolation / reset)."""
        self._handlers.clear()

    def handler_count(self, event_type: str | type[DomainEvent]) -> int:
        return len(self._handlers.get(_key(event_type), ()))

    # -- Observability -----------------------------------------------------

    @property
    def depth(self) -> int:
        """Current publish nesting depth (0 when idle)."""
        return self._depth

    def get_history(
        self,
        event_type: str | type[DomainEvent] | None = None,
    ) -> list[DomainEvent]:
        """Return published events, optionally filtered."""
        if event_type is None:
            return list(self._history)
        key = _key(event_type)
        return [e for e in self._history if e.event_type == key]

    def clear_history(self) -> None:
        """Clear the event history (testing helper)."""
        self._history.clear()

    def get_error_counts(self) -> dict[str, int]:
        return dict(self._error_counts)

    @property
    def dead_letters(self) -> list[tuple[DomainEvent, str]]:
        return list(self._dead_letters)

    def clear_dead_letters(self) -> list[tuple[DomainEvent, str]]:
        """Drain and return dead letters."""
        drained = list(self._dead_letters)
        self._dead_letters.clear()
        return drained

    @property
    def messages_processed(self) -> int:
        return self._messages_processed
