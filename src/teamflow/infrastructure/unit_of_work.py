"""Staged writes shared by the repository adapters.

A :class:`StagedWrites` buffers saved aggregates per open ``transaction()``
scope.  When the outermost scope exits cleanly the accumulated writes are
handed to a commit callback in save order; an exception discards the writes
of the scope it escapes (nested scopes act as savepoints).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StagedWrites(Generic[T]):
    def __init__(self, commit: Callable[[list[T]], None]) -> None:
        self._commit = commit
        self._layers: list[dict[str, T]] = []

    @property
    def active(self) -> bool:
        return bool(self._layers)

    def stage(self, key: str, item: T) -> None:
        layer = self._layers[-1]
        # Re-saving moves the item to the end so commit order follows save order.
        layer.pop(key, None)
        layer[key] = item

    def pending(self) -> dict[str, T]:
        """All staged items, inner scopes overriding outer ones."""
        merged: dict[str, T] = {}
        for layer in self._layers:
            merged.update(layer)
        return merged

    @contextmanager
    def scope(self) -> Iterator[None]:
        self._layers.append({})
        try:
            yield
        except BaseException:
            discarded = self._layers.pop()
            if discarded:
                logger.debug("Discarded %d staged writes", len(discarded))
            raise
        writes = self._layers.pop()
        if self._layers:
            for key, item in writes.items():
                self.stage(key, item)
        elif writes:
            self._commit(list(writes.values()))

    def clear(self) -> None:
        self._layers.clear()
