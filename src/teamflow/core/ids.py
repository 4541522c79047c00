"""Canonical ID and timestamp factories.

All modules import from here instead of defining local id/now helpers.

Entity and event ids are 26-character ULID-format strings: a 48-bit
millisecond timestamp followed by 80 random bits, Crockford base32 encoded.
Ids generated later sort after ids generated earlier (millisecond
resolution), which keeps listings in creation order without a separate
sequence column.

All timestamps are ``datetime`` with ``tzinfo=timezone.utc``, never naive.
"""

from __future__ import annotations

import secrets
import time
from datetime import datetime, timezone

_CROCKFORD = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
_ID_LENGTH = 26


def _encode(value: int, length: int) -> str:
    chars = []
    for _ in range(length):
        chars.append(_CROCKFORD[value & 0x1F])
        value >>= 5
    return "".join(reversed(chars))


def new_sortable_id(timestamp_ms: int | None = None) -> str:
    """Generate a new time-sortable id.  Use for all entity and event ids."""
    if timestamp_ms is None:
        timestamp_ms = time.time_ns() // 1_000_000
    randomness = secrets.randbits(80)
    return _encode(timestamp_ms & ((1 << 48) - 1), 10) + _encode(randomness, 16)


def is_sortable_id(value: str) -> bool:
    """Return ``True`` if *value* looks like an id from :func:`new_sortable_id`."""
    return len(value) == _ID_LENGTH and all(c in _CROCKFORD for c in value)


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)
