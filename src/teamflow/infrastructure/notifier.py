"""Administrator notification adapters.

:class:`LoggingNotifier` writes notifications to the log and keeps them in
memory; it is the default when no webhook is configured.
:class:`WebhookNotifier` POSTs a JSON document to an HTTP endpoint.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import httpx

from teamflow.core.errors import NotificationError
from teamflow.core.ids import utc_now
from teamflow.core.result import Err, Ok, Result

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    subject: str
    message: str
    context: dict[str, Any] = field(default_factory=dict)
    sent_at: datetime = field(default_factory=utc_now)


class LoggingNotifier:
    def __init__(self, level: int = logging.WARNING, max_kept: int = 1000) -> None:
        self._level = level
        # Only the most recent notifications are kept for inspection.
        self._sent: deque[Notification] = deque(maxlen=max_kept)

    def notify(
        self,
        subject: str,
        message: str,
        **context: Any,
    ) -> Result[None, NotificationError]:
        self._sent.append(Notification(subject, message, dict(context)))
        logger.log(self._level, "[admin] %s: %s %s", subject, message, context or "")
        return Ok(None)

    @property
    def sent(self) -> list[Notification]:
        return list(self._sent)


class WebhookNotifier:
    """POST notifications as JSON to *url*.

    Parameters
    ----------
    url
        Endpoint receiving ``{"subject", "message", "context", "sent_at"}``.
    timeout
        Seconds before the request is abandoned.
    client
        Optional pre-built ``httpx.Client`` (tests inject a mock transport).
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 5.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._url = url
        self._client = client or httpx.Client(timeout=httpx.Timeout(timeout))

    def notify(
        self,
        subject: str,
        message: str,
        **context: Any,
    ) -> Result[None, NotificationError]:
        note = Notification(subject, message, dict(context))
        payload = {
            "subject": note.subject,
            "message": note.message,
            "context": {k: str(v) for k, v in note.context.items()},
            "sent_at": note.sent_at.isoformat(),
        }
        try:
            resp = self._client.post(self._url, json=payload)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Webhook notification to %s failed: %s", self._url, exc)
            return Err(NotificationError(f"webhook delivery failed: {exc}"))
        return Ok(None)

    def close(self) -> None:
        self._client.close()
