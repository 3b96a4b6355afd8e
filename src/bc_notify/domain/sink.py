"""Notification sink contract and best-effort post-commit dispatch.

Services collect NotificationEvents while running a unit of work and call
dispatch_events only after the transaction has committed. A sink failure is
logged and swallowed: it never fails or rolls back the business operation.
"""

import logging
from collections.abc import Iterable
from typing import Protocol

from src.bc_notify.domain.models import NotificationEvent

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    async def publish(self, event: NotificationEvent) -> None: ...


async def dispatch_events(sink: NotificationSink, events: Iterable[NotificationEvent]) -> int:
    """Publish each event; returns the number delivered to the sink."""
    delivered = 0
    for event in events:
        if not event.member_ids:
            continue
        try:
            await sink.publish(event)
            delivered += 1
        except Exception:
            logger.exception(
                "Notification dispatch failed: type=%s members=%s",
                event.type.value,
                ",".join(event.member_ids),
            )
    return delivered
