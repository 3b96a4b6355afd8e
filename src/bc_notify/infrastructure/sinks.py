"""Concrete notification sinks.

RedisNotificationSink publishes JSON messages on a pub/sub channel that the
external push worker consumes (it resolves device tokens itself).
LoggingNotificationSink is used when notifications are disabled.
"""

import json
import logging

from src.bc_common.redis_client import get_redis
from src.bc_notify.domain.models import NotificationEvent

logger = logging.getLogger(__name__)


class RedisNotificationSink:
    def __init__(self, channel: str) -> None:
        self._channel = channel

    async def publish(self, event: NotificationEvent) -> None:
        redis = await get_redis()
        receivers = await redis.publish(self._channel, json.dumps(event.to_message()))
        logger.debug(
            "Published %s to %s (%d subscriber(s))", event.type.value, self._channel, receivers
        )


class LoggingNotificationSink:
    async def publish(self, event: NotificationEvent) -> None:
        logger.info(
            "Notification %s -> %s %s",
            event.type.value,
            ",".join(event.member_ids),
            event.payload,
        )
