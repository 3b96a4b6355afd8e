"""Unit tests for notification dispatch, sinks and device tokens."""

import json
import logging
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from config.settings import settings
from src.bc_common.enums import NotificationType
from src.bc_notify.application import service as notify_service
from src.bc_notify.application.service import DeviceTokenService, get_notification_sink
from src.bc_notify.domain.models import NotificationEvent
from src.bc_notify.domain.sink import dispatch_events
from src.bc_notify.infrastructure.sinks import LoggingNotificationSink, RedisNotificationSink
from tests.unit.fakes import RecordingSink


def _event(*member_ids: str, **payload: object) -> NotificationEvent:
    return NotificationEvent(NotificationType.SLOT_BOOKED, member_ids, dict(payload))


class TestNotificationEvent:
    def test_to_message(self) -> None:
        event = _event("alice", "bob", slot_id="SLT-1")

        assert event.to_message() == {
            "type": "slot_booked",
            "member_ids": ["alice", "bob"],
            "payload": {"slot_id": "SLT-1"},
        }


class TestDispatchEvents:
    async def test_delivers_every_event(self) -> None:
        sink = RecordingSink()

        delivered = await dispatch_events(sink, [_event("alice"), _event("bob")])

        assert delivered == 2
        assert [e.member_ids for e in sink.events] == [("alice",), ("bob",)]

    async def test_skips_events_without_recipients(self) -> None:
        sink = RecordingSink()

        delivered = await dispatch_events(sink, [_event(), _event("alice")])

        assert delivered == 1
        assert len(sink.events) == 1

    async def test_sink_failure_is_logged_not_raised(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        sink = RecordingSink(fail=True)

        with caplog.at_level(logging.ERROR):
            delivered = await dispatch_events(sink, [_event("alice")])

        assert delivered == 0
        assert "Notification dispatch failed" in caplog.text


class TestSinks:
    async def test_redis_sink_publishes_json(self) -> None:
        redis = AsyncMock()
        redis.publish.return_value = 1

        with patch(
            "src.bc_notify.infrastructure.sinks.get_redis", AsyncMock(return_value=redis)
        ):
            await RedisNotificationSink("club:notifications").publish(_event("alice"))

        channel, body = redis.publish.await_args.args
        assert channel == "club:notifications"
        assert json.loads(body)["member_ids"] == ["alice"]

    async def test_logging_sink_logs_recipients(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO):
            await LoggingNotificationSink().publish(_event("alice", "bob"))

        assert "slot_booked" in caplog.text
        assert "alice,bob" in caplog.text

    def test_factory_picks_logging_sink_when_disabled(self) -> None:
        with (
            patch.object(settings, "NOTIFICATIONS_ENABLED", False),
            patch.object(notify_service, "_sink", None),
        ):
            assert isinstance(get_notification_sink(), LoggingNotificationSink)

    def test_factory_picks_redis_sink_when_enabled(self) -> None:
        with (
            patch.object(settings, "NOTIFICATIONS_ENABLED", True),
            patch.object(notify_service, "_sink", None),
        ):
            assert isinstance(get_notification_sink(), RedisNotificationSink)


class TestDeviceTokenService:
    async def test_register_commits(self) -> None:
        repo = AsyncMock()
        db = AsyncMock()

        resp = await DeviceTokenService(repo).register(db, "alice", "tok-1")

        repo.register.assert_awaited_once_with(db, "alice", "tok-1")
        db.commit.assert_awaited_once()
        assert resp.registered is True

    async def test_unregister(self) -> None:
        repo = AsyncMock()
        repo.unregister.return_value = True

        resp = await DeviceTokenService(repo).unregister(AsyncMock(), "alice", "tok-1")

        assert resp.registered is False
        assert resp.token == "tok-1"

    async def test_list_tokens(self) -> None:
        repo = AsyncMock()
        repo.list_tokens.return_value = ["tok-2", "tok-1"]

        resp = await DeviceTokenService(repo).list_tokens(MagicMock(), "alice")

        assert resp.tokens == ["tok-2", "tok-1"]
        assert resp.member_id == "alice"
