"""Notification sink factory and device-token service."""

from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bc_common.database import run_in_transaction
from src.bc_notify.domain.sink import NotificationSink
from src.bc_notify.infrastructure.sinks import LoggingNotificationSink, RedisNotificationSink
from src.bc_notify.infrastructure.token_repository import DeviceTokenRepository

_sink: NotificationSink | None = None


def get_notification_sink() -> NotificationSink:
    global _sink  # noqa: PLW0603
    if _sink is None:
        if settings.NOTIFICATIONS_ENABLED:
            _sink = RedisNotificationSink(settings.NOTIFICATION_CHANNEL)
        else:
            _sink = LoggingNotificationSink()
    return _sink


class DeviceTokenRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=512)


class DeviceTokenResponse(BaseModel):
    member_id: str
    token: str
    registered: bool


class DeviceTokenListResponse(BaseModel):
    member_id: str
    tokens: list[str]


class DeviceTokenService:
    def __init__(self, repo: DeviceTokenRepository | None = None) -> None:
        self._repo = repo or DeviceTokenRepository()

    async def register(self, db: AsyncSession, member_id: str, token: str) -> DeviceTokenResponse:
        async def _work(session: AsyncSession) -> None:
            await self._repo.register(session, member_id, token)

        await run_in_transaction(db, _work)
        return DeviceTokenResponse(member_id=member_id, token=token, registered=True)

    async def unregister(self, db: AsyncSession, member_id: str, token: str) -> DeviceTokenResponse:
        async def _work(session: AsyncSession) -> bool:
            return await self._repo.unregister(session, member_id, token)

        await run_in_transaction(db, _work)
        return DeviceTokenResponse(member_id=member_id, token=token, registered=False)

    async def list_tokens(self, db: AsyncSession, member_id: str) -> DeviceTokenListResponse:
        tokens = await self._repo.list_tokens(db, member_id)
        return DeviceTokenListResponse(member_id=member_id, tokens=tokens)
