"""DeviceTokenRepository — push-token plumbing for the external push worker."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

_UPSERT_TOKEN_SQL = text("""
    INSERT INTO member_device_tokens (member_id, token)
    VALUES (:member_id, :token)
    ON CONFLICT (member_id, token) DO UPDATE SET updated_at = NOW()
""")

_DELETE_TOKEN_SQL = text("""
    DELETE FROM member_device_tokens
    WHERE member_id = :member_id AND token = :token
""")

_LIST_TOKENS_SQL = text("""
    SELECT token FROM member_device_tokens
    WHERE member_id = :member_id
    ORDER BY updated_at DESC
""")


class DeviceTokenRepository:
    async def register(self, db: AsyncSession, member_id: str, token: str) -> None:
        await db.execute(_UPSERT_TOKEN_SQL, {"member_id": member_id, "token": token})

    async def unregister(self, db: AsyncSession, member_id: str, token: str) -> bool:
        result = await db.execute(_DELETE_TOKEN_SQL, {"member_id": member_id, "token": token})
        return bool(result.rowcount)

    async def list_tokens(self, db: AsyncSession, member_id: str) -> list[str]:
        result = await db.execute(_LIST_TOKENS_SQL, {"member_id": member_id})
        return [row.token for row in result.fetchall()]
