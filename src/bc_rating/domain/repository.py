from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bc_rating.domain.models import MatchHistoryEntry


class MatchHistoryRepositoryProtocol(Protocol):
    async def insert(self, db: AsyncSession, entry: MatchHistoryEntry) -> MatchHistoryEntry: ...

    async def list_for_member(
        self, db: AsyncSession, member_id: str, cursor_id: int | None, limit: int
    ) -> list[MatchHistoryEntry]: ...

    async def list_for_match(
        self, db: AsyncSession, match_id: str
    ) -> list[MatchHistoryEntry]: ...
