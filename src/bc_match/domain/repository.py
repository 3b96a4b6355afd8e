"""Repository Protocol for matches."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bc_match.domain.models import Match


class MatchRepositoryProtocol(Protocol):
    async def create(self, db: AsyncSession, match: Match) -> Match: ...

    async def get(self, db: AsyncSession, club_id: str, match_id: str) -> Match | None: ...

    async def get_for_update(
        self, db: AsyncSession, club_id: str, match_id: str
    ) -> Match | None: ...

    async def save(self, db: AsyncSession, match: Match) -> Match: ...

    async def list_for_member(
        self,
        db: AsyncSession,
        club_id: str,
        member_id: str,
        status: str | None,
        limit: int,
        offset: int,
    ) -> list[Match]: ...
