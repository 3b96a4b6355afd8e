"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock (or an in-memory fake) that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bc_account.domain.models import LedgerEntry, Member


class MemberRepositoryProtocol(Protocol):
    async def get_member(
        self, db: AsyncSession, club_id: str, member_id: str
    ) -> Member | None: ...

    async def get_member_for_update(
        self, db: AsyncSession, club_id: str, member_id: str
    ) -> Member | None: ...

    async def get_members_for_update(
        self, db: AsyncSession, club_id: str, member_ids: list[str]
    ) -> dict[str, Member]: ...

    async def create_member(self, db: AsyncSession, member: Member) -> Member: ...

    async def apply_balance_change(
        self,
        db: AsyncSession,
        member_id: str,
        amount: int,
        entry_type: str,
        reference_type: str | None,
        reference_id: str | None,
        description: str,
    ) -> tuple[Member, LedgerEntry]: ...

    async def set_registration_fee_pending(
        self, db: AsyncSession, member_id: str, amount: int
    ) -> None: ...

    async def update_rating(self, db: AsyncSession, member: Member) -> None: ...

    async def list_ledger_entries(
        self,
        db: AsyncSession,
        member_id: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]: ...

    async def list_leaderboard(
        self, db: AsyncSession, club_id: str, limit: int
    ) -> list[Member]: ...
