"""Repository Protocols for slots and waitlists.

Unit tests inject in-memory fakes that conform to these Protocols.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bc_booking.domain.models import Slot, WaitlistEntry


class SlotRepositoryProtocol(Protocol):
    async def get_slot(self, db: AsyncSession, club_id: str, slot_id: str) -> Slot | None: ...

    async def get_slot_for_update(
        self, db: AsyncSession, club_id: str, slot_id: str
    ) -> Slot | None: ...

    async def find_booked_at(
        self, db: AsyncSession, club_id: str, member_id: str, start_time: datetime
    ) -> list[Slot]: ...

    async def create_slot(self, db: AsyncSession, slot: Slot) -> Slot: ...

    async def mark_booked(self, db: AsyncSession, slot_id: str, member_id: str) -> Slot: ...

    async def mark_released(self, db: AsyncSession, slot_id: str) -> Slot: ...

    async def list_slots(
        self,
        db: AsyncSession,
        club_id: str,
        start_from: datetime | None,
        start_to: datetime | None,
        limit: int,
    ) -> list[Slot]: ...


class WaitlistRepositoryProtocol(Protocol):
    async def list_entries(self, db: AsyncSession, slot_id: str) -> list[WaitlistEntry]: ...

    async def append(self, db: AsyncSession, slot_id: str, member_id: str) -> WaitlistEntry: ...

    async def remove(self, db: AsyncSession, slot_id: str, member_id: str) -> bool: ...

    async def pop_head(self, db: AsyncSession, slot_id: str) -> WaitlistEntry | None: ...

    async def count_by_slot(
        self, db: AsyncSession, slot_ids: list[str]
    ) -> dict[str, int]: ...
