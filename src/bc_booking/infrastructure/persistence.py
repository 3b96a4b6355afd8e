"""Slot and waitlist repositories — raw SQL over the caller's AsyncSession.

Transaction ownership: the caller (run_in_transaction) commits or rolls back.
Unique-constraint races are translated to the matching domain error.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.bc_booking.domain.models import Slot, WaitlistEntry
from src.bc_common.errors import (
    AlreadyOnWaitlistError,
    DoubleBookingError,
    InternalError,
    SlotNotFoundError,
)

_SLOT_COLUMNS = """
    id, club_id, start_time, is_booked, booked_by, available,
    is_recurring, created_by, version, created_at, updated_at
"""

_GET_SLOT_SQL = text(f"""
    SELECT {_SLOT_COLUMNS} FROM slots
    WHERE club_id = :club_id AND id = :slot_id
""")

_GET_SLOT_FOR_UPDATE_SQL = text(f"""
    SELECT {_SLOT_COLUMNS} FROM slots
    WHERE club_id = :club_id AND id = :slot_id
    FOR UPDATE
""")

_FIND_BOOKED_AT_SQL = text(f"""
    SELECT {_SLOT_COLUMNS} FROM slots
    WHERE club_id = :club_id
      AND booked_by = :member_id
      AND is_booked = TRUE
      AND start_time = :start_time
""")

_INSERT_SLOT_SQL = text(f"""
    INSERT INTO slots (id, club_id, start_time, available, is_recurring, created_by)
    VALUES (:id, :club_id, :start_time, :available, :is_recurring, :created_by)
    RETURNING {_SLOT_COLUMNS}
""")

_MARK_BOOKED_SQL = text(f"""
    UPDATE slots
    SET is_booked = TRUE, booked_by = :member_id, available = FALSE,
        version = version + 1, updated_at = NOW()
    WHERE id = :slot_id
    RETURNING {_SLOT_COLUMNS}
""")

_MARK_RELEASED_SQL = text(f"""
    UPDATE slots
    SET is_booked = FALSE, booked_by = NULL, available = TRUE,
        version = version + 1, updated_at = NOW()
    WHERE id = :slot_id
    RETURNING {_SLOT_COLUMNS}
""")

_LIST_SLOTS_SQL = text(f"""
    SELECT {_SLOT_COLUMNS} FROM slots
    WHERE club_id = :club_id
      AND (CAST(:start_from AS TIMESTAMPTZ) IS NULL OR start_time >= :start_from)
      AND (CAST(:start_to AS TIMESTAMPTZ) IS NULL OR start_time < :start_to)
    ORDER BY start_time ASC, id ASC
    LIMIT :limit
""")

_WAITLIST_COLUMNS = "id, slot_id, member_id, added_at"

_LIST_WAITLIST_SQL = text(f"""
    SELECT {_WAITLIST_COLUMNS} FROM slot_waitlist
    WHERE slot_id = :slot_id
    ORDER BY id ASC
""")

_APPEND_WAITLIST_SQL = text(f"""
    INSERT INTO slot_waitlist (slot_id, member_id)
    VALUES (:slot_id, :member_id)
    RETURNING {_WAITLIST_COLUMNS}
""")

_REMOVE_WAITLIST_SQL = text("""
    DELETE FROM slot_waitlist
    WHERE slot_id = :slot_id AND member_id = :member_id
    RETURNING id
""")

_POP_HEAD_SQL = text(f"""
    DELETE FROM slot_waitlist
    WHERE id = (
        SELECT id FROM slot_waitlist
        WHERE slot_id = :slot_id
        ORDER BY id ASC
        LIMIT 1
    )
    RETURNING {_WAITLIST_COLUMNS}
""")

_COUNT_WAITLIST_SQL = text("""
    SELECT slot_id, COUNT(*) AS n
    FROM slot_waitlist
    WHERE slot_id = ANY(CAST(:slot_ids AS VARCHAR[]))
    GROUP BY slot_id
""")

_DOUBLE_BOOKING_INDEX = "uq_slots_member_start_time"
_WAITLIST_UNIQUE = "uq_slot_waitlist_slot_member"


def _row_to_slot(row: object) -> Slot:
    return Slot(
        id=row.id,  # type: ignore[attr-defined]
        club_id=row.club_id,  # type: ignore[attr-defined]
        start_time=row.start_time,  # type: ignore[attr-defined]
        is_booked=row.is_booked,  # type: ignore[attr-defined]
        booked_by=row.booked_by,  # type: ignore[attr-defined]
        available=row.available,  # type: ignore[attr-defined]
        is_recurring=row.is_recurring,  # type: ignore[attr-defined]
        created_by=row.created_by,  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_entry(row: object) -> WaitlistEntry:
    return WaitlistEntry(
        id=row.id,  # type: ignore[attr-defined]
        slot_id=row.slot_id,  # type: ignore[attr-defined]
        member_id=row.member_id,  # type: ignore[attr-defined]
        added_at=row.added_at,  # type: ignore[attr-defined]
    )


def _violates(exc: IntegrityError, constraint: str) -> bool:
    return constraint in str(exc.orig)


class SlotRepository:
    async def get_slot(self, db: AsyncSession, club_id: str, slot_id: str) -> Slot | None:
        result = await db.execute(_GET_SLOT_SQL, {"club_id": club_id, "slot_id": slot_id})
        row = result.fetchone()
        return _row_to_slot(row) if row else None

    async def get_slot_for_update(
        self, db: AsyncSession, club_id: str, slot_id: str
    ) -> Slot | None:
        result = await db.execute(
            _GET_SLOT_FOR_UPDATE_SQL, {"club_id": club_id, "slot_id": slot_id}
        )
        row = result.fetchone()
        return _row_to_slot(row) if row else None

    async def find_booked_at(
        self, db: AsyncSession, club_id: str, member_id: str, start_time: datetime
    ) -> list[Slot]:
        result = await db.execute(
            _FIND_BOOKED_AT_SQL,
            {"club_id": club_id, "member_id": member_id, "start_time": start_time},
        )
        return [_row_to_slot(row) for row in result.fetchall()]

    async def create_slot(self, db: AsyncSession, slot: Slot) -> Slot:
        result = await db.execute(
            _INSERT_SLOT_SQL,
            {
                "id": slot.id,
                "club_id": slot.club_id,
                "start_time": slot.start_time,
                "available": slot.available,
                "is_recurring": slot.is_recurring,
                "created_by": slot.created_by,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Slot insert returned no rows")
        return _row_to_slot(row)

    async def mark_booked(self, db: AsyncSession, slot_id: str, member_id: str) -> Slot:
        try:
            result = await db.execute(
                _MARK_BOOKED_SQL, {"slot_id": slot_id, "member_id": member_id}
            )
        except IntegrityError as exc:
            if _violates(exc, _DOUBLE_BOOKING_INDEX):
                raise DoubleBookingError(f"slot {slot_id}") from exc
            raise
        row = result.fetchone()
        if row is None:
            raise SlotNotFoundError(slot_id)
        return _row_to_slot(row)

    async def mark_released(self, db: AsyncSession, slot_id: str) -> Slot:
        result = await db.execute(_MARK_RELEASED_SQL, {"slot_id": slot_id})
        row = result.fetchone()
        if row is None:
            raise SlotNotFoundError(slot_id)
        return _row_to_slot(row)

    async def list_slots(
        self,
        db: AsyncSession,
        club_id: str,
        start_from: datetime | None,
        start_to: datetime | None,
        limit: int,
    ) -> list[Slot]:
        result = await db.execute(
            _LIST_SLOTS_SQL,
            {
                "club_id": club_id,
                "start_from": start_from,
                "start_to": start_to,
                "limit": limit,
            },
        )
        return [_row_to_slot(row) for row in result.fetchall()]


class WaitlistRepository:
    async def list_entries(self, db: AsyncSession, slot_id: str) -> list[WaitlistEntry]:
        result = await db.execute(_LIST_WAITLIST_SQL, {"slot_id": slot_id})
        return [_row_to_entry(row) for row in result.fetchall()]

    async def append(self, db: AsyncSession, slot_id: str, member_id: str) -> WaitlistEntry:
        try:
            result = await db.execute(
                _APPEND_WAITLIST_SQL, {"slot_id": slot_id, "member_id": member_id}
            )
        except IntegrityError as exc:
            if _violates(exc, _WAITLIST_UNIQUE):
                raise AlreadyOnWaitlistError(slot_id) from exc
            raise
        row = result.fetchone()
        if row is None:
            raise InternalError("Waitlist insert returned no rows")
        return _row_to_entry(row)

    async def remove(self, db: AsyncSession, slot_id: str, member_id: str) -> bool:
        result = await db.execute(
            _REMOVE_WAITLIST_SQL, {"slot_id": slot_id, "member_id": member_id}
        )
        return result.fetchone() is not None

    async def pop_head(self, db: AsyncSession, slot_id: str) -> WaitlistEntry | None:
        result = await db.execute(_POP_HEAD_SQL, {"slot_id": slot_id})
        row = result.fetchone()
        return _row_to_entry(row) if row else None

    async def count_by_slot(self, db: AsyncSession, slot_ids: list[str]) -> dict[str, int]:
        if not slot_ids:
            return {}
        result = await db.execute(_COUNT_WAITLIST_SQL, {"slot_ids": slot_ids})
        return {row.slot_id: row.n for row in result.fetchall()}
