"""SettingsRepository — raw SQL access to app_settings."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bc_admin.domain.models import AppSettings
from src.bc_common.errors import InternalError

_COLUMNS = """
    club_id, slot_booking_cost, min_balance_for_booking,
    cancellation_deadline_hours, registration_fee, updated_by, updated_at
"""

_GET_SQL = text(f"SELECT {_COLUMNS} FROM app_settings WHERE club_id = :club_id")

_UPSERT_SQL = text(f"""
    INSERT INTO app_settings
        (club_id, slot_booking_cost, min_balance_for_booking,
         cancellation_deadline_hours, registration_fee, updated_by)
    VALUES
        (:club_id, :slot_booking_cost, :min_balance_for_booking,
         :cancellation_deadline_hours, :registration_fee, :updated_by)
    ON CONFLICT (club_id) DO UPDATE SET
        slot_booking_cost = EXCLUDED.slot_booking_cost,
        min_balance_for_booking = EXCLUDED.min_balance_for_booking,
        cancellation_deadline_hours = EXCLUDED.cancellation_deadline_hours,
        registration_fee = EXCLUDED.registration_fee,
        updated_by = EXCLUDED.updated_by,
        updated_at = NOW()
    RETURNING {_COLUMNS}
""")


def _row_to_settings(row: object) -> AppSettings:
    return AppSettings(
        club_id=row.club_id,  # type: ignore[attr-defined]
        slot_booking_cost=row.slot_booking_cost,  # type: ignore[attr-defined]
        min_balance_for_booking=row.min_balance_for_booking,  # type: ignore[attr-defined]
        cancellation_deadline_hours=row.cancellation_deadline_hours,  # type: ignore[attr-defined]
        registration_fee=row.registration_fee,  # type: ignore[attr-defined]
        updated_by=row.updated_by,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class SettingsRepository:
    async def get_settings(self, db: AsyncSession, club_id: str) -> AppSettings | None:
        result = await db.execute(_GET_SQL, {"club_id": club_id})
        row = result.fetchone()
        return _row_to_settings(row) if row else None

    async def save_settings(self, db: AsyncSession, app_settings: AppSettings) -> AppSettings:
        result = await db.execute(
            _UPSERT_SQL,
            {
                "club_id": app_settings.club_id,
                "slot_booking_cost": app_settings.slot_booking_cost,
                "min_balance_for_booking": app_settings.min_balance_for_booking,
                "cancellation_deadline_hours": app_settings.cancellation_deadline_hours,
                "registration_fee": app_settings.registration_fee,
                "updated_by": app_settings.updated_by,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Settings upsert returned no rows")
        return _row_to_settings(row)
