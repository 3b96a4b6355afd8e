from pydantic import BaseModel, Field

from src.bc_admin.domain.models import AppSettings
from src.bc_common.cents import cents_to_display


class UpdateSettingsRequest(BaseModel):
    """Partial update; omitted fields keep their current value."""

    slot_booking_cost: int | None = Field(None, ge=0, description="cents")
    min_balance_for_booking: int | None = Field(None, ge=0, description="cents")
    cancellation_deadline_hours: int | None = Field(None, ge=0, le=24 * 14)
    registration_fee: int | None = Field(None, ge=0, description="cents")


class SettingsResponse(BaseModel):
    club_id: str
    slot_booking_cost_cents: int
    slot_booking_cost_display: str
    min_balance_for_booking_cents: int
    min_balance_for_booking_display: str
    cancellation_deadline_hours: int
    registration_fee_cents: int
    registration_fee_display: str
    updated_by: str | None
    updated_at: str | None

    @classmethod
    def from_settings(cls, s: AppSettings) -> "SettingsResponse":
        return cls(
            club_id=s.club_id,
            slot_booking_cost_cents=s.slot_booking_cost,
            slot_booking_cost_display=cents_to_display(s.slot_booking_cost),
            min_balance_for_booking_cents=s.min_balance_for_booking,
            min_balance_for_booking_display=cents_to_display(s.min_balance_for_booking),
            cancellation_deadline_hours=s.cancellation_deadline_hours,
            registration_fee_cents=s.registration_fee,
            registration_fee_display=cents_to_display(s.registration_fee),
            updated_by=s.updated_by,
            updated_at=s.updated_at.isoformat() if s.updated_at else None,
        )
