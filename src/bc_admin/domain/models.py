"""Club-wide settings — one row per club, edited by admins."""

from dataclasses import dataclass
from datetime import datetime

DEFAULT_SLOT_BOOKING_COST = 400
DEFAULT_MIN_BALANCE_FOR_BOOKING = 400
DEFAULT_CANCELLATION_DEADLINE_HOURS = 24
DEFAULT_REGISTRATION_FEE = 400


@dataclass
class AppSettings:
    club_id: str
    slot_booking_cost: int = DEFAULT_SLOT_BOOKING_COST                    # cents
    min_balance_for_booking: int = DEFAULT_MIN_BALANCE_FOR_BOOKING        # cents
    cancellation_deadline_hours: int = DEFAULT_CANCELLATION_DEADLINE_HOURS
    registration_fee: int = DEFAULT_REGISTRATION_FEE                      # cents
    updated_by: str | None = None
    updated_at: datetime | None = None
