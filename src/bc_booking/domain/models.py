"""Domain models for bc_booking — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime

from src.bc_admin.domain.models import AppSettings


@dataclass
class Slot:
    id: str
    club_id: str
    start_time: datetime
    is_booked: bool = False
    booked_by: str | None = None
    available: bool = True
    is_recurring: bool = False
    created_by: str | None = None
    version: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_held(self) -> bool:
        """Taken off the open pool without an occupant; new requests queue."""
        return not self.available and not self.is_booked


@dataclass
class WaitlistEntry:
    id: int                 # BIGSERIAL, defines FIFO order
    slot_id: str
    member_id: str
    added_at: datetime | None = None


@dataclass(frozen=True)
class BookingPolicy:
    """Immutable snapshot of the club settings, read once per unit of work."""

    slot_booking_cost: int
    min_balance_for_booking: int
    cancellation_deadline_hours: int

    @classmethod
    def from_settings(cls, app_settings: AppSettings) -> "BookingPolicy":
        return cls(
            slot_booking_cost=app_settings.slot_booking_cost,
            min_balance_for_booking=app_settings.min_balance_for_booking,
            cancellation_deadline_hours=app_settings.cancellation_deadline_hours,
        )


@dataclass
class BookingResult:
    slot: Slot
    booked: bool
    waitlist_position: int | None = None
    waitlist_head_member_id: str | None = None
    balance_after: int | None = None
    ledger_entry_id: int | None = None


@dataclass
class CancelResult:
    slot: Slot
    refunded: bool
    refund_amount: int
    balance_after: int
    ledger_entry_id: int
    promoted_member_id: str | None = None
    also_notify_member_ids: tuple[str, ...] = field(default_factory=tuple)
