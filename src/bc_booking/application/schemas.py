"""Pydantic schemas for the slot booking API."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.bc_booking.domain.models import BookingResult, CancelResult, Slot
from src.bc_booking.domain.recurrence import MAX_RECURRING_WEEKS
from src.bc_common.cents import cents_to_display

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BookSlotRequest(BaseModel):
    join_waitlist_if_full: bool = Field(
        True, description="Queue on the waitlist when another member holds the slot"
    )


class CancelSlotRequest(BaseModel):
    slot_timestamp: datetime | None = Field(
        None, description="Optional start time the client believes it is cancelling"
    )


class CreateSlotRequest(BaseModel):
    start_time: datetime
    available: bool = True


class CreateRecurringSlotsRequest(BaseModel):
    first_start_time: datetime
    weeks: int = Field(..., ge=1, le=MAX_RECURRING_WEEKS)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class SlotResponse(BaseModel):
    slot_id: str
    start_time: str
    is_booked: bool
    booked_by: str | None
    available: bool
    is_recurring: bool
    waitlist_count: int = 0

    @classmethod
    def from_slot(cls, slot: Slot, waitlist_count: int = 0) -> "SlotResponse":
        return cls(
            slot_id=slot.id,
            start_time=slot.start_time.isoformat(),
            is_booked=slot.is_booked,
            booked_by=slot.booked_by,
            available=slot.available,
            is_recurring=slot.is_recurring,
            waitlist_count=waitlist_count,
        )


class BookingResponse(BaseModel):
    slot: SlotResponse
    booked: bool
    waitlist_position: int | None
    waitlist_head_member_id: str | None
    balance_cents: int | None
    balance_display: str | None
    ledger_entry_id: int | None

    @classmethod
    def from_result(cls, result: BookingResult) -> "BookingResponse":
        return cls(
            slot=SlotResponse.from_slot(result.slot),
            booked=result.booked,
            waitlist_position=result.waitlist_position,
            waitlist_head_member_id=result.waitlist_head_member_id,
            balance_cents=result.balance_after,
            balance_display=(
                cents_to_display(result.balance_after)
                if result.balance_after is not None
                else None
            ),
            ledger_entry_id=result.ledger_entry_id,
        )


class CancelResponse(BaseModel):
    slot: SlotResponse
    refunded: bool
    refund_cents: int
    balance_cents: int
    balance_display: str
    ledger_entry_id: int
    promoted_member_id: str | None
    also_notify_member_ids: list[str]

    @classmethod
    def from_result(cls, result: CancelResult) -> "CancelResponse":
        return cls(
            slot=SlotResponse.from_slot(result.slot),
            refunded=result.refunded,
            refund_cents=result.refund_amount,
            balance_cents=result.balance_after,
            balance_display=cents_to_display(result.balance_after),
            ledger_entry_id=result.ledger_entry_id,
            promoted_member_id=result.promoted_member_id,
            also_notify_member_ids=list(result.also_notify_member_ids),
        )


class SlotListResponse(BaseModel):
    items: list[SlotResponse]


class RecurringSlotsResponse(BaseModel):
    created: int
    items: list[SlotResponse]
