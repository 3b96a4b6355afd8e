"""Booking preconditions — each check raises before any write happens."""

from datetime import datetime

from src.bc_account.domain.models import Member
from src.bc_booking.domain.models import BookingPolicy, Slot, WaitlistEntry
from src.bc_common.datetime_utils import ensure_utc
from src.bc_common.errors import (
    AlreadyOnWaitlistError,
    DoubleBookingError,
    InsufficientBalanceError,
    InvalidSlotRequestError,
    NotSlotOwnerError,
    SlotAlreadyBookedError,
    SlotNotAvailableError,
    SlotNotBookedError,
)


def check_not_waitlisted(slot: Slot, member_id: str, entries: list[WaitlistEntry]) -> None:
    if any(e.member_id == member_id for e in entries):
        raise AlreadyOnWaitlistError(slot.id)


def check_min_balance(member: Member, policy: BookingPolicy) -> None:
    if member.balance < policy.min_balance_for_booking:
        raise InsufficientBalanceError(policy.min_balance_for_booking, member.balance)


def check_bookable(slot: Slot) -> None:
    if slot.is_booked:
        raise SlotAlreadyBookedError(slot.id)
    if not slot.available:
        raise SlotNotAvailableError(slot.id)


def check_no_double_booking(slot: Slot, same_time_holdings: list[Slot]) -> None:
    if any(s.id != slot.id for s in same_time_holdings):
        raise DoubleBookingError(slot.start_time.isoformat())


def check_cancellable(slot: Slot, member_id: str, slot_timestamp: datetime | None) -> None:
    if slot.booked_by != member_id:
        raise NotSlotOwnerError(slot.id)
    if not slot.is_booked:
        raise SlotNotBookedError(slot.id)
    if slot_timestamp is not None and ensure_utc(slot_timestamp) != ensure_utc(slot.start_time):
        raise InvalidSlotRequestError(
            f"slot_timestamp {slot_timestamp.isoformat()} does not match slot start"
        )
