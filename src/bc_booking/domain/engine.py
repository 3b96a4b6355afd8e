"""BookingEngine — transactional booking, cancellation and waitlist logic.

Every public method runs inside the caller's unit of work (see
run_in_transaction). All reads happen before any write, and rows are locked
in a fixed order (slot before member) so concurrent requests serialize on
the slot row instead of deadlocking.
"""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bc_account.domain.models import Member
from src.bc_account.domain.repository import MemberRepositoryProtocol
from src.bc_admin.domain.repository import SettingsRepositoryProtocol
from src.bc_booking.domain.models import (
    BookingPolicy,
    BookingResult,
    CancelResult,
    Slot,
    WaitlistEntry,
)
from src.bc_booking.domain.repository import (
    SlotRepositoryProtocol,
    WaitlistRepositoryProtocol,
)
from src.bc_booking.domain.rules import (
    check_bookable,
    check_cancellable,
    check_min_balance,
    check_no_double_booking,
    check_not_waitlisted,
)
from src.bc_common.datetime_utils import hours_between, same_local_day, utc_now
from src.bc_common.enums import LedgerEntryType
from src.bc_common.errors import (
    MemberNotFoundError,
    NotOnWaitlistError,
    SettingsNotFoundError,
    SlotNotFoundError,
)

logger = logging.getLogger(__name__)

SLOT_REFERENCE = "SLOT"


class BookingEngine:
    def __init__(
        self,
        slots: SlotRepositoryProtocol,
        waitlist: WaitlistRepositoryProtocol,
        members: MemberRepositoryProtocol,
        app_settings: SettingsRepositoryProtocol,
        club_id: str,
        timezone_name: str | None = None,
    ) -> None:
        self._slots = slots
        self._waitlist = waitlist
        self._members = members
        self._settings = app_settings
        self._club_id = club_id
        self._tz = timezone_name or settings.CLUB_TIMEZONE

    async def load_policy(self, db: AsyncSession) -> BookingPolicy:
        app_settings = await self._settings.get_settings(db, self._club_id)
        if app_settings is None:
            raise SettingsNotFoundError(self._club_id)
        return BookingPolicy.from_settings(app_settings)

    async def _lock_slot(self, db: AsyncSession, slot_id: str) -> Slot:
        slot = await self._slots.get_slot_for_update(db, self._club_id, slot_id)
        if slot is None:
            raise SlotNotFoundError(slot_id)
        return slot

    async def _lock_member(self, db: AsyncSession, member_id: str) -> Member:
        member = await self._members.get_member_for_update(db, self._club_id, member_id)
        if member is None:
            raise MemberNotFoundError(member_id)
        return member

    async def book_slot(
        self,
        db: AsyncSession,
        member_id: str,
        slot_id: str,
        join_waitlist_if_full: bool = True,
    ) -> BookingResult:
        """Book an open slot, or queue for a held (or taken) one.

        A held slot always queues the caller. A slot booked by someone else
        queues the caller only when join_waitlist_if_full is set; otherwise
        it is rejected as already booked.
        """
        slot = await self._lock_slot(db, slot_id)
        member = await self._lock_member(db, member_id)
        policy = await self.load_policy(db)
        entries = await self._waitlist.list_entries(db, slot.id)
        same_time = await self._slots.find_booked_at(
            db, self._club_id, member.id, slot.start_time
        )

        taken_by_other = slot.is_booked and slot.booked_by != member.id
        if slot.is_held or (taken_by_other and join_waitlist_if_full):
            return await self._join_waitlist(db, slot, member.id, entries)

        check_min_balance(member, policy)
        check_bookable(slot)
        check_no_double_booking(slot, same_time)

        # A booker still queued for this slot leaves the queue
        if any(e.member_id == member.id for e in entries):
            await self._waitlist.remove(db, slot.id, member.id)
            entries = [e for e in entries if e.member_id != member.id]

        member, entry = await self._members.apply_balance_change(
            db,
            member.id,
            -policy.slot_booking_cost,
            LedgerEntryType.BOOKING.value,
            SLOT_REFERENCE,
            slot.id,
            f"Booked slot {slot.start_time.isoformat()}",
        )
        slot = await self._slots.mark_booked(db, slot.id, member.id)
        logger.info(
            "Slot %s booked by %s cost=%d balance=%d",
            slot.id,
            member.id,
            policy.slot_booking_cost,
            member.balance,
        )
        return BookingResult(
            slot=slot,
            booked=True,
            waitlist_head_member_id=entries[0].member_id if entries else None,
            balance_after=member.balance,
            ledger_entry_id=entry.id,
        )

    async def _join_waitlist(
        self,
        db: AsyncSession,
        slot: Slot,
        member_id: str,
        entries: list[WaitlistEntry],
    ) -> BookingResult:
        check_not_waitlisted(slot, member_id, entries)
        await self._waitlist.append(db, slot.id, member_id)
        position = len(entries) + 1
        logger.info("Member %s waitlisted for slot %s at position %d", member_id, slot.id, position)
        return BookingResult(slot=slot, booked=False, waitlist_position=position)

    async def cancel_slot(
        self,
        db: AsyncSession,
        member_id: str,
        slot_id: str,
        slot_timestamp: datetime | None = None,
        now: datetime | None = None,
    ) -> CancelResult:
        """Release the caller's booking, refunding it ahead of the deadline.

        The waitlist head is popped and reported; it is not booked
        automatically. For a slot starting today the remaining waitlisted
        members are reported as well.
        """
        slot = await self._lock_slot(db, slot_id)
        check_cancellable(slot, member_id, slot_timestamp)
        member = await self._lock_member(db, member_id)
        policy = await self.load_policy(db)

        now = now or utc_now()
        hours_until_start = hours_between(now, slot.start_time)
        refunded = hours_until_start >= policy.cancellation_deadline_hours
        if refunded:
            amount = policy.slot_booking_cost
            entry_type = LedgerEntryType.CANCELLATION_REFUND
            description = f"Refund for cancelled slot {slot.start_time.isoformat()}"
        else:
            amount = 0
            entry_type = LedgerEntryType.CANCELLATION_NO_REFUND
            description = (
                f"Late cancellation ({hours_until_start:.1f}h before start), no refund"
            )

        member, entry = await self._members.apply_balance_change(
            db, member.id, amount, entry_type.value, SLOT_REFERENCE, slot.id, description
        )
        slot = await self._slots.mark_released(db, slot.id)

        head = await self._waitlist.pop_head(db, slot.id)
        also_notify: tuple[str, ...] = ()
        if head is not None and same_local_day(slot.start_time, now, self._tz):
            remaining = await self._waitlist.list_entries(db, slot.id)
            also_notify = tuple(e.member_id for e in remaining)

        logger.info(
            "Slot %s cancelled by %s refunded=%s promoted=%s",
            slot.id,
            member.id,
            refunded,
            head.member_id if head else None,
        )
        return CancelResult(
            slot=slot,
            refunded=refunded,
            refund_amount=amount,
            balance_after=member.balance,
            ledger_entry_id=entry.id,
            promoted_member_id=head.member_id if head else None,
            also_notify_member_ids=also_notify,
        )

    async def leave_waitlist(self, db: AsyncSession, member_id: str, slot_id: str) -> Slot:
        slot = await self._lock_slot(db, slot_id)
        removed = await self._waitlist.remove(db, slot.id, member_id)
        if not removed:
            raise NotOnWaitlistError(slot.id)
        logger.info("Member %s left waitlist of slot %s", member_id, slot.id)
        return slot
