"""BookingApplicationService — wraps BookingEngine calls in a unit of work.

Each operation runs the engine inside run_in_transaction and, only after
the commit succeeded, hands the resulting notifications to the sink.
"""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bc_account.domain.guards import load_admin
from src.bc_account.domain.repository import MemberRepositoryProtocol
from src.bc_account.infrastructure.persistence import MemberRepository
from src.bc_admin.domain.repository import SettingsRepositoryProtocol
from src.bc_admin.infrastructure.settings_repository import SettingsRepository
from src.bc_booking.application.schemas import (
    BookingResponse,
    CancelResponse,
    RecurringSlotsResponse,
    SlotListResponse,
    SlotResponse,
)
from src.bc_booking.domain.engine import BookingEngine
from src.bc_booking.domain.models import BookingResult, CancelResult, Slot
from src.bc_booking.domain.recurrence import weekly_start_times
from src.bc_booking.domain.repository import (
    SlotRepositoryProtocol,
    WaitlistRepositoryProtocol,
)
from src.bc_booking.infrastructure.persistence import SlotRepository, WaitlistRepository
from src.bc_common.database import run_in_transaction
from src.bc_common.datetime_utils import ensure_utc, utc_now
from src.bc_common.enums import NotificationType
from src.bc_common.errors import InvalidSlotRequestError
from src.bc_common.id_generator import generate_id
from src.bc_notify.application.service import get_notification_sink
from src.bc_notify.domain.models import NotificationEvent
from src.bc_notify.domain.sink import NotificationSink, dispatch_events

logger = logging.getLogger(__name__)


def _booking_events(member_id: str, result: BookingResult) -> list[NotificationEvent]:
    payload = {"slot_id": result.slot.id, "start_time": result.slot.start_time.isoformat()}
    if result.booked:
        return [NotificationEvent(NotificationType.SLOT_BOOKED, (member_id,), payload)]
    return [
        NotificationEvent(
            NotificationType.WAITLIST_JOINED,
            (member_id,),
            {**payload, "position": result.waitlist_position},
        )
    ]


def _cancel_events(member_id: str, result: CancelResult) -> list[NotificationEvent]:
    payload = {"slot_id": result.slot.id, "start_time": result.slot.start_time.isoformat()}
    events = [
        NotificationEvent(
            NotificationType.SLOT_CANCELLED,
            (member_id,),
            {**payload, "refunded": result.refunded, "refund_cents": result.refund_amount},
        )
    ]
    notify = []
    if result.promoted_member_id:
        notify.append(result.promoted_member_id)
    notify.extend(result.also_notify_member_ids)
    if notify:
        events.append(NotificationEvent(NotificationType.SLOT_AVAILABLE, tuple(notify), payload))
    return events


class BookingApplicationService:
    def __init__(
        self,
        slots: SlotRepositoryProtocol | None = None,
        waitlist: WaitlistRepositoryProtocol | None = None,
        members: MemberRepositoryProtocol | None = None,
        app_settings: SettingsRepositoryProtocol | None = None,
        sink: NotificationSink | None = None,
        club_id: str | None = None,
    ) -> None:
        self._slots: SlotRepositoryProtocol = slots or SlotRepository()
        self._waitlist: WaitlistRepositoryProtocol = waitlist or WaitlistRepository()
        self._members: MemberRepositoryProtocol = members or MemberRepository()
        self._club_id = club_id or settings.CLUB_ID
        self._sink = sink
        self._engine = BookingEngine(
            self._slots,
            self._waitlist,
            self._members,
            app_settings or SettingsRepository(),
            self._club_id,
        )

    @property
    def sink(self) -> NotificationSink:
        return self._sink or get_notification_sink()

    async def book_slot(
        self,
        db: AsyncSession,
        member_id: str,
        slot_id: str,
        join_waitlist_if_full: bool = True,
    ) -> BookingResponse:
        async def _work(session: AsyncSession) -> BookingResult:
            return await self._engine.book_slot(session, member_id, slot_id, join_waitlist_if_full)

        result = await run_in_transaction(db, _work)
        await dispatch_events(self.sink, _booking_events(member_id, result))
        return BookingResponse.from_result(result)

    async def cancel_slot(
        self,
        db: AsyncSession,
        member_id: str,
        slot_id: str,
        slot_timestamp: datetime | None = None,
    ) -> CancelResponse:
        async def _work(session: AsyncSession) -> CancelResult:
            return await self._engine.cancel_slot(session, member_id, slot_id, slot_timestamp)

        result = await run_in_transaction(db, _work)
        await dispatch_events(self.sink, _cancel_events(member_id, result))
        return CancelResponse.from_result(result)

    async def leave_waitlist(self, db: AsyncSession, member_id: str, slot_id: str) -> SlotResponse:
        async def _work(session: AsyncSession) -> tuple[Slot, int]:
            slot = await self._engine.leave_waitlist(session, member_id, slot_id)
            counts = await self._waitlist.count_by_slot(session, [slot.id])
            return slot, counts.get(slot.id, 0)

        slot, remaining = await run_in_transaction(db, _work)
        return SlotResponse.from_slot(slot, remaining)

    async def list_slots(
        self,
        db: AsyncSession,
        start_from: datetime | None,
        start_to: datetime | None,
        limit: int,
    ) -> SlotListResponse:
        slots = await self._slots.list_slots(
            db,
            self._club_id,
            ensure_utc(start_from) if start_from else None,
            ensure_utc(start_to) if start_to else None,
            limit,
        )
        counts = await self._waitlist.count_by_slot(db, [s.id for s in slots])
        return SlotListResponse(
            items=[SlotResponse.from_slot(s, counts.get(s.id, 0)) for s in slots]
        )

    # ------------------------------------------------------------------
    # Admin: slot creation
    # ------------------------------------------------------------------

    async def create_slot(
        self,
        db: AsyncSession,
        admin_id: str,
        start_time: datetime,
        available: bool = True,
    ) -> SlotResponse:
        start = ensure_utc(start_time)
        if start <= utc_now():
            raise InvalidSlotRequestError("start_time must be in the future")

        async def _work(session: AsyncSession) -> Slot:
            await load_admin(self._members, session, self._club_id, admin_id)
            return await self._slots.create_slot(
                session,
                Slot(
                    id=generate_id("SLT"),
                    club_id=self._club_id,
                    start_time=start,
                    available=available,
                    created_by=admin_id,
                ),
            )

        slot = await run_in_transaction(db, _work)
        logger.info("Admin %s created slot %s at %s", admin_id, slot.id, slot.start_time)
        return SlotResponse.from_slot(slot)

    async def create_recurring_slots(
        self,
        db: AsyncSession,
        admin_id: str,
        first_start_time: datetime,
        weeks: int,
    ) -> RecurringSlotsResponse:
        start_times = weekly_start_times(first_start_time, weeks)
        if start_times[0] <= utc_now():
            raise InvalidSlotRequestError("first_start_time must be in the future")

        async def _work(session: AsyncSession) -> list[Slot]:
            await load_admin(self._members, session, self._club_id, admin_id)
            created = []
            for start in start_times:
                slot = await self._slots.create_slot(
                    session,
                    Slot(
                        id=generate_id("SLT"),
                        club_id=self._club_id,
                        start_time=start,
                        is_recurring=True,
                        created_by=admin_id,
                    ),
                )
                created.append(slot)
            return created

        created = await run_in_transaction(db, _work)
        logger.info("Admin %s created %d recurring slots", admin_id, len(created))
        return RecurringSlotsResponse(
            created=len(created), items=[SlotResponse.from_slot(s) for s in created]
        )
