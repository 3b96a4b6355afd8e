"""AccountApplicationService — balance, ledger and leaderboard operations.

Every balance mutation runs inside run_in_transaction with the member row
locked FOR UPDATE, so top-ups cannot race bookings/cancellations on the same
member. Notifications are dispatched only after commit.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bc_account.application.schemas import (
    BalanceAdjustmentResponse,
    BalanceResponse,
    LeaderboardItem,
    LeaderboardResponse,
    LedgerEntryItem,
    LedgerResponse,
    TopUpResponse,
    cursor_decode,
    cursor_encode,
)
from src.bc_account.domain.guards import load_admin
from src.bc_account.domain.models import LedgerEntry, Member
from src.bc_account.domain.repository import MemberRepositoryProtocol
from src.bc_account.infrastructure.persistence import MemberRepository
from src.bc_common.cents import cents_to_display, validate_positive_amount
from src.bc_common.database import run_in_transaction
from src.bc_common.enums import LedgerEntryType, NotificationType
from src.bc_common.errors import (
    InvalidAmountError,
    MemberNotFoundError,
    NoPendingRegistrationFeeError,
)
from src.bc_notify.application.service import get_notification_sink
from src.bc_notify.domain.models import NotificationEvent
from src.bc_notify.domain.sink import NotificationSink, dispatch_events

logger = logging.getLogger(__name__)


class AccountApplicationService:
    def __init__(
        self,
        repo: MemberRepositoryProtocol | None = None,
        sink: NotificationSink | None = None,
        club_id: str | None = None,
    ) -> None:
        self._repo: MemberRepositoryProtocol = repo or MemberRepository()
        self._sink = sink
        self._club_id = club_id or settings.CLUB_ID

    @property
    def sink(self) -> NotificationSink:
        return self._sink or get_notification_sink()

    async def get_balance(self, db: AsyncSession, member_id: str) -> BalanceResponse:
        member = await self._repo.get_member(db, self._club_id, member_id)
        if member is None:
            raise MemberNotFoundError(member_id)
        return BalanceResponse.from_member(member)

    async def process_top_up(
        self, db: AsyncSession, member_id: str, amount_cents: int
    ) -> TopUpResponse:
        """Credit the balance, then settle any pending registration fee from it."""
        validate_positive_amount(amount_cents)

        async def _work(session: AsyncSession) -> tuple[Member, list[LedgerEntry], int]:
            member = await self._repo.get_member_for_update(session, self._club_id, member_id)
            if member is None:
                raise MemberNotFoundError(member_id)
            pending_fee = member.registration_fee_pending

            member, top_up = await self._repo.apply_balance_change(
                session,
                member_id,
                amount_cents,
                LedgerEntryType.TOP_UP.value,
                "TOP_UP",
                None,
                f"Balance top-up {cents_to_display(amount_cents)}",
            )
            entries = [top_up]
            if pending_fee > 0:
                member, fee_entry = await self._repo.apply_balance_change(
                    session,
                    member_id,
                    -pending_fee,
                    LedgerEntryType.REGISTRATION_FEE_DEDUCTED.value,
                    "REGISTRATION",
                    member_id,
                    f"Registration fee {cents_to_display(pending_fee)} deducted from top-up",
                )
                await self._repo.set_registration_fee_pending(session, member_id, 0)
                member.registration_fee_pending = 0
                entries.append(fee_entry)
            return member, entries, pending_fee

        member, entries, fee_deducted = await run_in_transaction(db, _work)
        logger.info(
            "Top-up member=%s amount=%d fee_deducted=%d balance=%d",
            member_id,
            amount_cents,
            fee_deducted,
            member.balance,
        )
        await dispatch_events(
            self.sink,
            [
                NotificationEvent(
                    type=NotificationType.BALANCE_TOPPED_UP,
                    member_ids=(member_id,),
                    payload={"amount_cents": amount_cents, "balance_cents": member.balance},
                )
            ],
        )
        return TopUpResponse(
            balance_cents=member.balance,
            balance_display=cents_to_display(member.balance),
            topped_up_cents=amount_cents,
            topped_up_display=cents_to_display(amount_cents),
            registration_fee_deducted_cents=fee_deducted,
            ledger_entry_ids=[e.id for e in entries],
        )

    async def admin_adjust_balance(
        self,
        db: AsyncSession,
        admin_id: str,
        member_id: str,
        amount_cents: int,
        reason: str,
    ) -> BalanceAdjustmentResponse:
        """Out-of-band correction; still goes through the ledger."""
        if amount_cents == 0:
            raise InvalidAmountError("adjustment must be non-zero")

        async def _work(session: AsyncSession) -> tuple[Member, LedgerEntry]:
            await load_admin(self._repo, session, self._club_id, admin_id)
            member = await self._repo.get_member_for_update(session, self._club_id, member_id)
            if member is None:
                raise MemberNotFoundError(member_id)
            return await self._repo.apply_balance_change(
                session,
                member_id,
                amount_cents,
                LedgerEntryType.ADMIN_ADJUSTMENT.value,
                "ADMIN",
                admin_id,
                reason,
            )

        member, entry = await run_in_transaction(db, _work)
        logger.info(
            "Admin %s adjusted balance of %s by %d (%s)", admin_id, member_id, amount_cents, reason
        )
        return BalanceAdjustmentResponse.from_result(member, entry)

    async def settle_registration_fee(
        self, db: AsyncSession, admin_id: str, member_id: str
    ) -> BalanceAdjustmentResponse:
        """Charge the pending registration fee from the member's current balance."""

        async def _work(session: AsyncSession) -> tuple[Member, LedgerEntry]:
            await load_admin(self._repo, session, self._club_id, admin_id)
            member = await self._repo.get_member_for_update(session, self._club_id, member_id)
            if member is None:
                raise MemberNotFoundError(member_id)
            fee = member.registration_fee_pending
            if fee <= 0:
                raise NoPendingRegistrationFeeError(member_id)
            member, entry = await self._repo.apply_balance_change(
                session,
                member_id,
                -fee,
                LedgerEntryType.REGISTRATION_FEE.value,
                "REGISTRATION",
                member_id,
                f"Registration fee {cents_to_display(fee)}",
            )
            await self._repo.set_registration_fee_pending(session, member_id, 0)
            member.registration_fee_pending = 0
            return member, entry

        member, entry = await run_in_transaction(db, _work)
        return BalanceAdjustmentResponse.from_result(member, entry)

    async def list_ledger(
        self,
        db: AsyncSession,
        member_id: str,
        cursor: str | None,
        limit: int,
        entry_type: str | None,
    ) -> LedgerResponse:
        cursor_id = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        entries = await self._repo.list_ledger_entries(
            db, member_id, cursor_id, limit + 1, entry_type
        )
        has_more = len(entries) > limit
        page = entries[:limit]

        items = [
            LedgerEntryItem(
                id=e.id,
                entry_type=e.entry_type,
                amount_cents=e.amount,
                amount_display=cents_to_display(e.amount),
                balance_after_cents=e.balance_after,
                balance_after_display=cents_to_display(e.balance_after),
                reference_type=e.reference_type,
                reference_id=e.reference_id,
                description=e.description,
                created_at=e.created_at.isoformat() if e.created_at else "",
            )
            for e in page
        ]

        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return LedgerResponse(items=items, next_cursor=next_cursor, has_more=has_more)

    async def leaderboard(self, db: AsyncSession, limit: int) -> LeaderboardResponse:
        members = await self._repo.list_leaderboard(db, self._club_id, limit)
        return LeaderboardResponse(
            items=[
                LeaderboardItem(
                    rank=i,
                    member_id=m.id,
                    name=m.name,
                    rating=m.rating,
                    games_played=m.games_played,
                    wins=m.wins,
                    losses=m.losses,
                    draws=m.draws,
                )
                for i, m in enumerate(members, start=1)
            ]
        )
