"""MatchApplicationService — drives the match state machine in a unit of work.

Lock order inside a transaction: the match row first, then (only when the
match becomes confirmed) the member rows sorted by id via RatingService.
Notifications are dispatched after commit.
"""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bc_account.domain.guards import load_admin
from src.bc_account.domain.repository import MemberRepositoryProtocol
from src.bc_account.infrastructure.persistence import MemberRepository
from src.bc_common.database import run_in_transaction
from src.bc_common.datetime_utils import utc_now
from src.bc_common.enums import CancellationAction, MatchStatus, NotificationType
from src.bc_common.errors import MatchNotFoundError, MemberNotFoundError
from src.bc_common.id_generator import generate_id
from src.bc_match.application.schemas import MatchListResponse, MatchResponse
from src.bc_match.domain import state_machine
from src.bc_match.domain.models import Match
from src.bc_match.domain.repository import MatchRepositoryProtocol
from src.bc_match.infrastructure.persistence import MatchRepository
from src.bc_notify.application.service import get_notification_sink
from src.bc_notify.domain.models import NotificationEvent
from src.bc_notify.domain.sink import NotificationSink, dispatch_events
from src.bc_rating.application.service import RatingService
from src.bc_rating.domain.models import MatchHistoryEntry, MatchResult

logger = logging.getLogger(__name__)


def _event(kind: NotificationType, match: Match, member_ids: list[str]) -> NotificationEvent:
    return NotificationEvent(
        kind,
        tuple(member_ids),
        {
            "match_id": match.id,
            "status": match.status,
            "slot_time": match.slot_time.isoformat(),
        },
    )


def _confirmation_events(match: Match, actor_id: str) -> list[NotificationEvent]:
    status = MatchStatus(match.status)
    if status is MatchStatus.CONFIRMED:
        return [_event(NotificationType.MATCH_CONFIRMED, match, match.players)]
    if status is MatchStatus.AWAITING_SCORES:
        others = [p for p in match.players if p != actor_id]
        return [_event(NotificationType.MATCH_AWAITING_SCORES, match, others)]
    return [_event(NotificationType.MATCH_PENDING_CONFIRMATION, match, match.unconfirmed_players)]


class MatchApplicationService:
    def __init__(
        self,
        matches: MatchRepositoryProtocol | None = None,
        members: MemberRepositoryProtocol | None = None,
        rating: RatingService | None = None,
        sink: NotificationSink | None = None,
        club_id: str | None = None,
    ) -> None:
        self._matches: MatchRepositoryProtocol = matches or MatchRepository()
        self._members: MemberRepositoryProtocol = members or MemberRepository()
        self._club_id = club_id or settings.CLUB_ID
        self._rating = rating or RatingService(self._members, club_id=self._club_id)
        self._sink = sink

    @property
    def sink(self) -> NotificationSink:
        return self._sink or get_notification_sink()

    async def _lock_match(self, db: AsyncSession, match_id: str) -> Match:
        match = await self._matches.get_for_update(db, self._club_id, match_id)
        if match is None:
            raise MatchNotFoundError(match_id)
        return match

    async def _apply_ratings(
        self, db: AsyncSession, match: Match, now: datetime
    ) -> list[MatchHistoryEntry]:
        return await self._rating.apply_result(
            db,
            MatchResult(
                match_id=match.id,
                team1=tuple(match.team1),
                team2=tuple(match.team2),
                score1=match.score1,  # type: ignore[arg-type]
                score2=match.score2,  # type: ignore[arg-type]
                slot_time=match.slot_time,
            ),
            now=now,
        )

    async def create_match(
        self,
        db: AsyncSession,
        creator_id: str,
        team1: list[str],
        team2: list[str],
        game_type: str,
        slot_time: datetime,
        score1: int | None = None,
        score2: int | None = None,
    ) -> MatchResponse:
        async def _work(session: AsyncSession) -> Match:
            match = state_machine.new_match(
                generate_id("MCH"),
                self._club_id,
                creator_id,
                team1,
                team2,
                game_type,
                slot_time,
                score1,
                score2,
                now=utc_now(),
            )
            for player in match.players:
                if await self._members.get_member(session, self._club_id, player) is None:
                    raise MemberNotFoundError(player)
            return await self._matches.create(session, match)

        match = await run_in_transaction(db, _work)
        logger.info("Match %s created by %s (%s)", match.id, creator_id, match.game_type)
        await dispatch_events(
            self.sink,
            [_event(NotificationType.MATCH_PENDING_CONFIRMATION, match, match.unconfirmed_players)],
        )
        return MatchResponse.from_match(match)

    async def confirm_match(
        self,
        db: AsyncSession,
        actor_id: str,
        match_id: str,
        score1: int | None = None,
        score2: int | None = None,
    ) -> MatchResponse:
        async def _work(session: AsyncSession) -> tuple[Match, list[MatchHistoryEntry]]:
            match = await self._lock_match(session, match_id)
            now = utc_now()
            status = state_machine.confirm(match, actor_id, score1, score2, now=now)
            match = await self._matches.save(session, match)

            changes: list[MatchHistoryEntry] = []
            if status is MatchStatus.CONFIRMED:
                changes = await self._apply_ratings(session, match, now)
            return match, changes

        match, changes = await run_in_transaction(db, _work)
        logger.info("Match %s confirmed by %s -> %s", match.id, actor_id, match.status)
        await dispatch_events(self.sink, _confirmation_events(match, actor_id))
        return MatchResponse.from_match(match, rating_changes=changes)

    async def reject_match(self, db: AsyncSession, admin_id: str, match_id: str) -> MatchResponse:
        async def _work(session: AsyncSession) -> Match:
            await load_admin(self._members, session, self._club_id, admin_id)
            match = await self._lock_match(session, match_id)
            state_machine.reject(match, admin_id, now=utc_now())
            return await self._matches.save(session, match)

        match = await run_in_transaction(db, _work)
        logger.info("Match %s rejected by admin %s", match.id, admin_id)
        await dispatch_events(
            self.sink, [_event(NotificationType.MATCH_REJECTED, match, match.players)]
        )
        return MatchResponse.from_match(match)

    async def request_cancellation(
        self, db: AsyncSession, actor_id: str, match_id: str
    ) -> MatchResponse:
        async def _work(session: AsyncSession) -> Match:
            match = await self._lock_match(session, match_id)
            state_machine.request_cancellation(match, actor_id, now=utc_now())
            return await self._matches.save(session, match)

        match = await run_in_transaction(db, _work)
        logger.info("Cancellation of match %s requested by %s", match.id, actor_id)
        others = [p for p in match.players if p != actor_id]
        await dispatch_events(
            self.sink, [_event(NotificationType.MATCH_CANCELLATION_REQUESTED, match, others)]
        )
        return MatchResponse.from_match(match)

    async def process_cancellation(
        self,
        db: AsyncSession,
        admin_id: str,
        match_id: str,
        action: CancellationAction,
    ) -> MatchResponse:
        async def _work(session: AsyncSession) -> Match:
            await load_admin(self._members, session, self._club_id, admin_id)
            match = await self._lock_match(session, match_id)
            state_machine.process_cancellation(match, admin_id, action)
            return await self._matches.save(session, match)

        match = await run_in_transaction(db, _work)
        logger.info("Admin %s processed cancellation of %s: %s", admin_id, match.id, action.value)
        kind = (
            NotificationType.MATCH_CANCELLED
            if action is CancellationAction.APPROVE
            else NotificationType.MATCH_CANCELLATION_DECLINED
        )
        await dispatch_events(self.sink, [_event(kind, match, match.players)])
        return MatchResponse.from_match(match)

    async def admin_update(
        self, db: AsyncSession, admin_id: str, match_id: str, updates: dict[str, Any]
    ) -> MatchResponse:
        """Patch a match as admin.

        A match that enters confirmed with both scores set is rated in the
        same transaction, exactly as a player confirmation would rate it.
        """

        async def _work(
            session: AsyncSession,
        ) -> tuple[Match, list[str], list[MatchHistoryEntry]]:
            await load_admin(self._members, session, self._club_id, admin_id)
            match = await self._lock_match(session, match_id)
            was_confirmed = match.status == MatchStatus.CONFIRMED.value
            changed = state_machine.admin_update(match, updates)
            if not changed:
                return match, changed, []
            match = await self._matches.save(session, match)

            changes: list[MatchHistoryEntry] = []
            now_confirmed = match.status == MatchStatus.CONFIRMED.value
            if now_confirmed and not was_confirmed and match.has_scores:
                changes = await self._apply_ratings(session, match, utc_now())
            return match, changed, changes

        match, changed, changes = await run_in_transaction(db, _work)
        logger.warning("Admin %s patched match %s fields=%s", admin_id, match.id, changed)
        if changes:
            await dispatch_events(
                self.sink, [_event(NotificationType.MATCH_CONFIRMED, match, match.players)]
            )
        return MatchResponse.from_match(match, updated_fields=changed, rating_changes=changes)

    async def get_match(self, db: AsyncSession, match_id: str) -> MatchResponse:
        match = await self._matches.get(db, self._club_id, match_id)
        if match is None:
            raise MatchNotFoundError(match_id)
        return MatchResponse.from_match(match)

    async def list_my_matches(
        self,
        db: AsyncSession,
        member_id: str,
        status: MatchStatus | None,
        limit: int,
        offset: int,
    ) -> MatchListResponse:
        matches = await self._matches.list_for_member(
            db, self._club_id, member_id, status.value if status else None, limit, offset
        )
        return MatchListResponse(
            items=[MatchResponse.from_match(m) for m in matches], limit=limit, offset=offset
        )
