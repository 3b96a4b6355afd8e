"""RatingService — applies a confirmed match to member ratings.

apply_result runs inside the confirming transaction: the member rows are
locked (sorted by id), every player gets a new rating, incremented counters
and exactly one history row. Nothing here commits.
"""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bc_account.application.schemas import cursor_decode, cursor_encode
from src.bc_account.domain.models import DEFAULT_RATING, Member
from src.bc_account.domain.repository import MemberRepositoryProtocol
from src.bc_account.infrastructure.persistence import MemberRepository
from src.bc_common.datetime_utils import utc_now
from src.bc_common.enums import MatchOutcome
from src.bc_rating.application.schemas import MatchHistoryItem, MatchHistoryResponse
from src.bc_rating.domain.elo import DRAW, WIN, rating_after, team1_outcome, team_average
from src.bc_rating.domain.models import MatchHistoryEntry, MatchResult
from src.bc_rating.domain.repository import MatchHistoryRepositoryProtocol
from src.bc_rating.infrastructure.persistence import MatchHistoryRepository

logger = logging.getLogger(__name__)


def _outcome_label(outcome: float) -> MatchOutcome:
    if outcome == WIN:
        return MatchOutcome.WIN
    if outcome == DRAW:
        return MatchOutcome.DRAW
    return MatchOutcome.LOSS


def _apply_counters(member: Member, outcome: MatchOutcome, new_rating: int, at: datetime) -> None:
    member.rating = new_rating
    member.games_played += 1
    if outcome is MatchOutcome.WIN:
        member.wins += 1
    elif outcome is MatchOutcome.LOSS:
        member.losses += 1
    else:
        member.draws += 1
    member.last_game_at = at


class RatingService:
    def __init__(
        self,
        members: MemberRepositoryProtocol | None = None,
        history: MatchHistoryRepositoryProtocol | None = None,
        club_id: str | None = None,
    ) -> None:
        self._members: MemberRepositoryProtocol = members or MemberRepository()
        self._history: MatchHistoryRepositoryProtocol = history or MatchHistoryRepository()
        self._club_id = club_id or settings.CLUB_ID

    async def apply_result(
        self, db: AsyncSession, result: MatchResult, now: datetime | None = None
    ) -> list[MatchHistoryEntry]:
        """Rate every player of a confirmed match; returns the new history rows.

        A match is rated once. If history rows already exist for it nothing
        changes and an empty list is returned.
        """
        if await self._history.list_for_match(db, result.match_id):
            logger.info("Match %s already rated, skipping", result.match_id)
            return []
        now = now or utc_now()
        players = [*result.team1, *result.team2]
        members = await self._members.get_members_for_update(db, self._club_id, players)

        def rating_of(member_id: str) -> int:
            m = members.get(member_id)
            return m.rating if m else DEFAULT_RATING

        team1_avg = team_average(rating_of(p) for p in result.team1)
        team2_avg = team_average(rating_of(p) for p in result.team2)
        outcome1 = team1_outcome(result.score1, result.score2)

        entries: list[MatchHistoryEntry] = []
        for member_id in players:
            member = members.get(member_id)
            if member is None:
                logger.warning(
                    "Match %s: member %s has no profile, rating skipped", result.match_id, member_id
                )
                continue

            on_team1 = member_id in result.team1
            outcome = outcome1 if on_team1 else 1 - outcome1
            opponent_avg = team2_avg if on_team1 else team1_avg
            old_rating = member.rating
            new_rating = rating_after(old_rating, member.games_played, opponent_avg, outcome)
            label = _outcome_label(outcome)

            _apply_counters(member, label, new_rating, now)
            await self._members.update_rating(db, member)

            entry = await self._history.insert(
                db,
                MatchHistoryEntry(
                    member_id=member_id,
                    match_id=result.match_id,
                    old_rating=old_rating,
                    new_rating=new_rating,
                    rating_change=new_rating - old_rating,
                    outcome=label.value,
                    team=list(result.team1 if on_team1 else result.team2),
                    opponents=list(result.team2 if on_team1 else result.team1),
                    score_for=result.score1 if on_team1 else result.score2,
                    score_against=result.score2 if on_team1 else result.score1,
                    slot_time=result.slot_time,
                ),
            )
            entries.append(entry)

        logger.info(
            "Ratings applied for match %s: %s",
            result.match_id,
            ", ".join(f"{e.member_id}:{e.old_rating}->{e.new_rating}" for e in entries),
        )
        return entries

    async def list_history(
        self, db: AsyncSession, member_id: str, cursor: str | None, limit: int
    ) -> MatchHistoryResponse:
        rows = await self._history.list_for_member(db, member_id, cursor_decode(cursor), limit + 1)
        has_more = len(rows) > limit
        page = rows[:limit]
        items = [MatchHistoryItem.from_entry(e) for e in page]
        next_cursor = cursor_encode(page[-1].id) if has_more and page and page[-1].id else None
        return MatchHistoryResponse(items=items, next_cursor=next_cursor, has_more=has_more)
