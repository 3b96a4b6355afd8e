"""MatchHistoryRepository — append-only match_history rows."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bc_common.errors import InternalError
from src.bc_rating.domain.models import MatchHistoryEntry

_COLUMNS = """
    id, member_id, match_id, old_rating, new_rating, rating_change, outcome,
    team, opponents, score_for, score_against, slot_time, created_at
"""

# UNIQUE(member_id, match_id): a replayed insert is a no-op, never a duplicate
_INSERT_SQL = text(f"""
    INSERT INTO match_history
        (member_id, match_id, old_rating, new_rating, rating_change, outcome,
         team, opponents, score_for, score_against, slot_time)
    VALUES
        (:member_id, :match_id, :old_rating, :new_rating, :rating_change, :outcome,
         :team, :opponents, :score_for, :score_against, :slot_time)
    ON CONFLICT (member_id, match_id) DO NOTHING
    RETURNING {_COLUMNS}
""")

_GET_SQL = text(f"""
    SELECT {_COLUMNS} FROM match_history
    WHERE member_id = :member_id AND match_id = :match_id
""")

_MATCH_SQL = text(f"""
    SELECT {_COLUMNS} FROM match_history
    WHERE match_id = :match_id
    ORDER BY id
""")

_LIST_SQL = text(f"""
    SELECT {_COLUMNS} FROM match_history
    WHERE member_id = :member_id
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < :cursor_id)
    ORDER BY id DESC
    LIMIT :limit
""")


def _row_to_entry(row: object) -> MatchHistoryEntry:
    return MatchHistoryEntry(
        id=row.id,  # type: ignore[attr-defined]
        member_id=row.member_id,  # type: ignore[attr-defined]
        match_id=row.match_id,  # type: ignore[attr-defined]
        old_rating=row.old_rating,  # type: ignore[attr-defined]
        new_rating=row.new_rating,  # type: ignore[attr-defined]
        rating_change=row.rating_change,  # type: ignore[attr-defined]
        outcome=row.outcome,  # type: ignore[attr-defined]
        team=list(row.team),  # type: ignore[attr-defined]
        opponents=list(row.opponents),  # type: ignore[attr-defined]
        score_for=row.score_for,  # type: ignore[attr-defined]
        score_against=row.score_against,  # type: ignore[attr-defined]
        slot_time=row.slot_time,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class MatchHistoryRepository:
    async def insert(self, db: AsyncSession, entry: MatchHistoryEntry) -> MatchHistoryEntry:
        params = {
            "member_id": entry.member_id,
            "match_id": entry.match_id,
            "old_rating": entry.old_rating,
            "new_rating": entry.new_rating,
            "rating_change": entry.rating_change,
            "outcome": entry.outcome,
            "team": entry.team,
            "opponents": entry.opponents,
            "score_for": entry.score_for,
            "score_against": entry.score_against,
            "slot_time": entry.slot_time,
        }
        row = (await db.execute(_INSERT_SQL, params)).fetchone()
        if row is None:
            row = (
                await db.execute(
                    _GET_SQL, {"member_id": entry.member_id, "match_id": entry.match_id}
                )
            ).fetchone()
        if row is None:
            raise InternalError("Match history insert returned no rows")
        return _row_to_entry(row)

    async def list_for_member(
        self, db: AsyncSession, member_id: str, cursor_id: int | None, limit: int
    ) -> list[MatchHistoryEntry]:
        result = await db.execute(
            _LIST_SQL, {"member_id": member_id, "cursor_id": cursor_id, "limit": limit}
        )
        return [_row_to_entry(row) for row in result.fetchall()]

    async def list_for_match(self, db: AsyncSession, match_id: str) -> list[MatchHistoryEntry]:
        result = await db.execute(_MATCH_SQL, {"match_id": match_id})
        return [_row_to_entry(row) for row in result.fetchall()]
