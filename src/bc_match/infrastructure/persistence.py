"""MatchRepository — raw SQL over the caller's AsyncSession.

save() writes every mutable column guarded by the row version, so a write
based on a stale read fails loudly instead of silently overwriting.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bc_common.errors import InternalError, MatchNotFoundError
from src.bc_match.domain.models import Match

_COLUMNS = """
    id, club_id, team1, team2, slot_time, game_type, score1, score2, status,
    created_by, confirmed_by, submitted_by, submitted_at, rejected_by, rejected_at,
    cancellation_requested_by, cancellation_requested_at, status_before_cancellation,
    cancellation_processed_by, version, created_at, updated_at
"""

_INSERT_SQL = text(f"""
    INSERT INTO matches
        (id, club_id, team1, team2, slot_time, game_type, score1, score2, status,
         created_by, confirmed_by, submitted_by, submitted_at)
    VALUES
        (:id, :club_id, :team1, :team2, :slot_time, :game_type, :score1, :score2, :status,
         :created_by, :confirmed_by, :submitted_by, :submitted_at)
    RETURNING {_COLUMNS}
""")

_GET_SQL = text(f"""
    SELECT {_COLUMNS} FROM matches
    WHERE club_id = :club_id AND id = :match_id
""")

_GET_FOR_UPDATE_SQL = text(f"""
    SELECT {_COLUMNS} FROM matches
    WHERE club_id = :club_id AND id = :match_id
    FOR UPDATE
""")

_SAVE_SQL = text(f"""
    UPDATE matches
    SET slot_time = :slot_time,
        game_type = :game_type,
        score1 = :score1,
        score2 = :score2,
        status = :status,
        confirmed_by = :confirmed_by,
        submitted_by = :submitted_by,
        submitted_at = :submitted_at,
        rejected_by = :rejected_by,
        rejected_at = :rejected_at,
        cancellation_requested_by = :cancellation_requested_by,
        cancellation_requested_at = :cancellation_requested_at,
        status_before_cancellation = :status_before_cancellation,
        cancellation_processed_by = :cancellation_processed_by,
        version = version + 1,
        updated_at = NOW()
    WHERE id = :id AND version = :version
    RETURNING {_COLUMNS}
""")

_LIST_FOR_MEMBER_SQL = text(f"""
    SELECT {_COLUMNS} FROM matches
    WHERE club_id = :club_id
      AND (CAST(:member_id AS TEXT) = ANY(team1) OR CAST(:member_id AS TEXT) = ANY(team2))
      AND (CAST(:status AS TEXT) IS NULL OR status = :status)
    ORDER BY slot_time DESC, id DESC
    LIMIT :limit OFFSET :offset
""")


def _row_to_match(row: object) -> Match:
    return Match(
        id=row.id,  # type: ignore[attr-defined]
        club_id=row.club_id,  # type: ignore[attr-defined]
        team1=list(row.team1),  # type: ignore[attr-defined]
        team2=list(row.team2),  # type: ignore[attr-defined]
        slot_time=row.slot_time,  # type: ignore[attr-defined]
        game_type=row.game_type,  # type: ignore[attr-defined]
        score1=row.score1,  # type: ignore[attr-defined]
        score2=row.score2,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        created_by=row.created_by,  # type: ignore[attr-defined]
        confirmed_by=list(row.confirmed_by or []),  # type: ignore[attr-defined]
        submitted_by=row.submitted_by,  # type: ignore[attr-defined]
        submitted_at=row.submitted_at,  # type: ignore[attr-defined]
        rejected_by=row.rejected_by,  # type: ignore[attr-defined]
        rejected_at=row.rejected_at,  # type: ignore[attr-defined]
        cancellation_requested_by=row.cancellation_requested_by,  # type: ignore[attr-defined]
        cancellation_requested_at=row.cancellation_requested_at,  # type: ignore[attr-defined]
        status_before_cancellation=row.status_before_cancellation,  # type: ignore[attr-defined]
        cancellation_processed_by=row.cancellation_processed_by,  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class MatchRepository:
    async def create(self, db: AsyncSession, match: Match) -> Match:
        result = await db.execute(
            _INSERT_SQL,
            {
                "id": match.id,
                "club_id": match.club_id,
                "team1": match.team1,
                "team2": match.team2,
                "slot_time": match.slot_time,
                "game_type": match.game_type,
                "score1": match.score1,
                "score2": match.score2,
                "status": match.status,
                "created_by": match.created_by,
                "confirmed_by": match.confirmed_by,
                "submitted_by": match.submitted_by,
                "submitted_at": match.submitted_at,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Match insert returned no rows")
        return _row_to_match(row)

    async def get(self, db: AsyncSession, club_id: str, match_id: str) -> Match | None:
        result = await db.execute(_GET_SQL, {"club_id": club_id, "match_id": match_id})
        row = result.fetchone()
        return _row_to_match(row) if row else None

    async def get_for_update(
        self, db: AsyncSession, club_id: str, match_id: str
    ) -> Match | None:
        result = await db.execute(
            _GET_FOR_UPDATE_SQL, {"club_id": club_id, "match_id": match_id}
        )
        row = result.fetchone()
        return _row_to_match(row) if row else None

    async def save(self, db: AsyncSession, match: Match) -> Match:
        result = await db.execute(
            _SAVE_SQL,
            {
                "id": match.id,
                "version": match.version,
                "slot_time": match.slot_time,
                "game_type": match.game_type,
                "score1": match.score1,
                "score2": match.score2,
                "status": match.status,
                "confirmed_by": match.confirmed_by,
                "submitted_by": match.submitted_by,
                "submitted_at": match.submitted_at,
                "rejected_by": match.rejected_by,
                "rejected_at": match.rejected_at,
                "cancellation_requested_by": match.cancellation_requested_by,
                "cancellation_requested_at": match.cancellation_requested_at,
                "status_before_cancellation": match.status_before_cancellation,
                "cancellation_processed_by": match.cancellation_processed_by,
            },
        )
        row = result.fetchone()
        if row is None:
            # Row is locked FOR UPDATE by the caller, so a miss means it vanished
            raise MatchNotFoundError(match.id)
        return _row_to_match(row)

    async def list_for_member(
        self,
        db: AsyncSession,
        club_id: str,
        member_id: str,
        status: str | None,
        limit: int,
        offset: int,
    ) -> list[Match]:
        result = await db.execute(
            _LIST_FOR_MEMBER_SQL,
            {
                "club_id": club_id,
                "member_id": member_id,
                "status": status,
                "limit": limit,
                "offset": offset,
            },
        )
        return [_row_to_match(row) for row in result.fetchall()]
