"""MemberRepository — concrete implementation of MemberRepositoryProtocol.

The member row is the single authoritative copy of balance and rating.
Balance is only ever changed by apply_balance_change, which updates the row
and appends the matching ledger entry in the caller's transaction.

Transaction ownership: The CALLER (application service / run_in_transaction)
is responsible for committing or rolling back.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bc_account.domain.models import LedgerEntry, Member
from src.bc_common.errors import InternalError, MemberNotFoundError

_MEMBER_COLUMNS = """
    id, club_id, name, role, rating, games_played, wins, losses, draws,
    balance, registration_fee_pending, last_game_at, version, created_at, updated_at
"""

_GET_MEMBER_SQL = text(f"""
    SELECT {_MEMBER_COLUMNS}
    FROM members
    WHERE club_id = :club_id AND id = :member_id
""")

_GET_MEMBER_FOR_UPDATE_SQL = text(f"""
    SELECT {_MEMBER_COLUMNS}
    FROM members
    WHERE club_id = :club_id AND id = :member_id
    FOR UPDATE
""")

# Locks in id order so concurrent multi-member transactions cannot deadlock
_GET_MEMBERS_FOR_UPDATE_SQL = text(f"""
    SELECT {_MEMBER_COLUMNS}
    FROM members
    WHERE club_id = :club_id AND id = ANY(CAST(:member_ids AS VARCHAR[]))
    ORDER BY id
    FOR UPDATE
""")

_INSERT_MEMBER_SQL = text(f"""
    INSERT INTO members
        (id, club_id, name, role, rating, balance, registration_fee_pending)
    VALUES
        (:id, :club_id, :name, :role, :rating, :balance, :registration_fee_pending)
    RETURNING {_MEMBER_COLUMNS}
""")

_APPLY_BALANCE_SQL = text(f"""
    UPDATE members
    SET balance = balance + :amount,
        version = version + 1,
        updated_at = NOW()
    WHERE id = :member_id
    RETURNING {_MEMBER_COLUMNS}
""")

_SET_FEE_PENDING_SQL = text("""
    UPDATE members
    SET registration_fee_pending = :amount,
        version = version + 1,
        updated_at = NOW()
    WHERE id = :member_id
""")

_UPDATE_RATING_SQL = text("""
    UPDATE members
    SET rating = :rating,
        games_played = :games_played,
        wins = :wins,
        losses = :losses,
        draws = :draws,
        last_game_at = :last_game_at,
        version = version + 1,
        updated_at = NOW()
    WHERE id = :member_id
""")

_INSERT_LEDGER_SQL = text("""
    INSERT INTO ledger_entries
        (member_id, entry_type, amount, balance_after,
         reference_type, reference_id, description)
    VALUES
        (:member_id, :entry_type, :amount, :balance_after,
         :reference_type, :reference_id, :description)
    RETURNING id, member_id, entry_type, amount, balance_after,
              reference_type, reference_id, description, created_at
""")

_LIST_LEDGER_SQL = text("""
    SELECT id, member_id, entry_type, amount, balance_after,
           reference_type, reference_id, description, created_at
    FROM ledger_entries
    WHERE member_id = :member_id
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < :cursor_id)
      AND (CAST(:entry_type AS TEXT) IS NULL OR entry_type = :entry_type)
    ORDER BY id DESC
    LIMIT :limit
""")

_LEADERBOARD_SQL = text(f"""
    SELECT {_MEMBER_COLUMNS}
    FROM members
    WHERE club_id = :club_id
    ORDER BY rating DESC, wins DESC, name ASC
    LIMIT :limit
""")


def _row_to_member(row: object) -> Member:
    return Member(
        id=row.id,  # type: ignore[attr-defined]
        club_id=row.club_id,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        role=row.role,  # type: ignore[attr-defined]
        rating=row.rating,  # type: ignore[attr-defined]
        games_played=row.games_played,  # type: ignore[attr-defined]
        wins=row.wins,  # type: ignore[attr-defined]
        losses=row.losses,  # type: ignore[attr-defined]
        draws=row.draws,  # type: ignore[attr-defined]
        balance=row.balance,  # type: ignore[attr-defined]
        registration_fee_pending=row.registration_fee_pending,  # type: ignore[attr-defined]
        last_game_at=row.last_game_at,  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_ledger(row: object) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,  # type: ignore[attr-defined]
        member_id=row.member_id,  # type: ignore[attr-defined]
        entry_type=row.entry_type,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        balance_after=row.balance_after,  # type: ignore[attr-defined]
        reference_type=row.reference_type,  # type: ignore[attr-defined]
        reference_id=row.reference_id,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class MemberRepository:
    """Concrete repository — balance mutations are atomic at the SQL level."""

    async def get_member(
        self, db: AsyncSession, club_id: str, member_id: str
    ) -> Member | None:
        result = await db.execute(
            _GET_MEMBER_SQL, {"club_id": club_id, "member_id": member_id}
        )
        row = result.fetchone()
        return _row_to_member(row) if row else None

    async def get_member_for_update(
        self, db: AsyncSession, club_id: str, member_id: str
    ) -> Member | None:
        result = await db.execute(
            _GET_MEMBER_FOR_UPDATE_SQL, {"club_id": club_id, "member_id": member_id}
        )
        row = result.fetchone()
        return _row_to_member(row) if row else None

    async def get_members_for_update(
        self, db: AsyncSession, club_id: str, member_ids: list[str]
    ) -> dict[str, Member]:
        result = await db.execute(
            _GET_MEMBERS_FOR_UPDATE_SQL,
            {"club_id": club_id, "member_ids": sorted(set(member_ids))},
        )
        members = [_row_to_member(row) for row in result.fetchall()]
        return {m.id: m for m in members}

    async def create_member(self, db: AsyncSession, member: Member) -> Member:
        result = await db.execute(
            _INSERT_MEMBER_SQL,
            {
                "id": member.id,
                "club_id": member.club_id,
                "name": member.name,
                "role": member.role,
                "rating": member.rating,
                "balance": member.balance,
                "registration_fee_pending": member.registration_fee_pending,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Member insert returned no rows — this should never happen")
        return _row_to_member(row)

    async def apply_balance_change(
        self,
        db: AsyncSession,
        member_id: str,
        amount: int,
        entry_type: str,
        reference_type: str | None,
        reference_id: str | None,
        description: str,
    ) -> tuple[Member, LedgerEntry]:
        result = await db.execute(
            _APPLY_BALANCE_SQL, {"member_id": member_id, "amount": amount}
        )
        row = result.fetchone()
        if row is None:
            raise MemberNotFoundError(member_id)
        member = _row_to_member(row)
        ledger_result = await db.execute(
            _INSERT_LEDGER_SQL,
            {
                "member_id": member_id,
                "entry_type": entry_type,
                "amount": amount,
                "balance_after": member.balance,
                "reference_type": reference_type,
                "reference_id": reference_id,
                "description": description,
            },
        )
        ledger_row = ledger_result.fetchone()
        if ledger_row is None:
            raise InternalError("Ledger insert returned no rows — this should never happen")
        return member, _row_to_ledger(ledger_row)

    async def set_registration_fee_pending(
        self, db: AsyncSession, member_id: str, amount: int
    ) -> None:
        await db.execute(_SET_FEE_PENDING_SQL, {"member_id": member_id, "amount": amount})

    async def update_rating(self, db: AsyncSession, member: Member) -> None:
        await db.execute(
            _UPDATE_RATING_SQL,
            {
                "member_id": member.id,
                "rating": member.rating,
                "games_played": member.games_played,
                "wins": member.wins,
                "losses": member.losses,
                "draws": member.draws,
                "last_game_at": member.last_game_at,
            },
        )

    async def list_ledger_entries(
        self,
        db: AsyncSession,
        member_id: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]:
        result = await db.execute(
            _LIST_LEDGER_SQL,
            {
                "member_id": member_id,
                "cursor_id": cursor_id,
                "entry_type": entry_type,
                "limit": limit,
            },
        )
        return [_row_to_ledger(row) for row in result.fetchall()]

    async def list_leaderboard(
        self, db: AsyncSession, club_id: str, limit: int
    ) -> list[Member]:
        result = await db.execute(_LEADERBOARD_SQL, {"club_id": club_id, "limit": limit})
        return [_row_to_member(row) for row in result.fetchall()]
