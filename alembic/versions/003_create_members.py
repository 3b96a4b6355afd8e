"""003: create members table

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE members (
            id                          VARCHAR(64)     PRIMARY KEY,
            club_id                     VARCHAR(64)     NOT NULL,
            name                        VARCHAR(100)    NOT NULL,
            role                        VARCHAR(10)     NOT NULL DEFAULT 'member',
            rating                      INT             NOT NULL DEFAULT 1000,
            games_played                INT             NOT NULL DEFAULT 0,
            wins                        INT             NOT NULL DEFAULT 0,
            losses                      INT             NOT NULL DEFAULT 0,
            draws                       INT             NOT NULL DEFAULT 0,
            balance                     BIGINT          NOT NULL DEFAULT 0,
            registration_fee_pending    BIGINT          NOT NULL DEFAULT 0,
            last_game_at                TIMESTAMPTZ,
            version                     BIGINT          NOT NULL DEFAULT 0,
            created_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_members_role CHECK (role IN ('member', 'admin')),
            CONSTRAINT ck_members_rating_floor CHECK (rating >= 100),
            CONSTRAINT ck_members_record CHECK (wins + losses + draws = games_played),
            CONSTRAINT ck_members_fee_pending CHECK (registration_fee_pending >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_members_leaderboard ON members (club_id, rating DESC);")
    op.execute("""
        CREATE TRIGGER trg_members_updated_at
            BEFORE UPDATE ON members
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute(
        "COMMENT ON TABLE members IS "
        "'Single authoritative member record: balance (cents), rating, W/L/D counters';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS members CASCADE;")
