"""007: create matches and match_history tables

Revision ID: 007
Revises: 006
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_STATUSES = (
    "'pending_confirmation', 'awaiting_scores', 'confirmed', "
    "'rejected', 'requested_cancellation', 'cancelled'"
)


def upgrade() -> None:
    op.execute(f"""
        CREATE TABLE matches (
            id                          VARCHAR(64)     PRIMARY KEY,
            club_id                     VARCHAR(64)     NOT NULL,
            team1                       TEXT[]          NOT NULL,
            team2                       TEXT[]          NOT NULL,
            slot_time                   TIMESTAMPTZ     NOT NULL,
            game_type                   VARCHAR(10)     NOT NULL,
            score1                      INT,
            score2                      INT,
            status                      VARCHAR(30)     NOT NULL,
            created_by                  VARCHAR(64)     NOT NULL,
            confirmed_by                TEXT[]          NOT NULL DEFAULT '{{}}',
            submitted_by                VARCHAR(64),
            submitted_at                TIMESTAMPTZ,
            rejected_by                 VARCHAR(64),
            rejected_at                 TIMESTAMPTZ,
            cancellation_requested_by   VARCHAR(64),
            cancellation_requested_at   TIMESTAMPTZ,
            status_before_cancellation  VARCHAR(30),
            cancellation_processed_by   VARCHAR(64),
            version                     BIGINT          NOT NULL DEFAULT 0,
            created_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_matches_game_type CHECK (game_type IN ('singles', 'doubles')),
            CONSTRAINT ck_matches_status CHECK (status IN ({_STATUSES})),
            CONSTRAINT ck_matches_prev_status CHECK (
                status_before_cancellation IS NULL
                OR status_before_cancellation IN ({_STATUSES})
            ),
            CONSTRAINT ck_matches_scores CHECK (
                (score1 IS NULL AND score2 IS NULL)
                OR (score1 >= 0 AND score2 >= 0)
            )
        );
    """)
    op.execute("CREATE INDEX idx_matches_club_slot_time ON matches (club_id, slot_time DESC);")
    op.execute("CREATE INDEX idx_matches_team1 ON matches USING GIN (team1);")
    op.execute("CREATE INDEX idx_matches_team2 ON matches USING GIN (team2);")
    op.execute("""
        CREATE TRIGGER trg_matches_updated_at
            BEFORE UPDATE ON matches
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)

    op.execute("""
        CREATE TABLE match_history (
            id              BIGSERIAL       PRIMARY KEY,
            member_id       VARCHAR(64)     NOT NULL REFERENCES members (id),
            match_id        VARCHAR(64)     NOT NULL REFERENCES matches (id),
            old_rating      INT             NOT NULL,
            new_rating      INT             NOT NULL,
            rating_change   INT             NOT NULL,
            outcome         VARCHAR(10)     NOT NULL,
            team            TEXT[]          NOT NULL,
            opponents       TEXT[]          NOT NULL,
            score_for       INT             NOT NULL,
            score_against   INT             NOT NULL,
            slot_time       TIMESTAMPTZ,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_match_history_member_match UNIQUE (member_id, match_id),
            CONSTRAINT ck_match_history_outcome CHECK (outcome IN ('win', 'loss', 'draw'))
        );
    """)
    op.execute("CREATE INDEX idx_match_history_member ON match_history (member_id, id DESC);")
    op.execute("""
        CREATE TRIGGER trg_match_history_append_only
            BEFORE UPDATE OR DELETE ON match_history
            FOR EACH ROW EXECUTE FUNCTION fn_forbid_mutation();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS match_history CASCADE;")
    op.execute("DROP TABLE IF EXISTS matches CASCADE;")
