"""005: create slots and slot_waitlist tables

Revision ID: 005
Revises: 004
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE slots (
            id              VARCHAR(64)     PRIMARY KEY,
            club_id         VARCHAR(64)     NOT NULL,
            start_time      TIMESTAMPTZ     NOT NULL,
            is_booked       BOOLEAN         NOT NULL DEFAULT FALSE,
            booked_by       VARCHAR(64)     REFERENCES members (id),
            available       BOOLEAN         NOT NULL DEFAULT TRUE,
            is_recurring    BOOLEAN         NOT NULL DEFAULT FALSE,
            created_by      VARCHAR(64),
            version         BIGINT          NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_slots_booking_consistent CHECK (
                NOT is_booked OR (booked_by IS NOT NULL AND NOT available)
            ),
            CONSTRAINT ck_slots_unbooked_owner CHECK (is_booked OR booked_by IS NULL)
        );
    """)
    op.execute("CREATE INDEX idx_slots_club_start ON slots (club_id, start_time);")
    # One member can hold at most one slot per start time
    op.execute("""
        CREATE UNIQUE INDEX uq_slots_member_start_time
        ON slots (club_id, booked_by, start_time)
        WHERE is_booked;
    """)
    op.execute("""
        CREATE TRIGGER trg_slots_updated_at
            BEFORE UPDATE ON slots
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)

    op.execute("""
        CREATE TABLE slot_waitlist (
            id              BIGSERIAL       PRIMARY KEY,
            slot_id         VARCHAR(64)     NOT NULL REFERENCES slots (id),
            member_id       VARCHAR(64)     NOT NULL REFERENCES members (id),
            added_at        TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_slot_waitlist_slot_member UNIQUE (slot_id, member_id)
        );
    """)
    op.execute("CREATE INDEX idx_slot_waitlist_fifo ON slot_waitlist (slot_id, id);")
    op.execute("COMMENT ON TABLE slot_waitlist IS 'FIFO queue per slot, ordered by id';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS slot_waitlist CASCADE;")
    op.execute("DROP TABLE IF EXISTS slots CASCADE;")
