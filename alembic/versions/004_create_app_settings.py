"""004: create app_settings table

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE app_settings (
            club_id                     VARCHAR(64)     PRIMARY KEY,
            slot_booking_cost           BIGINT          NOT NULL DEFAULT 400,
            min_balance_for_booking     BIGINT          NOT NULL DEFAULT 400,
            cancellation_deadline_hours INT             NOT NULL DEFAULT 24,
            registration_fee            BIGINT          NOT NULL DEFAULT 400,
            updated_by                  VARCHAR(64),
            updated_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_settings_cost CHECK (slot_booking_cost >= 0),
            CONSTRAINT ck_settings_min_balance CHECK (min_balance_for_booking >= 0),
            CONSTRAINT ck_settings_deadline CHECK (cancellation_deadline_hours >= 0),
            CONSTRAINT ck_settings_fee CHECK (registration_fee >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_app_settings_updated_at
            BEFORE UPDATE ON app_settings
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("INSERT INTO app_settings (club_id) VALUES ('default');")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS app_settings CASCADE;")
