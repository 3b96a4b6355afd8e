"""008: create member_device_tokens table

Revision ID: 008
Revises: 007
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op

revision: str = "008"
down_revision: Union[str, None] = "007"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE member_device_tokens (
            member_id       VARCHAR(64)     NOT NULL REFERENCES members (id),
            token           VARCHAR(512)    NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            PRIMARY KEY (member_id, token)
        );
    """)
    op.execute(
        "COMMENT ON TABLE member_device_tokens IS "
        "'Push tokens read by the external notification worker';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS member_device_tokens CASCADE;")
