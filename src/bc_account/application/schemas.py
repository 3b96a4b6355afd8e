"""Pydantic schemas and cursor utilities for bc_account API."""

import base64
import json

from pydantic import BaseModel, Field

from src.bc_account.domain.models import LedgerEntry, Member
from src.bc_common.cents import cents_to_display

# ---------------------------------------------------------------------------
# Cursor-based pagination utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_id: int) -> str:
    """Encode a BIGINT primary key into an opaque Base64 cursor string."""
    payload = json.dumps({"id": last_id})
    return base64.b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> int | None:
    """Decode a cursor string back to the last seen id. Returns None on error."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.b64decode(cursor.encode()).decode())
        return int(payload["id"])
    except Exception:
        return None


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class TopUpRequest(BaseModel):
    amount_cents: int = Field(..., gt=0, description="Amount to top up in cents")


class AdjustBalanceRequest(BaseModel):
    amount_cents: int = Field(..., description="Signed adjustment in cents (non-zero)")
    reason: str = Field(..., min_length=1, max_length=200)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BalanceResponse(BaseModel):
    member_id: str
    balance_cents: int
    balance_display: str
    registration_fee_pending_cents: int
    registration_fee_pending_display: str

    @classmethod
    def from_member(cls, member: Member) -> "BalanceResponse":
        return cls(
            member_id=member.id,
            balance_cents=member.balance,
            balance_display=cents_to_display(member.balance),
            registration_fee_pending_cents=member.registration_fee_pending,
            registration_fee_pending_display=cents_to_display(member.registration_fee_pending),
        )


class TopUpResponse(BaseModel):
    balance_cents: int
    balance_display: str
    topped_up_cents: int
    topped_up_display: str
    registration_fee_deducted_cents: int
    ledger_entry_ids: list[int]


class BalanceAdjustmentResponse(BaseModel):
    member_id: str
    balance_cents: int
    balance_display: str
    amount_cents: int
    entry_type: str
    ledger_entry_id: int

    @classmethod
    def from_result(cls, member: Member, entry: LedgerEntry) -> "BalanceAdjustmentResponse":
        return cls(
            member_id=member.id,
            balance_cents=member.balance,
            balance_display=cents_to_display(member.balance),
            amount_cents=entry.amount,
            entry_type=entry.entry_type,
            ledger_entry_id=entry.id,
        )


class LedgerEntryItem(BaseModel):
    id: int
    entry_type: str
    amount_cents: int
    amount_display: str
    balance_after_cents: int
    balance_after_display: str
    reference_type: str | None
    reference_id: str | None
    description: str | None
    created_at: str  # ISO8601 string


class LedgerResponse(BaseModel):
    items: list[LedgerEntryItem]
    next_cursor: str | None
    has_more: bool


class LeaderboardItem(BaseModel):
    """Public projection of a member, derived from the authoritative row."""

    rank: int
    member_id: str
    name: str
    rating: int
    games_played: int
    wins: int
    losses: int
    draws: int


class LeaderboardResponse(BaseModel):
    items: list[LeaderboardItem]
