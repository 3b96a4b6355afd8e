"""Domain models for bc_account — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime

DEFAULT_RATING = 1000


@dataclass
class Member:
    id: str                          # auth user id
    club_id: str
    name: str
    role: str                        # MemberRole value
    rating: int = DEFAULT_RATING
    games_played: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    balance: int = 0                 # cents, signed
    registration_fee_pending: int = 0  # cents
    last_game_at: datetime | None = None
    version: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


@dataclass
class LedgerEntry:
    id: int                          # BIGSERIAL
    member_id: str
    entry_type: str                  # LedgerEntryType value
    amount: int                      # cents, positive=credit negative=debit
    balance_after: int               # cents, balance snapshot after op
    reference_type: str | None = None
    reference_id: str | None = None
    description: str | None = None
    created_at: datetime | None = None
