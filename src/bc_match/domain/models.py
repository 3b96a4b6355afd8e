"""Domain models for bc_match — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime

from src.bc_common.enums import MatchStatus

TERMINAL_STATUSES = frozenset({MatchStatus.CONFIRMED, MatchStatus.REJECTED, MatchStatus.CANCELLED})


@dataclass
class Match:
    id: str
    club_id: str
    team1: list[str]
    team2: list[str]
    slot_time: datetime
    game_type: str                      # GameType value
    created_by: str
    status: str = MatchStatus.PENDING_CONFIRMATION.value
    score1: int | None = None
    score2: int | None = None
    confirmed_by: list[str] = field(default_factory=list)
    submitted_by: str | None = None
    submitted_at: datetime | None = None
    rejected_by: str | None = None
    rejected_at: datetime | None = None
    cancellation_requested_by: str | None = None
    cancellation_requested_at: datetime | None = None
    status_before_cancellation: str | None = None
    cancellation_processed_by: str | None = None
    version: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def players(self) -> list[str]:
        return [*self.team1, *self.team2]

    @property
    def has_scores(self) -> bool:
        return self.score1 is not None and self.score2 is not None

    def is_player(self, member_id: str) -> bool:
        return member_id in self.team1 or member_id in self.team2

    @property
    def creator_team(self) -> list[str]:
        return self.team1 if self.created_by in self.team1 else self.team2

    @property
    def opponent_confirmations(self) -> list[str]:
        """Confirmed players that are not on the creator's team."""
        own = set(self.creator_team)
        return [p for p in self.confirmed_by if p not in own]

    @property
    def unconfirmed_players(self) -> list[str]:
        return [p for p in self.players if p not in self.confirmed_by]
