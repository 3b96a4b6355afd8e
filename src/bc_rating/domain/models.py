"""Domain models for bc_rating — pure dataclasses."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class MatchResult:
    """The facts of a confirmed match that the rating update depends on."""

    match_id: str
    team1: tuple[str, ...]
    team2: tuple[str, ...]
    score1: int
    score2: int
    slot_time: datetime


@dataclass
class MatchHistoryEntry:
    member_id: str
    match_id: str
    old_rating: int
    new_rating: int
    rating_change: int
    outcome: str            # MatchOutcome value
    team: list[str] = field(default_factory=list)
    opponents: list[str] = field(default_factory=list)
    score_for: int = 0
    score_against: int = 0
    slot_time: datetime | None = None
    id: int | None = None
    created_at: datetime | None = None
