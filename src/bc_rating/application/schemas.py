"""Pydantic schemas for rating history."""

from datetime import datetime

from pydantic import BaseModel

from src.bc_rating.domain.models import MatchHistoryEntry


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


class MatchHistoryItem(BaseModel):
    match_id: str
    old_rating: int
    new_rating: int
    rating_change: int
    outcome: str
    team: list[str]
    opponents: list[str]
    score_for: int
    score_against: int
    slot_time: str | None
    created_at: str | None

    @classmethod
    def from_entry(cls, entry: MatchHistoryEntry) -> "MatchHistoryItem":
        return cls(
            match_id=entry.match_id,
            old_rating=entry.old_rating,
            new_rating=entry.new_rating,
            rating_change=entry.rating_change,
            outcome=entry.outcome,
            team=entry.team,
            opponents=entry.opponents,
            score_for=entry.score_for,
            score_against=entry.score_against,
            slot_time=_iso(entry.slot_time),
            created_at=_iso(entry.created_at),
        )


class MatchHistoryResponse(BaseModel):
    items: list[MatchHistoryItem]
    next_cursor: str | None
    has_more: bool
