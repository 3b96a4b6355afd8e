"""Pydantic schemas for the match API."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.bc_common.enums import CancellationAction, GameType
from src.bc_match.domain.models import Match
from src.bc_rating.domain.models import MatchHistoryEntry


class CreateMatchRequest(BaseModel):
    team1: list[str] = Field(..., min_length=1, max_length=2)
    team2: list[str] = Field(..., min_length=1, max_length=2)
    game_type: GameType
    slot_time: datetime
    score1: int | None = Field(None, ge=0)
    score2: int | None = Field(None, ge=0)


class ConfirmMatchRequest(BaseModel):
    score1: int | None = Field(None, ge=0)
    score2: int | None = Field(None, ge=0)


class ProcessCancellationRequest(BaseModel):
    action: CancellationAction


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


class RatingChangeItem(BaseModel):
    member_id: str
    old_rating: int
    new_rating: int
    rating_change: int
    outcome: str

    @classmethod
    def from_entry(cls, entry: MatchHistoryEntry) -> "RatingChangeItem":
        return cls(
            member_id=entry.member_id,
            old_rating=entry.old_rating,
            new_rating=entry.new_rating,
            rating_change=entry.rating_change,
            outcome=entry.outcome,
        )


class MatchResponse(BaseModel):
    match_id: str
    team1: list[str]
    team2: list[str]
    game_type: str
    slot_time: str
    score1: int | None
    score2: int | None
    status: str
    created_by: str
    confirmed_by: list[str]
    submitted_by: str | None
    submitted_at: str | None
    rejected_by: str | None
    cancellation_requested_by: str | None
    status_before_cancellation: str | None
    rating_changes: list[RatingChangeItem] = []
    updated_fields: list[str] = []

    @classmethod
    def from_match(
        cls,
        match: Match,
        rating_changes: list[MatchHistoryEntry] | None = None,
        updated_fields: list[str] | None = None,
    ) -> "MatchResponse":
        return cls(
            match_id=match.id,
            team1=match.team1,
            team2=match.team2,
            game_type=match.game_type,
            slot_time=match.slot_time.isoformat(),
            score1=match.score1,
            score2=match.score2,
            status=match.status,
            created_by=match.created_by,
            confirmed_by=match.confirmed_by,
            submitted_by=match.submitted_by,
            submitted_at=_iso(match.submitted_at),
            rejected_by=match.rejected_by,
            cancellation_requested_by=match.cancellation_requested_by,
            status_before_cancellation=match.status_before_cancellation,
            rating_changes=[RatingChangeItem.from_entry(e) for e in rating_changes or []],
            updated_fields=updated_fields or [],
        )


class MatchListResponse(BaseModel):
    items: list[MatchResponse]
    limit: int
    offset: int
