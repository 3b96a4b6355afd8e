"""Match confirmation state machine.

    pending_confirmation ──confirm──▶ awaiting_scores ──confirm──▶ confirmed
            │                                                      ▲
            └───────────── confirm (scores + opponent) ────────────┘
    any non-terminal ──reject──▶ rejected
    non-cancelled ──request_cancellation──▶ requested_cancellation
    requested_cancellation ──approve──▶ cancelled
                           ──decline──▶ status_before_cancellation

Every function validates first and only then mutates the Match it is given,
so a raised error always leaves the match untouched.
"""

from datetime import datetime
from typing import Any

from src.bc_common.datetime_utils import ensure_utc
from src.bc_common.enums import CancellationAction, GameType, MatchStatus
from src.bc_common.errors import (
    AlreadyConfirmedError,
    InvalidMatchTransitionError,
    InvalidMatchUpdateError,
    InvalidScoreError,
    InvalidTeamsError,
    NotMatchParticipantError,
)
from src.bc_match.domain.models import TERMINAL_STATUSES, Match

CONFIRMABLE = frozenset({MatchStatus.PENDING_CONFIRMATION, MatchStatus.AWAITING_SCORES})
NOT_CANCELLABLE = frozenset(
    {MatchStatus.CANCELLED, MatchStatus.REJECTED, MatchStatus.REQUESTED_CANCELLATION}
)
ADMIN_UPDATABLE_FIELDS = frozenset({"slot_time", "game_type", "score1", "score2", "status"})


def validate_scores(score1: Any, score2: Any) -> tuple[int, int]:
    for value in (score1, score2):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidScoreError("scores must be integers")
        if value < 0:
            raise InvalidScoreError("scores must be non-negative")
    if score1 == score2:
        raise InvalidScoreError("scores must not be equal")
    return score1, score2


def _optional_scores(score1: int | None, score2: int | None) -> tuple[int, int] | None:
    if score1 is None and score2 is None:
        return None
    return validate_scores(score1, score2)


def _parse_game_type(value: Any) -> GameType:
    try:
        return GameType(value)
    except ValueError:
        raise InvalidTeamsError(f"unknown game type {value!r}") from None


def validate_teams(
    creator_id: str, team1: list[str], team2: list[str], game_type: GameType
) -> None:
    if not team1 or not team2:
        raise InvalidTeamsError("both teams need at least one player")
    size = game_type.team_size
    if len(team1) != size or len(team2) != size:
        raise InvalidTeamsError(f"{game_type.value} needs {size} player(s) per team")
    players = [*team1, *team2]
    if len(set(players)) != len(players):
        raise InvalidTeamsError("a player may appear only once across both teams")
    if creator_id not in players:
        raise InvalidTeamsError("the creator must play in the match")


def new_match(
    match_id: str,
    club_id: str,
    creator_id: str,
    team1: list[str],
    team2: list[str],
    game_type: str,
    slot_time: datetime,
    score1: int | None = None,
    score2: int | None = None,
    now: datetime | None = None,
) -> Match:
    """Validate and build a match in pending_confirmation, confirmed by its creator."""
    gt = _parse_game_type(game_type)
    validate_teams(creator_id, team1, team2, gt)
    scores = _optional_scores(score1, score2)
    match = Match(
        id=match_id,
        club_id=club_id,
        team1=list(team1),
        team2=list(team2),
        slot_time=ensure_utc(slot_time),
        game_type=gt.value,
        created_by=creator_id,
        confirmed_by=[creator_id],
    )
    if scores is not None:
        match.score1, match.score2 = scores
        match.submitted_by = creator_id
        match.submitted_at = now
    return match


def confirm(
    match: Match,
    actor_id: str,
    score1: int | None = None,
    score2: int | None = None,
    now: datetime | None = None,
) -> MatchStatus:
    """Record the actor's confirmation and return the resulting status."""
    if not match.is_player(actor_id):
        raise NotMatchParticipantError(match.id)
    if MatchStatus(match.status) not in CONFIRMABLE:
        raise InvalidMatchTransitionError(match.id, match.status, "be confirmed")
    if actor_id in match.confirmed_by:
        raise AlreadyConfirmedError(match.id)
    scores = _optional_scores(score1, score2)

    if scores is not None:
        match.score1, match.score2 = scores
        match.submitted_by = actor_id
        match.submitted_at = now
    match.confirmed_by = [*match.confirmed_by, actor_id]

    if match.opponent_confirmations:
        status = MatchStatus.CONFIRMED if match.has_scores else MatchStatus.AWAITING_SCORES
        match.status = status.value
    return MatchStatus(match.status)


def reject(match: Match, admin_id: str, now: datetime | None = None) -> None:
    if MatchStatus(match.status) in TERMINAL_STATUSES:
        raise InvalidMatchTransitionError(match.id, match.status, "be rejected")
    match.status = MatchStatus.REJECTED.value
    match.rejected_by = admin_id
    match.rejected_at = now


def request_cancellation(match: Match, actor_id: str, now: datetime | None = None) -> None:
    if not match.is_player(actor_id):
        raise NotMatchParticipantError(match.id)
    if MatchStatus(match.status) in NOT_CANCELLABLE:
        raise InvalidMatchTransitionError(match.id, match.status, "request cancellation")
    match.status_before_cancellation = match.status
    match.status = MatchStatus.REQUESTED_CANCELLATION.value
    match.cancellation_requested_by = actor_id
    match.cancellation_requested_at = now


def _status_to_restore(match: Match) -> MatchStatus:
    if match.status_before_cancellation:
        return MatchStatus(match.status_before_cancellation)
    # Rows written before the previous status was persisted
    return MatchStatus.CONFIRMED if match.has_scores else MatchStatus.AWAITING_SCORES


def process_cancellation(
    match: Match, admin_id: str, action: CancellationAction | str
) -> MatchStatus:
    """Approve (→ cancelled) or decline (→ previous status) a pending request.

    Approving a match that had already been confirmed keeps its rating
    changes; ratings are never reversed.
    """
    action = CancellationAction(action)
    if match.status != MatchStatus.REQUESTED_CANCELLATION.value:
        raise InvalidMatchTransitionError(match.id, match.status, f"{action.value} cancellation")
    if action is CancellationAction.APPROVE:
        match.status = MatchStatus.CANCELLED.value
    else:
        match.status = _status_to_restore(match).value
    match.status_before_cancellation = None
    match.cancellation_processed_by = admin_id
    return MatchStatus(match.status)


def admin_update(match: Match, updates: dict[str, Any]) -> list[str]:
    """Apply a whitelisted patch; returns the changed field names.

    A patch that completes the scores of a match awaiting them confirms it,
    unless the patch sets the status itself.
    """
    if not updates:
        raise InvalidMatchUpdateError("no fields to update")
    unknown = sorted(set(updates) - ADMIN_UPDATABLE_FIELDS)
    if unknown:
        raise InvalidMatchUpdateError(f"fields not updatable: {', '.join(unknown)}")

    slot_time = match.slot_time
    if "slot_time" in updates:
        value = updates["slot_time"]
        if isinstance(value, str):
            try:
                value = datetime.fromisoformat(value)
            except ValueError:
                raise InvalidMatchUpdateError("slot_time must be an ISO 8601 datetime") from None
        if not isinstance(value, datetime):
            raise InvalidMatchUpdateError("slot_time must be an ISO 8601 datetime")
        slot_time = ensure_utc(value)

    game_type = match.game_type
    if "game_type" in updates:
        try:
            gt = GameType(updates["game_type"])
        except ValueError:
            raise InvalidMatchUpdateError(f"unknown game type {updates['game_type']!r}") from None
        if len(match.team1) != gt.team_size or len(match.team2) != gt.team_size:
            raise InvalidMatchUpdateError(f"teams do not fit game type {gt.value}")
        game_type = gt.value

    score1 = updates.get("score1", match.score1)
    score2 = updates.get("score2", match.score2)
    if "score1" in updates or "score2" in updates:
        try:
            _optional_scores(score1, score2)
        except InvalidScoreError as exc:
            raise InvalidMatchUpdateError(exc.message) from None

    status = match.status
    if "status" in updates:
        try:
            status = MatchStatus(updates["status"]).value
        except ValueError:
            raise InvalidMatchUpdateError(f"unknown status {updates['status']!r}") from None
    elif status == MatchStatus.AWAITING_SCORES.value and None not in (score1, score2):
        status = MatchStatus.CONFIRMED.value

    changed = []
    for name, value in (
        ("slot_time", slot_time),
        ("game_type", game_type),
        ("score1", score1),
        ("score2", score2),
        ("status", status),
    ):
        if getattr(match, name) != value:
            setattr(match, name, value)
            changed.append(name)
    return changed
