"""Match REST API for players. Admin transitions live under /admin."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.bc_common.database import get_db_session
from src.bc_common.enums import MatchStatus
from src.bc_common.response import ApiResponse, success_response
from src.bc_gateway.auth.dependencies import get_current_user
from src.bc_gateway.user.db_models import UserModel
from src.bc_match.application.schemas import ConfirmMatchRequest, CreateMatchRequest
from src.bc_match.application.service import MatchApplicationService
from src.bc_rating.application.service import RatingService

router = APIRouter(prefix="/matches", tags=["matches"])

_service = MatchApplicationService()
_rating = RatingService()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_match(
    body: CreateMatchRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    creator_id = str(current_user.id)
    data = await _service.create_match(
        db,
        creator_id,
        body.team1,
        body.team2,
        body.game_type.value,
        body.slot_time,
        body.score1,
        body.score2,
    )
    resp = success_response(data.model_dump(), message="Match created")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def list_my_matches(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    match_status: MatchStatus | None = Query(None, alias="status"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> ApiResponse:
    data = await _service.list_my_matches(db, str(current_user.id), match_status, limit, offset)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/history/me")
async def my_match_history(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    data = await _rating.list_history(db, str(current_user.id), cursor, limit)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{match_id}")
async def get_match(
    match_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_match(db, match_id)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{match_id}/confirm")
async def confirm_match(
    match_id: str,
    body: ConfirmMatchRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    actor_id = str(current_user.id)
    data = await _service.confirm_match(db, actor_id, match_id, body.score1, body.score2)
    resp = success_response(data.model_dump(), message=f"Match {data.status}")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{match_id}/cancellation")
async def request_cancellation(
    match_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    actor_id = str(current_user.id)
    data = await _service.request_cancellation(db, actor_id, match_id)
    resp = success_response(data.model_dump(), message="Cancellation requested")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
