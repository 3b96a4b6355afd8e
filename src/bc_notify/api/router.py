"""Device-token REST API (registerFcmToken / unregisterFcmToken)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bc_common.database import get_db_session
from src.bc_common.response import ApiResponse, success_response
from src.bc_gateway.auth.dependencies import get_current_user
from src.bc_gateway.user.db_models import UserModel
from src.bc_notify.application.service import DeviceTokenRequest, DeviceTokenService

router = APIRouter(prefix="/notifications", tags=["notifications"])

_service = DeviceTokenService()


@router.post("/tokens")
async def register_token(
    body: DeviceTokenRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.register(db, str(current_user.id), body.token)
    resp = success_response(data.model_dump(), message="Device token registered")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.delete("/tokens")
async def unregister_token(
    body: DeviceTokenRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.unregister(db, str(current_user.id), body.token)
    resp = success_response(data.model_dump(), message="Device token removed")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/tokens")
async def list_tokens(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_tokens(db, str(current_user.id))
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
