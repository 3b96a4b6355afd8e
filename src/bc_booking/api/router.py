"""Slot booking REST API — all endpoints require JWT authentication."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bc_booking.application.schemas import BookSlotRequest, CancelSlotRequest
from src.bc_booking.application.service import BookingApplicationService
from src.bc_common.database import get_db_session
from src.bc_common.response import ApiResponse, success_response
from src.bc_gateway.auth.dependencies import get_current_user
from src.bc_gateway.user.db_models import UserModel

router = APIRouter(prefix="/slots", tags=["slots"])

_service = BookingApplicationService()


@router.get("")
async def list_slots(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    start_from: datetime | None = Query(None, description="Inclusive lower bound"),
    start_to: datetime | None = Query(None, description="Exclusive upper bound"),
    limit: int = Query(100, ge=1, le=500),
) -> ApiResponse:
    data = await _service.list_slots(db, start_from, start_to, limit)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{slot_id}/book")
async def book_slot(
    slot_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    body: Annotated[BookSlotRequest | None, Body()] = None,
) -> ApiResponse:
    member_id = str(current_user.id)
    body = body or BookSlotRequest()
    data = await _service.book_slot(db, member_id, slot_id, body.join_waitlist_if_full)
    message = "Slot booked" if data.booked else "Added to waitlist"
    resp = success_response(data.model_dump(), message=message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{slot_id}/cancel")
async def cancel_slot(
    slot_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    body: Annotated[CancelSlotRequest | None, Body()] = None,
) -> ApiResponse:
    member_id = str(current_user.id)
    body = body or CancelSlotRequest()
    data = await _service.cancel_slot(db, member_id, slot_id, body.slot_timestamp)
    resp = success_response(data.model_dump(), message="Booking cancelled")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.delete("/{slot_id}/waitlist")
async def leave_waitlist(
    slot_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    member_id = str(current_user.id)
    data = await _service.leave_waitlist(db, member_id, slot_id)
    resp = success_response(data.model_dump(), message="Removed from waitlist")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
