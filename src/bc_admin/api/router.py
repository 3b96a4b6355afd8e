"""Admin REST API — slots, settings, member balances and match moderation.

Every endpoint requires a JWT; the admin role is checked by the service
layer against the members table.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.bc_account.application.schemas import AdjustBalanceRequest
from src.bc_account.application.service import AccountApplicationService
from src.bc_admin.application.schemas import UpdateSettingsRequest
from src.bc_admin.application.service import AdminSettingsService
from src.bc_booking.application.schemas import CreateRecurringSlotsRequest, CreateSlotRequest
from src.bc_booking.application.service import BookingApplicationService
from src.bc_common.database import get_db_session
from src.bc_common.response import ApiResponse, success_response
from src.bc_gateway.auth.dependencies import get_current_user
from src.bc_gateway.user.db_models import UserModel
from src.bc_match.application.schemas import ProcessCancellationRequest
from src.bc_match.application.service import MatchApplicationService

router = APIRouter(prefix="/admin", tags=["admin"])

_settings = AdminSettingsService()
_booking = BookingApplicationService()
_account = AccountApplicationService()
_matches = MatchApplicationService()


def _with_request_id(resp: ApiResponse, request: Request) -> ApiResponse:
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


# ---------------------------------------------------------------------------
# Slots
# ---------------------------------------------------------------------------


@router.post("/slots", status_code=status.HTTP_201_CREATED)
async def create_slot(
    body: CreateSlotRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    admin_id = str(current_user.id)
    data = await _booking.create_slot(db, admin_id, body.start_time, body.available)
    return _with_request_id(success_response(data.model_dump(), message="Slot created"), request)


@router.post("/slots/recurring", status_code=status.HTTP_201_CREATED)
async def create_recurring_slots(
    body: CreateRecurringSlotsRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    admin_id = str(current_user.id)
    data = await _booking.create_recurring_slots(db, admin_id, body.first_start_time, body.weeks)
    return _with_request_id(
        success_response(data.model_dump(), message=f"{data.created} slots created"), request
    )


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@router.get("/settings")
async def get_settings(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _settings.get_settings(db, str(current_user.id))
    return _with_request_id(success_response(data.model_dump()), request)


@router.put("/settings")
async def update_settings(
    body: UpdateSettingsRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    admin_id = str(current_user.id)
    data = await _settings.update_settings(db, admin_id, body)
    return _with_request_id(success_response(data.model_dump(), message="Settings saved"), request)


# ---------------------------------------------------------------------------
# Member balances
# ---------------------------------------------------------------------------


@router.post("/members/{member_id}/adjust-balance")
async def adjust_balance(
    member_id: str,
    body: AdjustBalanceRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    admin_id = str(current_user.id)
    data = await _account.admin_adjust_balance(
        db, admin_id, member_id, body.amount_cents, body.reason
    )
    resp = success_response(data.model_dump(), message="Balance adjusted")
    return _with_request_id(resp, request)


@router.post("/members/{member_id}/settle-registration-fee")
async def settle_registration_fee(
    member_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    admin_id = str(current_user.id)
    data = await _account.settle_registration_fee(db, admin_id, member_id)
    return _with_request_id(
        success_response(data.model_dump(), message="Registration fee settled"), request
    )


# ---------------------------------------------------------------------------
# Matches
# ---------------------------------------------------------------------------


@router.post("/matches/{match_id}/reject")
async def reject_match(
    match_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    admin_id = str(current_user.id)
    data = await _matches.reject_match(db, admin_id, match_id)
    return _with_request_id(success_response(data.model_dump(), message="Match rejected"), request)


@router.post("/matches/{match_id}/cancellation")
async def process_cancellation(
    match_id: str,
    body: ProcessCancellationRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    admin_id = str(current_user.id)
    data = await _matches.process_cancellation(db, admin_id, match_id, body.action)
    message = f"Cancellation request {body.action.value}"
    return _with_request_id(success_response(data.model_dump(), message=message), request)


@router.patch("/matches/{match_id}")
async def admin_update_match(
    match_id: str,
    updates: Annotated[dict[str, Any], Body()],
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    admin_id = str(current_user.id)
    data = await _matches.admin_update(db, admin_id, match_id, updates)
    return _with_request_id(success_response(data.model_dump(), message="Match updated"), request)
