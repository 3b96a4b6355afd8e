"""HTTP-level tests: auth guard, request ids and the error envelope."""

import uuid
from collections.abc import AsyncIterator, Iterator
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from src.bc_account.application.schemas import BalanceResponse
from src.bc_common.database import get_db_session
from src.bc_common.errors import MemberNotFoundError
from src.bc_gateway.auth.dependencies import get_current_user
from src.bc_gateway.user.db_models import UserModel
from src.main import app


@pytest.fixture
def signed_in() -> Iterator[UserModel]:
    user = UserModel()
    user.id = uuid.uuid4()
    user.username = "alice"
    user.is_active = True

    async def _db() -> AsyncIterator[AsyncMock]:
        yield AsyncMock()

    app.dependency_overrides[get_current_user] = lambda: user
    app.dependency_overrides[get_db_session] = _db
    yield user
    app.dependency_overrides.clear()


async def test_health(client: AsyncClient) -> None:
    resp = await client.get("/health")

    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.headers["X-Request-ID"].startswith("req_")


@pytest.mark.parametrize(
    ("method", "path"),
    [
        ("GET", "/api/v1/account/balance"),
        ("POST", "/api/v1/slots/SLT-1/book"),
        ("POST", "/api/v1/matches/MCH-1/confirm"),
        ("GET", "/api/v1/admin/settings"),
    ],
)
async def test_protected_endpoints_require_token(
    client: AsyncClient, method: str, path: str
) -> None:
    resp = await client.request(method, path)

    assert resp.status_code == 401


async def test_garbage_token_is_rejected(client: AsyncClient) -> None:
    resp = await client.get(
        "/api/v1/account/balance", headers={"Authorization": "Bearer not.a.token"}
    )

    assert resp.status_code == 401
    assert resp.headers["WWW-Authenticate"] == "Bearer"


async def test_balance_success_envelope(client: AsyncClient, signed_in: UserModel) -> None:
    balance = BalanceResponse(
        member_id=str(signed_in.id),
        balance_cents=1200,
        balance_display="€12.00",
        registration_fee_pending_cents=0,
        registration_fee_pending_display="€0.00",
    )
    with patch(
        "src.bc_account.api.router._service.get_balance", AsyncMock(return_value=balance)
    ):
        resp = await client.get("/api/v1/account/balance")

    body = resp.json()
    assert resp.status_code == 200
    assert body["success"] is True
    assert body["code"] == 0
    assert body["data"]["balance_display"] == "€12.00"
    assert body["request_id"] == resp.headers["X-Request-ID"]


async def test_app_error_envelope(client: AsyncClient, signed_in: UserModel) -> None:
    with patch(
        "src.bc_account.api.router._service.get_balance",
        AsyncMock(side_effect=MemberNotFoundError(str(signed_in.id))),
    ):
        resp = await client.get("/api/v1/account/balance")

    body = resp.json()
    assert resp.status_code == 404
    assert body["success"] is False
    assert body["code"] == 2002
    assert body["error_kind"] == "not_found"
    assert body["data"] is None
    assert body["request_id"] == resp.headers["X-Request-ID"]


async def test_top_up_body_is_validated(client: AsyncClient, signed_in: UserModel) -> None:
    resp = await client.post("/api/v1/account/top-up", json={"amount_cents": "lots"})

    assert resp.status_code == 422


async def test_incoming_request_id_is_reused(client: AsyncClient) -> None:
    resp = await client.get("/health", headers={"X-Request-ID": "proxy-1234abcd"})

    assert resp.headers["X-Request-ID"] == "proxy-1234abcd"


async def test_unsafe_request_id_is_replaced(client: AsyncClient) -> None:
    resp = await client.get("/health", headers={"X-Request-ID": "<script>"})

    assert resp.headers["X-Request-ID"].startswith("req_")
