"""Integration tests for top-up, booking, waitlist and cancellation.

Run: RUN_INTEGRATION=1 pytest tests/integration/test_booking_flow.py -v
Pre-condition: alembic upgrade head
"""

import pytest
from httpx import AsyncClient

from tests.integration.helpers import future_slot_time, sign_in, unique_user

pytestmark = pytest.mark.asyncio(loop_scope="session")

DEFAULT_SETTINGS = {
    "slot_booking_cost": 400,
    "min_balance_for_booking": 400,
    "cancellation_deadline_hours": 24,
    "registration_fee": 400,
}


async def _new_slot(client: AsyncClient, admin_headers: dict[str, str]) -> str:
    await client.put("/api/v1/admin/settings", json=DEFAULT_SETTINGS, headers=admin_headers)
    resp = await client.post(
        "/api/v1/admin/slots", json={"start_time": future_slot_time()}, headers=admin_headers
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["slot_id"]


async def _funded_member(client: AsyncClient, amount: int = 2000) -> dict[str, str]:
    auth = await sign_in(client, unique_user())
    headers = {"Authorization": auth["Authorization"]}
    resp = await client.post(
        "/api/v1/account/top-up", json={"amount_cents": amount}, headers=headers
    )
    assert resp.status_code == 200, resp.text
    return {**headers, "member_id": auth["member_id"]}


def _auth(member: dict[str, str]) -> dict[str, str]:
    return {"Authorization": member["Authorization"]}


class TestTopUp:
    async def test_first_top_up_deducts_registration_fee(self, client: AsyncClient) -> None:
        auth = await sign_in(client, unique_user())
        headers = {"Authorization": auth["Authorization"]}

        resp = await client.post(
            "/api/v1/account/top-up", json={"amount_cents": 2000}, headers=headers
        )

        data = resp.json()["data"]
        assert data["registration_fee_deducted_cents"] == 400
        assert data["balance_cents"] == 1600
        ledger = await client.get("/api/v1/account/ledger", headers=headers)
        types = [i["entry_type"] for i in ledger.json()["data"]["items"]]
        assert types == ["registration_fee_deducted", "top_up"]

    async def test_zero_amount_rejected(self, client: AsyncClient) -> None:
        auth = await sign_in(client, unique_user())
        resp = await client.post(
            "/api/v1/account/top-up",
            json={"amount_cents": 0},
            headers={"Authorization": auth["Authorization"]},
        )
        assert resp.status_code == 422


class TestBookingFlow:
    async def test_book_waitlist_cancel(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        slot_id = await _new_slot(client, admin_headers)
        alice = await _funded_member(client)
        bob = await _funded_member(client)

        booked = await client.post(f"/api/v1/slots/{slot_id}/book", headers=_auth(alice))
        assert booked.status_code == 200, booked.text
        assert booked.json()["data"]["booked"] is True
        assert booked.json()["data"]["balance_cents"] == 1200

        queued = await client.post(f"/api/v1/slots/{slot_id}/book", headers=_auth(bob))
        assert queued.json()["data"]["booked"] is False
        assert queued.json()["data"]["waitlist_position"] == 1

        cancelled = await client.post(f"/api/v1/slots/{slot_id}/cancel", headers=_auth(alice))
        data = cancelled.json()["data"]
        assert cancelled.status_code == 200, cancelled.text
        assert data["refunded"] is True
        assert data["balance_cents"] == 1600
        assert data["promoted_member_id"] == bob["member_id"]
        assert data["slot"]["is_booked"] is False

    async def test_taken_slot_without_waitlist_is_rejected(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        slot_id = await _new_slot(client, admin_headers)
        alice = await _funded_member(client)
        bob = await _funded_member(client)
        await client.post(f"/api/v1/slots/{slot_id}/book", headers=_auth(alice))

        resp = await client.post(
            f"/api/v1/slots/{slot_id}/book",
            json={"join_waitlist_if_full": False},
            headers=_auth(bob),
        )

        assert resp.status_code == 422
        assert resp.json()["code"] == 3002

    async def test_booking_without_funds_is_rejected(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        slot_id = await _new_slot(client, admin_headers)
        auth = await sign_in(client, unique_user())

        resp = await client.post(
            f"/api/v1/slots/{slot_id}/book", headers={"Authorization": auth["Authorization"]}
        )

        assert resp.status_code == 422
        assert resp.json()["code"] == 2001

    async def test_non_owner_cannot_cancel(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        slot_id = await _new_slot(client, admin_headers)
        alice = await _funded_member(client)
        bob = await _funded_member(client)
        await client.post(f"/api/v1/slots/{slot_id}/book", headers=_auth(alice))

        resp = await client.post(f"/api/v1/slots/{slot_id}/cancel", headers=_auth(bob))

        assert resp.status_code == 403
        assert resp.json()["code"] == 3005

    async def test_leave_waitlist(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        slot_id = await _new_slot(client, admin_headers)
        alice = await _funded_member(client)
        bob = await _funded_member(client)
        await client.post(f"/api/v1/slots/{slot_id}/book", headers=_auth(alice))
        await client.post(f"/api/v1/slots/{slot_id}/book", headers=_auth(bob))

        left = await client.delete(f"/api/v1/slots/{slot_id}/waitlist", headers=_auth(bob))
        again = await client.delete(f"/api/v1/slots/{slot_id}/waitlist", headers=_auth(bob))

        assert left.status_code == 200
        assert again.status_code == 404
        assert again.json()["code"] == 3008


class TestAdminBalance:
    async def test_adjust_balance(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        alice = await _funded_member(client)

        resp = await client.post(
            f"/api/v1/admin/members/{alice['member_id']}/adjust-balance",
            json={"amount_cents": -100, "reason": "Broken racket strings"},
            headers=admin_headers,
        )

        assert resp.status_code == 200, resp.text
        assert resp.json()["data"]["balance_cents"] == 1500

    async def test_member_cannot_adjust(self, client: AsyncClient) -> None:
        alice = await _funded_member(client)

        resp = await client.post(
            f"/api/v1/admin/members/{alice['member_id']}/adjust-balance",
            json={"amount_cents": 10000, "reason": "free money"},
            headers=_auth(alice),
        )

        assert resp.status_code == 403
        assert resp.json()["code"] == 1006
