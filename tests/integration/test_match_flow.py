"""Integration tests for match reporting, confirmation and ratings.

Run: RUN_INTEGRATION=1 pytest tests/integration/test_match_flow.py -v
Pre-condition: alembic upgrade head
"""

import pytest
from httpx import AsyncClient

from tests.integration.helpers import future_slot_time, sign_in, unique_user

pytestmark = pytest.mark.asyncio(loop_scope="session")


async def _players(client: AsyncClient, n: int) -> list[dict[str, str]]:
    return [await sign_in(client, unique_user()) for _ in range(n)]


def _auth(player: dict[str, str]) -> dict[str, str]:
    return {"Authorization": player["Authorization"]}


async def _report_singles(
    client: AsyncClient, alice: dict[str, str], bob: dict[str, str], **scores: int
) -> str:
    resp = await client.post(
        "/api/v1/matches",
        json={
            "team1": [alice["member_id"]],
            "team2": [bob["member_id"]],
            "game_type": "singles",
            "slot_time": future_slot_time(),
            **scores,
        },
        headers=_auth(alice),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["match_id"]


class TestMatchFlow:
    async def test_confirmed_singles_updates_ratings(self, client: AsyncClient) -> None:
        alice, bob = await _players(client, 2)
        match_id = await _report_singles(client, alice, bob, score1=21, score2=15)

        resp = await client.post(
            f"/api/v1/matches/{match_id}/confirm", json={}, headers=_auth(bob)
        )

        data = resp.json()["data"]
        assert resp.status_code == 200, resp.text
        assert data["status"] == "confirmed"
        changes = {c["member_id"]: c["rating_change"] for c in data["rating_changes"]}
        assert changes == {alice["member_id"]: 20, bob["member_id"]: -20}

        history = await client.get("/api/v1/matches/history/me", headers=_auth(alice))
        [entry] = history.json()["data"]["items"]
        assert entry["match_id"] == match_id
        assert entry["outcome"] == "win"

    async def test_double_confirmation_rejected(self, client: AsyncClient) -> None:
        alice, bob = await _players(client, 2)
        match_id = await _report_singles(client, alice, bob, score1=21, score2=15)

        resp = await client.post(
            f"/api/v1/matches/{match_id}/confirm", json={}, headers=_auth(alice)
        )

        assert resp.status_code == 409
        assert resp.json()["code"] == 4005

    async def test_outsider_cannot_confirm(self, client: AsyncClient) -> None:
        alice, bob, carol = await _players(client, 3)
        match_id = await _report_singles(client, alice, bob, score1=21, score2=15)

        resp = await client.post(
            f"/api/v1/matches/{match_id}/confirm", json={}, headers=_auth(carol)
        )

        assert resp.status_code == 403
        assert resp.json()["code"] == 4004

    async def test_list_my_matches(self, client: AsyncClient) -> None:
        alice, bob = await _players(client, 2)
        match_id = await _report_singles(client, alice, bob)

        resp = await client.get(
            "/api/v1/matches", params={"status": "pending_confirmation"}, headers=_auth(bob)
        )

        assert [m["match_id"] for m in resp.json()["data"]["items"]] == [match_id]


class TestAdminMatchActions:
    async def test_cancellation_approved(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        alice, bob = await _players(client, 2)
        match_id = await _report_singles(client, alice, bob, score1=21, score2=15)
        await client.post(f"/api/v1/matches/{match_id}/confirm", json={}, headers=_auth(bob))

        requested = await client.post(
            f"/api/v1/matches/{match_id}/cancellation", headers=_auth(bob)
        )
        assert requested.json()["data"]["status"] == "requested_cancellation"

        resp = await client.post(
            f"/api/v1/admin/matches/{match_id}/cancellation",
            json={"action": "approve"},
            headers=admin_headers,
        )

        assert resp.status_code == 200, resp.text
        assert resp.json()["data"]["status"] == "cancelled"

    async def test_admin_rejects_pending_match(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        alice, bob = await _players(client, 2)
        match_id = await _report_singles(client, alice, bob, score1=21, score2=15)

        resp = await client.post(
            f"/api/v1/admin/matches/{match_id}/reject", headers=admin_headers
        )

        assert resp.json()["data"]["status"] == "rejected"

    async def test_admin_patches_scores(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        alice, bob = await _players(client, 2)
        match_id = await _report_singles(client, alice, bob)

        resp = await client.patch(
            f"/api/v1/admin/matches/{match_id}",
            json={"score1": 21, "score2": 19},
            headers=admin_headers,
        )

        data = resp.json()["data"]
        assert data["updated_fields"] == ["score1", "score2"]
        assert (data["score1"], data["score2"]) == (21, 19)


class TestLeaderboard:
    async def test_leaderboard_is_ranked(self, client: AsyncClient) -> None:
        [alice] = await _players(client, 1)

        resp = await client.get("/api/v1/members/leaderboard", headers=_auth(alice))

        assert resp.status_code == 200
        ranks = [i["rank"] for i in resp.json()["data"]["items"]]
        assert ranks == sorted(ranks)
