"""Shared helpers for the live-database flows."""

import uuid
from datetime import UTC, datetime, timedelta

from httpx import AsyncClient

from config.settings import settings

ADMIN_USERNAME = f"admin_{uuid.uuid4().hex[:8]}"
settings.ADMIN_USERNAMES = [ADMIN_USERNAME]


def unique_user() -> dict[str, str]:
    """Fresh credentials so repeated runs never collide."""
    uid = uuid.uuid4().hex[:8]
    return {
        "username": f"player_{uid}",
        "email": f"player_{uid}@example.com",
        "password": "TestPass1",
        "name": f"Player {uid}",
    }


def future_slot_time() -> str:
    """A random hour well past any cancellation deadline."""
    offset = int(uuid.uuid4().hex[:6], 16) % (24 * 365 * 5)
    return (datetime(2031, 1, 1, tzinfo=UTC) + timedelta(hours=offset)).isoformat()


async def sign_in(client: AsyncClient, user: dict[str, str]) -> dict[str, str]:
    """Register + login; returns Authorization headers and the member id."""
    reg = await client.post("/api/v1/auth/register", json=user)
    assert reg.status_code == 201, reg.text
    login = await client.post(
        "/api/v1/auth/login",
        json={"username": user["username"], "password": user["password"]},
    )
    data = login.json()["data"]
    return {
        "Authorization": f"Bearer {data['access_token']}",
        "member_id": data["user"]["user_id"],
    }
