from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bc_admin.domain.models import AppSettings


class SettingsRepositoryProtocol(Protocol):
    async def get_settings(self, db: AsyncSession, club_id: str) -> AppSettings | None: ...

    async def save_settings(self, db: AsyncSession, app_settings: AppSettings) -> AppSettings: ...
