"""Admin settings service: read and update the club's AppSettings row."""

import logging
from dataclasses import replace

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bc_account.domain.guards import load_admin
from src.bc_account.domain.repository import MemberRepositoryProtocol
from src.bc_account.infrastructure.persistence import MemberRepository
from src.bc_admin.application.schemas import SettingsResponse, UpdateSettingsRequest
from src.bc_admin.domain.models import AppSettings
from src.bc_admin.domain.repository import SettingsRepositoryProtocol
from src.bc_admin.infrastructure.settings_repository import SettingsRepository
from src.bc_common.database import run_in_transaction
from src.bc_common.errors import SettingsNotFoundError

logger = logging.getLogger(__name__)


class AdminSettingsService:
    def __init__(
        self,
        repo: SettingsRepositoryProtocol | None = None,
        members: MemberRepositoryProtocol | None = None,
        club_id: str | None = None,
    ) -> None:
        self._repo: SettingsRepositoryProtocol = repo or SettingsRepository()
        self._members: MemberRepositoryProtocol = members or MemberRepository()
        self._club_id = club_id or settings.CLUB_ID

    async def get_settings(self, db: AsyncSession, admin_id: str) -> SettingsResponse:
        await load_admin(self._members, db, self._club_id, admin_id)
        current = await self._repo.get_settings(db, self._club_id)
        if current is None:
            raise SettingsNotFoundError(self._club_id)
        return SettingsResponse.from_settings(current)

    async def update_settings(
        self, db: AsyncSession, admin_id: str, body: UpdateSettingsRequest
    ) -> SettingsResponse:
        changes = body.model_dump(exclude_none=True)

        async def _work(session: AsyncSession) -> AppSettings:
            await load_admin(self._members, session, self._club_id, admin_id)
            current = await self._repo.get_settings(session, self._club_id)
            if current is None:
                current = AppSettings(club_id=self._club_id)
            return await self._repo.save_settings(
                session, replace(current, **changes, updated_by=admin_id)
            )

        saved = await run_in_transaction(db, _work)
        logger.info("Admin %s updated settings: %s", admin_id, changes)
        return SettingsResponse.from_settings(saved)
