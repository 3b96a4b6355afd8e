"""User service: register, login, refresh.

Registration creates the login identity and the member profile in one
transaction; the member starts with rating 1000, balance 0 and the club's
registration fee pending (settled from the first top-up).
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bc_account.domain.models import Member
from src.bc_account.domain.repository import MemberRepositoryProtocol
from src.bc_account.infrastructure.persistence import MemberRepository
from src.bc_admin.domain.models import AppSettings
from src.bc_admin.domain.repository import SettingsRepositoryProtocol
from src.bc_admin.infrastructure.settings_repository import SettingsRepository
from src.bc_common.database import run_in_transaction
from src.bc_common.datetime_utils import utc_now
from src.bc_common.enums import MemberRole
from src.bc_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    UsernameExistsError,
)
from src.bc_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.bc_gateway.auth.password import hash_password, verify_password
from src.bc_gateway.user.db_models import UserModel

logger = logging.getLogger(__name__)


class UserService:
    """Stateless service — instantiate once, reuse across requests."""

    def __init__(
        self,
        members: MemberRepositoryProtocol | None = None,
        app_settings: SettingsRepositoryProtocol | None = None,
        club_id: str | None = None,
    ) -> None:
        self._members: MemberRepositoryProtocol = members or MemberRepository()
        self._settings: SettingsRepositoryProtocol = app_settings or SettingsRepository()
        self._club_id = club_id or settings.CLUB_ID

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        name: str,
        db: AsyncSession,
    ) -> tuple[UserModel, Member]:
        async def _work(session: AsyncSession) -> tuple[UserModel, Member]:
            # DB UNIQUE constraints remain the final guard
            result = await session.execute(select(UserModel).where(UserModel.username == username))
            if result.scalar_one_or_none() is not None:
                raise UsernameExistsError()
            result = await session.execute(select(UserModel).where(UserModel.email == email))
            if result.scalar_one_or_none() is not None:
                raise EmailExistsError()

            user = UserModel(
                username=username,
                email=email,
                password_hash=hash_password(password),
                is_active=True,
            )
            session.add(user)
            await session.flush()  # populate user.id without committing

            policy = await self._settings.get_settings(session, self._club_id)
            if policy is None:
                policy = AppSettings(club_id=self._club_id)
            role = MemberRole.ADMIN if username in settings.ADMIN_USERNAMES else MemberRole.MEMBER
            member = await self._members.create_member(
                session,
                Member(
                    id=str(user.id),
                    club_id=self._club_id,
                    name=name,
                    role=role.value,
                    registration_fee_pending=policy.registration_fee,
                ),
            )
            return user, member

        user, member = await run_in_transaction(db, _work)
        logger.info("Registered member %s (%s) role=%s", member.id, username, member.role)
        return user, member

    async def login(
        self,
        username: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[UserModel, str, str, str]:
        """Return (user, role, access_token, refresh_token).

        Unknown user and wrong password both raise InvalidCredentialsError so
        usernames cannot be enumerated.
        """
        result = await db.execute(select(UserModel).where(UserModel.username == username))
        user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        if not user.is_active:
            raise AccountDisabledError()

        user.last_login_at = utc_now()
        await db.commit()

        member = await self._members.get_member(db, self._club_id, str(user.id))
        role = member.role if member else MemberRole.MEMBER.value
        return (
            user,
            role,
            create_access_token(str(user.id), role),
            create_refresh_token(str(user.id)),
        )

    async def refresh(self, refresh_token: str, db: AsyncSession) -> str:
        """Issue a new access token. Refresh tokens are not rotated."""
        payload = decode_token(refresh_token, expected_type="refresh")
        user_id = str(payload["sub"])
        member = await self._members.get_member(db, self._club_id, user_id)
        role = member.role if member else MemberRole.MEMBER.value
        return create_access_token(user_id, role)
