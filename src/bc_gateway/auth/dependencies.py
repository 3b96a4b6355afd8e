"""Bearer-token authentication for the club routes.

    @router.get("/account/balance")
    async def balance(user: Annotated[UserModel, Depends(get_current_user)]):
        ...

Only identity is resolved here. Roles are checked by the services against
the members row, never against the token claim.
"""

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.bc_common.database import get_db_session
from src.bc_common.errors import AccountDisabledError, InvalidCredentialsError
from src.bc_gateway.auth.jwt_handler import decode_token
from src.bc_gateway.user.db_models import UserModel

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


def _unauthorized(detail: str = "Invalid or expired token") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _user_id_from(token: str) -> uuid.UUID:
    try:
        claims = decode_token(token, expected_type="access")
        return uuid.UUID(claims.get("sub") or "")
    except (InvalidCredentialsError, ValueError):
        raise _unauthorized() from None


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> UserModel:
    """Resolve the Bearer token to an active user; 401 when it does not."""
    user = await db.get(UserModel, _user_id_from(token))
    if user is None:
        raise _unauthorized("Account no longer exists")
    if not user.is_active:
        raise AccountDisabledError()
    return user
