"""Role checks shared by every admin-only operation."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.bc_account.domain.models import Member
from src.bc_account.domain.repository import MemberRepositoryProtocol
from src.bc_common.errors import AdminRequiredError, MemberNotFoundError


async def load_admin(
    repo: MemberRepositoryProtocol, db: AsyncSession, club_id: str, actor_id: str
) -> Member:
    """Return the acting member, raising unless they hold the admin role."""
    actor = await repo.get_member(db, club_id, actor_id)
    if actor is None:
        raise MemberNotFoundError(actor_id)
    if not actor.is_admin:
        raise AdminRequiredError()
    return actor
