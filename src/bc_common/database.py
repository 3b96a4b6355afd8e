import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings
from src.bc_common.errors import AppError, InternalError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# serialization_failure, deadlock_detected
_RETRYABLE_SQLSTATES = frozenset({"40001", "40P01"})


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models across modules."""

    pass


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=20,
    max_overflow=10,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields an AsyncSession, auto-closes after request."""
    async with async_session_factory() as session:
        yield session


def sqlstate_of(exc: DBAPIError) -> str | None:
    """Extract the PostgreSQL SQLSTATE from a wrapped driver error."""
    orig = exc.orig
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def is_retryable(exc: DBAPIError) -> bool:
    return sqlstate_of(exc) in _RETRYABLE_SQLSTATES


async def run_in_transaction(
    db: AsyncSession,
    work: Callable[[AsyncSession], Awaitable[T]],
    max_attempts: int | None = None,
) -> T:
    """Run `work` as one atomic unit of work: commit on success, rollback on error.

    `work` must be a pure function of the state it re-reads, because it is
    re-invoked from scratch after a serialization failure or deadlock.
    AppError subclasses propagate unchanged; any other store failure (or
    retry exhaustion) is surfaced as InternalError.
    """
    attempts = max_attempts or settings.TX_MAX_ATTEMPTS
    for attempt in range(1, attempts + 1):
        try:
            result = await work(db)
            await db.commit()
            return result
        except AppError:
            await db.rollback()
            raise
        except DBAPIError as exc:
            await db.rollback()
            if is_retryable(exc) and attempt < attempts:
                logger.warning(
                    "Transaction conflict (sqlstate=%s), retrying %d/%d",
                    sqlstate_of(exc),
                    attempt,
                    attempts,
                )
                continue
            logger.exception("Transaction failed after %d attempt(s)", attempt)
            raise InternalError("Store transaction failed") from exc
        except Exception as exc:
            await db.rollback()
            logger.exception("Unexpected error inside transaction")
            raise InternalError("Unexpected error while processing request") from exc
    raise InternalError("Store transaction failed")
