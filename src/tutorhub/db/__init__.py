"""TutorHub database module.

Database models and migrations:
- SQLAlchemy 2.x ORM models
- Alembic migration configuration
- Connection pooling via psycopg
- Connection health check with exponential-backoff retry
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, TypeVar

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from tutorhub.core.errors import TutorHubError

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable, Callable

logger = logging.getLogger(__name__)

T = TypeVar("T")

_engine = None
_async_session_factory: async_sessionmaker[AsyncSession] | None = None


class DatabaseUnavailableError(TutorHubError):
    """Raised when the database stays unreachable after every retry."""

    code = "database_unavailable"
    status_code = 503
    default_message = "Veritabanına bağlanılamadı, lütfen daha sonra tekrar deneyin"

    def __init__(self, attempts: int, cause: Exception | None = None) -> None:
        self.attempts = attempts
        self.cause = cause
        super().__init__(detail={"attempts": attempts})


def _get_database_url() -> str:
    """Get the database URL from settings, using the async psycopg driver."""
    from tutorhub.core.settings import get_settings

    settings = get_settings()
    url = str(settings.database.url)
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+psycopg://", 1)
    elif url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+psycopg://", 1)
    return url


def _init_engine() -> None:
    """Initialize the database engine and session factory."""
    global _engine, _async_session_factory

    if _engine is not None:
        return

    from tutorhub.core.settings import get_settings

    settings = get_settings()

    _engine = create_async_engine(
        _get_database_url(),
        pool_size=settings.database.pool_size,
        max_overflow=settings.database.max_overflow,
        pool_timeout=settings.database.pool_timeout,
        echo=settings.database.echo,
    )

    _async_session_factory = async_sessionmaker(
        bind=_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Get an async database session.

    Usage:
        async with get_async_session() as session:
            result = await session.execute(query)
            await session.commit()

    Yields:
        AsyncSession for database operations.
    """
    _init_engine()

    if _async_session_factory is None:
        msg = "Database session factory not initialized"
        raise RuntimeError(msg)

    session = _async_session_factory()
    try:
        yield session
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def close_engine() -> None:
    """Close the database engine.

    Call this during application shutdown to clean up connections.
    """
    global _engine, _async_session_factory

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _async_session_factory = None


def is_connection_error(exc: BaseException) -> bool:
    """Whether an exception means the database could not be reached."""
    if isinstance(exc, (OperationalError, InterfaceError)):
        return True
    return isinstance(exc, DBAPIError) and bool(exc.connection_invalidated)


async def with_database_connection(
    session: AsyncSession,
    operation: Callable[[AsyncSession], Awaitable[T]],
    *,
    max_attempts: int | None = None,
    base_delay: float | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run an operation after a connection health check, retrying on outages.

    Each attempt first executes ``SELECT 1``. Connection errors (from the
    health check or the operation) are retried with delays of
    ``base_delay * 2**attempt`` seconds (1s, 2s, 4s, ...) between attempts.
    Any other error is raised immediately.

    Args:
        session: Session used for the health check and the operation.
        operation: Coroutine function receiving the session.
        max_attempts: Total attempts (defaults to settings, 3).
        base_delay: First backoff delay in seconds (defaults to settings, 1.0).
        sleep: Awaitable sleep function, replaceable in tests.

    Returns:
        Whatever the operation returns.

    Raises:
        DatabaseUnavailableError: If every attempt failed with a connection error.
    """
    if max_attempts is None or base_delay is None:
        from tutorhub.core.settings import get_settings_safe

        settings = get_settings_safe()
        if max_attempts is None:
            max_attempts = settings.database.retry_attempts if settings else 3
        if base_delay is None:
            base_delay = settings.database.retry_base_delay if settings else 1.0

    last_error: Exception | None = None

    for attempt in range(max_attempts):
        try:
            await session.execute(text("SELECT 1"))
            return await operation(session)
        except Exception as exc:
            if not is_connection_error(exc):
                raise

            last_error = exc
            logger.warning(
                "Database connection failed (attempt %d/%d): %s",
                attempt + 1,
                max_attempts,
                exc,
                extra={"attempt": attempt + 1, "max_attempts": max_attempts},
            )
            await session.rollback()

            if attempt < max_attempts - 1:
                wait = base_delay * (2**attempt)
                logger.info("Waiting %.1fs before retry", wait)
                await sleep(wait)

    logger.error("Database operation failed after %d attempts", max_attempts)
    raise DatabaseUnavailableError(max_attempts, last_error) from last_error
