"""Async session factory and transactional scope for ClipLink."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from cliplink.errors import StorageUnavailableError

logger = logging.getLogger(__name__)


def create_session_factory(
    engine: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the engine.

    Args:
        engine: Async database engine.

    Returns:
        async_sessionmaker instance.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@asynccontextmanager
async def session_scope(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Async context manager for one unit of work.

    Commits on success, rolls back on exception, closes on exit. SQLAlchemy
    failures surface as StorageUnavailableError with the driver error chained.

    Args:
        session_factory: Factory injected by the caller.

    Yields:
        AsyncSession instance.
    """
    try:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
    except SQLAlchemyError as exc:
        logger.warning("Storage operation failed: %s", exc.__class__.__name__)
        raise StorageUnavailableError(f"storage operation failed: {exc.__class__.__name__}") from exc
