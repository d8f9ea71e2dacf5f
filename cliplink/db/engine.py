"""Async engine creation and schema lifecycle for ClipLink."""

from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from cliplink.db.base import Base
from cliplink.db.exceptions import ConfigurationError


def default_database_url() -> str:
    """SQLite database under ~/.clipboard, matching the server's historical location."""
    return f"sqlite+aiosqlite:///{Path.home() / '.clipboard' / 'clipboard.db'}"


def _normalize_url(url: str) -> str:
    """Ensure URL uses an async driver (aiosqlite or asyncpg)."""
    u = url.strip()
    if not u:
        raise ConfigurationError("Database URL must not be empty.")
    if u.startswith("sqlite://"):
        return "sqlite+aiosqlite://" + u[len("sqlite://") :]
    if u.startswith("postgresql://"):
        return "postgresql+asyncpg://" + u[len("postgresql://") :]
    if u.startswith(("sqlite+aiosqlite://", "postgresql+asyncpg://")):
        return u
    raise ConfigurationError(
        "Database URL must be SQLite (sqlite://) or PostgreSQL (postgresql://)."
    )


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    """SQLite leaves foreign keys off unless each connection opts in."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _ensure_sqlite_parent(url: str) -> None:
    try:
        parsed = make_url(url)
    except ArgumentError as exc:
        raise ConfigurationError("Database URL could not be parsed.") from exc
    database = parsed.database
    if not database or database == ":memory:":
        return
    Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)


def create_engine(
    database_url: str | None = None,
    *,
    pool_size: int = 10,
    max_overflow: int = 10,
    pool_timeout: float = 30.0,
    pool_recycle: int = 1800,
    pool_pre_ping: bool = True,
    echo: bool = False,
) -> AsyncEngine:
    """Create an async database engine.

    Args:
        database_url: sqlite:// or postgresql:// URL. If None or blank, uses
            the default SQLite file under ~/.clipboard.
        pool_size: Connection pool size (PostgreSQL only).
        max_overflow: Extra connections beyond pool_size when busy (PostgreSQL only).
        pool_timeout: Seconds to wait for a connection (PostgreSQL only).
        pool_recycle: Seconds after which connections are recycled (PostgreSQL only).
        pool_pre_ping: Ping connections before use.
        echo: Log SQL (for development).

    Returns:
        Configured AsyncEngine.

    Raises:
        ConfigurationError: URL invalid or unsupported.
    """
    url = _normalize_url(database_url or default_database_url())
    if url.startswith("sqlite+aiosqlite://"):
        _ensure_sqlite_parent(url)
        engine = create_async_engine(url, pool_pre_ping=pool_pre_ping, echo=echo)
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    return create_async_engine(
        url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_timeout=pool_timeout,
        pool_recycle=pool_recycle,
        pool_pre_ping=pool_pre_ping,
        echo=echo,
    )


async def create_schema(engine: AsyncEngine) -> None:
    """Create all ClipLink tables that do not exist yet."""
    # Import for side effect: registers every model on Base.metadata.
    import cliplink.sync  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_schema(engine: AsyncEngine) -> None:
    """Drop all ClipLink tables."""
    import cliplink.sync  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
