"""SQLAlchemy database configuration and connection management.

This module is responsible for:
- Engine creation and configuration
- Session factory management
- Global engine lifecycle
"""

from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.config import get_logger, settings

# Create module logger
logger = get_logger(__name__)

# Backends whose dialects provide INSERT ... ON CONFLICT
SUPPORTED_BACKENDS = frozenset({"sqlite", "postgresql"})


def _prepare_sqlite_path(db_url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    database = make_url(db_url).database
    if database and database != ":memory:" and not database.startswith("file:"):
        Path(database).parent.mkdir(parents=True, exist_ok=True)


def create_db_engine(connection_string: str | None = None) -> AsyncEngine:
    """Create async SQLAlchemy engine, tuned for SQLite when that is the backend.

    Raises:
        ValueError: If the URL names a backend without upsert support
    """
    db_url = connection_string or settings.database.url
    backend = make_url(db_url).get_backend_name()
    if backend not in SUPPORTED_BACKENDS:
        raise ValueError(
            f"Unsupported database backend {backend!r}; "
            f"expected one of {sorted(SUPPORTED_BACKENDS)}"
        )
    is_sqlite = backend == "sqlite"

    engine_kwargs: dict[str, Any] = {
        "echo": settings.database.echo,
        "pool_pre_ping": True,
    }

    if is_sqlite:
        _prepare_sqlite_path(db_url)
        # Wait on busy connections rather than failing immediately
        engine_kwargs["connect_args"] = {"timeout": 30.0}
    else:
        engine_kwargs.update(
            pool_size=settings.database.pool_size,
            max_overflow=settings.database.max_overflow,
            pool_timeout=settings.database.pool_timeout,
            pool_recycle=settings.database.pool_recycle,
        )

    engine = create_async_engine(db_url, **engine_kwargs)

    if is_sqlite:

        @event.listens_for(engine.sync_engine, "connect")  # type: ignore
        def _set_sqlite_pragma(dbapi_connection, _):  # type: ignore # pragma: no cover
            """Set SQLite PRAGMAs on connection creation."""
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA busy_timeout = 30000")
            cursor.execute("PRAGMA journal_mode = WAL")
            cursor.execute("PRAGMA synchronous = NORMAL")
            cursor.close()

    logger.info("Created database engine", dialect=engine.dialect.name)
    return engine


# Global engine singleton
_engine: AsyncEngine | None = None


def get_engine() -> AsyncEngine:
    """Get or create the global database engine singleton."""
    global _engine
    if _engine is None:
        _engine = create_db_engine()
    return _engine


def create_session_factory(
    engine: AsyncEngine | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory for the given engine.

    Args:
        engine: Optional engine (uses global engine if None)

    Returns:
        Async session factory for creating properly configured sessions
    """
    return async_sessionmaker(
        bind=engine or get_engine(),
        expire_on_commit=False,  # Important: Don't expire objects after commit
        autoflush=True,
    )


# Global session factory singleton
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the global session factory singleton."""
    global _session_factory
    if _session_factory is None:
        _session_factory = create_session_factory()
    return _session_factory


async def dispose_engine() -> None:
    """Dispose the global engine and forget the singletons.

    Call before the event loop that used the engine goes away.
    """
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


__all__ = [
    "SUPPORTED_BACKENDS",
    "create_db_engine",
    "create_session_factory",
    "dispose_engine",
    "get_engine",
    "get_session_factory",
]
