"""SQLAlchemy database models for per-user media storage.

This module defines the storage tables using SQLAlchemy 2.0 patterns with
type annotations. Every per-user table is addressed by its natural key
(username plus a record key) through a unique constraint; the surrogate `id`
only serves ordering and bulk deletes.
"""

from datetime import UTC, datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    Float,
    Index,
    Integer,
    MetaData,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.ext.asyncio import AsyncAttrs, AsyncEngine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from src.config import get_logger

# Create module logger
logger = get_logger(__name__)

# Define naming convention for constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",  # Index
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",  # Unique constraint
    "ck": "ck_%(table_name)s_%(constraint_name)s",  # Check constraint
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",  # Foreign key
    "pk": "pk_%(table_name)s",  # Primary key
}

# Create metadata with naming convention
metadata = MetaData(naming_convention=convention)


class StorageDBBase(AsyncAttrs, DeclarativeBase):
    """Base class for all storage tables with surrogate id and timestamps."""

    metadata = metadata

    id: Mapped[int] = mapped_column(primary_key=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )


class DBUser(StorageDBBase):
    """Account row; password holds an opaque hash, empty when auto-provisioned."""

    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("username"),)

    username: Mapped[str] = mapped_column(String(255), nullable=False)
    password: Mapped[str] = mapped_column(String(255), default="", nullable=False)


class DBPlayRecord(StorageDBBase):
    """Playback progress per user and title key."""

    __tablename__ = "play_records"
    __table_args__ = (UniqueConstraint("username", "key"),)

    username: Mapped[str] = mapped_column(String(255), nullable=False)
    key: Mapped[str] = mapped_column(String(512), nullable=False)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    source_name: Mapped[str] = mapped_column(String(255), nullable=False)
    cover: Mapped[str] = mapped_column(String(2048), default="")
    year: Mapped[str] = mapped_column(String(16), default="")
    episode_index: Mapped[int] = mapped_column(Integer, default=0)
    total_episodes: Mapped[int] = mapped_column(Integer, default=0)
    play_time: Mapped[int] = mapped_column(Integer, default=0)
    total_time: Mapped[int] = mapped_column(Integer, default=0)
    save_time: Mapped[int] = mapped_column(BigInteger, default=0)
    search_title: Mapped[str] = mapped_column(String(512), default="")


class DBFavorite(StorageDBBase):
    """Favorited title per user and title key."""

    __tablename__ = "favorites"
    __table_args__ = (UniqueConstraint("username", "key"),)

    username: Mapped[str] = mapped_column(String(255), nullable=False)
    key: Mapped[str] = mapped_column(String(512), nullable=False)
    source_name: Mapped[str] = mapped_column(String(255), nullable=False)
    total_episodes: Mapped[int] = mapped_column(Integer, default=0)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    year: Mapped[str] = mapped_column(String(16), default="")
    cover: Mapped[str] = mapped_column(String(2048), default="")
    save_time: Mapped[int] = mapped_column(BigInteger, default=0)
    search_title: Mapped[str] = mapped_column(String(512), default="")
    origin: Mapped[str | None] = mapped_column(String(8))  # 'vod', 'live'


class DBSearchHistory(StorageDBBase):
    """Search keyword per user; updated_at carries recency."""

    __tablename__ = "search_history"
    __table_args__ = (
        UniqueConstraint("username", "keyword"),
        Index(None, "username", "updated_at"),
    )

    username: Mapped[str] = mapped_column(String(255), nullable=False)
    keyword: Mapped[str] = mapped_column(String(255), nullable=False)


class DBSkipConfig(StorageDBBase):
    """Intro/outro skip offsets per user and `source+id` key."""

    __tablename__ = "skip_configs"
    __table_args__ = (UniqueConstraint("username", "key"),)

    username: Mapped[str] = mapped_column(String(255), nullable=False)
    key: Mapped[str] = mapped_column(String(512), nullable=False)
    enable: Mapped[bool] = mapped_column(Boolean, default=True)
    intro_time: Mapped[float] = mapped_column(Float, default=0)
    outro_time: Mapped[float] = mapped_column(Float, default=0)


class DBGlobalConfig(StorageDBBase):
    """Process-wide key/value settings, serialized as text."""

    __tablename__ = "global_config"
    __table_args__ = (UniqueConstraint("key"),)

    key: Mapped[str] = mapped_column(String(64), nullable=False)
    value: Mapped[str | None] = mapped_column(Text)


# Wipe order for clear_all_data: children before users, config last
ALL_MODELS: tuple[type[StorageDBBase], ...] = (
    DBPlayRecord,
    DBFavorite,
    DBSearchHistory,
    DBSkipConfig,
    DBUser,
    DBGlobalConfig,
)


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Initialize database schema.

    Creates all tables if they don't exist.
    This is a safe operation that won't affect existing data.
    """
    if engine is None:
        from src.infrastructure.persistence.database.db_connection import get_engine

        engine = get_engine()

    try:
        async with engine.begin() as conn:
            await conn.run_sync(StorageDBBase.metadata.create_all)
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise
    else:
        logger.info("Database schema initialization complete")
