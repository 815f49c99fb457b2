"""Database Unit of Work implementation for transaction boundary management.

This module provides the concrete implementation of the UnitOfWork pattern,
handling transaction management and repository creation using a shared database session.
"""

from typing import Self

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import get_logger
from src.domain.repositories.interfaces import (
    FavoriteRepositoryProtocol,
    GlobalConfigRepositoryProtocol,
    PlayRecordRepositoryProtocol,
    SearchHistoryRepositoryProtocol,
    SkipConfigRepositoryProtocol,
    UserRepositoryProtocol,
)
from src.infrastructure.persistence.database.db_models import ALL_MODELS
from src.infrastructure.persistence.repositories.account import (
    SearchHistoryRepository,
    UserRepository,
)
from src.infrastructure.persistence.repositories.global_config import (
    GlobalConfigRepository,
)
from src.infrastructure.persistence.repositories.media import (
    FavoriteRepository,
    PlayRecordRepository,
    SkipConfigRepository,
)

logger = get_logger(__name__)


class DatabaseUnitOfWork:
    """Database implementation of the Unit of Work pattern.

    This class manages database transactions and provides access to all repositories
    that share the same transaction context. It follows Clean Architecture principles
    by implementing the domain's UnitOfWorkProtocol interface.

    The unit of work automatically commits on successful exit or rollback on exceptions,
    but also allows explicit commit/rollback control for complex business logic.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize with database session.

        Args:
            session: SQLAlchemy async session for database operations
        """
        self._session = session
        self._committed = False

    async def __aenter__(self) -> Self:
        """Enter async context manager."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit async context manager with automatic commit/rollback.

        If an exception occurred, automatically rollback the transaction.
        If no exception occurred and commit wasn't called explicitly, commit the transaction.
        """
        if exc_type is not None:
            await self.rollback()
        elif not self._committed:
            await self.commit()

    async def commit(self) -> None:
        """Explicitly commit the current transaction."""
        await self._session.commit()
        self._committed = True

    async def rollback(self) -> None:
        """Explicitly rollback the current transaction."""
        await self._session.rollback()

    def get_user_repository(self) -> UserRepositoryProtocol:
        """Get user repository using this unit of work's transaction."""
        return UserRepository(self._session)

    def get_play_record_repository(self) -> PlayRecordRepositoryProtocol:
        """Get play record repository using this unit of work's transaction."""
        return PlayRecordRepository(self._session)

    def get_favorite_repository(self) -> FavoriteRepositoryProtocol:
        """Get favorite repository using this unit of work's transaction."""
        return FavoriteRepository(self._session)

    def get_skip_config_repository(self) -> SkipConfigRepositoryProtocol:
        """Get skip config repository using this unit of work's transaction."""
        return SkipConfigRepository(self._session)

    def get_search_history_repository(self) -> SearchHistoryRepositoryProtocol:
        """Get search history repository using this unit of work's transaction."""
        return SearchHistoryRepository(self._session)

    def get_global_config_repository(self) -> GlobalConfigRepositoryProtocol:
        """Get global config repository using this unit of work's transaction."""
        return GlobalConfigRepository(self._session)

    async def clear_all(self) -> None:
        """Delete every row of every storage table within this transaction."""
        for model in ALL_MODELS:
            result = await self._session.execute(
                delete(model).execution_options(synchronize_session=False)
            )
            logger.debug(f"Cleared {result.rowcount} rows from {model.__tablename__}")
