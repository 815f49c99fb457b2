"""Repository for per-user search history with a bounded recency window."""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.entities import SearchHistoryEntry
from src.infrastructure.persistence.database.db_models import DBSearchHistory
from src.infrastructure.persistence.repositories.account.mapper import (
    SearchHistoryMapper,
)
from src.infrastructure.persistence.repositories.base_repo import BaseRepository
from src.infrastructure.persistence.repositories.repo_decorator import db_operation


class SearchHistoryRepository(BaseRepository[DBSearchHistory, SearchHistoryEntry]):
    """Repository for search keyword operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session and mapper."""
        super().__init__(
            session=session,
            model_class=DBSearchHistory,
            mapper=SearchHistoryMapper(),
        )

    @db_operation("get_recent_entries")
    async def get_recent_entries(
        self, username: str, limit: int
    ) -> list[SearchHistoryEntry]:
        """Get a user's entries, most recently used first."""
        return await self.find_by(
            {"username": username},
            order_by=("updated_at", False),
            limit=limit,
        )

    @db_operation("touch_keyword")
    async def touch_keyword(self, username: str, keyword: str) -> None:
        """Insert the keyword or mark an existing one as just used."""
        await self.upsert(lookup_attrs={"username": username, "keyword": keyword})

    @db_operation("prune")
    async def prune(self, username: str, keep: int) -> int:
        """Delete all but the `keep` most recent entries in a single statement.

        Returns:
            Number of entries evicted
        """
        newest = (
            select(self.model_class.id)
            .where(self.model_class.username == username)
            .order_by(self.model_class.updated_at.desc(), self.model_class.id.desc())
            .limit(keep)
        )
        stmt = (
            delete(self.model_class)
            .where(
                self.model_class.username == username,
                self.model_class.id.not_in(newest),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    @db_operation("delete_keyword")
    async def delete_keyword(self, username: str, keyword: str) -> bool:
        """Delete one keyword; False when it was not stored."""
        return await self.delete_by({"username": username, "keyword": keyword}) > 0

    @db_operation("delete_all_for_user")
    async def delete_all_for_user(self, username: str) -> int:
        """Delete every keyword of one user."""
        return await self.delete_by({"username": username})
