"""Repositories for per-user media records keyed by (username, key).

Play records, favorites and skip configs share one shape: a row per user and
record key, overwritten wholesale on save.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.entities import Favorite, PlayRecord, SkipConfig
from src.infrastructure.persistence.database.db_models import (
    DBFavorite,
    DBPlayRecord,
    DBSkipConfig,
    StorageDBBase,
)
from src.infrastructure.persistence.repositories.base_repo import (
    BaseRepository,
)
from src.infrastructure.persistence.repositories.media.mapper import (
    FavoriteMapper,
    PlayRecordMapper,
    SkipConfigMapper,
)
from src.infrastructure.persistence.repositories.repo_decorator import db_operation


class UserKeyedRepository[TDBModel: StorageDBBase, TDomainModel](
    BaseRepository[TDBModel, TDomainModel]
):
    """Keyed get/save/list/delete for tables unique on (username, key)."""

    @db_operation("get_record")
    async def get_record(self, username: str, key: str) -> TDomainModel | None:
        """Get one record, or None when absent."""
        return await self.find_one_by({"username": username, "key": key})

    @db_operation("save_record")
    async def save_record(self, username: str, key: str, record: TDomainModel) -> None:
        """Create or fully overwrite the record stored under (username, key)."""
        await self.upsert(
            lookup_attrs={"username": username, "key": key},
            values=self.mapper.to_values(record),
        )

    @db_operation("get_records")
    async def get_records(self, username: str) -> dict[str, TDomainModel]:
        """Get all of a user's records keyed by record key."""
        db_models = await self.find_models_by({"username": username})
        return {
            db_model.key: await self.mapper.to_domain(db_model)
            for db_model in db_models
        }

    @db_operation("delete_record")
    async def delete_record(self, username: str, key: str) -> bool:
        """Delete a record; returns False when there was nothing to delete."""
        return await self.delete_by({"username": username, "key": key}) > 0


class PlayRecordRepository(UserKeyedRepository[DBPlayRecord, PlayRecord]):
    """Repository for playback progress."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(
            session=session,
            model_class=DBPlayRecord,
            mapper=PlayRecordMapper(),
        )


class FavoriteRepository(UserKeyedRepository[DBFavorite, Favorite]):
    """Repository for favorites."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(
            session=session,
            model_class=DBFavorite,
            mapper=FavoriteMapper(),
        )


class SkipConfigRepository(UserKeyedRepository[DBSkipConfig, SkipConfig]):
    """Repository for skip configs; keys are already `source+id` strings."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(
            session=session,
            model_class=DBSkipConfig,
            mapper=SkipConfigMapper(),
        )
