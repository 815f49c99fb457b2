"""Repository for process-wide configuration values."""

from typing import Any, override

from attrs import define
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.persistence.database.db_models import DBGlobalConfig
from src.infrastructure.persistence.repositories.base_repo import (
    BaseModelMapper,
    BaseRepository,
)
from src.infrastructure.persistence.repositories.repo_decorator import db_operation


@define(frozen=True, slots=True)
class GlobalConfigMapper(BaseModelMapper[DBGlobalConfig, str | None]):
    """Exposes a config row as its serialized text value."""

    @staticmethod
    @override
    async def to_domain(db_model: DBGlobalConfig) -> str | None:
        if not db_model:
            return None
        return db_model.value

    @staticmethod
    @override
    def to_values(domain_model: str | None) -> dict[str, Any]:
        return {"value": domain_model}


class GlobalConfigRepository(BaseRepository[DBGlobalConfig, str | None]):
    """Repository for global key/value config rows."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session and mapper."""
        super().__init__(
            session=session,
            model_class=DBGlobalConfig,
            mapper=GlobalConfigMapper(),
        )

    @db_operation("get_value")
    async def get_value(self, key: str) -> str | None:
        """Get the raw stored value for a config key."""
        return await self.find_one_by({"key": key})

    @db_operation("set_value")
    async def set_value(self, key: str, value: str) -> None:
        """Store a raw value under a config key, replacing any previous one."""
        await self.upsert(
            lookup_attrs={"key": key},
            values=self.mapper.to_values(value),
        )
