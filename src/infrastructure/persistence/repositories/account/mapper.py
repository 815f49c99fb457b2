"""Account mappers for users and search history."""

from typing import Any, override

from attrs import define

from src.domain.entities import SearchHistoryEntry, User, ensure_utc
from src.infrastructure.persistence.database.db_models import DBSearchHistory, DBUser
from src.infrastructure.persistence.repositories.base_repo import BaseModelMapper


@define(frozen=True, slots=True)
class UserMapper(BaseModelMapper[DBUser, User]):
    """Maps between DBUser and User domain models."""

    @staticmethod
    @override
    async def to_domain(db_model: DBUser) -> User:
        if not db_model:
            return None

        return User(
            username=db_model.username,
            password=db_model.password,
            id=db_model.id,
        )

    @staticmethod
    @override
    def to_values(domain_model: User) -> dict[str, Any]:
        return {"password": domain_model.password}


@define(frozen=True, slots=True)
class SearchHistoryMapper(BaseModelMapper[DBSearchHistory, SearchHistoryEntry]):
    """Maps between DBSearchHistory and SearchHistoryEntry domain models."""

    @staticmethod
    @override
    async def to_domain(db_model: DBSearchHistory) -> SearchHistoryEntry:
        if not db_model:
            return None

        return SearchHistoryEntry(
            username=db_model.username,
            keyword=db_model.keyword,
            updated_at=ensure_utc(db_model.updated_at),
            id=db_model.id,
        )
