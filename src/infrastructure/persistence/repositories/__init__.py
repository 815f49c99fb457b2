"""Repository layer for database operations with SQLAlchemy 2.0."""

from src.infrastructure.persistence.repositories.account import (
    SearchHistoryRepository,
    UserRepository,
)
from src.infrastructure.persistence.repositories.base_repo import (
    BaseModelMapper,
    BaseRepository,
    ModelMapper,
)
from src.infrastructure.persistence.repositories.global_config import (
    GlobalConfigRepository,
)
from src.infrastructure.persistence.repositories.media import (
    FavoriteRepository,
    PlayRecordRepository,
    SkipConfigRepository,
    UserKeyedRepository,
)
from src.infrastructure.persistence.repositories.repo_decorator import db_operation

__all__ = [
    "BaseModelMapper",
    "BaseRepository",
    "FavoriteRepository",
    "GlobalConfigRepository",
    "ModelMapper",
    "PlayRecordRepository",
    "SearchHistoryRepository",
    "SkipConfigRepository",
    "UserKeyedRepository",
    "UserRepository",
    "db_operation",
]
