"""Media record repositories package."""

from src.infrastructure.persistence.repositories.media.records import (
    FavoriteRepository,
    PlayRecordRepository,
    SkipConfigRepository,
    UserKeyedRepository,
)

__all__ = [
    "FavoriteRepository",
    "PlayRecordRepository",
    "SkipConfigRepository",
    "UserKeyedRepository",
]
