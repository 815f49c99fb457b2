"""Domain repository interfaces following Clean Architecture principles.

These interfaces define the contracts for data access without depending on
infrastructure implementations, following the dependency inversion principle.
"""

from .interfaces import (
    FavoriteRepositoryProtocol,
    GlobalConfigRepositoryProtocol,
    PlayRecordRepositoryProtocol,
    SearchHistoryRepositoryProtocol,
    SkipConfigRepositoryProtocol,
    StorageProtocol,
    UnitOfWorkProtocol,
    UserRepositoryProtocol,
)

__all__ = [
    "FavoriteRepositoryProtocol",
    "GlobalConfigRepositoryProtocol",
    "PlayRecordRepositoryProtocol",
    "SearchHistoryRepositoryProtocol",
    "SkipConfigRepositoryProtocol",
    "StorageProtocol",
    "UnitOfWorkProtocol",
    "UserRepositoryProtocol",
]
