"""Account repositories package."""

from src.infrastructure.persistence.repositories.account.search_history import (
    SearchHistoryRepository,
)
from src.infrastructure.persistence.repositories.account.users import UserRepository

__all__ = [
    "SearchHistoryRepository",
    "UserRepository",
]
