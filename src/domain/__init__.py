"""Domain layer - storage entities and repository contracts with no infrastructure dependencies."""

from . import entities

# Re-export key types for convenience
from .entities import (
    AdminConfig,
    Favorite,
    PlayRecord,
    SearchHistoryEntry,
    SkipConfig,
    User,
    make_skip_key,
)

__all__ = [
    "AdminConfig",
    "Favorite",
    "PlayRecord",
    "SearchHistoryEntry",
    "SkipConfig",
    "User",
    "entities",
    "make_skip_key",
]
