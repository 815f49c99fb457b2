"""Core domain entities for per-user media storage."""

from .account import SearchHistoryEntry, User
from .admin import ADMIN_CONFIG_KEY, AdminConfig
from .media import (
    SKIP_KEY_SEPARATOR,
    Favorite,
    FavoriteOrigin,
    PlayRecord,
    SkipConfig,
    make_skip_key,
)
from .shared import ensure_utc

__all__ = [
    "ADMIN_CONFIG_KEY",
    "SKIP_KEY_SEPARATOR",
    # Admin
    "AdminConfig",
    # Media records
    "Favorite",
    "FavoriteOrigin",
    "PlayRecord",
    # Accounts
    "SearchHistoryEntry",
    "SkipConfig",
    "User",
    "ensure_utc",
    "make_skip_key",
]
