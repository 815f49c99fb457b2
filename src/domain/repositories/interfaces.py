"""Domain repository interfaces following Clean Architecture principles.

These interfaces define the contracts for data access without depending on
infrastructure implementations, following the dependency inversion principle.
`StorageProtocol` is the contract the web application programs against; the
repository protocols are the building blocks a storage backend composes.
"""

from collections.abc import Awaitable, Mapping
from typing import TYPE_CHECKING, Any, Protocol, Self

if TYPE_CHECKING:
    from src.domain.entities import (
        AdminConfig,
        Favorite,
        PlayRecord,
        SearchHistoryEntry,
        SkipConfig,
        User,
    )


class UserRepositoryProtocol(Protocol):
    """Repository interface for user account operations."""

    def get_user(self, username: str) -> Awaitable["User | None"]:
        """Get a user by name."""
        ...

    def save_user(self, username: str, password: str) -> Awaitable[None]:
        """Create the user or reset its password hash."""
        ...

    def ensure_user(self, username: str) -> Awaitable[bool]:
        """Provision a password-less user if absent."""
        ...

    def update_password(self, username: str, password: str) -> Awaitable[bool]:
        """Replace an existing user's password hash."""
        ...

    def delete_user(self, username: str) -> Awaitable[bool]:
        """Delete a user."""
        ...

    def list_usernames(self) -> Awaitable[list[str]]:
        """Get every username."""
        ...


class PlayRecordRepositoryProtocol(Protocol):
    """Repository interface for playback progress."""

    def get_record(self, username: str, key: str) -> Awaitable["PlayRecord | None"]: ...

    def save_record(
        self, username: str, key: str, record: "PlayRecord"
    ) -> Awaitable[None]: ...

    def get_records(self, username: str) -> Awaitable[dict[str, "PlayRecord"]]: ...

    def delete_record(self, username: str, key: str) -> Awaitable[bool]: ...


class FavoriteRepositoryProtocol(Protocol):
    """Repository interface for favorites."""

    def get_record(self, username: str, key: str) -> Awaitable["Favorite | None"]: ...

    def save_record(
        self, username: str, key: str, record: "Favorite"
    ) -> Awaitable[None]: ...

    def get_records(self, username: str) -> Awaitable[dict[str, "Favorite"]]: ...

    def delete_record(self, username: str, key: str) -> Awaitable[bool]: ...


class SkipConfigRepositoryProtocol(Protocol):
    """Repository interface for skip configs stored under composite keys."""

    def get_record(self, username: str, key: str) -> Awaitable["SkipConfig | None"]: ...

    def save_record(
        self, username: str, key: str, record: "SkipConfig"
    ) -> Awaitable[None]: ...

    def get_records(self, username: str) -> Awaitable[dict[str, "SkipConfig"]]: ...

    def delete_record(self, username: str, key: str) -> Awaitable[bool]: ...


class SearchHistoryRepositoryProtocol(Protocol):
    """Repository interface for search keywords."""

    def get_recent_entries(
        self, username: str, limit: int
    ) -> Awaitable[list["SearchHistoryEntry"]]:
        """Get entries most recent first."""
        ...

    def touch_keyword(self, username: str, keyword: str) -> Awaitable[None]:
        """Insert a keyword or refresh its recency."""
        ...

    def prune(self, username: str, keep: int) -> Awaitable[int]:
        """Evict everything beyond the `keep` most recent entries."""
        ...

    def delete_keyword(self, username: str, keyword: str) -> Awaitable[bool]: ...

    def delete_all_for_user(self, username: str) -> Awaitable[int]: ...


class GlobalConfigRepositoryProtocol(Protocol):
    """Repository interface for global config values."""

    def get_value(self, key: str) -> Awaitable[str | None]: ...

    def set_value(self, key: str, value: str) -> Awaitable[None]: ...


class UnitOfWorkProtocol(Protocol):
    """Unit of Work interface for transaction boundary management.

    Each UnitOfWork instance manages a single database transaction and provides
    access to all repositories sharing that transaction.
    """

    async def __aenter__(self) -> Self:
        """Enter async context manager."""
        ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit async context manager with automatic commit/rollback."""
        ...

    async def commit(self) -> None:
        """Explicitly commit the current transaction."""
        ...

    async def rollback(self) -> None:
        """Explicitly rollback the current transaction."""
        ...

    def get_user_repository(self) -> UserRepositoryProtocol: ...

    def get_play_record_repository(self) -> PlayRecordRepositoryProtocol: ...

    def get_favorite_repository(self) -> FavoriteRepositoryProtocol: ...

    def get_skip_config_repository(self) -> SkipConfigRepositoryProtocol: ...

    def get_search_history_repository(self) -> SearchHistoryRepositoryProtocol: ...

    def get_global_config_repository(self) -> GlobalConfigRepositoryProtocol: ...

    def clear_all(self) -> Awaitable[None]:
        """Delete every row of every storage table."""
        ...


class StorageProtocol(Protocol):
    """Persistence contract consumed by the web application.

    Records use the application's snake_case field names. Getters return None
    for absent records; deletes of absent records succeed silently.
    """

    # Play records
    async def get_play_record(self, username: str, key: str) -> "PlayRecord | None": ...

    async def set_play_record(
        self, username: str, key: str, record: "PlayRecord"
    ) -> None: ...

    async def get_all_play_records(self, username: str) -> dict[str, "PlayRecord"]: ...

    async def delete_play_record(self, username: str, key: str) -> None: ...

    # Favorites
    async def get_favorite(self, username: str, key: str) -> "Favorite | None": ...

    async def set_favorite(
        self, username: str, key: str, favorite: "Favorite"
    ) -> None: ...

    async def get_all_favorites(self, username: str) -> dict[str, "Favorite"]: ...

    async def delete_favorite(self, username: str, key: str) -> None: ...

    # Users
    async def register_user(self, username: str, password_hash: str) -> None: ...

    async def verify_user(self, username: str, password_hash: str) -> bool: ...

    async def check_user_exist(self, username: str) -> bool: ...

    async def change_password(self, username: str, new_password_hash: str) -> None: ...

    async def delete_user(self, username: str) -> None: ...

    async def get_all_users(self) -> list[str]: ...

    # Search history
    async def get_search_history(self, username: str) -> list[str]: ...

    async def add_search_history(self, username: str, keyword: str) -> None: ...

    async def delete_search_history(
        self, username: str, keyword: str | None = None
    ) -> None: ...

    # Admin config
    async def get_admin_config(self) -> "AdminConfig | None": ...

    async def set_admin_config(self, config: Mapping[str, Any]) -> None: ...

    # Skip configs
    async def get_skip_config(
        self, username: str, source: str, id_: str
    ) -> "SkipConfig | None": ...

    async def set_skip_config(
        self, username: str, source: str, id_: str, config: "SkipConfig"
    ) -> None: ...

    async def delete_skip_config(self, username: str, source: str, id_: str) -> None: ...

    async def get_all_skip_configs(self, username: str) -> dict[str, "SkipConfig"]: ...

    # Maintenance
    async def clear_all_data(self) -> None: ...
