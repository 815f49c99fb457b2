"""Database-backed implementation of the storage interface.

`DatabaseStorage` is the adapter the web application talks to. Every public
call runs in its own unit of work (one session, one transaction) and
translates between the application's snake_case records and the ORM rows.

Two failure policies apply:
- Writes and reads propagate database errors to the caller.
- Deletes, password changes and user auto-provisioning are best-effort:
  database errors are logged and discarded so that removing something that is
  not there never surfaces as an error.
"""

from collections.abc import AsyncIterator, Iterator, Mapping
from contextlib import asynccontextmanager, contextmanager
import hmac
import json
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.config import get_logger, resilient_operation, settings
from src.domain.entities import (
    AdminConfig,
    Favorite,
    PlayRecord,
    SkipConfig,
    make_skip_key,
)
from src.domain.repositories.interfaces import StorageProtocol, UnitOfWorkProtocol
from src.infrastructure.persistence.database.db_connection import (
    get_session_factory,
)
from src.infrastructure.persistence.unit_of_work import DatabaseUnitOfWork

logger = get_logger(__name__)


@contextmanager
def _best_effort(action: str, **context: Any) -> Iterator[None]:
    """Log and discard database errors raised inside the block."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.bind(**context).warning(f"Ignoring failed {action}: {e}")


class DatabaseStorage:
    """Per-user record storage over a SQLAlchemy async session factory.

    Args:
        session_factory: Factory for request-scoped sessions (defaults to the
            global factory bound to ``settings.database.url``)
        search_history_limit: Keywords kept per user
        admin_config_key: Global config key holding the admin config blob
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        *,
        search_history_limit: int | None = None,
        admin_config_key: str | None = None,
    ) -> None:
        self._session_factory = session_factory or get_session_factory()
        self.search_history_limit = (
            search_history_limit
            if search_history_limit is not None
            else settings.storage.search_history_limit
        )
        self.admin_config_key = admin_config_key or settings.storage.admin_config_key

    @asynccontextmanager
    async def _unit_of_work(self) -> AsyncIterator[UnitOfWorkProtocol]:
        """Open a session and a transaction that commits when the block succeeds."""
        async with (
            self._session_factory() as session,
            DatabaseUnitOfWork(session) as uow,
        ):
            yield uow

    async def _ensure_user(self, username: str) -> None:
        """Provision a password-less user row so per-user records have an owner."""
        if not username:
            return
        with _best_effort("user provisioning", username=username):
            async with self._unit_of_work() as uow:
                if await uow.get_user_repository().ensure_user(username):
                    logger.debug(f"Auto-provisioned user {username}")

    # -------------------------------------------------------------------------
    # PLAY RECORDS
    # -------------------------------------------------------------------------

    async def get_play_record(self, username: str, key: str) -> PlayRecord | None:
        async with self._unit_of_work() as uow:
            return await uow.get_play_record_repository().get_record(username, key)

    async def set_play_record(
        self, username: str, key: str, record: PlayRecord
    ) -> None:
        await self._ensure_user(username)
        async with self._unit_of_work() as uow:
            await uow.get_play_record_repository().save_record(username, key, record)

    async def get_all_play_records(self, username: str) -> dict[str, PlayRecord]:
        async with self._unit_of_work() as uow:
            return await uow.get_play_record_repository().get_records(username)

    async def delete_play_record(self, username: str, key: str) -> None:
        with _best_effort("play record delete", username=username, key=key):
            async with self._unit_of_work() as uow:
                await uow.get_play_record_repository().delete_record(username, key)

    # -------------------------------------------------------------------------
    # FAVORITES
    # -------------------------------------------------------------------------

    async def get_favorite(self, username: str, key: str) -> Favorite | None:
        async with self._unit_of_work() as uow:
            return await uow.get_favorite_repository().get_record(username, key)

    async def set_favorite(self, username: str, key: str, favorite: Favorite) -> None:
        await self._ensure_user(username)
        async with self._unit_of_work() as uow:
            await uow.get_favorite_repository().save_record(username, key, favorite)

    async def get_all_favorites(self, username: str) -> dict[str, Favorite]:
        async with self._unit_of_work() as uow:
            return await uow.get_favorite_repository().get_records(username)

    async def delete_favorite(self, username: str, key: str) -> None:
        with _best_effort("favorite delete", username=username, key=key):
            async with self._unit_of_work() as uow:
                await uow.get_favorite_repository().delete_record(username, key)

    # -------------------------------------------------------------------------
    # USERS
    # -------------------------------------------------------------------------

    async def register_user(self, username: str, password_hash: str) -> None:
        """Create a user, or reset the password hash of an existing one."""
        async with self._unit_of_work() as uow:
            await uow.get_user_repository().save_user(username, password_hash)
        logger.info(f"Registered user {username}")

    async def verify_user(self, username: str, password_hash: str) -> bool:
        """Check a password hash; unknown users and mismatches both give False."""
        async with self._unit_of_work() as uow:
            user = await uow.get_user_repository().get_user(username)
        if user is None:
            return False
        return hmac.compare_digest(
            user.password.encode("utf-8"), password_hash.encode("utf-8")
        )

    async def check_user_exist(self, username: str) -> bool:
        async with self._unit_of_work() as uow:
            return await uow.get_user_repository().get_user(username) is not None

    async def change_password(self, username: str, new_password_hash: str) -> None:
        """Replace the password hash; a missing user is left missing."""
        with _best_effort("password change", username=username):
            async with self._unit_of_work() as uow:
                updated = await uow.get_user_repository().update_password(
                    username, new_password_hash
                )
            if not updated:
                logger.debug(f"Password change skipped, no user {username}")

    async def delete_user(self, username: str) -> None:
        """Delete the user row; records owned by the user are kept."""
        with _best_effort("user delete", username=username):
            async with self._unit_of_work() as uow:
                await uow.get_user_repository().delete_user(username)

    async def get_all_users(self) -> list[str]:
        async with self._unit_of_work() as uow:
            return await uow.get_user_repository().list_usernames()

    # -------------------------------------------------------------------------
    # SEARCH HISTORY
    # -------------------------------------------------------------------------

    async def get_search_history(self, username: str) -> list[str]:
        """Get the user's keywords, most recently used first."""
        async with self._unit_of_work() as uow:
            entries = await uow.get_search_history_repository().get_recent_entries(
                username, self.search_history_limit
            )
        return [entry.keyword for entry in entries]

    async def add_search_history(self, username: str, keyword: str) -> None:
        """Remember a keyword and evict the oldest beyond the history limit."""
        await self._ensure_user(username)
        async with self._unit_of_work() as uow:
            repo = uow.get_search_history_repository()
            await repo.touch_keyword(username, keyword)
            evicted = await repo.prune(username, self.search_history_limit)
        if evicted:
            logger.debug(f"Evicted {evicted} search keywords for {username}")

    async def delete_search_history(
        self, username: str, keyword: str | None = None
    ) -> None:
        """Delete one keyword, or the user's whole history when none is given.

        An empty keyword counts as none given.
        """
        if not keyword:
            async with self._unit_of_work() as uow:
                await uow.get_search_history_repository().delete_all_for_user(username)
            return

        with _best_effort("search keyword delete", username=username):
            async with self._unit_of_work() as uow:
                await uow.get_search_history_repository().delete_keyword(
                    username, keyword
                )

    # -------------------------------------------------------------------------
    # ADMIN CONFIG
    # -------------------------------------------------------------------------

    async def get_admin_config(self) -> AdminConfig | None:
        """Load the admin config; absent or unreadable blobs yield None."""
        async with self._unit_of_work() as uow:
            raw = await uow.get_global_config_repository().get_value(
                self.admin_config_key
            )
        if not raw:
            return None
        try:
            config = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Stored admin config is not valid JSON: {e}")
            return None
        if not isinstance(config, dict):
            logger.warning(
                f"Stored admin config is a {type(config).__name__}, expected an object"
            )
            return None
        return config

    async def set_admin_config(self, config: Mapping[str, Any]) -> None:
        async with self._unit_of_work() as uow:
            await uow.get_global_config_repository().set_value(
                self.admin_config_key, json.dumps(dict(config))
            )

    # -------------------------------------------------------------------------
    # SKIP CONFIGS
    # -------------------------------------------------------------------------

    async def get_skip_config(
        self, username: str, source: str, id_: str
    ) -> SkipConfig | None:
        async with self._unit_of_work() as uow:
            return await uow.get_skip_config_repository().get_record(
                username, make_skip_key(source, id_)
            )

    async def set_skip_config(
        self, username: str, source: str, id_: str, config: SkipConfig
    ) -> None:
        await self._ensure_user(username)
        async with self._unit_of_work() as uow:
            await uow.get_skip_config_repository().save_record(
                username, make_skip_key(source, id_), config
            )

    async def delete_skip_config(self, username: str, source: str, id_: str) -> None:
        key = make_skip_key(source, id_)
        with _best_effort("skip config delete", username=username, key=key):
            async with self._unit_of_work() as uow:
                await uow.get_skip_config_repository().delete_record(username, key)

    async def get_all_skip_configs(self, username: str) -> dict[str, SkipConfig]:
        """Get the user's skip configs keyed by ``source+id``."""
        async with self._unit_of_work() as uow:
            return await uow.get_skip_config_repository().get_records(username)

    # -------------------------------------------------------------------------
    # MAINTENANCE
    # -------------------------------------------------------------------------

    @resilient_operation("clear_all_data")
    async def clear_all_data(self) -> None:
        """Delete every stored row of every kind in one transaction."""
        async with self._unit_of_work() as uow:
            await uow.clear_all()
        logger.info("Cleared all storage data")


def get_storage() -> StorageProtocol:
    """Get the storage backend selected by ``settings.storage.backend``.

    Raises:
        ValueError: If the configured backend is unknown
    """
    backend = settings.storage.backend
    if backend == "database":
        return DatabaseStorage()
    raise ValueError(f"Unknown storage backend: {backend}")
