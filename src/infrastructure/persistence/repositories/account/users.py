"""Repository for user accounts."""

from datetime import UTC, datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.entities import User
from src.infrastructure.persistence.database.db_models import DBUser
from src.infrastructure.persistence.repositories.account.mapper import UserMapper
from src.infrastructure.persistence.repositories.base_repo import BaseRepository
from src.infrastructure.persistence.repositories.repo_decorator import db_operation


class UserRepository(BaseRepository[DBUser, User]):
    """Repository for user account operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session and mapper."""
        super().__init__(
            session=session,
            model_class=DBUser,
            mapper=UserMapper(),
        )

    @db_operation("get_user")
    async def get_user(self, username: str) -> User | None:
        """Get a user by name."""
        return await self.find_one_by({"username": username})

    @db_operation("save_user")
    async def save_user(self, username: str, password: str) -> None:
        """Create the user or reset its password hash."""
        await self.upsert(
            lookup_attrs={"username": username},
            values=self.mapper.to_values(User(username=username, password=password)),
        )

    @db_operation("ensure_user")
    async def ensure_user(self, username: str) -> bool:
        """Provision a password-less user row if none exists.

        Returns:
            True if the user was created by this call
        """
        return await self.insert_if_absent(
            lookup_attrs={"username": username},
            values={"password": ""},
        )

    @db_operation("update_password")
    async def update_password(self, username: str, password: str) -> bool:
        """Replace an existing user's password hash; False when the user is absent."""
        stmt = (
            update(self.model_class)
            .where(self.model_class.username == username)
            .values(password=password, updated_at=datetime.now(UTC))
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    @db_operation("delete_user")
    async def delete_user(self, username: str) -> bool:
        """Delete the user row only; owned records are left in place."""
        return await self.delete_by({"username": username}) > 0

    @db_operation("list_usernames")
    async def list_usernames(self) -> list[str]:
        """Get every username, oldest account first."""
        result = await self.session.execute(
            select(self.model_class.username).order_by(self.model_class.id)
        )
        return list(result.scalars().all())
