"""Repository layer for database operations with SQLAlchemy 2.0 best practices."""

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any, Protocol, TypeVar

from attrs import define
from sqlalchemy import Delete, Select, delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from src.config import get_logger
from src.infrastructure.persistence.database.db_models import StorageDBBase
from src.infrastructure.persistence.repositories.repo_decorator import db_operation

# Type variables with proper constraints
TDBModel = TypeVar("TDBModel", bound=StorageDBBase)
TDomainModel = TypeVar("TDomainModel")

type Conditions = dict[str, Any] | list[ColumnElement[bool]]

logger = get_logger(__name__)

# Dialects with INSERT ... ON CONFLICT support
_UPSERT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class ModelMapper[TDBModel: StorageDBBase, TDomainModel](Protocol):
    """Protocol for bidirectional mapping between models."""

    @staticmethod
    async def to_domain(db_model: TDBModel) -> TDomainModel:
        """Convert database model to domain model."""
        ...

    @staticmethod
    def to_values(domain_model: TDomainModel) -> dict[str, Any]:
        """Convert domain model to column values."""
        ...

    @staticmethod
    async def map_collection(
        db_models: Sequence[TDBModel],
    ) -> list[TDomainModel]:
        """Map a collection of DB models to domain models."""
        ...


@define(frozen=True, slots=True)
class BaseModelMapper[TDBModel: StorageDBBase, TDomainModel]:
    """Base implementation of ModelMapper with common functionality.

    Usage:
        @define(frozen=True, slots=True)
        class SkipConfigMapper(BaseModelMapper[DBSkipConfig, SkipConfig]):
            @staticmethod
            async def to_domain(db_model: DBSkipConfig) -> SkipConfig:
                return SkipConfig(...)

            @staticmethod
            def to_values(domain_model: SkipConfig) -> dict[str, Any]:
                return {"enable": domain_model.enable, ...}
    """

    @staticmethod
    async def to_domain(db_model: TDBModel) -> TDomainModel:
        """Default implementation returns None for None input."""
        if not db_model:
            return None
        raise NotImplementedError("Subclasses must implement to_domain")

    @staticmethod
    def to_values(domain_model: TDomainModel) -> dict[str, Any]:
        """Default implementation raises NotImplementedError."""
        raise NotImplementedError("Subclasses must implement to_values")

    @classmethod
    async def map_collection(
        cls,
        db_models: Sequence[TDBModel],
    ) -> list[TDomainModel]:
        """Map a collection of DB models to domain models.

        Uses cls.to_domain to ensure the subclass implementation is called,
        not BaseModelMapper.to_domain directly.
        """
        if not db_models:
            return []

        domain_models = []
        for db_model in db_models:
            domain_model = await cls.to_domain(db_model)
            if domain_model is not None:
                domain_models.append(domain_model)

        return domain_models


class BaseRepository[TDBModel: StorageDBBase, TDomainModel]:
    """Base repository for keyed CRUD operations on one table."""

    def __init__(
        self,
        session: AsyncSession,
        model_class: type[TDBModel],
        mapper: ModelMapper[TDBModel, TDomainModel],
    ) -> None:
        """Initialize repository with session and model mappings."""
        self.session = session
        self.model_class = model_class
        self.mapper = mapper
        logger.trace(
            f"Initialized {self.__class__.__name__} for {model_class.__name__}",
        )

    # -------------------------------------------------------------------------
    # STATEMENT BUILDERS
    # -------------------------------------------------------------------------

    def _apply_conditions[S: (Select, Delete)](self, stmt: S, conditions: Conditions) -> S:
        """Add WHERE clauses from a field dict or a list of expressions."""
        match conditions:
            case dict():
                for field, value in conditions.items():
                    stmt = stmt.where(getattr(self.model_class, field) == value)
            case list():
                for condition in conditions:
                    stmt = stmt.where(condition)
        return stmt

    def select_where(
        self,
        conditions: Conditions,
        order_by: tuple[str, bool] | None = None,
        limit: int | None = None,
    ) -> Select[tuple[TDBModel]]:
        """Create a select statement with conditions, ordering and limit."""
        stmt = self._apply_conditions(select(self.model_class), conditions)

        if order_by:
            field, ascending = order_by
            column = getattr(self.model_class, field)
            # Break timestamp ties by insertion order
            stmt = stmt.order_by(
                column if ascending else column.desc(),
                self.model_class.id if ascending else self.model_class.id.desc(),
            )

        if limit is not None:
            stmt = stmt.limit(limit)

        return stmt

    def _insert(self):
        """Return the dialect-specific INSERT construct with ON CONFLICT support."""
        dialect = self.session.get_bind().dialect.name
        try:
            return _UPSERT_INSERTS[dialect]
        except KeyError:
            raise NotImplementedError(
                f"Upserts are not supported for the {dialect!r} dialect"
            ) from None

    # -------------------------------------------------------------------------
    # READ OPERATIONS
    # -------------------------------------------------------------------------

    @db_operation("find_by")
    async def find_by(
        self,
        conditions: Conditions,
        order_by: tuple[str, bool] | None = None,
        limit: int | None = None,
    ) -> list[TDomainModel]:
        """Find entities matching conditions."""
        db_entities = await self.find_models_by(conditions, order_by, limit)
        return await self.mapper.map_collection(db_entities)

    @db_operation("find_models_by")
    async def find_models_by(
        self,
        conditions: Conditions,
        order_by: tuple[str, bool] | None = None,
        limit: int | None = None,
    ) -> list[TDBModel]:
        """Find raw DB models matching conditions, for callers that need column data."""
        result = await self.session.execute(
            self.select_where(conditions, order_by, limit)
        )
        return list(result.scalars().all())

    @db_operation("find_one_by")
    async def find_one_by(self, conditions: Conditions) -> TDomainModel | None:
        """Find a single entity matching conditions or None if not found."""
        stmt = self.select_where(conditions, limit=1)
        result = await self.session.execute(stmt)
        db_entity = result.scalar_one_or_none()

        if db_entity is None:
            return None

        return await self.mapper.to_domain(db_entity)

    @db_operation("count_entities")
    async def count_entities(self, conditions: Conditions | None = None) -> int:
        """Count entities matching the given conditions."""
        stmt = select(func.count(self.model_class.id))
        if conditions:
            stmt = self._apply_conditions(stmt, conditions)
        count = await self.session.scalar(stmt)
        return count or 0

    # -------------------------------------------------------------------------
    # WRITE OPERATIONS
    # -------------------------------------------------------------------------

    @db_operation("upsert")
    async def upsert(
        self,
        lookup_attrs: dict[str, Any],
        values: dict[str, Any] | None = None,
    ) -> None:
        """Insert a row or overwrite its non-key columns on unique-key conflict.

        `lookup_attrs` must name exactly the columns of a unique constraint.
        Both branches leave the same column values behind; only the timestamps
        differ (created_at is kept on update).
        """
        now = datetime.now(UTC)
        update_values = {**(values or {}), "updated_at": now}
        insert_values = {**lookup_attrs, **update_values, "created_at": now}

        stmt = self._insert()(self.model_class).values(**insert_values)
        stmt = stmt.on_conflict_do_update(
            index_elements=list(lookup_attrs),
            set_=update_values,
        )
        await self.session.execute(stmt)

    @db_operation("insert_if_absent")
    async def insert_if_absent(
        self,
        lookup_attrs: dict[str, Any],
        values: dict[str, Any] | None = None,
    ) -> bool:
        """Insert a row unless one with the same unique key exists.

        Returns:
            True if a row was inserted
        """
        now = datetime.now(UTC)
        insert_values = {
            **lookup_attrs,
            **(values or {}),
            "created_at": now,
            "updated_at": now,
        }
        stmt = (
            self._insert()(self.model_class)
            .values(**insert_values)
            .on_conflict_do_nothing(
                index_elements=list(lookup_attrs),
            )
        )
        result = await self.session.execute(stmt)
        return bool(result.rowcount)

    @db_operation("delete_by")
    async def delete_by(self, conditions: Conditions | None = None) -> int:
        """Hard delete rows matching conditions (all rows when None).

        Returns:
            Number of rows deleted
        """
        stmt = delete(self.model_class).execution_options(synchronize_session=False)
        if conditions:
            stmt = self._apply_conditions(stmt, conditions)
        result = await self.session.execute(stmt)
        return result.rowcount
