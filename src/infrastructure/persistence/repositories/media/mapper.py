"""Media record mappers for converting between domain and database models."""

from typing import Any, get_args, override

from attrs import define

from src.domain.entities import Favorite, FavoriteOrigin, PlayRecord, SkipConfig
from src.infrastructure.persistence.database.db_models import (
    DBFavorite,
    DBPlayRecord,
    DBSkipConfig,
)
from src.infrastructure.persistence.repositories.base_repo import BaseModelMapper


@define(frozen=True, slots=True)
class PlayRecordMapper(BaseModelMapper[DBPlayRecord, PlayRecord]):
    """Maps play_records rows; the episode number lives in `episode_index`."""

    @staticmethod
    @override
    async def to_domain(db_model: DBPlayRecord) -> PlayRecord:
        if not db_model:
            return None

        return PlayRecord(
            title=db_model.title,
            source_name=db_model.source_name,
            cover=db_model.cover,
            year=db_model.year,
            index=db_model.episode_index,
            total_episodes=db_model.total_episodes,
            play_time=db_model.play_time,
            total_time=db_model.total_time,
            save_time=db_model.save_time,
            search_title=db_model.search_title,
        )

    @staticmethod
    @override
    def to_values(domain_model: PlayRecord) -> dict[str, Any]:
        return {
            "title": domain_model.title,
            "source_name": domain_model.source_name,
            "cover": domain_model.cover,
            "year": domain_model.year,
            "episode_index": domain_model.index,
            "total_episodes": domain_model.total_episodes,
            "play_time": domain_model.play_time,
            "total_time": domain_model.total_time,
            "save_time": domain_model.save_time,
            "search_title": domain_model.search_title,
        }


@define(frozen=True, slots=True)
class FavoriteMapper(BaseModelMapper[DBFavorite, Favorite]):
    """Maps favorites rows.

    Origins other than "vod" or "live" (e.g. an empty string written by another
    backend) are read back as None.
    """

    @staticmethod
    @override
    async def to_domain(db_model: DBFavorite) -> Favorite:
        if not db_model:
            return None

        return Favorite(
            source_name=db_model.source_name,
            total_episodes=db_model.total_episodes,
            title=db_model.title,
            year=db_model.year,
            cover=db_model.cover,
            save_time=db_model.save_time,
            search_title=db_model.search_title,
            origin=(
                db_model.origin if db_model.origin in get_args(FavoriteOrigin) else None
            ),
        )

    @staticmethod
    @override
    def to_values(domain_model: Favorite) -> dict[str, Any]:
        return {
            "source_name": domain_model.source_name,
            "total_episodes": domain_model.total_episodes,
            "title": domain_model.title,
            "year": domain_model.year,
            "cover": domain_model.cover,
            "save_time": domain_model.save_time,
            "search_title": domain_model.search_title,
            "origin": domain_model.origin,
        }


@define(frozen=True, slots=True)
class SkipConfigMapper(BaseModelMapper[DBSkipConfig, SkipConfig]):
    """Maps skip_configs rows."""

    @staticmethod
    @override
    async def to_domain(db_model: DBSkipConfig) -> SkipConfig:
        if not db_model:
            return None

        return SkipConfig(
            enable=bool(db_model.enable),
            intro_time=db_model.intro_time,
            outro_time=db_model.outro_time,
        )

    @staticmethod
    @override
    def to_values(domain_model: SkipConfig) -> dict[str, Any]:
        return {
            "enable": domain_model.enable,
            "intro_time": domain_model.intro_time,
            "outro_time": domain_model.outro_time,
        }
