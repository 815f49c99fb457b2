"""Tests for user-keyed media repositories and the global config repository."""

import attrs

from src.domain.entities import SkipConfig
from src.infrastructure.persistence.repositories import (
    FavoriteRepository,
    GlobalConfigRepository,
    PlayRecordRepository,
    SkipConfigRepository,
)


class TestPlayRecordRepository:
    """Test keyed play record persistence."""

    async def test_save_and_get(self, db_session, sample_play_record):
        repo = PlayRecordRepository(db_session)

        await repo.save_record("alice", "src+1", sample_play_record)

        assert await repo.get_record("alice", "src+1") == sample_play_record
        assert await repo.get_record("bob", "src+1") is None

    async def test_save_overwrites_every_field(self, db_session, sample_play_record):
        repo = PlayRecordRepository(db_session)
        await repo.save_record("alice", "src+1", sample_play_record)

        updated = attrs.evolve(
            sample_play_record, index=5, play_time=10, search_title=""
        )
        await repo.save_record("alice", "src+1", updated)

        assert await repo.get_record("alice", "src+1") == updated
        assert await repo.count_entities({"username": "alice"}) == 1

    async def test_get_records_keyed_by_record_key(
        self, db_session, sample_play_record
    ):
        repo = PlayRecordRepository(db_session)
        await repo.save_record("alice", "src+1", sample_play_record)
        await repo.save_record("alice", "src+2", sample_play_record)
        await repo.save_record("bob", "src+3", sample_play_record)

        records = await repo.get_records("alice")

        assert set(records) == {"src+1", "src+2"}

    async def test_delete_record(self, db_session, sample_play_record):
        repo = PlayRecordRepository(db_session)
        await repo.save_record("alice", "src+1", sample_play_record)

        assert await repo.delete_record("alice", "src+1") is True
        assert await repo.delete_record("alice", "src+1") is False


class TestFavoriteRepository:
    """Test keyed favorite persistence."""

    async def test_save_and_list(self, db_session, sample_favorite):
        repo = FavoriteRepository(db_session)
        live = attrs.evolve(sample_favorite, origin="live")

        await repo.save_record("alice", "tv+1", live)

        assert await repo.get_records("alice") == {"tv+1": live}


class TestSkipConfigRepository:
    """Test skip config persistence under composite keys."""

    async def test_save_and_get(self, db_session):
        repo = SkipConfigRepository(db_session)
        config = SkipConfig(enable=True, intro_time=75.5, outro_time=30)

        await repo.save_record("alice", "source1+id1", config)

        assert await repo.get_record("alice", "source1+id1") == config


class TestGlobalConfigRepository:
    """Test raw global config values."""

    async def test_get_missing_value(self, db_session):
        assert await GlobalConfigRepository(db_session).get_value("nope") is None

    async def test_set_value_replaces_previous(self, db_session):
        repo = GlobalConfigRepository(db_session)

        await repo.set_value("admin_config", '{"a": 1}')
        await repo.set_value("admin_config", '{"a": 2}')

        assert await repo.get_value("admin_config") == '{"a": 2}'
        assert await repo.count_entities() == 1
