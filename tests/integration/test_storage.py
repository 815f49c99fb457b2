"""End-to-end tests for DatabaseStorage over a real SQLite database.

Each storage call runs in its own transaction, so these tests exercise commit
behavior as well as the record mapping.
"""

import attrs
import pytest
from sqlalchemy import update
from sqlalchemy.exc import OperationalError

from src.domain.entities import SkipConfig
from src.infrastructure.persistence.database.db_connection import (
    create_db_engine,
    create_session_factory,
)
from src.infrastructure.persistence.database.db_models import DBFavorite, DBUser
from src.infrastructure.persistence.repositories import GlobalConfigRepository
from src.infrastructure.persistence.storage import DatabaseStorage, get_storage


class TestPlayRecords:
    """Play record round trips and idempotency."""

    async def test_set_then_get(self, storage, sample_play_record):
        await storage.set_play_record("alice", "src+1", sample_play_record)

        assert await storage.get_play_record("alice", "src+1") == sample_play_record

    async def test_get_missing_returns_none(self, storage):
        assert await storage.get_play_record("alice", "nope") is None

    async def test_set_is_idempotent(self, storage, sample_play_record):
        await storage.set_play_record("alice", "src+1", sample_play_record)
        await storage.set_play_record("alice", "src+1", sample_play_record)

        records = await storage.get_all_play_records("alice")
        assert records == {"src+1": sample_play_record}

    async def test_set_overwrites_existing(self, storage, sample_play_record):
        await storage.set_play_record("alice", "src+1", sample_play_record)
        progressed = attrs.evolve(sample_play_record, index=4, play_time=99)

        await storage.set_play_record("alice", "src+1", progressed)

        assert await storage.get_play_record("alice", "src+1") == progressed

    async def test_get_all_counts_distinct_keys(self, storage, sample_play_record):
        for key in ("a+1", "b+2", "c+3"):
            await storage.set_play_record("alice", key, sample_play_record)
        await storage.set_play_record("bob", "a+1", sample_play_record)

        assert len(await storage.get_all_play_records("alice")) == 3
        assert len(await storage.get_all_play_records("bob")) == 1
        assert await storage.get_all_play_records("nobody") == {}

    async def test_delete(self, storage, sample_play_record):
        await storage.set_play_record("alice", "src+1", sample_play_record)

        await storage.delete_play_record("alice", "src+1")

        assert await storage.get_play_record("alice", "src+1") is None

    async def test_delete_missing_is_silent(self, storage):
        await storage.delete_play_record("alice", "never-existed")

        assert await storage.get_play_record("alice", "never-existed") is None

    async def test_write_auto_provisions_user(self, storage, sample_play_record):
        assert await storage.check_user_exist("newcomer") is False

        await storage.set_play_record("newcomer", "src+1", sample_play_record)

        assert await storage.check_user_exist("newcomer") is True


class TestFavorites:
    """Favorite round trips."""

    async def test_set_then_get(self, storage, sample_favorite):
        await storage.set_favorite("alice", "src+1", sample_favorite)

        assert await storage.get_favorite("alice", "src+1") == sample_favorite

    async def test_get_all_and_delete(self, storage, sample_favorite):
        live = attrs.evolve(sample_favorite, origin="live", title="Channel 1")
        await storage.set_favorite("alice", "vod+1", sample_favorite)
        await storage.set_favorite("alice", "live+1", live)
        await storage.set_favorite("alice", "live+1", live)

        favorites = await storage.get_all_favorites("alice")
        assert favorites == {"vod+1": sample_favorite, "live+1": live}

        await storage.delete_favorite("alice", "vod+1")
        await storage.delete_favorite("alice", "vod+1")
        assert await storage.get_favorite("alice", "vod+1") is None
        assert list(await storage.get_all_favorites("alice")) == ["live+1"]

    async def test_unknown_stored_origin_reads_as_none(
        self, storage, db_session_factory, sample_favorite
    ):
        await storage.set_favorite("alice", "src+1", sample_favorite)
        async with db_session_factory() as session:
            await session.execute(update(DBFavorite).values(origin=""))
            await session.commit()

        assert (await storage.get_favorite("alice", "src+1")).origin is None
        assert (await storage.get_all_favorites("alice"))["src+1"].origin is None


class TestUsers:
    """User registration, verification and removal."""

    async def test_register_and_verify(self, storage):
        await storage.register_user("alice", "hash-a")

        assert await storage.verify_user("alice", "hash-a") is True
        assert await storage.check_user_exist("alice") is True

    async def test_verify_wrong_hash(self, storage):
        await storage.register_user("alice", "hash-a")

        assert await storage.verify_user("alice", "hash-b") is False

    async def test_verify_unknown_user(self, storage):
        assert await storage.verify_user("ghost", "anything") is False

    async def test_register_existing_resets_password(self, storage):
        await storage.register_user("alice", "old")
        await storage.register_user("alice", "new")

        assert await storage.verify_user("alice", "new") is True
        assert await storage.get_all_users() == ["alice"]

    async def test_register_keeps_auto_provisioned_records(
        self, storage, sample_play_record
    ):
        await storage.set_play_record("alice", "src+1", sample_play_record)

        await storage.register_user("alice", "hash")

        assert await storage.verify_user("alice", "hash") is True
        assert await storage.get_play_record("alice", "src+1") == sample_play_record

    async def test_auto_provisioned_user_has_empty_password(
        self, storage, sample_favorite
    ):
        await storage.set_favorite("alice", "src+1", sample_favorite)

        assert await storage.verify_user("alice", "") is True

    async def test_change_password(self, storage):
        await storage.register_user("alice", "old")

        await storage.change_password("alice", "new")

        assert await storage.verify_user("alice", "new") is True
        assert await storage.verify_user("alice", "old") is False

    async def test_change_password_for_missing_user_does_nothing(self, storage):
        await storage.change_password("ghost", "new")

        assert await storage.check_user_exist("ghost") is False

    async def test_delete_user(self, storage):
        await storage.register_user("alice", "x")

        await storage.delete_user("alice")
        await storage.delete_user("alice")

        assert await storage.check_user_exist("alice") is False

    async def test_delete_user_keeps_owned_records(self, storage, sample_play_record):
        await storage.set_play_record("alice", "src+1", sample_play_record)

        await storage.delete_user("alice")

        assert await storage.get_play_record("alice", "src+1") == sample_play_record

    async def test_get_all_users(self, storage, sample_play_record):
        await storage.register_user("alice", "a")
        await storage.set_play_record("bob", "src+1", sample_play_record)

        assert sorted(await storage.get_all_users()) == ["alice", "bob"]


class TestSearchHistory:
    """Search history recency and the per-user cap."""

    async def test_add_then_get(self, storage):
        await storage.add_search_history("alice", "moon")
        await storage.add_search_history("alice", "star")

        assert await storage.get_search_history("alice") == ["star", "moon"]

    async def test_cap_keeps_twenty_most_recent(self, storage):
        for i in range(25):
            await storage.add_search_history("alice", f"keyword-{i}")

        history = await storage.get_search_history("alice")

        assert len(history) == 20
        assert history == [f"keyword-{i}" for i in range(24, 4, -1)]

    async def test_reinsert_refreshes_recency_without_growing(self, storage):
        for i in range(20):
            await storage.add_search_history("alice", f"keyword-{i}")

        await storage.add_search_history("alice", "keyword-3")

        history = await storage.get_search_history("alice")
        assert len(history) == 20
        assert history[0] == "keyword-3"
        assert history.count("keyword-3") == 1

    async def test_cap_is_per_user(self, storage):
        for i in range(21):
            await storage.add_search_history("alice", f"a{i}")
        await storage.add_search_history("bob", "b0")

        assert len(await storage.get_search_history("alice")) == 20
        assert await storage.get_search_history("bob") == ["b0"]

    async def test_configured_limit(self, db_session_factory):
        storage = DatabaseStorage(db_session_factory, search_history_limit=3)
        for keyword in ("a", "b", "c", "d"):
            await storage.add_search_history("alice", keyword)

        assert await storage.get_search_history("alice") == ["d", "c", "b"]

    async def test_delete_one_keyword(self, storage):
        await storage.add_search_history("alice", "moon")
        await storage.add_search_history("alice", "star")

        await storage.delete_search_history("alice", "moon")
        await storage.delete_search_history("alice", "moon")

        assert await storage.get_search_history("alice") == ["star"]

    @pytest.mark.parametrize("keyword", [None, ""])
    async def test_delete_all_keywords(self, storage, keyword):
        await storage.add_search_history("alice", "moon")
        await storage.add_search_history("alice", "star")
        await storage.add_search_history("bob", "sun")

        await storage.delete_search_history("alice", keyword)

        assert await storage.get_search_history("alice") == []
        assert await storage.get_search_history("bob") == ["sun"]


class TestSkipConfigs:
    """Skip configs under `source+id` keys."""

    async def test_set_then_get(self, storage):
        config = SkipConfig(enable=True, intro_time=90, outro_time=45)

        await storage.set_skip_config("alice", "source1", "id1", config)

        assert await storage.get_skip_config("alice", "source1", "id1") == config

    async def test_get_all_uses_composite_keys(self, storage):
        config = SkipConfig(enable=False, intro_time=10)
        await storage.set_skip_config("alice", "source1", "id1", config)

        assert await storage.get_all_skip_configs("alice") == {"source1+id1": config}

    async def test_set_overwrites(self, storage):
        await storage.set_skip_config("alice", "s", "1", SkipConfig(enable=True))
        updated = SkipConfig(enable=False, intro_time=12.5, outro_time=3)

        await storage.set_skip_config("alice", "s", "1", updated)

        assert await storage.get_all_skip_configs("alice") == {"s+1": updated}

    async def test_delete(self, storage):
        await storage.set_skip_config("alice", "s", "1", SkipConfig(enable=True))

        await storage.delete_skip_config("alice", "s", "1")
        await storage.delete_skip_config("alice", "s", "1")

        assert await storage.get_skip_config("alice", "s", "1") is None


class TestAdminConfig:
    """Admin config serialization."""

    async def test_missing_returns_none(self, storage):
        assert await storage.get_admin_config() is None

    async def test_set_then_get(self, storage):
        config = {
            "SiteConfig": {"SiteName": "MoonTV", "SearchDownstreamMaxPage": 5},
            "UserConfig": {"AllowRegister": True, "Users": []},
            "SourceConfig": [{"key": "src", "name": "Source", "disabled": False}],
        }

        await storage.set_admin_config(config)

        assert await storage.get_admin_config() == config

    async def test_set_replaces_previous(self, storage):
        await storage.set_admin_config({"version": 1})
        await storage.set_admin_config({"version": 2})

        assert await storage.get_admin_config() == {"version": 2}

    @pytest.mark.parametrize("raw", ["", "{not json", "[1, 2, 3]", "42", "null"])
    async def test_unreadable_blob_returns_none(self, storage, db_session_factory, raw):
        async with db_session_factory() as session:
            await GlobalConfigRepository(session).set_value("admin_config", raw)
            await session.commit()

        assert await storage.get_admin_config() is None


class TestClearAllData:
    """Administrative wipe."""

    async def test_clears_every_kind_of_record(
        self, storage, sample_play_record, sample_favorite
    ):
        await storage.register_user("alice", "hash")
        await storage.set_play_record("alice", "src+1", sample_play_record)
        await storage.set_favorite("alice", "src+1", sample_favorite)
        await storage.add_search_history("alice", "moon")
        await storage.set_skip_config("alice", "s", "1", SkipConfig(enable=True))
        await storage.set_admin_config({"SiteConfig": {}})

        await storage.clear_all_data()

        assert await storage.get_all_play_records("alice") == {}
        assert await storage.get_all_favorites("alice") == {}
        assert await storage.get_search_history("alice") == []
        assert await storage.get_all_skip_configs("alice") == {}
        assert await storage.get_all_users() == []
        assert await storage.get_admin_config() is None
        assert await storage.verify_user("alice", "hash") is False

    async def test_clear_empty_store(self, storage):
        await storage.clear_all_data()

        assert await storage.get_all_users() == []


class TestFailurePolicies:
    """Best-effort operations swallow database errors; writes surface them."""

    @pytest.fixture
    async def schemaless_storage(self, tmp_path):
        # No init_db: every statement fails with "no such table"
        engine = create_db_engine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
        yield DatabaseStorage(create_session_factory(engine))
        await engine.dispose()

    async def test_best_effort_operations_do_not_raise(self, schemaless_storage):
        await schemaless_storage.delete_play_record("alice", "k")
        await schemaless_storage.delete_favorite("alice", "k")
        await schemaless_storage.delete_skip_config("alice", "s", "1")
        await schemaless_storage.delete_search_history("alice", "moon")
        await schemaless_storage.change_password("alice", "x")
        await schemaless_storage.delete_user("alice")

    async def test_writes_propagate(
        self, schemaless_storage, sample_play_record, sample_favorite
    ):
        with pytest.raises(OperationalError):
            await schemaless_storage.set_play_record("alice", "k", sample_play_record)
        with pytest.raises(OperationalError):
            await schemaless_storage.set_favorite("alice", "k", sample_favorite)
        with pytest.raises(OperationalError):
            await schemaless_storage.set_skip_config(
                "alice", "s", "1", SkipConfig(enable=True)
            )
        with pytest.raises(OperationalError):
            await schemaless_storage.register_user("alice", "x")
        with pytest.raises(OperationalError):
            await schemaless_storage.add_search_history("alice", "moon")
        with pytest.raises(OperationalError):
            await schemaless_storage.set_admin_config({})

    async def test_reads_propagate(self, schemaless_storage):
        with pytest.raises(OperationalError):
            await schemaless_storage.get_play_record("alice", "k")

    async def test_failed_user_provisioning_does_not_block_writes(
        self, db_engine, storage, sample_play_record, sample_favorite
    ):
        # Only the users table is missing, so provisioning fails and the
        # record writes themselves can still succeed
        async with db_engine.begin() as conn:
            await conn.run_sync(DBUser.__table__.drop)
        skip = SkipConfig(enable=True, intro_time=30, outro_time=15)

        await storage.set_play_record("alice", "src+1", sample_play_record)
        await storage.set_favorite("alice", "src+1", sample_favorite)
        await storage.set_skip_config("alice", "source1", "id1", skip)
        await storage.add_search_history("alice", "moon")

        assert await storage.get_play_record("alice", "src+1") == sample_play_record
        assert await storage.get_favorite("alice", "src+1") == sample_favorite
        assert await storage.get_skip_config("alice", "source1", "id1") == skip
        assert await storage.get_search_history("alice") == ["moon"]


def test_get_storage_returns_database_backend(monkeypatch):
    from src.config import settings

    monkeypatch.setattr(settings.storage, "backend", "database")
    monkeypatch.setattr(
        "src.infrastructure.persistence.storage.get_session_factory", lambda: object()
    )

    assert isinstance(get_storage(), DatabaseStorage)


def test_get_storage_rejects_unknown_backend(monkeypatch):
    from src.config import settings

    monkeypatch.setattr(settings.storage, "backend", "redis")

    with pytest.raises(ValueError, match="redis"):
        get_storage()
