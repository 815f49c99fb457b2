import pytest

from src.infrastructure.persistence.database.db_connection import (
    create_db_engine,
    create_session_factory,
)
from src.infrastructure.persistence.database.db_models import init_db
from src.infrastructure.persistence.storage import DatabaseStorage


@pytest.fixture
async def db_engine(tmp_path):
    """Provide an engine bound to a fresh file-backed SQLite database."""
    engine = create_db_engine(f"sqlite+aiosqlite:///{tmp_path / 'storage.db'}")
    try:
        await init_db(engine)
    except Exception as e:
        pytest.fail(f"Database initialization failed: {e}")
    yield engine
    await engine.dispose()


@pytest.fixture
def db_session_factory(db_engine):
    """Provide a session factory for the test database."""
    return create_session_factory(db_engine)


@pytest.fixture
async def db_session(db_session_factory):
    """Provide a database session that is rolled back after the test."""
    async with db_session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def storage(db_session_factory):
    """Provide a DatabaseStorage over the test database."""
    return DatabaseStorage(db_session_factory)


@pytest.fixture
def sample_play_record():
    from src.domain.entities import PlayRecord

    return PlayRecord(
        title="Moon Knight",
        source_name="Source One",
        cover="https://img.example/moon.jpg",
        year="2022",
        index=3,
        total_episodes=6,
        play_time=512,
        total_time=2700,
        save_time=1_700_000_000_000,
        search_title="moon knight",
    )


@pytest.fixture
def sample_favorite():
    from src.domain.entities import Favorite

    return Favorite(
        source_name="Source One",
        total_episodes=6,
        title="Moon Knight",
        year="2022",
        cover="https://img.example/moon.jpg",
        save_time=1_700_000_000_000,
        search_title="moon knight",
        origin="vod",
    )
