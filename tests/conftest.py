from collections.abc import AsyncGenerator, Generator

import pytest
import pytest_asyncio

import feedbase.core.config
from feedbase.core.config import Settings
from feedbase.core.database import DatabaseManager, get_default_database, reset_default_database
from tests.demo_models import DemoPair, DemoTable, RecordingObserver, metadata


@pytest.fixture(scope="function")
def settings_override(monkeypatch, tmp_path) -> Generator[Settings, None, None]:
    """
    Overrides application settings for the duration of a test function.

    The default database points at a fresh SQLite file under tmp_path, so
    descriptors that name no database of their own land there.
    """
    new_settings = Settings(
        FEEDBASE_DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path}/test_feedbase.db",
        FEEDBASE_STRICT_MODE=True,
        FEEDBASE_ECHO_SQL=False,
    )
    monkeypatch.setattr(feedbase.core.config, "settings", new_settings)
    reset_default_database()

    yield new_settings

    reset_default_database()


@pytest_asyncio.fixture(scope="function")
async def database(settings_override: Settings) -> AsyncGenerator[DatabaseManager, None]:
    """Provides the default DatabaseManager with the demo tables created."""
    db = get_default_database()
    await db.create_tables(metadata)
    yield db
    async with db.engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
    await db.dispose()


@pytest_asyncio.fixture(scope="function")
async def demo_rows(database: DatabaseManager) -> list[DemoTable]:
    """Five demo_table rows: three with key2 'grp-a', two with key2 'grp-b'."""
    feeds = []
    for index, key2 in enumerate(["grp-a", "grp-a", "grp-b", "grp-a", "grp-b"]):
        feed = DemoTable()
        feed.key1 = f"K1-{index}"
        feed.key2 = key2
        await feed.fc_add()
        feeds.append(feed)
    return feeds


@pytest_asyncio.fixture(scope="function")
async def demo_pairs(database: DatabaseManager) -> list[DemoPair]:
    feeds = []
    for group_id, item_id, label in [("g1", 1, "first"), ("g1", 2, "second"), ("g2", 1, "other")]:
        feed = DemoPair()
        feed.groupId = group_id
        feed.itemId = item_id
        feed.label = label
        await feed.fc_add()
        feeds.append(feed)
    return feeds


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()
