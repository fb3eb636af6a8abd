"""
Unit tests for SQLAlchemy key-value storage.

Runs against in-memory SQLite shared across worker threads.
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from semantic_notes.storage import EMBEDDINGS_CACHE, NOTE_EMBEDDINGS, UnknownPartitionError
from semantic_notes.storage.sqlalchemy import SQLAlchemyKeyValueStore


@pytest.fixture
def sql_store():
    """Create a fresh SQLAlchemy store with in-memory SQLite."""
    engine = create_engine(
        "sqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    store = SQLAlchemyKeyValueStore(engine)
    store.create_tables()
    return store


@pytest.mark.asyncio
async def test_set_and_get(sql_store):
    await sql_store.set(NOTE_EMBEDDINGS, "42", [0.1, 0.2, 0.3])

    assert await sql_store.get(NOTE_EMBEDDINGS, "42") == [0.1, 0.2, 0.3]


@pytest.mark.asyncio
async def test_get_missing_key(sql_store):
    assert await sql_store.get(NOTE_EMBEDDINGS, "missing") is None


@pytest.mark.asyncio
async def test_set_overwrites(sql_store):
    await sql_store.set(NOTE_EMBEDDINGS, "1", [1.0, 0.0])
    await sql_store.set(NOTE_EMBEDDINGS, "1", [0.0, 1.0])

    assert await sql_store.get(NOTE_EMBEDDINGS, "1") == [0.0, 1.0]
    assert len(await sql_store.get_all_entries(NOTE_EMBEDDINGS)) == 1


@pytest.mark.asyncio
async def test_same_key_in_two_partitions(sql_store):
    await sql_store.set(EMBEDDINGS_CACHE, "k", [1.0])
    await sql_store.set(NOTE_EMBEDDINGS, "k", [2.0])

    assert await sql_store.get(EMBEDDINGS_CACHE, "k") == [1.0]
    assert await sql_store.get(NOTE_EMBEDDINGS, "k") == [2.0]


@pytest.mark.asyncio
async def test_delete(sql_store):
    await sql_store.set(NOTE_EMBEDDINGS, "1", [1.0])

    await sql_store.delete(NOTE_EMBEDDINGS, "1")
    await sql_store.delete(NOTE_EMBEDDINGS, "1")

    assert await sql_store.get(NOTE_EMBEDDINGS, "1") is None


@pytest.mark.asyncio
async def test_get_all_entries(sql_store):
    await sql_store.set(EMBEDDINGS_CACHE, "a", [1.0])
    await sql_store.set(EMBEDDINGS_CACHE, "b", [2.0])
    await sql_store.set(NOTE_EMBEDDINGS, "c", [3.0])

    entries = await sql_store.get_all_entries(EMBEDDINGS_CACHE)

    assert sorted(entries) == [("a", [1.0]), ("b", [2.0])]


@pytest.mark.asyncio
async def test_clear_only_affects_partition(sql_store):
    await sql_store.set(EMBEDDINGS_CACHE, "a", [1.0])
    await sql_store.set(NOTE_EMBEDDINGS, "1", [2.0])

    await sql_store.clear(EMBEDDINGS_CACHE)

    assert await sql_store.get_all_entries(EMBEDDINGS_CACHE) == []
    assert await sql_store.get(NOTE_EMBEDDINGS, "1") == [2.0]


@pytest.mark.asyncio
async def test_unknown_partition(sql_store):
    with pytest.raises(UnknownPartitionError):
        await sql_store.set("folders", "1", [1.0])


@pytest.mark.asyncio
async def test_file_database_survives_reopen(tmp_path):
    url = f"sqlite:///{tmp_path / 'vectors.db'}"

    first = SQLAlchemyKeyValueStore(create_engine(url))
    first.create_tables()
    await first.set(NOTE_EMBEDDINGS, "7", [0.5, 0.25])
    await first.close()

    second = SQLAlchemyKeyValueStore(create_engine(url))
    second.create_tables()

    assert await second.get(NOTE_EMBEDDINGS, "7") == [0.5, 0.25]
    await second.close()
