"""
Unit tests for SemanticNoteService.

Tests the service layer with a stub provider and an in-memory store to
verify lifecycle hooks, degradation, and persistence across restarts.
"""

import asyncio

import pytest

from semantic_notes.config import EmbeddingSettings
from semantic_notes.models import Note
from semantic_notes.service import SemanticNoteService
from semantic_notes.storage import EMBEDDINGS_CACHE, NOTE_EMBEDDINGS


@pytest.fixture
def settings():
    return EmbeddingSettings(store_backend="memory", batch_pause_seconds=0)


@pytest.fixture
def service(provider, store, settings):
    return SemanticNoteService(provider, store, settings)


@pytest.mark.asyncio
async def test_initialize_loads_model_once(service, provider):
    await asyncio.gather(service.initialize(), service.initialize(), service.initialize())
    await service.initialize()

    assert provider.load_calls == 1
    assert service.initialized is True


@pytest.mark.asyncio
async def test_initialize_failure_retried(service, provider):
    provider.load_error = "no network"

    with pytest.raises(Exception, match="no network"):
        await service.initialize()
    assert service.initialized is False

    provider.load_error = None
    await service.initialize()

    assert service.initialized is True
    assert provider.load_calls == 2


@pytest.mark.asyncio
async def test_stats_reflect_state(service, notes):
    stats = service.get_cache_stats()
    assert stats.model_loaded is False
    assert stats.cache_size == 0

    await service.process_all(notes)
    stats = service.get_cache_stats()

    assert stats.model_loaded is True
    assert stats.model_loading is False
    assert stats.cache_size == len(notes)
    assert stats.indexed_note_count == len(notes)
    assert stats.in_flight_count == 0


@pytest.mark.asyncio
async def test_clear_cache_resets_stats(service, store, notes):
    await service.process_all(notes)
    await service.find_similar("milk", notes, 5)

    await service.clear_cache()
    stats = service.get_cache_stats()

    assert stats.cache_size == 0
    assert stats.indexed_note_count == 0
    assert store.count(EMBEDDINGS_CACHE) == 0
    assert store.count(NOTE_EMBEDDINGS) == 0


@pytest.mark.asyncio
async def test_state_survives_restart(provider, store, settings, notes, make_provider):
    first = SemanticNoteService(provider, store, settings)
    await first.process_all(notes)
    await first.close()

    fresh_provider = make_provider()
    second = SemanticNoteService(fresh_provider, store, settings)
    await second.initialize()

    assert all(second.has(note.id) for note in notes)
    result = await second.process_all(notes)
    assert result.processed == 0
    assert fresh_provider.calls == []


@pytest.mark.asyncio
async def test_note_lifecycle(service):
    note = Note(id=10, title="Ideas", content="first draft")

    assert await service.on_note_saved(note) is True
    assert service.has(10)
    before = service.index.get(10)

    # Updates re-embed even though the note is already indexed
    note.content = "second draft"
    assert await service.on_note_saved(note) is True
    assert service.index.get(10) != before

    await service.on_note_deleted(10)
    assert service.has(10) is False
    assert await service.find_similar_precomputed("Ideas", [note], threshold=-1.0) == []


@pytest.mark.asyncio
async def test_upsert_failure_does_not_raise(store, settings, make_provider):
    provider = make_provider(fail_on={"Broken\nnote"})
    service = SemanticNoteService(provider, store, settings)

    assert await service.upsert(Note(id=1, title="Broken", content="note")) is False
    assert service.has(1) is False


@pytest.mark.asyncio
async def test_search_degrades_when_model_unavailable(service, provider, notes):
    provider.load_error = "model unavailable"

    assert await service.find_similar("milk", notes) == []
    assert await service.find_similar_precomputed("milk", notes) == []


@pytest.mark.asyncio
async def test_process_all_skipped_when_model_unavailable(service, provider, notes):
    provider.load_error = "model unavailable"

    result = await service.process_all(notes)

    assert result.total == len(notes)
    assert result.processed == 0
    assert service.get_cache_stats().indexed_note_count == 0


@pytest.mark.asyncio
async def test_precomputed_search_after_indexing(service, notes):
    await service.process_all(notes)

    results = await service.find_similar_precomputed(
        "Groceries\nmilk, eggs, bread", notes, threshold=0.99
    )

    assert [result.note.id for result in results] == [1]
    assert results[0].similarity == pytest.approx(1.0)


@pytest.mark.asyncio
async def test_settings_applied(provider, store):
    settings = EmbeddingSettings(
        store_backend="memory",
        batch_size=5,
        batch_pause_seconds=0.5,
        on_demand_threshold=0.2,
        precomputed_threshold=0.4,
        fallback_max_results=3,
        cache_max_entries=100,
    )
    service = SemanticNoteService(provider, store, settings)

    assert service.batch_processor.batch_size == 5
    assert service.batch_processor.pause_seconds == 0.5
    assert service.search.on_demand_threshold == 0.2
    assert service.search.precomputed_threshold == 0.4
    assert service.search.fallback_max_results == 3
