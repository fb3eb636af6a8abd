"""Shared fixtures: a scriptable embedding provider and fresh stores."""

import asyncio
import hashlib
import math

import pytest

from semantic_notes.exceptions import ProviderLoadError
from semantic_notes.models import Note
from semantic_notes.storage import InMemoryKeyValueStore


def unit(vector):
    norm = math.sqrt(sum(v * v for v in vector))
    return [v / norm for v in vector]


class StubEmbedding:
    """
    Embedding provider for tests.

    Returns the vector registered for a text, or a deterministic
    hash-derived unit vector otherwise. Records every text it embeds.
    """

    def __init__(self, vectors=None, dimension=16, fail_on=(), delay=0.0):
        self.vectors = dict(vectors or {})
        self.fail_on = set(fail_on)
        self.delay = delay
        self.calls = []
        self.load_calls = 0
        self.load_error = None
        self.active = 0
        self.max_active = 0
        self._dimension = dimension
        self._loaded = False
        self._loading = False

    @property
    def dimension(self):
        return self._dimension

    @property
    def model_name(self):
        return "stub-model"

    @property
    def is_loaded(self):
        return self._loaded

    @property
    def is_loading(self):
        return self._loading

    async def load(self):
        if self._loaded:
            return
        self.load_calls += 1
        self._loading = True
        try:
            await asyncio.sleep(0)
            if self.load_error is not None:
                raise ProviderLoadError(str(self.load_error))
            self._loaded = True
        finally:
            self._loading = False

    async def embed(self, text):
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")

        await self.load()
        self.calls.append(text)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delay)
            if text in self.fail_on:
                raise RuntimeError(f"model failed on {text!r}")
            if text in self.vectors:
                return list(self.vectors[text])
            return self._hashed(text)
        finally:
            self.active -= 1

    def _hashed(self, text):
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        return unit([digest[i] - 127.5 for i in range(self._dimension)])


class FailingStore(InMemoryKeyValueStore):
    """Store whose every operation fails."""

    async def get(self, partition, key):
        raise OSError("store unavailable")

    async def set(self, partition, key, vector):
        raise OSError("store unavailable")

    async def delete(self, partition, key):
        raise OSError("store unavailable")

    async def get_all_entries(self, partition):
        raise OSError("store unavailable")

    async def clear(self, partition):
        raise OSError("store unavailable")


@pytest.fixture
def provider():
    return StubEmbedding()


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def failing_store():
    return FailingStore()


@pytest.fixture
def notes():
    return [
        Note(id=1, title="Groceries", content="milk, eggs, bread"),
        Note(id=2, title="Meeting", content="quarterly planning with the team"),
        Note(id=3, title="Travel", content="book flights to Lisbon"),
        Note(id=4, title="Reading", content="finish the novel"),
    ]


@pytest.fixture
def make_provider():
    """Factory for providers with custom vectors or failures."""
    return StubEmbedding
