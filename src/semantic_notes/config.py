"""
Settings for the semantic note service.

Values are read from the environment (prefix ``SEMANTIC_NOTES_``) or a
``.env`` file in the working directory.
"""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EmbeddingSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SEMANTIC_NOTES_",
        env_file=".env",
        extra="ignore",
    )

    # Embedding provider
    provider: Literal["sentence-transformers", "openai"] = "sentence-transformers"
    model_name: str = "sentence-transformers/all-MiniLM-L6-v2"
    device: Optional[str] = None
    dimension: int = Field(default=384, gt=0)
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None

    # Persistent store
    store_backend: Literal["memory", "sqlite", "redis"] = "sqlite"
    database_url: str = "sqlite:///semantic_notes.db"
    redis_url: str = "redis://localhost:6379/0"
    redis_key_prefix: str = "semantic_notes:"

    # Caching and indexing
    cache_max_entries: Optional[int] = Field(default=None, gt=0)
    batch_size: int = Field(default=3, gt=0)
    batch_pause_seconds: float = Field(default=0.1, ge=0.0)

    # Search
    on_demand_threshold: float = 0.1
    precomputed_threshold: float = 0.25
    fallback_max_results: int = Field(default=10, gt=0)

    log_level: str = "INFO"
