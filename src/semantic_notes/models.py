from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Note(BaseModel):
    """
    The part of an application note the search engine depends on.

    The surrounding application stores richer records (folder, timestamps,
    tags...); anything beyond id/title/content is kept as an extra field and
    handed back untouched in search results.
    """

    model_config = ConfigDict(extra="allow")

    id: int
    title: str = ""
    content: str = ""
    date: Optional[datetime] = None


class SimilarityResult(BaseModel):
    """A note scored against a query"""

    note: Note
    similarity: float = Field(..., description="Cosine similarity to the query, in [-1, 1]")
    embedding_generated: bool = Field(
        default=True,
        description="True if the note vector was produced during this query, "
        "False if it came from the note index",
    )


class CacheStats(BaseModel):
    """Read-only diagnostic snapshot of the embedding caches"""

    cache_size: int
    indexed_note_count: int
    in_flight_count: int
    model_loaded: bool
    model_loading: bool


class BatchResult(BaseModel):
    """Outcome of a bulk indexing run"""

    total: int = 0
    processed: int = Field(default=0, description="Notes embedded during this run")
    skipped: int = Field(
        default=0, description="Notes already indexed or being processed elsewhere"
    )
    failed_ids: List[int] = Field(default_factory=list, description="Notes whose embedding failed")

    @property
    def failed(self) -> int:
        return len(self.failed_ids)
