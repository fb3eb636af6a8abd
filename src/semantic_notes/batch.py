"""
Bulk (re)population of the note vector index.

Notes are embedded a few at a time so that at most ``batch_size`` model
invocations run at once, with a short pause between batches to give the
rest of the application a chance to run.
"""

import asyncio
import logging
from typing import Sequence

from semantic_notes.index import NoteVectorIndex
from semantic_notes.models import BatchResult, Note

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 3
DEFAULT_PAUSE_SECONDS = 0.1


class BatchProcessor:
    """
    Drives ``NoteVectorIndex.upsert`` over many notes.

    Notes that already have a vector are skipped; changed content is not
    detected here (use ``upsert`` directly for updated notes). A failing note
    is logged and never stops the run.
    """

    def __init__(
        self,
        index: NoteVectorIndex,
        batch_size: int = DEFAULT_BATCH_SIZE,
        pause_seconds: float = DEFAULT_PAUSE_SECONDS,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")

        self.index = index
        self.batch_size = batch_size
        self.pause_seconds = pause_seconds

    async def process_all(self, notes: Sequence[Note]) -> BatchResult:
        """
        Index every note that is not indexed yet.

        Each batch is a barrier: all of its upserts settle before the next
        batch starts.
        """
        notes = list(notes)
        result = BatchResult(total=len(notes))

        logger.info(f"Processing embeddings for {len(notes)} notes...")

        for start in range(0, len(notes), self.batch_size):
            batch = notes[start : start + self.batch_size]
            pending = [note for note in batch if not self.index.has(note.id)]
            result.skipped += len(batch) - len(pending)

            outcomes = await asyncio.gather(
                *(self.index.upsert(note) for note in pending), return_exceptions=True
            )

            for note, outcome in zip(pending, outcomes):
                if isinstance(outcome, Exception):
                    logger.warning(f"Failed to process embedding for note {note.id}: {outcome}")
                    result.failed_ids.append(note.id)
                elif isinstance(outcome, BaseException):
                    raise outcome
                elif outcome:
                    result.processed += 1
                else:
                    result.skipped += 1

            if start + self.batch_size < len(notes):
                await asyncio.sleep(self.pause_seconds)

        logger.info(
            f"Finished processing {len(notes)} notes "
            f"(processed={result.processed}, skipped={result.skipped}, "
            f"failed={result.failed}). Total embeddings: {len(self.index)}"
        )

        return result
