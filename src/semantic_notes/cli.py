"""
Command line interface for semantic-notes.

Operates on a JSON file containing a list of notes, each an object with at
least ``id``, ``title`` and ``content``::

    semantic-notes index notes.json
    semantic-notes search "groceries for the week" notes.json --max-results 5
    semantic-notes stats
    semantic-notes clear
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError

from semantic_notes.config import EmbeddingSettings
from semantic_notes.models import Note
from semantic_notes.service import SemanticNoteService, build_service

logger = logging.getLogger(__name__)

_notes_adapter = TypeAdapter(List[Note])


def load_notes(path: Path) -> List[Note]:
    """Read and validate a JSON list of notes."""
    with open(path, encoding="utf-8") as f:
        return _notes_adapter.validate_python(json.load(f))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="semantic-notes",
        description="Local semantic search over notes",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: SEMANTIC_NOTES_LOG_LEVEL or INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    index_parser = subparsers.add_parser("index", help="Embed notes that are not indexed yet")
    index_parser.add_argument("notes", type=Path, help="JSON file with a list of notes")

    search_parser = subparsers.add_parser("search", help="Find notes similar to a query")
    search_parser.add_argument("query", help="Search text")
    search_parser.add_argument("notes", type=Path, help="JSON file with a list of notes")
    search_parser.add_argument(
        "--max-results", type=int, default=10, help="Result limit in on-demand mode"
    )
    search_parser.add_argument(
        "--threshold", type=float, default=None, help="Minimum score in precomputed mode"
    )
    search_parser.add_argument(
        "--on-demand",
        action="store_true",
        help="Embed every note instead of using precomputed vectors",
    )

    subparsers.add_parser("stats", help="Show cache statistics")
    subparsers.add_parser("clear", help="Delete all cached and indexed embeddings")

    return parser


async def run(args: argparse.Namespace, service: SemanticNoteService) -> int:
    try:
        if args.command == "index":
            notes = load_notes(args.notes)
            result = await service.process_all(notes)
            print(result.model_dump_json(indent=2))
            return 1 if result.failed else 0

        if args.command == "search":
            notes = load_notes(args.notes)
            if args.on_demand:
                results = await service.find_similar(args.query, notes, args.max_results)
            else:
                results = await service.find_similar_precomputed(
                    args.query, notes, args.threshold
                )

            for result in results:
                print(f"{result.similarity:.3f}  {result.note.id:>6}  {result.note.title}")
            if not results:
                print("No similar notes found")
            return 0

        if args.command == "stats":
            await service.load_persisted()
            print(service.get_cache_stats().model_dump_json(indent=2))
            return 0

        if args.command == "clear":
            await service.clear_cache()
            print("Embedding caches cleared")
            return 0

        raise ValueError(f"Unknown command: {args.command}")
    finally:
        await service.close()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = EmbeddingSettings()

    logging.basicConfig(
        level=(args.log_level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        service = build_service(settings)
        return asyncio.run(run(args, service))
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.error(f"Invalid input: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
