"""CLI entrypoint for FTS5 queries over segmented documents."""

from __future__ import annotations

import argparse
import json
import logging

from dotenv import load_dotenv

from morphstream.cli.common import add_tokenizer_arguments, build_factory
from morphstream.errors import DictionaryLoadError
from morphstream.search.query import clamp_limit, search_documents
from morphstream.search.repository import DocumentRepository


load_dotenv()

LOGGER = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run text search against indexed SQLite FTS5 database")
    parser.add_argument("--db-path", default=".morphstream-search.db", help="SQLite database path")
    parser.add_argument("--query", required=True, help="Text query to search for")
    parser.add_argument("--limit", type=int, default=10, help="Maximum number of results")
    parser.add_argument(
        "--phrase-mode",
        action="store_true",
        help="Require query tokens to appear adjacent and in order",
    )
    add_tokenizer_arguments(parser)
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.WARNING, format="%(asctime)s %(levelname)s %(message)s")

    try:
        factory = build_factory(args)
    except (DictionaryLoadError, ValueError) as exc:
        LOGGER.error("%s", exc)
        return 2

    with DocumentRepository(args.db_path) as repository:
        hits = search_documents(
            repository.connection,
            factory,
            query=args.query,
            limit=args.limit,
            phrase_mode=args.phrase_mode,
        )

    payload = {
        "query": args.query,
        "phrase_mode": args.phrase_mode,
        "limit": clamp_limit(args.limit),
        "results": [hit.to_dict() for hit in hits],
    }
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
