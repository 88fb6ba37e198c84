"""CLI entrypoint for incremental indexing of text files."""

from __future__ import annotations

import argparse
import json
import logging

from dotenv import load_dotenv

from morphstream.cli.common import add_tokenizer_arguments, build_factory
from morphstream.errors import DictionaryLoadError
from morphstream.search.indexer import TextIndexer


load_dotenv()

LOGGER = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Index UTF-8 text files into SQLite FTS5 storage")
    parser.add_argument("--texts-path", default="texts", help="File or directory of .txt files to index")
    parser.add_argument("--db-path", default=".morphstream-search.db", help="SQLite database path")
    add_tokenizer_arguments(parser)
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    try:
        factory = build_factory(args)
    except (DictionaryLoadError, ValueError) as exc:
        LOGGER.error("%s", exc)
        return 2

    with TextIndexer.from_db_path(args.db_path, factory) as indexer:
        stats = indexer.index_texts(args.texts_path)

    print(json.dumps(stats.to_dict(), ensure_ascii=True, indent=2))
    return 0 if stats.errors == 0 else 1


if __name__ == "__main__":
    raise SystemExit(main())
