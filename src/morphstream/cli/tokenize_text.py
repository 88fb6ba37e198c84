"""CLI entrypoint that prints the token stream of one text as JSON."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from dotenv import load_dotenv

from morphstream.analysis import tokenize
from morphstream.cli.common import add_tokenizer_arguments, build_factory
from morphstream.errors import DictionaryLoadError, SegmentationError


load_dotenv()

LOGGER = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Tokenize text with a Sudachi dictionary")
    parser.add_argument("--text", help="Text to tokenize (reads stdin when omitted)")
    add_tokenizer_arguments(parser)
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.WARNING, format="%(asctime)s %(levelname)s %(message)s")

    text = args.text if args.text is not None else sys.stdin.read()

    try:
        factory = build_factory(args)
        tokens = tokenize(factory, text)
    except (DictionaryLoadError, SegmentationError, ValueError) as exc:
        LOGGER.error("%s", exc)
        return 2

    payload = {
        "text": text,
        "tokens": [token.to_dict() for token in tokens],
    }
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
