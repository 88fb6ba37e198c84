"""Host-side helpers that drive token cursors to completion."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Iterable

from morphstream.models import Token
from morphstream.tokenizer import Tokenizer, TokenStream


def collect_tokens(stream: TokenStream) -> list[Token]:
    tokens: list[Token] = []
    while stream.advance():
        tokens.append(stream.current_token())
    return tokens


def tokenize(tokenizer: Tokenizer, text: str) -> list[Token]:
    """Tokenize one document, releasing the cursor however consumption ends."""

    stream = tokenizer.create_cursor(text)
    try:
        return collect_tokens(stream)
    finally:
        close = getattr(stream, "close", None)
        if close is not None:
            close()


def tokenize_documents(
    tokenizer: Tokenizer,
    texts: Iterable[str],
    *,
    max_workers: int | None = None,
) -> list[list[Token]]:
    """Tokenize documents in parallel, one cursor each, results in input order."""

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(partial(tokenize, tokenizer), texts))
