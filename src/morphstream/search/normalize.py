"""Term extraction shared by the indexing and query paths."""

from __future__ import annotations

import re
import unicodedata

from morphstream.analysis import tokenize
from morphstream.tokenizer import Tokenizer


_WORD_RE = re.compile(r"\w", re.UNICODE)


def fold_term(term: str) -> str:
    """Fold width, compatibility forms and case for index comparisons."""

    return unicodedata.normalize("NFKC", term).casefold()


def extract_terms(tokenizer: Tokenizer, text: str) -> list[str]:
    """Return folded token texts, dropping whitespace and punctuation-only tokens."""

    terms: list[str] = []
    for token in tokenize(tokenizer, text):
        value = fold_term(token.text.strip())
        if value and _WORD_RE.search(value):
            terms.append(value)
    return terms
