"""FTS5 query builder and result mapping for segmented text search."""

from __future__ import annotations

from dataclasses import dataclass
import sqlite3

from morphstream.search.normalize import extract_terms
from morphstream.tokenizer import Tokenizer


MAX_RESULTS = 100


@dataclass(slots=True)
class SearchHit:
    source_path: str
    document_id: int
    rank: float
    excerpt: str

    def to_dict(self) -> dict[str, str | int | float]:
        return {
            "source_path": self.source_path,
            "document_id": self.document_id,
            "rank": self.rank,
            "excerpt": self.excerpt,
        }


def _quoted(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def clamp_limit(limit: int) -> int:
    return max(1, min(limit, MAX_RESULTS))


def build_match_expression(terms: list[str], *, phrase_mode: bool = False) -> str:
    """Build an FTS5 MATCH expression over ``segmented_text``.

    Phrase mode relies on token positions: the terms must be adjacent and in
    order, which is what consecutive cursor positions give us.
    """

    if not terms:
        return ""
    if phrase_mode:
        return f"segmented_text:{_quoted(' '.join(terms))}"
    return " AND ".join(f"segmented_text:{_quoted(term)}" for term in terms)


def search_documents(
    connection: sqlite3.Connection,
    tokenizer: Tokenizer,
    *,
    query: str,
    limit: int = 10,
    phrase_mode: bool = False,
) -> list[SearchHit]:
    terms = extract_terms(tokenizer, query)
    match_expression = build_match_expression(terms, phrase_mode=phrase_mode)
    if not match_expression:
        return []

    rows = connection.execute(
        """
        SELECT
            d.id AS document_id,
            d.source_path AS source_path,
            d.raw_text AS raw_text,
            bm25(documents_fts) AS rank,
            snippet(documents_fts, 0, '«', '»', ' … ', 32) AS excerpt
        FROM documents_fts
        JOIN documents d ON d.id = documents_fts.rowid
        WHERE documents_fts MATCH ?
        ORDER BY rank ASC, d.id ASC
        LIMIT ?
        """,
        (match_expression, clamp_limit(limit)),
    ).fetchall()

    return [
        SearchHit(
            source_path=row["source_path"],
            document_id=int(row["document_id"]),
            rank=float(row["rank"]),
            excerpt=row["excerpt"] or row["raw_text"],
        )
        for row in rows
    ]
