"""SQLite FTS5 storage for pre-segmented documents."""

from .indexer import IndexRunStats, TextIndexer
from .query import SearchHit, build_match_expression, clamp_limit, search_documents
from .repository import DocumentRepository

__all__ = [
    "DocumentRepository",
    "IndexRunStats",
    "SearchHit",
    "TextIndexer",
    "build_match_expression",
    "clamp_limit",
    "search_documents",
]
