"""Batch and incremental indexing of plain-text documents."""

from __future__ import annotations

from dataclasses import dataclass, field
import hashlib
import logging
from pathlib import Path
import time

from morphstream.errors import SegmentationError
from morphstream.search.normalize import extract_terms
from morphstream.search.repository import DocumentRepository, DocumentRow
from morphstream.tokenizer import Tokenizer


LOGGER = logging.getLogger(__name__)

_SUPPORTED_SUFFIXES = {".txt"}


@dataclass(slots=True)
class IndexRunStats:
    scanned: int = 0
    indexed: int = 0
    skipped_unchanged: int = 0
    errors: int = 0
    duration_ms: int = 0
    error_details: list[dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> dict[str, int | list[dict[str, str]]]:
        return {
            "scanned": self.scanned,
            "indexed": self.indexed,
            "skipped_unchanged": self.skipped_unchanged,
            "errors": self.errors,
            "duration_ms": self.duration_ms,
            "error_details": self.error_details,
        }


def _collect_inputs(target: Path) -> list[Path]:
    if target.is_file():
        return [target]
    if target.is_dir():
        return sorted(
            path for path in target.rglob("*") if path.is_file() and path.suffix.lower() in _SUPPORTED_SUFFIXES
        )
    return []


def _fingerprint(raw_bytes: bytes) -> str:
    return hashlib.sha256(raw_bytes).hexdigest()


class TextIndexer:
    """Indexes UTF-8 text files into SQLite + FTS with incremental updates."""

    def __init__(self, repository: DocumentRepository, tokenizer: Tokenizer) -> None:
        self._repository = repository
        self._tokenizer = tokenizer

    @classmethod
    def from_db_path(cls, db_path: str | Path, tokenizer: Tokenizer) -> "TextIndexer":
        return cls(repository=DocumentRepository(db_path), tokenizer=tokenizer)

    @property
    def repository(self) -> DocumentRepository:
        return self._repository

    def close(self) -> None:
        self._repository.close()

    def __enter__(self) -> "TextIndexer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def index_text(self, source_path: str, text: str, *, fingerprint: str | None = None) -> int:
        terms = extract_terms(self._tokenizer, text)
        return self._repository.upsert_document(
            DocumentRow(
                source_path=source_path,
                raw_text=text,
                segmented_text=" ".join(terms),
                token_count=len(terms),
                fingerprint=fingerprint or _fingerprint(text.encode("utf-8")),
            )
        )

    def index_texts(self, texts_path: str | Path) -> IndexRunStats:
        started = time.perf_counter()
        stats = IndexRunStats()
        files = _collect_inputs(Path(texts_path))
        stats.scanned = len(files)

        for file_path in files:
            source_path = str(file_path)
            try:
                raw_bytes = file_path.read_bytes()
                fingerprint = _fingerprint(raw_bytes)
                if self._repository.get_fingerprint(source_path) == fingerprint:
                    stats.skipped_unchanged += 1
                    continue

                self.index_text(source_path, raw_bytes.decode("utf-8"), fingerprint=fingerprint)
                stats.indexed += 1
            except (SegmentationError, UnicodeDecodeError, OSError) as exc:
                LOGGER.warning("Failed to index %s: %s", source_path, exc)
                stats.errors += 1
                stats.error_details.append({"source_path": source_path, "error": str(exc)})

        stats.duration_ms = int((time.perf_counter() - started) * 1000)
        return stats
