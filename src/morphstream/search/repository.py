"""Repository primitives for FTS-backed document persistence."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import sqlite3

from morphstream.search.schema import apply_runtime_pragmas, ensure_schema, optimize_fts, rebuild_fts


@dataclass(slots=True)
class DocumentRow:
    source_path: str
    raw_text: str
    segmented_text: str
    token_count: int
    fingerprint: str


class DocumentRepository:
    """Thin transactional layer over the SQLite document schema."""

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path)
        self._connection = sqlite3.connect(str(self._db_path))
        self._connection.row_factory = sqlite3.Row
        apply_runtime_pragmas(self._connection)
        ensure_schema(self._connection)

    @property
    def connection(self) -> sqlite3.Connection:
        return self._connection

    def close(self) -> None:
        self._connection.close()

    def __enter__(self) -> "DocumentRepository":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def get_fingerprint(self, source_path: str) -> str | None:
        row = self._connection.execute(
            "SELECT fingerprint FROM documents WHERE source_path = ?",
            (source_path,),
        ).fetchone()
        if row is None:
            return None
        return row["fingerprint"]

    def upsert_document(self, document: DocumentRow) -> int:
        """Insert or replace one document in a single transaction."""

        with self._connection:
            self._connection.execute(
                """
                INSERT INTO documents(source_path, raw_text, segmented_text, token_count, fingerprint)
                VALUES(?, ?, ?, ?, ?)
                ON CONFLICT(source_path) DO UPDATE SET
                    raw_text=excluded.raw_text,
                    segmented_text=excluded.segmented_text,
                    token_count=excluded.token_count,
                    fingerprint=excluded.fingerprint,
                    updated_at=CURRENT_TIMESTAMP
                """,
                (
                    document.source_path,
                    document.raw_text,
                    document.segmented_text,
                    document.token_count,
                    document.fingerprint,
                ),
            )
            row = self._connection.execute(
                "SELECT id FROM documents WHERE source_path = ?",
                (document.source_path,),
            ).fetchone()
            if row is None:
                raise RuntimeError(f"Document row missing after upsert: {document.source_path}")
        return int(row["id"])

    def count_documents(self) -> int:
        row = self._connection.execute("SELECT COUNT(*) AS c FROM documents").fetchone()
        return int(row["c"])

    def run_maintenance(self, command: str) -> None:
        if command == "optimize":
            optimize_fts(self._connection)
            return
        if command == "rebuild":
            rebuild_fts(self._connection)
            return
        raise ValueError(f"Unsupported maintenance command: {command}")
