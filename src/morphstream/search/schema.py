"""SQLite schema and pragmas for pre-segmented document search."""

from __future__ import annotations

import sqlite3


PRAGMA_BUSY_TIMEOUT_MS = 5000


def apply_runtime_pragmas(connection: sqlite3.Connection) -> None:
    """Apply runtime pragmas recommended for local indexing throughput."""

    connection.execute("PRAGMA journal_mode=WAL;")
    connection.execute(f"PRAGMA busy_timeout={PRAGMA_BUSY_TIMEOUT_MS};")
    connection.execute("PRAGMA synchronous=NORMAL;")
    connection.execute("PRAGMA foreign_keys=ON;")


def ensure_schema(connection: sqlite3.Connection) -> None:
    """Create document tables, FTS index, and sync triggers if missing."""

    connection.executescript(
        """
        CREATE TABLE IF NOT EXISTS documents (
            id INTEGER PRIMARY KEY,
            source_path TEXT NOT NULL UNIQUE,
            raw_text TEXT NOT NULL,
            segmented_text TEXT NOT NULL,
            token_count INTEGER NOT NULL DEFAULT 0,
            fingerprint TEXT NOT NULL,
            updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        );

        CREATE VIRTUAL TABLE IF NOT EXISTS documents_fts USING fts5(
            segmented_text,
            content='documents',
            content_rowid='id',
            tokenize='unicode61 remove_diacritics 2'
        );

        CREATE TRIGGER IF NOT EXISTS documents_ai AFTER INSERT ON documents BEGIN
            INSERT INTO documents_fts(rowid, segmented_text)
            VALUES (new.id, new.segmented_text);
        END;

        CREATE TRIGGER IF NOT EXISTS documents_ad AFTER DELETE ON documents BEGIN
            INSERT INTO documents_fts(documents_fts, rowid, segmented_text)
            VALUES ('delete', old.id, old.segmented_text);
        END;

        CREATE TRIGGER IF NOT EXISTS documents_au AFTER UPDATE ON documents BEGIN
            INSERT INTO documents_fts(documents_fts, rowid, segmented_text)
            VALUES ('delete', old.id, old.segmented_text);
            INSERT INTO documents_fts(rowid, segmented_text)
            VALUES (new.id, new.segmented_text);
        END;
        """
    )


def optimize_fts(connection: sqlite3.Connection) -> None:
    """Run FTS optimize maintenance command."""

    connection.execute("INSERT INTO documents_fts(documents_fts) VALUES ('optimize');")


def rebuild_fts(connection: sqlite3.Connection) -> None:
    """Run FTS rebuild maintenance command."""

    connection.execute("INSERT INTO documents_fts(documents_fts) VALUES ('rebuild');")
