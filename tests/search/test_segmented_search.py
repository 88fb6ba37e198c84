from __future__ import annotations

import itertools
from pathlib import Path

import pytest

from morphstream.models import Morpheme
from morphstream.search.indexer import TextIndexer
from morphstream.search.normalize import extract_terms, fold_term
from morphstream.search.query import build_match_expression, clamp_limit, search_documents
from morphstream.search.repository import DocumentRepository
from morphstream.tokenizer import TokenizerFactory


def _script_of(char: str) -> str:
    if char.isspace():
        return "space"
    code = ord(char)
    if 0x3040 <= code <= 0x309F:
        return "hiragana"
    if 0x4E00 <= code <= 0x9FFF:
        return "kanji"
    if char.isalnum():
        return "alnum"
    return "other"


class _RunWorker:
    def segment(self, text: str) -> list[Morpheme]:
        morphemes: list[Morpheme] = []
        offset = 0
        for _, group in itertools.groupby(text, key=_script_of):
            piece = "".join(group)
            size = len(piece.encode("utf-8"))
            morphemes.append(Morpheme(piece, offset, offset + size))
            offset += size
        return morphemes


class _RunResource:
    def new_worker(self) -> _RunWorker:
        return _RunWorker()


def _factory() -> TokenizerFactory:
    return TokenizerFactory(_RunResource())


def test_terms_are_folded_and_punctuation_is_dropped() -> None:
    factory = _factory()

    assert fold_term("ＰＹＴＨＯＮ") == "python"
    assert extract_terms(factory, "東京都に、Ｐｙｔｈｏｎ！") == ["東京都", "に", "python"]


def test_match_expression_quotes_terms() -> None:
    assert build_match_expression([]) == ""
    assert build_match_expression(["東京都", "に"]) == 'segmented_text:"東京都" AND segmented_text:"に"'
    assert build_match_expression(["東京都", "に"], phrase_mode=True) == 'segmented_text:"東京都 に"'
    assert build_match_expression(['a"b']) == 'segmented_text:"a""b"'


def test_term_and_phrase_queries_over_indexed_documents(tmp_path: Path) -> None:
    factory = _factory()
    with TextIndexer.from_db_path(tmp_path / "search.db", factory) as indexer:
        indexer.index_text("a.txt", "東京都に住む")
        indexer.index_text("b.txt", "京都に行く")
        indexer.index_text("c.txt", "住む東京都")
        indexer.index_text("d.txt", "東京都に行く、住む")
        connection = indexer.repository.connection

        term_hits = search_documents(connection, factory, query="東京都", limit=10)
        and_hits = search_documents(connection, factory, query="に住む", limit=10)
        phrase_hits = search_documents(connection, factory, query="に住む", limit=10, phrase_mode=True)

    assert {hit.source_path for hit in term_hits} == {"a.txt", "c.txt", "d.txt"}
    assert {hit.source_path for hit in and_hits} == {"a.txt", "d.txt"}
    assert [hit.source_path for hit in phrase_hits] == ["a.txt"]
    assert phrase_hits[0].excerpt


def test_indexed_column_and_query_share_term_extraction(tmp_path: Path) -> None:
    factory = _factory()
    text = "東京都に、Ｐｙｔｈｏｎ！"
    with TextIndexer.from_db_path(tmp_path / "search.db", factory) as indexer:
        indexer.index_text("a.txt", text)
        row = indexer.repository.connection.execute(
            "SELECT segmented_text FROM documents WHERE source_path = ?", ("a.txt",)
        ).fetchone()

        hits = search_documents(indexer.repository.connection, factory, query="ｐｙｔｈｏｎ")

    assert row["segmented_text"] == " ".join(extract_terms(factory, text))
    assert [hit.source_path for hit in hits] == ["a.txt"]


def test_result_limit_is_clamped(tmp_path: Path) -> None:
    assert clamp_limit(0) == 1
    assert clamp_limit(-5) == 1
    assert clamp_limit(25) == 25
    assert clamp_limit(500) == 100

    factory = _factory()
    with TextIndexer.from_db_path(tmp_path / "search.db", factory) as indexer:
        for index in range(3):
            indexer.index_text(f"{index}.txt", "東京都に住む")
        connection = indexer.repository.connection

        assert len(search_documents(connection, factory, query="東京都", limit=0)) == 1
        assert len(search_documents(connection, factory, query="東京都", limit=500)) == 3


def test_punctuation_only_query_returns_nothing(tmp_path: Path) -> None:
    factory = _factory()
    with DocumentRepository(tmp_path / "search.db") as repo:
        assert search_documents(repo.connection, factory, query="、。！") == []


def test_incremental_indexing_skips_unchanged_files(tmp_path: Path) -> None:
    texts_dir = tmp_path / "texts"
    texts_dir.mkdir()
    (texts_dir / "a.txt").write_text("東京都に住む", encoding="utf-8")
    (texts_dir / "b.txt").write_text("京都に行く", encoding="utf-8")
    (texts_dir / "notes.md").write_text("ignored", encoding="utf-8")

    factory = _factory()
    with TextIndexer.from_db_path(tmp_path / "search.db", factory) as indexer:
        first = indexer.index_texts(texts_dir)
        assert (first.scanned, first.indexed, first.skipped_unchanged, first.errors) == (2, 2, 0, 0)

        second = indexer.index_texts(texts_dir)
        assert (second.scanned, second.indexed, second.skipped_unchanged) == (2, 0, 2)

        (texts_dir / "a.txt").write_text("大阪府に住む", encoding="utf-8")
        (texts_dir / "c.txt").write_bytes(b"\xff\xfe broken")
        third = indexer.index_texts(texts_dir)

        assert third.scanned == 3
        assert third.indexed == 1
        assert third.skipped_unchanged == 1
        assert third.errors == 1
        assert third.error_details[0]["source_path"].endswith("c.txt")
        assert indexer.repository.count_documents() == 2

        hits = search_documents(indexer.repository.connection, factory, query="大阪府")
        assert [Path(hit.source_path).name for hit in hits] == ["a.txt"]


def test_maintenance_commands(tmp_path: Path) -> None:
    with DocumentRepository(tmp_path / "search.db") as repo:
        repo.run_maintenance("optimize")
        repo.run_maintenance("rebuild")
        with pytest.raises(ValueError, match="vacuum"):
            repo.run_maintenance("vacuum")
