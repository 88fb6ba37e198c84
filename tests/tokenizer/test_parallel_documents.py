from __future__ import annotations

import itertools
import threading
import time

from morphstream.analysis import collect_tokens, tokenize, tokenize_documents
from morphstream.models import Morpheme
from morphstream.tokenizer import TokenizerFactory


def _script_of(char: str) -> str:
    if char.isspace():
        return "space"
    code = ord(char)
    if 0x3040 <= code <= 0x309F:
        return "hiragana"
    if 0x30A0 <= code <= 0x30FF:
        return "katakana"
    if 0x4E00 <= code <= 0x9FFF:
        return "kanji"
    if char.isalnum():
        return "alnum"
    return "other"


class _ExclusiveRunWorker:
    """Splits on script changes and fails loudly if used by two threads at once."""

    def __init__(self) -> None:
        self._busy = threading.Lock()

    def segment(self, text: str) -> list[Morpheme]:
        if not self._busy.acquire(blocking=False):
            raise AssertionError("worker used concurrently")
        try:
            time.sleep(0.001)
            morphemes: list[Morpheme] = []
            offset = 0
            for _, group in itertools.groupby(text, key=_script_of):
                piece = "".join(group)
                size = len(piece.encode("utf-8"))
                morphemes.append(Morpheme(piece, offset, offset + size))
                offset += size
            return morphemes
        finally:
            self._busy.release()


class _RunResource:
    def __init__(self) -> None:
        self.created = 0

    def new_worker(self) -> _ExclusiveRunWorker:
        self.created += 1
        return _ExclusiveRunWorker()


_DOCUMENTS = [
    "東京都に住む",
    "今日はいい天気ですね。",
    "カタカナとひらがな、そして漢字。",
    "Python 3 で形態素解析",
    "",
    "   ",
    "絵文字😀もOK",
    "すもももももももものうち",
] * 4


def test_parallel_tokenization_matches_sequential_results() -> None:
    factory = TokenizerFactory(_RunResource())

    sequential = [tokenize(factory, text) for text in _DOCUMENTS]
    parallel = tokenize_documents(factory, _DOCUMENTS, max_workers=8)

    assert parallel == sequential
    assert factory.pool.leased_count == 0


def test_bounded_worker_pool_serves_more_documents_than_workers() -> None:
    resource = _RunResource()
    factory = TokenizerFactory(resource, max_workers=2)

    results = tokenize_documents(factory, _DOCUMENTS, max_workers=8)

    assert len(results) == len(_DOCUMENTS)
    assert resource.created <= 2
    assert factory.pool.leased_count == 0


def test_tokens_tile_the_input_and_match_its_bytes() -> None:
    factory = TokenizerFactory(_RunResource())

    for text in _DOCUMENTS:
        raw = text.encode("utf-8")
        tokens = tokenize(factory, text)

        expected_start = 0
        for position, token in enumerate(tokens):
            assert token.offset_from == expected_start
            assert token.offset_from <= token.offset_to
            assert raw[token.offset_from : token.offset_to] == token.text.encode("utf-8")
            assert token.position == position
            expected_start = token.offset_to
        assert expected_start == len(raw)


def test_collect_tokens_accepts_any_token_stream() -> None:
    factory = TokenizerFactory(_RunResource())
    cursor = factory.create_cursor("東京都に住む")

    assert [token.text for token in collect_tokens(cursor)] == ["東京都", "に", "住", "む"]
    assert factory.pool.leased_count == 0
