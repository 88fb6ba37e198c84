"""Segmenter collaborator contract and the SudachiPy-backed resource."""

from __future__ import annotations

import logging
from bisect import bisect_right
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from morphstream.errors import DictionaryLoadError
from morphstream.models import Morpheme
from morphstream.offsets import char_to_byte_offsets


LOGGER = logging.getLogger(__name__)

SUPPORTED_SPLIT_MODES = ("A", "B", "C")
DEFAULT_SPLIT_MODE = "C"

# SudachiPy rejects longer input with "Input is too long".
SUDACHI_MAX_INPUT_BYTES = 49149
_CHUNK_BREAKS = frozenset("\n。！？!?．.")


@runtime_checkable
class SegmenterWorker(Protocol):
    """Mutable per-call scratch state. Never used by two callers at once."""

    def segment(self, text: str) -> list[Morpheme]:
        """Split *text* into morphemes with UTF-8 byte offsets into *text*."""


@runtime_checkable
class SegmenterResource(Protocol):
    """Loaded, read-only dictionary that hands out fresh workers."""

    def new_worker(self) -> SegmenterWorker:
        """Create a worker bound to this resource's dictionary."""


def normalize_split_mode(split_mode: str) -> str:
    mode = split_mode.strip().upper()
    if mode not in SUPPORTED_SPLIT_MODES:
        supported = ", ".join(SUPPORTED_SPLIT_MODES)
        raise ValueError(f"Unsupported split mode: {split_mode!r} (expected one of {supported})")
    return mode


def _check_dictionary_file(path: Path) -> None:
    if not path.exists():
        raise DictionaryLoadError(path, "Dictionary file does not exist")
    if not path.is_file():
        raise DictionaryLoadError(path, "Dictionary path is not a regular file")
    try:
        with path.open("rb") as handle:
            header = handle.read(1)
    except OSError as exc:
        raise DictionaryLoadError(path, f"Dictionary file is not readable: {exc}") from exc
    if not header:
        raise DictionaryLoadError(path, "Dictionary file is empty")


def split_for_segmenter(text: str, max_bytes: int = SUDACHI_MAX_INPUT_BYTES) -> list[tuple[int, int]]:
    """Cut *text* into ``(char_start, char_end)`` spans of at most *max_bytes*.

    Each span ends after the last line break or sentence terminator that
    fits. A span with none of them ends on the last character that fits.
    """

    if max_bytes < 4:
        raise ValueError("max_bytes must leave room for one UTF-8 character")

    byte_offsets = char_to_byte_offsets(text)
    spans: list[tuple[int, int]] = []
    start = 0
    while start < len(text):
        limit = bisect_right(byte_offsets, byte_offsets[start] + max_bytes) - 1
        if limit >= len(text):
            spans.append((start, len(text)))
            break

        cut = limit
        for index in range(limit, start, -1):
            if text[index - 1] in _CHUNK_BREAKS:
                cut = index
                break
        spans.append((start, cut))
        start = cut
    return spans


class SudachiWorker:
    """One SudachiPy tokenizer object together with its split mode."""

    def __init__(
        self,
        tokenizer: Any,
        split_mode: Any,
        *,
        max_input_bytes: int = SUDACHI_MAX_INPUT_BYTES,
    ) -> None:
        self._tokenizer = tokenizer
        self._split_mode = split_mode
        self._max_input_bytes = max_input_bytes

    def segment(self, text: str) -> list[Morpheme]:
        if not text:
            return []

        # SudachiPy reports begin/end as character indices into each chunk.
        byte_offsets = char_to_byte_offsets(text)
        spans = split_for_segmenter(text, self._max_input_bytes)
        if len(spans) > 1:
            LOGGER.debug("Segmenting %d bytes in %d chunks", byte_offsets[-1], len(spans))

        morphemes: list[Morpheme] = []
        for chunk_start, chunk_end in spans:
            for morpheme in self._tokenizer.tokenize(text[chunk_start:chunk_end], self._split_mode):
                morphemes.append(
                    Morpheme(
                        surface=morpheme.surface(),
                        start=byte_offsets[chunk_start + morpheme.begin()],
                        end=byte_offsets[chunk_start + morpheme.end()],
                    )
                )
        return morphemes


class SudachiSegmenter:
    """Sudachi system dictionary loaded once from a ``.dic`` file."""

    def __init__(self, dictionary_path: str | Path, *, split_mode: str = DEFAULT_SPLIT_MODE) -> None:
        self._dictionary_path = Path(dictionary_path)
        self._split_mode_name = normalize_split_mode(split_mode)

        _check_dictionary_file(self._dictionary_path)

        from sudachipy import Dictionary, SplitMode

        try:
            self._dictionary = Dictionary(dict=str(self._dictionary_path))
        except Exception as exc:
            raise DictionaryLoadError(
                self._dictionary_path,
                f"Failed to load Sudachi dictionary: {exc}",
            ) from exc

        self._split_mode = getattr(SplitMode, self._split_mode_name)
        LOGGER.info(
            "Loaded Sudachi dictionary %s (mode %s)",
            self._dictionary_path,
            self._split_mode_name,
        )

    @property
    def dictionary_path(self) -> Path:
        return self._dictionary_path

    @property
    def split_mode(self) -> str:
        return self._split_mode_name

    def new_worker(self) -> SudachiWorker:
        tokenizer = self._dictionary.create(mode=self._split_mode)
        return SudachiWorker(tokenizer, self._split_mode)
