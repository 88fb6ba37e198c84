"""Byte offset translation between segmenter working text and original input."""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from itertools import accumulate
from typing import Iterable


def utf8_length(text: str) -> int:
    """Return the UTF-8 encoded length of *text* in bytes."""

    return len(text.encode("utf-8"))


def char_to_byte_offsets(text: str) -> list[int]:
    """Return byte offsets of every character boundary in *text*.

    The result has ``len(text) + 1`` entries: entry ``i`` is the UTF-8 byte
    offset of character index ``i``, the last entry is the full byte length.
    Raises ``UnicodeEncodeError`` for text that cannot be encoded (lone
    surrogates).
    """

    return list(accumulate((len(char.encode("utf-8")) for char in text), initial=0))


@dataclass(frozen=True, slots=True)
class AlignedSegment:
    """A working-text byte span and the original byte span it came from."""

    working_start: int
    working_end: int
    original_start: int
    original_end: int


class OffsetMap:
    """Monotonic alignment from working-text bytes to original-text bytes.

    The map is a list of aligned segments, each non-empty on the working
    side. Offsets on a segment boundary translate exactly. Offsets inside a
    segment (a normalization that turned one original character into several
    working characters, or the reverse) snap outwards: span starts snap to
    the segment start and span ends snap to the segment end, so a translated
    span always covers whole original characters.
    """

    def __init__(
        self,
        segments: list[AlignedSegment],
        *,
        working_length: int,
        original_length: int,
    ) -> None:
        self._segments = segments
        self._working_starts = [segment.working_start for segment in segments]
        self._working_ends = [segment.working_end for segment in segments]
        self._working_length = working_length
        self._original_length = original_length

    @classmethod
    def identity(cls, text: str) -> "OffsetMap":
        """Build the map for text that reached the segmenter unchanged."""

        return cls.from_pieces((char, char) for char in text)

    @classmethod
    def from_pieces(cls, pieces: Iterable[tuple[str, str]]) -> "OffsetMap":
        """Build a map from ``(original_piece, working_piece)`` pairs in order.

        Pieces whose working side is empty are merged into the previous
        segment (or the next one, at the very start) so that every byte of
        the original stays covered.
        """

        bounds: list[list[int]] = []
        working_pos = 0
        original_pos = 0
        pending_start: int | None = None

        for original_piece, working_piece in pieces:
            original_bytes = utf8_length(original_piece)
            working_bytes = utf8_length(working_piece)

            if working_bytes == 0:
                if bounds:
                    bounds[-1][3] += original_bytes
                elif pending_start is None:
                    pending_start = original_pos
                original_pos += original_bytes
                continue

            start = original_pos if pending_start is None else pending_start
            pending_start = None
            bounds.append(
                [working_pos, working_pos + working_bytes, start, original_pos + original_bytes]
            )
            working_pos += working_bytes
            original_pos += original_bytes

        segments = [AlignedSegment(*values) for values in bounds]
        return cls(segments, working_length=working_pos, original_length=original_pos)

    @property
    def working_length(self) -> int:
        return self._working_length

    @property
    def original_length(self) -> int:
        return self._original_length

    @property
    def segments(self) -> tuple[AlignedSegment, ...]:
        return tuple(self._segments)

    def translate(self, start: int, end: int) -> tuple[int, int]:
        """Translate a working-text byte span into an original-text byte span."""

        if start < 0 or end > self._working_length or start > end:
            raise ValueError(
                f"Span [{start}, {end}) is outside working text of {self._working_length} bytes"
            )

        original_start = self._translate_start(start)
        if start == end:
            return original_start, original_start
        return original_start, self._translate_end(end)

    def _translate_start(self, offset: int) -> int:
        if offset >= self._working_length:
            return self._original_length
        index = bisect_right(self._working_starts, offset) - 1
        return self._segments[index].original_start

    def _translate_end(self, offset: int) -> int:
        if offset <= 0:
            return 0
        index = bisect_left(self._working_ends, offset)
        if index >= len(self._segments):
            return self._original_length
        return self._segments[index].original_end
