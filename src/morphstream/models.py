"""Value types exchanged between the segmenter, the cursor and the host pipeline."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Morpheme:
    """One unit produced by the segmenter.

    ``start`` and ``end`` are UTF-8 byte offsets into the exact string that
    was handed to the segmenter for this call.
    """

    surface: str
    start: int
    end: int

    @property
    def is_zero_width(self) -> bool:
        return self.start == self.end


@dataclass(frozen=True, slots=True)
class Token:
    """Token handed to the host pipeline.

    Offsets are UTF-8 byte offsets into the caller's original string and
    ``text`` is always the original text between them.
    """

    text: str
    offset_from: int
    offset_to: int
    position: int
    position_length: int = 1

    def to_dict(self) -> dict[str, str | int]:
        return {
            "text": self.text,
            "offset_from": self.offset_from,
            "offset_to": self.offset_to,
            "position": self.position,
            "position_length": self.position_length,
        }
