"""Error taxonomy for dictionary loading and token stream consumption."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True)
class DictionaryLoadError(Exception):
    """Dictionary path is missing, unreadable, or not a valid dictionary."""

    path: Path
    message: str

    def __str__(self) -> str:
        return f"{self.message} (path={self.path})"


@dataclass(slots=True)
class SegmentationError(Exception):
    """The segmenter failed or broke its morpheme contract for one input."""

    message: str
    text_length: int = 0

    def __str__(self) -> str:
        return f"{self.message} (text_length={self.text_length})"


class CursorStateError(RuntimeError):
    """A cursor operation was called in a state that does not permit it."""
