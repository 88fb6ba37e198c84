"""Tokenizer factory and per-document token cursor.

The factory owns a segmenter resource and a worker pool. Each cursor leases
one worker for its lifetime, segments its document on the first
``advance()`` call and then hands out tokens one at a time:

    cursor = factory.create_cursor(text)
    while cursor.advance():
        token = cursor.current_token()

Token offsets are UTF-8 byte offsets into the string given to
``create_cursor``, whatever normalization the working text went through.
"""

from __future__ import annotations

from enum import Enum
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Iterator, Protocol, runtime_checkable
import weakref

from morphstream.errors import CursorStateError, SegmentationError
from morphstream.models import Morpheme, Token
from morphstream.normalization import IdentityNormalizer, TextNormalizer, build_normalizer
from morphstream.offsets import OffsetMap
from morphstream.pool import WorkerLease, WorkerPool
from morphstream.segmenter import (
    DEFAULT_SPLIT_MODE,
    SegmenterResource,
    SegmenterWorker,
    SudachiSegmenter,
)

if TYPE_CHECKING:
    from morphstream.config import TokenizerSettings


LOGGER = logging.getLogger(__name__)


class ZeroWidthPolicy(str, Enum):
    """What to do with morphemes whose start equals their end."""

    SKIP = "skip"
    KEEP = "keep"


class CursorState(Enum):
    READY = "ready"
    EMITTING = "emitting"
    EXHAUSTED = "exhausted"


@runtime_checkable
class TokenStream(Protocol):
    """Pull protocol consumed by the host pipeline: advance, then read."""

    def advance(self) -> bool:
        """Move to the next token; False once the stream is exhausted."""

    def current_token(self) -> Token:
        """Return the token the last successful ``advance()`` moved to."""


@runtime_checkable
class Tokenizer(Protocol):
    """Anything that can open a token stream over a document."""

    def create_cursor(self, text: str) -> TokenStream:
        """Return a fresh, single-use stream over *text*."""


def check_morphemes(morphemes: list[Morpheme], working_length: int) -> None:
    """Raise ``SegmentationError`` unless *morphemes* tile ``[0, working_length)``."""

    expected = 0
    for index, morpheme in enumerate(morphemes):
        if morpheme.start < 0 or morpheme.start > morpheme.end or morpheme.end > working_length:
            raise SegmentationError(
                f"Morpheme {index} has invalid span [{morpheme.start}, {morpheme.end})",
                working_length,
            )
        if morpheme.start != expected:
            kind = "gap" if morpheme.start > expected else "overlap"
            raise SegmentationError(
                f"Morpheme {index} starts at byte {morpheme.start}, expected {expected} ({kind})",
                working_length,
            )
        expected = morpheme.end

    if expected != working_length:
        raise SegmentationError(
            f"Morphemes cover {expected} of {working_length} bytes",
            working_length,
        )


class TokenCursor:
    """Single-use token stream over one document.

    Holds an exclusive worker lease from creation until the stream is
    exhausted, closed, fails, or the cursor is garbage collected.
    """

    def __init__(
        self,
        text: str,
        lease: WorkerLease[SegmenterWorker],
        *,
        normalizer: TextNormalizer,
        zero_width: ZeroWidthPolicy = ZeroWidthPolicy.SKIP,
    ) -> None:
        self._text = text
        self._lease = lease
        self._finalizer = weakref.finalize(self, lease.release)
        self._normalizer = normalizer
        self._zero_width = zero_width
        self._state = CursorState.READY
        self._morphemes: list[Morpheme] | None = None
        self._offsets: OffsetMap | None = None
        self._encoded = b""
        self._index = -1
        self._position = -1
        self._current: Token | None = None

    @property
    def state(self) -> CursorState:
        return self._state

    @property
    def text(self) -> str:
        return self._text

    def advance(self) -> bool:
        if self._state is CursorState.EXHAUSTED:
            return False

        if self._morphemes is None:
            try:
                self._morphemes = self._segment()
            except BaseException:
                self.close()
                raise

        morphemes = self._morphemes
        while self._index + 1 < len(morphemes):
            self._index += 1
            morpheme = morphemes[self._index]
            if morpheme.is_zero_width and self._zero_width is ZeroWidthPolicy.SKIP:
                LOGGER.debug("Skipping zero-width morpheme at byte %d", morpheme.start)
                continue

            self._position += 1
            self._current = None
            self._state = CursorState.EMITTING
            return True

        self.close()
        return False

    def current_token(self) -> Token:
        if self._state is not CursorState.EMITTING:
            raise CursorStateError(f"current_token() requires an emitting cursor, state is {self._state.value}")

        if self._current is None:
            assert self._morphemes is not None
            self._current = self._build_token(self._morphemes[self._index])
        return self._current

    def close(self) -> None:
        """Release the worker lease and end the stream. Idempotent."""

        self._state = CursorState.EXHAUSTED
        self._current = None
        self._finalizer()

    def __enter__(self) -> "TokenCursor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[Token]:
        while self.advance():
            yield self.current_token()

    def _segment(self) -> list[Morpheme]:
        if not self._text:
            return []

        try:
            self._encoded = self._text.encode("utf-8")
            normalized = self._normalizer.normalize(self._text)
        except UnicodeError as exc:
            raise SegmentationError(f"Input text is not valid Unicode: {exc}", len(self._text)) from exc

        self._offsets = normalized.offsets
        if not normalized.text:
            return []

        try:
            morphemes = list(self._lease.worker.segment(normalized.text))
        except SegmentationError:
            raise
        except Exception as exc:
            LOGGER.error("Segmenter failed on %d bytes of input: %s", len(self._encoded), exc)
            raise SegmentationError(f"Segmenter failed: {exc}", normalized.offsets.working_length) from exc

        check_morphemes(morphemes, normalized.offsets.working_length)
        return morphemes

    def _build_token(self, morpheme: Morpheme) -> Token:
        assert self._offsets is not None
        offset_from, offset_to = self._offsets.translate(morpheme.start, morpheme.end)
        return Token(
            text=self._encoded[offset_from:offset_to].decode("utf-8"),
            offset_from=offset_from,
            offset_to=offset_to,
            position=self._position,
            position_length=1,
        )


class TokenizerFactory:
    """Shareable handle that opens token cursors over one segmenter resource."""

    def __init__(
        self,
        resource: SegmenterResource,
        *,
        normalizer: TextNormalizer | None = None,
        zero_width: ZeroWidthPolicy | str = ZeroWidthPolicy.SKIP,
        max_workers: int | None = None,
    ) -> None:
        self._resource = resource
        self._normalizer = normalizer if normalizer is not None else IdentityNormalizer()
        self._zero_width = ZeroWidthPolicy(zero_width)
        self._pool: WorkerPool[SegmenterWorker] = WorkerPool(resource.new_worker, max_size=max_workers)

    @classmethod
    def from_dictionary_path(
        cls,
        dictionary_path: str | Path,
        *,
        split_mode: str = DEFAULT_SPLIT_MODE,
        normalizer: TextNormalizer | None = None,
        zero_width: ZeroWidthPolicy | str = ZeroWidthPolicy.SKIP,
        max_workers: int | None = None,
    ) -> "TokenizerFactory":
        """Load a Sudachi dictionary; raises ``DictionaryLoadError`` on failure."""

        resource = SudachiSegmenter(dictionary_path, split_mode=split_mode)
        return cls(resource, normalizer=normalizer, zero_width=zero_width, max_workers=max_workers)

    @classmethod
    def from_settings(cls, settings: "TokenizerSettings") -> "TokenizerFactory":
        return cls.from_dictionary_path(
            settings.dict_path,
            split_mode=settings.split_mode,
            normalizer=build_normalizer(settings.normalization),
            zero_width=settings.zero_width,
            max_workers=settings.max_workers,
        )

    @property
    def resource(self) -> SegmenterResource:
        return self._resource

    @property
    def normalizer(self) -> TextNormalizer:
        return self._normalizer

    @property
    def zero_width(self) -> ZeroWidthPolicy:
        return self._zero_width

    @property
    def pool(self) -> WorkerPool[SegmenterWorker]:
        return self._pool

    def create_cursor(self, text: str) -> TokenCursor:
        lease = self._pool.checkout()
        return TokenCursor(text, lease, normalizer=self._normalizer, zero_width=self._zero_width)
