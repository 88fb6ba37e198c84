"""Normalization stages applied before segmentation.

Every stage returns the working text together with the ``OffsetMap`` that
leads back to the caller's original string. The cursor always translates
through that map, including for the identity stage.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Protocol, runtime_checkable
import unicodedata

from morphstream.offsets import OffsetMap

# Half-width katakana voiced/semi-voiced marks compose with the preceding
# kana under NFKC even though their combining class is 0.
_HALFWIDTH_SOUND_MARKS = frozenset("\uff9e\uff9f")


@dataclass(frozen=True, slots=True)
class NormalizedText:
    text: str
    offsets: OffsetMap


@runtime_checkable
class TextNormalizer(Protocol):
    """Protocol for stages that rewrite text before it reaches the segmenter."""

    name: str

    def normalize(self, text: str) -> NormalizedText:
        """Return working text and its alignment to *text*."""


class IdentityNormalizer:
    name = "identity"

    def normalize(self, text: str) -> NormalizedText:
        return NormalizedText(text=text, offsets=OffsetMap.identity(text))


def _iter_clusters(text: str) -> Iterator[str]:
    """Yield base characters together with the marks that attach to them."""

    cluster = ""
    for char in text:
        attaches = bool(unicodedata.combining(char)) or char in _HALFWIDTH_SOUND_MARKS
        if cluster and not attaches:
            yield cluster
            cluster = ""
        cluster += char
    if cluster:
        yield cluster


class NfkcNormalizer:
    """Fold full-width, half-width and compatibility forms with NFKC."""

    name = "nfkc"

    def normalize(self, text: str) -> NormalizedText:
        pieces = [(cluster, unicodedata.normalize("NFKC", cluster)) for cluster in _iter_clusters(text)]
        working = "".join(normalized for _, normalized in pieces)
        return NormalizedText(text=working, offsets=OffsetMap.from_pieces(pieces))


_NORMALIZERS: dict[str, type[IdentityNormalizer] | type[NfkcNormalizer]] = {
    "none": IdentityNormalizer,
    "identity": IdentityNormalizer,
    "nfkc": NfkcNormalizer,
}

SUPPORTED_NORMALIZERS = tuple(_NORMALIZERS)


def build_normalizer(name: str) -> TextNormalizer:
    key = name.strip().lower()
    try:
        return _NORMALIZERS[key]()
    except KeyError:
        supported = ", ".join(SUPPORTED_NORMALIZERS)
        raise ValueError(f"Unsupported normalization: {name!r} (expected one of {supported})") from None
