"""Token stream adapter over dictionary-based morphological segmenters."""

from .analysis import collect_tokens, tokenize, tokenize_documents
from .config import TokenizerSettings
from .errors import CursorStateError, DictionaryLoadError, SegmentationError
from .models import Morpheme, Token
from .normalization import IdentityNormalizer, NfkcNormalizer, build_normalizer
from .offsets import OffsetMap
from .pool import WorkerLease, WorkerPool
from .segmenter import SegmenterResource, SegmenterWorker, SudachiSegmenter
from .tokenizer import (
    CursorState,
    TokenCursor,
    Tokenizer,
    TokenizerFactory,
    TokenStream,
    ZeroWidthPolicy,
)

__all__ = [
    "CursorState",
    "CursorStateError",
    "DictionaryLoadError",
    "IdentityNormalizer",
    "Morpheme",
    "NfkcNormalizer",
    "OffsetMap",
    "SegmentationError",
    "SegmenterResource",
    "SegmenterWorker",
    "SudachiSegmenter",
    "Token",
    "TokenCursor",
    "TokenStream",
    "Tokenizer",
    "TokenizerFactory",
    "TokenizerSettings",
    "WorkerLease",
    "WorkerPool",
    "ZeroWidthPolicy",
    "build_normalizer",
    "collect_tokens",
    "tokenize",
    "tokenize_documents",
]
