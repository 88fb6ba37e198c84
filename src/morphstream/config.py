"""Runtime configuration for tokenizer factories."""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Mapping

from morphstream.normalization import SUPPORTED_NORMALIZERS
from morphstream.segmenter import DEFAULT_SPLIT_MODE, SUPPORTED_SPLIT_MODES


DEFAULT_NORMALIZATION = "none"
DEFAULT_ZERO_WIDTH = "skip"
_ZERO_WIDTH_POLICIES = ("skip", "keep")


def _parse_positive_int(*, name: str, raw_value: str, minimum: int = 1) -> int:
    try:
        value = int(raw_value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw_value!r}") from None
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


@dataclass(frozen=True, slots=True)
class TokenizerSettings:
    """Validated settings for building a ``TokenizerFactory``."""

    dict_path: Path
    split_mode: str = DEFAULT_SPLIT_MODE
    normalization: str = DEFAULT_NORMALIZATION
    zero_width: str = DEFAULT_ZERO_WIDTH
    max_workers: int | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "TokenizerSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        dict_path_raw = source.get("MORPHSTREAM_DICT_PATH", "").strip()
        if not dict_path_raw:
            raise ValueError("Missing required tokenizer environment variable: MORPHSTREAM_DICT_PATH")

        split_mode = source.get("MORPHSTREAM_SPLIT_MODE", DEFAULT_SPLIT_MODE).strip().upper()
        if split_mode not in SUPPORTED_SPLIT_MODES:
            raise ValueError(f"MORPHSTREAM_SPLIT_MODE must be one of {', '.join(SUPPORTED_SPLIT_MODES)}")

        normalization = source.get("MORPHSTREAM_NORMALIZATION", DEFAULT_NORMALIZATION).strip().lower()
        if normalization not in SUPPORTED_NORMALIZERS:
            raise ValueError(f"MORPHSTREAM_NORMALIZATION must be one of {', '.join(SUPPORTED_NORMALIZERS)}")

        zero_width = source.get("MORPHSTREAM_ZERO_WIDTH", DEFAULT_ZERO_WIDTH).strip().lower()
        if zero_width not in _ZERO_WIDTH_POLICIES:
            raise ValueError(f"MORPHSTREAM_ZERO_WIDTH must be one of {', '.join(_ZERO_WIDTH_POLICIES)}")

        max_workers: int | None = None
        max_workers_raw = source.get("MORPHSTREAM_MAX_WORKERS", "").strip()
        if max_workers_raw:
            max_workers = _parse_positive_int(name="MORPHSTREAM_MAX_WORKERS", raw_value=max_workers_raw)

        return cls(
            dict_path=Path(dict_path_raw),
            split_mode=split_mode,
            normalization=normalization,
            zero_width=zero_width,
            max_workers=max_workers,
        )
