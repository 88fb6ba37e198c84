"""Shared argument handling for tokenizer-backed CLIs."""

from __future__ import annotations

import argparse
from dataclasses import replace
import os

from morphstream.config import TokenizerSettings
from morphstream.segmenter import SUPPORTED_SPLIT_MODES
from morphstream.tokenizer import TokenizerFactory


def add_tokenizer_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--dict-path", help="Sudachi system dictionary (.dic); overrides MORPHSTREAM_DICT_PATH")
    parser.add_argument(
        "--split-mode",
        choices=SUPPORTED_SPLIT_MODES,
        help="Sudachi split mode; overrides MORPHSTREAM_SPLIT_MODE",
    )


def build_factory(args: argparse.Namespace) -> TokenizerFactory:
    environ = dict(os.environ)
    if args.dict_path:
        environ["MORPHSTREAM_DICT_PATH"] = args.dict_path
    settings = TokenizerSettings.from_env(environ)
    if args.split_mode:
        settings = replace(settings, split_mode=args.split_mode)
    return TokenizerFactory.from_settings(settings)
