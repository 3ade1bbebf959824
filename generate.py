#!/usr/bin/env python3
"""Visual flashcard generation pipeline.

Runs three stages:
1. Load: vocabulary file (YAML/JSON/CSV/text) -> flashcards
2. Enrich: one Google Images picture + one SpanishDict example per word
3. Render: <n>.<word>.md cards, images and a printable -output.md

Settings come from an optional -config.json, VISUAL_VOCAB_* environment
variables (or .env) and the flags below, in increasing priority.

Usage:
    python generate.py vocab/unit3.yml --config vocab/-config.json --verbose
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from visual_vocab.common.config import CONFIG_FILENAME, get_output_dir, load_config
from visual_vocab.common.errors import ModelLoadError
from visual_vocab.common.logging import log_debug, setup_thread_prefixed_stdout
from visual_vocab.common.utils import _load_env_file
from visual_vocab.pipeline import LoadStage, RenderStage, VisualVocabStage


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the full pipeline."""
    parser = argparse.ArgumentParser(
        description="Turn a vocabulary list into picture flashcards with example sentences"
    )
    parser.add_argument(
        "input",
        type=str,
        help="Vocabulary file (.yml, .yaml, .json, .csv or .txt)",
    )
    parser.add_argument(
        "--type",
        dest="filetype",
        choices=["yaml", "json", "csv", "text"],
        help="Input file type (default: from the extension)",
    )
    parser.add_argument(
        "--config",
        type=str,
        help=f"Path to a {CONFIG_FILENAME} file",
    )
    parser.add_argument(
        "--out",
        type=str,
        help="Output directory (default: output_dir from config, relative to the input file)",
    )
    parser.add_argument(
        "--pool-size",
        type=int,
        help="Image candidates fetched per word",
    )
    parser.add_argument(
        "--rows",
        type=int,
        help="Card rows per printed page",
    )
    parser.add_argument(
        "--columns",
        type=int,
        help="Card columns per printed page",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed for picking among image candidates",
    )
    parser.add_argument(
        "--deadline",
        type=float,
        help="Give up on words still running after this many seconds",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args(argv)

    _load_env_file()

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"[error] Input file does not exist: {input_path}", file=sys.stderr)
        return 2

    config_path = Path(args.config) if args.config else None
    if config_path is not None and not config_path.exists():
        print(f"[error] Config file does not exist: {config_path}", file=sys.stderr)
        return 2

    try:
        config = load_config(
            config_path,
            image_pool_size=args.pool_size,
            rows=args.rows,
            columns=args.columns,
            seed=args.seed,
            run_deadline=args.deadline,
        )
    except ValueError as e:
        print(f"[error] Invalid configuration: {e}", file=sys.stderr)
        return 2
    log_debug(args.debug, f"config: {config}")

    out_dir = Path(args.out).resolve() if args.out else get_output_dir(input_path.parent, config)

    if args.verbose:
        setup_thread_prefixed_stdout()
        print(f"\n{'=' * 60}")
        print("🚀 Visual Vocabulary: Load + Enrich + Render")
        print(f"{'=' * 60}")
        print(f"📂 Input: {input_path}")
        print(f"📁 Output folder: {out_dir}")

    try:
        cards = LoadStage(input_path, args.filetype, verbose=args.verbose).run(None)
    except (OSError, ValueError) as e:
        print(f"[error] Could not load {input_path}: {e}", file=sys.stderr)
        return 2
    if not cards:
        print(f"[error] No flashcards found in {input_path}", file=sys.stderr)
        return 2

    try:
        results = VisualVocabStage(config, verbose=args.verbose).run(cards)
    except ModelLoadError as e:
        print(f"[error] {e}", file=sys.stderr)
        return 1

    written = RenderStage(out_dir, config.rows, config.columns, verbose=args.verbose).run(results)

    if args.verbose:
        print(f"\n{'=' * 60}")
        print("✅ Complete!")
        print(f"   Words processed: {len(results)}")
        print(f"   Cards generated: {written}")
        print(f"{'=' * 60}\n")
    elif written < len(results):
        print(f"[warn] {len(results) - written} of {len(results)} words could not be enriched", file=sys.stderr)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
