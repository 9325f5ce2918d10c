from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from . import count_document, load_counts, render_report, save_counts
from .cleaning import DEFAULT_EXCLUSIONS, CleaningOptions, env_path, load_stop_words
from .rendering import RenderOptions, env_int, env_palette
from .types import TokenCount

logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
LOGGER = logging.getLogger(__name__)


def _add_count_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--input-file",
        type=Path,
        default=env_path("INPUT_TEXT", "data/document.txt"),
        help="UTF-8 text file to analyse (default: %(default)s or INPUT_TEXT)",
    )
    parser.add_argument(
        "--stop-words",
        type=Path,
        default=os.getenv("STOP_WORDS_PATH"),
        help="Optional stop-word file to merge with defaults (or override if --no-default-stopwords)",
    )
    parser.add_argument(
        "--extra-stopword",
        action="append",
        default=[],
        help="Additional stop words (can be repeated)",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        help="Additional words to drop after stop-word and number removal (can be repeated)",
    )
    parser.add_argument(
        "--pipeline",
        choices=["nltk", "spacy"],
        default=os.getenv("TOKEN_PIPELINE", "nltk"),
        help="Tokenization pipeline to use (default: %(default)s or TOKEN_PIPELINE)",
    )
    parser.add_argument(
        "--spacy-model",
        default=os.getenv("SPACY_MODEL", "en_core_web_sm"),
        help="spaCy model to load when using the spaCy pipeline (default: %(default)s or SPACY_MODEL)",
    )
    parser.add_argument(
        "--no-lowercase",
        action="store_false",
        dest="lowercase",
        help="Disable lowercasing during tokenization",
    )
    parser.add_argument(
        "--no-default-stopwords",
        action="store_false",
        dest="include_default_stopwords",
        help="Do not use NLTK's default English stopword list",
    )


def _add_render_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=env_path("REPORT_OUTPUT_DIR", "report"),
        help="Directory for the word cloud and table (default: %(default)s or REPORT_OUTPUT_DIR)",
    )
    parser.add_argument(
        "--max-words",
        type=int,
        default=env_int("MAX_WORDS", 50),
        help="Maximum number of words in the cloud (default: %(default)s or MAX_WORDS)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=env_int("CLOUD_WIDTH", 800),
        help="Word cloud width in pixels (default: %(default)s or CLOUD_WIDTH)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=env_int("CLOUD_HEIGHT", 400),
        help="Word cloud height in pixels (default: %(default)s or CLOUD_HEIGHT)",
    )
    parser.add_argument(
        "--palette",
        type=lambda value: tuple(color.strip() for color in value.split(",") if color.strip()),
        default=env_palette("CLOUD_PALETTE"),
        help="Comma-separated colors cycled across words (default: CLOUD_PALETTE or a built-in palette)",
    )
    parser.add_argument(
        "--background-color",
        default=os.getenv("CLOUD_BACKGROUND", "white"),
        help="Word cloud background color (default: %(default)s or CLOUD_BACKGROUND)",
    )
    parser.add_argument(
        "--random-state",
        type=int,
        default=env_int("CLOUD_RANDOM_STATE", 42),
        help="Seed for the word cloud layout (default: %(default)s or CLOUD_RANDOM_STATE)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Word frequency and word cloud utilities")
    subparsers = parser.add_subparsers(dest="command", required=True)

    count_parser = subparsers.add_parser("count", help="Count and filter words, writing JSON output")
    _add_count_arguments(count_parser)
    count_parser.add_argument(
        "--output",
        type=Path,
        default=env_path("COUNTS_JSON", "word_counts.json"),
        help="Destination for the cleaned counts (default: %(default)s or COUNTS_JSON)",
    )

    render_parser = subparsers.add_parser("render", help="Render a word cloud and table from counts JSON")
    render_parser.add_argument(
        "--counts-file",
        type=Path,
        default=env_path("COUNTS_JSON", "word_counts.json"),
        help="Cleaned counts produced by 'count' (default: %(default)s or COUNTS_JSON)",
    )
    _add_render_arguments(render_parser)

    report_parser = subparsers.add_parser("report", help="Count words and render the report in one run")
    _add_count_arguments(report_parser)
    _add_render_arguments(report_parser)

    return parser


def _cleaning_options(args: argparse.Namespace) -> CleaningOptions:
    return CleaningOptions(
        lowercase=args.lowercase,
        pipeline=args.pipeline,
        spacy_model=args.spacy_model,
        include_default_stopwords=args.include_default_stopwords,
        exclusions=DEFAULT_EXCLUSIONS | frozenset(args.exclude),
    )


def _render_options(args: argparse.Namespace) -> RenderOptions:
    return RenderOptions(
        max_words=args.max_words,
        palette=args.palette,
        width=args.width,
        height=args.height,
        background_color=args.background_color,
        random_state=args.random_state,
    )


def _count(args: argparse.Namespace) -> TokenCount:
    options = _cleaning_options(args)
    stop_words = load_stop_words(
        args.stop_words,
        include_default=options.include_default_stopwords,
        extra_stopwords=args.extra_stopword,
        lowercase=options.lowercase,
    )
    return count_document(args.input_file, stop_words, options=options)


def run(args: argparse.Namespace) -> None:
    if args.command == "count":
        save_counts(_count(args), args.output)
    elif args.command == "render":
        render_report(load_counts(args.counts_file), args.output_dir, _render_options(args))
    elif args.command == "report":
        paths = render_report(_count(args), args.output_dir, _render_options(args))
        for name, path in sorted(paths.items()):
            LOGGER.info("Saved %s: %s", name, path)


def main(argv: list[str] | None = None) -> None:
    try:
        # Environment-backed defaults are parsed while the parser is built.
        args = build_parser().parse_args(argv)
        run(args)
    except (OSError, LookupError, ValueError, RuntimeError) as exc:
        LOGGER.error("%s", exc)
        raise SystemExit(1) from exc


def count_cli() -> None:
    argv = sys.argv[1:]
    main(["count", *argv])


def render_cli() -> None:
    argv = sys.argv[1:]
    main(["render", *argv])


if __name__ == "__main__":
    main()
