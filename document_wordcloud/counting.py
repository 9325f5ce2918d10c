from __future__ import annotations

import json
import logging
import re
from collections import Counter
from pathlib import Path
from typing import AbstractSet, Iterable, List, Set

from document_wordcloud.cleaning import (
    DEFAULT_EXCLUSIONS,
    CleaningOptions,
    flatten_document,
    load_document,
    tokenize_words,
)
from document_wordcloud.types import TokenCount, WordCount

LOGGER = logging.getLogger(__name__)

NUMERIC_PATTERN = re.compile(r"^[0-9]")


def _ordered(counts: Iterable[tuple[str, int]]) -> TokenCount:
    # Count descending, ties by word so the order never depends on input order.
    return dict(sorted(counts, key=lambda item: (-item[1], item[0])))


def count_tokens(tokens: Iterable[str]) -> TokenCount:
    """Count occurrences of each token, most frequent first."""

    counts = _ordered(Counter(tokens).items())
    LOGGER.info("Counted %d distinct tokens", len(counts))
    return counts


def _subtract(counts: TokenCount, removed: AbstractSet[str]) -> TokenCount:
    return {word: count for word, count in counts.items() if word not in removed}


def remove_stop_words(counts: TokenCount, stop_words: AbstractSet[str]) -> TokenCount:
    filtered = _subtract(counts, stop_words)
    LOGGER.info("Removed %d stop words", len(counts) - len(filtered))
    return filtered


def numeric_tokens(counts: TokenCount) -> Set[str]:
    """Return the tokens that begin with an ASCII digit."""

    return {word for word in counts if NUMERIC_PATTERN.match(word)}


def remove_numeric_tokens(counts: TokenCount) -> TokenCount:
    filtered = _subtract(counts, numeric_tokens(counts))
    LOGGER.info("Removed %d numeric tokens", len(counts) - len(filtered))
    return filtered


def remove_excluded_words(
    counts: TokenCount, exclusions: AbstractSet[str] = DEFAULT_EXCLUSIONS
) -> TokenCount:
    filtered = _subtract(counts, exclusions)
    LOGGER.info("Removed %d manually excluded words", len(counts) - len(filtered))
    return filtered


def apply_filter_chain(
    counts: TokenCount,
    stop_words: AbstractSet[str],
    exclusions: AbstractSet[str] = DEFAULT_EXCLUSIONS,
) -> TokenCount:
    """Drop stop words, then numeric tokens, then manual exclusions.

    Surviving counts and their order are left untouched, so running the
    chain on its own output returns the same mapping.
    """

    without_stop_words = remove_stop_words(counts, stop_words)
    without_numbers = remove_numeric_tokens(without_stop_words)
    return remove_excluded_words(without_numbers, exclusions)


def count_document(
    input_path: Path,
    stop_words: AbstractSet[str],
    *,
    options: CleaningOptions | None = None,
) -> TokenCount:
    """Load, tokenize, count and filter a single text file."""

    cleaning_options = options or CleaningOptions()
    stream = flatten_document(load_document(input_path))
    LOGGER.info("Flattened document into %d words", len(stream))
    if not stream:
        LOGGER.warning("Input %s contains no words", input_path)

    tokens = tokenize_words(stream, cleaning_options)
    counts = count_tokens(tokens)
    cleaned = apply_filter_chain(counts, stop_words, cleaning_options.exclusions)
    LOGGER.info("Kept %d of %d distinct tokens", len(cleaned), len(counts))
    return cleaned


def to_records(counts: TokenCount) -> List[WordCount]:
    return [{"word": word, "count": count} for word, count in counts.items()]


def save_counts(counts: TokenCount, output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    LOGGER.info("Writing %d word counts to %s", len(counts), output_path)
    with output_path.open("w", encoding="utf-8") as outfile:
        json.dump(to_records(counts), outfile, ensure_ascii=False, indent=2)
    return output_path


def load_counts(data_path: Path) -> TokenCount:
    if not data_path.exists():
        raise FileNotFoundError(f"Counts file does not exist: {data_path}")
    LOGGER.info("Loading word counts from %s", data_path)
    with data_path.open("r", encoding="utf-8") as infile:
        records = json.load(infile)

    if not isinstance(records, list):
        raise ValueError(f"Counts file must contain a list of word records: {data_path}")

    counts: TokenCount = {}
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise ValueError(f"Record {index} in {data_path} is not an object")
        word = record.get("word")
        count = record.get("count")
        if not isinstance(word, str):
            raise ValueError(f"Record {index} in {data_path} has no string 'word'")
        # bool is an int subclass and is not a valid count.
        if not isinstance(count, int) or isinstance(count, bool) or count < 0:
            raise ValueError(f"Record {index} in {data_path} needs a non-negative integer 'count'")
        if word in counts:
            raise ValueError(f"Word '{word}' appears more than once in {data_path}")
        counts[word] = count
    return _ordered(counts.items())
