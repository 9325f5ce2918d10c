from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from itertools import chain
from pathlib import Path
from typing import Any, Callable, FrozenSet, Iterable, List, Sequence, Set

from nltk import word_tokenize
from nltk.corpus import stopwords

from document_wordcloud.types import RawDocument, WordStream

LOGGER = logging.getLogger(__name__)

DEFAULT_EXCLUSIONS: FrozenSet[str] = frozenset({"al", "figure", "i.e"})


class InputEncodingError(ValueError):
    """Raised when the input document is not valid UTF-8."""


@dataclass(frozen=True)
class CleaningOptions:
    """Configuration for tokenizing and filtering a document."""

    lowercase: bool = True
    pipeline: str = "nltk"  # "nltk" or "spacy"
    spacy_model: str = "en_core_web_sm"
    include_default_stopwords: bool = True
    exclusions: FrozenSet[str] = field(default=DEFAULT_EXCLUSIONS)


def env_path(var_name: str, default: str) -> Path:
    return Path(os.getenv(var_name, default))


def _ensure_file_exists(path: Path, description: str) -> None:
    if not path.exists():
        raise FileNotFoundError(f"{description} does not exist: {path}")
    if not path.is_file():
        raise ValueError(f"{description} is not a file: {path}")


def load_document(path: Path) -> RawDocument:
    """Read a UTF-8 text file into rows of whitespace-separated fields.

    Rows keep whatever number of fields the line has, so ragged input is
    fine. Blank lines become empty rows.
    """

    _ensure_file_exists(path, "Input text file")
    LOGGER.info("Loading document from %s", path)
    try:
        with path.open("r", encoding="utf-8-sig") as infile:
            rows = [line.split() for line in infile]
    except UnicodeDecodeError as exc:
        raise InputEncodingError(f"Input text file is not valid UTF-8: {path}") from exc
    LOGGER.debug("Loaded %d rows", len(rows))
    return rows


def flatten_document(document: Iterable[Sequence[str]]) -> WordStream:
    """Concatenate every non-empty field of every row, in reading order."""

    return [value for value in chain.from_iterable(document) if value]


def load_stop_words(
    stop_words_path: Path | None,
    *,
    include_default: bool = True,
    extra_stopwords: Sequence[str] | None = None,
    lowercase: bool = True,
) -> Set[str]:
    """Compose a stop word list using optional defaults, file, and extras."""

    compiled: Set[str] = set()

    if include_default:
        compiled.update(stopwords.words("english"))

    if stop_words_path:
        _ensure_file_exists(stop_words_path, "Stop word file")
        LOGGER.debug("Loading stop words from %s", stop_words_path)
        with stop_words_path.open("r", encoding="utf-8") as infile:
            compiled.update(line.strip() for line in infile if line.strip())

    if extra_stopwords:
        compiled.update(extra_stopwords)

    if lowercase:
        compiled = {word.lower() for word in compiled}

    LOGGER.info("Using %d stop words", len(compiled))
    return compiled


def _is_word(token: str) -> bool:
    return any(char.isalnum() for char in token)


def _nltk_tokenizer(options: CleaningOptions) -> Callable[[str], List[str]]:
    def tokenizer(text: str) -> List[str]:
        normalized = text.lower() if options.lowercase else text
        # Each field is tokenized on its own, so sentence splitting is not needed.
        tokens = word_tokenize(normalized, preserve_line=True)
        return [token for token in tokens if _is_word(token)]

    return tokenizer


def _load_spacy_model(model_name: str) -> Any:
    try:
        import spacy
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError("spaCy is not installed. Install it to use the spaCy pipeline.") from exc

    try:
        return spacy.load(model_name)
    except OSError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError(
            f"spaCy model '{model_name}' is not installed. Run 'python -m spacy download {model_name}'."
        ) from exc


def _spacy_tokenizer(options: CleaningOptions) -> Callable[[str], List[str]]:
    nlp = _load_spacy_model(options.spacy_model)

    def tokenizer(text: str) -> List[str]:
        tokens: List[str] = []
        for token in nlp.tokenizer(text):
            if token.is_space or token.is_punct:
                continue
            normalized = token.text.lower() if options.lowercase else token.text
            if _is_word(normalized):
                tokens.append(normalized)
        return tokens

    return tokenizer


def build_tokenizer(options: CleaningOptions) -> Callable[[str], List[str]]:
    if options.pipeline == "nltk":
        return _nltk_tokenizer(options)
    if options.pipeline == "spacy":
        return _spacy_tokenizer(options)
    raise ValueError(f"Unknown pipeline '{options.pipeline}'. Expected 'nltk' or 'spacy'.")


def tokenize_words(stream: Iterable[str], options: CleaningOptions | None = None) -> List[str]:
    """Split and normalize a word stream, keeping every occurrence."""

    tokenizer = build_tokenizer(options or CleaningOptions())
    tokens: List[str] = []
    for value in stream:
        tokens.extend(tokenizer(value))
    LOGGER.info("Tokenized %d tokens", len(tokens))
    return tokens
