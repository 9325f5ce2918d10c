from __future__ import annotations

from typing import Dict, List, TypedDict

RawDocument = List[List[str]]
WordStream = List[str]
TokenCount = Dict[str, int]


class WordCount(TypedDict):
    """Single (word, count) record as persisted to JSON."""

    word: str
    count: int
