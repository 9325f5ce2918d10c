"""Utilities for counting words in a document and rendering word clouds."""

from .cleaning import CleaningOptions, flatten_document, load_document, load_stop_words, tokenize_words
from .counting import apply_filter_chain, count_document, count_tokens, load_counts, save_counts
from .rendering import RenderOptions, build_table, render_report, render_wordcloud
from .types import TokenCount, WordCount

__all__ = [
    "load_document",
    "flatten_document",
    "tokenize_words",
    "load_stop_words",
    "count_tokens",
    "apply_filter_chain",
    "count_document",
    "save_counts",
    "load_counts",
    "render_wordcloud",
    "build_table",
    "render_report",
    "CleaningOptions",
    "RenderOptions",
    "TokenCount",
    "WordCount",
]
