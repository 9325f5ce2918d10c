from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from itertools import cycle
from pathlib import Path
from typing import Any, Dict, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.colors import to_rgb
from numpy.typing import NDArray
from wordcloud import WordCloud

from document_wordcloud.types import TokenCount

LOGGER = logging.getLogger(__name__)
ImageArray = NDArray[np.uint8]

DEFAULT_PALETTE: Tuple[str, ...] = ("#1b9e77", "#d95f02", "#7570b3", "#e7298a", "#66a61e", "#e6ab02")
TABLE_COLUMNS = ["word", "count"]

TABLE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>TITLEHERE</title>
    <link rel="stylesheet" href="https://cdn.datatables.net/1.13.8/css/jquery.dataTables.min.css">
    <script src="https://code.jquery.com/jquery-3.7.1.min.js"></script>
    <script src="https://cdn.datatables.net/1.13.8/js/jquery.dataTables.min.js"></script>
    <style>body { font-family: sans-serif; margin: 20px; }</style>
</head>
<body>
    <h1>TITLEHERE</h1>
    <table id="words" class="display" style="width:100%"></table>
    <script>
        var data = DATAHERE;

        $(document).ready(function () {
            $('#words').DataTable({
                data: data,
                columns: [
                    {data: 'word', title: 'word'},
                    {data: 'count', title: 'count', searchable: false}
                ],
                order: [[1, 'desc']],
                pageLength: 25
            });
        });
    </script>
</body>
</html>"""


@dataclass(frozen=True)
class RenderOptions:
    """Configuration for the word cloud and table outputs."""

    max_words: int = 50
    palette: Tuple[str, ...] = DEFAULT_PALETTE
    width: int = 800
    height: int = 400
    background_color: str = "white"
    relative_scaling: float = 0.5
    random_state: int | None = 42
    cloud_filename: str = "wordcloud.png"
    table_basename: str = "word_counts"


def env_int(var_name: str, default: int) -> int:
    return int(os.getenv(var_name, str(default)))


def env_palette(var_name: str, default: Sequence[str] = DEFAULT_PALETTE) -> Tuple[str, ...]:
    raw = os.getenv(var_name)
    if not raw:
        return tuple(default)
    return tuple(color.strip() for color in raw.split(",") if color.strip())


def select_top_words(counts: TokenCount, max_words: int = 50) -> TokenCount:
    """Return the ``max_words`` most frequent words, ties broken alphabetically."""

    if max_words < 1:
        raise ValueError("max_words must be at least 1.")
    # Zero counts carry no size in the cloud.
    ranked = sorted(
        ((word, count) for word, count in counts.items() if count > 0),
        key=lambda item: (-item[1], item[0]),
    )
    return dict(ranked[:max_words])


def assign_colors(words: Sequence[str], palette: Sequence[str]) -> Dict[str, str]:
    """Cycle the palette over ``words`` in the order given."""

    if not palette:
        raise ValueError("palette must contain at least one color.")
    return {word: color for word, color in zip(words, cycle(palette))}


def _blank_image(options: RenderOptions) -> ImageArray:
    red, green, blue = to_rgb(options.background_color)
    fill = np.array([red, green, blue]) * 255
    image = np.empty((options.height, options.width, 3), dtype=np.uint8)
    image[:, :] = fill.round().astype(np.uint8)
    return image


def build_wordcloud(counts: TokenCount, options: RenderOptions) -> WordCloud | None:
    top_words = select_top_words(counts, options.max_words)
    if not top_words:
        return None

    colors = assign_colors(list(top_words), options.palette)

    def color_func(word: str, *args: Any, **kwargs: Any) -> str:
        return colors[word]

    LOGGER.info("Laying out word cloud with %d words", len(top_words))
    cloud = WordCloud(
        width=options.width,
        height=options.height,
        background_color=options.background_color,
        max_words=options.max_words,
        relative_scaling=options.relative_scaling,
        random_state=options.random_state,
        color_func=color_func,
    )
    return cloud.generate_from_frequencies(top_words)


def render_wordcloud(
    counts: TokenCount,
    output_path: Path,
    options: RenderOptions | None = None,
) -> ImageArray:
    """Write a word cloud image for the top words and return its pixels.

    Without any positive count this produces a blank image in the
    background color.
    """

    render_options = options or RenderOptions()
    cloud = build_wordcloud(counts, render_options)
    if cloud is None:
        LOGGER.warning("No words to render; writing an empty word cloud")
        image = _blank_image(render_options)
    else:
        image = np.asarray(cloud.to_array(), dtype=np.uint8)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    LOGGER.info("Writing word cloud to %s", output_path)
    plt.imsave(output_path, image)
    return image


def build_table(counts: TokenCount) -> pd.DataFrame:
    """One row per (word, count) pair, most frequent first."""

    table = pd.DataFrame(list(counts.items()), columns=TABLE_COLUMNS)
    return sort_table(table.astype({"word": str, "count": "int64"}))


def sort_table(table: pd.DataFrame, by: str = "count", ascending: bool = False) -> pd.DataFrame:
    if by not in TABLE_COLUMNS:
        raise ValueError(f"Unknown column '{by}'. Expected one of {TABLE_COLUMNS}.")
    other = "word" if by == "count" else "count"
    ordered = table.sort_values(by=[by, other], ascending=[ascending, True], kind="mergesort")
    return ordered.reset_index(drop=True)


def filter_table(table: pd.DataFrame, query: str) -> pd.DataFrame:
    """Keep rows whose word contains ``query``, ignoring case."""

    if not query:
        return table.reset_index(drop=True)
    mask = table["word"].str.contains(query, case=False, regex=False)
    return table[mask].reset_index(drop=True)


def write_table(table: pd.DataFrame, output_dir: Path, basename: str = "word_counts") -> Dict[str, Path]:
    output_dir.mkdir(parents=True, exist_ok=True)
    csv_path = output_dir / f"{basename}.csv"
    html_path = output_dir / f"{basename}.html"

    LOGGER.info("Writing word table to %s and %s", csv_path, html_path)
    table.to_csv(csv_path, index=False)

    records = [{"word": str(word), "count": int(count)} for word, count in table[TABLE_COLUMNS].itertuples(index=False)]
    data = json.dumps(records, ensure_ascii=False).replace("<", "\\u003c")
    html = TABLE_TEMPLATE.replace("TITLEHERE", "word frequencies").replace("DATAHERE", data)
    html_path.write_text(html, encoding="utf-8")

    return {"csv": csv_path, "html": html_path}


def render_report(
    counts: TokenCount,
    output_dir: Path,
    options: RenderOptions | None = None,
) -> Dict[str, Path]:
    """Render the word cloud and the full word table into ``output_dir``."""

    render_options = options or RenderOptions()
    cloud_path = output_dir / render_options.cloud_filename
    render_wordcloud(counts, cloud_path, render_options)
    paths = write_table(build_table(counts), output_dir, render_options.table_basename)
    paths["cloud"] = cloud_path
    return paths
