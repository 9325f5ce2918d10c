from __future__ import annotations

from pathlib import Path
from typing import Any

import document_wordcloud.rendering as rendering
import numpy as np
import pytest
from document_wordcloud.rendering import (
    RenderOptions,
    assign_colors,
    build_table,
    filter_table,
    render_report,
    render_wordcloud,
    select_top_words,
    sort_table,
    write_table,
)
from pytest import MonkeyPatch

COUNTS = {"water": 5, "well": 3, "aquifer": 3, "rose": 2, "dry": 2, "level": 1}


class FakeCloud:
    instances: list["FakeCloud"] = []

    def __init__(self, **kwargs: Any) -> None:
        self.kwargs = kwargs
        self.frequencies: dict[str, float] = {}
        FakeCloud.instances.append(self)

    def generate_from_frequencies(self, frequencies: dict[str, float]) -> "FakeCloud":
        self.frequencies = dict(frequencies)
        return self

    def to_array(self) -> np.ndarray:
        return np.zeros((self.kwargs["height"], self.kwargs["width"], 3), dtype=np.uint8)


def test_select_top_words_breaks_ties_alphabetically() -> None:
    assert select_top_words(COUNTS, 3) == {"water": 5, "aquifer": 3, "well": 3}


def test_select_top_words_requires_positive_limit() -> None:
    with pytest.raises(ValueError):
        select_top_words(COUNTS, 0)


def test_assign_colors_cycles_palette() -> None:
    colors = assign_colors(["water", "well", "rose"], ["#000", "#fff"])

    assert colors == {"water": "#000", "well": "#fff", "rose": "#000"}
    with pytest.raises(ValueError):
        assign_colors(["water"], [])


def test_render_wordcloud_limits_words(monkeypatch: MonkeyPatch, tmp_path: Path) -> None:
    FakeCloud.instances = []
    monkeypatch.setattr(rendering, "WordCloud", FakeCloud)
    options = RenderOptions(max_words=4, width=120, height=60, palette=("#111111", "#222222"))

    image = render_wordcloud(COUNTS, tmp_path / "cloud.png", options)

    cloud = FakeCloud.instances[-1]
    rendered = cloud.frequencies
    assert len(rendered) <= options.max_words
    excluded = [count for word, count in COUNTS.items() if word not in rendered]
    assert min(rendered.values()) >= max(excluded)
    assert cloud.kwargs["color_func"]("water") == "#111111"
    assert cloud.kwargs["color_func"]("aquifer") == "#222222"
    assert image.shape == (60, 120, 3)
    assert (tmp_path / "cloud.png").exists()


def test_render_wordcloud_draws_image(tmp_path: Path) -> None:
    options = RenderOptions(width=200, height=100)

    image = render_wordcloud(COUNTS, tmp_path / "cloud.png", options)

    assert image.shape == (100, 200, 3)
    assert (image != 255).any()
    assert (tmp_path / "cloud.png").stat().st_size > 0


def test_render_wordcloud_empty_counts(tmp_path: Path) -> None:
    image = render_wordcloud({}, tmp_path / "empty.png", RenderOptions(width=40, height=20))

    np.testing.assert_array_equal(image, np.full((20, 40, 3), 255, dtype=np.uint8))
    assert (tmp_path / "empty.png").exists()


def test_build_table_holds_every_pair() -> None:
    table = build_table(COUNTS)

    assert list(table.columns) == ["word", "count"]
    assert dict(zip(table["word"], table["count"])) == COUNTS
    assert len(table) == len(COUNTS)
    assert list(table["word"])[:3] == ["water", "aquifer", "well"]


def test_sort_and_filter_table() -> None:
    table = build_table(COUNTS)

    by_word = sort_table(table, by="word", ascending=True)
    assert list(by_word["word"]) == sorted(COUNTS)

    by_count = sort_table(table, by="count", ascending=True)
    assert list(by_count["count"]) == sorted(COUNTS.values())

    matches = filter_table(table, "WE")
    assert list(matches["word"]) == ["well"]
    assert len(filter_table(table, "")) == len(COUNTS)

    with pytest.raises(ValueError):
        sort_table(table, by="frequency")


def test_write_table_outputs_csv_and_html(tmp_path: Path) -> None:
    paths = write_table(build_table({"water": 2, "dry": 1}), tmp_path, basename="words")

    assert paths["csv"].read_text(encoding="utf-8").splitlines() == ["word,count", "water,2", "dry,1"]
    html = paths["html"].read_text(encoding="utf-8")
    assert "DataTable" in html
    assert '{"word": "water", "count": 2}' in html


def test_render_report_handles_empty_counts(tmp_path: Path) -> None:
    paths = render_report({}, tmp_path / "report", RenderOptions(width=40, height=20))

    assert paths["cloud"].exists()
    assert paths["csv"].read_text(encoding="utf-8").strip() == "word,count"
    assert "var data = [];" in paths["html"].read_text(encoding="utf-8")


def test_zero_counts_render_blank_cloud(tmp_path: Path) -> None:
    assert select_top_words({"water": 0, "well": 2}, 5) == {"well": 2}

    image = render_wordcloud({"water": 0}, tmp_path / "zero.png", RenderOptions(width=40, height=20))

    np.testing.assert_array_equal(image, np.full((20, 40, 3), 255, dtype=np.uint8))
    assert (tmp_path / "zero.png").exists()


def test_html_table_searches_words_only(tmp_path: Path) -> None:
    paths = write_table(build_table({"water": 2}), tmp_path)

    html = paths["html"].read_text(encoding="utf-8")
    assert "{data: 'word', title: 'word'}" in html
    assert "{data: 'count', title: 'count', searchable: false}" in html


def test_html_table_escapes_markup_in_words(tmp_path: Path) -> None:
    paths = write_table(build_table({"<!--water": 2, "</script>": 1}), tmp_path)

    html = paths["html"].read_text(encoding="utf-8")
    assert "<!--water" not in html
    assert "</script>\"" not in html
    assert '"\\u003c!--water"' in html
    assert '"\\u003c/script>"' in html
