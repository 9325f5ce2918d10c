"""Compatibility wrapper for rendering a word cloud from counted words.

Use the packaged CLI instead:
    python -m document_wordcloud.cli render
or install the package and run `document-wordcloud render`.
"""

from document_wordcloud.cli import render_cli


if __name__ == "__main__":
    render_cli()
