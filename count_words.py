"""Compatibility wrapper for counting words in a text file.

Use the packaged CLI instead:
    python -m document_wordcloud.cli count
or install the package and run `document-wordcloud count`.
"""

from document_wordcloud.cli import count_cli


if __name__ == "__main__":
    count_cli()
