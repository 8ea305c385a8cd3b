"""Compatibility wrapper for analyzing a document from a URL.

Use the packaged CLI instead:
    python -m nlp_analyzer.cli POS https://www.gutenberg.org/files/1661/1661-0.txt
or install the package and run `nlp-analyzer POS <URL>`.
"""

from nlp_analyzer.cli import analyze_cli


if __name__ == "__main__":
    analyze_cli()
