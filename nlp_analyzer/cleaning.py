from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass

LOGGER = logging.getLogger(__name__)

GUTENBERG_START_MARKER = "*** START OF THIS PROJECT GUTENBERG EBOOK"
GUTENBERG_END_MARKER = "*** END OF THIS PROJECT GUTENBERG EBOOK"
LINE_BREAK = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True)
class CleaningOptions:
    """Configuration for boilerplate removal and sampling."""

    start_marker: str = GUTENBERG_START_MARKER
    end_marker: str = GUTENBERG_END_MARKER
    sample_lines: int = 10


def env_str(var_name: str, default: str) -> str:
    return os.getenv(var_name, default)


def env_int(var_name: str, default: int) -> int:
    return int(os.getenv(var_name, str(default)))


def strip_boilerplate(raw_text: str, options: CleaningOptions | None = None) -> str:
    """Return the text between the publisher's start and end marker lines.

    Content begins on the line after the start marker and stops right before
    the end marker. A missing marker falls back to the start or end of the
    text on that side.
    """

    cleaning_options = options or CleaningOptions()

    start_index = raw_text.find(cleaning_options.start_marker)
    if start_index != -1:
        start_index = raw_text.find("\n", start_index)
    if start_index == -1:
        LOGGER.debug("Start marker not found; using start of text")
        start_index = 0

    end_index = raw_text.find(cleaning_options.end_marker)
    if end_index == -1:
        LOGGER.debug("End marker not found; using end of text")
        end_index = len(raw_text)

    return raw_text[start_index:end_index].strip()


def split_lines(text: str) -> list[str]:
    """Split on \\n, \\r and \\r\\n only; a trailing line break does not start a new line."""

    lines = LINE_BREAK.split(text)
    if lines[-1] == "":
        lines.pop()
    return lines


def first_n_lines(text: str, n: int) -> str:
    return "\n".join(split_lines(text)[: max(n, 0)])


def prepare_sample(raw_text: str, options: CleaningOptions | None = None) -> str:
    """Strip boilerplate and keep the configured number of leading lines."""

    cleaning_options = options or CleaningOptions()
    cleaned = strip_boilerplate(raw_text, cleaning_options)
    sample = first_n_lines(cleaned, cleaning_options.sample_lines)
    LOGGER.debug(
        "Sampled %d of %d cleaned characters (%d lines max)",
        len(sample),
        len(cleaned),
        cleaning_options.sample_lines,
    )
    return sample
