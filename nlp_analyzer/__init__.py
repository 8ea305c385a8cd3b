"""Utilities for fetching text documents and printing NLP annotations."""

from .cleaning import CleaningOptions, first_n_lines, prepare_sample, strip_boilerplate
from .fetching import FetchError, fetch_text
from .formatting import InvalidActionError, format_document
from .pipeline import Annotator, PipelineOptions, build_annotator
from .types import AnnotatedDocument

__all__ = [
    "fetch_text",
    "FetchError",
    "strip_boilerplate",
    "first_n_lines",
    "prepare_sample",
    "CleaningOptions",
    "build_annotator",
    "Annotator",
    "PipelineOptions",
    "format_document",
    "InvalidActionError",
    "AnnotatedDocument",
]
