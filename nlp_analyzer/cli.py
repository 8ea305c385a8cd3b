from __future__ import annotations

import argparse
import logging
import os
import sys

from .cleaning import (
    GUTENBERG_END_MARKER,
    GUTENBERG_START_MARKER,
    CleaningOptions,
    env_int,
    env_str,
    prepare_sample,
)
from .fetching import FetchError, fetch_text
from .formatting import ACTIONS, InvalidActionError, format_document
from .pipeline import ALL_ANNOTATORS, Annotator, PipelineOptions, annotators_for_action, build_annotator

logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
LOGGER = logging.getLogger(__name__)

EXAMPLE_URL = "https://www.gutenberg.org/files/1661/1661-0.txt"


class UsageError(Exception):
    """Raised when the action or URL argument is missing."""


def _env_timeout() -> float | None:
    value = os.getenv("FETCH_TIMEOUT")
    return float(value) if value else None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nlp-analyzer",
        description="Fetch a text document and print NLP annotations for its opening lines",
    )
    parser.add_argument("action", nargs="?", help=f"Analysis to print: {', '.join(ACTIONS)} (case-insensitive)")
    parser.add_argument("url", nargs="?", help="URL of the plain-text document")
    parser.add_argument(
        "--lines",
        type=int,
        default=env_int("SAMPLE_LINES", 10),
        help="Number of cleaned lines to analyze (default: %(default)s or SAMPLE_LINES)",
    )
    parser.add_argument(
        "--pipeline",
        choices=["stanza", "spacy"],
        default=env_str("ANNOTATION_PIPELINE", "stanza"),
        help="Annotation pipeline to use (default: %(default)s or ANNOTATION_PIPELINE)",
    )
    parser.add_argument(
        "--language",
        default=env_str("PIPELINE_LANGUAGE", "en"),
        help="Language code for the stanza pipeline (default: %(default)s or PIPELINE_LANGUAGE)",
    )
    parser.add_argument(
        "--spacy-model",
        default=env_str("SPACY_MODEL", "en_core_web_sm"),
        help="spaCy model to load when using the spaCy pipeline (default: %(default)s or SPACY_MODEL)",
    )
    parser.add_argument(
        "--start-marker",
        default=env_str("START_MARKER", GUTENBERG_START_MARKER),
        help="Line marker that precedes the document body (default: Project Gutenberg marker or START_MARKER)",
    )
    parser.add_argument(
        "--end-marker",
        default=env_str("END_MARKER", GUTENBERG_END_MARKER),
        help="Marker that follows the document body (default: Project Gutenberg marker or END_MARKER)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=_env_timeout(),
        help="Network timeout in seconds (default: no timeout or FETCH_TIMEOUT)",
    )
    parser.add_argument(
        "--all-annotators",
        action="store_true",
        help="Enable every annotator instead of only those the action needs",
    )
    return parser


def check_arguments(args: argparse.Namespace) -> None:
    if not args.action or not args.url:
        raise UsageError("Both ACTION and URL are required")


def print_usage(parser: argparse.ArgumentParser) -> None:
    parser.print_usage(sys.stderr)
    print(f"Example: {parser.prog} POS {EXAMPLE_URL}", file=sys.stderr)
    print(f"Actions: {', '.join(ACTIONS)}", file=sys.stderr)


def process_url(
    action: str,
    url: str,
    annotator: Annotator,
    *,
    cleaning_options: CleaningOptions | None = None,
    timeout: float | None = None,
) -> bool:
    """Fetch, clean, annotate and print one document.

    Fetch failures and unknown actions are logged and reported as ``False``;
    neither is raised to the caller.
    """

    print(f"\n--- Task: {action} | URL: {url} ---")
    try:
        raw_text = fetch_text(url, timeout=timeout)
    except FetchError as exc:
        LOGGER.error("Failed to process URL %s: %s", url, exc.message)
        return False

    sample_text = prepare_sample(raw_text, cleaning_options)
    print(f'Analyzing sample text:\n"{sample_text}"\n...')

    document = annotator.annotate(sample_text)

    try:
        output = format_document(document, action)
    except InvalidActionError as exc:
        LOGGER.error("Unknown action: %s", exc.action)
        return False

    print(output)
    return True


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args, extra = parser.parse_known_args(argv)
    if extra:
        LOGGER.debug("Ignoring extra arguments: %s", " ".join(extra))

    try:
        check_arguments(args)
    except UsageError as exc:
        LOGGER.debug("%s", exc)
        print_usage(parser)
        return

    action = args.action.upper()
    annotators = ALL_ANNOTATORS if args.all_annotators else annotators_for_action(action)
    if args.pipeline == "spacy" and action != "CONSTITUENCY":
        # spaCy has no constituency parser; only the CONSTITUENCY action needs one
        annotators = tuple(name for name in annotators if name != "parse")

    LOGGER.info("Initializing %s pipeline (this may take a minute)...", args.pipeline)
    try:
        annotator = build_annotator(
            PipelineOptions(
                backend=args.pipeline,
                language=args.language,
                spacy_model=args.spacy_model,
                annotators=annotators,
            )
        )
    except (RuntimeError, ValueError) as exc:
        LOGGER.error("Failed to initialize %s pipeline: %s", args.pipeline, exc)
        return
    LOGGER.info("Pipeline initialized.")

    process_url(
        action,
        args.url,
        annotator,
        cleaning_options=CleaningOptions(
            start_marker=args.start_marker,
            end_marker=args.end_marker,
            sample_lines=args.lines,
        ),
        timeout=args.timeout,
    )


def analyze_cli() -> None:
    main(sys.argv[1:])


if __name__ == "__main__":
    main()
