from __future__ import annotations

import logging
import sys
from typing import Callable, Dict, List

from nlp_analyzer.types import AnnotatedDocument, DependencyEdge

LOGGER = logging.getLogger(__name__)

ACTIONS = ("POS", "CONSTITUENCY", "DEPENDENCY")
SENTENCE_END_MARKER = "  --- (end of sentence) ---"
MISSING_TREE = "(no constituency parse)"


class InvalidActionError(ValueError):
    def __init__(self, action: str) -> None:
        super().__init__(f"Unknown action: {action}")
        self.action = action


def format_pos_tags(document: AnnotatedDocument) -> str:
    lines: List[str] = ["[Part-of-Speech (POS) Tags]"]
    for sentence in document["sentences"]:
        for token in sentence["tokens"]:
            lines.append(f"  {token['word']} [{token['tag']}]")
        lines.append(SENTENCE_END_MARKER)
    return "\n".join(lines)


def format_constituency_trees(document: AnnotatedDocument) -> str:
    """Render each sentence's tree in its one-line bracketed form, e.g. ``(ROOT (S ...))``."""

    lines: List[str] = ["[Constituency Parse Trees]"]
    for sentence in document["sentences"]:
        tree = sentence["constituency"]
        if tree is None:
            lines.append(MISSING_TREE)
            continue
        lines.append(tree.pformat(margin=sys.maxsize))
    return "\n".join(lines)


def format_dependency_edge(edge: DependencyEdge) -> str:
    return (
        f"{edge['relation']}({edge['head_word']}-{edge['head']}, "
        f"{edge['dependent_word']}-{edge['dependent']})"
    )


def format_dependency_graphs(document: AnnotatedDocument) -> str:
    lines: List[str] = ["[Dependency Parse Graphs]"]
    for sentence in document["sentences"]:
        for edge in sorted(sentence["dependencies"], key=lambda item: item["dependent"]):
            lines.append(format_dependency_edge(edge))
        lines.append("")
    return "\n".join(lines)


FORMATTERS: Dict[str, Callable[[AnnotatedDocument], str]] = {
    "POS": format_pos_tags,
    "CONSTITUENCY": format_constituency_trees,
    "DEPENDENCY": format_dependency_graphs,
}


def format_document(document: AnnotatedDocument, action: str) -> str:
    formatter = FORMATTERS.get(action.upper())
    if formatter is None:
        raise InvalidActionError(action)
    LOGGER.debug("Formatting %d sentences as %s", len(document["sentences"]), action.upper())
    return formatter(document)
