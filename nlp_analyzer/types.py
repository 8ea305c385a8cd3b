from __future__ import annotations

from typing import TypedDict

from nltk import Tree


class TaggedToken(TypedDict):
    word: str
    tag: str


class DependencyEdge(TypedDict):
    """Grammatical relation between two 1-based token positions; 0 is the root."""

    relation: str
    head: int
    head_word: str
    dependent: int
    dependent_word: str


class AnnotatedSentence(TypedDict):
    tokens: list[TaggedToken]
    constituency: Tree | None
    dependencies: list[DependencyEdge]


class AnnotatedDocument(TypedDict):
    """Structured output of an annotation pipeline run."""

    text: str
    sentences: list[AnnotatedSentence]
