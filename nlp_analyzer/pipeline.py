from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Protocol, Sequence

from nltk import Tree

from nlp_analyzer.types import AnnotatedDocument, AnnotatedSentence, DependencyEdge, TaggedToken

LOGGER = logging.getLogger(__name__)

ALL_ANNOTATORS = ("tokenize", "ssplit", "pos", "parse", "depparse")
ROOT_WORD = "ROOT"

_ACTION_ANNOTATORS = {
    "POS": ("tokenize", "ssplit", "pos"),
    "CONSTITUENCY": ("tokenize", "ssplit", "pos", "parse"),
    "DEPENDENCY": ("tokenize", "ssplit", "pos", "depparse"),
}

_STANZA_PROCESSORS = {
    "tokenize": ("tokenize",),
    "ssplit": ("tokenize",),
    "pos": ("pos",),
    "parse": ("constituency",),
    "depparse": ("lemma", "depparse"),
}


class Annotator(Protocol):
    def annotate(self, text: str) -> AnnotatedDocument:
        ...


@dataclass(frozen=True)
class PipelineOptions:
    """Configuration for the annotation backend."""

    backend: str = "stanza"  # "stanza" or "spacy"
    language: str = "en"
    spacy_model: str = "en_core_web_sm"
    annotators: tuple[str, ...] = ALL_ANNOTATORS


def annotators_for_action(action: str) -> tuple[str, ...]:
    """Annotators needed to render ``action``; unknown actions get all of them."""

    return _ACTION_ANNOTATORS.get(action.upper(), ALL_ANNOTATORS)


def _validate_annotators(annotators: Sequence[str]) -> None:
    unknown = [name for name in annotators if name not in ALL_ANNOTATORS]
    if unknown:
        raise ValueError(
            f"Unknown annotator(s) {', '.join(repr(name) for name in unknown)}. "
            f"Expected any of {', '.join(ALL_ANNOTATORS)}."
        )


def stanza_processors(annotators: Iterable[str]) -> str:
    """Translate annotator names into a stanza ``processors`` string."""

    processors: List[str] = []
    for name in annotators:
        for processor in _STANZA_PROCESSORS[name]:
            if processor not in processors:
                processors.append(processor)
    return ",".join(processors)


def _stanza_sentence(sentence: Any) -> AnnotatedSentence:
    words = list(sentence.words)
    tokens: List[TaggedToken] = [{"word": word.text, "tag": word.xpos or ""} for word in words]

    dependencies: List[DependencyEdge] = []
    for word in words:
        if word.deprel is None or word.head is None:
            continue
        head = int(word.head)
        dependencies.append(
            {
                "relation": "root" if head == 0 else word.deprel,
                "head": head,
                "head_word": ROOT_WORD if head == 0 else words[head - 1].text,
                "dependent": int(word.id),
                "dependent_word": word.text,
            }
        )

    constituency = getattr(sentence, "constituency", None)
    return {
        "tokens": tokens,
        "constituency": Tree.fromstring(str(constituency)) if constituency is not None else None,
        "dependencies": dependencies,
    }


def _spacy_sentence(sentence: Any, *, with_dependencies: bool) -> AnnotatedSentence:
    kept = [token for token in sentence if not token.is_space]
    # 1-based positions over non-space tokens, keyed by document index
    positions = {token.i: position for position, token in enumerate(kept, start=1)}
    tokens: List[TaggedToken] = [{"word": token.text, "tag": token.tag_} for token in kept]

    dependencies: List[DependencyEdge] = []
    for token in kept if with_dependencies else []:
        is_root = token.head.i == token.i
        if not is_root and token.head.i not in positions:
            LOGGER.debug("Skipping '%s' edge to whitespace head of '%s'", token.dep_, token.text)
            continue
        dependencies.append(
            {
                "relation": "root" if is_root else token.dep_,
                "head": 0 if is_root else positions[token.head.i],
                "head_word": ROOT_WORD if is_root else token.head.text,
                "dependent": positions[token.i],
                "dependent_word": token.text,
            }
        )

    return {"tokens": tokens, "constituency": None, "dependencies": dependencies}


def _load_stanza_pipeline(language: str, processors: str) -> Any:
    try:
        import stanza
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError("stanza is not installed. Install it to use the stanza pipeline.") from exc

    try:
        return stanza.Pipeline(lang=language, processors=processors, logging_level="WARN")
    except OSError as exc:  # pragma: no cover - model download failure
        raise RuntimeError(
            f"stanza models for '{language}' are not available. "
            f"Run 'python -c \"import stanza; stanza.download('{language}')\"'."
        ) from exc


def _load_spacy_model(model_name: str) -> Any:
    try:
        import spacy
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError("spaCy is not installed. Install it to use the spaCy pipeline.") from exc

    try:
        return spacy.load(model_name)
    except OSError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError(
            f"spaCy model '{model_name}' is not installed. Run 'python -m spacy download {model_name}'."
        ) from exc


class StanzaAnnotator:
    """Runs a stanza pipeline and converts its sentences."""

    def __init__(self, options: PipelineOptions) -> None:
        processors = stanza_processors(options.annotators)
        LOGGER.info("Loading stanza pipeline (lang=%s, processors=%s)", options.language, processors)
        self._nlp = _load_stanza_pipeline(options.language, processors)

    def annotate(self, text: str) -> AnnotatedDocument:
        doc = self._nlp(text)
        sentences = [_stanza_sentence(sentence) for sentence in doc.sentences]
        LOGGER.debug("Annotated %d sentences with stanza", len(sentences))
        return {"text": text, "sentences": sentences}


class SpacyAnnotator:
    """Runs a spaCy model; it provides tags and dependencies but no constituency trees."""

    def __init__(self, options: PipelineOptions) -> None:
        if "parse" in options.annotators:
            raise RuntimeError("The spaCy pipeline does not provide constituency parses. Use the stanza pipeline.")
        self._with_dependencies = "depparse" in options.annotators
        LOGGER.info("Loading spaCy model '%s'", options.spacy_model)
        self._nlp = _load_spacy_model(options.spacy_model)

    def annotate(self, text: str) -> AnnotatedDocument:
        doc = self._nlp(text)
        sentences = [
            _spacy_sentence(sentence, with_dependencies=self._with_dependencies)
            for sentence in doc.sents
        ]
        LOGGER.debug("Annotated %d sentences with spaCy", len(sentences))
        return {"text": text, "sentences": [sentence for sentence in sentences if sentence["tokens"]]}


def build_annotator(options: PipelineOptions | None = None) -> Annotator:
    pipeline_options = options or PipelineOptions()
    _validate_annotators(pipeline_options.annotators)
    if pipeline_options.backend == "stanza":
        return StanzaAnnotator(pipeline_options)
    if pipeline_options.backend == "spacy":
        return SpacyAnnotator(pipeline_options)
    raise ValueError(f"Unknown pipeline '{pipeline_options.backend}'. Expected 'stanza' or 'spacy'.")
