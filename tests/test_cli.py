from __future__ import annotations

import logging
from typing import Any

import pytest
from pytest import CaptureFixture, LogCaptureFixture, MonkeyPatch

import nlp_analyzer.cli as cli
from nlp_analyzer.cleaning import CleaningOptions
from nlp_analyzer.fetching import FetchError
from nlp_analyzer.pipeline import PipelineOptions
from nlp_analyzer.types import AnnotatedDocument

URL = "https://www.gutenberg.org/files/1661/1661-0.txt"
RAW_TEXT = (
    "Project header\n"
    "*** START OF THIS PROJECT GUTENBERG EBOOK THE ADVENTURES ***\n"
    "The cat sat.\n"
    "*** END OF THIS PROJECT GUTENBERG EBOOK THE ADVENTURES ***\n"
)


class FakeAnnotator:
    def __init__(self) -> None:
        self.texts: list[str] = []

    def annotate(self, text: str) -> AnnotatedDocument:
        self.texts.append(text)
        return {
            "text": text,
            "sentences": [
                {
                    "tokens": [{"word": "The", "tag": "DT"}, {"word": "cat", "tag": "NN"}],
                    "constituency": None,
                    "dependencies": [],
                }
            ],
        }


@pytest.fixture
def fake_fetch(monkeypatch: MonkeyPatch) -> list[str]:
    fetched: list[str] = []

    def fetch(url: str, **kwargs: Any) -> str:
        fetched.append(url)
        return RAW_TEXT

    monkeypatch.setattr(cli, "fetch_text", fetch)
    return fetched


def test_process_url_prints_pos_tags(fake_fetch: list[str], capsys: CaptureFixture[str]) -> None:
    annotator = FakeAnnotator()

    assert cli.process_url("POS", URL, annotator) is True

    output = capsys.readouterr().out
    assert annotator.texts == ["The cat sat."]
    assert f"--- Task: POS | URL: {URL} ---" in output
    assert 'Analyzing sample text:\n"The cat sat."' in output
    lines = output.splitlines()
    start = lines.index("  The [DT]")
    assert lines[start : start + 3] == ["  The [DT]", "  cat [NN]", "  --- (end of sentence) ---"]


def test_process_url_unknown_action_still_annotates(
    fake_fetch: list[str], capsys: CaptureFixture[str], caplog: LogCaptureFixture
) -> None:
    annotator = FakeAnnotator()

    with caplog.at_level(logging.ERROR):
        assert cli.process_url("SENTIMENT", URL, annotator) is False

    assert annotator.texts == ["The cat sat."]
    assert "Unknown action: SENTIMENT" in caplog.text
    assert "[Part-of-Speech (POS) Tags]" not in capsys.readouterr().out


def test_process_url_reports_fetch_failure(monkeypatch: MonkeyPatch, caplog: LogCaptureFixture) -> None:
    def failing_fetch(url: str, **kwargs: Any) -> str:
        raise FetchError(url, "Connection refused")

    monkeypatch.setattr(cli, "fetch_text", failing_fetch)
    annotator = FakeAnnotator()

    with caplog.at_level(logging.ERROR):
        assert cli.process_url("POS", "http://unreachable.invalid/book.txt", annotator) is False

    assert "Failed to process URL http://unreachable.invalid/book.txt: Connection refused" in caplog.text
    assert annotator.texts == []


def test_process_url_applies_cleaning_options(fake_fetch: list[str], capsys: CaptureFixture[str]) -> None:
    annotator = FakeAnnotator()

    cli.process_url("POS", URL, annotator, cleaning_options=CleaningOptions(start_marker="missing", sample_lines=1))

    assert annotator.texts == ["Project header"]


def test_main_without_arguments_prints_usage(monkeypatch: MonkeyPatch, capsys: CaptureFixture[str]) -> None:
    monkeypatch.setattr(cli, "build_annotator", lambda options: pytest.fail("pipeline should not be built"))

    cli.main(["POS"])

    captured = capsys.readouterr()
    assert "usage: nlp-analyzer" in captured.err
    assert "Actions: POS, CONSTITUENCY, DEPENDENCY" in captured.err
    assert captured.out == ""


def test_main_builds_pipeline_for_action(
    monkeypatch: MonkeyPatch, fake_fetch: list[str], capsys: CaptureFixture[str]
) -> None:
    built: list[PipelineOptions] = []

    def fake_build(options: PipelineOptions) -> FakeAnnotator:
        built.append(options)
        return FakeAnnotator()

    monkeypatch.setattr(cli, "build_annotator", fake_build)

    cli.main(["pos", URL, "--lines", "5"])

    assert fake_fetch == [URL]
    assert built[0].backend == "stanza"
    assert built[0].annotators == ("tokenize", "ssplit", "pos")
    assert "--- Task: POS |" in capsys.readouterr().out


def test_main_spacy_unknown_action_skips_constituency(
    monkeypatch: MonkeyPatch, fake_fetch: list[str], caplog: LogCaptureFixture
) -> None:
    built: list[PipelineOptions] = []

    def fake_build(options: PipelineOptions) -> FakeAnnotator:
        built.append(options)
        return FakeAnnotator()

    monkeypatch.setattr(cli, "build_annotator", fake_build)

    with caplog.at_level(logging.ERROR):
        cli.main(["ner", URL, "--pipeline", "spacy"])

    assert built[0].annotators == ("tokenize", "ssplit", "pos", "depparse")
    assert "Unknown action: NER" in caplog.text


def test_main_reports_unsupported_pipeline_without_raising(
    monkeypatch: MonkeyPatch, fake_fetch: list[str], caplog: LogCaptureFixture
) -> None:
    monkeypatch.setattr("nlp_analyzer.pipeline._load_spacy_model", lambda model_name: pytest.fail("model loaded"))

    with caplog.at_level(logging.ERROR):
        cli.main(["CONSTITUENCY", URL, "--pipeline", "spacy"])

    assert "Failed to initialize spacy pipeline" in caplog.text
    assert "constituency" in caplog.text
    assert fake_fetch == []


def test_main_ignores_extra_arguments(
    monkeypatch: MonkeyPatch, fake_fetch: list[str], capsys: CaptureFixture[str]
) -> None:
    monkeypatch.setattr(cli, "build_annotator", lambda options: FakeAnnotator())

    cli.main(["POS", URL, "trailing", "arguments"])

    assert fake_fetch == [URL]
    assert "  cat [NN]" in capsys.readouterr().out
