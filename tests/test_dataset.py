"""Tests for the corpus reading and the language catalog."""

import json

import pytest

from langdetector.dataset import CorpusReader, Example, get_dataset_statistics
from langdetector.exceptions import DataCorruptionError, InvalidConfigurationError
from langdetector.utils import SUPPORTED_LANGUAGES, Language, language_from_iso


def write_corpus(path, lines):
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return str(path)


def json_line(body, language):
    return json.dumps({"body": body, "language": language}, ensure_ascii=False)


class TestCorpusReader:
    def test_read(self, tmp_path):
        corpus = write_corpus(tmp_path / "corpus.jsonl", [
            json_line("Hello world", "en"),
            "",
            json_line("Ciao mondo", "it"),
            json_line("你好世界", "zh"),
        ])

        examples = CorpusReader().read(corpus)

        assert examples == [
            Example("Hello world", Language.ENGLISH),
            Example("Ciao mondo", Language.ITALIAN),
            Example("你好世界", Language.CHINESE),
        ]

    def test_unsupported_language_is_unknown(self, tmp_path):
        corpus = write_corpus(tmp_path / "corpus.jsonl", [json_line("Salut lume", "ro")])

        assert CorpusReader().read(corpus) == [Example("Salut lume", Language.UNKNOWN)]

    def test_max_lines(self, tmp_path):
        corpus = write_corpus(tmp_path / "corpus.jsonl", [json_line(f"text {i}", "en") for i in range(10)])

        examples = CorpusReader().read(corpus, max_lines=3)

        assert [example.text for example in examples] == ["text 0", "text 1", "text 2"]

    def test_malformed_line(self, tmp_path):
        corpus = write_corpus(tmp_path / "corpus.jsonl", [json_line("Hello", "en"), "{not json"])

        with pytest.raises(DataCorruptionError) as exc_info:
            CorpusReader().read(corpus)

        assert exc_info.value.context['line_number'] == 2

    @pytest.mark.parametrize("line", [
        json.dumps({"text": "Hello", "language": "en"}),
        json.dumps({"body": 42, "language": "en"}),
        json.dumps(["Hello", "en"]),
    ])
    def test_invalid_fields(self, line):
        with pytest.raises(DataCorruptionError):
            CorpusReader().parse_line(line)

    def test_invalid_iso_code(self):
        with pytest.raises(InvalidConfigurationError):
            CorpusReader().parse_line(json_line("Hello", "eng"))


class TestLanguageCatalog:
    def test_language_ids_match_indices(self):
        assert [lang.id for lang in SUPPORTED_LANGUAGES] == list(range(len(SUPPORTED_LANGUAGES)))
        assert Language.UNKNOWN not in SUPPORTED_LANGUAGES
        assert list(Language)[-1] is Language.UNKNOWN

    def test_language_from_iso(self):
        assert language_from_iso("fr") is Language.FRENCH
        assert language_from_iso("xx") is Language.UNKNOWN

    @pytest.mark.parametrize("iso_code", ["", "e", "eng"])
    def test_invalid_iso_code(self, iso_code):
        with pytest.raises(InvalidConfigurationError) as exc_info:
            language_from_iso(iso_code)

        assert exc_info.value.error_code == "INVALID_CONFIGURATION"


def test_dataset_statistics(tokenizer):
    examples = [
        Example("Hello world", Language.ENGLISH),
        Example("Bonjour", Language.FRENCH),
        Example("Hi", Language.ENGLISH),
    ]

    stats = get_dataset_statistics(examples, tokenizer=tokenizer)

    assert stats['total_examples'] == 3
    assert stats['language_counts'] == {'en': 2, 'fr': 1}
    assert stats['total_chars'] == 20
    assert stats['total_tokens'] == 4
    assert stats['avg_tokens_per_example'] == pytest.approx(4 / 3)
