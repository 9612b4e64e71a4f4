"""Tests for the training script."""

import argparse
import json

import pytest

import train


def write_corpus(path, examples):
    path.write_text(
        "\n".join(json.dumps({"body": body, "language": language}) for body, language in examples) + "\n",
        encoding="utf-8")
    return str(path)


@pytest.fixture
def args(tmp_path):
    corpus = write_corpus(tmp_path / "corpus.jsonl", [("hello world", "en"), ("bonjour le monde", "fr")])

    return argparse.Namespace(
        training_set=corpus, validation_set=corpus, test_set=corpus,
        frequency_dictionary=None, use_cjk_segmenter=False, cjk_dictionary=None,
        model_path=str(tmp_path / "model.pt"),
        embeddings_size=4, attention_size=4, hidden_size=4, max_token_length=100, recurrent_connection='lstm',
        epochs=0, batch_size=1, dropout=0.0, no_shuffle=False, seed=743)


@pytest.fixture
def evaluations(monkeypatch):
    calls = []
    monkeypatch.setattr(train, 'evaluate_best_model', lambda args, tokenizer, test_set: calls.append(args.model_path))
    return calls


def test_stale_model_file_is_not_evaluated(args, evaluations, tmp_path):
    (tmp_path / "model.pt").write_bytes(b"model of a previous run")

    assert train.train_model(args) is False
    assert evaluations == []
    assert (tmp_path / "model.pt").read_bytes() == b"model of a previous run"


def test_last_model_is_saved_without_validation(args, evaluations, tmp_path):
    args.validation_set = None

    assert train.train_model(args) is True
    assert evaluations == [args.model_path]
    assert (tmp_path / "model.pt").stat().st_size > 0
