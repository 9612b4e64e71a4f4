"""Shared fixtures for the language detector tests."""

import pytest

from langdetector.models import LanguageDetectorModel
from langdetector.tokenization import TextTokenizer


@pytest.fixture
def tokenizer():
    return TextTokenizer()


@pytest.fixture
def tiny_model():
    return LanguageDetectorModel(embeddings_size=4, attention_size=4, hidden_size=4, max_token_length=100)
