"""Test doubles and helpers for the language detector tests."""

from typing import Dict, List, Optional

import numpy as np

from langdetector.utils import SUPPORTED_LANGUAGES, Language


def distribution(**scores: float) -> np.ndarray:
    """A distribution over the supported languages, given the scores by iso code."""
    iso_codes = [lang.iso_code for lang in SUPPORTED_LANGUAGES]
    dist = np.zeros(len(SUPPORTED_LANGUAGES))
    for iso_code, score in scores.items():
        dist[iso_codes.index(iso_code)] = score
    return dist


def one_hot(language: Language) -> np.ndarray:
    dist = np.zeros(len(SUPPORTED_LANGUAGES))
    dist[language.id] = 1.0
    return dist


class FakeClassifier:
    """Token classifier returning fixed distributions, recording the backward calls."""

    def __init__(self, distributions: Optional[Dict[str, np.ndarray]] = None,
                 default: Optional[np.ndarray] = None, embeddings_size: int = 4):
        self.distributions = distributions or {}
        if default is None:
            default = np.full(len(SUPPORTED_LANGUAGES), 1.0 / len(SUPPORTED_LANGUAGES))
        self.default = default
        self.embeddings_size = embeddings_size
        self.forward_calls: List[str] = []
        self.backward_calls: List[np.ndarray] = []

    def forward(self, token: str, dropout: float = 0.0) -> np.ndarray:
        self.forward_calls.append(token)
        return self.distributions.get(token, self.default).copy()

    def backward(self, errors: np.ndarray):
        self.backward_calls.append(errors)
        last_token = self.forward_calls[-1]
        return {}, [np.ones(self.embeddings_size) for _ in last_token]

    def importance_scores(self) -> np.ndarray:
        last_token = self.forward_calls[-1]
        return np.full(len(last_token), 1.0 / len(last_token))
