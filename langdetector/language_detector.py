"""
Main language detection pipeline integrating all components.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from .frequency_dictionary import FrequencyDictionary
from .models import LanguageDetectorModel, TokenClassifier, TorchTokenClassifier
from .tokenization import TextTokenizer
from .utils import Language, combine_classifications, empty_distribution

logger = logging.getLogger(__name__)


@dataclass
class TokenClassification:
    """The classification of a single token."""
    languages: np.ndarray
    chars_importance: Optional[np.ndarray] = None


class LanguageDetector:
    """
    A language detector that classifies each token of a text and fuses the token
    classifications into the prediction of the whole text.

    If a frequency dictionary is given, the frequency of each known token is used as
    an additional vote to boost the predictions.
    """

    def __init__(self,
                 model: LanguageDetectorModel,
                 tokenizer: TextTokenizer,
                 frequency_dictionary: Optional[FrequencyDictionary] = None,
                 classifier: Optional[TokenClassifier] = None):

        self.model = model
        self.tokenizer = tokenizer
        self.frequency_dictionary = frequency_dictionary
        self.classifier = classifier if classifier is not None else TorchTokenClassifier(model)

    @property
    def supported_languages(self) -> List[Language]:
        return self.model.supported_languages

    def tokenize(self, text: str) -> List[str]:
        return self.tokenizer.tokenize(text, max_token_length=self.model.max_token_length)

    def detect_language(self, text: str) -> Language:
        """Detect the language of the given text."""
        return self.get_language(self.predict(text))

    def get_language(self, prediction: np.ndarray) -> Language:
        """
        Get the predicted language from a prediction of this detector.

        The all-zero prediction gives Language.UNKNOWN. Ties are resolved toward the
        language with the lowest index.
        """
        if np.sum(prediction) == 0.0:
            return Language.UNKNOWN

        return self.supported_languages[int(np.argmax(prediction))]

    def get_full_distribution(self, prediction: np.ndarray) -> List[Tuple[Language, float]]:
        """All the supported languages with their prediction score, sorted by descending score."""
        return sorted(
            zip(self.supported_languages, (float(score) for score in prediction)),
            key=lambda lang_score: lang_score[1],
            reverse=True)

    def predict(self, text: str) -> np.ndarray:
        """
        Get the languages of the given text as probability distribution.

        Args:
            text: Input text to analyze

        Returns:
            The combined distribution of all the tokens, the all-zero array if the text has no tokens
        """
        classifications = []

        for token in self.tokenize(text):
            classifications.append(self.classify_token(token))

            token_freq = self._get_token_freq(token)
            if token_freq is not None:
                classifications.append(token_freq)

        if not classifications:
            return empty_distribution()

        return combine_classifications(classifications)

    def classify_tokens(self, text: str) -> List[Tuple[str, TokenClassification]]:
        """Get the classification of each token of the given text."""
        tokens_classifications = []

        for token in self.tokenize(text):
            languages = self.classify_token(token)
            chars_importance = self._get_chars_importance()

            token_freq = self._get_token_freq(token)
            if token_freq is not None:
                languages = combine_classifications([languages, token_freq])

            tokens_classifications.append(
                (token, TokenClassification(languages=languages, chars_importance=chars_importance)))

        return tokens_classifications

    def classify_token(self, token: str, dropout: float = 0.0) -> np.ndarray:
        """Classify the language of a single token."""
        return self.classifier.forward(token, dropout=dropout)

    def backward(self, errors: np.ndarray):
        """Propagate the errors of the last classified token through the classifier."""
        return self.classifier.backward(errors)

    def _get_token_freq(self, token: str) -> Optional[np.ndarray]:
        if self.frequency_dictionary is None:
            return None
        return self.frequency_dictionary.get_freq_of(token)

    def _get_chars_importance(self) -> Optional[np.ndarray]:
        importance_scores = getattr(self.classifier, 'importance_scores', None)
        return importance_scores() if importance_scores is not None else None
