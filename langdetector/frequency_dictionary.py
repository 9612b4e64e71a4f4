"""
Words frequency dictionary, used as a language prior for the detector.
"""
import logging
import pickle
from typing import BinaryIO, Dict, Optional

import numpy as np

from .exceptions import DataCorruptionError, StatePreconditionError
from .tokenization import TextTokenizer
from .utils import Language, SUPPORTED_LANGUAGES

logger = logging.getLogger(__name__)


class FrequencyDictionary:
    """
    Map words to arrays of frequencies (one per supported language).

    Occurrences are counted first, then normalize() turns the counts into probabilities
    and freezes the dictionary.
    """

    def __init__(self):
        self.num_languages = len(SUPPORTED_LANGUAGES)
        self.freq_map: Dict[str, np.ndarray] = {}
        self.word_counts_per_language = np.zeros(self.num_languages)
        self._normalized = False

    @property
    def normalized(self) -> bool:
        return self._normalized

    def __len__(self) -> int:
        return len(self.freq_map)

    def __contains__(self, word: str) -> bool:
        return word.lower() in self.freq_map

    def add_occurrence(self, word: str, language: Language):
        """Add the occurrence of the given word associated to the given language."""
        if self._normalized:
            raise StatePreconditionError("Cannot add a word occurrence after normalization", word=word)

        if language is Language.UNKNOWN:
            logger.debug(f"Ignoring occurrence of '{word}' with unknown language")
            return

        lower_case_word = word.lower()

        if lower_case_word not in self.freq_map:
            self.freq_map[lower_case_word] = np.zeros(self.num_languages)

        self.freq_map[lower_case_word][language.id] += 1
        self.word_counts_per_language[language.id] += 1

    def add_text(self, text: str, language: Language, tokenizer: TextTokenizer, max_token_length: int = 100):
        """Add an occurrence for each token of the given text."""
        for token in tokenizer.tokenize(text, max_token_length=max_token_length):
            self.add_occurrence(token, language)

    def normalize(self):
        """Normalize frequencies to probabilities and block the dictionary."""
        if self._normalized:
            raise StatePreconditionError("The dictionary is already normalized")

        total_occurrences = sum(freq.sum() for freq in self.freq_map.values())
        eps = 1.0 / total_occurrences if total_occurrences > 0 else 0.0

        for word, freq in self.freq_map.items():
            self.freq_map[word] = self._normalize_per_language(freq, zeros_replace=eps)

        self._normalized = True

        logger.info(f"Frequency dictionary normalized ({len(self.freq_map)} words, eps = {eps:.3e})")

    def get_freq_of(self, word: str) -> Optional[np.ndarray]:
        """The frequency array of the given word, None if it has never been observed."""
        return self.freq_map.get(word.lower())

    def _normalize_per_language(self, freq: np.ndarray, zeros_replace: float) -> np.ndarray:
        """
        Normalize an array of occurrences with respect to the amount of words per language,
        replacing zeros and normalizing it to a probability.
        """
        # Languages without any word give zero
        normalized = np.divide(
            freq, self.word_counts_per_language,
            out=np.zeros_like(freq), where=self.word_counts_per_language > 0)

        normalized[normalized == 0.0] = zeros_replace

        return normalized / normalized.sum()

    def dump(self, stream: BinaryIO):
        """Serialize this dictionary into the given binary stream."""
        pickle.dump(self, stream)

    @classmethod
    def load(cls, stream: BinaryIO) -> 'FrequencyDictionary':
        """Read a serialized dictionary from the given binary stream."""
        try:
            dictionary = pickle.load(stream)
        except (pickle.UnpicklingError, EOFError, AttributeError, ImportError, IndexError, ValueError) as e:
            raise DataCorruptionError(f"Cannot decode the frequency dictionary: {e}") from e

        if not isinstance(dictionary, cls):
            raise DataCorruptionError(
                f"Unexpected object in place of a frequency dictionary: {type(dictionary).__name__}")

        return dictionary
