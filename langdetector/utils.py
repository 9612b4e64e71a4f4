"""
Utility functions for the language detection pipeline.
"""
import json
from enum import Enum
from typing import List, Dict, Any

import numpy as np

from .exceptions import InvalidConfigurationError


# Language codes and their full names
LANGUAGE_CODES = {
    'ar': 'Arabic',
    'bn': 'Bengali',
    'de': 'German',
    'en': 'English',
    'es': 'Spanish',
    'fr': 'French',
    'hi': 'Hindi',
    'id': 'Indonesian',
    'it': 'Italian',
    'ja': 'Japanese',
    'ko': 'Korean',
    'nl': 'Dutch',
    'pl': 'Polish',
    'pt': 'Portuguese',
    'ru': 'Russian',
    'th': 'Thai',
    'tr': 'Turkish',
    'ur': 'Urdu',
    'vi': 'Vietnamese',
    'zh': 'Chinese'
}


class Language(Enum):
    """
    The closed catalog of languages.

    Each member carries its index in the catalog (``id``) and its ISO 639-1 code.
    UNKNOWN is always the last member and is not a supported language.
    """
    ARABIC = (0, 'ar')
    BENGALI = (1, 'bn')
    GERMAN = (2, 'de')
    ENGLISH = (3, 'en')
    SPANISH = (4, 'es')
    FRENCH = (5, 'fr')
    HINDI = (6, 'hi')
    INDONESIAN = (7, 'id')
    ITALIAN = (8, 'it')
    JAPANESE = (9, 'ja')
    KOREAN = (10, 'ko')
    DUTCH = (11, 'nl')
    POLISH = (12, 'pl')
    PORTUGUESE = (13, 'pt')
    RUSSIAN = (14, 'ru')
    THAI = (15, 'th')
    TURKISH = (16, 'tr')
    URDU = (17, 'ur')
    VIETNAMESE = (18, 'vi')
    CHINESE = (19, 'zh')
    UNKNOWN = (20, '??')

    def __init__(self, id: int, iso_code: str):
        self.id = id
        self.iso_code = iso_code


# The Unknown language is excluded: the index of a supported language is equal to its id
SUPPORTED_LANGUAGES: List[Language] = [lang for lang in Language if lang is not Language.UNKNOWN]

LANGUAGES_BY_ISO_CODE: Dict[str, Language] = {lang.iso_code: lang for lang in SUPPORTED_LANGUAGES}


def language_from_iso(iso_code: str) -> Language:
    """
    Get the Language with the given ISO code.

    Returns Language.UNKNOWN when the code doesn't match any supported language.
    Raises InvalidConfigurationError when the code is not 2 chars long.
    """
    if len(iso_code) != 2:
        raise InvalidConfigurationError(
            f"Invalid language iso code (must be 2 chars long): {iso_code}", iso_code=iso_code)

    return LANGUAGES_BY_ISO_CODE.get(iso_code, Language.UNKNOWN)


def empty_distribution() -> np.ndarray:
    """The all-zero distribution, meaning "no evidence"."""
    return np.zeros(len(SUPPORTED_LANGUAGES))


def combine_classifications(classifications: List[np.ndarray]) -> np.ndarray:
    """
    Combine more classifications into a single normalized distribution.

    The classifications are multiplied in log space: their logarithms are summed,
    the max is subtracted for numerical stability and the exponentiated result is
    normalized to a probability.

    Args:
        classifications: Language distributions (e.g. one per token)

    Returns:
        The combined distribution, or the all-zero vector if no classification is given
        or if every language has a zero score in some classification
    """
    if not classifications:
        return empty_distribution()

    with np.errstate(divide='ignore'):
        log_sum = np.sum([np.log(c) for c in classifications], axis=0)

    # Every language has been excluded by at least one classification
    if np.isneginf(np.max(log_sum)):
        return np.zeros_like(log_sum)

    log_sum_norm = log_sum - np.max(log_sum)
    linear_sum_norm = np.exp(log_sum_norm)

    return linear_sum_norm / np.sum(linear_sum_norm)


def multiply_classifications(classifications: List[np.ndarray]) -> np.ndarray:
    """
    Combine more classifications with a direct product, then normalize.

    Equivalent to combine_classifications() as long as the product does not underflow,
    so it is only suited to short lists of classifications.
    """
    if not classifications:
        return empty_distribution()

    product = np.prod(classifications, axis=0)

    if np.sum(product) == 0.0:
        return np.zeros_like(product)

    return product / np.sum(product)


def entropy(distribution: np.ndarray) -> float:
    """Calculate entropy of probability distribution."""
    probs = [p for p in distribution if p > 0]
    if not probs:
        return 0.0
    return -sum(p * np.log2(p) for p in probs)


def format_elapsed_time(elapsed_secs: float) -> str:
    """Format elapsed seconds as seconds and minutes."""
    return f"{elapsed_secs:.3f} s ({elapsed_secs / 60.0:.1f} min)"


def save_results(results: Dict[str, Any], filepath: str):
    """Save results to JSON file."""
    with open(filepath, 'w', encoding='utf-8') as f:
        json.dump(results, f, indent=2, ensure_ascii=False)
