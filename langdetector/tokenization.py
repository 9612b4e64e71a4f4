"""
Text tokenization utilities.
"""
import logging
import re
from enum import Enum
from typing import List, Optional, Protocol

import jieba

from .exceptions import InvalidConfigurationError

logger = logging.getLogger(__name__)


class ScriptType(Enum):
    """Enumeration of the Chinese-Japanese-Korean (CJK) scripts."""
    HAN = "Han"
    HIRAGANA = "Hiragana"
    KATAKANA = "Katakana"
    HANGUL = "Hangul"


# Script detection patterns
CJK_SCRIPT_PATTERNS = {
    ScriptType.HAN: re.compile(r'[\u4E00-\u9FFF\u3400-\u4DBF]'),
    ScriptType.HIRAGANA: re.compile(r'[\u3040-\u309F]'),
    ScriptType.KATAKANA: re.compile(r'[\u30A0-\u30FF]'),
    ScriptType.HANGUL: re.compile(r'[\uAC00-\uD7AF\u1100-\u11FF\u3130-\u318F]'),
}

# The min fraction of CJK chars for which a token is segmented by the CJK segmenter
MIN_CJK_RATIO = 0.4


def is_cjk_char(char: str) -> bool:
    """Whether the given char belongs to one of the CJK scripts."""
    return any(pattern.match(char) for pattern in CJK_SCRIPT_PATTERNS.values())


def cjk_ratio(text: str) -> float:
    """The fraction of the chars of the given text that belong to a CJK script."""
    if not text:
        return 0.0

    return sum(1 for char in text if is_cjk_char(char)) / len(text)


class CJKSegmenter(Protocol):
    """Splits a CJK chars sequence into words."""

    def segment(self, text: str) -> List[str]:
        ...


class JiebaSegmenter:
    """CJK segmenter based on jieba."""

    def __init__(self, dictionary_path: Optional[str] = None):
        self.dictionary_path = dictionary_path
        self.tokenizer = jieba.Tokenizer() if dictionary_path is None else jieba.Tokenizer(dictionary=dictionary_path)

        logger.info(f"CJK segmenter initialized (dictionary: {dictionary_path or 'default'})")

    def segment(self, text: str) -> List[str]:
        return [word for word in self.tokenizer.lcut(text, HMM=True) if word.strip()]


class TextTokenizer:
    """
    A simple tokenizer which splits a text by spacing and punctuation chars.

    Tokens made mostly of CJK chars are further segmented by the given CJK segmenter,
    since these scripts don't separate words with spaces.
    """

    def __init__(self, cjk_segmenter: Optional[CJKSegmenter] = None):
        self.cjk_segmenter = cjk_segmenter

    def tokenize(self, text: str, max_token_length: int) -> List[str]:
        """
        Tokenize a text by spacing and punctuation chars.

        Args:
            text: The text to tokenize
            max_token_length: The max length of a token (longer tokens are split)

        Returns:
            The list of tokens, in order of appearance
        """
        if max_token_length <= 0:
            raise InvalidConfigurationError(
                f"The max token length must be positive: {max_token_length}",
                max_token_length=max_token_length)

        tokens = self._split_by_letters(text, max_token_length)

        if self.cjk_segmenter is not None:
            tokens = self._segment_cjk_tokens(tokens)

        return tokens

    def _split_by_letters(self, text: str, max_token_length: int) -> List[str]:
        """Split the text into runs of letters, never longer than max_token_length."""
        tokens = []
        buffer = []

        for char in text:
            if not char.isalpha():
                # A non-letter ends the current token and is discarded
                if buffer:
                    tokens.append(''.join(buffer))
                    buffer = []
                continue

            buffer.append(char)

            if len(buffer) == max_token_length:
                tokens.append(''.join(buffer))
                buffer = []

        if buffer:
            tokens.append(''.join(buffer))

        return tokens

    def _segment_cjk_tokens(self, tokens: List[str]) -> List[str]:
        """Replace CJK tokens with their segmentation, preserving the order."""
        segmented = []

        for token in tokens:
            if cjk_ratio(token) >= MIN_CJK_RATIO:
                segmented.extend(word for word in self.cjk_segmenter.segment(token) if word)
            else:
                segmented.append(token)

        return segmented
