"""
Dataset loading: JSONL corpora of (text, language) examples.
"""
import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .exceptions import DataCorruptionError
from .tokenization import TextTokenizer
from .utils import Language, language_from_iso

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Example:
    """An example to train or test a LanguageDetector."""
    text: str
    language: Language


@dataclass
class Dataset:
    """A dataset to train and test a LanguageDetector."""
    training: List[Example] = field(default_factory=list)
    validation: List[Example] = field(default_factory=list)
    test: List[Example] = field(default_factory=list)


class CorpusReader:
    """Read corpora with a JSON example per line, with 'body' and 'language' fields."""

    def read(self, filepath: str, max_lines: Optional[int] = None) -> List[Example]:
        """
        Read the given JSONL corpus file.

        Args:
            filepath: The input file with a JSON example per line
            max_lines: The max number of lines to read, the whole file if None

        Returns:
            The list of examples read
        """
        examples = []

        with open(filepath, 'r', encoding='utf-8') as f:
            for line_number, line in enumerate(f, 1):
                if max_lines is not None and line_number > max_lines:
                    break

                if not line.strip():
                    continue

                examples.append(self.parse_line(line, line_number))

        logger.info(f"Read {len(examples)} examples from {filepath}")

        return examples

    def parse_line(self, line: str, line_number: int = 0) -> Example:
        """Parse a single JSON line into an Example."""
        try:
            parsed = json.loads(line)
            text = parsed['body']
            iso_code = parsed['language']
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            raise DataCorruptionError(
                f"Invalid corpus line {line_number}: {e}", line_number=line_number) from e

        if not isinstance(text, str) or not isinstance(iso_code, str):
            raise DataCorruptionError(
                f"Invalid corpus line {line_number}: 'body' and 'language' must be strings",
                line_number=line_number)

        return Example(text=text, language=language_from_iso(iso_code))


def get_dataset_statistics(examples: List[Example], tokenizer: Optional[TextTokenizer] = None,
                           max_token_length: int = 100) -> Dict:
    """Calculate statistics about a list of examples."""
    stats = {
        'total_examples': len(examples),
        'language_counts': Counter(example.language.iso_code for example in examples),
        'total_chars': sum(len(example.text) for example in examples),
        'distinct_chars': len(set(char for example in examples for char in example.text)),
    }

    if tokenizer is not None:
        stats['total_tokens'] = sum(
            len(tokenizer.tokenize(example.text, max_token_length=max_token_length)) for example in examples)
        stats['avg_tokens_per_example'] = stats['total_tokens'] / len(examples) if examples else 0.0

    return stats
