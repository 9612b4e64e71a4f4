"""
Validation of the language detector: accuracy and confusion matrix.
"""
import logging
import time
from typing import Dict, List

import numpy as np
from tqdm import tqdm

from .dataset import Example
from .utils import Language, format_elapsed_time

logger = logging.getLogger(__name__)


class ConfusionMatrix:
    """Counts of the predictions, indexed by [gold][predicted] over the supported languages."""

    def __init__(self, languages: List[Language]):
        self.languages = languages
        self.matrix = np.zeros((len(languages), len(languages)))

    def reset(self):
        self.matrix.fill(0.0)

    def add(self, gold: Language, predicted: Language):
        self.matrix[gold.id, predicted.id] += 1.0

    @property
    def total(self) -> int:
        return int(self.matrix.sum())

    def normalized_rows(self) -> np.ndarray:
        """Each row divided by its own sum (rows without predictions are left at zero)."""
        row_sums = self.matrix.sum(axis=1, keepdims=True)
        return np.divide(self.matrix, row_sums, out=np.zeros_like(self.matrix), where=row_sums > 0)

    def per_language_metrics(self) -> Dict[str, Dict]:
        """Calculate precision, recall, F1 for each language."""
        language_metrics = {}

        for lang in self.languages:
            tp = self.matrix[lang.id, lang.id]
            fp = self.matrix[:, lang.id].sum() - tp
            fn = self.matrix[lang.id, :].sum() - tp

            precision = tp / (tp + fp) if (tp + fp) > 0 else 0.0
            recall = tp / (tp + fn) if (tp + fn) > 0 else 0.0
            f1 = 2 * precision * recall / (precision + recall) if (precision + recall) > 0 else 0.0

            language_metrics[lang.iso_code] = {
                'precision': float(precision),
                'recall': float(recall),
                'f1_score': float(f1),
                'support': int(tp + fn),
            }

        return language_metrics

    def macro_f1(self) -> float:
        """Average F1 over the languages with a non-zero support."""
        scores = [m['f1_score'] for m in self.per_language_metrics().values() if m['support'] > 0]
        return float(np.mean(scores)) if scores else 0.0

    def format(self) -> str:
        """The matrix formatted as a table of per-row percentages."""
        normalized = self.normalized_rows()

        lines = ["    | " + " | ".join(f"  {lang.iso_code}  " for lang in self.languages) + " "]
        lines.append("-" * (9 * len(self.languages) + 3))

        for i, lang in enumerate(self.languages):
            cells = " | ".join(f"{100.0 * value:5.1f}%" for value in normalized[i])
            lines.append(f" {lang.iso_code} | {cells} ")

        return "\n".join(lines) + "\n"

    def __str__(self) -> str:
        return self.format()


class ValidationHelper:
    """A helper for the validation of a LanguageDetector."""

    def __init__(self, language_detector, show_progress: bool = True):
        self.language_detector = language_detector
        self.confusion_matrix = ConfusionMatrix(language_detector.supported_languages)
        self.show_progress = show_progress

    def validate(self, test_set: List[Example], include_unknown: bool = False) -> float:
        """
        Validate the language detector on the given examples, filling the confusion matrix.

        Args:
            test_set: The examples to validate the language detector
            include_unknown: Whether the examples with Unknown gold language count in the accuracy

        Returns:
            The accuracy of the language detector
        """
        correct_predictions = 0
        valid_predictions = 0

        start_time = time.time()

        self.confusion_matrix.reset()

        for example in tqdm(test_set, desc="Validation", disable=not self.show_progress):
            if example.language is not Language.UNKNOWN:
                correct_predictions += self.validate_example(example)

            if example.language is not Language.UNKNOWN or include_unknown:
                valid_predictions += 1

        logger.info(f"Elapsed time: {format_elapsed_time(time.time() - start_time)}")

        return correct_predictions / valid_predictions if valid_predictions > 0 else 0.0

    def validate_example(self, example: Example) -> int:
        """Validate the language detector on a single example. Returns 1 if correct, 0 otherwise."""
        predicted = self.language_detector.detect_language(example.text)

        if predicted is not Language.UNKNOWN:
            self.confusion_matrix.add(example.language, predicted)

        return 1 if predicted == example.language else 0

    def get_formatted_confusion_matrix(self) -> str:
        return self.confusion_matrix.format()

    def print_evaluation_report(self, accuracy: float):
        """Print the evaluation report of the last validation."""
        print("=" * 60)
        print("LANGUAGE DETECTION EVALUATION REPORT")
        print("=" * 60)

        print(f"\nOVERALL METRICS:")
        print(f"  Accuracy:          {100.0 * accuracy:.2f}%")
        print(f"  Macro F1:          {self.confusion_matrix.macro_f1():.4f}")
        print(f"  Total Predictions: {self.confusion_matrix.total}")

        print(f"\nPER-LANGUAGE F1 SCORES:")
        for lang, metrics in self.confusion_matrix.per_language_metrics().items():
            if metrics['support'] > 0:
                print(f"  {lang.upper()}: {metrics['f1_score']:.4f} (support: {metrics['support']})")

        print(f"\nCONFUSION MATRIX:\n")
        print(self.confusion_matrix.format())
        print("=" * 60)
