#!/usr/bin/env python3
"""
Evaluation script for the token-level language detector.
"""
import argparse
import logging
import os
import sys

from langdetector.dataset import CorpusReader
from langdetector.evaluation import ValidationHelper
from langdetector.exceptions import LanguageDetectorError
from langdetector.frequency_dictionary import FrequencyDictionary
from langdetector.language_detector import LanguageDetector
from langdetector.models import LanguageDetectorModel
from langdetector.tokenization import JiebaSegmenter, TextTokenizer
from langdetector.utils import save_results

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def evaluate_model(args):
    """Main evaluation function."""
    logger.info("Starting evaluation process...")

    if not os.path.exists(args.model_path):
        raise FileNotFoundError(f"Model file not found: {args.model_path}")

    logger.info(f"Loading model from '{args.model_path}'")
    with open(args.model_path, 'rb') as f:
        model = LanguageDetectorModel.load(f)

    frequency_dictionary = None
    if args.frequency_dictionary:
        logger.info(f"Loading words frequency dictionary from '{args.frequency_dictionary}'")
        with open(args.frequency_dictionary, 'rb') as f:
            frequency_dictionary = FrequencyDictionary.load(f)

    test_set = CorpusReader().read(args.data_path)

    tokenizer = TextTokenizer(
        cjk_segmenter=JiebaSegmenter(args.cjk_dictionary) if args.use_cjk_segmenter or args.cjk_dictionary else None)
    detector = LanguageDetector(model=model, tokenizer=tokenizer, frequency_dictionary=frequency_dictionary)
    helper = ValidationHelper(detector)

    logger.info(f"Start validation on {len(test_set)} test examples")
    accuracy = helper.validate(test_set, include_unknown=args.include_unknown)

    helper.print_evaluation_report(accuracy)

    results = {
        'accuracy': accuracy,
        'macro_f1': helper.confusion_matrix.macro_f1(),
        'per_language': helper.confusion_matrix.per_language_metrics(),
        'confusion_matrix': helper.confusion_matrix.matrix.tolist(),
        'dataset_size': len(test_set),
    }

    if args.output_file:
        save_results(results, args.output_file)
        logger.info(f"Results saved to {args.output_file}")

    return results


def main():
    parser = argparse.ArgumentParser(description='Evaluate the token-level language detector')

    parser.add_argument('--model_path', type=str, required=True,
                        help='Path to the serialized model')
    parser.add_argument('--data_path', type=str, required=True,
                        help='Path to the test set (JSONL)')
    parser.add_argument('--frequency_dictionary', type=str,
                        help='Path to the serialized words frequency dictionary')
    parser.add_argument('--use_cjk_segmenter', action='store_true',
                        help='Whether to segment CJK tokens')
    parser.add_argument('--cjk_dictionary', type=str,
                        help='Path to a custom dictionary of the CJK segmenter')
    parser.add_argument('--include_unknown', action='store_true',
                        help='Count the examples of unknown language in the accuracy')
    parser.add_argument('--output_file', type=str,
                        help='JSON file in which to save the evaluation results')

    args = parser.parse_args()

    try:
        evaluate_model(args)
    except (LanguageDetectorError, FileNotFoundError) as e:
        logger.error(f"Evaluation failed: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
