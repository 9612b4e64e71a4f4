#!/usr/bin/env python3
"""
Training script for the token-level language detector.
"""
import argparse
import logging
import random
import sys
from typing import List

import numpy as np
import torch

from langdetector.dataset import CorpusReader, Dataset, Example, get_dataset_statistics
from langdetector.evaluation import ValidationHelper
from langdetector.exceptions import LanguageDetectorError
from langdetector.frequency_dictionary import FrequencyDictionary
from langdetector.language_detector import LanguageDetector
from langdetector.models import LanguageDetectorModel
from langdetector.tokenization import JiebaSegmenter, TextTokenizer
from langdetector.training import TrainingHelper

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def set_random_seeds(seed: int = 42):
    """Set random seeds for reproducibility."""
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)


def read_dataset_file(reader: CorpusReader, filepath: str, dataset_name: str) -> List[Example]:
    logger.info(f"Reading {dataset_name} set from {filepath}")
    return reader.read(filepath)


def read_dataset(args) -> Dataset:
    reader = CorpusReader()

    return Dataset(
        training=read_dataset_file(reader, args.training_set, "training"),
        validation=read_dataset_file(reader, args.validation_set, "validation") if args.validation_set else [],
        test=read_dataset_file(reader, args.test_set, "test") if args.test_set else [])


def train_model(args):
    """Main training function."""
    logger.info("Starting training process...")

    set_random_seeds(args.seed)

    dataset = read_dataset(args)

    tokenizer = TextTokenizer(
        cjk_segmenter=JiebaSegmenter(args.cjk_dictionary) if args.use_cjk_segmenter or args.cjk_dictionary else None)

    stats = get_dataset_statistics(dataset.training, tokenizer, args.max_token_length)
    logger.info(f"Dataset statistics:")
    logger.info(f"  Training examples: {stats['total_examples']}")
    logger.info(f"  Total tokens: {stats['total_tokens']}")
    logger.info(f"  Distinct chars: {stats['distinct_chars']}")
    logger.info(f"  Languages: {dict(stats['language_counts'])}")

    model = LanguageDetectorModel(
        embeddings_size=args.embeddings_size,
        attention_size=args.attention_size,
        hidden_size=args.hidden_size,
        max_token_length=args.max_token_length,
        recurrent_connection=args.recurrent_connection)

    logger.info(f"Model:\n{model}")
    logger.info(f"Start training on {len(dataset.training)} examples")

    helper = TrainingHelper(
        language_detector=LanguageDetector(model=model, tokenizer=tokenizer),
        epochs=args.epochs,
        batch_size=args.batch_size,
        dropout=args.dropout,
        shuffle=not args.no_shuffle,
        seed=args.seed)

    best_accuracy = helper.train(
        training_set=dataset.training,
        validation_set=dataset.validation,
        model_path=args.model_path)

    if dataset.validation:
        logger.info(f"Best validation accuracy: {100.0 * best_accuracy:.2f}%")
        # A model is saved only when the validation accuracy improves
        model_saved = best_accuracy > 0.0
    else:
        # Without validation the model of the last epoch is saved
        with open(args.model_path, 'wb') as f:
            model.dump(f)
        logger.info(f"Model saved to \"{args.model_path}\"")
        model_saved = True

    if dataset.test:
        if model_saved:
            evaluate_best_model(args, tokenizer, dataset.test)
        else:
            logger.warning("No model has been saved during training, skipping the test set evaluation")

    return model_saved


def evaluate_best_model(args, tokenizer: TextTokenizer, test_set: List[Example]):
    """Evaluate the best saved model on the test set."""
    logger.info(f"Start validation on {len(test_set)} test examples")

    with open(args.model_path, 'rb') as f:
        model = LanguageDetectorModel.load(f)

    frequency_dictionary = None
    if args.frequency_dictionary:
        logger.info(f"Loading words frequency dictionary from '{args.frequency_dictionary}'")
        with open(args.frequency_dictionary, 'rb') as f:
            frequency_dictionary = FrequencyDictionary.load(f)

    detector = LanguageDetector(model=model, tokenizer=tokenizer, frequency_dictionary=frequency_dictionary)
    helper = ValidationHelper(detector)

    accuracy = helper.validate(test_set)
    helper.print_evaluation_report(accuracy)


def main():
    parser = argparse.ArgumentParser(description='Train the token-level language detector')

    # Data arguments
    parser.add_argument('--training_set', type=str, required=True,
                        help='Path to the training set (JSONL)')
    parser.add_argument('--validation_set', type=str,
                        help='Path to the validation set (JSONL)')
    parser.add_argument('--test_set', type=str,
                        help='Path to the test set (JSONL)')
    parser.add_argument('--frequency_dictionary', type=str,
                        help='Path to the serialized words frequency dictionary, used on the test set')
    parser.add_argument('--use_cjk_segmenter', action='store_true',
                        help='Whether to segment CJK tokens')
    parser.add_argument('--cjk_dictionary', type=str,
                        help='Path to a custom dictionary of the CJK segmenter')

    # Model arguments
    parser.add_argument('--model_path', type=str, default='language_detector.pt',
                        help='File in which to save the best model')
    parser.add_argument('--embeddings_size', type=int, default=50)
    parser.add_argument('--attention_size', type=int, default=50)
    parser.add_argument('--hidden_size', type=int, default=150)
    parser.add_argument('--max_token_length', type=int, default=100)
    parser.add_argument('--recurrent_connection', type=str, default='lstm',
                        choices=['lstm', 'gru', 'rnn'])

    # Training arguments
    parser.add_argument('--epochs', type=int, default=10)
    parser.add_argument('--batch_size', type=int, default=1)
    parser.add_argument('--dropout', type=float, default=0.1,
                        help='Dropout probability of the chars embeddings')
    parser.add_argument('--no_shuffle', action='store_true',
                        help='Do not shuffle the training examples before each epoch')
    parser.add_argument('--seed', type=int, default=743,
                        help='Random seed for reproducibility')

    args = parser.parse_args()

    try:
        train_model(args)
    except LanguageDetectorError as e:
        logger.error(f"Training failed [{e.error_code}]: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
