"""
Training of the language detector: epoch, batch, example and token loop.
"""
import logging
import random
import time
from typing import List, Optional

import numpy as np
from tqdm import tqdm

from .dataset import Example
from .evaluation import ValidationHelper
from .exceptions import InvalidConfigurationError
from .language_detector import LanguageDetector
from .optimization import (
    EmbeddingsErrorsAccumulator, EmbeddingsOptimizer, ParamsErrorsAccumulator, ParamsOptimizer
)
from .utils import format_elapsed_time

logger = logging.getLogger(__name__)


class TrainingHelper:
    """
    A helper for the training of a LanguageDetector.

    Each token of an example is classified on its own and its errors, with respect to
    the gold language of the example, are accumulated. The model is updated every
    batch_size examples.
    """

    # The min absolute value that an output error must have in order to be propagated
    MIN_RELEVANT_ERROR = 1.0e-3

    def __init__(self,
                 language_detector: LanguageDetector,
                 epochs: int,
                 batch_size: int = 1,
                 dropout: float = 0.0,
                 shuffle: bool = True,
                 seed: int = 743,
                 params_learning_rate: float = 0.001,
                 embeddings_learning_rate: float = 0.1,
                 show_progress: bool = True):

        if epochs < 0:
            raise InvalidConfigurationError(f"The number of epochs cannot be negative: {epochs}")
        if batch_size <= 0:
            raise InvalidConfigurationError(f"The batch size must be positive: {batch_size}")

        self.language_detector = language_detector
        self.epochs = epochs
        self.batch_size = batch_size
        self.dropout = dropout
        self.shuffle = shuffle
        self.params_learning_rate = params_learning_rate
        self.embeddings_learning_rate = embeddings_learning_rate
        self.show_progress = show_progress

        # Fixed-seed pseudo-random generator, for reproducible shuffling
        self.rng = random.Random(seed)

        self.best_accuracy = 0.0
        self.validation_helper = ValidationHelper(language_detector, show_progress=show_progress)

        self.params_accumulator = ParamsErrorsAccumulator()
        self.embeddings_accumulator = EmbeddingsErrorsAccumulator()

        # Created after the embeddings initialization
        self.optimizer: Optional[ParamsOptimizer] = None
        self.embeddings_optimizer: Optional[EmbeddingsOptimizer] = None

        self._embeddings_initialized = False

    def train(self,
              training_set: List[Example],
              validation_set: Optional[List[Example]] = None,
              model_path: Optional[str] = None) -> float:
        """
        Train the language detector, validating it after each epoch if a validation set is given.

        Args:
            training_set: The examples to train the language detector
            validation_set: The examples to validate the language detector after each epoch
            model_path: The file in which to save the best model

        Returns:
            The best validation accuracy reached
        """
        self.init_embeddings(training_set)
        self._init_optimizers()

        for epoch in range(self.epochs):
            logger.info(f"Epoch {epoch + 1} of {self.epochs}")

            start_time = time.time()
            self.train_epoch(training_set)
            logger.info(f"Elapsed time: {format_elapsed_time(time.time() - start_time)}")

            if validation_set:
                self.validate_and_save_model(validation_set, model_path)

        return self.best_accuracy

    def init_embeddings(self, training_set: List[Example]):
        """Register an embedding for each char of the training set. Done only once."""
        if self._embeddings_initialized:
            return

        embeddings = self.language_detector.model.embeddings
        initial_size = len(embeddings)

        embeddings.add_all(char for example in training_set for char in example.text)

        self._embeddings_initialized = True

        logger.info(f"Chars embeddings initialized ({len(embeddings) - initial_size} new, {len(embeddings)} total)")

    def train_epoch(self, training_set: List[Example]):
        """Train the language detector on one epoch."""
        indices = list(range(len(training_set)))

        if self.shuffle:
            self.rng.shuffle(indices)

        last_position = len(indices) - 1

        for position, example_index in enumerate(tqdm(indices, desc="Training", disable=not self.show_progress)):
            self.learn_from_example(training_set[example_index])

            if (position + 1) % self.batch_size == 0 or position == last_position:
                self.update()

    def learn_from_example(self, example: Example):
        """
        Learn from the given example, comparing its gold language with the one predicted for
        each of its tokens and accumulating the propagated errors.
        """
        gold_index = example.language.id

        for token in self.language_detector.tokenize(example.text):
            output = self.language_detector.classify_token(token, dropout=self.dropout)
            output_errors = self.build_errors(output, gold_index)

            if not self.errors_are_relevant(output_errors):
                logger.debug(f"Skipping token '{token}': errors not relevant")
                continue

            params_errors, chars_errors = self.language_detector.backward(output_errors)
            self.accumulate_errors(token, params_errors, chars_errors)

    @staticmethod
    def build_errors(output: np.ndarray, gold_index: int) -> np.ndarray:
        """The errors of a predicted output: the output minus the gold one-hot."""
        errors = np.array(output, dtype=np.float64)
        errors[gold_index] -= 1.0
        return errors

    def errors_are_relevant(self, errors: np.ndarray) -> bool:
        return bool(np.any(np.abs(errors) > self.MIN_RELEVANT_ERROR))

    def accumulate_errors(self, token: str, params_errors, chars_errors):
        """Accumulate the classifier and the input errors of a token."""
        self.params_accumulator.accumulate(params_errors)

        for char, char_errors in zip(token, chars_errors):
            self.embeddings_accumulator.accumulate(char, char_errors)

    def update(self):
        """Update all the parameters of the model with the accumulated errors."""
        if self.optimizer is None or self.embeddings_optimizer is None:
            self._init_optimizers()

        self.optimizer.update(self.params_accumulator)
        self.embeddings_optimizer.update(self.embeddings_accumulator)

    def validate_and_save_model(self, validation_set: List[Example], model_path: Optional[str] = None) -> float:
        """Validate the language detector and save its model if the accuracy is a new best."""
        logger.info(f"Epoch validation on {len(validation_set)} examples")

        accuracy = self.validation_helper.validate(validation_set)

        logger.info(f"Accuracy: {100.0 * accuracy:.2f}%")

        if accuracy > self.best_accuracy:
            self.best_accuracy = accuracy

            if model_path is not None:
                with open(model_path, 'wb') as f:
                    self.language_detector.model.dump(f)

                logger.info(f"NEW BEST ACCURACY! Model saved to \"{model_path}\"")

        return accuracy

    def _init_optimizers(self):
        model = self.language_detector.model

        self.optimizer = ParamsOptimizer(model.network, learning_rate=self.params_learning_rate)
        self.embeddings_optimizer = EmbeddingsOptimizer(model.embeddings, learning_rate=self.embeddings_learning_rate)
