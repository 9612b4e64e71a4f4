"""
Gradient accumulators and optimizers of the language detector model.

Errors are accumulated during a batch and applied to the model with a single
optimizer step at the batch boundary.
"""
from typing import Dict

import numpy as np
import torch
import torch.nn as nn

from .models import CharEmbeddings


class ParamsErrorsAccumulator:
    """Accumulate the errors of the network parameters."""

    def __init__(self):
        self.errors: Dict[str, np.ndarray] = {}
        self.count = 0

    def __len__(self) -> int:
        return self.count

    def accumulate(self, params_errors: Dict[str, np.ndarray]):
        for name, errors in params_errors.items():
            if name in self.errors:
                self.errors[name] += errors
            else:
                self.errors[name] = np.array(errors, dtype=np.float64)

        self.count += 1

    def get_averaged_errors(self) -> Dict[str, np.ndarray]:
        if self.count == 0:
            return {}
        return {name: errors / self.count for name, errors in self.errors.items()}

    def clear(self):
        self.errors = {}
        self.count = 0


class EmbeddingsErrorsAccumulator:
    """Accumulate the errors of the chars embeddings, keyed by char."""

    def __init__(self):
        self.errors: Dict[str, np.ndarray] = {}
        self.counts: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self.errors)

    def accumulate(self, char: str, errors: np.ndarray):
        if char in self.errors:
            self.errors[char] += errors
            self.counts[char] += 1
        else:
            self.errors[char] = np.array(errors, dtype=np.float64)
            self.counts[char] = 1

    def get_averaged_errors(self) -> Dict[str, np.ndarray]:
        return {char: errors / self.counts[char] for char, errors in self.errors.items()}

    def clear(self):
        self.errors = {}
        self.counts = {}


class ParamsOptimizer:
    """Update the network parameters with the accumulated errors (Adam)."""

    def __init__(self, network: nn.Module, learning_rate: float = 0.001):
        self.network = network
        self.optimizer = torch.optim.Adam(network.parameters(), lr=learning_rate)

    def update(self, accumulator: ParamsErrorsAccumulator):
        if len(accumulator) == 0:
            return

        averaged_errors = accumulator.get_averaged_errors()

        for name, param in self.network.named_parameters():
            if name in averaged_errors:
                param.grad = torch.as_tensor(averaged_errors[name], dtype=param.dtype)
            else:
                param.grad = None

        self.optimizer.step()
        self.optimizer.zero_grad(set_to_none=True)

        accumulator.clear()


class EmbeddingsOptimizer:
    """Update the chars embeddings with the accumulated errors (AdaGrad)."""

    def __init__(self, embeddings: CharEmbeddings, learning_rate: float = 0.1):
        self.embeddings = embeddings
        self.optimizer = torch.optim.Adagrad([embeddings.weight], lr=learning_rate)

    def update(self, accumulator: EmbeddingsErrorsAccumulator):
        if len(accumulator) == 0:
            return

        grad = torch.zeros_like(self.embeddings.weight)

        for char, errors in accumulator.get_averaged_errors().items():
            grad[self.embeddings.get_index(char)] += torch.as_tensor(errors, dtype=grad.dtype)

        self.embeddings.weight.grad = grad

        self.optimizer.step()
        self.optimizer.zero_grad(set_to_none=True)

        accumulator.clear()
