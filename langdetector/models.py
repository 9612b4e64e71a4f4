"""
Token classifier model: a character-level attention network over trainable embeddings.
"""
import logging
from typing import BinaryIO, Dict, Iterable, List, Optional, Protocol, Tuple

import numpy as np
import torch
import torch.nn as nn
import torch.nn.functional as F

from .exceptions import DataCorruptionError, InvalidConfigurationError, InvalidInputError
from .utils import SUPPORTED_LANGUAGES

logger = logging.getLogger(__name__)


class TokenClassifier(Protocol):
    """
    Classifies a single token into a distribution over the supported languages.

    backward() propagates the errors of the last classified token and returns the
    errors of the parameters and of the input chars.
    """

    def forward(self, token: str, dropout: float = 0.0) -> np.ndarray:
        ...

    def backward(self, errors: np.ndarray) -> Tuple[Dict[str, np.ndarray], List[np.ndarray]]:
        ...


class CharEmbeddings(nn.Module):
    """Map chars to trainable vectors. The vector at index 0 is used for unknown chars."""

    UNKNOWN_INDEX = 0

    def __init__(self, size: int):
        super(CharEmbeddings, self).__init__()

        self.size = size
        self.char_to_idx: Dict[str, int] = {}
        self.weight = nn.Parameter(self._random_vectors(1))

    def __len__(self) -> int:
        return len(self.char_to_idx)

    def __contains__(self, char: str) -> bool:
        return char in self.char_to_idx

    @property
    def chars(self) -> List[str]:
        """The registered chars, ordered by index."""
        return sorted(self.char_to_idx, key=self.char_to_idx.get)

    def add(self, char: str) -> int:
        """Register a new char with a random vector, returning its index."""
        self.add_all([char])
        return self.char_to_idx[char]

    def add_all(self, chars: Iterable[str]) -> int:
        """Register the new chars among the given ones, growing the vectors table once."""
        new_chars = []
        for char in chars:
            if char not in self.char_to_idx:
                self.char_to_idx[char] = self.weight.shape[0] + len(new_chars)
                new_chars.append(char)

        if new_chars:
            self.weight = nn.Parameter(torch.cat([self.weight.data, self._random_vectors(len(new_chars))], dim=0))

        return len(new_chars)

    def get_index(self, char: str) -> int:
        return self.char_to_idx.get(char, self.UNKNOWN_INDEX)

    def lookup(self, token: str) -> torch.Tensor:
        """The embeddings of the chars of a token, as a (len(token), size) tensor."""
        indices = torch.tensor([self.get_index(char) for char in token], dtype=torch.long)
        return self.weight.detach()[indices]

    def _random_vectors(self, count: int) -> torch.Tensor:
        return torch.randn(count, self.size) * 0.1


class CharAttentionNetwork(nn.Module):
    """Bidirectional recurrent encoder with attention over the chars of a token."""

    RECURRENT_LAYERS = {
        'lstm': nn.LSTM,
        'gru': nn.GRU,
        'rnn': nn.RNN,
    }

    def __init__(self, num_languages: int,
                 input_dim: int = 50,
                 attention_dim: int = 50,
                 hidden_dim: int = 150,
                 recurrent_connection: str = 'lstm'):
        super(CharAttentionNetwork, self).__init__()

        if recurrent_connection not in self.RECURRENT_LAYERS:
            raise InvalidConfigurationError(
                f"Unknown recurrent connection '{recurrent_connection}', "
                f"expected one of {sorted(self.RECURRENT_LAYERS)}",
                recurrent_connection=recurrent_connection)

        if hidden_dim < 2:
            raise InvalidConfigurationError(f"The hidden size must be at least 2: {hidden_dim}")

        encoded_dim = (hidden_dim // 2) * 2

        # BiRNN over the chars
        self.rnn = self.RECURRENT_LAYERS[recurrent_connection](
            input_dim, hidden_dim // 2, batch_first=True, bidirectional=True)

        # Attention
        self.attention_projection = nn.Linear(encoded_dim, attention_dim)
        self.context_vector = nn.Parameter(torch.randn(attention_dim) * 0.1)

        # Output projection
        self.output_projection = nn.Linear(encoded_dim, num_languages)

    def forward(self, embeddings: torch.Tensor) -> Tuple[torch.Tensor, torch.Tensor]:
        """
        Encode a batch of chars sequences.

        Args:
            embeddings: Tensor of shape (batch, chars, input_dim)

        Returns:
            The output logits (batch, num_languages) and the attention scores (batch, chars)
        """
        states, _ = self.rnn(embeddings)

        scores = torch.tanh(self.attention_projection(states)) @ self.context_vector
        importance = torch.softmax(scores, dim=-1)

        encoded = (importance.unsqueeze(-1) * states).sum(dim=1)

        return self.output_projection(encoded), importance


class LanguageDetectorModel:
    """
    The model of a LanguageDetector: hyperparameters, chars embeddings and the network.
    """

    def __init__(self,
                 embeddings_size: int = 50,
                 attention_size: int = 50,
                 hidden_size: int = 150,
                 max_token_length: int = 100,
                 recurrent_connection: str = 'lstm'):

        if max_token_length <= 0:
            raise InvalidConfigurationError(
                f"The max token length must be positive: {max_token_length}",
                max_token_length=max_token_length)

        self.embeddings_size = embeddings_size
        self.attention_size = attention_size
        self.hidden_size = hidden_size
        self.max_token_length = max_token_length
        self.recurrent_connection = recurrent_connection

        # The Unknown language is excluded
        self.supported_languages = SUPPORTED_LANGUAGES

        self.embeddings = CharEmbeddings(size=embeddings_size)
        self.network = CharAttentionNetwork(
            num_languages=len(self.supported_languages),
            input_dim=embeddings_size,
            attention_dim=attention_size,
            hidden_dim=hidden_size,
            recurrent_connection=recurrent_connection)
        self.network.eval()

    @property
    def hyperparameters(self) -> Dict[str, object]:
        return {
            'embeddings_size': self.embeddings_size,
            'attention_size': self.attention_size,
            'hidden_size': self.hidden_size,
            'max_token_length': self.max_token_length,
            'recurrent_connection': self.recurrent_connection,
        }

    def dump(self, stream: BinaryIO):
        """Serialize this model into the given binary stream."""
        torch.save({
            'hyperparameters': self.hyperparameters,
            'num_languages': len(self.supported_languages),
            'chars': self.embeddings.chars,
            'embeddings': self.embeddings.weight.detach().clone(),
            'network': self.network.state_dict(),
        }, stream)

    @classmethod
    def load(cls, stream: BinaryIO) -> 'LanguageDetectorModel':
        """Read a serialized model from the given binary stream."""
        try:
            payload = torch.load(stream, map_location='cpu')
        except Exception as e:
            raise DataCorruptionError(f"Cannot decode the language detector model: {e}") from e

        try:
            if payload['num_languages'] != len(SUPPORTED_LANGUAGES):
                raise DataCorruptionError(
                    f"The model supports {payload['num_languages']} languages, "
                    f"expected {len(SUPPORTED_LANGUAGES)}")

            model = cls(**payload['hyperparameters'])

            # Index 0 is the unknown char vector
            model.embeddings.char_to_idx = {char: i + 1 for i, char in enumerate(payload['chars'])}
            model.embeddings.weight = nn.Parameter(payload['embeddings'])
            model.network.load_state_dict(payload['network'])

        except (KeyError, TypeError, RuntimeError) as e:
            raise DataCorruptionError(f"Invalid language detector model: {e}") from e

        return model

    def __str__(self) -> str:
        return "\n".join([
            f"- embeddings size: {self.embeddings_size}",
            f"- attention size: {self.attention_size}",
            f"- hidden layer size: {self.hidden_size}",
            f"- max tokens length: {self.max_token_length}",
            f"- recurrent connection type: {self.recurrent_connection}",
        ])


class TorchTokenClassifier:
    """Token classifier backed by the network of a LanguageDetectorModel."""

    def __init__(self, model: LanguageDetectorModel):
        self.model = model

        # Status of the last forward
        self._inputs: Optional[torch.Tensor] = None
        self._logits: Optional[torch.Tensor] = None
        self._importance: Optional[torch.Tensor] = None

    def forward(self, token: str, dropout: float = 0.0) -> np.ndarray:
        """Classify the language of a single token."""
        if not token:
            raise InvalidInputError("Empty chars sequence")

        self._inputs = self.model.embeddings.lookup(token).requires_grad_(True)

        inputs = F.dropout(self._inputs, p=dropout, training=True) if dropout > 0.0 else self._inputs

        logits, importance = self.model.network(inputs.unsqueeze(0))

        self._logits = logits.squeeze(0)
        self._importance = importance.squeeze(0)

        return torch.softmax(self._logits, dim=-1).detach().numpy().astype(np.float64)

    def backward(self, errors: np.ndarray) -> Tuple[Dict[str, np.ndarray], List[np.ndarray]]:
        """
        Propagate the given output errors through the last classified token.

        The errors are the gradients of the softmax input (e.g. prediction - gold one-hot).

        Returns:
            The errors of the network parameters (by name) and of each input char embedding
        """
        if self._logits is None:
            raise InvalidInputError("backward() called before forward()")

        self.model.network.zero_grad(set_to_none=True)

        self._logits.backward(torch.as_tensor(errors, dtype=self._logits.dtype))

        params_errors = {
            name: param.grad.detach().numpy().copy()
            for name, param in self.model.network.named_parameters()
            if param.grad is not None
        }
        chars_errors = [row.copy() for row in self._inputs.grad.detach().numpy()]

        self._logits = None

        return params_errors, chars_errors

    def importance_scores(self) -> Optional[np.ndarray]:
        """The attention scores of the chars of the last classified token."""
        if self._importance is None:
            return None
        return self._importance.detach().numpy().astype(np.float64)
