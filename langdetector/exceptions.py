"""
Exception hierarchy of the language detector.
"""
from typing import Any


class LanguageDetectorError(Exception):
    """Base exception for all language detector errors.

    Attributes:
        error_code: Machine-readable error identifier.
        context: Arbitrary key-value pairs providing additional error context.
    """

    def __init__(self, message: str, error_code: str = "LANGUAGE_DETECTOR_ERROR", **context: Any) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.context = context


class InvalidInputError(LanguageDetectorError):
    """An input violates a precondition (e.g. an empty token given to the classifier)."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message, error_code="INVALID_INPUT", **context)


class InvalidConfigurationError(LanguageDetectorError):
    """A configuration value is out of its domain."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message, error_code="INVALID_CONFIGURATION", **context)


class DataCorruptionError(LanguageDetectorError):
    """A corpus line, a serialized model or a serialized dictionary cannot be decoded."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message, error_code="DATA_CORRUPTION", **context)


class StatePreconditionError(LanguageDetectorError):
    """An operation is not allowed in the current state of an object."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message, error_code="STATE_PRECONDITION", **context)
