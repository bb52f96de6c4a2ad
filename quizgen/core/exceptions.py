"""
Custom exceptions for quizgen.

Only ConfigurationMissingError, MalformedRequestError and
ExtractionExhaustedError leave the structured extractor. ValidationFailure
is attempt-local and is turned into feedback for the next attempt.
"""

from typing import Optional


class QuizGenException(Exception):
    """Base exception for all quizgen errors."""
    pass


class ConfigurationMissingError(QuizGenException):
    """Raised when a required LLM backend credential or setting is absent."""

    def __init__(self, message: str, setting: Optional[str] = None):
        self.setting = setting
        super().__init__(message)


class MalformedRequestError(QuizGenException):
    """Raised when the output shape or prompt batch is structurally invalid."""
    pass


class ValidationFailure(QuizGenException):
    """Raised inside a single extraction attempt; consumes one retry."""

    def __init__(self, message: str, raw_text: Optional[str] = None):
        self.raw_text = raw_text
        super().__init__(message)


class ExtractionExhaustedError(QuizGenException):
    """Raised when every extraction attempt failed validation."""

    def __init__(self, message: str, last_error: str = "", attempts: int = 0):
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(message)


class StorageError(QuizGenException):
    """Raised when the game store cannot read or write."""
    pass


class PromptTemplateError(QuizGenException):
    """Raised when prompt template loading or formatting fails."""
    pass
