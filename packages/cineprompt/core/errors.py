"""Error taxonomy for CinePrompt.

Errors raised before any network activity (configuration, parameter
validation) are never retried. Errors raised by the HTTP layer and the
response extractor are classified as retryable or terminal by the
:class:`RetryableError` marker.
"""

from __future__ import annotations


class CinePromptError(Exception):
    """Base exception for all CinePrompt errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class RetryableError(CinePromptError):
    """Marker base for failures eligible for another attempt."""


class ConfigurationError(CinePromptError):
    """Required configuration is missing (e.g. no API key)."""


class ParameterValidationError(CinePromptError):
    """Generation parameters are unusable (e.g. empty concept)."""


class ImageEncodingError(CinePromptError):
    """A single image source could not be read or decoded."""


class ResponseExtractionError(CinePromptError):
    """Successful HTTP response whose body carries no usable text."""


class InvalidResponseError(ResponseExtractionError):
    """Expected candidates[0].content.parts[0].text path is missing."""


class EmptyResponseError(ResponseExtractionError):
    """Extracted text is empty or whitespace only."""


class RetryExhaustedError(CinePromptError):
    """Attempt loop ended without success.

    Attributes:
        attempts: Number of calls issued
        last_error: Error raised by the final attempt
    """

    def __init__(self, attempts: int, last_error: BaseException) -> None:
        self.attempts = attempts
        self.last_error = last_error
        detail = getattr(last_error, "message", None) or str(last_error) or "Unknown error"
        plural = "attempt" if attempts == 1 else "attempts"
        super().__init__(f"Failed after {attempts} {plural}: {detail}")
