"""HTTPX wrapper used to reach the generative API.

Exposes a small, ergonomic surface:
- AsyncApiClient: single-attempt async client
- HttpClientConfig: configuration
- RetryPolicy / RetryController: bounded attempts with exponential backoff
- Exceptions: ApiError and subclasses
"""

from cineprompt.core.api.http.client import AsyncApiClient, categorize_http_error
from cineprompt.core.api.http.config import HttpClientConfig
from cineprompt.core.api.http.errors import (
    ApiError,
    AuthError,
    ClientError,
    DecodeError,
    NetworkError,
    RateLimitError,
    ServerError,
    TimeoutError,
    UnexpectedStatusError,
)
from cineprompt.core.api.http.retry import (
    RetryController,
    RetryPolicy,
    RetryState,
    is_retryable,
    parse_retry_after_seconds,
)

__all__ = [
    "AsyncApiClient",
    "HttpClientConfig",
    "RetryController",
    "RetryPolicy",
    "RetryState",
    "categorize_http_error",
    "is_retryable",
    "parse_retry_after_seconds",
    "ApiError",
    "NetworkError",
    "TimeoutError",
    "DecodeError",
    "RateLimitError",
    "AuthError",
    "ClientError",
    "ServerError",
    "UnexpectedStatusError",
]
