"""Async HTTP client wrapper built on HTTPX.

Provides:
- Structured error handling (status code -> error class)
- Request/response logging with header and query-credential redaction
- JSON decoding with DecodeError

Each ``request()`` performs exactly one attempt; retrying is the job of
:class:`cineprompt.core.api.http.retry.RetryController`.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
import time
from typing import Any

import httpx

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
from cineprompt.core.api.http.logging_utils import RequestLogContext, log_request, log_response
from cineprompt.core.api.http.utils import get_request_id, join_url, redact_url, safe_snippet

ErrorMessageFn = Callable[[httpx.Response], str]


def _merge_headers(base: Mapping[str, str], extra: Mapping[str, str] | None) -> dict[str, str]:
    """Merge base headers with request-specific headers."""
    out = dict(base)
    if extra:
        out.update(extra)
    return out


def _merge_params(base: Mapping[str, str], extra: Mapping[str, Any] | None) -> dict[str, str]:
    """Merge base params with request-specific params."""
    out = dict(base)
    if extra:
        out.update({k: str(v) for k, v in extra.items()})
    return out


def _default_request_id() -> str:
    """Generate simple timestamp-based request ID."""
    return f"req_{int(time.time() * 1000)}"


def _is_json_response(resp: httpx.Response) -> bool:
    """Check if response content-type indicates JSON."""
    ctype = resp.headers.get("content-type", "")
    return "application/json" in ctype or "+json" in ctype


def _default_error_message(resp: httpx.Response) -> str:
    return f"HTTP error response ({resp.status_code} {resp.reason_phrase})".strip()


def categorize_http_error(status_code: int) -> type[ApiError]:
    """Map HTTP status code to appropriate error class.

    429 and every status >= 500 map to retryable classes.
    """
    if status_code in (401, 403):
        return AuthError
    if status_code == 429:
        return RateLimitError
    if 400 <= status_code < 500:
        return ClientError
    if status_code >= 500:
        return ServerError
    return UnexpectedStatusError


class AsyncApiClient:
    """Asynchronous HTTP API client.

    Built on httpx.AsyncClient with structured errors and observability.

    Args:
        config: Client configuration
        transport: Optional custom transport (useful for testing)
        error_message: Builds the human-readable message for non-2xx responses

    Example:
        >>> config = HttpClientConfig(base_url="https://api.example.com")
        >>> async with AsyncApiClient(config) as client:
        ...     resp = await client.post("/v1/things", json_body={"a": 1})
        ...     data = client.json(resp)
    """

    def __init__(
        self,
        config: HttpClientConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        error_message: ErrorMessageFn | None = None,
    ) -> None:
        self.config = config
        self._error_message = error_message or _default_error_message
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            headers={"User-Agent": config.user_agent, **config.headers},
            params=config.params,
            timeout=config.timeout,
            limits=config.limits,
            follow_redirects=config.follow_redirects,
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client and release resources."""
        await self._client.aclose()

    async def __aenter__(self) -> AsyncApiClient:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        """Async context manager exit."""
        await self.aclose()

    def _build_api_error(
        self,
        *,
        exc_type: type[ApiError],
        message: str,
        method: str,
        url: str,
        status_code: int | None = None,
        response: httpx.Response | None = None,
        request_id: str | None = None,
        cause: BaseException | None = None,
    ) -> ApiError:
        headers: dict[str, str] | None = None
        snippet: str | None = None
        if response is not None:
            headers = dict(response.headers)
            snippet = safe_snippet(response.content or b"", self.config.max_response_body_for_error)
            request_id = request_id or get_request_id(response.headers)

        return exc_type(
            message=message,
            method=method,
            url=redact_url(url, self.config.redact_params),
            status_code=status_code,
            request_id=request_id,
            response_headers=headers,
            response_body_snippet=snippet,
            cause=cause,
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        json_body: Any = None,
    ) -> httpx.Response:
        """Send one request and map failures to ApiError subclasses.

        Raises:
            NetworkError: Connection-level failure
            TimeoutError: Request timed out
            ApiError: Non-2xx status (class chosen by categorize_http_error)
        """
        method_u = method.upper()
        url = join_url(str(self._client.base_url), path)
        req_id = headers.get("X-Request-Id") if headers else None
        req_id = req_id or _default_request_id()

        merged_headers = _merge_headers(self._client.headers, headers)
        merged_headers.setdefault("X-Request-Id", req_id)
        merged_params = _merge_params(self._client.params, params)

        ctx = RequestLogContext(
            method=method_u,
            url=redact_url(httpx.URL(url, params=merged_params), self.config.redact_params),
            request_id=req_id,
        )
        start = log_request(ctx, merged_headers, self.config.redact_headers)

        try:
            resp = await self._client.request(
                method_u,
                url,
                params=merged_params,
                headers=merged_headers,
                json=json_body,
                timeout=self.config.timeout,
            )
        except httpx.TimeoutException as e:
            raise self._build_api_error(
                exc_type=TimeoutError,
                message="Request timed out",
                method=method_u,
                url=url,
                request_id=req_id,
                cause=e,
            ) from e
        except httpx.RequestError as e:
            raise self._build_api_error(
                exc_type=NetworkError,
                message=f"Network error while sending request: {e.__class__.__name__}",
                method=method_u,
                url=url,
                request_id=req_id,
                cause=e,
            ) from e

        log_response(ctx, resp.status_code, time.perf_counter() - start)

        if resp.status_code >= 400:
            raise self._build_api_error(
                exc_type=categorize_http_error(resp.status_code),
                message=self._error_message(resp),
                method=method_u,
                url=url,
                status_code=resp.status_code,
                response=resp,
                request_id=req_id,
            )
        return resp

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        """Perform async POST request.

        Args:
            path: Request path (relative to base_url)
            **kwargs: Additional arguments passed to request()

        Returns:
            HTTP response

        Raises:
            ApiError: On request failure
        """
        return await self.request("POST", path, **kwargs)

    def json(self, response: httpx.Response) -> Any:
        """Decode JSON response with structured error handling.

        Args:
            response: HTTP response to decode

        Returns:
            Decoded JSON data (dict, list, etc.)

        Raises:
            DecodeError: If response is not JSON or parsing fails
        """
        if response.status_code == 204 or not response.content:
            return None
        if not _is_json_response(response):
            raise self._build_api_error(
                exc_type=DecodeError,
                message="Response is not JSON (content-type mismatch)",
                method=response.request.method,
                url=str(response.request.url),
                status_code=response.status_code,
                response=response,
            )
        try:
            return response.json()
        except ValueError as e:
            raise self._build_api_error(
                exc_type=DecodeError,
                message="Failed to parse JSON response",
                method=response.request.method,
                url=str(response.request.url),
                status_code=response.status_code,
                response=response,
                cause=e,
            ) from e
