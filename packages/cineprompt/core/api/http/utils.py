"""Utility functions for HTTP client operations."""

from __future__ import annotations

from collections.abc import Mapping
from urllib.parse import urljoin

import httpx


def join_url(base_url: str, path: str) -> str:
    """Join base URL with path in a predictable way.

    Ensures base URL ends with '/' and strips leading '/' from path.

    Args:
        base_url: Base URL (e.g. "https://api.example.com")
        path: Request path (e.g. "/v1/users" or "v1/users")

    Returns:
        Joined URL (e.g. "https://api.example.com/v1/users")
    """
    base = base_url if base_url.endswith("/") else base_url + "/"
    return urljoin(base, path.lstrip("/"))


def redact_url(url: str | httpx.URL, redact_params: tuple[str, ...]) -> str:
    """Replace sensitive query parameter values with ``***``.

    Args:
        url: URL to redact
        redact_params: Query parameter names to redact (case-insensitive)

    Returns:
        URL string safe for logs and error messages
    """
    parsed = httpx.URL(str(url))
    if not parsed.query:
        return str(parsed)
    red = {p.lower() for p in redact_params}
    query = "&".join(
        f"{k}={'***' if k.lower() in red else v}" for k, v in parsed.params.multi_items()
    )
    base = str(parsed).split("?", 1)[0]
    return f"{base}?{query}"


def safe_snippet(content: bytes, limit: int) -> str:
    """Extract safe text snippet from response content for logging.

    Truncates content and decodes as UTF-8 with replacement for invalid bytes.

    Args:
        content: Response body bytes
        limit: Maximum number of bytes to include

    Returns:
        Truncated, decoded text snippet
    """
    if not content:
        return ""
    return content[:limit].decode("utf-8", errors="replace")


def get_request_id(headers: Mapping[str, str]) -> str | None:
    """Extract request ID from common tracing headers.

    Checks for: x-request-id, x-correlation-id, request-id, trace-id (case-insensitive).

    Args:
        headers: Response headers

    Returns:
        Request ID if found, None otherwise
    """
    for key in ("x-request-id", "x-correlation-id", "request-id", "trace-id"):
        for hk, hv in headers.items():
            if hk.lower() == key:
                return hv
    return None
