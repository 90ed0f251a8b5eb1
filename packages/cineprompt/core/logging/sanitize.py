"""Sanitization utilities for removing credentials from logs."""

import re
from typing import Any

# Sensitive patterns (regex)
SENSITIVE_PATTERNS: dict[str, re.Pattern[str]] = {
    # Google API keys: "AIza" + 35 URL-safe characters
    "google_api_key": re.compile(r"AIza[0-9A-Za-z_\-]{35}"),
    # Credentials carried in query strings, e.g. ?key=...
    "query_key": re.compile(r"(?<=[?&])(key|api_key|access_token)=[^&\s\"']+", re.IGNORECASE),
    "bearer_token": re.compile(r"Bearer\s+[A-Za-z0-9\-._~+/]+=*", re.IGNORECASE),
}

# Sensitive keys (exact match, case-insensitive)
SENSITIVE_KEYS: set[str] = {
    "api_key",
    "apikey",
    "key",
    "secret",
    "token",
    "access_token",
    "x-goog-api-key",
    "authorization",
}


def sanitize_string(text: str) -> str:
    """Sanitize sensitive data from string.

    Replaces sensitive patterns with <REDACTED:PATTERN_NAME>.

    Example:
        >>> sanitize_string("GET /v1beta/models/x?key=abc123")
        'GET /v1beta/models/x?<REDACTED:QUERY_KEY>'
    """
    for pattern_name, pattern in SENSITIVE_PATTERNS.items():
        text = pattern.sub(f"<REDACTED:{pattern_name.upper()}>", text)

    return text


def sanitize_value(value: Any) -> Any:
    """Sanitize strings, dicts and lists recursively; other values pass through."""
    if isinstance(value, str):
        return sanitize_string(value)
    if isinstance(value, dict):
        return sanitize_dict(value)
    if isinstance(value, list | tuple):
        return [sanitize_value(item) for item in value]
    return value


def sanitize_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Sanitize sensitive data from dictionary.

    Recursively processes nested dictionaries and lists.
    Replaces sensitive keys with <REDACTED>.

    Example:
        >>> sanitize_dict({"user": "alice", "api_key": "AIza-secret"})
        {'user': 'alice', 'api_key': '<REDACTED>'}
    """
    sanitized: dict[str, Any] = {}

    for key, value in data.items():
        if str(key).lower() in SENSITIVE_KEYS:
            sanitized[key] = "<REDACTED>"
        else:
            sanitized[key] = sanitize_value(value)

    return sanitized
