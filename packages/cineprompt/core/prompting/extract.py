"""Tolerant extraction of the generated prompt from a response body."""

from __future__ import annotations

import json
import logging
from typing import Any

from cineprompt.core.errors import EmptyResponseError, InvalidResponseError

logger = logging.getLogger(__name__)

INVALID_STRUCTURE_MESSAGE = "Invalid response structure from API"
EMPTY_RESPONSE_MESSAGE = "Empty response from API"


def _first(value: Any) -> Any:
    if isinstance(value, list) and value:
        return value[0]
    return None


def extract_text(body: Any) -> str:
    """Return ``candidates[0].content.parts[0].text``.

    Raises:
        InvalidResponseError: If any step of the path is missing
        EmptyResponseError: If the text is empty or whitespace only
    """
    candidate = _first(body.get("candidates")) if isinstance(body, dict) else None
    content = candidate.get("content") if isinstance(candidate, dict) else None
    part = _first(content.get("parts")) if isinstance(content, dict) else None
    if not isinstance(part, dict):
        raise InvalidResponseError(INVALID_STRUCTURE_MESSAGE)

    text = part.get("text")
    if not isinstance(text, str) or not text.strip():
        raise EmptyResponseError(EMPTY_RESPONSE_MESSAGE)
    return text


def extract_prompt(body: Any) -> str:
    """Extract the generated prompt.

    Prefers the ``prompt`` field of a JSON-encoded text, falling back to the
    raw text. Either way the result is trimmed.

    Raises:
        InvalidResponseError: Response lacks the expected structure
        EmptyResponseError: Response text is empty
    """
    text = extract_text(body)
    try:
        parsed = json.loads(text)
    except (ValueError, RecursionError):
        return text.strip()

    prompt = parsed.get("prompt") if isinstance(parsed, dict) else None
    if isinstance(prompt, str) and prompt.strip():
        return prompt.strip()

    logger.debug("Response JSON has no usable 'prompt' field, using raw text")
    return text.strip()
