"""Client for the Gemini ``generateContent`` endpoint."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from cineprompt.core.api.http.client import AsyncApiClient
from cineprompt.core.api.http.config import HttpClientConfig
from cineprompt.core.prompting.payload import GenerateContentRequest

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"
API_VERSION = "v1beta"


def gemini_error_message(response: httpx.Response) -> str:
    """Prefer ``error.message`` from the body, else a status-derived message.

    An unparseable or unexpected body never raises.
    """
    try:
        data = response.json()
    except ValueError:
        data = None
    error = data.get("error") if isinstance(data, dict) else None
    message = error.get("message") if isinstance(error, dict) else None
    if isinstance(message, str) and message.strip():
        return message
    return f"API Error: {response.status_code} {response.reason_phrase}".rstrip()


class GeminiClient:
    """Issues one ``generateContent`` call per ``generate_content()``.

    The API key travels as the ``key`` query parameter and is redacted from
    logs and error messages by the underlying HTTP client.

    Args:
        api_key: Gemini API key
        base_url: API root
        timeout_s: Per-request timeout in seconds
        transport: Optional custom transport (useful for testing)
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout_s: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        config = HttpClientConfig(
            base_url=base_url,
            timeout=httpx.Timeout(timeout_s, connect=min(10.0, timeout_s)),
            headers={"Content-Type": "application/json"},
        )
        self._http = AsyncApiClient(config, transport=transport, error_message=gemini_error_message)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> GeminiClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def generate_content(self, model: str, request: GenerateContentRequest) -> Any:
        """POST the request and return the decoded JSON body.

        Raises:
            ApiError: Transport failure, non-2xx status or undecodable body
        """
        path = f"/{API_VERSION}/models/{model}:generateContent"
        logger.debug("Calling %s with %d part(s)", path, len(request.parts))
        resp = await self._http.post(
            path, params={"key": self._api_key}, json_body=request.to_wire()
        )
        return self._http.json(resp)
