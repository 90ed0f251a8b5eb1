"""Tests for GeminiClient."""

from __future__ import annotations

import json

import httpx
import pytest

from cineprompt.core.api.gemini.client import GeminiClient, gemini_error_message
from cineprompt.core.api.http.errors import AuthError, DecodeError, ServerError
from cineprompt.core.prompting.payload import build_request_payload
from tests.conftest import gemini_body, json_response


@pytest.mark.anyio
async def test_generate_content_posts_wire_body() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return json_response(200, gemini_body("hello"))

    request = build_request_payload("Describe a sunset")
    async with GeminiClient("k-123", transport=httpx.MockTransport(handler)) as client:
        body = await client.generate_content("gemini-2.5-flash", request)

    assert body == gemini_body("hello")
    sent = seen[0]
    assert str(sent.url) == (
        "https://generativelanguage.googleapis.com/v1beta/models/"
        "gemini-2.5-flash:generateContent?key=k-123"
    )
    assert sent.headers["content-type"] == "application/json"
    assert json.loads(sent.content) == request.to_wire()


@pytest.mark.anyio
async def test_custom_base_url() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return json_response(200, gemini_body("hi"))

    client = GeminiClient(
        "k", base_url="http://localhost:8080", transport=httpx.MockTransport(handler)
    )
    async with client:
        await client.generate_content("m", build_request_payload("x"))

    assert seen[0].url.host == "localhost"
    assert seen[0].url.path == "/v1beta/models/m:generateContent"


@pytest.mark.anyio
async def test_error_message_from_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return json_response(
            403, {"error": {"code": 403, "message": "Permission denied", "status": "DENIED"}}
        )

    async with GeminiClient("k-123", transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(AuthError) as exc_info:
            await client.generate_content("m", build_request_payload("x"))

    assert exc_info.value.message == "Permission denied"
    assert "k-123" not in str(exc_info.value)


@pytest.mark.anyio
async def test_non_json_success_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="oops", headers={"content-type": "text/plain"})

    async with GeminiClient("k", transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(DecodeError):
            await client.generate_content("m", build_request_payload("x"))


@pytest.mark.anyio
async def test_server_error_is_retryable_type() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>bad gateway</html>")

    async with GeminiClient("k", transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(ServerError) as exc_info:
            await client.generate_content("m", build_request_payload("x"))

    assert exc_info.value.message == "API Error: 502 Bad Gateway"


@pytest.mark.parametrize(
    "body",
    [
        {"error": {"message": ""}},
        {"error": "flat string"},
        {"message": "top-level"},
        ["list"],
    ],
)
def test_error_message_falls_back_to_status(body) -> None:
    resp = httpx.Response(500, json=body)

    assert gemini_error_message(resp) == "API Error: 500 Internal Server Error"


def test_error_message_unparseable_body() -> None:
    resp = httpx.Response(503, content=b"<html>unavailable</html>")

    assert gemini_error_message(resp) == "API Error: 503 Service Unavailable"
