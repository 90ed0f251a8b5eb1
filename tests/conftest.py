"""Shared pytest fixtures for cineprompt tests."""

from __future__ import annotations

from collections.abc import Callable
import json
from pathlib import Path
from typing import Any

import httpx
from pydantic import SecretStr
import pytest

from cineprompt.core.api.gemini.client import GeminiClient
from cineprompt.core.config.settings import StaticSettingsProvider, UserSettings
from cineprompt.core.generation.service import PromptGenerationService
from cineprompt.core.prompting.models import GenerationParameters

Handler = Callable[[httpx.Request], httpx.Response]

TEST_API_KEY = "AIzaSyTestKey0123456789abcdefghijklmnopq"


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


# ============================================================================
# Response helpers
# ============================================================================


def gemini_body(text: Any) -> dict[str, Any]:
    """Build a generateContent success body whose first part holds ``text``."""
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def json_response(status: int, body: Any) -> httpx.Response:
    return httpx.Response(status, json=body, headers={"content-type": "application/json"})


def prompt_response(prompt: str) -> httpx.Response:
    return json_response(200, gemini_body(json.dumps({"prompt": prompt})))


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def params() -> GenerationParameters:
    """Typical parameter set."""
    return GenerationParameters(
        concept="A cat on a roof",
        style="cinematic",
        camera_style="drone",
        camera_direction="orbital",
        pacing="slow-burn",
        special_effects="lens-flare",
        custom_elements="falling snow",
        prompt_length="long",
        cfg_scale=0.9,
    )


@pytest.fixture
def settings() -> UserSettings:
    return UserSettings(api_key=SecretStr(TEST_API_KEY), max_retries=3)


class SleepRecorder:
    """Async sleep stand-in that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def sleep() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def make_service(
    settings: UserSettings, sleep: SleepRecorder
) -> Callable[..., PromptGenerationService]:
    """Factory building a service whose network boundary is ``handler``."""

    def _make(
        handler: Handler, user_settings: UserSettings | None = None
    ) -> PromptGenerationService:
        transport = httpx.MockTransport(handler)
        return PromptGenerationService(
            StaticSettingsProvider(user_settings or settings),
            client_factory=lambda key: GeminiClient(key, transport=transport),
            sleep=sleep,
        )

    return _make


@pytest.fixture
def png_bytes() -> bytes:
    """A tiny valid PNG image."""
    from io import BytesIO

    from PIL import Image

    buf = BytesIO()
    Image.new("RGB", (2, 2), color=(255, 0, 0)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_file(tmp_path: Path, png_bytes: bytes) -> Path:
    path = tmp_path / "frame.png"
    path.write_bytes(png_bytes)
    return path
