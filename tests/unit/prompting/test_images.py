"""Tests for reference image encoding."""

from __future__ import annotations

import base64
import io
from pathlib import Path

from PIL import Image
import pytest

from cineprompt.core.errors import ImageEncodingError
from cineprompt.core.prompting.images import (
    MAX_IMAGES,
    encode_bytes,
    encode_image,
    encode_images,
    parse_data_uri,
    sniff_mime_type,
)

# ============================================================================
# Data URIs
# ============================================================================


def test_parse_data_uri_keeps_payload_only() -> None:
    image = parse_data_uri("data:image/png;base64,iVBORw0KGgo=")

    assert image.mime_type == "image/png"
    assert image.data == "iVBORw0KGgo="


@pytest.mark.parametrize(
    "uri",
    [
        "image/png;base64,AAAA",
        "data:image/png,AAAA",
        "data:image/png;base64,",
        "data:image/png;base64,not*base64!",
    ],
)
def test_parse_data_uri_rejects_malformed(uri: str) -> None:
    with pytest.raises(ImageEncodingError):
        parse_data_uri(uri)


# ============================================================================
# Single sources
# ============================================================================


def test_sniff_mime_type_from_content(png_bytes: bytes) -> None:
    assert sniff_mime_type(png_bytes, "misleading.jpg") == "image/png"


def test_sniff_mime_type_falls_back_to_filename() -> None:
    assert sniff_mime_type(b"not an image", "photo.jpg") == "image/jpeg"
    assert sniff_mime_type(b"not an image") == "application/octet-stream"


def test_encode_bytes_rejects_empty() -> None:
    with pytest.raises(ImageEncodingError, match="empty"):
        encode_bytes(b"")


@pytest.mark.anyio
async def test_encode_path(png_file: Path, png_bytes: bytes) -> None:
    image = await encode_image(png_file)

    assert image.mime_type == "image/png"
    assert base64.b64decode(image.data) == png_bytes


@pytest.mark.anyio
async def test_encode_binary_handle(png_bytes: bytes) -> None:
    image = await encode_image(io.BytesIO(png_bytes))

    assert image.mime_type == "image/png"
    assert base64.b64decode(image.data) == png_bytes


@pytest.mark.anyio
async def test_encode_text_handle_rejected() -> None:
    with pytest.raises(ImageEncodingError, match="binary mode"):
        await encode_image(io.StringIO("plain text"))


@pytest.mark.anyio
async def test_encode_missing_file(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        await encode_image(tmp_path / "nope.png")


# ============================================================================
# Batches
# ============================================================================


@pytest.mark.anyio
async def test_batch_keeps_input_order(png_file: Path) -> None:
    sources = [
        "data:image/gif;base64,R0lGODlh",
        png_file,
        "data:image/webp;base64,UklGRg==",
    ]

    batch = await encode_images(sources)

    assert [img.mime_type for img in batch.images] == ["image/gif", "image/png", "image/webp"]
    assert batch.failures == []
    assert batch.truncated == 0


@pytest.mark.anyio
async def test_batch_caps_at_limit(png_bytes: bytes) -> None:
    uris = [f"data:image/png;base64,{base64.b64encode(bytes([i])).decode()}" for i in range(12)]

    batch = await encode_images([png_bytes, *uris])

    assert len(batch.images) == MAX_IMAGES
    assert batch.truncated == 3
    assert base64.b64decode(batch.images[0].data) == png_bytes
    assert batch.images[-1].data == base64.b64encode(bytes([8])).decode()


@pytest.mark.anyio
async def test_batch_skips_failures(tmp_path: Path, png_file: Path) -> None:
    missing = tmp_path / "missing.png"

    batch = await encode_images([missing, png_file, "data:broken"], limit=5)

    assert len(batch.images) == 1
    assert [f.index for f in batch.failures] == [0, 2]
    assert batch.failures[0].source == str(missing)


@pytest.mark.anyio
async def test_failures_do_not_consume_limit(png_bytes: bytes) -> None:
    batch = await encode_images([b"", png_bytes, png_bytes], limit=2)

    assert len(batch.images) == 2
    assert batch.truncated == 0
    assert len(batch.failures) == 1


@pytest.mark.anyio
async def test_empty_batch() -> None:
    batch = await encode_images([])

    assert batch.images == []
    assert batch.failures == []


@pytest.mark.anyio
async def test_oversized_image_does_not_abort_batch(
    monkeypatch: pytest.MonkeyPatch, png_bytes: bytes, png_file: Path
) -> None:
    """Images above Pillow's pixel limit are kept with a name-derived MIME type."""
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1)

    batch = await encode_images([png_bytes, png_file])

    assert batch.failures == []
    assert [img.mime_type for img in batch.images] == ["application/octet-stream", "image/png"]
    assert base64.b64decode(batch.images[1].data) == png_bytes
