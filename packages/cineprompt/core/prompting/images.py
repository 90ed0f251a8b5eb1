"""Reference image encoding.

Turns user-supplied images (paths, raw bytes, binary file handles or
``data:`` URIs) into base64 attachments. Sources are encoded concurrently,
results are kept by input position, and at most ``limit`` successful
encodings are returned.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
from collections.abc import Iterable
import io
import logging
import mimetypes
from pathlib import Path
from typing import BinaryIO

import aiofiles  # type: ignore[import-untyped]
from PIL import Image, UnidentifiedImageError
from pydantic import BaseModel, Field

from cineprompt.core.errors import ImageEncodingError
from cineprompt.core.prompting.models import EncodedImage

logger = logging.getLogger(__name__)

MAX_IMAGES = 10
DEFAULT_MIME_TYPE = "application/octet-stream"

ImageSource = str | Path | bytes | bytearray | BinaryIO


class ImageFailure(BaseModel):
    """A source that could not be encoded."""

    index: int
    source: str
    message: str


class ImageBatch(BaseModel):
    """Result of encoding a batch of image sources.

    Attributes:
        images: Encoded attachments in input order (at most the batch limit)
        failures: Sources that were dropped, with the reason
        truncated: Number of successful encodings dropped by the limit
    """

    images: list[EncodedImage] = Field(default_factory=list)
    failures: list[ImageFailure] = Field(default_factory=list)
    truncated: int = 0


def parse_data_uri(uri: str) -> EncodedImage:
    """Split a ``data:<mime>;base64,<payload>`` URI into an attachment.

    Only the payload after the first comma is kept.

    Raises:
        ImageEncodingError: If the URI is malformed, not base64, or the
            payload does not decode
    """
    header, sep, payload = uri.partition(",")
    if not sep or not header.startswith("data:"):
        raise ImageEncodingError("Not a data URI")
    meta = header[len("data:") :].split(";")
    if "base64" not in meta[1:]:
        raise ImageEncodingError("Data URI is not base64-encoded")
    payload = payload.strip()
    if not payload:
        raise ImageEncodingError("Data URI has an empty payload")
    try:
        base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ImageEncodingError(f"Invalid base64 payload: {e}") from e
    return EncodedImage(data=payload, mime_type=meta[0] or DEFAULT_MIME_TYPE)


def sniff_mime_type(data: bytes, filename: str | None = None) -> str:
    """Detect the MIME type from image bytes, then from the file name.

    Images above Pillow's pixel limit are not opened; their type comes from
    the file name.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = img.format
    except Image.DecompressionBombError:
        logger.debug("Image exceeds the pixel limit, guessing MIME type from %r", filename)
        fmt = None
    except (UnidentifiedImageError, OSError):
        fmt = None
    if fmt and fmt in Image.MIME:
        return Image.MIME[fmt]
    if filename:
        guessed, _ = mimetypes.guess_type(filename)
        if guessed:
            return guessed
    return DEFAULT_MIME_TYPE


def encode_bytes(
    data: bytes, *, filename: str | None = None, mime_type: str | None = None
) -> EncodedImage:
    """Base64-encode raw image bytes."""
    if not data:
        raise ImageEncodingError("Image is empty")
    return EncodedImage(
        data=base64.b64encode(data).decode("ascii"),
        mime_type=mime_type or sniff_mime_type(data, filename),
    )


def _describe(source: ImageSource) -> str:
    if isinstance(source, bytes | bytearray):
        return f"<{len(source)} bytes>"
    if isinstance(source, str) and source.startswith("data:"):
        return source[:32] + ("..." if len(source) > 32 else "")
    if isinstance(source, str | Path):
        return str(source)
    return str(getattr(source, "name", type(source).__name__))


async def encode_image(source: ImageSource) -> EncodedImage:
    """Encode a single image source.

    Raises:
        ImageEncodingError: Unsupported source or undecodable content
        OSError: File could not be read
    """
    if isinstance(source, str) and source.startswith("data:"):
        return parse_data_uri(source)
    if isinstance(source, bytes | bytearray):
        return encode_bytes(bytes(source))
    if isinstance(source, str | Path):
        async with aiofiles.open(source, "rb") as f:
            data = await f.read()
        return encode_bytes(data, filename=str(source))
    if hasattr(source, "read"):
        data = await asyncio.to_thread(source.read)
        if isinstance(data, str):
            if data.startswith("data:"):
                return parse_data_uri(data)
            raise ImageEncodingError("File handle must be opened in binary mode")
        name = getattr(source, "name", None)
        return encode_bytes(data, filename=name if isinstance(name, str) else None)
    raise ImageEncodingError(f"Unsupported image source: {type(source).__name__}")


async def _encode_at(index: int, source: ImageSource) -> EncodedImage | ImageFailure:
    try:
        return await encode_image(source)
    except (ImageEncodingError, OSError) as e:
        message = e.message if isinstance(e, ImageEncodingError) else str(e)
        logger.warning("Skipping image %d (%s): %s", index, _describe(source), message)
        return ImageFailure(index=index, source=_describe(source), message=message)


async def encode_images(sources: Iterable[ImageSource], limit: int = MAX_IMAGES) -> ImageBatch:
    """Encode image sources concurrently.

    Results are ordered by input position regardless of completion order;
    the first ``limit`` successful encodings are kept.

    Args:
        sources: Image sources
        limit: Maximum number of attachments to return

    Returns:
        ImageBatch with images, failures and the count dropped by the limit
    """
    items = list(sources)
    if not items:
        return ImageBatch()

    results = await asyncio.gather(*(_encode_at(i, s) for i, s in enumerate(items)))

    batch = ImageBatch()
    for result in results:
        if isinstance(result, ImageFailure):
            batch.failures.append(result)
        elif len(batch.images) < limit:
            batch.images.append(result)
        else:
            batch.truncated += 1

    if batch.truncated:
        logger.info("Image limit %d reached, dropped %d image(s)", limit, batch.truncated)
    logger.debug(
        "Encoded %d image(s), %d failure(s)", len(batch.images), len(batch.failures)
    )
    return batch
