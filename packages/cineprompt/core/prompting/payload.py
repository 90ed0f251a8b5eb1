"""Wire models for the ``generateContent`` request body."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from cineprompt.core.prompting.models import EncodedImage


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class InlineData(_WireModel):
    mime_type: str
    data: str


class Part(_WireModel):
    """One request part: either inline image data or text."""

    inline_data: InlineData | None = None
    text: str | None = None


class Content(_WireModel):
    parts: list[Part]


class SamplingConfig(_WireModel):
    """Fixed sampling settings sent as ``generationConfig``."""

    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    top_k: int = Field(default=40, gt=0)
    top_p: float = Field(default=0.95, gt=0.0, le=1.0)
    max_output_tokens: int = Field(default=1024, gt=0)


class GenerateContentRequest(_WireModel):
    contents: list[Content]
    generation_config: SamplingConfig = Field(default_factory=SamplingConfig)

    @property
    def parts(self) -> list[Part]:
        return self.contents[0].parts

    def to_wire(self) -> dict[str, Any]:
        """Serialise to the JSON envelope with camelCase keys."""
        return self.model_dump(by_alias=True, exclude_none=True)


def build_request_payload(
    rendered_text: str,
    images: Sequence[EncodedImage] = (),
    sampling: SamplingConfig | None = None,
) -> GenerateContentRequest:
    """Compose the request: image parts first, then exactly one text part.

    Args:
        rendered_text: Rendered instruction text
        images: Attachments, in the order they should appear
        sampling: Sampling settings (defaults to the fixed built-in values)

    Returns:
        Request envelope ready for ``to_wire()``
    """
    parts = [
        Part(inline_data=InlineData(mime_type=img.mime_type, data=img.data)) for img in images
    ]
    parts.append(Part(text=rendered_text))
    return GenerateContentRequest(
        contents=[Content(parts=parts)],
        generation_config=sampling or SamplingConfig(),
    )
