"""Prompt assembly: parameters, templates, image attachments and wire payloads."""

from cineprompt.core.prompting.extract import extract_prompt, extract_text
from cineprompt.core.prompting.images import (
    MAX_IMAGES,
    ImageBatch,
    ImageFailure,
    encode_image,
    encode_images,
    parse_data_uri,
)
from cineprompt.core.prompting.models import (
    CameraDirection,
    CameraStyle,
    EncodedImage,
    GeminiModel,
    GenerationOutcome,
    GenerationParameters,
    Pacing,
    PromptLength,
    SpecialEffect,
    VisualStyle,
)
from cineprompt.core.prompting.payload import (
    GenerateContentRequest,
    SamplingConfig,
    build_request_payload,
)
from cineprompt.core.prompting.template import (
    DEFAULT_PROMPT_TEMPLATE,
    PLACEHOLDERS,
    find_placeholders,
    render_template,
)

__all__ = [
    "CameraDirection",
    "CameraStyle",
    "DEFAULT_PROMPT_TEMPLATE",
    "EncodedImage",
    "GeminiModel",
    "GenerateContentRequest",
    "GenerationOutcome",
    "GenerationParameters",
    "ImageBatch",
    "ImageFailure",
    "MAX_IMAGES",
    "PLACEHOLDERS",
    "Pacing",
    "PromptLength",
    "SamplingConfig",
    "SpecialEffect",
    "VisualStyle",
    "build_request_payload",
    "encode_image",
    "encode_images",
    "extract_prompt",
    "extract_text",
    "find_placeholders",
    "parse_data_uri",
    "render_template",
]
