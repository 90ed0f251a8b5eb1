"""Generation parameter models and their choice vocabularies."""

from __future__ import annotations

from enum import Enum
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class LabeledChoice(str, Enum):
    """String enum whose members carry a display label.

    Members are declared as ``NAME = ("token", "Label")``.
    """

    def __new__(cls, value: str, label: str) -> LabeledChoice:
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj.label = label  # type: ignore[attr-defined]
        return obj

    def __str__(self) -> str:
        return self.value

    @classmethod
    def choices(cls) -> list[tuple[str, str]]:
        """Return ``(token, label)`` pairs in declaration order."""
        return [(m.value, m.label) for m in cls]  # type: ignore[attr-defined]

    @classmethod
    def coerce(cls, value: Any) -> Any:
        """Return the matching member, or the value unchanged if unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            logger.debug("Unknown %s token passed through: %r", cls.__name__, value)
            return value


class GeminiModel(LabeledChoice):
    """Remote model identifiers."""

    GEMINI_2_5_PRO = ("gemini-2.5-pro", "Gemini 2.5 Pro")
    GEMINI_2_5_FLASH = ("gemini-2.5-flash", "Gemini 2.5 Flash")
    GEMINI_2_5_FLASH_PREVIEW = ("gemini-2.5-flash-preview", "Gemini 2.5 Flash Preview 04-17")
    GEMINI_2_5_FLASH_LITE = ("gemini-2.5-flash-lite", "Gemini 2.5 Flash-Lite Preview 06-17")


class VisualStyle(LabeledChoice):
    DEFAULT = ("default", "Default")
    MINIMALIST = ("minimalist", "Minimalist")
    SIMPLE = ("simple", "Simple")
    DETAILED = ("detailed", "Detailed")
    DESCRIPTIVE = ("descriptive", "Descriptive")
    DYNAMIC = ("dynamic", "Dynamic")
    CINEMATIC = ("cinematic", "Cinematic")
    DOCUMENTARY = ("documentary", "Documentary")
    ANIMATION = ("animation", "Animation")
    ACTION = ("action", "Action")
    EXPERIMENTAL = ("experimental", "Experimental")


class CameraStyle(LabeledChoice):
    DEFAULT = ("default", "Default")
    NONE = ("none", "None")
    STEADICAM = ("steadicam", "Steadicam flow")
    DRONE = ("drone", "Drone aerials")
    HANDHELD = ("handheld", "Handheld urgency")
    CRANE = ("crane", "Crane elegance")
    DOLLY = ("dolly", "Dolly precision")
    VR = ("vr", "VR 360")
    MULTI_ANGLE = ("multi-angle", "Multi-angle rig")
    STATIC = ("static", "Static tripod")
    GIMBAL = ("gimbal", "Gimbal smoothness")


class CameraDirection(LabeledChoice):
    DEFAULT = ("default", "Default")
    NONE = ("none", "None")
    ZOOM_IN = ("zoom-in", "Zoom in")
    ZOOM_OUT = ("zoom-out", "Zoom out")
    PAN_LEFT = ("pan-left", "Pan left")
    PAN_RIGHT = ("pan-right", "Pan right")
    TILT_UP = ("tilt-up", "Tilt up")
    TILT_DOWN = ("tilt-down", "Tilt down")
    ORBITAL = ("orbital", "Orbital rotation")
    PUSH_IN = ("push-in", "Push in")
    PULL_OUT = ("pull-out", "Pull out")


class Pacing(LabeledChoice):
    DEFAULT = ("default", "Default")
    NONE = ("none", "None")
    SLOW_BURN = ("slow-burn", "Slow burn")
    RHYTHMIC = ("rhythmic", "Rhythmic pulse")
    FRANTIC = ("frantic", "Frantic energy")
    EBB_FLOW = ("ebb-flow", "Ebb and flow")
    HYPNOTIC = ("hypnotic", "Hypnotic drift")
    TIME_LAPSE = ("time-lapse", "Time-lapse rush")
    STOP_MOTION = ("stop-motion", "Stop-motion staccato")
    GRADUAL = ("gradual", "Gradual build")
    QUICK_CUT = ("quick-cut", "Quick cut rhythm")


class SpecialEffect(LabeledChoice):
    DEFAULT = ("default", "Default")
    NONE = ("none", "None")
    PRACTICAL = ("practical", "Practical effects")
    CGI = ("cgi", "CGI enhancement")
    ANALOG = ("analog", "Analog glitches")
    LIGHT_PAINTING = ("light-painting", "Light painting")
    PROJECTION = ("projection", "Projection mapping")
    NANOSECOND = ("nanosecond", "Nanosecond exposures")
    DOUBLE = ("double", "Double exposure")
    SMOKE = ("smoke", "Smoke diffusion")
    LENS_FLARE = ("lens-flare", "Lens flare artistry")


class PromptLength(LabeledChoice):
    SHORT = ("short", "Short")
    MEDIUM = ("medium", "Medium")
    LONG = ("long", "Long")
    DEFAULT = ("default", "Default")


class EncodedImage(BaseModel):
    """Base64 image attachment held for the duration of one request."""

    model_config = ConfigDict(frozen=True)

    data: str
    mime_type: str


class GenerationParameters(BaseModel):
    """User-selected creative parameters for one generation request.

    Choice fields accept either an enum member or its token. Unknown tokens
    are kept as plain strings so callers with newer vocabularies never fail.
    """

    model_config = ConfigDict(extra="ignore")

    concept: str = ""
    model: GeminiModel | str = GeminiModel.GEMINI_2_5_FLASH
    style: VisualStyle | str = VisualStyle.DEFAULT
    camera_style: CameraStyle | str = CameraStyle.DEFAULT
    camera_direction: CameraDirection | str = CameraDirection.DEFAULT
    pacing: Pacing | str = Pacing.DEFAULT
    special_effects: SpecialEffect | str = SpecialEffect.DEFAULT
    custom_elements: str | None = None
    prompt_length: PromptLength | str = PromptLength.MEDIUM
    cfg_scale: float = 0.7
    images: list[EncodedImage] = Field(default_factory=list)

    @field_validator("model", mode="before")
    @classmethod
    def _coerce_model(cls, v: Any) -> Any:
        return GeminiModel.coerce(v)

    @field_validator("style", mode="before")
    @classmethod
    def _coerce_style(cls, v: Any) -> Any:
        return VisualStyle.coerce(v)

    @field_validator("camera_style", mode="before")
    @classmethod
    def _coerce_camera_style(cls, v: Any) -> Any:
        return CameraStyle.coerce(v)

    @field_validator("camera_direction", mode="before")
    @classmethod
    def _coerce_camera_direction(cls, v: Any) -> Any:
        return CameraDirection.coerce(v)

    @field_validator("pacing", mode="before")
    @classmethod
    def _coerce_pacing(cls, v: Any) -> Any:
        return Pacing.coerce(v)

    @field_validator("special_effects", mode="before")
    @classmethod
    def _coerce_special_effects(cls, v: Any) -> Any:
        return SpecialEffect.coerce(v)

    @field_validator("prompt_length", mode="before")
    @classmethod
    def _coerce_prompt_length(cls, v: Any) -> Any:
        return PromptLength.coerce(v)

    @property
    def model_name(self) -> str:
        """Model identifier as sent in the request URL."""
        return str(self.model)


class GenerationOutcome(BaseModel):
    """Final result of one generation request.

    Attributes:
        prompt: Generated video prompt (empty on failure)
        error: Human-readable failure message, None on success
        attempts: Number of network calls issued
    """

    prompt: str = ""
    error: str | None = None
    attempts: int = 0

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, prompt: str, attempts: int) -> GenerationOutcome:
        return cls(prompt=prompt, attempts=attempts)

    @classmethod
    def failure(cls, error: str, attempts: int = 0) -> GenerationOutcome:
        return cls(prompt="", error=error, attempts=attempts)
