"""Prompt template rendering.

Templates are user-editable text with ``{placeholder}`` tokens. Rendering is
a single-pass global substitution: every occurrence of a recognised
placeholder is replaced, unrecognised ``{tokens}`` are left untouched, and
substituted text is never re-scanned.
"""

from __future__ import annotations

from enum import Enum
import re
from typing import Any

from cineprompt.core.prompting.models import GenerationParameters

DEFAULT_PROMPT_TEMPLATE = """Your task is to generate a compelling and descriptive video prompt.
You will receive a set of input parameters. Your goal is to synthesize these parameters into a rich, narrative video prompt string.
The generated prompt should creatively weave together the 'Concept' with the specified 'Style', 'Camera Style', 'Camera Direction', 'Pacing', and 'Special Effects'. The 'CFG Scale' will determine how strictly you adhere to the details within the 'Concept'.
If 'Custom Elements' are provided, integrate them naturally into the scene description.
The 'Desired Prompt Length' (Short, Medium, Long) should guide the level of detail and overall length of the generated prompt string.

### HANDLING THE CFG SCALE:
The CFG (Classifier Free Guidance) scale dictates how closely you must adhere to the *details* mentioned in the 'Concept' field.
**Crucially, the fundamental subject of the 'Concept' (e.g., 'a cat on a roof') MUST ALWAYS be the core of the generated prompt, regardless of the CFG scale value. The CFG scale only modulates the level of descriptive detail.**
- **Low CFG (0 - 0.3):** Focus only on the main subject of the 'Concept'. Be more general and less specific about the fine details (like specific colors, textures, or secondary actions) mentioned in the 'Concept' string. The other parameters (Style, Pacing, etc.) should still be woven in, but the central description will be less granular.
- **Medium CFG (0.4 - 0.7):** This is the default behavior. Interpret the 'Concept' in a balanced way. Include the key details from the 'Concept' while allowing for some creative interpretation to ensure a natural and logical scene.
- **High CFG (0.8 - 1.0):** Adhere very strictly to the 'Concept'. Ensure every detail, adjective, and specific element mentioned in the 'Concept' field is explicitly and accurately represented in the generated prompt string. Be as literal as possible with the concept description.

### IMPORTANT RULES:
- Use vivid and evocative language suitable for guiding a video generation model.
- Do NOT explicitly mention the parameter names (e.g., do not write "Style: Cinematic" or "CFG Scale: 0.9"). Instead, describe how that parameter manifests in the scene.
- If a parameter value is "None" or "Default", generally omit explicit mention of that aspect in the prompt, or describe it in a way that implies a standard/natural approach.
- The input parameter 'model' (e.g., "google/gemini-flash-1.5") is for contextual information and MUST NOT be included or mentioned in the output prompt string.
- Aim for a narrative or descriptive flow that paints a clear picture.
- The output MUST be a JSON object with a single key "prompt" containing the generated video prompt string.

---
### Input Parameters:
- Concept: "{concept}"
- Style: "{style}"
- Camera Style: "{cameraStyle}"
- Camera Direction: "{cameraDirection}"
- Pacing: "{pacing}"
- Special Effects: "{specialEffects}"
- Custom Elements: "{customElements}" (This might be an empty string or not provided)
- Desired Prompt Length: "{promptLength}"
- **CFG Scale: "{cfgScale}" (Range: 0.0 to 1.0)**
- Model: "{model}" (IGNORE THIS in the output prompt)
- Additional context may be provided by accompanying images (though not directly passed as a parameter here, keep in mind that visual descriptions are key).

### Example of how to think about integration:
Instead of: "A futuristic city at dusk. Style is Simple. Camera is Gimbal smoothness. Pacing is Slow burn. Effects are holographic."
Aim for: "A futuristic city glows softly at dusk, captured with smooth gimbal movements and a slow burn pacing, enhanced by a subtle holographic overlays."

### Return the result as a JSON object.
Example Output Format:
{
  "prompt": "A detailed and engaging video prompt string describing the scene based on the integrated parameters..."
}"""

# Placeholder name -> GenerationParameters attribute
PLACEHOLDERS: dict[str, str] = {
    "concept": "concept",
    "style": "style",
    "cameraStyle": "camera_style",
    "cameraDirection": "camera_direction",
    "pacing": "pacing",
    "specialEffects": "special_effects",
    "customElements": "custom_elements",
    "promptLength": "prompt_length",
    "cfgScale": "cfg_scale",
    "model": "model",
}

_PLACEHOLDER_RE = re.compile(r"\{(" + "|".join(re.escape(name) for name in PLACEHOLDERS) + r")\}")


def format_number(value: float) -> str:
    """Shortest round-trip decimal form, without a trailing ``.0``.

    Example:
        >>> format_number(0.7), format_number(1.0), format_number(1.5)
        ('0.7', '1', '1.5')
    """
    text = repr(float(value))
    if text.endswith(".0"):
        text = text[:-2]
    return text


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, int | float):
        return format_number(value)
    return str(value)


def placeholder_values(params: GenerationParameters) -> dict[str, str]:
    """Map every placeholder name to its substitution text."""
    return {name: _as_text(getattr(params, attr)) for name, attr in PLACEHOLDERS.items()}


def render_template(template: str, params: GenerationParameters) -> str:
    """Substitute all recognised placeholders in ``template``.

    Args:
        template: Prompt template text
        params: Values to substitute

    Returns:
        Rendered instruction text. Templates without placeholders are
        returned unchanged.
    """
    values = placeholder_values(params)
    return _PLACEHOLDER_RE.sub(lambda m: values[m.group(1)], template)


def find_placeholders(template: str) -> set[str]:
    """Return the recognised placeholder names present in ``template``."""
    return {m.group(1) for m in _PLACEHOLDER_RE.finditer(template)}
