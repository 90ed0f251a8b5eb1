"""Log sanitization for CinePrompt."""

from .sanitize import sanitize_dict, sanitize_string, sanitize_value

__all__ = [
    "sanitize_string",
    "sanitize_dict",
    "sanitize_value",
]
