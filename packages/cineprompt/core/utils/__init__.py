"""Shared utilities for CinePrompt."""

from cineprompt.core.utils.json import read_json, write_json
from cineprompt.core.utils.logging import configure_logging

__all__ = [
    "configure_logging",
    "read_json",
    "write_json",
]
