"""User settings: API key, retry budget and the editable prompt template.

Generation reads settings once at call start through a
:class:`SettingsProvider`. :class:`JsonSettingsStore` persists them as a
small key-value JSON file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError

from cineprompt.core.errors import ConfigurationError
from cineprompt.core.prompting.template import DEFAULT_PROMPT_TEMPLATE
from cineprompt.core.utils.json import read_json, write_json

logger = logging.getLogger(__name__)

MIN_RETRIES = 1
MAX_RETRIES = 10
DEFAULT_MAX_RETRIES = 5


class UserSettings(BaseModel):
    """Settings owned by the user, read at the start of each generation."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    api_key: SecretStr | None = None
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=MIN_RETRIES, le=MAX_RETRIES)
    prompt_template: str = DEFAULT_PROMPT_TEMPLATE

    @property
    def has_api_key(self) -> bool:
        return self.api_key is not None and bool(self.api_key.get_secret_value().strip())


class SettingsProvider(Protocol):
    """Anything that can supply the current user settings."""

    def load(self) -> UserSettings: ...


class StaticSettingsProvider:
    """Provider returning a fixed settings object."""

    def __init__(self, settings: UserSettings | None = None) -> None:
        self._settings = settings or UserSettings()

    def load(self) -> UserSettings:
        return self._settings


class JsonSettingsStore:
    """Key-value JSON file holding user settings.

    Unknown keys are ignored and invalid values fall back to their defaults,
    so a hand-edited file never blocks generation.

    Args:
        path: Settings file location
        fallback_api_key: Key used when none is stored (e.g. from the environment)
    """

    def __init__(self, path: str | Path, *, fallback_api_key: SecretStr | None = None) -> None:
        self.path = Path(path).expanduser()
        self._fallback_api_key = fallback_api_key

    def _read_raw(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            return read_json(self.path)
        except ValueError as e:
            logger.warning(f"Ignoring unreadable settings file {self.path}: {e}")
            return {}

    def _stored(self) -> UserSettings:
        raw = self._read_raw()
        try:
            return UserSettings.model_validate(raw)
        except ValidationError as e:
            bad = {str(err["loc"][0]) for err in e.errors() if err["loc"]}
            logger.warning(f"Resetting invalid settings to defaults: {sorted(bad)}")
            return UserSettings.model_validate({k: v for k, v in raw.items() if k not in bad})

    def load(self) -> UserSettings:
        """Return stored settings, using the fallback key if none is stored."""
        settings = self._stored()
        if not settings.has_api_key and self._fallback_api_key is not None:
            settings = settings.model_copy(update={"api_key": self._fallback_api_key})
        return settings

    def save(self, settings: UserSettings) -> None:
        data: dict[str, Any] = {
            "max_retries": settings.max_retries,
            "prompt_template": settings.prompt_template,
        }
        if settings.has_api_key:
            data["api_key"] = settings.api_key.get_secret_value()  # type: ignore[union-attr]
        write_json(self.path, data)
        logger.debug(f"Saved settings to {self.path}")

    def _update(self, **changes: Any) -> UserSettings:
        current = self._stored()
        try:
            updated = UserSettings.model_validate({**current.model_dump(), **changes})
        except ValidationError as e:
            raise ConfigurationError(str(e.errors()[0]["msg"])) from e
        self.save(updated)
        return updated

    def set_api_key(self, api_key: str) -> None:
        api_key = api_key.strip()
        if not api_key:
            raise ConfigurationError("API key cannot be empty")
        self._update(api_key=SecretStr(api_key))
        logger.info("API key saved")

    def delete_api_key(self) -> None:
        self._update(api_key=None)
        logger.info("API key deleted")

    def set_max_retries(self, max_retries: int) -> None:
        self._update(max_retries=max_retries)

    def set_prompt_template(self, template: str) -> None:
        self._update(prompt_template=template)

    def reset_prompt_template(self) -> None:
        self._update(prompt_template=DEFAULT_PROMPT_TEMPLATE)

    def clear(self) -> None:
        """Remove every stored setting."""
        self.path.unlink(missing_ok=True)
        logger.info(f"Cleared settings at {self.path}")
