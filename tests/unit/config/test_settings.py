"""Tests for the user settings store."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import SecretStr, ValidationError
import pytest

from cineprompt.core.config.settings import (
    DEFAULT_MAX_RETRIES,
    JsonSettingsStore,
    StaticSettingsProvider,
    UserSettings,
)
from cineprompt.core.errors import ConfigurationError
from cineprompt.core.prompting.template import DEFAULT_PROMPT_TEMPLATE


@pytest.fixture
def store(tmp_path: Path) -> JsonSettingsStore:
    return JsonSettingsStore(tmp_path / "settings.json")


class TestUserSettings:
    """Test suite for UserSettings."""

    def test_defaults(self):
        settings = UserSettings()
        assert settings.api_key is None
        assert not settings.has_api_key
        assert settings.max_retries == DEFAULT_MAX_RETRIES == 5
        assert settings.prompt_template == DEFAULT_PROMPT_TEMPLATE

    def test_blank_key_is_not_a_key(self):
        assert not UserSettings(api_key=SecretStr("   ")).has_api_key

    @pytest.mark.parametrize("value", [0, 11, -1])
    def test_retry_bounds(self, value):
        with pytest.raises(ValidationError):
            UserSettings(max_retries=value)

    def test_key_hidden_in_repr(self):
        settings = UserSettings(api_key=SecretStr("visible-secret"))
        assert "visible-secret" not in repr(settings)

    def test_static_provider(self):
        settings = UserSettings(max_retries=2)
        assert StaticSettingsProvider(settings).load() is settings
        assert StaticSettingsProvider().load() == UserSettings()


class TestJsonSettingsStore:
    """Test suite for JsonSettingsStore."""

    def test_missing_file_gives_defaults(self, store):
        assert store.load() == UserSettings()

    def test_set_and_load_key(self, store):
        store.set_api_key("  my-key  ")

        assert store.load().api_key.get_secret_value() == "my-key"
        assert json.loads(store.path.read_text())["api_key"] == "my-key"

    def test_empty_key_rejected(self, store):
        with pytest.raises(ConfigurationError, match="cannot be empty"):
            store.set_api_key("   ")

    def test_delete_key_keeps_other_settings(self, store):
        store.set_api_key("k")
        store.set_max_retries(7)

        store.delete_api_key()

        settings = store.load()
        assert not settings.has_api_key
        assert settings.max_retries == 7
        assert "api_key" not in json.loads(store.path.read_text())

    def test_set_max_retries_validated(self, store):
        with pytest.raises(ConfigurationError):
            store.set_max_retries(0)
        assert not store.path.exists()

    def test_template_round_trip(self, store):
        store.set_prompt_template("Just {concept}")
        assert store.load().prompt_template == "Just {concept}"

        store.reset_prompt_template()
        assert store.load().prompt_template == DEFAULT_PROMPT_TEMPLATE

    def test_clear_removes_everything(self, store):
        store.set_api_key("k")

        store.clear()

        assert not store.path.exists()
        assert store.load() == UserSettings()

    def test_clear_without_file(self, store):
        store.clear()

    def test_invalid_stored_values_fall_back(self, store):
        store.path.write_text(json.dumps({"api_key": "k", "max_retries": 99, "theme": "dark"}))

        settings = store.load()

        assert settings.api_key.get_secret_value() == "k"
        assert settings.max_retries == DEFAULT_MAX_RETRIES

    def test_unreadable_file_gives_defaults(self, store):
        store.path.write_text("{broken")

        assert store.load() == UserSettings()

    def test_fallback_key_used_when_none_stored(self, tmp_path):
        store = JsonSettingsStore(tmp_path / "s.json", fallback_api_key=SecretStr("env-key"))

        assert store.load().api_key.get_secret_value() == "env-key"

        store.set_api_key("stored-key")
        assert store.load().api_key.get_secret_value() == "stored-key"

    def test_fallback_key_not_persisted(self, tmp_path):
        store = JsonSettingsStore(tmp_path / "s.json", fallback_api_key=SecretStr("env-key"))

        store.set_max_retries(3)

        assert "api_key" not in json.loads(store.path.read_text())
