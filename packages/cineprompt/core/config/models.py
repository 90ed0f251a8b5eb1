"""Application configuration models."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, SecretStr, model_validator

from cineprompt.core.api.gemini.client import DEFAULT_BASE_URL


class GeminiApiConfig(BaseModel):
    """Remote API settings."""

    model_config = ConfigDict(extra="ignore")

    base_url: str = Field(default=DEFAULT_BASE_URL, description="Generative Language API root")
    timeout_s: float = Field(default=60.0, gt=0, description="Per-request timeout")
    api_key: SecretStr | None = Field(
        default=None,
        description="Fallback API key when none is stored in user settings (env: GEMINI_API_KEY)",
    )


class GenerationConfig(BaseModel):
    """Limits and fixed request settings for generation."""

    model_config = ConfigDict(extra="ignore")

    image_limit: int = Field(default=10, ge=0, description="Maximum attachments per request")
    cfg_scale_min: float = Field(default=0.0, description="Lowest accepted cfg scale")
    cfg_scale_max: float = Field(default=2.0, description="Highest accepted cfg scale")

    backoff_base_s: float = Field(default=1.0, ge=0.0, description="Delay after first failure")
    backoff_max_s: float = Field(default=60.0, ge=0.0, description="Backoff delay cap")
    respect_retry_after: bool = Field(
        default=False, description="Honour Retry-After headers on 429/5xx responses"
    )

    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    top_k: int = Field(default=40, gt=0)
    top_p: float = Field(default=0.95, gt=0.0, le=1.0)
    max_output_tokens: int = Field(default=1024, gt=0)

    @model_validator(mode="after")
    def _check_ranges(self) -> GenerationConfig:
        if self.cfg_scale_min > self.cfg_scale_max:
            raise ValueError("cfg_scale_min must be <= cfg_scale_max")
        if self.backoff_max_s < self.backoff_base_s:
            raise ValueError("backoff_max_s must be >= backoff_base_s")
        return self


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = False
    filename: str | None = None


class AppConfig(BaseModel):
    """Application-level configuration."""

    model_config = ConfigDict(extra="ignore")

    settings_path: str = Field(
        default="~/.cineprompt/settings.json", description="User settings store location"
    )
    api: GeminiApiConfig = GeminiApiConfig()
    generation: GenerationConfig = GenerationConfig()
    logging: LoggingConfig = LoggingConfig()

    @classmethod
    def default_path(cls) -> Path:
        """Default path for application config."""
        return Path("cineprompt.yaml")

    def resolved_settings_path(self) -> Path:
        return Path(self.settings_path).expanduser()
