"""Request-fulfilment pipeline: render, attach, submit with retries, extract."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
import logging

from cineprompt.core.api.gemini.client import GeminiClient
from cineprompt.core.api.http.retry import RetryController, RetryPolicy, SleepFn
from cineprompt.core.config.models import GeminiApiConfig, GenerationConfig
from cineprompt.core.config.settings import SettingsProvider, UserSettings
from cineprompt.core.errors import (
    ConfigurationError,
    ParameterValidationError,
    RetryExhaustedError,
)
from cineprompt.core.prompting.extract import extract_prompt
from cineprompt.core.prompting.images import ImageSource, encode_images
from cineprompt.core.prompting.models import EncodedImage, GenerationOutcome, GenerationParameters
from cineprompt.core.prompting.payload import (
    GenerateContentRequest,
    SamplingConfig,
    build_request_payload,
)
from cineprompt.core.prompting.template import render_template

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], GeminiClient]

MISSING_API_KEY_MESSAGE = "API key is required. Add your Gemini API key in settings."
MISSING_CONCEPT_MESSAGE = "Please enter a concept first"
SUPERSEDED_MESSAGE = "Superseded by a newer request"


class PromptGenerationService:
    """Turns generation parameters into a video prompt via the Gemini API.

    Settings are read once per call. The request body is built once and
    reused unchanged for every attempt. ``generate`` never raises for
    expected failures; it resolves to a :class:`GenerationOutcome`.

    Args:
        settings: Source of API key, retry budget and prompt template
        config: Generation limits and fixed sampling settings
        api: Remote API settings used by the default client factory
        client_factory: Builds a client for an API key (injectable for tests)
        sleep: Backoff sleep (injectable for tests)
    """

    def __init__(
        self,
        settings: SettingsProvider,
        config: GenerationConfig | None = None,
        *,
        api: GeminiApiConfig | None = None,
        client_factory: ClientFactory | None = None,
        sleep: SleepFn | None = None,
    ) -> None:
        self._settings = settings
        self.config = config or GenerationConfig()
        api = api or GeminiApiConfig()
        self._client_factory = client_factory or (
            lambda key: GeminiClient(key, base_url=api.base_url, timeout_s=api.timeout_s)
        )
        self._sleep = sleep

    def validate(self, params: GenerationParameters) -> None:
        """Check parameters before any network activity.

        Raises:
            ParameterValidationError: Empty concept, cfg scale out of range or
                too many attachments
        """
        if not params.concept.strip():
            raise ParameterValidationError(MISSING_CONCEPT_MESSAGE)
        low, high = self.config.cfg_scale_min, self.config.cfg_scale_max
        if not low <= params.cfg_scale <= high:
            raise ParameterValidationError(
                f"CFG scale must be between {low:g} and {high:g}, got {params.cfg_scale:g}"
            )
        if len(params.images) > self.config.image_limit:
            raise ParameterValidationError(
                f"At most {self.config.image_limit} images are allowed, got {len(params.images)}"
            )

    def _retry_policy(self, settings: UserSettings) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=settings.max_retries,
            base_delay_s=self.config.backoff_base_s,
            max_delay_s=self.config.backoff_max_s,
            respect_retry_after=self.config.respect_retry_after,
        )

    def _sampling(self) -> SamplingConfig:
        return SamplingConfig(
            temperature=self.config.temperature,
            top_k=self.config.top_k,
            top_p=self.config.top_p,
            max_output_tokens=self.config.max_output_tokens,
        )

    async def _attachments(
        self, params: GenerationParameters, sources: Sequence[ImageSource]
    ) -> list[EncodedImage]:
        attachments = list(params.images)
        if sources:
            remaining = max(0, self.config.image_limit - len(attachments))
            batch = await encode_images(sources, limit=remaining)
            attachments.extend(batch.images)
        return attachments

    def build_request(
        self, params: GenerationParameters, template: str, images: Sequence[EncodedImage]
    ) -> GenerateContentRequest:
        """Render the template and compose the request body."""
        rendered = render_template(template, params)
        return build_request_payload(rendered, images, self._sampling())

    async def generate(
        self, params: GenerationParameters, image_sources: Sequence[ImageSource] = ()
    ) -> GenerationOutcome:
        """Generate a video prompt.

        Args:
            params: Creative parameters (may already carry encoded images)
            image_sources: Extra raw images to encode and attach

        Returns:
            Outcome with the prompt, or the failure message and attempt count
        """
        settings = self._settings.load()
        try:
            if not settings.has_api_key:
                raise ConfigurationError(MISSING_API_KEY_MESSAGE)
            self.validate(params)
        except (ConfigurationError, ParameterValidationError) as e:
            logger.warning(f"Generation rejected before submission: {e.message}")
            return GenerationOutcome.failure(e.message)

        images = await self._attachments(params, image_sources)
        request = self.build_request(params, settings.prompt_template, images)
        controller = RetryController(self._retry_policy(settings), sleep=self._sleep)
        api_key = settings.api_key.get_secret_value()  # type: ignore[union-attr]

        logger.info(
            f"Generating prompt with {params.model_name} "
            f"({len(images)} image(s), up to {settings.max_retries} attempt(s))"
        )
        async with self._client_factory(api_key) as client:

            async def attempt() -> str:
                body = await client.generate_content(params.model_name, request)
                return extract_prompt(body)

            try:
                prompt = await controller.execute(attempt)
            except RetryExhaustedError as e:
                logger.error(f"Error generating prompt: {e.message}")
                return GenerationOutcome.failure(e.message, attempts=e.attempts)

        attempts = controller.last_state.attempt if controller.last_state else 1
        if attempts > 1:
            logger.info(f"Video prompt generated successfully after {attempts} attempts")
        else:
            logger.info("Video prompt generated successfully")
        return GenerationOutcome.success(prompt, attempts=attempts)


class GenerationSession:
    """Runs generations so that a newer request supersedes an older one.

    Submitting while a previous generation is still in flight cancels it;
    the superseded caller receives an outcome with ``SUPERSEDED_MESSAGE``.
    """

    def __init__(self, service: PromptGenerationService) -> None:
        self.service = service
        self._inflight: asyncio.Task[GenerationOutcome] | None = None

    @property
    def busy(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    async def submit(
        self, params: GenerationParameters, image_sources: Sequence[ImageSource] = ()
    ) -> GenerationOutcome:
        previous = self._inflight
        if previous is not None and not previous.done():
            logger.info("Cancelling in-flight generation superseded by a new request")
            previous.cancel()

        task = asyncio.create_task(self.service.generate(params, image_sources))
        self._inflight = task
        try:
            return await task
        except asyncio.CancelledError:
            # Only convert cancellations caused by a newer submit.
            if self._inflight is not task and task.cancelled():
                return GenerationOutcome.failure(SUPERSEDED_MESSAGE)
            raise
        finally:
            if self._inflight is task and task.done():
                self._inflight = None
