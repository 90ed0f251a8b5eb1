from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
import logging
import random
from typing import TypeVar

from pydantic import BaseModel, Field, field_validator

from cineprompt.core.api.http.errors import ApiError
from cineprompt.core.errors import RetryableError, RetryExhaustedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]


class RetryPolicy(BaseModel):
    """Retry policy for generation requests.

    Controls exponential backoff between attempts. The defaults reproduce
    the classic 1s, 2s, 4s... schedule with no jitter.

    Args:
        max_attempts: Maximum number of attempts (including initial request)
        base_delay_s: Base delay in seconds for exponential backoff
        max_delay_s: Maximum delay in seconds (caps exponential growth)
        jitter: Jitter as fraction of delay (0.15 = ±15% randomization)
        respect_retry_after: Use the Retry-After header of 429/5xx responses
            instead of the computed delay when the server sends one
    """

    model_config = {"frozen": True}

    max_attempts: int = Field(default=5, ge=1)
    base_delay_s: float = Field(default=1.0, ge=0.0)
    max_delay_s: float = Field(default=60.0, ge=0.0)
    jitter: float = Field(default=0.0, ge=0.0, le=1.0)
    respect_retry_after: bool = False

    @field_validator("max_delay_s")
    @classmethod
    def validate_max_delay(cls, v: float, info) -> float:
        """Ensure max_delay_s >= base_delay_s."""
        base = info.data.get("base_delay_s", 1.0)
        if v < base:
            raise ValueError("max_delay_s must be >= base_delay_s")
        return v

    def compute_delay(self, attempt: int) -> float:
        """Compute retry delay with exponential backoff and optional jitter.

        Args:
            attempt: Attempt number that just failed (1-indexed)

        Returns:
            Delay in seconds before the next attempt
        """
        delay: float = min(self.max_delay_s, self.base_delay_s * (2 ** (attempt - 1)))
        if self.jitter > 0:
            spread: float = delay * self.jitter
            jitter_value: float = random.uniform(-spread, spread)
            delay = max(0.0, delay + jitter_value)
        return delay


def parse_retry_after_seconds(value: str | None) -> float | None:
    """Parse Retry-After header value to seconds.

    Handles numeric seconds format only (not HTTP-date format).

    Args:
        value: Retry-After header value

    Returns:
        Seconds to wait, or None if invalid or not provided
    """
    if not value:
        return None
    v = value.strip()
    try:
        seconds = float(v)
        if seconds < 0:
            return None
        return seconds
    except ValueError:
        return None


def is_retryable(error: BaseException) -> bool:
    """Return True for transport errors, HTTP 429 and HTTP 5xx."""
    return isinstance(error, RetryableError)


class RetryState(BaseModel):
    """Per-call attempt bookkeeping."""

    model_config = {"arbitrary_types_allowed": True}

    attempt: int = Field(default=1, ge=1)
    last_error: BaseException | None = Field(default=None, repr=False)


class RetryController:
    """Drives up to ``policy.max_attempts`` sequential attempts of one call.

    The call is a zero-argument coroutine factory; it is invoked once per
    attempt and never rebuilt between attempts. Retryable failures are
    followed by an exponential backoff sleep, terminal failures end the
    loop immediately.

    Args:
        policy: Attempt budget and backoff schedule
        sleep: Awaitable sleep used between attempts (injectable for tests)

    Example:
        >>> controller = RetryController(RetryPolicy(max_attempts=3))
        >>> body = await controller.execute(lambda: client.generate_content(model, payload))
    """

    def __init__(self, policy: RetryPolicy | None = None, *, sleep: SleepFn | None = None) -> None:
        self.policy = policy or RetryPolicy()
        self._sleep = sleep or asyncio.sleep
        self.last_state: RetryState | None = None

    def _delay_for(self, error: BaseException, attempt: int) -> float:
        if self.policy.respect_retry_after and isinstance(error, ApiError):
            headers = error.response_headers or {}
            retry_after = parse_retry_after_seconds(
                headers.get("retry-after") or headers.get("Retry-After")
            )
            if retry_after is not None:
                return min(retry_after, self.policy.max_delay_s)
        return self.policy.compute_delay(attempt)

    async def execute(self, call: Callable[[], Awaitable[T]]) -> T:
        """Run ``call`` until it succeeds, fails terminally, or the budget runs out.

        Args:
            call: Coroutine factory performing exactly one attempt

        Returns:
            Value returned by the first successful attempt

        Raises:
            RetryExhaustedError: On a terminal failure or after the last
                retryable failure; ``attempts`` holds the number of calls made
                and the original error is chained as ``__cause__``
        """
        state = RetryState()
        self.last_state = state

        while True:
            logger.debug(
                "Attempt %d/%d starting", state.attempt, self.policy.max_attempts
            )
            try:
                return await call()
            except Exception as e:
                state.last_error = e

                if not is_retryable(e):
                    logger.info("Attempt %d failed with terminal error: %s", state.attempt, e)
                    raise RetryExhaustedError(state.attempt, e) from e

                if state.attempt >= self.policy.max_attempts:
                    logger.error(
                        "Giving up after %d attempts: %s", state.attempt, e
                    )
                    raise RetryExhaustedError(state.attempt, e) from e

                delay = self._delay_for(e, state.attempt)
                logger.warning(
                    "Attempt %d/%d failed (%s), retrying in %.2fs",
                    state.attempt,
                    self.policy.max_attempts,
                    e,
                    delay,
                )
                await self._sleep(delay)
                state.attempt += 1
