"""Debug-level request/response log records for AsyncApiClient.

Records carry structured extras (method, url, request_id, headers or
status_code and elapsed_ms) so StructuredJSONFormatter can emit them as
fields. URLs arrive already stripped of query credentials; header values
named in the client config are masked here.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import logging
import time

from pydantic import BaseModel

logger = logging.getLogger("cineprompt.core.api.http")

MASK = "***"


class RequestLogContext(BaseModel):
    """Fields shared by the request record and its matching response record."""

    method: str
    url: str
    request_id: str | None = None

    def extras(self, **fields: object) -> dict[str, object]:
        return {"method": self.method, "url": self.url, "request_id": self.request_id, **fields}


def mask_headers(headers: Mapping[str, str], names: Iterable[str]) -> dict[str, str]:
    """Copy ``headers`` with the values of ``names`` (any case) masked."""
    hidden = {n.lower() for n in names}
    return {k: MASK if k.lower() in hidden else v for k, v in headers.items()}


def log_request(
    ctx: RequestLogContext, headers: Mapping[str, str], redact: Iterable[str]
) -> float:
    """Emit the outgoing-request record and return the perf_counter start time."""
    logger.debug("HTTP request", extra=ctx.extras(headers=mask_headers(headers, redact)))
    return time.perf_counter()


def log_response(ctx: RequestLogContext, status_code: int, elapsed_s: float) -> None:
    logger.debug(
        "HTTP response",
        extra=ctx.extras(status_code=status_code, elapsed_ms=round(elapsed_s * 1000)),
    )
