"""Base provider utilities: logging, token redaction, single-shot JSON fetch."""

import asyncio
import logging
import re

import httpx

from config import LOG_LEVEL
from providers.errors import (
    ProxyError,
    UnknownUpstreamError,
    UpstreamAuthError,
    UpstreamRateLimited,
    UpstreamTimeout,
    UpstreamUnavailable,
)

# Structured logger for all providers
logger = logging.getLogger("providers")
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter('%(asctime)s [%(name)s] %(levelname)s: %(message)s'))
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

TIMEOUT_MESSAGE = "Request timeout. Please try again."

_TOKEN_PARAM = re.compile(r"(token=)[^&\s]+")


def redact(text: str, token: str | None = None) -> str:
    """Mask the access token in a URL or message before it is logged or returned."""
    text = _TOKEN_PARAM.sub(r"\1***", text)
    if token:
        text = text.replace(token, "***")
    return text


def error_for_status(status: int) -> ProxyError:
    """Translate a non-2xx provider status into the proxy error taxonomy."""
    if status == 401:
        return UpstreamAuthError("Invalid API token. Please check your TRAVELPAYOUTS_API_TOKEN.")
    if status == 429:
        return UpstreamRateLimited("Rate limit exceeded. Please try again later.")
    if status >= 500:
        return UpstreamUnavailable("Travelpayouts API is currently unavailable. Please try again later.")
    return UnknownUpstreamError(f"API responded with status {status}")


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    timeout: float,
    headers: dict | None = None,
    description: str = "provider",
    failure_message: str = "Upstream request failed",
):
    """Issue exactly one GET and return the decoded JSON body.

    ``timeout`` bounds the whole exchange, body included, not just each
    connect/read step. Never retries. Timeouts, transport errors, non-2xx
    statuses and undecodable bodies are raised as ProxyError subclasses.
    """
    logger.info(f"[{description}] GET {redact(url)}")
    try:
        resp = await asyncio.wait_for(client.get(url, headers=headers, timeout=timeout), timeout)
    except (httpx.TimeoutException, asyncio.TimeoutError) as e:
        logger.error(f"[{description}] Timed out after {timeout}s")
        raise UpstreamTimeout(TIMEOUT_MESSAGE) from e
    except httpx.RequestError as e:
        logger.error(f"[{description}] Request failed: {type(e).__name__}")
        raise UnknownUpstreamError(failure_message) from e

    if not resp.is_success:
        logger.error(f"[{description}] Provider error {resp.status_code}: {redact(resp.text[:500])}")
        raise error_for_status(resp.status_code)

    try:
        return resp.json()
    except ValueError as e:
        logger.error(f"[{description}] Provider returned invalid JSON")
        raise UnknownUpstreamError(failure_message) from e
