"""Shared HTTP helpers for the API clients."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import httpx

from ..errors import ExternalApiError, NotFoundError, RateLimitError, UpstreamTimeoutError

logger = logging.getLogger(__name__)

API_TIMEOUT = 30.0


def safe_json(val: Any) -> list:
    """Parse a JSON-encoded string, or return as-is if already a list."""
    if isinstance(val, list):
        return val
    if isinstance(val, str):
        try:
            return json.loads(val)
        except (json.JSONDecodeError, TypeError):
            return []
    return []


def safe_float(val: Any) -> Optional[float]:
    """Coerce numbers and numeric strings to float, anything else to None."""
    if val is None or isinstance(val, bool):
        return None
    try:
        return float(val)
    except (TypeError, ValueError):
        return None


def bearer(api_key: str | None) -> dict[str, str]:
    """Authorization header for an optional bearer token."""
    return {"Authorization": f"Bearer {api_key}"} if api_key else {}


async def request_json(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    service: str,
    timeout: float = API_TIMEOUT,
    not_found: str | None = None,
    **kwargs: Any,
) -> Any:
    """
    Issue a request and return parsed JSON, mapping failures to PredictOS errors.

    Args:
        client: Shared async HTTP client
        method: HTTP method
        url: Absolute URL
        service: Upstream name used in error messages ("Gamma API", …)
        timeout: Per-call timeout in seconds
        not_found: If set, a 404 raises NotFoundError with this message

    Raises:
        UpstreamTimeoutError: the call exceeded ``timeout``
        NotFoundError: 404 and ``not_found`` was given
        RateLimitError: 429
        ExternalApiError: network failure, other non-2xx status, or bad JSON
    """
    logger.debug("%s %s", method, url)
    try:
        resp = await client.request(method, url, timeout=timeout, **kwargs)
    except httpx.TimeoutException as e:
        raise UpstreamTimeoutError(f"{service} request timed out after {timeout:g}s") from e
    except httpx.HTTPError as e:
        raise ExternalApiError(f"{service} request failed: {e}") from e

    if resp.status_code == 404 and not_found:
        raise NotFoundError(not_found)
    if resp.status_code == 429:
        raise RateLimitError(f"{service} rate limit exceeded")
    if not resp.is_success:
        error_text = resp.text or "Unknown error"
        raise ExternalApiError(f"{service} returned {resp.status_code}: {error_text}")

    try:
        return resp.json()
    except ValueError as e:
        raise ExternalApiError(f"Failed to parse {service} response: {e}") from e
