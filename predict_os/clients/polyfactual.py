"""Polyfactual research API client."""

from __future__ import annotations

import logging

import httpx

from .models import Citation
from .utils import bearer, request_json, safe_float
from ..errors import ExternalApiError, ValidationError

logger = logging.getLogger(__name__)

POLYFACTUAL_API_URL = "https://api.polyfactual.com/v1/research"
MAX_QUERY_LENGTH = 1000
TIMEOUT = 300.0  # research runs can take minutes


class PolyfactualClient:

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str | None,
        timeout: float = TIMEOUT,
    ):
        if not api_key:
            raise ValidationError("POLYFACTUAL_API_KEY not set")
        self._client = client
        self._api_key = api_key
        self.timeout = timeout

    async def research(self, query: str) -> tuple[str, list[Citation]]:
        """
        Run a research query.

        Returns:
            (answer, citations)
        """
        if not query:
            raise ValidationError("Query is required")
        if len(query) > MAX_QUERY_LENGTH:
            raise ValidationError(
                f"Query exceeds maximum length of {MAX_QUERY_LENGTH} characters"
            )

        logger.info("Making Polyfactual research request: %s", query)
        data = await request_json(
            self._client,
            "POST",
            POLYFACTUAL_API_URL,
            service="Polyfactual API",
            timeout=self.timeout,
            json={"query": query},
            headers=bearer(self._api_key),
        )

        try:
            answer = data["answer"]
            if not isinstance(answer, str):
                raise TypeError("answer is not a string")
            citations = [
                Citation(
                    source=c["source"],
                    url=c.get("url"),
                    relevance=safe_float(c.get("relevance")) or 0.0,
                )
                for c in data.get("citations", [])
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise ExternalApiError(f"Failed to parse Polyfactual response: {e}") from e

        return answer, citations
