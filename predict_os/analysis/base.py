"""
Analysis provider interface and verdict parsing.

Providers only return raw JSON text; turning that text into an
``AnalysisVerdict`` is owned by ``parse_verdict`` so every provider is held
to the same schema.
"""

from __future__ import annotations

import json
from typing import Protocol

import pydantic

from ..clients.models import AnalysisVerdict, ProviderName
from ..errors import ExternalApiError


class AnalysisProvider(Protocol):
    """An LLM completion endpoint that answers with strict JSON."""

    name: str

    async def complete(self, prompt: str) -> str:
        """Return the raw JSON text of the model's answer."""
        ...


def parse_verdict(raw: str, provider: str = "AI") -> AnalysisVerdict:
    """
    Parse a provider's JSON answer into an AnalysisVerdict.

    Expected shape::

        {
          "recommendation": "BUY_YES" | "BUY_NO" | "NO_TRADE",
          "confidence": 0.0-1.0,
          "reasoning": "...",
          "key_factors": ["...", ...]
        }

    Raises:
        ExternalApiError: the text is not valid JSON or violates the schema
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise ExternalApiError(f"Failed to parse {provider} analysis JSON: {e}") from e

    if not isinstance(data, dict):
        raise ExternalApiError(f"Failed to parse {provider} analysis JSON: expected an object")

    rec = data.get("recommendation")
    if isinstance(rec, str):
        data["recommendation"] = rec.strip().upper().replace(" ", "_").replace("-", "_")

    try:
        return AnalysisVerdict.model_validate(data)
    except pydantic.ValidationError as e:
        raise ExternalApiError(
            f"Failed to parse {provider} analysis JSON: {e.error_count()} invalid field(s)",
            detail=str(e),
        ) from e
