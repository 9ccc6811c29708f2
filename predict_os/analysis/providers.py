"""
Chat-completion analysis providers.

Grok and OpenAI expose the same chat-completions wire format; each provider
is a ``ChatCompletionProvider`` configured from a ``ProviderSpec`` looked up
by ``ProviderName`` in ``create_provider``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

import httpx

from .base import AnalysisProvider, ProviderName
from ..clients.utils import bearer, request_json
from ..config import Settings
from ..errors import ExternalApiError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderSpec:
    label: str  # human-readable name for error messages
    url: str
    env_var: str
    api_key: Callable[[Settings], str | None]
    model: Callable[[Settings], str]


PROVIDERS: dict[ProviderName, ProviderSpec] = {
    ProviderName.GROK: ProviderSpec(
        label="Grok",
        url="https://api.x.ai/v1/chat/completions",
        env_var="GROK_API_KEY",
        api_key=lambda s: s.grok_api_key,
        model=lambda s: s.ai.grok_model,
    ),
    ProviderName.OPENAI: ProviderSpec(
        label="OpenAI",
        url="https://api.openai.com/v1/chat/completions",
        env_var="OPENAI_API_KEY",
        api_key=lambda s: s.openai_api_key,
        model=lambda s: s.ai.openai_model,
    ),
}


class ChatCompletionProvider:
    """Single-shot JSON-mode completion against an OpenAI-compatible endpoint."""

    def __init__(
        self,
        name: str,
        label: str,
        url: str,
        api_key: str,
        model: str,
        client: httpx.AsyncClient,
        temperature: float = 0.7,
        timeout: float = 120.0,
    ):
        self.name = name
        self.label = label
        self.url = url
        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self._api_key = api_key
        self._client = client

    async def complete(self, prompt: str) -> str:
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "response_format": {"type": "json_object"},
            "temperature": self.temperature,
        }
        data = await request_json(
            self._client,
            "POST",
            self.url,
            service=f"{self.label} API",
            timeout=self.timeout,
            json=payload,
            headers=bearer(self._api_key),
        )

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            content = None
        if not content:
            raise ExternalApiError(f"No content in {self.label} response")
        return content


def create_provider(
    name: ProviderName,
    settings: Settings,
    client: httpx.AsyncClient,
) -> AnalysisProvider:
    """Build the provider registered for ``name``."""
    spec = PROVIDERS[name]
    api_key = spec.api_key(settings)
    if not api_key:
        raise ValidationError(f"{spec.env_var} not set")

    return ChatCompletionProvider(
        name=name.value,
        label=spec.label,
        url=spec.url,
        api_key=api_key,
        model=spec.model(settings),
        client=client,
        temperature=settings.ai.temperature,
        timeout=settings.ai.timeout,
    )
