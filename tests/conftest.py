"""Shared fixtures and fakes for the PredictOS test-suite."""

from __future__ import annotations

import json
from typing import Callable, Union

import httpx
import pytest

from predict_os.clients.models import MarketSnapshot, Outcome, Platform
from predict_os.config import Settings

VERDICT_JSON = json.dumps({
    "recommendation": "BUY_YES",
    "confidence": 0.72,
    "reasoning": "Thin liquidity on the NO side.",
    "key_factors": ["liquidity", "momentum"],
})


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """AsyncClient whose requests are answered by ``handler``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class FakeProvider:
    """Analysis provider that replays scripted answers (str) or failures (Exception)."""

    def __init__(self, name: str, script: list[Union[str, Exception]]):
        self.name = name
        self.script = list(script)
        self.prompts: list[str] = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        step = self.script[min(len(self.prompts), len(self.script)) - 1]
        if isinstance(step, Exception):
            raise step
        return step


@pytest.fixture
def settings() -> Settings:
    return Settings(grok_api_key="grok-key", openai_api_key="openai-key")


@pytest.fixture
def up_down_market() -> MarketSnapshot:
    return MarketSnapshot(
        id="m-1",
        question="Bitcoin Up or Down - 12:15 UTC?",
        slug="15min-up-down-20261019-1215",
        platform=Platform.POLYMARKET,
        outcomes=[
            Outcome(id="tok-up", name="Up", price=0.52, volume=1200.0),
            Outcome(id="tok-down", name="Down", price=0.48),
        ],
        volume=25000.0,
        liquidity=4000.0,
    )
