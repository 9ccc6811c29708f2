"""
AI analysis gateway: bounded retry per provider plus cross-provider failover.

Two independent policies are composed:

  RetryPolicy: up to ``max_attempts`` calls with exponential backoff
    (base_delay * 2**attempt between attempts), retrying only
    errors flagged ``retryable``.
  FailoverPolicy: when the default provider exhausts its retries, rerun the
    whole request once against the alternate provider.

With the defaults that is at most 3 + 3 upstream calls per request.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, TypeVar

from .base import AnalysisProvider, ProviderName, parse_verdict
from .prompts import build_analysis_prompt
from ..clients.models import AnalysisVerdict, MarketSnapshot
from ..errors import PredictOSError, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

ProviderFactory = Callable[[ProviderName], AnalysisProvider]


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay: float = 0.1  # seconds
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    def delay_for(self, attempt: int) -> float:
        """Backoff before the attempt following 0-indexed ``attempt``."""
        return self.base_delay * (2 ** attempt)

    async def run(self, operation: Callable[[], Awaitable[T]], label: str = "call") -> T:
        """Run ``operation`` until it succeeds, fails non-retryably, or attempts run out."""
        last_error: Optional[PredictOSError] = None

        for attempt in range(self.max_attempts):
            try:
                result = await operation()
            except PredictOSError as e:
                if not e.retryable:
                    raise
                last_error = e
                if attempt < self.max_attempts - 1:
                    delay = self.delay_for(attempt)
                    logger.warning(
                        "%s attempt %d/%d failed (%s), retrying in %.0fms",
                        label, attempt + 1, self.max_attempts, e.message, delay * 1000,
                    )
                    await self.sleep(delay)
                else:
                    logger.warning(
                        "%s attempt %d/%d failed (%s), giving up",
                        label, attempt + 1, self.max_attempts, e.message,
                    )
                continue

            if attempt > 0:
                logger.info("%s succeeded on attempt %d", label, attempt + 1)
            return result

        assert last_error is not None
        raise last_error


@dataclass(frozen=True)
class FailoverPolicy:
    primary: ProviderName = ProviderName.GROK
    alternate: ProviderName = ProviderName.OPENAI

    def alternate_for(self, selected: ProviderName) -> Optional[ProviderName]:
        """Only the default provider fails over; explicit choices surface their errors."""
        if selected == self.primary and self.alternate != self.primary:
            return self.alternate
        return None


@dataclass
class AnalysisResult:
    verdict: AnalysisVerdict
    model_used: str
    attempts: int
    providers_tried: list[str] = field(default_factory=list)

    @property
    def retries(self) -> int:
        """Upstream calls beyond the first."""
        return max(self.attempts - 1, 0)


class AnalysisGateway:
    """Single entry point for AI market analysis."""

    def __init__(
        self,
        provider_factory: ProviderFactory,
        retry: RetryPolicy | None = None,
        failover: FailoverPolicy | None = None,
    ):
        self.provider_factory = provider_factory
        self.retry = retry or RetryPolicy()
        self.failover = failover or FailoverPolicy()

    async def analyze(
        self,
        snapshot: MarketSnapshot,
        question: Optional[str] = None,
        provider: Optional[ProviderName] = None,
    ) -> AnalysisResult:
        """
        Ask an analysis provider for a verdict on ``snapshot``.

        Args:
            snapshot: Market to analyse (at least two outcomes)
            question: Optional user question folded into the prompt
            provider: Explicit provider; defaults to the failover primary

        Raises:
            ValidationError: bad input or missing provider credentials
            ExternalApiError / UpstreamTimeoutError / RateLimitError:
                every permitted attempt failed
        """
        if len(snapshot.outcomes) < 2:
            raise ValidationError("Market must have at least 2 outcomes")

        selected = provider or self.failover.primary
        tried: list[str] = []
        calls = [0]

        try:
            verdict = await self._run(selected, snapshot, question, calls, tried)
            return AnalysisResult(verdict, selected.value, calls[0], tried)
        except PredictOSError as e:
            alternate = self.failover.alternate_for(selected)
            if not e.retryable or alternate is None:
                raise
            logger.warning(
                "%s failed after %d attempt(s), failing over to %s",
                selected.value, calls[0], alternate.value,
            )

        verdict = await self._run(alternate, snapshot, question, calls, tried)
        return AnalysisResult(verdict, alternate.value, calls[0], tried)

    async def _run(
        self,
        name: ProviderName,
        snapshot: MarketSnapshot,
        question: Optional[str],
        calls: list[int],
        tried: list[str],
    ) -> AnalysisVerdict:
        provider = self.provider_factory(name)
        tried.append(provider.name)
        prompt = build_analysis_prompt(snapshot, question)

        async def attempt() -> AnalysisVerdict:
            calls[0] += 1
            logger.info("Calling %s (upstream call #%d)", provider.name, calls[0])
            raw = await provider.complete(prompt)
            return parse_verdict(raw, provider.name)

        return await self.retry.run(attempt, label=provider.name)
