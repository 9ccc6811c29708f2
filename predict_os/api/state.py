"""
Process-wide application state.

Built once at start-up from ``Settings`` and shared read-only by every
request: one HTTP client, the upstream clients, and the analysis gateway.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import partial
from typing import Callable, Optional

import httpx

from ..analysis import AnalysisGateway, FailoverPolicy, RetryPolicy, create_provider
from ..clients.clob import ClobOrderSink, OrderSink
from ..clients.data_api import DataApiClient
from ..clients.dome import DomeClient
from ..clients.gamma import GammaClient
from ..clients.polyfactual import PolyfactualClient
from ..config import Settings

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AppState:
    settings: Settings
    gamma: GammaClient
    data_api: DataApiClient
    gateway: AnalysisGateway
    dome: Optional[DomeClient] = None
    polyfactual: Optional[PolyfactualClient] = None
    order_sink_factory: Callable[[str], OrderSink] = ClobOrderSink
    clock: Callable[[], datetime] = _utcnow
    http: Optional[httpx.AsyncClient] = field(default=None, repr=False)

    async def aclose(self) -> None:
        if self.http is not None:
            await self.http.aclose()


def build_state(settings: Settings, http: httpx.AsyncClient | None = None) -> AppState:
    """Wire every client from ``settings``. Clients whose API key is missing are left unset."""
    http = http or httpx.AsyncClient(timeout=settings.http.data_timeout)

    dome = None
    if settings.dome_api_key:
        dome = DomeClient(http, settings.dome_api_key, timeout=settings.http.data_timeout)
    else:
        logger.warning("DOME_API_KEY not set; market analysis is unavailable")

    polyfactual = None
    if settings.polyfactual_api_key:
        polyfactual = PolyfactualClient(
            http, settings.polyfactual_api_key, timeout=settings.http.research_timeout
        )
    else:
        logger.warning("POLYFACTUAL_API_KEY not set; research is unavailable")

    gateway = AnalysisGateway(
        provider_factory=partial(create_provider, settings=settings, client=http),
        retry=RetryPolicy(
            max_attempts=settings.ai.max_attempts,
            base_delay=settings.ai.base_delay,
        ),
        failover=FailoverPolicy(
            primary=settings.ai.default_provider,
            alternate=settings.ai.failover_provider,
        ),
    )

    return AppState(
        settings=settings,
        gamma=GammaClient(http, settings.gamma_api_key, timeout=settings.http.data_timeout),
        data_api=DataApiClient(http, timeout=settings.http.data_timeout),
        gateway=gateway,
        dome=dome,
        polyfactual=polyfactual,
        http=http,
    )
