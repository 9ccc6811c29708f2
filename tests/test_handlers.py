"""
Tests for the request handlers.

Upstream clients are AsyncMocks; the analysis gateway is real and runs on
FakeProviders, so retry and failover behave as in production.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from conftest import VERDICT_JSON, FakeProvider
from predict_os.analysis import AnalysisGateway, ProviderName, RetryPolicy
from predict_os.api import handlers
from predict_os.api.schemas import (
    AnalyzeEventMarketsRequest,
    LimitOrderBotRequest,
    OrderMode,
    PolyfactualResearchRequest,
    PositionTrackerRequest,
)
from predict_os.api.state import AppState
from predict_os.clients.models import (
    Citation,
    MarketSnapshot,
    OrderResult,
    OrderStatus,
    Outcome,
    PairStatus,
    PositionHolding,
    Recommendation,
)
from predict_os.errors import ExternalApiError, NotFoundError, ValidationError

NOW = datetime(2026, 10, 19, 12, 7, 30, tzinfo=timezone.utc)


class ScriptedSink:
    """Order sink that fails on the n-th submission (1-based)."""

    def __init__(self, fail_on: int | None = None):
        self.fail_on = fail_on
        self.submitted: list[tuple] = []

    async def submit(self, token_id, side, price, size, outcome="Unknown"):
        if self.fail_on is not None and len(self.submitted) + 1 == self.fail_on:
            raise ExternalApiError("CLOB API returned 500: matching engine down")
        self.submitted.append((token_id, price, size))
        return OrderResult(
            token_id=token_id, outcome=outcome, side=side, price=price, size=size,
            order_id=f"ord-{len(self.submitted)}", status=OrderStatus.PENDING,
        )


def _state(settings, market, *, providers=None, sink=None, dome=True, polyfactual=None) -> AppState:
    providers = providers or {
        ProviderName.GROK: FakeProvider("grok", [VERDICT_JSON]),
        ProviderName.OPENAI: FakeProvider("openai", [VERDICT_JSON]),
    }
    gamma = AsyncMock()
    gamma.get_market_by_slug.return_value = market
    dome_client = None
    if dome:
        dome_client = AsyncMock()
        dome_client.get_market_by_url.return_value = market
    sink = sink or ScriptedSink()

    return AppState(
        settings=settings,
        gamma=gamma,
        data_api=AsyncMock(),
        gateway=AnalysisGateway(
            provider_factory=lambda name: providers[name],
            retry=RetryPolicy(sleep=AsyncMock()),
        ),
        dome=dome_client,
        polyfactual=polyfactual,
        order_sink_factory=lambda key: sink,
        clock=lambda: NOW,
    )


# ── analyze_event_markets ────────────────────────────────────────────


class TestAnalyzeEventMarkets:

    @pytest.mark.asyncio
    async def test_default_provider(self, settings, up_down_market):
        state = _state(settings, up_down_market)

        resp = await handlers.analyze_event_markets(
            state, AnalyzeEventMarketsRequest(url="https://polymarket.com/event/btc")
        )

        state.dome.get_market_by_url.assert_awaited_once_with("https://polymarket.com/event/btc")
        assert resp.recommendation == Recommendation.BUY_YES
        assert resp.analysis.key_factors == ["liquidity", "momentum"]
        assert resp.market_data == up_down_market
        assert resp.metadata.model_used == "grok"
        assert resp.metadata.retries == 0

    @pytest.mark.asyncio
    async def test_explicit_openai(self, settings, up_down_market):
        grok = FakeProvider("grok", [VERDICT_JSON])
        openai = FakeProvider("openai", [VERDICT_JSON])
        state = _state(
            settings, up_down_market,
            providers={ProviderName.GROK: grok, ProviderName.OPENAI: openai},
        )

        resp = await handlers.analyze_event_markets(
            state, AnalyzeEventMarketsRequest(url="https://kalshi.com/trade/X", model="openai")
        )

        assert resp.metadata.model_used == "openai"
        assert grok.calls == 0

    @pytest.mark.asyncio
    async def test_failover_reported_in_metadata(self, settings, up_down_market):
        providers = {
            ProviderName.GROK: FakeProvider("grok", [ExternalApiError("Grok API returned 503: x")]),
            ProviderName.OPENAI: FakeProvider("openai", [VERDICT_JSON]),
        }
        state = _state(settings, up_down_market, providers=providers)

        resp = await handlers.analyze_event_markets(
            state, AnalyzeEventMarketsRequest(url="https://polymarket.com/event/btc", question="Up?")
        )

        assert resp.metadata.model_used == "openai"
        assert resp.metadata.retries == 3

    @pytest.mark.asyncio
    async def test_empty_url(self, settings, up_down_market):
        state = _state(settings, up_down_market)
        with pytest.raises(ValidationError, match="URL is required"):
            await handlers.analyze_event_markets(state, AnalyzeEventMarketsRequest(url=""))

    @pytest.mark.asyncio
    async def test_dome_not_configured(self, settings, up_down_market):
        state = _state(settings, up_down_market, dome=False)
        with pytest.raises(ValidationError, match="DOME_API_KEY"):
            await handlers.analyze_event_markets(
                state, AnalyzeEventMarketsRequest(url="https://polymarket.com/event/btc")
            )

    @pytest.mark.asyncio
    async def test_market_fetch_error_propagates(self, settings, up_down_market):
        state = _state(settings, up_down_market)
        state.dome.get_market_by_url.side_effect = NotFoundError("Market not found: btc")

        with pytest.raises(NotFoundError):
            await handlers.analyze_event_markets(
                state, AnalyzeEventMarketsRequest(url="https://polymarket.com/event/btc")
            )


# ── limit_order_bot ──────────────────────────────────────────────────


class TestLimitOrderBot:

    @pytest.mark.asyncio
    async def test_defaults_to_next_window(self, settings, up_down_market):
        state = _state(settings, up_down_market)

        resp = await handlers.limit_order_bot(
            state,
            LimitOrderBotRequest(wallet_private_key="0xkey", mode=OrderMode.SIMPLE, bankroll_usd=10),
        )

        state.gamma.get_market_by_slug.assert_awaited_once_with("15min-up-down-20261019-1215")
        assert resp.logs[0] == "Target market: 15min-up-down-20261019-1215"

    @pytest.mark.asyncio
    async def test_simple_mode_straddle(self, settings):
        market = MarketSnapshot(
            id="m", question="Up or Down?", slug="s",
            outcomes=[Outcome(id="u", name="Up", price=0.5), Outcome(id="d", name="Down", price=0.5)],
        )
        sink = ScriptedSink()
        state = _state(settings, market, sink=sink)

        resp = await handlers.limit_order_bot(
            state,
            LimitOrderBotRequest(
                wallet_private_key="0xkey", market_slug="s", mode=OrderMode.SIMPLE, bankroll_usd=10,
            ),
        )

        assert resp.error is None
        assert [(o.token_id, o.outcome, o.price, o.size) for o in resp.orders] == [
            ("u", "Up", 0.5, 10.0),
            ("d", "Down", 0.5, 10.0),
        ]
        assert "Mode: Simple (straddle)" in resp.logs

    @pytest.mark.asyncio
    async def test_ladder_mode_up_side_first(self, settings, up_down_market):
        sink = ScriptedSink()
        state = _state(settings, up_down_market, sink=sink)

        resp = await handlers.limit_order_bot(
            state,
            LimitOrderBotRequest(
                wallet_private_key="0xkey", mode=OrderMode.LADDER, bankroll_usd=200, price_levels=3,
            ),
        )

        assert len(resp.orders) == 6
        assert [o.token_id for o in resp.orders] == ["tok-up"] * 3 + ["tok-down"] * 3
        assert [o.price for o in resp.orders[:3]] == pytest.approx([0.01, 0.5, 0.99])
        # each side gets half the bankroll
        assert resp.orders[0].size == pytest.approx(100 * 8 / 7 / 0.01)
        assert "Calculated 3 price levels per side" in resp.logs

    @pytest.mark.asyncio
    async def test_ladder_uses_configured_levels(self, settings, up_down_market):
        state = _state(settings, up_down_market)

        resp = await handlers.limit_order_bot(
            state,
            LimitOrderBotRequest(wallet_private_key="0xkey", mode=OrderMode.LADDER, bankroll_usd=100),
        )

        assert len(resp.orders) == 2 * settings.trading.ladder_levels

    @pytest.mark.asyncio
    async def test_partial_submission_failure(self, settings, up_down_market):
        sink = ScriptedSink(fail_on=4)
        state = _state(settings, up_down_market, sink=sink)

        resp = await handlers.limit_order_bot(
            state,
            LimitOrderBotRequest(
                wallet_private_key="0xkey", mode=OrderMode.LADDER, bankroll_usd=200, price_levels=3,
            ),
        )

        assert len(resp.orders) == 3
        assert resp.error == {"error": "CLOB API returned 500: matching engine down", "status": 502}
        assert any(line.startswith("Stopped after 3/6 orders") for line in resp.logs)
        placed = [line for line in resp.logs if line.startswith("Placed ")]
        assert placed == [f"Placed Up order: {o.size:.2f} shares @ ${o.price:.4f}" for o in resp.orders]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "key, bankroll, message",
        [
            ("", 10, "Wallet private key"),
            ("0xkey", 0, "Bankroll"),
            ("0xkey", -5, "Bankroll"),
            ("0xkey", float("nan"), "Bankroll"),
        ],
    )
    async def test_invalid_request(self, settings, up_down_market, key, bankroll, message):
        state = _state(settings, up_down_market)

        with pytest.raises(ValidationError, match=message):
            await handlers.limit_order_bot(
                state,
                LimitOrderBotRequest(wallet_private_key=key, mode=OrderMode.SIMPLE, bankroll_usd=bankroll),
            )
        state.gamma.get_market_by_slug.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("levels", [0, -3])
    async def test_explicit_bad_price_levels_rejected(self, settings, up_down_market, levels):
        sink = ScriptedSink()
        state = _state(settings, up_down_market, sink=sink)

        with pytest.raises(ValidationError, match="Price levels"):
            await handlers.limit_order_bot(
                state,
                LimitOrderBotRequest(
                    wallet_private_key="0xkey", mode=OrderMode.LADDER,
                    bankroll_usd=100, price_levels=levels,
                ),
            )
        assert sink.submitted == []

    @pytest.mark.asyncio
    async def test_single_outcome_market_rejected(self, settings):
        market = MarketSnapshot(id="m", question="?", outcomes=[Outcome(id="u", name="Up", price=0.5)])
        sink = ScriptedSink()
        state = _state(settings, market, sink=sink)

        with pytest.raises(ValidationError, match="at least 2 outcomes"):
            await handlers.limit_order_bot(
                state,
                LimitOrderBotRequest(wallet_private_key="0xkey", mode=OrderMode.SIMPLE, bankroll_usd=10),
            )
        assert sink.submitted == []


# ── position_tracker ─────────────────────────────────────────────────


class TestPositionTracker:

    @pytest.mark.asyncio
    async def test_at_risk_pair_on_current_window(self, settings, up_down_market):
        state = _state(settings, up_down_market)
        state.data_api.get_market_positions.return_value = [
            PositionHolding(token_id="tok-up", shares=10, avg_price=0.4, current_price=0.6),
            PositionHolding(token_id="tok-down", shares=10, avg_price=0.55, current_price=0.3),
        ]

        resp = await handlers.position_tracker(state, PositionTrackerRequest(wallet_address="0xabc"))

        state.gamma.get_market_by_slug.assert_awaited_once_with("15min-up-down-20261019-1200")
        state.data_api.get_market_positions.assert_awaited_once_with("0xabc", ["tok-up", "tok-down"])
        assert [p.outcome for p in resp.positions] == ["Up", "Down"]
        assert resp.pair_status == PairStatus.AT_RISK
        assert resp.break_even == pytest.approx(0.475)
        assert resp.profit_lock is None

    @pytest.mark.asyncio
    async def test_no_positions(self, settings, up_down_market):
        state = _state(settings, up_down_market)
        state.data_api.get_market_positions.return_value = []

        resp = await handlers.position_tracker(
            state, PositionTrackerRequest(wallet_address="0xabc", market_slug="custom")
        )

        state.gamma.get_market_by_slug.assert_awaited_once_with("custom")
        assert resp.pair_status == PairStatus.NO_POSITION
        assert resp.positions == []

    @pytest.mark.asyncio
    async def test_wallet_required(self, settings, up_down_market):
        state = _state(settings, up_down_market)
        with pytest.raises(ValidationError, match="Wallet address"):
            await handlers.position_tracker(state, PositionTrackerRequest(wallet_address=""))


# ── polyfactual_research / health ────────────────────────────────────


class TestPolyfactualResearch:

    @pytest.mark.asyncio
    async def test_research(self, settings, up_down_market):
        polyfactual = AsyncMock()
        polyfactual.research.return_value = ("Likely.", [Citation(source="Reuters")])
        state = _state(settings, up_down_market, polyfactual=polyfactual)

        resp = await handlers.polyfactual_research(state, PolyfactualResearchRequest(query="Fed?"))

        assert resp.answer == "Likely."
        assert resp.citations[0].source == "Reuters"
        assert resp.metadata.execution_time_ms >= 0

    @pytest.mark.asyncio
    async def test_not_configured(self, settings, up_down_market):
        state = _state(settings, up_down_market)
        with pytest.raises(ValidationError, match="POLYFACTUAL_API_KEY"):
            await handlers.polyfactual_research(state, PolyfactualResearchRequest(query="Fed?"))

    @pytest.mark.asyncio
    async def test_empty_query(self, settings, up_down_market):
        state = _state(settings, up_down_market, polyfactual=AsyncMock())
        with pytest.raises(ValidationError, match="Query is required"):
            await handlers.polyfactual_research(state, PolyfactualResearchRequest(query=""))


@pytest.mark.asyncio
async def test_health(settings, up_down_market):
    assert await handlers.health(_state(settings, up_down_market)) == "OK"
