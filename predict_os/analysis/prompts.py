"""
Prompt template for market analysis.

The prompt asks for strict JSON so the answer can be parsed by
``analysis.base.parse_verdict``.
"""

from __future__ import annotations

from typing import Optional

from ..clients.models import MarketSnapshot

DEFAULT_QUESTION = "Should I buy YES or NO on this prediction market?"


def _fmt(value: Optional[float]) -> str:
    return "N/A" if value is None else f"{value:,.2f}"


def build_analysis_prompt(snapshot: MarketSnapshot, question: Optional[str] = None) -> str:
    """Build the analysis prompt for a market snapshot and optional user question."""

    outcomes_str = "\n".join(
        f"  - {o.name}: ${o.price:.4f} (volume: {_fmt(o.volume)})"
        for o in snapshot.outcomes
    )

    return f"""You are an expert prediction market analyst. Analyze the following market data and provide a recommendation.

Market Question: {snapshot.question}
Platform: {snapshot.platform.value}
Volume: {_fmt(snapshot.volume)}
Liquidity: {_fmt(snapshot.liquidity)}

Outcomes:
{outcomes_str}

User Question: {question or DEFAULT_QUESTION}

Provide your analysis in the following JSON format:
{{
  "recommendation": "BUY_YES" | "BUY_NO" | "NO_TRADE",
  "confidence": 0.0-1.0,
  "reasoning": "Detailed explanation of your analysis",
  "key_factors": ["factor1", "factor2", ...]
}}

Be concise but thorough. Focus on market dynamics, liquidity, and value opportunities."""
