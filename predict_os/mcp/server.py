"""
MCP server exposing the PredictOS request handlers as tools.

Entry point:
    predict-os-mcp [--config config.yaml]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Any, Awaitable, Callable

import mcp.server.stdio
import mcp.types as types
import pydantic
from mcp.server import Server

from ..api import handlers
from ..api.schemas import (
    AnalyzeEventMarketsRequest,
    LimitOrderBotRequest,
    PolyfactualResearchRequest,
    PositionTrackerRequest,
)
from ..api.state import AppState, build_state
from ..config import load_config
from ..errors import ValidationError, error_payload

logger = logging.getLogger(__name__)

Handler = Callable[[AppState, Any], Awaitable[pydantic.BaseModel]]

# tool name -> (request schema, handler, description)
TOOLS: dict[str, tuple[type[pydantic.BaseModel], Handler, str]] = {
    "analyze_event_markets": (
        AnalyzeEventMarketsRequest,
        handlers.analyze_event_markets,
        "Analyze a Polymarket or Kalshi market (pass its URL) with an LLM and get a "
        "BUY_YES / BUY_NO / NO_TRADE recommendation with confidence and key factors. "
        "Set model to 'openai' to skip Grok; Grok falls back to OpenAI on failure.",
    ),
    "limit_order_bot": (
        LimitOrderBotRequest,
        handlers.limit_order_bot,
        "Size and submit buy orders on both sides of a 15-minute Up/Down market. "
        "mode='simple' places a straddle at current prices; mode='ladder' places an "
        "exponential-taper ladder per side (more size at lower prices). Defaults to "
        "the next 15-minute market.",
    ),
    "position_tracker": (
        PositionTrackerRequest,
        handlers.position_tracker,
        "Show a wallet's Up/Down positions on a 15-minute market and classify the "
        "pair as PROFIT_LOCKED, BREAK_EVEN, AT_RISK or NO_POSITION. Defaults to "
        "the current 15-minute market.",
    ),
    "polyfactual_research": (
        PolyfactualResearchRequest,
        handlers.polyfactual_research,
        "Run a Polyfactual research query (max 1000 characters) and return an "
        "answer with citations. Can take several minutes.",
    ),
}


class PredictOSMCPServer:

    def __init__(self, state: AppState, name: str = "predict-os"):
        self.state = state
        self.server = Server(name)
        self._register_handlers()

    def _register_handlers(self) -> None:
        @self.server.list_tools()
        async def list_tools() -> list[types.Tool]:
            return self.tools()

        @self.server.call_tool()
        async def call_tool(
            name: str, arguments: dict[str, Any]
        ) -> list[types.TextContent]:
            result = await self.dispatch(name, arguments or {})
            text = json.dumps(result, indent=2, default=str)
            return [types.TextContent(type="text", text=text)]

    @staticmethod
    def tools() -> list[types.Tool]:
        tools = [
            types.Tool(
                name=name,
                description=description,
                inputSchema=schema.model_json_schema(),
            )
            for name, (schema, _, description) in TOOLS.items()
        ]
        tools.append(
            types.Tool(
                name="health",
                description="Liveness check. Returns OK.",
                inputSchema={"type": "object", "properties": {}},
            )
        )
        return tools

    async def dispatch(self, name: str, args: dict[str, Any]) -> Any:
        """Run a tool and return a JSON-ready result or error payload."""
        try:
            if name == "health":
                return await handlers.health(self.state)
            if name not in TOOLS:
                return {"error": f"Unknown tool: {name}", "status": 404}

            schema, handler, _ = TOOLS[name]
            try:
                request = schema.model_validate(args)
            except pydantic.ValidationError as e:
                raise ValidationError(f"Invalid arguments for {name}: {e.error_count()} error(s)",
                                      detail=str(e)) from e

            response = await handler(self.state, request)
            return response.model_dump(mode="json")

        except Exception as e:
            logger.error("Tool %s failed: %s", name, e)
            return error_payload(e)

    async def run(self) -> None:
        logger.info("Starting MCP server '%s' ...", self.server.name)
        try:
            async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
                await self.server.run(
                    read_stream,
                    write_stream,
                    self.server.create_initialization_options(),
                )
        finally:
            await self.state.aclose()


# ── Entry point ──────────────────────────────────────────────────────

def main() -> None:
    parser = argparse.ArgumentParser(description="PredictOS MCP server")
    parser.add_argument(
        "--config", default=None, help="Optional YAML config file path"
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    state = build_state(load_config(args.config))
    server = PredictOSMCPServer(state)
    asyncio.run(server.run())


if __name__ == "__main__":
    main()
