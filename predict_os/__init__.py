"""
PredictOS: prediction-market assistant backend.

Layers:
  clients/    Pure API clients (Gamma, Data API, Dome, Polyfactual, CLOB)
  analysis/   AI analysis gateway (providers, retry, failover)
  trading/    Ladder sizing, Up/Down pair classification, order submission
  api/        Request handlers shared by every outer surface
  mcp/        MCP server exposing the handlers as tools
"""

__version__ = "0.1.0"
