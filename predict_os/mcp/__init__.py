"""MCP surface for the PredictOS handlers."""
