"""
Configuration loader.

Reads an optional YAML config and injects secrets from environment variables.
The resulting ``Settings`` object is immutable and shared read-only by every
component for the life of the process.
"""

from __future__ import annotations

import os
from typing import Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from .clients.models import ProviderName

load_dotenv()

# Environment variable -> Settings field
_SECRET_ENV = {
    "grok_api_key": "GROK_API_KEY",
    "openai_api_key": "OPENAI_API_KEY",
    "dome_api_key": "DOME_API_KEY",
    "polyfactual_api_key": "POLYFACTUAL_API_KEY",
    "gamma_api_key": "POLYMARKET_GAMMA_API_KEY",
}


class AIConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    default_provider: ProviderName = ProviderName.GROK
    failover_provider: ProviderName = ProviderName.OPENAI
    grok_model: str = "grok-beta"
    openai_model: str = "gpt-4-turbo-preview"
    temperature: float = 0.7
    timeout: float = 120.0
    max_attempts: int = Field(default=3, ge=1)
    base_delay: float = Field(default=0.1, ge=0.0)  # seconds, doubled per attempt


class HttpConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    data_timeout: float = 30.0
    research_timeout: float = 300.0


class TradingConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_shares: float = 5.0  # Polymarket minimum order size
    ladder_levels: int = 5
    ladder_min_price: float = 0.01
    ladder_max_price: float = 0.99


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    grok_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    dome_api_key: Optional[str] = None
    polyfactual_api_key: Optional[str] = None
    gamma_api_key: Optional[str] = None

    ai: AIConfig = Field(default_factory=AIConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    trading: TradingConfig = Field(default_factory=TradingConfig)


def load_config(config_path: str | None = None) -> Settings:
    """
    Load configuration from an optional YAML file plus the environment.

    YAML sections ``ai``, ``http`` and ``trading`` override the defaults.
    API keys always come from the environment (or ``.env``) and win over
    anything written in the file.
    """
    data: dict[str, Any] = {}
    if config_path is not None:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping")

    for field_name, env_name in _SECRET_ENV.items():
        value = os.getenv(env_name)
        if value:
            data[field_name] = value

    return Settings.model_validate(data)
