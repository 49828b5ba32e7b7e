"""Advisor server configuration."""

from __future__ import annotations

import sys
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(ENV_FILE, override=False)

DEFAULT_MARKET_SYMBOLS = [
    "GOLD.MCX",
    "SILVER.MCX",
    "RELIANCE.NSE",
    "TCS.NSE",
    "HDFCBANK.NSE",
    "INFY.NSE",
    "SBIN.NSE",
]


class AdvisorSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FINADVISOR_", env_file=str(ENV_FILE), extra="ignore", populate_by_name=True
    )

    host: str = "0.0.0.0"
    port: int = 7002

    # Tool worker process; empty means "this interpreter, -m advisor_tools.server".
    worker_command: list[str] = Field(default_factory=list)
    worker_env: dict[str, str] = Field(default_factory=dict)
    tool_timeout_s: float = 15.0
    market_timeout_s: float = 30.0
    kill_grace_s: float = 1.0
    max_concurrent_workers: int = Field(default=8, ge=1)

    llm_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("DEEPSEEK_API_KEY", "OPENAI_API_KEY", "FINADVISOR_LLM_API_KEY"),
    )
    llm_base_url: str = "https://api.deepseek.com"
    llm_model: str = "deepseek-chat"
    temperature: float = 0.7
    llm_timeout_s: float = 60.0
    suggestion_max_tokens: int = 2000
    summary_max_tokens: int = 150
    mock_llm: bool = False

    market_symbols: list[str] = Field(default_factory=lambda: list(DEFAULT_MARKET_SYMBOLS))
    context_symbols: list[str] = Field(default_factory=lambda: ["RELIANCE.NSE", "TCS.NSE", "GOLD.MCX"])

    trace_enabled: bool = False
    trace_dir: str = "traces"

    def resolved_worker_command(self) -> list[str]:
        return list(self.worker_command) or [sys.executable, "-m", "advisor_tools.server"]


@lru_cache(maxsize=1)
def get_settings() -> AdvisorSettings:
    return AdvisorSettings()
