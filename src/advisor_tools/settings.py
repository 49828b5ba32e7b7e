"""Tool server configuration."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(ENV_FILE, override=False)


class ToolServerSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FINADVISOR_", env_file=str(ENV_FILE), extra="ignore", populate_by_name=True
    )

    news_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("NEWS_API_KEY", "FINADVISOR_NEWS_API_KEY"),
    )
    rapidapi_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("RAPIDAPI_KEY", "FINADVISOR_RAPIDAPI_KEY"),
    )
    fred_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("FRED_API_KEY", "FINADVISOR_FRED_API_KEY"),
    )

    ledger_path: Path | None = None

    request_timeout_s: float = 15.0
    news_country: str = "in"
    log_level: str = "INFO"


@lru_cache(maxsize=1)
def get_settings() -> ToolServerSettings:
    return ToolServerSettings()
