"""External API adapters."""

from __future__ import annotations


class AdapterError(RuntimeError):
    def __init__(self, code: str, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}


class ProviderError(AdapterError):
    """One market-data provider failed for one symbol."""

    def __init__(self, provider: str, symbol: str, message: str) -> None:
        super().__init__("PROVIDER_ERROR", message, {"provider": provider, "symbol": symbol})
        self.provider = provider
        self.symbol = symbol


BROWSER_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
