"""Market data tool and its provider fallback chain.

Each symbol walks the ordered provider list on its own and stops at the
first success. When every provider fails, the symbol gets a synthetic quote
flagged as such, so the output always has one entry per requested symbol.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Callable

from ..adapters import nse, rapidapi, yahoo
from ..logging import get_logger
from ..schemas import UNAVAILABLE, MarketDataInput, MarketDataOutput, MarketQuote
from ..settings import ToolServerSettings

logger = get_logger("advisor_tools.market")

QuoteFetcher = Callable[[str], dict]

SYNTHETIC_NOTE = "Synthetic placeholder: all market data providers failed"


@dataclass(frozen=True)
class QuoteProvider:
    name: str
    fetch: QuoteFetcher


@dataclass(frozen=True)
class ProviderAttempt:
    provider_name: str
    symbol: str
    ok: bool
    error: str | None = None


def build_providers(settings: ToolServerSettings) -> list[QuoteProvider]:
    """Ordered provider chain; stages without credentials are left out."""
    timeout_s = settings.request_timeout_s
    providers = [QuoteProvider("yahoo", partial(yahoo.fetch_quote, timeout_s=timeout_s))]
    if settings.rapidapi_key:
        providers.append(
            QuoteProvider(
                "rapidapi",
                partial(rapidapi.fetch_quote, api_key=settings.rapidapi_key, timeout_s=timeout_s),
            )
        )
    providers.append(QuoteProvider("nse", partial(nse.fetch_quote, timeout_s=timeout_s)))
    return providers


def synthetic_quote(symbol: str) -> MarketQuote:
    return MarketQuote(
        symbol=symbol,
        price=UNAVAILABLE,
        change_percent=UNAVAILABLE,
        source="synthetic",
        synthetic=True,
        note=SYNTHETIC_NOTE,
    )


def resolve_quote(symbol: str, providers: list[QuoteProvider]) -> tuple[MarketQuote, list[ProviderAttempt]]:
    attempts: list[ProviderAttempt] = []
    for provider in providers:
        try:
            raw = provider.fetch(symbol)
            quote = MarketQuote(
                symbol=symbol,
                price=round(float(raw["price"]), 2),
                change_percent=round(float(raw["change_percent"]), 2),
                source=provider.name,
            )
        except Exception as exc:  # noqa: BLE001
            attempts.append(ProviderAttempt(provider.name, symbol, ok=False, error=str(exc) or repr(exc)))
            logger.info(
                "provider_failed",
                extra={"extra": {"provider": provider.name, "symbol": symbol, "error": str(exc) or repr(exc)}},
            )
            continue
        attempts.append(ProviderAttempt(provider.name, symbol, ok=True))
        return quote, attempts

    logger.warning(
        "quote_synthetic",
        extra={"extra": {"symbol": symbol, "providers_tried": [a.provider_name for a in attempts]}},
    )
    return synthetic_quote(symbol), attempts


def resolve_quotes(symbols: list[str], providers: list[QuoteProvider]) -> list[MarketQuote]:
    """Exactly one quote per input symbol, in input order."""
    return [resolve_quote(symbol, providers)[0] for symbol in symbols]


def get_market_data(payload: MarketDataInput, settings: ToolServerSettings, _request_id: str) -> MarketDataOutput:
    quotes = resolve_quotes(payload.symbols, build_providers(settings))
    live = sum(1 for quote in quotes if not quote.synthetic)
    logger.info("market_data_resolved", extra={"extra": {"live": live, "requested": len(quotes)}})
    return MarketDataOutput(market_data=quotes)
