"""Yahoo Finance chart adapter (first market-data stage)."""

from __future__ import annotations

import httpx

from . import BROWSER_USER_AGENT, ProviderError

YAHOO_CHART_URL = "https://query1.finance.yahoo.com/v8/finance/chart"

_SUFFIXES = {".NSE": ".NS", ".BSE": ".BO"}


def to_yahoo_symbol(symbol: str) -> str:
    for suffix, replacement in _SUFFIXES.items():
        if symbol.endswith(suffix):
            return symbol[: -len(suffix)] + replacement
    if symbol.endswith(".MCX"):
        # Commodities are quoted on their bare root.
        return symbol.split(".")[0]
    return symbol


def parse_chart(symbol: str, data: dict) -> dict[str, float]:
    try:
        meta = data["chart"]["result"][0]["meta"]
        previous_close = float(meta["previousClose"])
        price = float(meta.get("regularMarketPrice") or previous_close)
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        raise ProviderError("yahoo", symbol, f"Malformed chart payload: {exc!r}") from exc
    if previous_close == 0:
        raise ProviderError("yahoo", symbol, "previousClose is zero")
    change_percent = (price - previous_close) / previous_close * 100
    return {"price": round(price, 2), "change_percent": round(change_percent, 2)}


def fetch_quote(symbol: str, *, timeout_s: float) -> dict[str, float]:
    url = f"{YAHOO_CHART_URL}/{to_yahoo_symbol(symbol)}"
    with httpx.Client(timeout=timeout_s, headers={"User-Agent": BROWSER_USER_AGENT}) as client:
        resp = client.get(url)
    if resp.status_code != 200:
        raise ProviderError("yahoo", symbol, f"HTTP {resp.status_code}")
    return parse_chart(symbol, resp.json())
