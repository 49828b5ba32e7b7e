"""NSE India quote-equity adapter (third market-data stage).

Unofficial endpoint; rate-limited and picky about browser headers.
"""

from __future__ import annotations

import httpx

from . import BROWSER_USER_AGENT, ProviderError

NSE_QUOTE_URL = "https://www.nseindia.com/api/quote-equity"

NSE_HEADERS = {
    "User-Agent": BROWSER_USER_AGENT,
    "Accept": "application/json",
    "Accept-Language": "en-US,en;q=0.9",
    "Referer": "https://www.nseindia.com/",
}


def parse_quote(symbol: str, data: object) -> dict[str, float]:
    price_info = data.get("priceInfo") if isinstance(data, dict) else None
    if not price_info:
        raise ProviderError("nse", symbol, "No price data available")
    try:
        price = float(price_info["lastPrice"])
        change_percent = float(price_info.get("pChange") or 0)
    except (KeyError, TypeError, ValueError) as exc:
        raise ProviderError("nse", symbol, f"Malformed quote payload: {exc!r}") from exc
    return {"price": round(price, 2), "change_percent": round(change_percent, 2)}


def fetch_quote(symbol: str, *, timeout_s: float) -> dict[str, float]:
    with httpx.Client(timeout=timeout_s, headers=NSE_HEADERS) as client:
        resp = client.get(NSE_QUOTE_URL, params={"symbol": symbol.split(".")[0]})
    if resp.status_code != 200:
        raise ProviderError("nse", symbol, f"HTTP {resp.status_code}")
    return parse_quote(symbol, resp.json())
