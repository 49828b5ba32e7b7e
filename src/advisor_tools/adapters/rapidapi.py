"""RapidAPI latest-stock-price adapter (second market-data stage)."""

from __future__ import annotations

import httpx

from . import ProviderError

RAPIDAPI_HOST = "latest-stock-price.p.rapidapi.com"
RAPIDAPI_URL = f"https://{RAPIDAPI_HOST}/price"


def parse_price_list(symbol: str, data: object) -> dict[str, float]:
    if not isinstance(data, list) or not data:
        raise ProviderError("rapidapi", symbol, "No data returned")
    stock = data[0]
    try:
        price = float(stock.get("lastPrice") or stock["pricecurrent"])
        change_percent = float(stock.get("pChange") or 0)
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise ProviderError("rapidapi", symbol, f"Malformed price payload: {exc!r}") from exc
    return {"price": round(price, 2), "change_percent": round(change_percent, 2)}


def fetch_quote(symbol: str, *, api_key: str, timeout_s: float) -> dict[str, float]:
    headers = {"X-RapidAPI-Key": api_key, "X-RapidAPI-Host": RAPIDAPI_HOST}
    with httpx.Client(timeout=timeout_s, headers=headers) as client:
        resp = client.get(RAPIDAPI_URL, params={"Indices": symbol.split(".")[0]})
    if resp.status_code != 200:
        raise ProviderError("rapidapi", symbol, f"HTTP {resp.status_code}")
    return parse_price_list(symbol, resp.json())
