"""NewsAPI adapter.

Encapsulates upstream API details and error normalization.
"""

from __future__ import annotations

import httpx

from . import AdapterError

NEWSAPI_URL = "https://newsapi.org/v2/top-headlines"


def _raise_for_status(data: object) -> None:
    if not isinstance(data, dict):
        raise AdapterError("UPSTREAM_ERROR", "Unexpected NewsAPI response")
    if data.get("status") != "ok":
        raise AdapterError("UPSTREAM_ERROR", data.get("message", "NewsAPI error"), {"code": data.get("code")})


def fetch_top_headlines(
    *,
    api_key: str | None,
    category: str,
    limit: int,
    query: str,
    country: str,
    timeout_s: float,
) -> list[dict]:
    if not api_key:
        raise AdapterError("MISSING_API_KEY", "NEWS_API_KEY is not set")

    params: dict[str, str | int] = {
        "apiKey": api_key,
        "category": category,
        "pageSize": limit,
        "q": query,
        "country": country,
    }
    try:
        with httpx.Client(timeout=timeout_s) as client:
            resp = client.get(NEWSAPI_URL, params=params)
        data = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        raise AdapterError("UPSTREAM_ERROR", f"Failed to fetch news: {exc}") from exc
    _raise_for_status(data)
    return data.get("articles", [])
