"""FRED (St. Louis Fed) adapter for economic indicator series."""

from __future__ import annotations

from typing import Any

import httpx

from . import AdapterError

FRED_OBSERVATIONS_URL = "https://api.stlouisfed.org/fred/series/observations"


def parse_observations(series_id: str, data: Any) -> dict:
    if not isinstance(data, dict):
        raise AdapterError("UPSTREAM_ERROR", "Unexpected FRED response", {"series_id": series_id})
    observations = data.get("observations")
    latest = observations[0] if isinstance(observations, list) and observations else None
    if not isinstance(latest, dict) or latest.get("value") in (None, "."):
        raise AdapterError("NOT_FOUND", "No observations", {"series_id": series_id})
    try:
        value = float(latest["value"])
    except (TypeError, ValueError) as exc:
        raise AdapterError(
            "UPSTREAM_ERROR", f"Bad observation value: {latest['value']!r}", {"series_id": series_id}
        ) from exc
    return {"value": value, "date": latest.get("date")}


def fetch_latest_observation(*, api_key: str | None, series_id: str, timeout_s: float) -> dict:
    if not api_key:
        raise AdapterError("MISSING_API_KEY", "FRED_API_KEY is not set")

    params: dict[str, str | int] = {
        "series_id": series_id,
        "api_key": api_key,
        "file_type": "json",
        "sort_order": "desc",
        "limit": 1,
    }
    try:
        with httpx.Client(timeout=timeout_s) as client:
            resp = client.get(FRED_OBSERVATIONS_URL, params=params)
        data = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        raise AdapterError("UPSTREAM_ERROR", f"Failed to fetch {series_id}: {exc}") from exc
    if resp.status_code != 200:
        message = data.get("error_message", "FRED error") if isinstance(data, dict) else "FRED error"
        raise AdapterError("UPSTREAM_ERROR", message, {"series_id": series_id, "status": resp.status_code})
    return parse_observations(series_id, data)
