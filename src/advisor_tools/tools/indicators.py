"""Economic indicators tool."""

from __future__ import annotations

from ..adapters import AdapterError
from ..adapters.fred import fetch_latest_observation
from ..logging import get_logger
from ..schemas import UNAVAILABLE, IndicatorsInput, IndicatorsOutput, IndicatorValue
from ..settings import ToolServerSettings

logger = get_logger("advisor_tools.indicators")


def get_economic_indicators(
    payload: IndicatorsInput, settings: ToolServerSettings, _request_id: str
) -> IndicatorsOutput:
    values: list[IndicatorValue] = []
    for series_id in payload.indicators:
        try:
            observation = fetch_latest_observation(
                api_key=settings.fred_api_key,
                series_id=series_id,
                timeout_s=settings.request_timeout_s,
            )
        except (AdapterError, ValueError) as exc:
            logger.info("indicator_unavailable", extra={"extra": {"series_id": series_id, "error": str(exc)}})
            values.append(
                IndicatorValue(
                    series_id=series_id,
                    value=UNAVAILABLE,
                    synthetic=True,
                    note=f"Indicator unavailable: {exc}",
                )
            )
            continue
        values.append(IndicatorValue(series_id=series_id, value=observation["value"], date=observation["date"]))
    return IndicatorsOutput(indicators=values)
