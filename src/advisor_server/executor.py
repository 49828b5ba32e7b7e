"""Protocol adapter for incoming requests.

Keep this layer thin so HTTP changes do not affect advisor logic.
"""

from __future__ import annotations

import time
from typing import Any

from pydantic import BaseModel, Field

from advisor_tools.protocol import ToolResponse
from .advisor import Advisor, Suggestion
from .settings import get_settings
from .state import AdviceState
from .trace import build_trace, finalize_trace, record_final, write_trace


class SuggestionsResponse(BaseModel):
    suggestions: list[Suggestion]
    trace_id: str
    fallback: bool = False
    context_sources: dict[str, bool] = Field(default_factory=dict)


class MarketSummaryRequest(BaseModel):
    market_data: list[dict[str, Any]] = Field(default_factory=list, alias="marketData")


def build_advisor() -> Advisor:
    # Construct per request for simplicity; each tool call spawns its own worker anyway.
    return Advisor(get_settings())


async def handle_suggestions(tenant_id: str | None, trace_id: str) -> SuggestionsResponse:
    settings = get_settings()
    advisor = build_advisor()
    started_at_ts = time.time()
    trace = build_trace(trace_id, "suggestions", tenant_id)
    state = AdviceState(tenant_id=tenant_id, trace_id=trace_id, trace=trace)

    result = await advisor.suggestions(state)

    record_final(trace, answer=result.model_dump(), render_meta={"fallback": state.used_fallback})
    finalize_trace(trace, started_at_ts)
    if settings.trace_enabled:
        write_trace(trace, settings.trace_dir)

    return SuggestionsResponse(
        suggestions=result.suggestions,
        trace_id=trace_id,
        fallback=state.used_fallback,
        context_sources={purpose: value is not None for purpose, value in state.context.items()},
    )


async def handle_market(trace_id: str) -> ToolResponse:
    settings = get_settings()
    started_at_ts = time.time()
    trace = build_trace(trace_id, "market")
    response = await build_advisor().market_quotes(trace)
    record_final(trace, answer=response.data if response.ok else None)
    finalize_trace(trace, started_at_ts)
    if settings.trace_enabled:
        write_trace(trace, settings.trace_dir)
    return response


async def handle_market_summary(payload: MarketSummaryRequest) -> str:
    return await build_advisor().market_summary(payload.market_data)


async def handle_list_tools() -> ToolResponse:
    return await build_advisor().list_tools()
