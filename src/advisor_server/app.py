"""FastAPI entry for the advisor server."""

from __future__ import annotations

import uuid

from fastapi import FastAPI, HTTPException, Request
from openai import OpenAIError

from advisor_tools.logging import get_logger
from .executor import (
    MarketSummaryRequest,
    SuggestionsResponse,
    handle_list_tools,
    handle_market,
    handle_market_summary,
    handle_suggestions,
)
from .llm import CompletionUnavailable
from .settings import get_settings

app = FastAPI(title="Financial Advisor Server", version="0.1.0")
logger = get_logger("advisor_server.app")


@app.on_event("startup")
def log_startup_config() -> None:
    settings = get_settings()
    logger.info(
        "advisor_server_config",
        extra={
            "extra": {
                "llm_model": settings.llm_model,
                "llm_key_set": bool(settings.llm_api_key),
                "mock_llm": settings.mock_llm,
                "worker_command": settings.resolved_worker_command(),
                "tool_timeout_s": settings.tool_timeout_s,
                "max_concurrent_workers": settings.max_concurrent_workers,
            }
        },
    )


def _trace_id(request: Request) -> str:
    # Preserve incoming trace_id if provided, else generate one.
    return request.headers.get("x-trace-id") or str(uuid.uuid4())


def _tenant_id(request: Request) -> str | None:
    # Tenant resolution belongs to the auth layer in front of this service.
    return request.headers.get("x-tenant-id") or request.headers.get("tenant-id") or None


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/tools")
async def list_tools() -> list[dict]:
    response = await handle_list_tools()
    if not response.ok:
        raise HTTPException(status_code=502, detail=response.error.message if response.error else "Tool server error")
    return response.data


@app.get("/v1/market")
async def market(request: Request) -> list[dict]:
    response = await handle_market(_trace_id(request))
    if not response.ok or not isinstance(response.data, dict) or "marketData" not in response.data:
        detail = response.error.message if response.error else "Unexpected market data format"
        raise HTTPException(status_code=502, detail=f"Failed to fetch market data: {detail}")
    return response.data["marketData"]


@app.post("/v1/market/summary")
async def market_summary(payload: MarketSummaryRequest) -> dict[str, str]:
    if not payload.market_data:
        raise HTTPException(status_code=400, detail="Market data is required in the request body.")
    try:
        summary = await handle_market_summary(payload)
    except CompletionUnavailable as exc:
        raise HTTPException(status_code=503, detail="AI service is not configured on the server.") from exc
    except (OpenAIError, ValueError) as exc:
        logger.info("llm_error", extra={"extra": {"error": str(exc)}})
        raise HTTPException(status_code=502, detail="Failed to get AI suggestion.") from exc
    return {"suggestion": summary}


@app.get("/v1/suggestions")
async def suggestions(request: Request) -> SuggestionsResponse:
    return await handle_suggestions(_tenant_id(request), _trace_id(request))
