"""Advice features built on top of the tool layer.

Design goals:
- Gather every context source in one concurrent batch; any source may be missing.
- Always return something renderable: canned advice replaces a failed or absent LLM.
"""

from __future__ import annotations

import json
from typing import Any, Literal

from openai import OpenAIError
from pydantic import BaseModel, Field, ValidationError

from advisor_tools.logging import get_logger
from advisor_tools.protocol import ToolResponse
from .aggregator import AggregatedContext, ToolCall, gather_all
from .llm import CompletionClient, CompletionUnavailable
from .prompts import MARKET_ANALYST_SYSTEM, build_advice_context, build_market_summary_prompt
from .settings import AdvisorSettings
from .state import AdviceState, TraceRecord
from .tool_broker import ToolBroker
from .trace import record_llm_call

logger = get_logger("advisor_server.advisor")


class Suggestion(BaseModel):
    title: str = Field(min_length=1)
    description: str
    type: Literal["info", "success", "warning"] = "info"
    category: str = "Planning"


class SuggestionsResult(BaseModel):
    suggestions: list[Suggestion] = Field(min_length=1)


FALLBACK_WITH_DATA = SuggestionsResult(
    suggestions=[
        Suggestion(
            type="warning",
            title="Review Your Top Spending Category",
            description=(
                "Analyze your highest spending area and identify opportunities to reduce costs by 10-15%. "
                "Small changes can lead to significant savings."
            ),
            category="Budgeting",
        ),
        Suggestion(
            type="success",
            title="Increase Your Savings Rate",
            description=(
                "Aim to save at least 20% of your income. Set up automatic transfers to a savings "
                "account on payday to make it effortless."
            ),
            category="Savings",
        ),
        Suggestion(
            type="info",
            title="Track Expenses Consistently",
            description="Continue logging all transactions to unlock deeper insights and personalized recommendations.",
            category="Planning",
        ),
        Suggestion(
            type="info",
            title="Set Category Budget Limits",
            description="Create monthly spending limits for each expense category to avoid overspending.",
            category="Budgeting",
        ),
    ]
)

FALLBACK_NEW_USER = SuggestionsResult(
    suggestions=[
        Suggestion(
            type="info",
            title="Start Tracking Your Finances Today",
            description="Begin by adding your income and expenses. The more data you provide, the better the advice.",
            category="Getting Started",
        ),
        Suggestion(
            type="success",
            title="Set Clear Financial Goals",
            description="Define short-term (3-6 months) and long-term (1-5 years) objectives to stay focused.",
            category="Planning",
        ),
        Suggestion(
            type="warning",
            title="Build an Emergency Fund",
            description=(
                "Start by saving ₹1,000 for emergencies, then work towards 3-6 months of living expenses."
            ),
            category="Savings",
        ),
        Suggestion(
            type="success",
            title="Create Your First Budget",
            description="Use the 50/30/20 rule: 50% needs, 30% wants, 20% savings. Adjust to your situation.",
            category="Budgeting",
        ),
    ]
)


def fallback_suggestions(has_data: bool) -> SuggestionsResult:
    return (FALLBACK_WITH_DATA if has_data else FALLBACK_NEW_USER).model_copy(deep=True)


def profile_has_data(profile: dict[str, Any] | None) -> bool:
    summary = (profile or {}).get("summary") or {}
    return bool(summary.get("totalIncome") or summary.get("totalExpense"))


class Advisor:
    def __init__(
        self,
        settings: AdvisorSettings,
        broker: ToolBroker | None = None,
        llm: CompletionClient | None = None,
    ) -> None:
        self._settings = settings
        self._broker = broker or ToolBroker(settings)
        self._llm = llm or CompletionClient(settings)

    def plan_calls(self, tenant_id: str | None) -> list[ToolCall]:
        """Context sources for one suggestions request; tenant tools need a tenant."""
        timeout = self._settings.tool_timeout_s
        calls = [
            ToolCall(
                purpose="news",
                tool_name="get_financial_news",
                arguments={
                    "category": "business",
                    "limit": 3,
                    "topic": "personal finance savings" if tenant_id else "budgeting tips",
                },
                timeout_s=timeout,
            ),
            ToolCall(
                purpose="market",
                tool_name="get_market_data",
                arguments={"symbols": list(self._settings.context_symbols)},
                timeout_s=timeout,
            ),
        ]
        if tenant_id:
            calls.append(
                ToolCall(
                    purpose="profile",
                    tool_name="get_user_financial_profile",
                    arguments={"tenantId": tenant_id, "days": 30},
                    timeout_s=timeout,
                )
            )
            calls.append(
                ToolCall(
                    purpose="expense_tips",
                    tool_name="get_expense_reduction_suggestions",
                    arguments={"tenantId": tenant_id},
                    timeout_s=timeout,
                )
            )
        return calls

    async def gather_context(self, tenant_id: str | None, trace: TraceRecord | None = None) -> AggregatedContext:
        return await gather_all(self._broker, self.plan_calls(tenant_id), trace)

    async def suggestions(self, state: AdviceState) -> SuggestionsResult:
        context = await self.gather_context(state.tenant_id, state.trace)
        state.context = context.slots
        has_data = profile_has_data(context.get("profile"))

        prompt = build_advice_context(state.context, authenticated=state.tenant_id is not None)
        try:
            text = await self._llm.complete(
                prompt, json_mode=True, max_tokens=self._settings.suggestion_max_tokens
            )
            result = SuggestionsResult.model_validate(json.loads(text))
        except CompletionUnavailable:
            state.used_fallback = True
            return fallback_suggestions(has_data)
        except (OpenAIError, ValueError, ValidationError) as exc:
            # json.JSONDecodeError is a ValueError.
            logger.info("llm_error", extra={"extra": {"trace_id": state.trace_id, "error": str(exc)}})
            record_llm_call(
                state.trace,
                model=self._settings.llm_model,
                temperature=self._settings.temperature,
                prompt_chars=len(prompt),
                ok=False,
                error=str(exc),
            )
            state.used_fallback = True
            return fallback_suggestions(has_data)

        record_llm_call(
            state.trace,
            model=self._settings.llm_model,
            temperature=self._settings.temperature,
            prompt_chars=len(prompt),
            ok=True,
        )
        return result

    async def market_quotes(self, trace: TraceRecord | None = None) -> ToolResponse:
        return await self._broker.call_tool(
            "get_market_data",
            {"symbols": list(self._settings.market_symbols)},
            timeout_s=self._settings.market_timeout_s,
            trace=trace,
            purpose="market",
        )

    async def market_summary(self, quotes: list[dict[str, Any]]) -> str:
        """One-paragraph summary; raises CompletionUnavailable or OpenAIError."""
        return await self._llm.complete(
            build_market_summary_prompt(quotes),
            system=MARKET_ANALYST_SYSTEM,
            max_tokens=self._settings.summary_max_tokens,
        )

    async def list_tools(self) -> ToolResponse:
        return await self._broker.list_tools()
