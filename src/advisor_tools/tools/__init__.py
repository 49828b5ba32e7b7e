"""Tool registry for the financial advisor tool server."""

from __future__ import annotations

from typing import Callable

from ..schemas import (
    IndicatorsInput,
    MarketDataInput,
    NewsInput,
    OpportunitiesInput,
    ProfileInput,
    TenantInput,
    ToolSpec,
)
from .advice import analyze_spending_vs_market, get_expense_reduction_suggestions, get_investment_opportunities
from .indicators import get_economic_indicators
from .market import get_market_data
from .news import get_financial_news
from .profile import get_user_financial_profile

ToolHandler = Callable[[object, object, str], object]

TOOL_SPECS: dict[str, ToolSpec] = {
    "get_user_financial_profile": ToolSpec(
        name="get_user_financial_profile",
        description="Get the financial profile (totals, category breakdown, recent transactions) for a tenant.",
        input_model=ProfileInput,
    ),
    "get_financial_news": ToolSpec(
        name="get_financial_news",
        description="Get the latest financial news headlines.",
        input_model=NewsInput,
    ),
    "get_market_data": ToolSpec(
        name="get_market_data",
        description="Get stock and commodity prices, with provider fallback per symbol.",
        input_model=MarketDataInput,
    ),
    "get_economic_indicators": ToolSpec(
        name="get_economic_indicators",
        description="Get key economic indicators from FRED.",
        input_model=IndicatorsInput,
    ),
    "analyze_spending_vs_market": ToolSpec(
        name="analyze_spending_vs_market",
        description="Analyze a tenant's spending concentration against market diversification.",
        input_model=TenantInput,
    ),
    "get_investment_opportunities": ToolSpec(
        name="get_investment_opportunities",
        description="Suggest investment opportunities matching a risk tolerance.",
        input_model=OpportunitiesInput,
    ),
    "get_expense_reduction_suggestions": ToolSpec(
        name="get_expense_reduction_suggestions",
        description="Suggest ways to reduce expenses, led by the tenant's top category.",
        input_model=TenantInput,
    ),
}

TOOL_HANDLERS: dict[str, ToolHandler] = {
    "get_user_financial_profile": get_user_financial_profile,
    "get_financial_news": get_financial_news,
    "get_market_data": get_market_data,
    "get_economic_indicators": get_economic_indicators,
    "analyze_spending_vs_market": analyze_spending_vs_market,
    "get_investment_opportunities": get_investment_opportunities,
    "get_expense_reduction_suggestions": get_expense_reduction_suggestions,
}


def list_tool_specs() -> list[ToolSpec]:
    return list(TOOL_SPECS.values())
