"""Shared tool schemas (single source of truth).

Field names on the wire are camelCase; Python code uses snake_case through
aliases. Advisor and tool server both import these models to avoid drift.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

UNAVAILABLE = "unavailable"


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ProfileInput(WireModel):
    """Input for the financial profile tool."""
    tenant_id: str = Field(alias="tenantId", min_length=1, description="Tenant identifier")
    days: int = Field(default=30, ge=1, le=3650, description="Look-back window in days")


class CategoryTotal(WireModel):
    category: str
    total: float
    count: int


class TransactionView(WireModel):
    type: Literal["income", "expense"]
    amount: float
    category: str
    date: datetime
    description: str | None = None


class ProfileSummary(WireModel):
    total_income: float = Field(alias="totalIncome")
    total_expense: float = Field(alias="totalExpense")
    net_balance: float = Field(alias="netBalance")
    period_days: int = Field(alias="periodDays")


class ProfileOutput(WireModel):
    """Output for the financial profile tool."""
    summary: ProfileSummary
    category_breakdown: list[CategoryTotal] = Field(alias="categoryBreakdown")
    recent_transactions: list[TransactionView] = Field(alias="recentTransactions")


class NewsInput(WireModel):
    """Input for the financial news tool."""
    category: str = Field(default="business", description="NewsAPI category")
    limit: int = Field(default=5, ge=1, le=50)
    topic: str | None = Field(default=None, description="Free-text query")


class NewsArticle(WireModel):
    title: str
    description: str | None = None
    url: str | None = None
    source: str | None = None
    published_at: str | None = Field(default=None, alias="publishedAt")


class NewsOutput(WireModel):
    """Output for the financial news tool."""
    articles: list[NewsArticle]


class MarketDataInput(WireModel):
    """Input for the market data tool."""
    symbols: list[str] = Field(min_length=1, description="Symbols such as RELIANCE.NSE or GOLD.MCX")


class MarketQuote(WireModel):
    """One quote per requested symbol, live or explicitly synthetic."""
    symbol: str
    price: float | Literal["unavailable"]
    change_percent: float | Literal["unavailable"] = Field(alias="changePercent")
    source: str
    synthetic: bool = False
    note: str | None = None


class MarketDataOutput(WireModel):
    """Output for the market data tool."""
    market_data: list[MarketQuote] = Field(alias="marketData")


class IndicatorsInput(WireModel):
    """Input for the economic indicators tool."""
    indicators: list[str] = Field(default_factory=lambda: ["CPIAUCSL", "UNRATE"])


class IndicatorValue(WireModel):
    series_id: str = Field(alias="seriesId")
    value: float | Literal["unavailable"]
    date: str | None = None
    synthetic: bool = False
    note: str | None = None


class IndicatorsOutput(WireModel):
    """Output for the economic indicators tool."""
    indicators: list[IndicatorValue]


class TenantInput(WireModel):
    """Input for tenant-scoped analysis tools."""
    tenant_id: str = Field(alias="tenantId", min_length=1, description="Tenant identifier")


class SpendingAnalysisOutput(WireModel):
    top_category: str | None = Field(default=None, alias="topCategory")
    top_category_share: float | None = Field(default=None, alias="topCategoryShare")
    analysis: str
    recommendation: str


class OpportunitiesInput(WireModel):
    tenant_id: str = Field(alias="tenantId", min_length=1, description="Tenant identifier")
    risk_tolerance: Literal["low", "medium", "high"] = Field(default="medium", alias="riskTolerance")


class Opportunity(WireModel):
    type: str
    symbol: str
    description: str
    risk: Literal["low", "medium", "high"]


class OpportunitiesOutput(WireModel):
    opportunities: list[Opportunity]


class ExpenseSuggestion(WireModel):
    category: str
    suggestion: str


class ExpenseSuggestionsOutput(WireModel):
    suggestions: list[ExpenseSuggestion]


@dataclass(frozen=True)
class ToolSpec:
    """Static catalog entry advertised through ``tools/list``."""
    name: str
    description: str
    input_model: type[BaseModel]

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_model.model_json_schema(by_alias=True),
        }
