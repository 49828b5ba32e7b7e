"""Tenant-scoped advice tools built on the ledger."""

from __future__ import annotations

from ..ledger import LedgerStore
from ..schemas import (
    ExpenseSuggestion,
    ExpenseSuggestionsOutput,
    Opportunity,
    OpportunitiesInput,
    OpportunitiesOutput,
    SpendingAnalysisOutput,
    TenantInput,
)
from ..settings import ToolServerSettings

OPPORTUNITIES = [
    Opportunity(type="Index Fund", symbol="NIFTYBEES", description="Nifty 50 ETF - broad market exposure", risk="low"),
    Opportunity(type="Commodity", symbol="GOLD.MCX", description="Gold for portfolio hedging", risk="low"),
    Opportunity(
        type="Stock", symbol="RELIANCE.NSE", description="Diversified conglomerate with strong growth", risk="medium"
    ),
    Opportunity(type="Stock", symbol="INFY.NSE", description="Leading IT services company", risk="medium"),
    Opportunity(type="Index Fund", symbol="BANKBEES", description="Nifty Bank ETF - sector concentration", risk="high"),
    Opportunity(type="Stock", symbol="TATAMOTORS.NSE", description="Cyclical auto manufacturer", risk="high"),
]


def analyze_spending_vs_market(
    payload: TenantInput, settings: ToolServerSettings, _request_id: str
) -> SpendingAnalysisOutput:
    store = LedgerStore.load(settings.ledger_path)
    breakdown = store.category_breakdown(payload.tenant_id, "expense")
    total = sum(item.total for item in breakdown)
    if not breakdown or total <= 0:
        return SpendingAnalysisOutput(
            analysis="No expense history is available yet for this tenant.",
            recommendation="Record expenses for a few weeks to compare spending against market trends.",
        )

    top = breakdown[0]
    share = round(top.total / total * 100, 2)
    return SpendingAnalysisOutput(
        top_category=top.category,
        top_category_share=share,
        analysis=f"'{top.category}' accounts for {share}% of your recorded spending.",
        recommendation=(
            "Consider diversifying across sectors such as banking and pharma rather than "
            f"concentrating exposure alongside your '{top.category}' spending."
        ),
    )


def get_investment_opportunities(
    payload: OpportunitiesInput, _settings: ToolServerSettings, _request_id: str
) -> OpportunitiesOutput:
    return OpportunitiesOutput(opportunities=[o for o in OPPORTUNITIES if o.risk == payload.risk_tolerance])


def get_expense_reduction_suggestions(
    payload: TenantInput, settings: ToolServerSettings, _request_id: str
) -> ExpenseSuggestionsOutput:
    store = LedgerStore.load(settings.ledger_path)
    breakdown = store.category_breakdown(payload.tenant_id, "expense")
    top_category = breakdown[0].category if breakdown else "your top category"
    return ExpenseSuggestionsOutput(
        suggestions=[
            ExpenseSuggestion(
                category=top_category, suggestion="Review subscriptions and cancel any you no longer use."
            ),
            ExpenseSuggestion(category="Food", suggestion="Try meal prepping for the week to reduce dining out costs."),
            ExpenseSuggestion(
                category="Transport", suggestion="Consider carpooling or public transport to save on fuel costs."
            ),
        ]
    )
