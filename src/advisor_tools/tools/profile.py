"""Financial profile tool."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from ..ledger import LedgerStore
from ..schemas import ProfileInput, ProfileOutput, ProfileSummary, TransactionView
from ..settings import ToolServerSettings


def get_user_financial_profile(
    payload: ProfileInput, settings: ToolServerSettings, _request_id: str
) -> ProfileOutput:
    store = LedgerStore.load(settings.ledger_path)
    tenant_id = payload.tenant_id
    since = datetime.now(timezone.utc) - timedelta(days=payload.days)

    total_income = store.total(tenant_id, "income")
    total_expense = store.total(tenant_id, "expense")
    recent = [
        TransactionView(
            type=entry.type,
            amount=entry.amount,
            category=entry.category,
            date=entry.date,
            description=entry.description,
        )
        for entry in store.recent(tenant_id, since, limit=10)
    ]
    return ProfileOutput(
        summary=ProfileSummary(
            total_income=total_income,
            total_expense=total_expense,
            net_balance=round(total_income - total_expense, 2),
            period_days=payload.days,
        ),
        category_breakdown=store.category_breakdown(tenant_id, "expense"),
        recent_transactions=recent,
    )
