"""Read-only view over tenant transactions.

The ledger document is owned by the storage layer; the tool server only
reads a JSON export of it.
"""

from __future__ import annotations

import json
from collections import defaultdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .adapters import AdapterError
from .schemas import CategoryTotal


class LedgerEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    tenant_id: str = Field(alias="tenantId")
    type: Literal["income", "expense"]
    amount: float
    category: str = "Uncategorized"
    date: datetime
    description: str | None = None


class LedgerStore:
    def __init__(self, entries: list[LedgerEntry] | None = None) -> None:
        self._entries = entries or []

    @classmethod
    def load(cls, path: Path | None) -> "LedgerStore":
        if path is None or not path.exists():
            return cls()
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            if isinstance(raw, dict):
                raw = raw.get("transactions", [])
            if not isinstance(raw, list):
                raise ValueError("ledger document must be a list of transactions")
            entries = [LedgerEntry.model_validate(item) for item in raw]
        except (OSError, ValueError, ValidationError) as exc:
            raise AdapterError("LEDGER_UNAVAILABLE", f"Unable to read ledger: {exc}", {"path": str(path)}) from exc
        return cls(entries)

    def entries_for(self, tenant_id: str) -> list[LedgerEntry]:
        return [entry for entry in self._entries if entry.tenant_id == tenant_id]

    def total(self, tenant_id: str, kind: Literal["income", "expense"]) -> float:
        return round(sum(e.amount for e in self.entries_for(tenant_id) if e.type == kind), 2)

    def category_breakdown(
        self, tenant_id: str, kind: Literal["income", "expense"] = "expense"
    ) -> list[CategoryTotal]:
        totals: dict[str, float] = defaultdict(float)
        counts: dict[str, int] = defaultdict(int)
        for entry in self.entries_for(tenant_id):
            if entry.type != kind:
                continue
            totals[entry.category] += entry.amount
            counts[entry.category] += 1
        breakdown = [
            CategoryTotal(category=name, total=round(total, 2), count=counts[name])
            for name, total in totals.items()
        ]
        return sorted(breakdown, key=lambda item: item.total, reverse=True)

    def recent(self, tenant_id: str, since: datetime, limit: int = 10) -> list[LedgerEntry]:
        entries = [e for e in self.entries_for(tenant_id) if _aware(e.date) >= _aware(since)]
        entries.sort(key=lambda e: _aware(e.date), reverse=True)
        return entries[:limit]


def _aware(value: datetime) -> datetime:
    # Naive timestamps in the export are UTC.
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
