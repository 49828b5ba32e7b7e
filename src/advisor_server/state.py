"""Lightweight request state containers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class TraceRecord:
    """Structured trace container for a single request."""

    trace_id: str
    started_at: str
    finished_at: str | None = None
    latency_ms: int | None = None
    request: dict[str, Any] = field(default_factory=dict)
    llm: list[dict[str, Any]] = field(default_factory=list)
    tools: list[dict[str, Any]] = field(default_factory=list)
    final: dict[str, Any] = field(default_factory=dict)


@dataclass
class AdviceState:
    tenant_id: str | None
    trace_id: str
    trace: TraceRecord
    context: dict[str, Any] = field(default_factory=dict)
    used_fallback: bool = False
