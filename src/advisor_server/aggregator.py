"""Fan-out/fan-in over independent tool calls.

All calls run concurrently and the aggregate is built only after every one
has settled. A failed or timed-out call leaves its slot empty; it never
cancels its siblings.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from advisor_tools.logging import get_logger
from advisor_tools.protocol import ToolResponse
from .state import TraceRecord
from .tool_broker import ToolBroker

logger = get_logger("advisor_server.aggregator")


@dataclass(frozen=True)
class ToolCall:
    purpose: str
    tool_name: str
    arguments: dict[str, Any] = field(default_factory=dict)
    timeout_s: float | None = None


@dataclass
class AggregatedContext:
    """Per-purpose outcomes of one batch. Every slot is optional."""

    responses: dict[str, ToolResponse] = field(default_factory=dict)

    def get(self, purpose: str) -> Any | None:
        """Payload for ``purpose`` when its call succeeded, else ``None``."""
        response = self.responses.get(purpose)
        if response is None or not response.ok:
            return None
        return response.data

    def __contains__(self, purpose: object) -> bool:
        return self.get(purpose) is not None  # type: ignore[arg-type]

    @property
    def slots(self) -> dict[str, Any | None]:
        return {purpose: self.get(purpose) for purpose in self.responses}


async def gather_all(
    broker: ToolBroker,
    calls: list[ToolCall],
    trace: TraceRecord | None = None,
) -> AggregatedContext:
    purposes = [call.purpose for call in calls]
    if len(set(purposes)) != len(purposes):
        raise ValueError(f"Duplicate purposes in batch: {purposes}")

    results = await asyncio.gather(
        *(
            broker.call_tool(
                call.tool_name,
                call.arguments,
                timeout_s=call.timeout_s,
                trace=trace,
                purpose=call.purpose,
            )
            for call in calls
        ),
        return_exceptions=True,
    )

    context = AggregatedContext()
    for call, result in zip(calls, results):
        if isinstance(result, BaseException):
            # The broker reports failures as values; anything raised here is a bug
            # in one call and still must not sink the batch.
            logger.error(
                "gather_call_raised",
                extra={"extra": {"purpose": call.purpose, "tool": call.tool_name, "error": repr(result)}},
            )
            continue
        context.responses[call.purpose] = result

    logger.info(
        "gather_complete",
        extra={"extra": {"present": {call.purpose: call.purpose in context for call in calls}}},
    )
    return context
