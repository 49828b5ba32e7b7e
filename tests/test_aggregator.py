import time
from types import SimpleNamespace

import pytest

from advisor_server.aggregator import AggregatedContext, ToolCall, gather_all
from advisor_server.advisor import FALLBACK_NEW_USER, Advisor
from advisor_server.llm import CompletionClient
from advisor_server.state import AdviceState
from advisor_server.trace import build_trace
from advisor_server.tool_broker import ToolBroker
from advisor_tools.protocol import ToolResponse


@pytest.mark.asyncio
async def test_crashed_call_leaves_only_its_slot_empty(fake_settings, fake_worker_modes):
    fake_worker_modes(get_user_financial_profile="crash", get_market_data="market")
    context = await gather_all(
        ToolBroker(fake_settings),
        [
            ToolCall("news", "get_financial_news", {"limit": 3}),
            ToolCall("market", "get_market_data", {"symbols": ["A", "B"]}),
            ToolCall("profile", "get_user_financial_profile", {"tenantId": "t1"}),
        ],
    )
    assert context.get("news") == {"tool": "get_financial_news", "echo": {"limit": 3}}
    assert len(context.get("market")["marketData"]) == 2
    assert context.get("profile") is None
    assert context.responses["profile"].is_transport_error
    assert context.slots.keys() == {"news", "market", "profile"}


@pytest.mark.asyncio
async def test_one_timeout_does_not_sink_the_batch(fake_settings, fake_worker_modes):
    fake_worker_modes(slow="sleep")
    start = time.monotonic()
    context = await gather_all(
        ToolBroker(fake_settings),
        [
            ToolCall("a", "fast_a", {}),
            ToolCall("b", "slow", {}, timeout_s=1.0),
            ToolCall("c", "fast_c", {}),
        ],
    )
    assert time.monotonic() - start < 5
    assert "a" in context and "c" in context
    assert "b" not in context
    assert context.responses["b"].error.code == "TIMEOUT"


@pytest.mark.asyncio
async def test_application_error_slot_is_empty(fake_settings, fake_worker_modes):
    fake_worker_modes(broken="error")
    context = await gather_all(ToolBroker(fake_settings), [ToolCall("x", "broken"), ToolCall("y", "fine")])
    assert context.get("x") is None
    assert context.responses["x"].is_application_error
    assert context.get("y") is not None


@pytest.mark.asyncio
async def test_duplicate_purposes_rejected(fake_settings):
    with pytest.raises(ValueError):
        await gather_all(ToolBroker(fake_settings), [ToolCall("x", "a"), ToolCall("x", "b")])


def test_context_slots_are_optional():
    context = AggregatedContext(responses={"ok": ToolResponse.success("1", {"v": 1})})
    assert context.get("ok") == {"v": 1}
    assert context.get("missing") is None


def test_tenant_tools_only_for_authenticated_callers(fake_settings):
    advisor = Advisor(fake_settings)
    assert [c.purpose for c in advisor.plan_calls(None)] == ["news", "market"]
    calls = advisor.plan_calls("t1")
    assert [c.purpose for c in calls] == ["news", "market", "profile", "expense_tips"]
    assert calls[2].arguments == {"tenantId": "t1", "days": 30}


class EmptyCompletions:
    def create(self, **_kwargs):
        return SimpleNamespace(choices=[])


@pytest.fixture
def empty_llm(fake_settings):
    settings = fake_settings.model_copy(update={"llm_api_key": "k", "mock_llm": False})
    client = CompletionClient(settings)
    client._client = SimpleNamespace(chat=SimpleNamespace(completions=EmptyCompletions()))
    return client


@pytest.mark.asyncio
async def test_empty_completion_falls_back_to_canned_advice(fake_settings, fake_worker_modes, empty_llm):
    state = AdviceState(tenant_id=None, trace_id="tr", trace=build_trace("tr", "suggestions"))
    result = await Advisor(fake_settings, llm=empty_llm).suggestions(state)
    assert state.used_fallback
    assert result == FALLBACK_NEW_USER
    assert state.trace.llm[0]["status"] == "error"


@pytest.mark.asyncio
async def test_empty_completion_is_value_error(empty_llm):
    with pytest.raises(ValueError):
        await empty_llm.complete("hi")
