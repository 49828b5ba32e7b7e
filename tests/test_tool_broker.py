import asyncio
import signal
import sys
import time

import pytest

from advisor_server.settings import AdvisorSettings
from advisor_server.state import TraceRecord
from advisor_server import tool_broker
from advisor_server.tool_broker import ToolBroker


@pytest.fixture
def spawned(monkeypatch):
    """Record every worker process the broker starts."""
    processes = []
    original = asyncio.create_subprocess_exec

    async def recording(*args, **kwargs):
        proc = await original(*args, **kwargs)
        processes.append(proc)
        return proc

    monkeypatch.setattr(asyncio, "create_subprocess_exec", recording)
    return processes


@pytest.mark.asyncio
async def test_echo_round_trip(fake_settings, fake_worker_modes, spawned):
    response = await ToolBroker(fake_settings).call_tool("get_market_data", {"symbols": ["A"]})
    assert response.ok
    assert response.data == {"tool": "get_market_data", "echo": {"symbols": ["A"]}}
    assert response.meta.tool_name == "get_market_data"
    assert len(spawned) == 1
    assert spawned[0].returncode is not None


@pytest.mark.asyncio
async def test_timeout_resolves_and_terminates_worker(fake_settings, fake_worker_modes, spawned):
    fake_worker_modes(default="sleep")
    start = time.monotonic()
    response = await ToolBroker(fake_settings).call_tool("slow_tool", {}, timeout_s=1.0)
    elapsed = time.monotonic() - start

    assert response.is_transport_error
    assert response.error.message == "timeout"
    assert elapsed < 1.0 + fake_settings.kill_grace_s + 1.5
    assert spawned[0].returncode is not None


@pytest.mark.skipif(sys.platform == "win32", reason="SIGTERM cannot be ignored on Windows")
@pytest.mark.asyncio
async def test_worker_ignoring_sigterm_is_killed(fake_settings, fake_worker_modes, spawned):
    fake_worker_modes(default="stubborn")
    response = await ToolBroker(fake_settings).call_tool("slow_tool", {}, timeout_s=1.0)
    assert response.error.code == "TIMEOUT"
    assert spawned[0].returncode == -signal.SIGKILL


@pytest.mark.asyncio
async def test_crashing_worker_is_transport_error(fake_settings, fake_worker_modes):
    fake_worker_modes(default="crash")
    response = await ToolBroker(fake_settings).call_tool("any_tool", {})
    assert response.is_transport_error
    assert response.error.code == "WORKER_EXITED"
    assert "code 3" in response.error.message
    assert response.meta.exit_code == 3


@pytest.mark.asyncio
async def test_silent_worker_is_transport_error(fake_settings, fake_worker_modes):
    fake_worker_modes(default="silent")
    response = await ToolBroker(fake_settings).call_tool("any_tool", {})
    assert response.is_transport_error
    assert "without a matching response" in response.error.message


@pytest.mark.asyncio
async def test_exit_before_ready_is_reported():
    settings = AdvisorSettings(worker_command=[sys.executable, "-c", "import sys; sys.exit(5)"], kill_grace_s=0.5)
    response = await ToolBroker(settings).call_tool("any_tool", {})
    assert response.is_transport_error
    assert "before signalling readiness" in response.error.message


@pytest.mark.asyncio
async def test_spawn_failure_is_transport_error(tmp_path):
    settings = AdvisorSettings(worker_command=[str(tmp_path / "no-such-binary")])
    response = await ToolBroker(settings).call_tool("any_tool", {})
    assert response.is_transport_error
    assert response.error.code == "SPAWN_FAILED"


@pytest.mark.asyncio
async def test_stray_output_and_foreign_ids_are_ignored(fake_settings, fake_worker_modes):
    fake_worker_modes(default="noise")
    response = await ToolBroker(fake_settings).call_tool("noisy", {"n": 1})
    assert response.ok
    assert response.data == {"tool": "noisy", "echo": {"n": 1}}


@pytest.mark.asyncio
async def test_colliding_ids_on_separate_channels(fake_settings, fake_worker_modes):
    broker = ToolBroker(fake_settings)
    first, second = await asyncio.gather(
        broker.call_tool("t", {"who": "first"}, request_id="same-id"),
        broker.call_tool("t", {"who": "second"}, request_id="same-id"),
    )
    assert first.data["echo"] == {"who": "first"}
    assert second.data["echo"] == {"who": "second"}


@pytest.mark.asyncio
async def test_application_error_passes_through(fake_settings, fake_worker_modes):
    fake_worker_modes(default="error")
    response = await ToolBroker(fake_settings).call_tool("t", {})
    assert response.is_application_error
    assert response.error.message == "upstream exhausted"


@pytest.mark.asyncio
async def test_worker_bound_still_completes_every_call(fake_command, fake_worker_modes):
    settings = AdvisorSettings(worker_command=fake_command, max_concurrent_workers=1, kill_grace_s=0.5)
    broker = ToolBroker(settings)
    responses = await asyncio.gather(*(broker.call_tool("t", {"i": i}) for i in range(3)))
    assert [r.data["echo"]["i"] for r in responses] == [0, 1, 2]


@pytest.mark.asyncio
async def test_trace_records_tool_call(fake_settings, fake_worker_modes):
    trace = TraceRecord(trace_id="tr", started_at="now")
    await ToolBroker(fake_settings).call_tool("t", {"x": 1}, trace=trace, purpose="news")
    assert trace.tools[0]["purpose"] == "news"
    assert trace.tools[0]["status"] == "ok"


@pytest.mark.asyncio
async def test_real_server_missing_argument(real_settings):
    response = await ToolBroker(real_settings).call_tool("get_user_financial_profile", {})
    assert response.is_application_error, response.error
    assert "tenantId" in response.error.message


@pytest.mark.asyncio
async def test_real_server_discovery_is_idempotent(real_settings):
    broker = ToolBroker(real_settings)
    first = await broker.list_tools()
    second = await broker.list_tools()
    assert first.ok and second.ok
    assert first.data == second.data
    assert len(first.data) == 7


@pytest.mark.asyncio
async def test_real_server_tool_call(real_settings):
    response = await ToolBroker(real_settings).call_tool(
        "get_investment_opportunities", {"tenantId": "t1", "riskTolerance": "high"}
    )
    assert response.ok, response.error
    assert {o["risk"] for o in response.data["opportunities"]} == {"high"}


@pytest.mark.asyncio
async def test_unexpected_failure_is_transport_error(fake_settings, monkeypatch):
    async def broken_exchange(self):
        raise RuntimeError("decoder blew up")

    monkeypatch.setattr(tool_broker._Invocation, "exchange", broken_exchange)
    response = await ToolBroker(fake_settings).call_tool("t", {})
    assert response.is_transport_error
    assert response.error.code == "INVOKE_FAILED"
    assert "decoder blew up" in response.error.message


@pytest.mark.asyncio
async def test_real_server_unicode_separator_in_arguments(real_settings):
    response = await ToolBroker(real_settings).call_tool(
        "get_investment_opportunities", {"tenantId": "t\u2028one", "riskTolerance": "low"}
    )
    assert response.ok, response.error
    assert {o["risk"] for o in response.data["opportunities"]} == {"low"}
