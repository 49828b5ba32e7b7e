"""Unified tool calling layer.

Every call starts its own tool server process, writes one framed request,
reads stdout until the matching response shows up, and tears the process
down before returning. Failures come back as ToolResponse values, never as
exceptions, so callers only have to look at ``ok``.
"""

from __future__ import annotations

import asyncio
import os
import time
from collections import deque
from contextlib import suppress
from enum import Enum
from typing import Any

from advisor_tools.logging import get_logger
from advisor_tools.protocol import (
    METHOD_LIST,
    ToolMeta,
    ToolRequest,
    ToolResponse,
    contains_ready_signal,
    decode_responses,
    encode_request,
    new_request_id,
)
from .settings import AdvisorSettings
from .state import TraceRecord
from .trace import record_tool_call

logger = get_logger("advisor_server.tool_broker")

READ_CHUNK_BYTES = 64 * 1024
STDERR_TAIL_LINES = 20


class InvocationState(str, Enum):
    STARTING = "starting"
    AWAITING_RESPONSE = "awaiting_response"
    RESOLVED = "resolved"


class _Invocation:
    """One request bound to one worker process for its whole lifetime."""

    def __init__(self, request: ToolRequest, command: list[str], env: dict[str, str]) -> None:
        self.request = request
        self.command = command
        self.env = env
        self.state = InvocationState.STARTING
        self.proc: asyncio.subprocess.Process | None = None
        self.exit_code: int | None = None
        self.stdout = bytearray()
        self.stderr_tail: deque[str] = deque(maxlen=STDERR_TAIL_LINES)
        self._stderr_task: asyncio.Task | None = None

    async def exchange(self) -> ToolResponse:
        self.proc = await asyncio.create_subprocess_exec(
            *self.command,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=self.env,
        )
        self._stderr_task = asyncio.create_task(self._drain_stderr())
        await self._send()

        assert self.proc.stdout is not None
        while True:
            chunk = await self.proc.stdout.read(READ_CHUNK_BYTES)
            if not chunk:
                break
            self.stdout.extend(chunk)
            if self.state is InvocationState.STARTING and contains_ready_signal(self.stdout):
                self.state = InvocationState.AWAITING_RESPONSE
            response = self._match()
            if response is not None:
                self.state = InvocationState.RESOLVED
                return response

        self.exit_code = await self.proc.wait()
        if self.state is InvocationState.STARTING:
            reason = f"worker exited with code {self.exit_code} before signalling readiness"
        else:
            reason = f"worker exited with code {self.exit_code} without a matching response"
        return ToolResponse.transport_error(self.request.id, reason, code="WORKER_EXITED")

    async def _send(self) -> None:
        assert self.proc is not None and self.proc.stdin is not None
        try:
            self.proc.stdin.write(encode_request(self.request))
            await self.proc.stdin.drain()
        except (BrokenPipeError, ConnectionResetError):
            # Worker already gone; the read loop reports how it exited.
            pass
        finally:
            # Closing stdin tells the worker there are no more requests.
            self.proc.stdin.close()

    def _match(self) -> ToolResponse | None:
        for response in decode_responses(self.stdout):
            if response.id == self.request.id:
                return response
        return None

    async def _drain_stderr(self) -> None:
        assert self.proc is not None and self.proc.stderr is not None
        while True:
            line = await self.proc.stderr.readline()
            if not line:
                return
            self.stderr_tail.append(line.decode("utf-8", errors="replace").rstrip())

    async def close(self, grace_s: float) -> None:
        """Terminate the worker, escalating to kill after ``grace_s``."""
        proc = self.proc
        if proc is not None and proc.returncode is None:
            with suppress(ProcessLookupError):
                proc.terminate()
            try:
                await asyncio.wait_for(proc.wait(), grace_s)
            except asyncio.TimeoutError:
                with suppress(ProcessLookupError):
                    proc.kill()
                await proc.wait()
        if proc is not None:
            self.exit_code = proc.returncode
        if self._stderr_task is not None:
            self._stderr_task.cancel()
            with suppress(asyncio.CancelledError):
                await self._stderr_task


class ToolBroker:
    def __init__(self, settings: AdvisorSettings) -> None:
        self._settings = settings
        # Bounds live worker processes; each call still gets its own process.
        self._slots = asyncio.Semaphore(settings.max_concurrent_workers)

    async def call_tool(
        self,
        name: str,
        args: dict[str, Any],
        *,
        timeout_s: float | None = None,
        request_id: str | None = None,
        trace: TraceRecord | None = None,
        purpose: str | None = None,
    ) -> ToolResponse:
        request = ToolRequest(id=request_id or new_request_id(name), tool_name=name, arguments=args)
        response = await self.invoke(request, timeout_s)
        if trace is not None:
            record_tool_call(
                trace,
                tool_name=name,
                args=args,
                ok=response.ok,
                latency_ms=response.meta.latency_ms if response.meta else None,
                result=response.data if response.ok else None,
                error=response.error.model_dump() if response.error else None,
                purpose=purpose,
            )
        return response

    async def list_tools(self, *, timeout_s: float | None = None) -> ToolResponse:
        request = ToolRequest(id=new_request_id("tools-list"), method=METHOD_LIST)
        return await self.invoke(request, timeout_s)

    async def invoke(self, request: ToolRequest, timeout_s: float | None = None) -> ToolResponse:
        """Run one request in a fresh worker; always returns a terminal outcome."""
        timeout = timeout_s if timeout_s is not None else self._settings.tool_timeout_s
        label = request.tool_name or request.method
        invocation = _Invocation(
            request,
            self._settings.resolved_worker_command(),
            {**os.environ, **self._settings.worker_env},
        )
        start = time.monotonic()
        holds_slot = False

        async def _run() -> ToolResponse:
            nonlocal holds_slot
            await self._slots.acquire()
            holds_slot = True
            return await invocation.exchange()

        try:
            response = await asyncio.wait_for(_run(), timeout)
        except asyncio.TimeoutError:
            response = ToolResponse.transport_error(request.id, "timeout", code="TIMEOUT")
        except OSError as exc:
            response = ToolResponse.transport_error(
                request.id, f"failed to start worker: {exc}", code="SPAWN_FAILED"
            )
        except Exception as exc:  # noqa: BLE001
            response = ToolResponse.transport_error(
                request.id, f"invocation failed: {type(exc).__name__}: {exc}", code="INVOKE_FAILED"
            )
        finally:
            await invocation.close(self._settings.kill_grace_s)
            if holds_slot:
                self._slots.release()

        latency_ms = int((time.monotonic() - start) * 1000)
        response.meta = ToolMeta(
            tool_name=label,
            request_id=request.id,
            latency_ms=latency_ms,
            exit_code=invocation.exit_code,
        )
        if response.is_transport_error:
            logger.warning(
                "tool_invoke_failed",
                extra={
                    "extra": {
                        "request_id": request.id,
                        "tool": label,
                        "latency_ms": latency_ms,
                        "state": invocation.state.value,
                        "exit_code": invocation.exit_code,
                        "error": response.error.message if response.error else None,
                        "stderr_tail": list(invocation.stderr_tail)[-5:],
                    }
                },
            )
        else:
            logger.info(
                "tool_invoke",
                extra={
                    "extra": {
                        "request_id": request.id,
                        "tool": label,
                        "latency_ms": latency_ms,
                        "ok": response.ok,
                        "error_code": response.error.code if response.error else None,
                    }
                },
            )
        return response
