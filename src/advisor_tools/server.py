"""Stdio tool server.

Announces readiness on stdout, then reads one framed request per line from
stdin and writes exactly one framed response per request. Diagnostics go to
stderr. Exits once stdin closes.
"""

from __future__ import annotations

import sys
import time
from typing import IO, Any

from pydantic import ValidationError

from .adapters import AdapterError
from .logging import configure_logging, get_logger
from .protocol import (
    METHOD_CALL,
    METHOD_LIST,
    READY_SENTINEL,
    ToolRequest,
    decode_request,
    encode_result,
    encode_rpc_error,
    encode_tool_error,
)
from .schemas import ToolSpec
from .settings import ToolServerSettings, get_settings
from .tools import TOOL_HANDLERS, TOOL_SPECS, ToolHandler

logger = get_logger("advisor_tools.server")


def describe_validation_error(exc: ValidationError) -> str:
    missing: list[str] = []
    invalid: list[str] = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ())) or "arguments"
        if error.get("type") == "missing":
            missing.append(field)
        else:
            invalid.append(f"{field} ({error.get('msg')})")
    parts = []
    if missing:
        parts.append("Missing required argument: " + ", ".join(missing))
    if invalid:
        parts.append("Invalid argument: " + "; ".join(invalid))
    return ". ".join(parts) or str(exc)


class ToolServer:
    def __init__(
        self,
        settings: ToolServerSettings,
        specs: dict[str, ToolSpec] | None = None,
        handlers: dict[str, ToolHandler] | None = None,
    ) -> None:
        self._settings = settings
        self._specs = TOOL_SPECS if specs is None else specs
        self._handlers = TOOL_HANDLERS if handlers is None else handlers

    def list_tools(self) -> list[dict[str, Any]]:
        return [spec.describe() for spec in self._specs.values()]

    def handle(self, request: ToolRequest) -> bytes:
        """Produce the framed response line for one request."""
        if request.method == METHOD_LIST:
            return encode_result(request.id, self.list_tools())
        if request.method != METHOD_CALL:
            return encode_rpc_error(request.id, -32601, f"Method not found: {request.method}")
        return self._call_tool(request)

    def _call_tool(self, request: ToolRequest) -> bytes:
        start = time.time()
        tool_name = request.tool_name or ""
        spec = self._specs.get(tool_name)
        handler = self._handlers.get(tool_name)
        if not spec or not handler:
            logger.info("tool_unknown", extra={"extra": {"request_id": request.id, "tool": tool_name}})
            return encode_tool_error(request.id, f"Unknown tool: {tool_name}", code="UNKNOWN_TOOL")

        try:
            input_obj = spec.input_model.model_validate(request.arguments)
            result = handler(input_obj, self._settings, request.id)
            payload = result.model_dump(mode="json", by_alias=True)
        except ValidationError as exc:
            message = describe_validation_error(exc)
            self._log("tool_validation_error", request, start, ok=False, error_code="INVALID_ARGUMENT")
            return encode_tool_error(request.id, f"Tool '{tool_name}': {message}", code="INVALID_ARGUMENT")
        except AdapterError as exc:
            self._log("tool_adapter_error", request, start, ok=False, error_code=exc.code)
            return encode_tool_error(request.id, exc.message, code=exc.code)
        except Exception as exc:  # noqa: BLE001
            self._log("tool_error", request, start, ok=False, error_code="TOOL_ERROR", error=str(exc))
            return encode_tool_error(request.id, str(exc) or type(exc).__name__, code="TOOL_ERROR")

        self._log("tool_call", request, start, ok=True)
        return encode_result(request.id, payload)

    def _log(self, event: str, request: ToolRequest, start: float, **fields: Any) -> None:
        logger.info(
            event,
            extra={
                "extra": {
                    "request_id": request.id,
                    "tool": request.tool_name,
                    "latency_ms": int((time.time() - start) * 1000),
                    **fields,
                }
            },
        )

    def serve(self, stdin: IO[bytes], stdout: IO[bytes]) -> int:
        """Run the request loop until ``stdin`` closes; returns requests served."""
        stdout.write((READY_SENTINEL + "\n").encode("utf-8"))
        stdout.flush()
        served = 0
        for line in stdin:
            if not line.strip():
                continue
            request = decode_request(line)
            if request is None:
                logger.debug("skipped_line", extra={"extra": {"length": len(line)}})
                continue
            stdout.write(self.handle(request))
            stdout.flush()
            served += 1
        return served


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(
        "tool_server_config",
        extra={
            "extra": {
                "news_key_set": bool(settings.news_api_key),
                "rapidapi_key_set": bool(settings.rapidapi_key),
                "fred_key_set": bool(settings.fred_api_key),
                "ledger_path": str(settings.ledger_path) if settings.ledger_path else None,
            }
        },
    )
    server = ToolServer(settings)
    try:
        served = server.serve(sys.stdin.buffer, sys.stdout.buffer)
    except BrokenPipeError:
        # Client went away (timeout teardown); nothing left to answer.
        return
    logger.info("tool_server_exit", extra={"extra": {"served": served}})


if __name__ == "__main__":
    main()
