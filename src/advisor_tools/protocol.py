"""Line-delimited message framing shared by the tool server and its clients.

One message is one JSON object on one newline-terminated line. The same
stream may carry plain diagnostic text (and the readiness sentinel); any
line that is not a well-formed message is skipped, never fatal.
"""

from __future__ import annotations

import json
import uuid
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

READY_SENTINEL = "FINADVISOR_TOOLS_READY"

METHOD_CALL = "tools/call"
METHOD_LIST = "tools/list"


class ToolRequest(BaseModel):
    """A single framed request. Immutable once built."""
    model_config = ConfigDict(frozen=True)

    id: str
    method: str = METHOD_CALL
    tool_name: str | None = None
    arguments: dict[str, Any] = Field(default_factory=dict)


class ToolError(BaseModel):
    """Normalized error carried by a ToolResponse.

    ``application`` errors come from the tool server itself (bad arguments,
    unknown tool, upstream exhausted). ``transport`` errors are produced on the
    client side when no usable response arrived.
    """
    kind: Literal["application", "transport"]
    code: str
    message: str
    details: dict[str, Any] | None = None


class ToolMeta(BaseModel):
    """Client-side metadata attached once a call settles."""
    tool_name: str
    request_id: str
    latency_ms: int | None = None
    exit_code: int | None = None


class ToolResponse(BaseModel):
    """Exactly one terminal outcome for one ToolRequest."""
    id: str
    ok: bool
    data: Any | None = None
    error: ToolError | None = None
    meta: ToolMeta | None = None

    @classmethod
    def success(cls, request_id: str, data: Any) -> "ToolResponse":
        return cls(id=request_id, ok=True, data=data)

    @classmethod
    def application_error(
        cls, request_id: str, message: str, code: str = "TOOL_ERROR", details: dict[str, Any] | None = None
    ) -> "ToolResponse":
        return cls(
            id=request_id,
            ok=False,
            error=ToolError(kind="application", code=code, message=message, details=details),
        )

    @classmethod
    def transport_error(cls, request_id: str, reason: str, code: str = "TRANSPORT_ERROR") -> "ToolResponse":
        return cls(id=request_id, ok=False, error=ToolError(kind="transport", code=code, message=reason))

    @property
    def is_application_error(self) -> bool:
        return self.error is not None and self.error.kind == "application"

    @property
    def is_transport_error(self) -> bool:
        return self.error is not None and self.error.kind == "transport"


def new_request_id(tool_name: str) -> str:
    return f"{tool_name}-{uuid.uuid4().hex}"


def _dump_line(message: dict[str, Any]) -> bytes:
    # json.dumps never emits a raw newline, so one message is always one line.
    return (json.dumps(message, ensure_ascii=False, default=str) + "\n").encode("utf-8")


def encode_request(request: ToolRequest) -> bytes:
    message: dict[str, Any] = {"jsonrpc": "2.0", "id": request.id, "method": request.method}
    if request.method == METHOD_CALL:
        message["params"] = {"name": request.tool_name, "arguments": request.arguments}
    return _dump_line(message)


def encode_result(request_id: str, payload: Any) -> bytes:
    return _dump_line({"jsonrpc": "2.0", "id": request_id, "result": payload})


def encode_tool_error(request_id: str, message: str, code: str = "TOOL_ERROR") -> bytes:
    return _dump_line(
        {
            "jsonrpc": "2.0",
            "id": request_id,
            "result": {"isError": True, "message": message, "code": code},
        }
    )


def encode_rpc_error(request_id: str, code: int, message: str) -> bytes:
    return _dump_line({"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}})


def _as_text(buffer: bytes | bytearray | str) -> str:
    if isinstance(buffer, (bytes, bytearray)):
        return buffer.decode("utf-8", errors="replace")
    return buffer


def _lines(buffer: bytes | bytearray | str) -> list[str]:
    # U+2028, U+0085 and friends stay raw inside JSON strings; only "\n" ends a line.
    return _as_text(buffer).split("\n")


def _iter_objects(buffer: bytes | bytearray | str):
    for line in _lines(buffer):
        line = line.strip()
        if not line.startswith("{"):
            continue
        try:
            message = json.loads(line)
        except json.JSONDecodeError:
            continue
        if isinstance(message, dict):
            yield message


def decode_responses(buffer: bytes | bytearray | str) -> list[ToolResponse]:
    """Return every response message found in ``buffer``, in stream order.

    Stateless: callers pass the whole accumulated buffer each time.
    """
    responses: list[ToolResponse] = []
    for message in _iter_objects(buffer):
        if message.get("id") is None:
            continue
        request_id = str(message["id"])
        if "result" in message:
            result = message["result"]
            if isinstance(result, dict) and result.get("isError"):
                responses.append(
                    ToolResponse.application_error(
                        request_id,
                        str(result.get("message") or "Tool reported an error"),
                        code=str(result.get("code") or "TOOL_ERROR"),
                    )
                )
            else:
                responses.append(ToolResponse.success(request_id, result))
        elif isinstance(message.get("error"), dict):
            error = message["error"]
            responses.append(
                ToolResponse.application_error(
                    request_id,
                    str(error.get("message") or "Tool server error"),
                    code=f"RPC_{error.get('code', 'ERROR')}",
                )
            )
    return responses


def decode_request(line: bytes | str) -> ToolRequest | None:
    """Parse one inbound line; ``None`` for anything that is not a request."""
    for message in _iter_objects(line):
        if message.get("id") is None or not isinstance(message.get("method"), str):
            return None
        params = message.get("params") if isinstance(message.get("params"), dict) else {}
        arguments = params.get("arguments") if isinstance(params.get("arguments"), dict) else {}
        name = params.get("name")
        return ToolRequest(
            id=str(message["id"]),
            method=message["method"],
            tool_name=name if isinstance(name, str) else None,
            arguments=arguments,
        )
    return None


def contains_ready_signal(buffer: bytes | bytearray | str) -> bool:
    return any(line.strip() == READY_SENTINEL for line in _lines(buffer))
