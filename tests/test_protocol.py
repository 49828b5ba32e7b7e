import json

import pytest

from advisor_tools.protocol import (
    METHOD_LIST,
    READY_SENTINEL,
    ToolRequest,
    contains_ready_signal,
    decode_request,
    decode_responses,
    encode_request,
    encode_result,
    encode_rpc_error,
    encode_tool_error,
    new_request_id,
)


def test_encode_request_is_one_line():
    request = ToolRequest(id="r1", tool_name="get_market_data", arguments={"symbols": ["A\nB"]})
    line = encode_request(request)
    assert line.endswith(b"\n")
    assert line.count(b"\n") == 1
    message = json.loads(line)
    assert message["id"] == "r1"
    assert message["method"] == "tools/call"
    assert message["params"] == {"name": "get_market_data", "arguments": {"symbols": ["A\nB"]}}


def test_encode_list_request_has_no_params():
    message = json.loads(encode_request(ToolRequest(id="r2", method=METHOD_LIST)))
    assert message["method"] == "tools/list"
    assert "params" not in message


def test_decode_skips_noise_lines():
    buffer = b"".join(
        [
            b"booting...\n",
            READY_SENTINEL.encode() + b"\n",
            b"{not json\n",
            b"[1, 2, 3]\n",
            b'{"no_id": true}\n',
            encode_result("r1", {"value": 1}),
        ]
    )
    responses = decode_responses(buffer)
    assert [r.id for r in responses] == ["r1"]
    assert responses[0].ok
    assert responses[0].data == {"value": 1}


def test_decode_tool_error_and_rpc_error():
    buffer = encode_tool_error("a", "Missing required argument: tenantId", code="INVALID_ARGUMENT") + encode_rpc_error(
        "b", -32601, "Method not found: nope"
    )
    first, second = decode_responses(buffer)
    assert first.is_application_error
    assert first.error.code == "INVALID_ARGUMENT"
    assert "tenantId" in first.error.message
    assert second.is_application_error
    assert second.error.code == "RPC_-32601"


def test_decode_ignores_partial_trailing_line():
    full = encode_result("r1", {"ok": 1})
    assert decode_responses(full[:-5]) == []
    assert len(decode_responses(full)) == 1


def test_decode_coerces_numeric_ids():
    (response,) = decode_responses(b'{"id": 7, "result": []}\n')
    assert response.id == "7"
    assert response.data == []


def test_decode_request():
    request = decode_request(encode_request(ToolRequest(id="x", tool_name="t", arguments={"a": 1})))
    assert request == ToolRequest(id="x", tool_name="t", arguments={"a": 1})
    assert decode_request(b"hello\n") is None
    assert decode_request(b'{"method": "tools/call"}\n') is None


def test_ready_signal_detection():
    assert contains_ready_signal(f"log line\n{READY_SENTINEL}\n".encode())
    assert not contains_ready_signal(b"not ready yet\n")


def test_request_ids_are_unique():
    assert new_request_id("t") != new_request_id("t")


@pytest.mark.parametrize("separator", ["\u2028", "\u2029", "\u0085", "\x1c"])
def test_unicode_line_separators_stay_inside_one_message(separator):
    text = f"Markets{separator}rally"
    (response,) = decode_responses(encode_result("r1", {"title": text}))
    assert response.data == {"title": text}

    request = ToolRequest(id="r2", tool_name="get_financial_news", arguments={"topic": text})
    assert decode_request(encode_request(request)) == request


def test_accumulated_bytearray_buffer():
    buffer = bytearray(f"booting\n{READY_SENTINEL}\n".encode())
    assert contains_ready_signal(buffer)
    buffer.extend(encode_result("r1", {"ok": 1}))
    (response,) = decode_responses(buffer)
    assert response.id == "r1"
