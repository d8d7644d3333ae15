import json

import pytest
from pydantic import ValidationError

from bun_docs_mcp.core.protocol_handler import (
    JsonRpcFailure,
    JsonRpcSuccess,
    ProtocolHandler,
    dump_response,
    load_response,
)
from bun_docs_mcp.error_handling.exceptions import (
    DecodeError,
    InvalidParamsError,
    MethodNotFoundError,
    ParseError,
    UpstreamStatusError,
)


@pytest.fixture
def handler():
    return ProtocolHandler()


def test_parse_request(handler):
    request = handler.parse_request('{"jsonrpc":"2.0","id":"abc","method":"tools/list"}')
    assert request.id == "abc"
    assert request.method == "tools/list"
    assert request.params is None


def test_parse_request_accepts_explicit_null_id(handler):
    request = handler.parse_request('{"jsonrpc":"2.0","id":null,"method":"tools/list"}')
    assert request.id is None


def test_parse_request_keeps_id_verbatim(handler):
    request = handler.parse_request(b'{"jsonrpc":"2.0","id":{"nested":[1,2]},"method":"initialize","params":{}}')
    assert request.id == {"nested": [1, 2]}
    assert request.params == {}


@pytest.mark.parametrize("raw", [
    "{invalid json",
    "[1, 2, 3]",
    '"just a string"',
    '{"jsonrpc":"2.0","id":1}',
    '{"jsonrpc":"2.0","id":1,"method":42}',
    '{"jsonrpc":"2.0","method":"notifications/initialized"}',
])
def test_parse_request_errors(handler, raw):
    with pytest.raises(ParseError) as exc_info:
        handler.parse_request(raw)
    assert exc_info.value.code == -32700
    assert str(exc_info.value).startswith("Parse error")


def test_success_serialization(handler):
    response = handler.create_response(1, {"tools": []})
    assert handler.serialize(response) == '{"jsonrpc":"2.0","id":1,"result":{"tools":[]}}'


def test_null_result_and_null_id_are_kept(handler):
    response = handler.create_response(None, None)
    assert json.loads(handler.serialize(response)) == {"jsonrpc": "2.0", "id": None, "result": None}


def test_error_serialization_omits_missing_data(handler):
    response = handler.create_error_response(7, -32601, "Method not found: foo")
    assert json.loads(handler.serialize(response)) == {
        "jsonrpc": "2.0",
        "id": 7,
        "error": {"code": -32601, "message": "Method not found: foo"},
    }


def test_error_serialization_with_data(handler):
    response = handler.create_error_response(7, -32603, "boom", data={"detail": 1})
    assert json.loads(handler.serialize(response))["error"]["data"] == {"detail": 1}


def test_round_trip_preserves_variant(handler):
    success = handler.create_response("x", {"content": [{"type": "text", "text": "hi"}]})
    failure = handler.create_error_response("y", -32602, "Missing params")

    loaded_success = load_response(handler.serialize(success))
    loaded_failure = load_response(dump_response(failure))

    assert isinstance(loaded_success, JsonRpcSuccess)
    assert loaded_success == success
    assert isinstance(loaded_failure, JsonRpcFailure)
    assert loaded_failure == failure


@pytest.mark.parametrize("payload", [
    {"jsonrpc": "2.0", "id": 1, "result": {}, "error": {"code": -1, "message": "x"}},
    {"jsonrpc": "2.0", "id": 1},
])
def test_result_and_error_are_exclusive(payload):
    with pytest.raises(ValidationError):
        load_response(payload)


def test_handle_error_internal_prefix(handler):
    response = handler.handle_error(3, UpstreamStatusError("Bun Docs API error: status=503", status=503, transient=True))
    assert response.error.code == -32603
    assert response.error.message == "Internal error: Bun Docs API error: status=503"


def test_handle_error_decode_error(handler):
    response = handler.handle_error(3, DecodeError("No valid JSON-RPC response in SSE stream"))
    assert response.error.message == "Internal error: No valid JSON-RPC response in SSE stream"


def test_handle_error_keeps_caller_codes(handler):
    invalid = handler.handle_error(1, InvalidParamsError("Missing params"))
    missing = handler.handle_error(2, MethodNotFoundError("foo/bar"))

    assert (invalid.error.code, invalid.error.message) == (-32602, "Missing params")
    assert (missing.error.code, missing.error.message) == (-32601, "Method not found: foo/bar")


def test_handle_error_unexpected_exception(handler):
    response = handler.handle_error(1, RuntimeError("unexpected"))
    assert response.error.code == -32603
    assert response.error.message == "Internal error: unexpected"
