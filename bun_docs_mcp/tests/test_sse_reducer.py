import pytest
import httpx
from httpx_sse import ServerSentEvent

from bun_docs_mcp.core.sse_reducer import parse_sse_response, reduce_sse_events
from bun_docs_mcp.error_handling.exceptions import DecodeError

pytestmark = pytest.mark.asyncio


class RecordingStream:
    """Async iterator over events that counts how many were pulled."""

    def __init__(self, events, error=None):
        self._events = list(events)
        self._error = error
        self.pulled = 0

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self.pulled < len(self._events):
            event = self._events[self.pulled]
            self.pulled += 1
            return event
        if self._error is not None:
            raise self._error
        raise StopAsyncIteration


async def test_first_qualifying_event_wins():
    stream = RecordingStream([
        ServerSentEvent(event="heartbeat", data="ping"),
        ServerSentEvent(event="message", data="not json"),
        ServerSentEvent(event="message", data='{"result":{"tools":[]}}'),
        ServerSentEvent(event="message", data='{"result":"later"}'),
    ])

    result = await reduce_sse_events(stream)

    assert result == {"result": {"tools": []}}
    assert stream.pulled == 3


async def test_completion_event_and_error_payload():
    stream = RecordingStream([
        ServerSentEvent(event="completion", data='{"jsonrpc":"2.0","id":1,"error":{"code":-1,"message":"x"}}'),
    ])
    result = await reduce_sse_events(stream)
    assert result["error"]["message"] == "x"


async def test_skips_empty_data_and_objects_without_envelope():
    stream = RecordingStream([
        ServerSentEvent(event="message", data=""),
        ServerSentEvent(event="message", data='{"progress": 50}'),
        ServerSentEvent(event="message", data='["result"]'),
        ServerSentEvent(event="message", data='{"id":1,"result":null}'),
    ])
    assert await reduce_sse_events(stream) == {"id": 1, "result": None}


async def test_chunked_payload_is_not_reassembled():
    stream = RecordingStream([
        ServerSentEvent(event="message", data='{"result":'),
        ServerSentEvent(event="message", data='{"content":[]}}'),
    ])
    with pytest.raises(DecodeError, match="No valid JSON-RPC response in SSE stream"):
        await reduce_sse_events(stream)


async def test_stream_error_ends_reduction():
    stream = RecordingStream(
        [ServerSentEvent(event="message", data="garbage")],
        error=httpx.ReadError("connection reset"),
    )
    with pytest.raises(DecodeError):
        await reduce_sse_events(stream)


async def test_empty_stream_fails():
    with pytest.raises(DecodeError):
        await reduce_sse_events(RecordingStream([]))


async def test_parse_sse_response_from_http_body():
    body = (
        b": keep-alive comment\n\n"
        b"event: heartbeat\ndata: {}\n\n"
        b"data: {\"jsonrpc\":\"2.0\",\"id\":7,\"result\":{\"content\":[]}}\n\n"
    )
    response = httpx.Response(
        200,
        headers={"content-type": "text/event-stream"},
        content=body,
    )
    result = await parse_sse_response(response)
    assert result == {"jsonrpc": "2.0", "id": 7, "result": {"content": []}}
