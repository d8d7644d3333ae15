"""
Server-Sent Events reducer for Bun Docs API responses.

The backend may answer a forwarded JSON-RPC request with a ``text/event-stream``
body. Only ``message`` and ``completion`` events are considered; heartbeats and
other event types are ignored. The first event whose data is a JSON object
carrying a ``result`` or ``error`` key is returned and the rest of the stream
is abandoned.

This reducer expects one complete JSON-RPC object inside a single event's
``data`` field. It does not concatenate partial payloads spread over several
events: if the backend ever switches to delta streaming, no event matches and
the reducer fails with ``DecodeError`` instead of guessing at a reassembly.
"""

import json
import logging
from typing import Any, AsyncIterator

import httpx
from httpx_sse import EventSource, ServerSentEvent, SSEError

from bun_docs_mcp.error_handling.exceptions import DecodeError

logger = logging.getLogger(__name__)

ACCEPTED_EVENT_TYPES = frozenset({"message", "completion"})

# Characters of undecodable event data echoed to the debug log
DEBUG_DATA_MAX_LEN = 200

STREAM_ERRORS = (SSEError, httpx.StreamError, httpx.TransportError)


def is_jsonrpc_payload(value: Any) -> bool:
    """A decoded event qualifies when it is an object with ``result`` or ``error``."""
    return isinstance(value, dict) and ("result" in value or "error" in value)


async def reduce_sse_events(events: AsyncIterator[ServerSentEvent]) -> Any:
    """
    Pull events one at a time until the first JSON-RPC response shows up.

    Args:
        events: Async iterator of parsed SSE events.

    Returns:
        The decoded JSON-RPC object.

    Raises:
        DecodeError: If the stream ends or fails before a qualifying event.
    """
    try:
        async for event in events:
            event_type = event.event or "message"
            logger.debug(f"SSE event type: {event_type}")
            if event_type not in ACCEPTED_EVENT_TYPES:
                logger.debug(f"Skipping SSE event type: {event_type}")
                continue

            data = event.data
            if not data:
                continue

            try:
                parsed = json.loads(data)
            except json.JSONDecodeError as e:
                logger.warning(f"Failed to parse SSE data as JSON: {e}")
                logger.debug(f"SSE data: {data[:DEBUG_DATA_MAX_LEN]}")
                continue

            if is_jsonrpc_payload(parsed):
                logger.debug("Parsed SSE data successfully")
                return parsed
    except STREAM_ERRORS as e:
        logger.warning(f"SSE stream error: {e}")

    raise DecodeError("No valid JSON-RPC response in SSE stream")


async def parse_sse_response(response: httpx.Response) -> Any:
    """Reduce a streamed ``httpx.Response`` carrying ``text/event-stream``."""
    event_source = EventSource(response)
    return await reduce_sse_events(event_source.aiter_sse())
