import io

import pytest

from bun_docs_mcp.transport.stdio import StdioTransport, truncate_for_debug


@pytest.mark.asyncio
async def test_read_messages_until_eof():
    transport = StdioTransport(reader=io.StringIO('{"a":1}\n\n  {"b":2}  \r\n'), writer=io.StringIO())

    assert await transport.read_message() == '{"a":1}'
    assert await transport.read_message() == ""
    assert await transport.read_message() == '{"b":2}'
    assert await transport.read_message() is None


@pytest.mark.asyncio
async def test_write_message_appends_newline():
    writer = io.StringIO()
    transport = StdioTransport(reader=io.StringIO(), writer=writer)

    await transport.write_message('{"jsonrpc":"2.0","id":1,"result":{}}')

    assert writer.getvalue() == '{"jsonrpc":"2.0","id":1,"result":{}}\n'


def test_truncate_for_debug():
    assert truncate_for_debug("short") == "short"
    assert len(truncate_for_debug("x" * 500).encode("utf-8")) == 80
    assert truncate_for_debug("é" * 100) == "é" * 40
