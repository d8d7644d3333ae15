"""
Bun Docs MCP Server implementation.

Bridges stdio-based MCP clients and the HTTP/SSE Bun documentation API:

    stdin (JSON-RPC) -> dispatcher -> HTTP POST -> bun.com/docs/mcp -> JSON/SSE -> stdout (JSON-RPC)

``initialize``, ``tools/list`` and ``resources/list`` are answered locally;
``tools/call`` and ``resources/read`` are forwarded to the backend.
"""

import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from bun_docs_mcp.core.capabilities_manager import (
    RESOURCE_MIME_TYPE,
    SEARCH_TOOL_NAME,
    CapabilitiesManager,
)
from bun_docs_mcp.core.config import DEFAULT_CONFIG, ClientConfig
from bun_docs_mcp.core.forwarding_client import BunDocsClient
from bun_docs_mcp.core.protocol_handler import (
    JSONRPC_VERSION,
    JsonRpcRequest,
    JsonRpcResponse,
    ProtocolHandler,
)
from bun_docs_mcp.core.request_models import parse_bun_docs_uri, validate_request_params
from bun_docs_mcp.error_handling.exceptions import (
    BunDocsMCPError,
    MethodNotFoundError,
    ParseError,
)
from bun_docs_mcp.transport.stdio import StdioTransport

logger = logging.getLogger(__name__)

Handler = Callable[[JsonRpcRequest], Awaitable[Any]]


def build_search_request(request_id: Any, query: str) -> Dict[str, Any]:
    """Build the ``tools/call`` request that runs a documentation search."""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "method": "tools/call",
        "params": {
            "name": SEARCH_TOOL_NAME,
            "arguments": {"query": query},
        },
    }


def unwrap_result(response: Any) -> Any:
    """Return the ``result`` field of a backend response, or the response itself if it has none."""
    if isinstance(response, dict) and "result" in response:
        return response["result"]
    return response


class BunDocsMCPServer:
    """
    Dispatches JSON-RPC requests by exact method name.

    Requests are processed one at a time; each is fully resolved (including
    retries against the backend) before the next line is read.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, client: Optional[BunDocsClient] = None):
        """
        Initialize the server.

        Args:
            config: Configuration dictionary (see ``core.config``).
            client: Pre-built backend client; created from ``config`` if omitted.
        """
        self.config = config or dict(DEFAULT_CONFIG)
        self.client = client or BunDocsClient(ClientConfig.from_config(self.config))
        self.protocol_handler = ProtocolHandler()
        self.capabilities_manager = CapabilitiesManager()
        self._handlers: Dict[str, Handler] = {
            "initialize": self._handle_initialize,
            "tools/list": self._handle_list_tools,
            "tools/call": self._handle_call_tool,
            "resources/list": self._handle_list_resources,
            "resources/read": self._handle_read_resource,
        }

    async def process_request(self, request: JsonRpcRequest) -> JsonRpcResponse:
        """
        Dispatch a parsed request and wrap the outcome in a response envelope.

        Never raises: every failure becomes a JSON-RPC error carrying the
        request id.
        """
        logger.info(f"Received method: {request.method}")
        try:
            handler = self._handlers.get(request.method)
            if handler is None:
                raise MethodNotFoundError(request.method)
            result = await handler(request)
            return self.protocol_handler.create_response(request.id, result)
        except MethodNotFoundError as e:
            logger.error(f"Unsupported method: {request.method}")
            return self.protocol_handler.handle_error(request.id, e)
        except BunDocsMCPError as e:
            logger.error(f"Error handling {request.method}: {e}")
            return self.protocol_handler.handle_error(request.id, e)
        except Exception as e:
            logger.exception(f"Unexpected error handling {request.method}: {e}")
            return self.protocol_handler.handle_error(request.id, e)

    async def handle_message(self, message: str) -> str:
        """Handle one raw inbound line and return the serialized response line."""
        try:
            request = self.protocol_handler.parse_request(message)
        except ParseError as e:
            logger.error(f"Failed to parse JSON-RPC request: {e}")
            response = self.protocol_handler.handle_error(None, e)
        else:
            response = await self.process_request(request)
        return self.protocol_handler.serialize(response)

    async def _handle_initialize(self, request: JsonRpcRequest) -> Dict[str, Any]:
        return self.capabilities_manager.initialize_result()

    async def _handle_list_tools(self, request: JsonRpcRequest) -> Dict[str, Any]:
        return self.capabilities_manager.list_tools()

    async def _handle_list_resources(self, request: JsonRpcRequest) -> Dict[str, Any]:
        return self.capabilities_manager.list_resources()

    async def _handle_call_tool(self, request: JsonRpcRequest) -> Any:
        """Forward the request unchanged and unwrap the backend's ``result``."""
        original_request = {
            "jsonrpc": JSONRPC_VERSION,
            "id": request.id,
            "method": request.method,
            "params": request.params,
        }
        response = await self.client.forward_request(original_request)
        logger.info("Successfully got response from Bun Docs")
        return unwrap_result(response)

    async def _handle_read_resource(self, request: JsonRpcRequest) -> Dict[str, Any]:
        """Run a search for the URI's query and wrap the raw backend response as resource text."""
        params = validate_request_params(request.method, request.params)
        query = parse_bun_docs_uri(params.uri)

        response = await self.client.forward_request(build_search_request(request.id, query))
        logger.info("Successfully got resource from Bun Docs")

        return {
            "contents": [{
                "uri": params.uri,
                "mimeType": RESOURCE_MIME_TYPE,
                "text": json.dumps(response, separators=(",", ":")),
            }]
        }

    async def run(self, transport: Optional[StdioTransport] = None) -> None:
        """Serve requests from the transport until EOF."""
        transport = transport or StdioTransport()
        logger.info("Bun Docs MCP Proxy starting")
        while True:
            try:
                message = await transport.read_message()
            except (OSError, UnicodeDecodeError) as e:
                logger.error(f"Failed to read message: {e}")
                continue

            if message is None:
                logger.info("Connection closed")
                break
            if not message:
                continue

            response = await self.handle_message(message)
            try:
                await transport.write_message(response)
            except OSError as e:
                logger.error(f"Failed to write response: {e}")
                break
        logger.info("Bun Docs MCP Proxy shutting down")

    async def stop(self) -> None:
        await self.client.close()


async def main(config: Optional[Dict[str, Any]] = None) -> None:
    """Run the MCP server over stdio until stdin is closed."""
    server = BunDocsMCPServer(config)
    try:
        await server.run()
    finally:
        await server.stop()
