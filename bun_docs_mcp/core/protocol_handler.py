"""
JSON-RPC 2.0 protocol handling for the MCP proxy.

Responses are modelled as a tagged union: a ``JsonRpcSuccess`` carries a
``result`` and a ``JsonRpcFailure`` carries an ``error``. A response with both
or neither cannot be constructed.
"""

import json
import logging
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, StrictStr, TypeAdapter, ValidationError

from bun_docs_mcp.error_handling.exceptions import (
    JSONRPC_INTERNAL_ERROR,
    BunDocsMCPError,
    ParseError,
)

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"


class JsonRpcRequest(BaseModel):
    """
    JSON-RPC 2.0 request model.

    ``id`` is required but may be null; it is opaque and echoed back verbatim.
    A message without ``id`` does not validate and is answered as a parse error.
    """
    jsonrpc: str = JSONRPC_VERSION
    id: Any
    method: StrictStr
    params: Optional[Any] = None


class JsonRpcError(BaseModel):
    """JSON-RPC 2.0 error object."""
    code: int
    message: str
    data: Optional[Any] = None


class JsonRpcSuccess(BaseModel):
    model_config = ConfigDict(extra="forbid")

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: Any = None
    result: Any


class JsonRpcFailure(BaseModel):
    model_config = ConfigDict(extra="forbid")

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: Any = None
    error: JsonRpcError


JsonRpcResponse = Union[JsonRpcSuccess, JsonRpcFailure]

_response_adapter: TypeAdapter = TypeAdapter(JsonRpcResponse)


def dump_response(response: JsonRpcResponse) -> Dict[str, Any]:
    """Wire representation; ``id`` is always present, ``error.data`` only when set."""
    payload: Dict[str, Any] = {"jsonrpc": response.jsonrpc, "id": response.id}
    if isinstance(response, JsonRpcSuccess):
        payload["result"] = response.result
    else:
        payload["error"] = response.error.model_dump(exclude_none=True)
    return payload


def load_response(data: Union[str, Dict[str, Any]]) -> JsonRpcResponse:
    """Parse a wire response back into ``JsonRpcSuccess`` or ``JsonRpcFailure``."""
    if isinstance(data, str):
        data = json.loads(data)
    return _response_adapter.validate_python(data)


class ProtocolHandler:
    """Parses inbound requests and builds JSON-RPC responses."""

    def parse_request(self, data: Union[str, bytes, Dict[str, Any]]) -> JsonRpcRequest:
        """
        Parse and validate a JSON-RPC request.

        Args:
            data: The raw line or an already decoded object.

        Returns:
            JsonRpcRequest: The parsed request.

        Raises:
            ParseError: If the data is not JSON or not a JSON-RPC request object.
        """
        try:
            if isinstance(data, (str, bytes)):
                data = json.loads(data)
            if not isinstance(data, dict):
                raise ParseError(f"Parse error: expected a JSON object, got {type(data).__name__}")
            return JsonRpcRequest.model_validate(data)
        except json.JSONDecodeError as e:
            raise ParseError(f"Parse error: {e}", original_exception=e)
        except ValidationError as e:
            raise ParseError(f"Parse error: {e.errors()[0]['msg']} at {e.errors()[0]['loc']}", original_exception=e)

    def create_response(self, request_id: Any, result: Any) -> JsonRpcSuccess:
        return JsonRpcSuccess(id=request_id, result=result)

    def create_error_response(
        self,
        request_id: Any,
        code: int,
        message: str,
        data: Optional[Any] = None,
    ) -> JsonRpcFailure:
        return JsonRpcFailure(id=request_id, error=JsonRpcError(code=code, message=message, data=data))

    def handle_error(self, request_id: Any, error: Exception) -> JsonRpcFailure:
        """
        Convert an exception into a JSON-RPC failure.

        Errors raised by the forwarding engine keep the default internal-error
        code and get an ``Internal error:`` prefix; caller errors keep their own
        code and message.
        """
        if isinstance(error, BunDocsMCPError):
            if error.code == JSONRPC_INTERNAL_ERROR:
                return self.create_error_response(request_id, JSONRPC_INTERNAL_ERROR, f"Internal error: {error.message}")
            return self.create_error_response(request_id, error.code, error.message)
        return self.create_error_response(request_id, JSONRPC_INTERNAL_ERROR, f"Internal error: {error}")

    def serialize(self, response: JsonRpcResponse) -> str:
        return json.dumps(dump_response(response), separators=(",", ":"))
