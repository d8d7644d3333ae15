"""
Custom exceptions for the Bun Docs MCP proxy.
This module provides the exception classes raised by the forwarding engine
and mapped to JSON-RPC errors by the dispatcher.
"""

from typing import Optional

# JSON-RPC 2.0 reserved error codes
JSONRPC_PARSE_ERROR = -32700
JSONRPC_METHOD_NOT_FOUND = -32601
JSONRPC_INVALID_PARAMS = -32602
JSONRPC_INTERNAL_ERROR = -32603


class BunDocsMCPError(Exception):
    """Base exception class for Bun Docs MCP errors."""
    def __init__(self, message: str, code: int = JSONRPC_INTERNAL_ERROR, original_exception: Optional[Exception] = None):
        self.message = message
        self.code = code
        self.original_exception = original_exception
        super().__init__(self.message)


class ConfigurationError(BunDocsMCPError):
    """Configuration error."""
    def __init__(self, message: str = "Configuration error occurred", original_exception: Optional[Exception] = None):
        super().__init__(message, original_exception=original_exception)


class NetworkError(BunDocsMCPError):
    """Network error."""
    def __init__(self, message: str = "Network error occurred", original_exception: Optional[Exception] = None):
        super().__init__(message, original_exception=original_exception)


class UpstreamNetworkError(NetworkError):
    """Transport-level failure talking to the backend (no HTTP response)."""
    def __init__(self, message: str, transient: bool, original_exception: Optional[Exception] = None):
        super().__init__(message, original_exception=original_exception)
        self.transient = transient


class UpstreamStatusError(NetworkError):
    """Backend answered with a non-success HTTP status."""
    def __init__(
        self,
        message: str,
        status: int,
        transient: bool = False,
        content_type: str = "",
        body_snippet: str = "",
    ):
        super().__init__(message)
        self.status = status
        self.transient = transient
        self.content_type = content_type
        self.body_snippet = body_snippet


class ProtocolError(BunDocsMCPError):
    """Protocol error."""
    def __init__(self, message: str = "Protocol error occurred", original_exception: Optional[Exception] = None):
        super().__init__(message, original_exception=original_exception)


class DecodeError(ProtocolError):
    """A success response whose body could not be turned into a JSON value."""
    def __init__(self, message: str = "Failed to decode response", original_exception: Optional[Exception] = None):
        super().__init__(message, original_exception=original_exception)


class ParseError(BunDocsMCPError):
    """Inbound message is not valid JSON-RPC."""
    def __init__(self, message: str = "Parse error", original_exception: Optional[Exception] = None):
        super().__init__(message, code=JSONRPC_PARSE_ERROR, original_exception=original_exception)


class InvalidParamsError(BunDocsMCPError):
    """Invalid method parameters."""
    def __init__(self, message: str = "Invalid params", original_exception: Optional[Exception] = None):
        super().__init__(message, code=JSONRPC_INVALID_PARAMS, original_exception=original_exception)


class MethodNotFoundError(BunDocsMCPError):
    """Unknown JSON-RPC method."""
    def __init__(self, method: str):
        super().__init__(f"Method not found: {method}", code=JSONRPC_METHOD_NOT_FOUND)
        self.method = method
