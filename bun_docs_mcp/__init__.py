"""Bun Docs MCP proxy: stdio JSON-RPC bridge to the Bun documentation API."""

__version__ = "0.3.0"
