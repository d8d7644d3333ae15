"""
Capabilities Manager for the Bun Docs MCP proxy.
Holds the static tool and resource descriptions answered without any I/O.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List

from bun_docs_mcp import __version__
from bun_docs_mcp.core.request_models import DOCS_RESOURCE_URI

logger = logging.getLogger(__name__)

SERVER_NAME = "bun-docs-mcp-proxy"
PROTOCOL_VERSION = "2024-11-05"
SEARCH_TOOL_NAME = "SearchBun"
RESOURCE_MIME_TYPE = "application/json"


@dataclass
class Tool:
    """Tool definition."""
    name: str
    description: str
    inputSchema: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Resource:
    """Resource definition."""
    uri: str
    name: str
    description: str
    mimeType: str = RESOURCE_MIME_TYPE


class CapabilitiesManager:
    """Manages the tools and resources advertised to MCP clients."""

    def __init__(self):
        self.tools: Dict[str, Tool] = {}
        self.resources: Dict[str, Resource] = {}
        self._register_default_capabilities()

    def _register_default_capabilities(self) -> None:
        self.register_tool(Tool(
            name=SEARCH_TOOL_NAME,
            description="Search Bun documentation",
            inputSchema={
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Search query",
                    }
                },
                "required": ["query"],
            },
        ))

        self.register_resource(Resource(
            uri=DOCS_RESOURCE_URI,
            name="Bun Documentation",
            description="Search and browse Bun documentation",
        ))

    def register_tool(self, tool: Tool) -> None:
        logger.debug(f"Registering tool: {tool.name}")
        self.tools[tool.name] = tool

    def register_resource(self, resource: Resource) -> None:
        logger.debug(f"Registering resource: {resource.uri}")
        self.resources[resource.uri] = resource

    def get_capabilities(self) -> Dict[str, Any]:
        return {
            "tools": {},
            "resources": {},
        }

    def initialize_result(self) -> Dict[str, Any]:
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": self.get_capabilities(),
            "serverInfo": {
                "name": SERVER_NAME,
                "version": __version__,
            },
        }

    def list_tools(self) -> Dict[str, List[Dict[str, Any]]]:
        return {"tools": [asdict(tool) for tool in self.tools.values()]}

    def list_resources(self) -> Dict[str, List[Dict[str, Any]]]:
        return {"resources": [asdict(resource) for resource in self.resources.values()]}
