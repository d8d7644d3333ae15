"""
Command line entry point.

Without ``--search`` the MCP server runs over stdio. With ``--search`` a single
documentation query is sent to the Bun Docs API and the formatted result is
printed or written to a file.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import PurePath
from typing import List, Optional

from bun_docs_mcp import __version__
from bun_docs_mcp.core.config import ClientConfig, load_config
from bun_docs_mcp.core.forwarding_client import BunDocsClient
from bun_docs_mcp.core.logging_config import setup_logging, setup_logging_from_config
from bun_docs_mcp.core.mcp_server import build_search_request, main as run_server, unwrap_result
from bun_docs_mcp.error_handling.exceptions import BunDocsMCPError, ConfigurationError
from bun_docs_mcp.formatters import OutputFormat, format_result

logger = logging.getLogger(__name__)


def validate_output_path(path: str) -> None:
    """
    Reject output paths that could escape the working directory.

    Raises:
        ConfigurationError: For absolute paths or paths containing ``..``.
    """
    candidate = PurePath(path)
    if candidate.is_absolute() or candidate.drive or path.startswith(("/", "\\")):
        raise ConfigurationError(f"Invalid output path '{path}': absolute paths are not allowed (directory traversal)")
    if ".." in candidate.parts:
        raise ConfigurationError(f"Invalid output path '{path}': directory traversal is not allowed")


async def direct_search(
    query: str,
    output_format: OutputFormat = OutputFormat.JSON,
    output_path: Optional[str] = None,
    client: Optional[BunDocsClient] = None,
) -> str:
    """
    Execute a single search query in CLI mode.

    Returns:
        The formatted output (also written to ``output_path`` or stdout).
    """
    if not query.strip():
        raise ConfigurationError("Search query cannot be empty")
    if output_path:
        validate_output_path(output_path)

    owns_client = client is None
    client = client or BunDocsClient()
    try:
        response = await client.forward_request(build_search_request(1, query))
        formatted = await format_result(unwrap_result(response), output_format, client)
    finally:
        if owns_client:
            await client.close()

    if output_path:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(formatted)
        print(f"Output written to: {output_path}", file=sys.stderr)
    else:
        print(formatted)
    return formatted


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bun-docs-mcp-proxy",
        description="Bun Docs MCP Proxy - protocol adapter and CLI for Bun documentation",
    )
    parser.add_argument("-s", "--search", help="Search query for Bun documentation (enables CLI mode)")
    parser.add_argument("-o", "--output", help="Output file path (default: stdout)")
    parser.add_argument(
        "-f", "--format",
        choices=[f.value for f in OutputFormat],
        default=OutputFormat.JSON.value,
        help="Output format",
    )
    parser.add_argument("-c", "--config", help="Path to a YAML or JSON configuration file")
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    return parser


async def _run_search(args: argparse.Namespace, config: dict) -> None:
    async with BunDocsClient(ClientConfig.from_config(config)) as client:
        await direct_search(args.search, OutputFormat(args.format), args.output, client=client)


def main_cli(argv: Optional[List[str]] = None) -> None:
    """Command line entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if "logging" in config:
        setup_logging_from_config(config["logging"])
    else:
        setup_logging(config.get("log_level", "INFO"), "cli" if args.search is not None else "stdio")

    try:
        if args.search is not None:
            asyncio.run(_run_search(args, config))
        else:
            asyncio.run(run_server(config))
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except (BunDocsMCPError, OSError) as e:
        logger.error(f"Error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main_cli()
