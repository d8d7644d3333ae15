"""
Stdio transport for JSON-RPC messages.

One JSON-RPC message per line on stdin, one per line on stdout. Logging never
goes to stdout.
"""

import asyncio
import logging
import sys
from typing import Optional, TextIO

logger = logging.getLogger(__name__)

# Maximum length of messages shown in debug logs (bytes)
DEBUG_MESSAGE_MAX_LEN = 80


def truncate_for_debug(message: str) -> str:
    encoded = message.encode("utf-8")
    if len(encoded) <= DEBUG_MESSAGE_MAX_LEN:
        return message
    return encoded[:DEBUG_MESSAGE_MAX_LEN].decode("utf-8", errors="ignore")


class StdioTransport:
    """Reads and writes newline-delimited messages over stdin/stdout."""

    def __init__(self, reader: Optional[TextIO] = None, writer: Optional[TextIO] = None):
        self.reader = reader or sys.stdin
        self.writer = writer or sys.stdout

    async def read_message(self) -> Optional[str]:
        """
        Read one message.

        Returns:
            None on EOF, an empty string for a blank line, otherwise the
            stripped line.
        """
        loop = asyncio.get_running_loop()
        line = await loop.run_in_executor(None, self.reader.readline)
        if not line:
            logger.debug("EOF on stdin")
            return None

        line = line.strip()
        if line:
            logger.debug(f"Read message: {truncate_for_debug(line)}...")
        return line

    async def write_message(self, message: str) -> None:
        logger.debug(f"Writing message: {truncate_for_debug(message)}...")
        self.writer.write(message)
        self.writer.write("\n")
        self.writer.flush()
