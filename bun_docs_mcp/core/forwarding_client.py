"""
HTTP client for the Bun Docs API with SSE support and automatic retries.

Forwards JSON-RPC requests to the Bun Docs API, parses either plain JSON or
Server-Sent Events responses, and retries transient failures (network errors,
429 and 5xx statuses) up to ``MAX_RETRIES`` times with exponential backoff
(200 ms, 400 ms, 800 ms, capped at 1 s).
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import httpx

from bun_docs_mcp.core.config import ClientConfig, BUN_DOCS_API
from bun_docs_mcp.core.content_negotiation import main_content_type, summarize_headers, truncate_utf8
from bun_docs_mcp.core.retry_policy import (
    MAX_RETRIES,
    RetryState,
    backoff_delay_ms,
    is_transient_network_error,
    is_transient_status,
)
from bun_docs_mcp.core.sse_reducer import parse_sse_response
from bun_docs_mcp.error_handling.exceptions import (
    DecodeError,
    NetworkError,
    UpstreamNetworkError,
    UpstreamStatusError,
)

logger = logging.getLogger(__name__)

# Maximum error response body size to read (100KB)
MAX_ERROR_BODY_SIZE = 100_000

# Maximum size of the body snippet quoted in error messages (bytes)
BODY_SNIPPET_MAX_BYTES = 2048

SEND_ERRORS = (httpx.HTTPError, httpx.InvalidURL)


async def _backoff_sleep(delay_ms: int) -> None:
    await asyncio.sleep(delay_ms / 1000)


class BunDocsClient:
    """
    Forwards JSON-RPC requests to the Bun Docs API.

    Owns a single ``httpx.AsyncClient`` for its whole lifetime; the client is
    safe to share between requests since no per-request state is stored on it.
    """

    def __init__(self, config: Optional[ClientConfig] = None):
        """
        Initialize the client.

        Args:
            config: Base URL and per-attempt timeout. Defaults to the public
                Bun Docs API with a 5 second timeout.
        """
        self.config = config or ClientConfig.from_url(BUN_DOCS_API)
        self.base_url = self.config.base_url
        self.async_client = httpx.AsyncClient(follow_redirects=True)
        logger.debug(f"httpx.AsyncClient initialized for {self.base_url} with timeout={self.config.timeout}s")

    @classmethod
    def with_base_url(cls, url: str, timeout: Optional[float] = None) -> "BunDocsClient":
        """Create a client for a custom base URL (e.g. a mock server)."""
        if timeout is None:
            return cls(ClientConfig.from_url(url))
        return cls(ClientConfig.from_url(url, timeout))

    def _get_headers(self) -> Dict[str, str]:
        """Get the headers for forwarded JSON-RPC requests."""
        return {
            "Content-Type": "application/json",
            "Accept": "application/json, text/event-stream",
        }

    async def forward_request(self, request: Any) -> Any:
        """
        Forward a JSON-RPC request to the Bun Docs API with automatic retries.

        Args:
            request: JSON-RPC request object.

        Returns:
            The decoded JSON-RPC response from the API.

        Raises:
            UpstreamStatusError: Non-success status, immediately for
                non-transient codes or after the last attempt.
            UpstreamNetworkError: Fatal network error, or a transient one on
                the last attempt.
            DecodeError: The success body could not be decoded.
        """
        logger.debug("Forwarding request to Bun Docs API")
        body = json.dumps(request).encode("utf-8")
        state = RetryState()

        while state.attempt <= MAX_RETRIES:
            try:
                return await self._send_once(body, state.attempt)
            except (UpstreamStatusError, UpstreamNetworkError) as e:
                if not (e.transient and state.has_attempts_left):
                    raise
                if isinstance(e, UpstreamStatusError):
                    logger.warning(f"Transient HTTP status {e.status}, retrying (attempt {state.attempt + 1})")
                else:
                    logger.warning(f"Network error: {e}. Retrying (attempt {state.attempt + 1} of {MAX_RETRIES})")
                await _backoff_sleep(backoff_delay_ms(state.attempt))
                state = state.next(e)

        raise state.last_error or NetworkError("Unknown error sending request")

    async def _send_once(self, body: bytes, attempt: int) -> Any:
        """
        Perform exactly one HTTP round trip.

        The configured timeout bounds the whole attempt, including the SSE
        reduction or body read.
        """
        try:
            return await asyncio.wait_for(self._round_trip(body, attempt), timeout=self.config.timeout)
        except asyncio.TimeoutError as e:
            raise UpstreamNetworkError(
                f"Failed to send request to Bun Docs API: no complete response within {self.config.timeout}s",
                transient=True,
                original_exception=e,
            )

    async def _round_trip(self, body: bytes, attempt: int) -> Any:
        try:
            async with self.async_client.stream(
                "POST",
                self.base_url,
                content=body,
                headers=self._get_headers(),
                timeout=self.config.timeout,
            ) as response:
                logger.info(f"Bun Docs API response status: {response.status_code} (attempt {attempt} of {MAX_RETRIES})")
                return await self._handle_response(response)
        except SEND_ERRORS as e:
            raise UpstreamNetworkError(
                f"Failed to send request to Bun Docs API: {e}",
                transient=is_transient_network_error(e),
                original_exception=e,
            )

    async def _handle_response(self, response: httpx.Response) -> Any:
        content_type = main_content_type(response.headers)

        if response.is_success:
            if content_type.startswith("text/event-stream"):
                logger.debug("Parsing SSE stream")
                return await parse_sse_response(response)
            logger.debug("Parsing regular JSON response")
            return await self._read_json(response)

        raw = await self._read_limited(response, MAX_ERROR_BODY_SIZE)
        body_snippet = truncate_utf8(raw.decode("utf-8", errors="replace"), BODY_SNIPPET_MAX_BYTES)
        status = response.status_code
        message = (
            f"Bun Docs API error: status={status} {response.reason_phrase} "
            f"content_type={content_type or '<none>'} "
            f"headers=[{summarize_headers(response.headers)}] "
            f"body_snippet=\"{body_snippet}\""
        )
        raise UpstreamStatusError(
            message,
            status=status,
            transient=is_transient_status(status),
            content_type=content_type,
            body_snippet=body_snippet,
        )

    async def _read_json(self, response: httpx.Response) -> Any:
        try:
            raw = await response.aread()
        except httpx.HTTPError as e:
            raise DecodeError(f"Failed to read JSON response: {e}", original_exception=e)
        try:
            return json.loads(raw)
        except ValueError as e:
            raise DecodeError(f"Failed to parse JSON response: {e}", original_exception=e)

    async def _read_limited(self, response: httpx.Response, limit: int) -> bytes:
        """Read at most ``limit`` bytes of the body, stopping as soon as the cap is hit."""
        buffer = bytearray()
        try:
            async for chunk in response.aiter_bytes():
                buffer.extend(chunk)
                if len(buffer) >= limit:
                    break
        except httpx.HTTPError as e:
            logger.warning(f"Failed to read error response body: {e}")
        return bytes(buffer[:limit])

    async def fetch_doc_markdown(self, url: str) -> str:
        """
        Fetch a documentation page as raw Markdown/MDX.

        A single GET with ``Accept: text/markdown``; never retried.

        Raises:
            NetworkError: If the request fails to send.
            UpstreamStatusError: If the server answers with a non-success status.
        """
        logger.debug(f"Fetching MDX for URL: {url}")
        try:
            response = await asyncio.wait_for(
                self.async_client.get(
                    url,
                    headers={"Accept": "text/markdown"},
                    timeout=self.config.timeout,
                ),
                timeout=self.config.timeout,
            )
        except SEND_ERRORS as e:
            raise NetworkError(f"Failed to send request for markdown: {e}", original_exception=e)
        except asyncio.TimeoutError as e:
            raise NetworkError(f"Failed to send request for markdown: timed out after {self.config.timeout}s", original_exception=e)

        if not response.is_success:
            raise UpstreamStatusError(
                f"Failed to fetch markdown: HTTP {response.status_code} for URL: {url}",
                status=response.status_code,
            )

        text = response.text
        logger.debug(f"Successfully fetched {len(text)} bytes of MDX")
        return text

    async def close(self) -> None:
        """Close the underlying httpx client."""
        await self.async_client.aclose()
        logger.debug("httpx.AsyncClient closed.")

    async def __aenter__(self) -> "BunDocsClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
