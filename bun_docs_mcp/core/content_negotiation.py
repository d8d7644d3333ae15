"""
Response-format helpers.

Normalizes the Content-Type of backend responses and renders the compact
diagnostics attached to HTTP errors.
"""

from typing import Mapping, Union

import httpx

HeadersLike = Union[httpx.Headers, Mapping[str, str]]


def main_content_type(headers: HeadersLike) -> str:
    """
    Extract the primary MIME type from response headers.

    ``application/json; charset=utf-8`` becomes ``application/json``. The result
    is always lowercase, and empty when the header is missing or not valid text.
    """
    if not isinstance(headers, httpx.Headers):
        headers = httpx.Headers(headers)
    raw = headers.raw
    for key, value in raw:
        if key.lower() != b"content-type":
            continue
        try:
            content_type = value.decode("ascii")
        except UnicodeDecodeError:
            return ""
        return content_type.split(";", 1)[0].strip().lower()
    return ""


def summarize_headers(headers: HeadersLike, limit: int = 8) -> str:
    """Render up to ``limit`` headers as ``key: value`` pairs for error messages."""
    if not isinstance(headers, httpx.Headers):
        headers = httpx.Headers(headers)
    parts = []
    for key, value in headers.raw[:limit]:
        try:
            rendered = value.decode("ascii")
        except UnicodeDecodeError:
            rendered = "<binary>"
        parts.append(f"{key.decode('latin-1').lower()}: {rendered}")
    return ", ".join(parts)


def truncate_utf8(text: str, max_bytes: int) -> str:
    """Truncate ``text`` to at most ``max_bytes`` UTF-8 bytes without splitting a character."""
    encoded = text.encode("utf-8")
    if len(encoded) <= max_bytes:
        return text
    return encoded[:max_bytes].decode("utf-8", errors="ignore")
