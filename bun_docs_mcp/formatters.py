"""
Output formatters for CLI search results.

``json`` pretty-prints the result, ``text`` prints the content texts, and
``markdown`` replaces each search hit that carries a ``Link:`` line with the
raw MDX source of the linked documentation page.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

from bun_docs_mcp.core.forwarding_client import BunDocsClient
from bun_docs_mcp.error_handling.exceptions import BunDocsMCPError

logger = logging.getLogger(__name__)

LINK_PREFIX = "Link:"
MARKDOWN_SEPARATOR = "\n\n---\n\n"


class OutputFormat(str, Enum):
    JSON = "json"
    TEXT = "text"
    MARKDOWN = "markdown"


@dataclass
class DocEntry:
    """One search hit: its text and the documentation page it links to, if any."""
    text: str
    url: Optional[str] = None


def extract_content_texts(result: Any) -> List[str]:
    """String ``text`` fields of the ``content`` items; non-string texts are skipped."""
    if not isinstance(result, dict):
        return []
    content = result.get("content")
    if not isinstance(content, list):
        return []
    return [
        item["text"]
        for item in content
        if isinstance(item, dict) and isinstance(item.get("text"), str)
    ]


def extract_doc_entries(result: Any) -> List[DocEntry]:
    entries = []
    for text in extract_content_texts(result):
        url = None
        for line in text.splitlines():
            if line.startswith(LINK_PREFIX):
                url = line[len(LINK_PREFIX):].strip() or None
                break
        entries.append(DocEntry(text=text, url=url))
    return entries


def format_json(result: Any) -> str:
    return json.dumps(result, indent=2, ensure_ascii=False)


def format_text(result: Any) -> str:
    texts = extract_content_texts(result)
    if not texts:
        return format_json(result)
    return "".join(f"{text}\n\n" for text in texts)


async def format_markdown(result: Any, client: BunDocsClient) -> str:
    """
    Render results as Markdown, fetching the MDX source of linked pages.

    A failed fetch does not abort formatting: the entry falls back to its
    original text preceded by an error comment.
    """
    entries = extract_doc_entries(result)
    if not entries:
        return f"```json\n{format_json(result)}\n```\n"

    parts = []
    for entry in entries:
        if entry.url is None:
            parts.append(entry.text)
            continue
        try:
            mdx = await client.fetch_doc_markdown(entry.url)
        except BunDocsMCPError as e:
            logger.warning(f"Failed to fetch MDX from {entry.url}: {e}")
            parts.append(f"<!-- Error: {e} -->\n\n{entry.text}")
        else:
            parts.append(f"<!-- Source: {entry.url} -->\n\n{mdx}")

    return MARKDOWN_SEPARATOR.join(parts)


async def format_result(result: Any, output_format: OutputFormat, client: BunDocsClient) -> str:
    if output_format == OutputFormat.TEXT:
        return format_text(result)
    if output_format == OutputFormat.MARKDOWN:
        return await format_markdown(result, client)
    return format_json(result)
