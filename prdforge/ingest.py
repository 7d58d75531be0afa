"""Document ingestion boundary.

Resolves a document source (local path or ``http(s)`` URL) to plain text
for the extractor.  Binary formats such as PDF are not decoded here; the
caller must supply already-extracted text.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import httpx

TEXT_SUFFIXES = (".md", ".markdown", ".txt", "")


def is_url(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


async def fetch_document(url: str, timeout: float = 30.0) -> str:
    """Download a text document.

    Raises:
        httpx.HTTPStatusError: On a non-2xx response.
        httpx.RequestError: On connection failures and timeouts.
    """
    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
        response = await client.get(url)
        response.raise_for_status()
        return response.text


async def read_document(path: str | Path) -> str:
    """Read a local text document without blocking the event loop.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValueError: If *path* is not a text or markdown file.
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Document not found: {path}")
    suffix = file_path.suffix.lower()
    if suffix not in TEXT_SUFFIXES:
        raise ValueError(
            f"Unsupported document type {suffix!r}: supply extracted text "
            f"(one of {', '.join(s or '<none>' for s in TEXT_SUFFIXES)})"
        )
    return await asyncio.to_thread(file_path.read_text, "utf-8")


async def load_document(source: str | Path, timeout: float = 30.0) -> str:
    """Return the text of *source*, fetching URLs and reading local files."""
    if isinstance(source, str) and is_url(source):
        return await fetch_document(source, timeout=timeout)
    return await read_document(source)
