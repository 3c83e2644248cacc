"""Async HTTP utilities with a shared aiohttp session.

Centralizes all outbound HTTP for Notion. Requests are single-shot: no retry,
no backoff and no timeout beyond aiohttp's own default.
"""
from __future__ import annotations

import asyncio
import json as json_lib
import logging
from typing import Any, Dict, Iterable, Optional

import aiohttp

from notion_clipper.errors import NotionAPIError
from notion_clipper.types import JSON

__all__ = [
    "get_session",
    "close_session",
    "request_json",
    "error_message",
]

logger = logging.getLogger(__name__)

_SESSION: Optional[aiohttp.ClientSession] = None
_SESSION_LOCK = asyncio.Lock()


async def get_session() -> aiohttp.ClientSession:
    """Return (and lazily create) the shared aiohttp ClientSession.

    Creates a single process-wide session and reuses it across calls until
    explicitly closed via ``close_session``. Safe under asyncio through an
    ``asyncio.Lock``.

    Returns:
        A live ``aiohttp.ClientSession`` instance.
    """
    global _SESSION
    if _SESSION and not _SESSION.closed:
        return _SESSION
    async with _SESSION_LOCK:
        if _SESSION and not _SESSION.closed:
            return _SESSION
        _SESSION = aiohttp.ClientSession()
    return _SESSION


async def close_session() -> None:
    """Close and reset the shared session if it exists.

    Safe to call multiple times. After closing, the next ``get_session`` call
    will create a fresh session.
    """
    global _SESSION
    if _SESSION and not _SESSION.closed:
        await _SESSION.close()
    _SESSION = None


def error_message(body: str) -> Optional[str]:
    """Return the ``message`` field of a Notion JSON error body, if any."""
    try:
        data = json_lib.loads(body)
    except ValueError:
        return None
    msg = data.get("message") if isinstance(data, dict) else None
    return msg if isinstance(msg, str) and msg else None


async def request_json(
    method: str,
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    json: Any = None,
    params: Optional[Dict[str, Any]] = None,
    expected: Iterable[int] | None = None,
) -> JSON:
    """Perform one HTTP request and return the decoded JSON body.

    Raises:
        NotionAPIError: status outside ``expected`` (default: any 2xx). The
            remote ``message`` is attached when the error body carries one.
    """
    sess = await get_session()
    expected_set = set(expected) if expected else set(range(200, 300))
    async with sess.request(method.upper(), url, headers=headers, json=json, params=params) as resp:
        if resp.status in expected_set:
            if resp.content_type == "application/json":
                return await resp.json()
            text = await resp.text()
            return {"_text": text, "status": resp.status}
        body = await resp.text()
    logger.warning("%s %s failed: %s %s", method.upper(), url, resp.status, body[:300])
    raise NotionAPIError(resp.status, error_message(body))
