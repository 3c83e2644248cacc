"""Thin async wrappers over the Notion endpoints the clipper uses.

  - child listing (single page of up to 100 children)
  - child page creation
  - block children append
  - page retrieval (connection check)

Every call takes the bearer token explicitly and raises a ``NotionAPIError``
subclass on non-2xx responses.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from notion_clipper.errors import (AppendError, ChildLookupError,
                                   NotionAPIError, PageCreateError)
from notion_clipper.types import JSON, Blocks

from .. import http_async as ha
from . import config as nuc

logger = logging.getLogger(__name__)


async def fetch_block_children(
    token: str,
    block_id: str,
    page_size: int = nuc.CHILDREN_PAGE_SIZE,
) -> List[JSON]:
    """Return the first page of children blocks for a block id.

    Only one page is fetched; children past ``page_size`` (max 100) are not
    returned.

    Raises:
        ChildLookupError: the listing request failed.
    """
    url = f"{nuc.NOTION_API_BASE}/blocks/{block_id}/children"
    params: Dict[str, Any] = {"page_size": min(max(page_size, 1), 100)}
    try:
        data = await ha.request_json("GET", url, headers=nuc.headers(token), params=params)
    except NotionAPIError as e:
        raise ChildLookupError.from_error(e) from e
    results = data.get("results")
    return results if isinstance(results, list) else []


def child_page_title(block: JSON) -> Optional[str]:
    if not isinstance(block, dict) or block.get("type") != "child_page":
        return None
    title = (block.get("child_page") or {}).get("title")
    return title if isinstance(title, str) else None


async def find_child_page(token: str, parent_id: str, title: str) -> Optional[str]:
    """Return the id of the direct child page titled ``title`` (case-insensitive)."""
    wanted = title.lower()
    for block in await fetch_block_children(token, parent_id):
        child_title = child_page_title(block)
        if child_title is not None and child_title.lower() == wanted:
            return block.get("id")
    return None


async def create_child_page(token: str, parent_id: str, title: str) -> str:
    """Create a page titled ``title`` under ``parent_id`` and return its id.

    Raises:
        PageCreateError: the create request failed or returned no id.
    """
    url = f"{nuc.NOTION_API_BASE}/pages"
    payload: Dict[str, Any] = {
        "parent": {"page_id": parent_id},
        "properties": {
            "title": {
                "title": [{"text": {"content": title}}],
            }
        },
    }
    try:
        data = await ha.request_json("POST", url, headers=nuc.headers(token), json=payload)
    except NotionAPIError as e:
        raise PageCreateError.from_error(e) from e
    pid = data.get("id")
    if not isinstance(pid, str):
        raise PageCreateError(200, "response carried no page id")
    logger.info("Created page '%s' (%s) under %s", title, pid, parent_id)
    return pid


async def append_block_children(token: str, block_id: str, children: Blocks) -> JSON:
    """Append ``children`` to a block/page in one request.

    Raises:
        AppendError: the append request failed.
    """
    url = f"{nuc.NOTION_API_BASE}/blocks/{block_id}/children"
    payload = {"children": children}
    try:
        data = await ha.request_json("PATCH", url, headers=nuc.headers(token), json=payload)
    except NotionAPIError as e:
        raise AppendError.from_error(e) from e
    logger.info("Appended %d blocks to %s", len(children), block_id)
    return data


async def retrieve_page(token: str, page_id: str) -> JSON:
    url = f"{nuc.NOTION_API_BASE}/pages/{page_id}"
    return await ha.request_json("GET", url, headers=nuc.headers(token))


def page_title(page: JSON) -> str:
    """Return the plain title of a page object ('Untitled' when absent)."""
    props = page.get("properties") if isinstance(page, dict) else None
    title_prop = props.get("title") if isinstance(props, dict) else None
    parts = title_prop.get("title") if isinstance(title_prop, dict) else None
    if isinstance(parts, list) and parts and isinstance(parts[0], dict):
        text = parts[0].get("plain_text")
        if isinstance(text, str) and text:
            return text
    return "Untitled"
