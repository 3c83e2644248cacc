"""Save a page selection into Notion.

Orchestrates one clip: load settings, pick and resolve the target path,
build header + content blocks and append them in a single request. Failures
anywhere in the chain abort the save and surface as one notification.
"""
from __future__ import annotations

import asyncio
import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

import aiohttp

from . import notion_utils as nu
from . import storage
from .errors import ClipperError, ConfigurationError
from .notion_utils.config import MAX_BLOCKS_PER_REQUEST, ClipperConfig
from .types import Block

logger = logging.getLogger(__name__)

SaveResult = Dict[str, Any]


@dataclass
class SaveRequest:
    """One user clip action."""
    text: str
    html: Optional[str] = None
    url: str = ""
    path: str = ""
    auto_create: bool = True


def notify(title: str, message: str, is_error: bool = False) -> None:
    """User-facing notification (stderr line + log record)."""
    if is_error:
        logger.error("%s: %s", title, message)
    else:
        logger.info("%s: %s", title, message)
    print(f"[NOTION] {title} - {message}", file=sys.stderr)


def build_blocks(
    text: str,
    source_url: str,
    html: Optional[str] = None,
    *,
    include_source: bool,
    now: datetime,
) -> List[Block]:
    """Header blocks followed by content blocks, capped at one request's worth."""
    header = nu.blocks.header_blocks(source_url, include_source=include_source, now=now)
    content = nu.html_to_blocks(html, text) if html else nu.text_blocks(text)
    all_blocks = header + content
    if len(all_blocks) > MAX_BLOCKS_PER_REQUEST:
        logger.info("Dropping %d blocks beyond the %d block request limit",
                    len(all_blocks) - MAX_BLOCKS_PER_REQUEST, MAX_BLOCKS_PER_REQUEST)
    return all_blocks[:MAX_BLOCKS_PER_REQUEST]


async def append_content(
    config: ClipperConfig,
    page_id: str,
    text: str,
    source_url: str,
    html: Optional[str] = None,
    *,
    state: Optional[storage.KeyValueStore] = None,
    now: Optional[datetime] = None,
) -> bool:
    """Append a clip to ``page_id``.

    The source line is skipped when ``source_url`` equals the URL of the
    previous save. The URL is recorded before the append is attempted, so a
    failed append still counts as the previous save.

    Raises:
        AppendError: the append request failed.
    """
    state = state or storage.local_store()
    last_saved_url = state.get(storage.KEY_LAST_SAVED_URL)
    include_source = last_saved_url != source_url
    state.set(**{storage.KEY_LAST_SAVED_URL: source_url})

    blocks = build_blocks(text, source_url, html, include_source=include_source, now=now or datetime.now())
    await nu.api.append_block_children(config.token, page_id, blocks)
    return True


async def check_connection(config: ClipperConfig) -> str:
    """Fetch the root page and return its title.

    Raises:
        ConfigurationError: token or root page id missing.
        NotionAPIError: the page could not be retrieved.
    """
    if not config.is_configured:
        raise ConfigurationError("Please fill in both token and page ID first")
    page = await nu.api.retrieve_page(config.token, config.root_page_id)
    return nu.api.page_title(page)


async def save_selection(
    request: SaveRequest,
    *,
    config: Optional[ClipperConfig] = None,
    sync_store: Optional[storage.KeyValueStore] = None,
    local_store: Optional[storage.KeyValueStore] = None,
    now: Optional[datetime] = None,
) -> SaveResult:
    """Resolve the target page and append the selection to it.

    Returns:
        ``{"success": True, "path": <expanded path>}`` or
        ``{"success": False, "error": <message>}``.
    """
    sync_store = sync_store or storage.sync_store()
    config = config or nu.config.load_config(sync_store)
    if not config.is_configured:
        notify("Configuration Required",
               "Please set up your Notion token and root page ID in options.", is_error=True)
        return {"success": False, "error": "Not configured"}

    target_path = nu.paths.choose_target_path(request.path, config, now)
    try:
        page_id = await nu.paths.resolve_path(config.token, config.root_page_id, target_path, request.auto_create)
        await append_content(config, page_id, request.text, request.url, request.html or "",
                             state=local_store, now=now)
    except (ClipperError, aiohttp.ClientError, asyncio.TimeoutError) as e:
        message = str(e) or e.__class__.__name__
        notify("Save Failed", message, is_error=True)
        return {"success": False, "error": message}

    if request.path and request.path.strip():
        sync_store.set(**{storage.KEY_LAST_PATH: request.path.strip()})
    notify("Saved to Notion!", f"Path: {target_path}")
    return {"success": True, "path": target_path}
