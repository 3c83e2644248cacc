"""Target path handling: token expansion, defaults and page resolution.

A path such as ``Notes/Rust/#today`` names a chain of child pages under the
configured root page. ``resolve_path`` walks it one segment at a time,
finding (or creating) each page before moving on to the next.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import List, Optional

from notion_clipper.errors import PathSegmentNotFound

from . import api as nua
from .config import ClipperConfig

logger = logging.getLogger(__name__)

# English month names, independent of the process locale
MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
TODAY_TOKEN = re.compile(r"#today", re.IGNORECASE)


def today_token(now: Optional[datetime] = None) -> str:
    """``DD-Month-YYYY``, e.g. ``18-January-2026``."""
    now = now or datetime.now()
    return f"{now.day:02d}-{MONTHS[now.month - 1]}-{now.year}"


def expand_path_tokens(path: str, now: Optional[datetime] = None) -> str:
    """Replace every ``#today`` (any case) with today's date."""
    if not path:
        return path
    replacement = today_token(now)
    return TODAY_TOKEN.sub(lambda _: replacement, path)


def default_path(now: Optional[datetime] = None) -> str:
    """Date based fallback path ``Inbox/<YYYY>/<Month>/<DD>``."""
    now = now or datetime.now()
    return f"Inbox/{now.year}/{MONTHS[now.month - 1]}/{now.day:02d}"


def choose_target_path(requested: Optional[str], config: ClipperConfig, now: Optional[datetime] = None) -> str:
    """Pick the path for a save and expand its tokens.

    Order: the requested path, the configured default path override, the
    date based default.
    """
    path = (requested or "").strip() or config.default_path.strip() or default_path(now)
    return expand_path_tokens(path, now)


def split_path(path: str) -> List[str]:
    """Split on ``/`` into trimmed, non-empty segments."""
    return [s.strip() for s in path.split("/") if s.strip()]


async def resolve_path(token: str, root_page_id: str, path: str, auto_create: bool = True) -> str:
    """Resolve ``path`` under ``root_page_id`` to a page id.

    Segments are resolved strictly left to right: each lookup needs the id
    produced by the previous one. A missing segment is created when
    ``auto_create`` is set. Pages created before a failure are kept.

    Raises:
        PathSegmentNotFound: a segment is missing and ``auto_create`` is off.
        ChildLookupError / PageCreateError: a remote call failed.
    """
    segments = split_path(path)
    if not segments:
        return root_page_id
    current = root_page_id
    for segment in segments:
        child_id = await nua.find_child_page(token, current, segment)
        if child_id:
            logger.debug("Found page '%s' (%s) under %s", segment, child_id, current)
            current = child_id
        elif auto_create:
            current = await nua.create_child_page(token, current, segment)
        else:
            raise PathSegmentNotFound(segment)
    logger.info("Resolved path '%s' -> %s", path, current)
    return current
