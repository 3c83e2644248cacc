"""Notion block object builders.

Every block the clipper submits goes through these helpers so content
truncation and payload shape stay in one place:

  - ``_rt`` / ``text_segment`` build ``rich_text`` arrays
  - ``text_block`` / ``code_block`` / ``divider_block`` build block objects
  - ``header_blocks`` builds the spacer/divider/source/date preamble of a clip
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from notion_clipper.types import Block, Blocks, RichText

from .config import DEFAULT_CODE_LANGUAGE, MAX_TEXT_LENGTH

TEXT_BLOCK_TYPES = frozenset({
    "paragraph",
    "heading_1",
    "heading_2",
    "heading_3",
    "quote",
    "bulleted_list_item",
    "numbered_list_item",
    "code",
})


def text_segment(
    text: str,
    *,
    link: Optional[str] = None,
    annotations: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Return one rich_text ``text`` segment (content truncated to 2000 chars)."""
    text_obj: Dict[str, Any] = {"content": text[:MAX_TEXT_LENGTH]}
    if link:
        text_obj["link"] = {"url": link}
    seg: Dict[str, Any] = {"type": "text", "text": text_obj}
    if annotations:
        seg["annotations"] = annotations
    return seg


def _rt(text: str) -> RichText:
    """Helper to build a rich_text array with truncated content (<=2000 chars)."""
    return [text_segment(text)]


def text_block(block_type: str, text: str) -> Block:
    if block_type not in TEXT_BLOCK_TYPES:
        raise ValueError(f"Unsupported block type {block_type!r}")
    return {
        "object": "block",
        "type": block_type,
        block_type: {"rich_text": _rt(text)},
    }


def paragraph_block(text: str) -> Block:
    return text_block("paragraph", text)


def heading_block(level: int, text: str) -> Block:
    return text_block(f"heading_{min(max(level, 1), 3)}", text)


def code_block(text: str, language: str = DEFAULT_CODE_LANGUAGE) -> Block:
    return {
        "object": "block",
        "type": "code",
        "code": {"rich_text": _rt(text), "language": language},
    }


def spacer_block() -> Block:
    return {"object": "block", "type": "paragraph", "paragraph": {"rich_text": []}}


def divider_block() -> Block:
    return {"object": "block", "type": "divider", "divider": {}}


def block_text(block: Block) -> str:
    """Concatenate the rich_text contents of a block ('' for non-text blocks)."""
    t = block.get("type")
    section = block.get(t, {}) if isinstance(t, str) else {}
    rt = section.get("rich_text") if isinstance(section, dict) else None
    if not isinstance(rt, list):
        return ""
    return "".join(
        r.get("text", {}).get("content", "") for r in rt if isinstance(r, dict)
    )


def format_clip_date(now: datetime) -> str:
    """``M/D/YYYY`` without zero padding (en-US short date)."""
    return f"{now.month}/{now.day}/{now.year}"


def format_clip_time(now: datetime) -> str:
    """``h:mm am`` in 12 hour clock, lower case."""
    hour = now.hour % 12 or 12
    suffix = "am" if now.hour < 12 else "pm"
    return f"{hour}:{now.minute:02d} {suffix}"


def source_line_block(source_url: str) -> Block:
    return {
        "object": "block",
        "type": "paragraph",
        "paragraph": {
            "rich_text": [
                text_segment("source", annotations={"code": True, "color": "red"}),
                text_segment(" : "),
                text_segment(source_url, link=source_url),
            ]
        },
    }


def date_line_block(now: datetime) -> Block:
    return {
        "object": "block",
        "type": "paragraph",
        "paragraph": {
            "rich_text": [
                text_segment(format_clip_date(now), annotations={"code": True}),
                text_segment("  "),
                text_segment(format_clip_time(now), annotations={"code": True}),
            ]
        },
    }


def header_blocks(source_url: str, *, include_source: bool, now: datetime) -> Blocks:
    """Build the blocks that precede every clip.

    A spacer paragraph and a divider are always present; the source line is
    added only when ``include_source`` is set; the date/time line always
    closes the header.
    """
    blocks: List[Block] = [spacer_block(), divider_block()]
    if include_source:
        blocks.append(source_line_block(source_url))
    blocks.append(date_line_block(now))
    return blocks
