"""Notion helpers shared by the clipper.

Centralizes:
  - API version / header construction and settings loading
  - Child page lookup, page creation and block append calls
  - HTML selection -> block conversion (with plain text fallback)
  - Target path expansion and find-or-create resolution
"""

from . import api, blocks, config, paths
from .blocks import _rt, header_blocks
from .html import (classify, html_to_blocks, looks_like_code, strip_html,
                   text_blocks)
from .paths import expand_path_tokens, resolve_path

__all__ = [
    "_rt",
    "api",
    "blocks",
    "config",
    "paths",
    "classify",
    "header_blocks",
    "html_to_blocks",
    "looks_like_code",
    "strip_html",
    "text_blocks",
    "expand_path_tokens",
    "resolve_path",
]
