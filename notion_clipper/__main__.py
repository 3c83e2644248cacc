"""Command line front end for the Notion clipper.

Saves a selection (plain text plus optional HTML fragment) into a Notion page
addressed by a ``/`` path under the configured root page, and manages the
stored settings.

Examples:
    python -m notion_clipper --set-token secret_xxx --set-root-page-id https://notion.so/Root-0123...
    python -m notion_clipper --test-connection
    python -m notion_clipper --text-file clip.txt --html-file clip.html --url https://example.com --path "Notes/#today"
    pbpaste | python -m notion_clipper --text-file - --url https://example.com
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

import aiohttp

from . import clipper, storage
from .asyncio import run_async
from .errors import ClipperError
from .logging_utils import configure_logging
from .notion_utils import config as nuc
from .notion_utils.paths import default_path

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the top-level parser."""
    p = argparse.ArgumentParser(description="Save a text/HTML selection into a Notion page hierarchy.")
    p.add_argument("--text", help="Selected plain text")
    p.add_argument("--text-file", help="Read the selected plain text from a file ('-' for stdin)")
    p.add_argument("--html-file", help="Read the selected HTML fragment from a file")
    p.add_argument("--url", default="", help="Source page URL")
    p.add_argument(
        "--path",
        help="Target path under the root page, e.g. 'Notes/#today' (default: last used path)",
    )
    p.add_argument(
        "--no-auto-create",
        dest="auto_create",
        action="store_false",
        help="Fail instead of creating missing pages along the path",
    )
    p.add_argument("--set-token", help="Store the Notion integration token")
    p.add_argument("--set-root-page-id", help="Store the root page id (or page URL)")
    p.add_argument("--set-default-path", help="Store a default path override")
    p.add_argument("--test-connection", action="store_true", help="Check token and root page access")
    p.add_argument("--clear-path", action="store_true", help="Forget the last used path")
    p.add_argument("--show-default-path", action="store_true", help="Print today's default path")
    p.add_argument("--verbose", action="store_true", help="Verbose logging (DEBUG level)")
    return p


def _read_text(args: argparse.Namespace) -> str:
    if args.text is not None:
        return args.text
    if args.text_file == "-":
        return sys.stdin.read()
    if args.text_file:
        return Path(args.text_file).read_text(encoding="utf-8")
    return ""


def _configure(args: argparse.Namespace, store: storage.KeyValueStore) -> int:
    # Stored values only; environment overrides must not leak into the file
    stored = store.load()
    try:
        nuc.save_settings(
            store,
            args.set_token if args.set_token is not None else stored.get(storage.KEY_TOKEN, ''),
            args.set_root_page_id if args.set_root_page_id is not None else stored.get(storage.KEY_ROOT_PAGE_ID, ''),
            args.set_default_path if args.set_default_path is not None else stored.get(storage.KEY_DEFAULT_PATH, ''),
        )
    except ClipperError as e:
        print(f"[NOTION] {e}", file=sys.stderr)
        return 2
    print("[NOTION] Settings saved successfully!")
    return 0


async def _test_connection(store: storage.KeyValueStore) -> int:
    try:
        title = await clipper.check_connection(nuc.load_config(store))
    except (ClipperError, aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.debug("Connection check failed", exc_info=True)
        print(f"[NOTION] {str(e) or 'Connection failed'}", file=sys.stderr)
        return 1
    print(f'[NOTION] Connected! Root page: "{title}"')
    return 0


async def _save(args: argparse.Namespace, store: storage.KeyValueStore) -> int:
    text = _read_text(args)
    if not text.strip():
        clipper.notify("No text selected", "Please select some text first.", is_error=True)
        return 1
    html = Path(args.html_file).read_text(encoding="utf-8") if args.html_file else None
    config = nuc.load_config(store)
    explicit_path = args.path is not None
    request = clipper.SaveRequest(
        text=text,
        html=html,
        url=args.url,
        path=args.path if explicit_path else config.last_path,
        auto_create=args.auto_create,
    )
    result = await clipper.save_selection(request, config=config, sync_store=store)
    return 0 if result.get("success") else 1


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint for module execution."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose)
    store = storage.sync_store()
    if args.set_token is not None or args.set_root_page_id is not None or args.set_default_path is not None:
        return _configure(args, store)
    if args.clear_path:
        store.remove(storage.KEY_LAST_PATH)
        print("[NOTION] Path cleared - using default")
        return 0
    if args.show_default_path:
        print(default_path())
        return 0
    if args.test_connection:
        return run_async(_test_connection(store))
    return run_async(_save(args, store))


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
