"""File-backed key/value settings stores.

Two stores mirror the browser extension's storage areas:

  * ``sync`` (``settings.env``): token, root page id, default path override,
    last used path.
  * ``local`` (``local.env``): last saved source URL.

Files use the ``.env`` layout (``KEY=value`` per line, ``#`` comments
ignored). Each read and write is a whole-file operation; there is no
locking across processes.
"""
from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

KEY_TOKEN = "NOTION_TOKEN"
KEY_ROOT_PAGE_ID = "NOTION_ROOT_PAGE_ID"
KEY_DEFAULT_PATH = "NOTION_DEFAULT_PATH"
KEY_LAST_PATH = "LAST_PATH"
KEY_LAST_SAVED_URL = "LAST_SAVED_URL"

LINE_BREAK_REGEX = re.compile(r"[\r\n]+")


def clipper_home() -> Path:
    return Path(os.getenv("NOTION_CLIPPER_HOME", str(Path.home() / ".notion_clipper")))


class KeyValueStore:
    """Single ``.env``-style file holding string settings."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"KeyValueStore({str(self.path)!r})"

    def load(self) -> dict[str, str]:
        """Load existing key=value pairs (ignoring comments and blank lines)."""
        data: dict[str, str] = {}
        if not self.path.exists():
            return data
        for line in self.path.read_text(encoding="utf-8").splitlines():
            if not line or line.startswith("#") or "=" not in line:
                continue
            k, v = line.split("=", 1)
            data[k.strip()] = v.strip()
        return data

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.load().get(key, default)

    def set(self, **values: str) -> None:
        """Write ``values`` in place (replacing existing keys, appending new ones).

        Line breaks are removed from values so each key stays on one line.
        """
        if not values:
            return
        lines = self.path.read_text(encoding="utf-8").splitlines() if self.path.exists() else []
        pending = {k: LINE_BREAK_REGEX.sub("", v) for k, v in values.items()}
        for i, line in enumerate(lines):
            key = line.split("=", 1)[0].strip() if "=" in line and not line.startswith("#") else None
            if key in pending:
                lines[i] = f"{key}={pending.pop(key)}"
        lines.extend(f"{k}={v}" for k, v in pending.items())
        self._write(lines)
        logger.debug("Stored %s in %s", sorted(values), self.path)

    def remove(self, key: str) -> None:
        if not self.path.exists():
            return
        lines = [
            line for line in self.path.read_text(encoding="utf-8").splitlines()
            if line.startswith("#") or line.split("=", 1)[0].strip() != key
        ]
        self._write(lines)

    def _write(self, lines: list[str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("\n".join(lines) + "\n" if lines else "", encoding="utf-8")


def sync_store() -> KeyValueStore:
    return KeyValueStore(clipper_home() / "settings.env")


def local_store() -> KeyValueStore:
    return KeyValueStore(clipper_home() / "local.env")
