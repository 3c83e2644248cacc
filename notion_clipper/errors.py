"""Error hierarchy for clipping operations.

Every failure in the resolve-then-append chain is one of these; the save
flow turns them into a single user notification.
"""
from __future__ import annotations

from typing import Optional

__all__ = [
    "ClipperError",
    "ConfigurationError",
    "NotionAPIError",
    "ChildLookupError",
    "PageCreateError",
    "AppendError",
    "PathSegmentNotFound",
]


class ClipperError(Exception):
    """Base class for all clipper failures."""


class ConfigurationError(ClipperError):
    """Token or root page id missing / invalid."""


class NotionAPIError(ClipperError):
    """Non-2xx response from the Notion API.

    Attributes:
        status: HTTP status code.
        remote_message: ``message`` field of the JSON error body, when present.
    """

    prefix = "Notion request failed"

    def __init__(self, status: int, remote_message: Optional[str] = None) -> None:
        self.status = status
        self.remote_message = remote_message
        super().__init__(f"{self.prefix}: {self.detail}")

    @property
    def detail(self) -> str:
        return self.remote_message or str(self.status)

    @classmethod
    def from_error(cls, err: "NotionAPIError") -> "NotionAPIError":
        return cls(err.status, err.remote_message)


class ChildLookupError(NotionAPIError):
    prefix = "Failed to fetch children"

    @property
    def detail(self) -> str:
        # Lookup failures only ever report the status code.
        return str(self.status)


class PageCreateError(NotionAPIError):
    prefix = "Failed to create page"


class AppendError(NotionAPIError):
    prefix = "Failed to append content"


class PathSegmentNotFound(ClipperError):
    """A path segment has no matching child page and auto-create is off."""

    def __init__(self, segment: str) -> None:
        self.segment = segment
        super().__init__(f"Page not found: {segment}")
