from datetime import datetime

import pytest

import notion_clipper.notion_utils as nu
from notion_clipper import clipper, storage
from notion_clipper import http_async as ha
from notion_clipper.errors import (AppendError, ChildLookupError,
                                   ConfigurationError, NotionAPIError,
                                   PageCreateError, PathSegmentNotFound)
from notion_clipper.notion_utils import config as nuc
from notion_clipper.notion_utils import html as nuh
from notion_clipper.notion_utils import paths as nup
from notion_clipper.notion_utils.blocks import block_text

NOW = datetime(2026, 1, 18, 14, 5)
ROOT_ID = 'root0000000000000000000000000000'
TOKEN = 'secret_test_token'


class InMemoryNotion:
    """In-memory simulation of a Notion page tree for tests.

    Supports minimal subset:
      * fetch_block_children -> child_page blocks of a page (first page_size only)
      * create_child_page -> new page under a parent
      * append_block_children -> records appended blocks per page
      * retrieve_page -> page object with a title property
    Every call is recorded in ``calls`` as ``(name, target)``.
    """

    def __init__(self):
        self.titles: dict[str, str] = {ROOT_ID: 'Root'}
        self.children: dict[str, list[dict]] = {}
        self.appended: dict[str, list[list[dict]]] = {}
        self.calls: list[tuple[str, str]] = []
        self._next_id = 1

    def _gen_id(self) -> str:
        pid = f"page{self._next_id:04d}"
        self._next_id += 1
        return pid

    def add_page(self, parent_id: str, title: str) -> str:
        pid = self._gen_id()
        self.titles[pid] = title
        self.children.setdefault(parent_id, []).append({
            "object": "block",
            "id": pid,
            "type": "child_page",
            "child_page": {"title": title},
            "has_children": False,
        })
        return pid

    def add_paragraph(self, parent_id: str, text: str) -> None:
        self.children.setdefault(parent_id, []).append({
            "object": "block",
            "id": f"blk-{len(self.children.get(parent_id, []))}",
            "type": "paragraph",
            "paragraph": {"rich_text": [{"type": "text", "text": {"content": text}, "plain_text": text}]},
        })

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    async def fetch_block_children(self, token: str, block_id: str, page_size: int = 100):  # noqa: D401
        self.calls.append(("fetch_block_children", block_id))
        return list(self.children.get(block_id, []))[:page_size]

    async def create_child_page(self, token: str, parent_id: str, title: str):  # noqa: D401
        self.calls.append(("create_child_page", title))
        return self.add_page(parent_id, title)

    async def append_block_children(self, token: str, block_id: str, children: list):  # noqa: D401
        self.calls.append(("append_block_children", block_id))
        self.appended.setdefault(block_id, []).append(children)
        return {"object": "list", "results": children}

    async def retrieve_page(self, token: str, page_id: str):  # noqa: D401
        self.calls.append(("retrieve_page", page_id))
        if page_id not in self.titles:
            raise NotionAPIError(404, f"Could not find page with ID: {page_id}.")
        return {
            "object": "page",
            "id": page_id,
            "properties": {"title": {"title": [{"plain_text": self.titles[page_id]}]}},
        }


@pytest.fixture(autouse=True)
def notion_memory(monkeypatch, tmp_path):
    monkeypatch.setenv('NOTION_CLIPPER_HOME', str(tmp_path / 'clipper'))
    for key in (storage.KEY_TOKEN, storage.KEY_ROOT_PAGE_ID, storage.KEY_DEFAULT_PATH):
        monkeypatch.delenv(key, raising=False)
    memory = InMemoryNotion()
    monkeypatch.setattr(nu.api, 'fetch_block_children', memory.fetch_block_children)
    monkeypatch.setattr(nu.api, 'create_child_page', memory.create_child_page)
    monkeypatch.setattr(nu.api, 'append_block_children', memory.append_block_children)
    monkeypatch.setattr(nu.api, 'retrieve_page', memory.retrieve_page)
    yield memory


@pytest.fixture
def config():
    return nuc.ClipperConfig(token=TOKEN, root_page_id=ROOT_ID)


@pytest.fixture
def local_state():
    return storage.local_store()


def types_of(blocks):
    return [b.get('type') for b in blocks]


def texts_of(blocks):
    return [block_text(b) for b in blocks]


__all__ = [
    'AppendError',
    'ChildLookupError',
    'ConfigurationError',
    'NotionAPIError',
    'PageCreateError',
    'PathSegmentNotFound',
    'InMemoryNotion',
    'NOW',
    'ROOT_ID',
    'TOKEN',
    'block_text',
    'clipper',
    'config',
    'ha',
    'local_state',
    'notion_memory',
    'nu',
    'nuc',
    'nuh',
    'nup',
    'pytest',
    'storage',
    'texts_of',
    'types_of',
]
