import os
import re
from dataclasses import dataclass
from typing import Optional

from notion_clipper import storage
from notion_clipper.errors import ConfigurationError
from notion_clipper.types import Headers

# ---------------- Constant Notion API settings ----------------
NOTION_VERSION = '2022-06-28'
NOTION_API_BASE = 'https://api.notion.com/v1'

# Destination limits (not configurable)
MAX_TEXT_LENGTH = 2000
MAX_BLOCKS_PER_REQUEST = 100
CHILDREN_PAGE_SIZE = 100

DEFAULT_CODE_LANGUAGE = 'plain text'

PAGE_ID_REGEX = re.compile(
    r'[a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12}|[a-f0-9]{32}',
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ClipperConfig:
    """Settings needed by one save operation.

    Loaded once per save and passed explicitly to the resolver and the
    append orchestrator.
    """
    token: str = ''
    root_page_id: str = ''
    default_path: str = ''
    last_path: str = ''

    @property
    def is_configured(self) -> bool:
        return bool(self.token and self.root_page_id)


def _env(name: str, default: str | None = None) -> str:
    '''Return environment variable value with required/optional semantics.

    If ``default`` is ``None`` the variable is treated as required and a KeyError
    will propagate if missing. Otherwise the provided default is used when the
    variable is absent.
    '''
    if default is None:
        return os.environ[name]
    return os.getenv(name, default)


def headers(token: str) -> Headers:
    """Return the header set carried by every Notion request."""
    return {
        **({'Authorization': f'Bearer {token}'} if token else {}),
        'Notion-Version': NOTION_VERSION,
        'Content-Type': 'application/json',
    }


def extract_page_id(value: str) -> str:
    """Pull a page id out of a pasted Notion URL; return the input otherwise."""
    value = value.strip()
    if m := PAGE_ID_REGEX.search(value):
        return m.group(0)
    return value


def load_config(store: Optional[storage.KeyValueStore] = None) -> ClipperConfig:
    """Build a ClipperConfig from the sync store, environment variables winning."""
    stored = (store or storage.sync_store()).load()
    return ClipperConfig(
        token=_env(storage.KEY_TOKEN, stored.get(storage.KEY_TOKEN, '')).strip(),
        root_page_id=extract_page_id(
            _env(storage.KEY_ROOT_PAGE_ID, stored.get(storage.KEY_ROOT_PAGE_ID, ''))),
        default_path=_env(storage.KEY_DEFAULT_PATH, stored.get(storage.KEY_DEFAULT_PATH, '')).strip(),
        last_path=stored.get(storage.KEY_LAST_PATH, '').strip(),
    )


def save_settings(
    store: storage.KeyValueStore,
    token: str,
    root_page_id: str,
    default_path: str = '',
) -> ClipperConfig:
    """Validate and persist settings (options page behaviour).

    Raises:
        ConfigurationError: token or root page id empty.
    """
    token = token.strip()
    root_page_id = root_page_id.strip()
    if not token:
        raise ConfigurationError('Please enter your Notion token')
    if not root_page_id:
        raise ConfigurationError('Please enter your root page ID')
    clean_id = extract_page_id(root_page_id)
    store.set(**{
        storage.KEY_TOKEN: token,
        storage.KEY_ROOT_PAGE_ID: clean_id,
        storage.KEY_DEFAULT_PATH: default_path.strip(),
    })
    return ClipperConfig(token=token, root_page_id=clean_id, default_path=default_path.strip())
