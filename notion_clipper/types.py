from typing import Any


JSON = dict[str, Any]
Headers = dict[str, str]
Block = dict[str, Any]
Blocks = list[Block]
RichText = list[dict[str, Any]]
