import re
from typing import Any, Dict, FrozenSet, Optional
from urllib.parse import urlparse

from .base import BooruClient
from .capabilities import BooruCapabilities, UrlStyle
from .errors import MalformedResponse
from .normalizer import absolute_url, optional_int, parse_rating, parse_timestamp, require, to_int
from .types import Post

class E621Client(BooruClient):
    """
    Client for e621 and its safe mirror e926.

    Listings come wrapped as {"posts": [...]}, single lookups as
    {"post": {...}}, with file data nested under "file" and "preview".
    """

    name = "e621"
    base_url = "https://e621.net"
    domains = ("e621.net",)
    default_limit = 75
    capabilities = BooruCapabilities(
        url_style=UrlStyle.PATH,
        post_path="posts",
        tag_count_ceiling=40,
        has_count_endpoint=False,
        has_multi_random_endpoint=True,
        random_sort_modifier="order:random",
        by_id_in_path=True,
        json_root="posts",
    )

    POST_URL_PATTERN = re.compile(r"/posts/(\d+)")

    @classmethod
    def can_handle_url(cls, url: str) -> bool:
        parsed = urlparse(url)
        return parsed.netloc in cls.domains and bool(cls.POST_URL_PATTERN.search(parsed.path))

    def parse_post_id(self, url: str) -> int:
        match = self.POST_URL_PATTERN.search(urlparse(url).path)
        if not match:
            raise ValueError(f"Could not extract post ID from URL: {url}")
        return int(match.group(1))

    def _section(self, data: Dict[str, Any], key: str) -> Dict[str, Any]:
        section = require(data, key)
        if not isinstance(section, dict):
            raise MalformedResponse(f"Post {data.get('id', '?')} field '{key}' is not an object")
        return section

    def _parse_tags(self, data: Dict[str, Any]) -> FrozenSet[str]:
        tags = set()
        for names in self._section(data, "tags").values():
            tags.update(name for name in names if name)
        return frozenset(tags)

    def _parse_source(self, data: Dict[str, Any]) -> Optional[str]:
        sources = data.get("sources") or []
        return sources[0] if sources else None

    def parse_post(self, data: Dict[str, Any]) -> Post:
        file = self._section(data, "file")
        preview = self._section(data, "preview")

        return Post(
            file_url=absolute_url(require(file, "url"), self.base_url, "file.url"),
            preview_url=absolute_url(require(preview, "url"), self.base_url, "preview.url"),
            rating=parse_rating(require(data, "rating")),
            tags=self._parse_tags(data),
            id=to_int(require(data, "id"), "id"),
            size=optional_int(file, "size"),
            height=to_int(require(file, "height"), "file.height"),
            width=to_int(require(file, "width"), "file.width"),
            preview_height=to_int(require(preview, "height"), "preview.height"),
            preview_width=to_int(require(preview, "width"), "preview.width"),
            creation=parse_timestamp(require(data, "created_at")),
            source=self._parse_source(data),
        )

class E926Client(E621Client):
    name = "e926"
    base_url = "https://e926.net"
    domains = ("e926.net",)
