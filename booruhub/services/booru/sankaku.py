import re
from typing import Any, Dict, FrozenSet
from urllib.parse import urlparse

from .base import BooruClient
from .capabilities import BooruCapabilities, UrlStyle
from .errors import MalformedResponse
from .normalizer import absolute_url, optional_int, parse_rating, parse_timestamp, require, to_int
from .types import Post

class SankakuClient(BooruClient):
    """
    Client for the Sankaku Complex channel API.

    Anonymous searches are limited to four tags; past that the request must
    carry a bearer token.
    """

    name = "sankaku"
    base_url = "https://capi-v2.sankakucomplex.com"
    domains = ("capi-v2.sankakucomplex.com", "chan.sankakucomplex.com")
    capabilities = BooruCapabilities(
        url_style=UrlStyle.TOKEN_AUTH,
        post_path="posts",
        has_count_endpoint=False,
        has_by_id_lookup=False,
        has_multi_random_endpoint=True,
        auth_required_above_tag_count=4,
        random_sort_modifier="order:random",
    )

    POST_URL_PATTERN = re.compile(r"/post/show/(\d+)")

    def parse_post_id(self, url: str) -> int:
        match = self.POST_URL_PATTERN.search(urlparse(url).path)
        if not match:
            raise ValueError(f"Could not extract post ID from URL: {url}")
        return int(match.group(1))

    def _parse_tags(self, data: Dict[str, Any]) -> FrozenSet[str]:
        tags = require(data, "tags")
        if not isinstance(tags, list):
            raise MalformedResponse(f"Post {data.get('id', '?')} tags are not a list")
        names = set()
        for tag in tags:
            name = tag.get("name") if isinstance(tag, dict) else tag
            if name:
                names.add(name)
        return frozenset(names)

    def parse_post(self, data: Dict[str, Any]) -> Post:
        created_at = require(data, "created_at")
        if isinstance(created_at, dict):
            created_at = require(created_at, "s")

        return Post(
            file_url=absolute_url(require(data, "file_url"), self.base_url, "file_url"),
            preview_url=absolute_url(require(data, "preview_url"), self.base_url, "preview_url"),
            rating=parse_rating(require(data, "rating")),
            tags=self._parse_tags(data),
            id=to_int(require(data, "id"), "id"),
            size=optional_int(data, "file_size"),
            height=to_int(require(data, "height"), "height"),
            width=to_int(require(data, "width"), "width"),
            preview_height=to_int(require(data, "preview_height"), "preview_height"),
            preview_width=to_int(require(data, "preview_width"), "preview_width"),
            creation=parse_timestamp(created_at),
            source=data.get("source") or None,
        )
