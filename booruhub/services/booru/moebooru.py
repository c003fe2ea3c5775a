import re
from typing import Any, Dict
from urllib.parse import urlparse

from .base import BooruClient
from .capabilities import BooruCapabilities, UrlStyle
from .normalizer import absolute_url, optional_int, parse_rating, parse_timestamp, require, split_tags, to_int
from .types import Post

MOEBOORU_CAPABILITIES = BooruCapabilities(
    url_style=UrlStyle.PATH,
    post_path="post",
    tag_count_ceiling=6,
    has_count_endpoint=True,
    has_multi_random_endpoint=True,
    random_sort_modifier="order:random",
    related_path="tag/related.json",
    related_query_param="tags",
)

class MoebooruClient(BooruClient):
    """
    Client for Moebooru APIs (post.json / post.xml).

    The XML listing carries the total match count as the first attribute of
    its <posts> root, which backs get_post_count.
    """

    name = "moebooru"
    capabilities = MOEBOORU_CAPABILITIES
    POST_URL_PATTERN = re.compile(r"/post/show/(\d+)")

    @classmethod
    def can_handle_url(cls, url: str) -> bool:
        return bool(cls.POST_URL_PATTERN.search(urlparse(url).path))

    def parse_post_id(self, url: str) -> int:
        match = self.POST_URL_PATTERN.search(urlparse(url).path)
        if not match:
            raise ValueError(f"Could not extract post ID from URL: {url}")
        return int(match.group(1))

    def parse_post(self, data: Dict[str, Any]) -> Post:
        return Post(
            file_url=absolute_url(require(data, "file_url"), self.base_url, "file_url"),
            preview_url=absolute_url(require(data, "preview_url"), self.base_url, "preview_url"),
            rating=parse_rating(require(data, "rating")),
            tags=split_tags(require(data, "tags")),
            id=to_int(require(data, "id"), "id"),
            size=optional_int(data, "file_size"),
            height=to_int(require(data, "height"), "height"),
            width=to_int(require(data, "width"), "width"),
            preview_height=to_int(require(data, "preview_height"), "preview_height"),
            preview_width=to_int(require(data, "preview_width"), "preview_width"),
            creation=parse_timestamp(require(data, "created_at")),
            source=data.get("source") or None,
        )

class KonachanClient(MoebooruClient):
    name = "konachan"
    base_url = "https://konachan.com"
    domains = ("konachan.com", "konachan.net")

class YandereClient(MoebooruClient):
    name = "yandere"
    base_url = "https://yande.re"
    domains = ("yande.re",)

class LolibooruClient(MoebooruClient):
    name = "lolibooru"
    base_url = "https://lolibooru.moe"
    domains = ("lolibooru.moe",)
