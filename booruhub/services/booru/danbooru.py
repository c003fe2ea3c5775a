import re
from typing import Any, Dict, FrozenSet
from urllib.parse import urlparse

from .base import BooruClient
from .capabilities import BooruCapabilities, UrlStyle
from .errors import MalformedResponse
from .normalizer import absolute_url, optional_int, parse_rating, parse_timestamp, require, split_tags, to_int
from .types import Post

# Danbooru's "g" (general) and "s" (sensitive) are both safe for our purposes
DANBOORU_RATING_ALIASES: Dict[str, str] = {
    "g": "s",
}

TAG_STRING_FIELDS = (
    "tag_string_general",
    "tag_string_artist",
    "tag_string_character",
    "tag_string_copyright",
    "tag_string_meta",
)

PREVIEW_VARIANTS = ("180x180", "preview")

class DanbooruClient(BooruClient):
    """
    Client for Danbooru-style APIs.

    Searches are capped at two tags for anonymous users, so random order is
    requested with random=true instead of an order:random tag.
    """

    name = "danbooru"
    base_url = "https://danbooru.donmai.us"
    domains = ("danbooru.donmai.us",)
    capabilities = BooruCapabilities(
        url_style=UrlStyle.PATH,
        post_path="posts",
        tag_count_ceiling=2,
        has_count_endpoint=False,
        has_multi_random_endpoint=True,
        random_flag_parameter="random",
        by_id_in_path=True,
        related_path="related_tag.json",
        related_query_param="query",
        related_root="related_tags",
    )

    POST_URL_PATTERN = re.compile(r"/posts/(\d+)")

    @classmethod
    def can_handle_url(cls, url: str) -> bool:
        """Check if the URL looks like a Danbooru-style post URL."""
        parsed = urlparse(url)
        return bool(cls.POST_URL_PATTERN.search(parsed.path))

    def parse_post_id(self, url: str) -> int:
        match = self.POST_URL_PATTERN.search(urlparse(url).path)
        if not match:
            raise ValueError(f"Could not extract post ID from URL: {url}")
        return int(match.group(1))

    def _parse_tags(self, data: Dict[str, Any]) -> FrozenSet[str]:
        """
        Danbooru returns tags as space-separated strings per category
        (tag_string_general, tag_string_artist, ...) and all together in
        tag_string.
        """
        tags = set()
        for field_name in TAG_STRING_FIELDS:
            tag_string = data.get(field_name)
            if tag_string:
                tags.update(split_tags(tag_string))
        if not tags:
            tags.update(split_tags(require(data, "tag_string")))
        return frozenset(tags)

    def _preview_variant(self, data: Dict[str, Any]) -> Dict[str, Any]:
        variants = (data.get("media_asset") or {}).get("variants") or []
        for variant in variants:
            if variant.get("type") in PREVIEW_VARIANTS:
                return variant
        if variants:
            return variants[0]
        raise MalformedResponse(f"Post {data.get('id', '?')} has no preview variant")

    def parse_post(self, data: Dict[str, Any]) -> Post:
        rating = require(data, "rating")
        preview = self._preview_variant(data)
        preview_url = data.get("preview_file_url") or require(preview, "url")

        return Post(
            file_url=absolute_url(require(data, "file_url"), self.base_url, "file_url"),
            preview_url=absolute_url(preview_url, self.base_url, "preview_file_url"),
            rating=parse_rating(DANBOORU_RATING_ALIASES.get(rating, rating)),
            tags=self._parse_tags(data),
            id=to_int(require(data, "id"), "id"),
            size=optional_int(data, "file_size"),
            height=to_int(require(data, "image_height"), "image_height"),
            width=to_int(require(data, "image_width"), "image_width"),
            preview_height=to_int(require(preview, "height"), "preview height"),
            preview_width=to_int(require(preview, "width"), "preview width"),
            creation=parse_timestamp(require(data, "created_at")),
            source=data.get("source") or None,
        )
