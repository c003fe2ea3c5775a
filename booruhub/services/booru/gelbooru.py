from typing import Any, Dict, Optional
from urllib.parse import parse_qs, urlparse

from .base import BooruClient
from .capabilities import BooruCapabilities, UrlStyle
from .errors import MalformedResponse
from .normalizer import absolute_url, optional_int, parse_rating, parse_timestamp, require, split_tags, to_int
from .types import Post

GELBOORU_RATING_ALIASES: Dict[str, str] = {
    "general": "s",
    "safe": "s",
    "sensitive": "s",
    "questionable": "q",
    "explicit": "e",
}

# pid stops paging past this many posts
INDEX_PHP_OFFSET_LIMIT = 20001

INDEX_PHP_CAPABILITIES = BooruCapabilities(
    url_style=UrlStyle.INDEX_PHP,
    has_count_endpoint=True,
    has_multi_random_endpoint=False,
    max_pagination_offset=INDEX_PHP_OFFSET_LIMIT,
)

def _query_values(url: str) -> Dict[str, str]:
    """First value of every query parameter in a URL (relative URLs included)."""
    return {key: values[0] for key, values in parse_qs(urlparse(url).query).items()}

class GelbooruClient(BooruClient):
    """
    Gelbooru and the index.php dapi it popularized.

    The dapi has a sort:random tag here; forks that lack it use
    INDEX_PHP_CAPABILITIES and fall back to the redirect or count strategies.
    """

    name = "gelbooru"
    base_url = "https://gelbooru.com"
    domains = ("gelbooru.com",)
    default_limit = 100
    capabilities = BooruCapabilities(
        url_style=UrlStyle.INDEX_PHP,
        has_count_endpoint=True,
        has_multi_random_endpoint=True,
        random_sort_modifier="sort:random",
        json_root="post",
    )

    @classmethod
    def can_handle_url(cls, url: str) -> bool:
        """Post pages look like index.php?page=post&s=view&id=N."""
        if not urlparse(url).path.lower().endswith("index.php"):
            return False
        query = _query_values(url.lower())
        return query.get("page") == "post" and query.get("s") == "view" and query.get("id", "").isdigit()

    def parse_post_id(self, url: str) -> int:
        post_id = _query_values(url).get("id", "")
        if not post_id.isdigit():
            raise ValueError(f"No post ID in URL: {url}")
        return int(post_id)

    def _map_rating(self, rating: Any):
        if isinstance(rating, str):
            rating = GELBOORU_RATING_ALIASES.get(rating.lower(), rating)
        return parse_rating(rating)

    def _file_url(self, data: Dict[str, Any]) -> str:
        file_url = data.get("file_url")
        if not file_url:
            # Older installs only give the storage directory and file name
            file_url = f"/images/{require(data, 'directory')}/{require(data, 'image')}"
        return absolute_url(file_url, self.base_url, "file_url")

    def _preview_url(self, data: Dict[str, Any]) -> str:
        preview_url = data.get("preview_url")
        if not preview_url:
            preview_url = f"/thumbnails/{require(data, 'directory')}/thumbnail_{require(data, 'hash')}.jpg"
        return absolute_url(preview_url, self.base_url, "preview_url")

    def _creation(self, data: Dict[str, Any]):
        created_at = data.get("created_at") or data.get("change")
        if created_at is None:
            raise MalformedResponse(f"Post {data.get('id', '?')} is missing 'created_at'")
        return parse_timestamp(created_at)

    def _source(self, data: Dict[str, Any]) -> Optional[str]:
        source = data.get("source")
        return source.strip() if isinstance(source, str) and source.strip() else None

    def parse_post(self, data: Dict[str, Any]) -> Post:
        return Post(
            file_url=self._file_url(data),
            preview_url=self._preview_url(data),
            rating=self._map_rating(require(data, "rating")),
            tags=split_tags(require(data, "tags")),
            id=to_int(require(data, "id"), "id"),
            size=optional_int(data, "file_size"),
            height=to_int(require(data, "height"), "height"),
            width=to_int(require(data, "width"), "width"),
            preview_height=to_int(require(data, "preview_height"), "preview_height"),
            preview_width=to_int(require(data, "preview_width"), "preview_width"),
            creation=self._creation(data),
            source=self._source(data),
        )

class SafebooruClient(GelbooruClient):
    """index.php booru without a random sort: random posts take two requests."""
    name = "safebooru"
    base_url = "https://safebooru.org"
    domains = ("safebooru.org",)
    capabilities = INDEX_PHP_CAPABILITIES

class Rule34Client(GelbooruClient):
    name = "rule34"
    base_url = "https://rule34.xxx"
    domains = ("rule34.xxx", "api.rule34.xxx")
    capabilities = INDEX_PHP_CAPABILITIES

class XbooruClient(GelbooruClient):
    name = "xbooru"
    base_url = "https://xbooru.com"
    domains = ("xbooru.com",)
    capabilities = INDEX_PHP_CAPABILITIES

class RealbooruClient(GelbooruClient):
    name = "realbooru"
    base_url = "https://realbooru.com"
    domains = ("realbooru.com",)
    capabilities = INDEX_PHP_CAPABILITIES
