import random
import threading
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, Iterable, List, Optional

from .capabilities import BooruCapabilities
from .errors import FeatureUnavailable, PostNotFound, TooManyTags
from .normalizer import decode_json, parse_count, parse_related, unwrap_posts
from .random_strategy import SingleRequestStrategy, check_authentication, resolve_random_strategy
from .request_builder import EndpointKind, RequestBuilder, RequestTarget
from .transport import RequestsTransport, Transport
from .types import BooruAuth, Post, RelatedTag

class BooruClient(ABC):
    """
    Abstract base for booru API clients.

    Subclasses supply a capability descriptor, a default base URL and a
    parser for their raw post objects; every query goes through the shared
    request builder, strategy resolver and normalizer.
    """

    name: ClassVar[str] = ""
    base_url: str = ""
    domains: ClassVar[tuple] = ()
    capabilities: BooruCapabilities
    default_limit: ClassVar[Optional[int]] = None

    def __init__(
        self,
        base_url: Optional[str] = None,
        auth: Optional[BooruAuth] = None,
        transport: Optional[Transport] = None,
        rng: Optional[random.Random] = None,
        capabilities: Optional[BooruCapabilities] = None,
    ):
        self.base_url = (base_url or type(self).base_url).rstrip("/")
        if capabilities is not None:
            self.capabilities = capabilities
        self.auth = auth
        self.transport = transport or RequestsTransport()
        self.builder = RequestBuilder(self.base_url, self.capabilities, auth)
        self._random = rng or random.Random()
        self._random_lock = threading.Lock()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.base_url}>"

    @abstractmethod
    def parse_post(self, data: Dict[str, Any]) -> Post:
        """Build a Post from one raw post object. Missing fields raise MalformedResponse."""
        ...

    @classmethod
    def can_handle_url(cls, url: str) -> bool:
        """Check if this client class can handle the given URL pattern."""
        return False

    def parse_post_id(self, url: str) -> int:
        """Extract post ID from a URL."""
        raise ValueError(f"Could not extract post ID from URL: {url}")

    async def get_post_by_url(self, url: str) -> Post:
        """Convenience: parse URL and fetch post."""
        return await self.get_post_by_id(self.parse_post_id(url))

    async def get_post_by_id(self, post_id: int) -> Post:
        if not self.capabilities.has_by_id_lookup:
            raise FeatureUnavailable(f"{self.name or self.base_url} has no lookup by ID")
        if post_id < 0:
            raise ValueError(f"Post ID must not be negative: {post_id}")
        return await self._fetch_single(self.builder.build(EndpointKind.POST, post_id=post_id), f"ID {post_id}")

    async def get_post_by_md5(self, md5: str) -> Post:
        if not self.capabilities.has_by_hash_lookup:
            raise FeatureUnavailable(f"{self.name or self.base_url} has no lookup by hash")
        if not md5 or not md5.strip():
            raise ValueError("md5 cannot be empty")
        target = self.builder.build(
            EndpointKind.POSTS, [f"md5:{md5.strip()}"], extra_params=self.builder.paginate(limit=1)
        )
        return await self._fetch_single(target, f"MD5 {md5}")

    async def get_post_count(self, *tags: str) -> int:
        """Total number of posts, or of posts carrying every given tag."""
        if not self.capabilities.has_count_endpoint:
            raise FeatureUnavailable(f"{self.name or self.base_url} has no count endpoint")
        return await self.fetch_count(self._prepare_tags(tags))

    async def get_random_post(self, *tags: str) -> Post:
        cleaned = self._prepare_tags(tags)
        strategy = resolve_random_strategy(self.capabilities, cleaned)
        return await strategy.fetch(self, cleaned)

    async def get_random_posts(self, limit: int, *tags: str) -> List[Post]:
        """
        Up to `limit` random posts in one request. Fewer come back when
        fewer posts match.
        """
        if not self.capabilities.has_multi_random_endpoint:
            raise FeatureUnavailable(f"{self.name or self.base_url} cannot return several random posts")
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        cleaned = self._prepare_tags(tags)
        strategy = resolve_random_strategy(self.capabilities, cleaned)
        if not isinstance(strategy, SingleRequestStrategy):
            raise FeatureUnavailable(f"{self.name or self.base_url} cannot return several random posts")
        return await self.fetch_posts(strategy.build_target(self.builder, cleaned, limit))

    async def get_last_posts(self, *tags: str, limit: Optional[int] = None) -> List[Post]:
        """Newest posts first; the backend's page size applies when limit is None."""
        if limit is not None and limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        cleaned = self._prepare_tags(tags)
        limit = limit if limit is not None else self.default_limit
        target = self.builder.build(EndpointKind.POSTS, cleaned, extra_params=self.builder.paginate(limit=limit))
        return await self.fetch_posts(target)

    async def get_related(self, tag: str) -> List[RelatedTag]:
        if not self.capabilities.has_related_endpoint:
            raise FeatureUnavailable(f"{self.name or self.base_url} has no related-tag endpoint")
        cleaned = self._clean_tags([tag])
        if not cleaned:
            raise ValueError("tag cannot be blank")
        body = await self.transport.get(self.builder.build(EndpointKind.RELATED, cleaned))
        return parse_related(decode_json(body), self.capabilities.related_root)

    async def fetch_posts(self, target: RequestTarget) -> List[Post]:
        body = await self.transport.get(target)
        items = unwrap_posts(decode_json(body), self.capabilities.json_root)
        return [self.parse_post(item) for item in items]

    async def fetch_count(self, tags: List[str]) -> int:
        target = self.builder.build(EndpointKind.COUNT, tags, extra_params=self.builder.paginate(limit=1))
        return parse_count(await self.transport.get(target))

    def draw_offset(self, upper: int) -> int:
        """Uniform integer in [0, upper). Safe to call from concurrent tasks."""
        with self._random_lock:
            return self._random.randrange(upper)

    async def _fetch_single(self, target: RequestTarget, description: str) -> Post:
        posts = await self.fetch_posts(target)
        if not posts:
            raise PostNotFound(f"No post with {description}")
        return posts[0]

    def _prepare_tags(self, tags: Iterable[str]) -> List[str]:
        cleaned = self._clean_tags(tags)
        ceiling = self.capabilities.tag_count_ceiling
        if ceiling is not None and len(cleaned) > ceiling:
            raise TooManyTags(len(cleaned), ceiling)
        check_authentication(self.capabilities, cleaned, self.auth)
        return cleaned

    @staticmethod
    def _clean_tags(tags: Iterable[str]) -> List[str]:
        """
        Drop None, blank and whitespace-only tags. Whitespace inside a tag
        becomes an underscore, so one tag never reaches the backend as several.
        """
        return ["_".join(tag.split()) for tag in tags if tag is not None and tag.strip()]
