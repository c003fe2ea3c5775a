"""
Random post selection.

Backends differ in how (and whether) they can return a random post. Each way
is a named strategy; which one applies is a lookup on the capability
descriptor plus whether tags were given, never a per-backend branch.
"""
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional, Sequence

from .capabilities import BooruCapabilities, UrlStyle
from .errors import AuthenticationRequired, FeatureUnavailable, InvalidTags, MalformedResponse, PostNotFound
from .request_builder import EndpointKind, RequestBuilder, RequestTarget
from .types import BooruAuth, Post

if TYPE_CHECKING:
    from .base import BooruClient

logger = logging.getLogger(__name__)

class RandomStrategy(ABC):
    name: str = ""

    @abstractmethod
    async def fetch(self, client: "BooruClient", tags: Sequence[str]) -> Post:
        """Return one random post matching every tag."""
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"

class SingleRequestStrategy(RandomStrategy):
    """Strategies that get random posts from one listing request."""

    @abstractmethod
    def build_target(self, builder: RequestBuilder, tags: Sequence[str], limit: int) -> RequestTarget:
        ...

    async def fetch(self, client: "BooruClient", tags: Sequence[str]) -> Post:
        posts = await client.fetch_posts(self.build_target(client.builder, tags, 1))
        if not posts:
            raise InvalidTags(f"No post matches {list(tags)}")
        return posts[0]

class NativeRandomSort(SingleRequestStrategy):
    """Append the backend's random sort tag (order:random, sort:random)."""
    name = "native_random_sort"

    def build_target(self, builder, tags, limit):
        return builder.build(
            EndpointKind.POSTS,
            tags,
            extra_params=builder.paginate(limit=limit),
            modifiers=[builder.capabilities.random_sort_modifier],
        )

class FlagEmulated(SingleRequestStrategy):
    """
    Ask for random order through a query parameter.

    Used where a sort tag would count against the tag ceiling.
    """
    name = "flag_emulated"

    def build_target(self, builder, tags, limit):
        params = builder.paginate(limit=limit)
        params[builder.capabilities.random_flag_parameter] = "true"
        return builder.build(EndpointKind.POSTS, tags, extra_params=params)

class RedirectIdCapture(RandomStrategy):
    """
    index.php without tags: the random page redirects to a post, whose ID is
    read from the Location header and then looked up.
    """
    name = "redirect_id_capture"

    async def fetch(self, client, tags):
        builder = client.builder
        redirect = await client.transport.get_redirect(builder.build(EndpointKind.RANDOM_REDIRECT))
        if not redirect.captured:
            raise MalformedResponse(f"Random endpoint answered {redirect.status_code} without a redirect")

        try:
            post_id = client.parse_post_id(redirect.location)
        except ValueError as e:
            raise MalformedResponse(str(e)) from e
        logger.debug(f"Random redirect captured post {post_id}")

        posts = await client.fetch_posts(builder.build(EndpointKind.POST, post_id=post_id))
        if not posts:
            raise PostNotFound(f"Post {post_id} from the random redirect was not found")
        return posts[0]

class CountThenOffset(RandomStrategy):
    """
    index.php with tags: count the matches, draw an offset below that count
    (capped by the backend's pagination limit) and fetch the post there.
    """
    name = "count_then_offset"

    async def fetch(self, client, tags):
        total = await client.fetch_count(tags)
        if total == 0:
            raise InvalidTags(f"No post matches {list(tags)}")

        cap = client.capabilities.max_pagination_offset
        upper = min(total, cap) if cap is not None else total
        offset = client.draw_offset(upper)
        logger.debug(f"Drew offset {offset} of {upper} ({total} matches)")

        builder = client.builder
        posts = await client.fetch_posts(
            builder.build(EndpointKind.POSTS, tags, extra_params=builder.paginate(limit=1, offset=offset))
        )
        if not posts:
            raise InvalidTags(f"No post at offset {offset} for {list(tags)}")
        return posts[0]

NATIVE_RANDOM_SORT = NativeRandomSort()
FLAG_EMULATED = FlagEmulated()
REDIRECT_ID_CAPTURE = RedirectIdCapture()
COUNT_THEN_OFFSET = CountThenOffset()

def resolve_random_strategy(capabilities: BooruCapabilities, tags: Sequence[str]) -> RandomStrategy:
    """
    Pick the strategy for a random request.

    One-request strategies come first; the two-request index.php fallbacks
    only apply when the backend has no random primitive.
    """
    if capabilities.random_flag_parameter:
        return FLAG_EMULATED
    if capabilities.random_sort_modifier:
        return NATIVE_RANDOM_SORT
    if capabilities.url_style == UrlStyle.INDEX_PHP:
        if not tags:
            return REDIRECT_ID_CAPTURE
        if capabilities.has_count_endpoint:
            return COUNT_THEN_OFFSET
    raise FeatureUnavailable("Backend cannot select random posts")

def check_authentication(capabilities: BooruCapabilities, tags: Sequence[str], auth: Optional[BooruAuth]) -> None:
    threshold = capabilities.auth_required_above_tag_count
    if threshold is not None and len(tags) > threshold and auth is None:
        raise AuthenticationRequired(
            f"Authentication is required to search with more than {threshold} tags"
        )
