"""
Discovery of self-hosted boorus.

Given a host name and the URL style it is expected to speak, probe the site
and build a capability descriptor for it.
"""
import logging
import random
import re
from dataclasses import replace
from typing import Optional, Tuple
from urllib.parse import urlparse

from .base import BooruClient
from .capabilities import BooruCapabilities, UrlStyle
from .errors import InvalidBackend, MalformedResponse, TransportFailure
from .gelbooru import GelbooruClient, INDEX_PHP_CAPABILITIES
from .moebooru import MOEBOORU_CAPABILITIES, MoebooruClient
from .normalizer import decode_json, parse_count, unwrap_posts
from .request_builder import EndpointKind, RequestBuilder
from .transport import RequestsTransport, Transport
from .types import BooruAuth

logger = logging.getLogger(__name__)

HOST_PATTERN = re.compile(
    r"^(?:[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z][a-z0-9-]{0,62}[a-z0-9](?::\d{1,5})?$"
)

# Discovery starts from what every installation of the style supports.
PROVISIONAL_CAPABILITIES = {
    UrlStyle.PATH: replace(MOEBOORU_CAPABILITIES, tag_count_ceiling=None, has_count_endpoint=False),
    UrlStyle.INDEX_PHP: replace(INDEX_PHP_CAPABILITIES, has_count_endpoint=False, json_root="post"),
}

PARSER_CLASSES = {
    UrlStyle.PATH: MoebooruClient,
    UrlStyle.INDEX_PHP: GelbooruClient,
}

def normalize_host(host: str) -> str:
    """Strip scheme, path and trailing slash; reject anything that is not a host name."""
    host = (host or "").strip().lower()
    if "://" in host:
        host = urlparse(host).netloc
    host = host.split("/")[0]
    if not HOST_PATTERN.match(host):
        raise InvalidBackend(f"'{host}' is not a valid host name")
    return host

async def discover_booru(
    host: str,
    url_style: UrlStyle,
    use_http: bool = False,
    transport: Optional[Transport] = None,
) -> Tuple[str, BooruCapabilities]:
    """
    Probe a host and return its base URL and capability descriptor.

    Raises InvalidBackend when the host is unreachable, answers with
    something other than a booru post listing, or uses an unsupported style.
    """
    if url_style not in PROVISIONAL_CAPABILITIES:
        raise InvalidBackend(f"Discovery does not support {url_style.value} backends")

    base_url = f"{'http' if use_http else 'https'}://{normalize_host(host)}"
    capabilities = PROVISIONAL_CAPABILITIES[url_style]
    builder = RequestBuilder(base_url, capabilities)
    transport = transport or RequestsTransport()

    posts_target = builder.build(EndpointKind.POSTS, extra_params=builder.paginate(limit=1))
    try:
        payload = decode_json(await transport.get(posts_target))
        if payload is None:
            raise MalformedResponse("Empty post listing")
        unwrap_posts(payload, capabilities.json_root)
    except (TransportFailure, MalformedResponse) as e:
        raise InvalidBackend(f"{base_url} does not answer like a {url_style.value} booru: {e}") from e

    count_target = builder.build(EndpointKind.COUNT, extra_params=builder.paginate(limit=1))
    try:
        parse_count(await transport.get(count_target))
        has_count = True
    except (TransportFailure, MalformedResponse) as e:
        logger.debug(f"{base_url} has no usable count endpoint: {e}")
        has_count = False

    logger.info(f"Discovered {url_style.value} booru at {base_url} (count endpoint: {has_count})")
    return base_url, replace(capabilities, has_count_endpoint=has_count)

async def create_custom_booru(
    host: str,
    url_style: UrlStyle,
    auth: Optional[BooruAuth] = None,
    use_http: bool = False,
    transport: Optional[Transport] = None,
    rng: Optional[random.Random] = None,
) -> BooruClient:
    """Discover a self-hosted booru and return a client bound to it."""
    transport = transport or RequestsTransport()
    base_url, capabilities = await discover_booru(host, url_style, use_http=use_http, transport=transport)
    client_cls = PARSER_CLASSES[url_style]
    return client_cls(base_url, auth=auth, transport=transport, rng=rng, capabilities=capabilities)
