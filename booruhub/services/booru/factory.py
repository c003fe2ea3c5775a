import random
from typing import Dict, List, Optional, Type
from urllib.parse import urlparse

from ...config import settings
from .base import BooruClient
from .danbooru import DanbooruClient
from .e621 import E621Client, E926Client
from .gelbooru import GelbooruClient, RealbooruClient, Rule34Client, SafebooruClient, XbooruClient
from .moebooru import KonachanClient, LolibooruClient, MoebooruClient, YandereClient
from .sankaku import SankakuClient
from .transport import RequestsTransport, Transport
from .types import BooruAuth

_CLIENT_CLASSES: List[Type[BooruClient]] = [
    DanbooruClient,
    E621Client,
    E926Client,
    KonachanClient,
    YandereClient,
    LolibooruClient,
    GelbooruClient,
    SafebooruClient,
    Rule34Client,
    XbooruClient,
    RealbooruClient,
    SankakuClient,
]

# Unknown hosts are matched by post URL shape, most specific first
_PATTERN_CLASSES: List[Type[BooruClient]] = [
    E621Client,
    DanbooruClient,
    MoebooruClient,
    GelbooruClient,
]

CLIENTS_BY_NAME: Dict[str, Type[BooruClient]] = {cls.name: cls for cls in _CLIENT_CLASSES}

def available_boorus() -> List[str]:
    return sorted(CLIENTS_BY_NAME)

def get_auth_for_domain(domain: str) -> Optional[BooruAuth]:
    config = settings.get_credentials(domain)
    if config:
        return BooruAuth(login=config["username"], api_key=config["api_key"])
    return None

def default_transport() -> Transport:
    return RequestsTransport(user_agent=settings.USER_AGENT, timeout=settings.REQUEST_TIMEOUT)

def default_rng() -> random.Random:
    return random.Random(settings.RANDOM_SEED)

def get_client(
    name: str,
    transport: Optional[Transport] = None,
    rng: Optional[random.Random] = None,
) -> Optional[BooruClient]:
    """Instantiate a known booru by its registry name."""
    client_cls = CLIENTS_BY_NAME.get(name.lower())
    if client_cls is None:
        return None
    domain = urlparse(client_cls.base_url).netloc
    return client_cls(
        auth=get_auth_for_domain(domain),
        transport=transport or default_transport(),
        rng=rng or default_rng(),
    )

def get_client_for_url(url: str, transport: Optional[Transport] = None) -> Optional[BooruClient]:
    """
    Find the right BooruClient for a given URL, by domain first and then by
    post URL pattern.
    """
    parsed = urlparse(url)
    domain = parsed.netloc.lower()
    base_url = f"{parsed.scheme}://{parsed.netloc}"

    for client_cls in _CLIENT_CLASSES:
        if domain in client_cls.domains:
            return client_cls(
                auth=get_auth_for_domain(domain),
                transport=transport or default_transport(),
                rng=default_rng(),
            )

    for client_cls in _PATTERN_CLASSES:
        if client_cls.can_handle_url(url):
            return client_cls(
                base_url,
                auth=get_auth_for_domain(domain),
                transport=transport or default_transport(),
                rng=default_rng(),
            )
    return None
