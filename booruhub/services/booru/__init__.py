from .base import BooruClient
from .capabilities import BooruCapabilities, UrlStyle
from .custom import create_custom_booru, discover_booru
from .danbooru import DanbooruClient
from .e621 import E621Client, E926Client
from .errors import (
    AuthenticationRequired,
    BooruConfigurationError,
    BooruError,
    FeatureUnavailable,
    InvalidBackend,
    InvalidTags,
    MalformedResponse,
    PostNotFound,
    TooManyTags,
    TransportFailure,
    UnrecognizedRating,
)
from .factory import available_boorus, get_client, get_client_for_url
from .gelbooru import GelbooruClient, RealbooruClient, Rule34Client, SafebooruClient, XbooruClient
from .moebooru import KonachanClient, LolibooruClient, MoebooruClient, YandereClient
from .sankaku import SankakuClient
from .transport import RedirectResult, RequestsTransport
from .types import BooruAuth, Post, Rating, RelatedTag

__all__ = [
    "AuthenticationRequired",
    "BooruAuth",
    "BooruCapabilities",
    "BooruClient",
    "BooruConfigurationError",
    "BooruError",
    "DanbooruClient",
    "E621Client",
    "E926Client",
    "FeatureUnavailable",
    "GelbooruClient",
    "InvalidBackend",
    "InvalidTags",
    "KonachanClient",
    "LolibooruClient",
    "MalformedResponse",
    "MoebooruClient",
    "Post",
    "PostNotFound",
    "Rating",
    "RealbooruClient",
    "RedirectResult",
    "RelatedTag",
    "RequestsTransport",
    "Rule34Client",
    "SafebooruClient",
    "SankakuClient",
    "TooManyTags",
    "TransportFailure",
    "UnrecognizedRating",
    "UrlStyle",
    "XbooruClient",
    "YandereClient",
    "available_boorus",
    "create_custom_booru",
    "discover_booru",
    "get_client",
    "get_client_for_url",
]
