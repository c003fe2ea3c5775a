import requests

class BooruError(Exception):
    """Base exception for booru query failures."""
    pass

class FeatureUnavailable(BooruError):
    """Raised when the backend does not support the requested operation."""
    pass

class TooManyTags(BooruError):
    """Raised when a query carries more tags than the backend accepts."""

    def __init__(self, count: int, ceiling: int):
        super().__init__(f"{count} tags given, backend accepts at most {ceiling}")
        self.count = count
        self.ceiling = ceiling

class InvalidTags(BooruError):
    """Raised when a tag combination matches no post where one is required."""
    pass

class AuthenticationRequired(BooruError):
    """Raised when the tag count requires credentials and none are configured."""
    pass

class PostNotFound(BooruError):
    """Raised when a lookup by ID or hash returns no post."""
    pass

class MalformedResponse(BooruError):
    """Raised when a payload does not match any expected shape."""
    pass

class UnrecognizedRating(MalformedResponse):
    """Raised when a rating code is not one of s, q or e."""

    def __init__(self, code: str):
        super().__init__(f"Invalid rating '{code}'")
        self.code = code

class InvalidBackend(BooruError):
    """Raised when a custom host does not behave like a booru."""
    pass

class BooruConfigurationError(BooruError):
    """Raised when a capability descriptor contradicts itself."""
    pass

# Network and HTTP status failures come straight from requests, unwrapped.
TransportFailure = requests.RequestException
