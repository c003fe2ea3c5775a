import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Sequence

from .capabilities import BooruCapabilities, UrlStyle
from .types import BooruAuth

class EndpointKind(str, enum.Enum):
    POSTS = "posts"
    POST = "post"
    COUNT = "count"
    RANDOM_REDIRECT = "random_redirect"
    RELATED = "related"

@dataclass(frozen=True)
class RequestTarget:
    """A fully resolved GET request: URL, query parameters and headers."""
    url: str
    params: Dict[str, Any] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)

class RequestBuilder:
    """
    Turns an endpoint kind plus tags into a concrete request for one backend.

    Pure: the output depends only on the arguments, the base URL, the
    capability descriptor and the configured credentials.
    """

    def __init__(self, base_url: str, capabilities: BooruCapabilities, auth: Optional[BooruAuth] = None):
        self.base_url = base_url.rstrip("/")
        self.capabilities = capabilities
        self.auth = auth

    def tag_query(self, tags: Iterable[str], modifiers: Sequence[str] = ()) -> str:
        """Join tags and trailing modifiers (e.g. order:random) into one query value."""
        parts = [tag for tag in tags if tag]
        parts.extend(modifier for modifier in modifiers if modifier)
        return self.capabilities.tag_separator.join(parts)

    def paginate(self, limit: Optional[int] = None, offset: Optional[int] = None) -> Dict[str, Any]:
        """
        Translate a limit and a zero-based offset into the backend's parameter names.

        index.php counts `pid` from zero; path-style backends count `page`
        from one. Offsets are expressed in pages of `limit` posts.
        """
        params: Dict[str, Any] = {}
        if limit is not None:
            params["limit"] = limit
        if offset is not None:
            if self.capabilities.url_style == UrlStyle.INDEX_PHP:
                params["pid"] = offset
            else:
                params["page"] = offset + 1
        return params

    def build(
        self,
        kind: EndpointKind,
        tags: Sequence[str] = (),
        extra_params: Optional[Dict[str, Any]] = None,
        modifiers: Sequence[str] = (),
        post_id: Optional[int] = None,
    ) -> RequestTarget:
        extra = dict(extra_params or {})

        if kind == EndpointKind.RELATED:
            if not self.capabilities.has_related_endpoint:
                raise ValueError("Backend has no related-tag endpoint")
            url = f"{self.base_url}/{self.capabilities.related_path}"
            params = {self.capabilities.related_query_param: self.tag_query(tags)}
            params.update(extra)
            return self._with_auth(url, params)

        if self.capabilities.url_style == UrlStyle.INDEX_PHP:
            return self._build_index_php(kind, tags, extra, modifiers, post_id)
        return self._build_rest(kind, tags, extra, modifiers, post_id)

    def _build_index_php(self, kind, tags, extra, modifiers, post_id) -> RequestTarget:
        url = f"{self.base_url}/index.php"

        if kind == EndpointKind.RANDOM_REDIRECT:
            return self._with_auth(url, {"page": "post", "s": "random"})

        params: Dict[str, Any] = {"page": "dapi", "s": "post", "q": "index"}
        if kind != EndpointKind.COUNT:
            params["json"] = "1"

        if kind == EndpointKind.POST:
            if post_id is None:
                raise ValueError("post_id is required for a single post lookup")
            params["id"] = post_id
            params.update(self.paginate(limit=1))
        else:
            query = self.tag_query(tags, modifiers)
            if query:
                params["tags"] = query

        params.update(extra)
        return self._with_auth(url, params)

    def _build_rest(self, kind, tags, extra, modifiers, post_id) -> RequestTarget:
        caps = self.capabilities
        extension = "" if caps.url_style == UrlStyle.TOKEN_AUTH else ".json"

        if kind == EndpointKind.RANDOM_REDIRECT:
            raise ValueError("Only index.php backends expose a random redirect endpoint")

        if kind == EndpointKind.POST:
            if post_id is None:
                raise ValueError("post_id is required for a single post lookup")
            if caps.by_id_in_path:
                return self._with_auth(f"{self.base_url}/{caps.post_path}/{post_id}{extension}", dict(extra))
            tags = [f"id:{post_id}"]
            extra = {**self.paginate(limit=1), **extra}

        if kind == EndpointKind.COUNT:
            if caps.url_style == UrlStyle.TOKEN_AUTH:
                raise ValueError("Token-authenticated backends have no XML listing")
            url = f"{self.base_url}/{caps.post_path}.xml"
        else:
            url = f"{self.base_url}/{caps.post_path}{extension}"

        params: Dict[str, Any] = {}
        query = self.tag_query(tags, modifiers)
        if query:
            params["tags"] = query
        params.update(extra)
        return self._with_auth(url, params)

    def _with_auth(self, url: str, params: Dict[str, Any]) -> RequestTarget:
        headers: Dict[str, str] = {}
        if self.auth:
            style = self.capabilities.url_style
            if style == UrlStyle.TOKEN_AUTH:
                headers["Authorization"] = f"Bearer {self.auth.api_key}"
            elif style == UrlStyle.INDEX_PHP:
                params = {**params, "user_id": self.auth.login, "api_key": self.auth.api_key}
            else:
                params = {**params, "login": self.auth.login, "api_key": self.auth.api_key}
        return RequestTarget(url=url, params=params, headers=headers)
