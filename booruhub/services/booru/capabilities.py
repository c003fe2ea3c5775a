import enum
from dataclasses import dataclass
from typing import Optional

from .errors import BooruConfigurationError

class UrlStyle(str, enum.Enum):
    PATH = "path"            # posts.json / post.json REST layout
    INDEX_PHP = "index_php"  # index.php?page=dapi&s=post&q=index
    TOKEN_AUTH = "token_auth"  # extensionless REST with a bearer token

@dataclass(frozen=True)
class BooruCapabilities:
    """
    Immutable description of what a backend supports and how its URLs look.

    Every difference between backends that the query engine cares about lives
    here, so adding a backend means writing one of these, not adding branches.
    """
    url_style: UrlStyle
    post_path: str = "posts"
    tag_count_ceiling: Optional[int] = None
    has_count_endpoint: bool = False
    has_by_id_lookup: bool = True
    has_by_hash_lookup: bool = True
    has_multi_random_endpoint: bool = False
    max_pagination_offset: Optional[int] = None
    auth_required_above_tag_count: Optional[int] = None
    random_sort_modifier: Optional[str] = None
    random_flag_parameter: Optional[str] = None
    by_id_in_path: bool = False
    json_root: Optional[str] = None
    related_path: Optional[str] = None
    related_query_param: str = "tags"
    related_root: Optional[str] = None
    tag_separator: str = " "

    def __post_init__(self):
        self.validate()

    @property
    def has_related_endpoint(self) -> bool:
        return self.related_path is not None

    @property
    def has_random_primitive(self) -> bool:
        """True when a single request can return random posts."""
        return bool(self.random_sort_modifier or self.random_flag_parameter)

    def validate(self) -> None:
        for name in ("tag_count_ceiling", "max_pagination_offset", "auth_required_above_tag_count"):
            value = getattr(self, name)
            if value is not None and value < 1:
                raise BooruConfigurationError(f"{name} must be at least 1, got {value}")

        if (
            self.auth_required_above_tag_count is not None
            and self.tag_count_ceiling is not None
            and self.auth_required_above_tag_count > self.tag_count_ceiling
        ):
            raise BooruConfigurationError(
                f"Authentication threshold {self.auth_required_above_tag_count} "
                f"is above the tag ceiling {self.tag_count_ceiling}"
            )

        if self.random_sort_modifier and self.random_flag_parameter:
            raise BooruConfigurationError("Declare either a random sort modifier or a random flag parameter, not both")

        if self.has_multi_random_endpoint and not self.has_random_primitive:
            raise BooruConfigurationError("Multi-random support needs a random sort modifier or flag parameter")

        if self.by_id_in_path and self.url_style == UrlStyle.INDEX_PHP:
            raise BooruConfigurationError("index.php backends look posts up by query parameter")

        if not self.tag_separator:
            raise BooruConfigurationError("tag_separator cannot be empty")
