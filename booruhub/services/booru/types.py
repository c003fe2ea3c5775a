import enum
from dataclasses import dataclass
from datetime import datetime
from typing import FrozenSet, Optional, Union

class Rating(str, enum.Enum):
    SAFE = "safe"
    QUESTIONABLE = "questionable"
    EXPLICIT = "explicit"

@dataclass(frozen=True)
class Post:
    """A post from an external booru, normalized across backends."""
    file_url: str
    preview_url: str
    rating: Rating
    tags: FrozenSet[str]
    id: int
    size: Optional[int]  # bytes, None when the backend omits it
    height: int
    width: int
    preview_height: int
    preview_width: int
    creation: datetime
    source: Optional[str] = None

@dataclass(frozen=True)
class RelatedTag:
    """A tag returned by a related-tag lookup."""
    name: str
    score: Union[int, float]

@dataclass(frozen=True)
class BooruAuth:
    """Credentials for a booru account (login + API key or token)."""
    login: str
    api_key: str

    def __repr__(self) -> str:
        return f"BooruAuth(login={self.login!r}, api_key='***')"
