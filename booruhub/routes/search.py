import logging
from datetime import datetime
from typing import Awaitable, Dict, List, Optional, TypeVar

import requests
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from ..services.booru import (
    AuthenticationRequired,
    BooruClient,
    FeatureUnavailable,
    InvalidTags,
    MalformedResponse,
    Post,
    PostNotFound,
    TooManyTags,
    available_boorus,
    get_client,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/boorus", tags=["boorus"])

T = TypeVar("T")

_clients: Dict[str, BooruClient] = {}

class PostResponse(BaseModel):
    id: int
    file_url: str
    preview_url: str
    rating: str
    tags: List[str]
    size: Optional[int] = None
    height: int
    width: int
    preview_height: int
    preview_width: int
    creation: datetime
    source: Optional[str] = None

    @classmethod
    def from_post(cls, post: Post) -> "PostResponse":
        return cls(
            id=post.id,
            file_url=post.file_url,
            preview_url=post.preview_url,
            rating=post.rating.value,
            tags=sorted(post.tags),
            size=post.size,
            height=post.height,
            width=post.width,
            preview_height=post.preview_height,
            preview_width=post.preview_width,
            creation=post.creation,
            source=post.source,
        )

class RelatedTagResponse(BaseModel):
    name: str
    score: float

class CountResponse(BaseModel):
    tags: List[str]
    count: int

def get_booru(name: str) -> BooruClient:
    """Resolve the {name} path segment to a shared client instance."""
    client = _clients.get(name)
    if client is None:
        client = get_client(name)
        if client is None:
            raise HTTPException(status_code=404, detail=f"Unknown booru: {name}")
        _clients[name] = client
    return client

async def _call(awaitable: Awaitable[T]) -> T:
    """Await a booru query and translate its failures into HTTP errors."""
    try:
        return await awaitable
    except FeatureUnavailable as e:
        raise HTTPException(status_code=501, detail=str(e))
    except TooManyTags as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AuthenticationRequired as e:
        raise HTTPException(status_code=401, detail=str(e))
    except (InvalidTags, PostNotFound) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except MalformedResponse as e:
        logger.error(f"Booru returned an unexpected payload: {e}", exc_info=True)
        raise HTTPException(status_code=502, detail=str(e))
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else None
        raise HTTPException(status_code=502, detail=f"Booru answered HTTP {status}")
    except requests.RequestException as e:
        logger.error(f"Booru request failed: {e}", exc_info=True)
        raise HTTPException(status_code=502, detail=f"Booru request failed: {e}")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.get("/")
async def list_boorus():
    """List the boorus that can be queried."""
    return {"boorus": available_boorus()}

@router.get("/{name}/posts/{post_id}", response_model=PostResponse)
async def get_post(post_id: int, client: BooruClient = Depends(get_booru)):
    """Fetch a single post by ID."""
    return PostResponse.from_post(await _call(client.get_post_by_id(post_id)))

@router.get("/{name}/md5/{md5}", response_model=PostResponse)
async def get_post_by_md5(md5: str, client: BooruClient = Depends(get_booru)):
    """Fetch a single post by MD5 hash."""
    return PostResponse.from_post(await _call(client.get_post_by_md5(md5)))

@router.get("/{name}/count", response_model=CountResponse)
async def count_posts(
    tags: List[str] = Query(default=[]),
    client: BooruClient = Depends(get_booru),
):
    """Count posts carrying every tag."""
    count = await _call(client.get_post_count(*tags))
    return CountResponse(tags=[t for t in tags if t.strip()], count=count)

@router.get("/{name}/random", response_model=PostResponse)
async def random_post(
    tags: List[str] = Query(default=[]),
    client: BooruClient = Depends(get_booru),
):
    """A random post carrying every tag."""
    return PostResponse.from_post(await _call(client.get_random_post(*tags)))

@router.get("/{name}/random/{limit}", response_model=List[PostResponse])
async def random_posts(
    limit: int,
    tags: List[str] = Query(default=[]),
    client: BooruClient = Depends(get_booru),
):
    """Up to `limit` random posts carrying every tag."""
    posts = await _call(client.get_random_posts(limit, *tags))
    return [PostResponse.from_post(post) for post in posts]

@router.get("/{name}/latest", response_model=List[PostResponse])
async def latest_posts(
    tags: List[str] = Query(default=[]),
    limit: Optional[int] = None,
    client: BooruClient = Depends(get_booru),
):
    """Newest posts first."""
    posts = await _call(client.get_last_posts(*tags, limit=limit))
    return [PostResponse.from_post(post) for post in posts]

@router.get("/{name}/related/{tag}", response_model=List[RelatedTagResponse])
async def related_tags(tag: str, client: BooruClient = Depends(get_booru)):
    """Tags related to `tag`, in the order the booru ranks them."""
    related = await _call(client.get_related(tag))
    return [RelatedTagResponse(name=r.name, score=r.score) for r in related]
