"""
Response normalization shared by every backend.

Backends answer with one of a few JSON shapes (bare array, object wrapping the
array, single object) and count queries with an XML root element whose first
attribute is the total. The helpers here turn those payloads into canonical
values and fail hard on anything partial.
"""
import json
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from .errors import MalformedResponse, UnrecognizedRating
from .types import Rating, RelatedTag

RATING_CODES: Dict[str, Rating] = {
    "s": Rating.SAFE,
    "q": Rating.QUESTIONABLE,
    "e": Rating.EXPLICIT,
}

# index.php backends: "Sat Jun 15 12:00:00 -0500 2019"
INDEX_PHP_DATE_FORMAT = "%a %b %d %H:%M:%S %z %Y"

_MISSING = object()

def parse_rating(code: Optional[str]) -> Rating:
    """Map a one-letter rating code (any case) to a Rating."""
    if not isinstance(code, str) or len(code) != 1:
        raise UnrecognizedRating(str(code))
    rating = RATING_CODES.get(code.lower())
    if rating is None:
        raise UnrecognizedRating(code)
    return rating

def decode_json(body: bytes) -> Any:
    """Decode a JSON body. An empty body decodes to None."""
    if not body or not body.strip():
        return None
    try:
        return json.loads(body)
    except ValueError as e:
        raise MalformedResponse(f"Response is not valid JSON: {e}") from e

def unwrap_posts(payload: Any, root: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Return the list of raw post objects held by a listing payload.

    Accepts a bare array, an object whose `root` (or `post`) property holds
    the array or a single post, and a bare single post object.
    """
    if payload is None:
        return []
    if isinstance(payload, list):
        items = payload
    elif isinstance(payload, dict):
        if root and root in payload:
            items = payload[root]
        elif "post" in payload:
            items = payload["post"]
        elif "id" in payload:
            items = [payload]
        elif root:
            # Wrapped listing with no matches omits the array entirely
            items = []
        else:
            raise MalformedResponse(f"Unexpected object with keys {sorted(payload)[:5]}")
        if isinstance(items, dict):
            items = [items]
    else:
        raise MalformedResponse(f"Unexpected payload type {type(payload).__name__}")

    if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
        raise MalformedResponse("Post listing does not hold objects")
    return items

def parse_count(body: bytes) -> int:
    """Read the post total from the count attribute of an XML root element, else its first attribute."""
    try:
        root = ET.fromstring(body)
    except ET.ParseError as e:
        raise MalformedResponse(f"Response is not valid XML: {e}") from e

    if not root.attrib:
        raise MalformedResponse(f"<{root.tag}> carries no count attribute")
    # Gelbooru puts limit first; moebooru and Safebooru lead with count
    value = root.attrib.get("count", next(iter(root.attrib.values())))
    try:
        count = int(value)
    except ValueError:
        raise MalformedResponse(f"Count attribute is not a number: {value!r}")
    if count < 0:
        raise MalformedResponse(f"Negative post count {count}")
    return count

def parse_related(payload: Any, root: Optional[str] = None) -> List[RelatedTag]:
    """
    Parse a related-tag payload, keeping the backend's order.

    The list lives under `root` or, when no root is set, under the first
    property of the object. Entries are [name, score] pairs or objects.
    """
    if isinstance(payload, list):
        entries = payload
    elif isinstance(payload, dict) and payload:
        key = root if root else next(iter(payload))
        if key not in payload:
            raise MalformedResponse(f"Related-tag payload has no '{key}' property")
        entries = payload[key]
    else:
        raise MalformedResponse("Related-tag payload is empty")

    if not isinstance(entries, list):
        raise MalformedResponse("Related tags are not a list")

    results = []
    for entry in entries:
        if isinstance(entry, (list, tuple)) and len(entry) >= 2:
            name, score = entry[0], entry[1]
        elif isinstance(entry, dict):
            tag = entry.get("tag")
            name = tag.get("name") if isinstance(tag, dict) else entry.get("name")
            score = next(
                (entry[k] for k in ("count", "post_count", "frequency", "cosine_similarity") if k in entry),
                None,
            )
        else:
            raise MalformedResponse(f"Unexpected related-tag entry {entry!r}")
        if not name or score is None:
            raise MalformedResponse(f"Incomplete related-tag entry {entry!r}")
        results.append(RelatedTag(name=str(name), score=_to_number(score)))
    return results

def require(data: Dict[str, Any], key: str) -> Any:
    """Fetch a mandatory field; missing, null or empty values are parse errors."""
    value = data.get(key, _MISSING)
    if value is _MISSING or value is None or value == "":
        raise MalformedResponse(f"Post {data.get('id', '?')} is missing '{key}'")
    return value

def to_int(value: Any, field: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise MalformedResponse(f"Field '{field}' is not an integer: {value!r}")
    if number < 0:
        raise MalformedResponse(f"Field '{field}' is negative: {number}")
    return number

def optional_int(data: Dict[str, Any], key: str) -> Optional[int]:
    """Integer field that may be absent. Absent stays None, never 0."""
    value = data.get(key)
    if value is None or value == "":
        return None
    return to_int(value, key)

def parse_timestamp(value: Any) -> datetime:
    """Accept unix seconds, ISO 8601 or the index.php date format."""
    if isinstance(value, bool) or value is None:
        raise MalformedResponse(f"Invalid timestamp {value!r}")
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return datetime.fromtimestamp(int(text), tz=timezone.utc)
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            pass
        else:
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
        try:
            return datetime.strptime(text, INDEX_PHP_DATE_FORMAT)
        except ValueError:
            pass
    raise MalformedResponse(f"Unrecognized timestamp {value!r}")

def absolute_url(url: Any, base_url: str, field: str = "url") -> str:
    """Resolve protocol-relative and site-relative URLs against the backend."""
    if not isinstance(url, str) or not url:
        raise MalformedResponse(f"Field '{field}' is not a URL: {url!r}")
    if url.startswith("//"):
        scheme = urlparse(base_url).scheme or "https"
        return f"{scheme}:{url}"
    if url.startswith("http://") or url.startswith("https://"):
        return url
    if url.startswith("/"):
        return f"{base_url.rstrip('/')}{url}"
    return f"{base_url.rstrip('/')}/{url}"

def split_tags(tag_string: Any) -> frozenset:
    if not isinstance(tag_string, str):
        raise MalformedResponse(f"Tag string is not text: {tag_string!r}")
    return frozenset(tag for tag in tag_string.split() if tag)

def _to_number(value: Any):
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    try:
        return int(value)
    except (TypeError, ValueError):
        pass
    try:
        return float(value)
    except (TypeError, ValueError):
        raise MalformedResponse(f"Related-tag score is not numeric: {value!r}")
