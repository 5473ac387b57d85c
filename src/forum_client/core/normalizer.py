"""
Normalization of loosely-shaped server payloads into domain records.

The feed endpoint has been served in four shapes over the backend's history
and post payloads drop fields depending on the server version. These
functions accept any of them and only fail when a record cannot be
identified at all.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from ..api.client import CommentResponse, PostResponse
from ..errors import MalformedResponse
from ..models import Comment, Page, Post

UNKNOWN = "unknown"
UNTITLED = "(untitled)"
DEFAULT_POST_TYPE = "TEXT"


def first_non_blank(*values: Optional[str]) -> Optional[str]:
    """Return the first value with non-whitespace content, trimmed."""
    for value in values:
        if value is not None and value.strip():
            return value.strip()
    return None


def _int_or(obj: Dict[str, Any], key: str, default: int) -> int:
    value = obj.get(key)
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def normalize_post(raw: Any, fallback_community: Optional[str] = None) -> Post:
    """
    Convert one post payload into a ``Post``.

    Args:
        raw: Decoded JSON object for the post
        fallback_community: Community name known to the caller, used when the
            payload names none (freshly created posts on some server versions)

    Raises:
        MalformedResponse: If the payload is not an object or has no usable id
    """
    if not isinstance(raw, dict):
        raise MalformedResponse("Unexpected post response format")
    try:
        response = PostResponse.model_validate(raw)
    except PydanticValidationError as e:
        raise MalformedResponse("Unexpected post response format") from e

    if response.id is None or not response.id.strip():
        raise MalformedResponse("Post response missing id")

    title = response.title if response.title and response.title.strip() else UNTITLED
    post_type = response.type if response.type and response.type.strip() else DEFAULT_POST_TYPE

    return Post(
        id=response.id,
        community=first_non_blank(response.community, response.community_id, fallback_community) or UNKNOWN,
        author=first_non_blank(response.author, response.author_id) or UNKNOWN,
        title=title,
        type=post_type,
        body=response.body,
        url=response.url,
        media_url=response.media_url,
        score=response.score if response.score is not None else 0,
        created_at=response.created_at or "",
    )


def normalize_posts(raw_items: Any) -> List[Post]:
    """Normalize a JSON array of posts, keeping server order."""
    if raw_items is None:
        return []
    if not isinstance(raw_items, list):
        raise MalformedResponse("Unexpected feed response format")
    return [normalize_post(item) for item in raw_items]


def _single_page(posts: List[Post]) -> Page[Post]:
    return Page[Post](
        items=posts,
        page=0,
        size=len(posts),
        total_elements=len(posts),
        total_pages=1,
    )


def _page_from_array(raw: List[Any]) -> Page[Post]:
    return _single_page(normalize_posts(raw))


def _page_from_items(raw: Dict[str, Any]) -> Page[Post]:
    posts = normalize_posts(raw["items"])
    return Page[Post](
        items=posts,
        page=_int_or(raw, "page", 0),
        size=_int_or(raw, "size", len(posts)),
        total_elements=_int_or(raw, "totalElements", len(posts)),
        total_pages=_int_or(raw, "totalPages", 1),
    )


def _page_from_content(raw: Dict[str, Any]) -> Page[Post]:
    posts = normalize_posts(raw["content"])
    return Page[Post](
        items=posts,
        page=_int_or(raw, "number", 0),
        size=_int_or(raw, "size", len(posts)),
        total_elements=_int_or(raw, "totalElements", len(posts)),
        total_pages=_int_or(raw, "totalPages", 1),
    )


def _page_from_posts(raw: Dict[str, Any]) -> Page[Post]:
    return _single_page(normalize_posts(raw["posts"]))


# Evaluated in order; the first matching shape wins.
PAGE_RULES: List[Tuple[str, Callable[[Any], bool], Callable[[Any], Page[Post]]]] = [
    ("bare array", lambda raw: isinstance(raw, list), _page_from_array),
    ("canonical page", lambda raw: isinstance(raw, dict) and "items" in raw, _page_from_items),
    ("paginated collection", lambda raw: isinstance(raw, dict) and "content" in raw, _page_from_content),
    (
        "posts wrapper",
        lambda raw: isinstance(raw, dict) and isinstance(raw.get("posts"), list),
        _page_from_posts,
    ),
]


def normalize_page(raw: Any) -> Page[Post]:
    """
    Convert a feed response of any known shape into a ``Page`` of posts.

    Raises:
        MalformedResponse: If the response matches no known shape or holds an
            unidentifiable post
    """
    for _name, matches, build in PAGE_RULES:
        if matches(raw):
            return build(raw)
    if isinstance(raw, dict):
        raise MalformedResponse("Feed response missing posts/items/content")
    raise MalformedResponse("Unexpected feed response format")


def normalize_comment(raw: Any) -> Comment:
    """Convert a comment payload; every field is required."""
    try:
        response = CommentResponse.model_validate(raw)
    except PydanticValidationError as e:
        raise MalformedResponse("Comment response missing required fields") from e
    return Comment(
        id=response.id,
        post_id=response.post_id,
        author=response.author,
        body=response.body,
        score=response.score,
        created_at=response.created_at,
    )


def normalize_comments(raw: Any) -> List[Comment]:
    """Convert a JSON array of comments, keeping server order."""
    if not isinstance(raw, list):
        raise MalformedResponse("Unexpected comments response format")
    return [normalize_comment(item) for item in raw]
