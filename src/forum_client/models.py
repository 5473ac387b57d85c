"""
Pydantic domain models for the forum client.

These are the strongly-shaped records handed to the UI layer. Loosely-shaped
server payloads are turned into them by ``forum_client.core.normalizer``.
"""

from enum import Enum
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class FeedSort(str, Enum):
    """Feed ordering understood by the forum service."""

    HOT = "HOT"
    NEW = "NEW"
    TOP = "TOP"


class UserSession(BaseModel):
    """The authenticated user's session. Replaced whole, never patched."""

    session_id: str = Field(min_length=1)
    user_id: str = Field(min_length=1)
    username: str = Field(min_length=1)
    email: str = Field(min_length=1)

    model_config = ConfigDict(frozen=True)


class Post(BaseModel):
    """A forum post."""

    id: str
    community: str
    author: str
    title: str
    type: str
    body: Optional[str] = None
    url: Optional[str] = None
    media_url: Optional[str] = None
    score: int = 0
    created_at: str = ""

    model_config = ConfigDict(frozen=True)


class Comment(BaseModel):
    """A comment on a post."""

    id: str
    post_id: str
    author: str
    body: str
    score: int
    created_at: str

    model_config = ConfigDict(frozen=True)


class Page(BaseModel, Generic[T]):
    """One page of results, in server order."""

    items: List[T]
    page: int
    size: int
    total_elements: int
    total_pages: int
