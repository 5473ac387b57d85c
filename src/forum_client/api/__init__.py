"""Transport layer for the forum service API."""

from .client import (
    APIConnectionError,
    APIError,
    AuthSessionResponse,
    CommentResponse,
    CommunityResponse,
    CreateCommentRequest,
    CreateCommunityRequest,
    CreatePostRequest,
    ForumAPIClient,
    LoginRequest,
    PostResponse,
    RegisterRequest,
    UserResponse,
)

__all__ = [
    "APIConnectionError",
    "APIError",
    "AuthSessionResponse",
    "CommentResponse",
    "CommunityResponse",
    "CreateCommentRequest",
    "CreateCommunityRequest",
    "CreatePostRequest",
    "ForumAPIClient",
    "LoginRequest",
    "PostResponse",
    "RegisterRequest",
    "UserResponse",
]
