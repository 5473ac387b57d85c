"""
HTTP client for the forum service API.

This module provides the transport layer used by the gateway: one coroutine
per endpoint, camelCase wire models, and a small exception hierarchy that
carries the HTTP status, raw body and reason phrase of failed calls. It does
no retrying and no user-facing error wording; both belong to the caller.
"""

from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx
from loguru import logger
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from ..config import get_settings
from ..errors import MalformedResponse


class WireModel(BaseModel):
    """Base for request/response bodies exchanged with the forum service."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


class RegisterRequest(WireModel):
    """Request body for account registration."""
    username: str
    email: str
    password: str


class LoginRequest(WireModel):
    """Request body for login. The identifier is sent under both accepted keys."""
    identifier: str
    username_or_email: str
    password: str


class UserResponse(WireModel):
    """Response model for a user account."""
    id: str
    username: str
    email: str
    status: Optional[str] = None


class AuthSessionResponse(WireModel):
    """Response model for a successful login."""
    session_id: str
    user: UserResponse


class PostResponse(WireModel):
    """Loosely-shaped post payload; every field may be missing on some server versions."""
    id: Optional[str] = None
    community: Optional[str] = None
    community_id: Optional[str] = None
    author: Optional[str] = None
    author_id: Optional[str] = None
    title: Optional[str] = None
    type: Optional[str] = None
    body: Optional[str] = None
    url: Optional[str] = None
    media_url: Optional[str] = None
    media_base64: Optional[str] = None
    score: Optional[int] = None
    created_at: Optional[str] = None


class CommentResponse(WireModel):
    """Response model for a comment. All fields are required."""
    id: str
    post_id: str
    author: str
    body: str
    score: int
    created_at: str


class CreatePostRequest(WireModel):
    """Request body for post creation."""
    community_name: str
    title: str
    type: str
    body: Optional[str] = None
    url: Optional[str] = None


class CreateCommunityRequest(WireModel):
    """Request body for community creation."""
    name: str
    description: Optional[str] = None


class CommunityResponse(WireModel):
    """Response model for a community."""
    id: Optional[str] = None
    name: str
    description: Optional[str] = None
    created_at: Optional[str] = None


class CreateCommentRequest(WireModel):
    """Request body for comment creation."""
    post_id: str
    body: str


class APIError(Exception):
    """The forum service answered with an error status."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.body = body
        super().__init__(self.message)


class APIConnectionError(APIError):
    """No response was received from the forum service."""


def parse_payload(model: type, data: Any, what: str) -> Any:
    """
    Validate a decoded JSON payload against a wire model.

    Raises:
        MalformedResponse: If the payload does not fit the model
    """
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise MalformedResponse(f"Unexpected {what} response format") from e


class ForumAPIClient:
    """
    Async HTTP client for the forum service API.

    Provides one coroutine per endpoint. Authenticated endpoints take the
    session identifier explicitly and send it in the configured header.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        session_header: Optional[str] = None,
        feed_scope: Optional[str] = None,
    ):
        """
        Initialize the API client.

        Args:
            base_url: Base URL for the forum service API
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used to stub the network in tests)
            session_header: Header name carrying the session identifier
            feed_scope: Scope sent with feed requests when the caller gives none
        """
        settings = get_settings()
        self.base_url = base_url or settings.api_base_url
        self.timeout = timeout or settings.api_timeout
        self.session_header = session_header or settings.session_header
        self.feed_scope = feed_scope or settings.feed_scope

        # Ensure base URL ends with /
        if not self.base_url.endswith('/'):
            self.base_url += '/'

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=transport,
        )

        logger.info(f"Initialized ForumAPIClient with base_url: {self.base_url}")

    async def __aenter__(self) -> "ForumAPIClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        endpoint: str,
        session_id: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Make an HTTP request and decode its JSON body.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint path, relative to the base URL
            session_id: Session identifier for authenticated endpoints
            params: Query parameters
            json_data: JSON request body

        Returns:
            The decoded JSON body, or None for an empty body

        Raises:
            APIConnectionError: If no response was received
            APIError: If the response status is 4xx/5xx
            MalformedResponse: If a successful body is not valid JSON
        """
        headers = {}
        if session_id is not None:
            headers[self.session_header] = session_id

        logger.debug(f"Making {method} request to {endpoint}")
        try:
            response = await self._client.request(
                method,
                endpoint,
                params=params,
                json=json_data,
                headers=headers,
            )
        except httpx.RequestError as e:
            logger.debug(f"No response for {method} {endpoint}: {e!r}")
            raise APIConnectionError(f"Request to {endpoint} failed: {e}") from e

        if response.is_error:
            logger.debug(f"HTTP {response.status_code} for {method} {endpoint}")
            raise APIError(
                response.reason_phrase,
                status_code=response.status_code,
                body=response.text,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponse(f"Invalid JSON in response from {endpoint}") from e

    async def register(self, request: RegisterRequest) -> UserResponse:
        """Create a new account."""
        data = await self._request(
            "POST", "api/auth/register", json_data=request.model_dump(by_alias=True)
        )
        return parse_payload(UserResponse, data, "register")

    async def login(self, request: LoginRequest) -> AuthSessionResponse:
        """Exchange credentials for a session."""
        data = await self._request(
            "POST", "api/auth/login", json_data=request.model_dump(by_alias=True)
        )
        return parse_payload(AuthSessionResponse, data, "login")

    async def logout(self, session_id: str) -> None:
        """Invalidate a session on the server."""
        await self._request("POST", "api/auth/logout", session_id=session_id)

    async def list_feed(
        self,
        sort: str,
        page: int = 0,
        size: int = 25,
        scope: Optional[str] = None,
    ) -> Any:
        """
        Fetch one feed page.

        The feed has been served in several shapes over time, so the raw JSON
        is returned as-is for the caller to normalize.
        """
        params = {
            "scope": scope or self.feed_scope,
            "sort": sort,
            "page": page,
            "size": size,
        }
        return await self._request("GET", "api/feed", params=params)

    async def create_post(self, session_id: str, request: CreatePostRequest) -> Any:
        """Create a post and return the raw post payload."""
        return await self._request(
            "POST",
            "api/posts",
            session_id=session_id,
            json_data=request.model_dump(by_alias=True, exclude_none=True),
        )

    async def create_community(
        self, session_id: str, request: CreateCommunityRequest
    ) -> CommunityResponse:
        """Create a community."""
        data = await self._request(
            "POST",
            "api/communities",
            session_id=session_id,
            json_data=request.model_dump(by_alias=True, exclude_none=True),
        )
        return parse_payload(CommunityResponse, data, "community")

    async def get_post(self, post_id: str) -> Any:
        """Fetch a single raw post payload."""
        return await self._request("GET", f"api/posts/{quote(post_id, safe='')}")

    async def list_comments(self, post_id: str) -> Any:
        """Fetch the raw comment list of a post."""
        return await self._request("GET", f"api/posts/{quote(post_id, safe='')}/comments")

    async def create_comment(
        self, session_id: str, post_id: str, request: CreateCommentRequest
    ) -> Any:
        """Create a comment and return the raw comment payload."""
        return await self._request(
            "POST",
            f"api/posts/{quote(post_id, safe='')}/comments",
            session_id=session_id,
            json_data=request.model_dump(by_alias=True),
        )
