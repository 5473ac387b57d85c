"""
Forum gateway: the single entry point the UI layer talks to.

Each operation calls the transport, normalizes the payload into domain
records and reports any failure as a ``ForumError`` whose message has been
through the error translator. The gateway also owns the two pieces of local
state the UI observes: the persisted session and the joined-community set.
"""

from contextlib import contextmanager
from typing import AsyncIterator, FrozenSet, Iterator, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..api.client import (
    CreateCommentRequest,
    CreateCommunityRequest,
    CreatePostRequest,
    ForumAPIClient,
    LoginRequest,
    RegisterRequest,
)
from ..config import Settings, get_settings
from ..errors import ForumError, MalformedResponse, SessionExpired, ValidationError
from ..models import Comment, FeedSort, Page, Post, UserSession
from ..storage import FileKeyValueStore
from ..utils.logging import get_logger
from .error_translator import to_forum_error
from .membership import MembershipCache
from .normalizer import normalize_comment, normalize_comments, normalize_page, normalize_post
from .session_store import SessionStore
from .validation import require_text, validate_registration

logger = get_logger(__name__)

TEXT_POST = "TEXT"


@contextmanager
def translated_errors(operation: str) -> Iterator[None]:
    """Re-raise any failure inside the block as a translated ``ForumError``."""
    try:
        yield
    except ForumError as e:
        logger.warning(f"{operation} failed ({e.kind.value}): {e.message}")
        raise
    except Exception as e:
        error = to_forum_error(e)
        logger.warning(f"{operation} failed ({error.kind.value}): {error.message}")
        raise error from e


class ForumGateway:
    """
    Domain operations over the forum service.

    Operations are coroutines and may run concurrently; each one works on its
    own request/response pair. Operations that change server state require an
    active session and fail with ``SessionExpired`` before touching the
    network when there is none.
    """

    def __init__(
        self,
        api: ForumAPIClient,
        session_store: SessionStore,
        membership: Optional[MembershipCache] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the gateway.

        Args:
            api: Transport client for the forum service
            session_store: Owner of the persisted session
            membership: Joined-community cache (a fresh one if omitted)
            settings: Source of the default feed and listing sizes
        """
        self.api = api
        self.session_store = session_store
        self.membership = membership or MembershipCache()
        self.settings = settings or get_settings()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ForumGateway":
        """Build a gateway wired to the configured API and session file."""
        settings = settings or get_settings()
        api = ForumAPIClient(
            base_url=settings.api_base_url,
            timeout=settings.api_timeout,
            session_header=settings.session_header,
            feed_scope=settings.feed_scope,
        )
        session_store = SessionStore(FileKeyValueStore(settings.session_file))
        return cls(api, session_store, settings=settings)

    async def __aenter__(self) -> "ForumGateway":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.api.aclose()

    # Observable state

    def session_stream(self) -> AsyncIterator[Optional[UserSession]]:
        """Live view of the current session (None when logged out)."""
        return self.session_store.read()

    async def current_session(self) -> Optional[UserSession]:
        return await self.session_store.current()

    def joined_communities_stream(self) -> AsyncIterator[FrozenSet[str]]:
        """Live view of the joined-community set."""
        return self.membership.stream()

    @property
    def joined_communities(self) -> FrozenSet[str]:
        return self.membership.joined

    async def _require_session_id(self) -> str:
        session_id = await self.session_store.current_id()
        if session_id is None:
            raise SessionExpired()
        return session_id

    # Authentication

    async def register(self, username: str, email: str, password: str) -> None:
        """Create an account. Does not log in."""
        with translated_errors("register"):
            username = username.strip()
            email = email.strip()
            validate_registration(username, email, password)
            await self.api.register(
                RegisterRequest(username=username, email=email, password=password)
            )
            logger.info(f"Registered account {username}")

    async def register_and_login(self, username: str, email: str, password: str) -> UserSession:
        """
        Register, then log in with the same credentials.

        If registration succeeds but login fails, the login failure is raised
        and no session is stored.
        """
        await self.register(username, email, password)
        return await self.login(username, password)

    async def login(self, identifier: str, password: str) -> UserSession:
        """Log in with a username or email and persist the resulting session."""
        with translated_errors("login"):
            identifier = require_text(identifier, "Username or email is required")
            require_text(password, "Password is required")
            response = await self.api.login(
                LoginRequest(identifier=identifier, username_or_email=identifier, password=password)
            )
            try:
                session = UserSession(
                    session_id=response.session_id,
                    user_id=response.user.id,
                    username=response.user.username,
                    email=response.user.email,
                )
            except PydanticValidationError as e:
                raise MalformedResponse("Login response missing session details") from e
            await self.session_store.save(session)
            logger.info(f"Logged in as {session.username}")
            return session

    async def logout(self) -> None:
        """
        Log out locally, telling the server when possible.

        The server call is best effort; the local session and the
        joined-community set are cleared whatever it returns. A failure to
        rewrite the session file is logged and the session is still cleared
        in memory.
        """
        try:
            session_id = await self.session_store.current_id()
            if session_id is not None:
                try:
                    await self.api.logout(session_id)
                except Exception as e:
                    logger.warning(f"Server logout failed, clearing local session anyway: {e!r}")
            try:
                await self.session_store.clear()
            except OSError as e:
                logger.error(f"Could not remove the stored session, cleared in memory only: {e!r}")
        finally:
            self.membership.clear()
        logger.info("Logged out")

    # Feed and posts

    async def get_feed(self, sort: FeedSort, page: int = 0, size: Optional[int] = None) -> Page[Post]:
        """Fetch one page of the global feed, ``feed_page_size`` posts by default."""
        with translated_errors("get_feed"):
            if size is None:
                size = self.settings.feed_page_size
            try:
                sort = FeedSort(sort)
            except ValueError:
                raise ValidationError(f"Unknown feed sort: {sort}") from None
            raw = await self.api.list_feed(sort=sort.value, page=page, size=size)
            result = normalize_page(raw)
            logger.debug(f"Fetched {len(result.items)} posts (page {result.page}/{result.total_pages})")
            return result

    async def get_post(self, post_id: str) -> Post:
        with translated_errors("get_post"):
            post_id = require_text(post_id, "Post id is required")
            return normalize_post(await self.api.get_post(post_id))

    async def create_text_post(self, community: str, title: str, body: str) -> Post:
        """Create a text post in ``community``."""
        with translated_errors("create_text_post"):
            session_id = await self._require_session_id()
            community = require_text(community, "Community, title and body are required")
            title = require_text(title, "Community, title and body are required")
            body = require_text(body, "Community, title and body are required")
            raw = await self.api.create_post(
                session_id,
                CreatePostRequest(community_name=community, title=title, type=TEXT_POST, body=body),
            )
            # Some server versions omit the community on the created post.
            return normalize_post(raw, fallback_community=community)

    # Comments

    async def get_comments(self, post_id: str) -> List[Comment]:
        with translated_errors("get_comments"):
            post_id = require_text(post_id, "Post id is required")
            return normalize_comments(await self.api.list_comments(post_id))

    async def create_comment(self, post_id: str, body: str) -> Comment:
        with translated_errors("create_comment"):
            session_id = await self._require_session_id()
            post_id = require_text(post_id, "Post id is required")
            body = require_text(body, "Comment cannot be empty")
            raw = await self.api.create_comment(
                session_id, post_id, CreateCommentRequest(post_id=post_id, body=body)
            )
            return normalize_comment(raw)

    # Communities

    async def create_community(self, name: str, description: Optional[str] = None) -> str:
        """Create a community and return the name the server confirmed."""
        with translated_errors("create_community"):
            session_id = await self._require_session_id()
            name = require_text(name, "Community name is required")
            # Blank descriptions are left out of the request entirely.
            description = (description or "").strip() or None
            response = await self.api.create_community(
                session_id,
                CreateCommunityRequest(name=name, description=description),
            )
            return response.name

    async def list_communities(self, sort: FeedSort = FeedSort.HOT, size: Optional[int] = None) -> List[str]:
        """
        Community names seen on one feed page.

        Names are deduplicated and sorted case-insensitively; the first
        casing seen wins.
        """
        if size is None:
            size = self.settings.community_listing_size
        page = await self.get_feed(sort=sort, page=0, size=size)
        seen = {}
        for post in page.items:
            name = post.community.strip()
            if name and name.casefold() not in seen:
                seen[name.casefold()] = name
        return sorted(seen.values(), key=str.casefold)

    def set_community_joined(self, name: str, joined: bool) -> None:
        self.membership.set_joined(name, joined)

    def toggle_community_membership(self, name: str) -> None:
        self.membership.toggle(name)
