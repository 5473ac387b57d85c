"""Session persistence on top of the durable key-value store."""

from typing import AsyncIterator, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from ..models import UserSession
from ..storage import FileKeyValueStore
from ..utils.logging import get_logger

logger = get_logger(__name__)

SESSION_ID = "session_id"
USER_ID = "user_id"
USERNAME = "username"
EMAIL = "email"

SESSION_KEYS = (SESSION_ID, USER_ID, USERNAME, EMAIL)


def record_to_session(record: Mapping[str, str]) -> Optional[UserSession]:
    """Build a session from a stored record; partial or blank records mean no session."""
    if not all(record.get(key) for key in SESSION_KEYS):
        return None
    try:
        return UserSession(
            session_id=record[SESSION_ID],
            user_id=record[USER_ID],
            username=record[USERNAME],
            email=record[EMAIL],
        )
    except PydanticValidationError:
        return None


class SessionStore:
    """
    Owner of the single persisted session slot.

    ``read()`` is a live stream: it yields the current session (or None)
    immediately and then again after every save or clear.
    """

    def __init__(self, store: FileKeyValueStore):
        self._store = store

    async def read(self) -> AsyncIterator[Optional[UserSession]]:
        """Yield the current session, then the session after each change."""
        async for record in self._store.data():
            yield record_to_session(record)

    async def current(self) -> Optional[UserSession]:
        """The session as of now."""
        return record_to_session(await self._store.snapshot())

    async def current_id(self) -> Optional[str]:
        """The active session identifier, if any."""
        session = await self.current()
        return session.session_id if session else None

    async def save(self, session: UserSession) -> None:
        """Replace the stored session with ``session`` in one transaction."""

        def write(record: dict) -> None:
            record[SESSION_ID] = session.session_id
            record[USER_ID] = session.user_id
            record[USERNAME] = session.username
            record[EMAIL] = session.email

        await self._store.edit(write)
        logger.info(f"Session saved for user {session.username}")

    async def clear(self) -> None:
        """
        Remove the stored session in one transaction.

        Live readers see no session even if the file cannot be rewritten; the
        write error is still raised.
        """

        def remove(record: dict) -> None:
            for key in SESSION_KEYS:
                record.pop(key, None)

        await self._store.edit(remove, publish_on_failure=True)
        logger.info("Session cleared")
