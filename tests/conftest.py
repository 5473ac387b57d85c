"""Shared fixtures for the forum client test-suite."""

from unittest.mock import AsyncMock

import pytest

from forum_client.api.client import (
    AuthSessionResponse,
    CommunityResponse,
    ForumAPIClient,
    UserResponse,
)
from forum_client.core.gateway import ForumGateway
from forum_client.core.membership import MembershipCache
from forum_client.core.session_store import SessionStore
from forum_client.models import UserSession
from forum_client.storage import FileKeyValueStore


@pytest.fixture
def session_file(tmp_path):
    """Location of the persisted session slot for one test."""
    return tmp_path / "state" / "session.json"


@pytest.fixture
def session_store(session_file):
    """SessionStore backed by a fresh JSON file."""
    return SessionStore(FileKeyValueStore(session_file))


@pytest.fixture
def sample_session():
    return UserSession(session_id="sess-1", user_id="u-1", username="alice", email="alice@example.com")


@pytest.fixture
def mock_api():
    """Transport double; every endpoint is an AsyncMock."""
    api = AsyncMock(spec=ForumAPIClient)
    api.login.return_value = AuthSessionResponse(
        session_id="sess-1",
        user=UserResponse(id="u-1", username="alice", email="alice@example.com", status="ACTIVE"),
    )
    api.register.return_value = UserResponse(id="u-1", username="alice", email="alice@example.com")
    api.create_community.return_value = CommunityResponse(id="c-1", name="Python")
    api.logout.return_value = None
    return api


@pytest.fixture
def gateway(mock_api, session_store):
    """Gateway over the mocked transport and a real file-backed session store."""
    return ForumGateway(mock_api, session_store, MembershipCache())


@pytest.fixture
def post_payload():
    """Factory for post payloads in the server's camelCase wire format."""

    def make(post_id="p1", **overrides):
        payload = {
            "id": post_id,
            "community": "python",
            "author": "alice",
            "title": "Hello",
            "type": "TEXT",
            "body": "First post",
            "score": 3,
            "createdAt": "2024-01-01T12:00:00Z",
        }
        payload.update(overrides)
        return payload

    return make
