"""Tests for local input preconditions."""

import pytest

from forum_client.core.validation import require_text, validate_registration
from forum_client.errors import ErrorKind, ValidationError


def test_require_text_trims():
    assert require_text("  hello ", "required") == "hello"


@pytest.mark.parametrize("value", ["", "   ", None])
def test_require_text_rejects_blank(value):
    with pytest.raises(ValidationError) as exc_info:
        require_text(value, "Title is required")

    assert exc_info.value.message == "Title is required"
    assert exc_info.value.kind is ErrorKind.VALIDATION


def test_valid_registration_passes():
    validate_registration("alice_01", "alice@example.com", "correct-horse")


@pytest.mark.parametrize(
    "username,email,password,message",
    [
        ("ab", "a@b.io", "password1", "Username must be 3-32 characters"),
        ("a" * 33, "a@b.io", "password1", "Username must be 3-32 characters"),
        ("bad name", "a@b.io", "password1", "Username can only contain letters, numbers and underscores"),
        ("alice", "alice.example.com", "password1", "Enter a valid email"),
        ("alice", "a@b", "password1", "Enter a valid email"),
        ("alice", "a@b.io", "short", "Password must be 8-64 characters"),
        ("alice", "a@b.io", "x" * 65, "Password must be 8-64 characters"),
    ],
)
def test_invalid_registration(username, email, password, message):
    with pytest.raises(ValidationError) as exc_info:
        validate_registration(username, email, password)

    assert exc_info.value.message == message
