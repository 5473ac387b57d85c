"""Local preconditions checked before any network call."""

import re

from ..errors import ValidationError

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")
USERNAME_LENGTH = (3, 32)
PASSWORD_LENGTH = (8, 64)
MIN_EMAIL_LENGTH = 5


def require_text(value: str, message: str) -> str:
    """Return ``value`` trimmed, or raise ``ValidationError`` if it is blank."""
    stripped = (value or "").strip()
    if not stripped:
        raise ValidationError(message)
    return stripped


def validate_registration(username: str, email: str, password: str) -> None:
    """
    Check sign-up fields. ``username`` and ``email`` are expected trimmed.

    Raises:
        ValidationError: With the first rule that fails
    """
    low, high = USERNAME_LENGTH
    if not low <= len(username) <= high:
        raise ValidationError(f"Username must be {low}-{high} characters")
    if not USERNAME_PATTERN.match(username):
        raise ValidationError("Username can only contain letters, numbers and underscores")
    if "@" not in email or len(email) < MIN_EMAIL_LENGTH:
        raise ValidationError("Enter a valid email")
    low, high = PASSWORD_LENGTH
    if not low <= len(password) <= high:
        raise ValidationError(f"Password must be {low}-{high} characters")
