"""
Translation of arbitrary failures into one user-facing message.

Error payloads differ between backend endpoints: some return ``{"message"}``,
some ``{"error"}``, some plain text and some an HTML error page. The rules
below are tried in order and the first usable message wins, so the user sees
backend detail when it is safely textual and a stable fallback otherwise.
"""

import json
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..api.client import APIConnectionError, APIError
from ..errors import ConnectivityError, ForumError, RequestFailed

DUPLICATE_ACCOUNT_MESSAGE = (
    "Username or email already in use. Try logging in or choose different values."
)
CONNECTIVITY_MESSAGE = "Could not reach server. Check the backend URL/network."
UNEXPECTED_MESSAGE = "Unexpected error"
BAD_REQUEST_PREVIEW_CHARS = 220


def is_usable(message: Optional[str]) -> bool:
    """True for a non-blank message that is not the literal string ``null``."""
    if message is None:
        return False
    stripped = message.strip()
    return bool(stripped) and stripped.lower() != "null"


def _structured_body(error: APIError) -> Dict[str, Any]:
    try:
        parsed = json.loads(error.body or "{}")
    except ValueError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _body_field(name: str) -> Callable[[APIError], Optional[str]]:
    def extract(error: APIError) -> Optional[str]:
        value = _structured_body(error).get(name)
        if isinstance(value, str):
            return value
        # Scalars are rendered as JSON text, so 42 becomes "42" and true "true".
        if isinstance(value, (bool, int, float)):
            return json.dumps(value)
        return None

    return extract


def _duplicate_account(error: APIError) -> Optional[str]:
    return DUPLICATE_ACCOUNT_MESSAGE if error.status_code == 409 else None


def _bad_request_body(error: APIError) -> Optional[str]:
    raw = (error.body or "").strip()
    if error.status_code == 400 and is_usable(raw) and not raw.startswith("<"):
        return f"Bad request: {raw[:BAD_REQUEST_PREVIEW_CHARS]}"
    return None


def _transport_message(error: APIError) -> Optional[str]:
    return error.message


def _status_fallback(error: APIError) -> Optional[str]:
    return f"Request failed with HTTP {error.status_code}"


# A 409 always means a duplicate account, whatever the body says.
HTTP_RULES: List[Tuple[str, Callable[[APIError], Optional[str]]]] = [
    ("duplicate account", _duplicate_account),
    ("body message", _body_field("message")),
    ("bad request body", _bad_request_body),
    ("body error", _body_field("error")),
    ("transport message", _transport_message),
    ("status fallback", _status_fallback),
]


def translate_http_error(error: APIError) -> str:
    """Run the HTTP rule table and return the first usable message."""
    for _name, rule in HTTP_RULES:
        message = rule(error)
        if is_usable(message):
            return message
    return _status_fallback(error)


def translate_error(error: BaseException) -> str:
    """Return the message to show the user for ``error``."""
    if isinstance(error, ForumError):
        return error.message if is_usable(error.message) else UNEXPECTED_MESSAGE
    if isinstance(error, APIConnectionError):
        return CONNECTIVITY_MESSAGE
    if isinstance(error, APIError):
        return translate_http_error(error)
    message = str(error)
    return message if is_usable(message) else UNEXPECTED_MESSAGE


def to_forum_error(error: BaseException) -> ForumError:
    """Wrap ``error`` in the taxonomy type matching its cause."""
    if isinstance(error, ForumError):
        return error
    message = translate_error(error)
    if isinstance(error, APIConnectionError):
        return ConnectivityError(message)
    if isinstance(error, APIError):
        return RequestFailed(message, status_code=error.status_code)
    return RequestFailed(message)
