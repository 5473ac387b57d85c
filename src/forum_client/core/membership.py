"""Client-local record of joined communities."""

from typing import AsyncIterator, FrozenSet, Optional

from .live_value import LiveValue


def _find(members: FrozenSet[str], name: str) -> Optional[str]:
    key = name.casefold()
    return next((member for member in members if member.casefold() == key), None)


class MembershipCache:
    """
    Set of community names the user has marked as joined.

    Names compare case-insensitively and keep the casing they were first
    joined with. The set lives only in memory and is never synced with the
    server.
    """

    def __init__(self) -> None:
        self._members: LiveValue[FrozenSet[str]] = LiveValue(frozenset())

    @property
    def joined(self) -> FrozenSet[str]:
        return self._members.value

    def stream(self) -> AsyncIterator[FrozenSet[str]]:
        return self._members.stream()

    def is_joined(self, name: str) -> bool:
        return _find(self.joined, name.strip()) is not None

    def set_joined(self, name: str, joined: bool) -> None:
        normalized = name.strip()
        if not normalized:
            return

        def apply(current: FrozenSet[str]) -> FrozenSet[str]:
            existing = _find(current, normalized)
            if joined:
                return current if existing is not None else current | {normalized}
            return current if existing is None else current - {existing}

        self._members.update(apply)

    def toggle(self, name: str) -> None:
        normalized = name.strip()
        if not normalized:
            return
        self.set_joined(normalized, not self.is_joined(normalized))

    def clear(self) -> None:
        self._members.set(frozenset())
