"""Tests for the client-local joined-community set."""

import pytest

from forum_client.core.membership import MembershipCache


@pytest.fixture
def cache():
    return MembershipCache()


def test_join_is_case_insensitive_and_keeps_first_casing(cache):
    cache.set_joined("Python", True)
    cache.set_joined("pYTHON", True)

    assert cache.joined == frozenset({"Python"})


def test_names_are_trimmed(cache):
    cache.set_joined("  Rust  ", True)

    assert cache.joined == frozenset({"Rust"})
    assert cache.is_joined("rust")


def test_blank_name_is_ignored(cache):
    cache.set_joined("   ", True)
    cache.toggle("")

    assert cache.joined == frozenset()


def test_leave_removes_case_insensitive_match(cache):
    cache.set_joined("Python", True)
    cache.set_joined("Go", True)

    cache.set_joined("PYTHON", False)

    assert cache.joined == frozenset({"Go"})


def test_leave_unknown_is_noop(cache):
    cache.set_joined("Go", True)

    cache.set_joined("Python", False)

    assert cache.joined == frozenset({"Go"})


@pytest.mark.parametrize("first,second", [("Python", "python"), ("news", "NEWS"), ("Go", "Go")])
def test_toggle_twice_restores_state(cache, first, second):
    cache.set_joined("Other", True)
    before = cache.joined

    cache.toggle(first)
    assert cache.is_joined(first)
    cache.toggle(second)

    assert cache.joined == before


def test_clear(cache):
    cache.set_joined("Python", True)
    cache.set_joined("Go", True)

    cache.clear()

    assert cache.joined == frozenset()


@pytest.mark.asyncio
async def test_stream_sees_every_change(cache):
    stream = cache.stream()

    assert await stream.__anext__() == frozenset()
    cache.set_joined("Python", True)
    cache.set_joined("Go", True)
    cache.set_joined("python", False)

    assert await stream.__anext__() == frozenset({"Python"})
    assert await stream.__anext__() == frozenset({"Python", "Go"})
    assert await stream.__anext__() == frozenset({"Go"})
    await stream.aclose()
