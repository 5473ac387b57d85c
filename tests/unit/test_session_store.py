"""Tests for the durable key-value store and the session mapping on top of it."""

import json
from unittest.mock import patch

import pytest

from forum_client.core.session_store import SessionStore, record_to_session
from forum_client.storage import FileKeyValueStore


class TestFileKeyValueStore:
    """Durable slot behaviour."""

    @pytest.mark.asyncio
    async def test_missing_file_reads_empty(self, session_file):
        store = FileKeyValueStore(session_file)

        assert await store.snapshot() == {}

    @pytest.mark.asyncio
    async def test_edit_persists_to_disk(self, session_file):
        store = FileKeyValueStore(session_file)

        await store.edit(lambda record: record.update({"session_id": "s1"}))

        assert json.loads(session_file.read_text(encoding="utf-8")) == {"session_id": "s1"}
        reopened = FileKeyValueStore(session_file)
        assert await reopened.snapshot() == {"session_id": "s1"}

    @pytest.mark.asyncio
    async def test_corrupt_file_reads_empty(self, session_file):
        session_file.parent.mkdir(parents=True)
        session_file.write_text("{not json", encoding="utf-8")

        store = FileKeyValueStore(session_file)

        assert await store.snapshot() == {}

    @pytest.mark.asyncio
    async def test_non_object_file_reads_empty(self, session_file):
        session_file.parent.mkdir(parents=True)
        session_file.write_text("[1, 2]", encoding="utf-8")

        assert await FileKeyValueStore(session_file).snapshot() == {}

    @pytest.mark.asyncio
    async def test_failed_write_keeps_committed_record(self, session_file):
        store = FileKeyValueStore(session_file)
        await store.edit(lambda record: record.update({"k": "v1"}))

        with patch("forum_client.storage.os.replace", side_effect=OSError("read-only")):
            with pytest.raises(OSError):
                await store.edit(lambda record: record.update({"k": "v2"}))

        assert await store.snapshot() == {"k": "v1"}
        assert [p.name for p in session_file.parent.iterdir()] == [session_file.name]

    @pytest.mark.asyncio
    async def test_failed_write_can_still_publish(self, session_file):
        store = FileKeyValueStore(session_file)
        await store.edit(lambda record: record.update({"k": "v1"}))

        with patch("forum_client.storage.os.replace", side_effect=OSError("read-only")):
            with pytest.raises(OSError):
                await store.edit(lambda record: record.clear(), publish_on_failure=True)

        assert await store.snapshot() == {}
        assert json.loads(session_file.read_text()) == {"k": "v1"}

    @pytest.mark.asyncio
    async def test_data_stream_yields_each_commit(self, session_file):
        store = FileKeyValueStore(session_file)
        stream = store.data()

        assert await stream.__anext__() == {}
        await store.edit(lambda record: record.update({"a": "1"}))

        assert await stream.__anext__() == {"a": "1"}
        await stream.aclose()


class TestSessionStore:
    """Session record mapping."""

    @pytest.mark.asyncio
    async def test_empty_store_has_no_session(self, session_store):
        assert await session_store.current() is None
        assert await session_store.current_id() is None

    @pytest.mark.asyncio
    async def test_save_then_read(self, session_store, sample_session):
        await session_store.save(sample_session)

        assert await session_store.current() == sample_session
        assert await session_store.current_id() == "sess-1"

    @pytest.mark.asyncio
    async def test_session_survives_restart(self, session_file, sample_session):
        await SessionStore(FileKeyValueStore(session_file)).save(sample_session)

        restarted = SessionStore(FileKeyValueStore(session_file))

        assert await restarted.current() == sample_session

    @pytest.mark.asyncio
    async def test_clear_removes_session(self, session_store, sample_session):
        await session_store.save(sample_session)

        await session_store.clear()

        assert await session_store.current() is None

    @pytest.mark.asyncio
    async def test_read_stream_follows_changes(self, session_store, sample_session):
        stream = session_store.read()

        assert await stream.__anext__() is None
        await session_store.save(sample_session)
        assert await stream.__anext__() == sample_session
        await session_store.clear()
        assert await stream.__anext__() is None
        await stream.aclose()

    @pytest.mark.asyncio
    async def test_partial_record_on_disk_is_no_session(self, session_file):
        session_file.parent.mkdir(parents=True)
        session_file.write_text(json.dumps({"session_id": "s1", "user_id": "u1", "username": "bob"}), encoding="utf-8")

        store = SessionStore(FileKeyValueStore(session_file))

        assert await store.current() is None


@pytest.mark.parametrize(
    "record",
    [
        {},
        {"session_id": "s", "user_id": "u", "username": "n"},
        {"session_id": "", "user_id": "u", "username": "n", "email": "e"},
    ],
)
def test_incomplete_records_map_to_none(record):
    assert record_to_session(record) is None


def test_complete_record_maps_to_session():
    session = record_to_session({"session_id": "s", "user_id": "u", "username": "n", "email": "e", "extra": "x"})

    assert session.session_id == "s"
    assert session.email == "e"
