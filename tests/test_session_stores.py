"""
tests/test_session_stores.py

Contract tests shared by every session store backend.

A settable clock drives expiry so no test sleeps.
"""

from __future__ import annotations

import json
import math

import pytest

from app.domain.sheet_ingestion import ValidationSession
from app.sessions import (
    DatabaseSessionStore,
    FileSessionStore,
    InMemorySessionStore,
    SessionExpiredError,
    SessionNotFoundError,
)
from db.base import Base
from db.models.validation_session import ValidationSessionRecord

TTL_SECONDS = 1800


@pytest.fixture(params=["memory", "file", "database"])
def store(request, clock, tmp_path, sqlite_engine, session_factory):
    if request.param == "memory":
        return InMemorySessionStore(ttl_seconds=TTL_SECONDS, clock=clock)
    if request.param == "file":
        return FileSessionStore(tmp_path / "sessions", ttl_seconds=TTL_SECONDS, clock=clock)
    Base.metadata.create_all(sqlite_engine)
    return DatabaseSessionStore(session_factory, ttl_seconds=TTL_SECONDS, clock=clock)


def _session(rows=None) -> ValidationSession:
    return ValidationSession(
        table_name="people",
        column_names=["name", "age", "created_at"],
        rows=rows if rows is not None else [{"name": "Alice", "age": 30, "created_at": "2021-01-01 00:00:00"}],
    )


class TestSessionStoreContract:
    def test_put_assigns_hex_id_and_creation_time(self, store, clock):
        session_id = store.put(_session())

        assert len(session_id) == 32
        int(session_id, 16)

        loaded = store.get_and_check(session_id)
        assert loaded.session_id == session_id
        assert loaded.created_at == clock.now
        assert loaded.table_name == "people"
        assert loaded.column_names == ["name", "age", "created_at"]
        assert loaded.rows == [{"name": "Alice", "age": 30, "created_at": "2021-01-01 00:00:00"}]

    def test_ids_are_unique(self, store):
        assert store.put(_session()) != store.put(_session())

    def test_unknown_id_is_not_found(self, store):
        with pytest.raises(SessionNotFoundError):
            store.get_and_check("0" * 32)

    def test_session_is_valid_up_to_ttl(self, store, clock):
        session_id = store.put(_session())

        clock.advance(seconds=TTL_SECONDS)

        assert store.get_and_check(session_id).session_id == session_id

    def test_expired_session_is_deleted_on_read(self, store, clock):
        session_id = store.put(_session())

        clock.advance(seconds=TTL_SECONDS + 1)

        with pytest.raises(SessionExpiredError):
            store.get_and_check(session_id)
        with pytest.raises(SessionNotFoundError):
            store.get_and_check(session_id)

    def test_delete_consumes_session(self, store):
        session_id = store.put(_session())

        store.delete(session_id)
        store.delete(session_id)

        with pytest.raises(SessionNotFoundError):
            store.get_and_check(session_id)

    def test_purge_expired_removes_only_stale_sessions(self, store, clock):
        stale_id = store.put(_session())
        clock.advance(seconds=TTL_SECONDS - 60)
        fresh_id = store.put(_session())
        clock.advance(seconds=120)

        assert store.purge_expired() == 1

        with pytest.raises(SessionNotFoundError):
            store.get_and_check(stale_id)
        assert store.get_and_check(fresh_id).session_id == fresh_id

    def test_empty_batch_round_trips(self, store):
        session_id = store.put(_session(rows=[]))

        assert store.get_and_check(session_id).rows == []

    def test_nan_sentinel_survives_storage(self, store):
        session_id = store.put(_session(rows=[{"name": "Dan", "age": math.nan, "created_at": None}]))

        loaded = store.get_and_check(session_id)

        assert math.isnan(loaded.rows[0]["age"])

    def test_claim_removes_session(self, store, clock):
        session_id = store.put(_session())

        claimed = store.claim(session_id)

        assert claimed.session_id == session_id
        assert claimed.created_at == clock.now
        assert claimed.rows == [{"name": "Alice", "age": 30, "created_at": "2021-01-01 00:00:00"}]
        with pytest.raises(SessionNotFoundError):
            store.claim(session_id)
        with pytest.raises(SessionNotFoundError):
            store.get_and_check(session_id)

    def test_claim_unknown_id_is_not_found(self, store):
        with pytest.raises(SessionNotFoundError):
            store.claim("0" * 32)

    def test_claim_of_expired_session_deletes_it(self, store, clock):
        session_id = store.put(_session())
        clock.advance(seconds=TTL_SECONDS + 1)

        with pytest.raises(SessionExpiredError):
            store.claim(session_id)
        with pytest.raises(SessionNotFoundError):
            store.get_and_check(session_id)

    def test_restore_makes_claimed_session_available_again(self, store, clock):
        session_id = store.put(_session())
        claimed = store.claim(session_id)
        clock.advance(seconds=60)

        store.restore(claimed)

        loaded = store.get_and_check(session_id)
        assert loaded.created_at == claimed.created_at
        assert store.claim(session_id).rows == claimed.rows


class TestFileSessionStore:
    def test_session_is_one_json_document(self, tmp_path, clock):
        store = FileSessionStore(tmp_path, ttl_seconds=TTL_SECONDS, clock=clock)

        session_id = store.put(_session())

        path = tmp_path / f"{session_id}.json"
        payload = json.loads(path.read_text(encoding="utf-8"))
        assert payload["table_name"] == "people"
        assert list(tmp_path.glob("*.tmp")) == []

    def test_ids_outside_hex_alphabet_never_touch_disk(self, tmp_path, clock):
        store = FileSessionStore(tmp_path / "sessions", ttl_seconds=TTL_SECONDS, clock=clock)
        (tmp_path / "secret.json").write_text("{}", encoding="utf-8")

        with pytest.raises(SessionNotFoundError):
            store.get_and_check("../secret")
        store.delete("../secret")

        assert (tmp_path / "secret.json").exists()

    def test_purge_on_missing_directory_is_noop(self, tmp_path, clock):
        store = FileSessionStore(tmp_path / "missing", ttl_seconds=TTL_SECONDS, clock=clock)

        assert store.purge_expired() == 0

    def test_claim_leaves_no_file_behind(self, tmp_path, clock):
        store = FileSessionStore(tmp_path, ttl_seconds=TTL_SECONDS, clock=clock)
        session_id = store.put(_session())

        store.claim(session_id)

        assert list(tmp_path.iterdir()) == []


class TestDatabaseSessionStore:
    def test_row_count_is_recorded(self, sqlite_engine, session_factory, clock):
        Base.metadata.create_all(sqlite_engine)
        store = DatabaseSessionStore(session_factory, ttl_seconds=TTL_SECONDS, clock=clock)

        session_id = store.put(_session())

        with session_factory() as db:
            record = db.get(ValidationSessionRecord, session_id)
            assert record.row_count == 1
            assert record.table_name == "people"
