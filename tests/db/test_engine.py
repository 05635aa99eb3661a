"""Tests for engine setup and the transactional session scope."""

from datetime import datetime, timezone

import pytest
from sqlalchemy import select, text
from sqlalchemy.exc import OperationalError

from ledger_kernel.db.collection_store import StoredCollection
from ledger_kernel.db.engine import (
    create_tables,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
    session_scope,
)

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestInitialization:

    def test_session_before_init_fails(self):
        reset_engine()
        with pytest.raises(RuntimeError, match="init_engine_from_url"):
            get_session_factory()

    def test_file_database_directory_created(self, tmp_path):
        db_path = tmp_path / "nested" / "dir" / "ledger.db"
        try:
            init_engine_from_url(f"sqlite:///{db_path}")
            create_tables()
            assert db_path.parent.is_dir()
            assert db_path.exists()
        finally:
            reset_engine()

    def test_reinit_replaces_engine(self, engine):
        replacement = init_engine_from_url("sqlite://")
        assert replacement is not engine

    def test_initialized_logged(self, captured_logs):
        try:
            init_engine_from_url("sqlite://")
        finally:
            reset_engine()
        (record,) = [r for r in captured_logs() if r["message"] == "engine_initialized"]
        assert record["dialect"] == "sqlite"


class TestSessionScope:

    def test_commits_on_success(self, engine):
        with session_scope() as session:
            session.add(StoredCollection(name="fundsV2", payload="[]", updated_at=NOW))
        with session_scope() as session:
            assert session.scalar(select(StoredCollection.payload)) == "[]"

    def test_rolls_back_and_reraises(self, engine):
        with pytest.raises(KeyError):
            with session_scope() as session:
                session.add(StoredCollection(name="fundsV2", payload="[]", updated_at=NOW))
                session.flush()
                raise KeyError("boom")
        with session_scope() as session:
            assert session.scalar(select(StoredCollection.name)) is None

    def test_database_error_logged(self, engine, captured_logs):
        with pytest.raises(OperationalError):
            with session_scope() as session:
                session.execute(text("SELECT * FROM no_such_table"))
        assert any(r["message"] == "transaction_rolled_back" for r in captured_logs())

    def test_explicit_factory(self, engine):
        factory = get_session_factory()
        with session_scope(factory) as session:
            assert session.execute(text("SELECT 1")).scalar() == 1
