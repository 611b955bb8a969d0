"""Unit tests for Session."""

from __future__ import annotations

import pytest

from row_repo.core.compiler import CompiledStatement
from row_repo.core.connection import ConnectionConfig, ConnectionManager
from row_repo.core.engine import Connector, Engine
from row_repo.core.exceptions import TransactionStateError
from row_repo.core.parameters import to_parameters


def _insert(name: str) -> CompiledStatement:
    return CompiledStatement('INSERT INTO "users" ("name") VALUES ($1);', to_parameters([name]))


COUNT = CompiledStatement('SELECT COUNT(*) AS cnt FROM "users";')


@pytest.fixture
def engine(sqlite_config: ConnectionConfig) -> Engine:
    manager = ConnectionManager(sqlite_config)
    with manager.get_connection() as conn:
        conn.execute("CREATE TABLE users (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT)")
        conn.commit()
    return Engine(manager)


def _count(engine: Engine) -> int:
    return engine.run(COUNT)[0]["cnt"]


class TestSession:
    def test_is_a_connector(self, engine: Engine) -> None:
        with engine.session() as session:
            assert isinstance(session, Connector)

    def test_statements_outside_transaction_are_committed(self, engine: Engine) -> None:
        with engine.session() as session:
            session.run(_insert("Alice"))
        assert _count(engine) == 1

    def test_commit_persists_changes(self, engine: Engine) -> None:
        with engine.session() as session:
            session.begin()
            session.run(_insert("Alice"))
            assert session.in_transaction
            session.commit()
            assert not session.in_transaction
        assert _count(engine) == 1

    def test_exit_commits_active_transaction(self, engine: Engine) -> None:
        with engine.session() as session:
            session.begin()
            session.run(_insert("Alice"))
        assert _count(engine) == 1

    def test_auto_rollback_on_exception(self, engine: Engine) -> None:
        with pytest.raises(RuntimeError, match="boom"), engine.session() as session:
            session.begin()
            session.run(_insert("Alice"))
            raise RuntimeError("boom")
        assert _count(engine) == 0

    def test_explicit_rollback(self, engine: Engine) -> None:
        with engine.session() as session:
            session.begin()
            session.run(_insert("Alice"))
            session.rollback()
        assert _count(engine) == 0

    def test_rollback_to_savepoint(self, engine: Engine) -> None:
        with engine.session() as session:
            session.begin()
            session.run(_insert("Alice"))
            session.savepoint("before_bob")
            session.run(_insert("Bob"))
            session.rollback_to("before_bob")
            assert session.run(COUNT)[0]["cnt"] == 1
            session.commit()
        assert _count(engine) == 1

    def test_unknown_savepoint(self, engine: Engine) -> None:
        with engine.session() as session:
            session.begin()
            with pytest.raises(TransactionStateError):
                session.rollback_to("nowhere")

    def test_begin_twice_raises(self, engine: Engine) -> None:
        with engine.session() as session:
            session.begin()
            with pytest.raises(TransactionStateError):
                session.begin()

    @pytest.mark.parametrize("action", ["commit", "rollback"])
    def test_end_without_transaction_raises(self, engine: Engine, action: str) -> None:
        with engine.session() as session:
            with pytest.raises(TransactionStateError) as exc_info:
                getattr(session, action)()
        assert exc_info.value.current_state == "idle"

    def test_savepoint_requires_transaction(self, engine: Engine) -> None:
        with engine.session() as session, pytest.raises(TransactionStateError):
            session.savepoint("sp")

    def test_closed_session_rejects_statements(self, engine: Engine) -> None:
        session = engine.session()
        session.close()
        with pytest.raises(TransactionStateError) as exc_info:
            session.run(COUNT)
        assert exc_info.value.current_state == "closed"

    def test_close_rolls_back_open_transaction(self, engine: Engine) -> None:
        session = engine.session()
        session.begin()
        session.run(_insert("Alice"))
        session.close()
        assert _count(engine) == 0
