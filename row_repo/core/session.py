"""Sessions and explicit transactions.

A Session holds one connection for its lifetime, so every statement run
through it sees the same transaction. Leaving its ``with`` block commits an
active transaction, or rolls it back when an exception escapes, then
returns the connection to the pool.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from row_repo.core.compiler import CompiledStatement
from row_repo.core.engine import execute_statement
from row_repo.core.exceptions import TransactionStateError
from row_repo.core.fragment import quote_identifier

logger = logging.getLogger(__name__)


class _SessionState(Enum):
    IDLE = "idle"
    ACTIVE = "active"
    CLOSED = "closed"


class Session:
    """Synchronous session bound to a single pooled connection."""

    def __init__(self, connection: Any, connection_manager: Any) -> None:
        self._connection = connection
        self._connection_manager = connection_manager
        self._adapter = connection_manager.adapter
        self._echo: bool = connection_manager.config.echo
        self._state = _SessionState.IDLE
        self._savepoints: list[str] = []

    def __enter__(self) -> Session:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if self._state == _SessionState.CLOSED:
            return
        try:
            if self._state == _SessionState.ACTIVE:
                if exc_type is not None:
                    self.rollback()
                else:
                    self.commit()
        finally:
            self.close()

    @property
    def in_transaction(self) -> bool:
        return self._state == _SessionState.ACTIVE

    def run(self, statement: CompiledStatement) -> list[dict[str, Any]]:
        """Execute a statement on the held connection.

        Outside a transaction each statement is committed on its own.
        """
        self._check_open("execute")
        rows = execute_statement(self._adapter, self._connection, statement, echo=self._echo)
        if self._state == _SessionState.IDLE:
            self._connection.commit()
        return rows

    def begin(self) -> None:
        """Start a transaction."""
        self._check_open("begin")
        if self._state == _SessionState.ACTIVE:
            raise TransactionStateError("active", "begin")
        self._command("BEGIN")
        self._state = _SessionState.ACTIVE
        logger.debug("transaction started")

    def commit(self) -> None:
        """Commit the active transaction."""
        self._check_active("commit")
        self._command("COMMIT")
        self._end()
        logger.debug("transaction committed")

    def rollback(self) -> None:
        """Roll back the active transaction."""
        self._check_active("rollback")
        self._command("ROLLBACK")
        self._end()
        logger.debug("transaction rolled back")

    def savepoint(self, name: str) -> None:
        """Mark a savepoint inside the active transaction."""
        self._check_active("savepoint")
        self._command(f"SAVEPOINT {quote_identifier(name)}")
        self._savepoints.append(name)
        logger.debug("savepoint %s created", name)

    def rollback_to(self, name: str) -> None:
        """Undo everything done after savepoint *name*, keeping the transaction open."""
        self._check_active("rollback to savepoint")
        if name not in self._savepoints:
            raise TransactionStateError("active", f"roll back to unknown savepoint '{name}'")
        self._command(f"ROLLBACK TO SAVEPOINT {quote_identifier(name)}")
        # Later savepoints are destroyed by the rollback
        del self._savepoints[self._savepoints.index(name) + 1 :]
        logger.debug("rolled back to savepoint %s", name)

    def close(self) -> None:
        """Return the connection to the pool. An open transaction is rolled back."""
        if self._state == _SessionState.CLOSED:
            return
        try:
            if self._state == _SessionState.ACTIVE:
                self.rollback()
        finally:
            self._state = _SessionState.CLOSED
            self._connection_manager.release(self._connection)

    def _command(self, sql: str) -> None:
        self._adapter.execute(self._connection, sql, ())

    def _end(self) -> None:
        self._state = _SessionState.IDLE
        self._savepoints.clear()

    def _check_open(self, action: str) -> None:
        if self._state == _SessionState.CLOSED:
            raise TransactionStateError("closed", action)

    def _check_active(self, action: str) -> None:
        self._check_open(action)
        if self._state == _SessionState.IDLE:
            raise TransactionStateError("idle", action)
