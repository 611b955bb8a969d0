"""Statement execution.

The Engine runs compiled statements through the adapter, one pooled
connection per statement. Sessions (see ``row_repo.core.session``) share
the same execution path on a single held connection.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from row_repo.core.compiler import CompiledStatement
from row_repo.core.connection import ConnectionConfig, ConnectionManager
from row_repo.core.exceptions import QueryFailedError
from row_repo.core.parameters import normalize_params

if TYPE_CHECKING:
    from row_repo.core.session import Session

logger = logging.getLogger(__name__)


@runtime_checkable
class Connector(Protocol):
    """Anything that can run a compiled statement and return its rows."""

    def run(self, statement: CompiledStatement) -> list[dict[str, Any]]: ...


def _rows_to_dicts(cursor: Any) -> list[dict[str, Any]]:
    """Convert cursor results to list of dicts.

    Handles both tuple-like rows and dict-like rows from different adapters.
    """
    if cursor.description is None:
        return []
    columns = [desc[0] for desc in cursor.description]
    rows = cursor.fetchall()
    if not rows:
        return []

    # psycopg dict_row already yields dicts
    if isinstance(rows[0], dict):
        return [dict(row) for row in rows]

    return [dict(zip(columns, row, strict=True)) for row in rows]


def execute_statement(
    adapter: Any,
    connection: Any,
    statement: CompiledStatement,
    *,
    echo: bool = False,
) -> list[dict[str, Any]]:
    """Bind and execute *statement* on *connection*, returning its rows.

    Driver SQL errors recognised by the adapter are raised as
    QueryFailedError; anything else propagates unchanged.
    """
    sql = normalize_params(statement.sql, adapter.paramstyle)
    logger.log(logging.INFO if echo else logging.DEBUG, "%s %r", sql, statement.values)
    try:
        cursor = adapter.execute(connection, sql, statement.values)
        return _rows_to_dicts(cursor)
    except Exception as e:
        described = adapter.describe_error(e)
        if described is None:
            raise
        code, message = described
        logger.debug("query failed [%s]: %s", code, message)
        raise QueryFailedError(code, message) from e


class Engine:
    """Synchronous statement execution engine."""

    def __init__(self, connection_manager: ConnectionManager) -> None:
        self._connection_manager = connection_manager
        self._echo = connection_manager.config.echo

    @classmethod
    def from_config(cls, config: ConnectionConfig) -> Engine:
        """Create an Engine from a ConnectionConfig."""
        return cls(ConnectionManager(config))

    @property
    def adapter(self) -> Any:
        return self._connection_manager.adapter

    def run(self, statement: CompiledStatement) -> list[dict[str, Any]]:
        """Execute one statement on a pooled connection and commit it."""
        with self._connection_manager.get_connection() as conn:
            try:
                rows = execute_statement(self.adapter, conn, statement, echo=self._echo)
            except Exception:
                conn.rollback()
                raise
            conn.commit()
        return rows

    def session(self) -> Session:
        """Open a Session holding one connection until it is closed."""
        from row_repo.core.session import Session

        return Session(self._connection_manager.acquire(), self._connection_manager)

    def close(self) -> None:
        """Close every pooled connection."""
        self._connection_manager.close_pool()
