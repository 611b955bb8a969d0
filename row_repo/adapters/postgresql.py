"""PostgreSQL adapter using psycopg (v3+)."""

from __future__ import annotations

from typing import Any

from row_repo.core.connection import ConnectionConfig
from row_repo.core.exceptions import ConnectionError, PoolError  # noqa: A004


def _build_conninfo(config: ConnectionConfig) -> str:
    """Build a libpq connection string from config fields."""
    parts: list[str] = []
    if config.host is not None:
        parts.append(f"host={config.host}")
    if config.port is not None:
        parts.append(f"port={config.port}")
    if config.user is not None:
        parts.append(f"user={config.user}")
    if config.password is not None:
        parts.append(f"password={config.password}")
    parts.append(f"dbname={config.database}")
    return " ".join(parts)


class PostgresqlSyncAdapter:
    """Synchronous PostgreSQL adapter using psycopg (v3+).

    Connections run in autocommit mode; sessions open transactions
    explicitly with ``BEGIN``.
    """

    @property
    def paramstyle(self) -> str:
        return "format"

    def create_pool(self, config: ConnectionConfig) -> list[Any]:
        import psycopg
        import psycopg.rows

        conninfo = _build_conninfo(config)
        pool: list[Any] = []
        try:
            for _ in range(config.pool_size):
                conn = psycopg.connect(
                    conninfo,
                    autocommit=True,
                    row_factory=psycopg.rows.dict_row,
                    connect_timeout=config.pool_timeout,
                    **config.extra,
                )
                pool.append(conn)
        except psycopg.OperationalError as e:
            self.close_pool(pool)
            raise ConnectionError(
                f"Cannot connect to PostgreSQL database '{config.database}': {e}"
            ) from e
        return pool

    def acquire_connection(self, pool: list[Any]) -> Any:
        if not pool:
            raise PoolError("No connections available in pool")
        return pool.pop()

    def release_connection(self, connection: Any, pool: list[Any]) -> None:
        pool.append(connection)

    def close_pool(self, pool: list[Any]) -> None:
        for conn in pool:
            conn.close()
        pool.clear()

    def execute(
        self,
        connection: Any,
        sql: str,
        params: tuple[Any, ...] = (),
    ) -> Any:
        return connection.execute(sql, params)

    def describe_error(self, error: BaseException) -> tuple[str, str] | None:
        import psycopg

        if not isinstance(error, psycopg.Error):
            return None
        diag = getattr(error, "diag", None)
        message = getattr(diag, "message_primary", None) or str(error)
        return error.sqlstate or type(error).__name__, message
