"""Database adapter protocol.

Every adapter module MUST implement this protocol so that the engine and
sessions stay driver-agnostic.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from row_repo.core.connection import ConnectionConfig


@runtime_checkable
class SyncAdapter(Protocol):
    """Synchronous database adapter protocol."""

    @property
    def paramstyle(self) -> str:
        """Binding style: 'numeric' ($1), 'qmark' (?) or 'format' (%s)."""
        ...

    def create_pool(self, config: ConnectionConfig) -> Any:
        """Create a connection pool."""
        ...

    def acquire_connection(self, pool: Any) -> Any:
        """Acquire a connection from the pool."""
        ...

    def release_connection(self, connection: Any, pool: Any) -> None:
        """Release a connection back to the pool."""
        ...

    def close_pool(self, pool: Any) -> None:
        """Close the pool and release all connections."""
        ...

    def execute(
        self,
        connection: Any,
        sql: str,
        params: tuple[Any, ...] = (),
    ) -> Any:
        """Prepare, bind and execute SQL; return a cursor-like object."""
        ...

    def describe_error(self, error: BaseException) -> tuple[str, str] | None:
        """Return ``(code, message)`` for a driver SQL error, else None."""
        ...
