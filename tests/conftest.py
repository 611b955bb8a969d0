"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from row_repo.core.compiler import CompiledStatement
from row_repo.core.connection import ConnectionConfig


class RecordingConnector:
    """In-memory connector recording every statement it runs.

    Rows are produced by *responder*, called with each statement.
    """

    def __init__(
        self,
        responder: Callable[[CompiledStatement], list[dict[str, Any]]] | None = None,
    ) -> None:
        self.statements: list[CompiledStatement] = []
        self._responder = responder

    def run(self, statement: CompiledStatement) -> list[dict[str, Any]]:
        self.statements.append(statement)
        if self._responder is None:
            return []
        return [dict(row) for row in self._responder(statement)]


@pytest.fixture
def sqlite_config() -> ConnectionConfig:
    """SQLite in-memory connection config.

    A single pooled connection, since every in-memory connection is its own
    database.
    """
    return ConnectionConfig(driver="sqlite", database=":memory:", pool_size=1)


@pytest.fixture
def recording_connector():
    """Factory for RecordingConnector instances.

    Usage:
        connector = recording_connector(lambda statement: [{"id": 1}])
    """

    def _make(
        responder: Callable[[CompiledStatement], list[dict[str, Any]]] | None = None,
    ) -> RecordingConnector:
        return RecordingConnector(responder)

    return _make
