"""INSERT builder bound to a repository."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from row_repo.core.compiler import (
    DEFAULT,
    CompiledStatement,
    InsertConfiguration,
    compile_insert,
)
from row_repo.core.exceptions import AtLeastOneSelectionRequiredError
from row_repo.core.fragment import SqlFragment, columns_list
from row_repo.mapping.plan import ResultPlan
from row_repo.mapping.result import ResultMapper
from row_repo.relations.resolver import entity_plan
from row_repo.repository.config import RepositoryConfig
from row_repo.repository.query import as_fragment
from row_repo.repository.result import RepositoryResult

T = TypeVar("T")


class RepositoryInsert(Generic[T]):
    """Builds and runs an INSERT into the repository table.

    Args:
        config: Repository configuration.
        connector: Engine or Session running the statement.
        columns: Columns to write; defaults to the configured insert columns.
    """

    def __init__(
        self,
        config: RepositoryConfig,
        connector: Any,
        columns: Sequence[str] | None = None,
    ) -> None:
        self._config = config
        self._connector = connector
        self._columns: tuple[str, ...] = tuple(columns) if columns else config.insert_columns  # type: ignore[assignment]
        self._value_columns = self._columns
        self._insert_config = InsertConfiguration()
        self._statement: CompiledStatement | None = None

    def _generated_key(self, rows: list[dict[str, Any]]) -> str | None:
        """Single key column left empty in every row, if any."""
        if len(self._config.key) != 1 or len(self._columns) < 2:
            return None
        key = self._config.key[0]
        if key in self._columns and all(row.get(key) is None for row in rows):
            return key
        return None

    def values(self, values: Any) -> RepositoryInsert[T]:
        """Set the rows to insert.

        Accepts a record, a row dict, or a list of either. Replaces any
        previously set rows. A single-column key that is None in every row
        is left out of the statement so the database generates it.
        """
        items = values if isinstance(values, (list, tuple)) else [values]
        rows = [self._config.record_to_row(v) for v in items]
        generated = self._generated_key(rows)
        self._value_columns = tuple(c for c in self._columns if c != generated)
        # Columns missing from a row fall back to the column default
        self._insert_config.values = [
            tuple(row.get(c, DEFAULT) for c in self._value_columns) for row in rows
        ]
        self._statement = None
        return self

    def returning(self, returning: SqlFragment | str) -> RepositoryInsert[T]:
        """Set the RETURNING clause."""
        self._insert_config.returning = as_fragment(returning)
        self._statement = None
        return self

    def returning_columns(self, columns: Sequence[str]) -> RepositoryInsert[T]:
        if not columns:
            raise AtLeastOneSelectionRequiredError("RETURNING")
        return self.returning(columns_list(columns))

    def returning_all(self) -> RepositoryInsert[T]:
        return self.returning(SqlFragment("*"))

    def build_sql(self) -> CompiledStatement:
        if self._statement is None:
            self._statement = compile_insert(
                self._config.table, self._value_columns, self._insert_config
            )
        return self._statement

    def insert(self) -> RepositoryResult[T]:
        """Run the insert. Records are returned only with a RETURNING clause."""
        rows = self._connector.run(self.build_sql())
        mapper: ResultMapper[T] = ResultMapper(ResultPlan(entity_plan(self._config)))
        return RepositoryResult(mapper.map_many(rows), rows)
