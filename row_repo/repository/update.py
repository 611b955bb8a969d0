"""UPDATE builder bound to a repository."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any, Generic, TypeVar

from row_repo.core import conditions
from row_repo.core.compiler import CompiledStatement, UpdateConfiguration, compile_update
from row_repo.core.conditions import ConditionBuilder
from row_repo.core.exceptions import AtLeastOneSelectionRequiredError
from row_repo.core.fragment import SqlFragment, columns_list
from row_repo.mapping.plan import ResultPlan
from row_repo.mapping.result import ResultMapper
from row_repo.relations.resolver import entity_plan
from row_repo.repository.config import RepositoryConfig
from row_repo.repository.query import as_fragment, key_condition
from row_repo.repository.result import RepositoryResult

T = TypeVar("T")


class RepositoryUpdate(Generic[T]):
    """Builds and runs an UPDATE of the repository table.

    Args:
        config: Repository configuration.
        connector: Engine or Session running the statement.
        columns: Restricts which columns ``set`` takes from its argument.
    """

    def __init__(
        self,
        config: RepositoryConfig,
        connector: Any,
        columns: Sequence[str] | None = None,
    ) -> None:
        self._config = config
        self._connector = connector
        self._columns = tuple(columns) if columns else None
        self._update_config = UpdateConfiguration()
        self._statement: CompiledStatement | None = None

    def _changed(self) -> RepositoryUpdate[T]:
        self._statement = None
        return self

    def set(self, values: Any) -> RepositoryUpdate[T]:
        """Set the new values from a record or a ``{column: value}`` dict."""
        row = self._config.record_to_row(values)
        if self._columns is not None:
            row = {c: row[c] for c in self._columns if c in row}
        self._update_config.values = dict(row)
        return self._changed()

    def where(self, where: SqlFragment | str) -> RepositoryUpdate[T]:
        self._update_config.where = as_fragment(where)
        return self._changed()

    def new_condition(self) -> ConditionBuilder:
        return ConditionBuilder()

    def where_value(self, column: str, operator: str, value: Any) -> RepositoryUpdate[T]:
        return self.where(conditions.value(column, operator, value))

    def where_column(self, column: str, operator: str, value_column: str) -> RepositoryUpdate[T]:
        return self.where(conditions.column(column, operator, value_column))

    def where_in(self, column: str, values: Iterable[Any]) -> RepositoryUpdate[T]:
        return self.where(conditions.in_(column, values))

    def where_key(self, model_key: Any) -> RepositoryUpdate[T]:
        return self.where(key_condition(self._config, model_key))

    def returning(self, returning: SqlFragment | str) -> RepositoryUpdate[T]:
        self._update_config.returning = as_fragment(returning)
        return self._changed()

    def returning_columns(self, columns: Sequence[str]) -> RepositoryUpdate[T]:
        if not columns:
            raise AtLeastOneSelectionRequiredError("RETURNING")
        return self.returning(columns_list(columns))

    def returning_all(self) -> RepositoryUpdate[T]:
        return self.returning(SqlFragment("*"))

    def build_sql(self) -> CompiledStatement:
        if self._statement is None:
            self._statement = compile_update(self._config.table, self._update_config)
        return self._statement

    def update(self) -> RepositoryResult[T]:
        """Run the update. Records are returned only with a RETURNING clause."""
        rows = self._connector.run(self.build_sql())
        mapper: ResultMapper[T] = ResultMapper(ResultPlan(entity_plan(self._config)))
        return RepositoryResult(mapper.map_many(rows), rows)
