"""SELECT builder bound to a repository."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any, Generic, TypeVar

from row_repo.core import conditions
from row_repo.core.compiler import CompiledStatement, SelectConfiguration, compile_select
from row_repo.core.conditions import Condition, ConditionBuilder
from row_repo.core.exceptions import (
    AtLeastOneSelectionRequiredError,
    RepositoryConfigurationError,
)
from row_repo.core.fragment import SqlFragment, columns_list, qualified
from row_repo.mapping.plan import ResultPlan
from row_repo.mapping.result import ResultMapper
from row_repo.relations import resolver
from row_repo.relations.descriptor import Relationship
from row_repo.repository.config import RepositoryConfig
from row_repo.repository.result import RepositoryResult

T = TypeVar("T")


def as_fragment(sql: SqlFragment | str) -> SqlFragment:
    """Accept raw SQL text where a fragment is expected."""
    if isinstance(sql, SqlFragment):
        return sql
    return SqlFragment.raw(sql)


def key_condition(config: RepositoryConfig, model_key: Any) -> Condition:
    """Condition matching records by primary key.

    *model_key* is a scalar for a single-column key, a ``{column: value}``
    mapping for a composite key, or a list of either to match several
    records.
    """
    many = isinstance(model_key, (list, tuple))
    keys: list[Any] = list(model_key) if many else [model_key]

    if len(config.key) == 1:
        name = config.key[0]
        column = qualified(config.table, name)
        values = [k[name] if isinstance(k, dict) else k for k in keys]
        if not many:
            return conditions.value(column, "=", values[0])
        return conditions.in_(column, values)

    per_record: list[Condition] = []
    for k in keys:
        if not isinstance(k, dict) or any(name not in k for name in config.key):
            raise RepositoryConfigurationError(
                config.table, f"composite key values must map every key column {list(config.key)}"
            )
        per_record.append(
            conditions.and_(
                [conditions.value(qualified(config.table, name), "=", k[name]) for name in config.key]
            )
        )
    if not many:
        return per_record[0]
    return conditions.or_(per_record)


class RepositoryQuery(Generic[T]):
    """Builds and runs a SELECT on the repository table.

    Every clause setter replaces the previous value of its clause.
    """

    def __init__(self, config: RepositoryConfig, connector: Any) -> None:
        self._config = config
        self._connector = connector
        self._query_config = SelectConfiguration()
        self._relations: dict[str, tuple[Relationship, bool]] = {}
        self._statement: CompiledStatement | None = None

    def _changed(self) -> RepositoryQuery[T]:
        self._statement = None
        return self

    def select(self, select: SqlFragment | str) -> RepositoryQuery[T]:
        """Set the SELECT list."""
        self._query_config.select = as_fragment(select)
        return self._changed()

    def select_columns(self, columns: Sequence[str]) -> RepositoryQuery[T]:
        """Set the SELECT list to the given columns."""
        if not columns:
            raise AtLeastOneSelectionRequiredError("SELECT")
        return self.select(columns_list(columns))

    def join(self, join: SqlFragment | str) -> RepositoryQuery[T]:
        """Set the JOIN clause."""
        self._query_config.join = as_fragment(join)
        return self._changed()

    def where(self, where: SqlFragment | str) -> RepositoryQuery[T]:
        """Set the WHERE clause."""
        self._query_config.where = as_fragment(where)
        return self._changed()

    def new_condition(self) -> ConditionBuilder:
        return ConditionBuilder()

    def where_value(self, column: str, operator: str, value: Any) -> RepositoryQuery[T]:
        return self.where(conditions.value(column, operator, value))

    def where_column(self, column: str, operator: str, value_column: str) -> RepositoryQuery[T]:
        return self.where(conditions.column(column, operator, value_column))

    def where_in(self, column: str, values: Iterable[Any]) -> RepositoryQuery[T]:
        return self.where(conditions.in_(column, values))

    def where_key(self, model_key: Any) -> RepositoryQuery[T]:
        """Match records by primary key (see ``key_condition``)."""
        return self.where(key_condition(self._config, model_key))

    def with_(self, relationship: Relationship, lazy: bool = False) -> RepositoryQuery[T]:
        """Load *relationship* with the records.

        ONE relationships are joined inline unless *lazy* is set; every
        other relationship costs one extra query per ``get()``.

        An inline ONE relationship that matches several related rows repeats
        the owning record once per match; load it with ``lazy=True`` when
        that can happen, so only the first match is kept.
        """
        if relationship.source.table != self._config.table:
            raise RepositoryConfigurationError(
                self._config.table,
                f"relationship '{relationship.field}' belongs to '{relationship.source.table}'",
            )
        self._relations[relationship.field] = (relationship, lazy)
        return self._changed()

    def _inline(self) -> list[Relationship]:
        return [r for r, lazy in self._relations.values() if r.can_inline(lazy)]

    def _batched(self) -> list[Relationship]:
        return [r for r, lazy in self._relations.values() if not r.can_inline(lazy)]

    def build_sql(self) -> CompiledStatement:
        """Compile the query. The result is reused until a clause changes."""
        if self._statement is None:
            inline = self._inline()
            self._statement = compile_select(
                self._config.table,
                self._query_config,
                relation_select=[item for r in inline for item in resolver.inline_select(r)],
                relation_joins=[join for r in inline for join in resolver.inline_joins(r)],
            )
        return self._statement

    def get(self) -> RepositoryResult[T]:
        """Run the query and map its rows, relationships included."""
        statement = self.build_sql()
        rows = self._connector.run(statement)
        mapper: ResultMapper[T] = ResultMapper(
            ResultPlan(
                resolver.entity_plan(self._config),
                [resolver.inline_plan(r) for r in self._inline()],
            )
        )
        models = mapper.map_many(rows)
        for relationship in self._batched():
            resolver.load(self._connector, relationship, models, rows)
        return RepositoryResult(models, rows)
