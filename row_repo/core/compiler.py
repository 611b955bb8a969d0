"""Statement compiler.

Assembles SELECT, INSERT and UPDATE statements from clause fragments, in a
fixed order per statement type, then numbers every ``?`` marker once into
``$1, $2, …``. Numbering depends only on marker occurrence, so a missing
clause never shifts the numbers of the clauses after it.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from row_repo.core.exceptions import (
    AtLeastOneValueRequiredError,
    ParameterBindingError,
    UpdatedValuesRequiredError,
)
from row_repo.core.fragment import SqlFragment, quote_identifier
from row_repo.core.parameters import Parameter, number_placeholders


class _Default:
    """Sentinel rendered as the SQL ``DEFAULT`` keyword in INSERT values."""

    def __repr__(self) -> str:
        return "DEFAULT"


DEFAULT: Any = _Default()


@dataclass
class SelectConfiguration:
    """Clause state of a SELECT. Setting a clause replaces it."""

    select: SqlFragment | None = None
    join: SqlFragment | None = None
    where: SqlFragment | None = None


@dataclass
class InsertConfiguration:
    """Clause state of an INSERT; each row holds one value per column."""

    values: list[tuple[Any, ...]] = field(default_factory=list)
    returning: SqlFragment | None = None


@dataclass
class UpdateConfiguration:
    """Clause state of an UPDATE; *values* maps column to new value."""

    values: dict[str, Any] | None = None
    where: SqlFragment | None = None
    returning: SqlFragment | None = None


@dataclass(frozen=True)
class CompiledStatement:
    """Final SQL text with numbered markers and its ordered parameters."""

    sql: str
    params: tuple[Parameter, ...] = ()

    @property
    def values(self) -> tuple[Any, ...]:
        """Raw parameter values, in binding order."""
        return tuple(p.value for p in self.params)


def _finalize(fragment: SqlFragment) -> CompiledStatement:
    sql, count = number_placeholders(fragment.text + ";")
    if count != len(fragment.params):
        raise ParameterBindingError(
            fragment.text,
            f"{count} placeholders for {len(fragment.params)} parameters",
        )
    return CompiledStatement(sql, fragment.params)


def compile_select(
    table: str,
    config: SelectConfiguration,
    relation_select: Sequence[str] = (),
    relation_joins: Sequence[SqlFragment] = (),
) -> CompiledStatement:
    """Compile ``SELECT … FROM "table" [JOIN …] [WHERE …];``.

    Args:
        table: Table name, quoted in the output.
        config: Clause state of the query.
        relation_select: Extra select items for inline relationships.
        relation_joins: JOIN clauses for inline relationships, appended
            after the configured join.
    """
    quoted = quote_identifier(table)
    parts: list[SqlFragment] = [SqlFragment("SELECT ")]
    parts.append(config.select if config.select is not None else SqlFragment(f"{quoted}.*"))
    if relation_select:
        parts.append(SqlFragment(", " + ", ".join(relation_select)))
    parts.append(SqlFragment(f" FROM {quoted}"))
    if config.join is not None:
        parts.append(SqlFragment(" "))
        parts.append(config.join)
    for join in relation_joins:
        parts.append(SqlFragment(" "))
        parts.append(join)
    if config.where is not None:
        parts.append(SqlFragment(" WHERE "))
        parts.append(config.where)
    return _finalize(SqlFragment.concat(parts, ""))


def compile_insert(
    table: str,
    columns: Sequence[str],
    config: InsertConfiguration,
) -> CompiledStatement:
    """Compile ``INSERT INTO "table" (…) VALUES (…),(…) [RETURNING …];``.

    Raises:
        AtLeastOneValueRequiredError: If no row was given.
    """
    if not config.values:
        raise AtLeastOneValueRequiredError(table)

    rows_sql: list[str] = []
    params: list[Parameter] = []
    for row in config.values:
        markers: list[str] = []
        for v in row:
            if v is DEFAULT:
                markers.append("DEFAULT")
            else:
                markers.append("?")
                params.append(Parameter.from_value(v))
        rows_sql.append("(" + ",".join(markers) + ")")

    column_sql = ",".join(quote_identifier(c) for c in columns)
    parts = [
        SqlFragment(
            f"INSERT INTO {quote_identifier(table)} ({column_sql}) VALUES " + ",".join(rows_sql),
            tuple(params),
        )
    ]
    if config.returning is not None:
        parts.append(SqlFragment(" RETURNING "))
        parts.append(config.returning)
    return _finalize(SqlFragment.concat(parts, ""))


def compile_update(table: str, config: UpdateConfiguration) -> CompiledStatement:
    """Compile ``UPDATE "table" SET … [WHERE …] [RETURNING …];``.

    Raises:
        UpdatedValuesRequiredError: If no SET value was given.
    """
    if not config.values:
        raise UpdatedValuesRequiredError(table)

    assignments = ",".join(f"{quote_identifier(c)}=?" for c in config.values)
    parts = [
        SqlFragment(
            f"UPDATE {quote_identifier(table)} SET {assignments}",
            tuple(Parameter.from_value(v) for v in config.values.values()),
        )
    ]
    if config.where is not None:
        parts.append(SqlFragment(" WHERE "))
        parts.append(config.where)
    if config.returning is not None:
        parts.append(SqlFragment(" RETURNING "))
        parts.append(config.returning)
    return _finalize(SqlFragment.concat(parts, ""))
