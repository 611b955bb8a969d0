"""Repository configuration.

A RepositoryConfig names the table, its key and columns, and the two
converters between records and rows. ``table_model`` derives a complete
configuration from a record class.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from row_repo.core.exceptions import RepositoryConfigurationError
from row_repo.mapping.model import ModelMapper, model_fields


def _as_tuple(value: str | Sequence[str] | None) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


@dataclass(frozen=True)
class RepositoryConfig:
    """Table-level configuration of a repository.

    Args:
        table: Table name.
        key: Primary key column, or columns for a composite key.
        columns: Every column of the table, in order.
        from_row: Converts a row dict (base columns only) to a record.
        to_row: Converts a record to a row dict. Required for inserting or
            saving records; plain dicts can be inserted without it.
        insert_columns: Columns written by inserts. Defaults to *columns*.
    """

    table: str
    key: tuple[str, ...]
    columns: tuple[str, ...]
    from_row: Callable[[dict[str, Any]], Any]
    to_row: Callable[[Any], dict[str, Any]] | None = None
    insert_columns: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "key", _as_tuple(self.key))
        object.__setattr__(self, "columns", _as_tuple(self.columns))
        object.__setattr__(
            self,
            "insert_columns",
            _as_tuple(self.insert_columns) if self.insert_columns is not None else self.columns,
        )

        if not self.table:
            raise RepositoryConfigurationError(self.table, "table name is required")
        if not self.columns:
            raise RepositoryConfigurationError(self.table, "at least one column is required")
        if len(set(self.columns)) != len(self.columns):
            raise RepositoryConfigurationError(self.table, "columns must be unique")
        if not self.key:
            raise RepositoryConfigurationError(self.table, "a primary key is required")
        unknown = [c for c in (*self.key, *self.insert_columns) if c not in self.columns]  # type: ignore[misc]
        if unknown:
            raise RepositoryConfigurationError(self.table, f"unknown columns {unknown}")
        if not self.insert_columns:
            raise RepositoryConfigurationError(self.table, "at least one insert column is required")

    def record_to_row(self, record: Any) -> dict[str, Any]:
        """Row dict of *record*; dicts are taken as rows already."""
        if isinstance(record, dict):
            return record
        if self.to_row is None:
            raise RepositoryConfigurationError(self.table, "to_row is required to write records")
        return self.to_row(record)


def _default_to_row(columns: tuple[str, ...]) -> Callable[[Any], dict[str, Any]]:
    def to_row(record: Any) -> dict[str, Any]:
        if isinstance(record, BaseModel):
            data = record.model_dump()
        elif dataclasses.is_dataclass(record):
            data = {f.name: getattr(record, f.name) for f in dataclasses.fields(record)}
        else:
            data = vars(record)
        return {c: data[c] for c in columns if c in data}

    return to_row


def table_model(
    model: type,
    table: str,
    key: str | Sequence[str] = "id",
    *,
    columns: Sequence[str] | None = None,
    insert_columns: Sequence[str] | None = None,
) -> RepositoryConfig:
    """Build a RepositoryConfig whose converters come from *model*.

    Columns default to the model's fields; pass them explicitly when the
    model also declares relationship fields.
    """
    if columns is None:
        columns = model_fields(model)
    resolved = _as_tuple(columns)
    return RepositoryConfig(
        table=table,
        key=_as_tuple(key),
        columns=resolved,
        from_row=ModelMapper(model).map_one,
        to_row=_default_to_row(resolved),
        insert_columns=_as_tuple(insert_columns) if insert_columns is not None else None,
    )
