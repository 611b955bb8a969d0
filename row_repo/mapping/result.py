"""Result mapper.

Turns raw result rows into records. Base columns go to the root converter;
columns aliased ``relations.<field>.<column>`` go to the converter of the
inline relationship that produced them.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from row_repo.core.exceptions import FieldColumnMismatchError, MappingError, TypeMismatchError
from row_repo.mapping.plan import EntityPlan, InlinePlan, ResultPlan

T = TypeVar("T")

RELATIONS_PREFIX = "relations."
RELATION_KEY_COLUMN = "__relation_key"


def base_columns(row: dict[str, Any]) -> dict[str, Any]:
    """Keep only the columns of the queried table itself."""
    return {
        k: v
        for k, v in row.items()
        if not k.startswith(RELATIONS_PREFIX) and k != RELATION_KEY_COLUMN
    }


def convert(plan: EntityPlan, row: dict[str, Any]) -> Any:
    """Run the converter of *plan* on *row*.

    Mapping errors raised by the converter propagate as they are. A lookup
    of a missing column becomes FieldColumnMismatchError; a TypeError or
    ValueError becomes TypeMismatchError.
    """
    if plan.columns:
        row = {c: row[c] for c in plan.columns if c in row}
    try:
        return plan.converter(row)
    except MappingError:
        raise
    except LookupError as e:
        missing = str(e.args[0]) if e.args else str(e)
        raise FieldColumnMismatchError(plan.name, [missing]) from e
    except (TypeError, ValueError) as e:
        raise TypeMismatchError(plan.name, str(e)) from e


def assign(record: Any, attribute_name: str, value: Any) -> None:
    """Set a relationship field on a record, frozen dataclasses included."""
    if isinstance(record, dict):
        record[attribute_name] = value
    else:
        object.__setattr__(record, attribute_name, value)


class ResultMapper(Generic[T]):
    """Maps query rows to records, filling inline relationships.

    Args:
        plan: Root converter and the inline relationships selected by the
            query.
    """

    def __init__(self, plan: ResultPlan) -> None:
        self._plan = plan

    def _map_inline(self, row: dict[str, Any], inline: InlinePlan) -> Any:
        related = {
            k[len(inline.prefix) :]: v for k, v in row.items() if k.startswith(inline.prefix)
        }
        # LEFT JOIN without a match yields only NULLs
        if all(v is None for v in related.values()):
            return None
        return convert(inline.entity_plan, related)

    def map_one(self, row: dict[str, Any]) -> T:
        """Map a single row, inline relationships included."""
        record = convert(self._plan.root_plan, base_columns(row))
        for inline in self._plan.inline_plans:
            assign(record, inline.attribute_name, self._map_inline(row, inline))
        return record  # type: ignore[no-any-return]

    def map_many(self, rows: list[dict[str, Any]]) -> list[T]:
        """Map all rows via map_one. Any failure discards the whole result."""
        return [self.map_one(row) for row in rows]
