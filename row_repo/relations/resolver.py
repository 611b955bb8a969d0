"""Relationship resolution.

Inline relationships become LEFT JOINs of the main query, with every
related column aliased under ``relations.<field>.``. All other
relationships are loaded after the main query by one batch SELECT each,
keyed by the synthetic ``__relation_key`` column.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from row_repo.core.compiler import CompiledStatement, SelectConfiguration, compile_select
from row_repo.core.conditions import in_
from row_repo.core.enums import RelationKind, RelationStrategy
from row_repo.core.fragment import SqlFragment, qualified, quote_identifier
from row_repo.mapping.plan import EntityPlan, InlinePlan
from row_repo.mapping.result import RELATION_KEY_COLUMN, assign, base_columns, convert
from row_repo.relations.descriptor import Relationship

logger = logging.getLogger(__name__)

PIVOT_ALIAS = "relation_pivot"


def entity_plan(config: Any) -> EntityPlan:
    """Mapping plan for records of a repository configuration."""
    return EntityPlan(config.table, config.from_row, tuple(config.columns))


# ---------------------------------------------------------------------------
# Inline
# ---------------------------------------------------------------------------


def inline_select(relationship: Relationship) -> list[str]:
    """Aliased select items for every column of the related table."""
    alias = relationship.alias
    return [
        f"{qualified(alias, column)} AS {quote_identifier(f'{alias}.{column}')}"
        for column in relationship.target.columns
    ]


def inline_joins(relationship: Relationship) -> list[SqlFragment]:
    """LEFT JOIN clauses bringing the related record into the main row."""
    source = relationship.source.table
    target = quote_identifier(relationship.target.table)
    alias = relationship.alias

    if relationship.strategy is RelationStrategy.THROUGH:
        pivot_alias = f"{alias}.pivot"
        return [
            SqlFragment(
                f"LEFT JOIN {quote_identifier(relationship.pivot_table)} AS {quote_identifier(pivot_alias)}"
                f" ON {qualified(source, relationship.foreign_key)}"
                f" = {qualified(pivot_alias, relationship.pivot_foreign_key)}"
            ),
            SqlFragment(
                f"LEFT JOIN {target} AS {quote_identifier(alias)}"
                f" ON {qualified(pivot_alias, relationship.pivot_model_key)}"
                f" = {qualified(alias, relationship.model_key)}"
            ),
        ]

    if relationship.strategy is RelationStrategy.DIRECT:
        on = f"{qualified(source, relationship.foreign_key)} = {qualified(alias, relationship.model_key)}"
    else:
        on = f"{qualified(source, relationship.model_key)} = {qualified(alias, relationship.foreign_key)}"
    return [SqlFragment(f"LEFT JOIN {target} AS {quote_identifier(alias)} ON {on}")]


def inline_plan(relationship: Relationship) -> InlinePlan:
    return InlinePlan(relationship.field, relationship.alias + ".", entity_plan(relationship.target))


# ---------------------------------------------------------------------------
# Batch
# ---------------------------------------------------------------------------


def collect_keys(relationship: Relationship, rows: Sequence[dict[str, Any]]) -> list[Any]:
    """Distinct non-NULL parent keys, in first-seen order."""
    seen: dict[Any, None] = {}
    column = relationship.parent_key
    for row in rows:
        key = row.get(column)
        if key is not None:
            seen.setdefault(key, None)
    return list(seen)


def batch_statement(relationship: Relationship, keys: Sequence[Any]) -> CompiledStatement:
    """One SELECT of the related table for all *keys*."""
    target = relationship.target.table
    join = None
    if relationship.strategy is RelationStrategy.THROUGH:
        key_column = qualified(PIVOT_ALIAS, relationship.pivot_foreign_key)
        join = SqlFragment(
            f"INNER JOIN {quote_identifier(relationship.pivot_table)} AS {quote_identifier(PIVOT_ALIAS)}"
            f" ON {qualified(target, relationship.model_key)}"
            f" = {qualified(PIVOT_ALIAS, relationship.pivot_model_key)}"
        )
    elif relationship.kind is RelationKind.ONE and relationship.strategy is RelationStrategy.DIRECT:
        key_column = qualified(target, relationship.model_key)
    else:
        key_column = qualified(target, relationship.foreign_key)

    config = SelectConfiguration(
        select=SqlFragment(
            f"{quote_identifier(target)}.*, {key_column} AS {quote_identifier(RELATION_KEY_COLUMN)}"
        ),
        join=join,
        where=in_(key_column, keys),
    )
    return compile_select(target, config)


def load(
    connector: Any,
    relationship: Relationship,
    records: Sequence[Any],
    rows: Sequence[dict[str, Any]],
) -> None:
    """Load *relationship* for every record with a single query.

    *rows* are the raw rows the records were mapped from, in the same order.
    Records without a match get None (ONE) or an empty list (MANY).
    """
    grouped: dict[Any, list[Any]] = {}
    keys = collect_keys(relationship, rows)
    if keys:
        statement = batch_statement(relationship, keys)
        logger.debug(
            "loading %s.%s for %d keys", relationship.source.table, relationship.field, len(keys)
        )
        plan = entity_plan(relationship.target)
        for row in connector.run(statement):
            grouped.setdefault(row[RELATION_KEY_COLUMN], []).append(convert(plan, base_columns(row)))

    column = relationship.parent_key
    for record, row in zip(records, rows, strict=True):
        matches = grouped.get(row.get(column), [])
        if relationship.kind is RelationKind.MANY:
            assign(record, relationship.field, list(matches))
        else:
            assign(record, relationship.field, matches[0] if matches else None)
