"""Result mapping plan data classes.

Frozen dataclasses describing how a result row becomes a record, used by
ResultMapper at execution time.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

RowConverter = Callable[[dict[str, Any]], Any]


@dataclass(frozen=True)
class EntityPlan:
    """Mapping plan for one record type read from a set of columns."""

    name: str
    converter: RowConverter
    columns: tuple[str, ...] = ()


@dataclass(frozen=True)
class InlinePlan:
    """Mapping plan for a relationship loaded through a LEFT JOIN.

    The related columns appear in the row as ``<prefix><column>``.
    """

    attribute_name: str
    prefix: str
    entity_plan: EntityPlan


@dataclass(frozen=True)
class ResultPlan:
    """Compiled mapping plan for a query result."""

    root_plan: EntityPlan
    inline_plans: list[InlinePlan] = field(default_factory=list)
