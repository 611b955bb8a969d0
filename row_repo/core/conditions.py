"""Condition builders.

Every producer returns a SqlFragment. Column names and operators are
trusted identifiers written by the application; only values ever become
parameters.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from row_repo.core.exceptions import AtLeastOneConditionRequiredError
from row_repo.core.fragment import SqlFragment, placeholders
from row_repo.core.parameters import Parameter, to_parameters

Condition = SqlFragment


def value(column: str, operator: str, v: Any) -> Condition:
    """``<column> <operator> ?`` with *v* as the single parameter."""
    return SqlFragment(f"{column} {operator} ?", (Parameter.from_value(v),))


def column(column_a: str, operator: str, column_b: str) -> Condition:
    """``<column_a> <operator> <column_b>``, without parameters."""
    return SqlFragment(f"{column_a} {operator} {column_b}")


def in_(column: str, values: Iterable[Any]) -> Condition:
    """``<column> IN (?,?,…)`` with one parameter per value.

    Raises:
        AtLeastOneConditionRequiredError: If *values* is empty.
    """
    params = to_parameters(values)
    if not params:
        raise AtLeastOneConditionRequiredError("IN")
    return SqlFragment(f"{column} IN ({placeholders(len(params))})", params)


def _combine(keyword: str, subconditions: Sequence[Condition]) -> Condition:
    if not subconditions:
        raise AtLeastOneConditionRequiredError(keyword)
    combined = SqlFragment.concat(subconditions, f" {keyword} ")
    return SqlFragment(f"({combined.text})", combined.params)


def and_(subconditions: Sequence[Condition]) -> Condition:
    """Combine subconditions with AND, inside one pair of parentheses."""
    return _combine("AND", subconditions)


def or_(subconditions: Sequence[Condition]) -> Condition:
    """Combine subconditions with OR, inside one pair of parentheses."""
    return _combine("OR", subconditions)


class ConditionBuilder:
    """Method-style access to the condition producers.

    Statement builders hand one out through ``new_condition()``.
    """

    def value(self, column: str, operator: str, v: Any) -> Condition:
        return value(column, operator, v)

    def column(self, column_a: str, operator: str, column_b: str) -> Condition:
        return column(column_a, operator, column_b)

    def in_(self, column: str, values: Iterable[Any]) -> Condition:
        return in_(column, values)

    def and_(self, subconditions: Sequence[Condition]) -> Condition:
        return and_(subconditions)

    def or_(self, subconditions: Sequence[Condition]) -> Condition:
        return or_(subconditions)
