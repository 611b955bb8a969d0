"""Relationship descriptors.

A Relationship links the records of a source repository to the records of
a target repository. Unset keys are resolved against the declared primary
keys when the descriptor is built, so a Relationship is always complete.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from row_repo.core.enums import RelationKind, RelationStrategy
from row_repo.core.exceptions import RelationshipDefinitionError


def _primary_key(config: Any, field: str, role: str) -> str:
    """Single-column primary key of *config*, used as a default key."""
    if len(config.key) != 1:
        raise RelationshipDefinitionError(
            field,
            f"{role} table '{config.table}' has a composite key; give the key column explicitly",
        )
    return config.key[0]  # type: ignore[no-any-return]


def _check_column(config: Any, column: str, field: str, role: str) -> None:
    if column not in config.columns:
        raise RelationshipDefinitionError(
            field, f"column '{column}' is not declared on {role} table '{config.table}'"
        )


@dataclass(frozen=True)
class Relationship:
    """A declared relationship between two repositories.

    Key meaning depends on the strategy:

    - ONE / DIRECT: ``foreign_key`` is a source column referencing
      ``model_key`` on the target.
    - ONE / REVERSE and MANY / DIRECT or REVERSE: ``foreign_key`` is a
      target column referencing ``model_key`` on the source.
    - THROUGH: ``foreign_key`` is the source column stored in the pivot's
      ``pivot_foreign_key``; ``model_key`` is the target column stored in
      the pivot's ``pivot_model_key``.
    """

    field: str
    kind: RelationKind
    strategy: RelationStrategy
    source: Any
    target: Any
    foreign_key: str | None = None
    model_key: str | None = None
    pivot_table: str | None = None
    pivot_foreign_key: str | None = None
    pivot_model_key: str | None = None

    def __post_init__(self) -> None:
        if not self.field:
            raise RelationshipDefinitionError(self.field, "field name is required")

        foreign_key = self.foreign_key
        model_key = self.model_key

        if self.strategy is RelationStrategy.THROUGH:
            for name in ("pivot_table", "pivot_foreign_key", "pivot_model_key"):
                if not getattr(self, name):
                    raise RelationshipDefinitionError(self.field, f"{name} is required for THROUGH")
            foreign_key = foreign_key or _primary_key(self.source, self.field, "source")
            model_key = model_key or _primary_key(self.target, self.field, "target")
            _check_column(self.source, foreign_key, self.field, "source")
            _check_column(self.target, model_key, self.field, "target")

        elif self.kind is RelationKind.ONE and self.strategy is RelationStrategy.DIRECT:
            if not foreign_key:
                raise RelationshipDefinitionError(self.field, "foreign_key is required for ONE / DIRECT")
            model_key = model_key or _primary_key(self.target, self.field, "target")
            _check_column(self.source, foreign_key, self.field, "source")
            _check_column(self.target, model_key, self.field, "target")

        elif self.kind is RelationKind.ONE:
            foreign_key = foreign_key or _primary_key(self.target, self.field, "target")
            model_key = model_key or _primary_key(self.source, self.field, "source")
            _check_column(self.target, foreign_key, self.field, "target")
            _check_column(self.source, model_key, self.field, "source")

        else:
            # MANY with DIRECT or REVERSE: the related table holds the key
            if not foreign_key:
                raise RelationshipDefinitionError(self.field, "foreign_key is required for MANY")
            model_key = model_key or _primary_key(self.source, self.field, "source")
            _check_column(self.target, foreign_key, self.field, "target")
            _check_column(self.source, model_key, self.field, "source")

        object.__setattr__(self, "foreign_key", foreign_key)
        object.__setattr__(self, "model_key", model_key)

    @property
    def alias(self) -> str:
        """Table alias used when the relationship is joined inline."""
        return f"relations.{self.field}"

    @property
    def parent_key(self) -> str:
        """Source column whose values identify the related records."""
        if self.strategy is RelationStrategy.THROUGH or (
            self.kind is RelationKind.ONE and self.strategy is RelationStrategy.DIRECT
        ):
            return self.foreign_key  # type: ignore[return-value]
        return self.model_key  # type: ignore[return-value]

    def can_inline(self, lazy: bool = False) -> bool:
        """ONE relationships are joined inline unless loaded lazily."""
        return self.kind is RelationKind.ONE and not lazy


def _build(
    kind: RelationKind,
    field: str,
    source: Any,
    target: Any,
    strategy: RelationStrategy | str,
    foreign_key: str | None,
    model_key: str | None,
    through: str | None,
    pivot_foreign_key: str | None,
    pivot_model_key: str | None,
) -> Relationship:
    strategy = RelationStrategy(strategy)
    if through is not None:
        strategy = RelationStrategy.THROUGH
    return Relationship(
        field=field,
        kind=kind,
        strategy=strategy,
        source=source,
        target=target,
        foreign_key=foreign_key,
        model_key=model_key,
        pivot_table=through,
        pivot_foreign_key=pivot_foreign_key,
        pivot_model_key=pivot_model_key,
    )


def one(
    field: str,
    source: Any,
    target: Any,
    *,
    strategy: RelationStrategy | str = RelationStrategy.DIRECT,
    foreign_key: str | None = None,
    model_key: str | None = None,
    through: str | None = None,
    pivot_foreign_key: str | None = None,
    pivot_model_key: str | None = None,
) -> Relationship:
    """Declare a relationship to at most one related record.

    Giving *through* (the pivot table) implies the THROUGH strategy.
    """
    return _build(
        RelationKind.ONE, field, source, target, strategy,
        foreign_key, model_key, through, pivot_foreign_key, pivot_model_key,
    )


def many(
    field: str,
    source: Any,
    target: Any,
    *,
    strategy: RelationStrategy | str = RelationStrategy.DIRECT,
    foreign_key: str | None = None,
    model_key: str | None = None,
    through: str | None = None,
    pivot_foreign_key: str | None = None,
    pivot_model_key: str | None = None,
) -> Relationship:
    """Declare a relationship to any number of related records."""
    return _build(
        RelationKind.MANY, field, source, target, strategy,
        foreign_key, model_key, through, pivot_foreign_key, pivot_model_key,
    )
