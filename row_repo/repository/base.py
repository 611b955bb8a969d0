"""Repository base class.

A Repository binds a RepositoryConfig to statement builders. Connectors
(an Engine or a Session) are passed per call, so one repository serves
any number of sessions.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from row_repo.core.enums import RelationStrategy
from row_repo.mapping.result import assign
from row_repo.relations import descriptor
from row_repo.relations.descriptor import Relationship
from row_repo.repository.config import RepositoryConfig
from row_repo.repository.insert import RepositoryInsert
from row_repo.repository.query import RepositoryQuery, key_condition
from row_repo.repository.result import RepositoryResult
from row_repo.repository.update import RepositoryUpdate

T = TypeVar("T")


def _config_of(target: Repository[Any] | RepositoryConfig) -> RepositoryConfig:
    return target.config if isinstance(target, Repository) else target


class Repository(Generic[T]):
    """Data access for one table.

    Subclasses may add domain-specific queries built from ``query()``.
    """

    def __init__(self, config: RepositoryConfig) -> None:
        self.config = config

    def query(
        self,
        connector: Any,
        with_: Sequence[Relationship] = (),
    ) -> RepositoryQuery[T]:
        """Start a SELECT, optionally loading *with_* relationships."""
        query: RepositoryQuery[T] = RepositoryQuery(self.config, connector)
        for relationship in with_:
            query.with_(relationship)
        return query

    def insert(self, connector: Any, columns: Sequence[str] | None = None) -> RepositoryInsert[T]:
        return RepositoryInsert(self.config, connector, columns)

    def update(self, connector: Any, columns: Sequence[str] | None = None) -> RepositoryUpdate[T]:
        return RepositoryUpdate(self.config, connector, columns)

    def find(
        self,
        connector: Any,
        model_key: Any,
        with_: Sequence[Relationship] = (),
    ) -> RepositoryResult[T]:
        """Find records by primary key.

        *model_key* is a scalar, a ``{column: value}`` mapping for composite
        keys, or a list of either.
        """
        return self.query(connector, with_).where_key(model_key).get()

    def create(self, connector: Any, record: T) -> RepositoryResult[T]:
        """Insert *record* and refresh it with the inserted values."""
        result = self.insert(connector).values(record).returning_all().insert()
        self._refresh(record, result)
        return result

    def save(self, connector: Any, record: T) -> RepositoryResult[T]:
        """Write every column of an existing *record*, matched by its key."""
        row = self.config.record_to_row(record)
        model_key = {name: row[name] for name in self.config.key}
        update = self.update(connector).set(row).returning_all()
        update.where(key_condition(self.config, model_key))
        result = update.update()
        self._refresh(record, result)
        return result

    def _refresh(self, record: Any, result: RepositoryResult[T]) -> None:
        stored = result.first()
        if stored is None:
            return
        for column, value in self.config.record_to_row(stored).items():
            assign(record, column, value)

    def one(
        self,
        field: str,
        target: Repository[Any] | RepositoryConfig,
        *,
        strategy: RelationStrategy | str = RelationStrategy.DIRECT,
        **keys: Any,
    ) -> Relationship:
        """Declare a ONE relationship from this repository to *target*."""
        return descriptor.one(field, self.config, _config_of(target), strategy=strategy, **keys)

    def many(
        self,
        field: str,
        target: Repository[Any] | RepositoryConfig,
        *,
        strategy: RelationStrategy | str = RelationStrategy.DIRECT,
        **keys: Any,
    ) -> Relationship:
        """Declare a MANY relationship from this repository to *target*."""
        return descriptor.many(field, self.config, _config_of(target), strategy=strategy, **keys)
