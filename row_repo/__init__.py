"""RowRepo - typed repositories over composable, parameterized SQL."""

from __future__ import annotations

from row_repo.core.compiler import DEFAULT, CompiledStatement
from row_repo.core.conditions import Condition, ConditionBuilder, and_, column, in_, or_, value
from row_repo.core.connection import ConnectionConfig, ConnectionManager
from row_repo.core.engine import Connector, Engine
from row_repo.core.enums import DatabaseBackend, ParameterKind, RelationKind, RelationStrategy
from row_repo.core.exceptions import (
    AdapterError,
    AtLeastOneConditionRequiredError,
    AtLeastOneSelectionRequiredError,
    AtLeastOneValueRequiredError,
    ConnectionError,  # noqa: A004
    ConstructionError,
    ExecutionError,
    FieldColumnMismatchError,
    MappingError,
    ParameterBindingError,
    PoolError,
    QueryFailedError,
    RelationshipDefinitionError,
    RepositoryConfigurationError,
    RowRepoError,
    TransactionError,
    TransactionStateError,
    TypeMismatchError,
    UnsupportedValueTypeError,
    UpdatedValuesRequiredError,
)
from row_repo.core.fragment import SqlFragment
from row_repo.core.parameters import Parameter
from row_repo.core.session import Session
from row_repo.mapping.model import ModelMapper
from row_repo.relations import Relationship, many, one
from row_repo.repository import (
    Repository,
    RepositoryConfig,
    RepositoryInsert,
    RepositoryQuery,
    RepositoryResult,
    RepositoryUpdate,
    table_model,
)

__all__ = [
    # Connection
    "ConnectionConfig",
    "ConnectionManager",
    # Execution
    "Connector",
    "Engine",
    "Session",
    # SQL building
    "SqlFragment",
    "Parameter",
    "Condition",
    "ConditionBuilder",
    "value",
    "column",
    "in_",
    "and_",
    "or_",
    "CompiledStatement",
    "DEFAULT",
    # Repository
    "Repository",
    "RepositoryConfig",
    "RepositoryQuery",
    "RepositoryInsert",
    "RepositoryUpdate",
    "RepositoryResult",
    "table_model",
    # Relationships
    "Relationship",
    "one",
    "many",
    # Mapping
    "ModelMapper",
    # Enums
    "DatabaseBackend",
    "ParameterKind",
    "RelationKind",
    "RelationStrategy",
    # Exceptions
    "RowRepoError",
    "ConstructionError",
    "AtLeastOneConditionRequiredError",
    "AtLeastOneValueRequiredError",
    "AtLeastOneSelectionRequiredError",
    "UpdatedValuesRequiredError",
    "UnsupportedValueTypeError",
    "RepositoryConfigurationError",
    "RelationshipDefinitionError",
    "ExecutionError",
    "QueryFailedError",
    "ParameterBindingError",
    "MappingError",
    "FieldColumnMismatchError",
    "TypeMismatchError",
    "TransactionError",
    "TransactionStateError",
    "AdapterError",
    "ConnectionError",
    "PoolError",
]
