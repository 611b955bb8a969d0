"""RowRepo exception hierarchy.

All exceptions are RowRepo-specific. Raw driver SQL errors are never
exposed to callers: they are wrapped in QueryFailedError with the driver
code and message kept for diagnostics.
"""

from __future__ import annotations


class RowRepoError(Exception):
    """Base exception for all RowRepo errors."""


# --- Construction ---


class ConstructionError(RowRepoError):
    """Base for errors raised while building a statement, before any I/O."""


class AtLeastOneConditionRequiredError(ConstructionError):
    """Raised when AND/OR or IN receives nothing to combine."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"{operation} requires at least one condition")


class AtLeastOneValueRequiredError(ConstructionError):
    """Raised when an INSERT is compiled without any row."""

    def __init__(self, table: str) -> None:
        self.table = table
        super().__init__(f"INSERT into '{table}' requires at least one row of values")


class AtLeastOneSelectionRequiredError(ConstructionError):
    """Raised when an explicit column list is empty."""

    def __init__(self, clause: str) -> None:
        self.clause = clause
        super().__init__(f"{clause} requires at least one column")


class UpdatedValuesRequiredError(ConstructionError):
    """Raised when an UPDATE is compiled without SET values."""

    def __init__(self, table: str) -> None:
        self.table = table
        super().__init__(f"UPDATE of '{table}' requires values to set")


class UnsupportedValueTypeError(ConstructionError):
    """Raised when a value cannot be converted to a query parameter."""

    def __init__(self, value: object, detail: str | None = None) -> None:
        self.value_type = type(value).__name__
        message = f"Unsupported query parameter type: {self.value_type}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class RepositoryConfigurationError(ConstructionError):
    """Raised when a repository configuration is inconsistent."""

    def __init__(self, table: str, detail: str) -> None:
        self.table = table
        super().__init__(f"Invalid repository configuration for '{table}': {detail}")


class RelationshipDefinitionError(ConstructionError):
    """Raised when a relationship declaration is incomplete."""

    def __init__(self, field: str, detail: str) -> None:
        self.field = field
        super().__init__(f"Invalid relationship '{field}': {detail}")


# --- Execution ---


class ExecutionError(RowRepoError):
    """Base for query execution errors."""


class QueryFailedError(ExecutionError):
    """Raised when the database rejects a statement.

    The driver error code and message are preserved on the instance, but
    callers only ever see this single error kind.
    """

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"Query failed [{code}]: {message}")


class ParameterBindingError(ExecutionError):
    """Raised when placeholders and bound parameters disagree."""

    def __init__(self, statement: str, detail: str) -> None:
        self.statement = statement
        super().__init__(f"Parameter binding error for '{statement}': {detail}")


# --- Mapping ---


class MappingError(RowRepoError):
    """Base for mapping errors."""


class FieldColumnMismatchError(MappingError):
    """Raised when required fields cannot be mapped from row columns."""

    def __init__(self, target_class: str, missing_fields: list[str]) -> None:
        self.target_class = target_class
        self.missing_fields = missing_fields
        super().__init__(f"Cannot map to {target_class}: missing fields {missing_fields}")


class TypeMismatchError(MappingError):
    """Raised when a column value does not fit the declared record field."""

    def __init__(self, target_class: str, detail: str) -> None:
        self.target_class = target_class
        super().__init__(f"Cannot map to {target_class}: {detail}")


# --- Transaction ---


class TransactionError(RowRepoError):
    """Base for transaction errors."""


class TransactionStateError(TransactionError):
    """Raised on invalid transaction state transitions."""

    def __init__(self, current_state: str, attempted_action: str) -> None:
        self.current_state = current_state
        self.attempted_action = attempted_action
        super().__init__(f"Cannot {attempted_action} transaction in state '{current_state}'")


# --- Adapter ---


class AdapterError(RowRepoError):
    """Base for adapter errors."""


class ConnectionError(AdapterError):  # noqa: A001
    """Raised on connection failures."""


class PoolError(AdapterError):
    """Raised on connection pool failures."""
