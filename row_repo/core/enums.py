"""Enumerations shared across the package."""

from __future__ import annotations

from enum import Enum


class DatabaseBackend(Enum):
    """Supported database backends."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"


class ParameterKind(Enum):
    """Tag of a bound query parameter."""

    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    NULL = "null"


class RelationKind(Enum):
    """Cardinality of a relationship, seen from the owning record."""

    ONE = "one"
    MANY = "many"


class RelationStrategy(Enum):
    """How the owning and related tables are linked."""

    DIRECT = "direct"
    REVERSE = "reverse"
    THROUGH = "through"
