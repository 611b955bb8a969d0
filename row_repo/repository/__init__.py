"""Repository layer - table-bound statement builders and results."""

from __future__ import annotations

from row_repo.repository.base import Repository
from row_repo.repository.config import RepositoryConfig, table_model
from row_repo.repository.insert import RepositoryInsert
from row_repo.repository.query import RepositoryQuery, key_condition
from row_repo.repository.result import RepositoryResult
from row_repo.repository.update import RepositoryUpdate

__all__ = [
    "Repository",
    "RepositoryConfig",
    "RepositoryInsert",
    "RepositoryQuery",
    "RepositoryResult",
    "RepositoryUpdate",
    "key_condition",
    "table_model",
]
